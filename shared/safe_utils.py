# shared/safe_utils.py
"""
Helpers seguros para leitura de registros persistidos.

Os registros (vendas, compras, aplicações...) chegam do armazenamento como
dicts JSON e podem ter campos ausentes ou com tipos trocados. Tudo que é
agregado passa por aqui para nunca levantar no meio de uma derivação.

O que tem aqui:
- as_lista(x): qualquer coisa que deveria ser lista -> list ([] se não for).
- to_float(x): número seguro (None/str inválida -> 0.0).
- campo_str(registro, chave): texto seguro de um dict (None -> "").
"""

from __future__ import annotations

import math
from typing import Any, List, Mapping

__all__ = [
    "as_lista",
    "to_float",
    "campo_str",
]


def as_lista(x: Any) -> List[Any]:
    """Coerção defensiva: list/tuple -> list; ausente ou outro tipo -> []."""
    if isinstance(x, list):
        return x
    if isinstance(x, tuple):
        return list(x)
    return []


def to_float(v: Any) -> float:
    """Converte para float; None, bool, NaN/inf e textos inválidos viram 0.0."""
    if v is None or isinstance(v, bool):
        return 0.0
    try:
        f = float(v)
    except (TypeError, ValueError):
        return 0.0
    if math.isnan(f) or math.isinf(f):
        return 0.0
    return f


def campo_str(registro: Any, chave: str) -> str:
    """Lê `registro[chave]` como texto; registro que não é dict ou valor None -> ''."""
    if not isinstance(registro, Mapping):
        return ""
    v = registro.get(chave)
    return "" if v is None else str(v)

