# shared/ids.py
"""
Módulo IDs (Shared)
===================

Geração de IDs de registros e sanitização de textos de formulário.

Funcionalidades principais
--------------------------
- `gerar_id(prefixo)`: IDs únicos no formato `<prefixo>-<hex>` usados por
  vendas, recebimentos (`rec-`), salários (`sal-`), trocas etc.
- `sanitize(x)`: trim, normalização Unicode e remoção de caracteres de
  controle, aceitando qualquer tipo (None -> '').
"""

from __future__ import annotations

import re
import unicodedata
import uuid
from typing import Any

__all__ = ["gerar_id", "sanitize"]

_CTRL_RE = re.compile(r"[\x00-\x1F\x7F]")
_PREFIXO_RE = re.compile(r"^[a-z0-9_]{1,16}$")


def sanitize(x: Any) -> str:
    """Converte para string segura (None -> ''), normaliza Unicode e remove controles."""
    if x is None:
        return ""
    s = unicodedata.normalize("NFKC", str(x))
    return _CTRL_RE.sub("", s).strip()


def gerar_id(prefixo: str = "id") -> str:
    """
    Gera um ID único `<prefixo>-<uuid4 hex>`.

    O prefixo identifica o tipo de registro (ex.: 'rec', 'sal', 'sale').
    """
    p = sanitize(prefixo).lower() or "id"
    if not _PREFIXO_RE.match(p):
        raise ValueError(f"Prefixo de ID inválido: {prefixo!r}")
    return f"{p}-{uuid.uuid4().hex}"
