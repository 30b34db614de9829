# services/estoque.py
"""
Ajuste de estoque por venda.

Ao salvar uma venda (nova ou editada) o estoque recebe o **delta líquido**:
devolve as quantidades da versão anterior e retira as da nova, num único
passo. Produtos sem alteração continuam sendo os mesmos objetos; itens cujo
produto não existe mais são ignorados.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Mapping, Optional

from shared.safe_utils import as_lista, to_float

logger = logging.getLogger(__name__)

__all__ = ["delta_estoque", "aplicar_delta_estoque_venda", "devolver_estoque_venda"]


def _acumular(delta: Dict[str, float], venda: Optional[Mapping[str, Any]], sinal: int) -> None:
    if not isinstance(venda, Mapping):
        return
    for item in as_lista(venda.get("items")):
        if not isinstance(item, Mapping) or item.get("productId") is None:
            continue
        pid = str(item["productId"])
        delta[pid] = delta.get(pid, 0) + sinal * to_float(item.get("quantity"))


def delta_estoque(venda_anterior: Optional[Mapping[str, Any]], venda_nova: Optional[Mapping[str, Any]]) -> Dict[str, float]:
    """productId -> variação de estoque (+ anterior, - nova)."""
    delta: Dict[str, float] = {}
    _acumular(delta, venda_anterior, +1)
    _acumular(delta, venda_nova, -1)
    return delta


def _aplicar(produtos: List[Any], delta: Dict[str, float]) -> List[Any]:
    if not delta:
        return list(as_lista(produtos))
    vistos = set()
    novos: List[Any] = []
    for p in as_lista(produtos):
        pid = str(p.get("id")) if isinstance(p, Mapping) else None
        if pid is not None and pid in delta and delta[pid] != 0:
            qtd = to_float(p.get("quantity")) + delta[pid]
            # mantém inteiro quando a quantidade é inteira
            novos.append({**p, "quantity": int(qtd) if float(qtd).is_integer() else qtd})
            vistos.add(pid)
        else:
            novos.append(p)

    faltando = [pid for pid, d in delta.items() if d != 0 and pid not in vistos]
    if faltando:
        logger.debug("Produtos inexistentes ignorados no ajuste de estoque: %s", faltando)
    return novos


def aplicar_delta_estoque_venda(
    produtos: List[Any],
    venda_anterior: Optional[Mapping[str, Any]],
    venda_nova: Optional[Mapping[str, Any]],
) -> List[Any]:
    """
    Nova lista de produtos com o estoque ajustado pela venda.

    Args:
        produtos: coleção de produtos.
        venda_anterior: versão já gravada da venda (None se é venda nova).
        venda_nova: versão sendo gravada (None equivale a excluir a venda).
    """
    return _aplicar(produtos, delta_estoque(venda_anterior, venda_nova))


def devolver_estoque_venda(produtos: List[Any], venda: Mapping[str, Any]) -> List[Any]:
    """Devolve ao estoque todas as quantidades de uma venda excluída."""
    return aplicar_delta_estoque_venda(produtos, venda, None)
