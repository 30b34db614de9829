# services/a_prazo.py
"""
A Prazo (parcelas de vendas a receber)
======================================

Derivações puras sobre as pernas `A Prazo` das vendas:

- `agrupar_parcelas_por_cliente`: parcelas por cliente com o total devido
  (somente parcelas `Pendente`), com filtro opcional por mês de vencimento.
- `calcular_atrasos`: parcelas pendentes vencidas há 3+ dias, em faixas
  `3-5`, `6-10`, `11-15` e `>15`.
- `alternar_status_parcela`: nova venda com a parcela marcada como `Pago`
  (carimbando a data local de hoje) ou `Pendente` (limpando a data).
- `total_a_receber` e `meses_com_parcelas`: apoio ao painel.

Regras
------
- O valor de cada parcela **não é gravado**: é sempre
  `amount / max(1, len(paymentDates))`.
- Venda com cliente inexistente é ignorada (sem erro).
- Nenhuma função altera as listas/dicts de entrada.
"""

from __future__ import annotations

import logging
from datetime import date
from typing import Any, Dict, List, Mapping, Optional

from shared.datas import dias_entre, hoje_local, hoje_local_str, mes_de, parse_local_date
from shared.safe_utils import as_lista, campo_str, to_float
from shared.tipos import (
    FAIXAS_ATRASO,
    STATUS_PAGO,
    STATUS_PARCELA,
    STATUS_PENDENTE,
    TIPO_A_PRAZO,
    AtrasoInfo,
    GrupoCliente,
    ParcelaInfo,
    ValidacaoError,
)

logger = logging.getLogger(__name__)

__all__ = [
    "valor_por_parcela",
    "pernas_a_prazo",
    "agrupar_parcelas_por_cliente",
    "calcular_atrasos",
    "faixa_atraso",
    "alternar_status_parcela",
    "total_a_receber",
    "meses_com_parcelas",
]


# ------------------------- helpers -------------------------
def valor_por_parcela(pagamento: Mapping[str, Any]) -> float:
    """Valor derivado de cada parcela: `amount / max(1, len(paymentDates))`."""
    n = len(as_lista(pagamento.get("paymentDates")))
    return to_float(pagamento.get("amount")) / max(1, n)


def pernas_a_prazo(venda: Any) -> List[Dict[str, Any]]:
    """Pernas de pagamento `A Prazo` de uma venda (tolerante a venda malformada)."""
    if not isinstance(venda, Mapping):
        return []
    return [
        p for p in as_lista(venda.get("payments"))
        if isinstance(p, Mapping) and p.get("type") == TIPO_A_PRAZO
    ]


def _indice_clientes(clientes: List[Any]) -> Dict[str, Mapping[str, Any]]:
    idx: Dict[str, Mapping[str, Any]] = {}
    for c in as_lista(clientes):
        if isinstance(c, Mapping) and c.get("id") is not None:
            idx.setdefault(str(c["id"]), c)
    return idx


def _cliente_da_venda(venda: Mapping[str, Any], clientes_idx: Dict[str, Mapping[str, Any]]) -> Optional[Mapping[str, Any]]:
    cid = venda.get("customerId")
    if cid is None:
        return None
    return clientes_idx.get(str(cid))


# ------------------------- agrupamento -------------------------
def agrupar_parcelas_por_cliente(
    vendas: List[Any],
    clientes: List[Any],
    mes: Optional[str] = None,
) -> Dict[str, GrupoCliente]:
    """
    Agrupa as parcelas A Prazo por cliente.

    Args:
        vendas: coleção de vendas.
        clientes: coleção de clientes (vendas sem cliente são ignoradas).
        mes: filtro opcional `YYYY-MM` sobre o mês de vencimento da parcela.

    Returns:
        dict customerId -> GrupoCliente; `total_devido` soma apenas as
        parcelas `Pendente`; as parcelas de cada grupo ficam em ordem
        crescente de vencimento.
    """
    clientes_idx = _indice_clientes(clientes)
    grupos: Dict[str, GrupoCliente] = {}

    for venda in as_lista(vendas):
        pernas = pernas_a_prazo(venda)
        if not pernas:
            continue
        cliente = _cliente_da_venda(venda, clientes_idx)
        if cliente is None:
            logger.debug("Venda %s sem cliente cadastrado; parcelas ignoradas", campo_str(venda, "id"))
            continue
        cid = str(cliente["id"])

        for perna in pernas:
            valor = valor_por_parcela(perna)
            for indice, parcela in enumerate(as_lista(perna.get("paymentDates"))):
                if not isinstance(parcela, Mapping):
                    continue
                venc = campo_str(parcela, "date")
                if mes and venc[:7] != mes:
                    continue

                grupo = grupos.get(cid)
                if grupo is None:
                    grupo = grupos[cid] = GrupoCliente(customer_id=cid, customer_name=campo_str(cliente, "name"))

                status = campo_str(parcela, "status")
                grupo.parcelas.append(
                    ParcelaInfo(
                        customer_id=cid,
                        customer_name=grupo.customer_name,
                        sale_id=campo_str(venda, "id"),
                        payment_id=campo_str(perna, "id"),
                        indice=indice,
                        data=venc,
                        status=status,
                        payment_date=parcela.get("paymentDate") or None,
                        valor=valor,
                    )
                )
                if status == STATUS_PENDENTE:
                    grupo.total_devido += valor

    for grupo in grupos.values():
        grupo.parcelas.sort(key=lambda p: (parse_local_date(p.data) or date.min))

    return grupos


# ------------------------- atrasos -------------------------
def faixa_atraso(dias: int) -> Optional[str]:
    """Faixa de atraso para `dias` (None quando abaixo de 3)."""
    if dias > 15:
        return ">15"
    if dias >= 11:
        return "11-15"
    if dias >= 6:
        return "6-10"
    if dias >= 3:
        return "3-5"
    return None


def calcular_atrasos(
    vendas: List[Any],
    clientes: List[Any],
    hoje: Optional[date] = None,
) -> Dict[str, List[AtrasoInfo]]:
    """
    Parcelas pendentes vencidas há pelo menos 3 dias, por faixa.

    Os dias de atraso são contados entre datas locais de calendário
    (`hoje` padrão = data local da máquina). Dentro de cada faixa a lista
    vem do mais atrasado para o menos atrasado.
    """
    ref = hoje or hoje_local()
    clientes_idx = _indice_clientes(clientes)
    faixas: Dict[str, List[AtrasoInfo]] = {f: [] for f in FAIXAS_ATRASO}

    for venda in as_lista(vendas):
        pernas = pernas_a_prazo(venda)
        if not pernas:
            continue
        cliente = _cliente_da_venda(venda, clientes_idx)
        if cliente is None:
            continue

        for perna in pernas:
            valor = valor_por_parcela(perna)
            for indice, parcela in enumerate(as_lista(perna.get("paymentDates"))):
                if not isinstance(parcela, Mapping) or parcela.get("status") != STATUS_PENDENTE:
                    continue
                venc = parse_local_date(parcela.get("date"))
                if venc is None or venc >= ref:
                    continue
                dias = dias_entre(venc, ref)
                faixa = faixa_atraso(dias)
                if faixa is None:
                    continue
                faixas[faixa].append(
                    AtrasoInfo(
                        customer_name=campo_str(cliente, "name"),
                        sale_id=campo_str(venda, "id"),
                        payment_id=campo_str(perna, "id"),
                        indice=indice,
                        data=campo_str(parcela, "date"),
                        dias=dias,
                        valor=valor,
                    )
                )

    for lista in faixas.values():
        lista.sort(key=lambda a: a.dias, reverse=True)
    return faixas


# ------------------------- mutação pura -------------------------
def alternar_status_parcela(
    venda: Dict[str, Any],
    payment_id: str,
    indice: int,
    novo_status: str,
    hoje: Optional[date] = None,
) -> Dict[str, Any]:
    """
    Devolve uma nova venda com a parcela `indice` da perna `payment_id` no `novo_status`.

    - `Pago`: carimba `paymentDate` com a data local de hoje (YYYY-MM-DD).
    - `Pendente`: remove `paymentDate`.

    Somente a perna alvo e a parcela alvo são objetos novos; todo o resto é
    compartilhado com a venda original. Perna/índice inexistentes devolvem a
    própria venda.

    Raises:
        ValidacaoError: status fora de {'Pendente', 'Pago'}.
    """
    if novo_status not in STATUS_PARCELA:
        raise ValidacaoError(f"Status de parcela inválido: {novo_status!r}")

    pagamentos = as_lista(venda.get("payments"))
    for pos, perna in enumerate(pagamentos):
        if not isinstance(perna, Mapping) or perna.get("id") != payment_id:
            continue
        parcelas = as_lista(perna.get("paymentDates"))
        if not perna.get("paymentDates") or not (0 <= int(indice) < len(parcelas)):
            break

        parcela = dict(parcelas[indice])
        parcela["status"] = novo_status
        if novo_status == STATUS_PAGO:
            parcela["paymentDate"] = hoje_local_str(hoje)
        else:
            parcela.pop("paymentDate", None)

        novas_parcelas = list(parcelas)
        novas_parcelas[indice] = parcela
        nova_perna = {**perna, "paymentDates": novas_parcelas}
        novos_pagamentos = list(pagamentos)
        novos_pagamentos[pos] = nova_perna
        logger.debug(
            "Parcela %s da perna %s (venda %s) -> %s",
            indice, payment_id, venda.get("id"), novo_status,
        )
        return {**venda, "payments": novos_pagamentos}

    logger.warning(
        "Parcela não encontrada: venda=%s perna=%s indice=%s",
        venda.get("id"), payment_id, indice,
    )
    return venda


# ------------------------- painel -------------------------
def total_a_receber(vendas: List[Any]) -> float:
    """Soma do valor de todas as parcelas `Pendente` (todas as vendas)."""
    total = 0.0
    for venda in as_lista(vendas):
        for perna in pernas_a_prazo(venda):
            parcelas = as_lista(perna.get("paymentDates"))
            if not parcelas:
                continue
            valor = valor_por_parcela(perna)
            total += valor * sum(
                1 for p in parcelas if isinstance(p, Mapping) and p.get("status") == STATUS_PENDENTE
            )
    return total


def meses_com_parcelas(vendas: List[Any]) -> List[str]:
    """Meses `YYYY-MM` com alguma parcela vencendo, em ordem crescente."""
    meses = set()
    for venda in as_lista(vendas):
        for perna in pernas_a_prazo(venda):
            for parcela in as_lista(perna.get("paymentDates")):
                if isinstance(parcela, Mapping):
                    m = mes_de(parcela.get("date"))
                    if m:
                        meses.add(m)
    return sorted(meses)
