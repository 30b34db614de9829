# services/relatorios.py
"""
Relatórios (painel e relatórios por período)
============================================

Indicadores de vendas e tabelas agregadas em `pandas.DataFrame`, prontos
para `st.dataframe` / gráficos.

- `filtrar_por_periodo`: filtro inclusivo por data local do registro.
- `indicadores_vendas`: receita, lucro bruto (receita - custo dos itens),
  a receber, ticket médio, clientes ativos e itens vendidos.
- `vendas_por_mes`, `vendas_por_forma_pagamento`, `produtos_mais_vendidos`.
- `investidores_dataframe`: investido/recebido/pendente por investidor.
"""

from __future__ import annotations

from datetime import date
from typing import Any, Dict, List, Mapping, Optional

import pandas as pd

from services.a_prazo import total_a_receber
from shared.datas import mes_de, para_data_local, parse_local_date
from shared.safe_utils import as_lista, campo_str, to_float
from shared.tipos import PagamentoInvestidor

__all__ = [
    "filtrar_por_periodo",
    "indicadores_vendas",
    "vendas_por_mes",
    "vendas_por_forma_pagamento",
    "produtos_mais_vendidos",
    "investidores_dataframe",
]


def filtrar_por_periodo(
    registros: List[Any],
    inicio: Optional[Any] = None,
    fim: Optional[Any] = None,
) -> List[Any]:
    """Registros cuja data local está em [inicio, fim] (limites opcionais)."""
    d_ini: Optional[date] = parse_local_date(inicio) if inicio else None
    d_fim: Optional[date] = parse_local_date(fim) if fim else None
    if d_ini is None and d_fim is None:
        return list(as_lista(registros))

    saida = []
    for r in as_lista(registros):
        if not isinstance(r, Mapping):
            continue
        d = para_data_local(r.get("date"))
        if d is None:
            continue
        if d_ini and d < d_ini:
            continue
        if d_fim and d > d_fim:
            continue
        saida.append(r)
    return saida


def _custo_por_produto(produtos: List[Any]) -> Dict[str, float]:
    return {
        str(p.get("id")): to_float(p.get("purchasePrice"))
        for p in as_lista(produtos)
        if isinstance(p, Mapping)
    }


def indicadores_vendas(
    vendas: List[Any],
    produtos: List[Any],
    inicio: Optional[Any] = None,
    fim: Optional[Any] = None,
) -> Dict[str, float]:
    """
    Indicadores do painel para o período.

    Produto que não existe mais entra com custo 0 no lucro bruto.
    """
    filtradas = [v for v in filtrar_por_periodo(vendas, inicio, fim) if isinstance(v, Mapping)]
    custos = _custo_por_produto(produtos)

    receita = sum(to_float(v.get("total")) for v in filtradas)
    custo = 0.0
    itens = 0.0
    for v in filtradas:
        for item in as_lista(v.get("items")):
            if not isinstance(item, Mapping):
                continue
            qtd = to_float(item.get("quantity"))
            itens += qtd
            custo += custos.get(str(item.get("productId")), 0.0) * qtd

    return {
        "receita_total": receita,
        "lucro_bruto": receita - custo,
        "a_receber": total_a_receber(filtradas),
        "ticket_medio": receita / len(filtradas) if filtradas else 0.0,
        "clientes_ativos": len({campo_str(v, "customerId") for v in filtradas}),
        "itens_vendidos": itens,
    }


def vendas_por_mes(vendas: List[Any]) -> pd.DataFrame:
    """DataFrame[mes, total, quantidade] em ordem crescente de mês."""
    linhas = [
        {"mes": mes_de(v.get("date")), "total": to_float(v.get("total"))}
        for v in as_lista(vendas)
        if isinstance(v, Mapping)
    ]
    df = pd.DataFrame(linhas, columns=["mes", "total"]).dropna(subset=["mes"])
    if df.empty:
        return pd.DataFrame(columns=["mes", "total", "quantidade"])
    return (
        df.groupby("mes", as_index=False)
        .agg(total=("total", "sum"), quantidade=("total", "size"))
        .sort_values("mes")
        .reset_index(drop=True)
    )


def vendas_por_forma_pagamento(vendas: List[Any]) -> pd.DataFrame:
    """DataFrame[forma, total] somando cada perna de pagamento, maior total primeiro."""
    linhas = [
        {"forma": campo_str(p, "type"), "total": to_float(p.get("amount"))}
        for v in as_lista(vendas)
        if isinstance(v, Mapping)
        for p in as_lista(v.get("payments"))
        if isinstance(p, Mapping)
    ]
    if not linhas:
        return pd.DataFrame(columns=["forma", "total"])
    df = pd.DataFrame(linhas)
    return (
        df.groupby("forma", as_index=False)["total"].sum()
        .sort_values("total", ascending=False)
        .reset_index(drop=True)
    )


def produtos_mais_vendidos(vendas: List[Any], produtos: List[Any], limite: int = 5) -> pd.DataFrame:
    """Top `limite` produtos por quantidade: DataFrame[produto, quantidade, receita]."""
    nomes = {str(p.get("id")): campo_str(p, "name") for p in as_lista(produtos) if isinstance(p, Mapping)}
    linhas = []
    for v in as_lista(vendas):
        if not isinstance(v, Mapping):
            continue
        for item in as_lista(v.get("items")):
            if not isinstance(item, Mapping):
                continue
            pid = str(item.get("productId"))
            if pid not in nomes:
                continue
            qtd = to_float(item.get("quantity"))
            linhas.append({"produto": nomes[pid], "quantidade": qtd, "receita": qtd * to_float(item.get("unitPrice"))})
    if not linhas:
        return pd.DataFrame(columns=["produto", "quantidade", "receita"])
    df = pd.DataFrame(linhas).groupby("produto", as_index=False)[["quantidade", "receita"]].sum()
    return df.sort_values("quantidade", ascending=False, kind="stable").head(limite).reset_index(drop=True)


def investidores_dataframe(pagamentos: List[PagamentoInvestidor]) -> pd.DataFrame:
    """DataFrame[investidor, investido, recebido, pendente] ordenado por pendente."""
    colunas = ["investidor", "investido", "recebido", "pendente"]
    if not pagamentos:
        return pd.DataFrame(columns=colunas)
    df = pd.DataFrame(
        [
            {"investidor": p.investidor, "investido": p.valor_investido, "recebido": p.valor_recebido}
            for p in pagamentos
        ]
    )
    df = df.groupby("investidor", as_index=False)[["investido", "recebido"]].sum()
    df["pendente"] = df["investido"] - df["recebido"]
    return df.sort_values("pendente", ascending=False).reset_index(drop=True)[colunas]
