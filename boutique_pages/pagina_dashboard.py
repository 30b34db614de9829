"""
Página: Dashboard
=================

Indicadores de vendas do período (receita, lucro bruto, a receber, ticket
médio, clientes ativos, itens vendidos) e tabelas de apoio.
"""

from __future__ import annotations

import streamlit as st

from repository.colecoes_repository import ColecoesRepository
from services.investidores import resumo_por_origem
from services.relatorios import (
    filtrar_por_periodo,
    indicadores_vendas,
    produtos_mais_vendidos,
    vendas_por_forma_pagamento,
    vendas_por_mes,
)
from shared.tipos import ORIGEM_APLICACAO, ORIGEM_COMPRA
from utils.utils import formatar_moeda


def pagina_dashboard(caminho_banco: str) -> None:
    """Renderiza o **Dashboard**."""
    st.subheader("📊 Dashboard")
    repo = ColecoesRepository(caminho_banco)

    c_ini, c_fim = st.columns(2)
    inicio = c_ini.date_input("De", value=None)
    fim = c_fim.date_input("Até", value=None)

    vendas = repo.load_lista("sales")
    produtos = repo.load_lista("products")
    ind = indicadores_vendas(vendas, produtos, inicio, fim)

    c1, c2, c3 = st.columns(3)
    c1.metric("Receita", formatar_moeda(ind["receita_total"]))
    c2.metric("Lucro bruto", formatar_moeda(ind["lucro_bruto"]))
    c3.metric("A receber", formatar_moeda(ind["a_receber"]))
    c4, c5, c6 = st.columns(3)
    c4.metric("Ticket médio", formatar_moeda(ind["ticket_medio"]))
    c5.metric("Clientes ativos", ind["clientes_ativos"])
    c6.metric("Itens vendidos", int(ind["itens_vendidos"]))

    filtradas = filtrar_por_periodo(vendas, inicio, fim)

    st.markdown("#### Vendas por mês")
    df_mes = vendas_por_mes(filtradas)
    if not df_mes.empty:
        st.bar_chart(df_mes.set_index("mes")["total"])

    col_a, col_b = st.columns(2)
    col_a.markdown("#### Formas de pagamento")
    col_a.dataframe(vendas_por_forma_pagamento(filtradas), use_container_width=True, hide_index=True)
    col_b.markdown("#### Mais vendidos")
    col_b.dataframe(produtos_mais_vendidos(filtradas, produtos), use_container_width=True, hide_index=True)

    st.markdown("#### Investidores no período")
    origem = resumo_por_origem(
        filtrar_por_periodo(repo.load_lista("purchases"), inicio, fim),
        filtrar_por_periodo(repo.load_lista("aplicacoes"), inicio, fim),
    )
    for chave, rotulo in ((ORIGEM_COMPRA, "Compras"), (ORIGEM_APLICACAO, "Aplicações")):
        r = origem[chave]
        st.write(
            f"**{rotulo}**: investido {formatar_moeda(r.total_investido)} • "
            f"devolvido {formatar_moeda(r.total_recebido)} • pendente {formatar_moeda(r.total_pendente)}"
        )
