"""
Página: A Prazo
===============

Parcelas de vendas a prazo agrupadas por cliente (com filtro de mês de
vencimento), quadro de atrasos por faixa e baixa/reabertura de parcelas.
"""

from __future__ import annotations

import pandas as pd
import streamlit as st

from repository.colecoes_repository import ColecoesRepository
from services.a_prazo import agrupar_parcelas_por_cliente, calcular_atrasos, meses_com_parcelas
from services.vendas import VendasService
from shared.tipos import FAIXAS_ATRASO, STATUS_PAGO, STATUS_PENDENTE
from utils.utils import formatar_moeda


def pagina_a_prazo(caminho_banco: str) -> None:
    """Renderiza a página de **Vendas A Prazo**."""
    st.subheader("🗓️ A Prazo")
    repo = ColecoesRepository(caminho_banco)
    vendas_service = VendasService(repo)

    vendas = repo.load_lista("sales")
    clientes = repo.load_lista("customers")

    # --- atrasos
    atrasos = calcular_atrasos(vendas, clientes)
    cols = st.columns(len(FAIXAS_ATRASO))
    for col, faixa in zip(cols, FAIXAS_ATRASO):
        itens = atrasos[faixa]
        col.metric(f"{faixa} dias", len(itens), formatar_moeda(sum(a.valor for a in itens)), delta_color="off")
        for a in itens:
            col.caption(f"{a.customer_name}: {formatar_moeda(a.valor)} ({a.dias} dias)")

    st.markdown("---")

    # --- parcelas por cliente
    meses = meses_com_parcelas(vendas)
    mes = st.selectbox("Mês de vencimento", ["Todos"] + meses)
    grupos = agrupar_parcelas_por_cliente(vendas, clientes, None if mes == "Todos" else mes)

    if not grupos:
        st.info("Nenhuma parcela encontrada.")
        return

    for grupo in sorted(grupos.values(), key=lambda g: g.customer_name.lower()):
        with st.expander(f"{grupo.customer_name} • devendo {formatar_moeda(grupo.total_devido)}"):
            df = pd.DataFrame(
                [
                    {
                        "Vencimento": p.data,
                        "Valor": formatar_moeda(p.valor),
                        "Status": p.status,
                        "Pago em": p.payment_date or "",
                    }
                    for p in grupo.parcelas
                ]
            )
            st.dataframe(df, use_container_width=True, hide_index=True)

            for p in grupo.parcelas:
                novo = STATUS_PENDENTE if p.status == STATUS_PAGO else STATUS_PAGO
                rotulo = f"{p.data} • {formatar_moeda(p.valor)} → marcar {novo}"
                chave = f"parc_{p.sale_id}_{p.payment_id}_{p.indice}"
                if st.button(rotulo, key=chave):
                    try:
                        vendas_service.atualizar_status_parcela(p.sale_id, p.payment_id, p.indice, novo)
                        st.rerun()
                    except ValueError as e:
                        st.warning(f"⚠️ {e}")
