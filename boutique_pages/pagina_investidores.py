"""
Página: Investidores
====================

Resumo do que foi investido por terceiros em compras/aplicações, quanto já
foi devolvido e o pendente; registro de novas devoluções.
"""

from __future__ import annotations

from datetime import date

import streamlit as st

from repository.colecoes_repository import ColecoesRepository
from services.compras import ComprasService
from services.investidores import (
    listar_pagamentos_investidores,
    opcoes_recebimento,
    resumir_investidores,
    rotulo_pagamento,
)
from services.relatorios import investidores_dataframe
from utils.utils import formatar_moeda


def pagina_investidores(caminho_banco: str) -> None:
    """Renderiza a página de **Investidores**."""
    st.subheader("🤝 Investidores")
    repo = ColecoesRepository(caminho_banco)
    service = ComprasService(repo)

    if st.session_state.get("inv_msg_sucesso"):
        st.success(st.session_state.pop("inv_msg_sucesso"))

    pagamentos = listar_pagamentos_investidores(repo.load_lista("purchases"), repo.load_lista("aplicacoes"))
    resumo = resumir_investidores(pagamentos)

    c1, c2, c3 = st.columns(3)
    c1.metric("Investido", formatar_moeda(resumo.total_investido))
    c2.metric("Devolvido", formatar_moeda(resumo.total_recebido))
    c3.metric("Pendente", formatar_moeda(resumo.total_pendente))

    st.dataframe(investidores_dataframe(pagamentos), use_container_width=True, hide_index=True)

    opcoes = opcoes_recebimento(pagamentos)
    if not opcoes:
        st.info("Nenhum valor pendente com investidores.")
        return

    st.markdown("#### 💸 Registrar devolução")
    escolha = st.selectbox("Pagamento", list(opcoes), format_func=lambda k: rotulo_pagamento(opcoes[k]))
    alvo = opcoes[escolha]

    with st.form("form_devolucao", clear_on_submit=True):
        valor = st.number_input("Valor", min_value=0.0, step=10.0, format="%.2f")
        data_rec = st.date_input("Data", value=date.today())
        enviar = st.form_submit_button("Registrar")

    if enviar:
        try:
            service.registrar_recebimento(
                alvo.origem,
                alvo.owner_id,
                alvo.payment_id,
                {"amount": valor, "date": data_rec.isoformat()},
            )
            st.session_state.inv_msg_sucesso = f"✅ Devolução de {formatar_moeda(valor)} registrada."
            st.rerun()
        except ValueError as e:
            st.warning(f"⚠️ {e}")
