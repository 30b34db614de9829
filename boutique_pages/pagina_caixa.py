"""
Página: Caixa
=============

Fluxo de caixa do mês selecionado: entradas, saídas, saldo final e
fechamento (o saldo final vira o saldo anterior do mês seguinte).

Também permite editar manualmente o saldo anterior e lançar/excluir
pagamentos de salário do mês.
"""

from __future__ import annotations

from datetime import date

import pandas as pd
import streamlit as st

from services.caixa import CaixaService
from shared.datas import somar_meses
from shared.tipos import BENEFICIARIO_OUTROS, BENEFICIARIOS_SALARIO
from utils.utils import formatar_moeda


def _navegar_mes(offset: int) -> None:
    st.session_state.caixa_mes = somar_meses(st.session_state.caixa_mes, offset)


def pagina_caixa(caminho_banco: str) -> None:
    """Renderiza a página de **Caixa** mensal.

    Args:
        caminho_banco (str): Caminho do arquivo SQLite.
    """
    st.subheader("💵 Caixa")
    service = CaixaService(caminho_banco)

    if st.session_state.get("caixa_msg_sucesso"):
        st.success(st.session_state.pop("caixa_msg_sucesso"))

    if "caixa_mes" not in st.session_state:
        st.session_state.caixa_mes = date.today().strftime("%Y-%m")
    mes = st.session_state.caixa_mes

    c1, c2, c3 = st.columns([1, 2, 1])
    c1.button("◀ Mês anterior", on_click=_navegar_mes, args=(-1,), use_container_width=True)
    c2.markdown(f"### 📅 {mes}")
    c3.button("Próximo mês ▶", on_click=_navegar_mes, args=(1,), use_container_width=True)

    fluxo = service.fluxo_do_mes(mes)

    # --- saldo anterior (edição manual)
    with st.expander("✏️ Saldo anterior", expanded=fluxo.entradas.saldo_anterior == 0):
        novo_saldo = st.text_input("Saldo anterior (R$)", value=f"{fluxo.entradas.saldo_anterior:.2f}")
        if st.button("Salvar saldo anterior"):
            try:
                service.definir_saldo_anterior(mes, novo_saldo)
                st.session_state.caixa_msg_sucesso = "✅ Saldo anterior atualizado."
                st.rerun()
            except ValueError as e:
                st.warning(f"⚠️ {e}")

    # --- resumo
    col_e, col_s = st.columns(2)
    with col_e:
        st.markdown("#### 📥 Entradas")
        st.write(f"Vendas à vista: **{formatar_moeda(fluxo.entradas.vendas_a_vista)}**")
        st.write(f"A Prazo recebido: **{formatar_moeda(fluxo.entradas.a_prazo_recebido)}**")
        st.write(f"Saldo anterior: **{formatar_moeda(fluxo.entradas.saldo_anterior)}**")
        st.write(f"Total: **{formatar_moeda(fluxo.entradas.total)}**")
    with col_s:
        st.markdown("#### 📤 Saídas")
        st.write(f"Compras: **{formatar_moeda(fluxo.saidas.compras)}**")
        st.write(f"Aplicações: **{formatar_moeda(fluxo.saidas.aplicacoes)}**")
        st.write(f"Trocas (dinheiro): **{formatar_moeda(fluxo.saidas.trocas)}**")
        st.write(f"Devoluções a investidores: **{formatar_moeda(fluxo.saidas.investidores)}**")
        st.write(f"Salários: **{formatar_moeda(fluxo.saidas.salarios)}**")
        st.write(f"Total: **{formatar_moeda(fluxo.saidas.total)}**")

    st.metric("Saldo final do mês", formatar_moeda(fluxo.saldo_final))

    if st.button("🔒 Fechar mês", type="primary"):
        fluxo = service.fechar_mes(mes)
        st.session_state.caixa_msg_sucesso = (
            f"✅ Mês {mes} fechado. Saldo de {formatar_moeda(fluxo.saldo_final)} "
            f"levado para {somar_meses(mes, 1)}."
        )
        st.rerun()

    # --- salários
    st.markdown("---")
    st.markdown("#### 👥 Salários do mês")
    with st.form("form_salario", clear_on_submit=True):
        beneficiario = st.selectbox("Beneficiário", sorted(BENEFICIARIOS_SALARIO))
        nome = st.text_input("Nome (para 'Outros')")
        valor = st.number_input("Valor", min_value=0.0, step=50.0, format="%.2f")
        data_pag = st.date_input("Data do pagamento", value=date.today())
        enviar = st.form_submit_button("Salvar salário")

    if enviar:
        try:
            service.salvar_pagamento_salario(
                {
                    "recipient": beneficiario,
                    "recipientName": nome if beneficiario == BENEFICIARIO_OUTROS else None,
                    "amount": valor,
                    "paymentDate": data_pag.isoformat(),
                },
                mes=mes,
            )
            st.session_state.caixa_msg_sucesso = "✅ Salário salvo."
            st.rerun()
        except ValueError as e:
            st.warning(f"⚠️ {e}")
        except Exception as e:
            st.error(f"❌ Erro ao salvar salário: {e}")

    if fluxo.salarios_do_mes:
        df = pd.DataFrame(fluxo.salarios_do_mes)
        df["valor"] = df["amount"].map(formatar_moeda)
        st.dataframe(df[["paymentDate", "recipient", "valor"]], use_container_width=True, hide_index=True)
        excluir = st.selectbox("Excluir salário", [""] + [s["id"] for s in fluxo.salarios_do_mes])
        if excluir and st.button("🗑️ Excluir"):
            service.excluir_pagamento_salario(excluir)
            st.session_state.caixa_msg_sucesso = "✅ Salário excluído."
            st.rerun()
    else:
        st.info("Nenhum salário lançado neste mês.")
