"""
Página: Trocas
==============

Peças recebidas de clientes em troca de vale ou dinheiro; baixa e validade
dos vales.
"""

from __future__ import annotations

from datetime import date

import pandas as pd
import streamlit as st

from services.cadastros import ClientesService
from services.trocas import TrocasService, vale_expirado
from shared.datas import para_data_local
from shared.safe_utils import to_float
from shared.tipos import STATUS_VALE, TROCA_DINHEIRO, TROCA_VALE
from utils.utils import formatar_moeda


def pagina_trocas(caminho_banco: str) -> None:
    """Renderiza a página de **Trocas**."""
    st.subheader("🔄 Trocas")
    service = TrocasService(caminho_banco)
    clientes_service = ClientesService(caminho_banco)

    if st.session_state.get("troca_msg_sucesso"):
        st.success(st.session_state.pop("troca_msg_sucesso"))

    c1, c2, c3 = st.columns(3)
    cliente = c1.text_input("Cliente (nome)")
    data_troca = c2.date_input("Data da troca", value=date.today())
    metodo = c3.radio("Devolução em", [TROCA_VALE, TROCA_DINHEIRO], horizontal=True)
    em_lote = st.toggle("Troca por lote")

    troca = {"date": data_troca.isoformat(), "paymentMethod": metodo, "isBulk": em_lote}
    if em_lote:
        l1, l2 = st.columns(2)
        troca["bulkQuantity"] = l1.number_input("Quantidade de peças", min_value=0, step=1)
        troca["totalValue"] = l2.number_input("Valor total", min_value=0.0, step=10.0, format="%.2f")
    else:
        itens_df = st.data_editor(
            pd.DataFrame({"descricao": pd.Series(dtype="str"), "valor": pd.Series(dtype="float")}),
            num_rows="dynamic",
            use_container_width=True,
            column_config={
                "descricao": st.column_config.TextColumn("Descrição"),
                "valor": st.column_config.NumberColumn("Valor", min_value=0.0, format="%.2f"),
            },
            key="troca_itens",
        )
        troca["items"] = [
            {"id": f"item-{i}", "description": str(r.get("descricao") or ""), "purchaseValue": to_float(r.get("valor"))}
            for i, (_, r) in enumerate(itens_df.iterrows())
            if r.get("descricao") or to_float(r.get("valor"))
        ]

    if st.button("💾 Registrar troca", type="primary"):
        try:
            troca["customerId"] = clientes_service.buscar_ou_criar(cliente)["id"]
            nova = service.salvar_troca(troca)
            st.session_state.troca_msg_sucesso = f"✅ Troca de {formatar_moeda(nova['totalValue'])} registrada."
            st.rerun()
        except ValueError as e:
            st.warning(f"⚠️ {e}")

    # --- lista
    st.markdown("---")
    trocas = [t for t in service.repo.load_lista("exchanges") if isinstance(t, dict)]
    if not trocas:
        st.info("Nenhuma troca registrada.")
        return

    nomes = {c.get("id"): c.get("name", "") for c in clientes_service.listar() if isinstance(c, dict)}
    linhas = [
        {
            "id": t.get("id"),
            "data": para_data_local(t.get("date")),
            "cliente": nomes.get(t.get("customerId"), "Cliente não encontrado"),
            "forma": t.get("paymentMethod"),
            "valor": formatar_moeda(t.get("totalValue")),
            "status": t.get("status", ""),
            "validade": para_data_local(t.get("valeExpiresAt")),
            "vencido": "⚠️" if vale_expirado(t) else "",
        }
        for t in trocas
    ]
    st.dataframe(pd.DataFrame(linhas), use_container_width=True, hide_index=True)

    vales = [l for l in linhas if l["forma"] == TROCA_VALE and l["id"]]
    if vales:
        v1, v2, v3 = st.columns([3, 2, 1])
        alvo = v1.selectbox("Vale", [l["id"] for l in vales],
                            format_func=lambda tid: next(f"{l['cliente']} • {l['valor']}" for l in vales if l["id"] == tid))
        status = v2.selectbox("Status do vale", sorted(STATUS_VALE))
        if v3.button("Atualizar"):
            service.atualizar_status(alvo, status)
            st.session_state.troca_msg_sucesso = "✅ Status do vale atualizado."
            st.rerun()

    excluir = st.selectbox("Excluir troca", [""] + [l["id"] for l in linhas if l["id"]])
    if excluir and st.button("🗑️ Excluir troca"):
        service.excluir_troca(excluir)
        st.session_state.troca_msg_sucesso = "✅ Troca excluída."
        st.rerun()
