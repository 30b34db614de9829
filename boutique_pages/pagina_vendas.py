"""
Página: Vendas
==============

Registro de vendas (itens, formas de pagamento e parcelas A Prazo) e
exclusão com devolução ao estoque.
"""

from __future__ import annotations

from datetime import date

import pandas as pd
import streamlit as st

from services.cadastros import ClientesService, ProdutosService
from services.vendas import VendasService
from shared.datas import datas_parcelas, para_data_local
from shared.safe_utils import to_float
from shared.tipos import TIPO_A_PRAZO, TIPO_PIX, TIPOS_PAGAMENTO, VENDEDOR_OUTROS, VENDEDORES
from utils.utils import arredondar_moeda, formatar_moeda


def _rotulos_produtos(produtos: list) -> dict:
    """Rótulo único `nome • estoque • id curto` -> produto."""
    return {
        f"{p.get('name', '')} • {p.get('quantity', 0)} un • {str(p.get('id', ''))[-6:]}": p
        for p in produtos
        if isinstance(p, dict) and p.get("id")
    }


def pagina_vendas(caminho_banco: str) -> None:
    """Renderiza a página de **Vendas**."""
    st.subheader("🛒 Vendas")
    service = VendasService(caminho_banco)
    clientes_service = ClientesService(caminho_banco)

    if st.session_state.get("venda_msg_sucesso"):
        st.success(st.session_state.pop("venda_msg_sucesso"))

    rotulos = _rotulos_produtos(ProdutosService(caminho_banco).listar())
    if not rotulos:
        st.info("Cadastre produtos antes de registrar vendas.")
        return

    c1, c2, c3 = st.columns(3)
    cliente = c1.text_input("Cliente (nome)")
    vendedor = c2.selectbox("Vendedor", list(VENDEDORES), format_func=VENDEDORES.get)
    data_venda = c3.date_input("Data da venda", value=date.today())
    outro_vendedor = st.text_input("Nome do vendedor") if vendedor == VENDEDOR_OUTROS else ""

    st.markdown("#### Itens")
    itens_df = st.data_editor(
        pd.DataFrame({"produto": pd.Series(dtype="str"), "quantidade": pd.Series(dtype="int")}),
        num_rows="dynamic",
        use_container_width=True,
        column_config={
            "produto": st.column_config.SelectboxColumn("Produto", options=list(rotulos), required=True),
            "quantidade": st.column_config.NumberColumn("Qtd.", min_value=1, step=1, default=1),
        },
        key="venda_itens",
    )
    itens = [
        {
            "productId": rotulos[r["produto"]]["id"],
            "quantity": int(to_float(r["quantidade"]) or 1),
            "unitPrice": to_float(rotulos[r["produto"]].get("price")),
        }
        for _, r in itens_df.iterrows()
        if r.get("produto") in rotulos
    ]
    total = arredondar_moeda(sum(i["quantity"] * i["unitPrice"] for i in itens))
    st.write(f"Total da venda: **{formatar_moeda(total)}**")

    st.markdown("#### Pagamentos")
    tipos = sorted(TIPOS_PAGAMENTO)
    pag_df = st.data_editor(
        pd.DataFrame({"forma": [TIPO_PIX], "valor": [total]}),
        num_rows="dynamic",
        use_container_width=True,
        column_config={
            "forma": st.column_config.SelectboxColumn("Forma", options=tipos, required=True),
            "valor": st.column_config.NumberColumn("Valor", min_value=0.0, format="%.2f"),
        },
        key="venda_pagamentos",
    )
    tem_prazo = (pag_df["forma"] == TIPO_A_PRAZO).any() if not pag_df.empty else False
    if tem_prazo:
        p1, p2 = st.columns(2)
        n_parcelas = p1.number_input("Nº de parcelas (A Prazo)", min_value=1, max_value=24, step=1, value=1)
        primeiro = p2.date_input("Primeiro vencimento", value=date.today())

    if st.button("💾 Registrar venda", type="primary"):
        try:
            alvo = clientes_service.buscar_ou_criar(cliente)
            pagamentos = []
            for _, r in pag_df.iterrows():
                if r.get("forma") not in TIPOS_PAGAMENTO:
                    continue
                perna = {"type": r["forma"], "amount": to_float(r.get("valor"))}
                if r["forma"] == TIPO_A_PRAZO:
                    perna["paymentDates"] = [{"date": d} for d in datas_parcelas(primeiro, int(n_parcelas))]
                pagamentos.append(perna)
            venda = service.salvar_venda({
                "date": data_venda.isoformat(),
                "sellerId": vendedor,
                "sellerNameOverride": outro_vendedor or None,
                "customerId": alvo["id"],
                "items": itens,
                "payments": pagamentos,
            })
            st.session_state.venda_msg_sucesso = f"✅ Venda de {formatar_moeda(venda['total'])} registrada."
            st.rerun()
        except ValueError as e:
            st.warning(f"⚠️ {e}")
        except Exception as e:
            st.error(f"❌ Erro ao registrar venda: {e}")

    # --- histórico
    st.markdown("---")
    st.markdown("#### 📜 Vendas registradas")
    vendas = [v for v in service.repo.load_lista("sales") if isinstance(v, dict)]
    if not vendas:
        st.info("Nenhuma venda registrada.")
        return

    nomes = {c.get("id"): c.get("name", "") for c in clientes_service.listar() if isinstance(c, dict)}
    linhas = [
        {
            "id": v.get("id"),
            "data": para_data_local(v.get("date")),
            "cliente": nomes.get(v.get("customerId"), "Cliente não encontrado"),
            "total": formatar_moeda(v.get("total")),
            "formas": ", ".join(sorted({str(p.get("type")) for p in v.get("payments") or [] if isinstance(p, dict)})),
        }
        for v in vendas
    ]
    st.dataframe(pd.DataFrame(linhas), use_container_width=True, hide_index=True)

    excluir = st.selectbox("Excluir venda", [""] + [l["id"] for l in linhas if l["id"]])
    if excluir and st.button("🗑️ Excluir venda"):
        service.excluir_venda(excluir)
        st.session_state.venda_msg_sucesso = "✅ Venda excluída e estoque devolvido."
        st.rerun()
