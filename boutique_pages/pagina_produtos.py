"""
Página: Produtos
================

Cadastro e edição de produtos do estoque e exclusão em lote (produtos com
vendas registradas não são excluídos).
"""

from __future__ import annotations

from datetime import date

import pandas as pd
import streamlit as st

from services.cadastros import ProdutosService
from shared.datas import para_data_local
from shared.tipos import CONDICOES_PRODUTO
from utils.utils import formatar_moeda

_CATEGORIAS = ["Roupas", "Calçados", "Acessórios"]


def pagina_produtos(caminho_banco: str) -> None:
    """Renderiza a página de **Produtos**."""
    st.subheader("👗 Produtos")
    service = ProdutosService(caminho_banco)

    if st.session_state.get("prod_msg_sucesso"):
        st.success(st.session_state.pop("prod_msg_sucesso"))

    produtos = [p for p in service.listar() if isinstance(p, dict)]
    por_id = {p.get("id"): p for p in produtos}

    editar_id = st.selectbox(
        "Editar produto",
        [""] + list(por_id),
        format_func=lambda pid: "➕ Novo produto" if not pid else por_id[pid].get("name", pid),
    )
    atual = por_id.get(editar_id, {})

    with st.form("form_produto", clear_on_submit=not editar_id):
        c1, c2 = st.columns(2)
        nome = c1.text_input("Nome", value=atual.get("name", ""))
        marca = c2.text_input("Marca", value=atual.get("brand", ""))
        categoria = c1.selectbox(
            "Categoria", _CATEGORIAS,
            index=_CATEGORIAS.index(atual["category"]) if atual.get("category") in _CATEGORIAS else 0,
        )
        condicao = c2.selectbox(
            "Condição", CONDICOES_PRODUTO,
            index=CONDICOES_PRODUTO.index(atual["condition"]) if atual.get("condition") in CONDICOES_PRODUTO else 0,
        )
        tamanho = c1.text_input("Tamanho", value=atual.get("size", ""))
        cor = c2.text_input("Cor", value=atual.get("color", ""))
        preco = c1.number_input("Valor de venda", min_value=0.0, step=10.0, format="%.2f",
                                value=float(atual.get("price") or 0))
        custo = c2.number_input("Valor de compra", min_value=0.0, step=10.0, format="%.2f",
                                value=float(atual.get("purchasePrice") or 0))
        qtd = c1.number_input("Quantidade", min_value=0, step=1, value=int(atual.get("quantity") or 1))
        cadastro = c2.date_input("Data de cadastro", value=para_data_local(atual.get("createdAt")) or date.today())
        descricao = st.text_area("Descrição", value=atual.get("description", ""))
        enviar = st.form_submit_button("Salvar produto")

    if enviar:
        try:
            service.salvar_produto({
                **atual,
                "name": nome,
                "brand": marca,
                "category": categoria,
                "condition": condicao,
                "size": tamanho,
                "color": cor,
                "price": preco,
                "purchasePrice": custo,
                "quantity": qtd,
                "createdAt": cadastro,
                "description": descricao,
            })
            st.session_state.prod_msg_sucesso = f"✅ Produto '{nome}' salvo."
            st.rerun()
        except ValueError as e:
            st.warning(f"⚠️ {e}")
        except Exception as e:
            st.error(f"❌ Erro ao salvar produto: {e}")

    if not produtos:
        st.info("Nenhum produto cadastrado ainda.")
        return

    df = pd.DataFrame(produtos)
    for col in ("name", "category", "brand", "size", "color", "quantity", "price"):
        if col not in df.columns:
            df[col] = None
    df["preço"] = df["price"].map(formatar_moeda)
    st.dataframe(
        df[["name", "category", "brand", "size", "color", "quantity", "preço"]],
        use_container_width=True,
        hide_index=True,
    )

    selecionados = st.multiselect(
        "Excluir produtos", list(por_id), format_func=lambda pid: por_id[pid].get("name", pid)
    )
    if selecionados and st.button("🗑️ Excluir selecionados"):
        excluidos, bloqueados = service.excluir_produtos(selecionados)
        if bloqueados:
            nomes = ", ".join(por_id[b].get("name", b) for b in bloqueados)
            st.session_state.prod_msg_sucesso = (
                f"✅ {len(excluidos)} produto(s) excluído(s). Não excluídos por terem vendas: {nomes}."
            )
        else:
            st.session_state.prod_msg_sucesso = f"✅ {len(excluidos)} produto(s) excluído(s)."
        st.rerun()
