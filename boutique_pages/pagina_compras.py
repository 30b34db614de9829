"""
Página: Compras e Aplicações
============================

Registro de compras de estoque e de aplicações na loja, indicando quem
pagou cada parte (caixa da loja ou investidor).
"""

from __future__ import annotations

from datetime import date

import pandas as pd
import streamlit as st

from services.compras import ComprasService
from shared.datas import para_data_local
from shared.safe_utils import to_float
from shared.tipos import (
    CONDICOES_PRODUTO,
    FONTE_CAIXA_LOJA,
    FONTE_OUTROS,
    FONTES_PAGAMENTO,
    ORIGEM_APLICACAO,
    ORIGEM_COMPRA,
    TIPO_PIX,
    TIPOS_PAGAMENTO,
)
from utils.utils import arredondar_moeda, formatar_moeda

_ROTULO_ORIGEM = {ORIGEM_COMPRA: "Compra", ORIGEM_APLICACAO: "Aplicação"}


def _itens(origem: str) -> tuple:
    """Editor de itens; devolve (itens, total)."""
    if origem == ORIGEM_COMPRA:
        df = st.data_editor(
            pd.DataFrame({
                "descricao": pd.Series(dtype="str"),
                "categoria": pd.Series(dtype="str"),
                "condicao": pd.Series(dtype="str"),
                "valor": pd.Series(dtype="float"),
            }),
            num_rows="dynamic",
            use_container_width=True,
            column_config={
                "categoria": st.column_config.SelectboxColumn(
                    "Categoria", options=["Roupas", "Calçados", "Acessórios"], default="Roupas"
                ),
                "condicao": st.column_config.SelectboxColumn("Condição", options=list(CONDICOES_PRODUTO), default="Novo"),
                "valor": st.column_config.NumberColumn("Valor", min_value=0.0, format="%.2f"),
            },
            key="compra_itens",
        )
        itens = [
            {
                "id": f"item-{i}",
                "description": str(r.get("descricao") or ""),
                "category": r.get("categoria") or "Roupas",
                "condition": r.get("condicao") or "Novo",
                "purchaseValue": to_float(r.get("valor")),
            }
            for i, (_, r) in enumerate(df.iterrows())
            if r.get("descricao") or to_float(r.get("valor"))
        ]
        return itens, arredondar_moeda(sum(i["purchaseValue"] for i in itens))

    df = st.data_editor(
        pd.DataFrame({"descricao": pd.Series(dtype="str"), "valor": pd.Series(dtype="float")}),
        num_rows="dynamic",
        use_container_width=True,
        column_config={"valor": st.column_config.NumberColumn("Valor", min_value=0.0, format="%.2f")},
        key="aplicacao_itens",
    )
    itens = [
        {"id": f"item-{i}", "description": str(r.get("descricao") or ""), "value": to_float(r.get("valor"))}
        for i, (_, r) in enumerate(df.iterrows())
        if r.get("descricao") or to_float(r.get("valor"))
    ]
    return itens, arredondar_moeda(sum(i["value"] for i in itens))


def pagina_compras(caminho_banco: str) -> None:
    """Renderiza a página de **Compras e Aplicações**."""
    st.subheader("📦 Compras e Aplicações")
    service = ComprasService(caminho_banco)

    if st.session_state.get("compra_msg_sucesso"):
        st.success(st.session_state.pop("compra_msg_sucesso"))

    origem = st.radio("Registro", list(_ROTULO_ORIGEM), format_func=_ROTULO_ORIGEM.get, horizontal=True)

    c1, c2 = st.columns(2)
    nome = c1.text_input("Coleção" if origem == ORIGEM_COMPRA else "Nome da aplicação")
    data_reg = c2.date_input("Data", value=date.today())

    if origem == ORIGEM_COMPRA:
        tipo = c1.radio("Tipo", ["detalhado", "lote"], horizontal=True)
        detalhado = tipo == "detalhado"
    else:
        tipo = c1.radio("Tipo", ["detalhada", "resumida"], horizontal=True)
        detalhado = tipo == "detalhada"

    registro = {"date": data_reg.isoformat()}
    if origem == ORIGEM_COMPRA:
        registro.update({"collectionName": nome, "purchaseType": tipo})
    else:
        registro.update({"name": nome, "type": tipo})

    if detalhado:
        registro["items"], total = _itens(origem)
    else:
        registro["items"] = []
        total = c2.number_input("Valor total", min_value=0.0, step=50.0, format="%.2f")
        registro["totalValue"] = total
        if origem == ORIGEM_COMPRA:
            registro["lotInfo"] = {"quantity": int(c2.number_input("Quantidade de peças", min_value=0, step=1))}
        else:
            registro["summaryDescription"] = st.text_input("Descrição")
    st.write(f"Total: **{formatar_moeda(total)}**")

    st.markdown("#### Quem pagou")
    pag_df = st.data_editor(
        pd.DataFrame({"fonte": [FONTE_CAIXA_LOJA], "nome_outros": [""], "forma": [TIPO_PIX], "valor": [total]}),
        num_rows="dynamic",
        use_container_width=True,
        column_config={
            "fonte": st.column_config.SelectboxColumn("Fonte", options=sorted(FONTES_PAGAMENTO), required=True),
            "nome_outros": st.column_config.TextColumn("Nome (para 'Outros')"),
            "forma": st.column_config.SelectboxColumn("Forma", options=sorted(TIPOS_PAGAMENTO)),
            "valor": st.column_config.NumberColumn("Valor", min_value=0.0, format="%.2f"),
        },
        key=f"pagamentos_{origem}",
    )

    if st.button("💾 Salvar", type="primary"):
        registro["payments"] = [
            {
                "source": r.get("fonte"),
                "otherSourceName": r.get("nome_outros") if r.get("fonte") == FONTE_OUTROS else None,
                "paymentMethod": r.get("forma") or TIPO_PIX,
                "amount": to_float(r.get("valor")),
            }
            for _, r in pag_df.iterrows()
            if r.get("fonte")
        ]
        try:
            salvo = service.salvar(origem, registro)
            st.session_state.compra_msg_sucesso = (
                f"✅ {_ROTULO_ORIGEM[origem]} de {formatar_moeda(salvo['totalValue'])} salva."
            )
            st.rerun()
        except ValueError as e:
            st.warning(f"⚠️ {e}")

    # --- lista
    st.markdown("---")
    registros = [r for r in service.listar(origem) if isinstance(r, dict)]
    if not registros:
        st.info("Nenhum registro ainda.")
        return

    campo_nome = "collectionName" if origem == ORIGEM_COMPRA else "name"
    linhas = [
        {
            "id": r.get("id"),
            "data": para_data_local(r.get("date")),
            "nome": r.get(campo_nome, ""),
            "total": formatar_moeda(r.get("totalValue")),
            "fontes": ", ".join(sorted({str(p.get("source")) for p in r.get("payments") or [] if isinstance(p, dict)})),
        }
        for r in registros
    ]
    st.dataframe(pd.DataFrame(linhas), use_container_width=True, hide_index=True)

    excluir = st.selectbox("Excluir", [""] + [l["id"] for l in linhas if l["id"]])
    if excluir and st.button("🗑️ Excluir"):
        service.excluir(origem, excluir)
        st.session_state.compra_msg_sucesso = "✅ Registro excluído."
        st.rerun()
