"""
Página: Clientes
================

Cadastro de clientes e pedidos específicos (peças que a cliente pediu para a
loja buscar).
"""

from __future__ import annotations

from datetime import date

import pandas as pd
import streamlit as st

from services.cadastros import ClientesService, PedidosService
from shared.tipos import ORIGEM_CLIENTE_OUTROS, ORIGENS_CLIENTE, STATUS_CLIENTE, STATUS_PEDIDO


def _form_cliente(service: ClientesService, atual: dict) -> None:
    with st.form("form_cliente", clear_on_submit=not atual):
        c1, c2 = st.columns(2)
        nome = c1.text_input("Nome", value=atual.get("name", ""))
        telefone = c2.text_input("Telefone", value=atual.get("phone", ""))
        status = c1.selectbox(
            "Status", STATUS_CLIENTE,
            index=STATUS_CLIENTE.index(atual["status"]) if atual.get("status") in STATUS_CLIENTE else 0,
        )
        origem = c2.selectbox(
            "Origem", ORIGENS_CLIENTE,
            index=ORIGENS_CLIENTE.index(atual["source"]) if atual.get("source") in ORIGENS_CLIENTE else 2,
        )
        outra = c1.text_input("Qual origem? (para 'Outros')", value=atual.get("sourceOther", ""))
        indicador = c2.text_input("Indicada por (para 'Indicação')", value=atual.get("sourceIndicatorName", ""))
        enviar = st.form_submit_button("Salvar cliente")

    if enviar:
        try:
            service.salvar_cliente({
                **atual,
                "name": nome,
                "phone": telefone,
                "status": status,
                "source": origem,
                "sourceOther": outra if origem == ORIGEM_CLIENTE_OUTROS else None,
                "sourceIndicatorName": indicador,
            })
            st.session_state.cli_msg_sucesso = f"✅ Cliente '{nome}' salvo."
            st.rerun()
        except ValueError as e:
            st.warning(f"⚠️ {e}")


def _secao_pedidos(caminho_banco: str, clientes_service: ClientesService, nomes: dict) -> None:
    st.markdown("#### 🛍️ Pedidos específicos")
    service = PedidosService(caminho_banco)

    with st.form("form_pedido", clear_on_submit=True):
        c1, c2 = st.columns(2)
        cliente = c1.text_input("Cliente (nome)")
        produto = c2.text_input("Produto")
        tamanho = c1.text_input("Tamanho")
        cor = c2.text_input("Cor")
        tem_evento = c1.checkbox("Tem data de evento")
        evento = c2.date_input("Data do evento", value=date.today())
        enviar = st.form_submit_button("Registrar pedido")

    if enviar:
        try:
            alvo = clientes_service.buscar_ou_criar(cliente)
            service.salvar_pedido({
                "customerId": alvo["id"],
                "product": produto,
                "size": tamanho,
                "color": cor,
                "eventDate": evento.isoformat() if tem_evento else None,
            })
            st.session_state.cli_msg_sucesso = "✅ Pedido registrado."
            st.rerun()
        except ValueError as e:
            st.warning(f"⚠️ {e}")

    pedidos = [p for p in service.listar() if isinstance(p, dict)]
    if not pedidos:
        st.info("Nenhum pedido específico.")
        return

    df = pd.DataFrame(pedidos)
    df["cliente"] = df["customerId"].map(lambda cid: nomes.get(cid, "Cliente não encontrado"))
    for col in ("product", "size", "color", "eventDate", "status"):
        if col not in df.columns:
            df[col] = None
    st.dataframe(df[["cliente", "product", "size", "color", "eventDate", "status"]],
                 use_container_width=True, hide_index=True)

    por_id = {p["id"]: p for p in pedidos if p.get("id")}
    c1, c2, c3 = st.columns([3, 2, 1])
    escolhido = c1.selectbox(
        "Pedido", list(por_id),
        format_func=lambda pid: f"{nomes.get(por_id[pid].get('customerId'), '?')} • {por_id[pid].get('product', '')}",
    )
    novo_status = c2.selectbox("Status", STATUS_PEDIDO)
    if c3.button("Atualizar"):
        service.atualizar_status(escolhido, novo_status)
        st.session_state.cli_msg_sucesso = "✅ Status do pedido atualizado."
        st.rerun()
    if st.button("🗑️ Excluir pedido"):
        service.excluir_pedido(escolhido)
        st.session_state.cli_msg_sucesso = "✅ Pedido excluído."
        st.rerun()


def pagina_clientes(caminho_banco: str) -> None:
    """Renderiza a página de **Clientes** (cadastro + pedidos específicos)."""
    st.subheader("👥 Clientes")
    service = ClientesService(caminho_banco)

    if st.session_state.get("cli_msg_sucesso"):
        st.success(st.session_state.pop("cli_msg_sucesso"))

    clientes = [c for c in service.listar() if isinstance(c, dict)]
    por_id = {c.get("id"): c for c in clientes}
    nomes = {cid: c.get("name", "") for cid, c in por_id.items()}

    editar_id = st.selectbox(
        "Editar cliente", [""] + list(por_id),
        format_func=lambda cid: "➕ Novo cliente" if not cid else nomes.get(cid, cid),
    )
    _form_cliente(service, por_id.get(editar_id, {}))

    if clientes:
        df = pd.DataFrame(clientes)
        for col in ("name", "phone", "status", "source"):
            if col not in df.columns:
                df[col] = None
        st.dataframe(df[["name", "phone", "status", "source"]], use_container_width=True, hide_index=True)

        if editar_id and st.button("🗑️ Excluir cliente"):
            try:
                service.excluir_cliente(editar_id)
                st.session_state.cli_msg_sucesso = "✅ Cliente excluído."
                st.rerun()
            except ValueError as e:
                st.warning(f"⚠️ {e}")
    else:
        st.info("Nenhum cliente cadastrado ainda.")

    st.markdown("---")
    _secao_pedidos(caminho_banco, service, nomes)
