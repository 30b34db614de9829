"""
Boutique Manager - Main App
===========================

Ponto de entrada do aplicativo Streamlit do Boutique Manager.

Executar com:
    streamlit run main.py
"""

from __future__ import annotations

import importlib
import logging

import streamlit as st

from repository.colecoes_repository import ColecoesRepository
from utils.utils import caminho_banco_padrao

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger("boutique_manager")


# ======================================================================================
# Configuração inicial da página
# ======================================================================================
st.set_page_config(page_title="Boutique Manager", layout="wide")

# Caminho do banco de dados ($BOUTIQUE_DB_PATH ou data/boutique_data.db)
caminho_banco = caminho_banco_padrao()

# Infra mínima de BD (idempotente)
try:
    ColecoesRepository(caminho_banco)
except Exception as e:
    logger.exception("Falha ao preparar o banco %s", caminho_banco)
    st.error(f"❌ Não foi possível abrir o banco de dados: {e}")
    st.stop()


# ======================================================================================
# Estado de sessão
# ======================================================================================
if "pagina_atual" not in st.session_state:
    st.session_state.pagina_atual = "📊 Dashboard"


# ======================================================================================
# Roteamento
# ======================================================================================
ROTAS = {
    "📊 Dashboard": ("boutique_pages.pagina_dashboard", "pagina_dashboard"),
    "🛒 Vendas": ("boutique_pages.pagina_vendas", "pagina_vendas"),
    "👗 Produtos": ("boutique_pages.pagina_produtos", "pagina_produtos"),
    "👥 Clientes": ("boutique_pages.pagina_clientes", "pagina_clientes"),
    "🔄 Trocas": ("boutique_pages.pagina_trocas", "pagina_trocas"),
    "📦 Compras": ("boutique_pages.pagina_compras", "pagina_compras"),
    "💵 Caixa": ("boutique_pages.pagina_caixa", "pagina_caixa"),
    "🗓️ A Prazo": ("boutique_pages.pagina_a_prazo", "pagina_a_prazo"),
    "🤝 Investidores": ("boutique_pages.pagina_investidores", "pagina_investidores"),
    "⚙️ Configurações": ("boutique_pages.pagina_backup", "pagina_backup"),
}


def _call_page(module_path: str, fn_name: str) -> None:
    """Importa o módulo da página e chama `fn_name(caminho_banco)`."""
    try:
        mod = importlib.import_module(module_path)
    except Exception as e:
        st.error(f"Falha ao importar módulo '{module_path}': {e}")
        return

    fn = getattr(mod, fn_name, None)
    if not callable(fn):
        st.warning(f"O módulo '{module_path}' não possui a função '{fn_name}'.")
        return

    try:
        fn(caminho_banco)
    except Exception as e:
        logger.exception("Erro na página %s", module_path)
        st.error(f"Erro ao executar {module_path}.{fn_name}: {e}")


# ======================================================================================
# Sidebar: navegação
# ======================================================================================
st.sidebar.markdown("## 🧭 Menu de Navegação")
for rotulo in ROTAS:
    if st.sidebar.button(rotulo, use_container_width=True):
        st.session_state.pagina_atual = rotulo
        st.rerun()


# ======================================================================================
# Título principal + página
# ======================================================================================
pagina = st.session_state.get("pagina_atual", "📊 Dashboard")
st.title(pagina)

if pagina in ROTAS:
    _call_page(*ROTAS[pagina])
else:
    st.warning("Página não encontrada.")
