"""
Página: Configurações (Backup)
==============================

Exporta todas as coleções para um arquivo JSON e importa um backup,
substituindo todos os dados atuais.
"""

from __future__ import annotations

import streamlit as st

from repository.colecoes_repository import ColecoesRepository
from services.backup import exportar_backup_json, importar_backup, nome_arquivo_backup


def pagina_backup(caminho_banco: str) -> None:
    """Renderiza a página de **Backup e Restauração**."""
    st.subheader("⚙️ Backup e Restauração")
    repo = ColecoesRepository(caminho_banco)

    st.markdown("#### 📤 Exportar")
    st.download_button(
        "Baixar backup",
        data=exportar_backup_json(repo),
        file_name=nome_arquivo_backup(),
        mime="application/json",
    )

    st.markdown("#### 📥 Importar")
    st.warning(
        "Importar um backup substitui **por inteiro** cada coleção presente no arquivo. "
        "Exporte um backup dos dados atuais antes de prosseguir."
    )
    arquivo = st.file_uploader("Arquivo de backup (.json)", type=["json"])
    confirmar = st.checkbox("Entendo que os dados atuais serão substituídos")

    if st.button("Importar", disabled=arquivo is None or not confirmar):
        try:
            nomes = importar_backup(repo, arquivo.getvalue())
            st.success(f"✅ Dados importados com sucesso: {', '.join(nomes)}")
        except ValueError as e:
            st.error(f"❌ Falha na importação. Verifique se o arquivo de backup é válido. Erro: {e}")
