"""
Pacote utils
============

Reexporta utilitários comuns do Boutique Manager para facilitar imports.
"""

from .utils import (
    arredondar_moeda,
    caminho_banco_padrao,
    formatar_moeda,
    limpar_valor_formatado,
    resolve_db_path,
)

__all__ = [
    "arredondar_moeda",
    "caminho_banco_padrao",
    "formatar_moeda",
    "limpar_valor_formatado",
    "resolve_db_path",
]
