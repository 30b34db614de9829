"""
Pacote repository
=================

Acesso ao armazenamento do Boutique Manager.

Todas as coleções (produtos, clientes, vendas, trocas, compras, aplicações,
salários, saldos anteriores e pedidos específicos) ficam numa única tabela
chave-valor do SQLite, uma linha por coleção com o JSON completo.

Repositórios
------------
- ColecoesRepository ... leitura/gravação das coleções (`load`/`save`)
"""

from repository.colecoes_repository import (
    CHAVES_COLECOES,
    ColecoesRepository,
    excluir_registro,
    ordenar_por_data_desc,
    salvar_registro,
)

__all__ = [
    "CHAVES_COLECOES",
    "ColecoesRepository",
    "excluir_registro",
    "ordenar_por_data_desc",
    "salvar_registro",
]
