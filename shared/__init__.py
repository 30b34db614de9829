"""
Pacote Shared
=============

Peças comuns aos serviços e ao repositório do Boutique Manager.

Submódulos
----------
- db ........... conexões SQLite (`conexao`, `transacao`)
- datas ........ datas locais e chaves de mês `YYYY-MM`
- ids .......... geração de IDs e sanitização de textos
- safe_utils ... coerções defensivas (`as_lista`, `to_float`, `campo_str`)
- tipos ........ constantes de domínio, erros e linhas derivadas
"""

from shared.db import conexao, transacao
from shared.ids import gerar_id, sanitize
from shared.safe_utils import as_lista, campo_str, to_float
from shared.tipos import BackupInvalidoError, ValidacaoError

__all__ = [
    "conexao",
    "transacao",
    "gerar_id",
    "sanitize",
    "as_lista",
    "campo_str",
    "to_float",
    "BackupInvalidoError",
    "ValidacaoError",
]
