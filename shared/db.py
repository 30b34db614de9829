"""
Módulo DB (Shared)
==================

Conexões SQLite do Boutique Manager.

O banco guarda as coleções como documentos JSON (ver
`repository.colecoes_repository`), então aqui só existe o básico:

- `get_conn(db)`: conexão aberta com os PRAGMAs do projeto; o chamador fecha.
- `conexao(db)`: context manager de leitura que sempre fecha a conexão.
- `transacao(db)`: context manager de escrita; `BEGIN IMMEDIATE`, commit no
  fim do bloco e rollback se o bloco levantar.

PRAGMAs
-------
`journal_mode=WAL`, `busy_timeout=30000`, `synchronous=NORMAL`.
Linhas voltam como `sqlite3.Row` (acesso por nome de coluna).
"""

from __future__ import annotations

import logging
import os
import sqlite3
from contextlib import contextmanager
from typing import Any, Iterator

from utils.utils import resolve_db_path

logger = logging.getLogger(__name__)

__all__ = ["get_conn", "conexao", "transacao"]

_PRAGMAS = (
    "PRAGMA journal_mode=WAL;",
    "PRAGMA busy_timeout=30000;",
    "PRAGMA synchronous=NORMAL;",
)


def get_conn(db_path_like: Any) -> sqlite3.Connection:
    """
    Abre uma conexão SQLite configurada.

    Aceita caminho (str/PathLike) ou objeto com `db_path`, `caminho_banco`
    ou `database`. A pasta do arquivo é criada quando ainda não existe.
    """
    db_path = resolve_db_path(db_path_like)

    if db_path != ":memory:":
        pasta = os.path.dirname(os.path.abspath(db_path))
        os.makedirs(pasta, exist_ok=True)

    # commit/rollback explícitos em `transacao`
    conn = sqlite3.connect(db_path, timeout=30, isolation_level=None)
    for pragma in _PRAGMAS:
        conn.execute(pragma)
    conn.row_factory = sqlite3.Row
    return conn


@contextmanager
def conexao(db_path_like: Any) -> Iterator[sqlite3.Connection]:
    """Conexão para leitura; fechada ao sair do bloco."""
    conn = get_conn(db_path_like)
    try:
        yield conn
    finally:
        conn.close()


@contextmanager
def transacao(db_path_like: Any) -> Iterator[sqlite3.Connection]:
    """
    Bloco de escrita atômico.

    Tudo que for executado dentro do `with` é gravado junto no commit; se o
    bloco levantar, nada é gravado e a exceção segue para o chamador.
    """
    conn = get_conn(db_path_like)
    try:
        conn.execute("BEGIN IMMEDIATE;")
        try:
            yield conn
        except BaseException:
            conn.execute("ROLLBACK;")
            raise
        conn.execute("COMMIT;")
    except sqlite3.Error:
        logger.exception("Transação abortada em %s", resolve_db_path(db_path_like))
        raise
    finally:
        conn.close()
