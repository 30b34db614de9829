"""
Módulo ColecoesRepository
=========================

Armazenamento chave-valor das coleções do Boutique Manager em SQLite.

Cada coleção (produtos, clientes, vendas, trocas, compras, aplicações,
salários, saldos anteriores, pedidos específicos) é gravada inteira como um
documento JSON na tabela `colecoes`. Não há escrita parcial: `save`
sobrescreve a coleção toda (último a gravar vence).

Formato JSON
------------
- `datetime` é serializado como `YYYY-MM-DDTHH:MM:SS.mmmZ` (UTC).
- Na leitura, **somente** as chaves `date`, `createdAt` e `valeExpiresAt`
  cujo valor casa exatamente com esse padrão voltam a ser `datetime` (UTC).
- `Installment.date`, `paymentDate`, `month` etc. permanecem strings.

Helpers de lista
----------------
`salvar_registro`, `excluir_registro` e `ordenar_por_data_desc` devolvem
listas novas; registros não afetados são os mesmos objetos.
"""

from __future__ import annotations

import json
import logging
import re
from datetime import date, datetime, timezone
from typing import Any, Dict, List, Mapping, Optional

from shared.datas import instante
from shared.db import conexao, transacao
from shared.safe_utils import as_lista
from utils.utils import resolve_db_path

logger = logging.getLogger(__name__)

__all__ = [
    "CHAVES_COLECOES",
    "ColecoesRepository",
    "dumps_colecao",
    "loads_colecao",
    "salvar_registro",
    "excluir_registro",
    "ordenar_por_data_desc",
]

# Nome lógico -> chave de armazenamento
CHAVES_COLECOES: Dict[str, str] = {
    "products": "boutique-manager-products",
    "customers": "boutique-manager-customers",
    "sales": "boutique-manager-sales",
    "exchanges": "boutique-manager-exchanges",
    "purchases": "boutique-manager-purchases",
    "aplicacoes": "boutique-manager-aplicacoes",
    "salaryPayments": "boutique-manager-salary-payments",
    "saldosAnteriores": "boutique-manager-saldos-anteriores",
    "specificOrders": "boutique-manager-specific-orders",
}

_CAMPOS_REVIVER = ("date", "createdAt", "valeExpiresAt")
_ISO_MS_Z_RE = re.compile(r"^\d{4}-\d{2}-\d{2}T\d{2}:\d{2}:\d{2}\.\d{3}Z$")


# =============================
# JSON (encode / revive)
# =============================
def _iso_ms_z(dt: datetime) -> str:
    """`datetime` -> 'YYYY-MM-DDTHH:MM:SS.mmmZ' em UTC (naive = hora local)."""
    if dt.tzinfo is None:
        dt = dt.astimezone()
    dt = dt.astimezone(timezone.utc)
    return dt.strftime("%Y-%m-%dT%H:%M:%S.") + f"{dt.microsecond // 1000:03d}Z"


def _default_json(obj: Any) -> Any:
    if isinstance(obj, datetime):
        return _iso_ms_z(obj)
    if isinstance(obj, date):
        return obj.strftime("%Y-%m-%d")
    raise TypeError(f"Objeto do tipo {type(obj).__name__} não é serializável em JSON")


def _reviver(d: Dict[str, Any], *, estrito: bool = False) -> Dict[str, Any]:
    for k in _CAMPOS_REVIVER:
        v = d.get(k)
        if isinstance(v, str) and _ISO_MS_Z_RE.match(v):
            try:
                d[k] = datetime.strptime(v, "%Y-%m-%dT%H:%M:%S.%fZ").replace(tzinfo=timezone.utc)
            except ValueError:
                # casa com o padrão mas não é uma data real (ex.: 30/02): fica o texto
                if estrito:
                    raise ValueError(f"Timestamp inválido em '{k}': {v}") from None
    return d


def dumps_colecao(valor: Any, *, indent: Optional[int] = None) -> str:
    """Serializa uma coleção no formato persistido."""
    return json.dumps(valor, default=_default_json, ensure_ascii=False, indent=indent)


def loads_colecao(texto: str, *, estrito: bool = False) -> Any:
    """
    Desserializa uma coleção revivendo os timestamps conhecidos.

    Um timestamp com formato certo e data impossível é mantido como texto;
    com `estrito=True` ele levanta `ValueError`.
    """
    if estrito:
        return json.loads(texto, object_hook=lambda d: _reviver(d, estrito=True))
    return json.loads(texto, object_hook=_reviver)


# =============================
# Repositório
# =============================
class ColecoesRepository:
    """
    Repositório das coleções persistidas (tabela `colecoes`).

    Operações básicas do contrato de armazenamento:
        load(nome, default) -> valor
        save(nome, valor)   -> None
    """

    def __init__(self, db_path_like: Any):
        self.db_path: str = resolve_db_path(db_path_like)
        self.garantir_schema()

    def __repr__(self) -> str:  # pragma: no cover
        return f"<ColecoesRepository db_path={self.db_path!r}>"

    # ---------------- schema ----------------

    def garantir_schema(self) -> None:
        """Cria a tabela `colecoes` se não existir. Idempotente."""
        with transacao(self.db_path) as conn:
            conn.execute(
                """
                CREATE TABLE IF NOT EXISTS colecoes (
                    chave TEXT PRIMARY KEY,
                    conteudo TEXT NOT NULL,
                    atualizado_em TEXT
                );
                """
            )

    @staticmethod
    def _chave(nome: str) -> str:
        try:
            return CHAVES_COLECOES[nome]
        except KeyError:
            raise ValueError(f"Coleção desconhecida: {nome!r}") from None

    # ---------------- leitura ----------------

    def load_raw(self, nome: str) -> Optional[str]:
        """Texto JSON gravado para a coleção (None se nunca foi gravada)."""
        chave = self._chave(nome)
        with conexao(self.db_path) as conn:
            row = conn.execute(
                "SELECT conteudo FROM colecoes WHERE chave = ? LIMIT 1", (chave,)
            ).fetchone()
        return None if row is None else str(row["conteudo"])

    def load(self, nome: str, default: Any = None) -> Any:
        """
        Lê a coleção; devolve `default` se ausente ou se o JSON estiver corrompido.
        """
        texto = self.load_raw(nome)
        if texto is None:
            return default
        try:
            return loads_colecao(texto)
        except (json.JSONDecodeError, ValueError) as e:
            logger.error("Coleção %s ilegível no armazenamento: %s", nome, e)
            return default

    def load_lista(self, nome: str) -> List[Any]:
        """Atalho para coleções que são listas (ausente/corrompida -> [])."""
        return as_lista(self.load(nome, []))

    def nomes_salvos(self) -> List[str]:
        """Nomes lógicos das coleções que já existem no banco."""
        with conexao(self.db_path) as conn:
            rows = conn.execute("SELECT chave FROM colecoes").fetchall()
        chaves = {str(r["chave"]) for r in rows}
        return [nome for nome, chave in CHAVES_COLECOES.items() if chave in chaves]

    # ---------------- escrita ----------------

    def save(self, nome: str, valor: Any) -> None:
        """Sobrescreve a coleção inteira."""
        self.save_raw_many({nome: dumps_colecao(valor)})

    def save_many(self, valores: Mapping[str, Any]) -> None:
        """Sobrescreve várias coleções na mesma transação (ex.: produtos + vendas)."""
        self.save_raw_many({nome: dumps_colecao(v) for nome, v in valores.items()})

    def save_raw_many(self, textos: Mapping[str, str]) -> None:
        """
        Grava várias coleções (texto JSON já serializado) numa única transação.

        Ou todas são gravadas ou nenhuma.
        """
        linhas = [(self._chave(nome), texto) for nome, texto in textos.items()]
        if not linhas:
            return
        agora = datetime.now().isoformat(timespec="seconds")
        with transacao(self.db_path) as conn:
            conn.executemany(
                """
                INSERT INTO colecoes (chave, conteudo, atualizado_em)
                VALUES (?, ?, ?)
                ON CONFLICT(chave) DO UPDATE SET
                    conteudo = excluded.conteudo,
                    atualizado_em = excluded.atualizado_em
                """,
                [(chave, texto, agora) for chave, texto in linhas],
            )
        logger.debug("Coleções gravadas: %s", ", ".join(textos))


# =============================
# Helpers de lista
# =============================
def salvar_registro(lista: List[Any], registro: Dict[str, Any], *, no_inicio: bool = True) -> List[Any]:
    """
    Substitui o registro de mesmo `id` ou insere (no início, por padrão).
    """
    itens = list(as_lista(lista))
    rid = registro.get("id")
    for i, atual in enumerate(itens):
        if isinstance(atual, dict) and atual.get("id") == rid:
            itens[i] = registro
            return itens
    return [registro] + itens if no_inicio else itens + [registro]


def excluir_registro(lista: List[Any], registro_id: Any) -> List[Any]:
    """Remove o registro de `id` informado (ausente -> lista igual)."""
    return [r for r in as_lista(lista) if not (isinstance(r, dict) and r.get("id") == registro_id)]


def ordenar_por_data_desc(lista: List[Any], campo: str = "date") -> List[Any]:
    """Ordena por `campo` de data, mais recente primeiro (ordenação estável)."""
    return sorted(
        as_lista(lista),
        key=lambda r: instante(r.get(campo)) if isinstance(r, dict) else float("-inf"),
        reverse=True,
    )
