# services/backup.py
"""
Backup / restauração
====================

Exporta todas as coleções gravadas para um único JSON (chave = nome lógico
da coleção) e importa esse mesmo formato de volta.

- Exportação: coleções nunca gravadas ficam de fora. Os valores saem como o
  JSON guardado (timestamps continuam texto ISO).
- Importação: JSON ilegível, raiz que não é objeto ou nenhum nome de coleção
  conhecido -> `BackupInvalidoError` e nada é gravado. O mesmo vale para
  uma coleção cujo conteúdo não volta a ser lido (ex.: timestamp com data
  impossível como `2024-02-30T12:00:00.000Z`). Chaves desconhecidas
  são ignoradas. Todas as coleções do arquivo são gravadas numa única
  transação, substituindo as atuais.
"""

from __future__ import annotations

import json
import logging
from datetime import date
from typing import Any, Dict, List, Optional

from repository.colecoes_repository import (
    CHAVES_COLECOES,
    ColecoesRepository,
    dumps_colecao,
    loads_colecao,
)
from shared.datas import hoje_local_str
from shared.tipos import BackupInvalidoError

logger = logging.getLogger(__name__)

__all__ = [
    "exportar_backup",
    "exportar_backup_json",
    "nome_arquivo_backup",
    "importar_backup",
]


def exportar_backup(repo: ColecoesRepository) -> Dict[str, Any]:
    """Dict nome lógico -> coleção gravada (coleções ausentes ou ilegíveis são omitidas)."""
    dados: Dict[str, Any] = {}
    for nome in CHAVES_COLECOES:
        texto = repo.load_raw(nome)
        if not texto:
            continue
        try:
            dados[nome] = json.loads(texto)
        except json.JSONDecodeError as e:
            logger.error("Coleção %s ilegível; fora do backup: %s", nome, e)
    return dados


def exportar_backup_json(repo: ColecoesRepository) -> str:
    return json.dumps(exportar_backup(repo), ensure_ascii=False, indent=2)


def nome_arquivo_backup(hoje: Optional[date] = None) -> str:
    """Ex.: `backup-boutique-manager-2024-07-10.json`."""
    return f"backup-boutique-manager-{hoje_local_str(hoje)}.json"


def importar_backup(repo: ColecoesRepository, texto_json: Any) -> List[str]:
    """
    Substitui as coleções pelas do arquivo de backup.

    Args:
        repo: repositório de destino.
        texto_json: conteúdo do arquivo (str ou bytes UTF-8).

    Returns:
        Nomes das coleções importadas.

    Raises:
        BackupInvalidoError: arquivo ilegível, sem nenhuma coleção conhecida
            ou com uma coleção que não pode ser relida.
    """
    if isinstance(texto_json, (bytes, bytearray)):
        try:
            texto_json = texto_json.decode("utf-8-sig")
        except UnicodeDecodeError as e:
            raise BackupInvalidoError(f"Arquivo de backup inválido ou corrompido: {e}") from e

    try:
        dados = json.loads(texto_json)
    except (TypeError, json.JSONDecodeError) as e:
        raise BackupInvalidoError(f"Arquivo de backup inválido ou corrompido: {e}") from e

    if not isinstance(dados, dict):
        raise BackupInvalidoError("Arquivo de backup inválido ou corrompido.")

    conhecidas = [k for k in dados if k in CHAVES_COLECOES]
    if not conhecidas:
        raise BackupInvalidoError("Arquivo de backup inválido ou corrompido.")

    ignoradas = [k for k in dados if k not in CHAVES_COLECOES]
    if ignoradas:
        logger.warning("Chaves desconhecidas ignoradas no backup: %s", ignoradas)

    textos: Dict[str, str] = {}
    for nome in conhecidas:
        texto = dumps_colecao(dados[nome])
        try:
            loads_colecao(texto, estrito=True)
        except ValueError as e:
            raise BackupInvalidoError(f"Coleção '{nome}' do backup tem dados ilegíveis: {e}") from e
        textos[nome] = texto

    repo.save_raw_many(textos)
    logger.info("Backup importado: %s", ", ".join(conhecidas))
    return conhecidas
