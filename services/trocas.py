# services/trocas.py
"""
Trocas (devoluções de peças por vale ou dinheiro)
=================================================

- Troca em `Vale`: ganha `status` (padrão `Pendente`) e `valeExpiresAt`
  (padrão: data da troca + 30 dias).
- Troca em `Dinheiro`: sai do caixa no mês da troca; não tem status nem
  validade.
- Total: troca por lote usa o `totalValue` informado; troca detalhada soma o
  `purchaseValue` dos itens.
"""

from __future__ import annotations

import logging
from datetime import date, datetime, timedelta, timezone
from typing import Any, Dict, Mapping, Optional

from repository.colecoes_repository import (
    ColecoesRepository,
    excluir_registro,
    salvar_registro,
)
from shared.datas import parse_local_date
from shared.ids import gerar_id, sanitize
from shared.safe_utils import as_lista, to_float
from shared.tipos import (
    DIAS_VALIDADE_VALE,
    STATUS_VALE,
    TROCA_DINHEIRO,
    TROCA_VALE,
    VALE_PENDENTE,
    ValidacaoError,
)
from utils.utils import arredondar_moeda

logger = logging.getLogger(__name__)

__all__ = ["TrocasService", "vale_expirado"]


def _como_datetime(valor: Any, campo: str) -> datetime:
    """datetime/date/'YYYY-MM-DD' -> datetime com fuso (dia local às 00:00)."""
    if isinstance(valor, datetime):
        return valor if valor.tzinfo else valor.astimezone()
    d = valor if isinstance(valor, date) else parse_local_date(valor)
    if d is None:
        raise ValidacaoError(f"{campo} inválida.")
    return datetime(d.year, d.month, d.day).astimezone(timezone.utc)


def vale_expirado(troca: Mapping[str, Any], agora: Optional[datetime] = None) -> bool:
    """True para vale ainda pendente cuja validade já passou."""
    if troca.get("paymentMethod") != TROCA_VALE or troca.get("status") != VALE_PENDENTE:
        return False
    validade = troca.get("valeExpiresAt")
    if validade is None:
        return False
    try:
        limite = _como_datetime(validade, "Validade do vale")
    except ValidacaoError:
        return False
    return limite < (agora or datetime.now(timezone.utc))


class TrocasService:
    """Cadastro de trocas e baixa de vales."""

    def __init__(self, repo: Any) -> None:
        self.repo = repo if isinstance(repo, ColecoesRepository) else ColecoesRepository(repo)

    # =============================
    # Gravação
    # =============================
    def salvar_troca(self, troca: Mapping[str, Any]) -> Dict[str, Any]:
        """
        Valida e grava a troca (insere no início ou substitui pelo `id`).

        Raises:
            ValidacaoError: cliente ausente, forma inválida, total <= 0 ou
                lote sem quantidade.
        """
        if not sanitize(troca.get("customerId")):
            raise ValidacaoError("Por favor, selecione ou digite o nome de um cliente.")

        metodo = troca.get("paymentMethod")
        if metodo not in (TROCA_VALE, TROCA_DINHEIRO):
            raise ValidacaoError(f"Forma de devolução inválida: {metodo!r}")

        em_lote = bool(troca.get("isBulk"))
        if em_lote:
            quantidade = to_float(troca.get("bulkQuantity"))
            total = to_float(troca.get("totalValue"))
            if quantidade <= 0 or total <= 0:
                raise ValidacaoError("Para trocas por lote, preencha a quantidade e o valor total final.")
            itens: list = []
        else:
            itens = [i for i in as_lista(troca.get("items")) if isinstance(i, Mapping)]
            if not itens:
                raise ValidacaoError("Adicione ao menos um item para a troca detalhada.")
            total = arredondar_moeda(sum(to_float(i.get("purchaseValue")) for i in itens))
            if total <= 0:
                raise ValidacaoError("O valor total da troca deve ser maior que zero.")

        data = _como_datetime(troca.get("date") or datetime.now(timezone.utc), "Data da troca")

        nova: Dict[str, Any] = {
            **troca,
            "id": troca.get("id") or gerar_id("exch"),
            "date": data,
            "isBulk": em_lote,
            "items": itens,
            "totalValue": total,
            "paymentMethod": metodo,
        }
        if em_lote:
            nova["bulkQuantity"] = int(to_float(troca.get("bulkQuantity")))
        else:
            nova.pop("bulkQuantity", None)

        if metodo == TROCA_VALE:
            status = troca.get("status") or VALE_PENDENTE
            if status not in STATUS_VALE:
                raise ValidacaoError(f"Status de vale inválido: {status!r}")
            nova["status"] = status
            validade = troca.get("valeExpiresAt")
            nova["valeExpiresAt"] = (
                _como_datetime(validade, "Validade do vale")
                if validade
                else data + timedelta(days=DIAS_VALIDADE_VALE)
            )
        else:
            nova.pop("status", None)
            nova.pop("valeExpiresAt", None)

        self.repo.save("exchanges", salvar_registro(self.repo.load_lista("exchanges"), nova))
        logger.info("Troca %s salva (%s, R$ %.2f)", nova["id"], metodo, total)
        return nova

    def atualizar_status(self, troca_id: str, status: str) -> Optional[Dict[str, Any]]:
        """Atualiza o status do vale; devolve a troca atualizada (None se não existir)."""
        if status not in STATUS_VALE:
            raise ValidacaoError(f"Status de vale inválido: {status!r}")
        trocas = self.repo.load_lista("exchanges")
        for pos, troca in enumerate(trocas):
            if isinstance(troca, Mapping) and troca.get("id") == troca_id:
                atualizada = {**troca, "status": status}
                novas = list(trocas)
                novas[pos] = atualizada
                self.repo.save("exchanges", novas)
                logger.info("Troca %s -> %s", troca_id, status)
                return atualizada
        logger.warning("Troca %s não encontrada para atualizar status", troca_id)
        return None

    def excluir_troca(self, troca_id: str) -> None:
        trocas = self.repo.load_lista("exchanges")
        novas = excluir_registro(trocas, troca_id)
        if len(novas) != len(trocas):
            self.repo.save("exchanges", novas)
            logger.info("Troca %s excluída", troca_id)
