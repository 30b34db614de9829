"""
Módulo VendasService
====================

Serviço responsável por registrar **vendas**: valida o formulário, ajusta o
**estoque** pelo delta líquido (edição devolve a versão anterior) e grava
produtos e vendas na mesma transação.

Também expõe a baixa/reabertura de parcelas `A Prazo`.
"""

from __future__ import annotations

import logging
from datetime import date, datetime, timezone
from typing import Any, Dict, List, Mapping, Optional

from repository.colecoes_repository import (
    ColecoesRepository,
    excluir_registro,
    salvar_registro,
)
from services.a_prazo import alternar_status_parcela
from services.estoque import aplicar_delta_estoque_venda, devolver_estoque_venda
from shared.datas import parse_local_date
from shared.ids import gerar_id, sanitize
from shared.safe_utils import as_lista, to_float
from shared.tipos import (
    STATUS_PARCELA,
    STATUS_PENDENTE,
    TIPO_A_PRAZO,
    TIPOS_PAGAMENTO,
    TOLERANCIA_TOTAL,
    ValidacaoError,
)
from utils.utils import arredondar_moeda

logger = logging.getLogger(__name__)

__all__ = ["VendasService"]


class VendasService:
    """Regras de negócio para registro de vendas."""

    # ------------------------------------------------------------------ #
    # Setup
    # ------------------------------------------------------------------ #
    def __init__(self, repo: Any) -> None:
        """
        Inicializa o serviço.

        Args:
            repo (Any): `ColecoesRepository` já aberto, ou caminho do SQLite
                (str/Path) / objeto com atributo de caminho.
        """
        self.repo = repo if isinstance(repo, ColecoesRepository) else ColecoesRepository(repo)

    # =============================
    # Validação
    # =============================
    @staticmethod
    def _normalizar_itens(itens: List[Any]) -> List[Dict[str, Any]]:
        normalizados: List[Dict[str, Any]] = []
        for item in as_lista(itens):
            if not isinstance(item, Mapping) or not item.get("productId"):
                raise ValidacaoError("Item de venda sem produto.")
            qtd = to_float(item.get("quantity"))
            if qtd <= 0 or not qtd.is_integer():
                raise ValidacaoError(f"Quantidade inválida para o produto {item.get('productId')!r}.")
            preco = to_float(item.get("unitPrice"))
            if preco < 0:
                raise ValidacaoError("Preço unitário não pode ser negativo.")
            normalizados.append({**item, "quantity": int(qtd), "unitPrice": preco})
        return normalizados

    @staticmethod
    def _normalizar_pagamentos(pagamentos: List[Any]) -> List[Dict[str, Any]]:
        normalizados: List[Dict[str, Any]] = []
        for perna in as_lista(pagamentos):
            if not isinstance(perna, Mapping):
                raise ValidacaoError("Pagamento inválido.")
            tipo = perna.get("type")
            if tipo not in TIPOS_PAGAMENTO:
                raise ValidacaoError(f"Forma de pagamento inválida: {tipo!r}")
            valor = to_float(perna.get("amount"))
            if valor < 0:
                raise ValidacaoError("Valor de pagamento não pode ser negativo.")

            nova = {**perna, "id": perna.get("id") or gerar_id("pay"), "amount": valor}
            if tipo == TIPO_A_PRAZO:
                parcelas = []
                for p in as_lista(perna.get("paymentDates")):
                    venc = parse_local_date(p.get("date")) if isinstance(p, Mapping) else None
                    if venc is None:
                        raise ValidacaoError("Parcela A Prazo com data de vencimento inválida.")
                    status = p.get("status") or STATUS_PENDENTE
                    if status not in STATUS_PARCELA:
                        raise ValidacaoError(f"Status de parcela inválido: {status!r}")
                    parcelas.append({**p, "date": venc.isoformat(), "status": status})
                if not parcelas:
                    raise ValidacaoError("Pagamento A Prazo precisa de ao menos uma data de vencimento.")
                nova["paymentDates"] = parcelas
                nova["installments"] = len(parcelas)
            normalizados.append(nova)
        return normalizados

    def _validar(self, venda: Mapping[str, Any]) -> Dict[str, Any]:
        if not sanitize(venda.get("customerId")):
            raise ValidacaoError("Preencha cliente, vendedor e adicione ao menos um produto.")
        itens = self._normalizar_itens(venda.get("items"))
        if not itens:
            raise ValidacaoError("Preencha cliente, vendedor e adicione ao menos um produto.")
        pagamentos = self._normalizar_pagamentos(venda.get("payments"))

        total = arredondar_moeda(sum(i["unitPrice"] * i["quantity"] for i in itens))
        pago = sum(p["amount"] for p in pagamentos)
        if abs(total - pago) > TOLERANCIA_TOTAL:
            raise ValidacaoError("O valor total pago deve ser igual ao total da venda.")

        data = venda.get("date")
        if data is None:
            data = datetime.now(timezone.utc)
        elif not isinstance(data, (date, datetime)):
            data_local = parse_local_date(data)
            if data_local is None:
                raise ValidacaoError("Data da venda inválida.")
            data = datetime(data_local.year, data_local.month, data_local.day, 12).astimezone(timezone.utc)

        return {
            **venda,
            "id": venda.get("id") or gerar_id("sale"),
            "date": data,
            "items": itens,
            "total": total,
            "payments": pagamentos,
        }

    # =============================
    # Regras principais
    # =============================
    def salvar_venda(self, venda: Mapping[str, Any]) -> Dict[str, Any]:
        """
        Valida e grava a venda (insere no início ou substitui pelo `id`).

        Fluxo:
          1. Valida cliente, itens e que o total pago bate com o total (±0.01).
          2. Ajusta o estoque pelo delta líquido entre a versão gravada e a nova.
          3. Grava produtos e vendas numa única transação.

        Returns:
            A venda gravada (com `id`, `total` e parcelas normalizados).
        """
        nova = self._validar(venda)

        vendas = self.repo.load_lista("sales")
        anterior = next((v for v in vendas if isinstance(v, Mapping) and v.get("id") == nova["id"]), None)
        produtos = aplicar_delta_estoque_venda(self.repo.load_lista("products"), anterior, nova)

        self.repo.save_many({"products": produtos, "sales": salvar_registro(vendas, nova)})
        logger.info(
            "Venda %s %s: total R$ %.2f", nova["id"], "editada" if anterior else "registrada", nova["total"]
        )
        return nova

    def excluir_venda(self, venda_id: str) -> bool:
        """Exclui a venda e devolve os itens ao estoque. Id desconhecido não faz nada."""
        vendas = self.repo.load_lista("sales")
        alvo = next((v for v in vendas if isinstance(v, Mapping) and v.get("id") == venda_id), None)
        if alvo is None:
            logger.debug("Venda %s não encontrada; nada a excluir", venda_id)
            return False

        produtos = devolver_estoque_venda(self.repo.load_lista("products"), alvo)
        self.repo.save_many({"products": produtos, "sales": excluir_registro(vendas, venda_id)})
        logger.info("Venda %s excluída; estoque devolvido", venda_id)
        return True

    def atualizar_status_parcela(
        self,
        venda_id: str,
        payment_id: str,
        indice: int,
        status: str,
        hoje: Optional[date] = None,
    ) -> Optional[Dict[str, Any]]:
        """
        Marca uma parcela como `Pago` (data de hoje) ou volta para `Pendente`.

        Returns:
            A venda atualizada, ou None se a venda não existe.
        """
        vendas = self.repo.load_lista("sales")
        for pos, venda in enumerate(vendas):
            if not isinstance(venda, Mapping) or venda.get("id") != venda_id:
                continue
            atualizada = alternar_status_parcela(venda, payment_id, indice, status, hoje=hoje)
            if atualizada is venda:
                return venda
            novas = list(vendas)
            novas[pos] = atualizada
            self.repo.save("sales", novas)
            logger.info("Parcela %s/%s[%s] -> %s", venda_id, payment_id, indice, status)
            return atualizada

        logger.warning("Venda %s não encontrada para atualizar parcela", venda_id)
        return None
