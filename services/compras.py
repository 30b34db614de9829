# services/compras.py
"""
Compras e Aplicações
====================

Serviço único para as duas coleções de saídas que podem ser bancadas pelo
caixa da loja ou por investidores:

- `purchase`    -> coleção `purchases` (compras de estoque, detalhadas ou por lote)
- `application` -> coleção `aplicacoes` (aplicações na loja, detalhadas ou resumidas)

Regras de gravação
------------------
- `totalValue > 0` e a soma dos pagamentos igual ao total (±0.01).
- Total detalhado = soma dos itens (`purchaseValue` nas compras, `value`
  nas aplicações); lote/resumida usam o `totalValue` informado.
- Pernas do `Caixa da loja` já nascem quitadas: recebem um único
  recebimento do valor da perna, na data do registro.
- Fonte `Outros` exige `otherSourceName`.
- A lista fica ordenada por data, mais recente primeiro.
"""

from __future__ import annotations

import logging
from datetime import date, datetime, timezone
from typing import Any, Dict, List, Mapping

from repository.colecoes_repository import (
    ColecoesRepository,
    excluir_registro,
    ordenar_por_data_desc,
    salvar_registro,
)
from services.investidores import registrar_recebimento_investidor
from shared.datas import para_data_local, parse_local_date
from shared.ids import gerar_id, sanitize
from shared.safe_utils import as_lista, to_float
from shared.tipos import (
    FONTE_CAIXA_LOJA,
    FONTE_OUTROS,
    FONTES_PAGAMENTO,
    ORIGEM_APLICACAO,
    ORIGEM_COMPRA,
    TOLERANCIA_TOTAL,
    ValidacaoError,
)
from utils.utils import arredondar_moeda

logger = logging.getLogger(__name__)

__all__ = ["ComprasService", "COLECAO_POR_ORIGEM"]

COLECAO_POR_ORIGEM: Dict[str, str] = {
    ORIGEM_COMPRA: "purchases",
    ORIGEM_APLICACAO: "aplicacoes",
}

# tipo de registro -> campo de valor dos itens (quando o total vem dos itens)
_CAMPO_VALOR_ITEM = {
    ("purchase", "detalhado"): "purchaseValue",
    ("application", "detalhada"): "value",
}


def _data_registro(valor: Any) -> datetime:
    if valor is None:
        return datetime.now(timezone.utc)
    if isinstance(valor, datetime):
        return valor
    d = valor if isinstance(valor, date) else parse_local_date(valor)
    if d is None:
        raise ValidacaoError("Data do registro inválida.")
    return datetime(d.year, d.month, d.day, 12).astimezone(timezone.utc)


class ComprasService:
    """Gravação, exclusão e devoluções de compras/aplicações."""

    def __init__(self, repo: Any) -> None:
        self.repo = repo if isinstance(repo, ColecoesRepository) else ColecoesRepository(repo)

    @staticmethod
    def _colecao(origem: str) -> str:
        try:
            return COLECAO_POR_ORIGEM[origem]
        except KeyError:
            raise ValueError(f"Origem inválida: {origem!r} (use 'purchase' ou 'application')") from None

    # =============================
    # Validação
    # =============================
    @staticmethod
    def _total(origem: str, registro: Mapping[str, Any]) -> float:
        tipo = registro.get("purchaseType") if origem == ORIGEM_COMPRA else registro.get("type")
        campo = _CAMPO_VALOR_ITEM.get((origem, tipo))
        if campo is not None:
            return arredondar_moeda(
                sum(to_float(i.get(campo)) for i in as_lista(registro.get("items")) if isinstance(i, Mapping))
            )
        return to_float(registro.get("totalValue"))

    @staticmethod
    def _normalizar_pagamentos(pagamentos: List[Any], dia_registro: str) -> List[Dict[str, Any]]:
        normalizados: List[Dict[str, Any]] = []
        for perna in as_lista(pagamentos):
            if not isinstance(perna, Mapping):
                raise ValidacaoError("Pagamento inválido.")
            fonte = perna.get("source")
            if fonte not in FONTES_PAGAMENTO:
                raise ValidacaoError(f"Fonte de pagamento inválida: {fonte!r}")
            valor = to_float(perna.get("amount"))
            if valor <= 0:
                raise ValidacaoError("Valor de pagamento deve ser maior que zero.")

            nova = {**perna, "id": perna.get("id") or gerar_id("pp"), "amount": valor}
            if fonte == FONTE_OUTROS:
                nome = sanitize(perna.get("otherSourceName"))
                if not nome:
                    raise ValidacaoError('Informe o nome da fonte "Outros".')
                nova["otherSourceName"] = nome
            else:
                nova.pop("otherSourceName", None)

            if fonte == FONTE_CAIXA_LOJA:
                nova["paymentsReceived"] = [{"id": gerar_id("rec"), "amount": valor, "date": dia_registro}]
            else:
                nova["paymentsReceived"] = [r for r in as_lista(perna.get("paymentsReceived")) if isinstance(r, Mapping)]
            normalizados.append(nova)
        return normalizados

    # =============================
    # Operações
    # =============================
    def listar(self, origem: str) -> List[Any]:
        return self.repo.load_lista(self._colecao(origem))

    def salvar(self, origem: str, registro: Mapping[str, Any]) -> Dict[str, Any]:
        """
        Valida e grava uma compra (`origem='purchase'`) ou aplicação (`'application'`).

        Returns:
            O registro gravado.

        Raises:
            ValidacaoError: total inválido, pagamentos que não fecham com o total
                ou fonte `Outros` sem nome.
        """
        colecao = self._colecao(origem)
        total = self._total(origem, registro)
        if total <= 0:
            raise ValidacaoError("Informe um valor total válido.")

        data = _data_registro(registro.get("date"))
        dia = para_data_local(data).isoformat()
        pagamentos = self._normalizar_pagamentos(registro.get("payments"), dia)
        pago = sum(p["amount"] for p in pagamentos)
        if abs(total - pago) > TOLERANCIA_TOTAL:
            rotulo = "da compra" if origem == ORIGEM_COMPRA else "da aplicação"
            raise ValidacaoError(f"O valor total pago deve ser igual ao valor total {rotulo}.")

        novo = {
            **registro,
            "id": registro.get("id") or gerar_id("pur" if origem == ORIGEM_COMPRA else "apl"),
            "date": data,
            "payments": pagamentos,
            "totalValue": total,
        }
        lista = salvar_registro(self.repo.load_lista(colecao), novo)
        self.repo.save(colecao, ordenar_por_data_desc(lista))
        logger.info("%s %s salva: R$ %.2f", colecao, novo["id"], total)
        return novo

    def excluir(self, origem: str, registro_id: str) -> None:
        colecao = self._colecao(origem)
        lista = self.repo.load_lista(colecao)
        nova = excluir_registro(lista, registro_id)
        if len(nova) != len(lista):
            self.repo.save(colecao, nova)
            logger.info("%s %s excluída", colecao, registro_id)

    def registrar_recebimento(
        self,
        origem: str,
        owner_id: str,
        payment_id: str,
        recebimento: Mapping[str, Any],
    ) -> List[Any]:
        """
        Registra uma devolução ao investidor na coleção indicada por `origem`.

        Ver `services.investidores.registrar_recebimento_investidor`.
        """
        colecao = self._colecao(origem)
        nova = registrar_recebimento_investidor(self.repo.load_lista(colecao), owner_id, payment_id, recebimento)
        self.repo.save(colecao, nova)
        return nova
