# services/caixa.py
"""
Módulo Caixa (fluxo mensal)
===========================

Reconciliação mensal do caixa da loja contra o saldo trazido do mês anterior.

Entradas do mês
---------------
- Vendas à vista: pernas que não são `A Prazo`, das vendas do mês.
- A Prazo recebido: parcelas `Pago` cujo `paymentDate` cai no mês
  (independente do mês da venda).
- Saldo anterior: valor salvo em `saldosAnteriores[mes]` (padrão 0).

Saídas do mês
-------------
- Compras e aplicações do mês pagas com `Caixa da loja`.
- Trocas do mês devolvidas em `Dinheiro`.
- Devoluções a investidores (`paymentsReceived` datados no mês).
- Salários com `month == mes`.

Fechamento
----------
`fechar_mes` grava `saldo_final` como saldo anterior do mês seguinte,
sempre com 2 casas (`"543.21"`). Fechar de novo sobrescreve.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Any, Dict, List, Mapping, Optional

from repository.colecoes_repository import (
    ColecoesRepository,
    excluir_registro,
    ordenar_por_data_desc,
    salvar_registro,
)
from services.a_prazo import pernas_a_prazo, valor_por_parcela
from shared.datas import mes_de, mes_valido, parse_local_date, somar_meses
from shared.ids import gerar_id, sanitize
from shared.safe_utils import as_lista, campo_str, to_float
from shared.tipos import (
    BENEFICIARIO_OUTROS,
    BENEFICIARIOS_SALARIO,
    FONTE_CAIXA_LOJA,
    STATUS_PAGO,
    TIPO_A_PRAZO,
    TROCA_DINHEIRO,
    EntradasCaixa,
    FluxoCaixaMensal,
    SaidasCaixa,
    ValidacaoError,
)
from utils.utils import eh_valor_monetario, limpar_valor_formatado

logger = logging.getLogger(__name__)

__all__ = [
    "calcular_fluxo_mensal",
    "fechar_mes",
    "saldo_anterior_do_mes",
    "CaixaService",
]


# =============================
# Derivações puras
# =============================
def saldo_anterior_do_mes(mes: str, saldos_anteriores: Optional[Mapping[str, Any]]) -> float:
    """Saldo trazido para `mes` (texto salvo -> número; ausente/inválido -> 0)."""
    if not isinstance(saldos_anteriores, Mapping):
        return 0.0
    return float(limpar_valor_formatado(saldos_anteriores.get(mes)))


def _vendas_a_vista(mes: str, vendas: List[Any]) -> float:
    total = 0.0
    for venda in as_lista(vendas):
        if not isinstance(venda, Mapping) or mes_de(venda.get("date")) != mes:
            continue
        for perna in as_lista(venda.get("payments")):
            if isinstance(perna, Mapping) and perna.get("type") != TIPO_A_PRAZO:
                total += to_float(perna.get("amount"))
    return total


def _a_prazo_recebido(mes: str, vendas: List[Any]) -> float:
    total = 0.0
    for venda in as_lista(vendas):
        for perna in pernas_a_prazo(venda):
            valor = valor_por_parcela(perna)
            for parcela in as_lista(perna.get("paymentDates")):
                if not isinstance(parcela, Mapping) or parcela.get("status") != STATUS_PAGO:
                    continue
                pago_em = campo_str(parcela, "paymentDate")
                if pago_em and pago_em[:7] == mes:
                    total += valor
    return total


def _saidas_caixa_loja(mes: str, registros: List[Any]) -> float:
    total = 0.0
    for reg in as_lista(registros):
        if not isinstance(reg, Mapping) or mes_de(reg.get("date")) != mes:
            continue
        for perna in as_lista(reg.get("payments")):
            if isinstance(perna, Mapping) and perna.get("source") == FONTE_CAIXA_LOJA:
                total += to_float(perna.get("amount"))
    return total


def _saidas_trocas(mes: str, trocas: List[Any]) -> float:
    return sum(
        to_float(t.get("totalValue"))
        for t in as_lista(trocas)
        if isinstance(t, Mapping)
        and t.get("paymentMethod") == TROCA_DINHEIRO
        and mes_de(t.get("date")) == mes
    )


def _devolucoes_investidores(mes: str, compras: List[Any], aplicacoes: List[Any]) -> float:
    total = 0.0
    for reg in as_lista(compras) + as_lista(aplicacoes):
        if not isinstance(reg, Mapping):
            continue
        for perna in as_lista(reg.get("payments")):
            if not isinstance(perna, Mapping) or perna.get("source") == FONTE_CAIXA_LOJA:
                continue
            for rec in as_lista(perna.get("paymentsReceived")):
                if isinstance(rec, Mapping) and mes_de(rec.get("date")) == mes:
                    total += to_float(rec.get("amount"))
    return total


def calcular_fluxo_mensal(
    mes: str,
    vendas: List[Any],
    compras: List[Any],
    aplicacoes: List[Any],
    trocas: List[Any],
    salarios: List[Any],
    saldos_anteriores: Optional[Mapping[str, Any]],
) -> FluxoCaixaMensal:
    """
    Monta o relatório de caixa de `mes` (`YYYY-MM`).

    Nunca levanta por dado malformado: campos ausentes contam como zero.
    """
    salarios_do_mes = [
        s for s in as_lista(salarios)
        if isinstance(s, Mapping) and s.get("month") == mes
    ]

    entradas = EntradasCaixa(
        vendas_a_vista=_vendas_a_vista(mes, vendas),
        a_prazo_recebido=_a_prazo_recebido(mes, vendas),
        saldo_anterior=saldo_anterior_do_mes(mes, saldos_anteriores),
    )
    saidas = SaidasCaixa(
        compras=_saidas_caixa_loja(mes, compras),
        aplicacoes=_saidas_caixa_loja(mes, aplicacoes),
        trocas=_saidas_trocas(mes, trocas),
        investidores=_devolucoes_investidores(mes, compras, aplicacoes),
        salarios=sum(to_float(s.get("amount")) for s in salarios_do_mes),
    )

    fluxo = FluxoCaixaMensal(
        mes=mes,
        entradas=entradas,
        saidas=saidas,
        salarios_do_mes=salarios_do_mes,
        calculado_em=datetime.now(timezone.utc),
    )
    logger.debug(
        "Fluxo %s: entradas=%.2f saídas=%.2f saldo=%.2f",
        mes, entradas.total, saidas.total, fluxo.saldo_final,
    )
    return fluxo


def fechar_mes(mes: str, saldo_final: float, saldos_anteriores: Optional[Mapping[str, Any]]) -> Dict[str, Any]:
    """
    Novo mapa de saldos com o mês seguinte a `mes` valendo `saldo_final`.

    Raises:
        ValueError: `mes` fora do formato `YYYY-MM`.
    """
    proximo = somar_meses(mes, 1)
    saldos = dict(saldos_anteriores) if isinstance(saldos_anteriores, Mapping) else {}
    saldos[proximo] = f"{float(saldo_final):.2f}"
    return saldos


# =============================
# Serviço (com persistência)
# =============================
class CaixaService:
    """Operações da tela de Caixa: relatório, fechamento, saldo manual e salários."""

    def __init__(self, repo: Any) -> None:
        """
        Args:
            repo: `ColecoesRepository` ou caminho do SQLite (str/Path/objeto com `db_path`).
        """
        self.repo = repo if isinstance(repo, ColecoesRepository) else ColecoesRepository(repo)

    # ---------------- leitura ----------------

    def saldos_anteriores(self) -> Dict[str, Any]:
        saldos = self.repo.load("saldosAnteriores", {})
        return saldos if isinstance(saldos, dict) else {}

    def fluxo_do_mes(self, mes: str) -> FluxoCaixaMensal:
        if not mes_valido(mes):
            raise ValidacaoError(f"Mês inválido (use YYYY-MM): {mes!r}")
        return calcular_fluxo_mensal(
            mes,
            self.repo.load_lista("sales"),
            self.repo.load_lista("purchases"),
            self.repo.load_lista("aplicacoes"),
            self.repo.load_lista("exchanges"),
            self.repo.load_lista("salaryPayments"),
            self.saldos_anteriores(),
        )

    # ---------------- fechamento / saldo ----------------

    def fechar_mes(self, mes: str) -> FluxoCaixaMensal:
        """Calcula o mês, grava o saldo final como saldo anterior do mês seguinte e devolve o relatório."""
        fluxo = self.fluxo_do_mes(mes)
        saldos = fechar_mes(mes, fluxo.saldo_final, self.saldos_anteriores())
        self.repo.save("saldosAnteriores", saldos)
        logger.info("Mês %s fechado com saldo R$ %.2f", mes, fluxo.saldo_final)
        return fluxo

    def definir_saldo_anterior(self, mes: str, valor: Any) -> Dict[str, Any]:
        """
        Edição manual do saldo anterior de `mes`.

        Aceita número ou texto de moeda (`"1.234,56"`, `"R$ 50"`); grava com 2 casas.
        """
        if not mes_valido(mes):
            raise ValidacaoError(f"Mês inválido (use YYYY-MM): {mes!r}")
        if not eh_valor_monetario(valor):
            raise ValidacaoError(f"Saldo anterior inválido: {valor!r}")

        saldos = self.saldos_anteriores()
        saldos[mes] = f"{float(limpar_valor_formatado(valor)):.2f}"
        self.repo.save("saldosAnteriores", saldos)
        logger.info("Saldo anterior de %s definido em %s", mes, saldos[mes])
        return saldos

    # ---------------- salários ----------------

    def salvar_pagamento_salario(self, pagamento: Mapping[str, Any], mes: Optional[str] = None) -> Dict[str, Any]:
        """
        Valida e grava (insere ou substitui por `id`) um pagamento de salário.

        Regras:
            - `amount > 0`
            - `recipient` em {'Maikellen', 'Dhaluma', 'Outros'}; 'Outros' exige `recipientName`
            - `paymentDate` válido; quando `mes` (ou `month`) é informado, precisa cair nele
            - `month` é sempre derivado de `paymentDate`

        Returns:
            O registro gravado.
        """
        valor = float(limpar_valor_formatado(pagamento.get("amount")))
        if valor <= 0:
            raise ValidacaoError("Por favor, insira um valor válido para o salário.")

        beneficiario = sanitize(pagamento.get("recipient"))
        if beneficiario not in BENEFICIARIOS_SALARIO:
            raise ValidacaoError(f"Beneficiário inválido: {beneficiario!r}")
        nome = sanitize(pagamento.get("recipientName"))
        if beneficiario == BENEFICIARIO_OUTROS and not nome:
            raise ValidacaoError('Por favor, especifique o nome para "Outros".')

        data = parse_local_date(pagamento.get("paymentDate"))
        if data is None:
            raise ValidacaoError("Data de pagamento inválida; use YYYY-MM-DD.")
        data_str = data.isoformat()
        mes_alvo = mes or pagamento.get("month")
        if mes_alvo and data_str[:7] != mes_alvo:
            raise ValidacaoError(f"A data do pagamento deve ser no mês {mes_alvo}.")

        registro: Dict[str, Any] = {
            "id": pagamento.get("id") or gerar_id("sal"),
            "month": data_str[:7],
            "recipient": beneficiario,
            "amount": valor,
            "paymentDate": data_str,
        }
        if beneficiario == BENEFICIARIO_OUTROS:
            registro["recipientName"] = nome

        lista = salvar_registro(self.repo.load_lista("salaryPayments"), registro)
        self.repo.save("salaryPayments", ordenar_por_data_desc(lista, campo="paymentDate"))
        logger.info("Salário %s salvo: %s R$ %.2f em %s", registro["id"], beneficiario, valor, data_str)
        return registro

    def excluir_pagamento_salario(self, pagamento_id: str) -> None:
        lista = self.repo.load_lista("salaryPayments")
        nova = excluir_registro(lista, pagamento_id)
        if len(nova) == len(lista):
            logger.debug("Salário %s não encontrado; nada a excluir", pagamento_id)
            return
        self.repo.save("salaryPayments", nova)
        logger.info("Salário %s excluído", pagamento_id)
