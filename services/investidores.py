# services/investidores.py
"""
Investidores (pagamentos de compras/aplicações feitos por terceiros)
====================================================================

Uma perna de pagamento de compra ou aplicação cuja `source` **não** é
`Caixa da loja` foi bancada por um investidor. A loja devolve esse valor aos
poucos, registrando `paymentsReceived` (lista só de inclusão).

Funções
-------
- `listar_pagamentos_investidores(compras, aplicacoes)`: achata as pernas de
  investidor em `PagamentoInvestidor`, mais recentes primeiro.
- `resumir_investidores` / `agrupar_por_investidor`: totais investido,
  recebido e pendente (geral e por nome).
- `valor_pendente(perna)`: quanto ainda falta devolver numa perna.
- `registrar_recebimento_investidor(...)`: valida e anexa um recebimento,
  devolvendo uma nova lista de registros.
- `resumo_por_origem`: totais separados entre compras e aplicações.
- `opcoes_recebimento` / `chave_pagamento`: pernas pendentes indexadas por
  (origem, registro, perna) para a escolha na tela de devolução.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Mapping, Tuple

from shared.datas import instante, parse_local_date
from shared.ids import gerar_id
from shared.safe_utils import as_lista, campo_str, to_float
from shared.tipos import (
    FONTE_CAIXA_LOJA,
    FONTE_OUTROS,
    ORIGEM_APLICACAO,
    ORIGEM_COMPRA,
    TOLERANCIA_RECEBIMENTO,
    PagamentoInvestidor,
    ResumoInvestidores,
    ValidacaoError,
)
from utils.utils import formatar_moeda

logger = logging.getLogger(__name__)

__all__ = [
    "nome_investidor",
    "listar_pagamentos_investidores",
    "resumir_investidores",
    "agrupar_por_investidor",
    "valor_recebido",
    "valor_pendente",
    "registrar_recebimento_investidor",
    "resumo_por_origem",
    "chave_pagamento",
    "rotulo_pagamento",
    "opcoes_recebimento",
]


# =============================
# Helpers de perna
# =============================
def nome_investidor(perna: Mapping[str, Any]) -> str:
    """`otherSourceName` (ou 'Outros') quando a fonte é Outros; senão a própria fonte."""
    fonte = campo_str(perna, "source")
    if fonte == FONTE_OUTROS:
        return campo_str(perna, "otherSourceName") or FONTE_OUTROS
    return fonte


def _eh_investidor(perna: Any) -> bool:
    return isinstance(perna, Mapping) and perna.get("source") != FONTE_CAIXA_LOJA


def valor_recebido(perna: Mapping[str, Any]) -> float:
    return sum(
        to_float(r.get("amount"))
        for r in as_lista(perna.get("paymentsReceived"))
        if isinstance(r, Mapping)
    )


def valor_pendente(perna: Mapping[str, Any]) -> float:
    """Valor investido menos o já devolvido (pode ficar negativo se houve excesso)."""
    return to_float(perna.get("amount")) - valor_recebido(perna)


# =============================
# Derivações
# =============================
def _pagamentos_de(registros: List[Any], origem: str) -> List[PagamentoInvestidor]:
    linhas: List[PagamentoInvestidor] = []
    for reg in as_lista(registros):
        if not isinstance(reg, Mapping):
            continue
        # compra usa collectionName; aplicação usa name
        nome = campo_str(reg, "collectionName") if origem == ORIGEM_COMPRA else campo_str(reg, "name")
        for perna in as_lista(reg.get("payments")):
            if not _eh_investidor(perna):
                continue
            linhas.append(
                PagamentoInvestidor(
                    owner_id=campo_str(reg, "id"),
                    data=reg.get("date"),
                    nome=nome,
                    payment_id=campo_str(perna, "id"),
                    investidor=nome_investidor(perna),
                    valor_investido=to_float(perna.get("amount")),
                    recebimentos=[r for r in as_lista(perna.get("paymentsReceived")) if isinstance(r, Mapping)],
                    origem=origem,
                )
            )
    return linhas


def listar_pagamentos_investidores(compras: List[Any], aplicacoes: List[Any]) -> List[PagamentoInvestidor]:
    """
    Todas as pernas bancadas por investidor, de compras e aplicações.

    Ordenadas pela data do registro, mais recente primeiro (estável).
    """
    linhas = _pagamentos_de(compras, ORIGEM_COMPRA) + _pagamentos_de(aplicacoes, ORIGEM_APLICACAO)
    linhas.sort(key=lambda p: instante(p.data), reverse=True)
    return linhas


def resumir_investidores(pagamentos: List[PagamentoInvestidor]) -> ResumoInvestidores:
    resumo = ResumoInvestidores()
    for p in pagamentos:
        resumo.total_investido += p.valor_investido
        resumo.total_recebido += p.valor_recebido
    return resumo


def agrupar_por_investidor(pagamentos: List[PagamentoInvestidor]) -> Dict[str, ResumoInvestidores]:
    """Totais por nome de investidor (comparação exata do texto)."""
    grupos: Dict[str, ResumoInvestidores] = {}
    for p in pagamentos:
        g = grupos.setdefault(p.investidor, ResumoInvestidores())
        g.total_investido += p.valor_investido
        g.total_recebido += p.valor_recebido
    return grupos


# =============================
# Seleção na tela
# =============================
def chave_pagamento(p: PagamentoInvestidor) -> Tuple[str, str, str]:
    """Identifica a perna sem ambiguidade: (origem, id do registro, id da perna)."""
    return (p.origem, p.owner_id, p.payment_id)


def rotulo_pagamento(p: PagamentoInvestidor) -> str:
    tipo = "Compra" if p.origem == ORIGEM_COMPRA else "Aplicação"
    return f"{p.investidor} • {tipo} {p.nome or p.owner_id} • pendente {formatar_moeda(p.valor_pendente)}"


def opcoes_recebimento(pagamentos: List[PagamentoInvestidor]) -> Dict[Tuple[str, str, str], PagamentoInvestidor]:
    """Pernas com valor pendente, indexadas por `chave_pagamento` (ordem preservada)."""
    return {chave_pagamento(p): p for p in pagamentos if p.valor_pendente > TOLERANCIA_RECEBIMENTO}


def resumo_por_origem(compras: List[Any], aplicacoes: List[Any]) -> Dict[str, ResumoInvestidores]:
    """Totais de investidores separados em 'purchase' e 'application'."""
    return {
        ORIGEM_COMPRA: resumir_investidores(_pagamentos_de(compras, ORIGEM_COMPRA)),
        ORIGEM_APLICACAO: resumir_investidores(_pagamentos_de(aplicacoes, ORIGEM_APLICACAO)),
    }


# =============================
# Mutação (pura)
# =============================
def registrar_recebimento_investidor(
    registros: List[Any],
    owner_id: str,
    payment_id: str,
    recebimento: Mapping[str, Any],
) -> List[Any]:
    """
    Anexa um recebimento à perna `payment_id` do registro `owner_id`.

    Regras:
        - `0 < amount <= pendente + 0.001`
        - `date` no formato `YYYY-MM-DD`
        - registro e perna precisam existir e a perna não pode ser do caixa da loja

    Returns:
        Nova lista de registros. Só o registro alvo, sua lista de pagamentos,
        a perna alvo e seus `paymentsReceived` são objetos novos.

    Raises:
        ValidacaoError: qualquer regra violada (nada é alterado).
    """
    valor = to_float(recebimento.get("amount"))
    if valor <= 0:
        raise ValidacaoError("O valor do recebimento deve ser maior que zero.")

    data = parse_local_date(recebimento.get("date"))
    if data is None:
        raise ValidacaoError("Data do recebimento inválida; use YYYY-MM-DD.")

    itens = as_lista(registros)
    for pos, reg in enumerate(itens):
        if not isinstance(reg, Mapping) or reg.get("id") != owner_id:
            continue
        pernas = as_lista(reg.get("payments"))
        for ppos, perna in enumerate(pernas):
            if not isinstance(perna, Mapping) or perna.get("id") != payment_id:
                continue
            if not _eh_investidor(perna):
                raise ValidacaoError("Pagamentos do caixa da loja não recebem devoluções.")

            pendente = valor_pendente(perna)
            if valor > pendente + TOLERANCIA_RECEBIMENTO:
                logger.warning(
                    "Recebimento recusado (%s > pendente %.2f) em %s/%s",
                    valor, pendente, owner_id, payment_id,
                )
                raise ValidacaoError(
                    f"Valor de R$ {valor:.2f} maior que o pendente (R$ {pendente:.2f})."
                )

            novo = {
                "id": recebimento.get("id") or gerar_id("rec"),
                "amount": valor,
                "date": data.isoformat(),
            }
            nova_perna = {**perna, "paymentsReceived": as_lista(perna.get("paymentsReceived")) + [novo]}
            novas_pernas = list(pernas)
            novas_pernas[ppos] = nova_perna
            novos = list(itens)
            novos[pos] = {**reg, "payments": novas_pernas}
            logger.info(
                "Recebimento de R$ %.2f registrado para %s (%s/%s)",
                valor, nome_investidor(perna), owner_id, payment_id,
            )
            return novos
        raise ValidacaoError(f"Pagamento {payment_id!r} não encontrado no registro {owner_id!r}.")

    raise ValidacaoError(f"Registro {owner_id!r} não encontrado.")
