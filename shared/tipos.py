"""
Módulo Tipos (Shared)
=====================

Constantes de domínio, erros e linhas derivadas usadas pelos serviços.

Constantes
----------
- Formas de pagamento de venda (`TIPO_*`), com `TIPO_A_PRAZO` marcando as
  pernas parceladas.
- Status de parcela (`STATUS_PENDENTE`, `STATUS_PAGO`).
- Fontes de pagamento de compras/aplicações (`FONTE_CAIXA_LOJA` é o caixa
  da própria loja; qualquer outra fonte é um investidor).
- Trocas: `TROCA_VALE`, `TROCA_DINHEIRO` e os status do vale.
- Cadastros: condição do produto, status/origem do cliente e status do
  pedido específico.
- Tolerâncias: `TOLERANCIA_RECEBIMENTO` (0.001) e `TOLERANCIA_TOTAL` (0.01).

Erros
-----
- `ValidacaoError`: mutação rejeitada antes de tocar no estado.
- `BackupInvalidoError`: arquivo de backup corrompido ou sem coleções.

Ambos herdam de `ValueError`, então quem já trata `ValueError` continua
funcionando.

Linhas derivadas
----------------
Dataclasses recalculadas sob demanda (nunca persistidas):
`ParcelaInfo`, `GrupoCliente`, `AtrasoInfo`, `PagamentoInvestidor`,
`ResumoInvestidores`, `EntradasCaixa`, `SaidasCaixa`, `FluxoCaixaMensal`.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, List, Literal, Optional

# ------------------ Formas de pagamento (venda) ------------------

TIPO_CREDITO = "Crédito"
TIPO_DEBITO = "Débito"
TIPO_PIX = "Pix"
TIPO_DINHEIRO = "Dinheiro"
TIPO_A_PRAZO = "A Prazo"
TIPO_VALE = "Vale"
TIPO_TROCA_SERVICO = "Troca/Serviço"

TIPOS_PAGAMENTO = {
    TIPO_CREDITO,
    TIPO_DEBITO,
    TIPO_PIX,
    TIPO_DINHEIRO,
    TIPO_A_PRAZO,
    TIPO_VALE,
    TIPO_TROCA_SERVICO,
}

# ------------------ Parcelas ------------------

STATUS_PENDENTE = "Pendente"
STATUS_PAGO = "Pago"

StatusParcela = Literal["Pendente", "Pago"]
STATUS_PARCELA = {STATUS_PENDENTE, STATUS_PAGO}

# ------------------ Fontes (compras / aplicações) ------------------

FONTE_CAIXA_LOJA = "Caixa da loja"
FONTE_OUTROS = "Outros"
FONTES_PAGAMENTO = {FONTE_CAIXA_LOJA, "Maikellen", "Dhaluma", FONTE_OUTROS}

ORIGEM_COMPRA = "purchase"
ORIGEM_APLICACAO = "application"
OrigemInvestimento = Literal["purchase", "application"]

# ------------------ Trocas ------------------

TROCA_VALE = "Vale"
TROCA_DINHEIRO = "Dinheiro"

VALE_PENDENTE = "Pendente"
VALE_FINALIZADO = "Finalizado"
VALE_PAGO_EM_DINHEIRO = "Pago em Dinheiro"
STATUS_VALE = {VALE_PENDENTE, VALE_FINALIZADO, VALE_PAGO_EM_DINHEIRO}

DIAS_VALIDADE_VALE = 30

# ------------------ Cadastros ------------------

CONDICOES_PRODUTO = ("Novo", "Usado")

CLIENTE_NOVA = "Nova"
STATUS_CLIENTE = (CLIENTE_NOVA, "Regular", "Top 10")
ORIGEM_CLIENTE_OUTROS = "Outros"
ORIGEM_CLIENTE_PADRAO = "Studio MB"
ORIGENS_CLIENTE = ("Instagram", "Indicação", ORIGEM_CLIENTE_PADRAO, "Studio DT", ORIGEM_CLIENTE_OUTROS)

PEDIDO_PENDENTE = "Pendente"
STATUS_PEDIDO = (PEDIDO_PENDENTE, "Buscando", "Entregue", "Cancelado")

VENDEDOR_OUTROS = "seller-3"
VENDEDORES = {"seller-1": "Maikellen", "seller-2": "Dhaluma", VENDEDOR_OUTROS: "Outros"}

# ------------------ Salários ------------------

BENEFICIARIO_OUTROS = "Outros"
BENEFICIARIOS_SALARIO = {"Maikellen", "Dhaluma", BENEFICIARIO_OUTROS}

# ------------------ Tolerâncias ------------------

TOLERANCIA_RECEBIMENTO = 0.001
TOLERANCIA_TOTAL = 0.01

# ------------------ Faixas de atraso ------------------

FAIXAS_ATRASO = ("3-5", "6-10", "11-15", ">15")


# ------------------ Erros ------------------

class ValidacaoError(ValueError):
    """Mutação rejeitada por pré-condição; nenhum estado foi alterado."""


class BackupInvalidoError(ValueError):
    """Arquivo de backup ilegível ou sem nenhuma coleção conhecida."""


# ------------------ Linhas derivadas ------------------

@dataclass
class ParcelaInfo:
    """Uma parcela A Prazo com o valor derivado da perna."""
    customer_id: str
    customer_name: str
    sale_id: str
    payment_id: str
    indice: int
    data: str
    status: str
    payment_date: Optional[str]
    valor: float


@dataclass
class GrupoCliente:
    customer_id: str
    customer_name: str
    total_devido: float = 0.0
    parcelas: List[ParcelaInfo] = field(default_factory=list)


@dataclass
class AtrasoInfo:
    customer_name: str
    sale_id: str
    payment_id: str
    indice: int
    data: str
    dias: int
    valor: float


@dataclass
class PagamentoInvestidor:
    """Perna de compra/aplicação financiada por investidor (não pelo caixa da loja)."""
    owner_id: str
    data: Any
    nome: str
    payment_id: str
    investidor: str
    valor_investido: float
    recebimentos: List[Dict[str, Any]]
    origem: str

    @property
    def valor_recebido(self) -> float:
        total = 0.0
        for r in self.recebimentos:
            try:
                total += float(r.get("amount") or 0.0)
            except (TypeError, ValueError, AttributeError):
                continue
        return total

    @property
    def valor_pendente(self) -> float:
        return self.valor_investido - self.valor_recebido


@dataclass
class ResumoInvestidores:
    total_investido: float = 0.0
    total_recebido: float = 0.0

    @property
    def total_pendente(self) -> float:
        return self.total_investido - self.total_recebido


@dataclass
class EntradasCaixa:
    vendas_a_vista: float = 0.0
    a_prazo_recebido: float = 0.0
    saldo_anterior: float = 0.0

    @property
    def total(self) -> float:
        return self.vendas_a_vista + self.a_prazo_recebido + self.saldo_anterior


@dataclass
class SaidasCaixa:
    compras: float = 0.0
    aplicacoes: float = 0.0
    trocas: float = 0.0
    investidores: float = 0.0
    salarios: float = 0.0

    @property
    def total(self) -> float:
        return self.compras + self.aplicacoes + self.trocas + self.investidores + self.salarios


@dataclass
class FluxoCaixaMensal:
    mes: str
    entradas: EntradasCaixa
    saidas: SaidasCaixa
    salarios_do_mes: List[Dict[str, Any]] = field(default_factory=list)
    calculado_em: Optional[datetime] = None

    @property
    def saldo_final(self) -> float:
        return self.entradas.total - self.saidas.total


__all__ = [
    "TIPO_CREDITO", "TIPO_DEBITO", "TIPO_PIX", "TIPO_DINHEIRO", "TIPO_A_PRAZO",
    "TIPO_VALE", "TIPO_TROCA_SERVICO", "TIPOS_PAGAMENTO",
    "STATUS_PENDENTE", "STATUS_PAGO", "StatusParcela", "STATUS_PARCELA",
    "FONTE_CAIXA_LOJA", "FONTE_OUTROS", "FONTES_PAGAMENTO",
    "ORIGEM_COMPRA", "ORIGEM_APLICACAO", "OrigemInvestimento",
    "TROCA_VALE", "TROCA_DINHEIRO", "VALE_PENDENTE", "VALE_FINALIZADO",
    "VALE_PAGO_EM_DINHEIRO", "STATUS_VALE", "DIAS_VALIDADE_VALE",
    "CONDICOES_PRODUTO", "CLIENTE_NOVA", "STATUS_CLIENTE", "ORIGEM_CLIENTE_OUTROS",
    "ORIGEM_CLIENTE_PADRAO", "ORIGENS_CLIENTE", "PEDIDO_PENDENTE", "STATUS_PEDIDO",
    "VENDEDOR_OUTROS", "VENDEDORES",
    "BENEFICIARIO_OUTROS", "BENEFICIARIOS_SALARIO",
    "TOLERANCIA_RECEBIMENTO", "TOLERANCIA_TOTAL", "FAIXAS_ATRASO",
    "ValidacaoError", "BackupInvalidoError",
    "ParcelaInfo", "GrupoCliente", "AtrasoInfo", "PagamentoInvestidor",
    "ResumoInvestidores", "EntradasCaixa", "SaidasCaixa", "FluxoCaixaMensal",
]
