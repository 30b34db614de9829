"""
Pacote Services
===============

Camada de serviços de domínio do Boutique Manager.

Módulos
-------
- a_prazo ....... parcelas A Prazo: agrupamento por cliente, atrasos, baixa.
- investidores .. pagamentos bancados por investidores e devoluções.
- caixa ......... fluxo de caixa mensal, fechamento e salários.
- estoque ....... ajuste de estoque pelo delta líquido da venda.
- vendas ........ gravação/exclusão de vendas (`VendasService`).
- compras ....... compras e aplicações (`ComprasService`).
- trocas ........ trocas por vale/dinheiro (`TrocasService`).
- cadastros ..... produtos, clientes e pedidos específicos.
- backup ........ exportação e importação das coleções.
- relatorios .... indicadores e tabelas (pandas).
"""

from __future__ import annotations

from . import a_prazo, backup, cadastros, caixa, compras, estoque, investidores, relatorios, trocas, vendas

__all__ = [
    "a_prazo",
    "backup",
    "cadastros",
    "caixa",
    "compras",
    "estoque",
    "investidores",
    "relatorios",
    "trocas",
    "vendas",
]
