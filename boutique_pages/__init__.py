"""
Pacote boutique_pages
=====================

Páginas Streamlit do Boutique Manager. Cada módulo expõe uma função
`pagina_<nome>(caminho_banco)` chamada pelo roteador de `main.py`; as
páginas só coletam argumentos, chamam os serviços e mostram mensagens.

Páginas
-------
- pagina_dashboard ..... indicadores e gráficos de vendas
- pagina_vendas ........ registro e exclusão de vendas
- pagina_produtos ...... cadastro de produtos e exclusão em lote
- pagina_clientes ...... cadastro de clientes e pedidos específicos
- pagina_trocas ........ trocas por vale/dinheiro e baixa de vales
- pagina_compras ....... compras e aplicações com fontes de pagamento
- pagina_caixa ......... fluxo mensal, saldo anterior, salários e fechamento
- pagina_a_prazo ....... parcelas por cliente, atrasos e baixa de parcelas
- pagina_investidores .. resumo e devoluções a investidores
- pagina_backup ........ exportação e importação de dados
"""
