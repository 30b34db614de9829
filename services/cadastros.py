# services/cadastros.py
"""
Cadastros: produtos, clientes e pedidos específicos
===================================================

Serviços de gravação dos cadastros básicos. Todos seguem o mesmo fluxo dos
demais serviços: validam primeiro (`ValidacaoError`, nada é gravado) e depois
sobrescrevem a coleção inteira.

- Produtos: nome obrigatório; preços e quantidade não negativos. Produto com
  histórico de vendas não pode ser excluído.
- Clientes: nome obrigatório; status e origem dentro das listas conhecidas.
  Cliente com vendas não pode ser excluído. `buscar_ou_criar` devolve o
  cliente de mesmo nome (sem diferenciar maiúsculas) ou cadastra um novo com
  origem `Outros`, como no cadastro rápido de vendas, trocas e pedidos.
- Pedidos específicos: cliente e produto obrigatórios; status padrão
  `Pendente`.
"""

from __future__ import annotations

import logging
from datetime import date, datetime, timezone
from typing import Any, Dict, Iterable, List, Mapping, Optional, Set, Tuple

from repository.colecoes_repository import (
    ColecoesRepository,
    excluir_registro,
    salvar_registro,
)
from shared.datas import parse_local_date
from shared.ids import gerar_id, sanitize
from shared.safe_utils import as_lista, to_float
from shared.tipos import (
    CLIENTE_NOVA,
    CONDICOES_PRODUTO,
    ORIGEM_CLIENTE_OUTROS,
    ORIGEM_CLIENTE_PADRAO,
    ORIGENS_CLIENTE,
    PEDIDO_PENDENTE,
    STATUS_CLIENTE,
    STATUS_PEDIDO,
    ValidacaoError,
)
from utils.utils import arredondar_moeda

logger = logging.getLogger(__name__)

__all__ = [
    "ProdutosService",
    "ClientesService",
    "PedidosService",
    "produtos_vendidos",
    "clientes_com_vendas",
]


def _carimbo(valor: Any) -> datetime:
    """`createdAt`: datetime, date ou 'YYYY-MM-DD'; vazio -> agora (UTC)."""
    if not valor:
        return datetime.now(timezone.utc)
    if isinstance(valor, datetime):
        return valor if valor.tzinfo else valor.astimezone()
    d = valor if isinstance(valor, date) else parse_local_date(valor)
    if d is None:
        raise ValidacaoError("Data de cadastro inválida.")
    return datetime(d.year, d.month, d.day, 12).astimezone(timezone.utc)


def produtos_vendidos(vendas: Iterable[Any]) -> Set[str]:
    """IDs de produto que aparecem em algum item de venda."""
    ids: Set[str] = set()
    for venda in as_lista(vendas):
        if not isinstance(venda, Mapping):
            continue
        for item in as_lista(venda.get("items")):
            if isinstance(item, Mapping) and item.get("productId"):
                ids.add(str(item["productId"]))
    return ids


def clientes_com_vendas(vendas: Iterable[Any]) -> Set[str]:
    return {
        str(v["customerId"])
        for v in as_lista(vendas)
        if isinstance(v, Mapping) and v.get("customerId")
    }


# =============================
# Produtos
# =============================
class ProdutosService:
    """Cadastro de produtos (estoque)."""

    def __init__(self, repo: Any) -> None:
        self.repo = repo if isinstance(repo, ColecoesRepository) else ColecoesRepository(repo)

    def listar(self) -> List[Any]:
        return self.repo.load_lista("products")

    def salvar_produto(self, produto: Mapping[str, Any]) -> Dict[str, Any]:
        """
        Valida e grava o produto (substitui pelo `id` ou insere no fim da lista).

        Raises:
            ValidacaoError: nome vazio, preço/custo negativo, quantidade
                negativa ou fracionária, condição desconhecida.
        """
        nome = sanitize(produto.get("name"))
        if not nome:
            raise ValidacaoError("Informe o nome do produto.")

        preco = to_float(produto.get("price"))
        custo = to_float(produto.get("purchasePrice"))
        if preco < 0 or custo < 0:
            raise ValidacaoError("Preço de venda e de compra não podem ser negativos.")

        qtd = to_float(produto.get("quantity"))
        if qtd < 0 or not qtd.is_integer():
            raise ValidacaoError("Quantidade em estoque inválida.")

        condicao = produto.get("condition") or CONDICOES_PRODUTO[0]
        if condicao not in CONDICOES_PRODUTO:
            raise ValidacaoError(f"Condição inválida: {condicao!r}")

        novo = {
            **produto,
            "id": produto.get("id") or gerar_id("prod"),
            "name": nome,
            "price": arredondar_moeda(preco),
            "purchasePrice": arredondar_moeda(custo),
            "quantity": int(qtd),
            "condition": condicao,
            "createdAt": _carimbo(produto.get("createdAt")),
        }
        for campo in ("description", "category", "brand", "size", "color"):
            novo[campo] = sanitize(produto.get(campo))

        self.repo.save("products", salvar_registro(self.listar(), novo, no_inicio=False))
        logger.info("Produto %s salvo (%s, qtd %d)", novo["id"], nome, novo["quantity"])
        return novo

    def excluir_produtos(self, ids: Iterable[str]) -> Tuple[List[str], List[str]]:
        """
        Exclui os produtos sem histórico de vendas.

        Returns:
            (excluídos, bloqueados). Produtos já vendidos ficam em `bloqueados`
            e continuam cadastrados; IDs desconhecidos são ignorados.
        """
        produtos = self.listar()
        existentes = {str(p.get("id")) for p in produtos if isinstance(p, Mapping)}
        vendidos = produtos_vendidos(self.repo.load_lista("sales"))

        alvo = [str(i) for i in ids if str(i) in existentes]
        bloqueados = [i for i in alvo if i in vendidos]
        excluidos = [i for i in alvo if i not in vendidos]

        if excluidos:
            apagar = set(excluidos)
            self.repo.save(
                "products",
                [p for p in produtos if not (isinstance(p, Mapping) and str(p.get("id")) in apagar)],
            )
            logger.info("Produtos excluídos: %s", ", ".join(excluidos))
        if bloqueados:
            logger.warning("Produtos com vendas não excluídos: %s", ", ".join(bloqueados))
        return excluidos, bloqueados


# =============================
# Clientes
# =============================
class ClientesService:
    """Cadastro de clientes."""

    def __init__(self, repo: Any) -> None:
        self.repo = repo if isinstance(repo, ColecoesRepository) else ColecoesRepository(repo)

    def listar(self) -> List[Any]:
        return self.repo.load_lista("customers")

    def salvar_cliente(self, cliente: Mapping[str, Any]) -> Dict[str, Any]:
        """
        Valida e grava o cliente (substitui pelo `id` ou insere no início).

        Origem `Outros` guarda `sourceOther`; `Indicação` guarda
        `sourceIndicatorName`. Os dois campos são limpos nas demais origens.
        """
        nome = sanitize(cliente.get("name"))
        if not nome:
            raise ValidacaoError("Informe o nome do cliente.")

        status = cliente.get("status") or CLIENTE_NOVA
        if status not in STATUS_CLIENTE:
            raise ValidacaoError(f"Status de cliente inválido: {status!r}")
        origem = cliente.get("source") or ORIGEM_CLIENTE_PADRAO
        if origem not in ORIGENS_CLIENTE:
            raise ValidacaoError(f"Origem de cliente inválida: {origem!r}")

        novo = {
            **cliente,
            "id": cliente.get("id") or gerar_id("cust"),
            "name": nome,
            "phone": sanitize(cliente.get("phone")),
            "status": status,
            "source": origem,
            "createdAt": _carimbo(cliente.get("createdAt")),
        }
        if origem == ORIGEM_CLIENTE_OUTROS:
            novo["sourceOther"] = sanitize(cliente.get("sourceOther"))
        else:
            novo.pop("sourceOther", None)
        if origem == "Indicação":
            novo["sourceIndicatorName"] = sanitize(cliente.get("sourceIndicatorName"))
        else:
            novo.pop("sourceIndicatorName", None)

        self.repo.save("customers", salvar_registro(self.listar(), novo))
        logger.info("Cliente %s salvo (%s)", novo["id"], nome)
        return novo

    def buscar_ou_criar(self, nome: str) -> Dict[str, Any]:
        """Cliente de mesmo nome (sem diferenciar maiúsculas) ou um novo cadastro."""
        alvo = sanitize(nome)
        if not alvo:
            raise ValidacaoError("Por favor, selecione ou digite o nome de um cliente.")
        for c in self.listar():
            if isinstance(c, Mapping) and sanitize(c.get("name")).casefold() == alvo.casefold():
                return dict(c)
        return self.salvar_cliente({"name": alvo, "source": ORIGEM_CLIENTE_OUTROS})

    def excluir_cliente(self, cliente_id: str) -> bool:
        """
        Exclui o cliente. Id desconhecido não faz nada (False).

        Raises:
            ValidacaoError: o cliente tem vendas registradas.
        """
        clientes = self.listar()
        if not any(isinstance(c, Mapping) and c.get("id") == cliente_id for c in clientes):
            return False
        if str(cliente_id) in clientes_com_vendas(self.repo.load_lista("sales")):
            raise ValidacaoError("O cliente não pode ser excluído pois possui um histórico de vendas associado.")
        self.repo.save("customers", excluir_registro(clientes, cliente_id))
        logger.info("Cliente %s excluído", cliente_id)
        return True


# =============================
# Pedidos específicos
# =============================
class PedidosService:
    """Pedidos de peças que a cliente quer e a loja ainda vai buscar."""

    def __init__(self, repo: Any) -> None:
        self.repo = repo if isinstance(repo, ColecoesRepository) else ColecoesRepository(repo)

    def listar(self) -> List[Any]:
        return self.repo.load_lista("specificOrders")

    def salvar_pedido(self, pedido: Mapping[str, Any]) -> Dict[str, Any]:
        if not sanitize(pedido.get("customerId")) or not sanitize(pedido.get("product")):
            raise ValidacaoError("Por favor, preencha o nome do cliente e do produto.")
        status = pedido.get("status") or PEDIDO_PENDENTE
        if status not in STATUS_PEDIDO:
            raise ValidacaoError(f"Status de pedido inválido: {status!r}")

        evento = pedido.get("eventDate")
        if evento and parse_local_date(evento) is None:
            raise ValidacaoError("Data do evento inválida.")

        novo = {
            **pedido,
            "id": pedido.get("id") or gerar_id("order"),
            "product": sanitize(pedido.get("product")),
            "size": sanitize(pedido.get("size")),
            "color": sanitize(pedido.get("color")),
            "status": status,
            "createdAt": _carimbo(pedido.get("createdAt")),
        }
        if not evento:
            novo.pop("eventDate", None)

        self.repo.save("specificOrders", salvar_registro(self.listar(), novo))
        logger.info("Pedido %s salvo (%s)", novo["id"], novo["product"])
        return novo

    def atualizar_status(self, pedido_id: str, status: str) -> Optional[Dict[str, Any]]:
        if status not in STATUS_PEDIDO:
            raise ValidacaoError(f"Status de pedido inválido: {status!r}")
        pedidos = self.listar()
        for pos, pedido in enumerate(pedidos):
            if isinstance(pedido, Mapping) and pedido.get("id") == pedido_id:
                atualizado = {**pedido, "status": status}
                novos = list(pedidos)
                novos[pos] = atualizado
                self.repo.save("specificOrders", novos)
                logger.info("Pedido %s -> %s", pedido_id, status)
                return atualizado
        logger.warning("Pedido %s não encontrado para atualizar status", pedido_id)
        return None

    def excluir_pedido(self, pedido_id: str) -> None:
        pedidos = self.listar()
        novos = excluir_registro(pedidos, pedido_id)
        if len(novos) != len(pedidos):
            self.repo.save("specificOrders", novos)
            logger.info("Pedido %s excluído", pedido_id)
