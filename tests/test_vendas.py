# tests/test_vendas.py
"""VendasService: gravação com ajuste de estoque, exclusão e baixa de parcelas."""

from __future__ import annotations

from datetime import date, datetime

import pytest

from services.vendas import VendasService
from shared.tipos import ValidacaoError


@pytest.fixture
def service(repo):
    repo.save("products", [
        {"id": "p1", "name": "Vestido", "price": 50, "purchasePrice": 20, "quantity": 10},
        {"id": "p2", "name": "Blusa", "price": 30, "purchasePrice": 10, "quantity": 5},
    ])
    return VendasService(repo)


def _venda(**kw):
    venda = {
        "id": "sale-1",
        "date": "2024-07-10",
        "sellerId": "v1",
        "customerId": "c1",
        "items": [{"productId": "p1", "quantity": 2, "unitPrice": 50}],
        "payments": [
            {"id": "pix", "type": "Pix", "amount": 60},
            {"id": "prazo", "type": "A Prazo", "amount": 40,
             "paymentDates": [{"date": "2024-08-10"}, {"date": "2024-09-10", "status": "Pendente"}]},
        ],
    }
    venda.update(kw)
    return venda


def _estoque(repo):
    return {p["id"]: p["quantity"] for p in repo.load("products")}


def test_salvar_venda_nova(service, repo):
    gravada = service.salvar_venda(_venda())

    assert gravada["total"] == pytest.approx(100)
    assert isinstance(gravada["date"], datetime)
    prazo = gravada["payments"][1]
    assert prazo["installments"] == 2
    assert [p["status"] for p in prazo["paymentDates"]] == ["Pendente", "Pendente"]

    assert _estoque(repo) == {"p1": 8, "p2": 5}
    vendas = repo.load("sales")
    assert [v["id"] for v in vendas] == ["sale-1"]
    assert vendas[0]["date"].tzinfo is not None


def test_nova_venda_entra_no_inicio_e_gera_id(service, repo):
    service.salvar_venda(_venda())
    outra = service.salvar_venda(_venda(id=None, items=[{"productId": "p2", "quantity": 1, "unitPrice": 100}]))

    assert outra["id"].startswith("sale-")
    assert [v["id"] for v in repo.load("sales")] == [outra["id"], "sale-1"]
    assert _estoque(repo) == {"p1": 8, "p2": 4}


def test_editar_venda_aplica_delta_liquido(service, repo):
    service.salvar_venda(_venda())
    service.salvar_venda(_venda(
        items=[{"productId": "p1", "quantity": 1, "unitPrice": 50}, {"productId": "p2", "quantity": 1, "unitPrice": 50}],
    ))

    assert _estoque(repo) == {"p1": 9, "p2": 4}
    assert len(repo.load("sales")) == 1


def test_total_pago_diferente_do_total_nao_grava(service, repo):
    venda = _venda(payments=[{"id": "pix", "type": "Pix", "amount": 99.98}])
    with pytest.raises(ValidacaoError):
        service.salvar_venda(venda)
    assert repo.load("sales") is None
    assert _estoque(repo) == {"p1": 10, "p2": 5}


def test_diferenca_dentro_da_tolerancia_e_aceita(service):
    venda = _venda(payments=[{"id": "pix", "type": "Pix", "amount": 99.995}])
    assert service.salvar_venda(venda)["total"] == pytest.approx(100)


@pytest.mark.parametrize(
    "alteracao",
    [
        {"customerId": ""},
        {"items": []},
        {"items": [{"productId": "p1", "quantity": 0, "unitPrice": 50}]},
        {"payments": [{"id": "x", "type": "Cheque", "amount": 100}]},
        {"payments": [{"id": "x", "type": "A Prazo", "amount": 100, "paymentDates": []}]},
        {"payments": [{"id": "x", "type": "A Prazo", "amount": 100, "paymentDates": [{"date": "amanhã"}]}]},
        {"date": "10/07/2024"},
    ],
)
def test_venda_invalida(service, alteracao):
    with pytest.raises(ValidacaoError):
        service.salvar_venda(_venda(**alteracao))


def test_excluir_venda_devolve_estoque(service, repo):
    service.salvar_venda(_venda())

    assert service.excluir_venda("sale-1") is True
    assert repo.load("sales") == []
    assert _estoque(repo) == {"p1": 10, "p2": 5}


def test_excluir_venda_desconhecida_nao_faz_nada(service, repo):
    service.salvar_venda(_venda())
    assert service.excluir_venda("nao-existe") is False
    assert len(repo.load("sales")) == 1


def test_atualizar_status_parcela_persiste(service, repo):
    service.salvar_venda(_venda())

    venda = service.atualizar_status_parcela("sale-1", "prazo", 0, "Pago", hoje=date(2024, 8, 9))

    assert venda["payments"][1]["paymentDates"][0]["paymentDate"] == "2024-08-09"
    gravada = repo.load("sales")[0]
    assert gravada["payments"][1]["paymentDates"][0] == {"date": "2024-08-10", "status": "Pago", "paymentDate": "2024-08-09"}

    service.atualizar_status_parcela("sale-1", "prazo", 0, "Pendente")
    assert repo.load("sales")[0]["payments"][1]["paymentDates"][0] == {"date": "2024-08-10", "status": "Pendente"}


def test_atualizar_status_venda_inexistente(service):
    assert service.atualizar_status_parcela("nao-existe", "prazo", 0, "Pago") is None
