# tests/test_trocas.py
"""TrocasService: vale com validade padrão, troca em dinheiro e status do vale."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest

from services.trocas import TrocasService, vale_expirado
from shared.tipos import ValidacaoError


@pytest.fixture
def service(repo):
    return TrocasService(repo)


def _troca(**kw):
    troca = {
        "id": "ex1",
        "date": "2024-07-01",
        "customerId": "c1",
        "isBulk": False,
        "items": [
            {"id": "i1", "description": "Blusa", "purchaseValue": 30},
            {"id": "i2", "description": "Saia", "purchaseValue": 20},
        ],
        "paymentMethod": "Vale",
    }
    troca.update(kw)
    return troca


def test_vale_recebe_status_e_validade_de_30_dias(service, repo):
    gravada = service.salvar_troca(_troca())

    assert gravada["totalValue"] == pytest.approx(50)
    assert gravada["status"] == "Pendente"
    assert gravada["valeExpiresAt"] - gravada["date"] == timedelta(days=30)

    lida = repo.load("exchanges")[0]
    assert lida["valeExpiresAt"] == gravada["valeExpiresAt"]
    assert lida["valeExpiresAt"].tzinfo is not None


def test_vale_com_validade_informada(service):
    gravada = service.salvar_troca(_troca(valeExpiresAt="2024-12-31", status="Finalizado"))
    assert gravada["status"] == "Finalizado"
    assert gravada["valeExpiresAt"].astimezone().date().isoformat() == "2024-12-31"


def test_troca_em_dinheiro_sem_status_nem_validade(service):
    gravada = service.salvar_troca(_troca(paymentMethod="Dinheiro", status="Pendente", valeExpiresAt="2024-12-31"))
    assert "status" not in gravada
    assert "valeExpiresAt" not in gravada


def test_troca_em_lote(service):
    gravada = service.salvar_troca(_troca(isBulk=True, bulkQuantity=4, totalValue=90))
    assert gravada["items"] == []
    assert gravada["bulkQuantity"] == 4
    assert gravada["totalValue"] == pytest.approx(90)


@pytest.mark.parametrize(
    "alteracao",
    [
        {"customerId": ""},
        {"paymentMethod": "Pix"},
        {"items": []},
        {"isBulk": True, "bulkQuantity": 0, "totalValue": 10},
        {"isBulk": True, "bulkQuantity": 2, "totalValue": 0},
        {"status": "Cancelado"},
    ],
)
def test_troca_invalida_nao_grava(service, repo, alteracao):
    with pytest.raises(ValidacaoError):
        service.salvar_troca(_troca(**alteracao))
    assert repo.load("exchanges") is None


def test_atualizar_status(service, repo):
    service.salvar_troca(_troca())

    assert service.atualizar_status("ex1", "Pago em Dinheiro")["status"] == "Pago em Dinheiro"
    assert repo.load("exchanges")[0]["status"] == "Pago em Dinheiro"
    assert service.atualizar_status("nao-existe", "Finalizado") is None
    with pytest.raises(ValidacaoError):
        service.atualizar_status("ex1", "Qualquer")


def test_excluir_troca(service, repo):
    service.salvar_troca(_troca())
    service.salvar_troca(_troca(id="ex2"))
    service.excluir_troca("ex1")
    assert [t["id"] for t in repo.load("exchanges")] == ["ex2"]


def test_vale_expirado():
    validade = datetime(2024, 7, 31, tzinfo=timezone.utc)
    troca = {"paymentMethod": "Vale", "status": "Pendente", "valeExpiresAt": validade}

    assert vale_expirado(troca, agora=validade + timedelta(seconds=1)) is True
    assert vale_expirado(troca, agora=validade - timedelta(days=1)) is False
    assert vale_expirado({**troca, "status": "Finalizado"}, agora=validade + timedelta(days=1)) is False
    assert vale_expirado({"paymentMethod": "Dinheiro"}) is False
