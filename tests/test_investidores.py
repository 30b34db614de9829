# tests/test_investidores.py
"""Pagamentos bancados por investidores: listagem, resumos e devoluções."""

from __future__ import annotations

import copy
from datetime import datetime, timezone

import pytest

from services.investidores import (
    agrupar_por_investidor,
    chave_pagamento,
    listar_pagamentos_investidores,
    opcoes_recebimento,
    registrar_recebimento_investidor,
    resumir_investidores,
    resumo_por_origem,
    rotulo_pagamento,
    valor_pendente,
)
from shared.tipos import ValidacaoError


@pytest.fixture
def compras():
    return [
        {
            "id": "pur1",
            "date": datetime(2024, 7, 1, 12, tzinfo=timezone.utc),
            "collectionName": "Verão",
            "payments": [
                {"id": "pp1", "source": "Caixa da loja", "amount": 100,
                 "paymentsReceived": [{"id": "r0", "amount": 100, "date": "2024-07-01"}]},
                {"id": "pp2", "source": "Outros", "otherSourceName": "", "amount": 300, "paymentsReceived": []},
            ],
        },
        {
            "id": "pur2",
            "date": datetime(2024, 6, 1, 12, tzinfo=timezone.utc),
            "collectionName": "Inverno",
            "payments": [
                {"id": "pp3", "source": "Outros", "otherSourceName": "Tia Rosa", "amount": 80, "paymentsReceived": None},
            ],
        },
    ]


@pytest.fixture
def aplicacoes():
    return [
        {
            "id": "apl1",
            "date": datetime(2024, 7, 5, 12, tzinfo=timezone.utc),
            "name": "Vitrine",
            "payments": [
                {"id": "pa1", "source": "Maikellen", "amount": 200,
                 "paymentsReceived": [{"id": "r1", "amount": 50, "date": "2024-07-10"}]},
            ],
        }
    ]


# ---------------------------------------------------------------------------
# listagem e resumos
# ---------------------------------------------------------------------------


def test_lista_so_pernas_de_investidor_mais_recentes_primeiro(compras, aplicacoes):
    linhas = listar_pagamentos_investidores(compras, aplicacoes)

    assert [(p.owner_id, p.payment_id) for p in linhas] == [("apl1", "pa1"), ("pur1", "pp2"), ("pur2", "pp3")]
    assert [p.origem for p in linhas] == ["application", "purchase", "purchase"]
    assert [p.investidor for p in linhas] == ["Maikellen", "Outros", "Tia Rosa"]
    assert linhas[0].nome == "Vitrine"
    assert linhas[1].nome == "Verão"
    # paymentsReceived ausente/inválido vira lista vazia
    assert linhas[2].recebimentos == []


def test_resumo_geral_e_por_investidor(compras, aplicacoes):
    linhas = listar_pagamentos_investidores(compras, aplicacoes)

    resumo = resumir_investidores(linhas)
    assert resumo.total_investido == pytest.approx(580)
    assert resumo.total_recebido == pytest.approx(50)
    assert resumo.total_pendente == pytest.approx(530)

    grupos = agrupar_por_investidor(linhas)
    assert set(grupos) == {"Maikellen", "Outros", "Tia Rosa"}
    assert grupos["Maikellen"].total_pendente == pytest.approx(150)
    assert grupos["Outros"].total_investido == pytest.approx(300)


def test_resumo_por_origem(compras, aplicacoes):
    origem = resumo_por_origem(compras, aplicacoes)
    assert origem["purchase"].total_investido == pytest.approx(380)
    assert origem["purchase"].total_recebido == pytest.approx(0)
    assert origem["application"].total_investido == pytest.approx(200)
    assert origem["application"].total_recebido == pytest.approx(50)


def test_sem_registros():
    assert listar_pagamentos_investidores([], None) == []
    assert resumir_investidores([]).total_pendente == 0


# ---------------------------------------------------------------------------
# devoluções
# ---------------------------------------------------------------------------


def test_devolucao_do_valor_pendente_inteiro_e_aceita(compras):
    novos = registrar_recebimento_investidor(compras, "pur1", "pp2", {"amount": 300, "date": "2024-07-15"})

    perna = novos[0]["payments"][1]
    assert len(perna["paymentsReceived"]) == 1
    assert perna["paymentsReceived"][0]["amount"] == 300
    assert perna["paymentsReceived"][0]["date"] == "2024-07-15"
    assert perna["paymentsReceived"][0]["id"].startswith("rec-")
    assert valor_pendente(perna) == pytest.approx(0)


def test_devolucao_acima_do_pendente_e_recusada(compras):
    antes = copy.deepcopy(compras)
    with pytest.raises(ValidacaoError):
        registrar_recebimento_investidor(compras, "pur1", "pp2", {"amount": 300.01, "date": "2024-07-15"})
    assert compras == antes


def test_devolucoes_parciais_ate_zerar(compras):
    lista = registrar_recebimento_investidor(compras, "pur1", "pp2", {"amount": 100, "date": "2024-07-15"})
    lista = registrar_recebimento_investidor(lista, "pur1", "pp2", {"amount": 200, "date": "2024-07-20"})

    assert valor_pendente(lista[0]["payments"][1]) == pytest.approx(0)
    with pytest.raises(ValidacaoError):
        registrar_recebimento_investidor(lista, "pur1", "pp2", {"amount": 0.01, "date": "2024-07-21"})


def test_devolucao_so_altera_a_perna_alvo(compras):
    novos = registrar_recebimento_investidor(compras, "pur1", "pp2", {"amount": 10, "date": "2024-07-15"})

    assert novos is not compras
    assert novos[1] is compras[1]
    assert novos[0]["payments"][0] is compras[0]["payments"][0]
    assert compras[0]["payments"][1]["paymentsReceived"] == []


def test_devolucao_tolera_recebimentos_invalidos(compras):
    novos = registrar_recebimento_investidor(compras, "pur2", "pp3", {"amount": 80, "date": "2024-07-15"})
    assert [r["amount"] for r in novos[1]["payments"][0]["paymentsReceived"]] == [80]


@pytest.mark.parametrize(
    "owner_id, payment_id, recebimento",
    [
        ("pur1", "pp2", {"amount": 0, "date": "2024-07-15"}),
        ("pur1", "pp2", {"amount": -5, "date": "2024-07-15"}),
        ("pur1", "pp2", {"amount": 10, "date": "15/07/2024"}),
        ("pur1", "pp1", {"amount": 10, "date": "2024-07-15"}),
        ("pur1", "nao-existe", {"amount": 10, "date": "2024-07-15"}),
        ("nao-existe", "pp2", {"amount": 10, "date": "2024-07-15"}),
    ],
)
def test_devolucao_invalida_levanta(compras, owner_id, payment_id, recebimento):
    with pytest.raises(ValidacaoError):
        registrar_recebimento_investidor(compras, owner_id, payment_id, recebimento)


def test_opcoes_de_devolucao_com_rotulos_iguais_ficam_separadas():
    perna = {"id": "pp1", "source": "Outros", "otherSourceName": "Tia Rosa", "amount": 100, "paymentsReceived": []}
    mesmo_dia = datetime(2024, 7, 1, 12, tzinfo=timezone.utc)
    compras = [
        {"id": "pur1", "date": mesmo_dia, "collectionName": "Verão", "payments": [dict(perna)]},
        {"id": "pur2", "date": mesmo_dia, "collectionName": "Verão", "payments": [dict(perna)]},
    ]
    aplicacoes = [{"id": "pur1", "date": mesmo_dia, "name": "Verão", "payments": [dict(perna)]}]

    opcoes = opcoes_recebimento(listar_pagamentos_investidores(compras, aplicacoes))

    assert set(opcoes) == {
        ("purchase", "pur1", "pp1"),
        ("purchase", "pur2", "pp1"),
        ("application", "pur1", "pp1"),
    }
    assert all(chave_pagamento(p) == k for k, p in opcoes.items())
    # as duas compras têm o mesmo texto; a chave é que distingue
    rotulos = [rotulo_pagamento(opcoes[("purchase", k, "pp1")]) for k in ("pur1", "pur2")]
    assert rotulos[0] == rotulos[1]


def test_opcoes_de_devolucao_ignoram_pernas_quitadas(compras, aplicacoes):
    compras[1]["payments"][0]["paymentsReceived"] = [{"id": "r", "amount": 80, "date": "2024-07-01"}]

    opcoes = opcoes_recebimento(listar_pagamentos_investidores(compras, aplicacoes))

    assert list(opcoes) == [("application", "apl1", "pa1"), ("purchase", "pur1", "pp2")]
