# tests/test_a_prazo.py
"""Parcelas A Prazo: agrupamento por cliente, faixas de atraso e baixa de parcelas."""

from __future__ import annotations

import copy
from datetime import date, timedelta

import pytest

from services.a_prazo import (
    agrupar_parcelas_por_cliente,
    alternar_status_parcela,
    calcular_atrasos,
    meses_com_parcelas,
    total_a_receber,
    valor_por_parcela,
)
from shared.tipos import ValidacaoError

HOJE = date(2024, 7, 20)


def _venda(sid, cid, amount, parcelas, pid="pay1", extra=None):
    pagamentos = [{"id": pid, "type": "A Prazo", "amount": amount, "paymentDates": parcelas}]
    if extra:
        pagamentos.insert(0, extra)
    return {"id": sid, "customerId": cid, "date": "2024-07-01", "items": [], "total": amount, "payments": pagamentos}


def _pend(d):
    return {"date": d, "status": "Pendente"}


def _venc_ha(dias):
    return (HOJE - timedelta(days=dias)).isoformat()


# ---------------------------------------------------------------------------
# valor por parcela
# ---------------------------------------------------------------------------


def test_valor_por_parcela_divide_pelo_numero_de_datas():
    assert valor_por_parcela({"amount": 300, "paymentDates": [{}, {}, {}]}) == pytest.approx(100)


def test_valor_por_parcela_sem_datas_usa_divisor_um():
    assert valor_por_parcela({"amount": 80, "paymentDates": []}) == pytest.approx(80)
    assert valor_por_parcela({"amount": 80}) == pytest.approx(80)


@pytest.mark.parametrize("n", range(1, 13))
@pytest.mark.parametrize("valor", [100.01, 99.99, 0.05])
def test_parcelas_somam_o_valor_da_perna(valor, n):
    perna = {"amount": valor, "paymentDates": [{"date": "2024-08-10"}] * n}
    assert valor_por_parcela(perna) * n == pytest.approx(valor)


@pytest.mark.parametrize("n", [3, 7, 12])
def test_total_devido_de_perna_toda_pendente_e_o_valor_da_perna(clientes, n):
    venda = _venda("s1", "c1", 100.01, [_pend(f"2025-{m:02d}-10") for m in range(1, n + 1)])

    assert agrupar_parcelas_por_cliente([venda], clientes)["c1"].total_devido == pytest.approx(100.01)
    assert total_a_receber([venda]) == pytest.approx(100.01)


# ---------------------------------------------------------------------------
# agrupamento
# ---------------------------------------------------------------------------


def test_total_devido_soma_so_pendentes(clientes):
    venda = _venda(
        "s1", "c1", 300,
        [
            _pend("2024-08-10"),
            {"date": "2024-07-10", "status": "Pago", "paymentDate": "2024-07-11"},
            _pend("2024-09-10"),
        ],
    )
    grupos = agrupar_parcelas_por_cliente([venda], clientes)

    assert list(grupos) == ["c1"]
    grupo = grupos["c1"]
    assert grupo.customer_name == "Ana"
    assert grupo.total_devido == pytest.approx(200)
    assert [p.data for p in grupo.parcelas] == ["2024-07-10", "2024-08-10", "2024-09-10"]
    assert all(p.valor == pytest.approx(100) for p in grupo.parcelas)
    # índice continua sendo a posição original na perna
    assert [p.indice for p in grupo.parcelas] == [1, 0, 2]


def test_filtro_por_mes_de_vencimento(clientes):
    venda = _venda("s1", "c1", 300, [_pend("2024-07-10"), _pend("2024-08-10"), _pend("2024-09-10")])
    grupos = agrupar_parcelas_por_cliente([venda], clientes, mes="2024-08")

    assert len(grupos["c1"].parcelas) == 1
    assert grupos["c1"].total_devido == pytest.approx(100)


def test_cliente_inexistente_e_ignorado(clientes):
    vendas = [
        _venda("s1", "zz", 100, [_pend("2024-07-10")]),
        _venda("s2", "c2", 50, [_pend("2024-07-10")]),
    ]
    grupos = agrupar_parcelas_por_cliente(vendas, clientes)
    assert list(grupos) == ["c2"]


def test_dados_malformados_nao_levantam(clientes):
    vendas = [
        {"id": "s1", "customerId": "c1", "payments": None},
        {"id": "s2", "customerId": "c1", "payments": [{"id": "p", "type": "A Prazo", "amount": 10, "paymentDates": "x"}]},
        "lixo",
    ]
    assert agrupar_parcelas_por_cliente(vendas, clientes) == {}


def test_agrupamento_nao_altera_entrada(clientes):
    vendas = [_venda("s1", "c1", 300, [_pend("2024-09-10"), _pend("2024-08-10")])]
    antes = copy.deepcopy(vendas)
    agrupar_parcelas_por_cliente(vendas, clientes)
    assert vendas == antes


# ---------------------------------------------------------------------------
# atrasos
# ---------------------------------------------------------------------------


def test_faixas_de_atraso_nos_limites(clientes):
    dias = [0, 2, 3, 5, 6, 10, 11, 15, 16, 40]
    parcelas = [_pend(_venc_ha(d)) for d in dias]
    parcelas.append(_pend((HOJE + timedelta(days=3)).isoformat()))
    venda = _venda("s1", "c1", 110 * len(parcelas), parcelas)

    faixas = calcular_atrasos([venda], clientes, hoje=HOJE)

    assert [a.dias for a in faixas["3-5"]] == [5, 3]
    assert [a.dias for a in faixas["6-10"]] == [10, 6]
    assert [a.dias for a in faixas["11-15"]] == [15, 11]
    assert [a.dias for a in faixas[">15"]] == [40, 16]
    assert all(a.valor == pytest.approx(110) for f in faixas.values() for a in f)
    assert faixas["3-5"][0].customer_name == "Ana"


def test_atraso_ignora_pagas_e_datas_invalidas(clientes):
    parcelas = [
        {"date": _venc_ha(20), "status": "Pago", "paymentDate": "2024-07-19"},
        _pend("data-ruim"),
        _pend(_venc_ha(4)),
    ]
    faixas = calcular_atrasos([_venda("s1", "c1", 300, parcelas)], clientes, hoje=HOJE)

    assert sum(len(v) for v in faixas.values()) == 1
    assert faixas["3-5"][0].indice == 2


def test_atraso_sem_parcelas_retorna_faixas_vazias(clientes):
    faixas = calcular_atrasos([], clientes, hoje=HOJE)
    assert set(faixas) == {"3-5", "6-10", "11-15", ">15"}
    assert all(v == [] for v in faixas.values())


# ---------------------------------------------------------------------------
# baixa de parcela
# ---------------------------------------------------------------------------


def test_marcar_pago_carimba_data_local_de_hoje():
    avista = {"id": "pix", "type": "Pix", "amount": 10}
    venda = _venda("s1", "c1", 300, [_pend("2024-07-10"), _pend("2024-08-10"), _pend("2024-09-10")], extra=avista)
    antes = copy.deepcopy(venda)

    nova = alternar_status_parcela(venda, "pay1", 1, "Pago", hoje=HOJE)

    parcela = nova["payments"][1]["paymentDates"][1]
    assert parcela == {"date": "2024-08-10", "status": "Pago", "paymentDate": "2024-07-20"}
    # o resto é compartilhado e a venda original não muda
    assert nova["payments"][0] is venda["payments"][0]
    assert nova["payments"][1]["paymentDates"][0] is venda["payments"][1]["paymentDates"][0]
    assert venda == antes


def test_voltar_para_pendente_remove_data_de_pagamento():
    venda = _venda("s1", "c1", 100, [{"date": "2024-07-10", "status": "Pago", "paymentDate": "2024-07-11"}])

    nova = alternar_status_parcela(venda, "pay1", 0, "Pendente")

    assert nova["payments"][0]["paymentDates"][0] == {"date": "2024-07-10", "status": "Pendente"}
    # repetir é idempotente
    de_novo = alternar_status_parcela(nova, "pay1", 0, "Pendente")
    assert de_novo["payments"][0]["paymentDates"][0] == {"date": "2024-07-10", "status": "Pendente"}


def test_pago_depois_pendente_volta_ao_original():
    venda = _venda("s1", "c1", 100, [_pend("2024-07-10")])
    ida = alternar_status_parcela(venda, "pay1", 0, "Pago", hoje=HOJE)
    volta = alternar_status_parcela(ida, "pay1", 0, "Pendente")
    assert volta == venda


def test_perna_ou_indice_inexistente_devolve_a_mesma_venda():
    venda = _venda("s1", "c1", 100, [_pend("2024-07-10")])
    assert alternar_status_parcela(venda, "nao-existe", 0, "Pago") is venda
    assert alternar_status_parcela(venda, "pay1", 5, "Pago") is venda


def test_status_invalido_levanta():
    venda = _venda("s1", "c1", 100, [_pend("2024-07-10")])
    with pytest.raises(ValidacaoError):
        alternar_status_parcela(venda, "pay1", 0, "Quitado")


# ---------------------------------------------------------------------------
# painel
# ---------------------------------------------------------------------------


def test_total_a_receber_e_meses_com_parcelas():
    vendas = [
        _venda("s1", "c1", 300, [_pend("2024-08-10"), {"date": "2024-07-10", "status": "Pago"}, _pend("2024-09-10")]),
        _venda("s2", "c2", 50, [_pend("2024-07-25")]),
    ]
    assert total_a_receber(vendas) == pytest.approx(250)
    assert meses_com_parcelas(vendas) == ["2024-07", "2024-08", "2024-09"]
