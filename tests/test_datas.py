# tests/test_datas.py
"""Datas locais, chaves de mês, IDs e helpers de dinheiro."""

from __future__ import annotations

import math
from datetime import date, datetime, timezone
from types import SimpleNamespace

import pytest

from shared.datas import (
    datas_parcelas,
    dias_entre,
    hoje_local_str,
    instante,
    mes_de,
    mes_valido,
    parse_local_date,
    somar_meses,
)
from shared.ids import gerar_id, sanitize
from shared.safe_utils import as_lista, to_float
from utils.utils import (
    arredondar_moeda,
    eh_valor_monetario,
    formatar_moeda,
    limpar_valor_formatado,
    resolve_db_path,
)


# ---------------------------------------------------------------------------
# datas
# ---------------------------------------------------------------------------


@pytest.mark.parametrize(
    "valor, esperado",
    [
        ("2024-07-10", date(2024, 7, 10)),
        (" 2024-02-29 ", date(2024, 2, 29)),
        ("2024-02-30", None),
        ("10/07/2024", None),
        ("", None),
        (None, None),
        (20240710, None),
        (date(2024, 7, 10), date(2024, 7, 10)),
    ],
)
def test_parse_local_date(valor, esperado):
    assert parse_local_date(valor) == esperado


def test_mes_de():
    assert mes_de("2024-07-10") == "2024-07"
    assert mes_de("2024-07") == "2024-07"
    assert mes_de(date(2024, 1, 31)) == "2024-01"
    assert mes_de(datetime(2024, 7, 15, 12, tzinfo=timezone.utc)) == "2024-07"
    assert mes_de("2024-13-01") is None
    assert mes_de("") is None
    assert mes_de(None) is None


def test_somar_meses_vira_o_ano():
    assert somar_meses("2024-12", 1) == "2025-01"
    assert somar_meses("2024-01", -1) == "2023-12"
    assert somar_meses("2024-03", -14) == "2023-01"
    assert somar_meses("2024-07", 0) == "2024-07"


@pytest.mark.parametrize("mes", ["2024-13", "2024-7", "julho", ""])
def test_somar_meses_invalido(mes):
    assert mes_valido(mes) is False
    with pytest.raises(ValueError):
        somar_meses(mes, 1)


def test_datas_parcelas_mensais_com_fim_de_mes():
    assert datas_parcelas(date(2024, 1, 31), 3) == ["2024-01-31", "2024-02-29", "2024-03-31"]
    assert datas_parcelas(date(2024, 11, 10), 3) == ["2024-11-10", "2024-12-10", "2025-01-10"]
    assert datas_parcelas(date(2024, 7, 10), 1) == ["2024-07-10"]
    with pytest.raises(ValueError):
        datas_parcelas(date(2024, 7, 10), 0)


def test_hoje_local_str():
    assert hoje_local_str(date(2024, 1, 5)) == "2024-01-05"
    assert len(hoje_local_str()) == 10


def test_dias_e_instante():
    assert dias_entre(date(2024, 7, 1), date(2024, 7, 20)) == 19
    assert dias_entre(date(2024, 7, 20), date(2024, 7, 1)) == -19
    assert instante("lixo") == -math.inf
    assert instante("2024-07-02") > instante("2024-07-01")


# ---------------------------------------------------------------------------
# coerções e IDs
# ---------------------------------------------------------------------------


def test_as_lista():
    lista = [1, 2]
    assert as_lista(lista) is lista
    assert as_lista((1, 2)) == [1, 2]
    assert as_lista(None) == []
    assert as_lista({"a": 1}) == []


@pytest.mark.parametrize(
    "valor, esperado",
    [(None, 0.0), ("2.5", 2.5), ("abc", 0.0), (True, 0.0), (float("nan"), 0.0), (3, 3.0)],
)
def test_to_float(valor, esperado):
    assert to_float(valor) == esperado


def test_gerar_id_e_sanitize():
    a, b = gerar_id("rec"), gerar_id("rec")
    assert a.startswith("rec-") and b.startswith("rec-")
    assert a != b
    with pytest.raises(ValueError):
        gerar_id("prefixo inválido!")
    assert sanitize("  Tia\x00 Rosa ") == "Tia Rosa"
    assert sanitize(None) == ""


# ---------------------------------------------------------------------------
# dinheiro
# ---------------------------------------------------------------------------


@pytest.mark.parametrize(
    "texto, esperado",
    [
        ("R$ 1.234,56", 1234.56),
        ("1.234,56", 1234.56),
        ("1,234.56", 1234.56),
        ("543.21", 543.21),
        ("- 2.500,00", -2500.0),
        ("10,5", 10.5),
        ("abc", 0.0),
        ("", 0.0),
        (None, 0.0),
        (12, 12.0),
    ],
)
def test_limpar_valor_formatado(texto, esperado):
    assert limpar_valor_formatado(texto) == pytest.approx(esperado)


def test_arredondar_e_formatar_moeda():
    assert arredondar_moeda(2.675) == 2.68
    assert arredondar_moeda("abc") == 0.0
    assert arredondar_moeda(-0.001) == 0.0
    assert formatar_moeda(1234.5) == "R$ 1.234,50"
    assert formatar_moeda(0) == "R$ 0,00"


@pytest.mark.parametrize("valor", ["1.234,56", "R$ 10", "-50.5", "0", 12, 3.5])
def test_eh_valor_monetario(valor):
    assert eh_valor_monetario(valor) is True


@pytest.mark.parametrize("valor", ["abc", "", None, "12a", "1.2.3", "1,2,3", True, float("inf")])
def test_nao_eh_valor_monetario(valor):
    assert eh_valor_monetario(valor) is False


def test_resolve_db_path(tmp_path):
    assert resolve_db_path(tmp_path / "x.db") == str(tmp_path / "x.db")
    assert resolve_db_path(SimpleNamespace(caminho_banco="b.db")) == "b.db"
    with pytest.raises(TypeError):
        resolve_db_path(None)
