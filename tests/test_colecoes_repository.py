# tests/test_colecoes_repository.py
"""Armazenamento das coleções em SQLite e formato JSON persistido."""

from __future__ import annotations

from datetime import datetime, timezone

import pytest

from repository.colecoes_repository import (
    CHAVES_COLECOES,
    ColecoesRepository,
    dumps_colecao,
    excluir_registro,
    loads_colecao,
    ordenar_por_data_desc,
    salvar_registro,
)
from shared.db import transacao


def test_load_de_colecao_ausente_devolve_default(repo):
    assert repo.load("sales") is None
    assert repo.load("sales", []) == []
    assert repo.load_lista("sales") == []


def test_save_e_load(repo, db_path):
    repo.save("customers", [{"id": "c1", "name": "Ana"}])

    # outra instância no mesmo arquivo enxerga o dado
    assert ColecoesRepository(db_path).load("customers") == [{"id": "c1", "name": "Ana"}]


def test_timestamps_voltam_como_datetime_utc(repo):
    quando = datetime(2024, 7, 10, 15, 30, 5, 123000, tzinfo=timezone.utc)
    repo.save("sales", [{
        "id": "s1",
        "date": quando,
        "payments": [{"id": "p", "type": "A Prazo", "amount": 10, "paymentDates": [
            {"date": "2024-08-10", "status": "Pago", "paymentDate": "2024-08-01"},
        ]}],
    }])

    venda = repo.load("sales")[0]
    assert venda["date"] == quando
    parcela = venda["payments"][0]["paymentDates"][0]
    assert parcela == {"date": "2024-08-10", "status": "Pago", "paymentDate": "2024-08-01"}


def test_formato_iso_com_milissegundos():
    texto = dumps_colecao({"createdAt": datetime(2024, 1, 2, 3, 4, 5, 678901, tzinfo=timezone.utc)})
    assert texto == '{"createdAt": "2024-01-02T03:04:05.678Z"}'


def test_reviver_so_nas_chaves_conhecidas():
    dados = loads_colecao(
        '{"date": "2024-07-10T12:00:00.000Z", "createdAt": "2024-07-10T12:00:00Z",'
        ' "valeExpiresAt": "2024-08-09T12:00:00.000Z", "eventDate": "2024-07-10T12:00:00.000Z",'
        ' "month": "2024-07"}'
    )
    assert isinstance(dados["date"], datetime)
    assert isinstance(dados["valeExpiresAt"], datetime)
    # sem milissegundos não casa com o padrão
    assert dados["createdAt"] == "2024-07-10T12:00:00Z"
    assert dados["eventDate"] == "2024-07-10T12:00:00.000Z"
    assert dados["month"] == "2024-07"


def test_timestamp_com_data_impossivel_fica_como_texto():
    dados = loads_colecao(
        '[{"id": "a", "date": "2024-07-10T12:00:00.000Z"}, {"id": "b", "date": "2024-02-30T12:00:00.000Z"}]'
    )
    assert dados[0]["date"] == datetime(2024, 7, 10, 12, tzinfo=timezone.utc)
    assert dados[1]["date"] == "2024-02-30T12:00:00.000Z"

    with pytest.raises(ValueError):
        loads_colecao('{"createdAt": "2024-13-01T00:00:00.000Z"}', estrito=True)


def test_colecao_com_data_impossivel_continua_legivel(repo):
    repo.save_raw_many({"sales": '[{"id": "a", "date": "2024-07-10T12:00:00.000Z"}, {"id": "b", "date": "2024-02-30T12:00:00.000Z"}]'})
    assert [v["id"] for v in repo.load_lista("sales")] == ["a", "b"]


def test_json_corrompido_devolve_default(repo):
    repo.save_raw_many({"sales": "{corrompido"})
    assert repo.load("sales", []) == []


def test_colecao_desconhecida(repo):
    with pytest.raises(ValueError):
        repo.save("sellers", [])
    with pytest.raises(ValueError):
        repo.load("sellers")


def test_nomes_salvos_e_save_many(repo):
    repo.save_many({"products": [], "sales": []})
    assert repo.nomes_salvos() == ["products", "sales"]


def test_save_sobrescreve_colecao_inteira(repo):
    repo.save("products", [{"id": "p1"}, {"id": "p2"}])
    repo.save("products", [{"id": "p3"}])
    assert repo.load("products") == [{"id": "p3"}]


# ---------------------------------------------------------------------------
# helpers de lista
# ---------------------------------------------------------------------------


def test_salvar_registro_substitui_ou_insere():
    lista = [{"id": "a", "v": 1}, {"id": "b", "v": 2}]

    trocada = salvar_registro(lista, {"id": "b", "v": 3})
    assert trocada == [{"id": "a", "v": 1}, {"id": "b", "v": 3}]
    assert trocada[0] is lista[0]

    assert [r["id"] for r in salvar_registro(lista, {"id": "c"})] == ["c", "a", "b"]
    assert [r["id"] for r in salvar_registro(lista, {"id": "c"}, no_inicio=False)] == ["a", "b", "c"]
    assert lista == [{"id": "a", "v": 1}, {"id": "b", "v": 2}]


def test_excluir_registro():
    lista = [{"id": "a"}, {"id": "b"}]
    assert excluir_registro(lista, "a") == [{"id": "b"}]
    assert excluir_registro(lista, "z") == lista


def test_ordenar_por_data_desc_aceita_datetime_e_texto():
    lista = [
        {"id": "a", "date": "2024-07-01"},
        {"id": "b", "date": datetime(2024, 7, 5, 12, tzinfo=timezone.utc)},
        {"id": "c", "date": "2024-07-10T12:00:00.000Z"},
        {"id": "d"},
    ]
    assert [r["id"] for r in ordenar_por_data_desc(lista)] == ["c", "b", "a", "d"]


def test_transacao_desfaz_tudo_em_erro(repo, db_path):
    with pytest.raises(RuntimeError):
        with transacao(db_path) as conn:
            conn.execute(
                "INSERT INTO colecoes (chave, conteudo) VALUES (?, ?)",
                (CHAVES_COLECOES["sales"], "[]"),
            )
            raise RuntimeError("falhou no meio")

    assert repo.load("sales") is None


def test_save_raw_many_com_nome_desconhecido_nao_grava_nada(repo):
    with pytest.raises(ValueError):
        repo.save_raw_many({"sales": "[]", "sellers": "[]"})
    assert repo.nomes_salvos() == []
