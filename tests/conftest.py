# tests/conftest.py
"""
Fixtures compartilhadas dos testes.

Cada teste recebe um SQLite próprio em `tmp_path`, então nada toca o banco
real em `data/`.
"""

from __future__ import annotations

import pytest

from repository.colecoes_repository import ColecoesRepository


@pytest.fixture
def db_path(tmp_path):
    return tmp_path / "boutique_test.db"


@pytest.fixture
def repo(db_path):
    return ColecoesRepository(db_path)


@pytest.fixture
def clientes():
    return [
        {"id": "c1", "name": "Ana"},
        {"id": "c2", "name": "Bia"},
    ]

