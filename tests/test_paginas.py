# tests/test_paginas.py
"""Cada rota do menu aponta para uma função de página existente."""

from __future__ import annotations

import ast
import importlib
from pathlib import Path

import pytest

RAIZ = Path(__file__).resolve().parent.parent


def _rotas() -> dict:
    arvore = ast.parse((RAIZ / "main.py").read_text(encoding="utf-8"))
    for no in arvore.body:
        if isinstance(no, ast.Assign) and any(getattr(t, "id", None) == "ROTAS" for t in no.targets):
            return ast.literal_eval(no.value)
    raise AssertionError("ROTAS não encontrado em main.py")


@pytest.mark.parametrize("rotulo, destino", sorted(_rotas().items()))
def test_rota_aponta_para_pagina(rotulo, destino):
    modulo, funcao = destino
    assert callable(getattr(importlib.import_module(modulo), funcao, None)), rotulo


def test_menu_tem_as_telas_de_cadastro():
    modulos = {m for m, _ in _rotas().values()}
    for nome in ("pagina_vendas", "pagina_produtos", "pagina_clientes", "pagina_trocas", "pagina_compras"):
        assert f"boutique_pages.{nome}" in modulos
