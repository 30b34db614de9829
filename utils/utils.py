"""
Módulo Utils
============

Dinheiro e caminho do banco.

Dinheiro
--------
- `arredondar_moeda`: 2 casas, ROUND_HALF_UP (2.675 -> 2.68).
- `formatar_moeda`: padrão BR, `R$ 1.234,56`.
- `limpar_valor_formatado`: texto de moeda (BR ou EN) -> número; o que não
  der para ler vira 0.
- `eh_valor_monetario`: diz se um texto digitado parece um valor de moeda
  (usado antes de gravar o saldo anterior manual).

Banco
-----
- `resolve_db_path`: str/PathLike ou objeto de config -> caminho.
- `caminho_banco_padrao`: `$BOUTIQUE_DB_PATH` ou `data/boutique_data.db`.
"""

from __future__ import annotations

import os
import re
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation

CAMINHO_BANCO_PADRAO = os.path.join("data", "boutique_data.db")
ENV_CAMINHO_BANCO = "BOUTIQUE_DB_PATH"

_CENTAVOS = Decimal("0.01")
_ZERO = Decimal("0")
_FORA_DO_NUMERO_RE = re.compile(r"[^\d,.\-+]")
_SINAL_NO_MEIO_RE = re.compile(r"(?<=.)[+\-]")
_VALOR_MONETARIO_RE = re.compile(r"^[+\-]?\s*(R\$)?\s*[\d.,]*\d[\d.,]*$")


# -----------------------------------------------------------------------------
# Dinheiro
# -----------------------------------------------------------------------------
def _decimal_finito(valor) -> Decimal:
    """Decimal de `valor`; ilegível, NaN ou infinito -> 0."""
    if isinstance(valor, bool):
        valor = int(valor)
    try:
        d = valor if isinstance(valor, Decimal) else Decimal(str(valor))
    except (InvalidOperation, ValueError, TypeError):
        return _ZERO
    return d if d.is_finite() else _ZERO


def arredondar_moeda(valor) -> float:
    """Arredonda para centavos no modo financeiro; inválido -> 0.0."""
    q = _decimal_finito(valor).quantize(_CENTAVOS, rounding=ROUND_HALF_UP)
    return float(q) + 0.0  # sem -0.0


def formatar_moeda(valor) -> str:
    """`1234.5` -> `R$ 1.234,50`."""
    q = _decimal_finito(valor).quantize(_CENTAVOS, rounding=ROUND_HALF_UP)
    en = f"{q:,.2f}"
    br = en.translate(str.maketrans({",": ".", ".": ","}))
    return f"R$ {br}"


def _normalizar_separadores(txt: str) -> str:
    # com '.' e ',' o separador mais à direita é o decimal
    if "," in txt and "." in txt:
        if txt.rfind(",") > txt.rfind("."):
            return txt.replace(".", "").replace(",", ".")
        return txt.replace(",", "")
    if "," in txt:
        return txt.replace(",", ".")
    return txt


def limpar_valor_formatado(valor, *, as_decimal: bool = False):
    """
    Converte um valor de moeda digitado em número.

    Exemplos::

        "R$ 1.234,56" -> 1234.56
        "1,234.56"    -> 1234.56
        "543.21"      -> 543.21
        "- 2.500,00"  -> -2500.0
        "abc" / None  -> 0.0

    Devolve `float` (ou `Decimal` com `as_decimal=True`).
    """
    if valor is None or isinstance(valor, (bool, int, float, Decimal)):
        dec = _decimal_finito(valor or 0)
    else:
        txt = _FORA_DO_NUMERO_RE.sub("", str(valor).strip())
        txt = _SINAL_NO_MEIO_RE.sub("", _normalizar_separadores(txt))
        dec = _decimal_finito(txt) if txt else _ZERO
    return dec if as_decimal else float(dec)


def eh_valor_monetario(valor) -> bool:
    """True para números e textos como `1.234,56`, `R$ 10`, `-50.5`."""
    if isinstance(valor, bool):
        return False
    if isinstance(valor, (int, float, Decimal)):
        return Decimal(str(valor)).is_finite()
    txt = str(valor or "").strip()
    if not _VALOR_MONETARIO_RE.match(txt):
        return False
    # "1.2.3" passa no padrão mas não vira número
    txt = _SINAL_NO_MEIO_RE.sub("", _normalizar_separadores(_FORA_DO_NUMERO_RE.sub("", txt)))
    try:
        return Decimal(txt).is_finite()
    except InvalidOperation:
        return False


# -----------------------------------------------------------------------------
# Banco
# -----------------------------------------------------------------------------
def resolve_db_path(obj) -> str:
    """
    Caminho do banco a partir de str/PathLike ou de um objeto com
    `db_path`, `caminho_banco` ou `database` (ex.: o próprio repositório).
    """
    if obj is None:
        raise TypeError("Caminho do banco não informado.")
    if isinstance(obj, (str, os.PathLike)):
        return os.fspath(obj)
    for atributo in ("db_path", "caminho_banco", "database"):
        if hasattr(obj, atributo):
            return str(getattr(obj, atributo))
    raise TypeError(f"Não foi possível obter o caminho do banco de {type(obj).__name__}")


def caminho_banco_padrao() -> str:
    """Caminho do SQLite: `$BOUTIQUE_DB_PATH` ou `data/boutique_data.db`."""
    return os.environ.get(ENV_CAMINHO_BANCO) or CAMINHO_BANCO_PADRAO
