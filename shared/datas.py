# shared/datas.py
"""
Módulo Datas (Shared)
=====================

Utilitários de data usados por todas as derivações (A Prazo, Investidores,
Caixa, Relatórios).

Regras
------
- Datas "só dia" (`YYYY-MM-DD`) são sempre lidas como **data local de
  calendário** (`parse_local_date`). Nunca passam por UTC, então não há o
  deslocamento de um dia perto da meia-noite.
- Timestamps persistidos (`date`, `createdAt`, `valeExpiresAt`) chegam como
  `datetime` com fuso UTC; para saber o mês/dia do registro eles são
  convertidos para o fuso local antes (`para_data_local`).
- Chave de mês é sempre `YYYY-MM` (`mes_de`, `somar_meses`).
- Vencimentos mensais de parcelas: `datas_parcelas`.
"""

from __future__ import annotations

import calendar
import re
from datetime import date, datetime
from typing import Any, List, Optional

__all__ = [
    "parse_local_date",
    "para_data_local",
    "mes_de",
    "somar_meses",
    "datas_parcelas",
    "mes_valido",
    "hoje_local",
    "hoje_local_str",
    "dias_entre",
    "instante",
]

_DATA_RE = re.compile(r"^(\d{4})-(\d{2})-(\d{2})")
_MES_RE = re.compile(r"^\d{4}-(0[1-9]|1[0-2])$")


def para_data_local(valor: Any) -> Optional[date]:
    """
    Converte `valor` em data local de calendário.

    - `datetime` com fuso: convertido para o fuso local e truncado.
    - `datetime` sem fuso: já considerado local.
    - `date`: devolvido como está.
    - str: `YYYY-MM-DD` (prefixo) ou ISO completo; inválido -> None.
    """
    if valor is None:
        return None
    if isinstance(valor, datetime):
        if valor.tzinfo is not None:
            return valor.astimezone().date()
        return valor.date()
    if isinstance(valor, date):
        return valor
    if isinstance(valor, str):
        s = valor.strip()
        if len(s) > 10 and "T" in s:
            # timestamp ISO serializado (ex.: '2024-07-10T15:00:00.000Z')
            try:
                dt = datetime.fromisoformat(s.replace("Z", "+00:00"))
            except ValueError:
                return None
            return para_data_local(dt)
        return parse_local_date(s)
    return None


def parse_local_date(valor: Any) -> Optional[date]:
    """
    Lê um valor "só dia" como data local.

    Aceita `YYYY-MM-DD` (e qualquer string que comece assim), `date` e
    `datetime`. Retorna None para entradas inválidas, sem levantar.
    """
    if isinstance(valor, (date, datetime)):
        return para_data_local(valor)
    if not isinstance(valor, str):
        return None
    m = _DATA_RE.match(valor.strip())
    if not m:
        return None
    try:
        return date(int(m.group(1)), int(m.group(2)), int(m.group(3)))
    except ValueError:
        return None


def mes_de(valor: Any) -> Optional[str]:
    """
    Chave `YYYY-MM` de um valor de data.

    Strings "só dia" usam os 7 primeiros caracteres (sem parse de fuso);
    timestamps e objetos de data passam por `para_data_local`.
    """
    if isinstance(valor, str):
        s = valor.strip()
        if len(s) > 10 and "T" in s:
            d = para_data_local(s)
            return d.strftime("%Y-%m") if d else None
        if len(s) >= 7 and _MES_RE.match(s[:7]):
            return s[:7]
        return None
    d = para_data_local(valor)
    return d.strftime("%Y-%m") if d else None


def mes_valido(mes: Any) -> bool:
    return isinstance(mes, str) and bool(_MES_RE.match(mes))


def somar_meses(mes: str, n: int) -> str:
    """
    Soma `n` meses de calendário a `YYYY-MM` (n pode ser negativo).

    Ex.: somar_meses('2024-12', 1) -> '2025-01'; somar_meses('2024-01', -1) -> '2023-12'.
    """
    if not mes_valido(mes):
        raise ValueError(f"Mês inválido (use YYYY-MM): {mes!r}")
    ano, m = int(mes[:4]), int(mes[5:7])
    total = ano * 12 + (m - 1) + int(n)
    return f"{total // 12:04d}-{total % 12 + 1:02d}"


def datas_parcelas(primeiro_vencimento: date, n: int) -> List[str]:
    """
    `n` vencimentos mensais `YYYY-MM-DD` a partir de `primeiro_vencimento`.

    O dia é mantido; em meses mais curtos vira o último dia do mês
    (31/01 -> 29/02 -> 31/03 em ano bissexto).
    """
    if n < 1:
        raise ValueError("Número de parcelas deve ser ao menos 1.")
    base = primeiro_vencimento.year * 12 + primeiro_vencimento.month - 1
    datas: List[str] = []
    for i in range(n):
        ano, mes = divmod(base + i, 12)
        dia = min(primeiro_vencimento.day, calendar.monthrange(ano, mes + 1)[1])
        datas.append(date(ano, mes + 1, dia).isoformat())
    return datas


def hoje_local() -> date:
    """Data de hoje no fuso local da máquina."""
    return date.today()


def hoje_local_str(hoje: Optional[date] = None) -> str:
    """Hoje (local) em `YYYY-MM-DD`, montado a partir de ano/mês/dia locais."""
    d = hoje or hoje_local()
    return f"{d.year:04d}-{d.month:02d}-{d.day:02d}"


def dias_entre(inicio: date, fim: date) -> int:
    """Dias de calendário de `inicio` até `fim` (positivo se `fim` é depois)."""
    return (fim - inicio).days


def instante(valor: Any) -> float:
    """
    Chave numérica de ordenação para valores de data (epoch em segundos).

    Timestamps usam o instante real; datas "só dia" usam a meia-noite local.
    Valores inválidos vão para o início (`-inf`).
    """
    if isinstance(valor, datetime):
        return valor.timestamp()
    if isinstance(valor, str) and len(valor.strip()) > 10 and "T" in valor:
        try:
            return datetime.fromisoformat(valor.strip().replace("Z", "+00:00")).timestamp()
        except ValueError:
            return float("-inf")
    d = parse_local_date(valor) if not isinstance(valor, date) else valor
    if d is None:
        return float("-inf")
    return datetime(d.year, d.month, d.day).timestamp()
