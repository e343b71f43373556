"""pt-BR display helpers for money and dates."""
from __future__ import annotations

import re
from datetime import datetime
from typing import Any, Optional

from gashub.data.models.fields import to_datetime, to_number

MONTHS_PT_BR = [
    "janeiro", "fevereiro", "março", "abril", "maio", "junho",
    "julho", "agosto", "setembro", "outubro", "novembro", "dezembro",
]

INVALID_DATE = "Data inválida"
INVALID_DATETIME = "Data/hora inválida"
INVALID_TIME = "Hora inválida"


def format_value(value: Any) -> str:
    """10.5 -> '10,50'. Missing or unparsable values give '0,00'."""
    return f"{to_number(value):.2f}".replace(".", ",")


def format_brl(value: Any) -> str:
    """1234.5 -> 'R$ 1.234,50'."""
    number = to_number(value)
    digits = f"{abs(number):,.2f}".replace(",", "_").replace(".", ",").replace("_", ".")
    sign = "-" if number < 0 else ""
    return f"{sign}R$ {digits}"


def format_currency(text: Optional[str]) -> str:
    """Mask for a money input: keeps the digits and reads them as cents.

    '1050' -> 'R$ 10,50', 'R$ 10,505' -> 'R$ 105,05'. Returns '' when there
    are no digits.
    """
    digits = re.sub(r"\D", "", text or "")
    if not digits:
        return ""
    return format_brl(int(digits) / 100)


def _local(value: Any) -> Optional[datetime]:
    dt = to_datetime(value)
    if dt is None:
        return None
    return dt.astimezone() if dt.tzinfo is not None else dt


def format_date(value: Any) -> str:
    """'25/12/2023'"""
    dt = _local(value)
    return dt.strftime("%d/%m/%Y") if dt else INVALID_DATE


def format_datetime(value: Any) -> str:
    """'25/12/2023 14:30'"""
    dt = _local(value)
    return dt.strftime("%d/%m/%Y %H:%M") if dt else INVALID_DATETIME


def format_date_long(value: Any) -> str:
    """'25 de dezembro de 2023'"""
    dt = _local(value)
    if dt is None:
        return INVALID_DATE
    return f"{dt.day} de {MONTHS_PT_BR[dt.month - 1]} de {dt.year}"


def format_time(value: Any) -> str:
    """'14:30'"""
    dt = _local(value)
    return dt.strftime("%H:%M") if dt else INVALID_TIME
