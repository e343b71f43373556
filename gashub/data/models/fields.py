from __future__ import annotations

import math
import numbers
from datetime import date, datetime
from decimal import Decimal, InvalidOperation
from typing import Any, Optional

import pandas as pd


def to_number(value: Any) -> float:
    """Coerce a stored amount to float; anything unparsable becomes 0.

    Accepts the pt-BR strings the order form produces ("R$ 1.234,50").
    """
    if value is None or isinstance(value, bool):
        return 0.0
    if isinstance(value, (numbers.Real, Decimal)):
        try:
            number = float(value)
        except (InvalidOperation, OverflowError):
            return 0.0
    elif isinstance(value, str):
        text = value.replace("R$", "").replace("\xa0", "").replace(" ", "").strip()
        if "," in text:
            text = text.replace(".", "").replace(",", ".")
        try:
            number = float(text)
        except ValueError:
            return 0.0
    else:
        return 0.0
    return number if math.isfinite(number) else 0.0


def to_int(value: Any) -> int:
    return int(to_number(value))


def to_datetime(value: Any) -> Optional[datetime]:
    """Coerce a stored date to datetime; anything unparsable becomes None.

    Numbers are read as epoch milliseconds.
    """
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, str) and not value.strip():
        return None
    try:
        if isinstance(value, numbers.Real):
            if not math.isfinite(value):
                return None
            ts = pd.to_datetime(value, unit="ms", utc=True)
        elif isinstance(value, (datetime, date, str, pd.Timestamp)):
            ts = pd.to_datetime(value)
        else:
            return None
    except (ValueError, TypeError, OverflowError):
        return None
    if pd.isna(ts):
        return None
    return ts.to_pydatetime()


def to_text(value: Any) -> str:
    return "" if value is None else str(value)


def to_optional_text(value: Any) -> Optional[str]:
    return None if value is None else str(value)
