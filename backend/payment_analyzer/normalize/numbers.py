from __future__ import annotations

import math
import re
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Union

PENNY = Decimal("0.01")

Number = Union[int, float, str, Decimal]

# "£1,234.56", "45.50", "1,000" -> thousands separated by commas, optional pence
_MONEY_TOKEN_RE = re.compile(r"(?P<int>\d{1,3}(?:,\d{3})+|\d+)(?P<dec>\.\d{0,2})?")


def to_decimal(value: Number) -> Decimal:
    """
    Convert a user/JSON scalar to Decimal without float artefacts.

    Raises ValueError for NaN, infinities and non-numeric input.
    """
    if isinstance(value, bool):
        raise ValueError(f"boolean is not a number: {value!r}")
    if isinstance(value, Decimal):
        d = value
    elif isinstance(value, int):
        d = Decimal(value)
    elif isinstance(value, float):
        if math.isnan(value) or math.isinf(value):
            raise ValueError(f"not a finite number: {value!r}")
        d = Decimal(repr(value))
    elif isinstance(value, str):
        try:
            d = Decimal(value.strip().replace(",", ""))
        except InvalidOperation as e:
            raise ValueError(f"invalid number: {value!r}") from e
    else:
        raise ValueError(f"unsupported number type: {type(value).__name__}")

    if not d.is_finite():
        raise ValueError(f"not a finite number: {value!r}")
    return d


def quantize_money(value: Decimal) -> Decimal:
    return value.quantize(PENNY, rounding=ROUND_HALF_UP)


def parse_money_token(raw: str) -> Decimal:
    """
    "1,234.56" / "£45.5" / "12" -> Decimal rounded to pence.
    """
    if raw is None:
        raise ValueError("money is None")
    s = str(raw).strip().lstrip("£")
    m = _MONEY_TOKEN_RE.search(s)
    if not m:
        raise ValueError(f"money token not found: {raw!r}")

    int_part = m.group("int").replace(",", "")
    dec_part = m.group("dec") or ""
    if dec_part == ".":
        dec_part = ""

    try:
        val = Decimal(f"{int_part}{dec_part}")
    except InvalidOperation as e:
        raise ValueError(f"invalid money token: {raw!r}") from e
    return quantize_money(val)


def to_pence(value: Number) -> int:
    return int((quantize_money(to_decimal(value)) * 100).to_integral_value(rounding=ROUND_HALF_UP))
