"""Money helpers shared by the form boundary and the templates.

Calculations never round; rounding happens only when a value is formatted
for display.
"""

from __future__ import annotations
import math
import re
from decimal import Decimal, ROUND_HALF_UP

# Leading numeric prefix, the part of "12.5abc" a browser's parseFloat keeps
_NUMERIC_PREFIX = re.compile(r"^\s*([+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?)")
_INFINITY = re.compile(r"^\s*([+-]?)Infinity")


def parse_amount(raw: object) -> float:
    """Coerce user input to a float; anything unparseable (or NaN) becomes 0."""
    if raw is None or isinstance(raw, bool):
        return 0.0
    if isinstance(raw, (int, float)):
        value = float(raw)
        return 0.0 if math.isnan(value) else value
    text = str(raw)
    match = _NUMERIC_PREFIX.match(text)
    if match:
        return float(match.group(1))
    match = _INFINITY.match(text)
    if match:
        return -math.inf if match.group(1) == "-" else math.inf
    return 0.0


def format_amount(value: float, decimals: int = 2) -> str:
    """Thousands separated, at most ``decimals`` decimals; non-finite values render as '-'."""
    if not math.isfinite(value):
        return "-"
    quant = Decimal(1).scaleb(-decimals)
    rounded = Decimal(str(value)).quantize(quant, rounding=ROUND_HALF_UP)
    text = f"{rounded:,.{decimals}f}"
    if "." in text:
        text = text.rstrip("0").rstrip(".")
    if text == "-0":
        text = "0"
    return text


def format_input(value: float) -> str:
    """Plain representation for <input type=number> values."""
    if not math.isfinite(value):
        return ""
    if value.is_integer():
        return str(int(value))
    return repr(value)


def finite_or_none(value: float) -> float | None:
    return value if math.isfinite(value) else None
