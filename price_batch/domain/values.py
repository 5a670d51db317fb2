"""Lenient parsing of user-entered prices and quantities."""
from __future__ import annotations

import re
from decimal import Decimal, InvalidOperation

_LEADING_INT = re.compile(r"^\s*([+-]?\d+)")


def parse_decimal(value: object) -> Decimal | None:
    """Return a finite Decimal, or None for blank and unparseable input."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, Decimal):
        result = value
    elif isinstance(value, (int, float)):
        result = Decimal(str(value))
    else:
        s = str(value).strip()
        if not s:
            return None
        try:
            result = Decimal(s)
        except InvalidOperation:
            return None
    if not result.is_finite():
        return None
    return result


def parse_price(value: object) -> Decimal:
    """Catalog prices: currency symbols and thousands separators allowed, never negative."""
    if isinstance(value, str):
        for ch in [",", "$", " "]:
            value = value.replace(ch, "")
    result = parse_decimal(value)
    if result is None or result < 0:
        return Decimal("0")
    return result


def parse_int(value: object) -> int | None:
    """Leading-integer parse: "3" -> 3, "2.5" -> 2, "4 packs" -> 4, "x" -> None."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, (float, Decimal)):
        if not Decimal(str(value)).is_finite():
            return None
        return int(value)
    match = _LEADING_INT.match(str(value))
    if match is None:
        return None
    return int(match.group(1))


def positive_quantity(value: object) -> int:
    qty = parse_int(value)
    if qty is None or qty < 1:
        return 1
    return qty
