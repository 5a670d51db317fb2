"""Bulk edits applied to a batch's lines.

These operate on a Batch in memory; persisting the result is the caller's job.
"""
from __future__ import annotations

import re
from datetime import date
from decimal import ROUND_FLOOR, Decimal
from typing import Any, Iterable, Mapping

from .catalog import Catalog
from .models import NON_PROMO_RECORD_TYPE, RECORD_TYPES, Batch, Line
from .upc import canonicalize
from .values import parse_decimal

DEFAULT_RECORD_TYPE = "SALE"
BULK_FIELDS = ("record_type", "promo_price", "promo_qty", "start_date", "end_date")

_TOKEN_SPLIT = re.compile(r"[\s,]+")
_CENT = Decimal("0.01")
_DIME = Decimal("0.1")


def blank_line() -> Line:
    return Line()


def is_empty_line(line: Line) -> bool:
    return not line.upc and not line.brand and not line.description


def split_upc_tokens(text: str | Iterable[str]) -> list[str]:
    if isinstance(text, str):
        chunks = [text]
    else:
        chunks = list(text)
    tokens: list[str] = []
    for chunk in chunks:
        tokens.extend(t for t in _TOKEN_SPLIT.split(chunk or "") if t)
    return tokens


def fill_from_catalog(line: Line, catalog: Catalog | None) -> bool:
    if catalog is None:
        return False
    item = catalog.lookup(line.upc)
    if item is None:
        return False
    line.brand = item.brand
    line.description = item.description
    line.reference_price = str(item.reference_price)
    return True


def upsert_line(batch: Batch, line: Line) -> None:
    """Replace the line sharing line's canonical UPC, else append."""
    key = canonicalize(line.upc)
    position = next((i for i, existing in enumerate(batch.lines) if existing is line), None)
    if position is not None:
        del batch.lines[position]
    match = next(
        (i for i, existing in enumerate(batch.lines) if key and canonicalize(existing.upc) == key),
        None,
    )
    if match is not None:
        batch.lines[match] = line
    elif position is not None:
        batch.lines.insert(position, line)
    else:
        batch.lines.append(line)
    # a fresh batch starts with one placeholder row
    if len(batch.lines) > 1 and is_empty_line(batch.lines[0]):
        batch.lines.pop(0)


def first_empty_line(batch: Batch) -> Line | None:
    return next((line for line in batch.lines if is_empty_line(line)), None)


def add_upcs(
    batch: Batch,
    codes: str | Iterable[str],
    record_type: str = DEFAULT_RECORD_TYPE,
    catalog: Catalog | None = None,
) -> list[Line]:
    rt = record_type if record_type in RECORD_TYPES else DEFAULT_RECORD_TYPE
    added: list[Line] = []
    for code in split_upc_tokens(codes):
        upc = canonicalize(code)
        if not upc:
            continue
        line = first_empty_line(batch) or blank_line()
        line.record_type = rt
        line.upc = upc
        fill_from_catalog(line, catalog)
        upsert_line(batch, line)
        added.append(line)
    return added


def apply_to_all(batch: Batch, **fields: Any) -> int:
    """Set each given field on every line. Blank values are skipped."""
    unknown = set(fields) - set(BULK_FIELDS)
    if unknown:
        raise ValueError(f"Unsupported bulk field(s): {', '.join(sorted(unknown))}")
    updates: dict[str, Any] = {}
    for name, value in fields.items():
        if value is None or (isinstance(value, str) and not value.strip()):
            continue
        if name == "record_type" and value not in RECORD_TYPES:
            raise ValueError(f"Unknown record type {value!r}")
        if isinstance(value, date):
            value = value.isoformat()
        updates[name] = value
    for line in batch.lines:
        for name, value in updates.items():
            setattr(line, name, value)
    return len(updates)


def snap_to_nine(price: Decimal) -> Decimal:
    """Round down to the nearest price ending in 9 cents (3.27 -> 3.19, 3.78 -> 3.69)."""
    snapped = ((price + _CENT) / _DIME).to_integral_value(rounding=ROUND_FLOOR) * _DIME - _CENT
    if snapped <= 0:
        return price.quantize(_CENT)
    return snapped.quantize(_CENT)


def apply_percent_off(batch: Batch, percent: object) -> int:
    pct = parse_decimal(percent)
    if pct is None or pct <= 0 or pct >= 100:
        return 0
    changed = 0
    factor = 1 - pct / 100
    for line in batch.lines:
        base = parse_decimal(line.reference_price)
        if base is None or base <= 0:
            continue
        line.promo_price = f"{snap_to_nine(base * factor):.2f}"
        changed += 1
    return changed


def refresh_from_catalog(batch: Batch, catalog: Catalog | None) -> int:
    return sum(1 for line in batch.lines if fill_from_catalog(line, catalog))


def lines_from_price_list(items: Iterable[Mapping[str, Any]]) -> list[Line]:
    lines: list[Line] = []
    for item in items:
        price = item.get("price")
        lines.append(
            Line(
                record_type=NON_PROMO_RECORD_TYPE,
                upc=str(item.get("code") or item.get("upc") or ""),
                brand=str(item.get("brand") or ""),
                description=str(item.get("description") or ""),
                reference_price="" if price is None else price,
            )
        )
    return lines


def remove_line(batch: Batch, index: int) -> Line:
    return batch.lines.pop(index)


def filter_lines(batch: Batch, term: str) -> list[tuple[int, Line]]:
    needle = (term or "").strip().lower()
    indexed = list(enumerate(batch.lines))
    if not needle:
        return indexed
    return [
        (i, line)
        for i, line in indexed
        if needle in line.upc.lower() or needle in line.brand.lower() or needle in line.description.lower()
    ]


def next_duplicate_name(name: str, existing: Iterable[str]) -> str:
    taken = set(existing)
    n = 2
    while True:
        candidate = f"{name}_COPY" + (f"_{n}" if n > 2 else "")
        if candidate not in taken:
            return candidate
        n += 1
