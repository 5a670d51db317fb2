"""Serialization of a batch into the pricing system's import CSV.

Export is all-or-nothing: a batch with any validation issue produces no text.
"""
from __future__ import annotations

import re
from decimal import Decimal

from price_batch.domain.catalog import Catalog
from price_batch.domain.errors import ExportRefusedError
from price_batch.domain.models import Batch, FieldValue, Line
from price_batch.domain.services import validate_batch
from price_batch.domain.upc import canonicalize
from price_batch.domain.values import positive_quantity

EXPORT_HEADERS = ["Record Type", "UPC", "Promo_Price", "Promo_Qty", "Start_Date", "End_Date"]
LINE_TERMINATOR = "\r\n"
ENCODING = "utf-8"

_QUOTE_TRIGGERS = re.compile(r'[",\r\n]')
_UNSAFE_FILENAME = re.compile(r"[^0-9A-Za-z._-]+")


def needs_quote(value: object) -> bool:
    return bool(_QUOTE_TRIGGERS.search(str(value)))


def quote_field(value: str) -> str:
    if needs_quote(value):
        return '"' + value.replace('"', '""') + '"'
    return value


def _cell(value: FieldValue | None) -> str:
    if value is None:
        return ""
    if isinstance(value, Decimal):
        return format(value, "f")
    return str(value)


def line_to_row(line: Line) -> list[str]:
    return [
        (line.record_type or "").strip(),
        canonicalize(line.upc),
        _cell(line.promo_price),
        str(positive_quantity(line.promo_qty)),
        _cell(line.start_date),
        _cell(line.end_date),
    ]


def render_rows(batch: Batch) -> str:
    rows = [EXPORT_HEADERS, *(line_to_row(line) for line in batch.lines)]
    return "".join(",".join(quote_field(cell) for cell in row) + LINE_TERMINATOR for row in rows)


def to_csv(batch: Batch, catalog: Catalog | None = None) -> str:
    issues = validate_batch(batch, catalog)
    if issues:
        raise ExportRefusedError(issues)
    return render_rows(batch)


def encode_csv(text: str) -> bytes:
    return text.encode(ENCODING)


def export_filename(batch: Batch) -> str:
    stem = _UNSAFE_FILENAME.sub("_", batch.name.strip()).strip("_") or "batch"
    return f"{stem}_price_batch.csv"
