"""Domain models for price-change batches.

Lines are mutable and owned by their batch; catalog items and validation
issues are immutable snapshots.
"""
from __future__ import annotations

from dataclasses import dataclass, field, replace
from datetime import date, datetime, timezone
from decimal import Decimal
from enum import Enum
from typing import Any, Mapping, Union

RECORD_TYPES = ("SALE", "TPR", "INSTORE", "REG")
NON_PROMO_RECORD_TYPE = "REG"

# Values as entered by users or read back from JSON.
FieldValue = Union[str, int, float, Decimal]


class IssueCode(str, Enum):
    RECORD_TYPE_INVALID = "RECORD_TYPE_INVALID"
    UPC_INVALID = "UPC_INVALID"
    UPC_NOT_IN_CATALOG = "UPC_NOT_IN_CATALOG"
    PROMO_PRICE_REQUIRED = "PROMO_PRICE_REQUIRED"
    START_DATE_REQUIRED = "START_DATE_REQUIRED"
    END_DATE_REQUIRED = "END_DATE_REQUIRED"
    DATE_RANGE_INVERTED = "DATE_RANGE_INVERTED"


@dataclass(frozen=True)
class CatalogItem:
    """Master-list entry keyed by canonical UPC."""

    upc: str
    brand: str
    description: str
    reference_price: Decimal


@dataclass(frozen=True)
class ValidationIssue:
    """A user-correctable defect on one line of a batch."""

    line_index: int
    code: IssueCode
    message: str

    @property
    def line_number(self) -> int:
        return self.line_index + 1


def _text(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, datetime):
        return value.date().isoformat()
    if isinstance(value, date):
        return value.isoformat()
    return str(value)


def _field(value: Any) -> FieldValue:
    if value is None:
        return ""
    if isinstance(value, bool):
        return str(value)
    if isinstance(value, (int, float, Decimal, str)):
        return value
    return str(value)


@dataclass
class Line:
    """One proposed price change.

    brand, description and reference_price are copied from the catalog for
    display and may go stale; the catalog stays authoritative.
    """

    record_type: str = ""
    upc: str = ""
    brand: str = ""
    description: str = ""
    reference_price: FieldValue = ""
    promo_price: FieldValue = ""
    promo_qty: FieldValue = ""
    start_date: str = ""
    end_date: str = ""

    def copy(self) -> "Line":
        return replace(self)

    def to_dict(self) -> dict[str, Any]:
        return {
            "recordType": self.record_type,
            "upc": self.upc,
            "brand": self.brand,
            "description": self.description,
            "referencePrice": _json_value(self.reference_price),
            "promoPrice": _json_value(self.promo_price),
            "promoQty": _json_value(self.promo_qty),
            "startDate": self.start_date,
            "endDate": self.end_date,
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "Line":
        def pick(*keys: str) -> Any:
            for key in keys:
                if key in data and data[key] is not None:
                    return data[key]
            return None

        return cls(
            record_type=_text(pick("recordType", "record_type")),
            upc=_text(pick("upc")),
            brand=_text(pick("brand")),
            description=_text(pick("description")),
            reference_price=_field(pick("referencePrice", "reference_price", "regPrice", "reg_price")),
            promo_price=_field(pick("promoPrice", "promo_price")),
            promo_qty=_field(pick("promoQty", "promo_qty")),
            start_date=_text(pick("startDate", "start_date")),
            end_date=_text(pick("endDate", "end_date")),
        )


def _json_value(value: FieldValue) -> Any:
    if isinstance(value, Decimal):
        return str(value)
    return value


def utc_timestamp() -> str:
    return datetime.now(timezone.utc).isoformat()


@dataclass
class Batch:
    """Named, ordered collection of lines destined for one export."""

    id: str
    name: str
    lines: list[Line] = field(default_factory=list)
    updated_at: str = field(default_factory=utc_timestamp)

    def touch(self) -> None:
        self.updated_at = utc_timestamp()

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "lines": [line.to_dict() for line in self.lines],
            "updatedAt": self.updated_at,
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "Batch":
        return cls(
            id=str(data["id"]),
            name=str(data.get("name") or ""),
            lines=[Line.from_dict(item) for item in data.get("lines") or []],
            updated_at=str(data.get("updatedAt") or data.get("updated_at") or ""),
        )
