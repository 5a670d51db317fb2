"""Read-only master item catalog keyed by canonical UPC."""
from __future__ import annotations

from types import MappingProxyType
from typing import Any, Iterable, Iterator, Mapping

from .models import CatalogItem
from .upc import canonicalize
from .values import parse_price

PRICE_KEYS = ("reference_price", "referencePrice", "reg_price", "regPrice", "price")
SEARCH_LIMIT = 50


class Catalog:
    """Immutable snapshot. Refreshing means building a new Catalog."""

    def __init__(self, items: Iterable[CatalogItem] = ()) -> None:
        mapping: dict[str, CatalogItem] = {}
        for item in items:
            if item.upc:
                mapping[item.upc] = item
        self._items: Mapping[str, CatalogItem] = MappingProxyType(mapping)

    @classmethod
    def from_records(cls, records: Iterable[Mapping[str, Any]]) -> "Catalog":
        return cls(item for item in (record_to_item(r) for r in records) if item is not None)

    def lookup(self, upc: str) -> CatalogItem | None:
        return self._items.get(canonicalize(upc))

    def search(self, term: str, limit: int = SEARCH_LIMIT) -> list[CatalogItem]:
        needle = (term or "").strip().lower()
        if not needle:
            return []
        numeric = needle.isdigit()

        hits: list[CatalogItem] = []
        if numeric:
            exact = self.lookup(needle)
            if exact is not None:
                hits.append(exact)
        for item in self._items.values():
            if len(hits) >= limit:
                break
            if item in hits:
                continue
            if (
                (numeric and needle in item.upc)
                or needle in item.brand.lower()
                or needle in item.description.lower()
            ):
                hits.append(item)
        return hits[:limit]

    def __contains__(self, upc: object) -> bool:
        return isinstance(upc, str) and canonicalize(upc) in self._items

    def __len__(self) -> int:
        return len(self._items)

    def __iter__(self) -> Iterator[CatalogItem]:
        return iter(self._items.values())


def record_to_item(record: Mapping[str, Any]) -> CatalogItem | None:
    upc = canonicalize(record.get("upc") or record.get("code"))
    if not upc:
        return None
    price = next((record[k] for k in PRICE_KEYS if record.get(k) not in (None, "")), None)
    return CatalogItem(
        upc=upc,
        brand=_clean(record.get("brand")),
        description=_clean(record.get("description")),
        reference_price=parse_price(price),
    )


def _clean(value: object) -> str:
    if value is None:
        return ""
    s = str(value).strip()
    return "" if s.upper() == "NAN" else s

