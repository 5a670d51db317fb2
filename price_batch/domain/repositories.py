"""Repository interfaces anchoring the domain layer."""
from __future__ import annotations

from typing import Protocol, Sequence

from .catalog import Catalog
from .models import Batch


class BatchRepository(Protocol):
    """Stores batches by id; owns name uniqueness."""

    def list_batches(self) -> Sequence[Batch]:
        ...

    def get(self, batch_id: str) -> Batch:
        ...

    def save(self, batch: Batch) -> Batch:
        ...


class CatalogSource(Protocol):
    """Supplies the current catalog snapshot, or None while it is unavailable."""

    @property
    def current(self) -> Catalog | None:
        ...
