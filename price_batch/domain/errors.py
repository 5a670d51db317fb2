"""Exception types raised by the batch store, catalog loader and exporter.

Validation defects are never raised; they are returned as ValidationIssue lists.
"""
from __future__ import annotations

from typing import Any, Sequence

from .models import ValidationIssue


class PriceBatchError(Exception):
    """Base class for all package errors.

    Attributes:
        code: Stable error code (e.g. "BATCH_NOT_FOUND")
        message: Human-readable message
        details: Additional context
    """

    def __init__(self, code: str, message: str, details: dict[str, Any] | None = None) -> None:
        self.code = code
        self.message = message
        self.details = details or {}
        super().__init__(message)

    def to_dict(self) -> dict[str, Any]:
        return {"error": {"code": self.code, "message": self.message, "details": self.details}}


class ExportRefusedError(PriceBatchError):
    """Raised instead of producing CSV text when any line has a defect."""

    def __init__(self, issues: Sequence[ValidationIssue]) -> None:
        self.issues = tuple(issues)
        lines = sorted({issue.line_number for issue in self.issues})
        super().__init__(
            code="EXPORT_REFUSED",
            message=f"Export refused: {len(self.issues)} issue(s) on {len(lines)} line(s)",
            details={"lines": lines, "issues": [issue.message for issue in self.issues]},
        )


class BatchNotFoundError(PriceBatchError):
    def __init__(self, batch_id: str) -> None:
        super().__init__(
            code="BATCH_NOT_FOUND",
            message=f"Batch {batch_id!r} not found",
            details={"id": batch_id},
        )


class DuplicateBatchNameError(PriceBatchError):
    def __init__(self, name: str) -> None:
        super().__init__(
            code="BATCH_NAME_TAKEN",
            message=f"Batch name {name!r} is blank or already in use",
            details={"name": name},
        )


class CatalogUnavailableError(PriceBatchError):
    def __init__(self, source: str, reason: str) -> None:
        super().__init__(
            code="CATALOG_UNAVAILABLE",
            message=f"Catalog snapshot {source} could not be loaded: {reason}",
            details={"source": source, "reason": reason},
        )
