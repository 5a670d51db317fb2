"""Domain services implementing line and batch validation rules."""
from __future__ import annotations

from collections import Counter
from datetime import datetime, timezone
from typing import Sequence

from .catalog import Catalog
from .models import (
    NON_PROMO_RECORD_TYPE,
    RECORD_TYPES,
    Batch,
    IssueCode,
    Line,
    ValidationIssue,
)
from .results import ValidationReport, ValidationSummary
from .upc import canonicalize, digit_count
from .values import parse_decimal, parse_int

UPC_MIN_DIGITS = 12
UPC_MAX_DIGITS = 14

ISSUE_PHRASES: dict[IssueCode, str] = {
    IssueCode.RECORD_TYPE_INVALID: "Record Type invalid/blank",
    IssueCode.UPC_INVALID: "UPC missing or malformed",
    IssueCode.UPC_NOT_IN_CATALOG: "UPC not in master list",
    IssueCode.PROMO_PRICE_REQUIRED: "Promo_Price required",
    IssueCode.START_DATE_REQUIRED: "Start_Date required",
    IssueCode.END_DATE_REQUIRED: "End_Date required",
    IssueCode.DATE_RANGE_INVERTED: "End_Date < Start_Date",
}

# Line attribute each code points at, for cell highlighting.
ISSUE_FIELDS: dict[IssueCode, str] = {
    IssueCode.RECORD_TYPE_INVALID: "record_type",
    IssueCode.UPC_INVALID: "upc",
    IssueCode.UPC_NOT_IN_CATALOG: "upc",
    IssueCode.PROMO_PRICE_REQUIRED: "promo_price",
    IssueCode.START_DATE_REQUIRED: "start_date",
    IssueCode.END_DATE_REQUIRED: "end_date",
    IssueCode.DATE_RANGE_INVERTED: "end_date",
}


def make_issue(index: int, code: IssueCode) -> ValidationIssue:
    return ValidationIssue(line_index=index, code=code, message=f"Line {index + 1}: {ISSUE_PHRASES[code]}")


def needs_promo(record_type: str) -> bool:
    rt = (record_type or "").strip()
    return bool(rt) and rt != NON_PROMO_RECORD_TYPE


def validate_line(line: Line, index: int, catalog: Catalog | None) -> list[ValidationIssue]:
    """Check one line and default its promo quantity in place.

    Pass a copy when the caller's line must not change. A catalog of None means
    the master list is not loaded and membership is not checked.
    """
    issues: list[ValidationIssue] = []
    rt = (line.record_type or "").strip()

    if rt not in RECORD_TYPES:
        issues.append(make_issue(index, IssueCode.RECORD_TYPE_INVALID))

    upc = canonicalize(line.upc)
    raw_digits = digit_count(line.upc)
    if not upc or not UPC_MIN_DIGITS <= raw_digits <= UPC_MAX_DIGITS:
        issues.append(make_issue(index, IssueCode.UPC_INVALID))
    elif catalog is not None and catalog.lookup(upc) is None:
        issues.append(make_issue(index, IssueCode.UPC_NOT_IN_CATALOG))

    if needs_promo(rt):
        price = parse_decimal(line.promo_price)
        if price is None or price <= 0:
            issues.append(make_issue(index, IssueCode.PROMO_PRICE_REQUIRED))
        if not line.start_date:
            issues.append(make_issue(index, IssueCode.START_DATE_REQUIRED))
        if not line.end_date:
            issues.append(make_issue(index, IssueCode.END_DATE_REQUIRED))

    # ISO dates sort the same as the calendar
    if line.start_date and line.end_date and line.end_date < line.start_date:
        issues.append(make_issue(index, IssueCode.DATE_RANGE_INVERTED))

    qty = parse_int(line.promo_qty)
    if qty is None or qty < 1:
        line.promo_qty = 1

    return issues


def check_line(line: Line, index: int, catalog: Catalog | None) -> tuple[list[ValidationIssue], Line]:
    normalized = line.copy()
    return validate_line(normalized, index, catalog), normalized


def validate_batch(batch: Batch, catalog: Catalog | None) -> list[ValidationIssue]:
    issues: list[ValidationIssue] = []
    for index, line in enumerate(batch.lines):
        issues.extend(validate_line(line.copy(), index, catalog))
    return issues


class BatchValidator:
    """Runs the line rules over a batch and summarizes the outcome."""

    def validate(self, batch: Batch, catalog: Catalog | None) -> ValidationReport:
        issues = validate_batch(batch, catalog)
        return ValidationReport(summary=self._summarize(batch, issues), issues=tuple(issues))

    @staticmethod
    def _summarize(batch: Batch, issues: Sequence[ValidationIssue]) -> ValidationSummary:
        counts = Counter(issue.code for issue in issues)
        return ValidationSummary(
            batch_id=batch.id,
            total_lines=len(batch.lines),
            invalid_lines=len({issue.line_index for issue in issues}),
            issue_counts={code: counts[code] for code in IssueCode if counts[code]},
            generated_at=datetime.now(timezone.utc),
        )
