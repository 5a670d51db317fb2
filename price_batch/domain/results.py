"""Domain-level results for batch validation."""
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Iterable, Mapping, Sequence

from .models import IssueCode, ValidationIssue


@dataclass(frozen=True)
class ValidationSummary:
    batch_id: str
    total_lines: int
    invalid_lines: int
    issue_counts: Mapping[IssueCode, int]
    generated_at: datetime

    @property
    def total_issues(self) -> int:
        return sum(self.issue_counts.values())


@dataclass(frozen=True)
class ValidationReport:
    summary: ValidationSummary
    issues: Sequence[ValidationIssue] = field(default_factory=tuple)

    def has_issues(self) -> bool:
        return bool(self.issues)

    @property
    def exportable(self) -> bool:
        return not self.issues

    def iter_issues(self) -> Iterable[ValidationIssue]:
        yield from self.issues

    def issues_for_line(self, index: int) -> list[ValidationIssue]:
        return [issue for issue in self.issues if issue.line_index == index]
