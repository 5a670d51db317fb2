"""Issue report generators for batch validation results."""
from __future__ import annotations

import csv
import html
import io
from typing import Sequence

from price_batch.domain.models import ValidationIssue
from price_batch.domain.results import ValidationReport
from price_batch.domain.services import ISSUE_FIELDS


def issues_to_rows(issues: Sequence[ValidationIssue]) -> list[dict[str, str]]:
    rows: list[dict[str, str]] = []
    for item in issues:
        rows.append(
            {
                "line": str(item.line_number),
                "code": item.code.value,
                "field": ISSUE_FIELDS[item.code],
                "message": item.message,
            }
        )
    return rows


def render_csv(issues: Sequence[ValidationIssue]) -> bytes:
    rows = issues_to_rows(issues)
    buffer = io.StringIO()
    writer = csv.DictWriter(buffer, fieldnames=list(rows[0].keys()) if rows else [])
    if rows:
        writer.writeheader()
        writer.writerows(rows)
    return buffer.getvalue().encode("utf-8")


def render_html(report: ValidationReport) -> str:
    rows = issues_to_rows(tuple(report.iter_issues()))
    if not rows:
        return "<p>No issues detected.</p>"
    header = "".join(f"<th>{col}</th>" for col in rows[0].keys())
    body_parts = []
    for row in rows:
        body_parts.append("<tr>" + "".join(f"<td>{html.escape(value)}</td>" for value in row.values()) + "</tr>")
    body_html = "".join(body_parts)
    return f"<table><thead><tr>{header}</tr></thead><tbody>{body_html}</tbody></table>"


def format_issues(issues: Sequence[ValidationIssue]) -> list[str]:
    return [f"- [{issue.code.value}] {issue.message}" for issue in issues]
