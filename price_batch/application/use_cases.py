"""Application services orchestrating validation and export of stored batches."""
from __future__ import annotations

from dataclasses import dataclass

import structlog

from price_batch.application.dto import ExportResult
from price_batch.domain.errors import ExportRefusedError
from price_batch.domain.repositories import BatchRepository, CatalogSource
from price_batch.domain.results import ValidationReport
from price_batch.domain.services import BatchValidator
from price_batch.presentation.csv_export import encode_csv, export_filename, to_csv

logger = structlog.get_logger(__name__)


@dataclass(slots=True)
class BatchContext:
    repository: BatchRepository
    catalog_source: CatalogSource
    validator: BatchValidator


class ValidateBatchUseCase:
    def __init__(self, context: BatchContext) -> None:
        self._context = context

    def execute(self, batch_id: str) -> ValidationReport:
        batch = self._context.repository.get(batch_id)
        catalog = self._context.catalog_source.current
        report = self._context.validator.validate(batch, catalog)
        logger.info(
            "batch_validated",
            batch_id=batch_id,
            lines=report.summary.total_lines,
            issues=report.summary.total_issues,
            catalog_loaded=catalog is not None,
        )
        return report


class ExportBatchUseCase:
    def __init__(self, context: BatchContext) -> None:
        self._context = context

    def execute(self, batch_id: str) -> ExportResult:
        batch = self._context.repository.get(batch_id)
        try:
            text = to_csv(batch, self._context.catalog_source.current)
        except ExportRefusedError as exc:
            logger.warning("export_refused", batch_id=batch_id, issues=len(exc.issues))
            raise
        result = ExportResult(
            batch_id=batch.id,
            filename=export_filename(batch),
            content=encode_csv(text),
            row_count=len(batch.lines),
        )
        logger.info("batch_exported", batch_id=batch_id, rows=result.row_count, filename=result.filename)
        return result
