"""Validation, UPC canonicalization and CSV export for retail price-change batches."""
from price_batch.application.use_cases import BatchContext, ExportBatchUseCase, ValidateBatchUseCase
from price_batch.domain.catalog import Catalog
from price_batch.domain.models import Batch, CatalogItem, IssueCode, Line, ValidationIssue
from price_batch.domain.services import BatchValidator, check_line, validate_batch, validate_line
from price_batch.domain.upc import canonicalize
from price_batch.presentation.csv_export import to_csv

__all__ = [
    "Batch",
    "BatchContext",
    "BatchValidator",
    "Catalog",
    "CatalogItem",
    "ExportBatchUseCase",
    "IssueCode",
    "Line",
    "ValidateBatchUseCase",
    "ValidationIssue",
    "canonicalize",
    "check_line",
    "to_csv",
    "validate_batch",
    "validate_line",
]
