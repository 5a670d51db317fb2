import json
from pathlib import Path

import pytest

from price_batch.application.use_cases import BatchContext, ExportBatchUseCase, ValidateBatchUseCase
from price_batch.domain.errors import BatchNotFoundError, ExportRefusedError
from price_batch.domain.models import IssueCode, Line
from price_batch.domain.services import BatchValidator
from price_batch.infrastructure.storage.batch_store import JsonBatchRepository
from price_batch.infrastructure.storage.catalog_store import CatalogProvider


@pytest.fixture
def repo(tmp_path: Path) -> JsonBatchRepository:
    return JsonBatchRepository(tmp_path / "batches.json")


def make_context(repo: JsonBatchRepository, catalog_path: Path) -> BatchContext:
    provider = CatalogProvider(catalog_path)
    provider.load()
    return BatchContext(repository=repo, catalog_source=provider, validator=BatchValidator())


def test_validate_without_catalog_skips_membership(repo: JsonBatchRepository, tmp_path: Path) -> None:
    batch = repo.create("Week", lines=[Line(record_type="REG", upc="012345678905")])

    report = ValidateBatchUseCase(make_context(repo, tmp_path / "missing.json")).execute(batch.id)

    assert not report.has_issues()


def test_validate_with_catalog_flags_unknown_upc(repo: JsonBatchRepository, tmp_path: Path) -> None:
    catalog_path = tmp_path / "master.json"
    catalog_path.write_text(json.dumps([{"upc": "17", "brand": "B", "description": "D"}]))
    batch = repo.create("Week", lines=[Line(record_type="REG", upc="012345678905")])

    report = ValidateBatchUseCase(make_context(repo, catalog_path)).execute(batch.id)

    assert [issue.code for issue in report.issues] == [IssueCode.UPC_NOT_IN_CATALOG]


def test_export_writes_csv_file(repo: JsonBatchRepository, tmp_path: Path) -> None:
    batch = repo.create(
        "Week 45",
        lines=[
            Line(
                record_type="SALE",
                upc="012345678905",
                promo_price="2.99",
                start_date="2025-11-01",
                end_date="2025-11-14",
            )
        ],
    )
    use_case = ExportBatchUseCase(make_context(repo, tmp_path / "missing.json"))

    result = use_case.execute(batch.id)
    target = result.write_to(tmp_path / "out")

    assert result.filename == "Week_45_price_batch.csv"
    assert result.row_count == 1
    assert target == tmp_path / "out" / "Week_45_price_batch.csv"
    assert target.read_bytes() == (
        b"Record Type,UPC,Promo_Price,Promo_Qty,Start_Date,End_Date\r\n"
        b"SALE,0001234567890,2.99,1,2025-11-01,2025-11-14\r\n"
    )


def test_export_refused_for_invalid_batch(repo: JsonBatchRepository, tmp_path: Path) -> None:
    batch = repo.create("Week")
    use_case = ExportBatchUseCase(make_context(repo, tmp_path / "missing.json"))

    with pytest.raises(ExportRefusedError) as excinfo:
        use_case.execute(batch.id)

    assert {issue.code for issue in excinfo.value.issues} == {IssueCode.RECORD_TYPE_INVALID, IssueCode.UPC_INVALID}


def test_unknown_batch(repo: JsonBatchRepository, tmp_path: Path) -> None:
    with pytest.raises(BatchNotFoundError):
        ValidateBatchUseCase(make_context(repo, tmp_path / "missing.json")).execute("nope")
