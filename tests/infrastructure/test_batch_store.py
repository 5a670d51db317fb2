from pathlib import Path
import json

import pytest

from price_batch.domain.errors import BatchNotFoundError, DuplicateBatchNameError
from price_batch.domain.models import Line
from price_batch.infrastructure.storage.batch_store import JsonBatchRepository, WriteBehindBatchWriter


@pytest.fixture
def repo(tmp_path: Path) -> JsonBatchRepository:
    return JsonBatchRepository(tmp_path / "data" / "batches.json")


def test_missing_file_is_empty_store(repo: JsonBatchRepository):
    assert repo.list_batches() == []


def test_create_and_reload(repo: JsonBatchRepository):
    batch = repo.create("Week 45")

    assert len(batch.lines) == 1
    raw = json.loads(repo.path.read_text())
    assert raw[0]["name"] == "Week 45"
    assert raw[0]["lines"][0]["recordType"] == ""

    loaded = repo.get(batch.id)
    assert loaded.name == "Week 45"
    assert loaded.lines == batch.lines


def test_names_are_unique_case_insensitive(repo: JsonBatchRepository):
    repo.create("Week 45")
    assert repo.find_by_name("WEEK 45").name == "Week 45"
    with pytest.raises(DuplicateBatchNameError):
        repo.create("week 45 ")
    with pytest.raises(DuplicateBatchNameError):
        repo.create("  ")


def test_save_preserves_line_order_and_values(repo: JsonBatchRepository):
    batch = repo.create("Week 45", lines=[])
    batch.lines = [
        Line(record_type="SALE", upc="0000000000017", promo_price="2.99", promo_qty=2),
        Line(record_type="REG", upc="0001234567890"),
    ]
    repo.save(batch)

    loaded = repo.get(batch.id)

    assert [line.upc for line in loaded.lines] == ["0000000000017", "0001234567890"]
    assert loaded.lines[0].promo_qty == 2
    assert loaded.lines[0].promo_price == "2.99"


def test_save_rejects_rename_onto_existing_name(repo: JsonBatchRepository):
    repo.create("A")
    b = repo.create("B")
    b.name = "a"
    with pytest.raises(DuplicateBatchNameError):
        repo.save(b)


def test_list_is_newest_first(repo: JsonBatchRepository):
    first = repo.create("first")
    repo.create("second")
    repo.save(first)

    assert [b.name for b in repo.list_batches()] == ["first", "second"]


def test_delete(repo: JsonBatchRepository):
    batch = repo.create("gone")
    repo.delete(batch.id)
    with pytest.raises(BatchNotFoundError):
        repo.get(batch.id)
    with pytest.raises(BatchNotFoundError):
        repo.delete(batch.id)


def test_duplicate_copies_lines_under_new_name(repo: JsonBatchRepository):
    batch = repo.create("Week", lines=[Line(record_type="REG", upc="0000000000017")])

    first = repo.duplicate(batch.id)
    second = repo.duplicate(batch.id)

    assert first.id != batch.id
    assert first.name == "Week_COPY"
    assert second.name == "Week_COPY_3"
    assert repo.get(first.id).lines == batch.lines


def test_reads_legacy_reg_price_key(tmp_path: Path):
    path = tmp_path / "batches.json"
    path.write_text(
        json.dumps(
            [
                {
                    "id": "x1",
                    "name": "legacy",
                    "lines": [{"recordType": "REG", "upc": "17", "regPrice": 1.99, "promoQty": ""}],
                    "updatedAt": "2025-01-01T00:00:00Z",
                }
            ]
        )
    )

    batch = JsonBatchRepository(path).get("x1")

    assert batch.lines[0].reference_price == 1.99
    assert batch.lines[0].start_date == ""


def test_write_behind_coalesces_saves(repo: JsonBatchRepository):
    batch = repo.create("Week")
    writer = WriteBehindBatchWriter(repo, delay=60)

    batch.lines[0].upc = "1"
    writer.schedule(batch)
    batch.lines[0].upc = "2"
    writer.schedule(batch)

    assert writer.pending == 1
    assert repo.get(batch.id).lines[0].upc == ""

    assert writer.flush() == 1
    assert writer.pending == 0
    assert repo.get(batch.id).lines[0].upc == "2"
    writer.close()


def test_write_behind_flush_survives_corrupted_store(repo: JsonBatchRepository):
    batch = repo.create("Week")
    writer = WriteBehindBatchWriter(repo, delay=60)
    repo.path.write_text("{not json", encoding="utf-8")

    writer.schedule(batch)

    assert writer.flush() == 1
    assert writer.pending == 0
    assert repo.path.read_text(encoding="utf-8") == "{not json"


def test_write_behind_flush_with_nothing_pending(repo: JsonBatchRepository):
    writer = WriteBehindBatchWriter(repo, delay=60)
    assert writer.flush() == 0
    writer.close()
