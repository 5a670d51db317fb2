from pathlib import Path
import json

import pytest

from price_batch.domain.errors import CatalogUnavailableError
from price_batch.infrastructure.storage.catalog_store import CatalogProvider, load_catalog_snapshot


def write_json(path: Path, payload) -> Path:
    path.write_text(json.dumps(payload), encoding="utf-8")
    return path


def test_load_json_snapshot(tmp_path: Path):
    path = write_json(
        tmp_path / "master_items.json",
        [{"upc": "012345678905", "brand": "Acme", "description": "Water", "reg_price": 1.99}],
    )

    catalog = load_catalog_snapshot(path)

    assert len(catalog) == 1
    assert catalog.lookup("0001234567890").brand == "Acme"


def test_load_json_items_object(tmp_path: Path):
    path = write_json(tmp_path / "list.json", {"items": {"a": {"code": "17", "brand": "B", "description": "D"}}})
    assert "17" in load_catalog_snapshot(path)


def test_load_csv_keeps_leading_zeros(tmp_path: Path):
    path = tmp_path / "master.csv"
    path.write_text("UPC,Brand,Description,Reg Price\n0000000000017,Brightside,Crackers,2.50\n", encoding="utf-8")

    catalog = load_catalog_snapshot(path)

    item = catalog.lookup("0000000000017")
    assert item is not None
    assert str(item.reference_price) == "2.50"


def test_missing_file_is_unavailable(tmp_path: Path):
    with pytest.raises(CatalogUnavailableError):
        load_catalog_snapshot(tmp_path / "nope.json")


def test_corrupt_file_is_unavailable(tmp_path: Path):
    path = tmp_path / "bad.json"
    path.write_text("{not json", encoding="utf-8")
    with pytest.raises(CatalogUnavailableError):
        load_catalog_snapshot(path)


def test_provider_stays_unavailable_when_load_fails(tmp_path: Path):
    provider = CatalogProvider(tmp_path / "missing.json")

    assert provider.load() is None
    assert provider.current is None
    assert not provider.loaded


def test_provider_keeps_previous_snapshot_on_failed_refresh(tmp_path: Path):
    path = write_json(tmp_path / "master.json", [{"upc": "17", "brand": "B", "description": "D"}])
    provider = CatalogProvider(path)
    first = provider.load()

    path.write_text("garbage", encoding="utf-8")
    assert provider.refresh() is first
    assert provider.current is first


def test_provider_swaps_whole_snapshot_on_refresh(tmp_path: Path):
    path = write_json(tmp_path / "master.json", [{"upc": "17", "brand": "B", "description": "D"}])
    provider = CatalogProvider(path)
    first = provider.load()

    write_json(path, [{"upc": "18", "brand": "C", "description": "E"}])
    assert provider.load() is first
    second = provider.refresh()

    assert second is not first
    assert "18" in second and "17" not in second
    assert "17" in first
