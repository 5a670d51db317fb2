"""Loading master item snapshots and holding the current catalog."""
from __future__ import annotations

import json
import threading
from pathlib import Path
from typing import Any

import pandas as pd
import structlog

from price_batch.domain.catalog import Catalog
from price_batch.domain.errors import CatalogUnavailableError

logger = structlog.get_logger(__name__)

EXCEL_ENGINES = {".xlsx": "openpyxl", ".xls": "xlrd"}


def _json_records(path: Path) -> list[dict[str, Any]]:
    payload = json.loads(path.read_text(encoding="utf-8"))
    if isinstance(payload, dict):
        payload = payload.get("items", [])
        if isinstance(payload, dict):
            payload = list(payload.values())
    if not isinstance(payload, list):
        raise ValueError("expected a list of catalog records")
    return [item for item in payload if isinstance(item, dict)]


def _frame_records(df: pd.DataFrame) -> list[dict[str, Any]]:
    df = df.rename(columns=lambda c: str(c).strip().lower().replace(" ", "_"))
    df = df.fillna("")
    return df.to_dict(orient="records")


def read_catalog_records(path: Path) -> list[dict[str, Any]]:
    suffix = path.suffix.lower()
    if suffix == ".json":
        return _json_records(path)
    if suffix == ".csv":
        return _frame_records(pd.read_csv(path, dtype=str, keep_default_na=False))
    if suffix in EXCEL_ENGINES:
        return _frame_records(pd.read_excel(path, engine=EXCEL_ENGINES[suffix], dtype=str))
    raise ValueError(f"unsupported catalog format {suffix or '(none)'}")


def load_catalog_snapshot(path: Path) -> Catalog:
    path = Path(path)
    if not path.exists():
        raise CatalogUnavailableError(str(path), "file not found")
    try:
        records = read_catalog_records(path)
    except Exception as exc:
        raise CatalogUnavailableError(str(path), str(exc)) from exc
    return Catalog.from_records(records)


class CatalogProvider:
    """Owns the current snapshot; a failed reload keeps the previous one."""

    def __init__(self, path: Path) -> None:
        self._path = Path(path)
        self._current: Catalog | None = None
        self._lock = threading.Lock()

    @property
    def path(self) -> Path:
        return self._path

    @property
    def current(self) -> Catalog | None:
        return self._current

    @property
    def loaded(self) -> bool:
        return self._current is not None

    def load(self, force: bool = False) -> Catalog | None:
        if self._current is not None and not force:
            return self._current
        try:
            snapshot = load_catalog_snapshot(self._path)
        except CatalogUnavailableError as exc:
            logger.warning("catalog_unavailable", path=str(self._path), reason=exc.details["reason"])
            return self._current
        with self._lock:
            self._current = snapshot
        logger.info("catalog_loaded", path=str(self._path), items=len(snapshot), reloaded=force)
        return snapshot

    def refresh(self) -> Catalog | None:
        return self.load(force=True)
