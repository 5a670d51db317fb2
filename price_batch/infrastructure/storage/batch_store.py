"""JSON-file storage for price-change batches."""
from __future__ import annotations

import copy
import json
import threading
import uuid
from pathlib import Path
from typing import Iterable, Sequence

import structlog

from price_batch.domain.editing import blank_line, next_duplicate_name
from price_batch.domain.errors import BatchNotFoundError, DuplicateBatchNameError
from price_batch.domain.models import Batch, Line

logger = structlog.get_logger(__name__)

AUTOSAVE_DELAY = 0.5


def _name_key(name: str) -> str:
    return name.strip().lower()


class JsonBatchRepository:
    """All batches live in one JSON array; every write rewrites the file."""

    def __init__(self, path: Path) -> None:
        self._path = Path(path)
        self._lock = threading.Lock()

    @property
    def path(self) -> Path:
        return self._path

    def _read(self) -> list[Batch]:
        if not self._path.exists():
            return []
        raw = json.loads(self._path.read_text(encoding="utf-8") or "[]")
        return [Batch.from_dict(item) for item in raw]

    def _write(self, batches: Sequence[Batch]) -> None:
        self._path.parent.mkdir(parents=True, exist_ok=True)
        self._path.write_text(
            json.dumps([b.to_dict() for b in batches], ensure_ascii=False, indent=2),
            encoding="utf-8",
        )

    def list_batches(self) -> Sequence[Batch]:
        return sorted(self._read(), key=lambda b: b.updated_at, reverse=True)

    def get(self, batch_id: str) -> Batch:
        for batch in self._read():
            if batch.id == batch_id:
                return batch
        raise BatchNotFoundError(batch_id)

    def find_by_name(self, name: str) -> Batch | None:
        key = _name_key(name)
        return next((b for b in self._read() if _name_key(b.name) == key), None)

    def create(self, name: str, lines: Iterable[Line] | None = None, blank_lines: int = 1) -> Batch:
        name = (name or "").strip()
        with self._lock:
            batches = self._read()
            if not name or any(_name_key(b.name) == _name_key(name) for b in batches):
                raise DuplicateBatchNameError(name)
            new_lines = list(lines) if lines is not None else [blank_line() for _ in range(blank_lines)]
            batch = Batch(id=str(uuid.uuid4()), name=name, lines=new_lines)
            batches.append(batch)
            self._write(batches)
        logger.info("batch_created", batch_id=batch.id, name=name, lines=len(batch.lines))
        return batch

    def save(self, batch: Batch) -> Batch:
        with self._lock:
            batches = self._read()
            clash = next(
                (b for b in batches if b.id != batch.id and _name_key(b.name) == _name_key(batch.name)),
                None,
            )
            if clash is not None:
                raise DuplicateBatchNameError(batch.name)
            batch.touch()
            for i, existing in enumerate(batches):
                if existing.id == batch.id:
                    batches[i] = batch
                    break
            else:
                batches.append(batch)
            self._write(batches)
        logger.debug("batch_saved", batch_id=batch.id, lines=len(batch.lines))
        return batch

    def delete(self, batch_id: str) -> None:
        with self._lock:
            batches = self._read()
            remaining = [b for b in batches if b.id != batch_id]
            if len(remaining) == len(batches):
                raise BatchNotFoundError(batch_id)
            self._write(remaining)
        logger.info("batch_deleted", batch_id=batch_id)

    def duplicate(self, batch_id: str) -> Batch:
        with self._lock:
            batches = self._read()
            original = next((b for b in batches if b.id == batch_id), None)
            if original is None:
                raise BatchNotFoundError(batch_id)
            clone = copy.deepcopy(original)
            clone.id = str(uuid.uuid4())
            clone.name = next_duplicate_name(original.name, (b.name for b in batches))
            clone.touch()
            batches.append(clone)
            self._write(batches)
        logger.info("batch_duplicated", source_id=batch_id, batch_id=clone.id, name=clone.name)
        return clone


class WriteBehindBatchWriter:
    """Coalesces rapid saves of the same batch into one write after `delay` seconds."""

    def __init__(self, repository: JsonBatchRepository, delay: float = AUTOSAVE_DELAY) -> None:
        self._repository = repository
        self._delay = delay
        self._pending: dict[str, Batch] = {}
        self._timer: threading.Timer | None = None
        self._lock = threading.Lock()

    @property
    def pending(self) -> int:
        return len(self._pending)

    def schedule(self, batch: Batch) -> None:
        with self._lock:
            self._pending[batch.id] = copy.deepcopy(batch)
            if self._timer is not None:
                self._timer.cancel()
            self._timer = threading.Timer(self._delay, self.flush)
            self._timer.daemon = True
            self._timer.start()

    def flush(self) -> int:
        with self._lock:
            pending, self._pending = self._pending, {}
            if self._timer is not None:
                self._timer.cancel()
                self._timer = None
        for batch in pending.values():
            try:
                self._repository.save(batch)
            except (OSError, ValueError, DuplicateBatchNameError) as exc:
                logger.error("autosave_failed", batch_id=batch.id, error=str(exc))
        return len(pending)

    def close(self) -> None:
        self.flush()
