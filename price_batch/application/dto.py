"""Application-level DTOs for batch export."""
from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path


@dataclass(slots=True, frozen=True)
class ExportResult:
    batch_id: str
    filename: str
    content: bytes
    row_count: int

    def write_to(self, directory: Path) -> Path:
        directory = Path(directory)
        directory.mkdir(parents=True, exist_ok=True)
        target = directory / self.filename
        target.write_bytes(self.content)
        return target
