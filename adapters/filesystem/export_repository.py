from __future__ import annotations

import time
from pathlib import Path

from filelock import FileLock

from adapters.filesystem.json_utils import write_bytes_atomic, write_json_atomic
from domain.models import DiagramState, SvgDocument
from domain.ports.repositories import ExportRepository


def export_file_name(prefix: str, extension: str, timestamp_ms: int | None = None) -> str:
    stamp = timestamp_ms if timestamp_ms is not None else int(time.time() * 1000)
    return f"{prefix}-{stamp}.{extension}"


class FileSystemExportRepository(ExportRepository):
    def save_svg(self, document: SvgDocument, path: Path) -> None:
        self._write(path, document.to_string().encode("utf-8"))

    def save_png(self, data: bytes, path: Path) -> None:
        self._write(path, data)

    def save_state(self, state: DiagramState, path: Path) -> None:
        path.parent.mkdir(parents=True, exist_ok=True)
        with FileLock(str(self._lock_path(path))):
            write_json_atomic(path, state.to_dict())

    def _write(self, path: Path, data: bytes) -> None:
        path.parent.mkdir(parents=True, exist_ok=True)
        with FileLock(str(self._lock_path(path))):
            write_bytes_atomic(path, data)

    def _lock_path(self, path: Path) -> Path:
        return path.with_suffix(f"{path.suffix}.lock")
