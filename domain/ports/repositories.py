from __future__ import annotations

from pathlib import Path
from typing import Protocol

from domain.models import DiagramParams, DiagramState, SvgDocument


class ParamsRepository(Protocol):
    def load(self, path: Path) -> DiagramParams: ...

    def save(self, params: DiagramParams, path: Path) -> None: ...


class ExportRepository(Protocol):
    def save_svg(self, document: SvgDocument, path: Path) -> None: ...

    def save_png(self, data: bytes, path: Path) -> None: ...

    def save_state(self, state: DiagramState, path: Path) -> None: ...
