from __future__ import annotations

from pathlib import Path

from adapters.filesystem.json_utils import load_json, write_json_atomic
from domain.models import DiagramParams
from domain.ports.repositories import ParamsRepository


class FileSystemParamsRepository(ParamsRepository):
    def load(self, path: Path) -> DiagramParams:
        return DiagramParams.model_validate(load_json(path))

    def save(self, params: DiagramParams, path: Path) -> None:
        write_json_atomic(path, params.to_payload())
