from __future__ import annotations

import logging
import random
from pathlib import Path
from typing import Any, Literal

from adapters.filesystem.export_repository import FileSystemExportRepository, export_file_name
from adapters.raster.renderer import PillowRenderer, to_png_bytes
from adapters.svg.renderer import SvgRenderer
from domain.models import CANVAS_PRESETS, FULL_CANVAS_PRESET, DiagramParams, DiagramState
from domain.ports.rendering import DiagramRenderer
from domain.ports.repositories import ExportRepository
from domain.services.animation import AnimationDriver

logger = logging.getLogger(__name__)

ExportKind = Literal["svg", "png"]
MAX_RANDOM_SEED = 10000
FULL_PRESET_WIDTH_RESERVE = 400
FULL_PRESET_HEIGHT_RESERVE = 100


def resolve_canvas_preset(name: str, viewport: tuple[int, int] | None = None) -> tuple[int, int]:
    key = name.strip().lower().replace("×", "x")
    if key == FULL_CANVAS_PRESET:
        if viewport is None:
            msg = "The 'full' canvas preset needs a viewport size"
            raise ValueError(msg)
        viewport_width, viewport_height = viewport
        side = max(
            viewport_width - FULL_PRESET_WIDTH_RESERVE,
            viewport_height - FULL_PRESET_HEIGHT_RESERVE,
        )
        return side, side
    if key not in CANVAS_PRESETS:
        msg = f"Unknown canvas preset: {name}"
        raise ValueError(msg)
    return CANVAS_PRESETS[key]


class DiagramSession:
    def __init__(
        self,
        params: DiagramParams | None = None,
        renderer: DiagramRenderer[Any] | None = None,
        svg_renderer: SvgRenderer | None = None,
        raster_renderer: PillowRenderer | None = None,
        export_repository: ExportRepository | None = None,
        file_prefix: str = "diakit",
    ) -> None:
        self.params = params or DiagramParams()
        self.svg_renderer = svg_renderer or SvgRenderer()
        self.raster_renderer = raster_renderer or PillowRenderer()
        self.export_repository = export_repository or FileSystemExportRepository()
        self.file_prefix = file_prefix
        self.state: DiagramState | None = None
        self.driver = AnimationDriver(self.params, renderer=renderer)
        self.driver.subscribe(self._remember)

    def update(self, **changes: Any) -> DiagramState:
        self.params = self.params.with_updates(**changes)
        return self.driver.update_params(self.params)

    def set_node_title(self, index: int, title: str) -> DiagramState:
        titles = list(self.params.node_titles)
        while len(titles) <= index:
            titles.append("")
        titles[index] = title
        return self.update(node_titles=titles)

    def randomize(self, rng: random.Random | None = None) -> int:
        seed = (rng or random.Random()).randrange(MAX_RANDOM_SEED)
        self.update(random_seed=seed)
        return seed

    def apply_canvas_preset(
        self, name: str, viewport: tuple[int, int] | None = None
    ) -> DiagramState:
        width, height = resolve_canvas_preset(name, viewport)
        return self.update(canvas_width=width, canvas_height=height)

    def tick(self) -> DiagramState | None:
        return self.driver.tick()

    def settle(self, max_ticks: int) -> int:
        return self.driver.run_until_idle(max_ticks)

    def export_svg(self) -> str | None:
        if self.state is None:
            logger.warning("No diagram state available for SVG export")
            return None
        return self.svg_renderer.render(self.state, self.params).to_string()

    def export_png(self) -> bytes | None:
        if self.state is None:
            logger.warning("No diagram state available for PNG export")
            return None
        return to_png_bytes(self.raster_renderer.render(self.state, self.params))

    def export_to(self, directory: Path, kind: ExportKind) -> Path | None:
        if kind not in ("svg", "png"):
            msg = f"Unknown export kind: {kind}"
            raise ValueError(msg)
        if self.state is None:
            logger.warning("No diagram state available for %s export", kind.upper())
            return None
        path = directory / export_file_name(self.file_prefix, kind)
        if kind == "svg":
            self.export_repository.save_svg(self.svg_renderer.render(self.state, self.params), path)
        else:
            self.export_repository.save_png(
                to_png_bytes(self.raster_renderer.render(self.state, self.params)), path
            )
        logger.info("Exported %s to %s", kind.upper(), path)
        return path

    def _remember(self, state: DiagramState) -> None:
        self.state = state
