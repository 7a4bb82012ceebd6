from __future__ import annotations

from typing import Protocol, TypeVar

from domain.models import DiagramParams, DiagramState

RenderT_co = TypeVar("RenderT_co", covariant=True)


class TextMeasurer(Protocol):
    def measure(self, text: str, font_size: float) -> float: ...


class DiagramRenderer(Protocol[RenderT_co]):
    def render(self, state: DiagramState, params: DiagramParams) -> RenderT_co: ...
