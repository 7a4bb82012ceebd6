from __future__ import annotations

import logging
from dataclasses import dataclass

from domain.models import Node, Point
from domain.ports.rendering import TextMeasurer

logger = logging.getLogger(__name__)

LABEL_PADDING = 8.0
LABEL_FONT_RATIO = 0.5
LINE_HEIGHT_RATIO = 1.2
MIN_FONT_SIZE = 8.0
MONOSPACE_WIDTH_FACTOR = 0.6


@dataclass(frozen=True)
class LabelLayout:
    lines: tuple[str, ...]
    font_size: float
    line_height: float
    anchor: Point

    def line_origins(self) -> list[Point]:
        start_y = self.anchor.y - ((len(self.lines) - 1) * self.line_height) / 2
        return [
            Point(self.anchor.x, start_y + idx * self.line_height) for idx in range(len(self.lines))
        ]


class MonospaceMeasurer:
    def __init__(self, width_factor: float = MONOSPACE_WIDTH_FACTOR) -> None:
        self.width_factor = width_factor

    def measure(self, text: str, font_size: float) -> float:
        return len(text) * font_size * self.width_factor


def wrap_words(text: str, max_width: float, font_size: float, measurer: TextMeasurer) -> list[str]:
    words = text.split(" ")
    lines: list[str] = []
    current = words[0]
    for word in words[1:]:
        candidate = f"{current} {word}"
        if measurer.measure(candidate, font_size) < max_width:
            current = candidate
        else:
            lines.append(current)
            current = word
    lines.append(current)
    return lines


def layout_label(node: Node, measurer: TextMeasurer) -> LabelLayout | None:
    label = node.label
    if not label or not label.strip():
        return None

    max_width = node.width - LABEL_PADDING * 2
    max_height = node.height - LABEL_PADDING * 2
    font_size = min(node.width, node.height) * LABEL_FONT_RATIO
    lines = wrap_words(label, max_width, font_size, measurer)
    while len(lines) * font_size * LINE_HEIGHT_RATIO > max_height:
        if font_size - 1 < MIN_FONT_SIZE:
            logger.debug("Label of node %s hit the minimum font size", node.id)
            break
        font_size -= 1
        lines = wrap_words(label, max_width, font_size, measurer)

    return LabelLayout(
        lines=tuple(lines),
        font_size=font_size,
        line_height=font_size * LINE_HEIGHT_RATIO,
        anchor=node.center,
    )
