from __future__ import annotations

import io
import math
from functools import lru_cache

from PIL import Image, ImageDraw, ImageFont

from domain.models import DiagramParams, DiagramState, Node, Point
from domain.ports.rendering import DiagramRenderer
from domain.services.geometry import ConnectionPath, flatten_bezier, iter_connection_paths
from domain.services.text_layout import layout_label

Font = ImageFont.FreeTypeFont | ImageFont.ImageFont

MONOSPACE_FONT_CANDIDATES = (
    "AzeretMono-Bold.ttf",
    "DejaVuSansMono-Bold.ttf",
    "LiberationMono-Bold.ttf",
    "Menlo.ttc",
    "consolab.ttf",
    "/usr/share/fonts/truetype/dejavu/DejaVuSansMono-Bold.ttf",
)
CURVE_SEGMENTS = 48


@lru_cache(maxsize=256)
def load_font(size: int, font_path: str | None = None) -> Font:
    candidates = (font_path,) if font_path else ()
    for candidate in candidates + MONOSPACE_FONT_CANDIDATES:
        try:
            return ImageFont.truetype(candidate, size)
        except OSError:
            continue
    return ImageFont.load_default(size=size)


def _font_pixels(font_size: float) -> int:
    return max(1, int(round(font_size)))


def _line_width(thickness: float) -> int:
    return max(1, int(round(thickness)))


def dash_segments(points: list[Point], dash: float, gap: float) -> list[list[Point]]:
    if dash <= 0 or gap <= 0 or len(points) < 2:
        return [points]

    segments: list[list[Point]] = []
    current: list[Point] = [points[0]]
    drawing = True
    remaining = dash
    for start, end in zip(points, points[1:]):
        seg_length = math.hypot(end.x - start.x, end.y - start.y)
        consumed = 0.0
        while seg_length - consumed > remaining:
            consumed += remaining
            t = consumed / seg_length
            split = Point(start.x + (end.x - start.x) * t, start.y + (end.y - start.y) * t)
            if drawing:
                current.append(split)
                segments.append(current)
            else:
                current = [split]
            drawing = not drawing
            remaining = dash if drawing else gap
        remaining -= seg_length - consumed
        if drawing:
            current.append(end)
    if drawing and len(current) > 1:
        segments.append(current)
    return segments


class PillowMeasurer:
    def __init__(self, font_path: str | None = None) -> None:
        self.font_path = font_path

    def measure(self, text: str, font_size: float) -> float:
        return float(load_font(_font_pixels(font_size), self.font_path).getlength(text))


class PillowRenderer(DiagramRenderer[Image.Image]):
    def __init__(self, font_path: str | None = None, curve_segments: int = CURVE_SEGMENTS) -> None:
        self.font_path = font_path
        self.curve_segments = curve_segments
        self.measurer = PillowMeasurer(font_path)

    def render(self, state: DiagramState, params: DiagramParams) -> Image.Image:
        size = (params.canvas_width, params.canvas_height)
        image = Image.new("RGB", size, params.background_color)
        draw = ImageDraw.Draw(image)
        for path in iter_connection_paths(state, params.arrow_gap, params.arrow_size):
            self._draw_connection(draw, path, params)
        for node in state.nodes:
            self._draw_node(draw, node, params)
            self._draw_label(draw, node, params)
        return image

    def render_png(self, state: DiagramState, params: DiagramParams) -> bytes:
        return to_png_bytes(self.render(state, params))

    def _draw_connection(
        self,
        draw: ImageDraw.ImageDraw,
        path: ConnectionPath,
        params: DiagramParams,
    ) -> None:
        points = flatten_bezier(
            path.start, path.control_point1, path.control_point2, path.end, self.curve_segments
        )
        width = _line_width(params.connection_thickness)
        if path.connection.dashed:
            runs = dash_segments(points, params.dash_length, params.dash_gap)
        else:
            runs = [points]
        for run in runs:
            draw.line(
                [(point.x, point.y) for point in run],
                fill=params.stroke_color,
                width=width,
                joint="curve",
            )

        if path.arrow is not None:
            draw.polygon([(point.x, point.y) for point in path.arrow], fill=params.stroke_color)

    def _draw_node(self, draw: ImageDraw.ImageDraw, node: Node, params: DiagramParams) -> None:
        box = (node.x, node.y, node.x + node.width, node.y + node.height)
        width = _line_width(params.node_thickness)
        if params.node_roundness > 0:
            draw.rounded_rectangle(
                box,
                radius=params.node_roundness,
                fill=params.fill_color,
                outline=params.stroke_color,
                width=width,
            )
        else:
            draw.rectangle(box, fill=params.fill_color, outline=params.stroke_color, width=width)

    def _draw_label(self, draw: ImageDraw.ImageDraw, node: Node, params: DiagramParams) -> None:
        layout = layout_label(node, self.measurer)
        if layout is None:
            return
        font = load_font(_font_pixels(layout.font_size), self.font_path)
        for origin, line in zip(layout.line_origins(), layout.lines):
            draw.text((origin.x, origin.y), line, font=font, fill=params.stroke_color, anchor="mm")


def to_png_bytes(image: Image.Image) -> bytes:
    buffer = io.BytesIO()
    image.save(buffer, format="PNG")
    return buffer.getvalue()
