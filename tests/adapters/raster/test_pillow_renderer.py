from __future__ import annotations

import io

from PIL import Image

from adapters.raster.renderer import PillowRenderer, dash_segments, load_font, to_png_bytes
from domain.models import Connection, DiagramParams, DiagramState, Node, Point

PNG_MAGIC = b"\x89PNG\r\n\x1a\n"


def _params(**overrides: object) -> DiagramParams:
    return DiagramParams(canvas_width=400, canvas_height=100, node_count=2, **overrides)


def _state(label: str | None = None) -> DiagramState:
    return DiagramState(
        nodes=(
            Node(id=0, x=0, y=0, width=100, height=50),
            Node(id=1, x=300, y=0, width=100, height=50, label=label),
        ),
        connections=(
            Connection(
                id=0,
                source=0,
                target=1,
                curve=0.5,
                dashed=True,
                has_arrow=True,
                control_point1=Point(150, 25),
                control_point2=Point(250, 25),
            ),
        ),
    )


def test_render_uses_canvas_size_and_background() -> None:
    image = PillowRenderer().render(_state(), _params())

    assert image.size == (400, 100)
    assert image.mode == "RGB"
    assert image.getpixel((0, 99)) == (26, 26, 26)


def test_node_interior_is_filled() -> None:
    image = PillowRenderer().render(_state(), _params())

    assert image.getpixel((50, 25)) == (0, 0, 0)
    assert image.getpixel((1, 25)) == (255, 255, 255)


def test_connection_stroke_is_drawn() -> None:
    image = PillowRenderer().render(_state(), _params())

    # First dash starts right after the gap to the source node.
    column = [image.getpixel((112, y)) for y in range(20, 31)]
    assert (255, 255, 255) in column
    assert image.getpixel((112, 80)) == (26, 26, 26)


def test_label_renders_in_stroke_color() -> None:
    plain = PillowRenderer().render(_state(), _params())
    labelled = PillowRenderer().render(_state("Store"), _params())

    box = (310, 5, 390, 45)
    assert plain.crop(box).getcolors() == [(80 * 40, (0, 0, 0))]
    assert labelled.crop(box) != plain.crop(box)


def test_png_bytes() -> None:
    renderer = PillowRenderer()

    data = renderer.render_png(_state("Store"), _params())

    assert data.startswith(PNG_MAGIC)
    assert Image.open(io.BytesIO(data)).size == (400, 100)
    assert to_png_bytes(Image.new("RGB", (2, 2))).startswith(PNG_MAGIC)


def test_dash_segments_alternate_dash_and_gap() -> None:
    runs = dash_segments([Point(0, 0), Point(20, 0)], 5, 5)

    assert runs == [[Point(0, 0), Point(5, 0)], [Point(10, 0), Point(15, 0)]]


def test_dash_segments_span_polyline_corners() -> None:
    runs = dash_segments([Point(0, 0), Point(3, 0), Point(3, 4)], 5, 100)

    assert runs == [[Point(0, 0), Point(3, 0), Point(3, 2)]]


def test_dash_segments_without_pattern_keep_polyline() -> None:
    points = [Point(0, 0), Point(10, 0)]

    assert dash_segments(points, 0, 5) == [points]


def test_load_font_falls_back_for_missing_path() -> None:
    font = load_font(12, "/nonexistent/font.ttf")

    assert font.getlength("abc") > 0
