from __future__ import annotations

from domain.models import SVG_FONT_FAMILY, DiagramParams, DiagramState, Node, Point, SvgDocument
from domain.ports.rendering import DiagramRenderer, TextMeasurer
from domain.services.geometry import ConnectionPath, iter_connection_paths
from domain.services.text_layout import MonospaceMeasurer, layout_label

_XML_ESCAPES = (
    ("&", "&amp;"),
    ("<", "&lt;"),
    (">", "&gt;"),
    ('"', "&quot;"),
    ("'", "&#39;"),
)


def escape_xml(text: str) -> str:
    # Ampersand first so later entities are not escaped twice.
    for raw, entity in _XML_ESCAPES:
        text = text.replace(raw, entity)
    return text


def format_number(value: float) -> str:
    number = float(value)
    if number.is_integer():
        return str(int(number))
    return repr(number)


def _xy(point: Point) -> str:
    return f"{format_number(point.x)} {format_number(point.y)}"


class SvgRenderer(DiagramRenderer[SvgDocument]):
    def __init__(self, measurer: TextMeasurer | None = None) -> None:
        self.measurer = measurer or MonospaceMeasurer()

    def render(self, state: DiagramState, params: DiagramParams) -> SvgDocument:
        elements: list[str] = [
            f'<rect x="0" y="0" width="{params.canvas_width}" height="{params.canvas_height}" '
            f'fill="{params.background_color}"/>'
        ]
        for path in iter_connection_paths(state, params.arrow_gap, params.arrow_size):
            elements.append(self._connection_element(path, params))
            if path.arrow is not None:
                elements.append(self._arrow_element(path.arrow, params))
        for node in state.nodes:
            elements.append(self._node_element(node, params))
            label = self._label_element(node, params)
            if label:
                elements.append(label)
        return SvgDocument(
            width=params.canvas_width, height=params.canvas_height, elements=elements
        )

    def _connection_element(self, path: ConnectionPath, params: DiagramParams) -> str:
        d = (
            f"M {_xy(path.start)} C {_xy(path.control_point1)}, "
            f"{_xy(path.control_point2)}, {_xy(path.end)}"
        )
        dash = ""
        if path.connection.dashed:
            dash = (
                f' stroke-dasharray="{format_number(params.dash_length)} '
                f'{format_number(params.dash_gap)}"'
            )
        return (
            f'<path d="{d}" stroke="{params.stroke_color}" '
            f'stroke-width="{format_number(params.connection_thickness)}" fill="none"{dash}/>'
        )

    def _arrow_element(self, arrow: tuple[Point, Point, Point], params: DiagramParams) -> str:
        tip, left, right = arrow
        d = f"M {_xy(tip)} L {_xy(left)} L {_xy(right)} Z"
        return f'<path d="{d}" fill="{params.stroke_color}"/>'

    def _node_element(self, node: Node, params: DiagramParams) -> str:
        corners = ""
        if params.node_roundness > 0:
            radius = format_number(params.node_roundness)
            corners = f' rx="{radius}" ry="{radius}"'
        return (
            f'<rect x="{format_number(node.x)}" y="{format_number(node.y)}" '
            f'width="{format_number(node.width)}" height="{format_number(node.height)}"{corners} '
            f'fill="{params.fill_color}" stroke="{params.stroke_color}" '
            f'stroke-width="{format_number(params.node_thickness)}"/>'
        )

    def _label_element(self, node: Node, params: DiagramParams) -> str | None:
        layout = layout_label(node, self.measurer)
        if layout is None:
            return None
        spans = "".join(
            f'<tspan x="{format_number(origin.x)}" y="{format_number(origin.y)}">'
            f"{escape_xml(line)}</tspan>"
            for origin, line in zip(layout.line_origins(), layout.lines)
        )
        return (
            f'<text x="{format_number(layout.anchor.x)}" y="{format_number(layout.anchor.y)}" '
            f'font-family="{SVG_FONT_FAMILY}" font-size="{format_number(layout.font_size)}" '
            f'font-weight="bold" fill="{params.stroke_color}" text-anchor="middle" '
            f'dominant-baseline="middle">{spans}</text>'
        )
