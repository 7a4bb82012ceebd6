from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

DEFAULT_NODE_COUNT = 8
LAYOUT_MARGIN = 80.0
SVG_FONT_FAMILY = "AzeretMono, ui-monospace, monospace"

# (width, height); "full" is resolved against the viewport at runtime.
CANVAS_PRESETS: dict[str, tuple[int, int]] = {
    "9x16": (900, 1600),
    "4x5": (1000, 1250),
    "16x9": (1600, 900),
}
FULL_CANVAS_PRESET = "full"


def resize_titles(titles: list[str], count: int) -> list[str]:
    return [titles[idx] if idx < len(titles) else "" for idx in range(max(0, count))]


class DiagramParams(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        frozen=True,
    )

    # Layout & structure
    node_count: int = DEFAULT_NODE_COUNT
    connection_density: float = 0.4
    layout_spread: float = 0.7
    vertical_bias: float = 0.5
    horizontal_bias: float = 0.5

    # Nodes
    node_min_width: float = 60.0
    node_max_width: float = 120.0
    node_min_height: float = 20.0
    node_max_height: float = 40.0
    node_roundness: float = 2.0
    node_thickness: float = 2.0
    node_scale: float = 1.0

    # Connections
    curve_intensity: float = 0.6
    curve_variation: float = 0.5
    connection_thickness: float = 1.5
    arrow_size: float = 8.0
    arrow_frequency: float = 0.7
    dashed_frequency: float = 0.3
    dash_length: float = 5.0
    dash_gap: float = 5.0
    arrow_gap: float = 10.0

    # Flow direction
    flow_directionality: float = 0.6
    downward_bias: float = 0.6
    rightward_bias: float = 0.5
    backward_connection_freq: float = 0.15

    # Complexity
    multi_connection_chance: float = 0.3
    branching_factor: float = 0.5
    cluster_tendency: float = 0.4

    # Visual details
    curve_smoothing: float = 0.8
    control_point_distance: float = 0.5
    self_loop_chance: float = 0.05
    parallel_line_offset: float = 12.0

    # Randomness
    random_seed: int = 42
    position_jitter: float = 0.2
    size_variation: float = 0.6
    style_variation: float = 0.5

    # Animation
    animation_speed: float = 0.5
    morph_complexity: float = 0.7

    # Colors
    stroke_color: str = "#ffffff"
    fill_color: str = "#000000"
    background_color: str = "#1a1a1a"

    # Canvas
    canvas_width: int = 1711
    canvas_height: int = 1400

    node_titles: list[str] = Field(default_factory=lambda: [""] * DEFAULT_NODE_COUNT)

    def with_node_count(self, count: int) -> DiagramParams:
        return self.model_copy(
            update={"node_count": count, "node_titles": resize_titles(self.node_titles, count)}
        )

    def with_updates(self, **changes: Any) -> DiagramParams:
        if "node_count" in changes and "node_titles" not in changes:
            changes["node_titles"] = resize_titles(self.node_titles, int(changes["node_count"]))
        return self.model_copy(update=changes)

    def to_payload(self) -> dict[str, Any]:
        return self.model_dump(by_alias=True)


@dataclass(frozen=True)
class Point:
    x: float
    y: float

    def to_dict(self) -> dict[str, float]:
        return {"x": self.x, "y": self.y}


@dataclass(frozen=True)
class Node:
    id: int
    x: float
    y: float
    width: float
    height: float
    label: str | None = None

    @property
    def center(self) -> Point:
        return Point(self.x + self.width / 2, self.y + self.height / 2)

    def to_dict(self) -> dict[str, Any]:
        payload: dict[str, Any] = {
            "id": self.id,
            "x": self.x,
            "y": self.y,
            "width": self.width,
            "height": self.height,
        }
        if self.label is not None:
            payload["label"] = self.label
        return payload


@dataclass(frozen=True)
class Connection:
    id: int
    source: int
    target: int
    curve: float
    dashed: bool
    has_arrow: bool
    control_point1: Point
    control_point2: Point

    @property
    def is_self_loop(self) -> bool:
        return self.source == self.target

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "from": self.source,
            "to": self.target,
            "curve": self.curve,
            "dashed": self.dashed,
            "hasArrow": self.has_arrow,
            "controlPoint1": self.control_point1.to_dict(),
            "controlPoint2": self.control_point2.to_dict(),
        }


@dataclass(frozen=True)
class DiagramState:
    nodes: tuple[Node, ...] = ()
    connections: tuple[Connection, ...] = ()
    _index: dict[int, Node] = field(default_factory=dict, init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        index = self._index
        for node in self.nodes:
            index.setdefault(node.id, node)

    def node_by_id(self, node_id: int) -> Node | None:
        return self._index.get(node_id)

    def to_dict(self) -> dict[str, Any]:
        return {
            "nodes": [node.to_dict() for node in self.nodes],
            "connections": [connection.to_dict() for connection in self.connections],
        }

    @classmethod
    def from_dict(cls, payload: dict[str, Any]) -> DiagramState:
        nodes = tuple(
            Node(
                id=int(raw["id"]),
                x=float(raw["x"]),
                y=float(raw["y"]),
                width=float(raw["width"]),
                height=float(raw["height"]),
                label=raw.get("label"),
            )
            for raw in payload.get("nodes", [])
        )
        connections = tuple(
            Connection(
                id=int(raw["id"]),
                source=int(raw["from"]),
                target=int(raw["to"]),
                curve=float(raw["curve"]),
                dashed=bool(raw["dashed"]),
                has_arrow=bool(raw["hasArrow"]),
                control_point1=Point(
                    float(raw["controlPoint1"]["x"]), float(raw["controlPoint1"]["y"])
                ),
                control_point2=Point(
                    float(raw["controlPoint2"]["x"]), float(raw["controlPoint2"]["y"])
                ),
            )
            for raw in payload.get("connections", [])
        )
        return cls(nodes=nodes, connections=connections)


@dataclass(frozen=True)
class SvgDocument:
    width: int
    height: int
    elements: list[str]

    def to_string(self) -> str:
        return (
            f'<svg width="{self.width}" height="{self.height}" '
            f'viewBox="0 0 {self.width} {self.height}" xmlns="http://www.w3.org/2000/svg">'
            f"{''.join(self.elements)}</svg>"
        )
