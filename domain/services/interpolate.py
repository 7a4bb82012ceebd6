from __future__ import annotations

from collections.abc import Sequence
from typing import TypeVar

from domain.models import Connection, DiagramState, Node
from domain.services.geometry import lerp, lerp_point

T = TypeVar("T")


def ease_in_out_cubic(t: float) -> float:
    if t < 0.5:
        return 4 * t * t * t
    return 1 - ((-2 * t + 2) ** 3) / 2


def _clamped(items: Sequence[T], fallback: Sequence[T], idx: int) -> T:
    # Index-clamp into the own list; borrow from the other side only when empty.
    if items:
        return items[min(idx, len(items) - 1)]
    return fallback[min(idx, len(fallback) - 1)]


def _interpolate_node(source: Node, target: Node, progress: float) -> Node:
    return Node(
        id=target.id,
        x=lerp(source.x, target.x, progress),
        y=lerp(source.y, target.y, progress),
        width=lerp(source.width, target.width, progress),
        height=lerp(source.height, target.height, progress),
        label=target.label or source.label,
    )


def _interpolate_connection(source: Connection, target: Connection, progress: float) -> Connection:
    return Connection(
        id=target.id,
        source=target.source,
        target=target.target,
        curve=lerp(source.curve, target.curve, progress),
        dashed=target.dashed,
        has_arrow=target.has_arrow,
        control_point1=lerp_point(source.control_point1, target.control_point1, progress),
        control_point2=lerp_point(source.control_point2, target.control_point2, progress),
    )


def interpolate_states(
    source: DiagramState,
    target: DiagramState,
    progress: float,
) -> DiagramState:
    node_total = max(len(source.nodes), len(target.nodes))
    nodes = tuple(
        _interpolate_node(
            _clamped(source.nodes, target.nodes, idx),
            _clamped(target.nodes, source.nodes, idx),
            progress,
        )
        for idx in range(node_total)
    )
    connection_total = max(len(source.connections), len(target.connections))
    connections = tuple(
        _interpolate_connection(
            _clamped(source.connections, target.connections, idx),
            _clamped(target.connections, source.connections, idx),
            progress,
        )
        for idx in range(connection_total)
    )
    return DiagramState(nodes=nodes, connections=connections)
