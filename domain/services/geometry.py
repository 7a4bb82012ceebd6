from __future__ import annotations

import logging
import math
from collections.abc import Iterator
from dataclasses import dataclass

from domain.models import Connection, DiagramState, Node, Point

logger = logging.getLogger(__name__)

ARROW_POSITION = 0.5
ARROW_WING_ANGLE = math.pi / 6


@dataclass(frozen=True)
class ConnectionPath:
    connection: Connection
    start: Point
    end: Point
    control_point1: Point
    control_point2: Point
    arrow: tuple[Point, Point, Point] | None = None


def lerp(a: float, b: float, t: float) -> float:
    return a + (b - a) * t


def lerp_point(a: Point, b: Point, t: float) -> Point:
    return Point(lerp(a.x, b.x, t), lerp(a.y, b.y, t))


def distance(a: Point, b: Point) -> float:
    dx = b.x - a.x
    dy = b.y - a.y
    return math.sqrt(dx * dx + dy * dy)


def edge_intersection(rect: Node, toward: Point, gap: float) -> Point:
    center = rect.center
    dx = toward.x - center.x
    dy = toward.y - center.y
    angle = math.atan2(dy, dx)
    cos_a = math.cos(angle)
    sin_a = math.sin(angle)

    half_width = rect.width / 2
    half_height = rect.height / 2
    if half_width == 0 or half_height == 0:
        # A collapsed rectangle has no edges to clip against.
        return Point(center.x + gap * cos_a, center.y + gap * sin_a)
    aspect = half_width / half_height

    if abs(cos_a) > abs(sin_a) * aspect:
        # Left or right edge.
        if dx > 0:
            edge_x = rect.x + rect.width
            edge_y = center.y + (half_width / abs(cos_a)) * sin_a
        else:
            edge_x = rect.x
            edge_y = center.y - (half_width / abs(cos_a)) * sin_a
    elif dy > 0:
        edge_y = rect.y + rect.height
        edge_x = center.x + (half_height / abs(sin_a)) * cos_a
    else:
        edge_y = rect.y
        edge_x = center.x - (half_height / abs(sin_a)) * cos_a

    return Point(edge_x + gap * cos_a, edge_y + gap * sin_a)


def bezier_point(p0: Point, p1: Point, p2: Point, p3: Point, t: float) -> Point:
    t2 = t * t
    t3 = t2 * t
    mt = 1 - t
    mt2 = mt * mt
    mt3 = mt2 * mt
    return Point(
        mt3 * p0.x + 3 * mt2 * t * p1.x + 3 * mt * t2 * p2.x + t3 * p3.x,
        mt3 * p0.y + 3 * mt2 * t * p1.y + 3 * mt * t2 * p2.y + t3 * p3.y,
    )


def bezier_tangent(p0: Point, p1: Point, p2: Point, p3: Point, t: float) -> Point:
    t2 = t * t
    mt = 1 - t
    mt2 = mt * mt
    return Point(
        3 * mt2 * (p1.x - p0.x) + 6 * mt * t * (p2.x - p1.x) + 3 * t2 * (p3.x - p2.x),
        3 * mt2 * (p1.y - p0.y) + 6 * mt * t * (p2.y - p1.y) + 3 * t2 * (p3.y - p2.y),
    )


def flatten_bezier(p0: Point, p1: Point, p2: Point, p3: Point, segments: int) -> list[Point]:
    steps = max(1, segments)
    return [bezier_point(p0, p1, p2, p3, step / steps) for step in range(steps + 1)]


def arrow_head(point: Point, tangent: Point, size: float) -> tuple[Point, Point, Point]:
    angle = math.atan2(tangent.y, tangent.x)
    left = Point(
        point.x - size * math.cos(angle - ARROW_WING_ANGLE),
        point.y - size * math.sin(angle - ARROW_WING_ANGLE),
    )
    right = Point(
        point.x - size * math.cos(angle + ARROW_WING_ANGLE),
        point.y - size * math.sin(angle + ARROW_WING_ANGLE),
    )
    return point, left, right


def connection_path(
    connection: Connection,
    source: Node,
    target: Node,
    arrow_gap: float,
    arrow_size: float,
) -> ConnectionPath | None:
    source_center = source.center
    target_center = target.center
    total = distance(source_center, target_center)
    if total == 0:
        return None

    start = edge_intersection(source, target_center, arrow_gap)
    end = edge_intersection(target, source_center, arrow_gap)

    start_ratio = distance(source_center, start) / total
    end_ratio = 1 - distance(end, target_center) / total
    if start_ratio == 1 or end_ratio == 0:
        return None

    control_point1 = lerp_point(start, connection.control_point1, 1 / (1 - start_ratio))
    control_point2 = lerp_point(end, connection.control_point2, 1 / end_ratio)

    arrow = None
    if connection.has_arrow:
        # The arrow sits on the stored (unscaled) curve.
        point = bezier_point(
            start, connection.control_point1, connection.control_point2, end, ARROW_POSITION
        )
        tangent = bezier_tangent(
            start, connection.control_point1, connection.control_point2, end, ARROW_POSITION
        )
        arrow = arrow_head(point, tangent, arrow_size)

    return ConnectionPath(
        connection=connection,
        start=start,
        end=end,
        control_point1=control_point1,
        control_point2=control_point2,
        arrow=arrow,
    )


def iter_connection_paths(
    state: DiagramState,
    arrow_gap: float,
    arrow_size: float,
) -> Iterator[ConnectionPath]:
    for connection in state.connections:
        source = state.node_by_id(connection.source)
        target = state.node_by_id(connection.target)
        if source is None or target is None:
            logger.debug("Dropping connection %s: unknown node reference", connection.id)
            continue
        path = connection_path(connection, source, target, arrow_gap, arrow_size)
        if path is None:
            logger.debug("Dropping connection %s: degenerate chord", connection.id)
            continue
        yield path
