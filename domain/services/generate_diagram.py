from __future__ import annotations

import math
from dataclasses import dataclass

from domain.models import LAYOUT_MARGIN, Connection, DiagramParams, DiagramState, Node, Point
from domain.services.seeded_random import SeededRandom

CONTROL_POINT1_POSITION = 0.33
CONTROL_POINT2_POSITION = 0.67
CONTROL_POINT1_OFFSET_SCALE = 0.7
CONTROL_POINT2_OFFSET_SCALE = 1.3
MIRROR_OFFSET_SCALE = -0.6
MIRROR_CURVE_SCALE = 0.8
BIAS_SPAN_SCALE = 0.3


@dataclass(frozen=True)
class _Chord:
    start: Point
    dx: float
    dy: float
    perp_x: float
    perp_y: float

    def control_points(self, offset: float) -> tuple[Point, Point]:
        first = Point(
            self.start.x + self.dx * CONTROL_POINT1_POSITION
            + self.perp_x * offset * CONTROL_POINT1_OFFSET_SCALE,
            self.start.y + self.dy * CONTROL_POINT1_POSITION
            + self.perp_y * offset * CONTROL_POINT1_OFFSET_SCALE,
        )
        second = Point(
            self.start.x + self.dx * CONTROL_POINT2_POSITION
            + self.perp_x * offset * CONTROL_POINT2_OFFSET_SCALE,
            self.start.y + self.dy * CONTROL_POINT2_POSITION
            + self.perp_y * offset * CONTROL_POINT2_OFFSET_SCALE,
        )
        return first, second


class DiagramGenerator:
    def __init__(self, margin: float = LAYOUT_MARGIN) -> None:
        self.margin = margin

    def generate(self, params: DiagramParams, rng: SeededRandom | None = None) -> DiagramState:
        rng = rng or SeededRandom(params.random_seed)
        node_count = round(params.node_count)
        nodes = self._build_nodes(params, rng, node_count)
        connections = self._build_connections(params, rng, nodes)
        return DiagramState(nodes=tuple(nodes), connections=tuple(connections))

    def _build_nodes(self, params: DiagramParams, rng: SeededRandom, node_count: int) -> list[Node]:
        width = params.canvas_width
        height = params.canvas_height
        margin = self.margin
        span_x = width - 2 * margin
        span_y = height - 2 * margin
        bias_x = (params.horizontal_bias - 0.5) * span_x * BIAS_SPAN_SCALE
        bias_y = (params.vertical_bias - 0.5) * span_y * BIAS_SPAN_SCALE

        nodes: list[Node] = []
        for idx in range(node_count):
            base_x = margin + span_x * (idx / node_count)
            base_y = margin + span_y * 0.5

            # Draw order is fixed: jitter x/y, spread x/y, width, height.
            jitter_x = (rng.random() - 0.5) * span_x * params.position_jitter
            jitter_y = (rng.random() - 0.5) * span_y * params.position_jitter
            spread_x = (rng.random() - 0.5) * span_x * params.layout_spread
            spread_y = (rng.random() - 0.5) * span_y * params.layout_spread

            base_width = rng.range(
                params.node_min_width,
                params.node_min_width
                + (params.node_max_width - params.node_min_width) * params.size_variation,
            )
            base_height = rng.range(
                params.node_min_height,
                params.node_min_height
                + (params.node_max_height - params.node_min_height) * params.size_variation,
            )
            node_width = base_width * params.node_scale
            node_height = base_height * params.node_scale

            x = base_x + jitter_x + spread_x + bias_x
            y = base_y + jitter_y + spread_y + bias_y
            title = params.node_titles[idx] if idx < len(params.node_titles) else ""
            nodes.append(
                Node(
                    id=idx,
                    x=max(margin, min(width - margin - node_width, x)),
                    y=max(margin, min(height - margin - node_height, y)),
                    width=node_width,
                    height=node_height,
                    label=title or None,
                )
            )
        return nodes

    def _build_connections(
        self,
        params: DiagramParams,
        rng: SeededRandom,
        nodes: list[Node],
    ) -> list[Connection]:
        node_count = len(nodes)
        candidates = math.floor(1 + params.connection_density * params.branching_factor * 5)
        connections: list[Connection] = []
        next_id = 0

        for idx in range(node_count):
            for _ in range(candidates):
                if rng.random() > params.connection_density:
                    continue

                target_idx = self._pick_target(params, rng, idx, node_count)
                chord = self._chord(nodes[idx], nodes[target_idx])
                curve_factor = params.curve_intensity * (
                    1 + (rng.random() - 0.5) * params.curve_variation
                )
                distance = math.sqrt(chord.dx * chord.dx + chord.dy * chord.dy)
                offset = distance * curve_factor * (rng.random() - 0.5)

                first, second = chord.control_points(offset)
                connections.append(
                    Connection(
                        id=next_id,
                        source=idx,
                        target=target_idx,
                        curve=curve_factor,
                        dashed=rng.random() < params.dashed_frequency,
                        has_arrow=rng.random() < params.arrow_frequency,
                        control_point1=first,
                        control_point2=second,
                    )
                )
                next_id += 1

                # The draw is consumed even when the edge is a self-loop.
                if rng.random() < params.multi_connection_chance and idx != target_idx:
                    first, second = chord.control_points(offset * MIRROR_OFFSET_SCALE)
                    connections.append(
                        Connection(
                            id=next_id,
                            source=idx,
                            target=target_idx,
                            curve=curve_factor * MIRROR_CURVE_SCALE,
                            dashed=rng.random() < params.dashed_frequency,
                            has_arrow=rng.random() < params.arrow_frequency,
                            control_point1=first,
                            control_point2=second,
                        )
                    )
                    next_id += 1
        return connections

    def _pick_target(
        self,
        params: DiagramParams,
        rng: SeededRandom,
        idx: int,
        node_count: int,
    ) -> int:
        if rng.random() < params.self_loop_chance:
            return idx
        if rng.random() < params.flow_directionality and idx < node_count - 1:
            spread = max(1, math.floor(node_count * params.downward_bias * 0.5))
            return min(node_count - 1, idx + 1 + math.floor(rng.random() * spread))
        if rng.random() < params.backward_connection_freq and idx > 0:
            return math.floor(rng.random() * idx)
        target_idx = math.floor(rng.random() * node_count)
        if target_idx == idx:
            target_idx = (idx + 1) % node_count
        return target_idx

    def _chord(self, source: Node, target: Node) -> _Chord:
        start = source.center
        end = target.center
        dx = end.x - start.x
        dy = end.y - start.y
        distance = math.sqrt(dx * dx + dy * dy)
        if distance == 0:
            # Coincident centers; renderers drop zero-length chords.
            return _Chord(start=start, dx=0.0, dy=0.0, perp_x=0.0, perp_y=0.0)
        return _Chord(start=start, dx=dx, dy=dy, perp_x=-dy / distance, perp_y=dx / distance)


def generate_diagram(params: DiagramParams) -> DiagramState:
    return DiagramGenerator().generate(params)
