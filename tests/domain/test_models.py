from __future__ import annotations

import pytest
from pydantic import ValidationError

from domain.models import (
    DEFAULT_NODE_COUNT,
    Connection,
    DiagramParams,
    DiagramState,
    Node,
    Point,
    resize_titles,
)


def test_params_accept_camel_and_snake_case() -> None:
    from_camel = DiagramParams.model_validate({"nodeCount": 3, "randomSeed": 9})
    from_snake = DiagramParams(node_count=3, random_seed=9)

    assert from_camel.node_count == from_snake.node_count == 3
    assert from_camel.random_seed == 9


def test_default_params() -> None:
    params = DiagramParams()

    assert params.node_count == DEFAULT_NODE_COUNT
    assert params.node_titles == [""] * DEFAULT_NODE_COUNT
    assert (params.canvas_width, params.canvas_height) == (1711, 1400)
    assert params.background_color == "#1a1a1a"


def test_payload_uses_camel_case_keys() -> None:
    payload = DiagramParams().to_payload()

    assert payload["nodeCount"] == DEFAULT_NODE_COUNT
    assert "backwardConnectionFreq" in payload
    assert "node_count" not in payload
    assert DiagramParams.model_validate(payload) == DiagramParams()


def test_params_are_frozen() -> None:
    params = DiagramParams()

    with pytest.raises(ValidationError):
        params.node_count = 3  # type: ignore[misc]


def test_with_node_count_pads_and_trims_titles() -> None:
    params = DiagramParams(node_count=2, node_titles=["a", "b"])

    grown = params.with_node_count(4)
    shrunk = grown.with_updates(node_titles=["a", "b", "c", "d"]).with_node_count(1)

    assert grown.node_titles == ["a", "b", "", ""]
    assert shrunk.node_titles == ["a"]
    assert params.node_titles == ["a", "b"]


def test_with_updates_keeps_explicit_titles() -> None:
    params = DiagramParams(node_count=2, node_titles=["a", "b"])

    synced = params.with_updates(node_count=3)
    explicit = params.with_updates(node_count=3, node_titles=["x"])

    assert synced.node_titles == ["a", "b", ""]
    assert explicit.node_titles == ["x"]


def test_resize_titles_handles_negative_count() -> None:
    assert resize_titles(["a"], -1) == []


def test_state_round_trips_through_dict() -> None:
    state = DiagramState(
        nodes=(
            Node(id=0, x=1.5, y=2, width=60, height=20, label="Start"),
            Node(id=1, x=100, y=40, width=80, height=30),
        ),
        connections=(
            Connection(
                id=0,
                source=0,
                target=1,
                curve=0.25,
                dashed=True,
                has_arrow=False,
                control_point1=Point(10, 20),
                control_point2=Point(30, 40),
            ),
        ),
    )

    payload = state.to_dict()

    assert payload["connections"][0]["from"] == 0
    assert payload["connections"][0]["hasArrow"] is False
    assert "label" not in payload["nodes"][1]
    assert DiagramState.from_dict(payload) == state


def test_node_lookup_and_center() -> None:
    node = Node(id=4, x=10, y=20, width=40, height=10)
    state = DiagramState(nodes=(node,))

    assert state.node_by_id(4) is node
    assert state.node_by_id(5) is None
    assert node.center == Point(30, 25)


def test_self_loop_flag() -> None:
    loop = Connection(
        id=0,
        source=2,
        target=2,
        curve=0,
        dashed=False,
        has_arrow=False,
        control_point1=Point(0, 0),
        control_point2=Point(0, 0),
    )

    assert loop.is_self_loop
