from __future__ import annotations

import os
from collections.abc import Callable, Generator

import pytest

from domain.models import DiagramParams


def _clear_diakit_env() -> None:
    for key in list(os.environ):
        if key.startswith("DIAKIT_"):
            os.environ.pop(key, None)


_clear_diakit_env()


@pytest.fixture(autouse=True)
def clear_diakit_env() -> Generator[None, None, None]:
    _clear_diakit_env()
    yield
    _clear_diakit_env()


@pytest.fixture
def golden_params() -> DiagramParams:
    return DiagramParams(
        node_count=4,
        random_seed=1,
        connection_density=1,
        branching_factor=1,
        flow_directionality=1,
        self_loop_chance=0,
        backward_connection_freq=0,
        multi_connection_chance=0,
        canvas_width=800,
        canvas_height=600,
        node_titles=["", "", "", ""],
    )


@pytest.fixture
def small_params() -> DiagramParams:
    return DiagramParams(
        node_count=5,
        random_seed=7,
        canvas_width=400,
        canvas_height=300,
        node_titles=[""] * 5,
    )


@pytest.fixture
def params_factory(small_params: DiagramParams) -> Callable[..., DiagramParams]:
    def _factory(**overrides: object) -> DiagramParams:
        return small_params.with_updates(**overrides)

    return _factory
