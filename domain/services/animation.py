from __future__ import annotations

import logging
from collections.abc import Callable
from enum import Enum
from typing import Any

from domain.models import DiagramParams, DiagramState
from domain.ports.rendering import DiagramRenderer
from domain.services.generate_diagram import generate_diagram
from domain.services.interpolate import ease_in_out_cubic, interpolate_states

logger = logging.getLogger(__name__)

SPEED_SCALE = 0.1

StateObserver = Callable[[DiagramState], None]
Generator = Callable[[DiagramParams], DiagramState]


class AnimationPhase(str, Enum):
    IDLE = "idle"
    ANIMATING = "animating"


class AnimationDriver:
    def __init__(
        self,
        params: DiagramParams,
        renderer: DiagramRenderer[Any] | None = None,
        generator: Generator = generate_diagram,
    ) -> None:
        self.params = params
        self.renderer = renderer
        self.generator = generator
        self.current = generator(params)
        # The first frames tween the initial diagram onto itself, which
        # renders it and publishes it to observers.
        self.target = self.current
        self.progress = 0.0
        self.phase = AnimationPhase.ANIMATING
        self.last_output: Any = None
        self._observers: list[StateObserver] = []

    @property
    def is_animating(self) -> bool:
        return self.phase is AnimationPhase.ANIMATING

    def subscribe(self, observer: StateObserver) -> Callable[[], None]:
        self._observers.append(observer)

        def unsubscribe() -> None:
            if observer in self._observers:
                self._observers.remove(observer)

        return unsubscribe

    def update_params(self, params: DiagramParams) -> DiagramState:
        self.params = params
        self.target = self.generator(params)
        self.progress = 0.0
        self.phase = AnimationPhase.ANIMATING
        return self.target

    def tick(self) -> DiagramState | None:
        if self.phase is AnimationPhase.IDLE:
            return None

        self.progress = min(1.0, self.progress + self.params.animation_speed * SPEED_SCALE)
        frame = interpolate_states(self.current, self.target, ease_in_out_cubic(self.progress))
        self._publish(frame)

        if self.progress >= 1.0:
            self.current = self.target
            self.phase = AnimationPhase.IDLE
            logger.debug(
                "Committed diagram with %d nodes and %d connections",
                len(self.current.nodes),
                len(self.current.connections),
            )
            self._notify(self.current)
        return frame

    def run_until_idle(self, max_ticks: int) -> int:
        ticks = 0
        while self.is_animating and ticks < max_ticks:
            self.tick()
            ticks += 1
        return ticks

    def _publish(self, frame: DiagramState) -> None:
        if self.renderer is not None:
            self.last_output = self.renderer.render(frame, self.params)
        self._notify(frame)

    def _notify(self, state: DiagramState) -> None:
        for observer in list(self._observers):
            observer(state)
