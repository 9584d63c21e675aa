"""
Simulation Step
===============

Per-frame fall update with catch and miss detection.

Frame-rate agnostic: one call to ``advance`` is one frame, whatever drives it.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import List, Optional

from fruit_catcher.catcher_core.config_loader import GameConfig, get_config
from fruit_catcher.catcher_core.events import CatchEvent, GameListener, RemovalReason
from fruit_catcher.catcher_core.scoring import ScoreResolver
from fruit_catcher.catcher_core.session_state import ActiveEntity, SessionState
from fruit_catcher.catcher_core.spawner import Spawner

logger = logging.getLogger(__name__)


@dataclass
class StepResult:
    """Result of a single simulation frame."""
    moved: int = 0
    caught: List[CatchEvent] = field(default_factory=list)
    missed: List[ActiveEntity] = field(default_factory=list)
    spawn_scheduled: bool = False

    @property
    def delta_score(self) -> int:
        return sum(event.delta for event in self.caught)


class SimulationStep:
    """
    Advances every in-flight entity by one frame.

    Entities are visited newest first over a snapshot of the arena. An entity
    whose new y lies in the capture band while sharing the basket's lane is
    caught; one below the floor is missed.
    """

    def __init__(
        self,
        resolver: ScoreResolver,
        spawner: Spawner,
        config: Optional[GameConfig] = None,
        events: Optional[GameListener] = None
    ):
        if config is None:
            config = get_config()

        self._config = config
        self._resolver = resolver
        self._spawner = spawner
        self._events = events or GameListener()

        self._capture_top = config.capture_top
        self._capture_bottom = config.capture_bottom
        self._floor_y = float(config.board.height)

    def in_capture_band(self, y: float) -> bool:
        return self._capture_top <= y < self._capture_bottom

    def advance(self, state: SessionState, delta_unused: Optional[float] = None) -> StepResult:
        """
        Run one frame.

        Args:
            state: Session to update.
            delta_unused: Frame time; ignored, speeds are per frame.

        Returns:
            StepResult describing what happened this frame.
        """
        result = StepResult()
        if not state.is_active:
            return result

        removed_any = False

        for entity in state.entities.newest_first():
            # 1. Fall
            entity.y += entity.speed * state.speed_scalar
            result.moved += 1
            self._events.on_entity_position_changed(entity, entity.y)

            # 2. Catch: inside the band and same lane as the basket
            if self.in_capture_band(entity.y) and entity.lane == state.basket_lane:
                event = self._resolver.resolve(state, entity)
                if event is not None:
                    result.caught.append(event)
                state.entities.remove(entity.uid)
                self._events.on_entity_removed(entity, RemovalReason.CAUGHT)
                removed_any = True
                continue

            # 3. Miss: fell past the floor
            if entity.y > self._floor_y:
                logger.debug(f"Missed {entity}")
                state.entities.remove(entity.uid)
                result.missed.append(entity)
                self._events.on_entity_removed(entity, RemovalReason.MISSED)
                removed_any = True

        # All removals for this frame are done before touching the schedule
        if removed_any and state.entities.is_empty:
            result.spawn_scheduled = self._spawner.schedule_next(state) is not None

        return result
