"""
Scoring System
==============

Applies catch scores and level progression based on game configuration.
"""

from __future__ import annotations

import logging
from typing import Optional

from fruit_catcher.catcher_core.config_loader import GameConfig, get_config
from fruit_catcher.catcher_core.events import CatchEvent, GameListener
from fruit_catcher.catcher_core.session_state import ActiveEntity, SessionState

logger = logging.getLogger(__name__)


class ScoreResolver:
    """
    Applies the effect of a caught entity to the session.

    Level is derived from score (one level per ``points_per_level`` points)
    but never goes down. Each resolution that raises the level adds exactly
    one ``speed_step`` to the speed scalar, however many thresholds the score
    jumped across.
    """

    def __init__(
        self,
        config: Optional[GameConfig] = None,
        events: Optional[GameListener] = None
    ):
        """
        Initialize score resolver.

        Args:
            config: Game configuration. Uses default if None.
            events: Listener receiving score/level/catch events.
        """
        if config is None:
            config = get_config()

        self._config = config
        self._events = events or GameListener()
        self._points_per_level = config.progression.points_per_level
        self._speed_step = config.progression.speed_step

    def level_for_score(self, score: int) -> int:
        """Level implied by a score alone: floor(score / points_per_level) + 1."""
        return score // self._points_per_level + 1

    def resolve(self, state: SessionState, entity: ActiveEntity) -> Optional[CatchEvent]:
        """
        Apply a caught entity's score delta and any level-up.

        Args:
            state: Session to mutate.
            entity: The caught entity.

        Returns:
            The catch outcome, or None if the session is not running.
        """
        if not state.is_active:
            return None

        kind = entity.kind
        delta = kind.score_delta
        state.score += delta

        if delta >= 0:
            logger.debug(f"Catch! {kind.id} (+{delta})")
        else:
            logger.debug(f"Boom! {kind.id} ({delta})")

        event = CatchEvent(caught=kind, delta=delta)
        self._events.on_caught(event)
        self._events.on_score_changed(state.score)

        self.check_level_up(state)
        return event

    def check_level_up(self, state: SessionState) -> bool:
        """
        Raise the level if the score has reached a new threshold.

        Returns:
            True if the level changed.
        """
        new_level = self.level_for_score(state.score)
        if new_level <= state.level:
            return False

        state.level = new_level
        state.speed_scalar += self._speed_step
        logger.info(f"Level Up! Lv.{state.level} (speed x{state.speed_scalar:.1f})")
        self._events.on_level_changed(state.level)
        return True
