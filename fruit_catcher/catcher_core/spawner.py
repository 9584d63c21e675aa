"""
Spawner
=======

Chooses lane and item kind for each new falling entity and schedules the
next spawn once the play area is empty.
"""

from __future__ import annotations

import logging
import random
from typing import Optional

from fruit_catcher.catcher_core.config_loader import GameConfig, get_config
from fruit_catcher.catcher_core.events import GameListener
from fruit_catcher.catcher_core.item_catalog import ItemCatalog
from fruit_catcher.catcher_core.scheduler import TimerHandle
from fruit_catcher.catcher_core.session_state import ActiveEntity, SessionState

logger = logging.getLogger(__name__)


class Spawner:
    """
    Spawn policy.

    One entity is in flight at a time: a new one is scheduled only after the
    active set empties, after a random delay in [delay_min, delay_max).
    """

    def __init__(
        self,
        scheduler,
        config: Optional[GameConfig] = None,
        catalog: Optional[ItemCatalog] = None,
        events: Optional[GameListener] = None,
        seed: Optional[int] = None
    ):
        """
        Initialize spawner.

        Args:
            scheduler: Object providing ``call_later(delay, callback)``.
            config: Game configuration. Uses default if None.
            catalog: Item catalog. Built from config if None.
            events: Listener receiving spawn events.
            seed: Random seed for reproducibility. Random if None.
        """
        if config is None:
            config = get_config()

        self._config = config
        self._catalog = catalog if catalog is not None else ItemCatalog(config)
        self._scheduler = scheduler
        self._events = events or GameListener()
        self._rng = random.Random(seed)

        self._lane_count = config.board.lane_count
        self._delay_min = config.spawn.delay_min
        self._delay_max = config.spawn.delay_max
        self._speed_jitter = config.spawn.speed_jitter

    @property
    def catalog(self) -> ItemCatalog:
        return self._catalog

    def reset(self, seed: Optional[int] = None) -> None:
        """
        Reseed the random source.

        Args:
            seed: New random seed. Keeps current sequence if None.
        """
        if seed is not None:
            self._rng = random.Random(seed)

    def next_delay(self) -> float:
        """Draw a spawn delay uniformly from [delay_min, delay_max)."""
        return self._delay_min + self._rng.random() * (self._delay_max - self._delay_min)

    def spawn_one(self, state: SessionState) -> Optional[ActiveEntity]:
        """
        Spawn a single entity at the top of a random lane.

        Args:
            state: Session receiving the entity.

        Returns:
            The new entity, or None if the session is not running.
        """
        if not state.is_active:
            return None

        lane = self._rng.randrange(self._lane_count)
        kind = self._catalog.pick(self._rng.random())
        speed = kind.base_speed + self._rng.random() * self._speed_jitter

        entity = state.entities.add(kind, lane, speed)
        logger.debug(f"Spawned {entity}")
        self._events.on_entity_spawned(entity)
        return entity

    def schedule_next(self, state: SessionState) -> Optional[TimerHandle]:
        """
        Schedule one future spawn.

        If a spawn is already pending it is kept and returned; no second one
        is queued. When the delay expires the spawn happens only if the active
        set is still empty; otherwise it is dropped.

        Returns:
            The pending spawn handle, or None if the session is not running.
        """
        if not state.is_active:
            return None
        if state.timers.spawn_pending:
            return state.timers.spawn

        def _spawn_if_empty() -> None:
            state.timers.spawn = None
            if state.entities.is_empty:
                self.spawn_one(state)

        delay = self.next_delay()
        state.timers.spawn = self._scheduler.call_later(delay, _spawn_if_empty)
        return state.timers.spawn
