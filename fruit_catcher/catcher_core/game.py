"""
Game Session
============

Main game orchestrator combining spawning, simulation, scoring, the basket
and the session lifecycle.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Iterable, Optional, Tuple

from fruit_catcher.catcher_core.basket import BasketController
from fruit_catcher.catcher_core.config_loader import GameConfig, get_config
from fruit_catcher.catcher_core.events import EventDispatcher, GameListener
from fruit_catcher.catcher_core.item_catalog import ItemCatalog
from fruit_catcher.catcher_core.scheduler import ManualScheduler
from fruit_catcher.catcher_core.scoring import ScoreResolver
from fruit_catcher.catcher_core.session_state import (
    ActiveEntity,
    SessionPhase,
    SessionState,
)
from fruit_catcher.catcher_core.simulation import SimulationStep, StepResult
from fruit_catcher.catcher_core.spawner import Spawner

logger = logging.getLogger(__name__)


class GameSession:
    """
    One game of Fruit Catcher.

    Orchestrates:
    - Countdown timer (one tick per ``countdown_interval``)
    - Frame timer driving the simulation step
    - Spawn delay timer
    - Lane commands from the outside
    - Idle/Running/Ended lifecycle

    All three timers belong to the session and are cancelled together on
    stop. Use as a context manager to guarantee that on every exit path.
    """

    def __init__(
        self,
        config: Optional[GameConfig] = None,
        scheduler=None,
        seed: Optional[int] = None,
        listeners: Iterable[GameListener] = ()
    ):
        """
        Initialize session.

        Args:
            config: Game configuration. Uses default if None.
            scheduler: Timer provider (``call_later`` / ``call_every``).
                A ManualScheduler is created if None.
            seed: Random seed for reproducibility.
            listeners: Event listeners to register immediately.

        Raises:
            ValueError: If the item catalog cannot be used for weighted spawning.
        """
        if config is None:
            config = get_config()

        self._config = config
        self._seed = seed
        self._scheduler = scheduler if scheduler is not None else ManualScheduler()

        self._events = EventDispatcher()
        for listener in listeners:
            self._events.add(listener)

        # Fails fast on an empty or zero-weight catalog
        self._catalog = ItemCatalog(config)

        self._state = SessionState.fresh(config)
        self._spawner = Spawner(
            self._scheduler,
            config=config,
            catalog=self._catalog,
            events=self._events,
            seed=seed
        )
        self._resolver = ScoreResolver(config, self._events)
        self._simulation = SimulationStep(
            self._resolver,
            self._spawner,
            config=config,
            events=self._events
        )
        self._basket = BasketController(config, self._events)

    def __enter__(self) -> "GameSession":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.stop()

    # ------------------------------------------------------------------ #
    # Accessors
    # ------------------------------------------------------------------ #
    @property
    def config(self) -> GameConfig:
        return self._config

    @property
    def scheduler(self):
        return self._scheduler

    @property
    def state(self) -> SessionState:
        """The session object passed to every core operation."""
        return self._state

    @property
    def catalog(self) -> ItemCatalog:
        return self._catalog

    @property
    def spawner(self) -> Spawner:
        return self._spawner

    @property
    def resolver(self) -> ScoreResolver:
        return self._resolver

    @property
    def simulation(self) -> SimulationStep:
        return self._simulation

    @property
    def basket(self) -> BasketController:
        return self._basket

    @property
    def phase(self) -> SessionPhase:
        return self._state.phase

    @property
    def is_running(self) -> bool:
        return self._state.phase is SessionPhase.RUNNING

    @property
    def is_over(self) -> bool:
        return self._state.phase is SessionPhase.ENDED

    @property
    def score(self) -> int:
        return self._state.score

    @property
    def level(self) -> int:
        return self._state.level

    @property
    def time_remaining(self) -> int:
        return self._state.time_remaining

    @property
    def speed_scalar(self) -> float:
        return self._state.speed_scalar

    @property
    def basket_lane(self) -> int:
        return self._state.basket_lane

    @property
    def entities(self) -> Tuple[ActiveEntity, ...]:
        return tuple(self._state.entities)

    def add_listener(self, listener: GameListener) -> None:
        self._events.add(listener)

    def remove_listener(self, listener: GameListener) -> None:
        self._events.remove(listener)

    # ------------------------------------------------------------------ #
    # Lifecycle
    # ------------------------------------------------------------------ #
    def reset(self, seed: Optional[int] = None) -> SessionState:
        """
        Return to Idle with fresh state.

        A running session is stopped first (and reports its final result).

        Args:
            seed: New random seed. Keeps the current sequence if None.

        Returns:
            The reset session state.
        """
        if self.is_running:
            self.stop()
        if seed is not None:
            self._seed = seed
            self._spawner.reset(seed)
        self._state.reset(self._config)
        return self._state

    def start(self) -> bool:
        """
        Start a new game from Idle or Ended.

        Resets score, level, time, speed and basket, starts the countdown and
        frame timers, and spawns the first entity. Does nothing while running.

        Returns:
            True if a game was started.
        """
        if self.is_running:
            return False

        state = self.reset()
        state.phase = SessionPhase.RUNNING

        self._events.on_score_changed(state.score)
        self._events.on_time_changed(state.time_remaining)
        self._events.on_level_changed(state.level)
        self._events.on_basket_moved(state.basket_lane)

        try:
            state.timers.countdown = self._scheduler.call_every(
                self._config.session.countdown_interval, self._on_countdown
            )
            state.timers.frame = self._scheduler.call_every(
                self._config.session.frame_interval, self._on_frame
            )
            self._spawner.spawn_one(state)
        except BaseException:
            self.stop()
            raise

        logger.info(
            f"Game started: {self._config.session.time_limit}s, "
            f"{len(self._catalog)} item kinds, seed={self._seed}"
        )
        return True

    def stop(self) -> bool:
        """
        End the game.

        Cancels every pending timer unconditionally, then, if the game was
        running, reports the final score and level once. Safe to call
        repeatedly.

        Returns:
            True if this call ended a running game.
        """
        state = self._state
        try:
            state.timers.cancel_all()
        finally:
            was_running = state.phase is SessionPhase.RUNNING
            if was_running:
                state.phase = SessionPhase.ENDED
        if was_running:
            logger.info(f"Game over: score={state.score}, level={state.level}")
            self._events.on_game_ended(state.score, state.level)
        return was_running

    # ------------------------------------------------------------------ #
    # Driving
    # ------------------------------------------------------------------ #
    def tick(self) -> StepResult:
        """Run one simulation frame (no-op unless running)."""
        try:
            return self._simulation.advance(self._state)
        except BaseException:
            self.stop()
            raise

    def on_lane_command(self, label: object) -> bool:
        """
        Apply a lane command ("Left", "Center", "Right").

        Unrecognized labels and commands outside a running game are ignored.

        Returns:
            True if the basket moved.
        """
        return self._basket.set_lane(self._state, label)

    def _on_frame(self) -> None:
        self.tick()

    def _on_countdown(self) -> None:
        state = self._state
        if not state.is_active:
            return
        try:
            state.time_remaining -= 1
            self._events.on_time_changed(state.time_remaining)
        except BaseException:
            self.stop()
            raise
        if state.time_remaining <= 0:
            self.stop()

    # ------------------------------------------------------------------ #
    # Introspection
    # ------------------------------------------------------------------ #
    def get_info(self) -> Dict[str, Any]:
        """Summary dict (used as Gymnasium info)."""
        state = self._state
        return {
            "phase": state.phase.value,
            "score": state.score,
            "level": state.level,
            "time_remaining": state.time_remaining,
            "speed_scalar": state.speed_scalar,
            "basket_lane": state.basket_lane,
            "entity_count": len(state.entities),
            "spawn_pending": state.timers.spawn_pending,
        }

    def get_render_data(self) -> Dict[str, Any]:
        """
        Get data needed for rendering.

        Returns:
            Dict with board geometry, basket, entities and HUD values.
        """
        entities_data = []
        for entity in self._state.entities:
            entities_data.append({
                "uid": entity.uid,
                "kind": entity.kind.id,
                "icon": entity.kind.icon,
                "color": entity.kind.color,
                "lane": entity.lane,
                "y": entity.y,
            })

        board = self._config.board
        return {
            "board_width": board.width,
            "board_height": board.height,
            "lane_count": board.lane_count,
            "capture_top": self._config.capture_top,
            "capture_bottom": self._config.capture_bottom,
            "basket_lane": self._state.basket_lane,
            "entities": entities_data,
            "score": self._state.score,
            "level": self._state.level,
            "time_remaining": self._state.time_remaining,
            "phase": self._state.phase.value,
        }
