"""
Game Events
===========

Outbound notifications from the simulation to presentation and sound layers.

Listeners subclass GameListener and override only the hooks they need.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, List, Tuple

if TYPE_CHECKING:
    from fruit_catcher.catcher_core.item_catalog import ItemKind
    from fruit_catcher.catcher_core.session_state import ActiveEntity


class RemovalReason(enum.Enum):
    """Why an entity left the play area."""
    CAUGHT = "caught"
    MISSED = "missed"


@dataclass(frozen=True)
class CatchEvent:
    """Outcome of a catch: which kind was caught and the score change."""
    caught: "ItemKind"
    delta: int

    def __repr__(self) -> str:
        return f"CatchEvent({self.caught.id}, {self.delta:+d})"


class GameListener:
    """Base listener; every hook is a no-op."""

    def on_entity_spawned(self, entity: "ActiveEntity") -> None:
        pass

    def on_entity_position_changed(self, entity: "ActiveEntity", new_y: float) -> None:
        pass

    def on_entity_removed(self, entity: "ActiveEntity", reason: RemovalReason) -> None:
        pass

    def on_caught(self, event: CatchEvent) -> None:
        pass

    def on_score_changed(self, score: int) -> None:
        pass

    def on_time_changed(self, seconds_left: int) -> None:
        pass

    def on_level_changed(self, level: int) -> None:
        pass

    def on_basket_moved(self, lane: int) -> None:
        pass

    def on_game_ended(self, final_score: int, final_level: int) -> None:
        pass


class EventDispatcher(GameListener):
    """Fans every event out to the registered listeners, in registration order."""

    def __init__(self):
        self._listeners: List[GameListener] = []

    def add(self, listener: GameListener) -> None:
        if listener not in self._listeners:
            self._listeners.append(listener)

    def remove(self, listener: GameListener) -> None:
        if listener in self._listeners:
            self._listeners.remove(listener)

    def on_entity_spawned(self, entity: "ActiveEntity") -> None:
        for listener in self._listeners:
            listener.on_entity_spawned(entity)

    def on_entity_position_changed(self, entity: "ActiveEntity", new_y: float) -> None:
        for listener in self._listeners:
            listener.on_entity_position_changed(entity, new_y)

    def on_entity_removed(self, entity: "ActiveEntity", reason: RemovalReason) -> None:
        for listener in self._listeners:
            listener.on_entity_removed(entity, reason)

    def on_caught(self, event: CatchEvent) -> None:
        for listener in self._listeners:
            listener.on_caught(event)

    def on_score_changed(self, score: int) -> None:
        for listener in self._listeners:
            listener.on_score_changed(score)

    def on_time_changed(self, seconds_left: int) -> None:
        for listener in self._listeners:
            listener.on_time_changed(seconds_left)

    def on_level_changed(self, level: int) -> None:
        for listener in self._listeners:
            listener.on_level_changed(level)

    def on_basket_moved(self, lane: int) -> None:
        for listener in self._listeners:
            listener.on_basket_moved(lane)

    def on_game_ended(self, final_score: int, final_level: int) -> None:
        for listener in self._listeners:
            listener.on_game_ended(final_score, final_level)


class EventLog(GameListener):
    """
    Recording listener.

    Stores ``(name, payload)`` tuples in arrival order. Position updates are
    skipped unless ``include_positions`` is set, since they arrive every frame.
    """

    def __init__(self, include_positions: bool = False):
        self._include_positions = include_positions
        self.events: List[Tuple[str, Any]] = []

    def count(self, name: str) -> int:
        return sum(1 for event_name, _ in self.events if event_name == name)

    def payloads(self, name: str) -> List[Any]:
        return [payload for event_name, payload in self.events if event_name == name]

    def clear(self) -> None:
        self.events.clear()

    def on_entity_spawned(self, entity: "ActiveEntity") -> None:
        self.events.append(("entity_spawned", entity))

    def on_entity_position_changed(self, entity: "ActiveEntity", new_y: float) -> None:
        if self._include_positions:
            self.events.append(("entity_position_changed", (entity, new_y)))

    def on_entity_removed(self, entity: "ActiveEntity", reason: RemovalReason) -> None:
        self.events.append(("entity_removed", (entity, reason)))

    def on_caught(self, event: CatchEvent) -> None:
        self.events.append(("caught", event))

    def on_score_changed(self, score: int) -> None:
        self.events.append(("score_changed", score))

    def on_time_changed(self, seconds_left: int) -> None:
        self.events.append(("time_changed", seconds_left))

    def on_level_changed(self, level: int) -> None:
        self.events.append(("level_changed", level))

    def on_basket_moved(self, lane: int) -> None:
        self.events.append(("basket_moved", lane))

    def on_game_ended(self, final_score: int, final_level: int) -> None:
        self.events.append(("game_ended", (final_score, final_level)))
