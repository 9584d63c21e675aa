"""
Session State
=============

Plain data owned by one game session: lifecycle phase, score and level,
speed scalar, basket lane, the in-flight entities and the timer handles.

Every core operation receives this object explicitly; there is no
process-wide game state.
"""

from __future__ import annotations

import enum
import itertools
from dataclasses import dataclass, field
from typing import Dict, Iterator, List, Optional

from fruit_catcher.catcher_core.config_loader import GameConfig
from fruit_catcher.catcher_core.item_catalog import ItemKind
from fruit_catcher.catcher_core.scheduler import TimerSet


class SessionPhase(enum.Enum):
    """Session lifecycle: Idle -> Running -> Ended."""
    IDLE = "idle"
    RUNNING = "running"
    ENDED = "ended"


class ActiveEntity:
    """
    A falling item instance.

    Kind, lane and speed are fixed at spawn time; only ``y`` changes.
    """

    __slots__ = ("_uid", "_kind", "_lane", "_speed", "y")

    def __init__(self, uid: int, kind: ItemKind, lane: int, speed: float, y: float = 0.0):
        self._uid = uid
        self._kind = kind
        self._lane = lane
        self._speed = speed
        self.y = y

    @property
    def uid(self) -> int:
        return self._uid

    @property
    def kind(self) -> ItemKind:
        return self._kind

    @property
    def lane(self) -> int:
        return self._lane

    @property
    def speed(self) -> float:
        return self._speed

    def __repr__(self) -> str:
        return (
            f"ActiveEntity(#{self._uid} {self._kind.id} lane={self._lane} "
            f"y={self.y:.1f} speed={self._speed:.2f})"
        )


class EntityArena:
    """
    In-flight entities keyed by a stable id, kept in insertion order.

    Removal goes through the id, never through a list position, so removing
    while walking a snapshot cannot skip anything.
    """

    def __init__(self):
        self._entities: Dict[int, ActiveEntity] = {}
        self._ids = itertools.count(1)

    def __len__(self) -> int:
        return len(self._entities)

    def __iter__(self) -> Iterator[ActiveEntity]:
        return iter(list(self._entities.values()))

    def __contains__(self, uid: int) -> bool:
        return uid in self._entities

    @property
    def is_empty(self) -> bool:
        return not self._entities

    def add(self, kind: ItemKind, lane: int, speed: float) -> ActiveEntity:
        """Create an entity at the top of the play area."""
        entity = ActiveEntity(next(self._ids), kind, lane, speed)
        self._entities[entity.uid] = entity
        return entity

    def remove(self, uid: int) -> Optional[ActiveEntity]:
        return self._entities.pop(uid, None)

    def newest_first(self) -> List[ActiveEntity]:
        """Snapshot in reverse insertion order."""
        return list(reversed(list(self._entities.values())))

    def clear(self) -> None:
        self._entities.clear()


@dataclass
class SessionState:
    """Mutable state of one game session."""
    phase: SessionPhase = SessionPhase.IDLE
    score: int = 0
    level: int = 1
    time_remaining: int = 0
    speed_scalar: float = 1.0
    basket_lane: int = 0
    entities: EntityArena = field(default_factory=EntityArena)
    timers: TimerSet = field(default_factory=TimerSet)

    @property
    def is_active(self) -> bool:
        return self.phase is SessionPhase.RUNNING

    def reset(self, config: GameConfig) -> None:
        """Return to a fresh Idle session, cancelling any pending timers."""
        self.timers.cancel_all()
        self.phase = SessionPhase.IDLE
        self.score = 0
        self.level = 1
        self.time_remaining = config.session.time_limit
        self.speed_scalar = config.progression.initial_speed_scalar
        self.basket_lane = config.center_lane
        self.entities.clear()

    @classmethod
    def fresh(cls, config: GameConfig) -> "SessionState":
        state = cls()
        state.reset(config)
        return state
