"""
State Snapshot
==============

Packs session state into fixed-size numpy arrays for Gymnasium observations.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Optional

import numpy as np

from fruit_catcher.catcher_core.config_loader import GameConfig, get_config
from fruit_catcher.catcher_core.item_catalog import ItemCatalog
from fruit_catcher.catcher_core.session_state import SessionState


@dataclass
class GameSnapshot:
    """
    Session snapshot.

    Entity arrays are fixed-size with a mask; unused slots hold -1 kind/lane.
    """
    # Core state
    basket_lane: int
    score: int
    level: int
    time_remaining: int
    speed_scalar: float
    entity_count: int

    # Entity arrays (fixed size, padded)
    ent_lane: np.ndarray      # (MAX_ENT,) int8
    ent_y: np.ndarray         # (MAX_ENT,) float32
    ent_kind: np.ndarray      # (MAX_ENT,) int16, catalog position
    ent_speed: np.ndarray     # (MAX_ENT,) float32, before speed scalar
    ent_mask: np.ndarray      # (MAX_ENT,) bool

    def to_obs_dict(self) -> Dict[str, np.ndarray]:
        """Convert to Gymnasium observation dictionary."""
        return {
            "basket_lane": np.array(self.basket_lane, dtype=np.int64),
            "score": np.array(self.score, dtype=np.int64),
            "level": np.array(self.level, dtype=np.int32),
            "time_remaining": np.array(self.time_remaining, dtype=np.int32),
            "speed_scalar": np.array(self.speed_scalar, dtype=np.float32),
            "entity_count": np.array(self.entity_count, dtype=np.int32),
            "ent_lane": self.ent_lane,
            "ent_y": self.ent_y,
            "ent_kind": self.ent_kind,
            "ent_speed": self.ent_speed,
            "ent_mask": self.ent_mask,
        }


class SnapshotBuilder:
    """Builds session snapshots."""

    def __init__(
        self,
        config: Optional[GameConfig] = None,
        catalog: Optional[ItemCatalog] = None
    ):
        if config is None:
            config = get_config()

        self._config = config
        self._catalog = catalog if catalog is not None else ItemCatalog(config)
        self._max_entities = config.observation.max_entities

    @property
    def max_entities(self) -> int:
        return self._max_entities

    def build(self, state: SessionState) -> GameSnapshot:
        """Build a snapshot from the current session state."""
        n = self._max_entities
        ent_lane = np.full(n, -1, dtype=np.int8)
        ent_y = np.zeros(n, dtype=np.float32)
        ent_kind = np.full(n, -1, dtype=np.int16)
        ent_speed = np.zeros(n, dtype=np.float32)
        ent_mask = np.zeros(n, dtype=bool)

        # Oldest first; extra entities beyond the cap are dropped
        entities = list(state.entities)
        count = min(len(entities), n)
        for i, entity in enumerate(entities[:count]):
            ent_lane[i] = entity.lane
            ent_y[i] = entity.y
            ent_kind[i] = self._catalog.index_of(entity.kind)
            ent_speed[i] = entity.speed
            ent_mask[i] = True

        return GameSnapshot(
            basket_lane=state.basket_lane,
            score=state.score,
            level=state.level,
            time_remaining=state.time_remaining,
            speed_scalar=state.speed_scalar,
            entity_count=len(entities),
            ent_lane=ent_lane,
            ent_y=ent_y,
            ent_kind=ent_kind,
            ent_speed=ent_speed,
            ent_mask=ent_mask,
        )
