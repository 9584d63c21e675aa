"""
Item Catalog
============

Provides access to the spawnable item kinds loaded from config and the
weighted kind selection used by the spawner.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Sequence, Tuple, TypeVar

from fruit_catcher.catcher_core.config_loader import (
    GameConfig,
    ItemConfig,
    get_config
)

T = TypeVar("T")


def pick_weighted(
    kinds: Sequence[T],
    random_unit: float,
    weights: Optional[Sequence[int]] = None
) -> T:
    """
    Pick one entry of a weighted table from a uniform draw.

    The draw is scaled to [0, total_weight) and the first entry whose
    cumulative weight strictly exceeds it wins (half-open ranges), so a draw
    landing exactly on a boundary belongs to the next entry.

    Args:
        kinds: Table entries, in cumulative order.
        random_unit: Uniform random value in [0, 1).
        weights: Per-entry weights. Defaults to each entry's ``spawn_weight``.

    Returns:
        The selected entry.

    Raises:
        ValueError: If the table is empty, the weights are unusable, or the
            draw lies outside [0, 1).
    """
    if not kinds:
        raise ValueError("Cannot pick from an empty table")
    if weights is None:
        weights = [kind.spawn_weight for kind in kinds]
    if len(weights) != len(kinds):
        raise ValueError(
            f"weights length ({len(weights)}) must match table length ({len(kinds)})"
        )
    total = sum(weights)
    if total <= 0:
        raise ValueError(f"Total weight must be positive, got {total}")
    if not 0.0 <= random_unit < 1.0:
        raise ValueError(f"random_unit must be in [0, 1), got {random_unit}")

    r = random_unit * total
    cumulative = 0
    for kind, weight in zip(kinds, weights):
        cumulative += weight
        if r < cumulative:
            return kind
    # Float rounding can push r onto the total
    return kinds[-1]


@dataclass(frozen=True)
class ItemKind:
    """
    Runtime representation of an item kind.

    Wraps ItemConfig with the names used by the simulation.
    """
    config: ItemConfig

    @property
    def id(self) -> str:
        return self.config.id

    @property
    def name(self) -> str:
        return self.config.name

    @property
    def icon(self) -> str:
        return self.config.icon

    @property
    def score_delta(self) -> int:
        return self.config.score

    @property
    def base_speed(self) -> float:
        return self.config.speed

    @property
    def spawn_weight(self) -> int:
        return self.config.weight

    @property
    def color(self) -> Tuple[int, int, int]:
        return self.config.color

    @property
    def is_hazard(self) -> bool:
        """True if catching this item loses points (e.g., bomb)."""
        return self.config.score < 0

    def __repr__(self) -> str:
        return f"ItemKind({self.id}: {self.score_delta:+d})"


class ItemCatalog:
    """
    Collection of all spawnable item kinds.

    The table is checked once here so that weighted selection is always
    defined afterwards.
    """

    def __init__(self, config: Optional[GameConfig] = None):
        """
        Initialize catalog from game config.

        Args:
            config: GameConfig instance. If None, loads from default location.

        Raises:
            ValueError: If the table is empty, a weight is negative, or the
                weights sum to zero.
        """
        if config is None:
            config = get_config()

        self._config = config
        self._kinds: Tuple[ItemKind, ...] = tuple(
            ItemKind(item_config) for item_config in config.items
        )

        if not self._kinds:
            raise ValueError("Item catalog is empty")
        for kind in self._kinds:
            if kind.spawn_weight < 0:
                raise ValueError(
                    f"Item '{kind.id}' has negative weight {kind.spawn_weight}"
                )
        self._total_weight = sum(kind.spawn_weight for kind in self._kinds)
        if self._total_weight <= 0:
            raise ValueError("Item catalog weights sum to zero")

    def __len__(self) -> int:
        return len(self._kinds)

    def __getitem__(self, index: int) -> ItemKind:
        """Get item kind by catalog position."""
        if 0 <= index < len(self._kinds):
            return self._kinds[index]
        raise IndexError(f"Item index {index} out of range [0, {len(self._kinds)})")

    def __iter__(self):
        return iter(self._kinds)

    @property
    def total_weight(self) -> int:
        return self._total_weight

    def index_of(self, kind: ItemKind) -> int:
        """Catalog position of a kind (used for observation encoding)."""
        return self._kinds.index(kind)

    def get(self, item_id: str) -> Optional[ItemKind]:
        """Get item kind by ID (case-insensitive)."""
        item_id = item_id.lower()
        for kind in self._kinds:
            if kind.id.lower() == item_id:
                return kind
        return None

    def pick(self, random_unit: float) -> ItemKind:
        """Pick a kind with probability proportional to its spawn weight."""
        return pick_weighted(self._kinds, random_unit)

