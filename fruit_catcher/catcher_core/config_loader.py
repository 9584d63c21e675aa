"""
Configuration Loader
====================

Loads and validates game_config.yaml, providing typed access to all parameters.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

import yaml


@dataclass(frozen=True)
class BoardConfig:
    """Play area geometry and lane layout."""
    width: int                     # Play area width in pixels
    height: int                    # Play area height; the floor is at y == height
    lane_count: int                # Number of discrete lanes
    lane_labels: Tuple[str, ...]   # Lane commands in lane order


@dataclass(frozen=True)
class BasketConfig:
    """Basket capture band, measured from the floor."""
    capture_offset: float   # Distance from the floor to the top of the band
    capture_height: float   # Band thickness


@dataclass(frozen=True)
class SessionConfig:
    """Session timing."""
    time_limit: int             # Countdown start value in seconds
    countdown_interval: float   # Seconds between countdown ticks
    frame_rate: int             # Simulation steps per second

    @property
    def frame_interval(self) -> float:
        return 1.0 / self.frame_rate


@dataclass(frozen=True)
class SpawnConfig:
    """Spawn timing and speed randomness."""
    delay_min: float
    delay_max: float
    speed_jitter: float


@dataclass(frozen=True)
class ProgressionConfig:
    """Level and speed progression."""
    points_per_level: int
    speed_step: float
    initial_speed_scalar: float


@dataclass(frozen=True)
class ItemConfig:
    """Configuration for a single item kind."""
    id: str
    name: str
    icon: str
    score: int
    speed: float
    weight: int
    color: Tuple[int, int, int]


@dataclass(frozen=True)
class ObservationConfig:
    """Observation space parameters."""
    max_entities: int


@dataclass(frozen=True)
class GameConfig:
    """
    Complete game configuration loaded from YAML.

    All values are immutable to prevent accidental modification during runtime.
    """
    board: BoardConfig
    basket: BasketConfig
    session: SessionConfig
    spawn: SpawnConfig
    progression: ProgressionConfig
    items: Tuple[ItemConfig, ...]
    observation: ObservationConfig

    @property
    def capture_top(self) -> float:
        """Smallest y (inclusive) inside the capture band."""
        return self.board.height - self.basket.capture_offset

    @property
    def capture_bottom(self) -> float:
        """Largest y (exclusive) of the capture band."""
        return self.capture_top + self.basket.capture_height

    @property
    def center_lane(self) -> int:
        return self.board.lane_count // 2

    def get_item(self, item_id: str) -> ItemConfig:
        """Get item config by ID."""
        for item in self.items:
            if item.id == item_id:
                return item
        raise ValueError(f"Invalid item ID: {item_id}")


def _parse_color(color_data: List) -> Tuple[int, int, int]:
    """Parse RGB color from YAML."""
    if len(color_data) != 3:
        raise ValueError(f"Color must have 3 values [R, G, B], got {color_data}")
    return (int(color_data[0]), int(color_data[1]), int(color_data[2]))


def _parse_item(item_data: dict) -> ItemConfig:
    """Parse a single item configuration from YAML."""
    item_id = str(item_data["id"])
    return ItemConfig(
        id=item_id,
        name=str(item_data.get("name", item_id.capitalize())),
        icon=str(item_data.get("icon", "")),
        score=int(item_data["score"]),
        speed=float(item_data["speed"]),
        weight=int(item_data["weight"]),
        color=_parse_color(item_data.get("color", [200, 200, 200]))
    )


def _validate_config(config: GameConfig) -> None:
    """Validate configuration consistency."""
    board = config.board
    if board.lane_count < 1:
        raise ValueError(f"lane_count must be at least 1, got {board.lane_count}")
    if len(board.lane_labels) != board.lane_count:
        raise ValueError(
            f"lane_labels length ({len(board.lane_labels)}) must match "
            f"lane_count ({board.lane_count})"
        )
    if len(set(board.lane_labels)) != len(board.lane_labels):
        raise ValueError(f"lane_labels must be unique, got {board.lane_labels}")

    if config.basket.capture_height <= 0:
        raise ValueError("basket.capture_height must be positive")
    if not 0 < config.basket.capture_offset <= board.height:
        raise ValueError(
            f"basket.capture_offset must be in (0, {board.height}], "
            f"got {config.basket.capture_offset}"
        )

    session = config.session
    if session.time_limit <= 0:
        raise ValueError(f"time_limit must be positive, got {session.time_limit}")
    if session.countdown_interval <= 0:
        raise ValueError("countdown_interval must be positive")
    if session.frame_rate <= 0:
        raise ValueError(f"frame_rate must be positive, got {session.frame_rate}")

    spawn = config.spawn
    if spawn.delay_min < 0 or spawn.delay_min > spawn.delay_max:
        raise ValueError(
            f"spawn delay range invalid: [{spawn.delay_min}, {spawn.delay_max})"
        )
    if spawn.speed_jitter < 0:
        raise ValueError(f"speed_jitter must be >= 0, got {spawn.speed_jitter}")

    progression = config.progression
    if progression.points_per_level <= 0:
        raise ValueError("points_per_level must be positive")
    if progression.speed_step < 0:
        raise ValueError("speed_step must be >= 0")
    if progression.initial_speed_scalar < 1.0:
        raise ValueError("initial_speed_scalar must be >= 1.0")

    # Weights are checked by ItemCatalog; here only per-row sanity
    seen = set()
    for item in config.items:
        if item.id in seen:
            raise ValueError(f"Duplicate item ID: {item.id}")
        seen.add(item.id)
        if item.speed <= 0:
            raise ValueError(f"Item '{item.id}' speed must be positive, got {item.speed}")

    if config.observation.max_entities < 1:
        raise ValueError("observation.max_entities must be at least 1")


def parse_config(raw: Dict[str, Any]) -> GameConfig:
    """
    Build and validate a GameConfig from an already-parsed YAML mapping.

    Args:
        raw: Mapping with the same layout as game_config.yaml.

    Returns:
        Validated GameConfig instance.

    Raises:
        ValueError: If config validation fails.
    """
    board_data = raw["board"]
    board = BoardConfig(
        width=int(board_data["width"]),
        height=int(board_data["height"]),
        lane_count=int(board_data.get("lane_count", 3)),
        lane_labels=tuple(str(label) for label in board_data["lane_labels"])
    )

    basket_data = raw.get("basket", {})
    basket = BasketConfig(
        capture_offset=float(basket_data.get("capture_offset", 80)),
        capture_height=float(basket_data.get("capture_height", 20))
    )

    session_data = raw.get("session", {})
    session = SessionConfig(
        time_limit=int(session_data.get("time_limit", 60)),
        countdown_interval=float(session_data.get("countdown_interval", 1.0)),
        frame_rate=int(session_data.get("frame_rate", 60))
    )

    spawn_data = raw.get("spawn", {})
    spawn = SpawnConfig(
        delay_min=float(spawn_data.get("delay_min", 0.5)),
        delay_max=float(spawn_data.get("delay_max", 1.0)),
        speed_jitter=float(spawn_data.get("speed_jitter", 1.0))
    )

    progression_data = raw.get("progression", {})
    progression = ProgressionConfig(
        points_per_level=int(progression_data.get("points_per_level", 1000)),
        speed_step=float(progression_data.get("speed_step", 0.2)),
        initial_speed_scalar=float(progression_data.get("initial_speed_scalar", 1.0))
    )

    items = tuple(_parse_item(item) for item in raw.get("items") or [])

    obs_data = raw.get("observation", {})
    observation = ObservationConfig(
        max_entities=int(obs_data.get("max_entities", 4))
    )

    config = GameConfig(
        board=board,
        basket=basket,
        session=session,
        spawn=spawn,
        progression=progression,
        items=items,
        observation=observation
    )

    _validate_config(config)
    return config


def load_config(config_path: Optional[str] = None) -> GameConfig:
    """
    Load and validate game configuration from YAML.

    Args:
        config_path: Path to game_config.yaml. If None, uses default location.

    Returns:
        Validated GameConfig instance.

    Raises:
        FileNotFoundError: If config file doesn't exist.
        ValueError: If config validation fails.
    """
    if config_path is None:
        config_path = os.path.join(
            os.path.dirname(os.path.dirname(__file__)),
            "game_config.yaml"
        )

    config_path = Path(config_path)
    if not config_path.exists():
        raise FileNotFoundError(f"Config file not found: {config_path}")

    with open(config_path, "r", encoding="utf-8") as f:
        raw = yaml.safe_load(f)

    return parse_config(raw)


# Module-level singleton for convenience
_cached_config: Optional[GameConfig] = None


def get_config() -> GameConfig:
    """Get the cached game configuration, loading if necessary."""
    global _cached_config
    if _cached_config is None:
        _cached_config = load_config()
    return _cached_config


def reload_config(config_path: Optional[str] = None) -> GameConfig:
    """Reload the configuration (useful for testing)."""
    global _cached_config
    _cached_config = load_config(config_path)
    return _cached_config
