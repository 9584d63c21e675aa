"""
Gymnasium Environment Wrapper
=============================

Provides a standard Gymnasium interface to the Fruit Catcher game.

The agent stands in for the pose recognizer: each action is a lane command,
and each step advances the session clock by exactly one frame.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Optional, Tuple, Union

import numpy as np

import gymnasium as gym
from gymnasium import spaces

from fruit_catcher.catcher_core.config_loader import GameConfig, load_config
from fruit_catcher.catcher_core.events import GameListener, RemovalReason
from fruit_catcher.catcher_core.game import GameSession
from fruit_catcher.catcher_core.scheduler import ManualScheduler
from fruit_catcher.catcher_core.state_snapshot import SnapshotBuilder

logger = logging.getLogger(__name__)


class _OutcomeTally(GameListener):
    """Counts catches and misses across the env's lifetime."""

    def __init__(self):
        self.caught = 0
        self.missed = 0

    def on_entity_removed(self, entity, reason: RemovalReason) -> None:
        if reason is RemovalReason.CAUGHT:
            self.caught += 1
        else:
            self.missed += 1


class CatcherEnv(gym.Env):
    """
    Fruit Catcher as a Gymnasium environment.

    Action Space:
        Discrete(lane_count). Action i issues the i-th lane label
        ("Left", "Center", "Right" by default).

    Observation Space:
        Dict with basket lane, HUD values and padded entity arrays.

    Reward:
        Score change during the step (negative when a bomb is caught).

    Info:
        Contains score, level, time_remaining, delta_score, caught, missed, etc.
    """

    metadata = {
        "render_modes": ["human", "rgb_array"],
        "render_fps": 60,
    }

    def __init__(
        self,
        config_path: Optional[str] = None,
        render_mode: Optional[str] = None,
        image_width: int = 240,
        image_height: int = 360,
        debug: bool = False,
    ):
        """
        Initialize environment.

        Args:
            config_path: Path to game_config.yaml. Uses default if None.
            render_mode: "human" for window, "rgb_array" for numpy, None for headless.
            image_width: Width of rgb_array renders.
            image_height: Height of rgb_array renders.
            debug: If True, log every step of this env at INFO level.
        """
        super().__init__()

        self._config = load_config(config_path)
        self.render_mode = render_mode
        self._img_width = image_width
        self._img_height = image_height
        self._debug = debug

        self._scheduler = ManualScheduler()
        self._game = GameSession(config=self._config, scheduler=self._scheduler)
        self._snapshot_builder = SnapshotBuilder(self._config, self._game.catalog)
        self._tally = _OutcomeTally()
        self._game.add_listener(self._tally)
        self._renderer = None

        # Frame clock: targets are start + n * interval, matching the scheduler
        self._start_time = 0.0
        self._frames = 0

        self.action_space = spaces.Discrete(self._config.board.lane_count)
        self.observation_space = self._build_observation_space()

        logger.debug(
            f"CatcherEnv initialized: board {self._config.board.width}x"
            f"{self._config.board.height}, lanes={self._config.board.lane_count}"
        )

    def _build_observation_space(self) -> spaces.Dict:
        """Build the observation space definition."""
        max_ent = self._config.observation.max_entities
        board = self._config.board
        int64 = np.iinfo(np.int64)

        return spaces.Dict({
            "basket_lane": spaces.Discrete(board.lane_count),
            "score": spaces.Box(low=int64.min, high=int64.max, shape=(), dtype=np.int64),
            "level": spaces.Box(low=1, high=np.iinfo(np.int32).max, shape=(), dtype=np.int32),
            "time_remaining": spaces.Box(
                low=0, high=self._config.session.time_limit, shape=(), dtype=np.int32
            ),
            "speed_scalar": spaces.Box(low=1.0, high=np.inf, shape=(), dtype=np.float32),
            "entity_count": spaces.Box(low=0, high=np.iinfo(np.int32).max, shape=(), dtype=np.int32),
            "ent_lane": spaces.Box(low=-1, high=board.lane_count - 1, shape=(max_ent,), dtype=np.int8),
            "ent_y": spaces.Box(low=0, high=np.inf, shape=(max_ent,), dtype=np.float32),
            "ent_kind": spaces.Box(
                low=-1, high=len(self._game.catalog) - 1, shape=(max_ent,), dtype=np.int16
            ),
            "ent_speed": spaces.Box(low=0, high=np.inf, shape=(max_ent,), dtype=np.float32),
            "ent_mask": spaces.MultiBinary(max_ent),
        })

    def reset(
        self,
        *,
        seed: Optional[int] = None,
        options: Optional[Dict[str, Any]] = None
    ) -> Tuple[Dict[str, np.ndarray], Dict[str, Any]]:
        """
        Reset the environment and start a new game.

        Args:
            seed: Random seed for reproducibility.
            options: Additional options (unused).

        Returns:
            (observation, info) tuple.
        """
        super().reset(seed=seed)

        self._game.reset(seed=seed)
        self._game.start()
        self._start_time = self._scheduler.now
        self._frames = 0

        info = self._game.get_info()
        info["delta_score"] = 0
        return self._observe(), info

    def step(
        self,
        action: Union[int, np.integer, np.ndarray]
    ) -> Tuple[Dict[str, np.ndarray], float, bool, bool, Dict[str, Any]]:
        """
        Apply a lane command and advance one frame.

        Returns:
            (observation, reward, terminated, truncated, info) tuple.
        """
        if isinstance(action, np.ndarray):
            action = action.item()
        action = int(action)
        if not self.action_space.contains(action):
            raise ValueError(f"Invalid action {action} for {self.action_space}")

        if self._game.is_over:
            info = self._game.get_info()
            info["delta_score"] = 0
            return self._observe(), 0.0, True, False, info

        score_before = self._game.score
        caught_before = self._tally.caught
        missed_before = self._tally.missed

        self._game.on_lane_command(self._config.board.lane_labels[action])

        self._frames += 1
        target = self._start_time + self._frames * self._config.session.frame_interval
        self._scheduler.advance_to(target)

        delta_score = self._game.score - score_before
        terminated = self._game.is_over

        info = self._game.get_info()
        info["delta_score"] = delta_score
        info["frame"] = self._frames
        info["caught"] = self._tally.caught - caught_before
        info["missed"] = self._tally.missed - missed_before

        if self._debug:
            logger.info(
                f"Step {self._frames}: action={action}, delta_score={delta_score}, "
                f"entities={info['entity_count']}, time={info['time_remaining']}"
            )
        if terminated and self._debug:
            logger.info(f"TERMINATED: score={info['score']}, level={info['level']}")

        if self.render_mode == "human":
            self.render()

        return self._observe(), float(delta_score), terminated, False, info

    def _observe(self) -> Dict[str, np.ndarray]:
        return self._snapshot_builder.build(self._game.state).to_obs_dict()

    def _init_renderer(self) -> None:
        from fruit_catcher.catcher_core.render_pygame import PygameRenderer
        self._renderer = PygameRenderer(self._config)

    def render(self) -> Optional[np.ndarray]:
        """
        Render the current game state.

        Returns:
            RGB array if render_mode is "rgb_array", None otherwise.
        """
        if self.render_mode is None:
            return None
        if self._renderer is None:
            self._init_renderer()

        render_data = self._game.get_render_data()
        if self.render_mode == "rgb_array":
            return self._renderer.render(render_data, self._img_width, self._img_height)

        self._renderer.render_to_screen(render_data)
        return None

    def close(self) -> None:
        """Stop the game and clean up resources."""
        self._game.stop()
        if self._renderer is not None:
            self._renderer.close()
            self._renderer = None

    @property
    def game(self) -> GameSession:
        """Access to underlying session (for debugging/tools)."""
        return self._game

    @property
    def config(self) -> GameConfig:
        """Game configuration."""
        return self._config
