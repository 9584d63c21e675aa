"""
Human Play Mode
================

Play Fruit Catcher with the keyboard standing in for the pose recognizer.

Controls:
    - Left / A: basket to the left lane
    - Down / S: basket to the center lane
    - Right / D: basket to the right lane
    - R: Restart game
    - ESC: Quit

Usage:
    python -m tools.play_human [--seed SEED] [--width WIDTH] [--height HEIGHT]
"""

from __future__ import annotations

import argparse
import logging
import sys
import time
from typing import Optional

try:
    import pygame
    PYGAME_AVAILABLE = True
except ImportError:
    PYGAME_AVAILABLE = False

from fruit_catcher.catcher_core.config_loader import GameConfig, load_config
from fruit_catcher.catcher_core.events import CatchEvent, GameListener
from fruit_catcher.catcher_core.game import GameSession
from fruit_catcher.catcher_core.scheduler import ManualScheduler


class ConsoleReporter(GameListener):
    """Prints catches, level-ups and the final result."""

    def on_caught(self, event: CatchEvent) -> None:
        if event.delta >= 0:
            print(f"  Catch! {event.caught.name} (+{event.delta})")
        else:
            print(f"  Boom! {event.caught.name} ({event.delta})")

    def on_level_changed(self, level: int) -> None:
        if level > 1:
            print(f"  Level Up! Lv.{level}")

    def on_game_ended(self, final_score: int, final_level: int) -> None:
        print(f"\nGAME OVER - Score: {final_score}, Level: {final_level}")


class HumanPlayer:
    """Keyboard-driven game loop feeding real frame time to the session clock."""

    def __init__(
        self,
        config: GameConfig,
        seed: Optional[int] = None,
        window_width: int = 480,
        window_height: int = 720,
        target_fps: int = 60
    ):
        if not PYGAME_AVAILABLE:
            raise ImportError("pygame is required for human play mode")

        from fruit_catcher.catcher_core.render_pygame import PygameRenderer

        self._config = config
        self._seed = seed
        self._window_width = window_width
        self._window_height = window_height
        self._target_fps = target_fps

        pygame.init()
        self._clock = pygame.time.Clock()
        self._renderer = PygameRenderer(config)

        self._scheduler = ManualScheduler()
        self._game = GameSession(
            config=config,
            scheduler=self._scheduler,
            seed=seed,
            listeners=[ConsoleReporter()]
        )

        labels = config.board.lane_labels
        self._key_commands = {
            pygame.K_LEFT: labels[0],
            pygame.K_a: labels[0],
            pygame.K_DOWN: labels[len(labels) // 2],
            pygame.K_s: labels[len(labels) // 2],
            pygame.K_RIGHT: labels[-1],
            pygame.K_d: labels[-1],
        }

        self._running = True
        self._last_time = time.time()

    def run(self) -> int:
        """Run the game loop. Returns final score."""
        print("=== Fruit Catcher ===")
        print("Arrows or A/S/D to move the basket")
        print("R to restart, ESC to quit")
        print()

        with self._game:
            self._game.start()
            self._last_time = time.time()

            while self._running:
                self._handle_events()

                # Feed wall-clock time to the session; clamp long stalls
                now = time.time()
                frame_dt = min(now - self._last_time, 0.2)
                self._last_time = now
                self._scheduler.advance(frame_dt)

                self._renderer.render_to_screen(
                    self._game.get_render_data(),
                    self._window_width,
                    self._window_height
                )
                self._clock.tick(self._target_fps)

        self._renderer.close()
        pygame.quit()
        return self._game.score

    def _handle_events(self) -> None:
        """Process pygame events."""
        for event in pygame.event.get():
            if event.type == pygame.QUIT:
                self._running = False

            elif event.type == pygame.KEYDOWN:
                if event.key == pygame.K_ESCAPE:
                    self._running = False
                elif event.key == pygame.K_r:
                    self._restart()
                elif event.key in self._key_commands:
                    self._game.on_lane_command(self._key_commands[event.key])

    def _restart(self) -> None:
        """Restart the game."""
        self._game.reset(seed=self._seed)
        self._game.start()
        print("\n=== Game Restarted ===\n")


def main():
    parser = argparse.ArgumentParser(description="Play Fruit Catcher interactively")
    parser.add_argument("--seed", type=int, default=None, help="Random seed")
    parser.add_argument("--width", type=int, default=480, help="Window width (default: 480)")
    parser.add_argument("--height", type=int, default=720, help="Window height (default: 720)")
    parser.add_argument("--fps", type=int, default=60, help="Target FPS")
    parser.add_argument("--verbose", action="store_true", help="Log core events")

    args = parser.parse_args()

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s %(name)s %(levelname)s: %(message)s"
    )

    try:
        config = load_config()
        player = HumanPlayer(
            config=config,
            seed=args.seed,
            window_width=args.width,
            window_height=args.height,
            target_fps=args.fps
        )
        score = player.run()
        print(f"\nFinal Score: {score}")
        return 0
    except ImportError as e:
        print(f"Error: {e}")
        return 1


if __name__ == "__main__":
    sys.exit(main())
