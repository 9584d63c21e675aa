"""
Basket Controller
=================

Maps discrete lane commands ("Left", "Center", "Right") from an external
recognizer or keyboard onto the basket lane.
"""

from __future__ import annotations

from typing import Dict, Optional

from fruit_catcher.catcher_core.config_loader import GameConfig, get_config
from fruit_catcher.catcher_core.events import GameListener
from fruit_catcher.catcher_core.session_state import SessionState


class BasketController:
    """
    Holds the label-to-lane mapping and applies commands to a session.

    Commands take effect on the next simulation step. There is no smoothing:
    the latest command always wins.
    """

    def __init__(
        self,
        config: Optional[GameConfig] = None,
        events: Optional[GameListener] = None
    ):
        if config is None:
            config = get_config()

        self._config = config
        self._events = events or GameListener()
        self._lanes: Dict[str, int] = {
            label: lane for lane, label in enumerate(config.board.lane_labels)
        }

    @property
    def lane_labels(self):
        return self._config.board.lane_labels

    def lane_for(self, command: object) -> Optional[int]:
        """Lane for a command label, or None if the label is not recognized."""
        if not isinstance(command, str):
            return None
        return self._lanes.get(command)

    def set_lane(self, state: SessionState, command: object) -> bool:
        """
        Apply a lane command.

        Args:
            state: Session to update.
            command: Lane label; anything unrecognized is ignored.

        Returns:
            True if the basket moved.
        """
        if not state.is_active:
            return False

        lane = self.lane_for(command)
        if lane is None or lane == state.basket_lane:
            return False

        state.basket_lane = lane
        self._events.on_basket_moved(lane)
        return True
