"""
Catcher Core - The heart of the Fruit Catcher game.

This module provides the session simulation, a Gymnasium environment wrapper,
and all supporting systems (catalog, spawning, scoring, scheduling).

Main exports:
- GameSession: Session lifecycle and orchestration
- CatcherEnv: Gymnasium environment (agent issues lane commands)
- ItemCatalog / pick_weighted: Item kinds and weighted selection
- ManualScheduler: Virtual-clock timers driving a session
- GameListener / EventLog: Outbound event hooks
- GameConfig: Configuration loaded from game_config.yaml
"""

from fruit_catcher.catcher_core.config_loader import GameConfig, load_config
from fruit_catcher.catcher_core.item_catalog import ItemKind, ItemCatalog, pick_weighted
from fruit_catcher.catcher_core.scheduler import (
    AsyncioScheduler,
    ManualScheduler,
    TimerHandle,
)
from fruit_catcher.catcher_core.events import (
    CatchEvent,
    EventLog,
    GameListener,
    RemovalReason,
)
from fruit_catcher.catcher_core.session_state import (
    ActiveEntity,
    SessionPhase,
    SessionState,
)
from fruit_catcher.catcher_core.game import GameSession
from fruit_catcher.catcher_core.env_gym import CatcherEnv

__all__ = [
    "GameConfig",
    "load_config",
    "ItemKind",
    "ItemCatalog",
    "pick_weighted",
    "AsyncioScheduler",
    "ManualScheduler",
    "TimerHandle",
    "CatchEvent",
    "EventLog",
    "GameListener",
    "RemovalReason",
    "ActiveEntity",
    "SessionPhase",
    "SessionState",
    "GameSession",
    "CatcherEnv",
]
