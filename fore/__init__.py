"""
Fore Rules Engine

A deterministic two-player, golf-themed property-trading game engine.
"""

from .board import Board, create_standard_board
from .config import EngineSettings, GameConfig, configure_logging, get_engine_settings
from .dice import DiceRoll
from .enums import CourseGroup, Difficulty, GameStatus, ImprovementLevel, TileType, TradeStatus, TurnPhase
from .events import EventType, GameEvent, map_event, map_events
from .exceptions import GameError, GameInvariantError
from .game import GameSession
from .money import Money
from .player import PlayerState
from .registry import GameRegistry
from .snapshot import GameSnapshot, restore_session, serialize_state, take_snapshot
from .spaces import Property, Tile
from .trade import TradeOffer

__all__ = [
    "Board",
    "create_standard_board",
    "EngineSettings",
    "GameConfig",
    "configure_logging",
    "get_engine_settings",
    "DiceRoll",
    "CourseGroup",
    "Difficulty",
    "GameStatus",
    "ImprovementLevel",
    "TileType",
    "TradeStatus",
    "TurnPhase",
    "EventType",
    "GameEvent",
    "map_event",
    "map_events",
    "GameError",
    "GameInvariantError",
    "GameSession",
    "Money",
    "PlayerState",
    "GameRegistry",
    "GameSnapshot",
    "restore_session",
    "serialize_state",
    "take_snapshot",
    "Property",
    "Tile",
    "TradeOffer",
]
