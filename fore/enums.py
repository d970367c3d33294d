"""
Enumerations shared across the engine.
"""

from enum import Enum


class TileType(Enum):
    """Types of tiles on the board."""

    PROPERTY = "property"
    START = "start"
    SHOP = "shop"
    SAND_TRAP = "sand_trap"
    WATER_HAZARD = "water_hazard"
    SAFE_LOUNGE = "safe_lounge"


class CourseGroup(Enum):
    """The six course groups, cheapest first. Each holds exactly three properties."""

    LINKS_NINE = ("Links Nine", "#8B4513")
    PRAIRIE_NINE = ("Prairie Nine", "#87CEEB")
    HIGHLAND_NINE = ("Highland Nine", "#DDA0DD")
    COASTAL_NINE = ("Coastal Nine", "#FFA500")
    CHAMPIONSHIP_NINE = ("Championship Nine", "#DC143C")
    MASTERS_NINE = ("Masters Nine", "#0000CD")

    def __init__(self, display_name: str, hex_color: str):
        self.display_name = display_name
        self.hex_color = hex_color

    @property
    def properties_in_group(self) -> int:
        return 3


class ImprovementLevel(Enum):
    """Improvement tiers on a property."""

    NONE = (0, "Unimproved")
    LEVEL1 = (1, "Clubhouse")
    LEVEL2 = (2, "Resort")

    def __init__(self, level: int, display_name: str):
        self.level = level
        self.display_name = display_name

    def can_upgrade(self) -> bool:
        return self is not ImprovementLevel.LEVEL2

    def next_level(self) -> "ImprovementLevel":
        if self is ImprovementLevel.NONE:
            return ImprovementLevel.LEVEL1
        if self is ImprovementLevel.LEVEL1:
            return ImprovementLevel.LEVEL2
        raise ValueError("Cannot upgrade beyond LEVEL2")

    @classmethod
    def from_level(cls, level: int) -> "ImprovementLevel":
        for member in cls:
            if member.level == level:
                return member
        raise ValueError(f"Unknown improvement level: {level}")


class GameStatus(Enum):
    WAITING = "waiting"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"


class TurnPhase(Enum):
    ROLL = "roll"
    ACTION = "action"
    TRADE = "trade"


class TradeStatus(Enum):
    PENDING = "pending"
    ACCEPTED = "accepted"
    REJECTED = "rejected"
    CANCELLED = "cancelled"
    EXPIRED = "expired"


class Difficulty(Enum):
    """NPC difficulty tags with the play-style traits they stand for."""

    EASY = ("Casual Caddie", 0.2, 0.8, 0.3)
    MEDIUM = ("Club Pro", 0.5, 0.5, 0.1)
    HARD = ("Tour Veteran", 0.7, 0.3, 0.0)
    RUTHLESS = ("Championship Mind", 0.95, 0.1, 0.0)

    def __init__(self, display_name: str, aggression: float, trade_willingness: float, mistake_rate: float):
        self.display_name = display_name
        self.aggression = aggression
        self.trade_willingness = trade_willingness
        self.mistake_rate = mistake_rate
