"""
Domain events raised by the game session.

Each event kind is its own frozen dataclass carrying only that kind's
payload. `GameEvent` is the closed union of all of them, so consumers can
dispatch exhaustively on the concrete type (or on `event_type`).

`map_event` converts an event into a stable, JSON-friendly dict for logging,
persistence and real-time UIs.
"""

from __future__ import annotations

import dataclasses
import uuid
from dataclasses import dataclass
from enum import Enum
from typing import Any, ClassVar, Dict, Iterable, List, Optional, Union, get_args

from fore.enums import ImprovementLevel
from fore.money import Money
from fore.trade import TradeOffer


class EventType(Enum):
    """Every kind of event the engine emits."""

    GAME_CREATED = "game_created"
    GAME_STARTED = "game_started"
    PLAYER_JOINED = "player_joined"
    DICE_ROLLED = "dice_rolled"
    PLAYER_MOVED = "player_moved"
    SALARY_COLLECTED = "salary_collected"
    PROPERTY_PURCHASED = "property_purchased"
    PROPERTY_IMPROVED = "property_improved"
    RENT_PAID = "rent_paid"
    PENALTY_PAID = "penalty_paid"
    PLAYER_SENT_TO_SAND_TRAP = "player_sent_to_sand_trap"
    PLAYER_BANKRUPT = "player_bankrupt"
    TRADE_PROPOSED = "trade_proposed"
    TRADE_ACCEPTED = "trade_accepted"
    TRADE_REJECTED = "trade_rejected"
    TURN_ENDED = "turn_ended"
    TURN_STARTED = "turn_started"
    GAME_ENDED = "game_ended"


@dataclass(frozen=True)
class GameCreated:
    event_type: ClassVar[EventType] = EventType.GAME_CREATED
    creator_id: uuid.UUID
    vs_npc: bool


@dataclass(frozen=True)
class GameStarted:
    event_type: ClassVar[EventType] = EventType.GAME_STARTED
    first_player_id: uuid.UUID


@dataclass(frozen=True)
class PlayerJoined:
    event_type: ClassVar[EventType] = EventType.PLAYER_JOINED
    player_id: uuid.UUID
    player_name: str


@dataclass(frozen=True)
class DiceRolled:
    event_type: ClassVar[EventType] = EventType.DICE_ROLLED
    player_id: uuid.UUID
    die1: int
    die2: int

    @property
    def total(self) -> int:
        return self.die1 + self.die2

    @property
    def is_doubles(self) -> bool:
        return self.die1 == self.die2


@dataclass(frozen=True)
class PlayerMoved:
    event_type: ClassVar[EventType] = EventType.PLAYER_MOVED
    player_id: uuid.UUID
    from_position: int
    to_position: int
    passed_start: bool


@dataclass(frozen=True)
class SalaryCollected:
    event_type: ClassVar[EventType] = EventType.SALARY_COLLECTED
    player_id: uuid.UUID
    amount: Money


@dataclass(frozen=True)
class PropertyPurchased:
    event_type: ClassVar[EventType] = EventType.PROPERTY_PURCHASED
    player_id: uuid.UUID
    property_id: uuid.UUID
    property_name: str
    price: Money


@dataclass(frozen=True)
class PropertyImproved:
    event_type: ClassVar[EventType] = EventType.PROPERTY_IMPROVED
    player_id: uuid.UUID
    property_id: uuid.UUID
    property_name: str
    previous_level: ImprovementLevel
    new_level: ImprovementLevel
    cost: Money


@dataclass(frozen=True)
class RentPaid:
    event_type: ClassVar[EventType] = EventType.RENT_PAID
    payer_id: uuid.UUID
    receiver_id: uuid.UUID
    property_id: uuid.UUID
    amount: Money


@dataclass(frozen=True)
class PenaltyPaid:
    event_type: ClassVar[EventType] = EventType.PENALTY_PAID
    player_id: uuid.UUID
    amount: Money
    reason: str


@dataclass(frozen=True)
class PlayerSentToSandTrap:
    event_type: ClassVar[EventType] = EventType.PLAYER_SENT_TO_SAND_TRAP
    player_id: uuid.UUID


@dataclass(frozen=True)
class PlayerBankrupt:
    event_type: ClassVar[EventType] = EventType.PLAYER_BANKRUPT
    player_id: uuid.UUID
    creditor_id: uuid.UUID


@dataclass(frozen=True)
class TradeProposed:
    event_type: ClassVar[EventType] = EventType.TRADE_PROPOSED
    offer: TradeOffer


@dataclass(frozen=True)
class TradeAccepted:
    event_type: ClassVar[EventType] = EventType.TRADE_ACCEPTED
    offer: TradeOffer


@dataclass(frozen=True)
class TradeRejected:
    event_type: ClassVar[EventType] = EventType.TRADE_REJECTED
    offer: TradeOffer


@dataclass(frozen=True)
class TurnEnded:
    event_type: ClassVar[EventType] = EventType.TURN_ENDED
    player_id: uuid.UUID
    turn_number: int


@dataclass(frozen=True)
class TurnStarted:
    event_type: ClassVar[EventType] = EventType.TURN_STARTED
    player_id: uuid.UUID
    turn_number: int


@dataclass(frozen=True)
class GameEnded:
    event_type: ClassVar[EventType] = EventType.GAME_ENDED
    winner_id: uuid.UUID
    reason: str


GameEvent = Union[
    GameCreated,
    GameStarted,
    PlayerJoined,
    DiceRolled,
    PlayerMoved,
    SalaryCollected,
    PropertyPurchased,
    PropertyImproved,
    RentPaid,
    PenaltyPaid,
    PlayerSentToSandTrap,
    PlayerBankrupt,
    TradeProposed,
    TradeAccepted,
    TradeRejected,
    TurnEnded,
    TurnStarted,
    GameEnded,
]

EVENT_CLASSES: Dict[EventType, type] = {cls.event_type: cls for cls in get_args(GameEvent)}


def _jsonable(value: Any) -> Any:
    if isinstance(value, Money):
        return value.cents
    if isinstance(value, uuid.UUID):
        return str(value)
    if isinstance(value, Enum):
        return value.name
    if isinstance(value, TradeOffer):
        return trade_offer_to_dict(value)
    if isinstance(value, (set, frozenset)):
        return sorted(_jsonable(v) for v in value)
    return value


def trade_offer_to_dict(offer: TradeOffer) -> Dict[str, Any]:
    return {
        "offer_id": str(offer.offer_id),
        "offering_player_id": str(offer.offering_player_id),
        "receiving_player_id": str(offer.receiving_player_id),
        "offered_property_ids": sorted(str(p) for p in offer.offered_property_ids),
        "requested_property_ids": sorted(str(p) for p in offer.requested_property_ids),
        "offered_currency": offer.offered_currency.cents,
        "requested_currency": offer.requested_currency.cents,
        "status": offer.status.name,
    }


def map_event(event: GameEvent, *, game_id: Optional[uuid.UUID] = None) -> Dict[str, Any]:
    """
    Map a single event to a canonical JSON dict.

    Money is expressed in cents, ids as strings and enums by name. Dice
    events also carry the derived total and doubles flag.
    """
    base: Dict[str, Any] = {"event_type": event.event_type.value}
    if game_id is not None:
        base["game_id"] = str(game_id)

    for f in dataclasses.fields(event):
        base[f.name] = _jsonable(getattr(event, f.name))

    if isinstance(event, DiceRolled):
        base.update(total=event.total, is_doubles=event.is_doubles)

    return base


def map_events(events: Iterable[GameEvent], *, game_id: Optional[uuid.UUID] = None) -> List[Dict[str, Any]]:
    return [map_event(e, game_id=game_id) for e in events]
