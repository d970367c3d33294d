"""
Snapshot serialization of GameSession.

`take_snapshot` captures exactly the mutable state of a session as pydantic
models; `restore_session` rebuilds the session from it, regenerating the
static board layout. `serialize_state` produces a sanitized, UI-friendly
view of the current game.
"""

from __future__ import annotations

import random
import uuid
from datetime import datetime
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field

from fore.board import create_standard_board
from fore.config import GameConfig
from fore.enums import Difficulty, GameStatus, ImprovementLevel, TradeStatus, TurnPhase
from fore.events import trade_offer_to_dict
from fore.game import GameSession
from fore.money import Money
from fore.player import PlayerState
from fore.trade import TradeOffer


class PlayerSnapshot(BaseModel):
    player_id: uuid.UUID
    display_name: str
    is_npc: bool = False
    npc_difficulty: Optional[str] = None
    position: int = 0
    currency_cents: int
    owned_property_ids: List[uuid.UUID] = Field(default_factory=list)
    is_bankrupt: bool = False
    turns_in_sand_trap: int = 0
    consecutive_doubles: int = 0


class PropertySnapshot(BaseModel):
    property_id: uuid.UUID
    owner_id: Optional[uuid.UUID] = None
    improvement_level: str = ImprovementLevel.NONE.name
    is_mortgaged: bool = False


class TradeOfferSnapshot(BaseModel):
    offer_id: uuid.UUID
    offering_player_id: uuid.UUID
    receiving_player_id: uuid.UUID
    offered_property_ids: List[uuid.UUID] = Field(default_factory=list)
    requested_property_ids: List[uuid.UUID] = Field(default_factory=list)
    offered_currency_cents: int = 0
    requested_currency_cents: int = 0
    status: TradeStatus = TradeStatus.PENDING


class GameSnapshot(BaseModel):
    game_id: uuid.UUID
    status: GameStatus
    current_player_id: Optional[uuid.UUID] = None
    turn_phase: TurnPhase
    turn_number: int
    winner_id: Optional[uuid.UUID] = None
    created_at: datetime
    updated_at: datetime
    players: List[PlayerSnapshot]
    properties: List[PropertySnapshot]
    pending_trade: Optional[TradeOfferSnapshot] = None


def _snapshot_player(player: PlayerState) -> PlayerSnapshot:
    return PlayerSnapshot(
        player_id=player.player_id,
        display_name=player.display_name,
        is_npc=player.is_npc,
        npc_difficulty=player.npc_difficulty.name if player.npc_difficulty else None,
        position=player.position,
        currency_cents=player.currency.cents,
        owned_property_ids=sorted(player.owned_property_ids, key=str),
        is_bankrupt=player.is_bankrupt,
        turns_in_sand_trap=player.turns_in_sand_trap,
        consecutive_doubles=player.consecutive_doubles,
    )


def _snapshot_trade(offer: TradeOffer) -> TradeOfferSnapshot:
    return TradeOfferSnapshot(
        offer_id=offer.offer_id,
        offering_player_id=offer.offering_player_id,
        receiving_player_id=offer.receiving_player_id,
        offered_property_ids=sorted(offer.offered_property_ids, key=str),
        requested_property_ids=sorted(offer.requested_property_ids, key=str),
        offered_currency_cents=offer.offered_currency.cents,
        requested_currency_cents=offer.requested_currency.cents,
        status=offer.status,
    )


def take_snapshot(session: GameSession) -> GameSnapshot:
    """Capture the mutable state of a session. Static board layout is left out."""
    return GameSnapshot(
        game_id=session.game_id,
        status=session.status,
        current_player_id=session.current_player_id,
        turn_phase=session.turn_phase,
        turn_number=session.turn_number,
        winner_id=session.winner_id,
        created_at=session.created_at,
        updated_at=session.updated_at,
        players=[_snapshot_player(p) for p in session.players.values()],
        properties=[
            PropertySnapshot(
                property_id=prop.property_id,
                owner_id=prop.owner_id,
                improvement_level=prop.improvement_level.name,
                is_mortgaged=prop.is_mortgaged,
            )
            for prop in session.board.all_properties()
        ],
        pending_trade=_snapshot_trade(session.pending_trade) if session.pending_trade else None,
    )


def restore_session(
    snapshot: GameSnapshot,
    config: Optional[GameConfig] = None,
    rng: Optional[random.Random] = None,
) -> GameSession:
    """
    Rebuild a GameSession from a snapshot.

    The standard board is regenerated and the per-property fields are
    assigned directly, so no command preconditions run during the load.
    Raises PropertyNotFoundError if the snapshot names an unknown property.
    """
    board = create_standard_board()
    for entry in snapshot.properties:
        board.get_property(entry.property_id).restore_state(
            owner_id=entry.owner_id,
            improvement_level=ImprovementLevel[entry.improvement_level],
            is_mortgaged=entry.is_mortgaged,
        )

    players: Dict[uuid.UUID, PlayerState] = {}
    for entry in snapshot.players:
        players[entry.player_id] = PlayerState.restore(
            entry.player_id,
            entry.display_name,
            is_npc=entry.is_npc,
            npc_difficulty=Difficulty[entry.npc_difficulty] if entry.npc_difficulty else None,
            position=entry.position,
            currency=Money.of_cents(entry.currency_cents),
            owned_property_ids=entry.owned_property_ids,
            is_bankrupt=entry.is_bankrupt,
            turns_in_sand_trap=entry.turns_in_sand_trap,
            consecutive_doubles=entry.consecutive_doubles,
        )

    pending_trade = None
    if snapshot.pending_trade is not None:
        t = snapshot.pending_trade
        pending_trade = TradeOffer(
            offering_player_id=t.offering_player_id,
            receiving_player_id=t.receiving_player_id,
            offered_property_ids=frozenset(t.offered_property_ids),
            requested_property_ids=frozenset(t.requested_property_ids),
            offered_currency=Money.of_cents(t.offered_currency_cents),
            requested_currency=Money.of_cents(t.requested_currency_cents),
            status=t.status,
            offer_id=t.offer_id,
        )

    return GameSession.reconstitute(
        snapshot.game_id,
        status=snapshot.status,
        current_player_id=snapshot.current_player_id,
        turn_phase=snapshot.turn_phase,
        turn_number=snapshot.turn_number,
        winner_id=snapshot.winner_id,
        board=board,
        players=players,
        pending_trade=pending_trade,
        created_at=snapshot.created_at,
        updated_at=snapshot.updated_at,
        config=config,
        rng=rng,
    )


def serialize_state(session: GameSession) -> Dict[str, Any]:
    """Serialize a GameSession into a public, stable JSON dict.

    The view includes:
    - game status, turn number, phase and current player
    - players with public info (currency, position, sand trap, holdings with status)
    - the 24 tiles with their owners
    - the pending trade (if any)
    """
    players: List[Dict[str, Any]] = []
    for player in session.players.values():
        holdings: List[Dict[str, Any]] = []
        for prop in session.board.properties_owned_by(player.player_id):
            holdings.append(
                {
                    "property_id": str(prop.property_id),
                    "position": prop.position,
                    "name": prop.name,
                    "course_group": prop.course_group.name,
                    "improvement_level": prop.improvement_level.level,
                    "mortgaged": prop.is_mortgaged,
                }
            )

        players.append(
            {
                "player_id": str(player.player_id),
                "name": player.display_name,
                "is_npc": player.is_npc,
                "difficulty": player.npc_difficulty.name if player.npc_difficulty else None,
                "currency": player.currency.cents,
                "position": player.position,
                "turns_in_sand_trap": player.turns_in_sand_trap,
                "is_bankrupt": player.is_bankrupt,
                "net_worth": player.calculate_net_worth(session.board).cents,
                "properties": holdings,
            }
        )

    tiles: List[Dict[str, Any]] = []
    for tile in session.board.tiles:
        entry: Dict[str, Any] = {
            "position": tile.position,
            "name": tile.name,
            "type": tile.tile_type.value,
        }
        if tile.property is not None:
            prop = tile.property
            entry.update(
                property_id=str(prop.property_id),
                course_group=prop.course_group.name,
                price=prop.purchase_price.cents,
                owner_id=str(prop.owner_id) if prop.owner_id else None,
                improvement_level=prop.improvement_level.level,
            )
        tiles.append(entry)

    return {
        "game_id": str(session.game_id),
        "status": session.status.value,
        "turn_number": session.turn_number,
        "turn_phase": session.turn_phase.value,
        "current_player_id": str(session.current_player_id) if session.current_player_id else None,
        "winner_id": str(session.winner_id) if session.winner_id else None,
        "players": players,
        "tiles": tiles,
        "pending_trade": trade_offer_to_dict(session.pending_trade) if session.pending_trade else None,
    }
