"""
Main game engine and state management.

`GameSession` is the aggregate root: every mutation of the board, the
players and the pending trade goes through one of its command methods.
Commands validate all of their preconditions before the first mutation, so
a rejected command leaves the session untouched.
"""

from __future__ import annotations

import logging
import random
import uuid
from datetime import datetime, timezone
from typing import Dict, List, Mapping, Optional

from fore.board import Board, create_standard_board
from fore.config import START_POSITION, GameConfig
from fore.dice import DiceRoll
from fore.enums import Difficulty, GameStatus, TileType, TurnPhase
from fore.events import (
    DiceRolled,
    GameCreated,
    GameEnded,
    GameEvent,
    GameStarted,
    PenaltyPaid,
    PlayerBankrupt,
    PlayerJoined,
    PlayerMoved,
    PlayerSentToSandTrap,
    PropertyImproved,
    PropertyPurchased,
    RentPaid,
    SalaryCollected,
    TradeAccepted,
    TradeProposed,
    TradeRejected,
    TurnEnded,
    TurnStarted,
)
from fore.exceptions import (
    GameInvariantError,
    InsufficientFundsError,
    InvalidActionError,
    InvalidGameStatusError,
    InvalidTurnPhaseError,
    NotYourTurnError,
    PlayerNotFoundError,
)
from fore.money import Money
from fore.player import PlayerState
from fore.spaces import Property, Tile
from fore.trade import TradeOffer

logger = logging.getLogger(__name__)


def _now() -> datetime:
    return datetime.now(timezone.utc)


class GameSession:
    """
    One two-player game, from waiting room to winner.

    Use `create` for a new game and `reconstitute` to rebuild one from
    persisted state. After each command the caller drains the events it
    raised with `drain_events`.
    """

    def __init__(
        self,
        game_id: uuid.UUID,
        board: Board,
        config: Optional[GameConfig] = None,
        rng: Optional[random.Random] = None,
    ):
        self.game_id = game_id
        self.board = board
        self.config = config or GameConfig()
        self.rng = rng or random.Random(self.config.seed)

        self.players: Dict[uuid.UUID, PlayerState] = {}
        self.status = GameStatus.WAITING
        self.current_player_id: Optional[uuid.UUID] = None
        self.turn_phase = TurnPhase.ROLL
        self.turn_number = 0
        self.winner_id: Optional[uuid.UUID] = None
        self.pending_trade: Optional[TradeOffer] = None

        self.created_at = _now()
        self.updated_at = self.created_at

        self._pending_events: List[GameEvent] = []

    # ==================== Factories ====================

    @classmethod
    def create(
        cls,
        creator_id: uuid.UUID,
        creator_name: str,
        vs_npc: bool = False,
        difficulty: Optional[Difficulty] = None,
        *,
        config: Optional[GameConfig] = None,
        rng: Optional[random.Random] = None,
        game_id: Optional[uuid.UUID] = None,
    ) -> "GameSession":
        """
        Create a new game with the creator seated.

        A vs-NPC game seats the NPC straight away and starts with the
        creator to roll. Otherwise the game waits for a second player.
        """
        session = cls(game_id or uuid.uuid4(), create_standard_board(), config, rng)
        session.players[creator_id] = PlayerState(
            creator_id, creator_name, session.config.starting_currency
        )
        session._add_event(GameCreated(creator_id=creator_id, vs_npc=vs_npc))

        if vs_npc:
            difficulty = difficulty or session.config.default_difficulty
            npc_id = uuid.uuid4()
            session.players[npc_id] = PlayerState(
                npc_id,
                difficulty.display_name,
                session.config.starting_currency,
                is_npc=True,
                npc_difficulty=difficulty,
            )
            session._start_game(creator_id)

        logger.info(f"Created game {session.game_id} for {creator_name} (vs_npc={vs_npc})")
        return session

    @classmethod
    def reconstitute(
        cls,
        game_id: uuid.UUID,
        *,
        status: GameStatus,
        current_player_id: Optional[uuid.UUID],
        turn_phase: TurnPhase,
        turn_number: int,
        winner_id: Optional[uuid.UUID],
        board: Board,
        players: Mapping[uuid.UUID, PlayerState],
        pending_trade: Optional[TradeOffer] = None,
        created_at: Optional[datetime] = None,
        updated_at: Optional[datetime] = None,
        config: Optional[GameConfig] = None,
        rng: Optional[random.Random] = None,
    ) -> "GameSession":
        """Rebuild a session by direct assignment. No command validation runs."""
        session = cls(game_id, board, config, rng)
        session.players = dict(players)
        session.status = status
        session.current_player_id = current_player_id
        session.turn_phase = turn_phase
        session.turn_number = turn_number
        session.winner_id = winner_id
        session.pending_trade = pending_trade
        if created_at is not None:
            session.created_at = created_at
        session.updated_at = updated_at or session.created_at
        return session

    # ==================== Commands ====================

    def join_game(self, player_id: uuid.UUID, player_name: str) -> None:
        self._require_status(GameStatus.WAITING)
        if len(self.players) >= self.config.max_players:
            raise InvalidActionError("Game is full")
        if player_id in self.players:
            raise InvalidActionError(f"Player {player_id} is already in game")

        self.players[player_id] = PlayerState(player_id, player_name, self.config.starting_currency)
        self._add_event(PlayerJoined(player_id=player_id, player_name=player_name))
        logger.info(f"Player {player_name} joined game {self.game_id}")

        if len(self.players) >= self.config.min_players:
            first_player_id = next(iter(self.players))
            self._start_game(first_player_id)

        self._touch()

    def roll_dice(self, player_id: uuid.UUID) -> DiceRoll:
        """
        Roll for the current player and resolve the whole move.

        Movement, salary, tile effects, rent and any bankruptcy it causes are
        applied before this returns. Doubles leave the phase at ROLL for an
        extra roll unless the player ended up in the sand trap.
        """
        player = self._require_current_player(player_id)
        self._require_phase(TurnPhase.ROLL)

        roll = DiceRoll.roll(self.rng)
        self._add_event(DiceRolled(player_id=player_id, die1=roll.die1, die2=roll.die2))
        logger.debug(f"{player.display_name} rolled {roll}")

        if player.is_in_sand_trap():
            self._resolve_sand_trap_roll(player, roll)
        else:
            self._process_movement(player, roll)

        self._touch()
        return roll

    def purchase_property(self, player_id: uuid.UUID, property_id: uuid.UUID) -> None:
        player = self._require_current_player(player_id)
        self._require_phase(TurnPhase.ACTION)
        prop = self.board.get_property(property_id)

        if prop.is_owned():
            raise InvalidActionError(f"Property {prop.name} is already owned")
        if player.position != prop.position:
            raise InvalidActionError("Player must be on the property tile to purchase")
        if not player.can_afford(prop.purchase_price):
            raise InsufficientFundsError(player.currency, prop.purchase_price, f"purchasing {prop.name}")

        player.subtract_currency(prop.purchase_price)
        prop.purchase(player_id)
        player.add_property(property_id)

        self._add_event(
            PropertyPurchased(
                player_id=player_id,
                property_id=property_id,
                property_name=prop.name,
                price=prop.purchase_price,
            )
        )
        logger.debug(f"{player.display_name} bought {prop.name} for {prop.purchase_price}")
        self._touch()

    def improve_property(self, player_id: uuid.UUID, property_id: uuid.UUID) -> None:
        player = self._require_current_player(player_id)
        self._require_phase(TurnPhase.ACTION)
        prop = self.board.get_property(property_id)

        if not prop.is_owned_by(player_id):
            raise InvalidActionError(f"Player does not own {prop.name}")
        if prop.is_mortgaged:
            raise InvalidActionError(f"Cannot improve mortgaged property {prop.name}")
        if not prop.can_be_improved():
            raise InvalidActionError(f"Property {prop.name} is already at maximum improvement")
        if not self.board.owns_complete_group(player_id, prop.course_group):
            raise InvalidActionError(
                f"Must own complete course group {prop.course_group.display_name} to improve"
            )
        if not player.can_afford(prop.improvement_cost):
            raise InsufficientFundsError(player.currency, prop.improvement_cost, f"improving {prop.name}")

        previous_level = prop.improvement_level
        player.subtract_currency(prop.improvement_cost)
        prop.improve()

        self._add_event(
            PropertyImproved(
                player_id=player_id,
                property_id=property_id,
                property_name=prop.name,
                previous_level=previous_level,
                new_level=prop.improvement_level,
                cost=prop.improvement_cost,
            )
        )
        logger.debug(f"{player.display_name} improved {prop.name} to {prop.improvement_level.display_name}")
        self._touch()

    def propose_trade(self, player_id: uuid.UUID, offer: TradeOffer) -> None:
        offering = self._require_current_player(player_id)
        if self.pending_trade is not None and self.pending_trade.is_pending():
            raise InvalidActionError("There is already a pending trade")
        self._require_phase(TurnPhase.ACTION)

        if offer.offering_player_id != player_id:
            raise InvalidActionError("Trade offer must be from current player")
        if offering.is_bankrupt:
            raise InvalidActionError("A bankrupt player cannot propose trades")
        if not offer.is_pending():
            raise InvalidActionError("Only a pending offer can be proposed")
        if offer.receiving_player_id not in self.players:
            raise PlayerNotFoundError(offer.receiving_player_id)
        if offer.receiving_player_id == player_id:
            raise InvalidActionError("Cannot trade with yourself")

        receiving = self.players[offer.receiving_player_id]
        if receiving.is_bankrupt:
            raise InvalidActionError("Cannot trade with a bankrupt player")
        if offer.offered_currency.is_negative() or offer.requested_currency.is_negative():
            raise InvalidActionError("Trade currency amounts cannot be negative")

        self._validate_trade_holdings(offer, offering, receiving)
        if not offering.can_afford(offer.offered_currency):
            raise InsufficientFundsError(offering.currency, offer.offered_currency, "trade offer")

        self.pending_trade = offer
        self.turn_phase = TurnPhase.TRADE
        self._add_event(TradeProposed(offer=offer))
        logger.debug(f"{offering.display_name} proposed {offer}")
        self._touch()

    def respond_to_trade(self, player_id: uuid.UUID, accept: bool) -> None:
        self._require_status(GameStatus.IN_PROGRESS)
        self._require_phase(TurnPhase.TRADE)

        offer = self.pending_trade
        if offer is None or not offer.is_pending():
            raise InvalidActionError("No pending trade to respond to")
        if offer.receiving_player_id != player_id:
            raise InvalidActionError("Only the trade recipient can respond")

        if accept:
            offering = self.get_player(offer.offering_player_id)
            receiving = self.get_player(offer.receiving_player_id)
            self._validate_trade_holdings(offer, offering, receiving)
            if not offering.can_afford(offer.offered_currency):
                raise InsufficientFundsError(offering.currency, offer.offered_currency, "trade offer")
            if not receiving.can_afford(offer.requested_currency):
                raise InsufficientFundsError(receiving.currency, offer.requested_currency, "trade request")

            self._execute_trade(offer, offering, receiving)
            self.pending_trade = offer.accept()
            self._add_event(TradeAccepted(offer=self.pending_trade))
        else:
            self.pending_trade = offer.reject()
            self._add_event(TradeRejected(offer=self.pending_trade))

        self.turn_phase = TurnPhase.ACTION
        logger.debug(f"Trade {offer.offer_id} {self.pending_trade.status.name.lower()}")
        self._touch()

    def end_turn(self, player_id: uuid.UUID) -> None:
        player = self._require_current_player(player_id)
        if self.turn_phase is not TurnPhase.ACTION:
            raise InvalidTurnPhaseError(
                f"Can only end turn from ACTION phase, current phase: {self.turn_phase.name}"
            )

        if self.pending_trade is not None and self.pending_trade.is_pending():
            self.pending_trade = self.pending_trade.cancel()

        player.reset_consecutive_doubles()
        self._add_event(TurnEnded(player_id=player_id, turn_number=self.turn_number))

        self._advance_to_next_player()

        if not self._check_game_end():
            self._add_event(TurnStarted(player_id=self.current_player_id, turn_number=self.turn_number))

        self._touch()

    # ==================== Turn Resolution ====================

    def _start_game(self, first_player_id: uuid.UUID) -> None:
        self.status = GameStatus.IN_PROGRESS
        self.current_player_id = first_player_id
        self.turn_phase = TurnPhase.ROLL
        self.turn_number = 1
        self._add_event(GameStarted(first_player_id=first_player_id))
        logger.info(f"Game {self.game_id} started, {self.players[first_player_id].display_name} rolls first")

    def _resolve_sand_trap_roll(self, player: PlayerState, roll: DiceRoll) -> None:
        if roll.is_doubles:
            player.escape_sand_trap()
            self._process_movement(player, roll)
            return

        player.decrement_sand_trap_turns()
        if player.is_in_sand_trap():
            # Still stuck: no movement this turn.
            self.turn_phase = TurnPhase.ACTION
        else:
            self._process_movement(player, roll)

    def _process_movement(self, player: PlayerState, roll: DiceRoll) -> None:
        if roll.is_doubles:
            player.increment_consecutive_doubles()
            if player.has_rolled_three_doubles(self.config.doubles_for_sand_trap):
                self._send_to_sand_trap(player)
                return
        else:
            player.reset_consecutive_doubles()

        old_position = player.position
        new_position = self.board.calculate_new_position(old_position, roll.total)
        player.move_to(new_position)

        passed_start = self.board.passed_start(old_position, new_position) and new_position != START_POSITION
        if passed_start:
            player.add_currency(self.config.passing_salary)
            self._add_event(SalaryCollected(player_id=player.player_id, amount=self.config.passing_salary))

        self._add_event(
            PlayerMoved(
                player_id=player.player_id,
                from_position=old_position,
                to_position=new_position,
                passed_start=passed_start,
            )
        )

        self._handle_landed_tile(player, self.board.get_tile(new_position))

        if (
            roll.is_doubles
            and not player.is_in_sand_trap()
            and not player.is_bankrupt
            and self.status is GameStatus.IN_PROGRESS
        ):
            self.turn_phase = TurnPhase.ROLL

    def _handle_landed_tile(self, player: PlayerState, tile: Tile) -> None:
        if tile.tile_type is TileType.PROPERTY:
            self._handle_property_tile(player, tile.property)
        elif tile.tile_type is TileType.SAND_TRAP:
            self._send_to_sand_trap(player)
        elif tile.tile_type is TileType.WATER_HAZARD:
            self._handle_water_hazard(player)
        else:
            # START, SAFE_LOUNGE and SHOP have no effect. The shop is reserved
            # for a card-draw mechanic.
            self.turn_phase = TurnPhase.ACTION

    def _handle_property_tile(self, player: PlayerState, prop: Property) -> None:
        if prop.is_owned() and not prop.is_owned_by(player.player_id) and not prop.is_mortgaged:
            owner_has_group = self.board.owns_complete_group(prop.owner_id, prop.course_group)
            rent = prop.calculate_rent(owner_has_group)
            self._settle_rent(player, self.get_player(prop.owner_id), prop, rent)

        self.turn_phase = TurnPhase.ACTION

    def _settle_rent(self, payer: PlayerState, owner: PlayerState, prop: Property, rent: Money) -> None:
        if not payer.can_afford(rent):
            logger.info(f"{payer.display_name} cannot pay {rent} rent on {prop.name}")
            self._declare_bankruptcy(payer, owner)
            return

        payer.subtract_currency(rent)
        owner.add_currency(rent)
        self._add_event(
            RentPaid(
                payer_id=payer.player_id,
                receiver_id=owner.player_id,
                property_id=prop.property_id,
                amount=rent,
            )
        )
        logger.debug(f"{payer.display_name} paid {rent} rent to {owner.display_name} for {prop.name}")

    def _declare_bankruptcy(self, debtor: PlayerState, creditor: PlayerState) -> None:
        """Flag the debtor and hand every property and all currency to the creditor."""
        debtor.declare_bankrupt()

        for property_id in sorted(debtor.owned_property_ids, key=lambda pid: self.board.get_property(pid).position):
            self.board.get_property(property_id).transfer_to(creditor.player_id)
            debtor.remove_property(property_id)
            creditor.add_property(property_id)

        creditor.add_currency(debtor.surrender_currency())

        self._add_event(PlayerBankrupt(player_id=debtor.player_id, creditor_id=creditor.player_id))
        logger.info(f"{debtor.display_name} is bankrupt; assets go to {creditor.display_name}")

    def _send_to_sand_trap(self, player: PlayerState) -> None:
        player.move_to(self.config.sand_trap_position)
        player.enter_sand_trap(self.config.sand_trap_turns)
        player.reset_consecutive_doubles()
        self._add_event(PlayerSentToSandTrap(player_id=player.player_id))
        self.turn_phase = TurnPhase.ACTION

    def _handle_water_hazard(self, player: PlayerState) -> None:
        penalty = self.config.water_hazard_penalty
        if player.can_afford(penalty):
            player.subtract_currency(penalty)
            self._add_event(PenaltyPaid(player_id=player.player_id, amount=penalty, reason="Water Hazard"))
        else:
            # Waived rather than bankrupting the player.
            logger.info(f"Water hazard penalty waived for {player.display_name} (balance {player.currency})")
        self.turn_phase = TurnPhase.ACTION

    # ==================== Trades ====================

    def _validate_trade_holdings(self, offer: TradeOffer, offering: PlayerState, receiving: PlayerState) -> None:
        for property_id in offer.offered_property_ids:
            prop = self.board.get_property(property_id)
            if not offering.owns_property(property_id):
                raise InvalidActionError(f"Cannot offer property you don't own: {prop.name}")
        for property_id in offer.requested_property_ids:
            prop = self.board.get_property(property_id)
            if not receiving.owns_property(property_id):
                raise InvalidActionError(f"Cannot request property opponent doesn't own: {prop.name}")

    def _execute_trade(self, offer: TradeOffer, offering: PlayerState, receiving: PlayerState) -> None:
        for property_id in offer.offered_property_ids:
            self.board.get_property(property_id).transfer_to(receiving.player_id)
            offering.remove_property(property_id)
            receiving.add_property(property_id)

        for property_id in offer.requested_property_ids:
            self.board.get_property(property_id).transfer_to(offering.player_id)
            receiving.remove_property(property_id)
            offering.add_property(property_id)

        if offer.offered_currency.is_positive():
            offering.subtract_currency(offer.offered_currency)
            receiving.add_currency(offer.offered_currency)
        if offer.requested_currency.is_positive():
            receiving.subtract_currency(offer.requested_currency)
            offering.add_currency(offer.requested_currency)

    # ==================== Turn Order ====================

    def _advance_to_next_player(self) -> None:
        order = list(self.players)
        start = order.index(self.current_player_id)
        for step in range(1, len(order) + 1):
            candidate = order[(start + step) % len(order)]
            if not self.players[candidate].is_bankrupt:
                self.current_player_id = candidate
                break
        else:
            raise GameInvariantError(f"Game {self.game_id} has no solvent player to hand the turn to")

        self.turn_phase = TurnPhase.ROLL
        self.turn_number += 1

    def _check_game_end(self) -> bool:
        active = self.active_players()
        if len(active) != 1:
            return False

        self.winner_id = active[0].player_id
        self.status = GameStatus.COMPLETED
        self._add_event(GameEnded(winner_id=self.winner_id, reason="Opponent bankrupt"))
        logger.info(f"Game {self.game_id} ended, winner {active[0].display_name}")
        return True

    # ==================== Validation ====================

    def _require_status(self, expected: GameStatus) -> None:
        if self.status is not expected:
            raise InvalidGameStatusError(
                f"Invalid game status. Expected {expected.name} but was {self.status.name}"
            )

    def _require_current_player(self, player_id: uuid.UUID) -> PlayerState:
        if self.status is not GameStatus.IN_PROGRESS:
            raise InvalidGameStatusError(f"Game is not in progress (status: {self.status.name})")
        player = self.get_player(player_id)
        if self.current_player_id != player_id:
            raise NotYourTurnError(player_id)
        return player

    def _require_phase(self, expected: TurnPhase) -> None:
        if self.turn_phase is not expected:
            raise InvalidTurnPhaseError(
                f"Invalid turn phase. Expected {expected.name} but was {self.turn_phase.name}"
            )

    # ==================== Queries ====================

    def get_player(self, player_id: uuid.UUID) -> PlayerState:
        player = self.players.get(player_id)
        if player is None:
            raise PlayerNotFoundError(player_id)
        return player

    @property
    def current_player(self) -> Optional[PlayerState]:
        if self.current_player_id is None:
            return None
        return self.get_player(self.current_player_id)

    @property
    def npc_player(self) -> Optional[PlayerState]:
        return next((p for p in self.players.values() if p.is_npc), None)

    def get_opponent(self, player_id: uuid.UUID) -> PlayerState:
        for player in self.players.values():
            if player.player_id != player_id:
                return player
        raise PlayerNotFoundError(f"opponent of {player_id}")

    def is_player_turn(self, player_id: uuid.UUID) -> bool:
        return self.current_player_id is not None and self.current_player_id == player_id

    def is_current_player_npc(self) -> bool:
        current = self.players.get(self.current_player_id) if self.current_player_id else None
        return current is not None and current.is_npc

    def active_players(self) -> List[PlayerState]:
        return [p for p in self.players.values() if not p.is_bankrupt]

    def net_worth(self, player_id: uuid.UUID) -> Money:
        return self.get_player(player_id).calculate_net_worth(self.board)

    # ==================== Events ====================

    def _add_event(self, event: GameEvent) -> None:
        self._pending_events.append(event)

    @property
    def pending_events(self) -> List[GameEvent]:
        return list(self._pending_events)

    def drain_events(self) -> List[GameEvent]:
        """Take every event raised since the last drain and clear the buffer."""
        events = self._pending_events
        self._pending_events = []
        return events

    def _touch(self) -> None:
        self.updated_at = _now()

    def __repr__(self) -> str:
        return (
            f"GameSession(id={self.game_id}, status={self.status.name}, "
            f"turn={self.turn_number}, phase={self.turn_phase.name}, current={self.current_player_id})"
        )
