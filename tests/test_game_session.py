"""
Tests for game creation, joining, purchase and improvement.
"""

import uuid

import pytest
from conftest import ALICE, BOB, ScriptedDice, give_property, to_action_phase

from fore.board import property_id_for
from fore.config import GameConfig
from fore.enums import Difficulty, GameStatus, ImprovementLevel, TurnPhase
from fore.events import GameCreated, GameStarted, PlayerJoined, PropertyImproved, PropertyPurchased
from fore.exceptions import (
    InsufficientFundsError,
    InvalidActionError,
    InvalidGameStatusError,
    InvalidTurnPhaseError,
    NotYourTurnError,
    PlayerNotFoundError,
    PropertyNotFoundError,
)
from fore.game import GameSession
from fore.money import Money


class TestCreateGame:
    def test_vs_npc_starts_immediately(self):
        session = GameSession.create(ALICE, "Alice", vs_npc=True, difficulty=Difficulty.HARD, rng=ScriptedDice())

        assert session.status is GameStatus.IN_PROGRESS
        assert session.current_player_id == ALICE
        assert session.turn_phase is TurnPhase.ROLL
        assert session.turn_number == 1
        assert len(session.players) == 2

        npc = session.npc_player
        assert npc.is_npc
        assert npc.npc_difficulty is Difficulty.HARD
        assert npc.display_name == "Tour Veteran"
        for player in session.players.values():
            assert player.currency == Money.of_dollars(1500)
            assert player.position == 0

        events = session.drain_events()
        assert isinstance(events[0], GameCreated)
        assert events[0].vs_npc
        assert isinstance(events[1], GameStarted)
        assert events[1].first_player_id == ALICE

    def test_npc_difficulty_defaults_to_medium(self, npc_game):
        assert npc_game.npc_player.npc_difficulty is Difficulty.MEDIUM

    def test_npc_difficulty_from_config(self):
        config = GameConfig(default_difficulty=Difficulty.EASY)
        session = GameSession.create(ALICE, "Alice", vs_npc=True, config=config, rng=ScriptedDice())
        assert session.npc_player.npc_difficulty is Difficulty.EASY
        assert session.npc_player.display_name == "Casual Caddie"

        session = GameSession.create(
            ALICE, "Alice", vs_npc=True, difficulty=Difficulty.HARD, config=config, rng=ScriptedDice()
        )
        assert session.npc_player.npc_difficulty is Difficulty.HARD

    def test_human_game_waits(self):
        session = GameSession.create(ALICE, "Alice")
        assert session.status is GameStatus.WAITING
        assert session.current_player_id is None
        assert [type(e) for e in session.drain_events()] == [GameCreated]


class TestJoinGame:
    def test_second_player_starts_game(self):
        session = GameSession.create(ALICE, "Alice")
        session.drain_events()
        session.join_game(BOB, "Bob")

        assert session.status is GameStatus.IN_PROGRESS
        assert session.current_player_id == ALICE
        assert session.turn_number == 1
        events = session.drain_events()
        assert isinstance(events[0], PlayerJoined)
        assert isinstance(events[1], GameStarted)

    def test_join_started_game(self, two_player_game):
        with pytest.raises(InvalidGameStatusError):
            two_player_game.join_game(uuid.uuid4(), "Carol")

    def test_game_starts_at_min_players(self):
        session = GameSession.create(ALICE, "Alice", config=GameConfig(min_players=2, max_players=3))
        assert session.status is GameStatus.WAITING
        session.join_game(BOB, "Bob")
        assert session.status is GameStatus.IN_PROGRESS

    def test_join_twice(self):
        session = GameSession.create(ALICE, "Alice")
        with pytest.raises(InvalidActionError):
            session.join_game(ALICE, "Alice again")


class TestCommandValidation:
    def test_unknown_player(self, two_player_game):
        with pytest.raises(PlayerNotFoundError):
            two_player_game.roll_dice(uuid.uuid4())

    def test_not_your_turn(self, two_player_game):
        with pytest.raises(NotYourTurnError):
            two_player_game.roll_dice(BOB)

    def test_wrong_phase(self, two_player_game):
        with pytest.raises(InvalidTurnPhaseError):
            two_player_game.end_turn(ALICE)

    def test_waiting_game_rejects_commands(self):
        session = GameSession.create(ALICE, "Alice")
        with pytest.raises(InvalidGameStatusError):
            session.roll_dice(ALICE)

    def test_error_codes(self, two_player_game):
        with pytest.raises(NotYourTurnError) as exc:
            two_player_game.roll_dice(BOB)
        assert exc.value.error_code == "NOT_YOUR_TURN"
        assert exc.value.recoverable


class TestPurchase:
    def test_purchase(self, two_player_game):
        to_action_phase(two_player_game, ALICE, 2)
        pid = property_id_for(2)
        two_player_game.purchase_property(ALICE, pid)

        alice = two_player_game.get_player(ALICE)
        assert alice.currency == Money.of_dollars(1440)
        assert alice.owns_property(pid)
        assert two_player_game.board.get_property(pid).is_owned_by(ALICE)

        event = two_player_game.drain_events()[0]
        assert isinstance(event, PropertyPurchased)
        assert event.price == Money.of_dollars(60)

    def test_purchase_with_exact_balance(self, two_player_game):
        to_action_phase(two_player_game, ALICE, 23)
        alice = two_player_game.get_player(ALICE)
        alice.subtract_currency(Money.of_dollars(1200))
        two_player_game.purchase_property(ALICE, property_id_for(23))
        assert alice.currency.is_zero()

    def test_insufficient_funds_is_atomic(self, two_player_game):
        to_action_phase(two_player_game, ALICE, 23)
        alice = two_player_game.get_player(ALICE)
        alice.subtract_currency(Money.of_dollars(1250))
        pid = property_id_for(23)

        with pytest.raises(InsufficientFundsError) as exc:
            two_player_game.purchase_property(ALICE, pid)
        assert exc.value.available == Money.of_dollars(250)
        assert exc.value.required == Money.of_dollars(300)

        assert alice.currency == Money.of_dollars(250)
        assert not alice.owns_property(pid)
        assert not two_player_game.board.get_property(pid).is_owned()
        assert two_player_game.drain_events() == []

    def test_must_stand_on_tile(self, two_player_game):
        to_action_phase(two_player_game, ALICE, 3)
        with pytest.raises(InvalidActionError):
            two_player_game.purchase_property(ALICE, property_id_for(2))

    def test_already_owned(self, two_player_game):
        give_property(two_player_game, BOB, 2)
        to_action_phase(two_player_game, ALICE, 2)
        with pytest.raises(InvalidActionError, match="already owned"):
            two_player_game.purchase_property(ALICE, property_id_for(2))

    def test_unknown_property(self, two_player_game):
        to_action_phase(two_player_game, ALICE, 2)
        with pytest.raises(PropertyNotFoundError):
            two_player_game.purchase_property(ALICE, uuid.uuid4())

    def test_only_in_action_phase(self, two_player_game):
        with pytest.raises(InvalidTurnPhaseError):
            two_player_game.purchase_property(ALICE, property_id_for(2))


class TestImprove:
    def test_two_of_three_rejected(self, two_player_game):
        give_property(two_player_game, ALICE, 1, 2)
        to_action_phase(two_player_game, ALICE, 4)
        with pytest.raises(InvalidActionError, match="complete course group"):
            two_player_game.improve_property(ALICE, property_id_for(1))

    def test_complete_group_improves(self, two_player_game):
        give_property(two_player_game, ALICE, 1, 2, 3)
        to_action_phase(two_player_game, ALICE, 4)
        pid = property_id_for(1)

        two_player_game.improve_property(ALICE, pid)
        two_player_game.improve_property(ALICE, pid)

        prop = two_player_game.board.get_property(pid)
        assert prop.improvement_level is ImprovementLevel.LEVEL2
        assert two_player_game.get_player(ALICE).currency == Money.of_dollars(1400)

        events = two_player_game.drain_events()
        assert all(isinstance(e, PropertyImproved) for e in events)
        assert events[1].previous_level is ImprovementLevel.LEVEL1
        assert events[1].new_level is ImprovementLevel.LEVEL2

        with pytest.raises(InvalidActionError):
            two_player_game.improve_property(ALICE, pid)

    def test_not_owner(self, two_player_game):
        give_property(two_player_game, BOB, 1, 2, 3)
        to_action_phase(two_player_game, ALICE, 4)
        with pytest.raises(InvalidActionError):
            two_player_game.improve_property(ALICE, property_id_for(1))

    def test_mortgaged_rejected(self, two_player_game):
        give_property(two_player_game, ALICE, 1, 2, 3)
        two_player_game.board.get_property(property_id_for(1)).mortgage()
        to_action_phase(two_player_game, ALICE, 4)
        with pytest.raises(InvalidActionError):
            two_player_game.improve_property(ALICE, property_id_for(1))

    def test_insufficient_funds(self, two_player_game):
        give_property(two_player_game, ALICE, 1, 2, 3)
        to_action_phase(two_player_game, ALICE, 4)
        alice = two_player_game.get_player(ALICE)
        alice.subtract_currency(Money.of_dollars(1460))
        with pytest.raises(InsufficientFundsError):
            two_player_game.improve_property(ALICE, property_id_for(1))
        assert two_player_game.board.get_property(property_id_for(1)).improvement_level is ImprovementLevel.NONE


class TestQueries:
    def test_opponent_and_turn(self, two_player_game):
        assert two_player_game.get_opponent(ALICE).player_id == BOB
        assert two_player_game.is_player_turn(ALICE)
        assert not two_player_game.is_player_turn(BOB)
        assert not two_player_game.is_current_player_npc()
        assert two_player_game.current_player.player_id == ALICE

    def test_net_worth(self, two_player_game):
        give_property(two_player_game, ALICE, 23)
        assert two_player_game.net_worth(ALICE) == Money.of_dollars(1800)
