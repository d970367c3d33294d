"""
Tests for rent collection, bankruptcy and game end.
"""

import pytest
from conftest import ALICE, BOB, give_property

from fore.board import property_id_for
from fore.enums import GameStatus, ImprovementLevel, TurnPhase
from fore.events import GameEnded, PlayerBankrupt, RentPaid, TurnEnded
from fore.exceptions import InvalidGameStatusError
from fore.money import Money


def _land_alice_on(session, dice, position):
    """Put Alice three tiles short of `position` and roll (1, 2)."""
    session.get_player(ALICE).move_to(position - 3)
    dice.queue(1, 2)
    session.roll_dice(ALICE)


class TestRent:
    def test_base_rent(self, two_player_game, dice):
        give_property(two_player_game, BOB, 5)
        _land_alice_on(two_player_game, dice, 5)

        assert two_player_game.get_player(ALICE).currency == Money.of_dollars(1492)
        assert two_player_game.get_player(BOB).currency == Money.of_dollars(1508)
        event = two_player_game.drain_events()[-1]
        assert isinstance(event, RentPaid)
        assert event.payer_id == ALICE
        assert event.receiver_id == BOB
        assert event.amount == Money.of_dollars(8)

    def test_complete_group_doubles_rent(self, two_player_game, dice):
        give_property(two_player_game, BOB, 5, 6, 7)
        _land_alice_on(two_player_game, dice, 5)
        assert two_player_game.get_player(BOB).currency == Money.of_dollars(1516)

    def test_improved_rent(self, two_player_game, dice):
        give_property(two_player_game, BOB, 5, 6, 7)
        two_player_game.board.get_property(property_id_for(5)).improve()
        _land_alice_on(two_player_game, dice, 5)
        assert two_player_game.get_player(BOB).currency == Money.of_dollars(1540)

    def test_mortgaged_property_charges_nothing(self, two_player_game, dice):
        give_property(two_player_game, BOB, 5)
        two_player_game.board.get_property(property_id_for(5)).mortgage()
        _land_alice_on(two_player_game, dice, 5)

        assert two_player_game.get_player(ALICE).currency == Money.of_dollars(1500)
        assert not any(isinstance(e, RentPaid) for e in two_player_game.drain_events())

    def test_own_property_charges_nothing(self, two_player_game, dice):
        give_property(two_player_game, ALICE, 5)
        _land_alice_on(two_player_game, dice, 5)
        assert two_player_game.get_player(ALICE).currency == Money.of_dollars(1500)
        assert two_player_game.turn_phase is TurnPhase.ACTION

    def test_exact_balance_pays_without_bankruptcy(self, two_player_game, dice):
        give_property(two_player_game, BOB, 5)
        alice = two_player_game.get_player(ALICE)
        alice.subtract_currency(Money.of_dollars(1492))
        _land_alice_on(two_player_game, dice, 5)

        assert alice.currency.is_zero()
        assert not alice.is_bankrupt


class TestBankruptcy:
    @pytest.fixture
    def ruined_game(self, two_player_game, dice):
        """Alice with $100 and hole 1 lands on Bob's fully improved hole 23."""
        give_property(two_player_game, ALICE, 1)
        give_property(two_player_game, BOB, 21, 22, 23)
        two_player_game.board.get_property(property_id_for(23)).restore_state(
            BOB, ImprovementLevel.LEVEL2, False
        )
        two_player_game.get_player(ALICE).subtract_currency(Money.of_dollars(1400))
        _land_alice_on(two_player_game, dice, 23)
        return two_player_game

    def test_assets_transfer_to_creditor(self, ruined_game):
        alice = ruined_game.get_player(ALICE)
        bob = ruined_game.get_player(BOB)

        assert alice.is_bankrupt
        assert alice.currency.is_zero()
        assert alice.property_count == 0
        assert bob.currency == Money.of_dollars(1600)
        assert bob.owns_property(property_id_for(1))
        assert ruined_game.board.get_property(property_id_for(1)).is_owned_by(BOB)

        events = ruined_game.drain_events()
        bankrupt = events[-1]
        assert isinstance(bankrupt, PlayerBankrupt)
        assert bankrupt.creditor_id == BOB
        assert not any(isinstance(e, RentPaid) for e in events)

    def test_game_ends_when_turn_passes(self, ruined_game):
        assert ruined_game.status is GameStatus.IN_PROGRESS
        assert ruined_game.turn_phase is TurnPhase.ACTION
        ruined_game.drain_events()

        ruined_game.end_turn(ALICE)

        assert ruined_game.status is GameStatus.COMPLETED
        assert ruined_game.winner_id == BOB
        events = ruined_game.drain_events()
        assert [type(e) for e in events] == [TurnEnded, GameEnded]
        assert events[-1].winner_id == BOB
        assert events[-1].reason == "Opponent bankrupt"

    def test_completed_game_rejects_commands(self, ruined_game):
        ruined_game.end_turn(ALICE)
        with pytest.raises(InvalidGameStatusError):
            ruined_game.roll_dice(BOB)
        with pytest.raises(InvalidGameStatusError):
            ruined_game.end_turn(BOB)

    def test_bankrupt_doubles_get_no_extra_roll(self, two_player_game, dice):
        give_property(two_player_game, BOB, 23)
        two_player_game.board.get_property(property_id_for(23)).restore_state(
            BOB, ImprovementLevel.LEVEL2, False
        )
        alice = two_player_game.get_player(ALICE)
        alice.subtract_currency(Money.of_dollars(1400))
        alice.move_to(21)
        dice.queue(1, 1)
        two_player_game.roll_dice(ALICE)

        assert alice.is_bankrupt
        assert two_player_game.turn_phase is TurnPhase.ACTION
