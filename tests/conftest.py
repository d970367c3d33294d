"""Shared test fixtures for Fore engine tests."""

import uuid
from typing import List

import pytest

from fore.board import property_id_for
from fore.config import GameConfig
from fore.enums import TurnPhase
from fore.game import GameSession

ALICE = uuid.UUID("00000000-0000-0000-0000-00000000a11c")
BOB = uuid.UUID("00000000-0000-0000-0000-000000000b0b")


class ScriptedDice:
    """Stands in for random.Random and hands out queued die faces in order."""

    def __init__(self, *faces: int):
        self.faces: List[int] = list(faces)

    def queue(self, *faces: int) -> None:
        self.faces.extend(faces)

    def randint(self, a: int, b: int) -> int:
        if not self.faces:
            raise AssertionError("ScriptedDice ran out of queued faces")
        return self.faces.pop(0)


def give_property(session: GameSession, player_id: uuid.UUID, *positions: int) -> None:
    """Hand properties to a player directly, bypassing purchase rules."""
    for position in positions:
        prop = session.board.get_property(property_id_for(position))
        prop.transfer_to(player_id)
        session.get_player(player_id).add_property(prop.property_id)


def to_action_phase(session: GameSession, player_id: uuid.UUID, position: int) -> None:
    """Put a player on a tile with the turn waiting for actions."""
    session.current_player_id = player_id
    session.get_player(player_id).move_to(position)
    session.turn_phase = TurnPhase.ACTION


@pytest.fixture
def dice():
    return ScriptedDice()


@pytest.fixture
def game_config():
    """Default rule configuration."""
    return GameConfig(seed=42)


@pytest.fixture
def npc_game(dice, game_config):
    """Alice against a MEDIUM NPC, Alice to roll."""
    session = GameSession.create(ALICE, "Alice", vs_npc=True, config=game_config, rng=dice)
    session.drain_events()
    return session


@pytest.fixture
def two_player_game(dice, game_config):
    """Alice and Bob, both human, Alice to roll."""
    session = GameSession.create(ALICE, "Alice", config=game_config, rng=dice)
    session.join_game(BOB, "Bob")
    session.drain_events()
    return session
