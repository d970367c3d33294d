"""
Player state and management.
"""

from __future__ import annotations

import uuid
from typing import TYPE_CHECKING, FrozenSet, Iterable, Optional, Set

from fore.enums import Difficulty
from fore.exceptions import GameInvariantError
from fore.money import Money

if TYPE_CHECKING:
    from fore.board import Board

SAND_TRAP_TURNS = 3
DOUBLES_FOR_SAND_TRAP = 3


class PlayerState:
    """
    The mutable state of one player within a game session.

    Owned properties are held by id only; the Board is the single store of
    Property objects.
    """

    def __init__(
        self,
        player_id: uuid.UUID,
        display_name: str,
        starting_currency: Money,
        is_npc: bool = False,
        npc_difficulty: Optional[Difficulty] = None,
    ):
        self.player_id = player_id
        self.display_name = display_name
        self.is_npc = is_npc
        self.npc_difficulty: Optional[Difficulty] = (npc_difficulty or Difficulty.MEDIUM) if is_npc else None

        self.position = 0
        self.currency = starting_currency
        self._owned_property_ids: Set[uuid.UUID] = set()
        self.is_bankrupt = False
        self.turns_in_sand_trap = 0
        self.consecutive_doubles = 0

    @classmethod
    def restore(
        cls,
        player_id: uuid.UUID,
        display_name: str,
        *,
        is_npc: bool,
        npc_difficulty: Optional[Difficulty],
        position: int,
        currency: Money,
        owned_property_ids: Iterable[uuid.UUID],
        is_bankrupt: bool,
        turns_in_sand_trap: int,
        consecutive_doubles: int,
    ) -> "PlayerState":
        """Rebuild a player from snapshot fields, bypassing the mutators."""
        player = cls(player_id, display_name, currency, is_npc=is_npc, npc_difficulty=npc_difficulty)
        player.position = position
        player._owned_property_ids = set(owned_property_ids)
        player.is_bankrupt = is_bankrupt
        player.turns_in_sand_trap = turns_in_sand_trap
        player.consecutive_doubles = consecutive_doubles
        return player

    @property
    def is_human(self) -> bool:
        return not self.is_npc

    # Movement

    def move_to(self, position: int) -> None:
        self.position = position

    # Currency

    def add_currency(self, amount: Money) -> None:
        self.currency = self.currency + amount

    def subtract_currency(self, amount: Money) -> None:
        """
        Debit the balance.

        Callers check `can_afford` first; reaching a negative balance here is
        a defect and aborts the command.
        """
        remaining = self.currency - amount
        if remaining.is_negative():
            raise GameInvariantError(
                f"Player {self.display_name} cannot have negative currency "
                f"(balance {self.currency}, debit {amount})"
            )
        self.currency = remaining

    def can_afford(self, amount: Money) -> bool:
        return self.currency >= amount

    def surrender_currency(self) -> Money:
        """Hand over the whole balance, leaving exactly zero."""
        amount = self.currency
        self.currency = Money.zero()
        return amount

    # Holdings

    @property
    def owned_property_ids(self) -> FrozenSet[uuid.UUID]:
        return frozenset(self._owned_property_ids)

    @property
    def property_count(self) -> int:
        return len(self._owned_property_ids)

    def add_property(self, property_id: uuid.UUID) -> None:
        self._owned_property_ids.add(property_id)

    def remove_property(self, property_id: uuid.UUID) -> None:
        self._owned_property_ids.discard(property_id)

    def owns_property(self, property_id: uuid.UUID) -> bool:
        return property_id in self._owned_property_ids

    def declare_bankrupt(self) -> None:
        self.is_bankrupt = True

    # Sand trap

    def enter_sand_trap(self, turns: int = SAND_TRAP_TURNS) -> None:
        self.turns_in_sand_trap = turns

    def decrement_sand_trap_turns(self) -> None:
        if self.turns_in_sand_trap > 0:
            self.turns_in_sand_trap -= 1

    def escape_sand_trap(self) -> None:
        self.turns_in_sand_trap = 0

    def is_in_sand_trap(self) -> bool:
        return self.turns_in_sand_trap > 0

    # Doubles

    def increment_consecutive_doubles(self) -> None:
        self.consecutive_doubles += 1

    def reset_consecutive_doubles(self) -> None:
        self.consecutive_doubles = 0

    def has_rolled_three_doubles(self, limit: int = DOUBLES_FOR_SAND_TRAP) -> bool:
        return self.consecutive_doubles >= limit

    def calculate_net_worth(self, board: "Board") -> Money:
        """Balance plus purchase price and improvement cost of every holding."""
        worth = self.currency
        for property_id in self._owned_property_ids:
            prop = board.get_property(property_id)
            worth = worth + prop.purchase_price + prop.improvement_cost * prop.improvement_level.level
        return worth

    def __repr__(self) -> str:
        return (
            f"PlayerState(id={self.player_id}, name='{self.display_name}', "
            f"currency={self.currency}, position={self.position}, bankrupt={self.is_bankrupt})"
        )
