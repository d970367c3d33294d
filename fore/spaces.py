"""
Board tile and property definitions.
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass
from typing import Optional

from fore.enums import CourseGroup, ImprovementLevel, TileType
from fore.exceptions import InvalidActionError
from fore.money import Money

MORTGAGE_RATE = 0.5
UNMORTGAGE_INTEREST = 1.1


class Property:
    """
    A purchasable course tile.

    The price schedule is fixed at construction. Ownership, improvement level
    and the mortgage flag are the only mutable parts, and are changed by the
    game session through the methods below.
    """

    def __init__(
        self,
        property_id: uuid.UUID,
        name: str,
        course_group: CourseGroup,
        position: int,
        purchase_price: Money,
        base_rent: Money,
        rent_level1: Money,
        rent_level2: Money,
        improvement_cost: Money,
    ):
        self.property_id = property_id
        self.name = name
        self.course_group = course_group
        self.position = position
        self.purchase_price = purchase_price
        self.base_rent = base_rent
        self.rent_level1 = rent_level1
        self.rent_level2 = rent_level2
        self.improvement_cost = improvement_cost

        self.owner_id: Optional[uuid.UUID] = None
        self.improvement_level = ImprovementLevel.NONE
        self.is_mortgaged = False

    def is_owned(self) -> bool:
        return self.owner_id is not None

    def is_owned_by(self, player_id: uuid.UUID) -> bool:
        return self.owner_id is not None and self.owner_id == player_id

    def purchase(self, owner_id: uuid.UUID) -> None:
        if self.is_owned():
            raise InvalidActionError(f"Property {self.name} is already owned")
        self.owner_id = owner_id

    def transfer_to(self, owner_id: uuid.UUID) -> None:
        """Reassign ownership unconditionally (trades and bankruptcy)."""
        self.owner_id = owner_id

    def calculate_rent(self, owner_has_complete_group: bool) -> Money:
        """
        Rent owed by a visitor.

        Mortgaged properties collect nothing. Owning the whole course group
        doubles rent only while the property is unimproved.
        """
        if self.is_mortgaged:
            return Money.zero()

        if self.improvement_level is ImprovementLevel.LEVEL1:
            return self.rent_level1
        if self.improvement_level is ImprovementLevel.LEVEL2:
            return self.rent_level2

        if owner_has_complete_group:
            return self.base_rent.multiply(2)
        return self.base_rent

    def can_be_improved(self) -> bool:
        return not self.is_mortgaged and self.improvement_level.can_upgrade()

    def improve(self) -> None:
        if not self.improvement_level.can_upgrade():
            raise InvalidActionError(f"Property {self.name} is already at maximum improvement")
        if self.is_mortgaged:
            raise InvalidActionError(f"Cannot improve mortgaged property {self.name}")
        self.improvement_level = self.improvement_level.next_level()

    def mortgage(self) -> None:
        if self.is_mortgaged:
            raise InvalidActionError(f"Property {self.name} is already mortgaged")
        if self.improvement_level is not ImprovementLevel.NONE:
            raise InvalidActionError(f"Must sell improvements before mortgaging {self.name}")
        self.is_mortgaged = True

    def unmortgage(self) -> None:
        if not self.is_mortgaged:
            raise InvalidActionError(f"Property {self.name} is not mortgaged")
        self.is_mortgaged = False

    def restore_state(
        self,
        owner_id: Optional[uuid.UUID],
        improvement_level: ImprovementLevel,
        is_mortgaged: bool,
    ) -> None:
        """Bulk-assign the mutable fields when loading a snapshot."""
        self.owner_id = owner_id
        self.improvement_level = improvement_level
        self.is_mortgaged = is_mortgaged

    @property
    def mortgage_value(self) -> Money:
        return self.purchase_price.multiply(MORTGAGE_RATE)

    @property
    def unmortgage_cost(self) -> Money:
        return self.mortgage_value.multiply(UNMORTGAGE_INTEREST)

    def __repr__(self) -> str:
        return (
            f"Property(name='{self.name}', position={self.position}, "
            f"group={self.course_group.name}, owner={self.owner_id}, "
            f"level={self.improvement_level.name}, mortgaged={self.is_mortgaged})"
        )


@dataclass(frozen=True)
class Tile:
    """A single board tile. Carries a Property exactly when it is a PROPERTY tile."""

    tile_id: uuid.UUID
    position: int
    tile_type: TileType
    name: str
    property: Optional[Property] = None

    def __post_init__(self) -> None:
        if self.tile_type is TileType.PROPERTY and self.property is None:
            raise ValueError("Property tile must have a property")
        if self.tile_type is not TileType.PROPERTY and self.property is not None:
            raise ValueError("Non-property tile cannot have a property")

    def is_property(self) -> bool:
        return self.tile_type is TileType.PROPERTY

    def is_start_tile(self) -> bool:
        return self.tile_type is TileType.START

    def is_safe_tile(self) -> bool:
        return self.tile_type in (TileType.START, TileType.SAFE_LOUNGE)

    def requires_payment(self) -> bool:
        return self.tile_type is TileType.WATER_HAZARD

    def causes_turn_loss(self) -> bool:
        return self.tile_type is TileType.SAND_TRAP

    def __repr__(self) -> str:
        return f"Tile(name='{self.name}', position={self.position}, type={self.tile_type.name})"
