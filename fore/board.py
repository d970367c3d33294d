"""
The Fore game board.
"""

from __future__ import annotations

import uuid
from typing import Dict, List, Optional, Sequence, Set

from fore.config import START_POSITION, TOTAL_TILES
from fore.enums import CourseGroup, TileType
from fore.exceptions import InvalidPositionError, PropertyNotFoundError
from fore.money import Money
from fore.spaces import Property, Tile

# Tile and property ids are derived from positions so a regenerated board
# lines up with ids stored in a snapshot.
BOARD_NAMESPACE = uuid.UUID("6f1c2a3e-9b1d-4c55-8f0e-2d7a4b9e1f30")


def tile_id_for(position: int) -> uuid.UUID:
    return uuid.uuid5(BOARD_NAMESPACE, f"tile:{position}")


def property_id_for(position: int) -> uuid.UUID:
    return uuid.uuid5(BOARD_NAMESPACE, f"property:{position}")


class Board:
    """
    The 24-tile board, indexed by position and by property id.

    The set of tiles never changes after construction; only the mutable
    fields of the Property objects it hands out do.
    """

    def __init__(self, tiles: Optional[Sequence[Tile]] = None):
        tiles = list(tiles) if tiles is not None else _create_standard_tiles()
        if len(tiles) != TOTAL_TILES:
            raise ValueError(f"Board must have exactly {TOTAL_TILES} tiles")

        self.tiles: List[Tile] = sorted(tiles, key=lambda t: t.position)
        self._tiles_by_position: Dict[int, Tile] = {t.position: t for t in self.tiles}
        if sorted(self._tiles_by_position) != list(range(TOTAL_TILES)):
            raise ValueError("Board tiles must cover positions 0..23 exactly once")

        self._properties_by_id: Dict[uuid.UUID, Property] = {
            t.property.property_id: t.property for t in self.tiles if t.property is not None
        }

    def get_tile(self, position: int) -> Tile:
        tile = self._tiles_by_position.get(position)
        if tile is None:
            raise InvalidPositionError(position)
        return tile

    def get_property(self, property_id: uuid.UUID) -> Property:
        prop = self._properties_by_id.get(property_id)
        if prop is None:
            raise PropertyNotFoundError(property_id)
        return prop

    def has_property(self, property_id: uuid.UUID) -> bool:
        return property_id in self._properties_by_id

    def property_at(self, position: int) -> Optional[Property]:
        return self.get_tile(position).property

    def all_properties(self) -> List[Property]:
        """All properties in board order."""
        return [t.property for t in self.tiles if t.property is not None]

    def properties_in_group(self, group: CourseGroup) -> List[Property]:
        return [p for p in self.all_properties() if p.course_group is group]

    def properties_owned_by(self, player_id: uuid.UUID) -> List[Property]:
        return [p for p in self.all_properties() if p.is_owned_by(player_id)]

    def owns_complete_group(self, player_id: uuid.UUID, group: CourseGroup) -> bool:
        group_properties = self.properties_in_group(group)
        return bool(group_properties) and all(p.is_owned_by(player_id) for p in group_properties)

    def complete_groups_owned_by(self, player_id: uuid.UUID) -> Set[CourseGroup]:
        return {group for group in CourseGroup if self.owns_complete_group(player_id, group)}

    def count_owned_in_group(self, player_id: uuid.UUID, group: CourseGroup) -> int:
        return sum(1 for p in self.properties_in_group(group) if p.is_owned_by(player_id))

    @staticmethod
    def calculate_new_position(current_position: int, dice_total: int) -> int:
        return (current_position + dice_total) % TOTAL_TILES

    @staticmethod
    def passed_start(old_position: int, new_position: int) -> bool:
        """
        True when a move wrapped around the board.

        A zero-length move that starts and ends on the start tile also counts.
        Dice never produce one, so play never relies on that branch.
        """
        return new_position < old_position or (
            old_position == START_POSITION and new_position == START_POSITION
        )


def _special_tile(position: int, tile_type: TileType, name: str) -> Tile:
    return Tile(tile_id=tile_id_for(position), position=position, tile_type=tile_type, name=name)


def _property_tile(
    position: int,
    name: str,
    group: CourseGroup,
    price: int,
    base_rent: int,
    rent_level1: int,
    rent_level2: int,
    improvement_cost: int,
) -> Tile:
    prop = Property(
        property_id=property_id_for(position),
        name=name,
        course_group=group,
        position=position,
        purchase_price=Money.of_dollars(price),
        base_rent=Money.of_dollars(base_rent),
        rent_level1=Money.of_dollars(rent_level1),
        rent_level2=Money.of_dollars(rent_level2),
        improvement_cost=Money.of_dollars(improvement_cost),
    )
    return Tile(
        tile_id=tile_id_for(position),
        position=position,
        tile_type=TileType.PROPERTY,
        name=name,
        property=prop,
    )


def _create_standard_tiles() -> List[Tile]:
    """Create the standard 24-tile course."""
    return [
        _special_tile(0, TileType.START, "Fairway Start"),
        # Links Nine (1-3)
        _property_tile(1, "Dunes End Hole 1", CourseGroup.LINKS_NINE, 60, 2, 10, 30, 50),
        _property_tile(2, "Dunes End Hole 2", CourseGroup.LINKS_NINE, 60, 4, 20, 60, 50),
        _property_tile(3, "Dunes End Hole 3", CourseGroup.LINKS_NINE, 80, 6, 30, 90, 50),
        _special_tile(4, TileType.SHOP, "Pro Shop"),
        # Prairie Nine (5-7)
        _property_tile(5, "Meadow Creek Hole 4", CourseGroup.PRAIRIE_NINE, 100, 8, 40, 120, 50),
        _property_tile(6, "Meadow Creek Hole 5", CourseGroup.PRAIRIE_NINE, 100, 8, 40, 120, 50),
        _property_tile(7, "Meadow Creek Hole 6", CourseGroup.PRAIRIE_NINE, 120, 10, 50, 150, 50),
        _special_tile(8, TileType.SAND_TRAP, "Bunker Beach"),
        # Highland Nine (9-11)
        _property_tile(9, "Eagle Ridge Hole 7", CourseGroup.HIGHLAND_NINE, 140, 12, 60, 180, 100),
        _property_tile(10, "Eagle Ridge Hole 8", CourseGroup.HIGHLAND_NINE, 140, 12, 60, 180, 100),
        _property_tile(11, "Eagle Ridge Hole 9", CourseGroup.HIGHLAND_NINE, 160, 14, 70, 210, 100),
        _special_tile(12, TileType.SAFE_LOUNGE, "Members Lounge"),
        # Coastal Nine (13-15)
        _property_tile(13, "Oceanview Hole 10", CourseGroup.COASTAL_NINE, 180, 16, 80, 240, 100),
        _property_tile(14, "Oceanview Hole 11", CourseGroup.COASTAL_NINE, 180, 16, 80, 240, 100),
        _property_tile(15, "Oceanview Hole 12", CourseGroup.COASTAL_NINE, 200, 18, 90, 270, 100),
        _special_tile(16, TileType.WATER_HAZARD, "Lake Penalty"),
        # Championship Nine (17-19)
        _property_tile(17, "Champion Oaks Hole 13", CourseGroup.CHAMPIONSHIP_NINE, 220, 20, 100, 300, 150),
        _property_tile(18, "Champion Oaks Hole 14", CourseGroup.CHAMPIONSHIP_NINE, 220, 20, 100, 300, 150),
        _property_tile(19, "Champion Oaks Hole 15", CourseGroup.CHAMPIONSHIP_NINE, 240, 22, 110, 330, 150),
        _special_tile(20, TileType.SHOP, "Tournament Pro Shop"),
        # Masters Nine (21-23)
        _property_tile(21, "Grand Pines Hole 16", CourseGroup.MASTERS_NINE, 260, 24, 120, 360, 200),
        _property_tile(22, "Grand Pines Hole 17", CourseGroup.MASTERS_NINE, 280, 26, 130, 390, 200),
        _property_tile(23, "Grand Pines Hole 18", CourseGroup.MASTERS_NINE, 300, 30, 150, 450, 200),
    ]


def create_standard_board() -> Board:
    return Board(_create_standard_tiles())
