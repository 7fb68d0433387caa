from typing import Dict, List, Optional

from bdmonopoly.tiles import (
    Tile,
    TileType,
    PropertyTile,
    StationTile,
    UtilityTile,
)


class Board:
    """The game board: a fixed, ordered ring of tiles."""

    def __init__(self, tiles: List[Tile]):
        self.tiles: List[Tile] = list(tiles)
        self.color_groups: Dict[str, List[int]] = self._build_color_groups()
        self.jail_position: int = self._find_jail()

    def __len__(self) -> int:
        return len(self.tiles)

    def __iter__(self):
        return iter(self.tiles)

    def _build_color_groups(self) -> Dict[str, List[int]]:
        """Build a mapping of colour groups to property tile ids."""
        groups: Dict[str, List[int]] = {}
        for tile in self.tiles:
            if isinstance(tile, PropertyTile):
                groups.setdefault(tile.group, []).append(tile.id)
        return groups

    def _find_jail(self) -> int:
        for tile in self.tiles:
            if tile.tile_type == TileType.JAIL_VISITING:
                return tile.id
        return 10

    def get_tile(self, position: int) -> Tile:
        """Get the tile at the given position."""
        return self.tiles[position % len(self.tiles)]

    def get_property_tile(self, position: int) -> Optional[PropertyTile]:
        """Get a property tile, or None if not a property."""
        tile = self.get_tile(position)
        return tile if isinstance(tile, PropertyTile) else None

    def get_color_group(self, color: str) -> List[int]:
        """Get all property ids in a colour group."""
        return self.color_groups.get(color, [])

    def get_all_stations(self) -> List[int]:
        """Get ids of all station tiles."""
        return [t.id for t in self.tiles if isinstance(t, StationTile)]

    def get_all_utilities(self) -> List[int]:
        """Get ids of all utility tiles."""
        return [t.id for t in self.tiles if isinstance(t, UtilityTile)]

    def ownable_tiles(self) -> List[Tile]:
        return [t for t in self.tiles if t.is_ownable]

    def forward_distance(self, start: int, target: int) -> int:
        """Number of steps from start to target moving forward around the board."""
        return (target - start) % len(self.tiles)

    def find_nearest_station(self, position: int) -> Optional[int]:
        """
        Find the station strictly ahead of the given position.

        A station at distance zero (the current tile) does not count.
        Returns None when the board has no other station.
        """
        nearest: Optional[int] = None
        best = len(self.tiles)
        for pos in self.get_all_stations():
            distance = self.forward_distance(position, pos)
            if 0 < distance < best:
                best = distance
                nearest = pos
        return nearest
