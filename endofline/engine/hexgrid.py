"""
Hex grid utilities using axial coordinates.
Board generation, neighbor lookup, id encoding, flat-top pixel projection,
and clamped territory updates.
"""

import math
import re
from dataclasses import replace
from typing import NamedTuple

from endofline.engine import CORP_CONTROL_THRESHOLD, RUNNER_CONTROL_THRESHOLD
from endofline.engine.state import Territory, CORPORATE, FRINGE, UNDERGROUND

GRID_SIZE = 3


class AxialCoord(NamedTuple):
    q: int  # column
    r: int  # row


class HexPosition(NamedTuple):
    x: float
    y: float


# Six neighbor directions: E, NE, NW, W, SW, SE
AXIAL_DIRECTIONS = (
    AxialCoord(1, 0),
    AxialCoord(1, -1),
    AxialCoord(0, -1),
    AxialCoord(-1, 0),
    AxialCoord(-1, 1),
    AxialCoord(0, 1),
)

CORNER_COORDS = frozenset({
    AxialCoord(0, 0),
    AxialCoord(2, 0),
    AxialCoord(0, 2),
    AxialCoord(2, 2),
})
CENTER_COORD = AxialCoord(1, 1)

TERRITORY_NAMES = {
    AxialCoord(0, 0): "Sector Alpha",
    AxialCoord(1, 0): "Northern District",
    AxialCoord(2, 0): "Sector Beta",
    AxialCoord(0, 1): "Western Reach",
    AxialCoord(1, 1): "Central Hub",
    AxialCoord(2, 1): "Eastern Reach",
    AxialCoord(0, 2): "Sector Gamma",
    AxialCoord(1, 2): "Southern District",
    AxialCoord(2, 2): "Sector Delta",
}

_ID_PATTERN = re.compile(r"^hex-(-?\d+)-(-?\d+)$")


def get_3x3_grid_coords() -> list[AxialCoord]:
    """All 9 board coordinates, row by row."""
    return [AxialCoord(q, r) for r in range(GRID_SIZE) for q in range(GRID_SIZE)]


def _in_grid(coord: AxialCoord) -> bool:
    return 0 <= coord.q < GRID_SIZE and 0 <= coord.r < GRID_SIZE


def coord_to_id(coord: AxialCoord) -> str:
    return f"hex-{coord.q}-{coord.r}"


def id_to_coord(territory_id: str) -> AxialCoord | None:
    """Parse a hex id back to coordinates. Returns None for anything malformed."""
    if not isinstance(territory_id, str):
        return None
    match = _ID_PATTERN.match(territory_id)
    if not match:
        return None
    return AxialCoord(int(match.group(1)), int(match.group(2)))


def get_neighbors(coord: AxialCoord) -> list[AxialCoord]:
    """
    Neighbors of coord that lie on the 3x3 board.
    The board is an axial rhombus: corners (0,0) and (2,2) get 2, corners (2,0)
    and (0,2) get 3, edges 4 and the center 6.
    """
    neighbors = []
    for direction in AXIAL_DIRECTIONS:
        neighbor = AxialCoord(coord.q + direction.q, coord.r + direction.r)
        if _in_grid(neighbor):
            neighbors.append(neighbor)
    return neighbors


def get_neighbor_ids(territory_id: str) -> list[str]:
    coord = id_to_coord(territory_id)
    if coord is None:
        return []
    return [coord_to_id(c) for c in get_neighbors(coord)]


def axial_to_pixel(
    coord: AxialCoord,
    hex_size: float,
    offset_x: float = 0,
    offset_y: float = 0,
) -> HexPosition:
    """Flat-top projection of an axial coordinate to its hex center."""
    x = hex_size * (3 / 2) * coord.q + offset_x
    y = hex_size * math.sqrt(3) * (coord.r + coord.q / 2) + offset_y
    return HexPosition(x, y)


def pixel_to_axial(
    pos: HexPosition,
    hex_size: float,
    offset_x: float = 0,
    offset_y: float = 0,
) -> AxialCoord:
    """Inverse of axial_to_pixel, rounded to the nearest hex."""
    x = pos.x - offset_x
    y = pos.y - offset_y
    q = (2 / 3) * x / hex_size
    r = (-1 / 3) * x / hex_size + (math.sqrt(3) / 3) * y / hex_size
    return axial_round(q, r)


def axial_round(q: float, r: float) -> AxialCoord:
    """
    Round fractional axial coordinates to the nearest hex.
    The component with the largest rounding error is recomputed from the other
    two so that q + r + s == 0 still holds.
    """
    s = -q - r
    rq = round(q)
    rr = round(r)
    rs = round(s)

    q_diff = abs(rq - q)
    r_diff = abs(rr - r)
    s_diff = abs(rs - s)

    if q_diff > r_diff and q_diff > s_diff:
        rq = -rr - rs
    elif r_diff > s_diff:
        rr = -rq - rs

    return AxialCoord(int(rq), int(rr))


def get_territory_type(coord: AxialCoord) -> str:
    """Center is CORPORATE, corners are UNDERGROUND, the rest FRINGE."""
    if coord == CENTER_COORD:
        return CORPORATE
    if coord in CORNER_COORDS:
        return UNDERGROUND
    return FRINGE


def create_territory(coord: AxialCoord) -> Territory:
    return Territory(
        id=coord_to_id(coord),
        name=TERRITORY_NAMES.get(coord, f"Hex {coord.q}-{coord.r}"),
        type=get_territory_type(coord),
        security_level=1,
        resource_value=3,
        stability_index=100,
        corporate_influence=50,
        adjacent_territory_ids=[coord_to_id(c) for c in get_neighbors(coord)],
    )


def create_hex_grid() -> list[Territory]:
    """Fresh 9-territory board."""
    return [create_territory(coord) for coord in get_3x3_grid_coords()]


def is_corp_controlled(territory: Territory) -> bool:
    return territory.corporate_influence >= CORP_CONTROL_THRESHOLD


def is_runner_controlled(territory: Territory) -> bool:
    return territory.corporate_influence <= RUNNER_CONTROL_THRESHOLD


def clamp(value: int, low: int, high: int) -> int:
    return max(low, min(high, value))


def modify_territory(
    territory: Territory,
    security_level: int | None = None,
    resource_value: int | None = None,
    stability_index: int | None = None,
    corporate_influence: int | None = None,
) -> Territory:
    """
    Return a copy of territory with the given fields set, each clamped to its range.
    Fields left as None keep their current value.
    """
    changes = {}
    if security_level is not None:
        changes["security_level"] = clamp(security_level, 1, 5)
    if resource_value is not None:
        changes["resource_value"] = clamp(resource_value, 1, 5)
    if stability_index is not None:
        changes["stability_index"] = clamp(stability_index, 0, 100)
    if corporate_influence is not None:
        changes["corporate_influence"] = clamp(corporate_influence, 0, 100)
    return replace(territory, **changes)
