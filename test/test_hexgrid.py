"""
Board topology, id encoding, pixel projection and clamped territory updates.
"""

import pytest

from endofline.engine.hexgrid import (
    AxialCoord,
    HexPosition,
    axial_round,
    axial_to_pixel,
    coord_to_id,
    create_hex_grid,
    get_3x3_grid_coords,
    get_neighbor_ids,
    get_neighbors,
    id_to_coord,
    is_corp_controlled,
    is_runner_controlled,
    modify_territory,
    pixel_to_axial,
)
from endofline.engine.state import CORPORATE, FRINGE, UNDERGROUND


def test_grid_has_nine_unique_territories():
    grid = create_hex_grid()
    assert len(grid) == 9
    assert len({t.id for t in grid}) == 9
    assert all(t.corporate_influence == 50 for t in grid)


def test_neighbor_counts_follow_rhombus_shape():
    expected = {
        (0, 0): 2, (2, 2): 2,
        (2, 0): 3, (0, 2): 3,
        (1, 0): 4, (0, 1): 4, (2, 1): 4, (1, 2): 4,
        (1, 1): 6,
    }
    for coord in get_3x3_grid_coords():
        assert len(get_neighbors(coord)) == expected[tuple(coord)], coord


def test_adjacency_is_symmetric_and_stays_on_board():
    board = {t.id: t for t in create_hex_grid()}
    for territory in board.values():
        for neighbor_id in territory.adjacent_territory_ids:
            assert neighbor_id in board
            assert territory.id in board[neighbor_id].adjacent_territory_ids


def test_ids_round_trip_for_every_board_coord():
    for coord in get_3x3_grid_coords():
        assert id_to_coord(coord_to_id(coord)) == coord


@pytest.mark.parametrize("bad", ["", "hex-1", "hex-a-b", "tile-1-1", "hex-1-1-1", None, 11])
def test_id_to_coord_rejects_malformed(bad):
    assert id_to_coord(bad) is None


def test_id_to_coord_accepts_negative_components():
    assert id_to_coord("hex--1-2") == AxialCoord(-1, 2)


def test_neighbor_ids_of_malformed_id_is_empty():
    assert get_neighbor_ids("nowhere") == []
    assert sorted(get_neighbor_ids("hex-0-0")) == ["hex-0-1", "hex-1-0"]


def test_territory_types():
    types = {t.id: t.type for t in create_hex_grid()}
    assert types["hex-1-1"] == CORPORATE
    for corner in ("hex-0-0", "hex-2-0", "hex-0-2", "hex-2-2"):
        assert types[corner] == UNDERGROUND
    for edge in ("hex-1-0", "hex-0-1", "hex-2-1", "hex-1-2"):
        assert types[edge] == FRINGE


def test_axial_to_pixel_origin_and_offset():
    assert axial_to_pixel(AxialCoord(0, 0), 40) == HexPosition(0, 0)
    pos = axial_to_pixel(AxialCoord(2, 0), 40, offset_x=10, offset_y=5)
    assert pos.x == pytest.approx(130)
    assert pos.y == pytest.approx(40 * 3 ** 0.5 + 5)


def test_pixel_to_axial_inverts_projection():
    for coord in get_3x3_grid_coords():
        pos = axial_to_pixel(coord, 32, offset_x=100, offset_y=80)
        assert pixel_to_axial(pos, 32, offset_x=100, offset_y=80) == coord


def test_axial_round_fixes_largest_error_component():
    assert axial_round(1.2, -0.1) == AxialCoord(1, 0)
    assert axial_round(0.4, 0.4) == AxialCoord(0, 1)


def test_control_thresholds():
    territory = create_hex_grid()[0]
    assert is_corp_controlled(modify_territory(territory, corporate_influence=60))
    assert not is_corp_controlled(modify_territory(territory, corporate_influence=59))
    assert is_runner_controlled(modify_territory(territory, corporate_influence=40))
    assert not is_runner_controlled(modify_territory(territory, corporate_influence=41))
    # 50 belongs to neither side
    assert not is_corp_controlled(territory)
    assert not is_runner_controlled(territory)


def test_modify_territory_clamps_and_copies():
    territory = create_hex_grid()[4]
    high = modify_territory(territory, security_level=9, resource_value=7,
                            stability_index=120, corporate_influence=150)
    assert (high.security_level, high.resource_value) == (5, 5)
    assert (high.stability_index, high.corporate_influence) == (100, 100)

    low = modify_territory(territory, security_level=0, resource_value=-2,
                           stability_index=-1, corporate_influence=-5)
    assert (low.security_level, low.resource_value) == (1, 1)
    assert (low.stability_index, low.corporate_influence) == (0, 0)

    # original untouched, unspecified fields kept
    assert territory.corporate_influence == 50
    assert modify_territory(territory, corporate_influence=70).name == territory.name
