"""Tests for the grid model and directions."""

import pytest

from light_cycle.config import parse_level
from light_cycle.model.grid import Direction, GridMap, is_adjacent


@pytest.fixture
def grid():
    level = parse_level({
        'gridSize': 6,
        'outlets': [{'id': 'o1', 'x': 0, 'y': 2, 'color': 'red'}],
        'stations': [{'id': 's1', 'x': 5, 'y': 2, 'color': 'blue'}],
        'obstacles': [{'x': 2, 'y': 1}, [2, 3]],
        'splitters': [{'x': 3, 'y': 2, 'directions': ['up', 'down']}],
        'colorChangers': [{'x': 4, 'y': 2, 'toColor': 'blue'}],
    })
    return GridMap.from_level(level)


def test_bounds(grid):
    assert grid.in_bounds(0, 0)
    assert grid.in_bounds(5, 5)
    assert not grid.in_bounds(6, 0)
    assert not grid.in_bounds(0, -1)


def test_obstacles(grid):
    assert grid.is_obstacle(2, 1)
    assert grid.is_obstacle(2, 3)
    assert not grid.is_obstacle(2, 2)
    assert not grid.is_obstacle(-1, 0)
    assert not grid.is_walkable(2, 1)
    assert not grid.is_walkable(9, 9)


def test_tile_lookups(grid):
    assert grid.outlet_at(0, 2).id == 'o1'
    assert grid.station_at(5, 2).id == 's1'
    assert grid.splitter_at(3, 2).directions == (Direction.UP, Direction.DOWN)
    assert grid.color_changer_at(4, 2).to_color.value == 'blue'
    assert grid.outlet_at(1, 1) is None
    assert grid.station_at(0, 2) is None


def test_grid_is_read_only(grid):
    with pytest.raises(ValueError):
        grid.obstacles[0, 0] = True


def test_neighbors_skip_obstacles(grid):
    assert grid.get_neighbors(2, 2) == [(1, 2), (3, 2)]
    assert grid.get_neighbors(0, 0) == [(1, 0), (0, 1)]


def test_direction_between_and_axes():
    assert Direction.between((1, 1), (2, 1)) == Direction.RIGHT
    assert Direction.between((1, 1), (1, 0)) == Direction.UP
    assert Direction.between((1, 1), (3, 1)) is None
    assert Direction.LEFT.opposite == Direction.RIGHT
    assert Direction.UP.same_axis(Direction.DOWN)
    assert not Direction.UP.same_axis(Direction.LEFT)


def test_is_adjacent():
    assert is_adjacent((0, 0), (0, 1))
    assert not is_adjacent((0, 0), (1, 1))
    assert not is_adjacent((0, 0), (0, 0))
