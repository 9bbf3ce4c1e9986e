"""Tests for the puzzle session's editing API."""

import pytest

from light_cycle.model.authoring import MANUAL, EditError
from light_cycle.model.grid import is_adjacent


@pytest.fixture
def session(make_session, merge_level):
    return make_session(merge_level)


def test_start_path_replaces_previous(session):
    session.trace('red', [(3, 0)])
    assert len(session.paths['red']) == 4
    assert session.start_path('red').ok
    assert session.paths['red'].cells == ((0, 0),)
    assert session.active_outlet_id == 'red'


def test_unknown_outlet(session):
    assert session.start_path('green').error == EditError.UNKNOWN_OUTLET
    assert session.extend('green', (1, 1)).error == EditError.UNKNOWN_OUTLET
    assert session.clear_path('green').error == EditError.UNKNOWN_OUTLET


def test_extend_needs_started_path(session):
    assert session.extend('red', (1, 0)).error == EditError.NO_ACTIVE_PATH


def test_rejected_edit_changes_nothing(session):
    session.trace('red', [(2, 0)])
    before = session.paths['red']
    result = session.extend('red', (4, 4), MANUAL)
    assert result.error == EditError.INVALID_MOVE
    assert session.paths['red'] is before
    assert session.undo_count == 0


def test_stored_paths_stay_well_formed(make_session, merge_level, merge_waypoints):
    session = make_session(merge_level, merge_waypoints)
    for path in session.paths.values():
        assert path.head == session.level.outlet(path.outlet_id).cell
        assert all(is_adjacent(a, b) for a, b in zip(path.cells, path.cells[1:]))
        assert all(not session.grid.is_obstacle(*c) for c in path.cells)


def test_finalizing_clears_active_outlet(session):
    session.trace('red', [(3, 0), (3, 2), (4, 2)])
    assert session.paths['red'].finalized
    assert session.active_outlet_id is None


def test_junctions_follow_edits(make_session, merge_level, merge_waypoints):
    session = make_session(merge_level, merge_waypoints)
    assert (3, 2) in session.junctions
    assert (4, 2) in session.junctions

    session.clear_path('blue')
    assert len(session.junctions) == 0


def test_toggle_junction(make_session, merge_level, merge_waypoints):
    session = make_session(merge_level, merge_waypoints)
    result = session.toggle_junction(3, 2)
    assert result.ok
    assert session.junctions.get(3, 2).active_outlet == 'blue'
    assert session.toggle_junction(0, 0).error == EditError.NOT_A_JUNCTION


def test_toggle_survives_unrelated_edit(make_session, merge_level, merge_waypoints):
    session = make_session(merge_level, merge_waypoints)
    session.toggle_junction(3, 2)
    session.undo()
    assert session.junctions.get(3, 2).active_outlet == 'blue'


def test_backtrack_counts_as_undo(session):
    session.trace('red', [(3, 0)])
    assert session.extend('red', (1, 0)).backtracked
    assert session.paths['red'].cells == ((0, 0), (1, 0))
    assert session.undo_count == 1


def test_undo_active_path(session):
    session.trace('red', [(2, 0)])
    assert session.undo().ok
    assert session.paths['red'].cells == ((0, 0), (1, 0))
    assert session.undo_count == 1


def test_undo_after_finalize_reopens_last_drawn_outlet(make_session, merge_level, merge_waypoints):
    session = make_session(merge_level, merge_waypoints)
    assert session.active_outlet_id is None
    assert session.undo().ok
    blue = session.paths['blue']
    assert blue.last == (3, 2)
    assert not blue.finalized
    assert len(session.paths['red']) == 7


def test_undo_on_fresh_path_leaves_other_paths_alone(session):
    session.trace('red', [(2, 0)])
    session.start_path('blue')
    assert session.undo().error == EditError.NOTHING_TO_UNDO
    assert session.paths['red'].cells == ((0, 0), (1, 0), (2, 0))
    assert session.paths['blue'].cells == ((0, 4),)
    assert session.active_outlet_id == 'blue'
    assert session.undo_count == 0


def test_run_lock_keeps_paths_and_junctions(make_session, merge_level, merge_waypoints):
    session = make_session(merge_level, merge_waypoints)
    assert session.start_simulation().ok
    assert session.clear_all().error == EditError.SIMULATION_RUNNING
    assert session.toggle_junction(3, 2).error == EditError.SIMULATION_RUNNING
    assert set(session.paths) == {'red', 'blue'}
    assert session.junctions.get(3, 2).active_outlet == 'red'
    assert session.is_running


def test_undo_removes_emptied_path(session):
    session.trace('red', [(1, 0)])
    session.start_path('blue')
    session.clear_path('blue')
    assert session.undo().ok
    assert 'red' not in session.paths
    assert session.undo().error == EditError.NOTHING_TO_UNDO
    assert session.undo_count == 1


def test_clear_all_is_idempotent(make_session, merge_level, merge_waypoints):
    session = make_session(merge_level, merge_waypoints)
    assert session.clear_all().ok
    first = (dict(session.paths), session.junctions.all(), session.active_outlet_id)
    assert session.clear_all().ok
    second = (dict(session.paths), session.junctions.all(), session.active_outlet_id)
    assert first == second == ({}, [], None)


def test_editing_locked_during_run(make_session, straight_level):
    session = make_session(straight_level, {'o1': [(4, 2)]})
    assert session.start_simulation().ok
    for result in (session.start_path('o1'),
                   session.extend('o1', (3, 2)),
                   session.undo(),
                   session.clear_path('o1'),
                   session.clear_all(),
                   session.toggle_junction(0, 0),
                   session.start_simulation()):
        assert result.error == EditError.SIMULATION_RUNNING
    assert len(session.paths['o1']) == 5


def test_editing_unlocked_after_run(make_session, run_to_end, straight_level):
    session = make_session(straight_level, {'o1': [(4, 2)]})
    session.start_simulation()
    run_to_end(session)
    assert session.start_path('o1').ok


def test_undo_count_reaches_completion(make_session, run_to_end, straight_level):
    session = make_session(straight_level, {'o1': [(3, 2), (1, 2), (4, 2)]})
    assert session.undo_count == 1
    session.start_simulation()
    run_to_end(session)
    assert session.last_completion.undo_count == 1
    assert session.score().undo_points == 20


def test_tick_without_run(session):
    assert session.tick(16) is None
    assert session.snapshot() is None
