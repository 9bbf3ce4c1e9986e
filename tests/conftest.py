"""Shared fixtures for the Light Cycle test suite."""

import pytest

from light_cycle.config import SimulationConfig, parse_level
from light_cycle.model.session import PuzzleSession


@pytest.fixture
def sim_config():
    return SimulationConfig()


@pytest.fixture
def make_session(sim_config):
    """Build a session for a raw level and trace the given waypoints per outlet."""
    def _make(level_raw, waypoints=None, policy=None):
        session = PuzzleSession(parse_level(level_raw), sim_config)
        for outlet_id, points in (waypoints or {}).items():
            result = session.trace(outlet_id, points, policy)
            assert result.ok, result.message
        return session
    return _make


@pytest.fixture
def run_to_end():
    """Tick a started session until its run is decided; returns every state."""
    def _run(session, tick_ms=50.0, limit_ms=60000.0):
        states = []
        elapsed = 0.0
        while session.engine.is_running and elapsed < limit_ms:
            states.append(session.tick(tick_ms))
            elapsed += tick_ms
        return states
    return _run


@pytest.fixture
def straight_level():
    return {
        'gridSize': 5,
        'par': 5,
        'undoBonus': 0,
        'outlets': [{'id': 'o1', 'x': 0, 'y': 2, 'color': 'cyan'}],
        'stations': [{'id': 's1', 'x': 4, 'y': 2, 'color': 'cyan'}],
    }


@pytest.fixture
def merge_level():
    return {
        'gridSize': 5,
        'par': 14,
        'outlets': [
            {'id': 'red', 'x': 0, 'y': 0, 'color': 'red'},
            {'id': 'blue', 'x': 0, 'y': 4, 'color': 'blue'},
        ],
        'stations': [{'id': 's1', 'x': 4, 'y': 2, 'color': 'purple'}],
    }


@pytest.fixture
def merge_waypoints():
    return {
        'red': [(3, 0), (3, 2), (4, 2)],
        'blue': [(3, 4), (3, 2), (4, 2)],
    }
