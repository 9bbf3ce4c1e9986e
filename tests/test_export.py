"""Tests for the CSV run log."""

import csv

from light_cycle.export.csv_writer import RunLogWriter
from light_cycle.model.state import CSV_FIELDS, AgentSnapshot, SimulationState


def make_state(step, clock_ms, cells):
    agents = [AgentSnapshot(i, 'o1', x, y, 0.0, 'cyan', 'active')
              for i, (x, y) in enumerate(cells)]
    return SimulationState(step, clock_ms, agents, {'s1': 0})


def test_rows_follow_field_order():
    rows = make_state(3, 48.00049, [(1, 2)]).to_csv_rows()
    assert list(rows[0]) == list(CSV_FIELDS)
    assert rows[0]['clock_ms'] == 48.0
    assert rows[0]['x'] == 1


def test_log_created_on_first_write(tmp_path):
    out = tmp_path / 'nested' / 'run_log.csv'
    with RunLogWriter(out) as log:
        assert not out.exists()
        log.write(make_state(1, 16.0, [(0, 2), (0, 0)]))
        log.write(make_state(2, 32.0, [(1, 2)]))
    assert log.rows_written == 3

    with open(out, newline='') as f:
        reader = csv.DictReader(f)
        rows = list(reader)
    assert tuple(reader.fieldnames) == CSV_FIELDS
    assert [r['step'] for r in rows] == ['1', '1', '2']
    assert rows[2]['agent_id'] == '0'


def test_unused_log_leaves_no_file(tmp_path):
    out = tmp_path / 'run_log.csv'
    RunLogWriter(out).close()
    assert not out.exists()
