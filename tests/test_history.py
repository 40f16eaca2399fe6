"""Tests for the step-back history recorder."""

from __future__ import annotations

from svmdbg import HistoryRecorder, MachineState


def test_snapshot_is_a_deep_copy():
    recorder = HistoryRecorder()
    state = MachineState(program_counter=2, stack=[1, 2], variables={"x": 1})
    recorder.snapshot(state, 2, output_mark=1)
    state.stack.append(99)
    state.variables["x"] = 7
    entry = recorder.peek_last()
    assert entry is not None
    assert entry.instruction_address == 2
    assert entry.output_mark == 1
    assert entry.state_before.stack == [1, 2]
    assert entry.state_before.variables == {"x": 1}


def test_pop_last_returns_newest_first_and_none_when_empty():
    recorder = HistoryRecorder()
    assert not recorder
    assert recorder.pop_last() is None
    for address in range(3):
        recorder.snapshot(MachineState(program_counter=address - 1 if address == 0 else address), address)
    assert len(recorder) == 3
    assert [recorder.pop_last().instruction_address for _ in range(3)] == [2, 1, 0]
    assert recorder.pop_last() is None
    assert len(recorder) == 0


def test_popped_state_is_independent_of_recorder():
    recorder = HistoryRecorder()
    recorder.snapshot(MachineState(stack=[4]), 0)
    recorder.snapshot(MachineState(stack=[4, 5]), 1)
    popped = recorder.pop_last()
    popped.state_before.stack.clear()
    assert recorder.entries()[0].state_before.stack == [4]


def test_entries_oldest_first_and_clear():
    recorder = HistoryRecorder()
    recorder.snapshot(MachineState(), 0)
    recorder.snapshot(MachineState(program_counter=1), 1)
    entries = recorder.entries()
    assert isinstance(entries, tuple)
    assert [e.instruction_address for e in entries] == [0, 1]
    recorder.clear()
    assert len(recorder) == 0
    assert recorder.peek_last() is None


def test_handed_out_entries_never_alias_recorded_snapshots():
    recorder = HistoryRecorder()
    returned = recorder.snapshot(MachineState(stack=[1]), 0)
    returned.state_before.stack.append(2)
    recorder.peek_last().state_before.stack.append(3)
    recorder.entries()[0].state_before.variables["x"] = 4
    entry = recorder.pop_last()
    assert entry.state_before.stack == [1]
    assert entry.state_before.variables == {}
