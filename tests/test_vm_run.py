"""Tests for headless runs and trace formatting."""

from __future__ import annotations

from svmdbg import FaultKind, Instruction, Opcode, RunState, format_trace_line, run_program

PROGRAM = [
    {"index": 0, "opcode": "LOAD_CONST", "operand": 2},
    {"index": 1, "opcode": "LOAD_CONST", "operand": 3},
    {"index": 2, "opcode": "ADD"},
    {"index": 3, "opcode": "STORE_VAR", "variable": "x"},
    {"index": 4, "opcode": "LOAD_VAR", "variable": "x"},
    {"index": 5, "opcode": "PRINT"},
    {"index": 6, "opcode": "HALT"},
]


def test_run_program_reports_output_and_count():
    report = run_program(PROGRAM)
    assert report.ok
    assert report.output == ["5"]
    assert report.instructions_executed == 7
    assert report.run_state is RunState.HALTED
    assert report.fault is None
    assert report.trace == []
    assert dict(report.final_view.variables) == {"x": 5}


def test_run_program_trace_uses_state_before_each_instruction():
    lines = []
    report = run_program(PROGRAM, trace=True, on_trace=lines.append)
    assert report.trace == lines
    assert lines[0] == "[0] LOAD_CONST 2 | Stack: []"
    assert lines[2] == "[2] ADD | Stack: [2, 3]"
    assert lines[4] == "[4] LOAD_VAR x | Stack: [] | Vars: {x:5}"
    assert lines[-1] == "[6] HALT | Stack: [5] | Vars: {x:5}"


def test_run_program_stops_on_fault():
    report = run_program([{"opcode": "LOAD_CONST", "operand": 1}, {"opcode": "LOAD_CONST", "operand": 0}, {"opcode": "DIV"}])
    assert not report.ok
    assert report.run_state is RunState.FAULTED
    assert report.fault.kind is FaultKind.DIVISION_BY_ZERO
    assert report.instructions_executed == 2


def test_run_program_step_limit():
    program = [{"opcode": "PRINT"}] * 10
    report = run_program(program, step_limit=4)
    assert report.run_state is RunState.PAUSED
    assert report.instructions_executed == 4


def test_format_trace_line_sorts_variables():
    line = format_trace_line(3, Instruction(Opcode.MUL), (1, 2), {"b": 2, "a": 1})
    assert line == "[3] MUL | Stack: [1, 2] | Vars: {a:1, b:2}"
