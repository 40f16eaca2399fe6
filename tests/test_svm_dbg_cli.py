"""Tests for the svm-dbg command-line entry point."""

from __future__ import annotations

import json

import pytest

from svm_dbg import cli

PROGRAM = [
    {"opcode": "LOAD_CONST", "operand": 2},
    {"opcode": "LOAD_CONST", "operand": 3},
    {"opcode": "ADD"},
    {"opcode": "STORE_VAR", "variable": "x"},
    {"opcode": "LOAD_VAR", "variable": "x"},
    {"opcode": "PRINT"},
    {"opcode": "HALT"},
]


@pytest.fixture
def program_path(tmp_path):
    path = tmp_path / "prog.json"
    path.write_text(json.dumps(PROGRAM), encoding="utf-8")
    return path


def test_arg_parser_defaults(monkeypatch, tmp_path):
    monkeypatch.setenv("SVM_DBG_LOG", "DEBUG")
    monkeypatch.setenv("SVM_DBG_HISTORY", str(tmp_path / "hist"))
    args = cli.build_arg_parser().parse_args([])
    assert args.log_level == "DEBUG"
    assert args.history == tmp_path / "hist"
    assert args.speed == "normal"
    assert args.command is None
    assert not args.json


def test_single_command_with_program(program_path, capsys):
    rc = cli.main(["--program", str(program_path), "-c", "step 3"])
    assert rc == 0
    out = capsys.readouterr().out
    assert "Loaded 7 instruction(s)" in out
    assert "Stepped 3 instruction(s): paused pc=3 stack=[5]" in out


def test_single_command_json(program_path, capsys):
    rc = cli.main(["--json", "--program", str(program_path), "-c", "step 7"])
    assert rc == 0
    payloads = list(_json_objects(capsys.readouterr().out))
    assert payloads[0]["result"]["result"] == "loaded"
    final = payloads[-1]["result"]
    assert final["result"] == "stepped"
    assert final["view"]["run_state"] == "halted"
    assert final["view"]["output"] == ["5"]


def _json_objects(text):
    decoder = json.JSONDecoder()
    index = 0
    text = text.strip()
    while index < len(text):
        obj, end = decoder.raw_decode(text, index)
        yield obj
        index = end
        while index < len(text) and text[index].isspace():
            index += 1


def test_unknown_command_fails(capsys):
    assert cli.main(["-c", "frobnicate"]) == 1
    assert "unknown command: frobnicate" in capsys.readouterr().out


def test_bad_program_fails(tmp_path, capsys):
    bad = tmp_path / "bad.json"
    bad.write_text('[{"opcode": "ADD", "operand": 1}]', encoding="utf-8")
    assert cli.main(["--program", str(bad), "-c", "state"]) == 1
    assert "malformed program" in capsys.readouterr().out


def test_invalid_speed_is_a_usage_error(capsys):
    with pytest.raises(SystemExit) as excinfo:
        cli.main(["--speed", "warp", "-c", "state"])
    assert excinfo.value.code == 2


def test_script_runs_lines_and_stops_on_failure(program_path, tmp_path, capsys):
    script = tmp_path / "session.svm"
    script.write_text(
        "\n".join(
            [
                "# load and walk the program",
                f"load {program_path}",
                "",
                "step 5",
                "back",
                "state x",
                "step 99",
                "output",
            ]
        ),
        encoding="utf-8",
    )
    assert cli.main(["--script", str(script)]) == 0
    out = capsys.readouterr().out
    assert "Stepped back 1 instruction(s)" in out
    assert "x = 5" in out
    assert out.rstrip().endswith("5")

    failing = tmp_path / "failing.svm"
    failing.write_text(f"load {program_path}\nstate missing\nstep\n", encoding="utf-8")
    assert cli.main(["--script", str(failing)]) == 1
    assert "Stepped" not in capsys.readouterr().out


def test_script_exit_ends_early(program_path, tmp_path, capsys):
    script = tmp_path / "exit.svm"
    script.write_text(f"load {program_path}\nexit\nstep\n", encoding="utf-8")
    assert cli.main(["--script", str(script)]) == 0
    assert "Stepped" not in capsys.readouterr().out


def test_script_with_autoplay(program_path, tmp_path, capsys):
    script = tmp_path / "play.svm"
    script.write_text("speed 5\nplay\nwait 5\noutput\n", encoding="utf-8")
    assert cli.main(["--program", str(program_path), "--script", str(script)]) == 0
    out = capsys.readouterr().out
    assert "wait: halted" in out


def test_headless_run(program_path, capsys):
    assert cli.main(["--run", "--program", str(program_path)]) == 0
    assert capsys.readouterr().out.splitlines() == ["5"]


def test_headless_trace(program_path, capsys):
    assert cli.main(["--run", "--trace", "--program", str(program_path)]) == 0
    lines = capsys.readouterr().out.splitlines()
    assert lines[0] == "[0] LOAD_CONST 2 | Stack: []"
    assert lines[-1] == "5"


def test_headless_run_reports_fault(tmp_path, capsys):
    path = tmp_path / "div.json"
    path.write_text(
        json.dumps([{"opcode": "LOAD_CONST", "operand": 1}, {"opcode": "LOAD_CONST", "operand": 0}, {"opcode": "DIV"}]),
        encoding="utf-8",
    )
    assert cli.main(["--run", "--program", str(path)]) == 1
    assert "DivisionByZero at 2" in capsys.readouterr().err


def test_run_requires_program():
    with pytest.raises(SystemExit) as excinfo:
        cli.main(["--run"])
    assert excinfo.value.code == 2
