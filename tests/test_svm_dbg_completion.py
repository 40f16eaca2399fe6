"""Tests for the svm-dbg prompt_toolkit completer."""

from __future__ import annotations

from prompt_toolkit.document import Document

from svm_dbg.commands import build_registry
from svm_dbg.completion import DebuggerCompleter
from svm_dbg.context import DebuggerContext


def _completions(completer, text):
    doc = Document(text=text, cursor_position=len(text))
    return {c.text for c in completer.get_completions(doc, None)}


def _completer(ctx=None):
    return DebuggerCompleter(ctx or DebuggerContext(), build_registry())


def test_command_name_completion():
    completer = _completer()
    assert {"step", "stop", "state", "speed", "s", "stepback"} <= _completions(completer, "s")
    assert _completions(completer, "lo") == {"load"}


def test_user_aliases_complete_as_commands():
    ctx = DebuggerContext()
    ctx.set_alias("go", "play")
    assert "go" in _completions(_completer(ctx), "g")


def test_speed_presets_complete():
    completer = _completer()
    assert _completions(completer, "speed ") == {"slow", "normal", "fast"}
    assert _completions(completer, "speed f") == {"fast"}
    assert _completions(completer, "speed fast ") == set()


def test_load_completes_paths(tmp_path, monkeypatch):
    (tmp_path / "prog.json").write_text("[]", encoding="utf-8")
    monkeypatch.chdir(tmp_path)
    # PathCompleter yields the remainder of the file name
    assert "og.json" in _completions(_completer(), "load pr")


def test_state_completes_variable_names():
    ctx = DebuggerContext()
    ctx.controller.load(
        [
            {"opcode": "LOAD_CONST", "operand": 1},
            {"opcode": "STORE_VAR", "variable": "total"},
            {"opcode": "LOAD_CONST", "operand": 2},
            {"opcode": "STORE_VAR", "variable": "count"},
        ]
    )
    for _ in range(4):
        ctx.controller.step()
    try:
        completer = _completer(ctx)
        assert _completions(completer, "info ") == {"count", "total"}
        assert _completions(completer, "state t") == {"total"}
    finally:
        ctx.close()


def test_unknown_command_offers_nothing():
    assert _completions(_completer(), "frob x") == set()
