"""Output helpers for svm-dbg."""

from __future__ import annotations

import json
from typing import Any, Dict, Mapping, Optional

from svmdbg import DebuggerView, Program

from .context import DebuggerContext


def _json_dump(payload: Mapping[str, Any]) -> str:
    return json.dumps(payload, indent=2, sort_keys=True)


def emit_result(ctx: DebuggerContext, *, message: str, data: Optional[Mapping[str, Any]] = None) -> None:
    """Emit a successful command result."""
    if ctx.json_output:
        payload: Dict[str, Any] = {"status": "ok"}
        if data is not None:
            payload["result"] = data
        else:
            payload["message"] = message
        print(_json_dump(payload))
    else:
        print(message)


def emit_error(ctx: DebuggerContext, *, message: str, data: Optional[Mapping[str, Any]] = None) -> None:
    """Emit an error message respecting JSON mode."""
    payload: Dict[str, Any] = {"status": "error", "error": message}
    if data:
        payload["details"] = dict(data)
    if ctx.json_output:
        print(_json_dump(payload))
    else:
        print(f"error: {message}")


def format_pc(view: DebuggerView) -> str:
    if view.program_counter < 0:
        return "-"
    if view.program_counter >= view.program_length:
        return "end"
    return str(view.program_counter)


def summarise_view(view: DebuggerView) -> str:
    """One-line status such as ``paused pc=3 stack=[5] steps=3``."""
    stack = ", ".join(str(value) for value in view.stack)
    text = f"{view.run_state.value} pc={format_pc(view)} stack=[{stack}] steps={view.steps_executed}"
    if view.fault is not None:
        text += f" fault={view.fault}"
    return text


def render_view(view: DebuggerView) -> None:
    """Print the full machine state."""
    print(f"  state    : {view.run_state.value}")
    print(f"  pc       : {format_pc(view)} ({view.steps_executed} executed / {view.program_length} instructions)")
    print(f"  speed    : {view.speed_ms} ms")
    if view.stack:
        print("  stack    : (top first)")
        for depth, value in enumerate(reversed(view.stack)):
            marker = "->" if depth == 0 else "  "
            print(f"    {marker} {value}")
    else:
        print("  stack    : (empty)")
    if view.variables:
        print("  variables:")
        width = max(len(name) for name in view.variables)
        for name in sorted(view.variables):
            print(f"    {name:<{width}} = {view.variables[name]}")
    else:
        print("  variables: (none)")
    if view.last_output_line is not None:
        print(f"  output   : {view.last_output_line}")
    if view.fault is not None:
        print(f"  fault    : {view.fault}")


def render_listing(program: Program, view: DebuggerView) -> None:
    """Print the program with a marker on the next instruction."""
    if not len(program):
        print("  (empty program)")
        return
    current = max(view.program_counter, 0)
    for address, instr in enumerate(program):
        marker = "=>" if address == current else "  "
        print(f"  {marker} {address:4}  {instr}")


__all__ = [
    "emit_error",
    "emit_result",
    "format_pc",
    "render_listing",
    "render_view",
    "summarise_view",
]
