"""Execution control commands (step/back/play/pause/stop/reset)."""

from __future__ import annotations

import time
from typing import Any, Dict, List

from svmdbg import DebuggerError, NoProgramLoaded, RunState

from .base import Command
from ..context import DebuggerContext
from ..output import emit_error, emit_result, summarise_view
from ..parser import parse_count


class StepCommand(Command):
    def __init__(self) -> None:
        super().__init__("step", "Execute the next instruction(s)", aliases=("s", "next"))
        self._parser = self.new_parser()
        self._parser.add_argument("count", nargs="?", type=parse_count, default=1, help="Instruction count (default 1)")

    def run(self, ctx: DebuggerContext, argv: List[str]) -> int:
        args = self.parse(self._parser, argv)
        if args is None:
            return 1
        controller = ctx.controller
        steps: List[Dict[str, Any]] = []
        try:
            for _ in range(args.count):
                outcome = controller.step()
                if outcome is None:
                    break
                entry: Dict[str, Any] = {
                    "address": outcome.address,
                    "instruction": str(outcome.instruction) if outcome.instruction else None,
                    "run_state": outcome.run_state.value,
                }
                if outcome.output_line is not None:
                    entry["output"] = outcome.output_line
                if outcome.fault is not None:
                    entry["fault"] = outcome.fault.to_dict()
                steps.append(entry)
                if not ctx.json_output:
                    _print_step(entry)
                if outcome.run_state.terminal:
                    break
        except NoProgramLoaded as exc:
            emit_error(ctx, message=str(exc))
            return 1
        view = controller.view()
        if not steps:
            emit_result(
                ctx,
                message=f"Nothing to step ({view.run_state.value}); use back or reset",
                data={"result": "idle", "view": view.to_dict()},
            )
            return 0
        emit_result(
            ctx,
            message=f"Stepped {len(steps)} instruction(s): {summarise_view(view)}",
            data={"result": "stepped", "steps": steps, "view": view.to_dict()},
        )
        return 1 if view.fault is not None else 0


def _print_step(entry: Dict[str, Any]) -> None:
    instruction = entry["instruction"] or "(end of program)"
    print(f"  [{entry['address']}] {instruction}")
    if "output" in entry:
        print(f"  output: {entry['output']}")
    if "fault" in entry:
        fault = entry["fault"]
        print(f"  fault: {fault['kind']} at {fault['address']}: {fault['message']}")


class BackCommand(Command):
    def __init__(self) -> None:
        super().__init__("back", "Undo the last instruction(s)", aliases=("b", "stepback"))
        self._parser = self.new_parser()
        self._parser.add_argument("count", nargs="?", type=parse_count, default=1, help="Instruction count (default 1)")

    def run(self, ctx: DebuggerContext, argv: List[str]) -> int:
        args = self.parse(self._parser, argv)
        if args is None:
            return 1
        controller = ctx.controller
        undone: List[int] = []
        for _ in range(args.count):
            entry = controller.step_back()
            if entry is None:
                break
            undone.append(entry.instruction_address)
        view = controller.view()
        if not undone:
            emit_result(ctx, message="Nothing to undo", data={"result": "idle", "view": view.to_dict()})
            return 0
        emit_result(
            ctx,
            message=f"Stepped back {len(undone)} instruction(s): {summarise_view(view)}",
            data={"result": "stepped_back", "addresses": undone, "view": view.to_dict()},
        )
        return 0


class PlayCommand(Command):
    def __init__(self) -> None:
        super().__init__("play", "Start auto-play at the current speed", aliases=("run", "continue"))

    def run(self, ctx: DebuggerContext, argv: List[str]) -> int:
        try:
            view = ctx.controller.play()
        except NoProgramLoaded as exc:
            emit_error(ctx, message=str(exc))
            return 1
        self.report(ctx, view, action="play")
        return 0


class PauseCommand(Command):
    def __init__(self) -> None:
        super().__init__("pause", "Pause auto-play")

    def run(self, ctx: DebuggerContext, argv: List[str]) -> int:
        self.report(ctx, ctx.controller.pause(), action="pause")
        return 0


class StopCommand(Command):
    def __init__(self) -> None:
        super().__init__("stop", "Stop auto-play, keeping machine state")

    def run(self, ctx: DebuggerContext, argv: List[str]) -> int:
        self.report(ctx, ctx.controller.stop(), action="stop")
        return 0


class ResetCommand(Command):
    def __init__(self) -> None:
        super().__init__("reset", "Restart the loaded program from the beginning")

    def run(self, ctx: DebuggerContext, argv: List[str]) -> int:
        try:
            view = ctx.controller.reset()
        except DebuggerError as exc:
            emit_error(ctx, message=f"reset failed: {exc}")
            return 2
        self.report(ctx, view, action="reset")
        return 0


class WaitCommand(Command):
    """Block until auto-play leaves the running state (used by scripts)."""

    POLL_INTERVAL = 0.01

    def __init__(self) -> None:
        super().__init__("wait", "Wait for auto-play to pause, halt or fault")
        self._parser = self.new_parser()
        self._parser.add_argument("timeout", nargs="?", type=float, default=30.0, help="Seconds to wait (default 30)")

    def run(self, ctx: DebuggerContext, argv: List[str]) -> int:
        args = self.parse(self._parser, argv)
        if args is None:
            return 1
        controller = ctx.controller
        deadline = time.monotonic() + max(0.0, args.timeout)
        view = controller.view()
        while view.run_state is RunState.RUNNING and time.monotonic() < deadline:
            time.sleep(self.POLL_INTERVAL)
            view = controller.view()
        if view.run_state is RunState.RUNNING:
            emit_error(ctx, message=f"still running after {args.timeout:g}s", data={"view": view.to_dict()})
            return 1
        self.report(ctx, view, action="wait")
        return 1 if view.fault is not None else 0
