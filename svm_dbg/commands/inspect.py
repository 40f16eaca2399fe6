"""State inspection commands."""

from __future__ import annotations

from typing import List

from .base import Command
from ..context import DebuggerContext
from ..output import emit_error, emit_result, render_view


class StateCommand(Command):
    def __init__(self) -> None:
        super().__init__("state", "Show run state, stack and variables", aliases=("info", "view"))
        self._parser = self.new_parser()
        self._parser.add_argument("names", nargs="*", help="Only show these variables")

    def run(self, ctx: DebuggerContext, argv: List[str]) -> int:
        args = self.parse(self._parser, argv)
        if args is None:
            return 1
        view = ctx.view()
        if args.names:
            missing = [name for name in args.names if name not in view.variables]
            if missing:
                emit_error(ctx, message=f"variable not defined: {', '.join(missing)}")
                return 1
            selected = {name: view.variables[name] for name in args.names}
            if ctx.json_output:
                emit_result(ctx, message="variables", data={"variables": selected})
            else:
                for name, value in selected.items():
                    print(f"  {name} = {value}")
            return 0
        if ctx.json_output:
            emit_result(ctx, message="state", data={"view": view.to_dict()})
        else:
            render_view(view)
        return 0


class OutputCommand(Command):
    def __init__(self) -> None:
        super().__init__("output", "Show program output lines", aliases=("out",))

    def run(self, ctx: DebuggerContext, argv: List[str]) -> int:
        view = ctx.view()
        if ctx.json_output:
            emit_result(ctx, message="output", data={"output": list(view.output)})
            return 0
        if not view.output:
            print("(no output)")
            return 0
        for line in view.output:
            print(line)
        return 0
