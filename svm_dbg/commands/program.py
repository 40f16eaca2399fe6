"""Program commands (load/list)."""

from __future__ import annotations

from typing import List

from svmdbg import MalformedProgram

from .base import Command
from ..context import DebuggerContext
from ..output import emit_error, emit_result, render_listing


class LoadCommand(Command):
    def __init__(self) -> None:
        super().__init__("load", "Load a JSON bytecode program")
        self._parser = self.new_parser()
        self._parser.add_argument("path", help="Bytecode JSON file")

    def run(self, ctx: DebuggerContext, argv: List[str]) -> int:
        args = self.parse(self._parser, argv)
        if args is None:
            return 1
        try:
            view = ctx.load_file(args.path)
        except FileNotFoundError:
            emit_error(ctx, message=f"no such file: {args.path}")
            return 1
        except MalformedProgram as exc:
            emit_error(ctx, message=f"malformed program: {exc}", data={"address": exc.address})
            return 1
        emit_result(
            ctx,
            message=f"Loaded {view.program_length} instruction(s) from {ctx.program_path}",
            data={"result": "loaded", "path": str(ctx.program_path), "view": view.to_dict()},
        )
        return 0


class ListCommand(Command):
    def __init__(self) -> None:
        super().__init__("list", "Show the program listing", aliases=("l", "disasm"))

    def run(self, ctx: DebuggerContext, argv: List[str]) -> int:
        program = ctx.program
        if program is None:
            emit_error(ctx, message="no program loaded")
            return 1
        view = ctx.view()
        if ctx.json_output:
            emit_result(
                ctx,
                message="listing",
                data={"program": program.to_list(), "program_counter": view.program_counter},
            )
        else:
            render_listing(program, view)
        return 0
