"""Command base classes for svm-dbg."""

from __future__ import annotations

import argparse
from dataclasses import dataclass, field
from typing import List, Optional, Sequence

from svmdbg import DebuggerView

from ..context import DebuggerContext
from ..output import emit_result, summarise_view


@dataclass
class Command:
    """Abstract command description."""

    name: str
    description: str
    aliases: Sequence[str] = field(default_factory=tuple)

    def run(self, ctx: DebuggerContext, argv: List[str]) -> int:
        raise NotImplementedError("Command must implement run()")

    def format_help(self) -> str:
        names = ", ".join(self.aliases)
        suffix = f" (aliases: {names})" if names else ""
        return f"{self.name:<12} {self.description}{suffix}"

    def new_parser(self) -> argparse.ArgumentParser:
        return argparse.ArgumentParser(prog=self.name, add_help=False)

    @staticmethod
    def parse(parser: argparse.ArgumentParser, argv: List[str]) -> Optional[argparse.Namespace]:
        """Parse *argv*; argparse prints usage itself, so None means bad usage."""
        try:
            return parser.parse_args(argv)
        except SystemExit:
            return None

    @staticmethod
    def report(ctx: DebuggerContext, view: DebuggerView, *, action: str) -> None:
        emit_result(ctx, message=f"{action}: {summarise_view(view)}", data={"result": action, "view": view.to_dict()})
