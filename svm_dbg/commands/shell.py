"""Shell housekeeping commands (help/alias/exit)."""

from __future__ import annotations

from typing import TYPE_CHECKING, List, Optional

from .base import Command
from ..context import DebuggerContext
from ..output import emit_error, emit_result

if TYPE_CHECKING:  # pragma: no cover
    from . import CommandRegistry


class HelpCommand(Command):
    def __init__(self) -> None:
        super().__init__("help", "Show available commands", aliases=("?",))
        self._registry: Optional["CommandRegistry"] = None
        self._parser = self.new_parser()
        self._parser.add_argument("command", nargs="?", help="Command to describe")

    def bind(self, registry: "CommandRegistry") -> None:
        self._registry = registry

    def run(self, ctx: DebuggerContext, argv: List[str]) -> int:
        registry = self._registry
        if not registry:
            return 1
        args = self.parse(self._parser, argv)
        if args is None:
            return 1
        if args.command:
            command = registry.get(ctx.resolve_alias(args.command))
            if command is None:
                emit_error(ctx, message=f"unknown command: {args.command}")
                return 1
            print(command.format_help())
            return 0
        for command in registry.list_commands():
            print(command.format_help())
        return 0


class AliasCommand(Command):
    def __init__(self) -> None:
        super().__init__("alias", "Manage command aliases")
        self._parser = self.new_parser()
        self._parser.add_argument("name", nargs="?", help="Alias name")
        self._parser.add_argument("command", nargs="?", help="Target command")
        self._parser.add_argument("--clear", action="store_true", help="Clear all aliases")

    def run(self, ctx: DebuggerContext, argv: List[str]) -> int:
        args = self.parse(self._parser, argv)
        if args is None:
            return 1
        if args.clear:
            ctx.aliases.clear()
            emit_result(ctx, message="Aliases cleared", data={"aliases": {}})
            return 0
        if args.name and args.command:
            ctx.set_alias(args.name, args.command)
            emit_result(ctx, message=f"{args.name} -> {args.command}", data={"aliases": ctx.list_aliases()})
            return 0
        if args.name:
            emit_error(ctx, message="alias needs a target command")
            return 1
        aliases = ctx.list_aliases()
        if ctx.json_output:
            emit_result(ctx, message="aliases", data={"aliases": aliases})
        elif not aliases:
            print("No aliases defined")
        else:
            for alias, command in sorted(aliases.items()):
                print(f"  {alias}={command}")
        return 0


class ExitCommand(Command):
    def __init__(self) -> None:
        super().__init__("exit", "Exit the debugger", aliases=("quit", "q"))

    def run(self, ctx: DebuggerContext, argv: List[str]) -> int:
        ctx.close()
        raise SystemExit(0)
