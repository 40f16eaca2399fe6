"""Command registry for svm-dbg."""

from __future__ import annotations

from typing import Dict, Iterable, List, Optional

from .base import Command
from .control import (
    BackCommand,
    PauseCommand,
    PlayCommand,
    ResetCommand,
    StepCommand,
    StopCommand,
    WaitCommand,
)
from .inspect import OutputCommand, StateCommand
from .program import ListCommand, LoadCommand
from .shell import AliasCommand, ExitCommand, HelpCommand
from .speed import SpeedCommand


class CommandRegistry:
    """Stores the known commands and resolves their built-in aliases."""

    def __init__(self) -> None:
        self._commands: Dict[str, Command] = {}
        self._ordered: List[Command] = []

    def register(self, command: Command) -> None:
        self._ordered.append(command)
        self._commands[command.name] = command
        for alias in command.aliases:
            self._commands[alias] = command

    def get(self, name: str) -> Optional[Command]:
        return self._commands.get(name)

    def list_commands(self) -> Iterable[Command]:
        return self._ordered

    def names(self) -> List[str]:
        return sorted(self._commands)


def build_registry() -> CommandRegistry:
    registry = CommandRegistry()
    commands = [
        HelpCommand(),
        LoadCommand(),
        ListCommand(),
        StepCommand(),
        BackCommand(),
        PlayCommand(),
        PauseCommand(),
        StopCommand(),
        WaitCommand(),
        ResetCommand(),
        SpeedCommand(),
        StateCommand(),
        OutputCommand(),
        AliasCommand(),
        ExitCommand(),
    ]
    for command in commands:
        registry.register(command)
        bind = getattr(command, "bind", None)
        if callable(bind):
            bind(registry)
    return registry


__all__ = ["Command", "CommandRegistry", "build_registry"]
