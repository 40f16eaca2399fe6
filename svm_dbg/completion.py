"""prompt_toolkit completer for svm-dbg."""

from __future__ import annotations

import shlex
from typing import Iterable, List

from prompt_toolkit.completion import Completer, Completion, PathCompleter
from prompt_toolkit.document import Document

from svmdbg.timer import SPEED_PRESETS

from .commands import CommandRegistry
from .context import DebuggerContext

PATH_COMMANDS = {"load"}
SPEED_COMMANDS = {"speed"}
VARIABLE_COMMANDS = {"state"}


def _normalise_tokens(text: str) -> List[str]:
    if not text:
        return []
    try:
        tokens = shlex.split(text, posix=True)
        trailing = text[-1].isspace()
    except ValueError:
        tokens = text.strip().split()
        trailing = text.endswith((" ", "\t"))
    if trailing:
        tokens.append("")
    return tokens


class DebuggerCompleter(Completer):
    """Completes command names, speed presets, file paths and variable names."""

    def __init__(self, ctx: DebuggerContext, registry: CommandRegistry) -> None:
        self.ctx = ctx
        self.registry = registry
        self._path = PathCompleter(expanduser=True)

    def get_completions(self, document: Document, complete_event) -> Iterable[Completion]:
        tokens = _normalise_tokens(document.text_before_cursor)
        if len(tokens) <= 1:
            yield from self._command_completions(tokens[0] if tokens else "")
            return
        prefix = tokens[-1]
        resolved = self.registry.get(self.ctx.resolve_alias(tokens[0]))
        command = resolved.name if resolved else ""
        if command in PATH_COMMANDS and len(tokens) == 2:
            sub_document = Document(prefix, cursor_position=len(prefix))
            yield from self._path.get_completions(sub_document, complete_event)
            return
        if command in SPEED_COMMANDS and len(tokens) == 2:
            candidates = list(SPEED_PRESETS)
        elif command in VARIABLE_COMMANDS:
            candidates = self.ctx.variable_names()
        else:
            return
        for entry in self._format_candidates(candidates, prefix):
            yield Completion(entry, start_position=-len(prefix))

    def _command_completions(self, prefix: str) -> Iterable[Completion]:
        names = list(self.registry.names()) + list(self.ctx.aliases)
        for name in self._format_candidates(names, prefix):
            yield Completion(name, start_position=-len(prefix))

    @staticmethod
    def _format_candidates(candidates: Iterable[str], prefix: str = "") -> List[str]:
        if not prefix:
            return sorted(dict.fromkeys(candidates))
        needle = prefix.lower()
        return sorted(dict.fromkeys(c for c in candidates if c.lower().startswith(needle)))
