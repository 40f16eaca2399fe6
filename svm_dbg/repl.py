"""Interactive REPL for svm-dbg."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import List, Optional

from prompt_toolkit import PromptSession
from prompt_toolkit.history import FileHistory, InMemoryHistory
from prompt_toolkit.patch_stdout import patch_stdout

from svmdbg import DebuggerView, RunState

from .commands import CommandRegistry
from .completion import DebuggerCompleter
from .context import DebuggerContext
from .output import summarise_view
from .parser import split_command

LOGGER = logging.getLogger("svm_dbg.repl")


class ProgressPrinter:
    """Prints auto-play progress as the controller publishes views.

    Only views produced while auto-play is active are printed; manual
    commands already report their own results.
    """

    def __init__(self) -> None:
        self._last_state: Optional[RunState] = None
        self._last_steps = 0
        self._last_output = 0

    def __call__(self, view: DebuggerView) -> None:
        previous = self._last_state
        if previous is RunState.RUNNING:
            if view.run_state is RunState.RUNNING and view.steps_executed != self._last_steps:
                print(f"  tick: {summarise_view(view)}")
                self._print_new_output(view)
            elif view.run_state.terminal:
                self._print_new_output(view)
                print(f"Program {view.run_state.value}: {summarise_view(view)}")
        self._last_state = view.run_state
        self._last_steps = view.steps_executed
        self._last_output = len(view.output)

    def _print_new_output(self, view: DebuggerView) -> None:
        for line in view.output[self._last_output:]:
            print(f"  output: {line}")


class DebuggerREPL:
    """prompt_toolkit REPL with file-backed history and completion."""

    def __init__(
        self,
        ctx: DebuggerContext,
        registry: CommandRegistry,
        *,
        history_path: Optional[str] = None,
    ) -> None:
        self.ctx = ctx
        self.registry = registry
        self.history_path = history_path
        self.progress = ProgressPrinter()

    def run(self) -> int:
        session = PromptSession(
            "(svm) ",
            history=self._build_history(),
            completer=DebuggerCompleter(self.ctx, self.registry),
            complete_while_typing=True,
        )
        self.ctx.watch_progress(self.progress)
        buffer: List[str] = []
        try:
            while True:
                try:
                    with patch_stdout():
                        line = session.prompt()
                except (EOFError, KeyboardInterrupt):
                    print()
                    return 0
                if self._handle_multiline(buffer, line):
                    continue
                payload = " ".join(buffer) if buffer else line
                buffer.clear()
                self.dispatch(payload)
        finally:
            self.ctx.close()

    def _build_history(self):
        if not self.history_path:
            return InMemoryHistory()
        path = Path(self.history_path).expanduser()
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            path.touch(exist_ok=True)
        except OSError as exc:
            LOGGER.warning("history file %s unavailable (%s); using in-memory history", path, exc)
            return InMemoryHistory()
        return FileHistory(str(path))

    def dispatch(self, line: str) -> Optional[int]:
        stripped = line.strip()
        if not stripped:
            return None
        argv = split_command(stripped)
        if not argv:
            return None
        cmd_name, *cmd_args = argv
        if cmd_name.startswith("#parse-error"):
            print(f"Parse error: {cmd_args[-1] if cmd_args else cmd_name}")
            return 1
        cmd_name = self.ctx.resolve_alias(cmd_name)
        command = self.registry.get(cmd_name)
        if not command:
            print(f"Unknown command: {cmd_name}")
            return 1
        try:
            return command.run(self.ctx, cmd_args)
        except SystemExit:
            raise
        except Exception as exc:
            LOGGER.exception("command failed")
            print(f"Command '{cmd_name}' failed: {exc}")
            return 1

    @staticmethod
    def _handle_multiline(buffer: List[str], line: str) -> bool:
        stripped = line.rstrip()
        if stripped.endswith("\\"):
            buffer.append(stripped[:-1])
            return True
        if buffer:
            buffer.append(stripped)
        return False
