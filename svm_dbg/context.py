"""Debugger context shared by the CLI commands."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, Dict, List, Optional

from svmdbg import DebuggerView, Program, RunController, load_program_file

LOGGER = logging.getLogger("svm_dbg.context")


@dataclass
class DebuggerContext:
    """Holds shared CLI debugger state."""

    json_output: bool = False
    speed: str = "normal"
    aliases: Dict[str, str] = field(default_factory=dict)
    program_path: Optional[Path] = None
    _controller: Optional[RunController] = field(default=None, init=False, repr=False)
    _progress_token: Optional[int] = field(default=None, init=False, repr=False)

    @property
    def controller(self) -> RunController:
        """Create the RunController if needed."""
        if self._controller is None or self._controller.closed:
            self._controller = RunController(speed=self.speed)
        return self._controller

    @property
    def program(self) -> Optional[Program]:
        return self._controller.program if self._controller else None

    def view(self) -> DebuggerView:
        return self.controller.view()

    def load_file(self, path: str) -> DebuggerView:
        candidate = Path(path).expanduser()
        if not candidate.is_absolute():
            candidate = (Path.cwd() / candidate).resolve()
        program = load_program_file(candidate)
        view = self.controller.load(program)
        self.program_path = candidate
        return view

    def watch_progress(self, printer: Callable[[DebuggerView], None]) -> None:
        """Send every published view to *printer* (REPL only)."""
        if self._progress_token is not None:
            self.controller.unsubscribe(self._progress_token)
        self._progress_token = self.controller.subscribe(printer)

    def variable_names(self) -> List[str]:
        if self._controller is None:
            return []
        return sorted(self._controller.view().variables)

    def close(self) -> None:
        controller = self._controller
        if not controller:
            return
        try:
            controller.close()
        except Exception as exc:
            LOGGER.debug("controller close failed: %s", exc)
        self._controller = None
        self._progress_token = None

    def resolve_alias(self, name: str) -> str:
        return self.aliases.get(name, name)

    def set_alias(self, alias: str, command: str) -> None:
        if alias == command:
            self.aliases.pop(alias, None)
            return
        self.aliases[alias] = command

    def list_aliases(self) -> Dict[str, str]:
        return dict(self.aliases)
