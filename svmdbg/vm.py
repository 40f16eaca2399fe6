"""Headless execution helpers built on the run controller."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Callable, List, Mapping, Optional, Sequence

from .controller import RunController
from .program import Instruction, format_instruction
from .state import DebuggerView, FaultInfo, RunState

logger = logging.getLogger(__name__)

DEFAULT_STEP_LIMIT = 100_000


@dataclass
class RunReport:
    output: List[str] = field(default_factory=list)
    instructions_executed: int = 0
    run_state: RunState = RunState.STOPPED
    fault: Optional[FaultInfo] = None
    final_view: Optional[DebuggerView] = None
    trace: List[str] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return self.run_state is RunState.HALTED


def format_trace_line(address: int, instruction: Instruction, stack: Sequence[int], variables: Mapping[str, int]) -> str:
    """Render ``[pc] INSTR | Stack: [...] | Vars: {...}`` for one step."""
    line = f"[{address}] {format_instruction(instruction)} | Stack: [{', '.join(str(v) for v in stack)}]"
    if variables:
        pairs = ", ".join(f"{name}:{value}" for name, value in sorted(variables.items()))
        line += f" | Vars: {{{pairs}}}"
    return line


def run_program(
    program: Any,
    *,
    trace: bool = False,
    step_limit: Optional[int] = DEFAULT_STEP_LIMIT,
    on_trace: Optional[Callable[[str], None]] = None,
) -> RunReport:
    """Run *program* to Halted or Faulted without a scheduler.

    With ``trace`` enabled each executed instruction is recorded before it
    runs, against the stack and variables it sees.  ``step_limit`` bounds the
    number of steps; ``None`` removes the bound.
    """

    controller = RunController(program)
    report = RunReport()
    try:
        steps = 0
        while True:
            if step_limit is not None and steps >= step_limit:
                logger.warning("step limit %d reached", step_limit)
                break
            before = controller.view()
            outcome = controller.step()
            if outcome is None:
                break
            steps += 1
            if trace and outcome.instruction is not None:
                line = format_trace_line(outcome.address, outcome.instruction, before.stack, before.variables)
                report.trace.append(line)
                if on_trace is not None:
                    on_trace(line)
            if outcome.run_state.terminal:
                break
        view = controller.view()
    finally:
        controller.close()
    report.output = list(view.output)
    report.instructions_executed = view.steps_executed
    report.run_state = view.run_state
    report.fault = view.fault
    report.final_view = view
    return report


__all__ = ["DEFAULT_STEP_LIMIT", "RunReport", "format_trace_line", "run_program"]
