"""
svmdbg - step debugger core for the teaching stack VM.

This package is the common surface for every debugger front-end (the
``svm-dbg`` CLI, tests, automation).  Each module is implemented in its own
file to keep responsibilities clear:

    opcodes.py      → closed opcode vocabulary and operand shapes
    program.py      → instruction/program values and load-time validation
    state.py        → machine state, run states, read-only views
    interpreter.py  → executes exactly one instruction
    history.py      → pre-instruction snapshots for step-back
    timer.py        → cancellable auto-play timer and speed presets
    events.py       → view publication to observers
    controller.py   → run-state machine driving all of the above
    vm.py           → headless run-to-completion and trace formatting
"""

from .errors import (  # noqa: F401
    ControllerClosedError,
    DebuggerError,
    DivisionByZero,
    FaultKind,
    MalformedProgram,
    NoProgramLoaded,
    RuntimeFault,
    StackUnderflow,
    UndefinedVariable,
)
from .opcodes import Opcode, OperandKind  # noqa: F401
from .program import (  # noqa: F401
    Instruction,
    Program,
    format_instruction,
    load_program,
    load_program_file,
    parse_program_json,
)
from .state import DebuggerView, FaultInfo, MachineState, RunState  # noqa: F401
from .interpreter import StepResult, execute  # noqa: F401
from .history import HistoryEntry, HistoryRecorder  # noqa: F401
from .timer import SPEED_PRESETS, AutoPlayTimer, resolve_speed  # noqa: F401
from .events import ViewBus, ViewSubscription  # noqa: F401
from .controller import RunController, StepOutcome  # noqa: F401
from .vm import RunReport, format_trace_line, run_program  # noqa: F401

__all__ = [
    "AutoPlayTimer",
    "ControllerClosedError",
    "DebuggerError",
    "DebuggerView",
    "DivisionByZero",
    "FaultInfo",
    "FaultKind",
    "HistoryEntry",
    "HistoryRecorder",
    "Instruction",
    "MachineState",
    "MalformedProgram",
    "NoProgramLoaded",
    "Opcode",
    "OperandKind",
    "Program",
    "RunController",
    "RunReport",
    "RunState",
    "RuntimeFault",
    "SPEED_PRESETS",
    "StackUnderflow",
    "StepOutcome",
    "StepResult",
    "UndefinedVariable",
    "ViewBus",
    "ViewSubscription",
    "execute",
    "format_instruction",
    "format_trace_line",
    "load_program",
    "load_program_file",
    "parse_program_json",
    "resolve_speed",
    "run_program",
]

__version__ = "0.1.0"
