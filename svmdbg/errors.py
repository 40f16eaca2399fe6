"""Exception types raised by the svmdbg core."""

from __future__ import annotations

from enum import Enum
from typing import Optional


class FaultKind(Enum):
    STACK_UNDERFLOW = "StackUnderflow"
    DIVISION_BY_ZERO = "DivisionByZero"
    UNDEFINED_VARIABLE = "UndefinedVariable"
    MALFORMED_PROGRAM = "MalformedProgram"


class DebuggerError(RuntimeError):
    """Base class for every error raised by the debugger core."""


class MalformedProgram(DebuggerError):
    """Raised at load time when program data does not fit the instruction set."""

    kind = FaultKind.MALFORMED_PROGRAM

    def __init__(self, message: str, *, address: Optional[int] = None) -> None:
        self.address = address
        prefix = f"instruction {address}: " if address is not None else ""
        super().__init__(prefix + message)


class RuntimeFault(DebuggerError):
    """Fatal fault raised while executing one instruction."""

    kind: FaultKind

    def __init__(self, message: str, *, address: int, variable: Optional[str] = None) -> None:
        self.address = address
        self.variable = variable
        self.reason = message
        super().__init__(f"{self.kind.value} at {address}: {message}")


class StackUnderflow(RuntimeFault):
    kind = FaultKind.STACK_UNDERFLOW

    def __init__(self, *, address: int, needed: int, available: int) -> None:
        self.needed = needed
        self.available = available
        super().__init__(f"needs {needed} value(s), stack holds {available}", address=address)


class DivisionByZero(RuntimeFault):
    kind = FaultKind.DIVISION_BY_ZERO

    def __init__(self, *, address: int) -> None:
        super().__init__("division by zero", address=address)


class UndefinedVariable(RuntimeFault):
    kind = FaultKind.UNDEFINED_VARIABLE

    def __init__(self, name: str, *, address: int) -> None:
        super().__init__(f"variable '{name}' not defined", address=address, variable=name)


class NoProgramLoaded(DebuggerError):
    """Raised when execution is requested before any program was loaded."""


class ControllerClosedError(DebuggerError):
    """Raised when a disposed RunController is used again."""


__all__ = [
    "ControllerClosedError",
    "DebuggerError",
    "DivisionByZero",
    "FaultKind",
    "MalformedProgram",
    "NoProgramLoaded",
    "RuntimeFault",
    "StackUnderflow",
    "UndefinedVariable",
]
