"""Machine state, run states and the read-only debugger view."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import Any, Dict, List, Mapping, Optional, Tuple

from .errors import FaultKind, MalformedProgram, RuntimeFault

NOT_STARTED = -1


@dataclass
class MachineState:
    """Stack, variable bindings and program counter of one VM."""

    program_counter: int = NOT_STARTED
    stack: List[int] = field(default_factory=list)
    variables: Dict[str, int] = field(default_factory=dict)

    def clone(self) -> "MachineState":
        return MachineState(
            program_counter=self.program_counter,
            stack=list(self.stack),
            variables=dict(self.variables),
        )

    @property
    def next_address(self) -> int:
        """Address executed by the next step (-1 starts at 0)."""
        return max(self.program_counter, 0)


class RunState(Enum):
    STOPPED = "stopped"
    RUNNING = "running"
    PAUSED = "paused"
    HALTED = "halted"
    FAULTED = "faulted"

    @classmethod
    def from_any(cls, value: Any) -> "RunState":
        if isinstance(value, RunState):
            return value
        if isinstance(value, str):
            try:
                return cls(value.lower())
            except ValueError:
                pass
        raise ValueError(f"unknown_run_state:{value}")

    @property
    def terminal(self) -> bool:
        return self in (RunState.HALTED, RunState.FAULTED)


@dataclass(frozen=True)
class FaultInfo:
    kind: FaultKind
    address: Optional[int]
    message: str
    variable: Optional[str] = None

    @classmethod
    def from_exception(cls, exc: Exception) -> "FaultInfo":
        if isinstance(exc, RuntimeFault):
            return cls(kind=exc.kind, address=exc.address, message=exc.reason, variable=exc.variable)
        if isinstance(exc, MalformedProgram):
            return cls(kind=exc.kind, address=exc.address, message=str(exc))
        raise TypeError(f"not a debugger fault: {exc!r}")

    def to_dict(self) -> Dict[str, Any]:
        payload: Dict[str, Any] = {"kind": self.kind.value, "address": self.address, "message": self.message}
        if self.variable is not None:
            payload["variable"] = self.variable
        return payload

    def __str__(self) -> str:
        label = self.kind.value
        if self.variable is not None:
            label = f"{label}({self.variable})"
        if self.address is None:
            return f"{label}: {self.message}"
        return f"{label} at {self.address}: {self.message}"


@dataclass(frozen=True)
class DebuggerView:
    """Immutable snapshot handed to observers after every state change."""

    run_state: RunState
    program_counter: int
    stack: Tuple[int, ...] = ()
    variables: Mapping[str, int] = field(default_factory=lambda: MappingProxyType({}))
    last_output_line: Optional[str] = None
    output: Tuple[str, ...] = ()
    fault: Optional[FaultInfo] = None
    steps_executed: int = 0
    program_length: int = 0
    speed_ms: int = 0

    @classmethod
    def capture(
        cls,
        run_state: RunState,
        state: MachineState,
        *,
        output: Tuple[str, ...] = (),
        fault: Optional[FaultInfo] = None,
        steps_executed: int = 0,
        program_length: int = 0,
        speed_ms: int = 0,
    ) -> "DebuggerView":
        return cls(
            run_state=run_state,
            program_counter=state.program_counter,
            stack=tuple(state.stack),
            variables=MappingProxyType(dict(state.variables)),
            last_output_line=output[-1] if output else None,
            output=tuple(output),
            fault=fault,
            steps_executed=steps_executed,
            program_length=program_length,
            speed_ms=speed_ms,
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "run_state": self.run_state.value,
            "program_counter": self.program_counter,
            "stack": list(self.stack),
            "variables": dict(self.variables),
            "last_output_line": self.last_output_line,
            "output": list(self.output),
            "fault": self.fault.to_dict() if self.fault else None,
            "steps_executed": self.steps_executed,
            "program_length": self.program_length,
            "speed_ms": self.speed_ms,
        }


__all__ = ["DebuggerView", "FaultInfo", "MachineState", "NOT_STARTED", "RunState"]
