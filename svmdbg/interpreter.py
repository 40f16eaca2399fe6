"""Single-instruction interpreter for the stack VM.

``execute`` never mutates the state it is given: it works on a clone and
returns the clone in a :class:`StepResult`, so a faulting instruction leaves
the caller's stack exactly as it was.  The interpreter performs no I/O;
``PRINT`` output travels back to the caller in the result.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import List, Optional, Tuple

from .errors import DivisionByZero, StackUnderflow, UndefinedVariable
from .opcodes import Opcode
from .program import Instruction, format_instruction
from .state import MachineState

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class StepResult:
    state: MachineState
    output_line: Optional[str] = None
    halted: bool = False


def _pop_operands(stack: List[int], address: int) -> Tuple[int, int]:
    if len(stack) < 2:
        raise StackUnderflow(address=address, needed=2, available=len(stack))
    b = stack.pop()
    a = stack.pop()
    return a, b


def execute(state: MachineState, instruction: Instruction, address: int) -> StepResult:
    """Execute *instruction* (located at *address*) against *state*."""

    new_state = state.clone()
    stack = new_state.stack
    op = instruction.opcode
    output_line: Optional[str] = None

    if op is Opcode.HALT:
        new_state.program_counter = address
        return StepResult(state=new_state, halted=True)

    if op is Opcode.LOAD_CONST:
        stack.append(instruction.operand)
    elif op is Opcode.LOAD_VAR:
        name = instruction.variable
        if name not in new_state.variables:
            raise UndefinedVariable(name, address=address)
        stack.append(new_state.variables[name])
    elif op is Opcode.STORE_VAR:
        if not stack:
            raise StackUnderflow(address=address, needed=1, available=0)
        new_state.variables[instruction.variable] = stack.pop()
    elif op is Opcode.ADD:
        a, b = _pop_operands(stack, address)
        stack.append(a + b)
    elif op is Opcode.SUB:
        a, b = _pop_operands(stack, address)
        stack.append(a - b)
    elif op is Opcode.MUL:
        a, b = _pop_operands(stack, address)
        stack.append(a * b)
    elif op is Opcode.DIV:
        a, b = _pop_operands(stack, address)
        if b == 0:
            raise DivisionByZero(address=address)
        # floor division: -7 // 2 == -4
        stack.append(a // b)
    elif op is Opcode.PRINT:
        # observes the top value; an empty stack prints nothing
        if stack:
            output_line = str(stack[-1])
    else:  # pragma: no cover - Opcode is a closed enum
        raise AssertionError(f"unhandled opcode {op}")

    new_state.program_counter = address + 1
    logger.debug("[%d] %s -> stack=%s", address, format_instruction(instruction), stack)
    return StepResult(state=new_state, output_line=output_line)


__all__ = ["StepResult", "execute"]
