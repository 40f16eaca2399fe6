#!/usr/bin/env python3
"""Opcode definitions for the stack VM.

Keeping the canonical vocabulary in a single module prevents drift between
the loader, the interpreter, the listing formatter and the CLI completer.
"""

from __future__ import annotations

from enum import Enum
from typing import Any, Dict, Tuple


class OperandKind(Enum):
    NONE = "none"
    INT = "int"
    NAME = "name"


class Opcode(Enum):
    LOAD_CONST = "LOAD_CONST"
    LOAD_VAR = "LOAD_VAR"
    STORE_VAR = "STORE_VAR"
    ADD = "ADD"
    SUB = "SUB"
    MUL = "MUL"
    DIV = "DIV"
    PRINT = "PRINT"
    HALT = "HALT"

    @classmethod
    def from_any(cls, value: Any) -> "Opcode":
        if isinstance(value, Opcode):
            return value
        if isinstance(value, str):
            found = _OPCODE_ALIASES.get(value.strip().upper())
            if found is not None:
                return found
        raise ValueError(f"unknown_opcode:{value!r}")

    @property
    def operand_kind(self) -> OperandKind:
        return OPERAND_KINDS[self]


_OPCODE_ALIASES: Dict[str, Opcode] = {op.value: op for op in Opcode}

# Ordered so listings and docs iterate in a stable order.
OPCODE_LIST: Tuple[Tuple[Opcode, OperandKind], ...] = (
    (Opcode.LOAD_CONST, OperandKind.INT),
    (Opcode.LOAD_VAR, OperandKind.NAME),
    (Opcode.STORE_VAR, OperandKind.NAME),
    (Opcode.ADD, OperandKind.NONE),
    (Opcode.SUB, OperandKind.NONE),
    (Opcode.MUL, OperandKind.NONE),
    (Opcode.DIV, OperandKind.NONE),
    (Opcode.PRINT, OperandKind.NONE),
    (Opcode.HALT, OperandKind.NONE),
)

OPERAND_KINDS: Dict[Opcode, OperandKind] = {op: kind for op, kind in OPCODE_LIST}
OPCODE_NAMES: Tuple[str, ...] = tuple(op.value for op, _ in OPCODE_LIST)

# Opcodes that pop two operands and push one result.
BINARY_OPCODES = frozenset({Opcode.ADD, Opcode.SUB, Opcode.MUL, Opcode.DIV})

__all__ = [
    "BINARY_OPCODES",
    "OPCODE_LIST",
    "OPCODE_NAMES",
    "OPERAND_KINDS",
    "Opcode",
    "OperandKind",
]
