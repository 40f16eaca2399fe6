"""Program model and load-time validation.

Bytecode arrives from the external compiler as JSON-like data, one mapping per
instruction::

    {"index": 0, "opcode": "LOAD_CONST", "operand": 2}
    {"index": 3, "opcode": "STORE_VAR", "variable": "x"}
    {"index": 6, "opcode": "HALT"}

Everything is validated once, in :func:`load_program`; the interpreter never
sees an instruction whose operand shape does not match its opcode.
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Iterable, Iterator, Mapping, Optional, Tuple, Union

from .errors import MalformedProgram
from .opcodes import Opcode, OperandKind

_KNOWN_KEYS = {"index", "opcode", "operand", "variable"}


@dataclass(frozen=True)
class Instruction:
    opcode: Opcode
    operand: Optional[int] = None
    variable: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        payload: Dict[str, Any] = {"opcode": self.opcode.value}
        if self.operand is not None:
            payload["operand"] = self.operand
        if self.variable is not None:
            payload["variable"] = self.variable
        return payload

    def __str__(self) -> str:
        return format_instruction(self)


@dataclass(frozen=True)
class Program:
    """Immutable, address-indexed instruction sequence."""

    instructions: Tuple[Instruction, ...] = ()

    def __len__(self) -> int:
        return len(self.instructions)

    def __getitem__(self, address: int) -> Instruction:
        return self.instructions[address]

    def __iter__(self) -> Iterator[Instruction]:
        return iter(self.instructions)

    def to_list(self) -> list[Dict[str, Any]]:
        listing = []
        for index, instr in enumerate(self.instructions):
            entry = {"index": index}
            entry.update(instr.to_dict())
            listing.append(entry)
        return listing


RawInstruction = Union[Instruction, Mapping[str, Any]]


def _is_int(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def validate_instruction(raw: RawInstruction, address: int) -> Instruction:
    """Check one raw instruction against its opcode's operand shape."""

    if isinstance(raw, Instruction):
        raw = raw.to_dict()
    if not isinstance(raw, Mapping):
        raise MalformedProgram(f"expected an object, got {type(raw).__name__}", address=address)
    unknown = set(raw) - _KNOWN_KEYS
    if unknown:
        raise MalformedProgram(f"unexpected field(s) {sorted(unknown)}", address=address)
    if "index" in raw and raw["index"] != address:
        raise MalformedProgram(f"index {raw['index']!r} does not match position", address=address)
    if "opcode" not in raw:
        raise MalformedProgram("missing opcode", address=address)
    try:
        opcode = Opcode.from_any(raw["opcode"])
    except ValueError:
        raise MalformedProgram(f"unknown opcode {raw['opcode']!r}", address=address) from None

    operand = raw.get("operand")
    variable = raw.get("variable")
    kind = opcode.operand_kind
    if kind is OperandKind.INT:
        if variable is not None:
            raise MalformedProgram(f"{opcode.value} takes no variable", address=address)
        if not _is_int(operand):
            raise MalformedProgram(f"{opcode.value} requires an integer operand", address=address)
    elif kind is OperandKind.NAME:
        if operand is not None:
            raise MalformedProgram(f"{opcode.value} takes no integer operand", address=address)
        if not isinstance(variable, str) or not variable:
            raise MalformedProgram(f"{opcode.value} requires a variable name", address=address)
    elif operand is not None or variable is not None:
        raise MalformedProgram(f"{opcode.value} takes no operand", address=address)
    return Instruction(opcode=opcode, operand=operand, variable=variable)


def load_program(raw: Union[Program, Iterable[RawInstruction]]) -> Program:
    """Validate a whole instruction sequence; raises MalformedProgram."""

    if isinstance(raw, Program):
        return raw
    if isinstance(raw, (str, bytes, Mapping)):
        raise MalformedProgram(f"expected a sequence of instructions, got {type(raw).__name__}")
    try:
        items = list(raw)
    except TypeError:
        raise MalformedProgram(f"expected a sequence of instructions, got {type(raw).__name__}") from None
    return Program(tuple(validate_instruction(item, address) for address, item in enumerate(items)))


def parse_program_json(text: str) -> Program:
    """Parse compiler output: a bare list or an object with a ``bytecode`` list."""

    try:
        payload = json.loads(text)
    except json.JSONDecodeError as exc:
        raise MalformedProgram(f"invalid JSON: {exc}") from exc
    if isinstance(payload, Mapping):
        if "bytecode" not in payload:
            raise MalformedProgram("JSON object has no 'bytecode' list")
        payload = payload["bytecode"]
    if not isinstance(payload, list):
        raise MalformedProgram("bytecode must be a JSON list")
    return load_program(payload)


def load_program_file(path: Union[str, Path]) -> Program:
    source = Path(path).expanduser()
    return parse_program_json(source.read_text(encoding="utf-8"))


def format_instruction(instr: Instruction) -> str:
    if instr.operand is not None:
        return f"{instr.opcode.value} {instr.operand}"
    if instr.variable is not None:
        return f"{instr.opcode.value} {instr.variable}"
    return instr.opcode.value


__all__ = [
    "Instruction",
    "Program",
    "format_instruction",
    "load_program",
    "load_program_file",
    "parse_program_json",
    "validate_instruction",
]
