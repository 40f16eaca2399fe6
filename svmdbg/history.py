"""Execution history used for step-backward."""

from __future__ import annotations

from dataclasses import dataclass
from typing import List, Optional, Tuple

from .state import MachineState


@dataclass(frozen=True)
class HistoryEntry:
    instruction_address: int
    state_before: MachineState
    output_mark: int = 0


def _copy(entry: HistoryEntry) -> HistoryEntry:
    # recorded snapshots never leave the recorder; callers get clones
    return HistoryEntry(entry.instruction_address, entry.state_before.clone(), entry.output_mark)


class HistoryRecorder:
    """Stack of pre-instruction snapshots, newest last."""

    def __init__(self) -> None:
        self._entries: List[HistoryEntry] = []

    def __len__(self) -> int:
        return len(self._entries)

    def __bool__(self) -> bool:
        return bool(self._entries)

    def snapshot(self, state: MachineState, address: int, *, output_mark: int = 0) -> HistoryEntry:
        """Deep-copy *state* and record it as the state before *address* ran."""
        entry = HistoryEntry(instruction_address=address, state_before=state.clone(), output_mark=output_mark)
        self._entries.append(entry)
        return _copy(entry)

    def pop_last(self) -> Optional[HistoryEntry]:
        if not self._entries:
            return None
        return _copy(self._entries.pop())

    def peek_last(self) -> Optional[HistoryEntry]:
        return _copy(self._entries[-1]) if self._entries else None

    def clear(self) -> None:
        self._entries.clear()

    def entries(self) -> Tuple[HistoryEntry, ...]:
        return tuple(_copy(entry) for entry in self._entries)


__all__ = ["HistoryEntry", "HistoryRecorder"]
