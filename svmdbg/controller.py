"""Run controller: the debugger's run-state machine and auto-play driver.

States and transitions::

    Stopped --load()--> Stopped
    Stopped/Paused --step()--> Paused | Halted | Faulted
    Stopped/Paused --play()--> Running  (each tick == step(); ends on Halted/Faulted)
    Running --pause()--> Paused
    Running/Paused --stop()--> Stopped
    any --step_back()--> Paused         (only with non-empty history)
    any --set_speed()--> same state

Every public operation runs under one re-entrant lock, so an auto-play tick is
applied completely before the next tick or the next caller gets in.  Timers
are cancelled under the lock and joined after it is released; a cancelled
timer's pending tick sees it is no longer the current timer and does nothing.
"""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass
from typing import Any, Callable, FrozenSet, Iterable, List, Optional

from .errors import ControllerClosedError, MalformedProgram, NoProgramLoaded, RuntimeFault
from .events import ViewBus, ViewHandler, ViewSubscription
from .history import HistoryEntry, HistoryRecorder
from .interpreter import execute
from .program import Instruction, Program, format_instruction, load_program
from .state import DebuggerView, FaultInfo, MachineState, RunState
from .timer import DEFAULT_SPEED, AutoPlayTimer, TickCallback, resolve_speed

logger = logging.getLogger(__name__)

TimerFactory = Callable[[int, TickCallback], AutoPlayTimer]


@dataclass(frozen=True)
class StepOutcome:
    """What one forward step did.  ``instruction`` is None past the end."""

    address: int
    instruction: Optional[Instruction]
    run_state: RunState
    output_line: Optional[str] = None
    fault: Optional[FaultInfo] = None


class _OwnedLock:
    """Re-entrant lock that knows which thread holds it."""

    def __init__(self) -> None:
        self._lock = threading.RLock()
        self._owner: Optional[int] = None
        self._depth = 0

    def __enter__(self) -> "_OwnedLock":
        self._lock.acquire()
        self._owner = threading.get_ident()
        self._depth += 1
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self._depth -= 1
        if not self._depth:
            self._owner = None
        self._lock.release()

    def held_by_current_thread(self) -> bool:
        return self._owner == threading.get_ident()


class RunController:
    def __init__(
        self,
        program: Optional[Any] = None,
        *,
        speed: Any = DEFAULT_SPEED,
        timer_factory: Optional[TimerFactory] = None,
        view_bus: Optional[ViewBus] = None,
    ) -> None:
        self._lock = _OwnedLock()
        self._program: Optional[Program] = None
        self._state = MachineState()
        self._history = HistoryRecorder()
        self._output: List[str] = []
        self._run_state = RunState.STOPPED
        self._fault: Optional[FaultInfo] = None
        self._speed_ms = resolve_speed(speed)
        self._timer: Optional[AutoPlayTimer] = None
        self._timer_factory: TimerFactory = timer_factory or AutoPlayTimer
        self._closed = False
        self.views = view_bus if view_bus is not None else ViewBus()
        if program is not None:
            self.load(program)

    # ------------------------------------------------------------------
    # Read-only surface
    # ------------------------------------------------------------------
    @property
    def run_state(self) -> RunState:
        return self._run_state

    @property
    def program(self) -> Optional[Program]:
        return self._program

    @property
    def speed_ms(self) -> int:
        return self._speed_ms

    @property
    def closed(self) -> bool:
        return self._closed

    @property
    def history_length(self) -> int:
        return len(self._history)

    def history(self) -> tuple[HistoryEntry, ...]:
        with self._lock:
            return self._history.entries()

    def view(self) -> DebuggerView:
        with self._lock:
            return self._capture()

    def subscribe(self, handler: ViewHandler, *, states: Optional[Iterable[RunState]] = None) -> int:
        self._ensure_open()
        filt: Optional[FrozenSet[RunState]] = frozenset(states) if states is not None else None
        return self.views.subscribe(ViewSubscription(handler=handler, states=filt))

    def unsubscribe(self, token: int) -> None:
        self.views.unsubscribe(token)

    # ------------------------------------------------------------------
    # Program lifecycle
    # ------------------------------------------------------------------
    def load(self, program: Any) -> DebuggerView:
        """Validate and install *program*; a successful load ends in Stopped."""
        self._ensure_open()
        try:
            validated = load_program(program)
        except MalformedProgram as exc:
            logger.warning("rejected program: %s", exc)
            with self._lock:
                stale = self._detach_timer()
                # Halted and Faulted stay sticky; only live runs are forced to Stopped
                if self._run_state in (RunState.RUNNING, RunState.PAUSED):
                    self._set_state(RunState.STOPPED)
            self._join(stale)
            raise
        with self._lock:
            self._ensure_open()
            stale = self._detach_timer()
            self._program = validated
            self._reinitialise()
            view = self._publish()
        self._join(stale)
        logger.info("loaded program with %d instruction(s)", len(validated))
        return view

    def reset(self) -> DebuggerView:
        """Return to the start of the loaded program, discarding history."""
        with self._lock:
            self._ensure_open()
            stale = self._detach_timer()
            self._reinitialise()
            logger.info("reset")
            view = self._publish()
        self._join(stale)
        return view

    def close(self) -> None:
        with self._lock:
            if self._closed:
                return
            self._closed = True
            stale = self._detach_timer()
            if self._run_state is RunState.RUNNING:
                self._run_state = RunState.PAUSED
            self.views.clear()
        self._join(stale)
        logger.debug("controller closed")

    # ------------------------------------------------------------------
    # Execution control
    # ------------------------------------------------------------------
    def step(self) -> Optional[StepOutcome]:
        """Execute one instruction.  Returns None when Halted/Faulted."""
        with self._lock:
            self._ensure_open()
            self._require_program()
            if self._run_state.terminal:
                return None
            # a manual step while running pauses auto-play first
            stale = self._detach_timer()
            outcome = self._advance(RunState.PAUSED)
        self._join(stale)
        return outcome

    def play(self) -> DebuggerView:
        with self._lock:
            self._ensure_open()
            self._require_program()
            if self._run_state in (RunState.STOPPED, RunState.PAUSED):
                self._start_timer()
                self._run_state = RunState.RUNNING
                logger.debug("auto-play at %d ms", self._speed_ms)
                return self._publish()
            return self._capture()

    def pause(self) -> DebuggerView:
        with self._lock:
            self._ensure_open()
            if self._run_state is not RunState.RUNNING:
                return self._capture()
            stale = self._detach_timer()
            view = self._set_state(RunState.PAUSED)
        self._join(stale)
        return view

    def stop(self) -> DebuggerView:
        """Stop auto-play without touching machine state or history."""
        with self._lock:
            self._ensure_open()
            if self._run_state not in (RunState.RUNNING, RunState.PAUSED):
                return self._capture()
            stale = self._detach_timer()
            view = self._set_state(RunState.STOPPED)
        self._join(stale)
        return view

    def step_back(self) -> Optional[HistoryEntry]:
        """Undo the most recent instruction.  Returns the popped entry."""
        with self._lock:
            self._ensure_open()
            entry = self._history.pop_last()
            if entry is None:
                return None
            stale = self._detach_timer()
            self._state = entry.state_before.clone()
            del self._output[entry.output_mark :]
            self._fault = None
            logger.debug("stepped back over address %d", entry.instruction_address)
            self._set_state(RunState.PAUSED)
        self._join(stale)
        return entry

    def set_speed(self, speed: Any) -> DebuggerView:
        """Change the auto-play interval, restarting the timer if running."""
        interval = resolve_speed(speed)
        with self._lock:
            self._ensure_open()
            self._speed_ms = interval
            stale = None
            if self._run_state is RunState.RUNNING:
                stale = self._detach_timer()
                self._start_timer()
            view = self._publish()
        self._join(stale)
        return view

    # ------------------------------------------------------------------
    # Internals (lock held)
    # ------------------------------------------------------------------
    def _advance(self, continue_state: RunState) -> StepOutcome:
        program = self._program
        assert program is not None
        address = self._state.next_address
        if address >= len(program):
            self._state.program_counter = len(program)
            self._set_state(RunState.HALTED)
            return StepOutcome(address=address, instruction=None, run_state=RunState.HALTED)

        instruction = program[address]
        self._history.snapshot(self._state, address, output_mark=len(self._output))
        try:
            result = execute(self._state, instruction, address)
        except RuntimeFault as exc:
            # faulting instructions do not count as executed
            self._history.pop_last()
            self._state.program_counter = address
            self._fault = FaultInfo.from_exception(exc)
            logger.warning("fault at %d (%s): %s", address, format_instruction(instruction), self._fault)
            self._set_state(RunState.FAULTED)
            return StepOutcome(
                address=address, instruction=instruction, run_state=RunState.FAULTED, fault=self._fault
            )

        self._state = result.state
        if result.output_line is not None:
            self._output.append(result.output_line)
        if result.halted or self._state.program_counter >= len(program):
            next_state = RunState.HALTED
        else:
            next_state = continue_state
        self._set_state(next_state)
        return StepOutcome(
            address=address,
            instruction=instruction,
            run_state=next_state,
            output_line=result.output_line,
        )

    def _on_tick(self, timer: AutoPlayTimer) -> bool:
        with self._lock:
            if self._closed or timer is not self._timer or timer.cancelled:
                return False
            self._advance(RunState.RUNNING)
            if self._run_state is RunState.RUNNING:
                return True
            if self._timer is timer:
                self._timer = None
            timer.cancel()
            return False

    def _start_timer(self) -> None:
        timer = self._timer_factory(self._speed_ms, self._on_tick)
        self._timer = timer
        timer.start()

    def _detach_timer(self) -> Optional[AutoPlayTimer]:
        timer = self._timer
        self._timer = None
        if timer is not None:
            timer.cancel()
        return timer

    def _join(self, timer: Optional[AutoPlayTimer]) -> None:
        if timer is None:
            return
        # re-entered from a subscriber: the outer call still holds the lock and
        # the cancelled worker may be waiting on it
        if self._lock.held_by_current_thread():
            return
        timer.join()

    def _reinitialise(self) -> None:
        self._state = MachineState()
        self._history.clear()
        self._output = []
        self._fault = None
        self._run_state = RunState.STOPPED

    def _set_state(self, run_state: RunState) -> DebuggerView:
        self._run_state = run_state
        return self._publish()

    def _capture(self) -> DebuggerView:
        return DebuggerView.capture(
            self._run_state,
            self._state,
            output=tuple(self._output),
            fault=self._fault,
            steps_executed=len(self._history),
            program_length=len(self._program) if self._program is not None else 0,
            speed_ms=self._speed_ms,
        )

    def _publish(self) -> DebuggerView:
        view = self._capture()
        self.views.publish(view)
        return view

    def _require_program(self) -> None:
        if self._program is None:
            raise NoProgramLoaded("no program loaded")

    def _ensure_open(self) -> None:
        if self._closed:
            raise ControllerClosedError("controller has been closed")


__all__ = ["RunController", "StepOutcome", "TimerFactory"]
