"""Auto-play speed command."""

from __future__ import annotations

from typing import List

from svmdbg.timer import SPEED_PRESETS, speed_name

from .base import Command
from ..context import DebuggerContext
from ..output import emit_error, emit_result


class SpeedCommand(Command):
    def __init__(self) -> None:
        presets = "|".join(SPEED_PRESETS)
        super().__init__("speed", f"Show or set auto-play speed ({presets}|MS)")
        self._parser = self.new_parser()
        self._parser.add_argument("value", nargs="?", help="Preset name or interval in milliseconds")

    def run(self, ctx: DebuggerContext, argv: List[str]) -> int:
        args = self.parse(self._parser, argv)
        if args is None:
            return 1
        controller = ctx.controller
        if args.value is not None:
            try:
                controller.set_speed(args.value)
            except ValueError as exc:
                emit_error(ctx, message=str(exc))
                return 1
            ctx.speed = args.value
        interval = controller.speed_ms
        name = speed_name(interval)
        label = f"{interval} ms" + (f" ({name})" if name else "")
        emit_result(ctx, message=f"Speed: {label}", data={"speed_ms": interval, "preset": name})
        return 0
