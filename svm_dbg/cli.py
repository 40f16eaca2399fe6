"""svm-dbg CLI entry point."""

from __future__ import annotations

import argparse
import logging
import os
import sys
from pathlib import Path
from typing import List

from svmdbg import MalformedProgram, load_program_file, run_program
from svmdbg.timer import DEFAULT_SPEED, resolve_speed

from .commands import CommandRegistry, build_registry
from .context import DebuggerContext
from .output import emit_error
from .parser import split_command
from .repl import DebuggerREPL

LOG = logging.getLogger("svm_dbg.cli")


def _configure_logging(level: str) -> None:
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.WARNING),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def build_arg_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Stack VM step debugger")
    parser.add_argument("--program", type=Path, help="Bytecode JSON file to load at startup")
    parser.add_argument("--speed", default=DEFAULT_SPEED, help="Auto-play speed: slow, normal, fast or milliseconds")
    parser.add_argument("--json", action="store_true", help="Emit JSON output when supported")
    parser.add_argument(
        "--log-level",
        default=os.environ.get("SVM_DBG_LOG", "WARNING"),
        help="Logging level (default WARNING)",
    )
    mode = parser.add_mutually_exclusive_group()
    mode.add_argument(
        "-c",
        "--command",
        help="Execute a single command non-interactively (quote the command string)",
    )
    mode.add_argument("--script", type=Path, help="Execute commands from a file, one per line")
    mode.add_argument("--run", action="store_true", help="Run --program to completion without the debugger")
    parser.add_argument("--trace", action="store_true", help="With --run, print each executed instruction")
    parser.add_argument(
        "--history",
        type=Path,
        default=Path(os.environ.get("SVM_DBG_HISTORY", str(Path.home() / ".svm-dbg-history"))),
        help="Path to command history file",
    )
    return parser


def main(argv: List[str] | None = None) -> int:
    parser = build_arg_parser()
    args = parser.parse_args(argv)
    _configure_logging(args.log_level)
    if args.run:
        if args.program is None:
            parser.error("--run requires --program")
        return _run_headless(args.program, trace=args.trace)
    try:
        resolve_speed(args.speed)
    except ValueError as exc:
        parser.error(str(exc))
    ctx = DebuggerContext(json_output=args.json, speed=args.speed)
    registry = build_registry()
    try:
        if args.program is not None:
            rc = _run_single_command(ctx, registry, ["load", str(args.program)])
            if rc:
                return rc
        if args.command:
            return _run_single_command(ctx, registry, split_command(args.command))
        if args.script:
            return _run_script(ctx, registry, args.script)
        repl = DebuggerREPL(ctx, registry, history_path=str(args.history))
        try:
            return repl.run()
        except KeyboardInterrupt:
            print()
            return 0
    except SystemExit as exc:
        return int(exc.code or 0)
    finally:
        ctx.close()


def _run_headless(path: Path, *, trace: bool) -> int:
    try:
        program = load_program_file(path)
    except FileNotFoundError:
        print(f"error: no such file: {path}")
        return 1
    except MalformedProgram as exc:
        print(f"error: malformed program: {exc}")
        return 1
    report = run_program(program, trace=trace, on_trace=print if trace else None)
    for line in report.output:
        print(line)
    if report.fault is not None:
        print(f"error: {report.fault}", file=sys.stderr)
        return 1
    if not report.ok:
        print(f"error: program did not halt ({report.run_state.value})", file=sys.stderr)
        return 1
    return 0


def _run_single_command(ctx: DebuggerContext, registry: CommandRegistry, argv: List[str]) -> int:
    if not argv:
        return 0
    cmd_name, *cmd_args = argv
    if cmd_name.startswith("#parse-error"):
        emit_error(ctx, message=f"parse error: {' '.join(cmd_args)}")
        return 1
    cmd_name = ctx.resolve_alias(cmd_name)
    command = registry.get(cmd_name)
    if not command:
        emit_error(ctx, message=f"unknown command: {cmd_name}")
        return 1
    try:
        return command.run(ctx, cmd_args)
    except SystemExit as exc:
        return int(exc.code or 0)
    except Exception as exc:
        LOG.exception("command failed")
        emit_error(ctx, message=f"command '{cmd_name}' failed: {exc}")
        return 1


def _run_script(ctx: DebuggerContext, registry: CommandRegistry, path: Path) -> int:
    """Run each non-blank, non-comment line; stop at the first failure."""
    try:
        lines = path.read_text(encoding="utf-8").splitlines()
    except OSError as exc:
        emit_error(ctx, message=f"cannot read script {path}: {exc.strerror or exc}")
        return 1
    for lineno, raw in enumerate(lines, start=1):
        line = raw.strip()
        if not line or line.startswith("#"):
            continue
        argv = split_command(line)
        command = registry.get(ctx.resolve_alias(argv[0])) if argv else None
        rc = _run_single_command(ctx, registry, argv)
        if command is not None and command.name == "exit":
            return rc
        if rc:
            LOG.info("script %s stopped at line %d (rc=%d)", path, lineno, rc)
            return rc
    return 0


if __name__ == "__main__":  # pragma: no cover
    sys.exit(main())
