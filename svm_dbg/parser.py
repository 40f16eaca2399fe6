"""Command-line tokenising helpers for svm-dbg."""

from __future__ import annotations

import shlex
from typing import List, Optional


def split_command(line: str) -> List[str]:
    """Split a command line into argv tokens; ``#`` starts a comment."""
    if not line:
        return []
    try:
        return shlex.split(line, comments=True, posix=True)
    except ValueError as exc:
        # Return the raw line as a single token so callers can raise a friendlier error.
        return [f"#parse-error:{exc}", line.strip()]


def parse_count(token: Optional[str], *, default: int = 1) -> int:
    """Parse a positive repeat count such as the ``3`` in ``step 3``."""
    if token is None:
        return default
    value = int(token, 0)
    if value < 1:
        raise ValueError(f"count must be at least 1, got {value}")
    return value
