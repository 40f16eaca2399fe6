"""
svm-dbg CLI package.

Interactive front end for the ``svmdbg`` step debugger.  Use
``python -m svm_dbg`` or the ``svm-dbg`` console script to launch it.
"""

from __future__ import annotations

from .cli import main

__all__ = ["main"]
__version__ = "0.1.0"
