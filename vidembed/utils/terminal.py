"""Terminal Utilities Module."""

import os
import sys
from functools import lru_cache

import colorama

__all__ = ["supports_color"]


@lru_cache(maxsize=1)
def supports_color() -> bool:
    """Check if the console log handler should emit ANSI color codes.

    ``NO_COLOR`` always disables colors and ``FORCE_COLOR`` always enables
    them. Otherwise colors are only used when stdout is an interactive
    terminal; on Windows the console must additionally understand VT codes.

    Returns:
        bool: True if the terminal supports color, False otherwise
    """
    if os.environ.get("NO_COLOR"):
        return False
    if os.environ.get("FORCE_COLOR"):
        return True

    if not (hasattr(sys.stdout, "isatty") and sys.stdout.isatty()):
        return False

    if sys.platform == "win32":
        return (
            getattr(colorama, "fixed_windows_console", False)
            or "ANSICON" in os.environ
            or "WT_SESSION" in os.environ  # Windows Terminal
            or os.environ.get("TERM_PROGRAM") == "vscode"
        )

    return os.environ.get("TERM") != "dumb"
