"""Terminal colors for error messages raised by the engine.

ANSI colors are used only when stdout is a TTY, unless overridden with the
NO_COLOR / FORCE_COLOR environment variables. Inline diagnostics written
into rendered output never use this module.
"""

from __future__ import annotations

import os
import re
import sys
from typing import Literal

_COLORS = {
    "reset": "\033[0m",
    "bold": "\033[1m",
    "dim": "\033[2m",
    "yellow": "\033[33m",
    "cyan": "\033[36m",
    "green": "\033[32m",
    "bright_red": "\033[91m",
}

ColorName = Literal["reset", "bold", "dim", "yellow", "cyan", "green", "bright_red"]

_ANSI_ESCAPE = re.compile(r"\x1B(?:[@-Z\\-_]|\[[0-?]*[ -/]*[@-~])")


def _should_use_colors() -> bool:
    """Decide once per process whether to emit ANSI codes.

    FORCE_COLOR wins over NO_COLOR (https://no-color.org/); otherwise
    colors follow ``sys.stdout.isatty()``.
    """
    if os.environ.get("FORCE_COLOR"):
        return True
    if os.environ.get("NO_COLOR"):
        return False
    return sys.stdout.isatty()


_USE_COLORS = _should_use_colors()


def colorize(text: str, *colors: ColorName) -> str:
    """Wrap text in the given ANSI colors, or return it unchanged.

    Example:
        >>> colorize("Error", "bright_red", "bold")
        '\033[91m\033[1mError\033[0m'  # if colors supported
    """
    if not _USE_COLORS or not colors:
        return text
    prefix = "".join(_COLORS.get(color, "") for color in colors)
    if not prefix:
        return text
    return f"{prefix}{text}{_COLORS['reset']}"


def strip_colors(text: str) -> str:
    """Remove ANSI color codes from text."""
    return _ANSI_ESCAPE.sub("", text)


def error_code(text: str) -> str:
    return colorize(text, "bright_red", "bold")


def location(text: str) -> str:
    return colorize(text, "cyan")


def line_number(text: str) -> str:
    return colorize(text, "yellow")


def error_line(text: str) -> str:
    return colorize(text, "bright_red")


def hint(text: str) -> str:
    return colorize(text, "green")


def dim_text(text: str) -> str:
    return colorize(text, "dim")


def format_error_header(code: str | None, message: str) -> str:
    """Prefix a message with its colored error code, if any."""
    if code:
        return f"{error_code(code)}: {message}"
    return message


def format_source_line(lineno: int, content: str, is_error: bool = False) -> str:
    """Format one numbered source line; the error line gets a '>' marker.

    Example:
        >>> format_source_line(42, "<% root.title %>", is_error=True)
        '\033[33m> 42\033[0m | \033[91m<% root.title %>\033[0m'
    """
    marker = ">" if is_error else " "
    num_colored = line_number(f"{marker}{lineno:>3}")
    content_colored = error_line(content) if is_error else dim_text(content)
    return f"{num_colored} | {content_colored}"
