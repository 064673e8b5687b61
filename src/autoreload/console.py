"""Console output — prefixed status lines and the startup banner.

Everything goes to stderr.  Detects ``NO_COLOR`` / ``TERM`` for safe
fallback to plain text.
"""

from __future__ import annotations

import os
import sys
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from autoreload.config import AutoreloadConfig


# ---------------------------------------------------------------------------
# ANSI helpers, respecting NO_COLOR (https://no-color.org)
# ---------------------------------------------------------------------------

def _supports_color() -> bool:
    """Return True if the terminal supports ANSI colors."""
    if os.environ.get("NO_COLOR"):
        return False
    if os.environ.get("TERM") == "dumb":
        return False
    return hasattr(sys.stderr, "isatty") and sys.stderr.isatty()


_COLOR = _supports_color()

_RESET = "\033[0m" if _COLOR else ""
_BOLD = "\033[1m" if _COLOR else ""
_DIM = "\033[2m" if _COLOR else ""
_BLUE = "\033[34m" if _COLOR else ""
_GREEN = "\033[32m" if _COLOR else ""
_YELLOW = "\033[33m" if _COLOR else ""

PREFIX = "[ autoreload ]"


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------

def log(msg: str) -> None:
    """Print a single ``[ autoreload ] - msg`` line to stderr."""
    print(f"{_BLUE}{PREFIX}{_RESET} - {msg}", file=sys.stderr)


def warn(msg: str) -> None:
    """Print a highlighted warning line to stderr."""
    print(f"{_BLUE}{PREFIX}{_RESET} - {_YELLOW}!{_RESET} {msg}", file=sys.stderr)


def describe_event(kind: str, path: object) -> str:
    """Human-readable description of a watch event."""
    if kind == "add":
        return f'File "{path}" added'
    if kind == "addDir":
        return f'Dir "{path}" added'
    return f'File "{path}" changed'


def print_banner(config: AutoreloadConfig, *, warnings: list[str] | None = None) -> None:
    """Print the startup banner to stderr.

    Args:
        config: Resolved AutoreloadConfig.
        warnings: Optional list of warning messages to display.

    """
    from autoreload import __version__

    lines: list[str] = [
        "",
        f"  {_BOLD}autoreload{_RESET} {_DIM}v{__version__}{_RESET}",
        f"  {_DIM}{'─' * 43}{_RESET}",
    ]

    target_count = len(config.paths)
    label = "target" if target_count == 1 else "targets"
    lines.append(f"  {_DIM}├─{_RESET} {target_count} watch {label}")
    for target in config.paths:
        events = ", ".join(target.events)
        lines.append(f"  {_DIM}│   {target.path} ({events}){_RESET}")

    lines.append(
        f"  {_DIM}├─{_RESET} {_GREEN}live{_RESET} "
        f"— WebSocket on {_DIM}{config.ws_url}{_RESET}"
    )
    lines.append(f"  {_DIM}└─{_RESET} script: {_DIM}{config.serve_path}{_RESET}")

    lines.append("")
    lines.append(f"  {_DIM}Watching for changes...{_RESET}")

    if warnings:
        lines.append("")
        lines.extend(f"  {_YELLOW}!{_RESET} {w}" for w in warnings)

    lines.append("")

    print("\n".join(lines), file=sys.stderr)
