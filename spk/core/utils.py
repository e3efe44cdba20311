"""
Shared utilities for the spk CLI.

Terminal output and subprocess helpers used by every command.
"""

from __future__ import annotations

import logging
import subprocess
import sys
from pathlib import Path
from typing import Optional

logger = logging.getLogger(__name__)


# =============================================================================
# Logging
# =============================================================================


class Logger:
    """Simple colored logger with --no-color support.

    All output goes to stdout. Non-fatal conditions are prefixed with
    ``[WARN]`` or ``[NOTE]``, fatal ones with ``[ERROR]``.
    """

    COLORS = {
        "reset": "\033[0m",
        "red": "\033[91m",
        "green": "\033[92m",
        "yellow": "\033[93m",
        "blue": "\033[94m",
        "magenta": "\033[95m",
        "cyan": "\033[96m",
        "bold": "\033[1m",
        "dim": "\033[2m",
    }

    def __init__(self, use_color: Optional[bool] = None):
        if use_color is None:
            self._use_color = sys.stdout.isatty()
        else:
            self._use_color = use_color

    def set_color(self, use_color: bool) -> None:
        """Set whether to use color output."""
        self._use_color = use_color

    def _color(self, text: str, color: str) -> str:
        if not self._use_color:
            return text
        return f"{self.COLORS.get(color, '')}{text}{self.COLORS['reset']}"

    def header(self, message: str) -> None:
        """Print a section header."""
        print(f"\n{self._color('===', 'cyan')} {self._color(message, 'bold')} {self._color('===', 'cyan')}")

    def info(self, message: str) -> None:
        """Print an info message."""
        print(f"  {message}")

    def success(self, message: str) -> None:
        """Print a success message."""
        print(f"  {self._color('[OK]', 'green')} {message}")

    def warning(self, message: str) -> None:
        """Print a warning message."""
        print(f"  {self._color('[WARN]', 'yellow')} {message}")

    def note(self, message: str) -> None:
        """Print a note (informational, never an error)."""
        print(f"  {self._color('[NOTE]', 'blue')} {message}")

    def skip(self, message: str) -> None:
        """Print a skip notice."""
        print(f"  {self._color('[SKIP]', 'magenta')} {message}")

    def error(self, message: str) -> None:
        """Print an error message."""
        print(f"  {self._color('[ERROR]', 'red')} {message}")

    def dim(self, message: str) -> None:
        """Print a dim/secondary message."""
        print(f"  {self._color(message, 'dim')}")

    def table_row(self, col1: str, col2: str, col1_width: int = 30) -> None:
        """Print a table row with two columns."""
        print(f"  {col1:<{col1_width}} {col2}")


# Global logger instance
log = Logger()


def configure_logging(verbose: bool = False) -> None:
    """Route diagnostic ``logging`` output to stderr.

    User-facing progress always goes through ``log``; this only controls
    the debug trail emitted by ``logging.getLogger(__name__)`` loggers.
    """
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )


# =============================================================================
# Runtime Utilities
# =============================================================================


def run_cmd(
    cmd: list[str],
    cwd: Optional[Path] = None,
    capture: bool = False,
    check: bool = True,
    quiet: bool = False,
) -> subprocess.CompletedProcess:
    """Run a command with proper error handling.

    With ``quiet`` a failure is only raised, not echoed; the caller decides
    how severe it is.
    """
    logger.debug("run: %s (cwd=%s)", " ".join(cmd), cwd)
    try:
        result = subprocess.run(
            cmd,
            cwd=cwd,
            capture_output=capture,
            text=True,
            check=check,
        )
        return result
    except subprocess.CalledProcessError as e:
        if capture and not quiet:
            log.error(f"Command failed: {' '.join(cmd)}")
            if e.stdout:
                log.error(f"stdout: {e.stdout}")
            if e.stderr:
                log.error(f"stderr: {e.stderr}")
        raise


def run_shell(directory: Path, command: str) -> int:
    """Run a shell command line in ``directory`` with inherited streams.

    Returns the exit status. Raises ``OSError`` when the shell itself cannot
    be launched (e.g. the directory vanished).
    """
    logger.debug("sh -c %r (cwd=%s)", command, directory)
    result = subprocess.run(["sh", "-c", command], cwd=directory, check=False)
    return result.returncode


def is_subdir(parent: Path, child: Path) -> bool:
    """True when ``child`` is strictly inside ``parent``."""
    try:
        rel = child.relative_to(parent)
    except ValueError:
        return False
    return rel != Path(".")
