"""spk exception hierarchy.

All spk-specific exceptions inherit from SpkError so the CLI can report
them uniformly and exit non-zero.
"""

from __future__ import annotations

from typing import Optional


class SpkError(Exception):
    """Base exception for all spk errors."""


class WorkspaceError(SpkError):
    """Missing, invalid or conflicting workspace manifest."""


class RepoNotFoundError(WorkspaceError):
    """A repository name is not present in the workspace manifest."""

    def __init__(self, name: str) -> None:
        super().__init__(f"repo '{name}' not found in workspace")
        self.name = name


class CommandError(SpkError):
    """A required external tool is unavailable."""


class BuildError(SpkError):
    """A repository build failed. Always fatal for the current command."""

    def __init__(self, message: str, *, repo: str, returncode: Optional[int] = None) -> None:
        super().__init__(message)
        self.repo = repo
        self.returncode = returncode


class LinkError(SpkError):
    """Linking a local package into a consumer failed.

    ``step`` is ``"register"`` when ``npm link`` in the producer's build
    output failed and ``"apply"`` when ``npm link <package>`` in the consumer
    failed.
    """

    REGISTER = "register"
    APPLY = "apply"

    def __init__(self, message: str, *, step: str, repo: str) -> None:
        super().__init__(message)
        self.step = step
        self.repo = repo
