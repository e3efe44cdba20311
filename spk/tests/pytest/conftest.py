"""
Shared pytest fixtures for spk tests.

Provides throwaway workspaces on disk plus recording stand-ins for the npm
probe and the shell runner, so build and link decisions can be checked
without npm or real build tools.

Test Tier Markers:
  @pytest.mark.evergreen - Tests that always run, never skip (production tests)
  @pytest.mark.dev       - Development/WIP tests, toggle-able
  @pytest.mark.temporary - Tests with explicit discard flag
"""

from __future__ import annotations

import io
import subprocess
from contextlib import redirect_stdout
from pathlib import Path
from typing import Any, Callable, Optional

import pytest

from spk.build.config import KnownRepos, ProducerMap
from spk.core.utils import log
from spk.core.workspace import RepoDef, Workspace, WorkspaceRegistry, save_workspace


# =============================================================================
# Test Data Constants
# =============================================================================

# Producer M builds the package "pkg" consumed by A.
PRODUCER = "M"
CONSUMER = "A"
PACKAGE = "pkg"


# =============================================================================
# Pytest Configuration
# =============================================================================


def pytest_configure(config: pytest.Config) -> None:
    """Register custom markers for test tiers."""
    config.addinivalue_line(
        "markers",
        "evergreen: tests that always run, never skip (production tests)"
    )
    config.addinivalue_line(
        "markers",
        "dev: development/WIP tests, toggle-able for active development"
    )
    config.addinivalue_line(
        "markers",
        "temporary: tests with explicit discard flag"
    )


@pytest.fixture(autouse=True)
def plain_output() -> None:
    """Keep log prefixes free of ANSI codes so output can be matched."""
    log.set_color(False)


# =============================================================================
# Workspace Factory
# =============================================================================


def _create_registry(
    root: Path,
    repos: dict[str, dict[str, Any]],
    cloned: Optional[set[str]] = None,
) -> WorkspaceRegistry:
    """Write a manifest for repos under root and return its registry.

    Args:
        root: Workspace root directory
        repos: name -> RepoDef fields (``path`` defaults to the name)
        cloned: Names whose directories are created (default: all)

    Returns:
        WorkspaceRegistry over the saved manifest
    """
    defs = {
        name: RepoDef(**{"path": name, **fields})
        for name, fields in repos.items()
    }
    workspace = Workspace(name=root.name, repos=defs)
    save_workspace(root, workspace)

    for name, repo in defs.items():
        if cloned is None or name in cloned:
            (root / repo.path).mkdir(parents=True, exist_ok=True)

    return WorkspaceRegistry(root, workspace)


@pytest.fixture
def make_registry(tmp_path: Path) -> Callable[..., WorkspaceRegistry]:
    """Factory fixture: make_registry({"A": {"dependencies": ["M"]}}, cloned={"A"})."""
    root = tmp_path / "ws"
    root.mkdir()

    def factory(
        repos: dict[str, dict[str, Any]],
        cloned: Optional[set[str]] = None,
    ) -> WorkspaceRegistry:
        return _create_registry(root, repos, cloned)

    return factory


@pytest.fixture
def known() -> KnownRepos:
    """Known-repos table with the single pair M -> A via pkg."""
    return KnownRepos(
        producers=ProducerMap.from_table(
            {PRODUCER: {"consumer": CONSUMER, "package": PACKAGE}}
        ),
    )


# =============================================================================
# Recording Stand-ins
# =============================================================================


class FakeProbe:
    """In-memory artifact probe that records every call.

    ``built`` holds producer directories with an artifact; ``linked`` holds
    (consumer_dir, package) pairs. apply_link updates ``linked`` so repeated
    calls observe their own effect.
    """

    def __init__(self, events: Optional[list[tuple]] = None):
        self.built: set[Path] = set()
        self.linked: set[tuple[Path, str]] = set()
        self.events: list[tuple] = events if events is not None else []
        self.fail_register = False
        self.fail_apply = False

    @property
    def mutations(self) -> list[tuple]:
        return [e for e in self.events if e[0] in ("register_linkable", "apply_link")]

    def is_built(self, repo_dir: Path) -> bool:
        return repo_dir in self.built

    def is_linked(self, consumer_dir: Path, package: str) -> bool:
        return (consumer_dir, package) in self.linked

    def build_output_dir(self, repo_dir: Path) -> Path:
        return repo_dir / "dist"

    def register_linkable(self, package_dir: Path) -> None:
        self.events.append(("register_linkable", package_dir))
        if self.fail_register:
            raise subprocess.CalledProcessError(1, ["npm", "link"])

    def apply_link(self, consumer_dir: Path, package: str) -> None:
        self.events.append(("apply_link", consumer_dir, package))
        if self.fail_apply:
            raise subprocess.CalledProcessError(1, ["npm", "link", package])
        self.linked.add((consumer_dir, package))


class RecordingRunner:
    """Shell runner stand-in: records (directory, command), returns canned codes."""

    def __init__(self, events: Optional[list[tuple]] = None):
        self.events: list[tuple] = events if events is not None else []
        self.exit_codes: dict[str, int] = {}  # directory name -> exit status
        self.calls: list[tuple[Path, str]] = []

    def __call__(self, directory: Path, command: str) -> int:
        self.calls.append((directory, command))
        self.events.append(("run", directory.name, command))
        return self.exit_codes.get(directory.name, 0)

    @property
    def built_names(self) -> list[str]:
        return [directory.name for directory, _ in self.calls]


@pytest.fixture
def events() -> list[tuple]:
    """Shared, ordered event log for probe and runner."""
    return []


@pytest.fixture
def probe(events: list[tuple]) -> FakeProbe:
    return FakeProbe(events)


@pytest.fixture
def runner(events: list[tuple]) -> RecordingRunner:
    return RecordingRunner(events)


# =============================================================================
# CLI Runner
# =============================================================================


class CLIResult:
    """Result of running a CLI command."""

    def __init__(self, returncode: int, stdout: str):
        self.returncode = returncode
        self.stdout = stdout

    def __repr__(self) -> str:
        return f"CLIResult(returncode={self.returncode}, stdout={self.stdout[:100]!r}...)"


class CLIRunner:
    """Helper class to run CLI commands in-process with captured output."""

    def __init__(self, monkeypatch: pytest.MonkeyPatch):
        self.monkeypatch = monkeypatch

    def run(self, args: list[str], cwd: Optional[Path] = None) -> CLIResult:
        """Run CLI with given args (without the 'spk' prefix) from cwd."""
        from spk.cli import main

        if cwd is not None:
            self.monkeypatch.chdir(cwd)

        stdout_capture = io.StringIO()
        with redirect_stdout(stdout_capture):
            try:
                returncode = main(["--no-color", *args])
            except SystemExit as e:
                returncode = e.code if isinstance(e.code, int) else 1

        return CLIResult(returncode=returncode or 0, stdout=stdout_capture.getvalue())


@pytest.fixture
def cli_runner(monkeypatch: pytest.MonkeyPatch) -> CLIRunner:
    return CLIRunner(monkeypatch)
