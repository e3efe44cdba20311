"""
Build and test command resolution.

Picks the shell command for a repo: manifest override first, then the
known-repos table, then whatever the files in the repo imply.
"""

from __future__ import annotations

from pathlib import Path
from typing import Mapping

from spk.core.workspace import RepoDef

# =============================================================================
# Toolchain Detection
# =============================================================================

# (marker files, build command, test command, watch-mode test command).
# Checked in order; the first marker present wins. Empty means unsupported.
TOOLCHAIN_SIGNATURES: list[tuple[tuple[str, ...], str, str, str]] = [
    (("package.json",), "npm run build", "npm test", "npm run test:watch"),
    (("build.gradle", "build.gradle.kts"), "./gradlew build", "./gradlew test", ""),
    (("Makefile",), "make", "", ""),
    (("go.mod",), "go build ./...", "go test ./...", ""),
]


def _has_any(repo_dir: Path, markers: tuple[str, ...]) -> bool:
    return any((repo_dir / marker).exists() for marker in markers)


def detect_build_command(repo_dir: Path) -> str:
    """Default build command implied by the repo's files, or ""."""
    for markers, build, _, _ in TOOLCHAIN_SIGNATURES:
        if _has_any(repo_dir, markers):
            return build
    return ""


def detect_test_command(repo_dir: Path, watch: bool = False) -> str:
    """Default test command implied by the repo's files, or "".

    Toolchains without a watch mode fall back to their plain test command.
    """
    for markers, _, test, watch_test in TOOLCHAIN_SIGNATURES:
        if not test or not _has_any(repo_dir, markers):
            continue
        return watch_test if watch and watch_test else test
    return ""


# =============================================================================
# Command Resolution
# =============================================================================


def get_build_command(
    name: str,
    repo: RepoDef,
    repo_dir: Path,
    known_commands: Mapping[str, str],
) -> str:
    """Resolve a repo's build command; "" means the repo is not buildable."""
    if repo.build_command:
        return repo.build_command

    if name in known_commands:
        return known_commands[name]

    return detect_build_command(repo_dir)


def watch_variant(command: str) -> str:
    """Watch-mode form of a known test command."""
    if command == "npm test":
        return "npm run test:watch"
    return command + ":watch"


def get_test_command(
    name: str,
    repo: RepoDef,
    repo_dir: Path,
    known_commands: Mapping[str, str],
    watch: bool = False,
) -> str:
    """Resolve a repo's test command; "" means there is nothing to run."""
    if repo.test_command:
        return repo.test_command

    if name in known_commands:
        command = known_commands[name]
        return watch_variant(command) if watch else command

    return detect_test_command(repo_dir, watch)
