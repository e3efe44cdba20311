"""
spk build / spk test -- build or test the current repo.
"""

from __future__ import annotations

import argparse
from pathlib import Path
from typing import Optional

from spk.build import BuildConfig, BuildOrchestrator
from spk.core.workspace import WorkspaceRegistry


def resolve_target(args: argparse.Namespace, cwd: Optional[Path] = None) -> tuple[WorkspaceRegistry, str]:
    """Load the enclosing workspace and pick the repo to act on.

    ``--repo`` wins; otherwise the repo containing cwd.
    """
    registry = WorkspaceRegistry.load(cwd)
    name = getattr(args, "repo", None)
    if name:
        registry.require(name)
        return registry, name
    return registry, registry.detect_current_repo(cwd)


def cmd_build(args: argparse.Namespace) -> int:
    """Main entry point for the build command."""
    registry, name = resolve_target(args)

    config = BuildConfig(
        recursive=args.recursive,
        published=args.published,
        dry_run=args.dry_run,
    )
    BuildOrchestrator(config, registry).run(name)
    return 0


def cmd_test(args: argparse.Namespace) -> int:
    """Main entry point for the test command."""
    registry, name = resolve_target(args)

    config = BuildConfig(
        watch=args.watch,
    )
    BuildOrchestrator(config, registry).test_repo(name)
    return 0
