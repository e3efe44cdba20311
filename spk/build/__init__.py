"""
spk.build - Build orchestration for spk workspaces.

Provides dependency-ordered builds with automatic linking of locally-built
packages into the repos that consume them.
"""

from spk.build.config import (
    KNOWN_REPOS_PATH,
    BuildConfig,
    ProducerLink,
    ProducerMap,
    KnownRepos,
    load_known_repos,
)
from spk.build.resolver import resolve_dependencies
from spk.build.linking import LinkOutcome, LinkReconciler
from spk.build.phases import get_build_command, get_test_command
from spk.build.orchestrator import BuildOrchestrator

__all__ = [
    # Constants
    "KNOWN_REPOS_PATH",
    # Data classes
    "BuildConfig",
    "ProducerLink",
    "ProducerMap",
    "KnownRepos",
    # Functions
    "load_known_repos",
    "resolve_dependencies",
    "get_build_command",
    "get_test_command",
    # Linking
    "LinkOutcome",
    "LinkReconciler",
    # Orchestrator
    "BuildOrchestrator",
]
