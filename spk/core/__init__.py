"""
spk.core - Foundation layer for the spk CLI.

Exports terminal logging, subprocess helpers, the exception hierarchy,
the workspace registry and the npm artifact probe.
"""

# Utils
from spk.core.utils import (
    # Logging
    log,
    Logger,
    configure_logging,
    # Runtime utilities
    run_cmd,
    run_shell,
)

# Errors
from spk.core.errors import (
    SpkError,
    WorkspaceError,
    RepoNotFoundError,
    CommandError,
    BuildError,
    LinkError,
)

# Workspace
from spk.core.workspace import (
    RepoDef,
    Workspace,
    WorkspaceRegistry,
    find_workspace,
    load_workspace,
    save_workspace,
    create_workspace,
    manifest_path,
)

# Artifact probe
from spk.core.npm import NpmProbe

__all__ = [
    # Utils
    "log",
    "Logger",
    "configure_logging",
    "run_cmd",
    "run_shell",
    # Errors
    "SpkError",
    "WorkspaceError",
    "RepoNotFoundError",
    "CommandError",
    "BuildError",
    "LinkError",
    # Workspace
    "RepoDef",
    "Workspace",
    "WorkspaceRegistry",
    "find_workspace",
    "load_workspace",
    "save_workspace",
    "create_workspace",
    "manifest_path",
    # Artifact probe
    "NpmProbe",
]
