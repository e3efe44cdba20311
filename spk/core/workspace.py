"""
Workspace manifest and repository registry.

A workspace is a directory holding ``.spark/workspace.json``. The manifest
lists every repository the workspace knows about, where it is cloned and
which other repositories it depends on.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Dict, List, Optional

from pydantic import BaseModel, Field, ValidationError

from spk.core.errors import RepoNotFoundError, WorkspaceError
from spk.core.utils import is_subdir

# =============================================================================
# Constants
# =============================================================================

MANIFEST_DIR = ".spark"
MANIFEST_FILE = "workspace.json"


# =============================================================================
# Manifest Models
# =============================================================================


class RepoDef(BaseModel):
    """A repository entry in the workspace manifest."""

    path: str = Field(description="Path relative to the workspace root")
    remote: str = Field("", description="Git remote (org/repo or URL)")
    build_command: str = Field("", description="Overrides the detected build command")
    test_command: str = Field("", description="Overrides the detected test command")
    dependencies: List[str] = Field(
        default_factory=list, description="Names of repos this repo depends on"
    )


class Workspace(BaseModel):
    """The full workspace manifest."""

    name: str
    aws_profile: str = ""
    aws_region: str = ""
    repos: Dict[str, RepoDef] = Field(default_factory=dict)


# =============================================================================
# Manifest I/O
# =============================================================================


def manifest_path(ws_path: Path) -> Path:
    """Return the manifest location for a workspace root."""
    return ws_path / MANIFEST_DIR / MANIFEST_FILE


def find_workspace(start_dir: Optional[Path] = None) -> Path:
    """Find the workspace root by walking up from start_dir (or cwd).

    Raises WorkspaceError if no ancestor holds a manifest.
    """
    if start_dir is None:
        start_dir = Path.cwd()

    current = start_dir.resolve()
    while True:
        if manifest_path(current).is_file():
            return current
        if current == current.parent:
            break
        current = current.parent

    raise WorkspaceError(
        f"no spark workspace found (looked for {MANIFEST_DIR}/{MANIFEST_FILE} "
        f"above {start_dir})"
    )


def load_workspace(ws_path: Path) -> Workspace:
    """Load and validate the manifest of the workspace at ws_path."""
    path = manifest_path(ws_path)
    try:
        data = json.loads(path.read_text())
    except FileNotFoundError:
        raise WorkspaceError(f"workspace manifest not found at {path}") from None
    except json.JSONDecodeError as e:
        raise WorkspaceError(f"{path} is not valid JSON: {e}") from e

    try:
        return Workspace.model_validate(data)
    except ValidationError as e:
        raise WorkspaceError(f"invalid workspace manifest {path}:\n{e}") from e


def save_workspace(ws_path: Path, workspace: Workspace) -> Path:
    """Write the manifest, creating ``.spark/`` if needed."""
    path = manifest_path(ws_path)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(workspace.model_dump_json(indent=2) + "\n")
    return path


def create_workspace(
    ws_path: Path,
    name: str,
    aws_profile: str = "",
    aws_region: str = "",
) -> Workspace:
    """Create a new, empty workspace manifest at ws_path.

    Raises WorkspaceError if a manifest already exists there.
    """
    if manifest_path(ws_path).exists():
        raise WorkspaceError(f"workspace already exists at {ws_path}")

    workspace = Workspace(name=name, aws_profile=aws_profile, aws_region=aws_region)
    save_workspace(ws_path, workspace)
    return workspace


# =============================================================================
# Registry
# =============================================================================


class WorkspaceRegistry:
    """Read-only view of the repositories in a loaded workspace."""

    def __init__(self, root: Path, workspace: Workspace):
        self.root = root
        self.workspace = workspace

    @classmethod
    def load(cls, start_dir: Optional[Path] = None) -> "WorkspaceRegistry":
        """Find and load the workspace enclosing start_dir (or cwd)."""
        root = find_workspace(start_dir)
        return cls(root, load_workspace(root))

    def get(self, name: str) -> Optional[RepoDef]:
        return self.workspace.repos.get(name)

    def require(self, name: str) -> RepoDef:
        """Like get(), but raises RepoNotFoundError for unknown names."""
        repo = self.workspace.repos.get(name)
        if repo is None:
            raise RepoNotFoundError(name)
        return repo

    def all(self) -> dict[str, RepoDef]:
        return dict(self.workspace.repos)

    def __contains__(self, name: object) -> bool:
        return name in self.workspace.repos

    def repo_dir(self, name: str) -> Path:
        return self.root / self.require(name).path

    def detect_current_repo(self, cwd: Optional[Path] = None) -> str:
        """Return the name of the repo containing cwd.

        Raises WorkspaceError when cwd is not inside any registered repo.
        """
        if cwd is None:
            cwd = Path.cwd()
        cwd = cwd.resolve()

        for name, repo in self.workspace.repos.items():
            repo_dir = (self.root / repo.path).resolve()
            if cwd == repo_dir or is_subdir(repo_dir, cwd):
                return name

        raise WorkspaceError("must be run from inside a repo directory (or pass --repo)")
