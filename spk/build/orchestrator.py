"""
Build orchestrator for spk.

Builds a repo, optionally after all of its dependencies, wrapping each
individual build with local dependency linking.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Callable, Optional

from spk.build.config import BuildConfig, KnownRepos, load_known_repos
from spk.build.linking import LinkReconciler
from spk.build.phases import get_build_command, get_test_command
from spk.build.resolver import resolve_dependencies
from spk.core.errors import BuildError, LinkError
from spk.core.npm import PROBE_ERRORS, NpmProbe
from spk.core.utils import log, run_shell
from spk.core.workspace import RepoDef, WorkspaceRegistry

logger = logging.getLogger(__name__)

# run(directory, command_line) -> exit status
ShellRunner = Callable[[Path, str], int]


# =============================================================================
# Build Orchestrator
# =============================================================================


class BuildOrchestrator:
    """Orchestrates single-repo and dependency-ordered builds.

    Builds are strictly sequential: each command runs to completion before
    the next decision is made, and every link decision is re-read from disk.
    """

    def __init__(
        self,
        config: BuildConfig,
        registry: WorkspaceRegistry,
        known: Optional[KnownRepos] = None,
        probe: Optional[NpmProbe] = None,
        runner: Optional[ShellRunner] = None,
    ):
        self.config = config
        self.registry = registry
        self.known = known if known is not None else load_known_repos()
        self.linker = LinkReconciler(
            registry,
            self.known.producers,
            probe=probe,
            dry_run=config.dry_run,
        )
        self._run = runner if runner is not None else run_shell

    def dependency_order(self, target: str) -> list[str]:
        """Transitive dependencies of target, dependencies first."""
        return resolve_dependencies(target, self.registry.all(), self.known.producers)

    def _execute(self, name: str, command: str, action: str) -> None:
        """Run command in the repo directory; raise BuildError on failure."""
        repo_dir = self.registry.repo_dir(name)

        if self.config.dry_run:
            log.info(f"[DRY-RUN] Would run: {command} in {repo_dir}")
            return

        log.info(f"Running: {command}")

        try:
            returncode = self._run(repo_dir, command)
        except OSError as e:
            raise BuildError(f"{action} failed: {e}", repo=name) from e

        if returncode != 0:
            raise BuildError(
                f"{action} failed: '{command}' exited with status {returncode}",
                repo=name,
                returncode=returncode,
            )

    def _require_cloned(self, name: str) -> tuple[RepoDef, Path]:
        repo = self.registry.require(name)
        repo_dir = self.registry.repo_dir(name)
        if not repo_dir.is_dir():
            raise BuildError(f"repo directory {repo_dir} does not exist", repo=name)
        return repo, repo_dir

    def build_repo(self, name: str) -> None:
        """Build a single repo, linking local dependencies around it.

        Raises:
            RepoNotFoundError: name is not in the workspace.
            BuildError: the directory is missing or the build command failed.
        """
        repo, repo_dir = self._require_cloned(name)

        log.header(f"Building {name}")

        if not self.config.published:
            try:
                self.linker.link_local_dependency(name)
            except (LinkError, *PROBE_ERRORS) as e:
                log.warning(f"dependency linking issue: {e}")

        command = get_build_command(name, repo, repo_dir, self.known.build_commands)
        if not command:
            log.skip(f"No build command for '{name}', skipping")
            return

        self._execute(name, command, "build")

        if not self.config.published:
            self.linker.propagate_to_consumer(name)

        log.success(f"{name} built successfully")

    def build_recursive(self, target: str) -> None:
        """Build every dependency of target in order, then target itself.

        Dependencies that are not cloned are skipped; the first dependency
        that fails to build aborts the run before target is touched.
        """
        self.registry.require(target)
        deps = self.dependency_order(target)
        logger.debug("dependency order for %s: %s", target, deps)

        if deps:
            log.info(f"Building dependencies first: {', '.join(deps)}")
            for dep in deps:
                if not self.registry.repo_dir(dep).is_dir():
                    log.skip(f"{dep} (not cloned)")
                    continue

                try:
                    self.build_repo(dep)
                except BuildError as e:
                    raise BuildError(
                        f"dependency build failed at '{dep}': {e}",
                        repo=dep,
                        returncode=e.returncode,
                    ) from e

        self.build_repo(target)

    def test_repo(self, name: str) -> None:
        """Run a repo's tests. No linking happens around tests."""
        repo, repo_dir = self._require_cloned(name)

        command = get_test_command(
            name, repo, repo_dir, self.known.test_commands, watch=self.config.watch
        )
        if not command:
            log.skip(f"No test command for '{name}', skipping")
            return

        log.header(f"Testing {name}")
        self._execute(name, command, "tests")
        log.success(f"{name} tests passed")

    def run(self, target: str) -> None:
        """Build target, recursively if configured."""
        if self.config.recursive:
            self.build_recursive(target)
        else:
            self.build_repo(target)
