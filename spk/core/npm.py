"""
npm artifact probing and linking.

Answers two questions about a producer/consumer pair: has the producer
been built locally, and does the consumer currently resolve the producer's
package to that local build (an ``npm link`` symlink) rather than the
published release.
"""

from __future__ import annotations

import logging
import subprocess
from pathlib import Path
from typing import Optional

from spk.core.utils import run_cmd

logger = logging.getLogger(__name__)

# Smithy's TypeScript codegen writes one projection per plugin here.
SMITHY_PROJECTIONS = Path("build") / "smithyprojections"


# =============================================================================
# State Predicates
# =============================================================================


def _codegen_package_dir(repo_dir: Path) -> Optional[Path]:
    """Return the first generated package under build/smithyprojections/."""
    projections = repo_dir / SMITHY_PROJECTIONS
    if not projections.is_dir():
        return None

    for package_json in sorted(projections.glob("*/*/package.json")):
        return package_json.parent
    return None


def build_output_dir(repo_dir: Path) -> Path:
    """Directory to ``npm link`` for a built producer.

    The generated SDK package when the repo is a Smithy model, otherwise the
    repo itself (a plain npm package building into ``dist/``).
    """
    codegen = _codegen_package_dir(repo_dir)
    return codegen if codegen is not None else repo_dir


def is_built(repo_dir: Path) -> bool:
    """True when the repo has a local build artifact."""
    if _codegen_package_dir(repo_dir) is not None:
        return True

    dist = repo_dir / "dist"
    return dist.is_dir() and any(dist.iterdir())


def is_linked(consumer_dir: Path, package: str) -> bool:
    """True when consumer's node_modules/<package> is an npm link symlink."""
    return (consumer_dir / "node_modules" / package).is_symlink()


# =============================================================================
# Mutating Operations
# =============================================================================


def link(package_dir: Path) -> None:
    """Register package_dir as globally linkable (``npm link``)."""
    run_cmd(["npm", "link"], cwd=package_dir, capture=True, quiet=True)


def link_package(consumer_dir: Path, package: str) -> None:
    """Point consumer's dependency on package at the global link."""
    run_cmd(["npm", "link", package], cwd=consumer_dir, capture=True, quiet=True)


class NpmProbe:
    """The artifact-state operations the link reconciler depends on.

    Wraps the module functions so callers can substitute any object with the
    same five methods.
    """

    def is_built(self, repo_dir: Path) -> bool:
        built = is_built(repo_dir)
        logger.debug("is_built(%s) -> %s", repo_dir, built)
        return built

    def is_linked(self, consumer_dir: Path, package: str) -> bool:
        linked = is_linked(consumer_dir, package)
        logger.debug("is_linked(%s, %s) -> %s", consumer_dir, package, linked)
        return linked

    def build_output_dir(self, repo_dir: Path) -> Path:
        return build_output_dir(repo_dir)

    def register_linkable(self, package_dir: Path) -> None:
        """Raises CalledProcessError on a non-zero npm exit, OSError if npm is missing."""
        link(package_dir)

    def apply_link(self, consumer_dir: Path, package: str) -> None:
        link_package(consumer_dir, package)


# Errors a probe may raise from its mutating operations.
PROBE_ERRORS = (subprocess.SubprocessError, OSError)
