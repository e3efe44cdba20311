"""
Local dependency linking around a build.

Before a consumer builds, link it to its producer's local build if there is
one (link_local_dependency). After a producer builds, push the fresh build
into a consumer that is still on the published package
(propagate_to_consumer). Both directions decide from the live artifact
state on every call, so either may run standalone, from a consumer's
pre-build step, or inside a recursive build.
"""

from __future__ import annotations

from enum import Enum
from pathlib import Path
from typing import Optional

from spk.build.config import ProducerLink, ProducerMap
from spk.core.errors import LinkError
from spk.core.npm import PROBE_ERRORS, NpmProbe
from spk.core.utils import log
from spk.core.workspace import WorkspaceRegistry


class LinkOutcome(str, Enum):
    """What a reconcile step decided."""

    NOT_APPLICABLE = "not-applicable"  # no producer/consumer relation in play
    PUBLISHED = "published"  # producer not built locally
    ALREADY_LINKED = "already-linked"
    LINKED = "linked"
    WOULD_LINK = "would-link"  # dry run
    FAILED = "failed"  # post-build only; pre-build raises instead


class LinkReconciler:
    """Switches consumers between published and locally-built packages."""

    def __init__(
        self,
        registry: WorkspaceRegistry,
        producers: ProducerMap,
        probe: Optional[NpmProbe] = None,
        dry_run: bool = False,
    ):
        self.registry = registry
        self.producers = producers
        self.probe = probe if probe is not None else NpmProbe()
        self.dry_run = dry_run

    def link_local_dependency(self, consumer: str) -> LinkOutcome:
        """Pre-build: link consumer to its producer's local build if present.

        Raises:
            LinkError: registering the build output or linking it into the
                consumer failed; ``step`` says which.
        """
        link = self.producers.for_consumer(consumer)
        if link is None or link.producer not in self.registry:
            return LinkOutcome.NOT_APPLICABLE

        producer_dir = self.registry.repo_dir(link.producer)
        consumer_dir = self.registry.repo_dir(consumer)

        if not self.probe.is_built(producer_dir):
            log.info(f"Using published {link.package} (local {link.producer} not built)")
            return LinkOutcome.PUBLISHED

        if self.probe.is_linked(consumer_dir, link.package):
            log.info(f"Using local {link.producer} (already linked)")
            return LinkOutcome.ALREADY_LINKED

        log.info(f"Linking local {link.producer} -> {consumer}...")
        if not self._link(link, producer_dir, consumer_dir):
            return LinkOutcome.WOULD_LINK

        log.success(f"Linked: {consumer} now uses local {link.producer}")
        return LinkOutcome.LINKED

    def propagate_to_consumer(self, producer: str) -> LinkOutcome:
        """Post-build: link producer's fresh build into its consumer.

        Never raises; a failure is printed as a note and reported as FAILED,
        since the producer's own build has already succeeded.
        """
        link = self.producers.for_producer(producer)
        if link is None:
            return LinkOutcome.NOT_APPLICABLE

        try:
            if producer not in self.registry or link.consumer not in self.registry:
                return LinkOutcome.NOT_APPLICABLE

            consumer_dir = self.registry.repo_dir(link.consumer)
            if not consumer_dir.is_dir():
                return LinkOutcome.NOT_APPLICABLE

            producer_dir = self.registry.repo_dir(producer)
            if not self.probe.is_built(producer_dir):
                return LinkOutcome.PUBLISHED
            if self.probe.is_linked(consumer_dir, link.package):
                return LinkOutcome.ALREADY_LINKED

            log.info(f"Auto-linking to consumer {link.consumer}...")
            if not self._link(link, producer_dir, consumer_dir):
                return LinkOutcome.WOULD_LINK
        except LinkError as e:
            log.note(str(e))
            return LinkOutcome.FAILED
        except Exception as e:
            log.note(f"could not link {link.consumer} to local {producer}: {e}")
            return LinkOutcome.FAILED

        log.success(f"Linked: {link.consumer} now uses local {producer}")
        return LinkOutcome.LINKED

    def _link(self, link: ProducerLink, producer_dir: Path, consumer_dir: Path) -> bool:
        """Register the producer's output, then link it into the consumer.

        Returns False when nothing was changed (dry run).
        """
        output_dir = self.probe.build_output_dir(producer_dir)

        if self.dry_run:
            log.info(f"[DRY-RUN] Would run: npm link in {output_dir}")
            log.info(f"[DRY-RUN] Would run: npm link {link.package} in {consumer_dir}")
            return False

        try:
            self.probe.register_linkable(output_dir)
        except PROBE_ERRORS as e:
            raise LinkError(
                f"npm link in {link.producer} failed: {_failure_detail(e)}",
                step=LinkError.REGISTER,
                repo=link.producer,
            ) from e

        try:
            self.probe.apply_link(consumer_dir, link.package)
        except PROBE_ERRORS as e:
            raise LinkError(
                f"npm link {link.package} in {link.consumer} failed: {_failure_detail(e)}",
                step=LinkError.APPLY,
                repo=link.consumer,
            ) from e

        return True


def _failure_detail(error: BaseException) -> str:
    """Error text, with the captured stderr of a failed npm run appended."""
    stderr = getattr(error, "stderr", None)
    if isinstance(stderr, str) and stderr.strip():
        return f"{error}\n{stderr.strip()}"
    return str(error)
