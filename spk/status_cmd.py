"""
spk status -- show build order and local link state for a repo.

Read-only: nothing is built or linked.
"""

from __future__ import annotations

import argparse
from dataclasses import dataclass
from typing import Optional

from spk.build import load_known_repos, resolve_dependencies
from spk.build.config import ProducerLink
from spk.build_cmd import resolve_target
from spk.core.npm import NpmProbe
from spk.core.utils import log
from spk.core.workspace import WorkspaceRegistry


@dataclass(frozen=True)
class LinkState:
    """Observed state of one producer/consumer pair."""

    link: ProducerLink
    cloned: bool = False  # both repos registered and on disk
    built: bool = False
    linked: bool = False


def _yes_no(value: bool) -> str:
    return "yes" if value else "no"


def describe_link(
    registry: WorkspaceRegistry,
    link: ProducerLink,
    probe: Optional[NpmProbe] = None,
) -> LinkState:
    """Current link state of one producer/consumer pair.

    Repos missing from the workspace or from disk report cloned=False and
    are not probed.
    """
    probe = probe if probe is not None else NpmProbe()

    if link.producer not in registry or link.consumer not in registry:
        return LinkState(link)

    producer_dir = registry.repo_dir(link.producer)
    consumer_dir = registry.repo_dir(link.consumer)
    if not producer_dir.is_dir() or not consumer_dir.is_dir():
        return LinkState(link)

    return LinkState(
        link,
        cloned=True,
        built=probe.is_built(producer_dir),
        linked=probe.is_linked(consumer_dir, link.package),
    )


def cmd_status(args: argparse.Namespace) -> int:
    """Main entry point for the status command."""
    registry, name = resolve_target(args)
    known = load_known_repos()

    log.header(f"Status: {name}")

    deps = resolve_dependencies(name, registry.all(), known.producers)
    if deps:
        log.info("Build order (with -r):")
        for position, dep in enumerate(deps + [name], start=1):
            cloned = registry.repo_dir(dep).is_dir()
            log.table_row(f"  {position}. {dep}", "" if cloned else "(not cloned)")
    else:
        log.info("No dependencies")

    links = [
        link for link in (known.producers.for_consumer(name), known.producers.for_producer(name))
        if link is not None
    ]
    if not links:
        return 0

    print()
    log.info("Local links:")
    for link in links:
        state = describe_link(registry, link)
        label = f"{link.producer} -> {link.consumer}"
        if not state.cloned:
            log.table_row(f"  {label}", "not cloned")
            continue
        source = "local" if state.linked else "published"
        log.table_row(
            f"  {label}",
            f"{link.package}: {source} (built: {_yes_no(state.built)})",
        )

    return 0
