"""
Dependency ordering for recursive builds.

Two edge sources feed the graph: the known producer/consumer table (a
consumer depends on its producer) and each repo's declared dependencies.
Only names registered in the workspace take part; anything else is pruned.
"""

from __future__ import annotations

from typing import Mapping

from spk.build.config import ProducerMap
from spk.core.workspace import RepoDef


def resolve_dependencies(
    target: str,
    repos: Mapping[str, RepoDef],
    producers: ProducerMap,
) -> list[str]:
    """Return every transitive dependency of target, dependencies first.

    Each name appears once and target itself never appears, even when a
    cycle leads back to it. Cycles are cut at the second visit of a node.
    """
    order: list[str] = []
    seen: set[str] = set()
    _collect(target, repos, producers, seen, order)
    return [name for name in order if name != target]


def _collect(
    name: str,
    repos: Mapping[str, RepoDef],
    producers: ProducerMap,
    seen: set[str],
    order: list[str],
) -> None:
    if name in seen:
        return
    seen.add(name)

    link = producers.for_consumer(name)
    if link is not None and link.producer in repos:
        _collect(link.producer, repos, producers, seen, order)
        if link.producer not in order:
            order.append(link.producer)

    repo = repos.get(name)
    if repo is None:
        return

    for dep in repo.dependencies:
        if dep not in repos:
            continue
        _collect(dep, repos, producers, seen, order)
        if dep not in order:
            order.append(dep)
