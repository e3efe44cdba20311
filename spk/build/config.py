"""
Build configuration for spk.

Run-time flags, plus the known-repo tables (producer/consumer links and
default build/test commands) loaded from known_repos.yaml.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from functools import lru_cache
from pathlib import Path
from typing import Any, Iterator, Mapping, Optional

import yaml

__all__ = [
    "KNOWN_REPOS_PATH",
    "KNOWN_REPOS_ENV",
    "BuildConfig",
    "ProducerLink",
    "ProducerMap",
    "KnownRepos",
    "load_known_repos",
]

# =============================================================================
# Constants
# =============================================================================

KNOWN_REPOS_PATH = Path(__file__).parent / "known_repos.yaml"

# Points at an alternative known-repos table.
KNOWN_REPOS_ENV = "SPK_KNOWN_REPOS"


# =============================================================================
# Data Classes
# =============================================================================


@dataclass
class BuildConfig:
    """Configuration for a build run."""

    recursive: bool = False
    published: bool = False  # Never link local packages
    dry_run: bool = False
    watch: bool = False  # test command only


@dataclass(frozen=True)
class ProducerLink:
    """A producer's designated consumer and the package joining them."""

    producer: str
    consumer: str
    package: str


class ProducerMap:
    """Producer -> consumer table with its derived reverse lookup.

    Each producer has at most one consumer and each consumer at most one
    producer; the reverse table is built from the forward one so the two
    always agree.
    """

    def __init__(self, links: Mapping[str, ProducerLink] | None = None):
        self._by_producer: dict[str, ProducerLink] = {}
        self._by_consumer: dict[str, ProducerLink] = {}
        for link in (links or {}).values():
            self._add(link)

    def _add(self, link: ProducerLink) -> None:
        if link.producer == link.consumer:
            raise ValueError(f"{link.producer} cannot consume its own package")
        if link.producer in self._by_producer:
            raise ValueError(f"producer {link.producer} listed twice")
        claimed = self._by_consumer.get(link.consumer)
        if claimed is not None:
            raise ValueError(
                f"consumer {link.consumer} claimed by both "
                f"{claimed.producer} and {link.producer}"
            )
        self._by_producer[link.producer] = link
        self._by_consumer[link.consumer] = link

    @classmethod
    def from_table(cls, table: Mapping[str, Mapping[str, str]]) -> "ProducerMap":
        """Build from ``{producer: {consumer: ..., package: ...}}``."""
        links = {}
        for producer, entry in table.items():
            try:
                links[producer] = ProducerLink(
                    producer=producer,
                    consumer=entry["consumer"],
                    package=entry["package"],
                )
            except (KeyError, TypeError) as e:
                raise ValueError(
                    f"producer {producer} needs 'consumer' and 'package' keys"
                ) from e
        return cls(links)

    def for_producer(self, name: str) -> Optional[ProducerLink]:
        return self._by_producer.get(name)

    def for_consumer(self, name: str) -> Optional[ProducerLink]:
        return self._by_consumer.get(name)

    def __iter__(self) -> Iterator[ProducerLink]:
        return iter(self._by_producer.values())

    def __len__(self) -> int:
        return len(self._by_producer)


@dataclass
class KnownRepos:
    """Built-in knowledge about well-known repos."""

    producers: ProducerMap = field(default_factory=ProducerMap)
    build_commands: dict[str, str] = field(default_factory=dict)
    test_commands: dict[str, str] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "KnownRepos":
        return cls(
            producers=ProducerMap.from_table(data.get("producers") or {}),
            build_commands=dict(data.get("build_commands") or {}),
            test_commands=dict(data.get("test_commands") or {}),
        )


# =============================================================================
# Loading (cached)
# =============================================================================


def _known_repos_path() -> Path:
    override = os.environ.get(KNOWN_REPOS_ENV)
    return Path(override) if override else KNOWN_REPOS_PATH


@lru_cache(maxsize=None)
def _load(path: Path) -> KnownRepos:
    with open(path, "r", encoding="utf-8") as f:
        data = yaml.safe_load(f) or {}
    return KnownRepos.from_dict(data)


def load_known_repos(path: Optional[Path] = None) -> KnownRepos:
    """Load the known-repos table.

    Defaults to $SPK_KNOWN_REPOS, then the packaged known_repos.yaml.
    Results are cached per path for the lifetime of the process.
    """
    return _load(path or _known_repos_path())


def _reset_known_repos_cache() -> None:
    """Reset the known-repos cache (for testing)."""
    _load.cache_clear()
