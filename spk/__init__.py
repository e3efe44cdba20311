"""
spk - workspace CLI for multi-repo development.

Builds repositories in dependency order and links locally-built packages
(like a Smithy model's generated SDK) into the repositories that consume them.

Usage:
    python -m spk <command> [options]

Commands:
    build       Build current repo with automatic local dependency linking
    test        Run tests for current repo
    status      Show build order and local link state
    create      Create resources (workspace)
    login       Login to AWS SSO using the workspace's profile
"""

from .cli import __version__, main

__all__ = ["__version__", "main"]
