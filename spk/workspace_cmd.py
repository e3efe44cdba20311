"""
spk create workspace -- create a new workspace manifest.
"""

from __future__ import annotations

import argparse
from pathlib import Path

from spk.core.utils import log
from spk.core.workspace import create_workspace


def _or_default(value: str, default: str) -> str:
    return value if value else default


def cmd_create_workspace(args: argparse.Namespace) -> int:
    """Create <path>/.spark/workspace.json, creating <path> if needed."""
    ws_path = Path(args.path).expanduser().resolve()
    ws_path.mkdir(parents=True, exist_ok=True)

    workspace = create_workspace(
        ws_path,
        name=ws_path.name,
        aws_profile=args.aws_profile,
        aws_region=args.aws_region,
    )

    log.success(f"Workspace '{workspace.name}' created at {ws_path}")
    log.info(f"  AWS Profile: {_or_default(workspace.aws_profile, '(not set)')}")
    log.info(f"  AWS Region:  {_or_default(workspace.aws_region, '(not set)')}")
    print()
    log.info("Next steps:")
    log.info(f"  cd {ws_path}")
    log.info("  add repos to .spark/workspace.json, then run 'spk build' inside one")
    return 0
