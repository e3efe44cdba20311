"""
spk login -- AWS SSO login using the workspace's profile.
"""

from __future__ import annotations

import argparse

from spk.core import aws
from spk.core.errors import WorkspaceError
from spk.core.utils import log
from spk.core.workspace import find_workspace, load_workspace


def _workspace_profile() -> str:
    """aws_profile of the enclosing workspace, or "" outside one."""
    try:
        workspace = load_workspace(find_workspace())
    except WorkspaceError:
        return ""
    return workspace.aws_profile


def cmd_login(args: argparse.Namespace) -> int:
    """Main entry point for the login command."""
    aws.check_cli()

    profile = args.profile
    if not profile:
        profile = _workspace_profile()
        if profile:
            log.info(f"Using workspace AWS profile: {profile}")
        else:
            log.info("No AWS profile configured, running 'aws sso login' with default profile")

    log.info("Logging in to AWS SSO...")
    aws.sso_login(profile)

    log.success("Login successful, verifying identity...")
    aws.get_caller_identity(profile)
    return 0
