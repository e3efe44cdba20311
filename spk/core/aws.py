"""
Thin wrappers around the AWS CLI for SSO login.
"""

from __future__ import annotations

import shutil
import subprocess

from spk.core.errors import CommandError, SpkError
from spk.core.utils import run_cmd


def check_cli() -> None:
    """Raise CommandError if the aws CLI is not on PATH."""
    if shutil.which("aws") is None:
        raise CommandError(
            "aws CLI not found; install it from https://aws.amazon.com/cli/"
        )


def _profile_args(profile: str) -> list[str]:
    return ["--profile", profile] if profile else []


def sso_login(profile: str = "") -> None:
    """Run ``aws sso login`` interactively (streams inherited)."""
    try:
        run_cmd(["aws", "sso", "login", *_profile_args(profile)])
    except subprocess.CalledProcessError as e:
        raise SpkError(f"AWS SSO login failed: exit status {e.returncode}") from e


def get_caller_identity(profile: str = "") -> None:
    """Print the identity the current credentials resolve to."""
    try:
        run_cmd(["aws", "sts", "get-caller-identity", *_profile_args(profile)])
    except subprocess.CalledProcessError as e:
        raise SpkError(f"could not verify AWS identity: exit status {e.returncode}") from e
