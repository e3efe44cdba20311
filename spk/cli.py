"""
Main CLI for the spk tool.

Workspace-oriented commands for multi-repo development: dependency-aware
builds, tests, workspace creation and AWS SSO login.
"""

from __future__ import annotations

import argparse
import sys

from spk.core.utils import configure_logging, log


# =============================================================================
# Version
# =============================================================================

__version__ = "0.1.0"


# =============================================================================
# Argument Parsing
# =============================================================================


def create_parser() -> argparse.ArgumentParser:
    """Create the main argument parser with all subcommands."""

    # Main parser
    parser = argparse.ArgumentParser(
        prog="spk",
        description="Workspace CLI for multi-repo development",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Commands:
  build       Build current repo with automatic local dependency linking
  test        Run tests for current repo
  status      Show build order and local link state
  create      Create resources (workspace)
  login       Login to AWS SSO using the workspace's profile

Get started:
  spk create workspace ./my-project
  cd my-project/AppAPI
  spk build -r
        """,
    )

    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {__version__}",
    )

    parser.add_argument(
        "--no-color",
        action="store_true",
        help="Disable colored output",
    )

    parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Enable debug logging on stderr",
    )

    # Subparsers
    subparsers = parser.add_subparsers(
        dest="command",
        title="commands",
        metavar="<command>",
    )

    # --- build ---
    build_parser = subparsers.add_parser(
        "build",
        help="Build current repo with automatic local dependency linking",
        description="""Builds the current repo and automatically links locally-built dependencies.

When a dependency (like a Smithy model) is built locally, its package is
npm-linked into the consuming repo (like an API) instead of the published
version. Building the dependency also relinks an already-cloned consumer.

Dependency chain:
  AppModel      -> AppAPI      (@spark-rewards/sra-sdk)
  BusinessModel -> BusinessAPI (@spark-rewards/srw-sdk)""",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  cd AppAPI && spk build       # build AppAPI (links local AppModel if built)
  cd AppAPI && spk build -r    # build AppModel first, then AppAPI
  spk build --published        # force use of published packages
        """,
    )
    build_parser.add_argument(
        "--recursive", "-r",
        action="store_true",
        help="Build dependencies first",
    )
    build_parser.add_argument(
        "--published",
        action="store_true",
        help="Force use of published packages (no local linking)",
    )
    build_parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Show what would be done without executing",
    )
    build_parser.add_argument(
        "--repo",
        help="Repo to build (default: the repo containing the current directory)",
    )

    # --- test ---
    test_parser = subparsers.add_parser(
        "test",
        help="Run tests for current repo",
        description="Runs the test command for the current repo.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  cd AppAPI && spk test        # run tests
  spk test --watch             # run tests in watch mode
        """,
    )
    test_parser.add_argument(
        "--watch", "-w",
        action="store_true",
        help="Run tests in watch mode",
    )
    test_parser.add_argument(
        "--repo",
        help="Repo to test (default: the repo containing the current directory)",
    )

    # --- status ---
    status_parser = subparsers.add_parser(
        "status",
        help="Show build order and local link state",
        description="Show the recursive build order and whether dependencies are linked locally.",
    )
    status_parser.add_argument(
        "--repo",
        help="Repo to inspect (default: the repo containing the current directory)",
    )

    # --- create ---
    create_parser = subparsers.add_parser(
        "create",
        help="Create resources (workspace)",
    )
    create_subparsers = create_parser.add_subparsers(
        dest="create_command",
        title="create commands",
        metavar="<resource>",
    )
    create_subparsers.required = True

    # create workspace
    create_ws_parser = create_subparsers.add_parser(
        "workspace",
        help="Create a new spark workspace",
        description="""Creates a new workspace directory with a .spark/workspace.json manifest.
If the directory doesn't exist, it will be created.""",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  spk create workspace .                     # current dir
  spk create workspace ./my-project          # relative path
  spk create workspace ~/Projects/my-app     # absolute path
        """,
    )
    create_ws_parser.add_argument(
        "path",
        help="Workspace directory",
    )
    create_ws_parser.add_argument(
        "--aws-profile",
        default="",
        help="AWS SSO profile name",
    )
    create_ws_parser.add_argument(
        "--aws-region",
        default="",
        help="Default AWS region",
    )

    # --- login ---
    login_parser = subparsers.add_parser(
        "login",
        help="Login to AWS SSO using the workspace's profile",
        description="""Wraps 'aws sso login' using the AWS profile configured in the workspace.
Falls back to the --profile flag if provided.""",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  spk login                  # uses workspace aws_profile
  spk login --profile prod   # override with specific profile
        """,
    )
    login_parser.add_argument(
        "--profile",
        default="",
        help="AWS profile to use (overrides workspace setting)",
    )

    return parser


# =============================================================================
# Command Dispatch
# =============================================================================


def main(argv: list[str] | None = None) -> int:
    """Main entry point."""
    parser = create_parser()
    args = parser.parse_args(argv)

    # Handle --no-color
    if args.no_color:
        log.set_color(False)

    configure_logging(args.verbose)

    # No command specified
    if not args.command:
        parser.print_help()
        return 0

    # Dispatch to command handler
    try:
        if args.command == "build":
            from .build_cmd import cmd_build
            return cmd_build(args)

        elif args.command == "test":
            from .build_cmd import cmd_test
            return cmd_test(args)

        elif args.command == "status":
            from .status_cmd import cmd_status
            return cmd_status(args)

        elif args.command == "create":
            from .workspace_cmd import cmd_create_workspace
            return cmd_create_workspace(args)

        elif args.command == "login":
            from .login_cmd import cmd_login
            return cmd_login(args)

        else:
            log.error(f"Unknown command: {args.command}")
            return 1

    except KeyboardInterrupt:
        log.warning("\nInterrupted")
        return 130
    except Exception as e:
        log.error(str(e))
        return 1


if __name__ == "__main__":
    sys.exit(main())
