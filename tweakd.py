#!/usr/bin/env python3
"""Tweakd - Windows debloat tweak engine.

Entry point for the command-line interface.
"""

import argparse
import json
import logging
import sys
from pathlib import Path

from src.core.config import Config, load_config, save_config
from src.core.logging_config import get_logger, setup_logging, shutdown_logging
from src.core.models import TweakCategory
from src.ui.cli.commands import (
    run_apply_command,
    run_info_command,
    run_list_command,
    run_log_command,
    run_preview_command,
    run_profiles_command,
    run_snapshots_command,
    run_status_command,
    run_undo_command,
)


def _add_selection_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "tweak_ids",
        nargs="*",
        help="Tweak IDs (default: the configured profile and selections)",
    )
    parser.add_argument(
        "--profile", "-p",
        help="Use the tweaks of a profile (recommended, privacy, performance, ...)",
    )


def create_argument_parser() -> argparse.ArgumentParser:
    """Create the command-line argument parser."""
    parser = argparse.ArgumentParser(
        prog="tweakd",
        description="Windows privacy, performance and debloat tweaks",
        epilog="Every change is recorded in the audit log (see 'tweakd log').",
    )

    parser.add_argument(
        "--version",
        action="version",
        version="%(prog)s 0.1.0",
    )

    parser.add_argument(
        "--config",
        type=Path,
        help="Path to configuration file",
    )

    parser.add_argument(
        "--verbose", "-v",
        action="count",
        default=0,
        help="Increase verbosity (use -vv for debug)",
    )

    parser.add_argument(
        "--quiet", "-q",
        action="store_true",
        help="Suppress console output",
    )

    # Shared by every command with machine-readable output
    json_parent = argparse.ArgumentParser(add_help=False)
    json_parent.add_argument(
        "--json",
        action="store_true",
        help="Output results as JSON",
    )

    # Subcommands
    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # List command
    list_parser = subparsers.add_parser(
        "list", help="List available tweaks", parents=[json_parent]
    )
    list_parser.add_argument(
        "--category", "-c",
        choices=[c.name.lower() for c in TweakCategory],
        help="Filter by category",
    )
    list_parser.add_argument(
        "--severity", "-s",
        choices=["safe", "caution", "dangerous"],
        help="Filter by severity",
    )
    list_parser.add_argument(
        "--status",
        action="store_true",
        help="Also probe the current status of each tweak",
    )

    subparsers.add_parser("profiles", help="List tweak profiles", parents=[json_parent])

    status_parser = subparsers.add_parser(
        "status", help="Show the current status of tweaks", parents=[json_parent]
    )
    _add_selection_arguments(status_parser)

    # Batch commands
    apply_parser = subparsers.add_parser("apply", help="Apply tweaks", parents=[json_parent])
    _add_selection_arguments(apply_parser)
    apply_parser.add_argument(
        "--no-restore-point",
        action="store_true",
        help="Do not create a System Restore point first",
    )
    apply_parser.add_argument(
        "--allow-dangerous",
        action="store_true",
        help="Apply dangerous tweaks even when they are locked by configuration",
    )
    apply_parser.add_argument(
        "--yes", "-y",
        action="store_true",
        help="Do not ask for confirmation",
    )

    undo_parser = subparsers.add_parser("undo", help="Undo tweaks", parents=[json_parent])
    _add_selection_arguments(undo_parser)
    undo_parser.add_argument(
        "--yes", "-y",
        action="store_true",
        help="Do not ask for confirmation",
    )

    preview_parser = subparsers.add_parser(
        "preview", help="Show what apply would change", parents=[json_parent]
    )
    _add_selection_arguments(preview_parser)

    # History commands
    snapshots_parser = subparsers.add_parser(
        "snapshots", help="Show service snapshots", parents=[json_parent]
    )
    snapshots_parser.add_argument(
        "--clear",
        action="store_true",
        help="Delete all service snapshots",
    )

    log_parser = subparsers.add_parser("log", help="Show the audit log", parents=[json_parent])
    log_parser.add_argument(
        "--clear",
        action="store_true",
        help="Delete the audit log",
    )
    log_parser.add_argument(
        "--tail", "-n",
        type=int,
        help="Show only the last N entries",
    )
    log_parser.add_argument(
        "--raw",
        action="store_true",
        help="Print the log file as-is",
    )

    info_parser = subparsers.add_parser(
        "info", help="Show system information", parents=[json_parent]
    )
    info_parser.add_argument(
        "--restore-points",
        action="store_true",
        help="Also list System Restore points",
    )

    # Config command
    config_parser = subparsers.add_parser("config", help="Manage configuration")
    config_parser.add_argument(
        "--init",
        action="store_true",
        help="Create default configuration file",
    )
    config_parser.add_argument(
        "--show",
        action="store_true",
        help="Show current configuration",
    )

    return parser


def get_log_level(verbose: int) -> int:
    """Get logging level from verbosity count."""
    if verbose >= 2:
        return logging.DEBUG
    elif verbose >= 1:
        return logging.INFO
    return logging.WARNING


def run_config(args: argparse.Namespace, config: Config) -> int:
    """Execute the config command."""
    if args.init:
        save_config(config, args.config)
        print(f"Configuration saved to {args.config or config.config_dir / 'config.json'}")
        return 0

    if args.show:
        print(json.dumps(config.to_dict(), indent=2))
        return 0

    print("Use --init to create config or --show to display current config")
    return 1


COMMANDS = {
    "list": run_list_command,
    "profiles": run_profiles_command,
    "status": run_status_command,
    "apply": run_apply_command,
    "undo": run_undo_command,
    "preview": run_preview_command,
    "snapshots": run_snapshots_command,
    "log": run_log_command,
    "info": run_info_command,
    "config": run_config,
}


def main(argv: list[str] | None = None) -> int:
    """Main entry point."""
    parser = create_argument_parser()
    args = parser.parse_args(argv)

    # Load configuration
    config = load_config(args.config) if args.config else load_config()

    # Setup logging
    setup_logging(
        config.logs_dir,
        log_level=get_log_level(args.verbose),
        console_output=not args.quiet,
    )

    # Ensure directories exist
    config.ensure_directories()

    if args.command is None:
        parser.print_help()
        return 0

    logger = get_logger("main")
    logger.debug(f"Running command: {args.command}")

    try:
        return COMMANDS[args.command](args, config)
    finally:
        shutdown_logging()


if __name__ == "__main__":
    sys.exit(main())
