"""CLI command implementations.

This module provides the command handlers for all CLI commands.
"""

import argparse
import json
import sys
import threading
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

from src.core.audit import AuditLogger
from src.core.config import Config
from src.core.engine import TweakEngine
from src.core.errors import RestorePointError
from src.core.models import BatchResult, TweakCategory, TweakSeverity
from src.core.osguard import OSGuard
from src.core.restore import SystemRestoreManager
from src.core.snapshot import SnapshotManager, create_snapshot_manager
from src.system.registry import WindowsRegistry
from src.system.services import WindowsServiceManager
from src.system.shell import CommandRunner
from src.tweaks.catalog import TweakCatalog, create_default_catalog

from .formatters import get_formatter

EXIT_OK = 0
EXIT_ERROR = 1
EXIT_NOT_ADMIN = 2


@dataclass
class CliContext:
    """Live collaborators shared by the command handlers."""

    catalog: TweakCatalog
    engine: TweakEngine
    audit: AuditLogger
    snapshots: SnapshotManager
    guard: OSGuard
    restore: SystemRestoreManager


def create_context(config: Config) -> CliContext:
    """Wire the live registry, service and PowerShell backends together."""
    registry = WindowsRegistry()
    services = WindowsServiceManager(registry)
    runner = CommandRunner(timeout=config.engine.command_timeout_seconds)
    snapshots = create_snapshot_manager(services, config)
    catalog = create_default_catalog(registry, services, runner, snapshots, config)
    audit = AuditLogger(config.logs_dir)
    guard = OSGuard(registry)
    restore = SystemRestoreManager(runner)
    engine = TweakEngine(catalog, audit, restore=restore, guard=guard)
    return CliContext(catalog, engine, audit, snapshots, guard, restore)


def _is_json(args: argparse.Namespace) -> bool:
    return getattr(args, "json", False)


def _error(message: str) -> None:
    print(f"Error: {message}", file=sys.stderr)


def _select_tweak_ids(
    args: argparse.Namespace, config: Config, catalog: TweakCatalog
) -> list[str] | None:
    """Work out which tweaks a command targets.

    Explicit IDs win over ``--profile``; with neither, the configured
    profile and per-tweak selections are used.

    Returns:
        Tweak IDs, or None if the requested profile does not exist
    """
    tweak_ids = list(getattr(args, "tweak_ids", None) or [])
    profile_id = getattr(args, "profile", None)

    if tweak_ids:
        unknown = catalog.unknown_ids(tweak_ids)
        for tweak_id in unknown:
            print(f"Warning: ignoring unknown tweak: {tweak_id}", file=sys.stderr)
        return tweak_ids

    if profile_id is None:
        profile_id = config.debloat.selected_profile_id
        use_selection = True
    else:
        use_selection = False

    selected: list[str] = []
    if profile_id:
        profile = catalog.get_profile(profile_id)
        if profile is None:
            _error(f"Profile not found: {profile_id}")
            return None
        selected = list(profile.tweak_ids)

    if use_selection:
        lowered = {i.lower() for i in selected}
        for tweak_id, enabled in config.debloat.selected_tweaks.items():
            if enabled and tweak_id.lower() not in lowered:
                selected.append(tweak_id)
                lowered.add(tweak_id.lower())
        disabled = {i.lower() for i, enabled in config.debloat.selected_tweaks.items() if not enabled}
        selected = [i for i in selected if i.lower() not in disabled]

    return selected


def _confirm(prompt: str, args: argparse.Namespace) -> bool:
    if getattr(args, "yes", False):
        return True
    response = input(f"\n{prompt} [y/N] ").strip().lower()
    return response == "y"


def _progress_sink(args: argparse.Namespace) -> Callable[[str], None] | None:
    if _is_json(args) or getattr(args, "quiet", False):
        return None
    return print


def _run_cancellable(operation: Callable[..., BatchResult], *args: Any, **kwargs: Any) -> BatchResult:
    """Run a batch on a worker thread so Ctrl+C can request cancellation.

    The batch stops at the next tweak boundary (or kills a running
    restore point process) once the interrupt is received.
    """
    cancel_event = threading.Event()
    outcome: dict[str, Any] = {}

    def worker() -> None:
        try:
            outcome["result"] = operation(*args, cancel_event=cancel_event, **kwargs)
        except Exception as e:
            outcome["error"] = e

    thread = threading.Thread(target=worker, name="tweakd-batch", daemon=True)
    thread.start()

    while thread.is_alive():
        try:
            thread.join(0.2)
        except KeyboardInterrupt:
            if not cancel_event.is_set():
                print("\nCancelling after the current tweak...", file=sys.stderr)
                cancel_event.set()

    if "error" in outcome:
        raise outcome["error"]
    return outcome["result"]


def _check_admin(context: CliContext, operation: str, tweak_ids: list[str]) -> bool:
    """Audit the privilege pre-flight check and report missing rights."""
    admin_required = context.engine.requires_admin(tweak_ids)
    has_admin = context.guard.is_admin() if admin_required else True
    context.audit.log_admin_check(operation, admin_required, has_admin)

    if admin_required and not has_admin:
        _error("Administrator rights are required. Re-run from an elevated prompt.")
        return False
    return True


def run_list_command(args: argparse.Namespace, config: Config) -> int:
    """Execute the list command.

    Args:
        args: Command-line arguments
        config: Configuration object

    Returns:
        Exit code
    """
    context = create_context(config)
    tweaks = context.catalog.tweaks

    if args.category:
        category = TweakCategory[args.category.upper()]
        tweaks = [t for t in tweaks if t.category == category]

    if args.severity:
        severity = TweakSeverity[args.severity.upper()]
        tweaks = [t for t in tweaks if t.severity == severity]

    statuses = None
    if args.status:
        statuses = context.engine.get_statuses([t.id for t in tweaks])

    formatter = get_formatter(_is_json(args), verbose=getattr(args, "verbose", 0) > 0)
    print(formatter.format_tweak_list(tweaks, statuses))
    return EXIT_OK


def run_profiles_command(args: argparse.Namespace, config: Config) -> int:
    """Execute the profiles command."""
    context = create_context(config)
    formatter = get_formatter(_is_json(args), verbose=getattr(args, "verbose", 0) > 0)
    print(formatter.format_profile_list(context.catalog.profiles))
    return EXIT_OK


def run_status_command(args: argparse.Namespace, config: Config) -> int:
    """Execute the status command.

    With no IDs and no profile, every tweak in the catalog is probed.
    """
    context = create_context(config)

    if getattr(args, "tweak_ids", None) or getattr(args, "profile", None):
        tweak_ids = _select_tweak_ids(args, config, context.catalog)
        if tweak_ids is None:
            return EXIT_ERROR
        statuses = context.engine.get_statuses(tweak_ids)
    else:
        statuses = context.engine.get_statuses()

    tweaks = [context.catalog.get(tweak_id) for tweak_id in statuses]
    print(get_formatter(_is_json(args)).format_tweak_list(tweaks, statuses))
    return EXIT_OK


def run_apply_command(args: argparse.Namespace, config: Config) -> int:
    """Execute the apply command.

    Args:
        args: Command-line arguments
        config: Configuration object

    Returns:
        Exit code (2 when admin rights are missing)
    """
    context = create_context(config)
    tweak_ids = _select_tweak_ids(args, config, context.catalog)
    if tweak_ids is None:
        return EXIT_ERROR
    if not tweak_ids:
        print("No tweaks selected.")
        return EXIT_OK

    tweaks = [t for t in (context.catalog.get(i) for i in tweak_ids) if t is not None]

    dangerous = [t for t in tweaks if t.severity == TweakSeverity.DANGEROUS]
    if dangerous and config.debloat.lock_dangerous_tweaks and not args.allow_dangerous:
        _error("Dangerous tweaks are locked by configuration:")
        for tweak in dangerous:
            print(f"  - {tweak.id} ({tweak.title})", file=sys.stderr)
        print("Pass --allow-dangerous to apply them anyway.", file=sys.stderr)
        return EXIT_ERROR

    if not _check_admin(context, "apply", tweak_ids):
        return EXIT_NOT_ADMIN

    create_restore_point = config.engine.create_restore_point and not args.no_restore_point

    if not _is_json(args):
        print(f"\nAbout to apply {len(tweaks)} tweak(s):")
        for tweak in tweaks:
            print(f"  - {tweak.title} [{tweak.severity.label}]")
        if dangerous:
            print("\nWarning: dangerous tweaks selected. Some may not be reversible.")
        if create_restore_point and context.guard.get_system_protection_status() == "Disabled":
            print("\nWarning: System Protection appears to be disabled.")

    if not _confirm("Proceed?", args):
        print("Cancelled.")
        return EXIT_OK

    context.audit.log_session_start()
    try:
        result = _run_cancellable(
            context.engine.apply,
            tweak_ids,
            create_restore_point=create_restore_point,
            description=config.engine.restore_point_description,
            progress=_progress_sink(args),
        )
    except RestorePointError as e:
        _error(f"{e}. No tweaks were applied.")
        return EXIT_ERROR
    finally:
        context.audit.log_session_end()

    print(get_formatter(_is_json(args)).format_batch_result(result))
    return EXIT_OK if result.ok else EXIT_ERROR


def run_undo_command(args: argparse.Namespace, config: Config) -> int:
    """Execute the undo command."""
    context = create_context(config)
    tweak_ids = _select_tweak_ids(args, config, context.catalog)
    if tweak_ids is None:
        return EXIT_ERROR
    if not tweak_ids:
        print("No tweaks selected.")
        return EXIT_OK

    if not _check_admin(context, "undo", tweak_ids):
        return EXIT_NOT_ADMIN

    if not _is_json(args):
        print(f"\nAbout to undo {len(tweak_ids)} tweak(s).")
    if not _confirm("Proceed with undo?", args):
        print("Cancelled.")
        return EXIT_OK

    context.audit.log_session_start()
    try:
        result = _run_cancellable(context.engine.undo, tweak_ids, progress=_progress_sink(args))
    finally:
        context.audit.log_session_end()

    print(get_formatter(_is_json(args)).format_batch_result(result))
    return EXIT_OK if result.ok else EXIT_ERROR


def run_preview_command(args: argparse.Namespace, config: Config) -> int:
    """Execute the preview (dry-run) command."""
    context = create_context(config)
    tweak_ids = _select_tweak_ids(args, config, context.catalog)
    if tweak_ids is None:
        return EXIT_ERROR

    result = context.engine.preview(tweak_ids, progress=_progress_sink(args))
    if _is_json(args):
        print(get_formatter(True).format_batch_result(result))
    return EXIT_OK if result.ok else EXIT_ERROR


def run_snapshots_command(args: argparse.Namespace, config: Config) -> int:
    """Execute the snapshots command."""
    context = create_context(config)

    if args.clear:
        context.snapshots.clear_snapshots()
        print("Service snapshots cleared.")
        return EXIT_OK

    print(get_formatter(_is_json(args)).format_snapshots(context.snapshots.list_snapshots()))
    return EXIT_OK


def run_log_command(args: argparse.Namespace, config: Config) -> int:
    """Execute the log command."""
    audit = AuditLogger(config.logs_dir)

    if args.clear:
        audit.clear_logs()
        print("Audit log cleared.")
        return EXIT_OK

    if args.raw:
        print(audit.export_logs())
        return EXIT_OK

    entries = audit.read_entries()
    if args.tail:
        entries = entries[-args.tail:]
    print(get_formatter(_is_json(args)).format_audit_entries(entries))
    return EXIT_OK


def run_info_command(args: argparse.Namespace, config: Config) -> int:
    """Execute the info command."""
    context = create_context(config)
    guard = context.guard

    if _is_json(args):
        data = {
            "windows_version": guard.get_windows_version().value,
            "edition": guard.get_windows_edition().value,
            "build": guard.get_build_number(),
            "device_name": guard.get_device_name(),
            "is_admin": guard.is_admin(),
            "system_protection": guard.get_system_protection_status(),
            "defender_active": guard.is_defender_active(),
            "policy_managed": guard.is_policy_managed(),
            "mdm_enrolled": guard.is_mdm_enrolled(),
        }
        print(json.dumps(data, indent=2))
        return EXIT_OK

    print(guard.get_system_info())
    print(f"Device: {guard.get_device_name()}")
    print(f"Administrator: {'Yes' if guard.is_admin() else 'No'}")
    if guard.is_managed():
        print("Note: this device is managed by Group Policy or MDM; tweaks may be overridden.")

    if args.restore_points:
        points = context.restore.list_restore_points()
        print("\nRestore points:")
        if not points:
            print("  (none)")
        for point in points:
            created = point.creation_time.strftime("%Y-%m-%d %H:%M") if point.creation_time else "?"
            print(f"  #{point.sequence_number} {created} {point.description}")

    return EXIT_OK
