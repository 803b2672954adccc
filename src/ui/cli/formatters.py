"""Output formatters for CLI output.

This module provides formatters for displaying tweaks, profiles, batch
results and audit entries in text or JSON form.
"""

import json
import sys
from abc import ABC, abstractmethod
from datetime import datetime
from typing import Any

from src.core.models import (
    AuditEntry,
    BatchResult,
    OutcomeStatus,
    Profile,
    SnapshotRecord,
    TweakSeverity,
    TweakStatus,
)
from src.tweaks.base import Tweak


# ANSI color codes for terminal output
class Colors:
    """ANSI color codes for terminal output."""

    RESET = "\033[0m"
    BOLD = "\033[1m"
    DIM = "\033[2m"

    # Severity colors
    SAFE = "\033[92m"       # Green
    CAUTION = "\033[93m"    # Yellow
    DANGEROUS = "\033[91m"  # Red

    # Status colors
    SUCCESS = "\033[92m"  # Green
    FAILURE = "\033[91m"  # Red
    WARNING = "\033[93m"  # Yellow
    INFO = "\033[94m"     # Blue

    @classmethod
    def is_supported(cls) -> bool:
        """Check if terminal supports colors."""
        return hasattr(sys.stdout, "isatty") and sys.stdout.isatty()


def colorize(text: str, color: str, force: bool = False) -> str:
    """Apply color to text if supported.

    Args:
        text: Text to colorize
        color: ANSI color code
        force: Force color even if not supported

    Returns:
        Colored text or plain text
    """
    if force or Colors.is_supported():
        return f"{color}{text}{Colors.RESET}"
    return text


def get_severity_color(severity: TweakSeverity) -> str:
    """Get color for a severity."""
    color_map = {
        TweakSeverity.SAFE: Colors.SAFE,
        TweakSeverity.CAUTION: Colors.CAUTION,
        TweakSeverity.DANGEROUS: Colors.DANGEROUS,
    }
    return color_map.get(severity, Colors.RESET)


def get_status_color(status: TweakStatus) -> str:
    """Get color for a tweak status."""
    color_map = {
        TweakStatus.APPLIED: Colors.SUCCESS,
        TweakStatus.NOT_APPLIED: Colors.DIM,
        TweakStatus.UNKNOWN: Colors.WARNING,
        TweakStatus.NOT_SUPPORTED: Colors.DIM,
    }
    return color_map.get(status, Colors.RESET)


def _outcome_color(status: OutcomeStatus) -> str:
    return {
        OutcomeStatus.SUCCEEDED: Colors.SUCCESS,
        OutcomeStatus.FAILED: Colors.FAILURE,
        OutcomeStatus.SKIPPED: Colors.WARNING,
        OutcomeStatus.CANCELLED: Colors.DIM,
    }.get(status, Colors.RESET)


class OutputFormatter(ABC):
    """Abstract base class for output formatters."""

    @abstractmethod
    def format_tweak_list(
        self,
        tweaks: list[Tweak],
        statuses: dict[str, TweakStatus] | None = None,
    ) -> str:
        """Format a list of tweaks, optionally with their current status."""
        pass

    @abstractmethod
    def format_profile_list(self, profiles: list[Profile]) -> str:
        """Format a list of profiles."""
        pass

    @abstractmethod
    def format_batch_result(self, result: BatchResult) -> str:
        """Format the result of an apply/undo/preview batch."""
        pass

    @abstractmethod
    def format_audit_entries(self, entries: list[AuditEntry]) -> str:
        """Format audit log entries."""
        pass

    @abstractmethod
    def format_snapshots(self, snapshots: list[SnapshotRecord]) -> str:
        """Format service snapshot history."""
        pass


class TextFormatter(OutputFormatter):
    """Plain text formatter with optional colors."""

    def __init__(self, use_colors: bool = True, verbose: bool = False):
        """Initialize the text formatter.

        Args:
            use_colors: Whether to use ANSI colors
            verbose: Whether to show descriptions and change lists
        """
        self.use_colors = use_colors and Colors.is_supported()
        self.verbose = verbose

    def _colorize(self, text: str, color: str) -> str:
        """Apply color if enabled."""
        if self.use_colors:
            return colorize(text, color, force=True)
        return text

    def format_tweak_list(
        self,
        tweaks: list[Tweak],
        statuses: dict[str, TweakStatus] | None = None,
    ) -> str:
        if not tweaks:
            return "No tweaks found."

        lines = []

        header = f"{'ID':<38} {'Category':<12} {'Severity':<10} {'Admin':<6}"
        if statuses is not None:
            header += f" {'Status':<12}"
        lines.append(self._colorize(header, Colors.BOLD))
        lines.append("-" * len(header))

        for tweak in tweaks:
            severity = tweak.severity.label
            severity_text = self._colorize(f"{severity:<10}", get_severity_color(tweak.severity))
            admin = "yes" if tweak.is_admin_required else ""
            line = f"{tweak.id:<38} {tweak.category.value:<12} {severity_text} {admin:<6}"

            if statuses is not None:
                status = statuses.get(tweak.id, TweakStatus.UNKNOWN)
                line += " " + self._colorize(f"{status.value:<12}", get_status_color(status))
            lines.append(line)

            if self.verbose:
                lines.append(f"    {tweak.title}: {tweak.description}")

        lines.append("-" * len(header))
        lines.append(f"Total: {len(tweaks)} tweaks")

        return "\n".join(lines)

    def format_profile_list(self, profiles: list[Profile]) -> str:
        if not profiles:
            return "No profiles found."

        lines = []
        for profile in profiles:
            lines.append(f"{self._colorize(profile.title, Colors.BOLD)} ({profile.id})")
            if profile.description:
                lines.append(f"  {profile.description}")
            lines.append(f"  Tweaks: {len(profile.tweak_ids)}")
            if self.verbose:
                for tweak_id in profile.tweak_ids:
                    lines.append(f"    - {tweak_id}")
            lines.append("")

        return "\n".join(lines).rstrip()

    def format_batch_result(self, result: BatchResult) -> str:
        if result.cancelled:
            status = self._colorize("CANCELLED", Colors.WARNING)
        elif result.failed:
            status = self._colorize("COMPLETED WITH ERRORS", Colors.FAILURE)
        else:
            status = self._colorize("COMPLETED", Colors.SUCCESS)

        lines = [f"{result.operation.capitalize()}: [{status}]"]

        if result.restore_point_created:
            lines.append("  Restore point created")

        for outcome in result.outcomes:
            marker = self._colorize(f"{outcome.status.value:<9}", _outcome_color(outcome.status))
            line = f"  {marker} {outcome.title}"
            if outcome.error_message:
                line += f": {outcome.error_message}"
            lines.append(line)

        lines.append(f"  {result.summary()}")

        if result.audit_failures:
            warning = f"{result.audit_failures} audit record(s) could not be written"
            lines.append(f"  {self._colorize(warning, Colors.WARNING)}")

        return "\n".join(lines)

    def format_audit_entries(self, entries: list[AuditEntry]) -> str:
        if not entries:
            return "No audit entries."

        lines = []
        for entry in entries:
            color = Colors.SUCCESS if entry.success else Colors.FAILURE
            status = self._colorize(f"{entry.status:<9}", color)
            timestamp = entry.timestamp.strftime("%Y-%m-%d %H:%M:%S")
            lines.append(f"{timestamp} {status} {entry.operation:<14} {entry.details}")

        return "\n".join(lines)

    def format_snapshots(self, snapshots: list[SnapshotRecord]) -> str:
        if not snapshots:
            return "No service snapshots."

        lines = []
        for record in reversed(snapshots):
            lines.append(self._colorize(record.timestamp, Colors.BOLD))
            for name, start_type in record.services.items():
                lines.append(f"  {name}: {start_type}")

        return "\n".join(lines)


class JsonFormatter(OutputFormatter):
    """JSON output formatter."""

    def __init__(self, indent: int = 2, compact: bool = False):
        """Initialize the JSON formatter.

        Args:
            indent: Indentation level
            compact: Whether to use compact output
        """
        self.indent = None if compact else indent

    def _serialize(self, obj: Any) -> Any:
        """Serialize an object for JSON output."""
        if isinstance(obj, datetime):
            return obj.isoformat()
        if hasattr(obj, "value"):  # Enum
            return obj.value
        return str(obj)

    def _dumps(self, data: Any) -> str:
        return json.dumps(data, indent=self.indent, default=self._serialize)

    def format_tweak_list(
        self,
        tweaks: list[Tweak],
        statuses: dict[str, TweakStatus] | None = None,
    ) -> str:
        items = []
        for tweak in tweaks:
            item = {
                "id": tweak.id,
                "title": tweak.title,
                "description": tweak.description,
                "category": tweak.category.value,
                "severity": tweak.severity.label,
                "is_admin_required": tweak.is_admin_required,
                "supports_undo": tweak.supports_undo,
                "min_build": tweak.min_build,
            }
            if statuses is not None:
                item["status"] = statuses.get(tweak.id, TweakStatus.UNKNOWN).value
            items.append(item)

        return self._dumps({"count": len(items), "tweaks": items})

    def format_profile_list(self, profiles: list[Profile]) -> str:
        data = {
            "count": len(profiles),
            "profiles": [
                {
                    "id": p.id,
                    "title": p.title,
                    "description": p.description,
                    "tweak_ids": list(p.tweak_ids),
                }
                for p in profiles
            ],
        }
        return self._dumps(data)

    def format_batch_result(self, result: BatchResult) -> str:
        data = {
            "operation": result.operation,
            "status": result.status.value,
            "restore_point_created": result.restore_point_created,
            "audit_failures": result.audit_failures,
            "started_at": result.started_at,
            "finished_at": result.finished_at,
            "summary": result.summary(),
            "outcomes": [
                {
                    "tweak_id": o.tweak_id,
                    "title": o.title,
                    "status": o.status.value,
                    "error_message": o.error_message,
                    "audit_logged": o.audit_logged,
                }
                for o in result.outcomes
            ],
        }
        return self._dumps(data)

    def format_audit_entries(self, entries: list[AuditEntry]) -> str:
        data = {
            "count": len(entries),
            "entries": [
                {
                    "timestamp": e.timestamp,
                    "status": e.status,
                    "operation": e.operation,
                    "details": e.details,
                }
                for e in entries
            ],
        }
        return self._dumps(data)

    def format_snapshots(self, snapshots: list[SnapshotRecord]) -> str:
        return self._dumps({"count": len(snapshots), "snapshots": [s.to_dict() for s in snapshots]})


# Convenience functions

def get_formatter(as_json: bool = False, verbose: bool = False) -> OutputFormatter:
    """Return a JSON or text formatter."""
    if as_json:
        return JsonFormatter()
    return TextFormatter(verbose=verbose)


def format_tweak_list(
    tweaks: list[Tweak],
    statuses: dict[str, TweakStatus] | None = None,
    as_json: bool = False,
) -> str:
    """Format a list of tweaks.

    Args:
        tweaks: Tweaks to format
        statuses: Optional status per tweak ID
        as_json: Whether to output JSON

    Returns:
        Formatted string
    """
    return get_formatter(as_json).format_tweak_list(tweaks, statuses)


def format_batch_result(result: BatchResult, as_json: bool = False) -> str:
    """Format a batch result.

    Args:
        result: Result to format
        as_json: Whether to output JSON

    Returns:
        Formatted string
    """
    return get_formatter(as_json).format_batch_result(result)
