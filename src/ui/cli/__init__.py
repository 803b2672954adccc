"""CLI module for Tweakd."""

from .commands import (
    CliContext,
    create_context,
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
from .formatters import (
    JsonFormatter,
    OutputFormatter,
    TextFormatter,
    format_batch_result,
    format_tweak_list,
    get_formatter,
)

__all__ = [
    # Formatters
    "OutputFormatter",
    "TextFormatter",
    "JsonFormatter",
    "get_formatter",
    "format_tweak_list",
    "format_batch_result",
    # Commands
    "CliContext",
    "create_context",
    "run_list_command",
    "run_profiles_command",
    "run_status_command",
    "run_apply_command",
    "run_undo_command",
    "run_preview_command",
    "run_snapshots_command",
    "run_log_command",
    "run_info_command",
]
