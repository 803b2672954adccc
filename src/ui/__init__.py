"""User interface modules.

This package contains the command-line interface:
- cli: Command handlers and output formatters
"""

from .cli import (
    JsonFormatter,
    OutputFormatter,
    TextFormatter,
    format_batch_result,
    format_tweak_list,
)

__all__ = [
    # CLI Formatters
    "OutputFormatter",
    "TextFormatter",
    "JsonFormatter",
    "format_tweak_list",
    "format_batch_result",
]
