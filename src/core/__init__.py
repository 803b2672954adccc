"""Core module - engine, models, and infrastructure.

Only dependency-free modules are re-exported here. Import the engine,
snapshot, restore and OS guard modules directly, since they depend on
``src.system``, which itself imports from this package.
"""

from .audit import AuditLogger
from .config import Config, get_default_config, load_config, save_config
from .errors import (
    CommandError,
    OperationCancelledError,
    RestorePointError,
    TweakdError,
    TweakError,
)
from .logging_config import get_logger, setup_logging, shutdown_logging
from .models import (
    AuditEntry,
    BatchResult,
    BatchStatus,
    BloatwareScope,
    OutcomeStatus,
    Profile,
    RegistryEntry,
    SnapshotRecord,
    TweakCategory,
    TweakOutcome,
    TweakSeverity,
    TweakStatus,
    ValueKind,
)

__all__ = [
    # Models
    "TweakCategory",
    "TweakSeverity",
    "TweakStatus",
    "ValueKind",
    "BloatwareScope",
    "OutcomeStatus",
    "BatchStatus",
    "RegistryEntry",
    "Profile",
    "SnapshotRecord",
    "AuditEntry",
    "TweakOutcome",
    "BatchResult",
    # Errors
    "TweakdError",
    "TweakError",
    "RestorePointError",
    "OperationCancelledError",
    "CommandError",
    # Config
    "Config",
    "load_config",
    "save_config",
    "get_default_config",
    # Logging
    "setup_logging",
    "shutdown_logging",
    "get_logger",
    "AuditLogger",
]
