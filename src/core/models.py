"""Core data models for Tweakd.

This module defines all enums, data classes, and type definitions used
throughout the application.
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any


class TweakCategory(Enum):
    """Catalog grouping for tweaks."""

    PRIVACY = "Privacy"
    PERFORMANCE = "Performance"
    VISUAL = "Visual"
    SERVICES = "Services"
    BLOATWARE = "Bloatware"
    ADVANCED = "Advanced"


class TweakSeverity(Enum):
    """Risk classification for a tweak.

    Levels:
        SAFE: Cosmetic or per-user change, trivially reversible
        CAUTION: Machine-wide policy or service change
        DANGEROUS: Weakens security or is not reliably reversible

    Severity drives UI/CLI gating only; the engine treats all tweaks alike.
    """

    SAFE = 0
    CAUTION = 1
    DANGEROUS = 2

    @property
    def label(self) -> str:
        return self.name.capitalize()

    def __lt__(self, other: "TweakSeverity") -> bool:
        if isinstance(other, TweakSeverity):
            return self.value < other.value
        return NotImplemented

    def __ge__(self, other: "TweakSeverity") -> bool:
        if isinstance(other, TweakSeverity):
            return self.value >= other.value
        return NotImplemented


class TweakStatus(Enum):
    """Observed state of a tweak on the running system.

    States:
        APPLIED: Every backing value matches the enabled configuration
        NOT_APPLIED: Every backing value matches the disabled configuration
        UNKNOWN: Mixed or inconclusive state, never guessed
        NOT_SUPPORTED: A prerequisite is missing on this OS build
    """

    APPLIED = "Applied"
    NOT_APPLIED = "NotApplied"
    UNKNOWN = "Unknown"
    NOT_SUPPORTED = "NotSupported"


class ValueKind(Enum):
    """Registry value types understood by the registry store."""

    DWORD = "REG_DWORD"
    QWORD = "REG_QWORD"
    STRING = "REG_SZ"
    EXPAND_STRING = "REG_EXPAND_SZ"


class BloatwareScope(Enum):
    """Which preinstalled app lists the app removal tweak targets."""

    THIRD_PARTY_ONLY = "third_party_only"
    INCLUDE_MICROSOFT = "include_microsoft"


class OutcomeStatus(Enum):
    """Result of one tweak within a batch."""

    SUCCEEDED = "SUCCEEDED"
    FAILED = "FAILED"
    SKIPPED = "SKIPPED"
    CANCELLED = "CANCELLED"


class BatchStatus(Enum):
    """Overall result of an apply/undo/preview batch."""

    COMPLETED = "COMPLETED"
    COMPLETED_WITH_ERRORS = "COMPLETED_WITH_ERRORS"
    CANCELLED = "CANCELLED"


@dataclass(frozen=True)
class RegistryEntry:
    """One registry value driven by a declarative tweak.

    Attributes:
        hive: Hive short name ("HKLM", "HKCU", ...)
        path: Sub-key path below the hive
        value_name: Name of the value ("" for the default value)
        enabled_value: Value written when the tweak is applied
        disabled_value: Value written when the tweak is undone
        kind: Registry value type
    """

    hive: str
    path: str
    value_name: str
    enabled_value: Any
    disabled_value: Any
    kind: ValueKind = ValueKind.DWORD

    @property
    def location(self) -> str:
        return f"{self.hive}\\{self.path}\\{self.value_name}"


@dataclass(frozen=True)
class Profile:
    """A named, curated selection of tweak IDs.

    Attributes:
        id: Unique profile identifier
        title: Display name
        description: Short explanation of the use case
        tweak_ids: Ordered tweak IDs the profile selects
    """

    id: str
    title: str
    description: str
    tweak_ids: tuple[str, ...] = ()


@dataclass(frozen=True)
class SnapshotRecord:
    """Prior service start modes captured before a change.

    Attributes:
        timestamp: ISO-8601 UTC capture time
        services: Service name -> start mode string ("Automatic", ...)
    """

    timestamp: str
    services: dict[str, str] = field(default_factory=dict)

    @classmethod
    def now(cls, services: dict[str, str]) -> "SnapshotRecord":
        return cls(timestamp=datetime.now(timezone.utc).isoformat(), services=dict(services))

    def to_dict(self) -> dict[str, Any]:
        return {"timestamp": self.timestamp, "services": dict(self.services)}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "SnapshotRecord":
        services = data.get("services")
        if not isinstance(services, dict):
            services = {}
        return cls(
            timestamp=str(data.get("timestamp", "")),
            services={str(k): str(v) for k, v in services.items()},
        )


@dataclass(frozen=True)
class AuditEntry:
    """A single line of the audit log.

    Attributes:
        timestamp: When the operation was recorded
        status: "SUCCESS", "FAILED" or "CANCELLED"
        operation: Operation tag ("APPLY", "UNDO", "RESTORE-POINT", ...)
        details: Free-text description
    """

    timestamp: datetime
    status: str
    operation: str
    details: str

    @property
    def success(self) -> bool:
        return self.status == "SUCCESS"


@dataclass
class TweakOutcome:
    """Outcome of one tweak inside a batch.

    Attributes:
        tweak_id: ID of the tweak
        title: Display name of the tweak
        status: What happened to the tweak
        error_message: Error text if the tweak failed
        audit_logged: Whether the audit record for this tweak was written
    """

    tweak_id: str
    title: str
    status: OutcomeStatus
    error_message: str | None = None
    audit_logged: bool = True


@dataclass
class BatchResult:
    """Result of an apply, undo or preview batch.

    The operation outcome (``status``, ``outcomes``) is tracked separately
    from the instrumentation outcome (``audit_failures``) so a batch can
    succeed even when its audit trail could not be written.
    """

    operation: str
    outcomes: list[TweakOutcome] = field(default_factory=list)
    status: BatchStatus = BatchStatus.COMPLETED
    restore_point_created: bool = False
    audit_failures: int = 0
    started_at: datetime = field(default_factory=datetime.now)
    finished_at: datetime | None = None

    @property
    def succeeded(self) -> list[TweakOutcome]:
        return [o for o in self.outcomes if o.status == OutcomeStatus.SUCCEEDED]

    @property
    def failed(self) -> list[TweakOutcome]:
        return [o for o in self.outcomes if o.status == OutcomeStatus.FAILED]

    @property
    def skipped(self) -> list[TweakOutcome]:
        return [o for o in self.outcomes if o.status == OutcomeStatus.SKIPPED]

    @property
    def cancelled(self) -> bool:
        return self.status == BatchStatus.CANCELLED

    @property
    def ok(self) -> bool:
        """True when the batch ran to completion without tweak failures."""
        return self.status == BatchStatus.COMPLETED

    def summary(self) -> str:
        """Return a one-line human-readable summary."""
        verb = self.operation.capitalize()
        if self.cancelled:
            return (
                f"{verb} cancelled after {len(self.succeeded)} succeeded, "
                f"{len(self.failed)} failed"
            )
        parts = [f"{len(self.succeeded)} succeeded", f"{len(self.failed)} failed"]
        if self.skipped:
            parts.append(f"{len(self.skipped)} skipped")
        return f"{verb} completed: {', '.join(parts)}"
