"""Tweak abstraction and the declarative registry tweak.

A tweak is one reversible unit of system configuration. Every tweak
exposes the same capability set (status, apply, undo); most are plain
registry tweaks described entirely by a table of :class:`RegistryEntry`
rows, so a single :class:`RegistryTweak` class covers them all.
"""

import logging
from abc import ABC, abstractmethod
from typing import Any

from src.core.models import RegistryEntry, TweakCategory, TweakSeverity, TweakStatus
from src.system.registry import RegistryStore, values_equal

logger = logging.getLogger("tweakd.tweaks")


class Tweak(ABC):
    """Base class for all tweaks.

    Tweaks are built once when the catalog is created and hold no state
    that changes between calls; collaborators such as the registry store
    are injected at construction.

    Attributes:
        id: Stable namespaced identifier ("privacy.disableCortana")
        title: Display name
        description: What the tweak changes
        category: Catalog grouping
        severity: Risk classification used for UI gating
        is_admin_required: Whether applying/undoing needs elevation
        supports_undo: Whether undo() can restore the previous state
        min_build: Lowest Windows build the tweak applies to (0 = any)
    """

    def __init__(
        self,
        id: str,
        title: str,
        description: str,
        category: TweakCategory,
        severity: TweakSeverity,
        is_admin_required: bool = False,
        supports_undo: bool = True,
        min_build: int = 0,
    ) -> None:
        if not id:
            raise ValueError("Tweak id must not be empty")
        self.id = id
        self.title = title
        self.description = description
        self.category = category
        self.severity = severity
        self.is_admin_required = is_admin_required
        self.supports_undo = supports_undo
        self.min_build = min_build

    @abstractmethod
    def get_status(self) -> TweakStatus:
        """Probe the current system state. Must not mutate anything."""

    @abstractmethod
    def apply(self) -> None:
        """Drive the system to the tweak's enabled configuration."""

    @abstractmethod
    def undo(self) -> None:
        """Drive the system back to the disabled configuration."""

    @abstractmethod
    def describe_changes(self) -> list[str]:
        """Describe what apply() would change, one line per change."""

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.id!r})"


class RegistryTweak(Tweak):
    """Declarative tweak driven by an ordered list of registry entries.

    Apply writes every entry's enabled value, undo writes every entry's
    disabled value. Status is APPLIED only when all entries hold their
    enabled value, NOT_APPLIED only when all hold their disabled value,
    and UNKNOWN for anything in between.

    Example:
        tweak = RegistryTweak(
            registry,
            entries=(RegistryEntry("HKCU", r"Software\\...\\Advanced", "HideFileExt", 0, 1),),
            id="visual.showFileExtensions",
            title="Show File Extensions",
            description="Shows file extensions in File Explorer.",
            category=TweakCategory.VISUAL,
            severity=TweakSeverity.SAFE,
        )
        tweak.apply()
    """

    def __init__(
        self,
        registry: RegistryStore,
        entries: tuple[RegistryEntry, ...],
        **kwargs: Any,
    ) -> None:
        super().__init__(**kwargs)
        if not entries:
            raise ValueError(f"Registry tweak {self.id} has no entries")
        self.registry = registry
        self.entries = tuple(entries)

    def _read(self, entry: RegistryEntry) -> Any:
        # A missing or unreadable value counts as the disabled value
        try:
            return self.registry.get_value(
                entry.hive, entry.path, entry.value_name, entry.disabled_value
            )
        except Exception as e:
            logger.debug(f"Could not read {entry.location}: {e}")
            return entry.disabled_value

    def get_status(self) -> TweakStatus:
        all_applied = True
        all_not_applied = True

        for entry in self.entries:
            current = self._read(entry)
            all_applied &= values_equal(current, entry.enabled_value)
            all_not_applied &= values_equal(current, entry.disabled_value)

        if all_applied:
            return TweakStatus.APPLIED
        if all_not_applied:
            return TweakStatus.NOT_APPLIED
        return TweakStatus.UNKNOWN

    def apply(self) -> None:
        for entry in self.entries:
            self.registry.set_value(
                entry.hive, entry.path, entry.value_name, entry.enabled_value, entry.kind
            )

    def undo(self) -> None:
        for entry in self.entries:
            self.registry.set_value(
                entry.hive, entry.path, entry.value_name, entry.disabled_value, entry.kind
            )

    def describe_changes(self) -> list[str]:
        return [
            f"Set {entry.location} = {entry.enabled_value!r} ({entry.kind.value})"
            for entry in self.entries
        ]
