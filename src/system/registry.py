"""Registry store abstraction.

Tweaks read and write registry values through :class:`RegistryStore` so
the tweak layer never touches ``winreg`` directly. :class:`WindowsRegistry`
is the live implementation; tests supply an in-memory store.
"""

import logging
from abc import ABC, abstractmethod
from typing import Any

from src.core.models import ValueKind

logger = logging.getLogger("tweakd.system.registry")

HIVE_ALIASES = {
    "HKLM": "HKEY_LOCAL_MACHINE",
    "HKEY_LOCAL_MACHINE": "HKEY_LOCAL_MACHINE",
    "HKCU": "HKEY_CURRENT_USER",
    "HKEY_CURRENT_USER": "HKEY_CURRENT_USER",
    "HKCR": "HKEY_CLASSES_ROOT",
    "HKEY_CLASSES_ROOT": "HKEY_CLASSES_ROOT",
    "HKU": "HKEY_USERS",
    "HKEY_USERS": "HKEY_USERS",
}


def normalize_hive(hive: str) -> str:
    """Return the canonical ``HKEY_*`` name for a hive alias.

    Raises:
        ValueError: If the hive name is not recognised.
    """
    try:
        return HIVE_ALIASES[hive.upper()]
    except KeyError:
        raise ValueError(f"Unknown registry hive: {hive}") from None


class RegistryStore(ABC):
    """Key/value access to a registry-like backing store."""

    @abstractmethod
    def get_value(self, hive: str, path: str, name: str, default: Any = None) -> Any:
        """Read a value, returning ``default`` if the key or value is missing.

        Raises:
            OSError: If the value exists but cannot be read.
        """

    @abstractmethod
    def set_value(
        self,
        hive: str,
        path: str,
        name: str,
        value: Any,
        kind: ValueKind = ValueKind.DWORD,
    ) -> None:
        """Write a value, creating the key path if needed."""

    @abstractmethod
    def delete_value(self, hive: str, path: str, name: str) -> None:
        """Delete a value. Missing values are ignored."""

    @abstractmethod
    def key_exists(self, hive: str, path: str) -> bool:
        """Check whether a key exists."""

    @abstractmethod
    def create_key(self, hive: str, path: str) -> None:
        """Create a key and any missing parents. Existing keys are left alone."""

    @abstractmethod
    def delete_key(self, hive: str, path: str) -> None:
        """Delete a key and all of its sub-keys. Missing keys are ignored."""


class WindowsRegistry(RegistryStore):
    """Registry store backed by the Windows registry via ``winreg``.

    All access uses the 64-bit registry view so that policy keys land in
    the same place regardless of interpreter bitness.
    """

    def _hive_handle(self, hive: str) -> Any:
        import winreg

        return getattr(winreg, normalize_hive(hive))

    def _access(self, base: int) -> int:
        import winreg

        return base | winreg.KEY_WOW64_64KEY

    def _kind_constant(self, kind: ValueKind) -> int:
        import winreg

        return {
            ValueKind.DWORD: winreg.REG_DWORD,
            ValueKind.QWORD: winreg.REG_QWORD,
            ValueKind.STRING: winreg.REG_SZ,
            ValueKind.EXPAND_STRING: winreg.REG_EXPAND_SZ,
        }[kind]

    def get_value(self, hive: str, path: str, name: str, default: Any = None) -> Any:
        import winreg

        try:
            with winreg.OpenKey(
                self._hive_handle(hive), path, 0, self._access(winreg.KEY_READ)
            ) as key:
                value, _ = winreg.QueryValueEx(key, name)
                return value
        except FileNotFoundError:
            return default

    def set_value(
        self,
        hive: str,
        path: str,
        name: str,
        value: Any,
        kind: ValueKind = ValueKind.DWORD,
    ) -> None:
        import winreg

        if kind in (ValueKind.DWORD, ValueKind.QWORD):
            value = int(value)
        else:
            value = str(value)

        with winreg.CreateKeyEx(
            self._hive_handle(hive), path, 0, self._access(winreg.KEY_WRITE)
        ) as key:
            winreg.SetValueEx(key, name, 0, self._kind_constant(kind), value)

        logger.debug(f"Set {hive}\\{path}\\{name} = {value!r} ({kind.value})")

    def delete_value(self, hive: str, path: str, name: str) -> None:
        import winreg

        try:
            with winreg.OpenKey(
                self._hive_handle(hive), path, 0, self._access(winreg.KEY_SET_VALUE)
            ) as key:
                winreg.DeleteValue(key, name)
        except FileNotFoundError:
            return

        logger.debug(f"Deleted value {hive}\\{path}\\{name}")

    def key_exists(self, hive: str, path: str) -> bool:
        import winreg

        try:
            with winreg.OpenKey(self._hive_handle(hive), path, 0, self._access(winreg.KEY_READ)):
                return True
        except FileNotFoundError:
            return False

    def create_key(self, hive: str, path: str) -> None:
        import winreg

        with winreg.CreateKeyEx(self._hive_handle(hive), path, 0, self._access(winreg.KEY_WRITE)):
            pass

        logger.debug(f"Created key {hive}\\{path}")

    def delete_key(self, hive: str, path: str) -> None:
        import winreg

        root = self._hive_handle(hive)
        try:
            self._delete_tree(root, path)
        except FileNotFoundError:
            return

        logger.debug(f"Deleted key {hive}\\{path}")

    def _delete_tree(self, root: Any, path: str) -> None:
        import winreg

        with winreg.OpenKey(root, path, 0, self._access(winreg.KEY_ALL_ACCESS)) as key:
            while True:
                try:
                    child = winreg.EnumKey(key, 0)
                except OSError:
                    break
                self._delete_tree(root, f"{path}\\{child}")

        winreg.DeleteKeyEx(root, path, self._access(0), 0)


def values_equal(current: Any, expected: Any) -> bool:
    """Compare a value read from the registry with an expected value.

    Integers compare equal across widths and against their decimal string
    form, since DWORD/QWORD values and policy values written as strings
    can come back in either representation.

    Args:
        current: Value read from the store (may be None)
        expected: Value declared by a tweak

    Returns:
        True if the two values represent the same setting.
    """
    if current is None:
        return expected is None

    if isinstance(expected, int) and not isinstance(expected, bool):
        if isinstance(current, bool):
            return False
        if isinstance(current, int):
            return current == expected
        if isinstance(current, str):
            try:
                return int(current.strip()) == expected
            except ValueError:
                return False
        return False

    if isinstance(expected, str) and isinstance(current, str):
        return current == expected

    return current == expected
