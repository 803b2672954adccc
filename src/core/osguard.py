"""OS Guard - Read-only probes of the Windows environment.

Detects OS version, edition and policy constraints so callers can gate
tweak availability. Nothing here mutates the system, and every probe
returns a defined fallback instead of raising.
"""

import logging
import os
from enum import Enum

from src.system.registry import RegistryStore, WindowsRegistry

logger = logging.getLogger("tweakd.core.osguard")

CURRENT_VERSION_KEY = "SOFTWARE\\Microsoft\\Windows NT\\CurrentVersion"
POLICIES_KEY = "SOFTWARE\\Microsoft\\Windows\\CurrentVersion\\Policies"
MDM_KEY = "SOFTWARE\\Microsoft\\Windows\\CurrentVersion\\MDM"
VSS_SERVICE_KEY = "SYSTEM\\CurrentControlSet\\Services\\VSS"
DEFENDER_KEY = "SOFTWARE\\Microsoft\\Windows Defender"
COMPUTER_NAME_KEY = "SYSTEM\\CurrentControlSet\\Control\\ComputerName\\ComputerName"

WINDOWS_11_FIRST_BUILD = 22000


class WindowsVersion(Enum):
    """Major Windows release."""

    WINDOWS_10 = "Windows 10"
    WINDOWS_11 = "Windows 11"
    UNKNOWN = "Unknown"


class WindowsEdition(Enum):
    """Windows edition as reported by ``EditionID``."""

    HOME = "Home"
    PRO = "Pro"
    ENTERPRISE = "Enterprise"
    EDUCATION = "Education"
    UNKNOWN = "Unknown"


EDITION_IDS = {
    "Core": WindowsEdition.HOME,
    "CoreSingleLanguage": WindowsEdition.HOME,
    "Professional": WindowsEdition.PRO,
    "Enterprise": WindowsEdition.ENTERPRISE,
    "Education": WindowsEdition.EDUCATION,
}


class OSGuard:
    """Environment probe used to gate tweak applicability.

    Example:
        guard = OSGuard()
        if guard.get_windows_version() == WindowsVersion.WINDOWS_11:
            ...
        print(guard.get_system_info())
    """

    def __init__(self, registry: RegistryStore | None = None) -> None:
        self.registry = registry or WindowsRegistry()

    def _read(self, path: str, name: str) -> object | None:
        try:
            return self.registry.get_value("HKLM", path, name)
        except Exception as e:
            logger.debug(f"Could not read HKLM\\{path}\\{name}: {e}")
            return None

    def get_build_number(self) -> int:
        """Return the OS build number, or 0 if it cannot be read."""
        value = self._read(CURRENT_VERSION_KEY, "CurrentBuildNumber")
        try:
            return int(str(value).strip()) if value is not None else 0
        except ValueError:
            return 0

    def get_windows_version(self) -> WindowsVersion:
        build = self.get_build_number()
        if build <= 0:
            return WindowsVersion.UNKNOWN
        if build >= WINDOWS_11_FIRST_BUILD:
            return WindowsVersion.WINDOWS_11
        return WindowsVersion.WINDOWS_10

    def get_windows_edition(self) -> WindowsEdition:
        edition_id = self._read(CURRENT_VERSION_KEY, "EditionID")
        return EDITION_IDS.get(str(edition_id or ""), WindowsEdition.UNKNOWN)

    def is_policy_managed(self) -> bool:
        """Check whether Group Policy objects have been applied."""
        return self._read(POLICIES_KEY, "Gpo") is not None

    def is_mdm_enrolled(self) -> bool:
        """Check whether the device is enrolled in MDM (Intune or similar)."""
        return str(self._read(MDM_KEY, "EnrollmentStatus") or "") == "1"

    def is_managed(self) -> bool:
        return self.is_policy_managed() or self.is_mdm_enrolled()

    def get_system_protection_status(self) -> str:
        """Return "Enabled", "Disabled" or "Unknown" based on the VSS service."""
        try:
            if not self.registry.key_exists("HKLM", VSS_SERVICE_KEY):
                return "Disabled"
            start = self.registry.get_value("HKLM", VSS_SERVICE_KEY, "Start")
        except Exception as e:
            logger.debug(f"Could not read VSS service start type: {e}")
            return "Unknown"

        return "Enabled" if start in (2, 4) else "Disabled"

    def is_defender_active(self) -> bool:
        """Check Defender state; assume active when it cannot be read."""
        return self._read(DEFENDER_KEY, "DisableAntiSpyware") != 1

    def get_device_name(self) -> str:
        value = self._read(COMPUTER_NAME_KEY, "ComputerName")
        return str(value) if value else "Unknown"

    def is_admin(self) -> bool:
        """Check if the current process runs with administrator rights."""
        if os.name != "nt":
            return False
        try:
            import ctypes

            return ctypes.windll.shell32.IsUserAnAdmin() != 0
        except (AttributeError, OSError) as e:
            logger.debug(f"Admin check failed: {e}")
            return False

    def is_build_supported(self, min_build: int) -> bool:
        """Check whether the running build is at least ``min_build``.

        An unreadable build number does not block tweaks.
        """
        if min_build <= 0:
            return True
        build = self.get_build_number()
        return build == 0 or build >= min_build

    def get_system_info(self) -> str:
        """Return a one-line summary of the environment."""
        version = self.get_windows_version()
        edition = self.get_windows_edition()
        build = self.get_build_number()
        protection = self.get_system_protection_status()
        defender = "Active" if self.is_defender_active() else "Disabled"
        managed = "Yes" if self.is_managed() else "No"

        return (
            f"{version.value} {edition.value} (Build {build}) | Protection: {protection} | "
            f"Defender: {defender} | Managed: {managed}"
        )
