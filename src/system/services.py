"""Windows service control.

Service-backed tweaks query, reconfigure and stop services through
:class:`ServiceManager`. :class:`WindowsServiceManager` talks to the
Service Control Manager through WMI (``Win32_Service``) and reads start
types straight from the registry, which is where the SCM keeps them.
"""

import logging
import time
from abc import ABC, abstractmethod
from enum import Enum
from typing import Any

from src.system.registry import RegistryStore, WindowsRegistry

logger = logging.getLogger("tweakd.system.services")

SERVICES_KEY = "SYSTEM\\CurrentControlSet\\Services"


class ServiceStartType(Enum):
    """Windows service start types."""

    BOOT = "Boot"  # Loaded by boot loader
    SYSTEM = "System"  # Loaded by I/O subsystem
    AUTOMATIC = "Automatic"  # Started by SCM at boot
    MANUAL = "Manual"  # Started on demand
    DISABLED = "Disabled"  # Cannot be started
    UNKNOWN = "Unknown"

    @classmethod
    def from_value(cls, value: int | str | None) -> "ServiceStartType":
        """Convert a registry ``Start`` value or a start mode name to enum.

        Args:
            value: Start type as int (0-4) or string.

        Returns:
            Corresponding ServiceStartType enum.
        """
        if value is None:
            return cls.UNKNOWN

        if isinstance(value, str):
            value_lower = value.strip().lower()
            if value_lower.isdigit():
                return cls.from_value(int(value_lower))
            if "boot" in value_lower:
                return cls.BOOT
            elif "system" in value_lower:
                return cls.SYSTEM
            elif "auto" in value_lower:
                return cls.AUTOMATIC
            elif "manual" in value_lower or "demand" in value_lower:
                return cls.MANUAL
            elif "disabled" in value_lower:
                return cls.DISABLED
            return cls.UNKNOWN

        mapping = {
            0: cls.BOOT,
            1: cls.SYSTEM,
            2: cls.AUTOMATIC,
            3: cls.MANUAL,
            4: cls.DISABLED,
        }
        return mapping.get(value, cls.UNKNOWN)


class ServiceManager(ABC):
    """Query and control OS services by name."""

    @abstractmethod
    def exists(self, name: str) -> bool:
        """Check whether a service is installed."""

    @abstractmethod
    def get_start_type(self, name: str) -> ServiceStartType:
        """Read the configured start type of a service.

        Raises:
            LookupError: If the service does not exist.
        """

    @abstractmethod
    def set_start_type(self, name: str, start_type: ServiceStartType) -> None:
        """Change the start type of a service."""

    @abstractmethod
    def stop(self, name: str, wait: bool = True, timeout: float = 30.0) -> None:
        """Stop a running service, optionally waiting until it has stopped."""

    def set_enabled(self, name: str, enabled: bool) -> None:
        """Set a service to Automatic (enabled) or Disabled."""
        self.set_start_type(
            name, ServiceStartType.AUTOMATIC if enabled else ServiceStartType.DISABLED
        )


class WindowsServiceManager(ServiceManager):
    """Service manager backed by WMI and the registry.

    Example:
        services = WindowsServiceManager()
        if services.exists("DiagTrack"):
            services.set_enabled("DiagTrack", False)
            services.stop("DiagTrack")
    """

    def __init__(self, registry: RegistryStore | None = None) -> None:
        self.registry = registry or WindowsRegistry()

    def _connect(self) -> Any:
        import pythoncom
        import wmi

        # COM must be initialised on every thread that talks to WMI
        pythoncom.CoInitialize()
        return wmi.WMI()

    def _find(self, name: str) -> Any | None:
        matches = self._connect().Win32_Service(Name=name)
        return matches[0] if matches else None

    def exists(self, name: str) -> bool:
        return self._find(name) is not None

    def get_start_type(self, name: str) -> ServiceStartType:
        path = f"{SERVICES_KEY}\\{name}"
        if not self.registry.key_exists("HKLM", path):
            raise LookupError(f"Service not found: {name}")
        return ServiceStartType.from_value(self.registry.get_value("HKLM", path, "Start"))

    def set_start_type(self, name: str, start_type: ServiceStartType) -> None:
        if start_type == ServiceStartType.UNKNOWN:
            raise ValueError(f"Cannot set unknown start type on {name}")

        service = self._find(name)
        if service is None:
            raise LookupError(f"Service not found: {name}")

        (return_value,) = service.ChangeStartMode(StartMode=start_type.value)
        if return_value != 0:
            raise OSError(f"ChangeStartMode({start_type.value}) on {name} returned {return_value}")

        logger.info(f"Set start type of {name} to {start_type.value}")

    def stop(self, name: str, wait: bool = True, timeout: float = 30.0) -> None:
        service = self._find(name)
        if service is None:
            raise LookupError(f"Service not found: {name}")

        if service.State == "Stopped":
            return
        if not service.AcceptStop:
            logger.warning(f"Service {name} does not accept stop requests")
            return

        (return_value,) = service.StopService()
        if return_value != 0:
            raise OSError(f"StopService on {name} returned {return_value}")

        if not wait:
            return

        deadline = time.monotonic() + timeout
        while time.monotonic() < deadline:
            current = self._find(name)
            if current is None or current.State == "Stopped":
                logger.info(f"Stopped service {name}")
                return
            time.sleep(0.5)

        raise TimeoutError(f"Service {name} did not stop within {timeout:.0f}s")
