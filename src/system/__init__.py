"""System access layer - registry, services and external processes."""

from .registry import RegistryStore, WindowsRegistry, normalize_hive, values_equal
from .services import ServiceManager, ServiceStartType, WindowsServiceManager
from .shell import CommandResult, CommandRunner, escape_ps

__all__ = [
    "RegistryStore",
    "WindowsRegistry",
    "normalize_hive",
    "values_equal",
    "ServiceManager",
    "ServiceStartType",
    "WindowsServiceManager",
    "CommandResult",
    "CommandRunner",
    "escape_ps",
]
