"""In-memory stand-ins for the registry, the service manager and PowerShell."""

from src.core.models import ValueKind
from src.system.registry import RegistryStore, normalize_hive
from src.system.services import ServiceManager, ServiceStartType
from src.system.shell import CommandResult


class FakeRegistry(RegistryStore):
    """In-memory registry keyed case-insensitively like the real one.

    Attributes:
        fail_writes: Value names whose writes raise PermissionError
        fail_reads: Value names whose reads raise OSError
        writes: Every successful write as (hive, path, name, value)
    """

    def __init__(self) -> None:
        self.keys: dict[tuple[str, str], dict[str, tuple[object, ValueKind]]] = {}
        self.fail_writes: set[str] = set()
        self.fail_reads: set[str] = set()
        self.writes: list[tuple[str, str, str, object]] = []

    def _key(self, hive: str, path: str) -> tuple[str, str]:
        return normalize_hive(hive), path.lower()

    def get_value(self, hive, path, name, default=None):
        if name in self.fail_reads:
            raise OSError(f"Access denied reading {name}")
        values = self.keys.get(self._key(hive, path))
        if values is None or name.lower() not in values:
            return default
        return values[name.lower()][0]

    def set_value(self, hive, path, name, value, kind=ValueKind.DWORD):
        if name in self.fail_writes:
            raise PermissionError(f"Access denied writing {name}")
        self.keys.setdefault(self._key(hive, path), {})[name.lower()] = (value, kind)
        self.writes.append((hive, path, name, value))

    def delete_value(self, hive, path, name):
        values = self.keys.get(self._key(hive, path))
        if values is not None:
            values.pop(name.lower(), None)

    def key_exists(self, hive, path):
        return self._key(hive, path) in self.keys

    def create_key(self, hive, path):
        self.keys.setdefault(self._key(hive, path), {})

    def delete_key(self, hive, path):
        hive_name, prefix = self._key(hive, path)
        for key in list(self.keys):
            if key[0] == hive_name and (key[1] == prefix or key[1].startswith(prefix + "\\")):
                del self.keys[key]

    def value_kind(self, hive: str, path: str, name: str) -> ValueKind | None:
        values = self.keys.get(self._key(hive, path), {})
        entry = values.get(name.lower())
        return entry[1] if entry else None


class FakeServiceManager(ServiceManager):
    """In-memory service control manager.

    Example:
        services = FakeServiceManager({"DiagTrack": ServiceStartType.AUTOMATIC})
    """

    def __init__(self, services: dict[str, ServiceStartType] | None = None) -> None:
        self.start_types: dict[str, ServiceStartType] = dict(services or {})
        self.running: set[str] = set(self.start_types)
        self.stopped: list[str] = []

    def _name(self, name: str) -> str | None:
        for known in self.start_types:
            if known.lower() == name.lower():
                return known
        return None

    def exists(self, name):
        return self._name(name) is not None

    def get_start_type(self, name):
        known = self._name(name)
        if known is None:
            raise LookupError(f"Service not found: {name}")
        return self.start_types[known]

    def set_start_type(self, name, start_type):
        known = self._name(name)
        if known is None:
            raise LookupError(f"Service not found: {name}")
        self.start_types[known] = start_type

    def stop(self, name, wait=True, timeout=30.0):
        known = self._name(name)
        if known is None:
            raise LookupError(f"Service not found: {name}")
        self.running.discard(known)
        self.stopped.append(known)


class FakeRunner:
    """Records PowerShell scripts and returns canned results.

    Attributes:
        results: Results handed out in order; the last one repeats
        scripts: Every script passed to run_powershell
    """

    def __init__(self, *results: CommandResult) -> None:
        self.results = list(results) or [CommandResult(exit_code=0)]
        self.scripts: list[str] = []
        self.cancel_events: list[object] = []

    def run_powershell(self, script, cancel_event=None):
        self.scripts.append(script)
        self.cancel_events.append(cancel_event)
        if len(self.results) > 1:
            return self.results.pop(0)
        return self.results[0]

