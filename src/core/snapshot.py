"""Snapshot Manager - Records service start types before they change.

Service-backed tweaks capture the current start type of their services
before disabling them, so undo can restore what was actually configured
instead of assuming a default. Snapshots are appended to a JSON file and
never modified; lookups walk the history from newest to oldest.

The store is best-effort: unreadable or corrupt files count as an empty
history and write failures are logged, never raised.
"""

import json
import logging
from pathlib import Path

from src.core.config import Config, get_default_config
from src.core.models import SnapshotRecord
from src.system.services import ServiceManager, ServiceStartType

logger = logging.getLogger("tweakd.core.snapshot")

SNAPSHOT_FILENAME = "service_snapshots.json"


class SnapshotManager:
    """Manager for service start-type snapshots.

    Example:
        manager = SnapshotManager(services, snapshot_file=config.snapshot_file)
        manager.create_snapshot(["DiagTrack"])

        # Later, during undo
        previous = manager.get_snapshot_start_type("DiagTrack")  # "Automatic"
    """

    def __init__(
        self,
        services: ServiceManager,
        snapshot_file: Path | None = None,
        config: Config | None = None,
    ) -> None:
        """Initialize the snapshot manager.

        Args:
            services: Service manager used to read current start types
            snapshot_file: Override path of the snapshot file
            config: Configuration object (used when no path is given)
        """
        self.services = services
        if snapshot_file is None:
            snapshot_file = (config or get_default_config()).snapshot_file
        self.snapshot_file = Path(snapshot_file)

    def create_snapshot(self, service_names: list[str]) -> SnapshotRecord:
        """Capture the current start type of each service and persist it.

        Services that do not exist or cannot be read are left out of the
        record rather than stored as unknown.

        Args:
            service_names: Names of the services to capture

        Returns:
            The appended SnapshotRecord
        """
        captured: dict[str, str] = {}

        for name in service_names:
            try:
                start_type = self.services.get_start_type(name)
            except Exception as e:
                logger.debug(f"Skipping {name} in snapshot: {e}")
                continue
            if start_type == ServiceStartType.UNKNOWN:
                continue
            captured[name] = start_type.value

        record = SnapshotRecord.now(captured)

        history = self._load()
        history.append(record)
        self._save(history)

        logger.info(f"Captured snapshot of {len(captured)} service(s): {', '.join(captured)}")
        return record

    def get_snapshot_start_type(self, service_name: str) -> str | None:
        """Return the most recently recorded start type for a service.

        Args:
            service_name: Service name (case-insensitive)

        Returns:
            Start type string, or None if no snapshot mentions the service
        """
        wanted = service_name.lower()
        for record in reversed(self._load()):
            for name, start_type in record.services.items():
                if name.lower() == wanted:
                    return start_type
        return None

    def list_snapshots(self) -> list[SnapshotRecord]:
        """Return the full snapshot history, oldest first."""
        return self._load()

    def clear_snapshots(self) -> None:
        """Delete all snapshots. Errors are ignored."""
        try:
            self.snapshot_file.unlink(missing_ok=True)
            logger.info("Cleared service snapshots")
        except OSError as e:
            logger.warning(f"Failed to clear snapshots: {e}")

    def _load(self) -> list[SnapshotRecord]:
        """Load snapshot history from disk."""
        if not self.snapshot_file.exists():
            return []

        try:
            with open(self.snapshot_file, encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, ValueError) as e:
            logger.warning(f"Failed to load snapshots, treating as empty: {e}")
            return []

        if not isinstance(data, list):
            logger.warning("Snapshot file is not a list, treating as empty")
            return []

        records: list[SnapshotRecord] = []
        for item in data:
            if isinstance(item, dict):
                records.append(SnapshotRecord.from_dict(item))
        return records

    def _save(self, history: list[SnapshotRecord]) -> None:
        """Rewrite the snapshot file with the given history."""
        try:
            self.snapshot_file.parent.mkdir(parents=True, exist_ok=True)
            with open(self.snapshot_file, "w", encoding="utf-8") as f:
                json.dump([record.to_dict() for record in history], f, indent=2)
        except OSError as e:
            logger.warning(f"Failed to save snapshots: {e}")


def create_snapshot_manager(
    services: ServiceManager,
    config: Config | None = None,
) -> SnapshotManager:
    """Create a snapshot manager storing its file under the config dir.

    Args:
        services: Service manager used to read start types
        config: Optional configuration

    Returns:
        SnapshotManager instance
    """
    return SnapshotManager(services, config=config)
