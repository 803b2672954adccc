"""Service tweak - stops and disables Windows services.

Before changing a service the tweak records its current start type in
the snapshot store. Undo restores the recorded start type, falling back
to the tweak's default when no snapshot exists.
"""

import logging
from typing import Any

from src.core.models import TweakStatus
from src.core.snapshot import SnapshotManager
from src.system.services import ServiceManager, ServiceStartType
from src.tweaks.base import Tweak

logger = logging.getLogger("tweakd.tweaks.service")


class ServiceTweak(Tweak):
    """Disable one or more services, restoring their start types on undo.

    Status is NOT_SUPPORTED when none of the services exist on this
    system. Services missing from the system are skipped by apply/undo.
    """

    def __init__(
        self,
        services: ServiceManager,
        service_names: tuple[str, ...],
        snapshots: SnapshotManager | None = None,
        default_start_type: ServiceStartType = ServiceStartType.AUTOMATIC,
        stop_timeout: float = 30.0,
        **kwargs: Any,
    ) -> None:
        super().__init__(**kwargs)
        if not service_names:
            raise ValueError(f"Service tweak {self.id} has no services")
        self.services = services
        self.service_names = tuple(service_names)
        self.snapshots = snapshots
        self.default_start_type = default_start_type
        self.stop_timeout = stop_timeout

    def _installed(self) -> list[str]:
        installed = []
        for name in self.service_names:
            try:
                if self.services.exists(name):
                    installed.append(name)
            except Exception as e:
                logger.debug(f"Could not query service {name}: {e}")
        return installed

    def _start_type(self, name: str) -> ServiceStartType:
        try:
            return self.services.get_start_type(name)
        except Exception as e:
            logger.debug(f"Could not read start type of {name}: {e}")
            return ServiceStartType.UNKNOWN

    def get_status(self) -> TweakStatus:
        installed = self._installed()
        if not installed:
            return TweakStatus.NOT_SUPPORTED

        disabled = [self._start_type(n) == ServiceStartType.DISABLED for n in installed]
        if all(disabled):
            return TweakStatus.APPLIED
        if not any(disabled):
            return TweakStatus.NOT_APPLIED
        return TweakStatus.UNKNOWN

    def apply(self) -> None:
        installed = self._installed()
        if not installed:
            logger.info(f"{self.id}: no services installed, nothing to do")
            return

        # Services that are already disabled are never recorded, so the
        # latest snapshot always holds a pre-apply start type.
        to_capture = [n for n in installed if self._start_type(n) != ServiceStartType.DISABLED]
        if self.snapshots is not None and to_capture:
            self.snapshots.create_snapshot(to_capture)

        for name in installed:
            self.services.set_start_type(name, ServiceStartType.DISABLED)
            self.services.stop(name, wait=True, timeout=self.stop_timeout)

    def undo(self) -> None:
        for name in self._installed():
            start_type = self._restore_target(name)
            self.services.set_start_type(name, start_type)

    def _restore_target(self, name: str) -> ServiceStartType:
        if self.snapshots is None:
            return self.default_start_type

        recorded = self.snapshots.get_snapshot_start_type(name)
        start_type = ServiceStartType.from_value(recorded)
        if start_type in (ServiceStartType.UNKNOWN, ServiceStartType.DISABLED):
            return self.default_start_type

        logger.debug(f"Restoring {name} to snapshot start type {start_type.value}")
        return start_type

    def describe_changes(self) -> list[str]:
        return [
            f"Record start type of {name}, set it to Disabled and stop it"
            for name in self.service_names
        ]
