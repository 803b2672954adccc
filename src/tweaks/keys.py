"""Key presence tweak - applied when a registry key exists.

Some shell behaviours are switched on merely by the existence of a key,
such as the classic Windows 11 context menu, which appears when an empty
``InprocServer32`` key shadows the new menu's COM server.
"""

import logging
from typing import Any

from src.core.models import TweakStatus, ValueKind
from src.system.registry import RegistryStore
from src.tweaks.base import Tweak

logger = logging.getLogger("tweakd.tweaks.keys")


class KeyPresenceTweak(Tweak):
    """Create a key (with an empty default value) to apply, delete it to undo."""

    def __init__(
        self,
        registry: RegistryStore,
        hive: str,
        path: str,
        **kwargs: Any,
    ) -> None:
        super().__init__(**kwargs)
        self.registry = registry
        self.hive = hive
        self.path = path

    def get_status(self) -> TweakStatus:
        try:
            exists = self.registry.key_exists(self.hive, self.path)
        except Exception as e:
            logger.debug(f"Could not check {self.hive}\\{self.path}: {e}")
            return TweakStatus.NOT_APPLIED
        return TweakStatus.APPLIED if exists else TweakStatus.NOT_APPLIED

    def apply(self) -> None:
        self.registry.create_key(self.hive, self.path)
        self.registry.set_value(self.hive, self.path, "", "", ValueKind.STRING)

    def undo(self) -> None:
        self.registry.delete_key(self.hive, self.path)

    def describe_changes(self) -> list[str]:
        return [f"Create key {self.hive}\\{self.path} with an empty default value"]
