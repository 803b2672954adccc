"""Tweaks - reversible units of system configuration and their catalog."""

from .apps import AppRemovalTweak, wildcards_for_scope
from .base import RegistryTweak, Tweak
from .catalog import (
    DEFAULT_PROFILES,
    REGISTRY_TWEAKS,
    TweakCatalog,
    create_default_catalog,
    load_custom_profiles,
)
from .keys import KeyPresenceTweak
from .service import ServiceTweak

__all__ = [
    "Tweak",
    "RegistryTweak",
    "ServiceTweak",
    "KeyPresenceTweak",
    "AppRemovalTweak",
    "wildcards_for_scope",
    "TweakCatalog",
    "REGISTRY_TWEAKS",
    "DEFAULT_PROFILES",
    "create_default_catalog",
    "load_custom_profiles",
]
