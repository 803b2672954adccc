"""Tweak Catalog - The set of available tweaks and profiles.

The default catalog is built from a static table of registry tweak
definitions plus a handful of imperative tweaks. A catalog is an explicit
value: build it once at startup and hand it to the engine.
"""

import json
import logging
from collections.abc import Iterable, Iterator
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from src.core.config import Config
from src.core.models import (
    BloatwareScope,
    Profile,
    RegistryEntry,
    TweakCategory,
    TweakSeverity,
)
from src.core.snapshot import SnapshotManager
from src.system.registry import RegistryStore
from src.system.services import ServiceManager
from src.system.shell import CommandRunner
from src.tweaks.apps import AppRemovalTweak, wildcards_for_scope
from src.tweaks.base import RegistryTweak, Tweak
from src.tweaks.keys import KeyPresenceTweak
from src.tweaks.service import ServiceTweak

logger = logging.getLogger("tweakd.tweaks.catalog")

WINDOWS_11_FIRST_BUILD = 22000

# Tweak IDs referenced by profiles and callers
DISABLE_TELEMETRY_POLICY = "privacy.disableTelemetryPolicy"
DISABLE_ADVERTISING_ID = "privacy.disableAdvertisingId"
DISABLE_ACTIVITY_HISTORY = "privacy.disableActivityHistory"
DISABLE_WINDOWS_SPOTLIGHT = "privacy.disableWindowsSpotlight"
DISABLE_CONSUMER_FEATURES = "privacy.disableConsumerFeatures"
DISABLE_CLOUD_CLIPBOARD = "privacy.disableCloudClipboard"
DISABLE_CORTANA = "privacy.disableCortana"
DISABLE_ONEDRIVE = "privacy.disableOneDrive"
DISABLE_BING_SEARCH = "privacy.disableBingSearch"
DISABLE_COPILOT = "privacy.disableCopilot"
DISABLE_EDGE_WEB_APP = "privacy.disableEdgeWebApp"
DISABLE_GAME_DVR = "performance.disableGameDvr"
DISABLE_STARTUP_DELAY = "performance.disableStartupDelay"
DISABLE_SEARCH_INDEXING = "performance.disableSearchIndexing"
DISABLE_SUPERFETCH = "performance.disableSuperfetch"
SHOW_FILE_EXTENSIONS = "visual.showFileExtensions"
CLASSIC_CONTEXT_MENU = "visual.classicContextMenu"
DISABLE_TASK_VIEW_BUTTON = "visual.disableTaskViewButton"
DISABLE_WIDGETS = "visual.disableWidgets"
DISABLE_DIAGTRACK = "services.disableDiagTrack"
DISABLE_DELIVERY_OPTIMIZATION = "services.disableDeliveryOptimization"
DISABLE_XBOX_SERVICES = "services.disableXboxServices"
DISABLE_WINDOWS_UPDATE = "security.disableWindowsUpdate"
DISABLE_DEFENDER = "security.disableDefender"
REMOVE_BLOATWARE_APPS = "bloatware.removeApps"


@dataclass(frozen=True)
class RegistryTweakDefinition:
    """Static description of a declarative registry tweak."""

    id: str
    title: str
    description: str
    category: TweakCategory
    severity: TweakSeverity
    entries: tuple[RegistryEntry, ...]
    is_admin_required: bool = False
    min_build: int = 0

    def build(self, registry: RegistryStore) -> RegistryTweak:
        return RegistryTweak(
            registry,
            self.entries,
            id=self.id,
            title=self.title,
            description=self.description,
            category=self.category,
            severity=self.severity,
            is_admin_required=self.is_admin_required,
            min_build=self.min_build,
        )


_EXPLORER_ADVANCED = "Software\\Microsoft\\Windows\\CurrentVersion\\Explorer\\Advanced"
_CONTENT_DELIVERY = "SOFTWARE\\Microsoft\\Windows\\CurrentVersion\\ContentDeliveryManager"
_POLICIES_WINDOWS = "SOFTWARE\\Policies\\Microsoft\\Windows"
_SERVICES = "SYSTEM\\CurrentControlSet\\Services"

REGISTRY_TWEAKS: tuple[RegistryTweakDefinition, ...] = (
    # Privacy
    RegistryTweakDefinition(
        id=DISABLE_TELEMETRY_POLICY,
        title="Disable Telemetry (Policy)",
        description="Sets Windows policy to reduce diagnostic data collection.",
        category=TweakCategory.PRIVACY,
        severity=TweakSeverity.CAUTION,
        is_admin_required=True,
        entries=(
            RegistryEntry("HKLM", f"{_POLICIES_WINDOWS}\\DataCollection", "AllowTelemetry", 0, 3),
        ),
    ),
    RegistryTweakDefinition(
        id=DISABLE_ADVERTISING_ID,
        title="Disable Advertising ID",
        description="Turns off the per-user advertising ID.",
        category=TweakCategory.PRIVACY,
        severity=TweakSeverity.SAFE,
        entries=(
            RegistryEntry(
                "HKCU", "Software\\Microsoft\\Windows\\CurrentVersion\\AdvertisingInfo", "Enabled", 0, 1
            ),
        ),
    ),
    RegistryTweakDefinition(
        id=DISABLE_ACTIVITY_HISTORY,
        title="Disable Activity History",
        description="Disables Windows activity feed / user activity publishing policies.",
        category=TweakCategory.PRIVACY,
        severity=TweakSeverity.CAUTION,
        is_admin_required=True,
        entries=(
            RegistryEntry("HKLM", f"{_POLICIES_WINDOWS}\\System", "EnableActivityFeed", 0, 1),
            RegistryEntry("HKLM", f"{_POLICIES_WINDOWS}\\System", "PublishUserActivities", 0, 1),
            RegistryEntry("HKLM", f"{_POLICIES_WINDOWS}\\System", "UploadUserActivities", 0, 1),
        ),
    ),
    RegistryTweakDefinition(
        id=DISABLE_WINDOWS_SPOTLIGHT,
        title="Disable Windows Spotlight",
        description="Disables Windows Spotlight on lock screen and personalized tips.",
        category=TweakCategory.PRIVACY,
        severity=TweakSeverity.SAFE,
        entries=(
            RegistryEntry("HKCU", _CONTENT_DELIVERY, "RotatingLockScreenEnabled", 0, 1),
            RegistryEntry("HKCU", _CONTENT_DELIVERY, "RotatingLockScreenOverlayEnabled", 0, 1),
            RegistryEntry("HKCU", _CONTENT_DELIVERY, "SubscribedContent-338387Enabled", 0, 1),
        ),
    ),
    RegistryTweakDefinition(
        id=DISABLE_CONSUMER_FEATURES,
        title="Disable Consumer Features",
        description="Prevents automatic installation of suggested apps and consumer features.",
        category=TweakCategory.PRIVACY,
        severity=TweakSeverity.SAFE,
        is_admin_required=True,
        entries=(
            RegistryEntry(
                "HKLM", f"{_POLICIES_WINDOWS}\\CloudContent", "DisableWindowsConsumerFeatures", 1, 0
            ),
        ),
    ),
    RegistryTweakDefinition(
        id=DISABLE_CLOUD_CLIPBOARD,
        title="Disable Cloud Clipboard",
        description="Prevents clipboard history from syncing across devices.",
        category=TweakCategory.PRIVACY,
        severity=TweakSeverity.SAFE,
        entries=(
            RegistryEntry("HKCU", "SOFTWARE\\Microsoft\\Clipboard", "EnableClipboardHistory", 0, 1),
            RegistryEntry(
                "HKCU", "SOFTWARE\\Microsoft\\Clipboard", "CloudClipboardAutomaticUpload", 0, 1
            ),
        ),
    ),
    RegistryTweakDefinition(
        id=DISABLE_CORTANA,
        title="Disable Cortana",
        description="Disables Cortana voice assistant integration.",
        category=TweakCategory.PRIVACY,
        severity=TweakSeverity.CAUTION,
        is_admin_required=True,
        entries=(
            RegistryEntry("HKLM", f"{_POLICIES_WINDOWS}\\Windows Search", "AllowCortana", 0, 1),
        ),
    ),
    RegistryTweakDefinition(
        id=DISABLE_ONEDRIVE,
        title="Disable OneDrive",
        description="Prevents OneDrive from starting automatically and showing in File Explorer.",
        category=TweakCategory.PRIVACY,
        severity=TweakSeverity.CAUTION,
        is_admin_required=True,
        entries=(
            RegistryEntry("HKLM", f"{_POLICIES_WINDOWS}\\OneDrive", "DisableFileSyncNGSC", 1, 0),
            RegistryEntry("HKCU", _EXPLORER_ADVANCED, "ShowSyncProviderNotifications", 0, 1),
        ),
    ),
    RegistryTweakDefinition(
        id=DISABLE_BING_SEARCH,
        title="Disable Bing Search in Start",
        description="Disables web search suggestions in Start menu search (where supported).",
        category=TweakCategory.PRIVACY,
        severity=TweakSeverity.SAFE,
        entries=(
            RegistryEntry(
                "HKCU", "SOFTWARE\\Microsoft\\Windows\\CurrentVersion\\Search", "BingSearchEnabled", 0, 1
            ),
            RegistryEntry(
                "HKCU", "SOFTWARE\\Microsoft\\Windows\\CurrentVersion\\Search", "CortanaConsent", 0, 1
            ),
            RegistryEntry(
                "HKCU",
                "SOFTWARE\\Policies\\Microsoft\\Windows\\Explorer",
                "DisableSearchBoxSuggestions",
                1,
                0,
            ),
        ),
    ),
    RegistryTweakDefinition(
        id=DISABLE_COPILOT,
        title="Disable Copilot",
        description=(
            "Disables Windows Copilot AI assistant in Windows 11 23H2+. "
            "Has no effect on older Windows versions."
        ),
        category=TweakCategory.PRIVACY,
        severity=TweakSeverity.SAFE,
        is_admin_required=True,
        entries=(
            RegistryEntry(
                "HKLM", f"{_POLICIES_WINDOWS}\\WindowsCopilot", "TurnOffWindowsCopilot", 1, 0
            ),
        ),
    ),
    RegistryTweakDefinition(
        id=DISABLE_EDGE_WEB_APP,
        title="Disable Edge Web App Integration",
        description=(
            "Disables Microsoft Edge web app integration and background task scheduling. "
            "Reduces Edge-related background activity."
        ),
        category=TweakCategory.PRIVACY,
        severity=TweakSeverity.SAFE,
        is_admin_required=True,
        entries=(
            RegistryEntry(
                "HKLM", "SOFTWARE\\Policies\\Microsoft\\MicrosoftEdge\\Update", "UpdateDefault", 0, 1
            ),
        ),
    ),
    # Performance
    RegistryTweakDefinition(
        id=DISABLE_GAME_DVR,
        title="Disable Game DVR / Captures",
        description="Disables Xbox Game Bar capture features that can impact performance.",
        category=TweakCategory.PERFORMANCE,
        severity=TweakSeverity.SAFE,
        is_admin_required=True,  # HKLM entry
        entries=(
            RegistryEntry("HKCU", "System\\GameConfigStore", "GameDVR_Enabled", 0, 1),
            RegistryEntry("HKLM", f"{_POLICIES_WINDOWS}\\GameDVR", "AllowGameDVR", 0, 1),
        ),
    ),
    RegistryTweakDefinition(
        id=DISABLE_STARTUP_DELAY,
        title="Disable Startup Delay",
        description="Removes the 10-second delay for startup programs, improving boot time.",
        category=TweakCategory.PERFORMANCE,
        severity=TweakSeverity.SAFE,
        entries=(
            RegistryEntry(
                "HKCU",
                "SOFTWARE\\Microsoft\\Windows\\CurrentVersion\\Explorer\\Serialize",
                "StartupDelayInMSec",
                0,
                10000,
            ),
        ),
    ),
    RegistryTweakDefinition(
        id=DISABLE_SEARCH_INDEXING,
        title="Disable Windows Search Indexing",
        description=(
            "Stops Windows Search service from indexing files in the background, "
            "reducing disk/CPU usage."
        ),
        category=TweakCategory.PERFORMANCE,
        severity=TweakSeverity.CAUTION,
        is_admin_required=True,
        entries=(RegistryEntry("HKLM", f"{_SERVICES}\\WSearch", "Start", 4, 2),),
    ),
    RegistryTweakDefinition(
        id=DISABLE_SUPERFETCH,
        title="Disable Superfetch/SysMain",
        description="Disables the Superfetch (SysMain) service. May improve performance on SSDs.",
        category=TweakCategory.PERFORMANCE,
        severity=TweakSeverity.CAUTION,
        is_admin_required=True,
        entries=(RegistryEntry("HKLM", f"{_SERVICES}\\SysMain", "Start", 4, 2),),
    ),
    # Visual
    RegistryTweakDefinition(
        id=SHOW_FILE_EXTENSIONS,
        title="Show File Extensions",
        description="Shows file extensions in File Explorer.",
        category=TweakCategory.VISUAL,
        severity=TweakSeverity.SAFE,
        entries=(RegistryEntry("HKCU", _EXPLORER_ADVANCED, "HideFileExt", 0, 1),),
    ),
    RegistryTweakDefinition(
        id=DISABLE_TASK_VIEW_BUTTON,
        title="Hide Task View Button",
        description="Removes the Task View button from the taskbar.",
        category=TweakCategory.VISUAL,
        severity=TweakSeverity.SAFE,
        entries=(RegistryEntry("HKCU", _EXPLORER_ADVANCED, "ShowTaskViewButton", 0, 1),),
    ),
    RegistryTweakDefinition(
        id=DISABLE_WIDGETS,
        title="Disable Widgets",
        description="Disables the Windows 11 Widgets panel and taskbar button.",
        category=TweakCategory.VISUAL,
        severity=TweakSeverity.SAFE,
        is_admin_required=True,  # HKLM entry
        min_build=WINDOWS_11_FIRST_BUILD,
        entries=(
            RegistryEntry("HKCU", _EXPLORER_ADVANCED, "TaskbarDa", 0, 1),
            RegistryEntry("HKLM", "SOFTWARE\\Policies\\Microsoft\\Dsh", "AllowNewsAndInterests", 0, 1),
        ),
    ),
    # Services
    RegistryTweakDefinition(
        id=DISABLE_DELIVERY_OPTIMIZATION,
        title="Disable Delivery Optimization",
        description=(
            "Stops Windows Delivery Optimization (P2P update distribution). Reduces bandwidth "
            "usage but may slow Windows Update delivery."
        ),
        category=TweakCategory.SERVICES,
        severity=TweakSeverity.CAUTION,
        is_admin_required=True,
        entries=(
            RegistryEntry(
                "HKLM", f"{_POLICIES_WINDOWS}\\DeliveryOptimization", "DODownloadMode", 99, 1
            ),
        ),
    ),
    RegistryTweakDefinition(
        id=DISABLE_XBOX_SERVICES,
        title="Disable Xbox Services",
        description=(
            "Disables Xbox Live authentication, networking, and background services. "
            "Xbox App and Game Pass remain installed."
        ),
        category=TweakCategory.SERVICES,
        severity=TweakSeverity.CAUTION,
        is_admin_required=True,
        entries=(
            RegistryEntry("HKLM", f"{_SERVICES}\\XblAuthManager", "Start", 4, 2),
            RegistryEntry("HKLM", f"{_SERVICES}\\XblGameSave", "Start", 4, 2),
            RegistryEntry("HKLM", f"{_SERVICES}\\XboxNetApiSvc", "Start", 4, 2),
        ),
    ),
    # Advanced
    RegistryTweakDefinition(
        id=DISABLE_WINDOWS_UPDATE,
        title="Disable Windows Update",
        description=(
            "Disables automatic system updates. DANGEROUS: leaves the system without "
            "security patches. Only disable if managing updates manually."
        ),
        category=TweakCategory.ADVANCED,
        severity=TweakSeverity.DANGEROUS,
        is_admin_required=True,
        entries=(
            RegistryEntry("HKLM", f"{_POLICIES_WINDOWS}\\WindowsUpdate\\AU", "NoAutoUpdate", 1, 0),
            RegistryEntry(
                "HKLM", f"{_POLICIES_WINDOWS}\\WindowsUpdate", "DisableWindowsUpdateAccess", 1, 0
            ),
        ),
    ),
    RegistryTweakDefinition(
        id=DISABLE_DEFENDER,
        title="Disable Windows Defender",
        description=(
            "Disables Windows Defender real-time scanning and cloud protection. DANGEROUS: "
            "requires another active antivirus solution."
        ),
        category=TweakCategory.ADVANCED,
        severity=TweakSeverity.DANGEROUS,
        is_admin_required=True,
        entries=(
            RegistryEntry(
                "HKLM", "SOFTWARE\\Policies\\Microsoft\\Windows Defender", "DisableAntiSpyware", 1, 0
            ),
            RegistryEntry(
                "HKLM",
                "SOFTWARE\\Policies\\Microsoft\\Windows Defender\\Spynet",
                "SpyNetReporting",
                0,
                2,
            ),
        ),
    ),
)

CLASSIC_CONTEXT_MENU_KEY = (
    "Software\\Classes\\CLSID\\{86ca1aa0-34aa-4e8b-a509-50c905bae2a2}\\InprocServer32"
)

BUILTIN_TWEAK_IDS: tuple[str, ...] = tuple(d.id for d in REGISTRY_TWEAKS) + (
    CLASSIC_CONTEXT_MENU,
    DISABLE_DIAGTRACK,
    REMOVE_BLOATWARE_APPS,
)

DEFAULT_PROFILES: tuple[Profile, ...] = (
    Profile(
        id="recommended",
        title="Recommended",
        description="Safe privacy + quality-of-life tweaks.",
        tweak_ids=(
            DISABLE_ADVERTISING_ID,
            DISABLE_ACTIVITY_HISTORY,
            DISABLE_GAME_DVR,
            DISABLE_BING_SEARCH,
            SHOW_FILE_EXTENSIONS,
            DISABLE_WINDOWS_SPOTLIGHT,
            DISABLE_CONSUMER_FEATURES,
            DISABLE_STARTUP_DELAY,
            DISABLE_TASK_VIEW_BUTTON,
            DISABLE_COPILOT,
            DISABLE_DELIVERY_OPTIMIZATION,
        ),
    ),
    Profile(
        id="privacy",
        title="Privacy Focused",
        description="Maximum privacy with telemetry and cloud features disabled.",
        tweak_ids=(
            DISABLE_TELEMETRY_POLICY,
            DISABLE_ADVERTISING_ID,
            DISABLE_ACTIVITY_HISTORY,
            DISABLE_BING_SEARCH,
            DISABLE_WINDOWS_SPOTLIGHT,
            DISABLE_CONSUMER_FEATURES,
            DISABLE_CLOUD_CLIPBOARD,
            DISABLE_CORTANA,
            DISABLE_ONEDRIVE,
            DISABLE_COPILOT,
            DISABLE_EDGE_WEB_APP,
            DISABLE_DELIVERY_OPTIMIZATION,
        ),
    ),
    Profile(
        id="performance",
        title="Performance Focused",
        description="Disables background services and indexing for maximum performance.",
        tweak_ids=(
            DISABLE_GAME_DVR,
            DISABLE_DIAGTRACK,
            DISABLE_STARTUP_DELAY,
            DISABLE_SEARCH_INDEXING,
            DISABLE_SUPERFETCH,
            DISABLE_DELIVERY_OPTIMIZATION,
            DISABLE_XBOX_SERVICES,
        ),
    ),
)


class TweakCatalog:
    """Lookup of tweaks and profiles by ID (case-insensitive).

    Example:
        catalog = TweakCatalog(tweaks, DEFAULT_PROFILES)
        tweak = catalog.get("visual.showfileextensions")
        ids = catalog.get_profile("recommended").tweak_ids
    """

    def __init__(self, tweaks: Iterable[Tweak], profiles: Iterable[Profile] = ()) -> None:
        """Build the catalog.

        Raises:
            ValueError: If two tweaks or two profiles share an ID
        """
        self._tweaks: dict[str, Tweak] = {}
        for tweak in tweaks:
            key = tweak.id.lower()
            if key in self._tweaks:
                raise ValueError(f"Duplicate tweak id: {tweak.id}")
            self._tweaks[key] = tweak

        self._profiles: dict[str, Profile] = {}
        for profile in profiles:
            key = profile.id.lower()
            if key in self._profiles:
                raise ValueError(f"Duplicate profile id: {profile.id}")
            self._profiles[key] = profile

    def __iter__(self) -> Iterator[Tweak]:
        return iter(self._tweaks.values())

    def __len__(self) -> int:
        return len(self._tweaks)

    def __contains__(self, tweak_id: object) -> bool:
        return isinstance(tweak_id, str) and tweak_id.lower() in self._tweaks

    @property
    def tweaks(self) -> list[Tweak]:
        return list(self._tweaks.values())

    @property
    def profiles(self) -> list[Profile]:
        return list(self._profiles.values())

    def get(self, tweak_id: str) -> Tweak | None:
        return self._tweaks.get(tweak_id.lower())

    def get_profile(self, profile_id: str) -> Profile | None:
        return self._profiles.get(profile_id.lower())

    def by_category(self, category: TweakCategory) -> list[Tweak]:
        return [t for t in self._tweaks.values() if t.category == category]

    def unknown_ids(self, tweak_ids: Iterable[str]) -> list[str]:
        """Return the IDs that do not resolve to a tweak."""
        return [i for i in tweak_ids if i.lower() not in self._tweaks]


def create_default_catalog(
    registry: RegistryStore,
    services: ServiceManager,
    runner: CommandRunner,
    snapshots: SnapshotManager | None = None,
    config: Config | None = None,
) -> TweakCatalog:
    """Build the default catalog with its built-in and custom profiles.

    Args:
        registry: Registry store used by registry tweaks
        services: Service manager used by service tweaks
        runner: Command runner used for app removal
        snapshots: Snapshot store for service start types
        config: Configuration (bloatware scope, custom profiles directory)

    Returns:
        TweakCatalog instance
    """
    scope = BloatwareScope.THIRD_PARTY_ONLY
    remove_provisioned = False
    if config is not None:
        try:
            scope = BloatwareScope(config.debloat.bloatware_scope)
        except ValueError:
            logger.warning(f"Unknown bloatware scope {config.debloat.bloatware_scope!r}")
        remove_provisioned = config.debloat.remove_provisioned

    tweaks: list[Tweak] = [definition.build(registry) for definition in REGISTRY_TWEAKS]

    tweaks.append(
        KeyPresenceTweak(
            registry,
            "HKCU",
            CLASSIC_CONTEXT_MENU_KEY,
            id=CLASSIC_CONTEXT_MENU,
            title="Classic Right-Click Menu",
            description=(
                "Enables the classic context menu (Windows 11). Explorer restart may be required."
            ),
            category=TweakCategory.VISUAL,
            severity=TweakSeverity.CAUTION,
            min_build=WINDOWS_11_FIRST_BUILD,
        )
    )
    tweaks.append(
        ServiceTweak(
            services,
            ("DiagTrack",),
            snapshots=snapshots,
            id=DISABLE_DIAGTRACK,
            title="Disable Diagnostics Tracking Service",
            description="Disables the 'Connected User Experiences and Telemetry' service.",
            category=TweakCategory.SERVICES,
            severity=TweakSeverity.DANGEROUS,
            is_admin_required=True,
        )
    )
    tweaks.append(
        AppRemovalTweak(
            runner,
            wildcards_for_scope(scope),
            remove_provisioned=remove_provisioned,
            id=REMOVE_BLOATWARE_APPS,
            title="Remove Preinstalled Apps",
            description=(
                "Removes selected preinstalled apps via PowerShell "
                "(current user / optional provisioned packages)."
            ),
            category=TweakCategory.BLOATWARE,
            severity=TweakSeverity.DANGEROUS,
            is_admin_required=remove_provisioned,
        )
    )

    profiles = list(DEFAULT_PROFILES)
    if config is not None:
        builtin = {p.id.lower() for p in profiles}
        for profile in load_custom_profiles(config.profiles_dir):
            if profile.id.lower() in builtin:
                logger.warning(f"Custom profile {profile.id} shadows a built-in profile, skipped")
                continue
            builtin.add(profile.id.lower())
            profiles.append(profile)

    return TweakCatalog(tweaks, profiles)


def parse_profile(data: dict[str, Any]) -> Profile:
    """Build a Profile from its JSON representation.

    Raises:
        ValueError: If required fields are missing or malformed
    """
    if not isinstance(data, dict):
        raise ValueError("profile must be an object")

    profile_id = data.get("id")
    if not isinstance(profile_id, str) or not profile_id.strip():
        raise ValueError("profile is missing 'id'")

    tweak_ids = data.get("tweak_ids")
    if not isinstance(tweak_ids, list) or not all(isinstance(i, str) for i in tweak_ids):
        raise ValueError(f"profile {profile_id}: 'tweak_ids' must be a list of strings")

    return Profile(
        id=profile_id.strip(),
        title=str(data.get("title") or profile_id),
        description=str(data.get("description", "")),
        tweak_ids=tuple(tweak_ids),
    )


def load_custom_profiles(profiles_dir: Path) -> list[Profile]:
    """Load user-defined profiles from ``*.json`` files.

    Each file holds one profile object or a list of them. Invalid files
    and entries are logged and skipped.

    Args:
        profiles_dir: Directory to scan

    Returns:
        Profiles in file-name order
    """
    if not profiles_dir.is_dir():
        return []

    profiles: list[Profile] = []
    for path in sorted(profiles_dir.glob("*.json")):
        try:
            with open(path, encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, ValueError) as e:
            logger.warning(f"Could not read profile file {path.name}: {e}")
            continue

        items = data if isinstance(data, list) else [data]
        for item in items:
            try:
                profiles.append(parse_profile(item))
            except ValueError as e:
                logger.warning(f"Invalid profile in {path.name}: {e}")

    return profiles
