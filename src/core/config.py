"""Configuration management for Tweakd.

This module handles loading, saving, and validating configuration
from JSON files and environment variables.
"""

import json
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

# Default paths
DEFAULT_CONFIG_DIR = Path(os.environ.get("APPDATA", "~")) / "Tweakd"
DEFAULT_CONFIG_FILE = "config.json"
DEFAULT_PROFILES_DIR = "profiles"
DEFAULT_LOGS_DIR = "logs"

DEFAULT_RESTORE_POINT_DESCRIPTION = "Tweakd Debloater"


@dataclass
class EngineConfig:
    """Configuration for the tweak engine."""

    create_restore_point: bool = True
    restore_point_description: str = DEFAULT_RESTORE_POINT_DESCRIPTION
    command_timeout_seconds: int = 300  # Restore points can take minutes


@dataclass
class DebloatConfig:
    """Configuration for tweak selection and gating."""

    bloatware_scope: str = "third_party_only"  # third_party_only, include_microsoft
    remove_provisioned: bool = False
    lock_dangerous_tweaks: bool = False
    selected_profile_id: str | None = "recommended"
    selected_tweaks: dict[str, bool] = field(default_factory=dict)


@dataclass
class Config:
    """Main configuration container for Tweakd.

    Attributes:
        config_dir: Base directory for all Tweakd data (snapshots live here)
        profiles_dir: Directory containing custom profile JSON files
        logs_dir: Directory for the audit log and diagnostic logs
        engine: Engine configuration
        debloat: Tweak selection configuration
    """

    config_dir: Path = field(default_factory=lambda: DEFAULT_CONFIG_DIR.expanduser())
    profiles_dir: Path = field(default_factory=lambda: Path(DEFAULT_PROFILES_DIR))
    logs_dir: Path = field(default_factory=lambda: Path(DEFAULT_LOGS_DIR))

    engine: EngineConfig = field(default_factory=EngineConfig)
    debloat: DebloatConfig = field(default_factory=DebloatConfig)

    def __post_init__(self) -> None:
        """Resolve relative paths to absolute paths."""
        if not self.profiles_dir.is_absolute():
            self.profiles_dir = self.config_dir / self.profiles_dir
        if not self.logs_dir.is_absolute():
            self.logs_dir = self.config_dir / self.logs_dir

    @property
    def snapshot_file(self) -> Path:
        return self.config_dir / "service_snapshots.json"

    def ensure_directories(self) -> None:
        """Create all required directories if they don't exist."""
        for directory in [self.config_dir, self.profiles_dir, self.logs_dir]:
            directory.mkdir(parents=True, exist_ok=True)

    def to_dict(self) -> dict[str, Any]:
        """Convert configuration to dictionary for JSON serialization."""
        return {
            "config_dir": str(self.config_dir),
            "profiles_dir": str(self.profiles_dir),
            "logs_dir": str(self.logs_dir),
            "engine": {
                "create_restore_point": self.engine.create_restore_point,
                "restore_point_description": self.engine.restore_point_description,
                "command_timeout_seconds": self.engine.command_timeout_seconds,
            },
            "debloat": {
                "bloatware_scope": self.debloat.bloatware_scope,
                "remove_provisioned": self.debloat.remove_provisioned,
                "lock_dangerous_tweaks": self.debloat.lock_dangerous_tweaks,
                "selected_profile_id": self.debloat.selected_profile_id,
                "selected_tweaks": dict(self.debloat.selected_tweaks),
            },
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Config":
        """Create configuration from dictionary."""
        config = cls()

        if "config_dir" in data:
            config.config_dir = Path(data["config_dir"])
            # Paths derived from the old base must follow the new one
            config.profiles_dir = Path(DEFAULT_PROFILES_DIR)
            config.logs_dir = Path(DEFAULT_LOGS_DIR)
        if "profiles_dir" in data:
            config.profiles_dir = Path(data["profiles_dir"])
        if "logs_dir" in data:
            config.logs_dir = Path(data["logs_dir"])

        # Load engine config
        if "engine" in data:
            engine_data = data["engine"]
            config.engine = EngineConfig(
                create_restore_point=engine_data.get("create_restore_point", True),
                restore_point_description=engine_data.get(
                    "restore_point_description", DEFAULT_RESTORE_POINT_DESCRIPTION
                ),
                command_timeout_seconds=engine_data.get("command_timeout_seconds", 300),
            )

        # Load debloat config
        if "debloat" in data:
            debloat_data = data["debloat"]
            config.debloat = DebloatConfig(
                bloatware_scope=debloat_data.get("bloatware_scope", "third_party_only"),
                remove_provisioned=debloat_data.get("remove_provisioned", False),
                lock_dangerous_tweaks=debloat_data.get("lock_dangerous_tweaks", False),
                selected_profile_id=debloat_data.get("selected_profile_id", "recommended"),
                selected_tweaks=dict(debloat_data.get("selected_tweaks", {})),
            )

        # Re-run post_init to resolve paths
        config.__post_init__()

        return config


def load_config(config_path: Path | None = None) -> Config:
    """Load configuration from file.

    Args:
        config_path: Path to config file. If None, uses default location.

    Returns:
        Config object with loaded settings.

    Raises:
        json.JSONDecodeError: If config file contains invalid JSON.
    """
    if config_path is None:
        config_path = DEFAULT_CONFIG_DIR.expanduser() / DEFAULT_CONFIG_FILE

    if not config_path.exists():
        # Return default config if no config file exists
        return Config()

    with open(config_path, encoding="utf-8") as f:
        data = json.load(f)

    return Config.from_dict(data)


def save_config(config: Config, config_path: Path | None = None) -> None:
    """Save configuration to file.

    Args:
        config: Config object to save.
        config_path: Path to config file. If None, uses default location.
    """
    if config_path is None:
        config_path = config.config_dir / DEFAULT_CONFIG_FILE

    # Ensure directory exists
    config_path.parent.mkdir(parents=True, exist_ok=True)

    with open(config_path, "w", encoding="utf-8") as f:
        json.dump(config.to_dict(), f, indent=2)


def get_default_config() -> Config:
    """Get the default configuration.

    Returns:
        A new Config object with default settings.
    """
    return Config()
