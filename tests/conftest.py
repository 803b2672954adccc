"""Pytest configuration and shared fixtures."""

import sys
import tempfile
from pathlib import Path

import pytest

# Add repo root to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

from fakes import FakeRegistry, FakeRunner, FakeServiceManager  # noqa: E402
from src.system.services import ServiceStartType  # noqa: E402


@pytest.fixture
def temp_dir():
    """Create a temporary directory for tests."""
    with tempfile.TemporaryDirectory(prefix="tweakd_test_") as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def test_config(temp_dir):
    """Create a configuration rooted in a temporary directory."""
    from src.core.config import Config

    config = Config(config_dir=temp_dir)
    config.ensure_directories()
    return config


@pytest.fixture
def registry():
    return FakeRegistry()


@pytest.fixture
def services():
    return FakeServiceManager(
        {
            "DiagTrack": ServiceStartType.AUTOMATIC,
            "SysMain": ServiceStartType.MANUAL,
        }
    )


@pytest.fixture
def runner():
    return FakeRunner()


@pytest.fixture
def audit(temp_dir):
    from src.core.audit import AuditLogger

    return AuditLogger(temp_dir / "logs")


@pytest.fixture
def snapshots(services, temp_dir):
    from src.core.snapshot import SnapshotManager

    return SnapshotManager(services, snapshot_file=temp_dir / "service_snapshots.json")
