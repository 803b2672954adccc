"""Shared fixtures for integration tests.

All integration tests require Windows and are skipped on other platforms.
Registry tests only touch a scratch key under HKCU.
"""

import sys

import pytest

# Skip entire directory on non-Windows
pytestmark = pytest.mark.skipif(
    sys.platform != "win32",
    reason="Integration tests require Windows",
)

SCRATCH_KEY = "Software\\TweakdTests"


@pytest.fixture
def real_config():
    """Create a real Config pointing to a temporary directory."""
    import tempfile
    from pathlib import Path

    from src.core.config import Config

    with tempfile.TemporaryDirectory(prefix="tweakd_test_") as tmpdir:
        config = Config(config_dir=Path(tmpdir))
        config.ensure_directories()
        yield config


@pytest.fixture
def is_admin():
    """Check if the test is running with admin privileges."""
    from src.core.osguard import OSGuard

    return OSGuard().is_admin()


@pytest.fixture
def live_registry():
    """Real registry store; the scratch key is removed afterwards."""
    from src.system.registry import WindowsRegistry

    registry = WindowsRegistry()
    registry.delete_key("HKCU", SCRATCH_KEY)
    yield registry
    registry.delete_key("HKCU", SCRATCH_KEY)
