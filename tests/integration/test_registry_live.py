"""Integration tests for WindowsRegistry against the real registry."""

import sys

import pytest

pytestmark = [
    pytest.mark.skipif(sys.platform != "win32", reason="Requires Windows"),
    pytest.mark.windows,
]

SCRATCH_KEY = "Software\\TweakdTests"


class TestWindowsRegistryLive:
    """Round trips through a scratch key under HKCU."""

    def test_missing_value_returns_default(self, live_registry):
        assert live_registry.get_value("HKCU", SCRATCH_KEY, "Missing", 7) == 7
        assert not live_registry.key_exists("HKCU", SCRATCH_KEY)

    def test_dword_round_trip(self, live_registry):
        live_registry.set_value("HKCU", SCRATCH_KEY, "Number", 1)

        assert live_registry.get_value("HKCU", SCRATCH_KEY, "Number") == 1
        assert live_registry.key_exists("HKCU", SCRATCH_KEY)

    def test_string_round_trip(self, live_registry):
        from src.core.models import ValueKind

        live_registry.set_value("HKCU", SCRATCH_KEY, "Name", "value", ValueKind.STRING)

        assert live_registry.get_value("HKCU", SCRATCH_KEY, "Name") == "value"

    def test_delete_value(self, live_registry):
        live_registry.set_value("HKCU", SCRATCH_KEY, "Number", 1)
        live_registry.delete_value("HKCU", SCRATCH_KEY, "Number")
        # Deleting twice is harmless
        live_registry.delete_value("HKCU", SCRATCH_KEY, "Number")

        assert live_registry.get_value("HKCU", SCRATCH_KEY, "Number") is None

    def test_delete_key_tree(self, live_registry):
        live_registry.create_key("HKCU", f"{SCRATCH_KEY}\\Child\\Grandchild")
        live_registry.delete_key("HKCU", SCRATCH_KEY)

        assert not live_registry.key_exists("HKCU", SCRATCH_KEY)


class TestTweaksLive:
    """Apply and undo declarative tweaks against the real registry."""

    def test_registry_tweak_round_trip(self, live_registry, real_config):
        from src.core.audit import AuditLogger
        from src.core.engine import TweakEngine
        from src.core.models import RegistryEntry, TweakCategory, TweakSeverity, TweakStatus
        from src.tweaks.base import RegistryTweak
        from src.tweaks.catalog import TweakCatalog

        tweak = RegistryTweak(
            live_registry,
            (RegistryEntry("HKCU", SCRATCH_KEY, "Enabled", 1, 0),),
            id="test.scratch",
            title="Scratch",
            description="",
            category=TweakCategory.ADVANCED,
            severity=TweakSeverity.SAFE,
        )
        engine = TweakEngine(TweakCatalog([tweak]), AuditLogger(real_config.logs_dir))

        result = engine.apply(["test.scratch"])
        assert result.ok
        assert engine.get_status("test.scratch") == TweakStatus.APPLIED

        engine.undo(["test.scratch"])
        assert engine.get_status("test.scratch") == TweakStatus.NOT_APPLIED

    def test_key_presence_tweak(self, live_registry):
        from src.core.models import TweakCategory, TweakSeverity, TweakStatus
        from src.tweaks.keys import KeyPresenceTweak

        tweak = KeyPresenceTweak(
            live_registry,
            "HKCU",
            f"{SCRATCH_KEY}\\InprocServer32",
            id="test.keyPresence",
            title="Key Presence",
            description="",
            category=TweakCategory.VISUAL,
            severity=TweakSeverity.SAFE,
        )

        tweak.apply()
        assert tweak.get_status() == TweakStatus.APPLIED

        tweak.undo()
        assert tweak.get_status() == TweakStatus.NOT_APPLIED
