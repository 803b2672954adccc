"""Tests for the registry store helpers."""

import sys

import pytest

from src.system.registry import normalize_hive, values_equal


class TestNormalizeHive:
    def test_aliases(self):
        assert normalize_hive("HKLM") == "HKEY_LOCAL_MACHINE"
        assert normalize_hive("hkcu") == "HKEY_CURRENT_USER"
        assert normalize_hive("HKEY_USERS") == "HKEY_USERS"

    def test_unknown_hive(self):
        with pytest.raises(ValueError, match="Unknown registry hive"):
            normalize_hive("HKXX")


class TestValuesEqual:
    """Tests for registry value comparison."""

    def test_equal_ints(self):
        assert values_equal(0, 0)
        assert not values_equal(1, 0)

    def test_numeric_string_matches_int(self):
        assert values_equal("4", 4)
        assert values_equal(" 99 ", 99)
        assert not values_equal("2", 4)

    def test_wide_integer_matches(self):
        assert values_equal(2**32 + 1, 2**32 + 1)

    def test_missing_value(self):
        assert not values_equal(None, 0)
        assert values_equal(None, None)

    def test_strings(self):
        assert values_equal("", "")
        assert not values_equal("abc", "")

    def test_non_numeric_string_against_int(self):
        assert not values_equal("enabled", 1)


@pytest.mark.skipif(sys.platform == "win32", reason="Checks the non-Windows import path")
def test_module_imports_without_winreg():
    from src.system.registry import WindowsRegistry

    # winreg is only imported when a method is called
    assert WindowsRegistry() is not None
