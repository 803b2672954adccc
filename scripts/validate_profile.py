#!/usr/bin/env python3
"""Validate custom profile files.

Usage:
    python scripts/validate_profile.py %APPDATA%/Tweakd/profiles/gaming.json
    python scripts/validate_profile.py path/to/*.json
"""

import json
import re
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent))

from src.tweaks.catalog import BUILTIN_TWEAK_IDS, DEFAULT_PROFILES  # noqa: E402

KNOWN_TWEAK_IDS = {tweak_id.lower() for tweak_id in BUILTIN_TWEAK_IDS}
BUILTIN_PROFILE_IDS = {profile.id.lower() for profile in DEFAULT_PROFILES}

REQUIRED_FIELDS = ["id", "title", "tweak_ids"]


def validate_profile(profile: dict, index: int) -> tuple[list[str], list[str]]:
    """Validate a single profile entry. Returns (errors, warnings)."""
    errors: list[str] = []
    warnings: list[str] = []

    if not isinstance(profile, dict):
        return [f"profiles[{index}]: must be a JSON object"], warnings

    prefix = f"profiles[{index}] ({profile.get('id', 'UNKNOWN')})"

    # Required fields
    for field in REQUIRED_FIELDS:
        if field not in profile or not profile[field]:
            errors.append(f"{prefix}: missing required field '{field}'")

    # Profile ID format
    pid = profile.get("id", "")
    if isinstance(pid, str) and pid:
        if not re.match(r"^[A-Za-z0-9][A-Za-z0-9_.-]*$", pid):
            errors.append(f"{prefix}: id may only contain letters, digits, '.', '_' and '-'")
        if pid.lower() in BUILTIN_PROFILE_IDS:
            errors.append(f"{prefix}: id '{pid}' clashes with a built-in profile")

    # Tweak IDs
    tweak_ids = profile.get("tweak_ids", [])
    if not isinstance(tweak_ids, list):
        errors.append(f"{prefix}: tweak_ids must be a list")
        return errors, warnings

    seen: set[str] = set()
    for tweak_id in tweak_ids:
        if not isinstance(tweak_id, str):
            errors.append(f"{prefix}: tweak id {tweak_id!r} is not a string")
            continue
        if tweak_id.lower() in seen:
            warnings.append(f"{prefix}: duplicate tweak id '{tweak_id}'")
        seen.add(tweak_id.lower())
        # Unknown IDs are ignored at apply time, so they only warrant a warning
        if tweak_id.lower() not in KNOWN_TWEAK_IDS:
            warnings.append(f"{prefix}: unknown tweak id '{tweak_id}'")

    return errors, warnings


def validate_file(path: Path) -> tuple[int, list[str], list[str]]:
    """Validate a profile file. Returns (profile_count, errors, warnings)."""
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as e:
        return 0, [f"Invalid JSON: {e}"], []

    profiles = data if isinstance(data, list) else [data]

    errors: list[str] = []
    warnings: list[str] = []

    # Check for duplicate IDs
    seen_ids: set[str] = set()
    for profile in profiles:
        pid = profile.get("id", "") if isinstance(profile, dict) else ""
        if isinstance(pid, str) and pid:
            if pid.lower() in seen_ids:
                errors.append(f"Duplicate profile id: '{pid}'")
            seen_ids.add(pid.lower())

    for i, profile in enumerate(profiles):
        profile_errors, profile_warnings = validate_profile(profile, i)
        errors.extend(profile_errors)
        warnings.extend(profile_warnings)

    return len(profiles), errors, warnings


def main() -> int:
    if len(sys.argv) < 2:
        print(f"Usage: {sys.argv[0]} <profile_file.json> [...]")
        return 1

    total_errors = 0
    for filepath in sys.argv[1:]:
        path = Path(filepath)
        if not path.exists():
            print(f"ERROR: File not found: {path}")
            total_errors += 1
            continue

        count, errors, warnings = validate_file(path)

        if errors:
            print(f"\n{path}: {count} profiles, {len(errors)} error(s)")
            for err in errors:
                print(f"  - {err}")
            total_errors += len(errors)
        else:
            print(f"{path}: {count} profiles, all valid")

        for warning in warnings:
            print(f"  ! {warning}")

    if total_errors > 0:
        print(f"\nTotal errors: {total_errors}")
        return 1

    print("\nAll profiles valid.")
    return 0


if __name__ == "__main__":
    sys.exit(main())
