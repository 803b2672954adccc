"""App removal tweak - removes preinstalled AppX packages.

Removal goes through PowerShell (``Remove-AppxPackage``) one wildcard at a
time. Uninstalling is not reliably reversible, so the tweak does not
support undo and the engine never calls :meth:`AppRemovalTweak.undo`.
"""

import logging
from typing import Any

from src.core.errors import TweakError
from src.core.models import BloatwareScope, TweakStatus
from src.system.shell import CommandRunner, escape_ps
from src.tweaks.base import Tweak

logger = logging.getLogger("tweakd.tweaks.apps")

THIRD_PARTY_WILDCARDS = (
    "*TikTok*",
    "*Disney*",
    "*Spotify*",
    "*Facebook*",
    "*Instagram*",
    "*CandyCrush*",
    "*BubbleWitch*",
    "*Dropbox*",
    "*Booking*",
    "*Twitter*",
)

MICROSOFT_WILDCARDS = (
    "Microsoft.BingNews",
    "Microsoft.BingWeather",
    "Microsoft.GetHelp",
    "Microsoft.Getstarted",
    "Microsoft.MicrosoftSolitaireCollection",
    "Microsoft.People",
    "Microsoft.YourPhone",
    "Microsoft.ZuneMusic",
    "Microsoft.ZuneVideo",
    "Microsoft.Xbox*",
)


def wildcards_for_scope(scope: BloatwareScope) -> list[str]:
    """Return the package wildcards targeted by a bloatware scope."""
    wildcards = list(THIRD_PARTY_WILDCARDS)
    if scope == BloatwareScope.INCLUDE_MICROSOFT:
        wildcards.extend(MICROSOFT_WILDCARDS)
    return wildcards


class AppRemovalTweak(Tweak):
    """Remove preinstalled apps matching a list of package wildcards.

    Attributes:
        wildcards: Package name patterns passed to ``Get-AppxPackage -Name``
        all_users: Remove for all users instead of the current user
        remove_provisioned: Also remove provisioned packages (needs admin)
    """

    def __init__(
        self,
        runner: CommandRunner,
        wildcards: list[str],
        all_users: bool = False,
        remove_provisioned: bool = False,
        **kwargs: Any,
    ) -> None:
        kwargs.setdefault("supports_undo", False)
        super().__init__(**kwargs)
        self.runner = runner
        self.wildcards = _dedupe(wildcards)
        self.all_users = all_users
        self.remove_provisioned = remove_provisioned

    def get_status(self) -> TweakStatus:
        # Installed apps vary per user and scope, so there is no single answer
        return TweakStatus.UNKNOWN

    def apply(self) -> None:
        failed: list[str] = []

        all_users_flag = " -AllUsers" if self.all_users else ""
        for wildcard in self.wildcards:
            script = (
                f"Get-AppxPackage{all_users_flag} -Name '{escape_ps(wildcard)}' | "
                f"Remove-AppxPackage -ErrorAction SilentlyContinue"
            )
            result = self.runner.run_powershell(script)
            if not result.success:
                logger.warning(f"Removing {wildcard} exited with {result.exit_code}")
                failed.append(wildcard)

        if self.remove_provisioned:
            for wildcard in self.wildcards:
                script = (
                    f"Get-AppxProvisionedPackage -Online | "
                    f"Where-Object {{ $_.DisplayName -like '{escape_ps(wildcard)}' }} | "
                    f"Remove-AppxProvisionedPackage -Online -ErrorAction SilentlyContinue"
                )
                result = self.runner.run_powershell(script)
                if not result.success:
                    logger.warning(
                        f"Removing provisioned {wildcard} exited with {result.exit_code}"
                    )
                    failed.append(f"{wildcard} (provisioned)")

        if failed:
            raise TweakError(self.id, f"Could not remove: {', '.join(failed)}")

    def undo(self) -> None:
        raise TweakError(self.id, "App removal cannot be undone")

    def describe_changes(self) -> list[str]:
        scope = "all users" if self.all_users else "current user"
        changes = [f"Remove apps matching {w} ({scope})" for w in self.wildcards]
        if self.remove_provisioned:
            changes.append(f"Remove provisioned packages matching {len(self.wildcards)} pattern(s)")
        return changes


def _dedupe(wildcards: list[str]) -> list[str]:
    seen: set[str] = set()
    result: list[str] = []
    for wildcard in wildcards:
        wildcard = wildcard.strip()
        if not wildcard or wildcard.lower() in seen:
            continue
        seen.add(wildcard.lower())
        result.append(wildcard)
    return result
