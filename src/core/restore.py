"""System Restore Integration - Windows System Restore point management.

This module creates restore points before tweak batches and lists the
points that exist. Creation failures are raised, never swallowed: the
caller asked for the safety net and must know it is missing.
"""

import json
import logging
import threading
from dataclasses import dataclass
from datetime import datetime

from src.core.errors import CommandError, RestorePointError
from src.system.shell import CommandRunner, escape_ps

logger = logging.getLogger("tweakd.core.restore")


@dataclass
class RestorePoint:
    """Information about a Windows System Restore point.

    Attributes:
        sequence_number: Unique sequence number
        description: Description of the restore point
        creation_time: When the restore point was created
        restore_point_type: Type of restore point
    """

    sequence_number: int
    description: str
    creation_time: datetime | None
    restore_point_type: str


RESTORE_POINT_TYPES = {
    0: "Application Install",
    1: "Application Uninstall",
    10: "Device Driver Install",
    12: "Modify Settings",
    13: "Cancelled Operation",
}


class SystemRestoreManager:
    """Manager for Windows System Restore operations.

    Example:
        manager = SystemRestoreManager(CommandRunner())
        manager.create_restore_point("Before debloat")
    """

    def __init__(self, runner: CommandRunner | None = None) -> None:
        """Initialize the System Restore manager.

        Args:
            runner: Command runner used to invoke PowerShell
        """
        self.runner = runner or CommandRunner()

    def create_restore_point(
        self,
        description: str,
        cancel_event: threading.Event | None = None,
    ) -> None:
        """Create a System Restore point.

        Requires admin rights and System Protection enabled on the system
        drive. Blocks until PowerShell exits, which can take minutes.

        Args:
            description: Description for the restore point
            cancel_event: Set to abort the PowerShell process

        Raises:
            RestorePointError: If PowerShell fails or exits non-zero
            OperationCancelledError: If cancelled while running
        """
        script = (
            f"Checkpoint-Computer -Description '{escape_ps(description)}' "
            f"-RestorePointType 'MODIFY_SETTINGS' -ErrorAction Stop"
        )

        try:
            result = self.runner.run_powershell(script, cancel_event=cancel_event)
        except CommandError as e:
            raise RestorePointError(f"Failed to create restore point: {e}") from e

        if not result.success:
            message = f"Failed to create restore point. ExitCode={result.exit_code}"
            if result.error:
                message += f": {result.error}"
            raise RestorePointError(message, exit_code=result.exit_code)

        logger.info(f"Created restore point: {description}")

    def list_restore_points(self, limit: int = 20) -> list[RestorePoint]:
        """List available System Restore points.

        Args:
            limit: Maximum number of points to return

        Returns:
            List of RestorePoint objects (newest first); empty on any error
        """
        try:
            result = self.runner.run_powershell(
                f"Get-ComputerRestorePoint | Sort-Object -Property SequenceNumber -Descending | "
                f"Select-Object -First {limit} | "
                f"Select-Object SequenceNumber, Description, CreationTime, RestorePointType | "
                f"ConvertTo-Json"
            )
        except CommandError as e:
            logger.debug(f"Could not list restore points: {e}")
            return []

        if not result.success or not result.output:
            return []

        try:
            data = json.loads(result.output)
        except ValueError as e:
            logger.error(f"Failed to parse restore points: {e}")
            return []

        # Handle single result (not a list)
        if isinstance(data, dict):
            data = [data]

        points: list[RestorePoint] = []
        for item in data:
            try:
                points.append(
                    RestorePoint(
                        sequence_number=int(item.get("SequenceNumber", 0)),
                        description=str(item.get("Description", "")),
                        creation_time=_parse_wmi_time(str(item.get("CreationTime", ""))),
                        restore_point_type=RESTORE_POINT_TYPES.get(
                            item.get("RestorePointType", -1),
                            f"Unknown ({item.get('RestorePointType')})",
                        ),
                    )
                )
            except (TypeError, ValueError, AttributeError) as e:
                logger.debug(f"Error parsing restore point: {e}")

        return points


def _parse_wmi_time(value: str) -> datetime | None:
    """Parse a WMI CIM_DATETIME string (``20240501120000.000000-000``)."""
    try:
        return datetime.strptime(value[:14], "%Y%m%d%H%M%S")
    except ValueError:
        return None
