"""External process invocation.

Restore points and app removal are performed by shelling out to
PowerShell. The exit code is the only failure signal; output is kept for
diagnostics but never parsed.
"""

import logging
import subprocess
import threading
from dataclasses import dataclass

from src.core.errors import CommandError, OperationCancelledError

logger = logging.getLogger("tweakd.system.shell")

# How often a running process is checked for cancellation
POLL_INTERVAL_SECONDS = 0.25


@dataclass
class CommandResult:
    """Result of an external command.

    Attributes:
        exit_code: Process exit code (-1 on timeout)
        output: Captured standard output
        error: Captured standard error
    """

    exit_code: int
    output: str = ""
    error: str = ""

    @property
    def success(self) -> bool:
        return self.exit_code == 0


def escape_ps(value: str) -> str:
    """Escape a value for use inside a single-quoted PowerShell string."""
    return value.replace("'", "''")


class CommandRunner:
    """Runs PowerShell scripts and waits for their exit code.

    Example:
        runner = CommandRunner(timeout=120)
        result = runner.run_powershell("Get-Service DiagTrack")
        if not result.success:
            print(result.error)
    """

    def __init__(self, timeout: int = 300) -> None:
        """Initialize the runner.

        Args:
            timeout: Timeout in seconds for each command
        """
        self.timeout = timeout

    def run_powershell(
        self,
        script: str,
        cancel_event: threading.Event | None = None,
    ) -> CommandResult:
        """Run a PowerShell script.

        Args:
            script: Script text passed to ``-Command``
            cancel_event: Set to terminate the process early

        Returns:
            CommandResult with the exit code and captured output

        Raises:
            CommandError: If PowerShell cannot be started
            OperationCancelledError: If ``cancel_event`` was set while running
        """
        args = [
            "powershell.exe",
            "-NoProfile",
            "-ExecutionPolicy",
            "Bypass",
            "-Command",
            script,
        ]
        return self.run(args, cancel_event=cancel_event)

    def run(
        self,
        args: list[str],
        cancel_event: threading.Event | None = None,
    ) -> CommandResult:
        """Run a command and wait for it to exit."""
        logger.debug(f"Running: {args[0]} ({len(args) - 1} args)")

        try:
            process = subprocess.Popen(
                args,
                stdout=subprocess.PIPE,
                stderr=subprocess.PIPE,
                text=True,
                creationflags=(
                    subprocess.CREATE_NO_WINDOW if hasattr(subprocess, "CREATE_NO_WINDOW") else 0
                ),
            )
        except OSError as e:
            raise CommandError(f"Could not start {args[0]}: {e}") from e

        waited = 0.0
        while True:
            if cancel_event is not None and cancel_event.is_set():
                process.kill()
                process.communicate()
                raise OperationCancelledError(f"{args[0]} was cancelled")

            try:
                stdout, stderr = process.communicate(timeout=POLL_INTERVAL_SECONDS)
                break
            except subprocess.TimeoutExpired:
                waited += POLL_INTERVAL_SECONDS
                if waited >= self.timeout:
                    process.kill()
                    process.communicate()
                    logger.warning(f"{args[0]} timed out after {self.timeout}s")
                    return CommandResult(
                        exit_code=-1,
                        error=f"Command timed out after {self.timeout}s",
                    )

        result = CommandResult(
            exit_code=process.returncode,
            output=(stdout or "").strip(),
            error=(stderr or "").strip() if process.returncode != 0 else "",
        )
        if not result.success:
            logger.debug(f"{args[0]} exited with {result.exit_code}: {result.error}")
        return result
