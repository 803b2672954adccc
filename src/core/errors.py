"""Exception types raised by the tweak engine."""


class TweakdError(Exception):
    """Base class for all Tweakd errors."""


class TweakError(TweakdError):
    """A single tweak failed to apply or undo."""

    def __init__(self, tweak_id: str, message: str) -> None:
        super().__init__(f"{tweak_id}: {message}")
        self.tweak_id = tweak_id


class RestorePointError(TweakdError):
    """System Restore point creation failed."""

    def __init__(self, message: str, exit_code: int | None = None) -> None:
        super().__init__(message)
        self.exit_code = exit_code


class OperationCancelledError(TweakdError):
    """The caller requested cancellation of a running operation."""


class CommandError(TweakdError):
    """An external command could not be started."""
