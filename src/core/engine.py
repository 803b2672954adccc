"""Tweak Engine - runs batches of tweaks against the system.

The engine is responsible for:
- Resolving tweak IDs against the catalog (case-insensitive, de-duplicated)
- Creating a System Restore point before applying, when requested
- Applying, undoing and previewing tweaks in caller order
- Isolating per-tweak failures so one bad tweak never aborts a batch
- Writing an audit record for every attempt and every batch
- Observing cancellation between tweaks
"""

import threading
from collections.abc import Callable, Iterable
from datetime import datetime

from .audit import AuditLogger
from .config import DEFAULT_RESTORE_POINT_DESCRIPTION
from .errors import OperationCancelledError, RestorePointError
from .logging_config import get_logger
from .models import BatchResult, BatchStatus, OutcomeStatus, TweakOutcome, TweakStatus
from .osguard import OSGuard
from .restore import SystemRestoreManager

# Type alias for progress callback
ProgressCallback = Callable[[str], None]


def _no_progress(message: str) -> None:
    pass


def _error_text(error: Exception) -> str:
    return str(error) or type(error).__name__


class TweakEngine:
    """Applies, undoes and previews tweaks from a catalog.

    Batches run sequentially on the calling thread. Callers that need a
    responsive UI run them on a worker thread and pass a cancel event.

    Example:
        engine = TweakEngine(catalog, AuditLogger(config.logs_dir), guard=OSGuard())
        result = engine.apply(
            ["privacy.disableAdvertisingId", "visual.showFileExtensions"],
            create_restore_point=True,
            progress=print,
        )
        print(result.summary())
    """

    def __init__(
        self,
        catalog,
        audit: AuditLogger,
        restore: SystemRestoreManager | None = None,
        guard: OSGuard | None = None,
    ) -> None:
        """Initialize the engine.

        Args:
            catalog: TweakCatalog the IDs are resolved against
            audit: Audit logger receiving one record per attempt
            restore: System Restore manager (defaults to the live one)
            guard: OS probes used for build gating; None disables gating
        """
        self.catalog = catalog
        self.audit = audit
        self.restore = restore or SystemRestoreManager()
        self.guard = guard
        self.logger = get_logger("engine")

    def _resolve(self, tweak_ids: Iterable[str]) -> list:
        seen: set[str] = set()
        tweaks = []
        for tweak_id in tweak_ids:
            key = tweak_id.lower()
            if key in seen:
                continue
            seen.add(key)

            tweak = self.catalog.get(tweak_id)
            if tweak is None:
                self.logger.warning(f"Ignoring unknown tweak id: {tweak_id}")
                continue
            tweaks.append(tweak)
        return tweaks

    def _is_supported(self, tweak) -> bool:
        if self.guard is None:
            return True
        return self.guard.is_build_supported(tweak.min_build)

    def requires_admin(self, tweak_ids: Iterable[str]) -> bool:
        """Check whether any of the given tweaks needs elevation.

        Unknown IDs are ignored.
        """
        return any(t.is_admin_required for t in self._resolve(tweak_ids))

    def create_restore_point(
        self,
        description: str = DEFAULT_RESTORE_POINT_DESCRIPTION,
        cancel_event: threading.Event | None = None,
    ) -> None:
        """Create a System Restore point and audit the attempt.

        Raises:
            RestorePointError: If the restore point could not be created
            OperationCancelledError: If cancelled while PowerShell runs
        """
        self._checkpoint(description, cancel_event, None)

    def _checkpoint(
        self,
        description: str,
        cancel_event: threading.Event | None,
        result: BatchResult | None,
    ) -> None:
        self.logger.info(f"Creating restore point: {description}")
        try:
            self.restore.create_restore_point(description, cancel_event=cancel_event)
        except OperationCancelledError:
            self.logger.warning("Restore point creation cancelled")
            self._count(result, self.audit.log_cancelled("RESTORE-POINT", description))
            raise
        except RestorePointError as e:
            self.logger.error(f"Restore point failed: {e}")
            self._count(result, self.audit.log_restore_point(description, False, str(e)))
            raise

        self._count(result, self.audit.log_restore_point(description, True))

    def apply(
        self,
        tweak_ids: Iterable[str],
        create_restore_point: bool = False,
        description: str = DEFAULT_RESTORE_POINT_DESCRIPTION,
        progress: ProgressCallback | None = None,
        cancel_event: threading.Event | None = None,
    ) -> BatchResult:
        """Apply tweaks in the given order.

        Args:
            tweak_ids: Tweak IDs; duplicates and unknown IDs are dropped
            create_restore_point: Create a restore point before any change
            description: Restore point description
            progress: Receives one human-readable line per step
            cancel_event: Checked before each tweak

        Returns:
            BatchResult with one outcome per resolved tweak

        Raises:
            RestorePointError: If the requested restore point failed. No
                tweak has been touched when this is raised.
        """
        report = progress or _no_progress
        tweaks = self._resolve(tweak_ids)
        result = BatchResult(operation="apply")

        if create_restore_point:
            report("Creating restore point...")
            try:
                self._checkpoint(description, cancel_event, result)
            except OperationCancelledError:
                return self._cancel(result, tweaks, report)
            except RestorePointError as e:
                report(f"Failed to create restore point: {e}")
                self._count(result, self.audit.log_batch("apply", f"Aborted: {e}", False))
                raise
            result.restore_point_created = True

        for index, tweak in enumerate(tweaks):
            if cancel_event is not None and cancel_event.is_set():
                return self._cancel(result, tweaks[index:], report)

            if not self._is_supported(tweak):
                report(f"Skipping (not supported): {tweak.title}")
                self.logger.info(f"{tweak.id} requires build {tweak.min_build}, skipped")
                reason = f"Requires Windows build {tweak.min_build} or later"
                logged = self.audit.log_apply_skip(tweak.id, tweak.title, reason)
                self._record(result, tweak, OutcomeStatus.SKIPPED, reason, logged)
                continue

            report(f"Applying: {tweak.title}")
            try:
                tweak.apply()
            except Exception as e:
                message = _error_text(e)
                self.logger.error(f"Failed to apply {tweak.id}: {message}")
                report(f"Error applying {tweak.title}: {message}")
                logged = self.audit.log_apply(tweak.id, tweak.title, False, message)
                self._record(result, tweak, OutcomeStatus.FAILED, message, logged)
                continue

            self.logger.info(f"Applied {tweak.id}")
            logged = self.audit.log_apply(tweak.id, tweak.title, True)
            self._record(result, tweak, OutcomeStatus.SUCCEEDED, None, logged)

        return self._finish(result, report)

    def undo(
        self,
        tweak_ids: Iterable[str],
        progress: ProgressCallback | None = None,
        cancel_event: threading.Event | None = None,
    ) -> BatchResult:
        """Undo tweaks in the given order.

        Tweaks that do not support undo are skipped and audited as such.
        """
        report = progress or _no_progress
        tweaks = self._resolve(tweak_ids)
        result = BatchResult(operation="undo")

        for index, tweak in enumerate(tweaks):
            if cancel_event is not None and cancel_event.is_set():
                return self._cancel(result, tweaks[index:], report)

            if not tweak.supports_undo:
                report(f"Skipping (no undo): {tweak.title}")
                logged = self.audit.log_undo_skip(tweak.id, tweak.title)
                self._record(result, tweak, OutcomeStatus.SKIPPED, None, logged)
                continue

            report(f"Undoing: {tweak.title}")
            try:
                tweak.undo()
            except Exception as e:
                message = _error_text(e)
                self.logger.error(f"Failed to undo {tweak.id}: {message}")
                report(f"Error undoing {tweak.title}: {message}")
                logged = self.audit.log_undo(tweak.id, tweak.title, False, message)
                self._record(result, tweak, OutcomeStatus.FAILED, message, logged)
                continue

            self.logger.info(f"Undid {tweak.id}")
            logged = self.audit.log_undo(tweak.id, tweak.title, True)
            self._record(result, tweak, OutcomeStatus.SUCCEEDED, None, logged)

        return self._finish(result, report)

    def preview(
        self,
        tweak_ids: Iterable[str],
        progress: ProgressCallback | None = None,
    ) -> BatchResult:
        """Describe what applying the tweaks would change, without changing it."""
        report = progress or _no_progress
        result = BatchResult(operation="preview")

        for tweak in self._resolve(tweak_ids):
            try:
                changes = tweak.describe_changes()
            except Exception as e:
                message = _error_text(e)
                report(f"Error previewing {tweak.title}: {message}")
                logged = self.audit.log_dry_run(tweak.id, tweak.title, "", False, message)
                self._record(result, tweak, OutcomeStatus.FAILED, message, logged)
                continue

            report(f"Would apply: {tweak.title}")
            for change in changes:
                report(f"  {change}")

            logged = self.audit.log_dry_run(tweak.id, tweak.title, "; ".join(changes))
            self._record(result, tweak, OutcomeStatus.SUCCEEDED, None, logged)

        return self._finish(result, report)

    def get_status(self, tweak_id: str) -> TweakStatus:
        """Probe one tweak.

        Raises:
            KeyError: If the ID is not in the catalog
        """
        tweak = self.catalog.get(tweak_id)
        if tweak is None:
            raise KeyError(tweak_id)
        return self._probe(tweak)

    def get_statuses(self, tweak_ids: Iterable[str] | None = None) -> dict[str, TweakStatus]:
        """Probe several tweaks (all of the catalog by default).

        Returns:
            Mapping of tweak ID to status, in resolution order
        """
        tweaks = list(self.catalog) if tweak_ids is None else self._resolve(tweak_ids)
        return {tweak.id: self._probe(tweak) for tweak in tweaks}

    def _probe(self, tweak) -> TweakStatus:
        if not self._is_supported(tweak):
            return TweakStatus.NOT_SUPPORTED
        try:
            return tweak.get_status()
        except Exception as e:
            self.logger.warning(f"Status check failed for {tweak.id}: {_error_text(e)}")
            return TweakStatus.UNKNOWN

    def _record(
        self,
        result: BatchResult,
        tweak,
        status: OutcomeStatus,
        error: str | None,
        logged: bool,
    ) -> None:
        result.outcomes.append(TweakOutcome(tweak.id, tweak.title, status, error, logged))
        self._count(result, logged)

    def _count(self, result: BatchResult | None, logged: bool) -> None:
        if result is not None and not logged:
            result.audit_failures += 1

    def _finish(self, result: BatchResult, report: ProgressCallback) -> BatchResult:
        failed = bool(result.failed)
        result.status = BatchStatus.COMPLETED_WITH_ERRORS if failed else BatchStatus.COMPLETED
        result.finished_at = datetime.now()

        summary = result.summary()
        self._count(result, self.audit.log_batch(result.operation, summary, not failed))
        if result.audit_failures:
            self.logger.warning(f"{result.audit_failures} audit record(s) could not be written")
        self.logger.info(summary)
        report(summary)
        return result

    def _cancel(self, result: BatchResult, remaining: list, report: ProgressCallback) -> BatchResult:
        for tweak in remaining:
            result.outcomes.append(TweakOutcome(tweak.id, tweak.title, OutcomeStatus.CANCELLED))
        result.status = BatchStatus.CANCELLED
        result.finished_at = datetime.now()

        summary = result.summary()
        self._count(result, self.audit.log_cancelled(result.operation, summary))
        self.logger.warning(summary)
        report(summary)
        return result
