"""Logging configuration for Tweakd.

Diagnostic logs rotate under ``<logs_dir>``:

    main.log    everything below the ``tweakd`` logger
    engine.log  apply/undo/preview batches only (``tweakd.engine``)

These are developer diagnostics. The operator-facing record of what was
changed is the audit log written by :mod:`src.core.audit`.
"""

import logging
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Optional

ROOT_LOGGER = "tweakd"
ENGINE_LOGGER = "tweakd.engine"

DETAILED_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(filename)s:%(lineno)d | %(message)s"
# Batches usually run on the CLI worker thread
ENGINE_FORMAT = "%(asctime)s | %(levelname)-8s | %(threadName)s | %(message)s"
CONSOLE_FORMAT = "%(levelname)s: %(message)s"

DEFAULT_LOG_LEVEL = logging.INFO
MAX_LOG_BYTES = 5 * 1024 * 1024
LOG_BACKUPS = 3

# logger name -> (file name, format)
LOG_FILES: dict[str, tuple[str, str]] = {
    ROOT_LOGGER: ("main.log", DETAILED_FORMAT),
    ENGINE_LOGGER: ("engine.log", ENGINE_FORMAT),
}


class TweakdLogger:
    """Process-wide owner of the Tweakd log handlers.

    Calling :meth:`setup` again replaces the previous handlers, so the
    CLI and tests can reconfigure freely.
    """

    _instance: Optional["TweakdLogger"] = None

    def __new__(cls) -> "TweakdLogger":
        if cls._instance is None:
            instance = super().__new__(cls)
            instance.logs_dir = None
            instance.log_level = DEFAULT_LOG_LEVEL
            instance._handlers = {}
            cls._instance = instance
        return cls._instance

    def setup(
        self,
        logs_dir: Path,
        log_level: int = DEFAULT_LOG_LEVEL,
        console_output: bool = True,
    ) -> None:
        """Attach rotating file handlers (and optionally stderr).

        Args:
            logs_dir: Directory for the log files; created if missing
            log_level: Threshold for every handler
            console_output: Echo the main logger to stderr
        """
        self.shutdown()
        self.logs_dir = Path(logs_dir)
        self.log_level = log_level
        self.logs_dir.mkdir(parents=True, exist_ok=True)

        for name, (filename, fmt) in LOG_FILES.items():
            handler = RotatingFileHandler(
                self.logs_dir / filename,
                maxBytes=MAX_LOG_BYTES,
                backupCount=LOG_BACKUPS,
                encoding="utf-8",
            )
            self._attach(name, handler, fmt)

        # Engine records stay out of main.log and the console
        logging.getLogger(ENGINE_LOGGER).propagate = False

        if console_output:
            self._attach(ROOT_LOGGER, logging.StreamHandler(sys.stderr), CONSOLE_FORMAT)

    def _attach(self, name: str, handler: logging.Handler, fmt: str) -> None:
        handler.setLevel(self.log_level)
        handler.setFormatter(logging.Formatter(fmt))

        logger = logging.getLogger(name)
        logger.setLevel(self.log_level)
        logger.addHandler(handler)
        self._handlers.setdefault(name, []).append(handler)

    def shutdown(self) -> None:
        """Detach and close every handler installed by :meth:`setup`."""
        for name, handlers in self._handlers.items():
            logger = logging.getLogger(name)
            logger.setLevel(logging.NOTSET)
            for handler in handlers:
                logger.removeHandler(handler)
                handler.close()
        self._handlers = {}
        logging.getLogger(ENGINE_LOGGER).propagate = True

    def get_logger(self, name: str = "main") -> logging.Logger:
        """Return ``tweakd`` for "main", otherwise ``tweakd.<name>``."""
        if name == "main":
            return logging.getLogger(ROOT_LOGGER)
        return logging.getLogger(f"{ROOT_LOGGER}.{name}")


_logger_manager = TweakdLogger()


def setup_logging(
    logs_dir: Path,
    log_level: int = DEFAULT_LOG_LEVEL,
    console_output: bool = True,
) -> None:
    """Initialize logging. Call once at startup."""
    _logger_manager.setup(logs_dir, log_level, console_output)


def shutdown_logging() -> None:
    """Close the log files opened by :func:`setup_logging`."""
    _logger_manager.shutdown()


def get_logger(name: str = "main") -> logging.Logger:
    """Get a logger instance.

    Args:
        name: "main", "engine" or any other area name ("catalog", ...)
    """
    return _logger_manager.get_logger(name)
