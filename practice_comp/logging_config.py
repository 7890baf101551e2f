"""
Structured logging configuration for the practice compensation model.

The engine itself never configures logging; callers (notebooks, services,
tests) call ``setup_logging`` once at start-up.
"""

import logging
import logging.handlers
from pathlib import Path
from typing import List, Optional

# Parent logger of every engine module
COMPENSATION_LOGGER = "practice_comp"

# Standard log format with module name and line number
LOG_FORMAT = "%(asctime)s - %(name)s:%(lineno)d - %(levelname)s - %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

LOG_FILES = (
    "compensation_events.log",
    "warnings_errors.log",
    "combined.log",
    "debug_detail.log",
)

MAX_BYTES = 10 * 1024 * 1024
BACKUP_COUNT = 5

# Track if logging is already configured
_LOGGING_CONFIGURED = False
_installed: List[tuple] = []


def clear_logs(log_dir: Path) -> None:
    """
    Clear all log files in the specified directory.

    Args:
        log_dir: Directory containing log files to clear
    """
    for name in LOG_FILES:
        log_file = Path(log_dir) / name
        if log_file.exists():
            try:
                log_file.unlink()
            except OSError as e:
                logging.getLogger(__name__).warning(f"Could not delete {log_file}: {e}")


def _rotating(path: Path, level: int, formatter: logging.Formatter) -> logging.Handler:
    handler = logging.handlers.RotatingFileHandler(
        filename=path,
        maxBytes=MAX_BYTES,
        backupCount=BACKUP_COUNT,
        encoding='utf-8',
        mode='a',
    )
    handler.setLevel(level)
    handler.setFormatter(formatter)
    return handler


def _attach(logger: logging.Logger, handler: logging.Handler) -> None:
    logger.addHandler(handler)
    _installed.append((logger, handler))


def setup_logging(log_dir: Path, debug: bool = False, clear_existing: bool = True) -> None:
    """
    Configure structured logging for the application.

    Creates separate log files for different concerns:
    - compensation_events.log: engine events from the practice_comp loggers (INFO+)
    - warnings_errors.log: Warnings and errors (WARNING+)
    - combined.log: Combined log of all messages (INFO+)
    - debug_detail.log: Detailed debug information (DEBUG, only if debug=True)

    Warnings and above are also echoed to the console. Calling this again
    after a successful setup is a no-op.

    Args:
        log_dir: Directory where log files will be stored
        debug: If True, enables debug logging and creates debug_detail.log
        clear_existing: If True, clears existing log files before starting
    """
    global _LOGGING_CONFIGURED

    if _LOGGING_CONFIGURED:
        return

    log_dir = Path(log_dir)
    log_dir.mkdir(parents=True, exist_ok=True)
    if clear_existing:
        clear_logs(log_dir)

    root_logger = logging.getLogger()
    root_logger.setLevel(logging.DEBUG if debug else logging.INFO)

    file_formatter = logging.Formatter(LOG_FORMAT, DATE_FORMAT)
    console_formatter = logging.Formatter("%(levelname)-8s %(message)s")

    # Console handler (for warnings and above)
    console = logging.StreamHandler()
    console.setLevel(logging.WARNING)
    console.setFormatter(console_formatter)
    _attach(root_logger, console)

    _attach(root_logger, _rotating(log_dir / "combined.log", logging.INFO, file_formatter))
    _attach(root_logger, _rotating(log_dir / "warnings_errors.log", logging.WARNING, file_formatter))

    comp_logger = logging.getLogger(COMPENSATION_LOGGER)
    comp_logger.setLevel(logging.DEBUG if debug else logging.INFO)
    _attach(comp_logger, _rotating(log_dir / "compensation_events.log", logging.INFO, file_formatter))
    comp_logger.propagate = True  # Allow to bubble up to root

    if debug:
        # Everything the engine emits at DEBUG, including the [POOL]/[DELAYED] detail lines
        _attach(comp_logger, _rotating(log_dir / "debug_detail.log", logging.DEBUG, file_formatter))

    _LOGGING_CONFIGURED = True


def shutdown_logging() -> None:
    """Detach and close the handlers installed by ``setup_logging``."""
    global _LOGGING_CONFIGURED
    while _installed:
        logger, handler = _installed.pop()
        logger.removeHandler(handler)
        handler.close()
    _LOGGING_CONFIGURED = False


def get_logger(name: Optional[str] = None) -> logging.Logger:
    """
    Get a logger instance.

    Args:
        name: Logger name (e.g., __name__). If None, returns root logger.
    """
    return logging.getLogger(name)


__all__ = [
    "COMPENSATION_LOGGER",
    "clear_logs",
    "setup_logging",
    "shutdown_logging",
    "get_logger",
]
