"""
Logging utilities for AI POD Kit Creator.

Provides file-based logging that:
- Writes to ~/.kit_creator/logs/kit_creator.log (or $KIT_CREATOR_LOG_DIR)
- Wipes the log on each program restart
- Captures uncaught exceptions
- Logs key events (API calls, retries, generation batches, errors)
"""

import logging
import os
import sys
from pathlib import Path
from typing import Optional

from .config import APP_HOME_DIR, APP_NAME, APP_VERSION


def _get_log_dir() -> Path:
    """Get the log directory - $KIT_CREATOR_LOG_DIR if set, else under the app home."""
    override = os.environ.get("KIT_CREATOR_LOG_DIR")
    if override:
        return Path(override)
    return APP_HOME_DIR / "logs"


# Log directory and file
LOG_DIR = _get_log_dir()
LOG_FILE = LOG_DIR / "kit_creator.log"

# Module-level logger
_logger: Optional[logging.Logger] = None
_initialized = False


def _ensure_log_dir() -> None:
    """Ensure the log directory exists."""
    try:
        LOG_DIR.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        print(f"[WARN] Could not create log directory: {e}")


def setup_logging() -> logging.Logger:
    """
    Initialize the logging system.

    Call this once at application startup. The log file is wiped on each restart.

    Returns:
        The configured logger instance.
    """
    global _logger, _initialized

    if _initialized and _logger:
        return _logger

    _ensure_log_dir()

    _logger = logging.getLogger("kit_creator")
    _logger.setLevel(logging.DEBUG)
    _logger.handlers.clear()

    # File handler - 'w' mode wipes the file on each restart
    try:
        file_handler = logging.FileHandler(LOG_FILE, mode='w', encoding='utf-8')
        file_handler.setLevel(logging.DEBUG)
        formatter = logging.Formatter(
            '%(asctime)s - %(levelname)s - %(message)s',
            datefmt='%Y-%m-%d %H:%M:%S'
        )
        file_handler.setFormatter(formatter)
        _logger.addHandler(file_handler)
    except OSError as e:
        print(f"[WARN] Could not set up file logging: {e}")

    # CLI prints its own [INFO] progress lines; console only gets warnings and errors
    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(logging.WARNING)
    console_handler.setFormatter(logging.Formatter('%(levelname)s - %(message)s'))
    _logger.addHandler(console_handler)

    _logger.info("=" * 60)
    _logger.info(f"{APP_NAME} v{APP_VERSION} started")
    _logger.info(f"Log file: {LOG_FILE}")
    _logger.info(f"Python version: {sys.version}")
    _logger.info("=" * 60)

    _setup_exception_handler()

    _initialized = True
    return _logger


def _setup_exception_handler() -> None:
    """Set up global exception handler to log uncaught exceptions."""
    original_excepthook = sys.excepthook

    def exception_handler(exc_type, exc_value, exc_traceback):
        # Don't log KeyboardInterrupt
        if issubclass(exc_type, KeyboardInterrupt):
            original_excepthook(exc_type, exc_value, exc_traceback)
            return

        if _logger:
            _logger.critical("Uncaught exception:", exc_info=(exc_type, exc_value, exc_traceback))

        original_excepthook(exc_type, exc_value, exc_traceback)

    sys.excepthook = exception_handler


def get_logger() -> logging.Logger:
    """
    Get the logger instance. Initializes logging if not already done.

    Returns:
        The logger instance.
    """
    if not _initialized:
        return setup_logging()
    return _logger


# Convenience functions for direct logging
def log_debug(message: str) -> None:
    """Log a debug message."""
    get_logger().debug(message)


def log_info(message: str) -> None:
    """Log an info message."""
    get_logger().info(message)


def log_warning(message: str) -> None:
    """Log a warning message."""
    get_logger().warning(message)


def log_error(message: str, detail: str = "", exc_info: bool = False) -> None:
    """
    Log an error message.

    Args:
        message: The error message (or context label if detail is provided)
        detail: Optional detail string appended after ": "
        exc_info: If True, include exception traceback
    """
    if detail:
        message = f"{message}: {detail}"
    get_logger().error(message, exc_info=exc_info)


def log_exception(message: str) -> None:
    """Log an error with full exception traceback."""
    get_logger().exception(message)


def log_api_call(endpoint: str, success: bool, details: str = "") -> None:
    """
    Log an API call for debugging.

    Args:
        endpoint: The model or operation name
        success: Whether the call succeeded
        details: Additional details (error message, etc.)
    """
    status = "SUCCESS" if success else "FAILED"
    msg = f"API [{status}] {endpoint}"
    if details:
        msg += f" - {details}"

    if success:
        get_logger().info(msg)
    else:
        get_logger().error(msg)


def log_generation_start(gen_type: str, count: int = 1) -> None:
    """Log the start of a generation operation."""
    get_logger().info(f"Generation started: {gen_type} (count={count})")


def log_generation_complete(gen_type: str, success: bool, details: str = "") -> None:
    """Log the completion of a generation operation."""
    status = "completed" if success else "failed"
    msg = f"Generation {status}: {gen_type}"
    if details:
        msg += f" - {details}"

    if success:
        get_logger().info(msg)
    else:
        get_logger().error(msg)


def get_log_file_path() -> Path:
    """Get the path to the log file."""
    return LOG_FILE


def get_log_contents() -> str:
    """
    Read and return the current log file contents.

    Useful for attaching to bug reports.
    """
    try:
        if LOG_FILE.exists():
            return LOG_FILE.read_text(encoding='utf-8')
        return "(Log file not found)"
    except OSError as e:
        return f"(Error reading log: {e})"
