"""Console and file logging for botdeploy.

Modules log through children of the ``botdeploy`` logger. The package logger
owns a single RichHandler on the shared console and, once
setup_file_logging() has run, a single FileHandler.
"""
import logging
import os
from pathlib import Path
from typing import Optional

from rich.console import Console
from rich.logging import RichHandler

console = Console()

PACKAGE_LOGGER = "botdeploy"

_state_home = os.environ.get("XDG_STATE_HOME")
LOG_DIR = (Path(_state_home) if _state_home else Path.home() / ".local" / "state") / "botdeploy"
LOG_FILE = LOG_DIR / "botdeploy.log"
FALLBACK_LOG_FILE = Path("/tmp/botdeploy.log")

FILE_FORMAT = "%(asctime)s | %(name)s | %(levelname)s | %(message)s"

_file_handler: Optional[logging.FileHandler] = None


def _package_logger() -> logging.Logger:
    logger = logging.getLogger(PACKAGE_LOGGER)
    if not any(isinstance(h, RichHandler) for h in logger.handlers):
        handler = RichHandler(console=console, show_path=False, markup=False)
        handler.setFormatter(logging.Formatter("%(message)s"))
        logger.addHandler(handler)
        logger.setLevel(logging.INFO)
    return logger


def _open_log_file(path: Path) -> logging.FileHandler:
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        return logging.FileHandler(path)
    except OSError:
        FALLBACK_LOG_FILE.parent.mkdir(parents=True, exist_ok=True)
        return logging.FileHandler(FALLBACK_LOG_FILE)


def setup_file_logging(log_file: Optional[str] = None, verbose: bool = False) -> Path:
    """Mirror botdeploy log records into a file.

    Only the first call opens a file; later calls keep writing to it.

    Args:
        log_file: Path to log file (defaults to LOG_FILE; /tmp/botdeploy.log
            when that location is not writable)
        verbose: Record DEBUG messages as well

    Returns:
        Path of the file being written
    """
    global _file_handler

    if _file_handler is None:
        handler = _open_log_file(Path(log_file) if log_file else LOG_FILE)
        handler.setFormatter(logging.Formatter(FILE_FORMAT, datefmt="%Y-%m-%d %H:%M:%S"))
        _package_logger().addHandler(handler)
        _file_handler = handler
        set_verbose(verbose)
        _package_logger().debug(f"Logging to {handler.baseFilename}")

    return Path(_file_handler.baseFilename)


def close_file_logging() -> None:
    """Detach and close the log file handler, if one is open."""
    global _file_handler

    if _file_handler is not None:
        logging.getLogger(PACKAGE_LOGGER).removeHandler(_file_handler)
        _file_handler.close()
        _file_handler = None


def set_verbose(verbose: bool = True) -> None:
    """Switch console and file output between DEBUG and INFO."""
    level = logging.DEBUG if verbose else logging.INFO
    _package_logger().setLevel(level)
    if _file_handler is not None:
        _file_handler.setLevel(level)


def get_logger(name: str) -> logging.Logger:
    """Return the logger for a botdeploy module (pass __name__)."""
    _package_logger()
    return logging.getLogger(name)
