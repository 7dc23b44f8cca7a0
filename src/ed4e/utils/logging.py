"""Logging setup shared by the CLI and anything else that runs workflows."""

import logging
import sys
from pathlib import Path

LOG_FORMAT = "%(asctime)s %(levelname)-8s %(name)s: %(message)s"
DATE_FORMAT = "%H:%M:%S"

# ANSI colours per level, console only
_COLORS = {
    logging.DEBUG: "\033[36m",
    logging.INFO: "\033[32m",
    logging.WARNING: "\033[33m",
    logging.ERROR: "\033[31m",
    logging.CRITICAL: "\033[1;31m",
}
_RESET = "\033[0m"


class ColorFormatter(logging.Formatter):
    """Formatter that wraps the level name in an ANSI colour."""

    def format(self, record: logging.LogRecord) -> str:
        color = _COLORS.get(record.levelno)
        original = record.levelname
        if color:
            record.levelname = f"{color}{original}{_RESET}"
        try:
            return super().format(record)
        finally:
            record.levelname = original


def setup_logging(
    level: str | int = "INFO",
    log_file: Path | str | None = None,
    enable_color: bool = True,
) -> logging.Logger:
    """Configure the ``src.ed4e`` logger hierarchy.

    Args:
        level: Log level name or number.
        log_file: Optional file that receives an uncoloured copy of the log.
        enable_color: Colourise console output when stderr is a terminal.

    Returns:
        The package root logger.
    """
    logger = logging.getLogger("src.ed4e")
    logger.setLevel(level)
    logger.handlers.clear()
    logger.propagate = False

    console = logging.StreamHandler(sys.stderr)
    if enable_color and sys.stderr.isatty():
        console.setFormatter(ColorFormatter(LOG_FORMAT, DATE_FORMAT))
    else:
        console.setFormatter(logging.Formatter(LOG_FORMAT, DATE_FORMAT))
    logger.addHandler(console)

    if log_file is not None:
        path = Path(log_file)
        path.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(path, encoding="utf-8")
        file_handler.setFormatter(logging.Formatter(LOG_FORMAT, DATE_FORMAT))
        logger.addHandler(file_handler)

    return logger
