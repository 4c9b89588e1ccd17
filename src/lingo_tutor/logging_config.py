"""Logging setup: rich console output plus a rotating log file."""
import logging
import logging.handlers
from pathlib import Path

from rich.logging import RichHandler

DEFAULT_LOG_DIR = Path.home() / ".lingo_tutor" / "logs"


def setup_logging(
    log_level: str = "WARNING",
    log_dir: str | Path | None = DEFAULT_LOG_DIR,
    console=None,
) -> logging.Logger:
    """Configure the `lingo_tutor` logger.

    Args:
        log_level: Level name for both handlers (DEBUG, INFO, WARNING, ERROR)
        log_dir: Directory for tutor.log; None disables the file handler
        console: rich Console to log through, so log lines and prompts share a screen

    Returns:
        The configured package logger.
    """
    level = getattr(logging, log_level.upper(), logging.WARNING)
    logger = logging.getLogger("lingo_tutor")
    logger.setLevel(level)
    logger.handlers.clear()

    console_handler = RichHandler(console=console, show_path=False, rich_tracebacks=True)
    console_handler.setLevel(level)
    logger.addHandler(console_handler)

    if log_dir is not None:
        Path(log_dir).mkdir(parents=True, exist_ok=True)
        file_handler = logging.handlers.RotatingFileHandler(
            Path(log_dir) / "tutor.log",
            maxBytes=1024 * 1024,
            backupCount=3,
            encoding="utf-8",
        )
        file_handler.setLevel(level)
        file_handler.setFormatter(logging.Formatter(
            "%(asctime)s [%(levelname)s] %(name)s: %(message)s", datefmt="%Y-%m-%d %H:%M:%S",
        ))
        logger.addHandler(file_handler)

    return logger
