import sys
from pathlib import Path
from typing import Optional

from loguru import logger


def setup_logging(level: str = "INFO", log_file: Optional[str] = None):
    """
    Configure the loguru logger with:
    - stdout handler (colored)
    - optional file handler (rotated, retained)

    Guard rejections are logged at WARNING with their specific reason;
    that detail never reaches the HTTP response.
    """
    logger.remove()

    # Example: 2026-10-19 10:00:00 | WARNING  | formtoken.guard.pipeline:check:88 - Rejected POST /capture ...
    log_format = (
        "<green>{time:YYYY-MM-DD HH:mm:ss}</green> | "
        "<level>{level: <8}</level> | "
        "<cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> - "
        "<level>{message}</level>"
    )
    file_format = "{time:YYYY-MM-DD HH:mm:ss} | {level: <8} | {name}:{function}:{line} - {message}"

    logger.add(sys.stdout, level=level, format=log_format)

    if log_file:
        log_path = Path(log_file)
        try:
            log_path.parent.mkdir(parents=True, exist_ok=True)
            logger.add(
                str(log_path),
                rotation="10 MB",
                retention="30 days",
                level=level,
                format=file_format,
            )
        except OSError as e:
            logger.warning(f"Could not setup file logging at {log_path}: {e}")

    return logger
