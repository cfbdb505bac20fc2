"""Loguru setup shared by the CLI and embedding applications."""

import sys
from pathlib import Path

from loguru import logger

from actionflow.core.config import Settings, get_settings

LOG_FORMAT = (
    "<green>{time:YYYY-MM-DD HH:mm:ss}</green> | "
    "<level>{level: <8}</level> | "
    "<cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> | "
    "<level>{message}</level>"
)


def configure_logging(settings: Settings | None = None) -> None:
    """Configure loguru based on settings.

    Logs go to stderr so that commands printing JSON keep stdout clean.
    """
    settings = settings or get_settings()
    logger.remove()  # Remove default handler

    level = "DEBUG" if settings.actionflow_debug else settings.actionflow_log_level

    if settings.actionflow_log_dir:
        logs_dir = Path(settings.actionflow_log_dir)
        logs_dir.mkdir(parents=True, exist_ok=True)
        logger.add(
            str(logs_dir / "actionflow_{time:YYYY-MM-DD}.log"),
            rotation="1 day",
            retention="7 days",
            level=level,
            format=LOG_FORMAT,
        )

    logger.add(
        sys.stderr,
        level=level,
        format=LOG_FORMAT,
        colorize=True,
    )
