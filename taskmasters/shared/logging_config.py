"""Logging configuration for client and server events."""
import logging
import os
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Optional

DEFAULT_LOG_DIR = Path.home() / ".taskmasters"
ROOT_LOGGER = "taskmasters"


def log_dir() -> Path:
    return Path(os.getenv("TASKMASTERS_LOG_DIR") or DEFAULT_LOG_DIR)


def configure_logging(name: str = ROOT_LOGGER, log_file: Optional[str] = None) -> logging.Logger:
    """Return ``name`` as a child of the package logger, attaching a rotating file handler once.

    The handler lives on the package logger so every component shares one file;
    ``log_file`` picks that file the first time around.
    """
    root = logging.getLogger(ROOT_LOGGER)
    root.setLevel(logging.INFO)
    if not root.handlers:
        directory = log_dir()
        directory.mkdir(parents=True, exist_ok=True)
        handler = RotatingFileHandler(
            directory / (log_file or "taskmasters.log"),
            maxBytes=5 * 1024 * 1024,
            backupCount=3,
            delay=True,
        )
        formatter = logging.Formatter(
            "%(asctime)s [%(levelname)s] %(name)s - %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )
        handler.setFormatter(formatter)
        root.addHandler(handler)
    if name == ROOT_LOGGER or name.startswith(ROOT_LOGGER + "."):
        return logging.getLogger(name)
    return logging.getLogger(f"{ROOT_LOGGER}.{name}")
