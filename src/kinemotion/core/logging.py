"""Logging configuration and utilities."""

import logging
import os
import sys
from pathlib import Path

NAMESPACE = "kinemotion"

# Python-side loggers of the pose stack
THIRD_PARTY_LOGGERS = ("mediapipe", "absl")


def setup_logging(level: str = "INFO", log_file: str | None = None) -> None:
    """Configure application-wide logging.

    Session results go to stdout, so log records go to stderr. Below DEBUG the
    pose stack is kept quiet, including MediaPipe's native glog output, which
    has to be set before the graph is first built.

    Args:
        level: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        log_file: Optional path to log file
    """
    log_level = getattr(logging, level.upper(), logging.INFO)

    # Create formatter
    formatter = logging.Formatter(
        fmt="%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )

    # Configure package logger
    root_logger = logging.getLogger(NAMESPACE)
    root_logger.setLevel(log_level)

    # Clear existing handlers
    root_logger.handlers.clear()

    # Console handler
    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setLevel(log_level)
    console_handler.setFormatter(formatter)
    root_logger.addHandler(console_handler)

    # File handler (if specified)
    if log_file:
        log_path = Path(log_file)
        log_path.parent.mkdir(parents=True, exist_ok=True)

        file_handler = logging.FileHandler(log_path)
        file_handler.setLevel(log_level)
        file_handler.setFormatter(formatter)
        root_logger.addHandler(file_handler)

    # Suppress noisy third-party loggers unless debugging
    third_party_level = logging.DEBUG if log_level <= logging.DEBUG else logging.WARNING
    for name in THIRD_PARTY_LOGGERS:
        logging.getLogger(name).setLevel(third_party_level)

    # glog: 0 INFO, 1 WARNING, 2 ERROR; an explicit user setting wins
    os.environ.setdefault("GLOG_minloglevel", "0" if log_level <= logging.DEBUG else "2")


def get_logger(name: str) -> logging.Logger:
    """Get a logger instance for a module.

    Args:
        name: Module name (typically __name__)

    Returns:
        Configured logger instance
    """
    # Ensure name is under the package namespace
    if not name.startswith(NAMESPACE):
        name = f"{NAMESPACE}.{name}"

    return logging.getLogger(name)
