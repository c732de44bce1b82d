"""
Utility helpers shared across the package.
"""
import logging
import sys

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def get_logger(name: str) -> logging.Logger:
    """Get a module logger. Handlers are configured once by setup_logging()."""
    return logging.getLogger(name)


def setup_logging(level: str = "INFO", stream=None) -> None:
    """Configure the root logger with a single handler (stdout by default)."""
    root = logging.getLogger()
    root.setLevel(level.upper())
    handler = logging.StreamHandler(stream or sys.stdout)
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    root.handlers.clear()
    root.addHandler(handler)


__all__ = ["get_logger", "setup_logging", "LOG_FORMAT"]
