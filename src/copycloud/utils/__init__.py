"""
Utility helpers for copycloud.
"""

from .formatting import human_size
from .logging import configure_logging, get_logger, log_context

__all__ = ["human_size", "configure_logging", "get_logger", "log_context"]
