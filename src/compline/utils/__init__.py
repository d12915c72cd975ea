"""
Utilities module - structured logging.
"""

from compline.utils.logger import logger, ComplineLogger, JsonFormatter

__all__ = ["logger", "ComplineLogger", "JsonFormatter"]
