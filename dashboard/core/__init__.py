"""
Core module initialization.
Exports configuration, logging and error utilities.
"""

from dashboard.core.config import get_settings, setup_logging, Settings, EnvironmentMode
from dashboard.core.exceptions import ApiError, ErrorType, get_error_message

__all__ = [
    "get_settings",
    "setup_logging",
    "Settings",
    "EnvironmentMode",
    "ApiError",
    "ErrorType",
    "get_error_message",
]
