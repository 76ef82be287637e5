"""
Core module initialization.
Exports configuration, logging utilities and the error hierarchy.
"""

from scan2dine.core.config import (
    get_settings,
    Settings,
    EnvironmentMode,
    DataBackend,
    AuthBackend,
)
from scan2dine.core.exceptions import (
    Scan2DineError,
    BackendError,
    RecordNotFoundError,
    ConflictError,
    EncodingError,
    AuthError,
    DraftValidationError,
)

__all__ = [
    "get_settings",
    "Settings",
    "EnvironmentMode",
    "DataBackend",
    "AuthBackend",
    "Scan2DineError",
    "BackendError",
    "RecordNotFoundError",
    "ConflictError",
    "EncodingError",
    "AuthError",
    "DraftValidationError",
]
