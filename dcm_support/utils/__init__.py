"""
Utilities Package - Logging and Exception Handling
"""
from .logging import StructuredFormatter, get_logger, setup_logging
from .exceptions import (
    DecisionSupportError,
    BatchInputError,
    BatchHeaderError,
    BatchEmptyError,
    FieldValidationError,
    EngineUsageError,
    ConfigurationError,
)

__all__ = [
    "StructuredFormatter",
    "get_logger",
    "setup_logging",
    "DecisionSupportError",
    "BatchInputError",
    "BatchHeaderError",
    "BatchEmptyError",
    "FieldValidationError",
    "EngineUsageError",
    "ConfigurationError",
]
