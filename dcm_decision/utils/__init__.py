"""
Utilities Package - Logging and Exception Handling
"""
from .logging import get_logger, setup_logging
from .exceptions import (
    DecisionSupportError,
    PatientValidationError,
    BatchInputError,
    ConfigurationError,
    EngineContractError,
)

__all__ = [
    "get_logger",
    "setup_logging",
    "DecisionSupportError",
    "PatientValidationError",
    "BatchInputError",
    "ConfigurationError",
    "EngineContractError",
]
