"""
Core module for fem_displacement.

Provides Voigt notation helpers, elastic parameters, error types and the
element configuration.
"""

from .errors import (
    ConfigurationError,
    FemDisplacementError,
    InvalidMaterialError,
    PropertyNotAssignedError,
    StateVariableError,
)
from .material import IsotropicMaterial

__all__ = [
    "ConfigurationError",
    "FemDisplacementError",
    "InvalidMaterialError",
    "PropertyNotAssignedError",
    "StateVariableError",
    "IsotropicMaterial",
]
