"""Exception types raised by fem_displacement.

Numerical difficulties inside a constitutive model are not errors: they are
reported through the step-scale value returned by the element engine.
"""


class FemDisplacementError(Exception):
    """Base class for all package specific errors."""


class ConfigurationError(FemDisplacementError):
    """An element could not be set up from the given configuration."""


class InvalidMaterialError(ConfigurationError):
    """The material factory could not produce a hypo-elastic model."""


class PropertyNotAssignedError(ConfigurationError):
    """Element properties (thickness, cross section) were read before assignment."""


class StateVariableError(ConfigurationError, ValueError):
    """The persisted state buffer does not match the element layout."""
