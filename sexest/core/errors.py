"""
Estimation Errors

Typed failures raised by the classifier evaluation engine. None of them are
transient: every core operation is deterministic, so a failure always points
at the container or at the input data.
"""


class EstimationError(Exception):
    """Base class for all sex estimation failures."""


class ConfigError(EstimationError):
    """Malformed classifier container (missing tables, broken invariants)."""


class ClassifierLookupError(EstimationError, LookupError):
    """Unknown skeletal element, unknown or unset slot, or unmatched posterior bin."""


class DimensionError(EstimationError, ValueError):
    """Feature vector length does not match the model parameters."""


class DataError(EstimationError, ValueError):
    """Unusable input values (zero standard deviation, non-numeric data)."""


__all__ = [
    "EstimationError",
    "ConfigError",
    "ClassifierLookupError",
    "DimensionError",
    "DataError",
]
