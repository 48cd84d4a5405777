"""
Normalizer

Selects the variables a classifier expects and z-scores them.
"""
import numpy as np

from sexest.core.container import NormalizationCoefficients
from sexest.core.errors import DataError, DimensionError


def as_feature_vector(features, name: str = "features") -> np.ndarray:
    """Coerce input to a finite 1D float vector."""
    try:
        arr = np.asarray(features, dtype=float)
    except (TypeError, ValueError) as e:
        raise DataError(f"{name} contains non-numeric values: {e}") from e
    if arr.ndim != 1:
        raise DimensionError(f"{name} must be a 1D vector, got shape {arr.shape}")
    if not np.all(np.isfinite(arr)):
        raise DataError(f"{name} contains missing or non-finite values")
    return arr


def normalize(features, coeffs: NormalizationCoefficients) -> np.ndarray:
    """
    Pick `features[variable_indices]` (1-based, order kept) and apply
    `(x - mean) / std`.
    """
    x = as_feature_vector(features)
    if np.any(coeffs.std == 0):
        raise DataError("normalization std contains zero; cannot standardize")
    highest = max(coeffs.variable_indices)
    if highest > len(x):
        raise DimensionError(
            f"normalization references variable {highest} but the feature vector has {len(x)} values"
        )
    selected = x[[i - 1 for i in coeffs.variable_indices]]
    return (selected - coeffs.mean) / coeffs.std
