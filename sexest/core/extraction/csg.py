"""
CSG Feature Deriver

Turns raw long-bone cross-sectional geometry (CSG-Toolkit output) into the
feature vector the CSG sex classifiers were trained on:
- maximum bone distance
- per cross-section level: area, perimeter, circularity index,
  Ix, Iy, Ix/Iy, Imin, Imax, Imax/Imin

Positions are load-bearing: classifier normalization coefficients reference
columns of the derived vector by index.
"""
from typing import List, Sequence, Tuple
import numpy as np

from sexest.core.errors import DataError, DimensionError
from sexest.utils import get_logger

logger = get_logger(__name__)

# Cross-section levels along the diaphysis, % of bone length
CSG_LEVELS: Tuple[int, ...] = (20, 35, 50, 65, 80)

RAW_LEVEL_PROPERTIES: Tuple[str, ...] = ("area", "perimeter", "ix", "iy", "imin", "imax")
DERIVED_LEVEL_PROPERTIES: Tuple[str, ...] = (
    "area", "perimeter", "circularity", "ix", "iy", "ix_iy", "imin", "imax", "imax_imin",
)

RAW_WIDTH = 1 + len(CSG_LEVELS) * len(RAW_LEVEL_PROPERTIES)          # 31
DERIVED_WIDTH = 1 + len(CSG_LEVELS) * len(DERIVED_LEVEL_PROPERTIES)  # 46

# Full CSG-Toolkit CSV rows: sample id, max distance, five descriptive columns,
# then 8 properties per level of which the 5th and 8th are not used.
CSG_TOOLKIT_COLUMNS = 47
CSG_TOOLKIT_DROPPED_COLUMNS: Tuple[int, ...] = (
    0, 2, 3, 4, 5, 6, 11, 14, 19, 22, 27, 30, 35, 38, 43, 46,
)
CSG_TOOLKIT_KEPT_COLUMNS: Tuple[int, ...] = tuple(
    i for i in range(CSG_TOOLKIT_COLUMNS) if i not in CSG_TOOLKIT_DROPPED_COLUMNS
)


def raw_feature_names() -> List[str]:
    """Column names of the 31-value raw row."""
    names = ["max_distance"]
    for level in CSG_LEVELS:
        names.extend(f"{prop}_{level}" for prop in RAW_LEVEL_PROPERTIES)
    return names


def feature_names() -> List[str]:
    """Column names of the 46-value derived feature vector, in order."""
    names = ["max_distance"]
    for level in CSG_LEVELS:
        names.extend(f"{prop}_{level}" for prop in DERIVED_LEVEL_PROPERTIES)
    return names


def _as_numeric(values, name: str) -> np.ndarray:
    try:
        arr = np.asarray(values, dtype=float)
    except (TypeError, ValueError) as e:
        raise DataError(f"{name} contains non-numeric values: {e}") from e
    if not np.all(np.isfinite(arr)):
        raise DataError(f"{name} contains missing or non-finite values")
    return arr


def trim_csg_row(row: Sequence) -> np.ndarray:
    """
    Reduce full CSG-Toolkit CSV rows (47 columns, sample id first) to raw rows.

    Args:
        row: one 47-value row, or a 2D array of such rows. The sample id
             column may hold anything; it is discarded.

    Returns:
        31-value raw row(s) accepted by `derive_features`.
    """
    arr = np.asarray(row, dtype=object)
    if arr.ndim not in (1, 2) or arr.shape[-1] != CSG_TOOLKIT_COLUMNS:
        raise DimensionError(
            f"CSG-Toolkit rows must have {CSG_TOOLKIT_COLUMNS} columns, got shape {arr.shape}"
        )
    return _as_numeric(arr[..., list(CSG_TOOLKIT_KEPT_COLUMNS)], "CSG-Toolkit row")


def derive_features(raw_row: Sequence) -> np.ndarray:
    """
    Derive the classifier feature vector from raw CSG measurements.

    Args:
        raw_row: 31 values (max distance, then area, perimeter, Ix, Iy,
                 Imin, Imax for each of the 5 levels), or a 2D array of
                 such rows.

    Returns:
        46-value feature vector (or one per row).
    """
    raw = _as_numeric(raw_row, "raw CSG row")
    if raw.ndim not in (1, 2) or raw.shape[-1] != RAW_WIDTH:
        raise DimensionError(f"raw CSG rows must have {RAW_WIDTH} values, got shape {raw.shape}")

    head = raw[..., :1]
    levels = raw[..., 1:].reshape(raw.shape[:-1] + (len(CSG_LEVELS), len(RAW_LEVEL_PROPERTIES)))
    area, perimeter, ix, iy, imin, imax = np.moveaxis(levels, -1, 0)

    for denominator, name in ((perimeter, "perimeter"), (iy, "Iy"), (imin, "Imin")):
        if np.any(denominator == 0):
            raise DataError(f"raw CSG row has a zero {name}; ratio features are undefined")

    circularity = area * (4 * np.pi) / perimeter ** 2
    derived = np.stack(
        [area, perimeter, circularity, ix, iy, ix / iy, imin, imax, imax / imin],
        axis=-1,
    )
    features = np.concatenate(
        [head, derived.reshape(raw.shape[:-1] + (-1,))],
        axis=-1,
    )
    logger.debug(f"Derived {features.shape[-1]} CSG features for {1 if raw.ndim == 1 else raw.shape[0]} row(s)")
    return features
