"""
Feature Extraction Module

Derives classifier feature vectors from raw skeletal measurements.
"""
from .csg import (
    CSG_LEVELS,
    DERIVED_WIDTH,
    RAW_WIDTH,
    derive_features,
    feature_names,
    raw_feature_names,
    trim_csg_row,
)

__all__ = [
    "CSG_LEVELS",
    "DERIVED_WIDTH",
    "RAW_WIDTH",
    "derive_features",
    "feature_names",
    "raw_feature_names",
    "trim_csg_row",
]
