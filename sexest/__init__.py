"""
sexest: Skeletal Sex Estimation
===============================

Estimates biological sex from skeletal morphometric measurements by scoring
them against pre-trained LDA or RBF-kernel SVM classifiers.

Main Modules:
--------------
• core.container   – Immutable classifier container (tables, coefficients, models)
• core.extraction  – CSG-Toolkit feature derivation for long bones
• core.inference   – Registry, normalization, scoring and posterior estimation
• services         – Dataset reading, results log and the estimation service
• main             – HTTP API
• cli              – Command line batch estimation

Usage:
------
    from sexest import ClassifierContainer, SexEstimator, derive_features

    container = ClassifierContainer.from_mapping(parsed)
    estimator = SexEstimator(container)
    results = estimator.evaluate_slots("LDA", "Femur Left", {1, 2}, derive_features(raw_row))
"""
from sexest.core.container import ClassifierContainer, DataType, Method, Sex
from sexest.core.errors import (
    ClassifierLookupError,
    ConfigError,
    DataError,
    DimensionError,
    EstimationError,
)
from sexest.core.extraction import derive_features
from sexest.core.inference import (
    EstimationResult,
    SampleRecord,
    SexEstimator,
    evaluate,
    evaluate_slots,
    evaluate_vertebra,
)

__version__ = "0.1.0"

__all__ = [
    "ClassifierContainer",
    "DataType",
    "Method",
    "Sex",
    "ClassifierLookupError",
    "ConfigError",
    "DataError",
    "DimensionError",
    "EstimationError",
    "derive_features",
    "EstimationResult",
    "SampleRecord",
    "SexEstimator",
    "evaluate",
    "evaluate_slots",
    "evaluate_vertebra",
]
