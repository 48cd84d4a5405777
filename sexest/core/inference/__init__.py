"""
Inference Module

Scores skeletal feature vectors against pre-trained sex classifiers and
converts the scores into a predicted sex with a posterior probability.
"""
from .registry import ClassifierRegistry, element_key, SLOTS
from .normalizer import normalize
from .evaluator import evaluate_model
from .posterior import estimate_posterior, lda_class_probabilities
from .engine import (
    EstimationResult,
    SampleRecord,
    SexEstimator,
    evaluate,
    evaluate_slots,
    evaluate_vertebra,
)

__all__ = [
    "ClassifierRegistry",
    "element_key",
    "SLOTS",
    "normalize",
    "evaluate_model",
    "estimate_posterior",
    "lda_class_probabilities",
    "EstimationResult",
    "SampleRecord",
    "SexEstimator",
    "evaluate",
    "evaluate_slots",
    "evaluate_vertebra",
]
