"""
Model Evaluator

Computes the discriminant score of a feature vector under a linear (LDA) or
RBF-kernel SVM model. The model variant is taken from the tag its parameters
were loaded with.
"""
import numpy as np

from sexest.core.container import LDAModel, Method, ModelParameters, RBFModel
from sexest.core.errors import ConfigError, DimensionError
from sexest.core.inference.normalizer import as_feature_vector


def lda_score(features, model: LDAModel) -> float:
    """score = w0 + sum(w[1:] * x)"""
    x = as_feature_vector(features)
    if len(model.weights) != 1 + len(x):
        raise DimensionError(
            f"LDA model has {len(model.weights) - 1} coefficients but got {len(x)} features"
        )
    return float(model.weights[0] + np.dot(model.weights[1:], x))


def rbf_score(features, model: RBFModel) -> float:
    """score = rho + sum_i dual_coef[i] * exp(-gamma * ||sv_i - x||^2)"""
    x = as_feature_vector(features)
    if len(x) != model.input_width:
        raise DimensionError(
            f"RBF support vectors have {model.input_width} columns but got {len(x)} features"
        )
    sq_dist = np.sum((model.support_vectors - x) ** 2, axis=1)
    kernel = np.exp(-model.gamma * sq_dist)
    return float(model.rho + np.dot(model.dual_coef, kernel))


_SCORERS = {
    Method.LDA: lda_score,
    Method.RBF: rbf_score,
}


def evaluate_model(features, params: ModelParameters) -> float:
    """Score features with whichever model variant `params` is tagged as."""
    method = getattr(params, "method", None)
    scorer = _SCORERS.get(method)
    if scorer is None:
        raise ConfigError(f"Unsupported model parameters: {type(params).__name__}")
    return scorer(features, params)
