"""
Posterior Estimator

Maps a discriminant score to a predicted sex and the posterior probability of
that prediction.

LDA: distance from the sectioning point, with the side of each sex fixed by
the order of the group centroids.
RBF: empirical lookup of |score| in a binned probability table, with the
side of each sex fixed by the order of the group values.
"""
from typing import Literal, Tuple
import math
import numpy as np

from sexest.core.container import LDAPosterior, Method, PosteriorParameters, RBFPosterior, Sex
from sexest.core.errors import ClassifierLookupError, ConfigError
from sexest.utils import get_logger

logger = get_logger(__name__)

MissPolicy = Literal["raise", "clamp"]


def _sigmoid(x: float) -> float:
    """Numerically stable 1 / (1 + exp(-x))."""
    if x >= 0:
        return 1.0 / (1.0 + math.exp(-x))
    z = math.exp(x)
    return z / (1.0 + z)


def lda_class_probabilities(dist: float) -> Tuple[float, float]:
    """
    Probabilities of the group on the negative side and on the positive side
    of the sectioning point: exp(-d)/(exp(-d)+exp(d)) and exp(d)/(exp(d)+exp(-d)).
    """
    positive = _sigmoid(2.0 * dist)
    return 1.0 - positive, positive


def lda_posterior(score: float, params: LDAPosterior) -> Tuple[Sex, float]:
    dist = float(score) - params.sectioning_point
    if math.isnan(dist):
        raise ClassifierLookupError("LDA score is NaN; no posterior can be assigned")

    if params.centroid_female < params.centroid_male:
        negative_sex, positive_sex = Sex.FEMALE, Sex.MALE
    else:
        negative_sex, positive_sex = Sex.MALE, Sex.FEMALE

    p_negative, p_positive = lda_class_probabilities(dist)
    if dist < 0:
        return negative_sex, p_negative
    # ties fall on the non-negative side (p == 0.5)
    return positive_sex, p_positive


def _nearest_bin(pdf: np.ndarray, value: float) -> int:
    low, high = pdf[:, 0], pdf[:, 1]
    gaps = np.where(value < low, low - value, np.where(value >= high, value - high, 0.0))
    return int(np.argmin(gaps))


def rbf_posterior(score: float, params: RBFPosterior, miss_policy: MissPolicy = "raise") -> Tuple[Sex, float]:
    score = float(score)
    magnitude = abs(score)
    pdf = params.discrete_pdf
    matches = np.flatnonzero((pdf[:, 0] <= magnitude) & (pdf[:, 1] > magnitude))

    if len(matches) == 0:
        if miss_policy != "clamp" or math.isnan(score):
            raise ClassifierLookupError(
                f"|score| = {magnitude:.6g} falls outside every posterior bin "
                f"[{pdf[0, 0]:.6g}, {pdf[-1, 1]:.6g})"
            )
        row = _nearest_bin(pdf, magnitude)
        logger.warning(
            f"|score| = {magnitude:.6g} outside posterior bins; clamped to bin "
            f"[{pdf[row, 0]:.6g}, {pdf[row, 1]:.6g})"
        )
    else:
        row = int(matches[0])
    probability = float(pdf[row, 2])

    if params.male_group < params.female_group:
        sex = Sex.MALE if score < 0 else Sex.FEMALE
    else:
        sex = Sex.FEMALE if score < 0 else Sex.MALE
    return sex, probability


def estimate_posterior(
    score: float,
    params: PosteriorParameters,
    miss_policy: MissPolicy = "raise",
) -> Tuple[Sex, float]:
    """
    Convert a score into (sex, probability) using the posterior variant
    `params` is tagged as.

    Args:
        score: Discriminant score from the evaluated model
        params: LDA or RBF posterior parameters
        miss_policy: RBF only; "raise" fails when |score| matches no bin,
                     "clamp" falls back to the nearest bin

    Returns:
        (predicted sex, posterior probability)
    """
    method = getattr(params, "method", None)
    if method is Method.LDA:
        return lda_posterior(score, params)
    if method is Method.RBF:
        return rbf_posterior(score, params, miss_policy)
    raise ConfigError(f"Unsupported posterior parameters: {type(params).__name__}")
