"""
Sex Estimation Engine

Runs the classifier pipeline for one sample:
registry lookup -> normalization -> model score -> posterior.

Long-bone (CSG) samples can be scored by up to three classifier slots at
once; every slot is evaluated independently. Vertebral samples use a single
classifier and feed the raw measurements straight into the model.
"""
from __future__ import annotations
from dataclasses import dataclass
import threading
from typing import Any, Dict, Iterable, List, Sequence, Union

import numpy as np

from sexest.core.container import ClassifierContainer, DataType, Method, Sex
from sexest.core.errors import ClassifierLookupError, ConfigError
from sexest.core.extraction import derive_features
from sexest.core.inference.evaluator import evaluate_model
from sexest.core.inference.normalizer import as_feature_vector, normalize
from sexest.core.inference.posterior import MissPolicy, estimate_posterior
from sexest.core.inference.registry import SLOTS, ClassifierRegistry, element_key, parse_method
from sexest.utils import get_logger

logger = get_logger(__name__)


@dataclass(frozen=True)
class SampleRecord:
    """One sample to estimate: identifier plus its feature vector."""
    sample_id: str
    features: np.ndarray

    def __post_init__(self):
        object.__setattr__(self, "sample_id", str(self.sample_id))
        object.__setattr__(self, "features", as_feature_vector(self.features, f"sample '{self.sample_id}'"))


@dataclass
class EstimationResult:
    """Predicted sex of one sample by one classifier."""
    sex: Sex
    probability: float
    score: float
    method: Method
    skeletal_element: str
    slot: int = 1
    classifier_index: int = 0

    @property
    def description(self) -> str:
        return f"Sample is {self.sex.value} with posterior probability {self.probability:0.2f}"

    def to_dict(self) -> Dict[str, Any]:
        """Serialize to dictionary."""
        return {
            "sex": self.sex.value,
            "probability": round(self.probability, 4),
            "score": self.score,
            "method": self.method.value,
            "skeletal_element": self.skeletal_element,
            "slot": self.slot,
            "classifier_index": self.classifier_index,
        }


class SexEstimator:
    """
    Classifier evaluation engine over one read-only container.

    Holds no per-request state; the same instance may serve any number of
    samples from any number of threads. The evaluation counter is the only
    mutable field and is updated under a lock.
    """

    def __init__(self, container: ClassifierContainer, miss_policy: MissPolicy = "raise"):
        """
        Args:
            container: Loaded classifier container
            miss_policy: RBF posterior behavior for scores outside every bin
        """
        self.container = container
        self.registry = ClassifierRegistry(container)
        self.miss_policy = miss_policy
        self._evaluation_count = 0
        self._count_lock = threading.Lock()
        logger.info(
            f"SexEstimator initialized for {container.datatype.value} container "
            f"({container.classifier_count} classifiers, miss_policy={miss_policy})"
        )

    @property
    def evaluation_count(self) -> int:
        return self._evaluation_count

    def _require_datatype(self, datatype: DataType) -> None:
        if self.container.datatype is not datatype:
            raise ConfigError(
                f"{datatype.value} estimation needs a {datatype.value} container, "
                f"got {self.container.datatype.value}"
            )

    def _run(
        self,
        method: Method,
        skeletal_element: str,
        slot: int,
        features: np.ndarray,
        normalized: bool,
    ) -> EstimationResult:
        index = self.registry.resolve(method, skeletal_element, slot)
        if normalized:
            x = normalize(features, self.registry.normalization(index))
        else:
            x = features
        score = evaluate_model(x, self.registry.model(index, method))
        sex, probability = estimate_posterior(score, self.registry.posterior(index, method), self.miss_policy)
        with self._count_lock:
            self._evaluation_count += 1
        logger.debug(
            f"{method.value} '{skeletal_element}' slot {slot} (classifier {index}): "
            f"score={score:.4f} -> {sex.value} p={probability:.4f}"
        )
        return EstimationResult(
            sex=sex,
            probability=probability,
            score=score,
            method=method,
            skeletal_element=skeletal_element,
            slot=slot,
            classifier_index=index,
        )

    def evaluate(
        self,
        method: Union[Method, str],
        skeletal_element: str,
        slot: int,
        features: Sequence[float],
    ) -> EstimationResult:
        """
        Estimate sex from a derived CSG feature vector with one classifier slot.

        Args:
            method: "LDA" or "RBF"
            skeletal_element: Description-table key, e.g. "Femur Left"
            slot: Classifier slot (1-3)
            features: Derived feature vector (see extraction.derive_features)
        """
        self._require_datatype(DataType.CSG_TOOLKIT)
        return self._run(parse_method(method), skeletal_element, slot, as_feature_vector(features), normalized=True)

    def evaluate_slots(
        self,
        method: Union[Method, str],
        skeletal_element: str,
        slots: Iterable[int],
        features: Sequence[float],
    ) -> List[EstimationResult]:
        """
        Evaluate several classifier slots on the same sample.

        Results come back in ascending slot order. Any failing slot fails the
        whole call.
        """
        self._require_datatype(DataType.CSG_TOOLKIT)
        method = parse_method(method)
        selected = sorted(set(slots))
        unknown = [s for s in selected if s not in SLOTS]
        if unknown:
            raise ClassifierLookupError(f"Unknown classifier slot(s) {unknown}; valid slots are {list(SLOTS)}")
        x = as_feature_vector(features)
        return [self._run(method, skeletal_element, slot, x, normalized=True) for slot in selected]

    def evaluate_bone(
        self,
        method: Union[Method, str],
        bone: str,
        side: str,
        slots: Iterable[int],
        raw_features: Sequence[float],
    ) -> List[EstimationResult]:
        """Derive CSG features from a raw row and evaluate the selected slots."""
        return self.evaluate_slots(method, element_key(bone, side), slots, derive_features(raw_features))

    def evaluate_vertebra(
        self,
        method: Union[Method, str],
        population: str,
        vertebra: str,
        measurements: Sequence[float],
    ) -> EstimationResult:
        """
        Estimate sex from raw vertebral measurements.

        The classifier is resolved by "<population> <vertebra>" and the
        measurements are scored without normalization.
        """
        self._require_datatype(DataType.VERTEBRAL)
        return self._run(
            parse_method(method),
            element_key(population, vertebra),
            1,
            as_feature_vector(measurements, "vertebral measurements"),
            normalized=False,
        )


def evaluate(
    method: Union[Method, str],
    skeletal_element: str,
    slot: int,
    features: Sequence[float],
    container: ClassifierContainer,
    miss_policy: MissPolicy = "raise",
) -> EstimationResult:
    """Functional form of SexEstimator.evaluate."""
    return SexEstimator(container, miss_policy).evaluate(method, skeletal_element, slot, features)


def evaluate_slots(
    method: Union[Method, str],
    skeletal_element: str,
    slots: Iterable[int],
    features: Sequence[float],
    container: ClassifierContainer,
    miss_policy: MissPolicy = "raise",
) -> List[EstimationResult]:
    """Functional form of SexEstimator.evaluate_slots."""
    return SexEstimator(container, miss_policy).evaluate_slots(method, skeletal_element, slots, features)


def evaluate_vertebra(
    method: Union[Method, str],
    population: str,
    vertebra: str,
    measurements: Sequence[float],
    container: ClassifierContainer,
    miss_policy: MissPolicy = "raise",
) -> EstimationResult:
    """Functional form of SexEstimator.evaluate_vertebra."""
    return SexEstimator(container, miss_policy).evaluate_vertebra(method, population, vertebra, measurements)
