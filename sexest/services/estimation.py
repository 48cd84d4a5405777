"""
Estimation Service - Centralized Sex Estimation Logic
"""
from typing import Any, Dict, Iterable, List, Optional, Sequence

from sexest.core.container import ClassifierContainer
from sexest.core.extraction import derive_features
from sexest.core.inference import EstimationResult, SampleRecord, SexEstimator, element_key
from sexest.core.inference.registry import parse_method
from sexest.services.results_log import ResultsLog
from sexest.utils import get_logger

logger = get_logger(__name__)


class EstimationService:
    """
    Service class to handle sex estimation requests.
    Decouples the core engine from the API, the CLI and result persistence.
    """

    def __init__(self, estimator: SexEstimator, results_log: Optional[ResultsLog] = None):
        self.estimator = estimator
        self.results_log = results_log

    @classmethod
    def from_container(
        cls,
        container: ClassifierContainer,
        results_file: Optional[str] = None,
        miss_policy: str = "raise",
    ) -> "EstimationService":
        results_log = ResultsLog(results_file, container.datatype) if results_file else None
        return cls(SexEstimator(container, miss_policy=miss_policy), results_log)

    @property
    def container(self) -> ClassifierContainer:
        return self.estimator.container

    def _response(
        self,
        sample_id: str,
        element: Sequence[str],
        method: str,
        results: List[EstimationResult],
        save: bool,
    ) -> Dict[str, Any]:
        saved = False
        if save:
            if self.results_log is None:
                logger.warning(f"No results log configured; results for '{sample_id}' not saved")
            else:
                self.results_log.append(sample_id, (element[0], element[1]), results)
                saved = True
        return {
            "sample_id": sample_id,
            "skeletal_element": element_key(*element),
            "method": method,
            "results": [dict(r.to_dict(), description=r.description) for r in results],
            "saved": saved,
        }

    def estimate_record(
        self,
        record: SampleRecord,
        method: str,
        bone: str,
        side: str,
        slots: Iterable[int],
        save: bool = False,
    ) -> Dict[str, Any]:
        """Estimate sex of a sample whose CSG features are already derived."""
        method = parse_method(method).value
        results = self.estimator.evaluate_slots(method, element_key(bone, side), slots, record.features)
        return self._response(record.sample_id, (bone, side), method, results, save)

    def estimate_csg(
        self,
        sample_id: str,
        method: str,
        bone: str,
        side: str,
        slots: Iterable[int],
        raw_measurements: Sequence[float],
        save: bool = False,
    ) -> Dict[str, Any]:
        """
        Estimate sex from raw CSG measurements of one bone.

        Args:
            sample_id: Sample identifier
            method: "LDA" or "RBF"
            bone: Femur, Tibia or Humerus
            side: Left or Right
            slots: Classifier slots to evaluate
            raw_measurements: 31 raw CSG values
            save: Append the results to the results log

        Returns:
            A dictionary with one entry per evaluated slot.
        """
        slots = sorted(set(slots))
        logger.info(f"Estimating sex for sample '{sample_id}' ({bone} {side}, {method}, slots={slots})")
        record = SampleRecord(sample_id=sample_id, features=derive_features(raw_measurements))
        return self.estimate_record(record, method, bone, side, slots, save)

    def estimate_vertebra(
        self,
        sample_id: str,
        method: str,
        population: str,
        vertebra: str,
        measurements: Sequence[float],
        save: bool = False,
    ) -> Dict[str, Any]:
        """Estimate sex from raw vertebral measurements."""
        logger.info(f"Estimating sex for sample '{sample_id}' ({population} {vertebra}, {method})")
        method = parse_method(method).value
        result = self.estimator.evaluate_vertebra(method, population, vertebra, measurements)
        return self._response(sample_id, (population, vertebra), method, [result], save)
