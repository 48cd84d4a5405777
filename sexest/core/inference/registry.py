"""
Classifier Registry

Resolves (method, skeletal element, slot) to a classifier index through the
container's description tables, and serves the parameters stored under that
index.
"""
from numbers import Integral
from typing import Optional, Union

from sexest.core.container import (
    ClassifierContainer,
    Method,
    ModelParameters,
    NormalizationCoefficients,
    PosteriorParameters,
)
from sexest.core.errors import ClassifierLookupError, ConfigError
from sexest.utils import get_logger

logger = get_logger(__name__)

SLOTS = (1, 2, 3)


def element_key(part: str, qualifier: str) -> str:
    """Build a description-table key, e.g. ("Femur", "Left") -> "Femur Left"."""
    return f"{str(part).strip()} {str(qualifier).strip()}"


def parse_method(method: Union[Method, str]) -> Method:
    if isinstance(method, Method):
        return method
    try:
        return Method.from_string(method)
    except ValueError as e:
        raise ClassifierLookupError(str(e)) from e


class ClassifierRegistry:
    """Read-only lookups over one classifier container."""

    def __init__(self, container: ClassifierContainer):
        self.container = container

    def resolve(self, method: Union[Method, str], skeletal_element: str, slot: int) -> int:
        """
        Look up the classifier index for an element and slot.

        Args:
            method: Classification method whose description table is used
            skeletal_element: Table key, e.g. "Femur Left"
            slot: 1-based classifier slot (column of the table)

        Returns:
            1-based classifier index
        """
        method = parse_method(method)
        table = self.container.description.get(method)
        if table is None:
            raise ClassifierLookupError(f"Container has no {method.value} classifiers")
        indices = table.rows.get(skeletal_element)
        if indices is None:
            raise ClassifierLookupError(
                f"No {method.value} classifier for '{skeletal_element}'. "
                f"Available: {list(table.elements)}"
            )
        if isinstance(slot, bool) or not isinstance(slot, Integral) or not 1 <= slot <= len(indices):
            raise ClassifierLookupError(
                f"'{skeletal_element}' has no {method.value} classifier slot {slot!r} "
                f"(slots 1-{len(indices)})"
            )
        index = indices[slot - 1]
        if index is None:
            raise ClassifierLookupError(f"{method.value} classifier slot {slot} for '{skeletal_element}' is unset")
        logger.debug(f"Resolved {method.value} '{skeletal_element}' slot {slot} -> classifier {index}")
        return index

    def _check_index(self, index: int) -> None:
        if not 1 <= index <= self.container.classifier_count:
            raise ConfigError(
                f"Classifier {index} does not exist (container holds {self.container.classifier_count})"
            )

    def normalization(self, index: int) -> NormalizationCoefficients:
        self._check_index(index)
        entries = self.container.normalization
        coeffs: Optional[NormalizationCoefficients] = entries[index - 1] if index <= len(entries) else None
        if coeffs is None:
            raise ConfigError(f"Classifier {index} has no normalization coefficients")
        return coeffs

    def model(self, index: int, method: Union[Method, str]) -> ModelParameters:
        method = parse_method(method)
        self._check_index(index)
        model = self.container.models[index - 1].get(method)
        if model is None:
            raise ConfigError(f"Classifier {index} has no {method.value} model")
        return model

    def posterior(self, index: int, method: Union[Method, str]) -> PosteriorParameters:
        method = parse_method(method)
        self._check_index(index)
        posterior = self.container.posteriors[index - 1].get(method)
        if posterior is None:
            raise ConfigError(f"Classifier {index} has no {method.value} posterior parameters")
        return posterior
