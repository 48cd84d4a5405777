"""
Classifier Container

Immutable, validated in-memory form of a pre-trained sex classifier bundle:
description tables, normalization coefficients, model parameters and
posterior parameters. Built once per session from an already-parsed nested
mapping and shared read-only by every estimation.

The model variant (LDA or RBF) of each parameter set is fixed here, from the
method key it is stored under, and never re-derived from its shape.
"""
from __future__ import annotations
from dataclasses import dataclass, field
from enum import Enum
import math
from types import MappingProxyType
from typing import Any, ClassVar, Dict, Mapping, Optional, Sequence, Tuple, Union

import numpy as np

from sexest.core.errors import ConfigError
from sexest.utils import get_logger

logger = get_logger(__name__)


class Method(str, Enum):
    """Supported classification methods."""
    LDA = "LDA"
    RBF = "RBF"

    @classmethod
    def from_string(cls, name: str) -> "Method":
        """Parse method name string to enum with common aliases."""
        name_upper = str(name).strip().upper()
        aliases = {
            "LDA": cls.LDA,
            "LDFA": cls.LDA,
            "LINEAR": cls.LDA,
            "RBF": cls.RBF,
            "SVM": cls.RBF,
            "RBF-SVM": cls.RBF,
        }
        if name_upper in aliases:
            return aliases[name_upper]
        raise ValueError(f"Unknown classification method: {name}")


class DataType(str, Enum):
    """Kind of measurements a container's classifiers were trained on."""
    CSG_TOOLKIT = "CSG-Toolkit"
    VERTEBRAL = "vertebral"

    @classmethod
    def from_string(cls, name: str) -> "DataType":
        for member in cls:
            if member.value.lower() == str(name).strip().lower():
                return member
        raise ValueError(f"Unsupported container datatype: {name}")


class Sex(str, Enum):
    """Predicted sex labels."""
    FEMALE = "female"
    MALE = "male"


def _frozen_array(values: Any, name: str, ndim: int = 1, finite: bool = True) -> np.ndarray:
    """Convert values to a read-only float array of the given rank."""
    try:
        arr = np.array(values, dtype=float)
    except (TypeError, ValueError) as e:
        raise ConfigError(f"{name} must be numeric: {e}") from e
    if arr.ndim != ndim:
        raise ConfigError(f"{name} must be {ndim}-dimensional, got shape {arr.shape}")
    if finite and not np.all(np.isfinite(arr)):
        raise ConfigError(f"{name} contains NaN or infinite values")
    arr.flags.writeable = False
    return arr


def _scalar(value: Any, name: str) -> float:
    try:
        number = float(value)
    except (TypeError, ValueError) as e:
        raise ConfigError(f"{name} must be a number, got {value!r}") from e
    if not math.isfinite(number):
        raise ConfigError(f"{name} must be finite, got {value!r}")
    return number


def _require(data: Mapping[str, Any], key: str, where: str) -> Any:
    if not isinstance(data, Mapping) or key not in data:
        raise ConfigError(f"{where} is missing '{key}'")
    return data[key]


@dataclass(frozen=True)
class NormalizationCoefficients:
    """Variable selection and z-score coefficients for one classifier."""
    variable_indices: Tuple[int, ...]  # 1-based positions into the feature vector
    mean: np.ndarray
    std: np.ndarray

    def __post_init__(self):
        if isinstance(self.variable_indices, (str, bytes)):
            raise ConfigError("variable_indices must be a list of integers")
        try:
            indices = tuple(int(i) for i in self.variable_indices)
        except (TypeError, ValueError, OverflowError) as e:
            raise ConfigError(f"variable_indices must be integers: {e}") from e
        if any(float(i) != float(j) for i, j in zip(indices, self.variable_indices)):
            raise ConfigError("variable_indices must be whole numbers")
        if not indices:
            raise ConfigError("variable_indices must not be empty")
        if min(indices) < 1:
            raise ConfigError("variable_indices must be positive (1-based)")
        if len(set(indices)) != len(indices):
            raise ConfigError("variable_indices must be distinct")
        mean = _frozen_array(self.mean, "mean")
        std = _frozen_array(self.std, "std")
        if not (len(mean) == len(std) == len(indices)):
            raise ConfigError(
                f"normalization lengths differ: {len(indices)} indices, "
                f"{len(mean)} means, {len(std)} stds"
            )
        object.__setattr__(self, "variable_indices", indices)
        object.__setattr__(self, "mean", mean)
        object.__setattr__(self, "std", std)

    def __len__(self) -> int:
        return len(self.variable_indices)

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "NormalizationCoefficients":
        where = "normalization entry"
        return cls(
            variable_indices=_require(data, "variable_indices", where),
            mean=_require(data, "mean", where),
            std=_require(data, "std", where),
        )


@dataclass(frozen=True)
class LDAModel:
    """Linear discriminant function: intercept followed by one weight per feature."""
    weights: np.ndarray
    method: ClassVar[Method] = Method.LDA

    def __post_init__(self):
        weights = _frozen_array(self.weights, "LDA weights")
        if len(weights) < 2:
            raise ConfigError("LDA weights need an intercept and at least one coefficient")
        object.__setattr__(self, "weights", weights)

    @property
    def input_width(self) -> int:
        return len(self.weights) - 1

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "LDAModel":
        return cls(weights=_require(data, "weights", "LDA model"))


@dataclass(frozen=True)
class RBFModel:
    """RBF-kernel SVM decision function."""
    support_vectors: np.ndarray
    dual_coef: np.ndarray
    gamma: float
    rho: float
    method: ClassVar[Method] = Method.RBF

    def __post_init__(self):
        support_vectors = _frozen_array(self.support_vectors, "support_vectors", ndim=2)
        dual_coef = _frozen_array(self.dual_coef, "dual_coef")
        if support_vectors.shape[0] == 0:
            raise ConfigError("RBF model has no support vectors")
        if support_vectors.shape[0] != len(dual_coef):
            raise ConfigError(
                f"RBF model has {support_vectors.shape[0]} support vectors "
                f"but {len(dual_coef)} dual coefficients"
            )
        gamma = _scalar(self.gamma, "gamma")
        if not gamma > 0:
            raise ConfigError(f"gamma must be positive, got {gamma}")
        object.__setattr__(self, "support_vectors", support_vectors)
        object.__setattr__(self, "dual_coef", dual_coef)
        object.__setattr__(self, "gamma", gamma)
        object.__setattr__(self, "rho", _scalar(self.rho, "rho"))

    @property
    def input_width(self) -> int:
        return int(self.support_vectors.shape[1])

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "RBFModel":
        where = "RBF model"
        return cls(
            support_vectors=_require(data, "support_vectors", where),
            dual_coef=_require(data, "dual_coef", where),
            gamma=_require(data, "gamma", where),
            rho=_require(data, "rho", where),
        )


@dataclass(frozen=True)
class LDAPosterior:
    """Sectioning point and group centroids of a discriminant function."""
    sectioning_point: float
    centroid_female: float
    centroid_male: float
    method: ClassVar[Method] = Method.LDA

    def __post_init__(self):
        for name in ("sectioning_point", "centroid_female", "centroid_male"):
            object.__setattr__(self, name, _scalar(getattr(self, name), name))

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "LDAPosterior":
        where = "LDA posterior"
        return cls(
            sectioning_point=_require(data, "sectioning_point", where),
            centroid_female=_require(data, "centroid_female", where),
            centroid_male=_require(data, "centroid_male", where),
        )


@dataclass(frozen=True)
class RBFPosterior:
    """
    Empirical posterior lookup for an RBF classifier.

    `discrete_pdf` rows are [low, high, probability) bins over |score|.
    The relative order of the group values tells which sex takes the
    negative scores.
    """
    discrete_pdf: np.ndarray
    female_group: float
    male_group: float
    method: ClassVar[Method] = Method.RBF

    def __post_init__(self):
        # the last bin may be open-ended (high = inf)
        pdf = _frozen_array(self.discrete_pdf, "discrete_pdf", ndim=2, finite=False)
        if pdf.shape[0] == 0 or pdf.shape[1] != 3:
            raise ConfigError(f"discrete_pdf must be an (n, 3) table, got shape {pdf.shape}")
        low, high, proba = pdf[:, 0], pdf[:, 1], pdf[:, 2]
        if np.any(np.isnan(pdf)):
            raise ConfigError("discrete_pdf contains NaN")
        if np.any(low < 0):
            raise ConfigError("discrete_pdf bins must lie on the nonnegative axis")
        if np.any(low >= high):
            raise ConfigError("discrete_pdf bins must satisfy low < high")
        if np.any(low[1:] < high[:-1]):
            raise ConfigError("discrete_pdf bins must be sorted and non-overlapping")
        if np.any((proba < 0) | (proba > 1)):
            raise ConfigError("discrete_pdf probabilities must lie in [0, 1]")
        object.__setattr__(self, "discrete_pdf", pdf)
        object.__setattr__(self, "female_group", _scalar(self.female_group, "female_group"))
        object.__setattr__(self, "male_group", _scalar(self.male_group, "male_group"))

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "RBFPosterior":
        where = "RBF posterior"
        return cls(
            discrete_pdf=_require(data, "discrete_pdf", where),
            female_group=_require(data, "female_group", where),
            male_group=_require(data, "male_group", where),
        )


ModelParameters = Union[LDAModel, RBFModel]
PosteriorParameters = Union[LDAPosterior, RBFPosterior]

_MODEL_TYPES = {Method.LDA: LDAModel, Method.RBF: RBFModel}
_POSTERIOR_TYPES = {Method.LDA: LDAPosterior, Method.RBF: RBFPosterior}


def _slot_cell(value: Any, method: Method, element: str) -> Optional[int]:
    """Parse one description-table cell; None or 0 mark an unset slot."""
    if value is None:
        return None
    try:
        index = int(value)
    except (TypeError, ValueError, OverflowError) as e:
        raise ConfigError(f"{method.value} table row '{element}' has a non-integer cell {value!r}") from e
    if index != float(value):
        raise ConfigError(f"{method.value} table row '{element}' has a non-integer cell {value!r}")
    return index if index > 0 else None


@dataclass(frozen=True)
class DescriptionTable:
    """Skeletal-element key → classifier index per slot, for one method."""
    method: Method
    rows: Mapping[str, Tuple[Optional[int], ...]]

    def __post_init__(self):
        object.__setattr__(self, "rows", MappingProxyType(dict(self.rows)))

    @property
    def elements(self) -> Tuple[str, ...]:
        return tuple(self.rows)

    @classmethod
    def from_rows(cls, method: Method, table: Any) -> "DescriptionTable":
        """
        Build a table from either a mapping {element: [idx, ...]} or a
        sequence of rows [element, idx, ...].
        """
        if isinstance(table, Mapping):
            items = list(table.items())
        elif isinstance(table, Sequence) and not isinstance(table, str):
            items = []
            for row in table:
                if isinstance(row, str) or not isinstance(row, Sequence) or len(row) < 1:
                    raise ConfigError(f"{method.value} description row must start with an element key: {row!r}")
                items.append((row[0], row[1:]))
        else:
            raise ConfigError(f"{method.value} description table has unsupported type {type(table).__name__}")

        rows: Dict[str, Tuple[Optional[int], ...]] = {}
        for element, cells in items:
            element = str(element)
            if element in rows:
                raise ConfigError(f"{method.value} description table lists '{element}' twice")
            if isinstance(cells, (str, bytes)) or not isinstance(cells, Sequence):
                cells = [cells]
            rows[element] = tuple(_slot_cell(c, method, element) for c in cells)
        return cls(method=method, rows=rows)


@dataclass(frozen=True)
class ClassifierContainer:
    """
    Complete, read-only classifier bundle.

    Classifier indices are 1-based positions into `normalization`, `models`
    and `posteriors`. One index may hold both an LDA and an RBF variant; the
    description table of a method decides which indices it uses.
    """
    datatype: DataType
    description: Mapping[Method, DescriptionTable]
    normalization: Tuple[Optional[NormalizationCoefficients], ...] = ()
    models: Tuple[Mapping[Method, ModelParameters], ...] = ()
    posteriors: Tuple[Mapping[Method, PosteriorParameters], ...] = ()
    name: str = ""
    metadata: Mapping[str, Any] = field(default_factory=dict)

    def __post_init__(self):
        object.__setattr__(self, "description", MappingProxyType(dict(self.description)))
        object.__setattr__(self, "normalization", tuple(self.normalization))
        object.__setattr__(self, "models", tuple(MappingProxyType(dict(m)) for m in self.models))
        object.__setattr__(self, "posteriors", tuple(MappingProxyType(dict(p)) for p in self.posteriors))
        object.__setattr__(self, "metadata", MappingProxyType(dict(self.metadata)))

        if not self.description:
            raise ConfigError("Container has no description tables")
        if not self.models:
            raise ConfigError("Container has no classifiers")
        if len(self.posteriors) != len(self.models):
            raise ConfigError(
                f"Container holds {len(self.models)} classifiers but "
                f"{len(self.posteriors)} posterior entries"
            )
        if self.datatype is DataType.CSG_TOOLKIT and not self.normalization:
            raise ConfigError("CSG-Toolkit container has no normalization coefficients")

        for method, table in self.description.items():
            if table.method is not method:
                raise ConfigError(f"Description table stored under {method.value} belongs to {table.method.value}")
            for element, indices in table.rows.items():
                for index in indices:
                    if index is not None:
                        self._validate_reference(method, element, index)

    def _validate_reference(self, method: Method, element: str, index: int) -> None:
        where = f"{method.value} table row '{element}'"
        if index > len(self.models):
            raise ConfigError(f"{where} references classifier {index}, container holds {len(self.models)}")
        model = self.models[index - 1].get(method)
        if model is None:
            raise ConfigError(f"{where}: classifier {index} has no {method.value} model")
        if model.method is not method:
            raise ConfigError(f"{where}: classifier {index} stores a {model.method.value} model under {method.value}")
        posterior = self.posteriors[index - 1].get(method)
        if posterior is None:
            raise ConfigError(f"{where}: classifier {index} has no {method.value} posterior")
        if posterior.method is not model.method:
            raise ConfigError(
                f"{where}: classifier {index} pairs a {model.method.value} model "
                f"with a {posterior.method.value} posterior"
            )
        if self.datatype is DataType.CSG_TOOLKIT:
            coeffs = self.normalization[index - 1] if index <= len(self.normalization) else None
            if coeffs is None:
                raise ConfigError(f"{where}: classifier {index} has no normalization coefficients")
            if len(coeffs) != model.input_width:
                raise ConfigError(
                    f"{where}: classifier {index} normalizes {len(coeffs)} variables "
                    f"but its {method.value} model expects {model.input_width}"
                )

    @property
    def methods(self) -> Tuple[Method, ...]:
        return tuple(self.description)

    @property
    def classifier_count(self) -> int:
        return len(self.models)

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "ClassifierContainer":
        """
        Build a container from a parsed nested mapping.

        Expected layout:
            {
                "datatype": "CSG-Toolkit" | "vertebral",
                "description": {"LDA": {"Femur Left": [1, 2, 3], ...}, "RBF": ...},
                "normalization": [{"variable_indices", "mean", "std"} | None, ...],
                "models": [{"LDA": {"weights"}, "RBF": {"support_vectors", "dual_coef", "gamma", "rho"}}, ...],
                "posteriors": [{"LDA": {"sectioning_point", "centroid_female", "centroid_male"},
                                "RBF": {"discrete_pdf", "female_group", "male_group"}}, ...],
            }
        """
        where = "classifier container"
        try:
            datatype = DataType.from_string(_require(data, "datatype", where))
        except ValueError as e:
            raise ConfigError(str(e)) from e

        raw_description = _require(data, "description", where)
        if not isinstance(raw_description, Mapping):
            raise ConfigError("description must map method names to tables")
        description = {}
        for method_name, table in raw_description.items():
            method = _parse_method(method_name)
            description[method] = DescriptionTable.from_rows(method, table)

        normalization = tuple(
            None if entry is None else NormalizationCoefficients.from_mapping(entry)
            for entry in _section(data.get("normalization") or [], "normalization")
        )
        models = tuple(
            _parse_variants(entry, _MODEL_TYPES, f"models[{i}]")
            for i, entry in enumerate(_section(_require(data, "models", where), "models"))
        )
        posteriors = tuple(
            _parse_variants(entry, _POSTERIOR_TYPES, f"posteriors[{i}]")
            for i, entry in enumerate(_section(_require(data, "posteriors", where), "posteriors"))
        )

        container = cls(
            datatype=datatype,
            description=description,
            normalization=normalization,
            models=models,
            posteriors=posteriors,
            name=str(data.get("name", "")),
            metadata=data.get("metadata") or {},
        )
        logger.info(
            f"Classifier container loaded: {datatype.value}, {container.classifier_count} classifiers, "
            f"methods={[m.value for m in container.methods]}"
        )
        return container


def _parse_method(name: Any) -> Method:
    try:
        return Method.from_string(name)
    except ValueError as e:
        raise ConfigError(str(e)) from e


def _section(value: Any, name: str) -> Sequence[Any]:
    """Per-classifier sections are lists with one entry per classifier index."""
    if isinstance(value, (str, bytes)) or not isinstance(value, Sequence):
        raise ConfigError(f"{name} must be a list with one entry per classifier, got {type(value).__name__}")
    return value


def _parse_variants(entry: Any, types: Mapping[Method, Any], where: str) -> Dict[Method, Any]:
    """Parse {method: params} into tagged parameter objects."""
    if not isinstance(entry, Mapping):
        raise ConfigError(f"{where} must map method names to parameters")
    return {
        _parse_method(method_name): types[_parse_method(method_name)].from_mapping(params)
        for method_name, params in entry.items()
    }
