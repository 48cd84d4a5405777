"""
Shared fixtures: small hand-checked classifier containers and feature vectors.
"""
from typing import Any, Dict, List

import numpy as np
import pytest

from sexest.core.container import ClassifierContainer
from sexest.core.extraction import DERIVED_WIDTH


@pytest.fixture
def csg_container_data() -> Dict[str, Any]:
    """
    CSG container with three LDA slots for "Femur Left" and one RBF slot.

    Classifier 1 reproduces the reference LDA scenario (score 7, male 0.982)
    for a sample whose first feature is 8.
    """
    return {
        "datatype": "CSG-Toolkit",
        "description": {
            "LDA": {
                "Femur Left": [1, 2, 3],
                "Tibia Right": [1, None, None],
            },
            "RBF": [
                ["Femur Left", 4, 0, 0],
            ],
        },
        "normalization": [
            {"variable_indices": [1], "mean": [5.0], "std": [1.0]},
            {"variable_indices": [2, 1], "mean": [0.0, 0.0], "std": [2.0, 1.0]},
            {"variable_indices": [3], "mean": [0.0], "std": [1.0]},
            {"variable_indices": [1, 2], "mean": [1.0, 1.0], "std": [1.0, 1.0]},
        ],
        "models": [
            {"LDA": {"weights": [1.0, 2.0]}},
            {"LDA": {"weights": [0.0, 1.0, -1.0]}},
            {"LDA": {"weights": [0.0, 1.0]}},
            {"RBF": {"support_vectors": [[0.0, 0.0]], "dual_coef": [1.0], "gamma": 0.5, "rho": 0.0}},
        ],
        "posteriors": [
            {"LDA": {"sectioning_point": 5.0, "centroid_female": 2.0, "centroid_male": 9.0}},
            {"LDA": {"sectioning_point": 0.0, "centroid_female": 1.0, "centroid_male": -1.0}},
            {"LDA": {"sectioning_point": 0.0, "centroid_female": -1.0, "centroid_male": 1.0}},
            {"RBF": {
                "discrete_pdf": [[0.0, 0.5, 0.80], [0.5, 1.0, 0.90], [1.0, 2.0, 0.95]],
                "female_group": 1.0,
                "male_group": -1.0,
            }},
        ],
    }


@pytest.fixture
def csg_container(csg_container_data) -> ClassifierContainer:
    return ClassifierContainer.from_mapping(csg_container_data)


@pytest.fixture
def vertebral_container_data() -> Dict[str, Any]:
    """Vertebral container: raw measurements, no normalization."""
    return {
        "datatype": "vertebral",
        "description": {
            "LDA": {"Greek L1": [1]},
            "RBF": {"Greek L1": [2]},
        },
        "models": [
            {"LDA": {"weights": [-10.0, 0.2, 0.1]}},
            {"RBF": {"support_vectors": [[40.0, 30.0]], "dual_coef": [-1.0], "gamma": 0.01, "rho": 0.5}},
        ],
        "posteriors": [
            {"LDA": {"sectioning_point": 0.0, "centroid_female": -1.2, "centroid_male": 1.2}},
            {"RBF": {"discrete_pdf": [[0.0, 10.0, 0.7]], "female_group": -1.0, "male_group": 1.0}},
        ],
    }


@pytest.fixture
def vertebral_container(vertebral_container_data) -> ClassifierContainer:
    return ClassifierContainer.from_mapping(vertebral_container_data)


@pytest.fixture
def femur_features() -> np.ndarray:
    """Derived-width feature vector: max distance 8, area_20 2, perimeter_20 0."""
    features = np.zeros(DERIVED_WIDTH)
    features[0] = 8.0
    features[1] = 2.0
    features[2] = 0.0
    return features


@pytest.fixture
def rbf_features() -> np.ndarray:
    """Normalizes to [1, 1] under classifier 4 (distance² 2 to the support vector)."""
    features = np.zeros(DERIVED_WIDTH)
    features[0] = 2.0
    features[1] = 2.0
    return features


@pytest.fixture
def raw_csg_row() -> List[float]:
    """31 raw CSG values: max distance, then 5 levels of area, perimeter, Ix, Iy, Imin, Imax."""
    return [
        450.0,
        400.0, 80.0, 12000.0, 10000.0, 9000.0, 13500.0,
        300.0, 60.0, 8000.0, 10000.0, 6000.0, 12000.0,
        250.0, 50.0, 5000.0, 4000.0, 3000.0, 7500.0,
        200.0, 40.0, 6000.0, 8000.0, 4000.0, 10000.0,
        500.0, 100.0, 9000.0, 6000.0, 5000.0, 11000.0,
    ]


def toolkit_row(sample_id: str, raw: List[float]) -> List[Any]:
    """Expand a raw row to the 47-column CSG-Toolkit layout."""
    row: List[Any] = [sample_id, raw[0], "Femur", "Left", 0.0, 0.0, 0.0]
    for level in range(5):
        area, perimeter, ix, iy, imin, imax = raw[1 + 6 * level: 7 + 6 * level]
        row += [area, perimeter, ix, iy, -1.0, imin, imax, -1.0]
    return row


@pytest.fixture
def make_toolkit_row():
    return toolkit_row
