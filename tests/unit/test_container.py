"""
Unit Tests for the Classifier Container

Tests loading and validation of classifier bundles.
"""
import copy

import pytest
import numpy as np

from sexest.core.container import (
    ClassifierContainer,
    DataType,
    DescriptionTable,
    LDAModel,
    LDAPosterior,
    Method,
    NormalizationCoefficients,
    RBFModel,
    RBFPosterior,
)
from sexest.core.errors import ConfigError


class TestEnums:
    """Tests for method and datatype parsing."""

    def test_method_aliases(self):
        assert Method.from_string("lda") is Method.LDA
        assert Method.from_string(" SVM ") is Method.RBF
        assert Method.from_string("rbf-svm") is Method.RBF

    def test_unknown_method(self):
        with pytest.raises(ValueError):
            Method.from_string("QDA")

    def test_datatype_case_insensitive(self):
        assert DataType.from_string("csg-toolkit") is DataType.CSG_TOOLKIT
        assert DataType.from_string("Vertebral") is DataType.VERTEBRAL


class TestContainerLoading:
    """Tests for ClassifierContainer.from_mapping."""

    def test_loads_csg_container(self, csg_container):
        """Every section is parsed and tagged by its method key."""
        assert csg_container.datatype is DataType.CSG_TOOLKIT
        assert csg_container.classifier_count == 4
        assert set(csg_container.methods) == {Method.LDA, Method.RBF}
        assert isinstance(csg_container.models[0][Method.LDA], LDAModel)
        assert isinstance(csg_container.models[3][Method.RBF], RBFModel)
        assert isinstance(csg_container.posteriors[0][Method.LDA], LDAPosterior)
        assert isinstance(csg_container.posteriors[3][Method.RBF], RBFPosterior)

    def test_list_rows_and_unset_cells(self, csg_container):
        """Row lists are accepted; 0 and None both mark unset slots."""
        rbf = csg_container.description[Method.RBF]
        assert rbf.rows["Femur Left"] == (4, None, None)
        lda = csg_container.description[Method.LDA]
        assert lda.rows["Tibia Right"] == (1, None, None)
        assert lda.elements == ("Femur Left", "Tibia Right")

    def test_vertebral_without_normalization(self, vertebral_container):
        """Vertebral containers need no normalization coefficients."""
        assert vertebral_container.datatype is DataType.VERTEBRAL
        assert vertebral_container.normalization == ()

    def test_missing_section(self, csg_container_data):
        del csg_container_data["models"]
        with pytest.raises(ConfigError, match="models"):
            ClassifierContainer.from_mapping(csg_container_data)

    def test_unknown_datatype(self, csg_container_data):
        csg_container_data["datatype"] = "skull"
        with pytest.raises(ConfigError):
            ClassifierContainer.from_mapping(csg_container_data)

    def test_unknown_method_key(self, csg_container_data):
        csg_container_data["description"]["QDA"] = {"Femur Left": [1]}
        with pytest.raises(ConfigError):
            ClassifierContainer.from_mapping(csg_container_data)


class TestContainerValidation:
    """Tests for cross-reference invariants checked at load time."""

    def test_index_out_of_range(self, csg_container_data):
        """Description cells must point at existing classifiers."""
        csg_container_data["description"]["LDA"]["Femur Left"] = [1, 2, 9]
        with pytest.raises(ConfigError, match="classifier 9"):
            ClassifierContainer.from_mapping(csg_container_data)

    def test_method_without_model(self, csg_container_data):
        """An RBF row may not point at an LDA-only classifier."""
        csg_container_data["description"]["RBF"] = [["Femur Left", 1, 0, 0]]
        with pytest.raises(ConfigError, match="no RBF model"):
            ClassifierContainer.from_mapping(csg_container_data)

    def test_parameters_parsed_by_key_not_shape(self, csg_container_data):
        """RBF-shaped data under an LDA key fails instead of being reinterpreted."""
        csg_container_data["models"][3] = {"LDA": csg_container_data["models"][3]["RBF"]}
        with pytest.raises(ConfigError):
            ClassifierContainer.from_mapping(csg_container_data)

    def test_normalization_width_mismatch(self, csg_container_data):
        """Normalized width must equal the model input width."""
        csg_container_data["models"][0] = {"LDA": {"weights": [1.0, 2.0, 3.0]}}
        with pytest.raises(ConfigError, match="normalizes 1 variables"):
            ClassifierContainer.from_mapping(csg_container_data)

    def test_csg_requires_normalization(self, csg_container_data):
        del csg_container_data["normalization"]
        with pytest.raises(ConfigError, match="normalization"):
            ClassifierContainer.from_mapping(csg_container_data)

    def test_posterior_count_mismatch(self, csg_container_data):
        csg_container_data["posteriors"].pop()
        with pytest.raises(ConfigError, match="posterior"):
            ClassifierContainer.from_mapping(csg_container_data)

    def test_duplicate_element_rows(self, csg_container_data):
        """The same element listed twice is ambiguous."""
        csg_container_data["description"]["RBF"] = [
            ["Femur Left", 4, 0, 0],
            ["Femur Left", 4, 0, 0],
        ]
        with pytest.raises(ConfigError, match="twice"):
            ClassifierContainer.from_mapping(csg_container_data)

    def test_non_integer_cell(self):
        with pytest.raises(ConfigError):
            DescriptionTable.from_rows(Method.LDA, {"Femur Left": [1.5]})

    def test_source_mapping_untouched(self, csg_container_data):
        """Loading does not mutate the parsed input."""
        before = copy.deepcopy(csg_container_data)
        ClassifierContainer.from_mapping(csg_container_data)
        assert csg_container_data == before


class TestParameterValidation:
    """Tests for per-classifier parameter checks."""

    def test_normalization_lengths(self):
        with pytest.raises(ConfigError, match="lengths differ"):
            NormalizationCoefficients(variable_indices=(1, 2), mean=[0.0], std=[1.0, 1.0])

    def test_normalization_indices_one_based(self):
        with pytest.raises(ConfigError, match="1-based"):
            NormalizationCoefficients(variable_indices=(0, 1), mean=[0.0, 0.0], std=[1.0, 1.0])

    def test_lda_needs_intercept_and_weight(self):
        with pytest.raises(ConfigError):
            LDAModel(weights=[1.0])

    def test_rbf_support_vector_count(self):
        with pytest.raises(ConfigError, match="dual coefficients"):
            RBFModel(support_vectors=[[0.0, 0.0], [1.0, 1.0]], dual_coef=[1.0], gamma=0.5, rho=0.0)

    def test_rbf_gamma_positive(self):
        with pytest.raises(ConfigError, match="gamma"):
            RBFModel(support_vectors=[[0.0]], dual_coef=[1.0], gamma=0.0, rho=0.0)

    @pytest.mark.parametrize("pdf", [
        [[0.0, 1.0]],                                # wrong width
        [[1.0, 0.5, 0.9]],                           # low >= high
        [[-1.0, 0.5, 0.9]],                          # negative axis
        [[0.0, 1.0, 0.9], [0.5, 2.0, 0.8]],          # overlapping
        [[0.0, 1.0, 1.2]],                           # probability > 1
        [[0.0, float("nan"), 0.9]],
    ])
    def test_invalid_discrete_pdf(self, pdf):
        with pytest.raises(ConfigError):
            RBFPosterior(discrete_pdf=pdf, female_group=1.0, male_group=-1.0)

    def test_variant_tags(self):
        """Variants carry their method as a class-level tag."""
        assert LDAModel.method is Method.LDA
        assert RBFModel.method is Method.RBF
        assert LDAPosterior.method is Method.LDA
        assert RBFPosterior.method is Method.RBF


class TestImmutability:
    """Containers are shared read-only across requests."""

    def test_arrays_read_only(self, csg_container):
        weights = csg_container.models[0][Method.LDA].weights
        with pytest.raises(ValueError):
            weights[0] = 100.0

    def test_tables_read_only(self, csg_container):
        with pytest.raises(TypeError):
            csg_container.description[Method.LDA].rows["Femur Left"] = (1,)

    def test_frozen_fields(self, csg_container):
        with pytest.raises(AttributeError):
            csg_container.datatype = DataType.VERTEBRAL

    def test_parameters_are_floats(self, csg_container):
        coeffs = csg_container.normalization[1]
        assert coeffs.variable_indices == (2, 1)
        assert coeffs.std.dtype == np.float64


class TestMalformedSections:
    """Tests for section and value types that cannot be parsed."""

    @pytest.mark.parametrize("section", ["models", "posteriors", "normalization"])
    @pytest.mark.parametrize("value", [None, 5, "LDA", {"LDA": {}}])
    def test_section_not_a_list(self, csg_container_data, section, value):
        """Per-classifier sections must be lists."""
        csg_container_data[section] = value
        with pytest.raises(ConfigError):
            ClassifierContainer.from_mapping(csg_container_data)

    @pytest.mark.parametrize("field, value", [
        ("weights", [1.0, float("nan")]),
        ("weights", [float("inf"), 2.0]),
    ])
    def test_non_finite_lda_weights(self, csg_container_data, field, value):
        csg_container_data["models"][0] = {"LDA": {field: value}}
        with pytest.raises(ConfigError, match="NaN or infinite"):
            ClassifierContainer.from_mapping(csg_container_data)

    def test_non_finite_std(self, csg_container_data):
        csg_container_data["normalization"][0]["std"] = [float("nan")]
        with pytest.raises(ConfigError, match="std"):
            ClassifierContainer.from_mapping(csg_container_data)

    def test_non_finite_gamma(self):
        with pytest.raises(ConfigError, match="gamma"):
            RBFModel(support_vectors=[[0.0]], dual_coef=[1.0], gamma=float("nan"), rho=0.0)

    def test_non_finite_support_vector(self):
        with pytest.raises(ConfigError, match="support_vectors"):
            RBFModel(support_vectors=[[float("inf")]], dual_coef=[1.0], gamma=0.5, rho=0.0)

    def test_non_finite_sectioning_point(self):
        with pytest.raises(ConfigError, match="sectioning_point"):
            LDAPosterior(sectioning_point=float("nan"), centroid_female=-1.0, centroid_male=1.0)

    def test_open_ended_last_bin(self):
        """Only the upper edge of a bin may be infinite."""
        posterior = RBFPosterior(
            discrete_pdf=[[0.0, 1.0, 0.7], [1.0, float("inf"), 0.99]],
            female_group=1.0,
            male_group=-1.0,
        )
        assert np.isinf(posterior.discrete_pdf[-1, 1])

    def test_infinite_description_cell(self):
        with pytest.raises(ConfigError):
            DescriptionTable.from_rows(Method.LDA, {"Femur Left": [float("inf")]})

    def test_infinite_variable_index(self):
        with pytest.raises(ConfigError):
            NormalizationCoefficients(variable_indices=(1, float("inf")), mean=[0.0, 0.0], std=[1.0, 1.0])

    def test_scalar_variable_indices(self):
        with pytest.raises(ConfigError):
            NormalizationCoefficients.from_mapping({"variable_indices": 3, "mean": [0.0], "std": [1.0]})
