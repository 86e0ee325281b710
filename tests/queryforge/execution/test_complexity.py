"""Tests for complexity configuration, the ambient merge and the analyzer."""

from unittest.mock import MagicMock

import pytest
from pydantic import ValidationError

from queryforge.errors import ComplexityError, InvalidOperationError
from queryforge.execution import (
    ComplexityConfiguration,
    DefaultComplexityAnalyzer,
    DefaultDocumentBuilder,
    ExecutionOptions,
    merge_complexity_configuration,
)


def resolver_for(ambient: ComplexityConfiguration | None) -> MagicMock:
    resolver = MagicMock()
    resolver.get_service.return_value = ambient
    return resolver


def ambient_limits() -> ComplexityConfiguration:
    return ComplexityConfiguration(
        field_impact=50, max_complexity=60, max_depth=70, max_recursion_count=80
    )


# =============================================================================
# Merge
# =============================================================================


class TestMergeComplexityConfiguration:
    """Test suite for merge_complexity_configuration."""

    def test_requires_request_services(self):
        """Verify merging without a resolver is a contract violation."""
        # Arrange
        options = ExecutionOptions(complexity_configuration=ComplexityConfiguration())

        # Act & Assert
        with pytest.raises(InvalidOperationError, match="request_services"):
            merge_complexity_configuration(options)

    def test_locally_set_fields_are_kept(self):
        """Verify a fully set local configuration is left unchanged."""
        # Arrange
        local = ComplexityConfiguration(
            field_impact=10, max_complexity=20, max_depth=30, max_recursion_count=40
        )
        options = ExecutionOptions(
            request_services=resolver_for(ambient_limits()), complexity_configuration=local
        )

        # Act
        merge_complexity_configuration(options)

        # Assert
        assert options.complexity_configuration is local
        assert local.model_dump() == {
            "field_impact": 10,
            "max_complexity": 20,
            "max_depth": 30,
            "max_recursion_count": 40,
        }

    def test_unset_local_fields_inherit_ambient_in_place(self):
        """Verify an all-default local object takes the ambient values and keeps its identity."""
        # Arrange
        local = ComplexityConfiguration()
        options = ExecutionOptions(
            request_services=resolver_for(ambient_limits()), complexity_configuration=local
        )

        # Act
        merge_complexity_configuration(options)

        # Assert
        assert options.complexity_configuration is local
        assert local.model_dump() == ambient_limits().model_dump()

    def test_partially_set_local_is_filled_field_by_field(self):
        """Verify only unset fields are copied from the ambient configuration."""
        # Arrange
        local = ComplexityConfiguration(max_depth=3)
        options = ExecutionOptions(
            request_services=resolver_for(ambient_limits()), complexity_configuration=local
        )

        # Act
        merge_complexity_configuration(options)

        # Assert
        assert local.max_depth == 3
        assert local.field_impact == 50
        assert local.max_complexity == 60
        assert local.max_recursion_count == 80

    def test_explicit_zero_is_kept(self):
        """Verify zero counts as set, only None means unset."""
        # Arrange
        local = ComplexityConfiguration(max_complexity=0)
        options = ExecutionOptions(
            request_services=resolver_for(ambient_limits()), complexity_configuration=local
        )

        # Act
        merge_complexity_configuration(options)

        # Assert
        assert local.max_complexity == 0

    def test_missing_ambient_leaves_local_untouched(self):
        """Verify nothing changes when the resolver has no ambient configuration."""
        # Arrange
        local = ComplexityConfiguration(max_depth=3)
        options = ExecutionOptions(
            request_services=resolver_for(None), complexity_configuration=local
        )

        # Act
        merge_complexity_configuration(options)

        # Assert
        assert options.complexity_configuration is local
        assert local.model_dump() == {
            "field_impact": None,
            "max_complexity": None,
            "max_depth": 3,
            "max_recursion_count": None,
        }

    def test_missing_local_adopts_ambient(self):
        """Verify an execution without limits adopts the ambient object itself."""
        # Arrange
        ambient = ambient_limits()
        options = ExecutionOptions(request_services=resolver_for(ambient))

        # Act
        merge_complexity_configuration(options)

        # Assert
        assert options.complexity_configuration is ambient

    def test_ambient_is_looked_up_by_type(self):
        """Verify the resolver is asked for ComplexityConfiguration."""
        # Arrange
        resolver = resolver_for(None)

        # Act
        merge_complexity_configuration(ExecutionOptions(request_services=resolver))

        # Assert
        resolver.get_service.assert_called_once_with(ComplexityConfiguration)


# =============================================================================
# Configuration
# =============================================================================


class TestComplexityConfiguration:
    """Test suite for ComplexityConfiguration validation."""

    def test_defaults_are_unset(self):
        """Verify every field starts unset."""
        config = ComplexityConfiguration()

        assert all(config.is_unset(name) for name in ComplexityConfiguration.model_fields)

    def test_negative_limits_are_rejected(self):
        """Verify limits cannot be negative."""
        with pytest.raises(ValidationError):
            ComplexityConfiguration(max_depth=-1)

    def test_assignment_is_validated(self):
        """Verify contributors cannot store invalid values."""
        config = ComplexityConfiguration()

        with pytest.raises(ValidationError):
            config.field_impact = 0

    def test_unknown_fields_are_rejected(self):
        """Verify extra fields are forbidden."""
        with pytest.raises(ValidationError):
            ComplexityConfiguration.from_properties({"max_width": 3})


# =============================================================================
# Analyzer
# =============================================================================


class TestDefaultComplexityAnalyzer:
    """Test suite for DefaultComplexityAnalyzer."""

    @pytest.fixture
    def document(self):
        return DefaultDocumentBuilder().build("{ hero { name friends { name } } version }")

    def test_measures_depth_and_complexity(self, document):
        """Verify depth and complexity with the default field impact."""
        # Act
        result = DefaultComplexityAnalyzer().analyze(document)

        # Assert
        # hero(1) + version(1) + name(2) + friends(2) + friends.name(4)
        assert result.depth == 3
        assert result.complexity == 10
        assert result.visited == 5

    def test_field_impact_is_configurable(self, document):
        """Verify field_impact changes the per-level multiplier."""
        # Act
        result = DefaultComplexityAnalyzer().analyze(
            document, ComplexityConfiguration(field_impact=3)
        )

        # Assert
        assert result.complexity == 1 + 1 + 3 + 3 + 9

    def test_validate_rejects_deep_documents(self, document):
        """Verify max_depth is enforced."""
        with pytest.raises(ComplexityError, match="too nested") as exc_info:
            DefaultComplexityAnalyzer().validate(document, ComplexityConfiguration(max_depth=2))
        assert exc_info.value.data == {"depth": 3, "max_depth": 2}

    def test_validate_rejects_complex_documents(self, document):
        """Verify max_complexity is enforced."""
        with pytest.raises(ComplexityError, match="too complex"):
            DefaultComplexityAnalyzer().validate(
                document, ComplexityConfiguration(max_complexity=9)
            )

    def test_recursion_count_bounds_the_walk(self, document):
        """Verify analysis stops once max_recursion_count selections were visited."""
        with pytest.raises(ComplexityError, match="too large"):
            DefaultComplexityAnalyzer().analyze(
                document, ComplexityConfiguration(max_recursion_count=4)
            )

    def test_validate_passes_within_limits(self, document):
        """Verify a document within every limit is accepted."""
        # Act
        result = DefaultComplexityAnalyzer().validate(
            document,
            ComplexityConfiguration(max_depth=3, max_complexity=10, max_recursion_count=5),
        )

        # Assert
        assert result.visited == 5
