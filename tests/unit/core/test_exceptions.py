"""Unit tests for scoregate.core.exceptions module."""

import pytest

from scoregate.core.exceptions import (
    AmbiguousMappingError,
    ConfigurationError,
    InvalidStateError,
    MetricNotFoundError,
    ReportFormatError,
    ScoreGateError,
    UnknownMetricError,
)


class TestHierarchy:
    """Tests for the exception hierarchy."""

    @pytest.mark.parametrize(
        "error_type",
        [
            AmbiguousMappingError,
            ConfigurationError,
            InvalidStateError,
            MetricNotFoundError,
            ReportFormatError,
            UnknownMetricError,
        ],
    )
    def test_single_root(self, error_type: type) -> None:
        """Test that all errors derive from ScoreGateError."""
        assert issubclass(error_type, ScoreGateError)

    def test_root_is_exception(self) -> None:
        assert issubclass(ScoreGateError, Exception)


class TestConfigurationError:
    """Tests for ConfigurationError."""

    def test_message_only(self) -> None:
        error = ConfigurationError("Invalid impact")
        assert str(error) == "Invalid impact"
        assert error.message == "Invalid impact"
        assert error.key is None

    def test_message_with_key(self) -> None:
        """Test that the key prefixes the message."""
        error = ConfigurationError("must not be empty", key="tests[0]")
        assert str(error) == "tests[0]: must not be empty"
        assert error.key == "tests[0]"


class TestAmbiguousMappingError:
    """Tests for AmbiguousMappingError."""

    def test_lists_colliding_paths_sorted(self) -> None:
        error = AmbiguousMappingError(
            "Foo.java", ["b/src/Foo.java", "a/src/Foo.java"]
        )
        assert error.report_path == "Foo.java"
        assert error.scm_paths == ["a/src/Foo.java", "b/src/Foo.java"]
        assert "a/src/Foo.java, b/src/Foo.java -> Foo.java" in str(error)


class TestMetricErrors:
    """Tests for metric lookup errors."""

    def test_metric_not_found(self) -> None:
        error = MetricNotFoundError("line")
        assert error.metric == "line"
        assert str(error) == "No value available for metric: line"

    def test_unknown_metric(self) -> None:
        error = UnknownMetricError("velocity")
        assert error.name == "velocity"
        assert "velocity" in str(error)


class TestReportFormatError:
    """Tests for ReportFormatError."""

    def test_location_prefixes_message(self) -> None:
        error = ReportFormatError("Expected a JSON object", "coverage.jacoco")
        assert str(error) == "coverage.jacoco: Expected a JSON object"
        assert error.location == "coverage.jacoco"

    def test_without_location(self) -> None:
        assert str(ReportFormatError("broken")) == "broken"
