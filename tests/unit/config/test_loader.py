"""Unit tests for the grading configuration loader."""

import json
from pathlib import Path
from typing import Any

import pytest

from scoregate.config.loader import (
    GradingConfiguration,
    extract_configurations,
    load_configuration_file,
    parse_configurations,
)
from scoregate.config.models import CategoryKind, CoverageConfiguration
from scoregate.core.exceptions import ConfigurationError


class TestParseConfigurations:
    """Tests for parse_configurations."""

    def test_all_categories(self, grading_document: dict[str, Any]) -> None:
        configuration = parse_configurations(json.dumps(grading_document))

        assert len(configuration.tests) == 1
        assert len(configuration.coverage) == 1
        assert len(configuration.analysis) == 1
        assert len(configuration.metrics) == 1
        assert configuration.tests[0].name == "JUnit Tests"
        assert configuration.coverage[0].id == "coverage"
        assert [tool.metric for tool in configuration.coverage[0].tools] == [
            "line",
            "branch",
        ]
        assert not configuration.is_empty

    def test_array_keeps_document_order(self) -> None:
        document = {
            "analysis": [
                {"id": "style", "name": "Style", "tools": [{"id": "checkstyle"}]},
                {"id": "bugs", "name": "Bugs", "tools": [{"id": "spotbugs"}]},
            ]
        }
        configuration = parse_configurations(json.dumps(document))
        assert [c.id for c in configuration.analysis] == ["style", "bugs"]

    def test_missing_keys_are_empty(self) -> None:
        configuration = parse_configurations("{}")
        assert configuration.is_empty
        assert configuration.for_kind(CategoryKind.TESTS) == []

    def test_malformed_json(self) -> None:
        with pytest.raises(ConfigurationError, match="Malformed JSON at line 1"):
            parse_configurations('{"tests": ')

    def test_document_must_be_object(self) -> None:
        with pytest.raises(ConfigurationError, match="must be a JSON object"):
            parse_configurations("[]")

    def test_invariant_violation_propagates(self) -> None:
        document = {"tests": {"maxScore": 10, "tools": [{"id": "junit"}]}}
        with pytest.raises(ConfigurationError, match="an impact must be defined"):
            parse_configurations(json.dumps(document))

    def test_type_errors_are_reported_with_location(self) -> None:
        document = {"coverage": [{"maxScore": "lots"}]}
        with pytest.raises(ConfigurationError) as exc_info:
            parse_configurations(json.dumps(document))
        assert exc_info.value.key == "coverage[0]"
        assert "maxScore" in str(exc_info.value)


class TestExtractConfigurations:
    """Tests for extract_configurations."""

    def test_single_object(self) -> None:
        document = {
            "coverage": {
                "maxScore": 100,
                "missedPercentageImpact": -1,
                "tools": [{"id": "pit", "metric": "mutation"}],
            }
        }
        configurations = extract_configurations(document, CategoryKind.COVERAGE)
        assert len(configurations) == 1
        assert isinstance(configurations[0], CoverageConfiguration)
        assert configurations[0].missed_percentage_impact == -1

    def test_empty_array_rejected(self) -> None:
        with pytest.raises(ConfigurationError, match="'metrics' is empty"):
            extract_configurations({"metrics": []}, CategoryKind.METRICS)

    def test_entry_must_be_object(self) -> None:
        with pytest.raises(ConfigurationError, match="Expected a JSON object"):
            extract_configurations({"tests": [1]}, CategoryKind.TESTS)


class TestLoadConfigurationFile:
    """Tests for load_configuration_file."""

    def test_load(self, grading_file: Path) -> None:
        configuration = load_configuration_file(grading_file)
        assert isinstance(configuration, GradingConfiguration)
        assert configuration.analysis[0].name == "Style"

    def test_missing_file(self, tmp_path: Path) -> None:
        with pytest.raises(ConfigurationError, match="Cannot read configuration"):
            load_configuration_file(tmp_path / "missing.json")
