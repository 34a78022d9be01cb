"""Unit tests for quality gate configuration parsing."""

import json

import pytest

from scoregate.config.models import Baseline
from scoregate.core.exceptions import ConfigurationError
from scoregate.core.settings import ScoreGateSettings
from scoregate.gates.catalog import AnalysisToolRegistry
from scoregate.gates.config import (
    QualityGateDefinition,
    generate_display_name,
    parse_criticality,
    parse_quality_gates,
    quality_gates_from_settings,
)
from scoregate.gates.models import Criticality


class TestParseCriticality:
    """Tests for parse_criticality."""

    @pytest.mark.parametrize(
        ("value", "expected"),
        [
            ("FAILURE", Criticality.FAILURE),
            ("failure", Criticality.FAILURE),
            ("Unstable", Criticality.UNSTABLE),
            ("ERROR", Criticality.UNSTABLE),
            ("note", Criticality.UNSTABLE),
            ("", Criticality.UNSTABLE),
            (None, Criticality.UNSTABLE),
        ],
    )
    def test_parse(self, value: str | None, expected: Criticality) -> None:
        assert parse_criticality(value) == expected

    def test_unknown(self) -> None:
        with pytest.raises(ConfigurationError, match="Unknown criticality 'FATAL'"):
            parse_criticality("FATAL")


class TestGenerateDisplayName:
    """Tests for generate_display_name."""

    @pytest.mark.parametrize(
        ("metric", "expected"),
        [
            ("checkstyle", "CheckStyle"),
            ("line", "Line Coverage"),
            ("tests", "Number of Tests"),
            ("custom-metric", "custom-metric"),
            ("line-modified", "Line Coverage (Modified Lines)"),
            ("branch-modified-files", "Branch Coverage (Modified Files)"),
            ("pmd-modified", "PMD (Modified Lines)"),
        ],
    )
    def test_display_name(self, metric: str, expected: str) -> None:
        assert generate_display_name(metric, AnalysisToolRegistry()) == expected


class TestParseQualityGates:
    """Tests for parse_quality_gates."""

    def test_array(self) -> None:
        gates = parse_quality_gates(
            json.dumps(
                {
                    "qualityGates": [
                        {"metric": "line", "threshold": 80, "criticality": "FAILURE"},
                        {"metric": "checkstyle", "threshold": 10, "name": "Style"},
                    ]
                }
            )
        )

        assert len(gates) == 2
        line, style = gates
        assert line.name == "Line Coverage"
        assert line.threshold == 80
        assert line.criticality == Criticality.FAILURE
        assert line.scope == Baseline.PROJECT
        assert style.name == "Style"
        assert style.criticality == Criticality.UNSTABLE

    def test_single_object(self) -> None:
        gates = parse_quality_gates(
            '{"qualityGates": {"metric": "line", "baseline": "modified_lines"}}'
        )
        assert len(gates) == 1
        assert gates[0].scope == Baseline.MODIFIED_LINES
        assert gates[0].threshold == 0

    def test_missing_key(self) -> None:
        assert parse_quality_gates('{"other": []}') == []

    def test_blank_metric(self) -> None:
        with pytest.raises(ConfigurationError, match="metric cannot be blank"):
            parse_quality_gates('{"qualityGates": [{"threshold": 1}]}')

    def test_negative_threshold(self) -> None:
        with pytest.raises(ConfigurationError, match="must not be negative"):
            parse_quality_gates(
                '{"qualityGates": [{"metric": "line", "threshold": -5}]}'
            )

    def test_invalid_threshold_type(self) -> None:
        with pytest.raises(ConfigurationError) as exc_info:
            parse_quality_gates(
                '{"qualityGates": [{"metric": "line", "threshold": "high"}]}'
            )
        assert exc_info.value.key == "qualityGates[0]"

    def test_malformed_json(self) -> None:
        with pytest.raises(ConfigurationError, match="Malformed JSON"):
            parse_quality_gates("{qualityGates")

    def test_entry_must_be_object(self) -> None:
        with pytest.raises(ConfigurationError, match="Expected a JSON object"):
            parse_quality_gates('{"qualityGates": ["line"]}')

    def test_definition_ignores_unknown_keys(self) -> None:
        definition = QualityGateDefinition.model_validate(
            {"metric": "line", "threshold": 50, "color": "red"}
        )
        assert definition.to_quality_gate().name == "Line Coverage"


class TestQualityGatesFromSettings:
    """Tests for quality_gates_from_settings."""

    def test_no_configuration(self) -> None:
        settings = ScoreGateSettings(_skip_file_loading=True)
        assert quality_gates_from_settings(settings) == []

    def test_from_settings(self) -> None:
        settings = ScoreGateSettings(
            _skip_file_loading=True,
            quality_gates='{"qualityGates": [{"metric": "bugs", "threshold": 0}]}',
        )
        gates = quality_gates_from_settings(settings)
        assert [gate.name for gate in gates] == ["Bugs"]

    def test_from_environment(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv(
            "SCOREGATE_QUALITY_GATES",
            '{"qualityGates": [{"metric": "line", "threshold": 70}]}',
        )
        gates = quality_gates_from_settings()
        assert len(gates) == 1
        assert gates[0].threshold == 70

    def test_invalid_configuration(self) -> None:
        settings = ScoreGateSettings(
            _skip_file_loading=True,
            quality_gates='{"qualityGates": [{"metric": "line", "criticality": "X"}]}',
        )
        with pytest.raises(ConfigurationError):
            quality_gates_from_settings(settings)
