"""Unit tests for quality gate evaluation."""

import json
from typing import Any

import pytest

from scoregate.config.models import Baseline
from scoregate.core.exceptions import MetricNotFoundError
from scoregate.gates.models import Criticality, OverallStatus, QualityGate
from scoregate.gates.result import (
    QualityGateResult,
    applicable_gates,
    evaluate_aggregated,
    evaluate_quality_gates,
    scoped_metrics,
)
from scoregate.reports.bundle import ReportBundle
from scoregate.scoring.aggregated import AggregatedScore


def _evaluation(passed: bool, criticality: Criticality = Criticality.UNSTABLE):
    gate = QualityGate(
        name="Line", metric="line", threshold=80, criticality=criticality
    )
    return gate.evaluate(90 if passed else 70)


class TestQualityGateResult:
    """Tests for the status roll-up."""

    def test_empty_result(self) -> None:
        result = QualityGateResult()
        assert result.overall_status == OverallStatus.SUCCESS
        assert result.is_successful
        assert not result.has_failures
        assert result.create_summary() == ""

    def test_all_passed(self) -> None:
        result = QualityGateResult([_evaluation(True), _evaluation(True)])
        assert result.overall_status == OverallStatus.SUCCESS
        assert result.success_count == 2
        assert result.failure_count == 0

    def test_failed_soft_gate_is_unstable(self) -> None:
        result = QualityGateResult([_evaluation(True), _evaluation(False)])
        assert result.overall_status == OverallStatus.UNSTABLE
        assert result.has_failures
        assert not result.is_successful

    def test_failed_hard_gate_is_failure(self) -> None:
        result = QualityGateResult(
            [_evaluation(False), _evaluation(False, Criticality.FAILURE)]
        )
        assert result.overall_status == OverallStatus.FAILURE

    def test_passed_hard_gate_does_not_fail(self) -> None:
        result = QualityGateResult([_evaluation(True, Criticality.FAILURE)])
        assert result.overall_status == OverallStatus.SUCCESS

    def test_status_recomputed_on_add(self) -> None:
        result = QualityGateResult()
        result.add_evaluation(_evaluation(False))
        assert result.overall_status == OverallStatus.UNSTABLE
        result.add_evaluation(_evaluation(False, Criticality.FAILURE))
        assert result.overall_status == OverallStatus.FAILURE
        result.add_evaluation(_evaluation(True))
        assert result.overall_status == OverallStatus.FAILURE

    def test_evaluations_are_copied(self) -> None:
        result = QualityGateResult([_evaluation(True)])
        result.evaluations.clear()
        assert len(result.evaluations) == 1

    def test_summary(self) -> None:
        result = QualityGateResult([_evaluation(True), _evaluation(False)])
        assert result.create_summary().splitlines() == [
            "Quality Gates: ❗ UNSTABLE (1 passed, 1 failed)",
            "  ✅ Line: 90.00 >= 80.00",
            "  ❌ Line: 70.00 >= 80.00",
        ]

    def test_repr(self) -> None:
        result = QualityGateResult([_evaluation(False)])
        assert repr(result) == "QualityGateResult(status=UNSTABLE, passed=0, failed=1)"


class TestEvaluateQualityGates:
    """Tests for evaluate_quality_gates."""

    def test_evaluate_flat_map(self) -> None:
        gates = [
            QualityGate(name="Line", metric="line", threshold=80),
            QualityGate(
                name="Bugs",
                metric="bugs",
                threshold=5,
                criticality=Criticality.FAILURE,
            ),
        ]

        result = evaluate_quality_gates({"line": 85, "bugs": 10}, gates)

        assert [e.passed for e in result.evaluations] == [True, False]
        assert result.overall_status == OverallStatus.FAILURE

    def test_no_gates(self) -> None:
        result = evaluate_quality_gates({"line": 85}, [])
        assert result.evaluations == []
        assert result.is_successful

    def test_missing_metric(self) -> None:
        gates = [QualityGate(name="Line", metric="line", threshold=80)]
        with pytest.raises(MetricNotFoundError):
            evaluate_quality_gates({}, gates)


class TestEvaluateAggregated:
    """Tests for gates evaluated against a graded run."""

    @pytest.fixture
    def graded(
        self, grading_document: dict[str, Any], reports_document: dict[str, Any]
    ) -> AggregatedScore:
        bundle = ReportBundle.from_document(reports_document)
        bundle.mark_modified_lines({"src/com/example/Foo.java": [1, 2, 9]})
        grading_document["coverage"][0]["tools"].append(
            {"id": "jacoco", "metric": "line", "baseline": "MODIFIED_LINES"}
        )
        return AggregatedScore(json.dumps(grading_document), bundle).grade()

    def test_scoped_metrics(self, graded: AggregatedScore) -> None:
        scoped = scoped_metrics(graded)
        assert scoped[Baseline.MODIFIED_LINES] == {"line": 67}
        assert scoped[Baseline.PROJECT]["line-modified"] == 67
        assert scoped[Baseline.PROJECT]["checkstyle"] == 3

    def test_gates_read_their_scope(self, graded: AggregatedScore) -> None:
        gates = [
            QualityGate(name="Line", metric="line", threshold=70),
            QualityGate(
                name="Patch",
                metric="line",
                scope=Baseline.MODIFIED_LINES,
                threshold=80,
            ),
            QualityGate(name="Patch (key)", metric="line-modified", threshold=60),
            QualityGate(name="Success", metric="tests-success-rate", threshold=75),
        ]

        result = evaluate_aggregated(graded, gates)

        assert [e.actual_value for e in result.evaluations] == [70, 67, 67, 75]
        assert [e.passed for e in result.evaluations] == [True, False, True, True]
        assert result.overall_status == OverallStatus.UNSTABLE

    def test_applicable_gates(self, graded: AggregatedScore) -> None:
        gates = [
            QualityGate(name="Line", metric="line", threshold=70),
            QualityGate(name="Mutation", metric="mutation", threshold=70),
            QualityGate(
                name="Branch",
                metric="branch",
                scope=Baseline.MODIFIED_LINES,
                threshold=70,
            ),
        ]
        assert [gate.name for gate in applicable_gates(graded, gates)] == ["Line"]
