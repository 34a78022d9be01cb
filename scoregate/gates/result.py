"""Evaluation of quality gates."""

import logging
from collections.abc import Callable, Iterable, Mapping
from typing import TYPE_CHECKING

from scoregate.config.models import Baseline

from .catalog import AnalysisMetricCatalog
from .models import Criticality, OverallStatus, QualityGate, QualityGateEvaluation

if TYPE_CHECKING:
    from scoregate.scoring.aggregated import AggregatedScore

logger = logging.getLogger(__name__)

PASSED_MARK = "✅"
FAILED_MARK = "❌"


class QualityGateResult:
    """Accumulates gate evaluations and derives the overall status."""

    def __init__(self, evaluations: Iterable[QualityGateEvaluation] = ()) -> None:
        self._evaluations: list[QualityGateEvaluation] = []
        self._status = OverallStatus.SUCCESS
        for evaluation in evaluations:
            self.add_evaluation(evaluation)

    def add_evaluation(self, evaluation: QualityGateEvaluation) -> None:
        """Append an evaluation and recompute the overall status from all."""
        self._evaluations.append(evaluation)
        self._status = self._calculate_overall_status()

    def _calculate_overall_status(self) -> OverallStatus:
        failed = [e for e in self._evaluations if not e.passed]
        if any(e.criticality == Criticality.FAILURE for e in failed):
            return OverallStatus.FAILURE
        if failed:
            return OverallStatus.UNSTABLE
        return OverallStatus.SUCCESS

    @property
    def evaluations(self) -> list[QualityGateEvaluation]:
        return list(self._evaluations)

    @property
    def overall_status(self) -> OverallStatus:
        return self._status

    @property
    def success_count(self) -> int:
        return sum(1 for e in self._evaluations if e.passed)

    @property
    def failure_count(self) -> int:
        return len(self._evaluations) - self.success_count

    @property
    def is_successful(self) -> bool:
        return self._status == OverallStatus.SUCCESS

    @property
    def has_failures(self) -> bool:
        return self.failure_count > 0

    def create_summary(self) -> str:
        """Render the evaluations as plain text; empty without evaluations."""
        if not self._evaluations:
            return ""
        lines = [
            f"Quality Gates: {self._status} "
            f"({self.success_count} passed, {self.failure_count} failed)"
        ]
        for evaluation in self._evaluations:
            mark = PASSED_MARK if evaluation.passed else FAILED_MARK
            lines.append(f"  {mark} {evaluation.message}")
        return "\n".join(lines)

    def __repr__(self) -> str:
        return (
            f"QualityGateResult(status={self._status.value}, "
            f"passed={self.success_count}, failed={self.failure_count})"
        )


def evaluate_quality_gates(
    metrics: Mapping[str, float],
    gates: Iterable[QualityGate],
    catalog: AnalysisMetricCatalog | None = None,
) -> QualityGateResult:
    """Evaluate gates against one flat metrics map.

    Raises:
        MetricNotFoundError: If a gate's metric has no value; filter the
            gates with ``QualityGate.is_applicable`` first.
    """
    return _evaluate(gates, lambda gate: metrics, catalog)


def evaluate_aggregated(
    score: "AggregatedScore",
    gates: Iterable[QualityGate],
    catalog: AnalysisMetricCatalog | None = None,
) -> QualityGateResult:
    """Evaluate gates against the metrics of a graded run.

    Each gate reads the metrics of its scope. Gates of the project scope also
    see the suffixed keys of the other scopes (``line-modified``).

    Raises:
        MetricNotFoundError: If a gate's metric has no value
    """
    scoped = scoped_metrics(score)
    return _evaluate(gates, lambda gate: scoped[gate.scope], catalog)


def scoped_metrics(score: "AggregatedScore") -> dict[Baseline, Mapping[str, float]]:
    """Return the metrics map that the gates of each scope read."""
    scoped: dict[Baseline, Mapping[str, float]] = {
        scope: score.get_metrics(scope) for scope in Baseline
    }
    scoped[Baseline.PROJECT] = score.get_all_metrics()
    return scoped


def applicable_gates(
    score: "AggregatedScore", gates: Iterable[QualityGate]
) -> list[QualityGate]:
    """Return the gates whose metric has a value in the graded run.

    Gates on metrics that no configured tool produced are skipped with a
    warning.
    """
    scoped = scoped_metrics(score)
    applicable = []
    for gate in gates:
        if gate.is_applicable(scoped[gate.scope]):
            applicable.append(gate)
        else:
            logger.warning(
                "Skipping quality gate '%s': no value for metric '%s'",
                gate.name,
                gate.metric,
            )
    return applicable


def _evaluate(
    gates: Iterable[QualityGate],
    metrics_of: Callable[[QualityGate], Mapping[str, float]],
    catalog: AnalysisMetricCatalog | None,
) -> QualityGateResult:
    gates = list(gates)
    result = QualityGateResult()
    if not gates:
        logger.info("No quality gates to evaluate")
        return result

    logger.info("Evaluating %d quality gate(s)", len(gates))
    for gate in gates:
        value = gate.value_from(metrics_of(gate))
        evaluation = gate.evaluate(value, catalog)
        result.add_evaluation(evaluation)
        mark = PASSED_MARK if evaluation.passed else FAILED_MARK
        logger.info("%s %s", mark, evaluation.message)
    logger.info(
        "Quality gates evaluation completed: %s (passed: %d, failed: %d)",
        result.overall_status.value,
        result.success_count,
        result.failure_count,
    )
    return result
