"""Category strategies.

A strategy holds everything that differs between the scoring categories: the
counts a score measures, how they are extracted from a report, how they
combine when scores are aggregated, the impact function and the summary text.
A single generic ``Score`` is parameterized by the strategy of its
configuration kind.
"""

import math
from collections.abc import Callable, Mapping, Sequence
from dataclasses import dataclass, field
from typing import Any

from scoregate.config.models import (
    AnalysisConfiguration,
    BaseConfiguration,
    CategoryKind,
    CoverageConfiguration,
    TestConfiguration,
)
from scoregate.reports.metrics import Aggregation, Metric
from scoregate.reports.models import (
    AnalysisReport,
    Coverage,
    ElementType,
    ReportNode,
    Severity,
    TestResult,
)

Counts = Mapping[str, float]
Combiner = Callable[[Sequence[Counts], Metric | None], dict[str, float]]

MAX_PERCENTAGE = 100
N_A = "<n/a>"


def scale(max_score: int, impact: int, percentage: int) -> int:
    """Scale a percentage based impact to the maximum score, rounding half-up."""
    return math.floor(max_score / 100.0 * impact * percentage + 0.5)


def rate_of(achieved: int, executed: int) -> int:
    """Return achieved/executed in percent, rounded half-up; 0 without tests."""
    if executed <= 0:
        return 0
    return math.floor(achieved * 100.0 / executed + 0.5)


def success_rate(passed: int, failed: int) -> int:
    rate = rate_of(passed, passed + failed)
    if rate == MAX_PERCENTAGE and failed > 0:
        # 100% is reserved for runs without failures
        return MAX_PERCENTAGE - 1
    return rate


def failure_rate(passed: int, failed: int) -> int:
    return rate_of(failed, passed + failed)


def _count(counts: Counts, name: str) -> int:
    return int(counts.get(name, 0))


def sum_counts(children: Sequence[Counts], fields: Sequence[str]) -> dict[str, float]:
    return {name: sum(_count(child, name) for child in children) for name in fields}


def mean_counts(
    children: Sequence[Counts], fields: Sequence[str]
) -> dict[str, float]:
    """Integer mean; a sum of percentages has no meaning."""
    if not children:
        return {name: 0 for name in fields}
    return {
        name: sum(_count(child, name) for child in children) // len(children)
        for name in fields
    }


@dataclass(frozen=True)
class CategoryStrategy:
    """Behavior of one scoring category.

    Parsed configurations always carry a name, so ``default_aggregate_name``
    only names aggregates that ``build_aggregate`` builds from a request
    without one.
    """

    kind: CategoryKind
    type_name: str
    default_leaf_name: str
    default_aggregate_name: str
    default_icon: str
    report_type: type
    count_fields: tuple[str, ...]
    extract: Callable[[Any, Metric | None], dict[str, float]]
    impact: Callable[[Any, Counts], int]
    summarize: Callable[[Counts, Metric | None, str], str]
    size_fields: tuple[str, ...] = ()
    averaged_fields: tuple[str, ...] = ()
    combine_values: Combiner | None = None
    modified_views: bool = False
    summed_fields: tuple[str, ...] = field(init=False)

    def __post_init__(self) -> None:
        object.__setattr__(
            self,
            "summed_fields",
            tuple(f for f in self.count_fields if f not in self.averaged_fields),
        )

    def combine(
        self, children: Sequence[Counts], metric: Metric | None
    ) -> dict[str, float]:
        """Combine the counts of child scores into the counts of their parent."""
        if self.combine_values is not None:
            return self.combine_values(children, metric)
        return {
            **sum_counts(children, self.summed_fields),
            **mean_counts(children, self.averaged_fields),
        }


def _extract_tests(report: ReportNode, metric: Metric | None) -> dict:
    results = [case.result for case in report.all_test_cases()]
    return {
        "passed": results.count(TestResult.PASSED),
        "failed": results.count(TestResult.FAILED),
        "skipped": results.count(TestResult.SKIPPED),
    }


def _test_impact(configuration: TestConfiguration, counts: Counts) -> int:
    passed = _count(counts, "passed")
    failed = _count(counts, "failed")
    skipped = _count(counts, "skipped")
    if configuration.is_relative:
        max_score = configuration.max_score
        return scale(
            max_score, configuration.success_rate_impact, success_rate(passed, failed)
        ) + scale(
            max_score, configuration.failure_rate_impact, failure_rate(passed, failed)
        )
    return (
        configuration.passed_impact * passed
        + configuration.failure_impact * failed
        + configuration.skipped_impact * skipped
    )


def _summarize_tests(counts: Counts, metric: Metric | None, unit: str) -> str:
    passed = _count(counts, "passed")
    failed = _count(counts, "failed")
    skipped = _count(counts, "skipped")
    if passed + failed + skipped == 0:
        return "No test results available"
    parts = []
    if failed:
        parts.append(f"{failed} failed")
    if passed:
        parts.append(f"{passed} passed")
    if skipped:
        parts.append(f"{skipped} skipped")
    return f"{success_rate(passed, failed)}% successful ({', '.join(parts)})"


_SEVERITY_FIELDS = {
    Severity.ERROR: "error",
    Severity.HIGH: "high",
    Severity.NORMAL: "normal",
    Severity.LOW: "low",
}


def _extract_analysis(report: AnalysisReport, metric: Metric | None) -> dict:
    return {
        name: report.size_of(severity) for severity, name in _SEVERITY_FIELDS.items()
    }


def _analysis_impact(configuration: AnalysisConfiguration, counts: Counts) -> int:
    return (
        configuration.error_impact * _count(counts, "error")
        + configuration.high_impact * _count(counts, "high")
        + configuration.normal_impact * _count(counts, "normal")
        + configuration.low_impact * _count(counts, "low")
    )


def _summarize_analysis(counts: Counts, metric: Metric | None, unit: str) -> str:
    total = sum(_count(counts, name) for name in _SEVERITY_FIELDS.values())
    try:
        element = ElementType(unit).plural(total)
    except ValueError:
        element = "issue" if total == 1 else "issues"
    distribution = ", ".join(
        f"{name}: {_count(counts, name)}" for name in _SEVERITY_FIELDS.values()
    )
    return f"{total} {element} ({distribution})"


def _extract_coverage(report: ReportNode, metric: Metric | None) -> dict:
    value = report.get_value(metric) if metric else None
    if isinstance(value, Coverage):
        return {
            "covered_percentage": value.covered_percentage,
            "missed_items": value.missed,
        }
    # no coverage value means there is no code yet
    return {"covered_percentage": 0, "missed_items": 0}


def _coverage_impact(configuration: CoverageConfiguration, counts: Counts) -> int:
    covered = _count(counts, "covered_percentage")
    return scale(
        configuration.max_score,
        configuration.missed_percentage_impact,
        MAX_PERCENTAGE - covered,
    ) + scale(configuration.max_score, configuration.covered_percentage_impact, covered)


_COVERAGE_ITEMS = {
    Metric.MUTATION: "survived mutations",
    Metric.TEST_STRENGTH: "survived mutations in tested code",
    Metric.BRANCH: "missed branches",
    Metric.LINE: "missed lines",
    Metric.INSTRUCTION: "missed instructions",
    Metric.CONTAINER: "missed items",
}


def _summarize_coverage(counts: Counts, metric: Metric | None, unit: str) -> str:
    item = _COVERAGE_ITEMS.get(metric, "items") if metric else "items"
    return (
        f"{_count(counts, 'covered_percentage')}% "
        f"({_count(counts, 'missed_items')} {item})"
    )


def _extract_metric(report: ReportNode, metric: Metric | None) -> dict:
    value = report.get_value(metric) if metric else None
    if value is None or isinstance(value, Coverage):
        return {}
    return {"value": float(value)}


def _metric_impact(configuration: BaseConfiguration, counts: Counts) -> int:
    return 0


def _combine_metrics(
    children: Sequence[Counts], metric: Metric | None
) -> dict[str, float]:
    values = [child["value"] for child in children if "value" in child]
    if metric is None or metric == Metric.CONTAINER or not values:
        return {}
    if metric.aggregation == Aggregation.MAXIMUM:
        return {"value": max(values)}
    return {"value": sum(values)}


def format_metric_value(value: float) -> str:
    if float(value).is_integer():
        return str(int(value))
    return f"{value:.2f}"


def _summarize_metric(counts: Counts, metric: Metric | None, unit: str) -> str:
    if metric is None or metric == Metric.CONTAINER or "value" not in counts:
        return N_A
    return f"{format_metric_value(counts['value'])} ({metric.aggregation.value})"


TEST_STRATEGY = CategoryStrategy(
    kind=CategoryKind.TESTS,
    type_name="test",
    default_leaf_name="Tests",
    default_aggregate_name="Test Results",
    default_icon=":vertical_traffic_light:",
    report_type=ReportNode,
    count_fields=("passed", "failed", "skipped"),
    size_fields=("passed", "failed", "skipped"),
    extract=_extract_tests,
    impact=_test_impact,
    summarize=_summarize_tests,
)

ANALYSIS_STRATEGY = CategoryStrategy(
    kind=CategoryKind.ANALYSIS,
    type_name="static analysis",
    default_leaf_name="Static Analysis",
    default_aggregate_name="Static Analysis Results",
    default_icon=":warning:",
    report_type=AnalysisReport,
    count_fields=("error", "high", "normal", "low"),
    size_fields=("error", "high", "normal", "low"),
    extract=_extract_analysis,
    impact=_analysis_impact,
    summarize=_summarize_analysis,
)

COVERAGE_STRATEGY = CategoryStrategy(
    kind=CategoryKind.COVERAGE,
    type_name="coverage",
    default_leaf_name="Coverage",
    default_aggregate_name="Coverage Results",
    default_icon=":footprints:",
    report_type=ReportNode,
    count_fields=("covered_percentage", "missed_items"),
    averaged_fields=("covered_percentage",),
    extract=_extract_coverage,
    impact=_coverage_impact,
    summarize=_summarize_coverage,
    modified_views=True,
)

METRIC_STRATEGY = CategoryStrategy(
    kind=CategoryKind.METRICS,
    type_name="metric",
    default_leaf_name="Metric",
    default_aggregate_name="Metrics Results",
    default_icon=":triangular_ruler:",
    report_type=ReportNode,
    count_fields=("value",),
    extract=_extract_metric,
    impact=_metric_impact,
    summarize=_summarize_metric,
    combine_values=_combine_metrics,
    modified_views=True,
)

STRATEGIES: dict[CategoryKind, CategoryStrategy] = {
    strategy.kind: strategy
    for strategy in (
        TEST_STRATEGY,
        ANALYSIS_STRATEGY,
        COVERAGE_STRATEGY,
        METRIC_STRATEGY,
    )
}


def get_strategy(kind: CategoryKind) -> CategoryStrategy:
    return STRATEGIES[kind]
