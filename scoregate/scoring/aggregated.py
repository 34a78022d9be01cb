"""Aggregated score of a grading run."""

import logging
import math
from collections.abc import Iterable
from typing import Protocol, runtime_checkable

from scoregate.config.loader import GradingConfiguration, parse_configurations
from scoregate.config.models import Baseline, CategoryKind, ToolConfiguration
from scoregate.core.exceptions import ConfigurationError
from scoregate.reports.metrics import Metric
from scoregate.reports.models import AnalysisReport, Coverage, Issue, ReportNode

from .builder import ScoreRequest, build_aggregate, build_leaf
from .models import Score, ScoreDetail
from .strategies import MAX_PERCENTAGE, success_rate

logger = logging.getLogger(__name__)

TESTS_METRIC = "tests"
TESTS_SUCCESS_RATE_METRIC = "tests-success-rate"


@runtime_checkable
class ReportReader(Protocol):
    """Provides the already parsed report of a tool."""

    def read(
        self, kind: CategoryKind, tool: ToolConfiguration
    ) -> AnalysisReport | ReportNode:
        """Return the report of the given tool.

        Analysis tools yield an ``AnalysisReport``, all other tools a
        ``ReportNode`` tree.
        """
        ...


def _ratio(achieved: int, total: int) -> int:
    if total == 0:
        return MAX_PERCENTAGE
    return achieved * MAX_PERCENTAGE // total


class AggregatedScore:
    """Scores of all categories of a grading run.

    Example:
        score = AggregatedScore(configuration, reader)
        score.grade()
        print(score.achieved_score, score.max_score)
        metrics = score.get_metrics()
    """

    def __init__(
        self,
        configuration: GradingConfiguration | str,
        reader: ReportReader,
    ) -> None:
        """
        Initialize the aggregated score.

        Args:
            configuration: Parsed grading configuration or its JSON document.
            reader: Source of the reports of the configured tools.

        Raises:
            ConfigurationError: If the JSON document is invalid.
        """
        if isinstance(configuration, str):
            configuration = parse_configurations(configuration)
        self.configuration = configuration
        self.reader = reader
        self._scores: dict[CategoryKind, list[Score]] = {
            kind: [] for kind in CategoryKind
        }
        self._details: dict[str, ScoreDetail] = {}

    # grading

    def grade(self) -> "AggregatedScore":
        """Grade all categories in the order tests, coverage, analysis, metrics."""
        self.grade_tests()
        self.grade_coverage()
        self.grade_analysis()
        self.grade_metrics()
        logger.info(
            "Total score: %d of %d (%d%%)",
            self.achieved_score,
            self.max_score,
            self.ratio,
        )
        return self

    def grade_tests(self) -> list[Score]:
        return self._grade(CategoryKind.TESTS)

    def grade_coverage(self) -> list[Score]:
        return self._grade(CategoryKind.COVERAGE)

    def grade_analysis(self) -> list[Score]:
        return self._grade(CategoryKind.ANALYSIS)

    def grade_metrics(self) -> list[Score]:
        return self._grade(CategoryKind.METRICS)

    def _grade(self, kind: CategoryKind) -> list[Score]:
        configurations = self.configuration.for_kind(kind)
        logger.info(
            "Processing %d %s configuration(s)", len(configurations), kind.value
        )

        graded: list[Score] = []
        for configuration in configurations:
            if not configuration.is_enabled:
                logger.warning(
                    "Skipping %s configuration '%s' without tools",
                    kind.value,
                    configuration.id,
                )
                continue

            leaves = []
            for tool in configuration.tools:
                report = self.reader.read(kind, tool)
                leaf = build_leaf(ScoreRequest.for_tool(configuration, tool), report)
                self._details[leaf.detail_key] = ScoreDetail(leaf.detail_key, report)
                logger.info("- %s: %s", leaf.name, leaf.summary)
                leaves.append(leaf)

            score = build_aggregate(
                leaves, ScoreRequest.for_configuration(configuration)
            )
            logger.info(
                "=> %s Score: %d of %d", score.name, score.value, score.max_score
            )
            graded.append(score)

        self._scores[kind].extend(graded)
        return graded

    # scores

    def scores_of(self, kind: CategoryKind) -> list[Score]:
        return list(self._scores[kind])

    @property
    def test_scores(self) -> list[Score]:
        return self.scores_of(CategoryKind.TESTS)

    @property
    def coverage_scores(self) -> list[Score]:
        return self.scores_of(CategoryKind.COVERAGE)

    @property
    def analysis_scores(self) -> list[Score]:
        return self.scores_of(CategoryKind.ANALYSIS)

    @property
    def metric_scores(self) -> list[Score]:
        return self.scores_of(CategoryKind.METRICS)

    @property
    def all_scores(self) -> list[Score]:
        return [score for kind in CategoryKind for score in self._scores[kind]]

    def achieved_score_of(self, kind: CategoryKind) -> int:
        return sum(score.value for score in self._scores[kind])

    def max_score_of(self, kind: CategoryKind) -> int:
        return sum(score.max_score for score in self._scores[kind])

    def ratio_of(self, kind: CategoryKind) -> int:
        return _ratio(self.achieved_score_of(kind), self.max_score_of(kind))

    @property
    def achieved_score(self) -> int:
        return sum(self.achieved_score_of(kind) for kind in CategoryKind)

    @property
    def max_score(self) -> int:
        return sum(self.max_score_of(kind) for kind in CategoryKind)

    @property
    def ratio(self) -> int:
        """Achieved points in percent of the maximum; 100 without any maximum."""
        return _ratio(self.achieved_score, self.max_score)

    @property
    def has_tests(self) -> bool:
        return bool(self._scores[CategoryKind.TESTS])

    @property
    def has_coverage(self) -> bool:
        return bool(self._scores[CategoryKind.COVERAGE])

    @property
    def has_analysis(self) -> bool:
        return bool(self._scores[CategoryKind.ANALYSIS])

    @property
    def has_metrics(self) -> bool:
        return bool(self._scores[CategoryKind.METRICS])

    @property
    def has_test_failures(self) -> bool:
        return sum(score.failed_size for score in self.test_scores) > 0

    @property
    def has_warnings(self) -> bool:
        return sum(score.total_size for score in self.analysis_scores) > 0

    # details

    def get_detail(self, score: Score) -> ScoreDetail | None:
        """Return the report of a leaf score; aggregates have none."""
        return self._details.get(score.detail_key)

    def _leaf_details(self, scores: Iterable[Score]) -> list[ScoreDetail]:
        details = []
        for score in scores:
            for leaf in score.sub_scores:
                detail = self.get_detail(leaf)
                if detail is not None:
                    details.append(detail)
        return details

    def get_issues(self) -> list[Issue]:
        """Return all issues reported by the static analysis tools."""
        return [
            issue
            for detail in self._leaf_details(self.analysis_scores)
            if isinstance(detail.report, AnalysisReport)
            for issue in detail.report.issues
        ]

    def get_covered_files(self, metric: Metric) -> list[ReportNode]:
        """Return the file nodes of all coverage reports of the given metric.

        A report read by several tools contributes its files once.
        """
        files: list[ReportNode] = []
        seen: set[int] = set()
        for score in self.coverage_scores:
            for leaf in score.sub_scores:
                detail = self.get_detail(leaf)
                if leaf.metric != metric or detail is None:
                    continue
                if id(detail.report) in seen:
                    continue
                seen.add(id(detail.report))
                if isinstance(detail.report, ReportNode):
                    files.extend(
                        node
                        for node in detail.report.all_file_nodes()
                        if isinstance(node.get_value(metric), Coverage)
                    )
        return files

    # metrics

    def get_metrics(self, scope: Baseline = Baseline.PROJECT) -> dict[str, int]:
        """Flatten the score tree into the metrics of one scope.

        The map is rebuilt on every call.

        Raises:
            ConfigurationError: If two scores yield the same metric key
        """
        return self._collect_metrics()[scope]

    def get_all_metrics(self) -> dict[str, int]:
        """Return the metrics of all scopes.

        Keys of the modified lines scope end with ``-modified``, keys of the
        modified files scope with ``-modified-files``.
        """
        metrics: dict[str, int] = {}
        for scope, values in self._collect_metrics().items():
            for key, value in values.items():
                metrics[key + scope.suffix] = value
        return metrics

    def _collect_metrics(self) -> dict[Baseline, dict[str, int]]:
        metrics: dict[Baseline, dict[str, int]] = {scope: {} for scope in Baseline}

        def put(scope: Baseline, key: str, value: int) -> None:
            scoped = metrics[scope]
            if key in scoped:
                raise ConfigurationError(
                    f"Duplicate metric key '{key}' in scope {scope.value}", key=key
                )
            scoped[key] = value

        if self.test_scores:
            passed = sum(score.passed_size for score in self.test_scores)
            failed = sum(score.failed_size for score in self.test_scores)
            put(Baseline.PROJECT, TESTS_METRIC, passed + failed)
            put(
                Baseline.PROJECT,
                TESTS_SUCCESS_RATE_METRIC,
                success_rate(passed, failed),
            )

        for score in self.coverage_scores:
            for leaf in score.sub_scores:
                if leaf.metric is not None:
                    put(leaf.scope, leaf.metric_tag_name, leaf.covered_percentage)

        for score in self.analysis_scores:
            put(score.scope, score.name.lower(), score.total_size)
            for leaf in score.sub_scores:
                put(leaf.scope, leaf.id.lower(), leaf.total_size)

        for score in self.metric_scores:
            for leaf in score.sub_scores:
                if leaf.metric is not None and leaf.metric_value is not None:
                    value = math.floor(leaf.metric_value + 0.5)
                    put(leaf.scope, leaf.metric_tag_name, value)

        return metrics
