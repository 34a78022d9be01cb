"""Pure functions that build score nodes."""

import logging
from collections.abc import Sequence
from dataclasses import dataclass

from scoregate.config.models import BaseConfiguration, Baseline, ToolConfiguration
from scoregate.core.exceptions import InvalidStateError
from scoregate.reports.metrics import Metric
from scoregate.reports.models import AnalysisReport, ReportNode

from .models import Score
from .strategies import CategoryStrategy, get_strategy

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ScoreRequest:
    """Everything needed to build one score node besides its input."""

    configuration: BaseConfiguration
    tool: ToolConfiguration | None = None
    name: str = ""
    icon: str = ""
    metric: Metric | None = None
    scope: Baseline = Baseline.PROJECT

    @classmethod
    def for_tool(
        cls, configuration: BaseConfiguration, tool: ToolConfiguration
    ) -> "ScoreRequest":
        """Create the request of the leaf score of a tool."""
        return cls(
            configuration=configuration,
            tool=tool,
            name=tool.name,
            icon=tool.icon,
            metric=tool.metric_type,
            scope=tool.baseline,
        )

    @classmethod
    def for_configuration(cls, configuration: BaseConfiguration) -> "ScoreRequest":
        """Create the request of the aggregated score of a configuration."""
        return cls(
            configuration=configuration,
            name=configuration.name,
            icon=configuration.icon,
        )

    @property
    def strategy(self) -> CategoryStrategy:
        return get_strategy(self.configuration.kind)


def _resolve_icon(request: ScoreRequest) -> str:
    return request.icon or request.configuration.icon or request.strategy.default_icon


def _scoped_view(report: ReportNode, scope: Baseline) -> ReportNode:
    """Return the part of a report tree a baseline selects."""
    if scope == Baseline.MODIFIED_LINES:
        filtered = report.filter_by_modified_lines()
    elif scope == Baseline.MODIFIED_FILES:
        filtered = report.filter_by_modified_files()
    else:
        return report
    return filtered if filtered is not None else ReportNode(name=report.name)


def build_leaf(
    request: ScoreRequest, report: AnalysisReport | ReportNode | None
) -> Score:
    """Build the leaf score of one tool from its already read report.

    Args:
        request: Configuration, tool and naming of the score
        report: Report of the tool

    Returns:
        The leaf score

    Raises:
        InvalidStateError: If no report or a report of the wrong type is given
    """
    strategy = request.strategy
    tool_id = request.tool.id if request.tool else request.configuration.id
    if report is None:
        raise InvalidStateError(
            f"No report has been read for {strategy.type_name} tool '{tool_id}'"
        )
    if not isinstance(report, strategy.report_type):
        raise InvalidStateError(
            f"A {strategy.type_name} score requires a "
            f"{strategy.report_type.__name__}, got {type(report).__name__}"
        )

    source = report
    if strategy.modified_views and isinstance(report, ReportNode):
        source = _scoped_view(report, request.scope)

    score = Score(
        id=tool_id,
        name=request.name or report.name or strategy.default_leaf_name,
        icon=_resolve_icon(request),
        scope=request.scope,
        configuration=request.configuration,
        counts=strategy.extract(source, request.metric),
        metric=request.metric,
        unit=report.element_type.value if isinstance(report, AnalysisReport) else "",
    )
    logger.debug("Built %s score '%s': %s", strategy.type_name, score.id, score.summary)
    return score


def build_aggregate(children: Sequence[Score], request: ScoreRequest) -> Score:
    """Build the score of a configuration from the scores of its tools.

    The counts of the aggregate are the sums of the counts of the children
    (coverage percentages are averaged); the children become its sub-scores in
    the given order.

    Raises:
        InvalidStateError: If no children are given or a child belongs to
            another category
    """
    strategy = request.strategy
    if not children:
        raise InvalidStateError(
            f"Cannot aggregate an empty list of {strategy.type_name} scores"
        )
    for child in children:
        if child.kind != strategy.kind:
            raise InvalidStateError(
                f"Cannot aggregate {child.kind.value} score '{child.id}' into a "
                f"{strategy.kind.value} score"
            )

    metrics = {child.metric for child in children if child.metric is not None}
    if len(metrics) > 1:
        # different metrics cannot be combined into one value
        metric: Metric | None = Metric.CONTAINER
    else:
        metric = next(iter(metrics), None)

    units = {child.unit for child in children}
    return Score(
        id=request.configuration.id,
        name=request.name or strategy.default_aggregate_name,
        icon=_resolve_icon(request),
        scope=request.scope,
        configuration=request.configuration,
        sub_scores=tuple(children),
        counts=strategy.combine([child.counts for child in children], metric),
        metric=metric,
        unit=units.pop() if len(units) == 1 else "",
    )
