"""Quality gate models."""

import logging
from collections.abc import Mapping
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field, model_validator

from scoregate.config.models import Baseline
from scoregate.core.exceptions import (
    ConfigurationError,
    MetricNotFoundError,
    UnknownMetricError,
)
from scoregate.reports.metrics import Metric, MetricTendency

from .catalog import AnalysisMetricCatalog, get_registry

logger = logging.getLogger(__name__)

GREATER_OR_EQUAL = ">="
LESS_OR_EQUAL = "<="

# longest suffix first
SCOPE_SUFFIXES = ("-modified-files", "-modified")


class Criticality(str, Enum):
    """Effect of a failed gate on the overall status."""

    UNSTABLE = "UNSTABLE"
    FAILURE = "FAILURE"


class OverallStatus(str, Enum):
    """Combined status of all evaluated gates."""

    SUCCESS = "SUCCESS"
    UNSTABLE = "UNSTABLE"
    FAILURE = "FAILURE"

    @property
    def icon(self) -> str:
        return _STATUS_ICONS[self]

    def __str__(self) -> str:
        return f"{self.icon} {self.value}"


_STATUS_ICONS = {
    OverallStatus.SUCCESS: "✅",
    OverallStatus.UNSTABLE: "❗",
    OverallStatus.FAILURE: "❌",
}


def strip_scope_suffix(metric: str) -> str:
    """Remove a trailing ``-modified`` or ``-modified-files`` from a metric key."""
    for suffix in SCOPE_SUFFIXES:
        if metric.endswith(suffix) and len(metric) > len(suffix):
            return metric[: -len(suffix)]
    return metric


def metric_tendency(
    metric: str, catalog: AnalysisMetricCatalog | None = None
) -> MetricTendency:
    """Determine in which direction the values of a metric improve.

    Static analysis metrics count warnings, so lower is better; rate metrics
    (``tests-success-rate``) are better when larger. All other names use the
    tendency of the matching ``Metric``; unknown names count as lower is
    better.
    """
    catalog = catalog or get_registry()
    base = strip_scope_suffix(metric)
    if catalog.is_known_analysis_metric(base):
        return MetricTendency.SMALLER_IS_BETTER
    if "-rate" in base:
        return MetricTendency.LARGER_IS_BETTER
    try:
        return Metric.from_name(base).tendency
    except UnknownMetricError:
        return MetricTendency.SMALLER_IS_BETTER


class QualityGate(BaseModel):
    """Threshold on one metric of a grading run."""

    model_config = ConfigDict(frozen=True)

    name: str = Field(..., description="Display name")
    metric: str = Field(..., description="Key of the metric in the metrics map")
    scope: Baseline = Field(default=Baseline.PROJECT)
    threshold: float = Field(default=0.0, description="Threshold value")
    criticality: Criticality = Field(default=Criticality.UNSTABLE)

    @model_validator(mode="after")
    def validate_gate(self) -> "QualityGate":
        if not self.metric.strip():
            raise ConfigurationError(
                f"Quality gate metric cannot be blank: {self.name}", key="metric"
            )
        if self.threshold < 0:
            raise ConfigurationError(
                f"Quality gate threshold must not be negative: {self.threshold:.2f} "
                f"for metric {self.metric}",
                key="threshold",
            )
        return self

    def is_applicable(self, metrics: Mapping[str, float]) -> bool:
        """Whether the metrics map holds a value for this gate."""
        return self.metric in metrics

    def value_from(self, metrics: Mapping[str, float]) -> float:
        """
        Return the value of this gate's metric.

        Raises:
            MetricNotFoundError: If the map holds no value for the metric.
        """
        if self.metric not in metrics:
            raise MetricNotFoundError(self.metric)
        return float(metrics[self.metric])

    def evaluate(
        self, actual_value: float, catalog: AnalysisMetricCatalog | None = None
    ) -> "QualityGateEvaluation":
        """
        Evaluate this gate against a measured value.

        Args:
            actual_value: Measured value of the metric.
            catalog: Known static analysis metrics; defaults to the shared
                analysis tool registry.

        Returns:
            The immutable evaluation.
        """
        tendency = metric_tendency(self.metric, catalog)
        if tendency == MetricTendency.LARGER_IS_BETTER:
            passed = actual_value >= self.threshold
            operator = GREATER_OR_EQUAL
        else:
            passed = actual_value <= self.threshold
            operator = LESS_OR_EQUAL
        message = f"{self.name}: {actual_value:.2f} {operator} {self.threshold:.2f}"
        return QualityGateEvaluation(
            gate=self, actual_value=actual_value, passed=passed, message=message
        )


class QualityGateEvaluation(BaseModel):
    """Result of evaluating one gate against one value."""

    model_config = ConfigDict(frozen=True)

    gate: QualityGate
    actual_value: float
    passed: bool
    message: str

    @property
    def gate_name(self) -> str:
        return self.gate.name

    @property
    def metric(self) -> str:
        return self.gate.metric

    @property
    def threshold(self) -> float:
        return self.gate.threshold

    @property
    def criticality(self) -> Criticality:
        return self.gate.criticality
