"""Score tree models."""

from collections.abc import Mapping
from dataclasses import dataclass
from types import MappingProxyType

from pydantic import BaseModel, ConfigDict, Field, field_serializer, field_validator

from scoregate.config.models import Baseline, CategoryKind, Configuration
from scoregate.reports.metrics import Metric
from scoregate.reports.models import AnalysisReport, ReportNode

from .strategies import (
    MAX_PERCENTAGE,
    CategoryStrategy,
    failure_rate,
    get_strategy,
    success_rate,
)


class Score(BaseModel):
    """Node of a score tree.

    A leaf is built from the report of one tool, an aggregate from the scores
    of its children. The measured counts are stored; impact, value and
    percentage are derived from them and the configuration. Scores are
    immutable and carry no report: the report of a leaf is kept in a
    ``ScoreDetail`` that is joined by ``detail_key``.
    """

    model_config = ConfigDict(frozen=True)

    id: str = Field(..., description="ID of the tool or configuration")
    name: str = Field(..., description="Display name")
    icon: str = Field(default="", description="Icon")
    scope: Baseline = Field(default=Baseline.PROJECT)
    configuration: Configuration
    sub_scores: tuple["Score", ...] = Field(default=())
    counts: Mapping[str, float] = Field(default_factory=dict, validate_default=True)
    metric: Metric | None = Field(default=None, description="Extracted metric")
    unit: str = Field(default="", description="Counted element type")

    @field_validator("id", "name")
    @classmethod
    def validate_not_blank(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("must not be empty")
        return v

    @field_validator("counts")
    @classmethod
    def freeze_counts(cls, v: Mapping[str, float]) -> Mapping[str, float]:
        return MappingProxyType(dict(v))

    @field_serializer("counts")
    def serialize_counts(self, counts: Mapping[str, float]) -> dict[str, float]:
        return dict(counts)

    @property
    def kind(self) -> CategoryKind:
        return self.configuration.kind

    @property
    def strategy(self) -> CategoryStrategy:
        return get_strategy(self.kind)

    @property
    def is_leaf(self) -> bool:
        return not self.sub_scores

    @property
    def detail_key(self) -> str:
        """Key of the ``ScoreDetail`` of this score.

        Tools of one configuration often share an ID (one JaCoCo report for
        line and branch coverage), so the key of a leaf also holds its metric
        and any scope other than the project.
        """
        if not self.is_leaf:
            return self.configuration.id
        parts = [self.configuration.id, self.id]
        if self.metric is not None:
            parts.append(self.metric.tag_name)
        if self.scope != Baseline.PROJECT:
            parts.append(self.scope.value.lower())
        return "/".join(parts)

    def count(self, name: str) -> int:
        return int(self.counts.get(name, 0))

    @property
    def impact(self) -> int:
        """Signed point delta of the measured counts."""
        return self.strategy.impact(self.configuration, self.counts)

    @property
    def max_score(self) -> int:
        return self.configuration.max_score

    @property
    def has_max_score(self) -> bool:
        return self.max_score > 0

    @property
    def value(self) -> int:
        """Achieved points, capped to the range [0, max_score]."""
        impact = self.impact
        if impact < 0:
            return max(0, self.max_score + impact)
        if impact > 0:
            return min(self.max_score, impact)
        if self.configuration.is_positive:
            return 0
        return self.max_score

    @property
    def percentage(self) -> int:
        if self.has_max_score:
            return self.value * MAX_PERCENTAGE // self.max_score
        return MAX_PERCENTAGE

    @property
    def summary(self) -> str:
        return self.strategy.summarize(self.counts, self.metric, self.unit)

    @property
    def total_size(self) -> int:
        """Number of counted tests or issues; 0 for coverage and metrics."""
        return sum(self.count(name) for name in self.strategy.size_fields)

    # tests

    @property
    def passed_size(self) -> int:
        return self.count("passed")

    @property
    def failed_size(self) -> int:
        return self.count("failed")

    @property
    def skipped_size(self) -> int:
        return self.count("skipped")

    @property
    def executed_size(self) -> int:
        return self.passed_size + self.failed_size

    @property
    def success_rate(self) -> int:
        return success_rate(self.passed_size, self.failed_size)

    @property
    def failure_rate(self) -> int:
        return failure_rate(self.passed_size, self.failed_size)

    @property
    def has_failures(self) -> bool:
        return self.failed_size > 0

    # static analysis

    @property
    def error_size(self) -> int:
        return self.count("error")

    @property
    def high_severity_size(self) -> int:
        return self.count("high")

    @property
    def normal_severity_size(self) -> int:
        return self.count("normal")

    @property
    def low_severity_size(self) -> int:
        return self.count("low")

    # coverage

    @property
    def covered_percentage(self) -> int:
        return self.count("covered_percentage")

    @property
    def missed_percentage(self) -> int:
        return MAX_PERCENTAGE - self.covered_percentage

    @property
    def missed_items(self) -> int:
        return self.count("missed_items")

    # metrics

    @property
    def metric_value(self) -> float | None:
        return self.counts.get("value")

    @property
    def metric_tag_name(self) -> str:
        return self.metric.tag_name if self.metric else ""


@dataclass(frozen=True)
class ScoreDetail:
    """Report of a leaf score; not part of the persisted score tree."""

    score_key: str
    report: AnalysisReport | ReportNode
