"""Grading configuration models.

A grading configuration consists of category configurations (tests, coverage,
static analysis, software metrics). Each one defines the maximum score of the
category, the point impact of the measured events and the tools whose reports
contribute to it.
"""

from enum import Enum
from typing import Annotated, Any, ClassVar, Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from pydantic.alias_generators import to_camel

from scoregate.core.exceptions import ConfigurationError, UnknownMetricError
from scoregate.reports.metrics import Metric


class CategoryKind(str, Enum):
    """Top level grading dimension."""

    TESTS = "tests"
    COVERAGE = "coverage"
    ANALYSIS = "analysis"
    METRICS = "metrics"


class Baseline(str, Enum):
    """Part of the code base a tool result is restricted to."""

    PROJECT = "PROJECT"
    MODIFIED_FILES = "MODIFIED_FILES"
    MODIFIED_LINES = "MODIFIED_LINES"

    @classmethod
    def from_string(cls, value: str | None) -> "Baseline":
        """Parse a baseline case-insensitively; unknown values mean PROJECT."""
        normalized = (value or "").strip().upper().replace("-", "_")
        try:
            return cls(normalized)
        except ValueError:
            return cls.PROJECT

    @property
    def suffix(self) -> str:
        """Suffix of metric keys measured on this baseline."""
        return _BASELINE_SUFFIXES[self]


_BASELINE_SUFFIXES = {
    Baseline.PROJECT: "",
    Baseline.MODIFIED_LINES: "-modified",
    Baseline.MODIFIED_FILES: "-modified-files",
}


class ConfigModel(BaseModel):
    """Base class of configuration models; reads camelCase JSON."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        frozen=True,
        extra="ignore",
    )


class ToolConfiguration(ConfigModel):
    """One tool whose report contributes to a category."""

    id: str = Field(default="", description="ID of the tool (selects the parser)")
    name: str = Field(default="", description="Display name of the tool")
    icon: str = Field(default="", description="Icon of the tool")
    pattern: str = Field(default="", description="Ant pattern of report files")
    metric: str = Field(default="", description="Metric to extract")
    source_path: str = Field(
        default="", description="Folder the report file paths are relative to"
    )
    baseline: Baseline = Field(default=Baseline.PROJECT)

    @field_validator("baseline", mode="before")
    @classmethod
    def parse_baseline(cls, v: Any) -> Baseline:
        if isinstance(v, Baseline):
            return v
        return Baseline.from_string(v if isinstance(v, str) else None)

    @property
    def display_name(self) -> str:
        return self.name or self.id

    @property
    def metric_type(self) -> Metric | None:
        """The metric this tool extracts, if it denotes a known one."""
        if not self.metric:
            return None
        try:
            return Metric.from_name(self.metric)
        except UnknownMetricError:
            return None


class BaseConfiguration(ConfigModel):
    """Settings shared by all category configurations."""

    default_name: ClassVar[str] = ""
    impact_fields: ClassVar[tuple[str, ...]] = ()

    kind: CategoryKind
    id: str = Field(default="", description="ID of the configuration")
    name: str = Field(default="", description="Display name")
    icon: str = Field(default="", description="Icon of the category")
    source_path: str = Field(
        default="", description="Folder the report file paths are relative to"
    )
    max_score: int = Field(default=0, ge=0, description="Maximum achievable score")
    tools: list[ToolConfiguration] = Field(default_factory=list)

    @model_validator(mode="before")
    @classmethod
    def apply_defaults(cls, data: Any) -> Any:
        """Default a blank ID to the category kind and a blank name per kind."""
        if not isinstance(data, dict):
            return data
        data = dict(data)
        kind_field = cls.model_fields["kind"]
        kind = kind_field.default
        if not str(data.get("id") or "").strip():
            data["id"] = kind.value if isinstance(kind, CategoryKind) else kind
        if not str(data.get("name") or "").strip():
            data["name"] = cls.default_name
        return data

    @model_validator(mode="after")
    def validate_impacts(self) -> "BaseConfiguration":
        if self.max_score == 0 and self.has_impact:
            raise ConfigurationError(
                "When configuring impacts then the score must not be zero.",
                key=self.id,
            )
        if self.max_score > 0 and not self.has_impact:
            raise ConfigurationError(
                "When configuring a max score then an impact must be defined as well.",
                key=self.id,
            )
        if self.max_score > 0 and not self.tools:
            raise ConfigurationError(
                "An enabled configuration requires at least one tool.", key=self.id
            )
        for tool in self.tools:
            self.validate_tool(tool)
        return self

    def validate_tool(self, tool: ToolConfiguration) -> None:
        if not tool.id.strip():
            raise ConfigurationError(
                "No tool ID specified: the ID of a tool is used to identify "
                "the parser and must not be empty.",
                key=self.id,
            )

    def source_path_of(self, tool: ToolConfiguration) -> str:
        """Return the folder the file paths of a tool are relative to.

        The source path of the tool wins over the one of the configuration.
        """
        return tool.source_path or self.source_path

    def impact_weights(self) -> dict[str, int]:
        """Return the impact weights of this configuration by field name."""
        return {field: getattr(self, field) for field in self.impact_fields}

    @property
    def has_impact(self) -> bool:
        return any(weight != 0 for weight in self.impact_weights().values())

    @property
    def is_positive(self) -> bool:
        """Whether no impact weight is negative."""
        return all(weight >= 0 for weight in self.impact_weights().values())

    @property
    def is_enabled(self) -> bool:
        return bool(self.tools)


class TestConfiguration(BaseConfiguration):
    """Scores test results by absolute counts or by success/failure rates."""

    __test__ = False

    default_name: ClassVar[str] = "Tests"
    impact_fields: ClassVar[tuple[str, ...]] = (
        "passed_impact",
        "failure_impact",
        "skipped_impact",
        "success_rate_impact",
        "failure_rate_impact",
    )

    kind: Literal[CategoryKind.TESTS] = CategoryKind.TESTS
    passed_impact: int = 0
    failure_impact: int = 0
    skipped_impact: int = 0
    success_rate_impact: int = 0
    failure_rate_impact: int = 0

    @model_validator(mode="after")
    def validate_absolute_or_relative(self) -> "TestConfiguration":
        if self.is_relative and self.is_absolute:
            raise ConfigurationError(
                "Test configuration must either define an impact for absolute "
                "or relative metrics only.",
                key=self.id,
            )
        return self

    @property
    def is_relative(self) -> bool:
        return self.success_rate_impact != 0 or self.failure_rate_impact != 0

    @property
    def is_absolute(self) -> bool:
        return (
            self.passed_impact != 0
            or self.failure_impact != 0
            or self.skipped_impact != 0
        )


class AnalysisConfiguration(BaseConfiguration):
    """Scores static analysis warnings by severity."""

    default_name: ClassVar[str] = "Static Analysis Warnings"
    impact_fields: ClassVar[tuple[str, ...]] = (
        "error_impact",
        "high_impact",
        "normal_impact",
        "low_impact",
    )

    kind: Literal[CategoryKind.ANALYSIS] = CategoryKind.ANALYSIS
    error_impact: int = 0
    high_impact: int = 0
    normal_impact: int = 0
    low_impact: int = 0


class CoverageConfiguration(BaseConfiguration):
    """Scores code or mutation coverage percentages."""

    default_name: ClassVar[str] = "Code Coverage"
    impact_fields: ClassVar[tuple[str, ...]] = (
        "covered_percentage_impact",
        "missed_percentage_impact",
    )

    kind: Literal[CategoryKind.COVERAGE] = CategoryKind.COVERAGE
    covered_percentage_impact: int = 0
    missed_percentage_impact: int = 0

    def validate_tool(self, tool: ToolConfiguration) -> None:
        super().validate_tool(tool)
        _require_metric(tool, self.id, "coverage")


class MetricConfiguration(BaseConfiguration):
    """Reports software metrics; never contributes points."""

    default_name: ClassVar[str] = "Metrics"

    kind: Literal[CategoryKind.METRICS] = CategoryKind.METRICS

    def validate_tool(self, tool: ToolConfiguration) -> None:
        super().validate_tool(tool)
        _require_metric(tool, self.id, "software")

    @property
    def is_positive(self) -> bool:
        return True


def _require_metric(tool: ToolConfiguration, key: str, category: str) -> None:
    if not tool.metric.strip():
        raise ConfigurationError(
            f"{tool.display_name}: No metric specified: for each tool a "
            f"specific {category} metric must be specified.",
            key=key,
        )
    if tool.metric_type is None:
        raise ConfigurationError(
            f"{tool.display_name}: Unknown metric '{tool.metric}'", key=key
        )
    if tool.baseline == Baseline.MODIFIED_LINES and not tool.metric_type.is_line_based:
        raise ConfigurationError(
            f"{tool.display_name}: The metric '{tool.metric}' cannot be "
            "restricted to modified lines, use the baseline MODIFIED_FILES.",
            key=key,
        )


Configuration = Annotated[
    TestConfiguration
    | AnalysisConfiguration
    | CoverageConfiguration
    | MetricConfiguration,
    Field(discriminator="kind"),
]

CONFIGURATION_TYPES: dict[CategoryKind, type[BaseConfiguration]] = {
    CategoryKind.TESTS: TestConfiguration,
    CategoryKind.ANALYSIS: AnalysisConfiguration,
    CategoryKind.COVERAGE: CoverageConfiguration,
    CategoryKind.METRICS: MetricConfiguration,
}
