"""Metric catalog shared by report trees, scores and quality gates."""

from enum import Enum

from scoregate.core.exceptions import UnknownMetricError


class MetricTendency(str, Enum):
    """Direction in which a metric improves."""

    LARGER_IS_BETTER = "larger_is_better"
    SMALLER_IS_BETTER = "smaller_is_better"


class Aggregation(str, Enum):
    """How values of child nodes combine into the value of a parent."""

    TOTAL = "total"
    MAXIMUM = "maximum"


class Metric(str, Enum):
    """Metrics that report trees may carry."""

    CONTAINER = "CONTAINER"
    MODULE = "MODULE"
    PACKAGE = "PACKAGE"
    FILE = "FILE"
    CLASS = "CLASS"
    METHOD = "METHOD"

    LINE = "LINE"
    BRANCH = "BRANCH"
    INSTRUCTION = "INSTRUCTION"
    MUTATION = "MUTATION"
    TEST_STRENGTH = "TEST_STRENGTH"

    CYCLOMATIC_COMPLEXITY = "CYCLOMATIC_COMPLEXITY"
    COGNITIVE_COMPLEXITY = "COGNITIVE_COMPLEXITY"
    NPATH_COMPLEXITY = "NPATH_COMPLEXITY"
    LOC = "LOC"
    NCSS = "NCSS"
    COHESION = "COHESION"
    WEIGHT_OF_CLASS = "WEIGHT_OF_CLASS"

    TESTS = "TESTS"
    TEST_SUCCESS_RATE = "TEST_SUCCESS_RATE"

    @classmethod
    def from_name(cls, name: str) -> "Metric":
        """Resolve a metric from its enum name or tag name.

        Args:
            name: Name such as "LINE", "line" or "cyclomatic-complexity".

        Returns:
            The matching metric.

        Raises:
            UnknownMetricError: If the name denotes no metric.
        """
        normalized = (name or "").strip().upper().replace("-", "_")
        try:
            return cls(normalized)
        except ValueError:
            raise UnknownMetricError(name) from None

    @property
    def tag_name(self) -> str:
        """Lower-case, dash separated name used as metric key."""
        return self.value.lower().replace("_", "-")

    @property
    def display_name(self) -> str:
        return _DISPLAY_NAMES.get(self, self.value.replace("_", " ").title())

    @property
    def tendency(self) -> MetricTendency:
        if self in _SMALLER_IS_BETTER:
            return MetricTendency.SMALLER_IS_BETTER
        return MetricTendency.LARGER_IS_BETTER

    @property
    def is_coverage(self) -> bool:
        return self in _COVERAGE_METRICS

    @property
    def is_line_based(self) -> bool:
        """Whether the metric can be measured for single lines of a file."""
        return self in _LINE_BASED_METRICS

    @property
    def aggregation(self) -> Aggregation:
        if self in _MAXIMUM_AGGREGATION:
            return Aggregation.MAXIMUM
        return Aggregation.TOTAL


_COVERAGE_METRICS = frozenset(
    {
        Metric.CONTAINER,
        Metric.MODULE,
        Metric.PACKAGE,
        Metric.FILE,
        Metric.CLASS,
        Metric.METHOD,
        Metric.LINE,
        Metric.BRANCH,
        Metric.INSTRUCTION,
        Metric.MUTATION,
        Metric.TEST_STRENGTH,
    }
)

_LINE_BASED_METRICS = frozenset(
    {
        Metric.LINE,
        Metric.BRANCH,
        Metric.INSTRUCTION,
        Metric.MUTATION,
        Metric.TEST_STRENGTH,
    }
)

_SMALLER_IS_BETTER = frozenset(
    {
        Metric.CYCLOMATIC_COMPLEXITY,
        Metric.COGNITIVE_COMPLEXITY,
        Metric.NPATH_COMPLEXITY,
        Metric.LOC,
        Metric.NCSS,
        Metric.WEIGHT_OF_CLASS,
    }
)

_MAXIMUM_AGGREGATION = frozenset({Metric.COHESION, Metric.WEIGHT_OF_CLASS})

_DISPLAY_NAMES = {
    Metric.CONTAINER: "Container Coverage",
    Metric.MODULE: "Module Coverage",
    Metric.PACKAGE: "Package Coverage",
    Metric.FILE: "File Coverage",
    Metric.CLASS: "Class Coverage",
    Metric.METHOD: "Method Coverage",
    Metric.LINE: "Line Coverage",
    Metric.BRANCH: "Branch Coverage",
    Metric.INSTRUCTION: "Instruction Coverage",
    Metric.MUTATION: "Mutation Coverage",
    Metric.TEST_STRENGTH: "Test Strength",
    Metric.CYCLOMATIC_COMPLEXITY: "Cyclomatic Complexity",
    Metric.COGNITIVE_COMPLEXITY: "Cognitive Complexity",
    Metric.NPATH_COMPLEXITY: "N-Path Complexity",
    Metric.LOC: "Lines of Code",
    Metric.NCSS: "Non Commenting Source Statements",
    Metric.COHESION: "Class Cohesion",
    Metric.WEIGHT_OF_CLASS: "Weight of Class",
    Metric.TESTS: "Number of Tests",
    Metric.TEST_SUCCESS_RATE: "Test Success Rate",
}
