"""Neutral in-memory report model.

External parsers translate tool specific formats (JUnit, JaCoCo, PIT,
Checkstyle, ...) into these models before anything is graded. Analysis tools
produce a flat ``AnalysisReport``; test, coverage and metric tools produce a
tree of ``ReportNode`` objects.
"""

from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from .metrics import Aggregation, Metric


class ReportModel(BaseModel):
    """Base class of all report models; reads camelCase JSON."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class Severity(str, Enum):
    """Severity of an analysis issue."""

    ERROR = "ERROR"
    HIGH = "HIGH"
    NORMAL = "NORMAL"
    LOW = "LOW"


_SEVERITY_ALIASES = {
    "WARNING_HIGH": Severity.HIGH,
    "WARNING_NORMAL": Severity.NORMAL,
    "WARNING_LOW": Severity.LOW,
    "WARNING": Severity.NORMAL,
    "INFO": Severity.LOW,
}


class ElementType(str, Enum):
    """Kind of elements an analysis report counts."""

    WARNING = "warning"
    BUG = "bug"
    DUPLICATION = "duplication"
    VULNERABILITY = "vulnerability"

    def plural(self, count: int) -> str:
        return self.value if count == 1 else f"{self.value}s"


class Issue(ReportModel):
    """A single static analysis finding."""

    severity: Severity = Field(default=Severity.NORMAL, description="Issue severity")
    file_name: str = Field(default="", description="Affected file")
    line_start: int = Field(default=0, ge=0, description="First affected line")
    line_end: int = Field(default=0, ge=0, description="Last affected line")
    type: str = Field(default="", description="Rule or bug pattern")
    category: str = Field(default="", description="Rule category")
    message: str = Field(default="", description="Description of the finding")
    origin: str = Field(default="", description="ID of the reporting tool")

    @field_validator("severity", mode="before")
    @classmethod
    def parse_severity(cls, v: Any) -> Any:
        """Accept severities case-insensitively, including legacy names."""
        if isinstance(v, str):
            upper_v = v.strip().upper()
            return _SEVERITY_ALIASES.get(upper_v, upper_v)
        return v


class AnalysisReport(ReportModel):
    """Issues reported by one static analysis tool."""

    id: str = Field(default="", description="ID of the tool")
    name: str = Field(default="", description="Display name of the tool")
    element_type: ElementType = Field(
        default=ElementType.WARNING, description="What the issues represent"
    )
    issues: list[Issue] = Field(default_factory=list)

    def size_of(self, severity: Severity) -> int:
        """Return the number of issues of the given severity."""
        return sum(1 for issue in self.issues if issue.severity == severity)

    @property
    def size(self) -> int:
        return len(self.issues)

    def severity_distribution(self) -> str:
        """Render the issue counts per severity, e.g. "error: 1, high: 0"."""
        return ", ".join(
            f"{severity.value.lower()}: {self.size_of(severity)}"
            for severity in Severity
        )


class Coverage(ReportModel):
    """Covered and missed items of one coverage metric."""

    model_config = ConfigDict(
        alias_generator=to_camel, populate_by_name=True, frozen=True
    )

    covered: int = Field(default=0, ge=0, description="Number of covered items")
    missed: int = Field(default=0, ge=0, description="Number of missed items")

    @property
    def total(self) -> int:
        return self.covered + self.missed

    @property
    def is_set(self) -> bool:
        """Whether any item has been measured at all."""
        return self.total > 0

    @property
    def covered_percentage(self) -> int:
        """Covered items in percent, rounded half-up; 0 when nothing is set."""
        if not self.is_set:
            return 0
        return (self.covered * 200 + self.total) // (2 * self.total)

    @property
    def missed_percentage(self) -> int:
        if not self.is_set:
            return 0
        return 100 - self.covered_percentage

    def __add__(self, other: "Coverage") -> "Coverage":
        if not isinstance(other, Coverage):
            return NotImplemented
        return Coverage(
            covered=self.covered + other.covered, missed=self.missed + other.missed
        )


class TestResult(str, Enum):
    """Outcome of a single test case."""

    __test__ = False

    PASSED = "PASSED"
    FAILED = "FAILED"
    SKIPPED = "SKIPPED"


class TestCase(ReportModel):
    """A single executed (or skipped) test."""

    __test__ = False

    class_name: str = Field(default="", description="Test class or suite")
    test_name: str = Field(default="", description="Test method or case name")
    result: TestResult = Field(default=TestResult.PASSED)
    message: str = Field(default="", description="Failure or skip message")

    @field_validator("result", mode="before")
    @classmethod
    def parse_result(cls, v: Any) -> Any:
        if isinstance(v, str):
            return v.strip().upper()
        return v


class NodeKind(str, Enum):
    """Level of a node in a report tree."""

    CONTAINER = "container"
    MODULE = "module"
    PACKAGE = "package"
    FILE = "file"


class ReportNode(ReportModel):
    """Node of a coverage, metric or test report tree.

    Values are keyed by metric tag name (``line``, ``branch``, ``loc``, ...);
    coverage metrics hold a ``Coverage``, software metrics a number. Values
    that a node does not carry itself are aggregated from its children.
    """

    name: str = Field(default="", description="Name of the node")
    kind: NodeKind = Field(default=NodeKind.CONTAINER, description="Tree level")
    relative_path: str = Field(
        default="", description="Report relative path of a file node"
    )
    values: dict[str, Coverage | float] = Field(default_factory=dict)
    test_cases: list[TestCase] = Field(default_factory=list)
    covered_lines: set[int] = Field(default_factory=set)
    missed_lines: set[int] = Field(default_factory=set)
    modified_lines: set[int] = Field(default_factory=set)
    line_coverages: dict[str, dict[int, Coverage]] = Field(
        default_factory=dict,
        description="Coverage of single lines of a file node by metric tag",
    )
    children: list["ReportNode"] = Field(default_factory=list)

    @field_validator("values", "line_coverages", mode="before")
    @classmethod
    def normalize_value_keys(cls, v: Any) -> Any:
        """Key values by tag name, so "LINE" and "line" denote the same metric."""
        if isinstance(v, dict):
            return {
                str(key).strip().lower().replace("_", "-"): val
                for key, val in v.items()
            }
        return v

    @property
    def is_file(self) -> bool:
        return self.kind == NodeKind.FILE

    @property
    def has_line_data(self) -> bool:
        return bool(self.covered_lines or self.missed_lines)

    def get_value(self, metric: Metric) -> Coverage | float | None:
        """Return the value of a metric for this node.

        A value stored on the node wins. File nodes with line data derive the
        line coverage from it, other line based coverages are summed from
        their coverage per line. Otherwise the values of the children are
        combined: coverages are summed, software metrics are combined by the
        metric's aggregation.

        Returns:
            The value, or None if neither the node nor its children carry one.
        """
        own = self.values.get(metric.tag_name)
        if own is not None:
            return own
        if metric == Metric.LINE and self.is_file and self.has_line_data:
            return Coverage(
                covered=len(self.covered_lines), missed=len(self.missed_lines)
            )
        per_line = self.line_coverages.get(metric.tag_name)
        if per_line and self.is_file:
            total = Coverage()
            for value in per_line.values():
                total = total + value
            return total

        child_values = [
            value
            for child in self.children
            if (value := child.get_value(metric)) is not None
        ]
        if not child_values:
            return None

        if metric.is_coverage:
            total = Coverage()
            for value in child_values:
                if isinstance(value, Coverage):
                    total = total + value
            return total

        numbers = [
            float(value) for value in child_values if not isinstance(value, Coverage)
        ]
        if not numbers:
            return None
        if metric.aggregation == Aggregation.MAXIMUM:
            return max(numbers)
        return sum(numbers)

    def all_file_nodes(self) -> list["ReportNode"]:
        """Return all file nodes of this subtree in depth-first order."""
        if self.is_file:
            return [self]
        files: list[ReportNode] = []
        for child in self.children:
            files.extend(child.all_file_nodes())
        return files

    def all_test_cases(self) -> list[TestCase]:
        """Return the test cases of this subtree in depth-first order."""
        cases = list(self.test_cases)
        for child in self.children:
            cases.extend(child.all_test_cases())
        return cases

    def has_modified_lines(self) -> bool:
        if self.modified_lines:
            return True
        return any(child.has_modified_lines() for child in self.children)

    def add_modified_lines(self, lines: Any) -> None:
        """Mark the given line numbers as modified; non-positive numbers are ignored."""
        self.modified_lines.update(line for line in lines if line > 0)

    def filter_by_modified_lines(self) -> "ReportNode | None":
        """Return a copy restricted to modified lines.

        Only files with modified lines survive. Their line sets and coverages per
        line are restricted to the modified lines and stored values are
        dropped, so line based coverages are recomputed over the modified
        lines. Values without data per line cannot be restricted and vanish.

        Returns:
            The filtered tree, or None if no file of this subtree is modified.
        """
        if self.is_file:
            if not self.modified_lines:
                return None
            return self.model_copy(
                update={
                    "values": {},
                    "covered_lines": self.covered_lines & self.modified_lines,
                    "missed_lines": self.missed_lines & self.modified_lines,
                    "line_coverages": self._modified_line_coverages(),
                    "modified_lines": set(self.modified_lines),
                    "test_cases": list(self.test_cases),
                }
            )
        return self._copy_with_children(
            [
                filtered
                for child in self.children
                if (filtered := child.filter_by_modified_lines()) is not None
            ]
        )

    def _modified_line_coverages(self) -> dict[str, dict[int, Coverage]]:
        filtered = {
            tag: {
                line: value
                for line, value in per_line.items()
                if line in self.modified_lines
            }
            for tag, per_line in self.line_coverages.items()
        }
        return {tag: per_line for tag, per_line in filtered.items() if per_line}

    def filter_by_modified_files(self) -> "ReportNode | None":
        """Return a copy containing only files with modified lines.

        File nodes are kept unchanged, so their values still cover the whole
        file.
        """
        if self.is_file:
            return self.model_copy(deep=True) if self.modified_lines else None
        return self._copy_with_children(
            [
                filtered
                for child in self.children
                if (filtered := child.filter_by_modified_files()) is not None
            ]
        )

    def _copy_with_children(
        self, children: list["ReportNode"]
    ) -> "ReportNode | None":
        if not children:
            return None
        # values of inner nodes describe the unfiltered subtree
        return self.model_copy(update={"values": {}, "children": children})
