"""JSON document of already parsed reports.

External parsers hand their results over in one document, keyed by category
and tool ID:

    {
        "tests": {"junit": {"name": "JUnit", "children": [...]}},
        "coverage": {"jacoco": {"kind": "container", "children": [...]}},
        "analysis": {"checkstyle": {"issues": [...]}},
        "metrics": {"pmd": {"values": {"loc": 1200}}}
    }

Analysis tools map to an ``AnalysisReport``, all other tools to a
``ReportNode`` tree.
"""

import json
import logging
from collections.abc import Iterable, Mapping
from pathlib import Path
from typing import Any

from pydantic import ValidationError as PydanticValidationError

from scoregate.config.models import CategoryKind, ToolConfiguration
from scoregate.core.exceptions import ReportFormatError
from scoregate.coverage.patch import PatchCoverage

from .models import AnalysisReport, ReportNode

logger = logging.getLogger(__name__)

Report = AnalysisReport | ReportNode


def _parse_report(kind: CategoryKind, tool_id: str, data: Any) -> Report:
    location = f"{kind.value}.{tool_id}"
    if not isinstance(data, dict):
        raise ReportFormatError("Expected a JSON object", location)
    model = AnalysisReport if kind == CategoryKind.ANALYSIS else ReportNode
    try:
        return model.model_validate(data)
    except PydanticValidationError as e:
        errors = [
            f"{'.'.join(str(x) for x in error['loc'])}: {error['msg']}"
            for error in e.errors()
        ]
        raise ReportFormatError(
            "Report validation failed:\n  " + "\n  ".join(errors), location
        ) from e


class ReportBundle:
    """Reports of a grading run, looked up by category and tool ID.

    Implements the ``ReportReader`` protocol of the aggregated score. Tools
    without a report yield an empty report, so their score shows no results
    instead of aborting the run.
    """

    def __init__(
        self, reports: Mapping[CategoryKind, Mapping[str, Report]] | None = None
    ) -> None:
        self._reports: dict[CategoryKind, dict[str, Report]] = {
            kind: dict((reports or {}).get(kind, {})) for kind in CategoryKind
        }

    @classmethod
    def from_document(cls, document: Any) -> "ReportBundle":
        """Create a bundle from a parsed reports document.

        Raises:
            ReportFormatError: If the document or one of its reports is invalid
        """
        if not isinstance(document, dict):
            raise ReportFormatError("Reports document must be a JSON object")

        reports: dict[CategoryKind, dict[str, Report]] = {}
        for kind in CategoryKind:
            section = document.get(kind.value, {})
            if not isinstance(section, dict):
                raise ReportFormatError(
                    "Expected an object of reports by tool ID", kind.value
                )
            reports[kind] = {
                tool_id: _parse_report(kind, tool_id, data)
                for tool_id, data in section.items()
            }
        return cls(reports)

    @classmethod
    def from_json(cls, json_text: str) -> "ReportBundle":
        try:
            document = json.loads(json_text)
        except json.JSONDecodeError as e:
            raise ReportFormatError(
                f"Malformed JSON at line {e.lineno}, column {e.colno}: {e.msg}"
            ) from e
        return cls.from_document(document)

    @classmethod
    def load(cls, file_path: str | Path) -> "ReportBundle":
        """Load a bundle from a JSON file.

        Raises:
            ReportFormatError: If the file cannot be read or is invalid
        """
        file_path = Path(file_path)
        try:
            content = file_path.read_text(encoding="utf-8")
        except OSError as e:
            raise ReportFormatError(
                f"Cannot read reports: {e}", str(file_path)
            ) from e
        bundle = cls.from_json(content)
        logger.debug("Loaded %d report(s) from %s", len(bundle), file_path)
        return bundle

    def __len__(self) -> int:
        return sum(len(reports) for reports in self._reports.values())

    def add(self, kind: CategoryKind, tool_id: str, report: Report) -> None:
        self._reports[kind][tool_id] = report

    def read(self, kind: CategoryKind, tool: ToolConfiguration) -> Report:
        """Return the report of a tool; an empty report if there is none."""
        report = self._reports[kind].get(tool.id)
        if report is not None:
            return report

        logger.warning(
            "No %s report found for tool '%s'", kind.value, tool.display_name
        )
        if kind == CategoryKind.ANALYSIS:
            return AnalysisReport(id=tool.id)
        return ReportNode()

    def trees(self, *kinds: CategoryKind) -> list[ReportNode]:
        """Return the report trees of the given categories (all if none given)."""
        selected = kinds or tuple(CategoryKind)
        return [
            report
            for kind in selected
            for report in self._reports[kind].values()
            if isinstance(report, ReportNode)
        ]

    def report_paths(self, *kinds: CategoryKind) -> list[str]:
        """Return the distinct relative paths of all file nodes, sorted."""
        return sorted(
            {
                node.relative_path
                for tree in self.trees(*kinds)
                for node in tree.all_file_nodes()
                if node.relative_path
            }
        )

    def mark_modified_lines(
        self, scm_path_to_lines: Mapping[str, Iterable[int]]
    ) -> int:
        """Mark the changed lines of a diff on all coverage and metric trees.

        Returns:
            Number of file nodes that received modified lines

        Raises:
            AmbiguousMappingError: If two SCM paths map to the same report file
        """
        patch = PatchCoverage()
        return sum(
            patch.mark_modified_lines(tree, scm_path_to_lines)
            for tree in self.trees(CategoryKind.COVERAGE, CategoryKind.METRICS)
        )


def parse_diff(document: Any) -> dict[str, list[int]]:
    """Read the changed lines per SCM path from a parsed diff document.

    The document is either an object mapping each modified path to its
    changed line numbers or an array of modified paths without line data.

    Raises:
        ReportFormatError: If the document has neither form
    """
    if isinstance(document, list):
        if not all(isinstance(path, str) for path in document):
            raise ReportFormatError("Expected an array of paths", "diff")
        return {path: [] for path in document}
    if not isinstance(document, dict):
        raise ReportFormatError("Diff must be a JSON object or array", "diff")

    changes: dict[str, list[int]] = {}
    for path, lines in document.items():
        if not isinstance(lines, list) or not all(
            isinstance(line, int) and not isinstance(line, bool) for line in lines
        ):
            raise ReportFormatError("Expected an array of line numbers", path)
        changes[path] = list(lines)
    return changes


def load_diff(file_path: str | Path) -> dict[str, list[int]]:
    """Load the changed lines per SCM path from a JSON file."""
    file_path = Path(file_path)
    try:
        document = json.loads(file_path.read_text(encoding="utf-8"))
    except OSError as e:
        raise ReportFormatError(f"Cannot read diff: {e}", str(file_path)) from e
    except json.JSONDecodeError as e:
        raise ReportFormatError(
            f"Malformed JSON at line {e.lineno}, column {e.colno}: {e.msg}",
            str(file_path),
        ) from e
    return parse_diff(document)
