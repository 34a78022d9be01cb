"""Shared pytest fixtures for scoregate tests."""

import json
import os
from pathlib import Path
from typing import Any

import pytest

from scoregate.core.logging import reset_logging
from scoregate.core.settings import get_cached_settings
from scoregate.reports.models import (
    AnalysisReport,
    Coverage,
    Issue,
    NodeKind,
    ReportNode,
    Severity,
    TestCase,
    TestResult,
)


@pytest.fixture(autouse=True)
def clean_state(monkeypatch: pytest.MonkeyPatch):  # type: ignore[misc]
    """Reset logging, cached settings and SCOREGATE_ variables for each test."""
    for name in list(os.environ):
        if name.startswith("SCOREGATE_"):
            monkeypatch.delenv(name)
    reset_logging()
    get_cached_settings.cache_clear()
    yield
    reset_logging()
    get_cached_settings.cache_clear()


@pytest.fixture
def test_tree() -> ReportNode:
    """Return a test report with 3 passed, 1 failed and 1 skipped test."""
    return ReportNode(
        name="JUnit",
        children=[
            ReportNode(
                name="FooTest",
                test_cases=[
                    TestCase(class_name="FooTest", test_name="a"),
                    TestCase(class_name="FooTest", test_name="b"),
                    TestCase(
                        class_name="FooTest",
                        test_name="c",
                        result=TestResult.FAILED,
                        message="expected 1 but was 2",
                    ),
                ],
            ),
            ReportNode(
                name="BarTest",
                test_cases=[
                    TestCase(class_name="BarTest", test_name="d"),
                    TestCase(
                        class_name="BarTest",
                        test_name="e",
                        result=TestResult.SKIPPED,
                    ),
                ],
            ),
        ],
    )


@pytest.fixture
def coverage_tree() -> ReportNode:
    """Return a coverage tree of two files.

    Foo.java covers 8 of 10 lines and 3 of 4 branches; Bar.java covers 6 of
    10 lines and has no branch data. The project line coverage is 70%.
    """
    foo = ReportNode(
        name="Foo.java",
        kind=NodeKind.FILE,
        relative_path="com/example/Foo.java",
        values={"branch": Coverage(covered=3, missed=1)},
        covered_lines={1, 2, 3, 4, 5, 6, 7, 8},
        missed_lines={9, 10},
    )
    bar = ReportNode(
        name="Bar.java",
        kind=NodeKind.FILE,
        relative_path="com/example/Bar.java",
        covered_lines={1, 2, 3, 4, 5, 6},
        missed_lines={7, 8, 9, 10},
    )
    package = ReportNode(
        name="com.example", kind=NodeKind.PACKAGE, children=[foo, bar]
    )
    return ReportNode(name="JaCoCo", children=[package])


@pytest.fixture
def analysis_report() -> AnalysisReport:
    """Return a CheckStyle report with one error and two normal warnings."""
    return AnalysisReport(
        id="checkstyle",
        name="CheckStyle",
        issues=[
            Issue(severity=Severity.ERROR, file_name="Foo.java", line_start=3),
            Issue(severity=Severity.NORMAL, file_name="Foo.java", line_start=7),
            Issue(severity=Severity.NORMAL, file_name="Bar.java", line_start=2),
        ],
    )


@pytest.fixture
def metrics_tree() -> ReportNode:
    """Return a metrics tree of two files with 120 lines of code in total."""
    return ReportNode(
        name="Metrics",
        children=[
            ReportNode(
                name="Foo.java",
                kind=NodeKind.FILE,
                relative_path="com/example/Foo.java",
                values={"loc": 80, "cohesion": 0.25, "cyclomatic-complexity": 7},
            ),
            ReportNode(
                name="Bar.java",
                kind=NodeKind.FILE,
                relative_path="com/example/Bar.java",
                values={"loc": 40, "cohesion": 0.75, "cyclomatic-complexity": 3},
            ),
        ],
    )


@pytest.fixture
def grading_document() -> dict[str, Any]:
    """Return a grading configuration using all four categories."""
    return {
        "tests": {
            "name": "JUnit Tests",
            "maxScore": 100,
            "passedImpact": 10,
            "failureImpact": -5,
            "skippedImpact": -1,
            "tools": [{"id": "junit", "name": "JUnit"}],
        },
        "coverage": [
            {
                "maxScore": 100,
                "coveredPercentageImpact": 1,
                "tools": [
                    {"id": "jacoco", "name": "Line Coverage", "metric": "line"},
                    {"id": "jacoco", "name": "Branch Coverage", "metric": "branch"},
                ],
            }
        ],
        "analysis": {
            "name": "Style",
            "maxScore": 50,
            "errorImpact": -10,
            "normalImpact": -2,
            "tools": [{"id": "checkstyle", "name": "CheckStyle"}],
        },
        "metrics": {
            "tools": [{"id": "metrics", "name": "Lines of Code", "metric": "loc"}],
        },
    }


@pytest.fixture
def reports_document(
    test_tree: ReportNode,
    coverage_tree: ReportNode,
    analysis_report: AnalysisReport,
    metrics_tree: ReportNode,
) -> dict[str, Any]:
    """Return the JSON reports document matching ``grading_document``."""
    return {
        "tests": {"junit": test_tree.model_dump(mode="json", by_alias=True)},
        "coverage": {"jacoco": coverage_tree.model_dump(mode="json", by_alias=True)},
        "analysis": {
            "checkstyle": analysis_report.model_dump(mode="json", by_alias=True)
        },
        "metrics": {"metrics": metrics_tree.model_dump(mode="json", by_alias=True)},
    }


@pytest.fixture
def grading_file(tmp_path: Path, grading_document: dict[str, Any]) -> Path:
    path = tmp_path / "grading.json"
    path.write_text(json.dumps(grading_document))
    return path


@pytest.fixture
def reports_file(tmp_path: Path, reports_document: dict[str, Any]) -> Path:
    path = tmp_path / "reports.json"
    path.write_text(json.dumps(reports_document))
    return path
