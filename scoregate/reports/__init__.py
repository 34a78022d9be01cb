"""Report model handed over by external report parsers."""

from .metrics import Aggregation, Metric, MetricTendency
from .models import (
    AnalysisReport,
    Coverage,
    ElementType,
    Issue,
    NodeKind,
    ReportNode,
    Severity,
    TestCase,
    TestResult,
)

__all__ = [
    "Aggregation",
    "AnalysisReport",
    "Coverage",
    "ElementType",
    "Issue",
    "Metric",
    "MetricTendency",
    "NodeKind",
    "ReportNode",
    "Severity",
    "TestCase",
    "TestResult",
]
