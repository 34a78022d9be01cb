"""Grading configuration: categories, impact weights and tools."""

from .loader import (
    GradingConfiguration,
    extract_configurations,
    load_configuration_file,
    parse_configurations,
)
from .models import (
    AnalysisConfiguration,
    BaseConfiguration,
    Baseline,
    CategoryKind,
    Configuration,
    CoverageConfiguration,
    MetricConfiguration,
    TestConfiguration,
    ToolConfiguration,
)

__all__ = [
    "AnalysisConfiguration",
    "BaseConfiguration",
    "Baseline",
    "CategoryKind",
    "Configuration",
    "CoverageConfiguration",
    "GradingConfiguration",
    "MetricConfiguration",
    "TestConfiguration",
    "ToolConfiguration",
    "extract_configurations",
    "load_configuration_file",
    "parse_configurations",
]
