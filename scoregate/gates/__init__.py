"""Quality gates: metric thresholds and the overall status of a run."""

from .catalog import AnalysisMetricCatalog, AnalysisToolRegistry, get_registry
from .config import (
    QUALITY_GATES_ID,
    QualityGateDefinition,
    extract_quality_gates,
    generate_display_name,
    parse_criticality,
    parse_quality_gates,
    quality_gates_from_settings,
)
from .models import (
    Criticality,
    OverallStatus,
    QualityGate,
    QualityGateEvaluation,
    metric_tendency,
    strip_scope_suffix,
)
from .result import (
    QualityGateResult,
    applicable_gates,
    evaluate_aggregated,
    evaluate_quality_gates,
    scoped_metrics,
)

__all__ = [
    "AnalysisMetricCatalog",
    "AnalysisToolRegistry",
    "Criticality",
    "OverallStatus",
    "QUALITY_GATES_ID",
    "QualityGate",
    "QualityGateDefinition",
    "QualityGateEvaluation",
    "QualityGateResult",
    "applicable_gates",
    "evaluate_aggregated",
    "evaluate_quality_gates",
    "extract_quality_gates",
    "generate_display_name",
    "get_registry",
    "metric_tendency",
    "parse_criticality",
    "parse_quality_gates",
    "quality_gates_from_settings",
    "scoped_metrics",
    "strip_scope_suffix",
]
