"""Parsing of quality gate configurations.

Quality gates are configured as JSON under the key ``qualityGates``, either a
single object or an array:

    {"qualityGates": [
        {"metric": "line", "threshold": 80, "criticality": "FAILURE"},
        {"metric": "checkstyle", "threshold": 10, "name": "Style"}
    ]}
"""

import json
import logging
from typing import Any

from pydantic import BaseModel, ConfigDict, Field
from pydantic import ValidationError as PydanticValidationError

from scoregate.config.models import Baseline
from scoregate.core.exceptions import ConfigurationError, UnknownMetricError
from scoregate.core.settings import ScoreGateSettings, get_cached_settings
from scoregate.reports.metrics import Metric

from .catalog import AnalysisMetricCatalog, get_registry
from .models import Criticality, QualityGate

logger = logging.getLogger(__name__)

QUALITY_GATES_ID = "qualityGates"
MODIFIED_SUFFIX = "-modified"
MODIFIED_FILES_SUFFIX = "-modified-files"

_LEGACY_CRITICALITIES = {"ERROR": Criticality.UNSTABLE, "NOTE": Criticality.UNSTABLE}


def parse_criticality(value: str | None) -> Criticality:
    """Parse a criticality case-insensitively.

    Blank values and the legacy values ERROR and NOTE mean UNSTABLE.

    Raises:
        ConfigurationError: If the value denotes no criticality
    """
    normalized = (value or "").strip().upper()
    if not normalized:
        return Criticality.UNSTABLE
    if normalized in _LEGACY_CRITICALITIES:
        return _LEGACY_CRITICALITIES[normalized]
    try:
        return Criticality(normalized)
    except ValueError:
        raise ConfigurationError(
            f"Unknown criticality '{value}': expected UNSTABLE or FAILURE",
            key="criticality",
        ) from None


def _base_display_name(metric: str, catalog: AnalysisMetricCatalog) -> str:
    tool_name = catalog.get_display_name(metric)
    if tool_name:
        return tool_name
    try:
        return Metric.from_name(metric).display_name
    except UnknownMetricError:
        return metric


def generate_display_name(
    metric: str, catalog: AnalysisMetricCatalog | None = None
) -> str:
    """Return the display name of a gate on the given metric.

    Analysis tools use their tool name, other metrics their display name and
    unknown metrics the raw metric key. Scoped keys get a hint appended, e.g.
    ``line-modified`` becomes "Line Coverage (Modified Lines)".
    """
    catalog = catalog or get_registry()
    if metric.endswith(MODIFIED_FILES_SUFFIX) and len(metric) > len(
        MODIFIED_FILES_SUFFIX
    ):
        base = metric[: -len(MODIFIED_FILES_SUFFIX)]
        return f"{_base_display_name(base, catalog)} (Modified Files)"
    if metric.endswith(MODIFIED_SUFFIX) and len(metric) > len(MODIFIED_SUFFIX):
        base = metric[: -len(MODIFIED_SUFFIX)]
        return f"{_base_display_name(base, catalog)} (Modified Lines)"
    return _base_display_name(metric, catalog)


class QualityGateDefinition(BaseModel):
    """One entry of a quality gate configuration, as written in JSON."""

    model_config = ConfigDict(extra="ignore")

    metric: str = Field(default="", description="Key of the metric")
    threshold: float = Field(default=0.0, description="Threshold value")
    criticality: str | None = Field(default="UNSTABLE")
    baseline: str | None = Field(default="PROJECT")
    name: str | None = Field(default="")

    def to_quality_gate(
        self, catalog: AnalysisMetricCatalog | None = None
    ) -> QualityGate:
        """
        Create the quality gate of this definition.

        Raises:
            ConfigurationError: If metric, threshold or criticality is invalid.
        """
        metric = self.metric.strip()
        if not metric:
            raise ConfigurationError(
                "Quality gate metric cannot be blank", key="metric"
            )
        name = (self.name or "").strip() or generate_display_name(metric, catalog)
        return QualityGate(
            name=name,
            metric=metric,
            scope=Baseline.from_string(self.baseline),
            threshold=self.threshold,
            criticality=parse_criticality(self.criticality),
        )


def extract_quality_gates(
    document: dict[str, Any], catalog: AnalysisMetricCatalog | None = None
) -> list[QualityGate]:
    """Extract the quality gates of a parsed configuration document."""
    if QUALITY_GATES_ID not in document:
        return []

    node = document[QUALITY_GATES_ID]
    entries = node if isinstance(node, list) else [node]
    gates = []
    for index, entry in enumerate(entries):
        location = f"{QUALITY_GATES_ID}[{index}]"
        if not isinstance(entry, dict):
            raise ConfigurationError("Expected a JSON object", key=location)
        try:
            definition = QualityGateDefinition.model_validate(entry)
        except PydanticValidationError as e:
            errors = [
                f"{'.'.join(str(x) for x in error['loc'])}: {error['msg']}"
                for error in e.errors()
            ]
            raise ConfigurationError(
                "Model validation failed:\n  " + "\n  ".join(errors), key=location
            ) from e
        gates.append(definition.to_quality_gate(catalog))
    return gates


def parse_quality_gates(
    json_text: str, catalog: AnalysisMetricCatalog | None = None
) -> list[QualityGate]:
    """
    Parse a quality gate configuration.

    Args:
        json_text: JSON document with the key ``qualityGates``.
        catalog: Known static analysis metrics, used for display names.

    Returns:
        The configured gates; empty if the key is absent.

    Raises:
        ConfigurationError: If the document or one of its gates is invalid.
    """
    try:
        document = json.loads(json_text)
    except json.JSONDecodeError as e:
        raise ConfigurationError(
            f"Malformed JSON at line {e.lineno}, column {e.colno}: {e.msg}",
            key=QUALITY_GATES_ID,
        ) from e
    if not isinstance(document, dict):
        raise ConfigurationError(
            "Quality gate configuration must be a JSON object", key=QUALITY_GATES_ID
        )
    return extract_quality_gates(document, catalog)


def quality_gates_from_settings(
    settings: ScoreGateSettings | None = None,
    catalog: AnalysisMetricCatalog | None = None,
) -> list[QualityGate]:
    """
    Load the quality gates handed over through the environment.

    A missing or blank configuration yields no gates.

    Raises:
        ConfigurationError: If the configuration is invalid.
    """
    settings = settings or get_cached_settings()
    json_text = settings.resolve_quality_gates()
    if json_text is None:
        logger.info("No quality gates configured")
        return []

    gates = parse_quality_gates(json_text, catalog)
    logger.info("Parsed %d quality gate(s) from configuration", len(gates))
    return gates
