"""Loader for JSON grading configurations."""

import json
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from pydantic import ValidationError as PydanticValidationError

from scoregate.core.exceptions import ConfigurationError

from .models import (
    CONFIGURATION_TYPES,
    AnalysisConfiguration,
    BaseConfiguration,
    CategoryKind,
    CoverageConfiguration,
    MetricConfiguration,
    TestConfiguration,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class GradingConfiguration:
    """All category configurations of a grading run, in document order."""

    tests: list[TestConfiguration] = field(default_factory=list)
    coverage: list[CoverageConfiguration] = field(default_factory=list)
    analysis: list[AnalysisConfiguration] = field(default_factory=list)
    metrics: list[MetricConfiguration] = field(default_factory=list)

    def for_kind(self, kind: CategoryKind) -> list[BaseConfiguration]:
        return list(getattr(self, kind.value))

    @property
    def is_empty(self) -> bool:
        return not (self.tests or self.coverage or self.analysis or self.metrics)


def extract_configurations(
    document: dict[str, Any], kind: CategoryKind
) -> list[BaseConfiguration]:
    """Extract the configurations of one category from a parsed document.

    The category key may hold a single object or an array of objects.

    Args:
        document: Parsed configuration document
        kind: Category to extract

    Returns:
        Configurations of the category; empty if the key is absent

    Raises:
        ConfigurationError: If the key holds an empty array or an invalid entry
    """
    if kind.value not in document:
        return []

    node = document[kind.value]
    entries = node if isinstance(node, list) else [node]
    if not entries:
        raise ConfigurationError(
            f"Configuration ID '{kind.value}' is empty", key=kind.value
        )

    config_type = CONFIGURATION_TYPES[kind]
    configurations: list[BaseConfiguration] = []
    for index, entry in enumerate(entries):
        location = f"{kind.value}[{index}]" if isinstance(node, list) else kind.value
        if not isinstance(entry, dict):
            raise ConfigurationError("Expected a JSON object", key=location)
        try:
            configurations.append(config_type.model_validate(entry))
        except PydanticValidationError as e:
            errors = []
            for error in e.errors():
                loc = ".".join(str(x) for x in error["loc"])
                errors.append(f"{loc}: {error['msg']}" if loc else error["msg"])
            raise ConfigurationError(
                "Model validation failed:\n  " + "\n  ".join(errors), key=location
            ) from e
    return configurations


def parse_configurations(json_text: str) -> GradingConfiguration:
    """Parse a grading configuration document.

    Args:
        json_text: JSON document with the keys tests, coverage, analysis and
            metrics (each optional)

    Returns:
        Parsed grading configuration

    Raises:
        ConfigurationError: If the document is malformed or invalid
    """
    try:
        document = json.loads(json_text)
    except json.JSONDecodeError as e:
        raise ConfigurationError(
            f"Malformed JSON at line {e.lineno}, column {e.colno}: {e.msg}"
        ) from e
    if not isinstance(document, dict):
        raise ConfigurationError("Configuration must be a JSON object")

    configuration = GradingConfiguration(
        **{kind.value: extract_configurations(document, kind) for kind in CategoryKind}
    )
    logger.debug(
        "Parsed grading configuration: %d tests, %d coverage, %d analysis, "
        "%d metrics",
        len(configuration.tests),
        len(configuration.coverage),
        len(configuration.analysis),
        len(configuration.metrics),
    )
    return configuration


def load_configuration_file(file_path: str | Path) -> GradingConfiguration:
    """Load a grading configuration from a JSON file.

    Raises:
        ConfigurationError: If the file cannot be read or is invalid
    """
    file_path = Path(file_path)
    try:
        content = file_path.read_text(encoding="utf-8")
    except OSError as e:
        raise ConfigurationError(
            f"Cannot read configuration: {e}", key=str(file_path)
        ) from e
    return parse_configurations(content)
