"""scoregate exceptions."""

from collections.abc import Iterable


class ScoreGateError(Exception):
    """Base exception for all scoregate errors."""


class ConfigurationError(ScoreGateError):
    """Invalid grading or quality gate configuration.

    Raised before any grading proceeds; aborts the run for the affected
    category.
    """

    def __init__(self, message: str, key: str | None = None):
        self.message = message
        self.key = key

        if key:
            full_message = f"{key}: {message}"
        else:
            full_message = message

        super().__init__(full_message)


class AmbiguousMappingError(ScoreGateError):
    """Two different SCM paths resolve to the same report path."""

    def __init__(self, report_path: str, scm_paths: Iterable[str]):
        self.report_path = report_path
        self.scm_paths = sorted(scm_paths)
        super().__init__(
            "Failed to map SCM paths with coverage report paths due to ambiguous "
            f"fully qualified names: {', '.join(self.scm_paths)} -> {report_path}"
        )


class InvalidStateError(ScoreGateError):
    """A programming contract has been violated."""


class MetricNotFoundError(ScoreGateError):
    """A quality gate refers to a metric without a value."""

    def __init__(self, metric: str) -> None:
        self.metric = metric
        super().__init__(f"No value available for metric: {metric}")


class UnknownMetricError(ScoreGateError):
    """A metric name does not denote a known metric."""

    def __init__(self, name: str) -> None:
        self.name = name
        super().__init__(f"Unknown metric: {name}")


class ReportFormatError(ScoreGateError):
    """A reports document does not match the neutral report model."""

    def __init__(self, message: str, location: str | None = None) -> None:
        self.message = message
        self.location = location
        super().__init__(f"{location}: {message}" if location else message)
