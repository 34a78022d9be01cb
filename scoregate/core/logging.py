"""Structured logging for scoregate.

Library modules log through the standard library
(``logging.getLogger(__name__)``). Applications call ``configure_logging`` once;
it routes those records through structlog with:
- a grading run ID bound to every event of a run
- JSON output for pipelines, pretty console output for terminals
- common fields (version) on every event
- per-module log level overrides

Example usage:
    from scoregate.core.logging import configure_logging, get_logger, run_context

    configure_logging(level="DEBUG")
    logger = get_logger(__name__)

    with run_context("build-42"):
        logger.info("grading_started", configurations=3)
"""

import logging
import sys
import uuid
from contextvars import ContextVar
from typing import Any

import structlog
from structlog.types import EventDict, Processor, WrappedLogger

from scoregate import __version__

_run_id: ContextVar[str | None] = ContextVar("run_id", default=None)

_module_log_levels: dict[str, int] = {}


def generate_run_id() -> str:
    """Generate a unique identifier for a grading run."""
    return str(uuid.uuid4())


def get_run_id() -> str | None:
    """Get the run ID of the current context."""
    return _run_id.get()


class run_context:
    """Context manager that binds a run ID to all log events in its scope.

    Example:
        with run_context("pr-1234"):
            logger.info("grading")  # Includes run_id="pr-1234"
    """

    def __init__(self, run_id: str | None = None) -> None:
        self.run_id = run_id or generate_run_id()
        self._token: Any = None

    def __enter__(self) -> str:
        self._token = _run_id.set(self.run_id)
        return self.run_id

    def __exit__(self, *args: Any) -> None:
        _run_id.reset(self._token)


def add_run_id(
    logger: WrappedLogger, method_name: str, event_dict: EventDict
) -> EventDict:
    """Add the run ID to log events if one is bound."""
    run_id = get_run_id()
    if run_id is not None:
        event_dict["run_id"] = run_id
    return event_dict


def add_common_fields(
    logger: WrappedLogger, method_name: str, event_dict: EventDict
) -> EventDict:
    """Add the scoregate version to log events."""
    event_dict.setdefault("scoregate_version", __version__)
    return event_dict


def set_module_log_level(module: str, level: int | str) -> None:
    """Set the log level for a specific module.

    Args:
        module: Module name (e.g., "scoregate.paths")
        level: Log level name or number
    """
    if isinstance(level, str):
        numeric_level: int = getattr(logging, level.upper(), logging.INFO)
    else:
        numeric_level = level
    _module_log_levels[module] = numeric_level


def get_module_log_level(module: str) -> int | None:
    """Get the log level override of a module, if any."""
    return _module_log_levels.get(module)


def filter_by_module_level(
    logger: WrappedLogger, method_name: str, event_dict: EventDict
) -> EventDict:
    """Drop events below the level configured for their module.

    The most specific module prefix wins.
    """
    logger_name = event_dict.get("logger", "")
    if not logger_name or not _module_log_levels:
        return event_dict

    threshold: int | None = None
    best_match = -1
    for module, level in _module_log_levels.items():
        if logger_name == module or logger_name.startswith(module + "."):
            if len(module) > best_match:
                best_match = len(module)
                threshold = level

    if threshold is None:
        return event_dict

    level_map = {
        "debug": logging.DEBUG,
        "info": logging.INFO,
        "warning": logging.WARNING,
        "warn": logging.WARNING,
        "error": logging.ERROR,
        "critical": logging.CRITICAL,
        "exception": logging.ERROR,
    }
    if level_map.get(method_name.lower(), logging.INFO) < threshold:
        raise structlog.DropEvent
    return event_dict


def _shared_processors() -> list[Processor]:
    return [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        add_run_id,
        add_common_fields,
        filter_by_module_level,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.UnicodeDecoder(),
        structlog.processors.format_exc_info,
    ]


def configure_logging(
    level: str | int = logging.INFO,
    json_output: bool | None = None,
    module_levels: dict[str, str | int] | None = None,
) -> None:
    """Configure structured logging for the application.

    Args:
        level: Global log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        json_output: Use JSON output format. If None, auto-detects:
                     True if stderr is not a TTY (pipelines), False otherwise
        module_levels: Dict of module name to log level for per-module config
    """
    if json_output is None:
        json_output = not sys.stderr.isatty()

    if isinstance(level, str):
        level = getattr(logging, level.upper(), logging.INFO)

    if module_levels:
        for module, mod_level in module_levels.items():
            set_module_log_level(module, mod_level)

    shared_processors = _shared_processors()

    structlog.configure(
        processors=shared_processors
        + [
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    if json_output:
        formatter = structlog.stdlib.ProcessorFormatter(
            processor=structlog.processors.JSONRenderer(),
            foreign_pre_chain=shared_processors,
        )
    else:
        formatter = structlog.stdlib.ProcessorFormatter(
            processor=structlog.dev.ConsoleRenderer(colors=True),
            foreign_pre_chain=shared_processors,
        )

    root_logger = logging.getLogger()
    root_logger.setLevel(level)

    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    # stdout carries the grading summary, logs go to stderr
    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setLevel(level)
    console_handler.setFormatter(formatter)
    root_logger.addHandler(console_handler)


def get_logger(name: str | None = None) -> structlog.stdlib.BoundLogger:
    """Get a structured logger instance.

    Example:
        logger = get_logger(__name__)
        logger.info("gate_evaluated", metric="line", passed=True)
    """
    return structlog.get_logger(name)


def reset_logging() -> None:
    """Reset logging configuration to defaults.

    Used by tests to ensure clean state between runs.
    """
    _module_log_levels.clear()
    _run_id.set(None)

    structlog.reset_defaults()

    root_logger = logging.getLogger()
    root_logger.setLevel(logging.WARNING)
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)
