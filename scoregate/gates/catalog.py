"""Catalog of static analysis metrics known to the quality gate engine."""

from typing import Protocol, runtime_checkable


@runtime_checkable
class AnalysisMetricCatalog(Protocol):
    """Read-only lookup of static analysis metric names.

    Quality gates on analysis metrics count warnings, so lower values are
    better.
    """

    def is_known_analysis_metric(self, name: str) -> bool: ...

    def get_display_name(self, name: str) -> str | None: ...


_BUILT_IN_TOOLS: dict[str, str] = {
    "checkstyle": "CheckStyle",
    "pmd": "PMD",
    "spotbugs": "SpotBugs",
    "findbugs": "FindBugs",
    "error-prone": "Error Prone",
    "cpd": "CPD",
    "owasp-dependency-check": "OWASP Dependency Check",
    "ruff": "Ruff",
    "pylint": "Pylint",
    "flake8": "Flake8",
    "mypy": "Mypy",
    "bandit": "Bandit",
    "eslint": "ESLint",
    "revapi": "Revapi",
    "java": "Java Compiler",
    "javadoc-warnings": "JavaDoc",
}

_GENERIC_METRICS: dict[str, str] = {
    "warnings": "Warnings",
    "bugs": "Bugs",
    "duplications": "Duplicated Code",
    "vulnerabilities": "Vulnerabilities",
}


class AnalysisToolRegistry:
    """
    Registry of static analysis tools.

    Knows the IDs of common analysis tools and the generic analysis metric
    names; further tools can be registered at runtime.
    """

    def __init__(self) -> None:
        """Initialize the registry with the built-in tools."""
        self._tools: dict[str, str] = {}

        for tool_id, display_name in _BUILT_IN_TOOLS.items():
            self.register(tool_id, display_name)
        for metric, display_name in _GENERIC_METRICS.items():
            self.register(metric, display_name)

    def register(self, tool_id: str, display_name: str | None = None) -> None:
        """
        Register an analysis tool.

        Args:
            tool_id: ID of the tool, as used for metric keys.
            display_name: Human readable name; defaults to the ID.
        """
        self._tools[tool_id.strip().lower()] = display_name or tool_id

    def unregister(self, tool_id: str) -> bool:
        """
        Unregister an analysis tool.

        Returns:
            True if the tool was removed, False if it didn't exist.
        """
        return self._tools.pop(tool_id.strip().lower(), None) is not None

    def is_registered(self, tool_id: str) -> bool:
        return tool_id.strip().lower() in self._tools

    def is_known_analysis_metric(self, name: str) -> bool:
        return self.is_registered(name)

    def get_display_name(self, name: str) -> str | None:
        """Return the display name of a tool, or None for unknown tools."""
        return self._tools.get(name.strip().lower())

    def list_tools(self) -> list[str]:
        return list(self._tools.keys())


_default_registry: AnalysisToolRegistry | None = None


def get_registry() -> AnalysisToolRegistry:
    """
    Get the default analysis tool registry.

    Returns:
        Shared AnalysisToolRegistry instance.
    """
    global _default_registry
    if _default_registry is None:
        _default_registry = AnalysisToolRegistry()
    return _default_registry
