"""Module aware matching of coverage paths to modified files."""

import logging
from collections.abc import Iterable
from pathlib import PurePath

from scoregate.config.models import BaseConfiguration, ToolConfiguration

logger = logging.getLogger(__name__)

# build output folders of Maven, Gradle and .NET, in lookup order
BUILD_FOLDER_MARKERS = ("/target/", "/build/", "/bin/", "/obj/")


def normalize_path(path: str | None) -> str:
    """Use forward slashes and strip leading and trailing slashes."""
    if not path:
        return ""
    return path.replace("\\", "/").strip("/")


def extract_module_root(report_file: str | PurePath | None) -> str | None:
    """Return the name of the module a report file was written into.

    The module is the folder that contains the build output folder, e.g.
    ``module-a`` for ``module-a/target/site/jacoco/jacoco.xml``.

    Returns:
        The module name, or None for reports outside of a build folder
    """
    if report_file is None:
        return None
    path = str(report_file).replace("\\", "/")
    for marker in BUILD_FOLDER_MARKERS:
        index = path.rfind(marker)
        if index > 0:
            before = path[:index]
            return before[before.rfind("/") + 1 :]
    return None


def _is_path_suffix(path: str, suffix: str) -> bool:
    return path.endswith("/" + suffix) or path.endswith(suffix)


def is_bidirectional_suffix_match(first: str, second: str) -> bool:
    """Whether one of the paths is a suffix of the other."""
    if first == second:
        return True
    if not first or not second:
        return False
    return _is_path_suffix(first, second) or _is_path_suffix(second, first)


class CoveragePathMatcher:
    """Finds the modified file a path of a coverage report refers to.

    Unlike ``PathMapper`` this matcher handles paths that are relative to the
    repository as well as paths that are relative to a source folder, and
    uses the location of the report file to tell apart equally named files of
    different modules.
    """

    def __init__(self, modified_paths: Iterable[str]) -> None:
        """
        Initialize the matcher.

        Args:
            modified_paths: Paths of the modified files; the iteration order
                decides between several matching candidates.
        """
        self.modified_paths: dict[str, None] = dict.fromkeys(modified_paths)

    def find_match(
        self,
        coverage_path: str | None,
        source_path: str | None = None,
        report_file: str | PurePath | None = None,
    ) -> str | None:
        """Return the modified file a coverage path refers to.

        Args:
            coverage_path: File path as stored in the coverage report
            source_path: Source folder the coverage path is relative to
            report_file: Location of the coverage report itself

        Returns:
            The matching modified path, or None if no modified file matches
        """
        normalized = normalize_path(coverage_path)
        prefix = normalize_path(source_path)

        if prefix and normalized:
            exact = f"{prefix}/{normalized}"
        else:
            exact = prefix or normalized
        if exact in self.modified_paths:
            return exact
        if not normalized:
            return None

        module_root: str | None = None
        module_resolved = False
        for diff_path in self.modified_paths:
            normalized_diff = normalize_path(diff_path)
            if not is_bidirectional_suffix_match(normalized, normalized_diff):
                continue

            if not module_resolved:
                module_root = normalize_path(extract_module_root(report_file))
                module_resolved = True
            if not module_root:
                return diff_path
            if self._is_module_match(normalized_diff, module_root):
                return diff_path

        logger.debug("No modified file matches coverage path '%s'", coverage_path)
        return None

    def find_tool_match(
        self,
        coverage_path: str | None,
        configuration: BaseConfiguration,
        tool: ToolConfiguration,
        report_file: str | PurePath | None = None,
    ) -> str | None:
        """Return the modified file a coverage path of a tool refers to.

        The coverage path is resolved against the source path of the tool or,
        if it has none, of its configuration.
        """
        return self.find_match(
            coverage_path, configuration.source_path_of(tool), report_file
        )

    @staticmethod
    def _is_module_match(diff_path: str, module_root: str) -> bool:
        return (
            f"{module_root}/" in diff_path
            or diff_path.startswith(f"{module_root}/")
            or diff_path == module_root
        )
