"""Longest-suffix mapping of SCM paths to report paths."""

import logging
from collections.abc import Iterable

from scoregate.core.exceptions import AmbiguousMappingError

logger = logging.getLogger(__name__)

UNMAPPED = ""


class PathMapper:
    """Maps the paths of an SCM diff to the relative paths of a report.

    Coverage tools store file names relative to a source folder
    (``com/x/Foo.java``) while the SCM reports them relative to the
    repository root (``module/src/main/java/com/x/Foo.java``). Each SCM path
    is mapped to the longest report path it ends with.
    """

    def map_scm_to_report_paths(
        self, scm_paths: Iterable[str], report_paths: Iterable[str]
    ) -> dict[str, str]:
        """Map every SCM path to the longest report path that is its suffix.

        Equally long candidates are resolved to the lexicographically smallest
        one, so the result does not depend on the order of the report paths.

        Args:
            scm_paths: Paths of the modified files, relative to the repository
            report_paths: Relative paths of the files of a report

        Returns:
            Mapping of each SCM path to its report path, or to an empty string
            if no report path matches

        Raises:
            AmbiguousMappingError: If two SCM paths map to the same report path
        """
        candidates = sorted(set(report_paths))
        mapping: dict[str, str] = {}
        for scm_path in scm_paths:
            best = UNMAPPED
            for report_path in candidates:
                if report_path and scm_path.endswith(report_path):
                    # candidates are sorted, so ties keep the smallest
                    if len(report_path) > len(best):
                        best = report_path
            mapping[scm_path] = best

        self._verify_unique_mapping(mapping)
        logger.debug(
            "Mapped %d of %d SCM paths to report paths",
            sum(1 for path in mapping.values() if path),
            len(mapping),
        )
        return mapping

    @staticmethod
    def _verify_unique_mapping(mapping: dict[str, str]) -> None:
        sources: dict[str, list[str]] = {}
        for scm_path, report_path in mapping.items():
            if report_path:
                sources.setdefault(report_path, []).append(scm_path)
        for report_path, scm_paths in sources.items():
            if len(scm_paths) > 1:
                raise AmbiguousMappingError(report_path, scm_paths)
