"""Coverage of the lines modified by a change."""

import logging
from collections.abc import Iterable, Mapping

from scoregate.paths.mapper import UNMAPPED, PathMapper
from scoregate.reports.metrics import Metric
from scoregate.reports.models import Coverage, ReportNode

logger = logging.getLogger(__name__)

NOT_APPLICABLE = -1


class PatchCoverage:
    """Marks modified lines on a coverage tree and measures their coverage."""

    def __init__(self, mapper: PathMapper | None = None) -> None:
        self.mapper = mapper or PathMapper()

    def mark_modified_lines(
        self, root: ReportNode, scm_path_to_lines: Mapping[str, Iterable[int]]
    ) -> int:
        """Mark the changed lines of a diff on the file nodes of a tree.

        SCM paths are mapped to report paths once for the whole diff; lines of
        unmapped paths and non-positive line numbers are ignored.

        Args:
            root: Root of the coverage tree
            scm_path_to_lines: Changed line numbers per SCM path

        Returns:
            Number of file nodes that received modified lines

        Raises:
            AmbiguousMappingError: If two SCM paths map to the same report file
        """
        if not scm_path_to_lines:
            return 0

        # file nodes without a path can never be the target of a diff
        files_by_path = {
            node.relative_path: node
            for node in root.all_file_nodes()
            if node.relative_path
        }
        mapping = self.mapper.map_scm_to_report_paths(
            scm_path_to_lines.keys(), files_by_path.keys()
        )

        marked = 0
        for scm_path, lines in scm_path_to_lines.items():
            report_path = mapping.get(scm_path, UNMAPPED)
            if report_path == UNMAPPED:
                continue
            files_by_path[report_path].add_modified_lines(lines)
            marked += 1

        logger.info(
            "Marked modified lines of %d of %d changed files",
            marked,
            len(scm_path_to_lines),
        )
        return marked

    def compute_patch_line_percentage(self, root: ReportNode) -> int:
        """Return the line coverage of the modified lines in percent.

        Returns:
            The covered percentage, or -1 if no lines are marked as modified
            or no line coverage is available for them
        """
        if not root.has_modified_lines():
            return NOT_APPLICABLE
        filtered = root.filter_by_modified_lines()
        if filtered is None:
            return NOT_APPLICABLE
        value = filtered.get_value(Metric.LINE)
        if isinstance(value, Coverage) and value.is_set:
            return value.covered_percentage
        return NOT_APPLICABLE


def mark_modified_lines(
    root: ReportNode, scm_path_to_lines: Mapping[str, Iterable[int]]
) -> int:
    return PatchCoverage().mark_modified_lines(root, scm_path_to_lines)


def compute_patch_line_percentage(root: ReportNode) -> int:
    return PatchCoverage().compute_patch_line_percentage(root)
