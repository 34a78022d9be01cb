"""Patch coverage: coverage restricted to the lines of a change."""

from .patch import (
    NOT_APPLICABLE,
    PatchCoverage,
    compute_patch_line_percentage,
    mark_modified_lines,
)

__all__ = [
    "NOT_APPLICABLE",
    "PatchCoverage",
    "compute_patch_line_percentage",
    "mark_modified_lines",
]
