"""Correlation of SCM diff paths with report paths."""

from .mapper import UNMAPPED, PathMapper
from .matcher import (
    CoveragePathMatcher,
    extract_module_root,
    is_bidirectional_suffix_match,
    normalize_path,
)

__all__ = [
    "CoveragePathMatcher",
    "PathMapper",
    "UNMAPPED",
    "extract_module_root",
    "is_bidirectional_suffix_match",
    "normalize_path",
]
