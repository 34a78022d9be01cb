"""Scoring: score trees, their builders and the aggregated grade."""

from .aggregated import AggregatedScore, ReportReader
from .builder import ScoreRequest, build_aggregate, build_leaf
from .models import Score, ScoreDetail
from .strategies import STRATEGIES, CategoryStrategy, get_strategy

__all__ = [
    "AggregatedScore",
    "CategoryStrategy",
    "ReportReader",
    "STRATEGIES",
    "Score",
    "ScoreDetail",
    "ScoreRequest",
    "build_aggregate",
    "build_leaf",
    "get_strategy",
]
