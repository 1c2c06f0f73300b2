"""
리더보드 도메인 모듈
"""
from app.domain.leaderboard.standings import (
    QuestionBest,
    RankedEntry,
    Standing,
    compute_standing,
    rank_entries,
)

__all__ = [
    "QuestionBest",
    "RankedEntry",
    "Standing",
    "compute_standing",
    "rank_entries",
]
