"""
채점 도메인 모듈
"""
from app.domain.judging.aggregator import (
    VerdictAggregator,
    build_test_plan,
    calculate_score,
    classify_execution,
    round_half_up,
)
from app.domain.judging.schemas import CaseResult, JudgeOutcome, PlannedCase

__all__ = [
    "VerdictAggregator",
    "build_test_plan",
    "calculate_score",
    "classify_execution",
    "round_half_up",
    "CaseResult",
    "JudgeOutcome",
    "PlannedCase",
]
