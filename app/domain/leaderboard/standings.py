"""
리더보드 계산 로직

[규칙]
- ACCEPTED 제출만 집계
- 문제별 최고 점수의 합 = total_score
- 문제별 최고 점수를 처음 달성한 시각 중 가장 이른 시각 = last_submission_time
  (가장 최근 활동 시각이 아님, 동점자 중 먼저 달성한 사람이 앞섬)
- 정렬: total_score 내림차순 → last_submission_time 오름차순 (None은 맨 뒤)
"""
from datetime import datetime
from typing import Any, Dict, Iterable, List, Optional

from pydantic import BaseModel, Field

from app.infrastructure.persistence.models.enums import SubmissionStatusEnum


class QuestionBest(BaseModel):
    """문제별 최고 기록"""
    question_id: int
    score: int
    submission_id: Optional[int] = None
    submitted_at: datetime


class Standing(BaseModel):
    """사용자 1명의 대회 집계 결과"""
    total_score: int = 0
    last_submission_time: Optional[datetime] = None
    question_bests: Dict[int, QuestionBest] = Field(default_factory=dict)


class RankedEntry(BaseModel):
    """순위가 매겨진 리더보드 항목"""
    rank: int
    user_id: int
    username: str
    total_score: int
    last_submission_time: Optional[datetime] = None


def _is_accepted(status: Any) -> bool:
    return status == SubmissionStatusEnum.ACCEPTED or status == SubmissionStatusEnum.ACCEPTED.value


def compute_standing(submissions: Iterable[Any]) -> Standing:
    """
    제출 이력으로 사용자 집계 계산

    Args:
        submissions: question_id / score / status / submitted_at 속성을 가진 제출 목록

    Returns:
        Standing (ACCEPTED 제출이 없으면 0점, last_submission_time=None)
    """
    bests: Dict[int, QuestionBest] = {}

    for sub in submissions:
        if not _is_accepted(sub.status):
            continue

        current = bests.get(sub.question_id)
        score = sub.score or 0
        if (
            current is None
            or score > current.score
            or (score == current.score and sub.submitted_at < current.submitted_at)
        ):
            bests[sub.question_id] = QuestionBest(
                question_id=sub.question_id,
                score=score,
                submission_id=getattr(sub, "id", None),
                submitted_at=sub.submitted_at,
            )

    if not bests:
        return Standing()

    return Standing(
        total_score=sum(b.score for b in bests.values()),
        last_submission_time=min(b.submitted_at for b in bests.values()),
        question_bests=bests,
    )


def rank_entries(entries: Iterable[Any]) -> List[RankedEntry]:
    """
    리더보드 정렬 및 순위 부여 (1부터, 빈 번호/중복 없음)

    동점(점수와 시각이 같음)은 입력 순서를 유지합니다.
    """
    entries = list(entries)
    # 안정 정렬 두 번: 보조 키 먼저, 주 키 나중
    by_time = sorted(
        entries,
        key=lambda e: (e.last_submission_time is None, e.last_submission_time or datetime.min),
    )
    ordered = sorted(by_time, key=lambda e: e.total_score, reverse=True)

    return [
        RankedEntry(
            rank=position,
            user_id=entry.user_id,
            username=entry.username,
            total_score=entry.total_score,
            last_submission_time=entry.last_submission_time,
        )
        for position, entry in enumerate(ordered, start=1)
    ]
