"""
표절 검사 서비스

[목적]
- 관리자 배치 작업: 대회 전체 제출을 쌍으로 비교해 의심 쌍 보고
- 두 제출 상세 비교

쌍 비교는 CPU 작업이므로 asyncio.to_thread로 이벤트 루프 밖에서 실행합니다.
스레드에는 ORM 객체 대신 스냅샷만 전달합니다.
"""
import asyncio
import logging
from typing import Any, Dict, List, Optional

from pydantic import BaseModel
from sqlalchemy.ext.asyncio import AsyncSession

from app.application.services.exceptions import InvalidInputError, NotFoundError
from app.core.config import settings
from app.domain.plagiarism import compare_codes, find_suspicious_pairs, to_percent
from app.infrastructure.persistence.models.submissions import Submission
from app.infrastructure.repositories import ContestRepository, SubmissionRepository


logger = logging.getLogger(__name__)


class SubmissionSnapshot(BaseModel):
    """비교용 제출 스냅샷"""
    id: int
    user_id: int
    question_id: int
    code: Optional[str] = None


def _user_entry(submission: Submission) -> Dict[str, Any]:
    return {
        "id": submission.user.id,
        "username": submission.user.username,
        "name": submission.user.name,
        "submissionId": submission.id,
        "submittedAt": submission.submitted_at,
    }


def _submission_detail(submission: Submission) -> Dict[str, Any]:
    return {
        "id": submission.id,
        "user": {
            "id": submission.user.id,
            "username": submission.user.username,
            "name": submission.user.name,
        },
        "question": {
            "id": submission.question.id,
            "title": submission.question.title,
        },
        "code": submission.code,
        "submittedAt": submission.submitted_at,
    }


class PlagiarismService:
    """표절 검사 서비스"""

    def __init__(self, db: AsyncSession):
        self.db = db
        self.submission_repo = SubmissionRepository(db)
        self.contest_repo = ContestRepository(db)

    async def scan_contest(self, contest_id: int, threshold: Optional[float] = None) -> Dict[str, Any]:
        """
        대회 전체 표절 검사

        Args:
            contest_id: 대회 ID
            threshold: 0~1 임계값 (기본값 PLAGIARISM_DEFAULT_THRESHOLD)

        Returns:
            {totalSubmissions, suspiciousPairs, threshold, results}
            results에는 코드 원문이 포함되지 않습니다.
        """
        if threshold is None:
            threshold = settings.PLAGIARISM_DEFAULT_THRESHOLD
        if not 0.0 <= threshold <= 1.0:
            raise InvalidInputError("threshold는 0과 1 사이여야 합니다.", {"threshold": threshold})

        contest = await self.contest_repo.get_contest_by_id(contest_id)
        if contest is None:
            raise NotFoundError("대회를 찾을 수 없습니다.", {"contest_id": contest_id})

        submissions = await self.submission_repo.get_contest_submissions(contest_id)
        by_id = {s.id: s for s in submissions}
        snapshots = [
            SubmissionSnapshot(id=s.id, user_id=s.user_id, question_id=s.question_id, code=s.code)
            for s in submissions
        ]

        logger.info(
            f"[PlagiarismService] 표절 검사 시작 - contest_id: {contest_id}, "
            f"submissions: {len(snapshots)}, threshold: {threshold}"
        )

        pairs = await asyncio.to_thread(find_suspicious_pairs, snapshots, threshold)

        results: List[Dict[str, Any]] = []
        for pair in pairs:
            first = by_id[pair.first.id]
            second = by_id[pair.second.id]
            results.append({
                "similarity": to_percent(pair.similarity.overall),
                "method": pair.similarity.method,
                "question": first.question.title,
                "users": [_user_entry(first), _user_entry(second)],
            })

        logger.info(
            f"[PlagiarismService] 표절 검사 완료 - contest_id: {contest_id}, suspicious pairs: {len(results)}"
        )

        return {
            "totalSubmissions": len(submissions),
            "suspiciousPairs": len(results),
            "threshold": threshold,
            "results": results,
        }

    async def compare_submissions(self, submission1_id: int, submission2_id: int) -> Dict[str, Any]:
        """두 제출 상세 비교 (코드 원문 포함)"""
        sub1 = await self.submission_repo.get_submission_by_id(submission1_id, include_details=True)
        sub2 = await self.submission_repo.get_submission_by_id(submission2_id, include_details=True)

        if sub1 is None or sub2 is None:
            raise NotFoundError(
                "제출을 찾을 수 없습니다.",
                {"submission1": submission1_id, "submission2": submission2_id},
            )

        similarity = compare_codes(sub1.code, sub2.code)

        return {
            "submission1": _submission_detail(sub1),
            "submission2": _submission_detail(sub2),
            "similarity": {
                "jaccard": to_percent(similarity.jaccard),
                "levenshtein": to_percent(similarity.levenshtein),
                "overall": to_percent(similarity.overall),
            },
            "method": similarity.method,
        }
