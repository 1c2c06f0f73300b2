"""
제출 관련 Repository
"""
from typing import Iterable, List, Optional

from sqlalchemy import and_, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from app.core.time import utcnow
from app.domain.judging.schemas import CaseResult, JudgeOutcome
from app.infrastructure.persistence.models.submissions import Submission, SubmissionRun


class SubmissionRepository:
    """제출 데이터 접근 계층"""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def get_submission_by_id(
        self,
        submission_id: int,
        include_runs: bool = False,
        include_details: bool = False
    ) -> Optional[Submission]:
        """제출 ID로 조회 (include_details: 사용자/문제 함께 로드)"""
        query = select(Submission).where(Submission.id == submission_id)

        if include_runs:
            query = query.options(selectinload(Submission.runs))
        if include_details:
            query = query.options(
                selectinload(Submission.user),
                selectinload(Submission.question),
            )

        result = await self.db.execute(query)
        return result.scalar_one_or_none()

    async def get_user_submissions(
        self,
        contest_id: int,
        user_id: int,
        newest_first: bool = False
    ) -> List[Submission]:
        """대회 내 사용자의 모든 제출 조회"""
        order = Submission.submitted_at.desc() if newest_first else Submission.submitted_at.asc()
        query = select(Submission).where(
            and_(
                Submission.contest_id == contest_id,
                Submission.user_id == user_id
            )
        ).options(selectinload(Submission.question)).order_by(order, Submission.id)

        result = await self.db.execute(query)
        return list(result.scalars().all())

    async def get_contest_submissions(self, contest_id: int) -> List[Submission]:
        """대회의 모든 제출 조회 (표절 검사용, 사용자/문제 포함)"""
        query = select(Submission).where(
            Submission.contest_id == contest_id
        ).options(
            selectinload(Submission.user),
            selectinload(Submission.question),
        ).order_by(Submission.submitted_at, Submission.id)

        result = await self.db.execute(query)
        return list(result.scalars().all())

    @staticmethod
    def _build_runs(results: Iterable[CaseResult]) -> List[SubmissionRun]:
        return [
            SubmissionRun(
                case_index=r.index,
                test_case_id=r.test_case_id,
                is_hidden=r.is_hidden,
                verdict=r.verdict,
                time=r.time,
                memory=r.memory,
                status_description=r.status_description,
                error=r.error,
                created_at=utcnow(),
            )
            for r in results
        ]

    async def create_submission(
        self,
        user_id: int,
        contest_id: int,
        question_id: int,
        code: str,
        language: str,
        outcome: JudgeOutcome
    ) -> Submission:
        """채점 결과와 케이스별 실행 결과를 함께 저장"""
        submission = Submission(
            user_id=user_id,
            contest_id=contest_id,
            question_id=question_id,
            code=code,
            language=language,
            status=outcome.status,
            score=outcome.score,
            total_tests=outcome.total_tests,
            passed_tests=outcome.passed_tests,
            runtime=outcome.runtime,
            memory=outcome.memory,
            submitted_at=utcnow(),
            runs=self._build_runs(outcome.results),
        )
        self.db.add(submission)
        await self.db.flush()
        return submission

    async def apply_rejudge(self, submission: Submission, outcome: JudgeOutcome) -> Submission:
        """
        재채점 결과 반영

        submission.runs가 로드된 상태여야 합니다 (include_runs=True).
        기존 실행 결과는 delete-orphan으로 삭제되고 새 결과로 교체됩니다.
        """
        submission.status = outcome.status
        submission.score = outcome.score
        submission.total_tests = outcome.total_tests
        submission.passed_tests = outcome.passed_tests
        submission.runtime = outcome.runtime
        submission.memory = outcome.memory
        submission.rejudged_at = utcnow()
        submission.runs = self._build_runs(outcome.results)

        await self.db.flush()
        return submission
