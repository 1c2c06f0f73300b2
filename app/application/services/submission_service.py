"""
제출 서비스 (Submission Service)

[목적]
- 코드 제출을 검증하고 Judge0로 채점한 뒤 결과를 저장
- 저장 후 리더보드 재계산

[처리 흐름]
1. 검증: 코드/언어 → 사용자 → 대회 (진행 시간) → 문제 → 테스트 케이스
   (검증 실패는 Judge0 호출 전에 거부)
2. VerdictAggregator로 순서대로 채점 (조기 중단 포함)
3. submissions + submission_runs 저장 (같은 트랜잭션)
4. LeaderboardService.update_leaderboard()

[재채점]
- 숨김 케이스만 다시 실행하고 공개 케이스 결과는 저장된 submission_runs에서 가져옴
- ERROR 상태 제출은 전체 재실행
"""
import logging
from datetime import datetime
from typing import Any, List, Optional, Tuple

from pydantic import BaseModel
from sqlalchemy.ext.asyncio import AsyncSession

from app.application.services.exceptions import (
    ContestNotActiveError,
    NotFoundError,
    SubmissionValidationError,
)
from app.application.services.leaderboard_service import LeaderboardService
from app.core.config import settings
from app.core.time import utcnow
from app.domain.judging import JudgeOutcome, VerdictAggregator, build_test_plan
from app.infrastructure.judge0.utils import (
    UnsupportedLanguageError,
    resolve_language_id,
    validate_code_format,
)
from app.infrastructure.persistence.models.contests import Question, TestCase
from app.infrastructure.repositories import (
    ContestRepository,
    SubmissionRepository,
    UserRepository,
)


logger = logging.getLogger(__name__)


class JudgedSubmission(BaseModel):
    """저장된 제출과 채점 결과"""
    submission_id: int
    user_id: int
    contest_id: int
    question_id: int
    submitted_at: datetime
    outcome: JudgeOutcome


class SubmissionService:
    """
    제출 채점 서비스

    [구성 요소]
    - db: 요청 단위 AsyncSession (서비스가 커밋 경계를 관리)
    - aggregator: Judge0 클라이언트를 감싼 VerdictAggregator
    - leaderboard: 저장 후 리더보드 재계산
    """

    def __init__(self, db: AsyncSession, judge_client: Any):
        self.db = db
        self.aggregator = VerdictAggregator(
            judge_client,
            max_attempts=settings.JUDGE0_POLL_MAX_ATTEMPTS,
            interval_ms=settings.JUDGE0_POLL_INTERVAL_MS,
        )
        self.submission_repo = SubmissionRepository(db)
        self.contest_repo = ContestRepository(db)
        self.user_repo = UserRepository(db)
        self.leaderboard = LeaderboardService(db)

    async def validate_submission(
        self,
        user_id: int,
        contest_id: int,
        question_id: int,
        code: Optional[str],
        language: Optional[str],
    ) -> Tuple[Question, List[TestCase]]:
        """
        제출 검증 (Judge0 호출 없음)

        Returns:
            (문제, 테스트 케이스 목록)

        Raises:
            SubmissionValidationError: 코드/언어 오류, 테스트 케이스 없음
            NotFoundError: 사용자/대회/문제 없음
            ContestNotActiveError: 대회 진행 시간이 아님
        """
        is_valid, message = validate_code_format(code)
        if not is_valid:
            raise SubmissionValidationError(message or "코드가 올바르지 않습니다.")

        try:
            resolve_language_id(language)
        except UnsupportedLanguageError as e:
            raise SubmissionValidationError(str(e), {"language": language}) from e

        user = await self.user_repo.get_user_by_id(user_id)
        if user is None:
            raise NotFoundError("사용자를 찾을 수 없습니다.", {"user_id": user_id})

        contest = await self.contest_repo.get_contest_by_id(contest_id)
        if contest is None:
            raise NotFoundError("대회를 찾을 수 없습니다.", {"contest_id": contest_id})

        if settings.ENFORCE_CONTEST_WINDOW and not contest.is_active(utcnow()):
            raise ContestNotActiveError(
                "대회 진행 시간이 아닙니다.",
                {
                    "contest_id": contest_id,
                    "start_time": contest.start_time.isoformat(),
                    "end_time": contest.end_time.isoformat(),
                },
            )

        question = await self.contest_repo.get_question(contest_id, question_id)
        if question is None:
            raise NotFoundError(
                "문제를 찾을 수 없습니다.",
                {"contest_id": contest_id, "question_id": question_id},
            )

        test_cases = await self.contest_repo.get_test_cases(question_id)
        if not build_test_plan(question, test_cases):
            raise SubmissionValidationError(
                "채점할 테스트 케이스가 없습니다.",
                {"question_id": question_id},
            )

        return question, test_cases

    async def submit(
        self,
        user_id: int,
        contest_id: int,
        question_id: int,
        code: str,
        language: str,
    ) -> JudgedSubmission:
        """
        코드 제출 및 채점

        Returns:
            JudgedSubmission (인프라 실패 시 outcome.status == ERROR 로 저장됨)
        """
        question, test_cases = await self.validate_submission(
            user_id, contest_id, question_id, code, language
        )

        logger.info(
            f"[SubmissionService] 채점 시작 - user_id: {user_id}, contest_id: {contest_id}, "
            f"question_id: {question_id}, language: {language}"
        )

        outcome = await self.aggregator.judge_submission(code, language, question, test_cases)

        try:
            submission = await self.submission_repo.create_submission(
                user_id=user_id,
                contest_id=contest_id,
                question_id=question_id,
                code=code,
                language=language,
                outcome=outcome,
            )
            await self.db.commit()
        except Exception:
            await self.db.rollback()
            raise

        logger.info(
            f"[SubmissionService] 제출 저장 - submission_id: {submission.id}, "
            f"status: {outcome.status.value}, score: {outcome.score}"
        )

        await self._refresh_leaderboard(user_id, contest_id)

        return JudgedSubmission(
            submission_id=submission.id,
            user_id=user_id,
            contest_id=contest_id,
            question_id=question_id,
            submitted_at=submission.submitted_at,
            outcome=outcome,
        )

    async def rejudge(self, submission_id: int) -> JudgedSubmission:
        """
        제출 재채점 (관리자)

        Raises:
            NotFoundError: 제출 또는 문제 없음
            SubmissionValidationError: 저장된 언어가 더 이상 지원되지 않음
        """
        submission = await self.submission_repo.get_submission_by_id(submission_id, include_runs=True)
        if submission is None:
            raise NotFoundError("제출을 찾을 수 없습니다.", {"submission_id": submission_id})

        question = await self.contest_repo.get_question_by_id(submission.question_id)
        if question is None:
            raise NotFoundError("문제를 찾을 수 없습니다.", {"question_id": submission.question_id})

        test_cases = await self.contest_repo.get_test_cases(question.id)

        logger.info(
            f"[SubmissionService] 재채점 시작 - submission_id: {submission_id}, "
            f"current_status: {submission.status.value}"
        )

        try:
            outcome = await self.aggregator.rejudge_submission(
                submission.code,
                submission.language,
                question,
                test_cases,
                previous_runs=submission.runs,
                current_status=submission.status,
            )
        except UnsupportedLanguageError as e:
            raise SubmissionValidationError(str(e), {"language": submission.language}) from e

        try:
            await self.submission_repo.apply_rejudge(submission, outcome)
            await self.db.commit()
        except Exception:
            await self.db.rollback()
            raise

        logger.info(
            f"[SubmissionService] 재채점 완료 - submission_id: {submission_id}, "
            f"status: {outcome.status.value}, score: {outcome.score}"
        )

        await self._refresh_leaderboard(submission.user_id, submission.contest_id)

        return JudgedSubmission(
            submission_id=submission.id,
            user_id=submission.user_id,
            contest_id=submission.contest_id,
            question_id=submission.question_id,
            submitted_at=submission.submitted_at,
            outcome=outcome,
        )

    async def _refresh_leaderboard(self, user_id: int, contest_id: int) -> None:
        """
        리더보드 재계산

        제출은 이미 커밋되었으므로 실패해도 제출 결과는 유지됩니다.
        다음 제출 시 이력 전체로 다시 계산되어 수렴합니다.
        """
        try:
            await self.leaderboard.update_leaderboard(user_id, contest_id)
        except Exception as e:
            logger.error(
                f"[SubmissionService] 리더보드 갱신 실패 - user_id: {user_id}, "
                f"contest_id: {contest_id}, error: {str(e)}",
                exc_info=True
            )
