"""
대회 API 라우터
리더보드 및 사용자 제출 요약
"""
import logging

from fastapi import APIRouter, Depends

from app.application.services.exceptions import ServiceError
from app.application.services.leaderboard_service import LeaderboardService
from app.presentation.api.dependencies import get_leaderboard_service
from app.presentation.api.errors import internal_error, to_http_exception
from app.presentation.schemas.common import ErrorResponse
from app.presentation.schemas.leaderboard import LeaderboardEntryResponse, LeaderboardResponse
from app.presentation.schemas.submission import SubmissionSummary, UserSubmissionsResponse


router = APIRouter(prefix="/contests", tags=["Contests"])
logger = logging.getLogger(__name__)


@router.get(
    "/{contest_id}/leaderboard",
    response_model=LeaderboardResponse,
    responses={
        404: {"model": ErrorResponse, "description": "대회를 찾을 수 없음"}
    },
    summary="리더보드 조회",
    description="총점 내림차순, 동점이면 최고 점수를 먼저 달성한 사용자가 앞섭니다."
)
async def get_leaderboard(
    contest_id: int,
    service: LeaderboardService = Depends(get_leaderboard_service)
) -> LeaderboardResponse:
    """리더보드 조회"""
    try:
        ranked = await service.get_leaderboard(contest_id)
    except ServiceError as e:
        raise to_http_exception(e)
    except Exception as e:
        logger.error(f"[Leaderboard] 오류: {str(e)}", exc_info=True)
        raise internal_error(f"리더보드 조회 중 오류가 발생했습니다: {str(e)}")

    return LeaderboardResponse(
        contestId=contest_id,
        entries=[
            LeaderboardEntryResponse(
                rank=entry.rank,
                userId=entry.user_id,
                username=entry.username,
                totalScore=entry.total_score,
                lastSubmissionTime=entry.last_submission_time,
            )
            for entry in ranked
        ],
    )


@router.get(
    "/{contest_id}/users/{user_id}/submissions",
    response_model=UserSubmissionsResponse,
    responses={
        404: {"model": ErrorResponse, "description": "대회를 찾을 수 없음"}
    },
    summary="사용자 제출 요약",
    description="최신순 제출 목록, 리더보드 기준 총점, 현재 순위를 반환합니다."
)
async def get_user_submissions(
    contest_id: int,
    user_id: int,
    service: LeaderboardService = Depends(get_leaderboard_service)
) -> UserSubmissionsResponse:
    """사용자 제출 요약"""
    try:
        summary = await service.get_user_summary(contest_id, user_id)
    except ServiceError as e:
        raise to_http_exception(e)
    except Exception as e:
        logger.error(f"[UserSubmissions] 오류: {str(e)}", exc_info=True)
        raise internal_error(f"제출 목록 조회 중 오류가 발생했습니다: {str(e)}")

    return UserSubmissionsResponse(
        submissions=[
            SubmissionSummary(
                id=sub.id,
                questionId=sub.question_id,
                questionTitle=sub.question.title if sub.question else None,
                language=sub.language,
                status=sub.status.value,
                score=sub.score,
                passedTests=sub.passed_tests,
                totalTests=sub.total_tests,
                runtime=sub.runtime,
                memory=sub.memory,
                submittedAt=sub.submitted_at,
                rejudgedAt=sub.rejudged_at,
            )
            for sub in summary["submissions"]
        ],
        totalScore=summary["total_score"],
        rank=summary["rank"],
    )
