"""
API 의존성 주입
"""
from typing import Optional

from fastapi import Depends, Header, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.application.services.leaderboard_service import LeaderboardService
from app.application.services.plagiarism_service import PlagiarismService
from app.application.services.submission_service import SubmissionService
from app.core.config import settings
from app.domain.queue import QueueAdapter, create_queue_adapter
from app.infrastructure.judge0.client import Judge0Client
from app.infrastructure.persistence.session import get_db


_judge_client: Optional[Judge0Client] = None


def get_judge_client() -> Judge0Client:
    """프로세스 공용 Judge0 클라이언트 (커넥션 풀 재사용)"""
    global _judge_client
    if _judge_client is None:
        _judge_client = Judge0Client()
    return _judge_client


async def close_judge_client():
    """종료 시 Judge0 클라이언트 정리"""
    global _judge_client
    if _judge_client is not None:
        await _judge_client.close()
        _judge_client = None


async def get_submission_service(
    db: AsyncSession = Depends(get_db),
    judge_client: Judge0Client = Depends(get_judge_client),
) -> SubmissionService:
    """SubmissionService 의존성 주입"""
    return SubmissionService(db, judge_client)


async def get_leaderboard_service(db: AsyncSession = Depends(get_db)) -> LeaderboardService:
    """LeaderboardService 의존성 주입"""
    return LeaderboardService(db)


async def get_plagiarism_service(db: AsyncSession = Depends(get_db)) -> PlagiarismService:
    """PlagiarismService 의존성 주입"""
    return PlagiarismService(db)


def get_queue() -> QueueAdapter:
    """채점 큐 의존성 주입"""
    return create_queue_adapter()


async def require_admin(x_admin_key: Optional[str] = Header(None, alias="X-Admin-Key")) -> None:
    """
    관리자 API 키 확인

    ADMIN_API_KEY가 설정되지 않았으면 관리자 API는 모두 거부됩니다.
    """
    if not settings.ADMIN_API_KEY or x_admin_key != settings.ADMIN_API_KEY:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail={
                "error": True,
                "error_code": "FORBIDDEN",
                "error_message": "관리자 권한이 필요합니다."
            }
        )
