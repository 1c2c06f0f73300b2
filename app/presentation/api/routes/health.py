"""
헬스 체크 API 라우터
"""
from fastapi import APIRouter, Depends

from app.presentation.schemas.common import HealthResponse
from app.presentation.api.dependencies import get_judge_client, get_queue
from app.core.config import settings
from app.domain.queue import QueueAdapter
from app.infrastructure.cache.redis_client import redis_client
from app.infrastructure.judge0.client import Judge0Client
from app.infrastructure.persistence import session as db_session


router = APIRouter(tags=["Health"])


@router.get(
    "/health",
    response_model=HealthResponse,
    summary="헬스 체크",
    description="서버 및 의존 서비스(PostgreSQL, Redis, Judge0) 상태를 확인합니다."
)
async def health_check(
    judge_client: Judge0Client = Depends(get_judge_client),
    queue: QueueAdapter = Depends(get_queue)
) -> HealthResponse:
    """헬스 체크"""
    components = {}
    details = {}

    # Redis 상태 확인 (Redis 큐를 사용하지 않으면 확인 불가)
    if settings.USE_REDIS_QUEUE:
        components["redis"] = await redis_client.ping()
    else:
        components["redis"] = None

    components["postgres"] = await db_session.check_db_connection()

    # Judge0 연결 확인 (GET /about)
    components["judge0"] = await judge_client.check_connection()

    # 채점 큐 대기 작업 수
    try:
        details["pending_jobs"] = await queue.pending_count()
        components["judge_queue"] = True
    except Exception:
        components["judge_queue"] = False

    # 전체 상태 (확인 불가(None) 항목 제외)
    critical_components = {k: v for k, v in components.items() if v is not None}
    overall_status = "ok" if all(critical_components.values()) else "degraded"

    return HealthResponse(
        status=overall_status,
        version=settings.APP_VERSION,
        components=components,
        details=details,
    )


@router.get(
    "/info",
    summary="API 정보",
    description="API 정보를 반환합니다."
)
async def api_info():
    """API 정보 엔드포인트"""
    return {
        "name": settings.APP_NAME,
        "version": settings.APP_VERSION,
        "docs": "/docs",
        "health": "/health",
    }
