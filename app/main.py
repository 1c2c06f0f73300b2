"""
FastAPI 메인 애플리케이션
Contest Judge Worker

[목적]
- 프로그래밍 대회 채점 서비스의 진입점
- Judge0로 코드를 채점하고 리더보드와 표절 검사를 제공

[주요 역할]
1. 애플리케이션 초기화 (lifespan 이벤트)
   - Redis 연결 (채점 큐, USE_REDIS_QUEUE=true 일 때)
   - PostgreSQL 연결 (제출/리더보드 저장)
   - 내장 Worker 실행 (RUN_EMBEDDED_WORKER=true 일 때)

2. API 라우터 등록
   - /api/submissions: 제출/재채점/비동기 작업
   - /api/contests: 리더보드/사용자 제출 요약
   - /api/plagiarism: 표절 검사 (관리자)
   - /health: 헬스 체크

3. CORS 설정 및 미들웨어 구성

[실행 방법]
1. 직접 실행: python app/main.py
2. uvicorn: uvicorn app.main:app --reload
3. 스크립트: python scripts/run_dev.py
"""
import asyncio
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from app.core.config import settings
from app.infrastructure.cache.redis_client import redis_client
from app.infrastructure.persistence.session import init_db, close_db
from app.presentation.api.dependencies import close_judge_client
from app.presentation.api.routes import (
    submissions_router,
    contests_router,
    plagiarism_router,
    health_router,
)


# 로깅 설정
# DEBUG 모드에서는 상세 로그, 프로덕션에서는 INFO 레벨로 설정
logging.basicConfig(
    level=logging.DEBUG if settings.DEBUG else logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    애플리케이션 라이프사이클 관리

    [Startup 단계]
    1. Redis 연결 (USE_REDIS_QUEUE=true)
       - 채점 대기열 (judge_queue:pending)
       - 작업 상태/결과 (judge_status:*, judge_result:*)
    2. PostgreSQL 연결 및 테이블 생성
    3. 내장 Worker 시작 (RUN_EMBEDDED_WORKER=true)

    [Shutdown 단계]
    - Worker 중지, Judge0 클라이언트/DB/Redis 연결 정리

    [에러 처리]
    - Redis 연결 실패 시: 애플리케이션 시작 중단 (큐 사용 시 필수)
    - PostgreSQL 연결 실패 시: 경고 로그만 출력
    """
    # ===== Startup =====
    logger.info(f"Starting {settings.APP_NAME}...")

    if settings.USE_REDIS_QUEUE:
        try:
            await redis_client.connect()
            logger.info("Redis 연결 성공")
        except Exception as e:
            logger.error(f"Redis 연결 실패: {str(e)}")
            raise

    try:
        await init_db()
        logger.info("PostgreSQL 연결 성공")
    except Exception as e:
        logger.warning(f"PostgreSQL 연결 실패: {str(e)}")

    worker_task = None
    if settings.RUN_EMBEDDED_WORKER:
        from app.application.workers.judge_worker import JudgeWorker

        worker_task = asyncio.create_task(JudgeWorker().start())
        logger.info("[JudgeWorker] 내장 Worker 시작")

    logger.info(f"서버 시작 완료: http://{settings.API_HOST}:{settings.API_PORT}")

    yield  # 애플리케이션 실행

    # ===== Shutdown =====
    logger.info("Shutting down...")

    if worker_task is not None:
        worker_task.cancel()
        try:
            await worker_task
        except asyncio.CancelledError:
            pass

    await close_judge_client()
    if settings.USE_REDIS_QUEUE:
        await redis_client.close()
    await close_db()

    logger.info("서버 종료 완료")


# ===== FastAPI 앱 생성 =====
app = FastAPI(
    title=settings.APP_NAME,
    version=settings.APP_VERSION,
    description="""
## Contest Judge Worker

Judge0 기반 프로그래밍 대회 채점 서비스

### 기능
- 📝 코드 제출 및 채점 (동기 / 비동기 작업)
- 🔁 숨김 테스트 케이스 재채점
- 🏆 리더보드 (문제별 최고 점수 합, 먼저 달성한 사용자 우선)
- 🔍 코드 유사도 기반 표절 검사
""",
    lifespan=lifespan,
    docs_url="/docs",
    redoc_url="/redoc",
    openapi_url="/openapi.json",
)


# ===== CORS 설정 =====
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# ===== 라우터 등록 =====
app.include_router(health_router)  # /health, /info
app.include_router(submissions_router, prefix="/api")  # /api/submissions/*
app.include_router(contests_router, prefix="/api")  # /api/contests/*
app.include_router(plagiarism_router, prefix="/api")  # /api/plagiarism/*


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "app.main:app",
        host=settings.API_HOST,
        port=settings.API_PORT,
        reload=settings.DEBUG,
        log_level="debug" if settings.DEBUG else "info",
    )
