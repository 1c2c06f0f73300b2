#!/usr/bin/env python
"""
개발 서버 실행 스크립트
FastAPI 서버와 Judge Worker를 함께 실행

- USE_REDIS_QUEUE=true: Worker를 별도 스레드(별도 이벤트 루프)에서 실행
- USE_REDIS_QUEUE=false: 메모리 큐는 프로세스 내 API와 공유해야 하므로 내장 Worker로 실행
"""
import os
import sys
import asyncio
import logging
from threading import Thread

from dotenv import load_dotenv

# 프로젝트 루트를 Python 경로에 추가
project_root = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
sys.path.insert(0, project_root)

# 환경 변수 로드 (settings import 전에)
load_dotenv()

# 로깅 설정
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger(__name__)


def run_judge_worker():
    """Judge Worker를 별도 스레드에서 실행"""
    async def worker_main():
        try:
            from app.application.workers.judge_worker import main as judge_main
            await judge_main()
        except KeyboardInterrupt:
            logger.info("[JudgeWorker] Worker 중지 요청 수신")
        except Exception as e:
            logger.error(f"[JudgeWorker] Worker 오류: {str(e)}", exc_info=True)

    try:
        # 스레드에서 새로운 이벤트 루프 생성
        loop = asyncio.new_event_loop()
        asyncio.set_event_loop(loop)
        loop.run_until_complete(worker_main())
    except Exception as e:
        logger.error(f"[JudgeWorker] Worker 실행 실패: {str(e)}", exc_info=True)


def run_uvicorn():
    """Uvicorn 서버 실행"""
    import uvicorn
    from app.core.config import settings

    uvicorn.run(
        "app.main:app",
        host=settings.API_HOST,
        port=settings.API_PORT,
        reload=True,
        log_level="debug",
    )


if __name__ == "__main__":
    from app.core.config import settings

    if settings.USE_REDIS_QUEUE:
        # Redis 큐: Worker를 백그라운드 스레드에서 실행
        judge_worker_thread = Thread(target=run_judge_worker, daemon=True)
        judge_worker_thread.start()
        logger.info("[Dev Server] Judge Worker 시작됨 (Redis 큐)")
    else:
        # 메모리 큐: reload 자식 프로세스에도 전달되도록 환경 변수로 설정
        os.environ["RUN_EMBEDDED_WORKER"] = "true"
        logger.info("[Dev Server] 메모리 큐 사용 - 내장 Worker로 실행")

    # FastAPI 서버 실행 (메인 스레드)
    try:
        run_uvicorn()
    except KeyboardInterrupt:
        logger.info("[Dev Server] 서버 종료 요청 수신")
    except Exception as e:
        logger.error(f"[Dev Server] 서버 실행 오류: {str(e)}", exc_info=True)
