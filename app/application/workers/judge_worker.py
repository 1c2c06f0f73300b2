"""
Judge Worker
큐에서 채점 작업을 가져와 SubmissionService로 채점하고 결과를 작업 저장소에 기록
"""
import asyncio
import logging
from typing import Any, Callable, Optional

from app.application.services.exceptions import ServiceError
from app.application.services.submission_service import SubmissionService
from app.domain.queue import JudgeResult, JudgeTask, QueueAdapter, create_queue_adapter
from app.infrastructure.cache.redis_client import redis_client
from app.infrastructure.judge0.client import Judge0Client
from app.infrastructure.persistence.models.enums import JobStatusEnum
from app.infrastructure.persistence.session import get_db_context
from app.core.config import settings


logger = logging.getLogger(__name__)


class JudgeWorker:
    """채점 작업 Worker"""

    def __init__(
        self,
        queue: Optional[QueueAdapter] = None,
        judge0_client: Optional[Any] = None,
        session_factory: Callable = get_db_context,
    ):
        self.queue = queue or create_queue_adapter()
        self.judge0_client = judge0_client or Judge0Client()
        self.session_factory = session_factory
        self.running = False
        self._owns_redis = False

    async def start(self):
        """Worker 시작"""
        self.running = True
        logger.info("[JudgeWorker] Worker 시작")

        # Redis 연결 초기화 (Redis Queue 사용 시, API 프로세스에서 이미 연결했으면 재사용)
        if settings.USE_REDIS_QUEUE and not redis_client.is_connected:
            try:
                await redis_client.connect()
                self._owns_redis = True
                logger.info("[JudgeWorker] Redis 연결 완료")
            except Exception as e:
                logger.error(f"[JudgeWorker] Redis 연결 실패: {str(e)}")
                raise

        try:
            await self._worker_loop()
        except asyncio.CancelledError:
            logger.info("[JudgeWorker] Worker 중지 요청 수신")
            raise
        finally:
            await self.stop()

    async def stop(self):
        """Worker 중지"""
        self.running = False
        await self.judge0_client.close()

        if self._owns_redis:
            try:
                await redis_client.close()
                logger.info("[JudgeWorker] Redis 연결 종료")
            except Exception as e:
                logger.warning(f"[JudgeWorker] Redis 연결 종료 중 오류: {str(e)}")
            self._owns_redis = False

        logger.info("[JudgeWorker] Worker 중지")

    async def _worker_loop(self):
        """Worker 메인 루프"""
        while self.running:
            task: Optional[JudgeTask] = None
            try:
                task = await self.queue.dequeue()

                if task is None:
                    # 큐가 비어있으면 잠시 대기
                    await asyncio.sleep(0.1)
                    continue

                await self.process_task(task)

            except asyncio.CancelledError:
                raise
            except Exception as e:
                logger.error(f"[JudgeWorker] 작업 처리 중 오류: {str(e)}", exc_info=True)

                # 결과 저장 실패 등 process_task 밖의 오류 (task가 할당된 경우만)
                if task is not None:
                    try:
                        await self.queue.save_result(task.task_id, JudgeResult(
                            task_id=task.task_id,
                            status=JobStatusEnum.FAILED,
                            error_code="INTERNAL_ERROR",
                            error=str(e),
                        ))
                    except Exception as save_error:
                        logger.error(f"[JudgeWorker] 결과 저장 실패: {str(save_error)}")

    async def process_task(self, task: JudgeTask) -> JudgeResult:
        """
        작업 1건 처리

        검증 실패/대상 없음 등 서비스 예외는 FAILED 결과로 기록합니다.
        채점 중 Judge0 인프라 실패는 제출 상태 ERROR로 저장되며 작업은 COMPLETED입니다.
        """
        logger.info(
            f"[JudgeWorker] 작업 처리 시작 - task_id: {task.task_id}, user_id: {task.user_id}, "
            f"contest_id: {task.contest_id}, question_id: {task.question_id}, language: {task.language}"
        )
        await self.queue.set_status(task.task_id, JobStatusEnum.PROCESSING)

        try:
            async with self.session_factory() as db:
                service = SubmissionService(db, self.judge0_client)
                judged = await service.submit(
                    user_id=task.user_id,
                    contest_id=task.contest_id,
                    question_id=task.question_id,
                    code=task.code,
                    language=task.language,
                )
            outcome = judged.outcome
            result = JudgeResult(
                task_id=task.task_id,
                status=JobStatusEnum.COMPLETED,
                submission_id=judged.submission_id,
                verdict=outcome.status.value,
                score=outcome.score,
                passed_tests=outcome.passed_tests,
                total_tests=outcome.total_tests,
                results=outcome.public_results(),
                error=outcome.error,
            )
        except ServiceError as e:
            logger.warning(
                f"[JudgeWorker] 작업 거부 - task_id: {task.task_id}, "
                f"error_code: {e.error_code}, message: {e.message}"
            )
            result = JudgeResult(
                task_id=task.task_id,
                status=JobStatusEnum.FAILED,
                error_code=e.error_code,
                error=e.message,
            )
        except Exception as e:
            logger.error(f"[JudgeWorker] 채점 실패 - task_id: {task.task_id}, error: {str(e)}", exc_info=True)
            result = JudgeResult(
                task_id=task.task_id,
                status=JobStatusEnum.FAILED,
                error_code="INTERNAL_ERROR",
                error=str(e),
            )

        await self.queue.save_result(task.task_id, result)
        logger.info(
            f"[JudgeWorker] 작업 완료 - task_id: {task.task_id}, status: {result.status.value}, "
            f"verdict: {result.verdict}, score: {result.score}"
        )
        return result


async def main():
    """Worker 메인 함수"""
    worker = JudgeWorker()
    await worker.start()


if __name__ == "__main__":
    # 로깅 설정
    logging.basicConfig(
        level=logging.DEBUG if settings.DEBUG else logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    )

    # Worker 실행
    asyncio.run(main())
