"""
채점 큐 어댑터

[저장소 수명]
- 프로세스 단위로 유지되며, 작업 상태/결과는 JUDGE_JOB_TTL_SECONDS 후 만료
- Redis: 키 TTL로 만료
- 메모리: 쓰기 시점마다 만료된 항목 제거 + 끝난 작업에 대한 최대 보관 개수 제한
"""
import asyncio
import logging
import time
from collections import OrderedDict, deque
from typing import Callable, Deque, Dict, Optional, Tuple

from app.core.config import settings
from app.domain.queue.schemas import JudgeResult, JudgeTask
from app.infrastructure.cache.redis_client import RedisClient, redis_client
from app.infrastructure.persistence.models.enums import JobStatusEnum


logger = logging.getLogger(__name__)

# 보관 한도로 제거하지 않는 진행 중 상태
ACTIVE_STATUSES = (JobStatusEnum.QUEUED, JobStatusEnum.PROCESSING)


class QueueAdapter:
    """채점 큐 인터페이스"""

    async def enqueue(self, task: JudgeTask) -> None:
        raise NotImplementedError

    async def dequeue(self) -> Optional[JudgeTask]:
        raise NotImplementedError

    async def set_status(self, task_id: str, status: JobStatusEnum) -> None:
        raise NotImplementedError

    async def get_status(self, task_id: str) -> Optional[JobStatusEnum]:
        raise NotImplementedError

    async def save_result(self, task_id: str, result: JudgeResult) -> None:
        raise NotImplementedError

    async def get_result(self, task_id: str) -> Optional[JudgeResult]:
        raise NotImplementedError

    async def pending_count(self) -> int:
        raise NotImplementedError


class MemoryQueueAdapter(QueueAdapter):
    """메모리 큐 (단일 프로세스 개발/테스트용)"""

    def __init__(
        self,
        ttl_seconds: Optional[int] = None,
        max_entries: Optional[int] = None,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.ttl_seconds = ttl_seconds if ttl_seconds is not None else settings.JUDGE_JOB_TTL_SECONDS
        self.max_entries = max_entries if max_entries is not None else settings.JUDGE_JOB_MAX_ENTRIES
        self._clock = clock
        self._pending: Deque[JudgeTask] = deque()
        # task_id -> (상태, 결과, 마지막 갱신 시각)
        self._entries: "OrderedDict[str, Tuple[JobStatusEnum, Optional[JudgeResult], float]]" = OrderedDict()
        self._lock = asyncio.Lock()

    def _evict(self) -> None:
        """
        만료 항목 및 초과 항목 제거 (오래된 순)

        대기/처리 중인 작업은 한도 계산에서 제거 대상이 아닙니다.
        """
        now = self._clock()
        expired = [
            task_id for task_id, (_, _, updated_at) in self._entries.items()
            if now - updated_at > self.ttl_seconds
        ]
        for task_id in expired:
            del self._entries[task_id]

        # 한도 초과 시 끝난 작업(COMPLETED/FAILED)만 오래된 순으로 제거
        overflow = len(self._entries) - self.max_entries
        if overflow <= 0:
            return
        finished = [
            task_id for task_id, (status, _, _) in self._entries.items()
            if status not in ACTIVE_STATUSES
        ]
        for task_id in finished[:overflow]:
            del self._entries[task_id]
            logger.debug(f"[MemoryQueue] 보관 한도 초과로 제거 - task_id: {task_id}")

    def _write(self, task_id: str, status: JobStatusEnum, result: Optional[JudgeResult]) -> None:
        self._entries.pop(task_id, None)
        self._entries[task_id] = (status, result, self._clock())
        self._evict()

    async def enqueue(self, task: JudgeTask) -> None:
        async with self._lock:
            self._pending.append(task)
            self._write(task.task_id, JobStatusEnum.QUEUED, None)

    async def dequeue(self) -> Optional[JudgeTask]:
        async with self._lock:
            if not self._pending:
                return None
            return self._pending.popleft()

    async def set_status(self, task_id: str, status: JobStatusEnum) -> None:
        async with self._lock:
            current = self._entries.get(task_id)
            self._write(task_id, status, current[1] if current else None)

    async def get_status(self, task_id: str) -> Optional[JobStatusEnum]:
        async with self._lock:
            self._evict()
            entry = self._entries.get(task_id)
            return entry[0] if entry else None

    async def save_result(self, task_id: str, result: JudgeResult) -> None:
        async with self._lock:
            self._write(task_id, result.status, result)

    async def get_result(self, task_id: str) -> Optional[JudgeResult]:
        async with self._lock:
            self._evict()
            entry = self._entries.get(task_id)
            return entry[1] if entry else None

    async def pending_count(self) -> int:
        return len(self._pending)


class RedisQueueAdapter(QueueAdapter):
    """Redis 큐 (여러 워커 프로세스 공유)"""

    PENDING_KEY = "judge_queue:pending"

    def __init__(self, client: Optional[RedisClient] = None, ttl_seconds: Optional[int] = None):
        self.redis = client or redis_client
        self.ttl_seconds = ttl_seconds if ttl_seconds is not None else settings.JUDGE_JOB_TTL_SECONDS

    @staticmethod
    def _status_key(task_id: str) -> str:
        return f"judge_status:{task_id}"

    @staticmethod
    def _result_key(task_id: str) -> str:
        return f"judge_result:{task_id}"

    async def enqueue(self, task: JudgeTask) -> None:
        await self.set_status(task.task_id, JobStatusEnum.QUEUED)
        await self.redis.push(self.PENDING_KEY, task.model_dump_json())

    async def dequeue(self) -> Optional[JudgeTask]:
        raw = await self.redis.pop(self.PENDING_KEY, timeout_seconds=1)
        if raw is None:
            return None
        return JudgeTask.model_validate_json(raw)

    async def set_status(self, task_id: str, status: JobStatusEnum) -> None:
        await self.redis.set(self._status_key(task_id), status.value, self.ttl_seconds)

    async def get_status(self, task_id: str) -> Optional[JobStatusEnum]:
        value = await self.redis.get(self._status_key(task_id))
        return JobStatusEnum(value) if value else None

    async def save_result(self, task_id: str, result: JudgeResult) -> None:
        await self.redis.set_json(self._result_key(task_id), result.model_dump(mode="json"), self.ttl_seconds)
        await self.set_status(task_id, result.status)

    async def get_result(self, task_id: str) -> Optional[JudgeResult]:
        data = await self.redis.get_json(self._result_key(task_id))
        return JudgeResult.model_validate(data) if data else None

    async def pending_count(self) -> int:
        return await self.redis.length(self.PENDING_KEY)


_memory_queue: Optional[MemoryQueueAdapter] = None


def create_queue_adapter() -> QueueAdapter:
    """
    설정에 맞는 큐 어댑터 생성

    메모리 큐는 API와 워커가 같은 프로세스에서 공유해야 하므로 싱글톤으로 반환합니다.
    """
    global _memory_queue

    if settings.USE_REDIS_QUEUE:
        return RedisQueueAdapter()

    if _memory_queue is None:
        _memory_queue = MemoryQueueAdapter()
    return _memory_queue
