"""
채점 큐 모듈
USE_REDIS_QUEUE 설정에 따라 Redis 또는 메모리 큐 사용
"""
from app.domain.queue.schemas import JudgeTask, JudgeResult
from app.domain.queue.adapters import (
    QueueAdapter,
    MemoryQueueAdapter,
    RedisQueueAdapter,
    create_queue_adapter,
)

__all__ = [
    "JudgeTask",
    "JudgeResult",
    "QueueAdapter",
    "MemoryQueueAdapter",
    "RedisQueueAdapter",
    "create_queue_adapter",
]
