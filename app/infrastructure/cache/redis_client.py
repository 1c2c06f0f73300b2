"""
Redis 클라이언트 관리

[키 구조] (app.domain.queue.RedisQueueAdapter)
- judge_queue:pending   : 채점 대기열 (LPUSH / BRPOP)
- judge_status:{task_id}: 작업 상태 (TTL)
- judge_result:{task_id}: 작업 결과 JSON (TTL)
"""
import json
from typing import Any, Optional

import redis.asyncio as redis
from redis.asyncio.connection import ConnectionPool

from app.core.config import settings


class RedisClient:
    """Redis 비동기 클라이언트 래퍼"""

    def __init__(self):
        self._pool: Optional[ConnectionPool] = None
        self._client: Optional[redis.Redis] = None

    async def connect(self):
        """Redis 연결 초기화"""
        self._pool = ConnectionPool.from_url(
            settings.REDIS_URL,
            max_connections=20,
            decode_responses=True,
        )
        self._client = redis.Redis(connection_pool=self._pool)
        # 연결 테스트
        await self._client.ping()

    async def close(self):
        """Redis 연결 종료"""
        if self._client:
            await self._client.aclose()
        if self._pool:
            await self._pool.aclose()
        self._client = None
        self._pool = None

    @property
    def is_connected(self) -> bool:
        return self._client is not None

    async def ping(self) -> bool:
        """연결 확인 (헬스 체크용, 미연결이면 False)"""
        if self._client is None:
            return False
        try:
            return bool(await self._client.ping())
        except Exception:
            return False

    @property
    def client(self) -> redis.Redis:
        if self._client is None:
            raise RuntimeError("Redis client not initialized. Call connect() first.")
        return self._client

    # ===== 기본 Key-Value 연산 =====

    async def get(self, key: str) -> Optional[str]:
        """키 값 조회"""
        return await self.client.get(key)

    async def set(
        self,
        key: str,
        value: str,
        ttl_seconds: Optional[int] = None
    ) -> bool:
        """키 값 설정"""
        if ttl_seconds:
            return await self.client.setex(key, ttl_seconds, value)
        return await self.client.set(key, value)

    # ===== JSON 데이터 연산 =====

    async def get_json(self, key: str) -> Optional[dict]:
        """JSON 데이터 조회"""
        data = await self.get(key)
        if data:
            return json.loads(data)
        return None

    async def set_json(
        self,
        key: str,
        value: Any,
        ttl_seconds: Optional[int] = None
    ) -> bool:
        """JSON 데이터 저장"""
        return await self.set(key, json.dumps(value, ensure_ascii=False, default=str), ttl_seconds)

    # ===== 리스트 (큐) 연산 =====

    async def push(self, key: str, value: str) -> int:
        """리스트 왼쪽에 추가"""
        return await self.client.lpush(key, value)

    async def pop(self, key: str, timeout_seconds: int = 0) -> Optional[str]:
        """
        리스트 오른쪽에서 꺼내기 (FIFO)

        timeout_seconds > 0 이면 BRPOP으로 대기합니다.
        """
        if timeout_seconds > 0:
            item = await self.client.brpop([key], timeout=timeout_seconds)
            return item[1] if item else None
        return await self.client.rpop(key)

    async def length(self, key: str) -> int:
        """리스트 길이"""
        return await self.client.llen(key)


# 싱글톤 인스턴스
redis_client = RedisClient()
