"""
시간 유틸리티
DB 컬럼은 timezone=True 이므로 항상 UTC aware datetime을 사용
"""
from datetime import datetime, timezone


def utcnow() -> datetime:
    """현재 UTC 시각 (timezone aware)"""
    return datetime.now(timezone.utc)
