"""
리더보드 Repository
"""
from datetime import datetime
from typing import List, Optional

from sqlalchemy import func, select
from sqlalchemy.dialects.postgresql import insert
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.time import utcnow
from app.infrastructure.persistence.models.leaderboard import LeaderboardEntry


class LeaderboardRepository:
    """리더보드 데이터 접근 계층"""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def lock_entry(self, contest_id: int, user_id: int) -> None:
        """
        (대회, 사용자) 단위 트랜잭션 advisory lock

        트랜잭션이 끝나면 자동으로 해제됩니다.
        """
        await self.db.execute(
            select(func.pg_advisory_xact_lock(contest_id, user_id))
        )

    async def upsert_entry(
        self,
        contest_id: int,
        user_id: int,
        username: str,
        total_score: int,
        last_submission_time: Optional[datetime]
    ) -> None:
        """(contest_id, user_id) 기준 INSERT ... ON CONFLICT DO UPDATE"""
        now = utcnow()
        stmt = insert(LeaderboardEntry).values(
            contest_id=contest_id,
            user_id=user_id,
            username=username,
            total_score=total_score,
            last_submission_time=last_submission_time,
            updated_at=now,
        )
        stmt = stmt.on_conflict_do_update(
            index_elements=[LeaderboardEntry.contest_id, LeaderboardEntry.user_id],
            set_={
                "username": stmt.excluded.username,
                "total_score": stmt.excluded.total_score,
                "last_submission_time": stmt.excluded.last_submission_time,
                "updated_at": now,
            },
        )
        await self.db.execute(stmt)

    async def get_entries(self, contest_id: int) -> List[LeaderboardEntry]:
        """대회 리더보드 조회 (정렬 포함)"""
        query = select(LeaderboardEntry).where(
            LeaderboardEntry.contest_id == contest_id
        ).order_by(
            LeaderboardEntry.total_score.desc(),
            LeaderboardEntry.last_submission_time.asc().nulls_last(),
            LeaderboardEntry.id,
        )
        result = await self.db.execute(query)
        return list(result.scalars().all())
