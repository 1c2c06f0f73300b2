"""
리더보드 서비스

[목적]
- 제출/재채점 후 사용자의 리더보드 행을 제출 이력 전체로부터 다시 계산
- 증분 갱신 대신 재계산 + (대회, 사용자) advisory lock + upsert 로 동시 제출에도 수렴

[처리 흐름]
1. pg_advisory_xact_lock(contest_id, user_id)
2. 사용자의 대회 제출 이력 조회
3. compute_standing() 으로 total_score / last_submission_time 계산
4. INSERT ... ON CONFLICT DO UPDATE
5. 커밋 (실패 시 롤백되어 이전 행 유지)
"""
import logging
from typing import Any, Dict, List, Optional

from sqlalchemy.ext.asyncio import AsyncSession

from app.application.services.exceptions import NotFoundError
from app.domain.leaderboard import RankedEntry, Standing, compute_standing, rank_entries
from app.infrastructure.repositories import (
    ContestRepository,
    LeaderboardRepository,
    SubmissionRepository,
    UserRepository,
)


logger = logging.getLogger(__name__)


class LeaderboardService:
    """리더보드 유지 서비스"""

    def __init__(self, db: AsyncSession):
        self.db = db
        self.leaderboard_repo = LeaderboardRepository(db)
        self.submission_repo = SubmissionRepository(db)
        self.contest_repo = ContestRepository(db)
        self.user_repo = UserRepository(db)

    async def update_leaderboard(self, user_id: int, contest_id: int) -> Standing:
        """
        사용자 1명의 리더보드 행 재계산 (단일 트랜잭션)

        Returns:
            재계산된 Standing
        """
        try:
            await self.leaderboard_repo.lock_entry(contest_id, user_id)

            user = await self.user_repo.get_user_by_id(user_id)
            if user is None:
                raise NotFoundError("사용자를 찾을 수 없습니다.", {"user_id": user_id})

            submissions = await self.submission_repo.get_user_submissions(contest_id, user_id)
            standing = compute_standing(submissions)

            await self.leaderboard_repo.upsert_entry(
                contest_id=contest_id,
                user_id=user_id,
                username=user.username,
                total_score=standing.total_score,
                last_submission_time=standing.last_submission_time,
            )
            await self.db.commit()
        except Exception:
            await self.db.rollback()
            raise

        logger.info(
            f"[LeaderboardService] 리더보드 갱신 - contest_id: {contest_id}, user_id: {user_id}, "
            f"total_score: {standing.total_score}, last_submission_time: {standing.last_submission_time}"
        )
        return standing

    async def get_leaderboard(self, contest_id: int) -> List[RankedEntry]:
        """대회 리더보드 (순위는 조회 시 계산)"""
        contest = await self.contest_repo.get_contest_by_id(contest_id)
        if contest is None:
            raise NotFoundError("대회를 찾을 수 없습니다.", {"contest_id": contest_id})

        entries = await self.leaderboard_repo.get_entries(contest_id)
        return rank_entries(entries)

    async def get_user_summary(self, contest_id: int, user_id: int) -> Dict[str, Any]:
        """
        사용자 제출 요약 (최신순 제출 목록, 리더보드 기준 총점, 현재 순위)

        총점은 리더보드와 같은 규칙(ACCEPTED 제출의 문제별 최고 점수 합)을 사용합니다.
        """
        submissions = await self.submission_repo.get_user_submissions(
            contest_id, user_id, newest_first=True
        )
        standing = compute_standing(submissions)

        ranked = await self.get_leaderboard(contest_id)
        rank: Optional[int] = next((e.rank for e in ranked if e.user_id == user_id), None)

        return {
            "submissions": submissions,
            "total_score": standing.total_score,
            "rank": rank,
        }
