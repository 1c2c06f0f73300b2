"""
대회/문제 관련 Repository
"""
from typing import List, Optional

from sqlalchemy import and_, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.infrastructure.persistence.models.contests import Contest, Question, TestCase


class ContestRepository:
    """대회 데이터 접근 계층"""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def get_contest_by_id(self, contest_id: int) -> Optional[Contest]:
        """대회 ID로 조회"""
        query = select(Contest).where(Contest.id == contest_id)
        result = await self.db.execute(query)
        return result.scalar_one_or_none()

    async def get_question(self, contest_id: int, question_id: int) -> Optional[Question]:
        """대회에 속한 문제 조회"""
        query = select(Question).where(
            and_(
                Question.id == question_id,
                Question.contest_id == contest_id
            )
        )
        result = await self.db.execute(query)
        return result.scalar_one_or_none()

    async def get_question_by_id(self, question_id: int) -> Optional[Question]:
        """문제 ID로 조회"""
        query = select(Question).where(Question.id == question_id)
        result = await self.db.execute(query)
        return result.scalar_one_or_none()

    async def get_test_cases(self, question_id: int) -> List[TestCase]:
        """문제의 테스트 케이스 조회 (생성 순서 = 실행 순서)"""
        query = select(TestCase).where(
            TestCase.question_id == question_id
        ).order_by(TestCase.created_at, TestCase.id)
        result = await self.db.execute(query)
        return list(result.scalars().all())
