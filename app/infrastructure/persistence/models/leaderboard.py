"""
리더보드 테이블 모델
(contest_id, user_id) 당 1행, 순위는 조회 시 계산
"""
from datetime import datetime
from typing import Optional

from sqlalchemy import BigInteger, DateTime, ForeignKey, Integer, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from app.core.time import utcnow
from app.infrastructure.persistence.session import Base


class LeaderboardEntry(Base):
    """리더보드 테이블"""
    __tablename__ = "leaderboard"
    __table_args__ = (
        UniqueConstraint("contest_id", "user_id", name="uq_leaderboard_contest_user"),
    )

    id: Mapped[int] = mapped_column(BigInteger, primary_key=True, autoincrement=True)
    contest_id: Mapped[int] = mapped_column(
        BigInteger,
        ForeignKey("contests.id"),
        nullable=False
    )
    user_id: Mapped[int] = mapped_column(
        BigInteger,
        ForeignKey("users.id"),
        nullable=False
    )
    username: Mapped[str] = mapped_column(String(100), nullable=False)
    total_score: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    last_submission_time: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True),
        nullable=True
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
        onupdate=utcnow
    )
