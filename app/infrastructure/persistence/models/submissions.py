"""
제출 관련 테이블 모델
submissions, submission_runs
"""
from datetime import datetime
from typing import Optional, List

from sqlalchemy import (
    BigInteger,
    Boolean,
    DateTime,
    Enum,
    Float,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.core.time import utcnow
from app.infrastructure.persistence.session import Base
from app.infrastructure.persistence.models.enums import SubmissionStatusEnum, VerdictEnum


class Submission(Base):
    """제출 테이블"""
    __tablename__ = "submissions"
    __table_args__ = (
        Index("ix_submissions_contest_user", "contest_id", "user_id"),
        Index("ix_submissions_contest_question", "contest_id", "question_id"),
    )

    id: Mapped[int] = mapped_column(BigInteger, primary_key=True, autoincrement=True)
    user_id: Mapped[int] = mapped_column(
        BigInteger,
        ForeignKey("users.id"),
        nullable=False
    )
    contest_id: Mapped[int] = mapped_column(
        BigInteger,
        ForeignKey("contests.id"),
        nullable=False
    )
    question_id: Mapped[int] = mapped_column(
        BigInteger,
        ForeignKey("questions.id"),
        nullable=False
    )
    code: Mapped[str] = mapped_column(Text, nullable=False)
    language: Mapped[str] = mapped_column(String(40), nullable=False)
    status: Mapped[SubmissionStatusEnum] = mapped_column(
        Enum(SubmissionStatusEnum, name="submission_status_enum"),
        nullable=False,
        default=SubmissionStatusEnum.PENDING
    )
    score: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    total_tests: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    passed_tests: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    runtime: Mapped[float] = mapped_column(Float, nullable=False, default=0.0)  # 초 (평균)
    memory: Mapped[float] = mapped_column(Float, nullable=False, default=0.0)  # KB (평균)
    submitted_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow
    )
    rejudged_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True),
        nullable=True
    )

    # Relationships
    runs: Mapped[List["SubmissionRun"]] = relationship(
        "SubmissionRun",
        back_populates="submission",
        order_by="SubmissionRun.case_index",
        cascade="all, delete-orphan"
    )
    user: Mapped["User"] = relationship("User")
    question: Mapped["Question"] = relationship("Question")


class SubmissionRun(Base):
    """제출 실행 테이블 (테스트 케이스별 Judge0 결과)"""
    __tablename__ = "submission_runs"

    id: Mapped[int] = mapped_column(BigInteger, primary_key=True, autoincrement=True)
    submission_id: Mapped[int] = mapped_column(
        BigInteger,
        ForeignKey("submissions.id", ondelete="CASCADE"),
        nullable=False
    )
    case_index: Mapped[int] = mapped_column(Integer, nullable=False)
    test_case_id: Mapped[Optional[int]] = mapped_column(
        BigInteger,
        ForeignKey("test_cases.id"),
        nullable=True  # 문제 예제(sample)는 NULL
    )
    is_hidden: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    verdict: Mapped[VerdictEnum] = mapped_column(
        Enum(VerdictEnum, name="verdict_enum"),
        nullable=False
    )
    time: Mapped[Optional[float]] = mapped_column(Float, nullable=True)
    memory: Mapped[Optional[float]] = mapped_column(Float, nullable=True)
    status_description: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    error: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow
    )

    # Relationships
    submission: Mapped["Submission"] = relationship(
        "Submission",
        back_populates="runs"
    )
