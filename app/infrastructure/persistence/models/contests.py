"""
대회 관련 테이블 모델
contests, questions, test_cases
"""
from datetime import datetime
from typing import Optional, List

from sqlalchemy import (
    BigInteger,
    Boolean,
    DateTime,
    ForeignKey,
    Integer,
    String,
    Text,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.core.time import utcnow
from app.infrastructure.persistence.session import Base


class Contest(Base):
    """대회 테이블"""
    __tablename__ = "contests"

    id: Mapped[int] = mapped_column(BigInteger, primary_key=True, autoincrement=True)
    title: Mapped[str] = mapped_column(String(200), nullable=False)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    start_time: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    end_time: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow
    )

    # Relationships
    questions: Mapped[List["Question"]] = relationship(
        "Question",
        back_populates="contest"
    )

    def is_active(self, now: datetime) -> bool:
        """대회 진행 중 여부"""
        return self.start_time <= now <= self.end_time


class Question(Base):
    """문제 테이블"""
    __tablename__ = "questions"

    id: Mapped[int] = mapped_column(BigInteger, primary_key=True, autoincrement=True)
    contest_id: Mapped[int] = mapped_column(
        BigInteger,
        ForeignKey("contests.id"),
        nullable=False
    )
    title: Mapped[str] = mapped_column(String(256), nullable=False)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    points: Mapped[int] = mapped_column(Integer, nullable=False, default=100)
    sample_input: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    sample_output: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow
    )

    # Relationships
    contest: Mapped["Contest"] = relationship(
        "Contest",
        back_populates="questions"
    )
    test_cases: Mapped[List["TestCase"]] = relationship(
        "TestCase",
        back_populates="question",
        order_by="(TestCase.created_at, TestCase.id)"
    )


class TestCase(Base):
    """테스트 케이스 테이블 (생성 순서 = 실행 순서)"""
    __tablename__ = "test_cases"
    __test__ = False  # pytest 수집 대상 아님

    id: Mapped[int] = mapped_column(BigInteger, primary_key=True, autoincrement=True)
    question_id: Mapped[int] = mapped_column(
        BigInteger,
        ForeignKey("questions.id"),
        nullable=False
    )
    input: Mapped[str] = mapped_column(Text, nullable=False, default="")
    expected_output: Mapped[str] = mapped_column(Text, nullable=False)
    is_hidden: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow
    )

    # Relationships
    question: Mapped["Question"] = relationship(
        "Question",
        back_populates="test_cases"
    )
