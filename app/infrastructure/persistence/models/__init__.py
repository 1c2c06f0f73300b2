"""
ORM 모델 모듈
관계(relationship) 해석을 위해 모든 모델을 한 번에 등록
"""
from app.infrastructure.persistence.models.users import User
from app.infrastructure.persistence.models.contests import Contest, Question, TestCase
from app.infrastructure.persistence.models.submissions import Submission, SubmissionRun
from app.infrastructure.persistence.models.leaderboard import LeaderboardEntry

__all__ = [
    "User",
    "Contest",
    "Question",
    "TestCase",
    "Submission",
    "SubmissionRun",
    "LeaderboardEntry",
]
