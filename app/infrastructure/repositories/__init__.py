"""
리포지토리 모듈
"""
from app.infrastructure.repositories.contest_repository import ContestRepository
from app.infrastructure.repositories.leaderboard_repository import LeaderboardRepository
from app.infrastructure.repositories.submission_repository import SubmissionRepository
from app.infrastructure.repositories.user_repository import UserRepository

__all__ = [
    "ContestRepository",
    "LeaderboardRepository",
    "SubmissionRepository",
    "UserRepository",
]
