"""
리더보드 스키마
"""
from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field


class LeaderboardEntryResponse(BaseModel):
    """리더보드 항목"""
    rank: int
    userId: int
    username: str
    totalScore: int
    lastSubmissionTime: Optional[datetime] = None


class LeaderboardResponse(BaseModel):
    """리더보드 응답"""
    contestId: int
    entries: List[LeaderboardEntryResponse] = Field(default_factory=list)
