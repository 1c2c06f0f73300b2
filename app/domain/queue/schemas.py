"""
채점 큐 스키마
"""
import uuid
from datetime import datetime
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field

from app.core.time import utcnow
from app.infrastructure.persistence.models.enums import JobStatusEnum


class JudgeTask(BaseModel):
    """큐에 들어가는 채점 작업"""
    task_id: str = Field(default_factory=lambda: uuid.uuid4().hex)
    user_id: int
    contest_id: int
    question_id: int
    code: str
    language: str
    created_at: datetime = Field(default_factory=utcnow)


class JudgeResult(BaseModel):
    """채점 작업 결과"""
    task_id: str
    status: JobStatusEnum
    submission_id: Optional[int] = None
    verdict: Optional[str] = None
    score: int = 0
    passed_tests: int = 0
    total_tests: int = 0
    results: List[Dict[str, Any]] = Field(default_factory=list)
    error_code: Optional[str] = None
    error: Optional[str] = None
    finished_at: datetime = Field(default_factory=utcnow)
