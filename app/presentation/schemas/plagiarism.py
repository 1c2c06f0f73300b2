"""
표절 검사 스키마
"""
from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field


class PlagiarismScanRequest(BaseModel):
    """표절 검사 요청"""
    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "contestId": 1,
                "threshold": 0.7
            }
        }
    )

    contestId: int = Field(..., description="대회 ID")
    threshold: Optional[float] = Field(None, ge=0.0, le=1.0, description="유사도 임계값 (0~1, 기본 0.7)")


class PlagiarismUser(BaseModel):
    id: int
    username: str
    name: Optional[str] = None
    submissionId: int
    submittedAt: datetime


class SuspiciousPairResponse(BaseModel):
    """의심 제출 쌍"""
    similarity: int = Field(..., description="유사도 (%)")
    method: str = Field(..., description="Jaccard / Levenshtein")
    question: str = Field(..., description="문제 제목")
    users: List[PlagiarismUser]


class PlagiarismScanResponse(BaseModel):
    """표절 검사 결과"""
    totalSubmissions: int
    suspiciousPairs: int
    threshold: float
    results: List[SuspiciousPairResponse] = Field(default_factory=list)


class UserInfo(BaseModel):
    id: int
    username: str
    name: Optional[str] = None


class QuestionInfo(BaseModel):
    id: int
    title: str


class SubmissionDetail(BaseModel):
    """비교 대상 제출 (코드 포함)"""
    id: int
    user: UserInfo
    question: QuestionInfo
    code: str
    submittedAt: datetime


class SimilarityScores(BaseModel):
    jaccard: int
    levenshtein: int
    overall: int


class ComparisonResponse(BaseModel):
    """두 제출 비교 결과"""
    submission1: SubmissionDetail
    submission2: SubmissionDetail
    similarity: SimilarityScores
    method: str
