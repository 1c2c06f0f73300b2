"""
제출 관련 스키마
"""
from datetime import datetime
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field


class SubmitRequest(BaseModel):
    """코드 제출 요청"""
    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "userId": 1,
                "contestId": 1,
                "questionId": 10,
                "code": "a, b = map(int, input().split())\nprint(a + b)",
                "language": "python"
            }
        }
    )

    userId: int = Field(..., description="사용자 ID")
    contestId: int = Field(..., description="대회 ID")
    questionId: int = Field(..., description="문제 ID")
    code: str = Field(..., description="소스 코드")
    language: str = Field(..., description="언어 (python, cpp, java, javascript, c, ...)")


class SubmitResponse(BaseModel):
    """채점 결과 응답"""
    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "submissionId": 42,
                "status": "WRONG_ANSWER",
                "score": 67,
                "passedTests": 2,
                "totalTests": 3,
                "executedTests": 3,
                "runtime": 0.021,
                "memory": 3420.0,
                "results": [
                    {"index": 0, "passed": True, "isHidden": False, "input": "1 2", "expected": "3",
                     "output": "3", "status": "Accepted", "runtime": 0.02, "memory": 3400.0, "error": None},
                    {"index": 2, "passed": False, "isHidden": True}
                ],
                "error": None
            }
        }
    )

    submissionId: int = Field(..., description="제출 ID")
    status: str = Field(..., description="최종 상태")
    score: int = Field(..., description="점수")
    passedTests: int = Field(..., description="통과한 테스트 수")
    totalTests: int = Field(..., description="실행 계획 전체 테스트 수 (점수 분모, 조기 중단과 무관)")
    executedTests: int = Field(..., description="실제로 처리한 테스트 수 (조기 중단 시 중단된 케이스까지, 예: 5개 중 2번째 TLE → 2)")
    runtime: float = Field(0.0, description="평균 실행 시간 (초)")
    memory: float = Field(0.0, description="평균 메모리 (KB)")
    results: List[Dict[str, Any]] = Field(default_factory=list, description="케이스별 결과 (숨김 케이스는 통과 여부만)")
    error: Optional[str] = Field(None, description="채점 인프라 오류 메시지")
    submittedAt: Optional[datetime] = Field(None, description="제출 시각")


class AsyncSubmitResponse(BaseModel):
    """비동기 제출 응답"""
    jobId: str = Field(..., description="작업 ID")
    status: str = Field(..., description="작업 상태")


class JobStatusResponse(BaseModel):
    """비동기 작업 상태 응답"""
    jobId: str = Field(..., description="작업 ID")
    status: str = Field(..., description="queued / processing / completed / failed")
    result: Optional[Dict[str, Any]] = Field(None, description="작업 결과 (완료 시)")


class SubmissionSummary(BaseModel):
    """사용자 제출 목록 항목"""
    id: int
    questionId: int
    questionTitle: Optional[str] = None
    language: str
    status: str
    score: int
    passedTests: int
    totalTests: int
    runtime: float
    memory: float
    submittedAt: datetime
    rejudgedAt: Optional[datetime] = None


class UserSubmissionsResponse(BaseModel):
    """사용자 제출 요약 응답"""
    submissions: List[SubmissionSummary] = Field(default_factory=list)
    totalScore: int = Field(0, description="리더보드 기준 총점")
    rank: Optional[int] = Field(None, description="현재 순위 (리더보드에 없으면 None)")
