"""
채점 도메인 스키마
테스트 케이스 실행 계획, 케이스별 결과, 제출 단위 최종 결과
"""
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field

from app.infrastructure.persistence.models.enums import SubmissionStatusEnum, VerdictEnum


class PlannedCase(BaseModel):
    """실행 순서가 정해진 테스트 케이스"""
    index: int = Field(..., description="실행 순서 (0부터)")
    test_case_id: Optional[int] = Field(None, description="테스트 케이스 ID (예제는 None)")
    input: str = Field("", description="표준 입력")
    expected_output: str = Field("", description="기대 출력")
    is_hidden: bool = Field(False, description="숨김 케이스 여부")
    is_sample: bool = Field(False, description="문제 예제 여부")


class CaseResult(BaseModel):
    """테스트 케이스 1개의 실행 결과"""
    index: int
    test_case_id: Optional[int] = None
    is_hidden: bool = False
    is_sample: bool = False
    input: Optional[str] = None
    expected_output: Optional[str] = None
    actual_output: Optional[str] = None
    passed: bool = False
    verdict: VerdictEnum = VerdictEnum.FAILED
    status_id: Optional[int] = None
    status_description: Optional[str] = None
    time: Optional[float] = None
    memory: Optional[float] = None
    error: Optional[str] = None

    def public_view(self, reveal_hidden: bool = False) -> Dict[str, Any]:
        """
        사용자에게 노출할 결과

        숨김 케이스는 통과 여부와 숨김 플래그만 노출합니다.
        """
        if self.is_hidden and not reveal_hidden:
            return {
                "index": self.index,
                "passed": self.passed,
                "isHidden": True,
            }
        return {
            "index": self.index,
            "passed": self.passed,
            "isHidden": self.is_hidden,
            "input": self.input,
            "expected": self.expected_output,
            "output": self.actual_output,
            "status": self.status_description,
            "runtime": self.time,
            "memory": self.memory,
            "error": self.error,
        }


class JudgeOutcome(BaseModel):
    """제출 1건의 최종 채점 결과"""
    status: SubmissionStatusEnum
    score: int = 0
    passed_tests: int = 0
    total_tests: int = 0  # 실행 계획 전체 길이
    executed_tests: int = 0  # 이번에 실제로 처리한 케이스 수 (조기 중단 포함)
    runtime: float = 0.0
    memory: float = 0.0
    results: List[CaseResult] = Field(default_factory=list)
    error: Optional[str] = None

    @property
    def is_infra_failure(self) -> bool:
        return self.status == SubmissionStatusEnum.ERROR

    def public_results(self, reveal_hidden: bool = False) -> List[Dict[str, Any]]:
        """숨김 케이스를 가린 케이스별 결과 목록"""
        return [r.public_view(reveal_hidden=reveal_hidden) for r in self.results]
