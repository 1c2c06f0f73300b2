"""
데이터베이스 Enum 타입 정의
"""
import enum


class SubmissionStatusEnum(str, enum.Enum):
    """제출 상태 (최종 판정)"""
    PENDING = "PENDING"
    ACCEPTED = "ACCEPTED"
    WRONG_ANSWER = "WRONG_ANSWER"
    TIME_LIMIT_EXCEEDED = "TIME_LIMIT_EXCEEDED"
    COMPILATION_ERROR = "COMPILATION_ERROR"
    RUNTIME_ERROR = "RUNTIME_ERROR"
    ERROR = "ERROR"


class VerdictEnum(str, enum.Enum):
    """테스트 케이스별 결과"""
    PASSED = "passed"
    FAILED = "failed"
    TIME_LIMIT_EXCEEDED = "time_limit_exceeded"
    COMPILATION_ERROR = "compilation_error"
    RUNTIME_ERROR = "runtime_error"
    INFRA_ERROR = "infra_error"


class JobStatusEnum(str, enum.Enum):
    """비동기 채점 작업 상태"""
    QUEUED = "queued"
    PROCESSING = "processing"
    COMPLETED = "completed"
    FAILED = "failed"
