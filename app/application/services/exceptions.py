"""
서비스 계층 예외
라우터에서 HTTP 상태 코드와 error_code로 변환됩니다.
"""
from typing import Any, Dict, Optional


class ServiceError(Exception):
    """서비스 예외 베이스"""
    error_code = "SERVICE_ERROR"

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.details = details


class InvalidInputError(ServiceError):
    """잘못된 요청 값"""
    error_code = "INVALID_INPUT"


class SubmissionValidationError(InvalidInputError):
    """제출 검증 실패 (Judge0 호출 전 거부)"""
    error_code = "INVALID_SUBMISSION"


class NotFoundError(ServiceError):
    """대상 리소스 없음"""
    error_code = "NOT_FOUND"


class ContestNotActiveError(ServiceError):
    """대회 진행 시간이 아님"""
    error_code = "CONTEST_NOT_ACTIVE"
