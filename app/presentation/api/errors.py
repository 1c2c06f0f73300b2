"""
서비스 예외 → HTTPException 변환
"""
from fastapi import HTTPException, status

from app.application.services.exceptions import (
    ContestNotActiveError,
    NotFoundError,
    ServiceError,
)


def to_http_exception(error: ServiceError) -> HTTPException:
    """ErrorResponse 형태의 detail로 변환"""
    if isinstance(error, NotFoundError):
        status_code = status.HTTP_404_NOT_FOUND
    elif isinstance(error, ContestNotActiveError):
        status_code = status.HTTP_409_CONFLICT
    else:
        # InvalidInputError 포함
        status_code = status.HTTP_400_BAD_REQUEST

    return HTTPException(
        status_code=status_code,
        detail={
            "error": True,
            "error_code": error.error_code,
            "error_message": error.message,
            "details": error.details,
        }
    )


def internal_error(message: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        detail={
            "error": True,
            "error_code": "INTERNAL_ERROR",
            "error_message": message,
        }
    )
