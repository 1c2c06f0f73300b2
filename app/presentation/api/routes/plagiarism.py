"""
표절 검사 API 라우터 (관리자)
"""
import logging

from fastapi import APIRouter, Depends, Query

from app.application.services.exceptions import ServiceError
from app.application.services.plagiarism_service import PlagiarismService
from app.presentation.api.dependencies import get_plagiarism_service, require_admin
from app.presentation.api.errors import internal_error, to_http_exception
from app.presentation.schemas.common import ErrorResponse
from app.presentation.schemas.plagiarism import (
    ComparisonResponse,
    PlagiarismScanRequest,
    PlagiarismScanResponse,
)


router = APIRouter(
    prefix="/plagiarism",
    tags=["Plagiarism"],
    dependencies=[Depends(require_admin)],
)
logger = logging.getLogger(__name__)


@router.post(
    "/scan",
    response_model=PlagiarismScanResponse,
    responses={
        400: {"model": ErrorResponse, "description": "잘못된 임계값"},
        403: {"model": ErrorResponse, "description": "관리자 권한 없음"},
        404: {"model": ErrorResponse, "description": "대회를 찾을 수 없음"},
        500: {"model": ErrorResponse, "description": "서버 에러"}
    },
    summary="대회 표절 검사",
    description="""
    같은 문제에 대한 서로 다른 사용자의 제출을 쌍으로 비교합니다.

    **참고:**
    - 유사도는 정수 퍼센트로 반환합니다.
    - 결과에는 코드 원문이 포함되지 않습니다.
    """
)
async def scan_contest(
    request: PlagiarismScanRequest,
    service: PlagiarismService = Depends(get_plagiarism_service)
) -> PlagiarismScanResponse:
    """대회 표절 검사"""
    try:
        report = await service.scan_contest(request.contestId, request.threshold)
        return PlagiarismScanResponse.model_validate(report)

    except ServiceError as e:
        raise to_http_exception(e)
    except Exception as e:
        logger.error(f"[PlagiarismScan] 오류: {str(e)}", exc_info=True)
        raise internal_error(f"표절 검사 중 오류가 발생했습니다: {str(e)}")


@router.get(
    "/compare",
    response_model=ComparisonResponse,
    responses={
        403: {"model": ErrorResponse, "description": "관리자 권한 없음"},
        404: {"model": ErrorResponse, "description": "제출을 찾을 수 없음"},
        500: {"model": ErrorResponse, "description": "서버 에러"}
    },
    summary="두 제출 비교"
)
async def compare_submissions(
    submission1: int = Query(..., description="첫 번째 제출 ID"),
    submission2: int = Query(..., description="두 번째 제출 ID"),
    service: PlagiarismService = Depends(get_plagiarism_service)
) -> ComparisonResponse:
    """두 제출 상세 비교"""
    try:
        comparison = await service.compare_submissions(submission1, submission2)
        return ComparisonResponse.model_validate(comparison)

    except ServiceError as e:
        raise to_http_exception(e)
    except Exception as e:
        logger.error(f"[PlagiarismCompare] 오류: {str(e)}", exc_info=True)
        raise internal_error(f"제출 비교 중 오류가 발생했습니다: {str(e)}")
