"""
제출 API 라우터

[주요 엔드포인트]
1. POST /api/submissions
   - 동기 채점 (Judge0 폴링이 끝날 때까지 대기, 이벤트 루프는 막지 않음)
2. POST /api/submissions/async
   - 검증 후 채점 큐에 등록하고 jobId 반환
3. GET /api/submissions/jobs/{job_id}
   - 비동기 작업 상태/결과 조회
4. POST /api/submissions/{submission_id}/rejudge (관리자)
   - 숨김 케이스 재채점

[에러 처리]
- 400: 검증 실패 (코드/언어/테스트 케이스 없음)
- 404: 사용자/대회/문제/제출 없음
- 409: 대회 진행 시간이 아님
- 500: 그 외 서버 에러
"""
import logging

from fastapi import APIRouter, Depends, HTTPException, status

from app.application.services.exceptions import ServiceError
from app.application.services.submission_service import JudgedSubmission, SubmissionService
from app.domain.queue import JudgeTask, QueueAdapter
from app.presentation.api.dependencies import get_queue, get_submission_service, require_admin
from app.presentation.api.errors import internal_error, to_http_exception
from app.presentation.schemas.common import ErrorResponse
from app.presentation.schemas.submission import (
    AsyncSubmitResponse,
    JobStatusResponse,
    SubmitRequest,
    SubmitResponse,
)


router = APIRouter(prefix="/submissions", tags=["Submissions"])
logger = logging.getLogger(__name__)


def _to_response(judged: JudgedSubmission, reveal_hidden: bool = False) -> SubmitResponse:
    outcome = judged.outcome
    return SubmitResponse(
        submissionId=judged.submission_id,
        status=outcome.status.value,
        score=outcome.score,
        passedTests=outcome.passed_tests,
        totalTests=outcome.total_tests,
        executedTests=outcome.executed_tests,
        runtime=outcome.runtime,
        memory=outcome.memory,
        results=outcome.public_results(reveal_hidden=reveal_hidden),
        error=outcome.error,
        submittedAt=judged.submitted_at,
    )


@router.post(
    "",
    response_model=SubmitResponse,
    responses={
        400: {"model": ErrorResponse, "description": "잘못된 제출"},
        404: {"model": ErrorResponse, "description": "사용자/대회/문제를 찾을 수 없음"},
        409: {"model": ErrorResponse, "description": "대회 진행 시간이 아님"},
        500: {"model": ErrorResponse, "description": "서버 에러"}
    },
    summary="코드 제출 (동기 채점)",
    description="""
    코드를 제출하고 채점 결과를 받습니다.

    **처리 과정:**
    1. 코드/언어/대회 시간/문제 검증
    2. 예제 → 테스트 케이스 순서로 Judge0 실행 (TLE/CE/RE 발생 시 즉시 중단)
    3. 제출 저장 및 리더보드 갱신

    **참고:**
    - 숨김 테스트 케이스는 통과 여부만 반환합니다.
    - Judge0 장애 시 status는 ERROR로 저장됩니다.
    """
)
async def submit_code(
    request: SubmitRequest,
    service: SubmissionService = Depends(get_submission_service)
) -> SubmitResponse:
    """코드 제출"""
    try:
        judged = await service.submit(
            user_id=request.userId,
            contest_id=request.contestId,
            question_id=request.questionId,
            code=request.code,
            language=request.language,
        )
        return _to_response(judged)

    except ServiceError as e:
        logger.info(f"[SubmitCode] 요청 거부 - error_code: {e.error_code}, message: {e.message}")
        raise to_http_exception(e)
    except Exception as e:
        logger.error(f"[SubmitCode] 오류: {str(e)}", exc_info=True)
        raise internal_error(f"제출 처리 중 오류가 발생했습니다: {str(e)}")


@router.post(
    "/async",
    response_model=AsyncSubmitResponse,
    status_code=status.HTTP_202_ACCEPTED,
    responses={
        400: {"model": ErrorResponse, "description": "잘못된 제출"},
        404: {"model": ErrorResponse, "description": "사용자/대회/문제를 찾을 수 없음"},
        409: {"model": ErrorResponse, "description": "대회 진행 시간이 아님"},
        500: {"model": ErrorResponse, "description": "서버 에러"}
    },
    summary="코드 제출 (비동기 채점)",
    description="검증 후 채점 큐에 등록하고 jobId를 반환합니다. 결과는 /api/submissions/jobs/{jobId}로 조회합니다."
)
async def submit_code_async(
    request: SubmitRequest,
    service: SubmissionService = Depends(get_submission_service),
    queue: QueueAdapter = Depends(get_queue)
) -> AsyncSubmitResponse:
    """비동기 코드 제출"""
    try:
        await service.validate_submission(
            user_id=request.userId,
            contest_id=request.contestId,
            question_id=request.questionId,
            code=request.code,
            language=request.language,
        )

        task = JudgeTask(
            user_id=request.userId,
            contest_id=request.contestId,
            question_id=request.questionId,
            code=request.code,
            language=request.language,
        )
        await queue.enqueue(task)

        logger.info(f"[SubmitCodeAsync] 작업 등록 - task_id: {task.task_id}, user_id: {request.userId}")
        return AsyncSubmitResponse(jobId=task.task_id, status="queued")

    except ServiceError as e:
        logger.info(f"[SubmitCodeAsync] 요청 거부 - error_code: {e.error_code}, message: {e.message}")
        raise to_http_exception(e)
    except Exception as e:
        logger.error(f"[SubmitCodeAsync] 오류: {str(e)}", exc_info=True)
        raise internal_error(f"제출 등록 중 오류가 발생했습니다: {str(e)}")


@router.get(
    "/jobs/{job_id}",
    response_model=JobStatusResponse,
    responses={
        404: {"model": ErrorResponse, "description": "작업을 찾을 수 없음 (만료 포함)"}
    },
    summary="비동기 채점 작업 조회"
)
async def get_job(
    job_id: str,
    queue: QueueAdapter = Depends(get_queue)
) -> JobStatusResponse:
    """비동기 작업 상태/결과 조회"""
    job_status = await queue.get_status(job_id)
    if job_status is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail={
                "error": True,
                "error_code": "JOB_NOT_FOUND",
                "error_message": f"작업을 찾을 수 없습니다. (job_id: {job_id})"
            }
        )

    result = await queue.get_result(job_id)
    return JobStatusResponse(
        jobId=job_id,
        status=job_status.value,
        result=result.model_dump(mode="json") if result else None,
    )


@router.post(
    "/{submission_id}/rejudge",
    response_model=SubmitResponse,
    dependencies=[Depends(require_admin)],
    responses={
        403: {"model": ErrorResponse, "description": "관리자 권한 없음"},
        404: {"model": ErrorResponse, "description": "제출을 찾을 수 없음"},
        500: {"model": ErrorResponse, "description": "서버 에러"}
    },
    summary="재채점 (관리자)",
    description="숨김 테스트 케이스만 다시 실행합니다. ERROR 상태 제출은 전체를 다시 실행합니다."
)
async def rejudge_submission(
    submission_id: int,
    service: SubmissionService = Depends(get_submission_service)
) -> SubmitResponse:
    """제출 재채점"""
    try:
        judged = await service.rejudge(submission_id)
        return _to_response(judged, reveal_hidden=True)

    except ServiceError as e:
        logger.info(f"[Rejudge] 요청 거부 - error_code: {e.error_code}, message: {e.message}")
        raise to_http_exception(e)
    except Exception as e:
        logger.error(f"[Rejudge] 오류: {str(e)}", exc_info=True)
        raise internal_error(f"재채점 중 오류가 발생했습니다: {str(e)}")
