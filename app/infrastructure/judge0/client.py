"""
Judge0 API 클라이언트

[동작 방식]
1. submit: 코드 제출 (wait=false) → token 발급
2. poll: token으로 현재 상태 1회 조회
3. execute: submit 후 터미널 상태(status.id >= 3)가 될 때까지 폴링

[에러 처리]
- 제출 거부 / 연결 실패: SubmissionError
- 응답 형식 오류: JudgeResponseError
- 폴링 횟수 초과: JudgeTimeoutError (채점 결과가 아닌 인프라 실패)
"""
import asyncio
import logging
from typing import Any, Dict, Optional

import httpx
from pydantic import BaseModel, Field

from app.core.config import settings
from app.infrastructure.judge0.utils import is_terminal_status


logger = logging.getLogger(__name__)


class JudgeClientError(Exception):
    """Judge0 인프라 에러 (채점 결과와 구분됨)"""


class SubmissionError(JudgeClientError):
    """Judge0가 제출을 거부했거나 연결할 수 없음"""


class JudgeResponseError(JudgeClientError):
    """Judge0 응답 형식 오류"""


class JudgeTimeoutError(JudgeClientError, TimeoutError):
    """폴링 횟수 안에 터미널 상태를 받지 못함"""


class ExecutionResult(BaseModel):
    """Judge0 실행 결과 (1회 실행)"""
    token: str = Field(..., description="Judge0 토큰")
    stdout: Optional[str] = Field(None, description="표준 출력")
    stderr: Optional[str] = Field(None, description="표준 에러")
    compile_output: Optional[str] = Field(None, description="컴파일 출력")
    message: Optional[str] = Field(None, description="Judge0 메시지")
    status_id: int = Field(..., description="상태 ID")
    status_description: str = Field("", description="상태 설명")
    time: Optional[float] = Field(None, description="실행 시간 (초)")
    memory: Optional[float] = Field(None, description="메모리 (KB)")

    @property
    def is_terminal(self) -> bool:
        return is_terminal_status(self.status_id)

    @classmethod
    def from_response(cls, token: str, data: Dict[str, Any]) -> "ExecutionResult":
        """GET /submissions/{token} 응답을 변환"""
        if not isinstance(data, dict):
            raise JudgeResponseError(f"Judge0 응답이 객체가 아닙니다: {type(data).__name__}")

        status = data.get("status")
        if not isinstance(status, dict) or status.get("id") is None:
            raise JudgeResponseError(f"Judge0 응답에 status.id가 없습니다 - token: {token}")

        try:
            status_id = int(status["id"])
        except (TypeError, ValueError) as e:
            raise JudgeResponseError(f"잘못된 status.id: {status.get('id')}") from e

        return cls(
            token=data.get("token") or token,
            stdout=data.get("stdout"),
            stderr=data.get("stderr"),
            compile_output=data.get("compile_output"),
            message=data.get("message"),
            status_id=status_id,
            status_description=status.get("description") or "",
            time=_to_float(data.get("time")),
            memory=_to_float(data.get("memory")),
        )


def _to_float(value: Any) -> Optional[float]:
    """Judge0의 time("0.012")/memory(3456) 값을 float로 변환 (없으면 None)"""
    if value is None or value == "":
        return None
    try:
        return float(value)
    except (TypeError, ValueError):
        return None


class Judge0Client:
    """Judge0 비동기 클라이언트"""

    def __init__(
        self,
        base_url: Optional[str] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        timeout: Optional[float] = None,
        backoff_strategy: Optional[str] = None,
        max_delay_ms: Optional[int] = None,
    ):
        self.base_url = (base_url or settings.JUDGE0_API_URL).rstrip("/")
        self.backoff_strategy = backoff_strategy or settings.JUDGE0_POLL_BACKOFF_STRATEGY
        self.max_delay_ms = max_delay_ms if max_delay_ms is not None else settings.JUDGE0_POLL_MAX_DELAY_MS
        self._client = httpx.AsyncClient(
            base_url=self.base_url,
            headers=self._get_headers(),
            timeout=timeout or settings.JUDGE0_REQUEST_TIMEOUT,
            transport=transport,
        )

    def _get_headers(self) -> Dict[str, str]:
        """요청 헤더 생성"""
        headers = {
            "Content-Type": "application/json",
        }
        if settings.JUDGE0_USE_RAPIDAPI and settings.JUDGE0_API_KEY:
            headers["X-RapidAPI-Key"] = settings.JUDGE0_API_KEY
            headers["X-RapidAPI-Host"] = settings.JUDGE0_RAPIDAPI_HOST
        elif settings.JUDGE0_AUTH_TOKEN:
            headers["X-Auth-Token"] = settings.JUDGE0_AUTH_TOKEN
        return headers

    async def close(self):
        """HTTP 클라이언트 종료"""
        await self._client.aclose()

    async def __aenter__(self) -> "Judge0Client":
        return self

    async def __aexit__(self, exc_type, exc, tb):
        await self.close()

    async def check_connection(self) -> bool:
        """Judge0 연결 확인 (GET /about)"""
        try:
            response = await self._client.get("/about")
            return response.is_success
        except httpx.HTTPError as e:
            logger.warning(f"[Judge0Client] 연결 확인 실패: {str(e)}")
            return False

    async def submit(self, source_code: str, language_id: int, stdin: str = "") -> str:
        """
        코드 제출 (비동기 실행 요청)

        Args:
            source_code: 소스 코드
            language_id: Judge0 언어 ID
            stdin: 표준 입력

        Returns:
            Judge0 token

        Raises:
            SubmissionError: 거부되었거나 연결 실패
        """
        payload = {
            "source_code": source_code,
            "language_id": language_id,
            "stdin": stdin or "",
        }
        try:
            response = await self._client.post(
                "/submissions",
                params={"base64_encoded": "false", "wait": "false"},
                json=payload,
            )
        except httpx.TransportError as e:
            raise SubmissionError(f"Judge0 연결 실패: {str(e)}") from e

        if not response.is_success:
            raise SubmissionError(
                f"Judge0 제출 거부 - status: {response.status_code}, body: {response.text[:200]}"
            )

        try:
            token = response.json().get("token")
        except (ValueError, AttributeError) as e:
            raise SubmissionError("Judge0 제출 응답을 해석할 수 없습니다") from e

        if not token:
            raise SubmissionError("Judge0 제출 응답에 token이 없습니다")

        logger.debug(f"[Judge0Client] 제출 완료 - token: {token}, language_id: {language_id}")
        return token

    async def poll(self, token: str) -> ExecutionResult:
        """
        token으로 실행 상태 1회 조회

        Raises:
            SubmissionError: HTTP 에러 또는 연결 실패
            JudgeResponseError: 응답 형식 오류
        """
        try:
            response = await self._client.get(
                f"/submissions/{token}",
                params={"base64_encoded": "false"},
            )
        except httpx.TransportError as e:
            raise SubmissionError(f"Judge0 연결 실패: {str(e)}") from e

        if not response.is_success:
            raise SubmissionError(f"Judge0 조회 실패 - status: {response.status_code}, token: {token}")

        try:
            data = response.json()
        except ValueError as e:
            raise JudgeResponseError(f"Judge0 응답이 JSON이 아닙니다 - token: {token}") from e

        return ExecutionResult.from_response(token, data)

    def _next_delay(self, attempt: int, interval_ms: int) -> float:
        """다음 폴링까지 대기 시간 (초)"""
        if self.backoff_strategy == "exponential":
            delay_ms = interval_ms * (2 ** attempt)
        elif self.backoff_strategy == "linear":
            delay_ms = interval_ms * (attempt + 1)
        else:
            delay_ms = interval_ms
        return min(delay_ms, max(self.max_delay_ms, interval_ms)) / 1000.0

    async def execute(
        self,
        source_code: str,
        language_id: int,
        stdin: str = "",
        max_attempts: Optional[int] = None,
        interval_ms: Optional[int] = None,
    ) -> ExecutionResult:
        """
        제출 후 터미널 상태가 될 때까지 폴링

        Args:
            source_code: 소스 코드
            language_id: Judge0 언어 ID
            stdin: 표준 입력
            max_attempts: 최대 폴링 횟수
            interval_ms: 폴링 간격 (밀리초)

        Returns:
            터미널 상태의 실행 결과

        Raises:
            SubmissionError: 제출 실패
            JudgeResponseError: 응답 형식 오류
            JudgeTimeoutError: 폴링 횟수 초과
        """
        max_attempts = max_attempts if max_attempts is not None else settings.JUDGE0_POLL_MAX_ATTEMPTS
        interval_ms = interval_ms if interval_ms is not None else settings.JUDGE0_POLL_INTERVAL_MS

        token = await self.submit(source_code, language_id, stdin)
        last_status: Optional[str] = None

        for attempt in range(max_attempts):
            await asyncio.sleep(self._next_delay(attempt, interval_ms))

            try:
                result = await self.poll(token)
            except SubmissionError as e:
                # 일시적인 조회 실패는 재시도
                logger.warning(
                    f"[Judge0Client] 폴링 실패 ({attempt + 1}/{max_attempts}) - token: {token}, error: {str(e)}"
                )
                continue

            last_status = result.status_description
            if result.is_terminal:
                logger.debug(
                    f"[Judge0Client] 실행 완료 - token: {token}, status: {result.status_id} "
                    f"({result.status_description}), attempts: {attempt + 1}"
                )
                return result

        raise JudgeTimeoutError(
            f"Judge0 결과 대기 타임아웃 - token: {token}, attempts: {max_attempts}, last_status: {last_status}"
        )
