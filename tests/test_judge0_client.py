"""
Judge0Client 테스트

httpx.MockTransport로 Judge0 API를 흉내냅니다.
"""
import json

import httpx
import pytest

from app.infrastructure.judge0.client import (
    ExecutionResult,
    Judge0Client,
    JudgeClientError,
    JudgeResponseError,
    JudgeTimeoutError,
    SubmissionError,
)
from app.infrastructure.judge0.utils import (
    UnsupportedLanguageError,
    is_terminal_status,
    resolve_language_id,
)


def make_client(handler, **kwargs) -> Judge0Client:
    return Judge0Client(
        base_url="http://judge0.test",
        transport=httpx.MockTransport(handler),
        **kwargs,
    )


def status_body(status_id, description="", **extra):
    body = {"status": {"id": status_id, "description": description}}
    body.update(extra)
    return body


class TestLanguageTable:
    """언어 테이블 테스트"""

    def test_known_languages(self):
        assert resolve_language_id("python") == 71
        assert resolve_language_id("CPP") == 54
        assert resolve_language_id(" java ") == 62
        assert resolve_language_id("javascript") == 63
        assert resolve_language_id("c") == 50

    def test_unknown_language_raises(self):
        with pytest.raises(UnsupportedLanguageError) as exc_info:
            resolve_language_id("cobol")
        assert exc_info.value.language == "cobol"
        assert isinstance(exc_info.value, ValueError)

    def test_terminal_status(self):
        assert is_terminal_status(1) is False
        assert is_terminal_status(2) is False
        assert is_terminal_status(3) is True
        assert is_terminal_status(14) is True
        assert is_terminal_status(None) is False


class TestExecutionResult:
    """응답 변환 테스트"""

    def test_from_response(self):
        result = ExecutionResult.from_response("abc", status_body(
            3, "Accepted", stdout="3\n", time="0.012", memory=3456
        ))
        assert result.status_id == 3
        assert result.is_terminal is True
        assert result.time == pytest.approx(0.012)
        assert result.memory == 3456.0
        assert result.stdout == "3\n"

    def test_missing_time_and_memory_are_none(self):
        result = ExecutionResult.from_response("abc", status_body(3, "Accepted"))
        assert result.time is None
        assert result.memory is None

    def test_missing_status_raises(self):
        with pytest.raises(JudgeResponseError):
            ExecutionResult.from_response("abc", {"stdout": "x"})


class TestSubmit:
    """제출 테스트"""

    @pytest.mark.asyncio
    async def test_submit_returns_token(self):
        seen = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen["params"] = dict(request.url.params)
            seen["body"] = json.loads(request.content)
            return httpx.Response(201, json={"token": "tok-1"})

        async with make_client(handler) as client:
            token = await client.submit("print(1)", 71, "in")

        assert token == "tok-1"
        assert seen["params"] == {"base64_encoded": "false", "wait": "false"}
        assert seen["body"] == {"source_code": "print(1)", "language_id": 71, "stdin": "in"}

    @pytest.mark.asyncio
    async def test_rejected_submission(self):
        client = make_client(lambda request: httpx.Response(422, json={"error": "bad"}))
        with pytest.raises(SubmissionError):
            await client.submit("code", 71)
        await client.close()

    @pytest.mark.asyncio
    async def test_missing_token(self):
        client = make_client(lambda request: httpx.Response(201, json={}))
        with pytest.raises(SubmissionError):
            await client.submit("code", 71)
        await client.close()

    @pytest.mark.asyncio
    async def test_unreachable(self):
        def handler(request):
            raise httpx.ConnectError("connection refused", request=request)

        client = make_client(handler)
        with pytest.raises(SubmissionError):
            await client.submit("code", 71)
        await client.close()


class TestExecute:
    """폴링 테스트"""

    @pytest.mark.asyncio
    async def test_polls_until_terminal(self):
        statuses = iter([1, 2, 2, 3])
        poll_count = {"n": 0}

        def handler(request: httpx.Request) -> httpx.Response:
            if request.method == "POST":
                return httpx.Response(201, json={"token": "tok"})
            poll_count["n"] += 1
            status_id = next(statuses)
            return httpx.Response(200, json=status_body(status_id, stdout="ok" if status_id == 3 else None))

        async with make_client(handler) as client:
            result = await client.execute("code", 71, "", max_attempts=10, interval_ms=0)

        assert result.status_id == 3
        assert result.stdout == "ok"
        assert poll_count["n"] == 4

    @pytest.mark.asyncio
    async def test_never_terminal_raises_timeout(self):
        def handler(request: httpx.Request) -> httpx.Response:
            if request.method == "POST":
                return httpx.Response(201, json={"token": "tok"})
            return httpx.Response(200, json=status_body(2, "Processing"))

        async with make_client(handler) as client:
            with pytest.raises(JudgeTimeoutError) as exc_info:
                await client.execute("code", 71, "", max_attempts=3, interval_ms=0)

        assert isinstance(exc_info.value, TimeoutError)
        assert isinstance(exc_info.value, JudgeClientError)

    @pytest.mark.asyncio
    async def test_transient_poll_error_is_retried(self):
        responses = iter([
            httpx.Response(503),
            httpx.Response(200, json=status_body(3, "Accepted", stdout="1")),
        ])

        def handler(request: httpx.Request) -> httpx.Response:
            if request.method == "POST":
                return httpx.Response(201, json={"token": "tok"})
            return next(responses)

        async with make_client(handler) as client:
            result = await client.execute("code", 71, "", max_attempts=5, interval_ms=0)

        assert result.status_id == 3

    @pytest.mark.asyncio
    async def test_malformed_response_raises(self):
        def handler(request: httpx.Request) -> httpx.Response:
            if request.method == "POST":
                return httpx.Response(201, json={"token": "tok"})
            return httpx.Response(200, json={"unexpected": True})

        async with make_client(handler) as client:
            with pytest.raises(JudgeResponseError):
                await client.execute("code", 71, "", max_attempts=3, interval_ms=0)


class TestBackoff:
    """폴링 간격 테스트"""

    @pytest.mark.asyncio
    async def test_strategies(self):
        fixed = make_client(lambda r: httpx.Response(200), backoff_strategy="fixed", max_delay_ms=5000)
        linear = make_client(lambda r: httpx.Response(200), backoff_strategy="linear", max_delay_ms=5000)
        exponential = make_client(lambda r: httpx.Response(200), backoff_strategy="exponential", max_delay_ms=3000)

        assert fixed._next_delay(5, 1000) == 1.0
        assert linear._next_delay(2, 1000) == 3.0
        assert exponential._next_delay(1, 1000) == 2.0
        assert exponential._next_delay(4, 1000) == 3.0

        for client in (fixed, linear, exponential):
            await client.close()


class TestCheckConnection:
    """연결 확인 테스트"""

    @pytest.mark.asyncio
    async def test_about(self):
        async with make_client(lambda r: httpx.Response(200, json={"version": "1.13.0"})) as client:
            assert await client.check_connection() is True

    @pytest.mark.asyncio
    async def test_unreachable(self):
        def handler(request):
            raise httpx.ConnectError("down", request=request)

        async with make_client(handler) as client:
            assert await client.check_connection() is False
