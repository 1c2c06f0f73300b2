"""
공통 테스트 픽스처
"""
from datetime import datetime, timedelta, timezone
from types import SimpleNamespace
from typing import Callable, List, Optional

import pytest

from app.infrastructure.judge0.client import ExecutionResult


BASE_TIME = datetime(2026, 1, 1, 9, 0, tzinfo=timezone.utc)


def make_result(
    status_id: int = 3,
    stdout: Optional[str] = "",
    time: Optional[float] = 0.01,
    memory: Optional[float] = 1000.0,
    **kwargs,
) -> ExecutionResult:
    """Judge0 실행 결과 생성"""
    descriptions = {
        3: "Accepted",
        4: "Wrong Answer",
        5: "Time Limit Exceeded",
        6: "Compilation Error",
        11: "Runtime Error (NZEC)",
        13: "Internal Error",
    }
    return ExecutionResult(
        token=kwargs.pop("token", "tok"),
        stdout=stdout,
        status_id=status_id,
        status_description=descriptions.get(status_id, "Other"),
        time=time,
        memory=memory,
        **kwargs,
    )


class FakeJudgeClient:
    """stdin별로 미리 정한 결과를 돌려주는 Judge0 클라이언트"""

    def __init__(self, responder: Callable[[str], ExecutionResult]):
        self.responder = responder
        self.calls: List[str] = []

    async def execute(self, source_code, language_id, stdin="", max_attempts=None, interval_ms=None):
        self.calls.append(stdin)
        return self.responder(stdin)

    async def check_connection(self) -> bool:
        return True

    async def close(self):
        pass


def echo_responder(overrides: Optional[dict] = None) -> Callable[[str], ExecutionResult]:
    """
    기본: 입력을 그대로 출력 (Accepted)
    overrides: stdin -> ExecutionResult 또는 Exception
    """
    overrides = overrides or {}

    def respond(stdin: str) -> ExecutionResult:
        if stdin in overrides:
            value = overrides[stdin]
            if isinstance(value, Exception):
                raise value
            return value
        return make_result(3, stdout=stdin + "\n")

    return respond


def make_question(points: int = 100, sample_input=None, sample_output=None, question_id: int = 10):
    return SimpleNamespace(
        id=question_id,
        title=f"Question {question_id}",
        points=points,
        sample_input=sample_input,
        sample_output=sample_output,
    )


def make_cases(count: int, hidden_from: Optional[int] = None):
    """입력 'in{i}' / 기대 출력 'in{i}' 인 테스트 케이스 (hidden_from 이후는 숨김)"""
    return [
        SimpleNamespace(
            id=100 + i,
            input=f"in{i}",
            expected_output=f"in{i}",
            is_hidden=hidden_from is not None and i >= hidden_from,
        )
        for i in range(count)
    ]


def make_submission(
    submission_id: int,
    user_id: int,
    question_id: int,
    score: int = 0,
    status: str = "ACCEPTED",
    minutes: int = 0,
    code: Optional[str] = "print('hi')",
):
    return SimpleNamespace(
        id=submission_id,
        user_id=user_id,
        question_id=question_id,
        score=score,
        status=status,
        submitted_at=BASE_TIME + timedelta(minutes=minutes),
        code=code,
    )


@pytest.fixture
def question():
    return make_question()


@pytest.fixture
def echo_client():
    return FakeJudgeClient(echo_responder())
