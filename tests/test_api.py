"""
API 테스트

lifespan(DB/Redis 연결)은 실행하지 않고 서비스 의존성을 가짜로 대체합니다.
"""
from types import SimpleNamespace
from unittest.mock import AsyncMock

import pytest
from fastapi.testclient import TestClient

from conftest import BASE_TIME, FakeJudgeClient, echo_responder
from app.application.services.exceptions import (
    ContestNotActiveError,
    InvalidInputError,
    NotFoundError,
    SubmissionValidationError,
)
from app.application.services.submission_service import JudgedSubmission
from app.core.config import settings
from app.domain.judging import CaseResult, JudgeOutcome
from app.domain.leaderboard import RankedEntry
from app.domain.queue import MemoryQueueAdapter
from app.infrastructure.persistence import session as db_session
from app.infrastructure.persistence.models.enums import SubmissionStatusEnum, VerdictEnum
from app.main import app
from app.presentation.api.dependencies import (
    get_judge_client,
    get_leaderboard_service,
    get_plagiarism_service,
    get_queue,
    get_submission_service,
)


ADMIN_KEY = "test-admin-key"

SUBMIT_BODY = {
    "userId": 1,
    "contestId": 1,
    "questionId": 10,
    "code": "print(input())",
    "language": "python",
}


def judged_submission() -> JudgedSubmission:
    return JudgedSubmission(
        submission_id=42,
        user_id=1,
        contest_id=1,
        question_id=10,
        submitted_at=BASE_TIME,
        outcome=JudgeOutcome(
            status=SubmissionStatusEnum.WRONG_ANSWER,
            score=50,
            passed_tests=1,
            total_tests=2,
            executed_tests=2,
            runtime=0.02,
            memory=2000.0,
            results=[
                CaseResult(index=0, test_case_id=100, input="in0", expected_output="in0",
                           actual_output="in0", passed=True, verdict=VerdictEnum.PASSED,
                           status_description="Accepted"),
                CaseResult(index=1, test_case_id=101, is_hidden=True, input="secret",
                           expected_output="secret", actual_output="nope", passed=False,
                           verdict=VerdictEnum.FAILED, status_description="Accepted"),
            ],
        ),
    )


@pytest.fixture
def submission_service():
    service = AsyncMock()
    service.submit.return_value = judged_submission()
    service.rejudge.return_value = judged_submission()
    service.validate_submission.return_value = (None, [])
    return service


@pytest.fixture
def leaderboard_service():
    return AsyncMock()


@pytest.fixture
def plagiarism_service():
    return AsyncMock()


@pytest.fixture
def queue():
    return MemoryQueueAdapter(ttl_seconds=60, max_entries=100)


@pytest.fixture
def client(submission_service, leaderboard_service, plagiarism_service, queue, monkeypatch):
    """테스트 클라이언트 생성"""
    monkeypatch.setattr(settings, "ADMIN_API_KEY", ADMIN_KEY)
    monkeypatch.setattr(settings, "USE_REDIS_QUEUE", False)

    app.dependency_overrides[get_submission_service] = lambda: submission_service
    app.dependency_overrides[get_leaderboard_service] = lambda: leaderboard_service
    app.dependency_overrides[get_plagiarism_service] = lambda: plagiarism_service
    app.dependency_overrides[get_queue] = lambda: queue
    app.dependency_overrides[get_judge_client] = lambda: FakeJudgeClient(echo_responder())
    yield TestClient(app)
    app.dependency_overrides.clear()


class TestHealthAPI:
    """헬스 체크 API 테스트"""

    def test_info(self, client):
        response = client.get("/info")
        assert response.status_code == 200
        data = response.json()
        assert data["name"] == settings.APP_NAME
        assert data["version"] == settings.APP_VERSION

    def test_health_ok(self, client, monkeypatch):
        monkeypatch.setattr(db_session, "check_db_connection", AsyncMock(return_value=True))

        response = client.get("/health")

        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "ok"
        assert data["components"]["redis"] is None
        assert data["components"]["postgres"] is True
        assert data["components"]["judge0"] is True
        assert data["details"]["pending_jobs"] == 0

    def test_health_degraded_without_db(self, client, monkeypatch):
        monkeypatch.setattr(db_session, "check_db_connection", AsyncMock(return_value=False))

        response = client.get("/health")

        assert response.status_code == 200
        assert response.json()["status"] == "degraded"


class TestSubmissionAPI:
    """제출 API 테스트"""

    def test_submit(self, client, submission_service):
        response = client.post("/api/submissions", json=SUBMIT_BODY)

        assert response.status_code == 200
        data = response.json()
        assert data["submissionId"] == 42
        assert data["status"] == "WRONG_ANSWER"
        assert data["score"] == 50
        assert data["passedTests"] == 1
        assert data["totalTests"] == 2
        assert data["executedTests"] == 2
        assert data["results"][0]["input"] == "in0"
        assert data["results"][1] == {"index": 1, "passed": False, "isHidden": True}
        submission_service.submit.assert_awaited_once_with(
            user_id=1, contest_id=1, question_id=10, code="print(input())", language="python"
        )

    def test_submit_missing_field(self, client):
        body = dict(SUBMIT_BODY)
        del body["code"]
        response = client.post("/api/submissions", json=body)
        assert response.status_code == 422

    def test_submit_invalid(self, client, submission_service):
        submission_service.submit.side_effect = SubmissionValidationError("지원하지 않는 언어입니다.")

        response = client.post("/api/submissions", json=SUBMIT_BODY)

        assert response.status_code == 400
        detail = response.json()["detail"]
        assert detail["error"] is True
        assert detail["error_code"] == "INVALID_SUBMISSION"

    def test_submit_not_found(self, client, submission_service):
        submission_service.submit.side_effect = NotFoundError("문제를 찾을 수 없습니다.")

        response = client.post("/api/submissions", json=SUBMIT_BODY)

        assert response.status_code == 404
        assert response.json()["detail"]["error_code"] == "NOT_FOUND"

    def test_submit_contest_closed(self, client, submission_service):
        submission_service.submit.side_effect = ContestNotActiveError("대회 진행 시간이 아닙니다.")

        response = client.post("/api/submissions", json=SUBMIT_BODY)

        assert response.status_code == 409
        assert response.json()["detail"]["error_code"] == "CONTEST_NOT_ACTIVE"

    def test_submit_unexpected_error(self, client, submission_service):
        submission_service.submit.side_effect = RuntimeError("boom")

        response = client.post("/api/submissions", json=SUBMIT_BODY)

        assert response.status_code == 500
        assert response.json()["detail"]["error_code"] == "INTERNAL_ERROR"


class TestAsyncJobAPI:
    """비동기 채점 작업 API 테스트"""

    def test_enqueue_and_poll(self, client, queue):
        response = client.post("/api/submissions/async", json=SUBMIT_BODY)

        assert response.status_code == 202
        job_id = response.json()["jobId"]
        assert response.json()["status"] == "queued"

        status_response = client.get(f"/api/submissions/jobs/{job_id}")
        assert status_response.status_code == 200
        assert status_response.json()["status"] == "queued"
        assert status_response.json()["result"] is None

    def test_enqueue_rejected_when_invalid(self, client, submission_service, queue):
        submission_service.validate_submission.side_effect = NotFoundError("대회를 찾을 수 없습니다.")

        response = client.post("/api/submissions/async", json=SUBMIT_BODY)

        assert response.status_code == 404
        assert len(queue._pending) == 0

    def test_unknown_job(self, client):
        response = client.get("/api/submissions/jobs/does-not-exist")

        assert response.status_code == 404
        assert response.json()["detail"]["error_code"] == "JOB_NOT_FOUND"


class TestRejudgeAPI:
    """재채점 API 테스트"""

    def test_requires_admin_key(self, client, submission_service):
        response = client.post("/api/submissions/42/rejudge")

        assert response.status_code == 403
        assert response.json()["detail"]["error_code"] == "FORBIDDEN"
        submission_service.rejudge.assert_not_awaited()

    def test_wrong_admin_key(self, client):
        response = client.post("/api/submissions/42/rejudge", headers={"X-Admin-Key": "wrong"})
        assert response.status_code == 403

    def test_rejected_when_key_not_configured(self, client, monkeypatch):
        monkeypatch.setattr(settings, "ADMIN_API_KEY", None)
        response = client.post("/api/submissions/42/rejudge", headers={"X-Admin-Key": ""})
        assert response.status_code == 403

    def test_rejudge_reveals_hidden_cases(self, client, submission_service):
        response = client.post("/api/submissions/42/rejudge", headers={"X-Admin-Key": ADMIN_KEY})

        assert response.status_code == 200
        hidden = response.json()["results"][1]
        assert hidden["isHidden"] is True
        assert hidden["input"] == "secret"
        submission_service.rejudge.assert_awaited_once_with(42)


class TestContestAPI:
    """대회 API 테스트"""

    def test_leaderboard(self, client, leaderboard_service):
        leaderboard_service.get_leaderboard.return_value = [
            RankedEntry(rank=1, user_id=2, username="bob", total_score=200, last_submission_time=BASE_TIME),
            RankedEntry(rank=2, user_id=1, username="alice", total_score=100, last_submission_time=None),
        ]

        response = client.get("/api/contests/1/leaderboard")

        assert response.status_code == 200
        data = response.json()
        assert data["contestId"] == 1
        assert [e["userId"] for e in data["entries"]] == [2, 1]
        assert data["entries"][0]["totalScore"] == 200

    def test_leaderboard_unknown_contest(self, client, leaderboard_service):
        leaderboard_service.get_leaderboard.side_effect = NotFoundError("대회를 찾을 수 없습니다.")

        response = client.get("/api/contests/999/leaderboard")

        assert response.status_code == 404

    def test_user_submissions(self, client, leaderboard_service):
        leaderboard_service.get_user_summary.return_value = {
            "submissions": [
                SimpleNamespace(
                    id=7,
                    question_id=10,
                    question=SimpleNamespace(title="A+B"),
                    language="python",
                    status=SubmissionStatusEnum.ACCEPTED,
                    score=100,
                    passed_tests=3,
                    total_tests=3,
                    runtime=0.01,
                    memory=1000.0,
                    submitted_at=BASE_TIME,
                    rejudged_at=None,
                )
            ],
            "total_score": 100,
            "rank": 1,
        }

        response = client.get("/api/contests/1/users/1/submissions")

        assert response.status_code == 200
        data = response.json()
        assert data["totalScore"] == 100
        assert data["rank"] == 1
        assert data["submissions"][0]["questionTitle"] == "A+B"
        assert data["submissions"][0]["status"] == "ACCEPTED"


class TestPlagiarismAPI:
    """표절 검사 API 테스트"""

    def test_scan_requires_admin(self, client, plagiarism_service):
        response = client.post("/api/plagiarism/scan", json={"contestId": 1})

        assert response.status_code == 403
        plagiarism_service.scan_contest.assert_not_awaited()

    def test_scan(self, client, plagiarism_service):
        plagiarism_service.scan_contest.return_value = {
            "totalSubmissions": 2,
            "suspiciousPairs": 1,
            "threshold": 0.8,
            "results": [
                {
                    "similarity": 95,
                    "method": "Jaccard",
                    "question": "A+B",
                    "users": [
                        {"id": 1, "username": "alice", "name": "Alice", "submissionId": 1,
                         "submittedAt": BASE_TIME.isoformat()},
                        {"id": 2, "username": "bob", "name": None, "submissionId": 2,
                         "submittedAt": BASE_TIME.isoformat()},
                    ],
                }
            ],
        }

        response = client.post(
            "/api/plagiarism/scan",
            json={"contestId": 1, "threshold": 0.8},
            headers={"X-Admin-Key": ADMIN_KEY},
        )

        assert response.status_code == 200
        data = response.json()
        assert data["suspiciousPairs"] == 1
        assert data["results"][0]["users"][1]["username"] == "bob"
        plagiarism_service.scan_contest.assert_awaited_once_with(1, 0.8)

    def test_scan_threshold_out_of_range(self, client):
        response = client.post(
            "/api/plagiarism/scan",
            json={"contestId": 1, "threshold": 1.5},
            headers={"X-Admin-Key": ADMIN_KEY},
        )
        assert response.status_code == 422

    def test_scan_service_rejects_input(self, client, plagiarism_service):
        plagiarism_service.scan_contest.side_effect = InvalidInputError("threshold는 0과 1 사이여야 합니다.")

        response = client.post(
            "/api/plagiarism/scan",
            json={"contestId": 1},
            headers={"X-Admin-Key": ADMIN_KEY},
        )

        assert response.status_code == 400
        assert response.json()["detail"]["error_code"] == "INVALID_INPUT"

    def test_compare_missing_submission(self, client, plagiarism_service):
        plagiarism_service.compare_submissions.side_effect = NotFoundError("제출을 찾을 수 없습니다.")

        response = client.get(
            "/api/plagiarism/compare",
            params={"submission1": 1, "submission2": 2},
            headers={"X-Admin-Key": ADMIN_KEY},
        )

        assert response.status_code == 404
