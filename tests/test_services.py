"""
애플리케이션 서비스 테스트

Repository는 AsyncMock으로 대체하고 DB 세션은 사용하지 않습니다.
"""
from types import SimpleNamespace
from unittest.mock import AsyncMock

import pytest

from conftest import (
    BASE_TIME,
    FakeJudgeClient,
    echo_responder,
    make_cases,
    make_question,
    make_result,
    make_submission,
)
from app.application.services.exceptions import (
    ContestNotActiveError,
    InvalidInputError,
    NotFoundError,
    SubmissionValidationError,
)
from app.application.services.leaderboard_service import LeaderboardService
from app.application.services.plagiarism_service import PlagiarismService
from app.application.services.submission_service import SubmissionService
from app.infrastructure.persistence.models.enums import SubmissionStatusEnum


def make_contest(active: bool = True):
    return SimpleNamespace(
        id=1,
        start_time=BASE_TIME,
        end_time=BASE_TIME,
        is_active=lambda now: active,
    )


@pytest.fixture
def db():
    return AsyncMock()


@pytest.fixture
def submission_service(db, echo_client):
    service = SubmissionService(db, echo_client)
    service.user_repo = AsyncMock()
    service.user_repo.get_user_by_id.return_value = SimpleNamespace(id=1, username="alice")
    service.contest_repo = AsyncMock()
    service.contest_repo.get_contest_by_id.return_value = make_contest()
    service.contest_repo.get_question.return_value = make_question()
    service.contest_repo.get_question_by_id.return_value = make_question()
    service.contest_repo.get_test_cases.return_value = make_cases(3, hidden_from=2)
    service.submission_repo = AsyncMock()
    service.submission_repo.create_submission.return_value = SimpleNamespace(id=42, submitted_at=BASE_TIME)
    service.leaderboard = AsyncMock()
    return service


class TestSubmissionService:
    """제출 서비스 테스트"""

    @pytest.mark.asyncio
    async def test_submit_judges_saves_and_updates_leaderboard(self, submission_service, db, echo_client):
        judged = await submission_service.submit(1, 1, 10, "print(input())", "python")

        assert judged.submission_id == 42
        assert judged.outcome.status == SubmissionStatusEnum.ACCEPTED
        assert judged.outcome.score == 100
        assert echo_client.calls == ["in0", "in1", "in2"]

        saved = submission_service.submission_repo.create_submission.await_args.kwargs
        assert saved["outcome"].passed_tests == 3
        db.commit.assert_awaited()
        submission_service.leaderboard.update_leaderboard.assert_awaited_once_with(1, 1)

    @pytest.mark.asyncio
    async def test_empty_code_rejected_before_judge(self, submission_service, echo_client):
        with pytest.raises(SubmissionValidationError):
            await submission_service.submit(1, 1, 10, "   ", "python")
        assert echo_client.calls == []

    @pytest.mark.asyncio
    async def test_unknown_language_rejected(self, submission_service, echo_client):
        with pytest.raises(SubmissionValidationError) as exc_info:
            await submission_service.submit(1, 1, 10, "code", "cobol")
        assert exc_info.value.details == {"language": "cobol"}
        assert echo_client.calls == []

    @pytest.mark.asyncio
    async def test_missing_user(self, submission_service):
        submission_service.user_repo.get_user_by_id.return_value = None
        with pytest.raises(NotFoundError):
            await submission_service.submit(1, 1, 10, "code", "python")

    @pytest.mark.asyncio
    async def test_missing_question(self, submission_service):
        submission_service.contest_repo.get_question.return_value = None
        with pytest.raises(NotFoundError):
            await submission_service.submit(1, 1, 10, "code", "python")

    @pytest.mark.asyncio
    async def test_contest_not_active(self, submission_service, echo_client):
        submission_service.contest_repo.get_contest_by_id.return_value = make_contest(active=False)
        with pytest.raises(ContestNotActiveError):
            await submission_service.submit(1, 1, 10, "code", "python")
        assert echo_client.calls == []

    @pytest.mark.asyncio
    async def test_no_test_cases_rejected(self, submission_service, echo_client):
        submission_service.contest_repo.get_test_cases.return_value = []
        with pytest.raises(SubmissionValidationError):
            await submission_service.submit(1, 1, 10, "code", "python")
        assert echo_client.calls == []

    @pytest.mark.asyncio
    async def test_leaderboard_failure_keeps_submission(self, submission_service):
        submission_service.leaderboard.update_leaderboard.side_effect = RuntimeError("lock timeout")

        judged = await submission_service.submit(1, 1, 10, "code", "python")

        assert judged.submission_id == 42

    @pytest.mark.asyncio
    async def test_save_failure_rolls_back(self, submission_service, db):
        submission_service.submission_repo.create_submission.side_effect = RuntimeError("db down")

        with pytest.raises(RuntimeError):
            await submission_service.submit(1, 1, 10, "code", "python")

        db.rollback.assert_awaited()
        submission_service.leaderboard.update_leaderboard.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_rejudge_reruns_hidden_only(self, submission_service, echo_client):
        runs = [
            SimpleNamespace(test_case_id=100, is_hidden=False, verdict="passed", time=0.01, memory=10.0,
                            status_description="Accepted", error=None),
            SimpleNamespace(test_case_id=101, is_hidden=False, verdict="passed", time=0.01, memory=10.0,
                            status_description="Accepted", error=None),
            SimpleNamespace(test_case_id=102, is_hidden=True, verdict="failed", time=0.01, memory=10.0,
                            status_description="Accepted", error=None),
        ]
        submission = SimpleNamespace(
            id=7, user_id=1, contest_id=1, question_id=10, code="code", language="python",
            status=SubmissionStatusEnum.WRONG_ANSWER, runs=runs, submitted_at=BASE_TIME,
        )
        submission_service.submission_repo.get_submission_by_id.return_value = submission

        judged = await submission_service.rejudge(7)

        assert echo_client.calls == ["in2"]
        assert judged.outcome.status == SubmissionStatusEnum.ACCEPTED
        submission_service.submission_repo.apply_rejudge.assert_awaited_once()
        submission_service.leaderboard.update_leaderboard.assert_awaited_once_with(1, 1)

    @pytest.mark.asyncio
    async def test_rejudge_missing_submission(self, submission_service):
        submission_service.submission_repo.get_submission_by_id.return_value = None
        with pytest.raises(NotFoundError):
            await submission_service.rejudge(999)

    @pytest.mark.asyncio
    async def test_judge_outage_is_saved_as_error(self, db):
        from app.infrastructure.judge0.client import JudgeTimeoutError

        client = FakeJudgeClient(echo_responder({"in0": JudgeTimeoutError("timeout")}))
        service = SubmissionService(db, client)
        service.user_repo = AsyncMock()
        service.contest_repo = AsyncMock()
        service.contest_repo.get_contest_by_id.return_value = make_contest()
        service.contest_repo.get_question.return_value = make_question()
        service.contest_repo.get_test_cases.return_value = make_cases(2)
        service.submission_repo = AsyncMock()
        service.submission_repo.create_submission.return_value = SimpleNamespace(id=1, submitted_at=BASE_TIME)
        service.leaderboard = AsyncMock()

        judged = await service.submit(1, 1, 10, "code", "python")

        assert judged.outcome.status == SubmissionStatusEnum.ERROR
        saved = service.submission_repo.create_submission.await_args.kwargs["outcome"]
        assert saved.status == SubmissionStatusEnum.ERROR


@pytest.fixture
def leaderboard_service(db):
    service = LeaderboardService(db)
    service.leaderboard_repo = AsyncMock()
    service.submission_repo = AsyncMock()
    service.contest_repo = AsyncMock()
    service.contest_repo.get_contest_by_id.return_value = make_contest()
    service.user_repo = AsyncMock()
    service.user_repo.get_user_by_id.return_value = SimpleNamespace(id=1, username="alice")
    return service


class TestLeaderboardService:
    """리더보드 서비스 테스트"""

    @pytest.mark.asyncio
    async def test_update_recomputes_from_history(self, leaderboard_service, db):
        leaderboard_service.submission_repo.get_user_submissions.return_value = [
            make_submission(1, 1, 10, score=60, minutes=1),
            make_submission(2, 1, 10, score=100, minutes=5),
            make_submission(3, 1, 20, score=50, status="WRONG_ANSWER", minutes=6),
        ]

        standing = await leaderboard_service.update_leaderboard(1, 1)

        assert standing.total_score == 100
        leaderboard_service.leaderboard_repo.lock_entry.assert_awaited_once_with(1, 1)
        leaderboard_service.leaderboard_repo.upsert_entry.assert_awaited_once_with(
            contest_id=1,
            user_id=1,
            username="alice",
            total_score=100,
            last_submission_time=BASE_TIME.replace(minute=5),
        )
        db.commit.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_update_failure_rolls_back(self, leaderboard_service, db):
        leaderboard_service.submission_repo.get_user_submissions.return_value = []
        leaderboard_service.leaderboard_repo.upsert_entry.side_effect = RuntimeError("conflict")

        with pytest.raises(RuntimeError):
            await leaderboard_service.update_leaderboard(1, 1)

        db.rollback.assert_awaited_once()
        db.commit.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_get_leaderboard_ranks(self, leaderboard_service):
        leaderboard_service.leaderboard_repo.get_entries.return_value = [
            SimpleNamespace(user_id=1, username="a", total_score=100, last_submission_time=BASE_TIME.replace(minute=9)),
            SimpleNamespace(user_id=2, username="b", total_score=100, last_submission_time=BASE_TIME.replace(minute=3)),
        ]

        ranked = await leaderboard_service.get_leaderboard(1)

        assert [(e.rank, e.user_id) for e in ranked] == [(1, 2), (2, 1)]

    @pytest.mark.asyncio
    async def test_get_leaderboard_missing_contest(self, leaderboard_service):
        leaderboard_service.contest_repo.get_contest_by_id.return_value = None
        with pytest.raises(NotFoundError):
            await leaderboard_service.get_leaderboard(999)

    @pytest.mark.asyncio
    async def test_user_summary(self, leaderboard_service):
        leaderboard_service.submission_repo.get_user_submissions.return_value = [
            make_submission(2, 2, 10, score=67, status="WRONG_ANSWER", minutes=9),
            make_submission(1, 2, 10, score=100, minutes=3),
        ]
        leaderboard_service.leaderboard_repo.get_entries.return_value = [
            SimpleNamespace(user_id=1, username="a", total_score=200, last_submission_time=BASE_TIME),
            SimpleNamespace(user_id=2, username="b", total_score=100, last_submission_time=BASE_TIME),
        ]

        summary = await leaderboard_service.get_user_summary(1, 2)

        assert summary["total_score"] == 100
        assert summary["rank"] == 2
        assert [s.id for s in summary["submissions"]] == [2, 1]

    @pytest.mark.asyncio
    async def test_user_summary_without_entry(self, leaderboard_service):
        leaderboard_service.submission_repo.get_user_submissions.return_value = []
        leaderboard_service.leaderboard_repo.get_entries.return_value = []

        summary = await leaderboard_service.get_user_summary(1, 5)

        assert summary["total_score"] == 0
        assert summary["rank"] is None


def stored_submission(submission_id, user_id, question_id, code):
    submission = make_submission(submission_id, user_id, question_id, code=code)
    submission.user = SimpleNamespace(id=user_id, username=f"user{user_id}", name=f"User {user_id}")
    submission.question = SimpleNamespace(id=question_id, title=f"Question {question_id}")
    return submission


@pytest.fixture
def plagiarism_service(db):
    service = PlagiarismService(db)
    service.submission_repo = AsyncMock()
    service.contest_repo = AsyncMock()
    service.contest_repo.get_contest_by_id.return_value = make_contest()
    return service


class TestPlagiarismService:
    """표절 검사 서비스 테스트"""

    @pytest.mark.asyncio
    async def test_scan_report(self, plagiarism_service):
        plagiarism_service.submission_repo.get_contest_submissions.return_value = [
            stored_submission(1, 1, 10, "print('hi')"),
            stored_submission(2, 2, 10, "print('hi')"),
            stored_submission(3, 3, 20, "print('hi')"),
        ]

        report = await plagiarism_service.scan_contest(1, 0.7)

        assert report["totalSubmissions"] == 3
        assert report["suspiciousPairs"] == 1
        assert report["threshold"] == 0.7
        pair = report["results"][0]
        assert pair["similarity"] == 100
        assert pair["method"] == "Jaccard"
        assert pair["question"] == "Question 10"
        assert [u["submissionId"] for u in pair["users"]] == [1, 2]
        assert "code" not in pair["users"][0]

    @pytest.mark.asyncio
    async def test_default_threshold(self, plagiarism_service):
        plagiarism_service.submission_repo.get_contest_submissions.return_value = []
        report = await plagiarism_service.scan_contest(1)
        assert report["threshold"] == 0.7
        assert report["results"] == []

    @pytest.mark.asyncio
    async def test_invalid_threshold(self, plagiarism_service):
        with pytest.raises(InvalidInputError):
            await plagiarism_service.scan_contest(1, 1.5)

    @pytest.mark.asyncio
    async def test_missing_contest(self, plagiarism_service):
        plagiarism_service.contest_repo.get_contest_by_id.return_value = None
        with pytest.raises(NotFoundError):
            await plagiarism_service.scan_contest(999, 0.5)

    @pytest.mark.asyncio
    async def test_compare(self, plagiarism_service):
        subs = {
            1: stored_submission(1, 1, 10, "print('hi')"),
            2: stored_submission(2, 2, 10, "print('hi')"),
        }
        plagiarism_service.submission_repo.get_submission_by_id.side_effect = (
            lambda submission_id, include_details=False: subs.get(submission_id)
        )

        comparison = await plagiarism_service.compare_submissions(1, 2)

        assert comparison["similarity"] == {"jaccard": 100, "levenshtein": 100, "overall": 100}
        assert comparison["submission1"]["code"] == "print('hi')"
        assert comparison["submission2"]["user"]["username"] == "user2"

    @pytest.mark.asyncio
    async def test_compare_missing(self, plagiarism_service):
        plagiarism_service.submission_repo.get_submission_by_id.return_value = None
        with pytest.raises(NotFoundError):
            await plagiarism_service.compare_submissions(1, 2)
