"""
채점 집계기 (Verdict Aggregator)

[처리 흐름]
1. 실행 계획 생성: 문제 예제(있으면) → 저장된 테스트 케이스 (생성 순서)
2. 케이스별로 Judge0 실행 후 strip()한 출력 비교
3. 조기 중단:
   - TLE(5) → TIME_LIMIT_EXCEEDED
   - CE(6) → COMPILATION_ERROR
   - 런타임 에러 계열(7~12, 14) → RUNTIME_ERROR
   - Judge0 내부 에러(13) / 인프라 실패 → ERROR
4. 중단이 없으면 전체 통과 시 ACCEPTED, 아니면 WRONG_ANSWER
5. score = round(points * passed / total), total == 0 이면 0
"""
import logging
from decimal import Decimal, ROUND_HALF_UP
from typing import Any, Iterable, List, Optional, Sequence, Tuple

from app.domain.judging.schemas import CaseResult, JudgeOutcome, PlannedCase
from app.infrastructure.judge0.client import ExecutionResult, JudgeClientError
from app.infrastructure.judge0.utils import (
    RUNTIME_ERROR_STATUSES,
    STATUS_COMPILATION_ERROR,
    STATUS_INTERNAL_ERROR,
    STATUS_TIME_LIMIT_EXCEEDED,
    resolve_language_id,
)
from app.infrastructure.persistence.models.enums import SubmissionStatusEnum, VerdictEnum


logger = logging.getLogger(__name__)


# 케이스 결과 → 조기 중단 시 제출 상태
ABORT_STATUS_BY_VERDICT = {
    VerdictEnum.TIME_LIMIT_EXCEEDED: SubmissionStatusEnum.TIME_LIMIT_EXCEEDED,
    VerdictEnum.COMPILATION_ERROR: SubmissionStatusEnum.COMPILATION_ERROR,
    VerdictEnum.RUNTIME_ERROR: SubmissionStatusEnum.RUNTIME_ERROR,
    VerdictEnum.INFRA_ERROR: SubmissionStatusEnum.ERROR,
}


def round_half_up(value: float) -> int:
    """0.5는 올림 (파이썬 기본 round는 짝수 반올림)"""
    return int(Decimal(str(value)).quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def calculate_score(points: int, passed_tests: int, total_tests: int) -> int:
    """
    점수 계산

    total_tests가 0이면 데이터 오류이므로 0점 처리하고 로그만 남깁니다.
    """
    if total_tests <= 0:
        logger.error(
            f"[VerdictAggregator] 테스트 케이스 수가 0 - points: {points}, 0점 처리"
        )
        return 0
    return round_half_up(points * passed_tests / total_tests)


def build_test_plan(question: Any, test_cases: Iterable[Any]) -> List[PlannedCase]:
    """
    실행 계획 생성

    Args:
        question: points / sample_input / sample_output 속성을 가진 객체
        test_cases: id / input / expected_output / is_hidden 속성을 가진 객체 (생성 순서)

    Returns:
        순서가 고정된 실행 계획
    """
    plan: List[PlannedCase] = []

    sample_output = getattr(question, "sample_output", None)
    if sample_output is not None and sample_output.strip():
        plan.append(PlannedCase(
            index=0,
            test_case_id=None,
            input=getattr(question, "sample_input", None) or "",
            expected_output=sample_output,
            is_hidden=False,
            is_sample=True,
        ))

    for tc in test_cases:
        plan.append(PlannedCase(
            index=len(plan),
            test_case_id=tc.id,
            input=tc.input or "",
            expected_output=tc.expected_output or "",
            is_hidden=bool(tc.is_hidden),
            is_sample=False,
        ))

    return plan


def classify_execution(result: ExecutionResult, expected_output: str) -> VerdictEnum:
    """Judge0 실행 결과를 케이스 결과로 변환"""
    status_id = result.status_id

    if status_id == STATUS_TIME_LIMIT_EXCEEDED:
        return VerdictEnum.TIME_LIMIT_EXCEEDED
    if status_id == STATUS_COMPILATION_ERROR:
        return VerdictEnum.COMPILATION_ERROR
    if status_id in RUNTIME_ERROR_STATUSES:
        return VerdictEnum.RUNTIME_ERROR
    if status_id == STATUS_INTERNAL_ERROR:
        return VerdictEnum.INFRA_ERROR

    actual = (result.stdout or "").strip()
    if actual == (expected_output or "").strip():
        return VerdictEnum.PASSED
    return VerdictEnum.FAILED


def _mean(values: Iterable[Optional[float]]) -> float:
    present = [v for v in values if v is not None]
    if not present:
        return 0.0
    return sum(present) / len(present)


class VerdictAggregator:
    """제출 1건을 테스트 케이스 순서대로 실행하고 최종 판정을 집계"""

    def __init__(
        self,
        client: Any,
        max_attempts: Optional[int] = None,
        interval_ms: Optional[int] = None,
    ):
        self.client = client
        self.max_attempts = max_attempts
        self.interval_ms = interval_ms

    async def _run_case(
        self,
        source: str,
        language_id: int,
        case: PlannedCase,
    ) -> CaseResult:
        """케이스 1개 실행 (인프라 실패는 INFRA_ERROR 결과로 변환)"""
        try:
            result = await self.client.execute(
                source,
                language_id,
                case.input,
                max_attempts=self.max_attempts,
                interval_ms=self.interval_ms,
            )
        except JudgeClientError as e:
            logger.error(
                f"[VerdictAggregator] Judge0 인프라 실패 - case: {case.index}, "
                f"error: {type(e).__name__}: {str(e)}"
            )
            return CaseResult(
                index=case.index,
                test_case_id=case.test_case_id,
                is_hidden=case.is_hidden,
                is_sample=case.is_sample,
                input=case.input,
                expected_output=case.expected_output,
                actual_output="",
                passed=False,
                verdict=VerdictEnum.INFRA_ERROR,
                status_description="Judge Error",
                error=f"{type(e).__name__}: {str(e)}",
            )

        verdict = classify_execution(result, case.expected_output)
        error = None
        if verdict == VerdictEnum.COMPILATION_ERROR:
            error = result.compile_output
        elif verdict in (VerdictEnum.RUNTIME_ERROR, VerdictEnum.INFRA_ERROR):
            error = result.stderr or result.message

        return CaseResult(
            index=case.index,
            test_case_id=case.test_case_id,
            is_hidden=case.is_hidden,
            is_sample=case.is_sample,
            input=case.input,
            expected_output=case.expected_output.strip(),
            actual_output=(result.stdout or "").strip(),
            passed=verdict == VerdictEnum.PASSED,
            verdict=verdict,
            status_id=result.status_id,
            status_description=result.status_description,
            time=result.time,
            memory=result.memory,
            error=error,
        )

    async def _run_sequence(
        self,
        source: str,
        language_id: int,
        cases: Sequence[PlannedCase],
    ) -> Tuple[List[CaseResult], Optional[SubmissionStatusEnum]]:
        """
        케이스를 순서대로 실행하고 중단 사유가 생기면 즉시 멈춤

        Returns:
            (실행된 케이스 결과, 중단 상태 또는 None)
        """
        results: List[CaseResult] = []
        for case in cases:
            case_result = await self._run_case(source, language_id, case)
            results.append(case_result)

            abort_status = ABORT_STATUS_BY_VERDICT.get(case_result.verdict)
            if abort_status is not None:
                logger.info(
                    f"[VerdictAggregator] 조기 중단 - case: {case.index}, "
                    f"verdict: {case_result.verdict.value}, status: {abort_status.value}"
                )
                return results, abort_status
        return results, None

    def _build_outcome(
        self,
        points: int,
        total_tests: int,
        results: List[CaseResult],
        abort_status: Optional[SubmissionStatusEnum],
        executed_tests: int,
    ) -> JudgeOutcome:
        passed_tests = sum(1 for r in results if r.passed)

        if total_tests == 0:
            status = SubmissionStatusEnum.ERROR
        elif abort_status is not None:
            status = abort_status
        elif passed_tests == total_tests:
            status = SubmissionStatusEnum.ACCEPTED
        else:
            status = SubmissionStatusEnum.WRONG_ANSWER

        error = None
        if status == SubmissionStatusEnum.ERROR:
            failed = next((r for r in results if r.verdict == VerdictEnum.INFRA_ERROR), None)
            error = failed.error if failed else "테스트 케이스가 없습니다"

        return JudgeOutcome(
            status=status,
            score=calculate_score(points, passed_tests, total_tests),
            passed_tests=passed_tests,
            total_tests=total_tests,
            executed_tests=executed_tests,
            runtime=_mean(r.time for r in results),
            memory=_mean(r.memory for r in results),
            results=results,
            error=error,
        )

    async def judge_submission(
        self,
        source: str,
        language: str,
        question: Any,
        test_cases: Iterable[Any],
    ) -> JudgeOutcome:
        """
        제출 채점

        Args:
            source: 소스 코드
            language: 언어 이름 (python, cpp, ...)
            question: 문제 (points, sample_input, sample_output)
            test_cases: 저장된 테스트 케이스 (생성 순서)

        Returns:
            최종 채점 결과. total_tests는 실행 계획 전체 길이,
            executed_tests는 실제로 실행된 케이스 수.

        Raises:
            UnsupportedLanguageError: 지원하지 않는 언어 (Judge0 호출 전)
        """
        language_id = resolve_language_id(language)
        plan = build_test_plan(question, test_cases)

        logger.info(
            f"[VerdictAggregator] 채점 시작 - language: {language}, cases: {len(plan)}"
        )

        results, abort_status = await self._run_sequence(source, language_id, plan)
        outcome = self._build_outcome(
            points=question.points,
            total_tests=len(plan),
            results=results,
            abort_status=abort_status,
            executed_tests=len(results),
        )

        logger.info(
            f"[VerdictAggregator] 채점 완료 - status: {outcome.status.value}, "
            f"passed: {outcome.passed_tests}/{outcome.total_tests}, score: {outcome.score}"
        )
        return outcome

    @staticmethod
    def _carried_result(case: PlannedCase, run: Any) -> CaseResult:
        """저장된 실행 결과를 케이스 결과로 복원"""
        verdict = VerdictEnum(run.verdict)
        return CaseResult(
            index=case.index,
            test_case_id=case.test_case_id,
            is_hidden=False,
            is_sample=case.is_sample,
            input=case.input,
            expected_output=case.expected_output.strip(),
            passed=verdict == VerdictEnum.PASSED,
            verdict=verdict,
            status_description=getattr(run, "status_description", None),
            time=run.time,
            memory=run.memory,
            error=getattr(run, "error", None),
        )

    async def rejudge_submission(
        self,
        source: str,
        language: str,
        question: Any,
        test_cases: Iterable[Any],
        previous_runs: Iterable[Any],
        current_status: Optional[SubmissionStatusEnum] = None,
    ) -> JudgeOutcome:
        """
        재채점: 숨김 케이스만 다시 실행

        실행 계획 순서대로 진행합니다.
        - 공개 케이스(예제 포함): previous_runs의 결과를 사용 (저장된 결과가 없으면 실행)
        - 숨김 케이스: 다시 실행
        - 공개/숨김 상관없이 첫 중단 사유에서 멈추고 이후 케이스는 집계하지 않음
        현재 상태가 ERROR인 제출은 공개 케이스 결과를 신뢰할 수 없으므로 전체를 다시 실행합니다.

        Args:
            previous_runs: test_case_id / is_hidden / verdict / time / memory 속성을 가진 저장된 실행 결과
            current_status: 제출의 현재 상태

        Returns:
            갱신된 채점 결과 (executed_tests는 이번에 실행한 케이스 수)
        """
        if current_status == SubmissionStatusEnum.ERROR:
            logger.info("[VerdictAggregator] ERROR 상태 제출 - 전체 케이스 재실행")
            return await self.judge_submission(source, language, question, test_cases)

        language_id = resolve_language_id(language)
        plan = build_test_plan(question, test_cases)

        previous_by_key = {}
        for run in previous_runs:
            key = run.test_case_id if run.test_case_id is not None else "sample"
            previous_by_key[key] = run

        logger.info(
            f"[VerdictAggregator] 재채점 시작 - hidden cases: {sum(1 for c in plan if c.is_hidden)}, "
            f"visible cases: {sum(1 for c in plan if not c.is_hidden)}"
        )

        results: List[CaseResult] = []
        abort_status: Optional[SubmissionStatusEnum] = None
        executed = 0
        for case in plan:
            run = None
            if not case.is_hidden:
                run = previous_by_key.get("sample" if case.is_sample else case.test_case_id)

            if run is not None:
                case_result = self._carried_result(case, run)
            else:
                case_result = await self._run_case(source, language_id, case)
                executed += 1
            results.append(case_result)

            abort_status = ABORT_STATUS_BY_VERDICT.get(case_result.verdict)
            if abort_status is not None:
                logger.info(
                    f"[VerdictAggregator] 재채점 조기 중단 - case: {case.index}, "
                    f"verdict: {case_result.verdict.value}, carried: {run is not None}"
                )
                break

        outcome = self._build_outcome(
            points=question.points,
            total_tests=len(plan),
            results=results,
            abort_status=abort_status,
            executed_tests=executed,
        )

        logger.info(
            f"[VerdictAggregator] 재채점 완료 - status: {outcome.status.value}, "
            f"passed: {outcome.passed_tests}/{outcome.total_tests}, score: {outcome.score}"
        )
        return outcome
