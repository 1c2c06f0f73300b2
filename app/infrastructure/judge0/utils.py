"""
Judge0 유틸리티 함수
언어 ID 매핑, 상태 코드 상수, 코드 검증
"""
from typing import Optional


# Judge0 상태 ID (https://ce.judge0.com/statuses)
STATUS_IN_QUEUE = 1
STATUS_PROCESSING = 2
STATUS_ACCEPTED = 3
STATUS_WRONG_ANSWER = 4
STATUS_TIME_LIMIT_EXCEEDED = 5
STATUS_COMPILATION_ERROR = 6
STATUS_RUNTIME_ERROR_SIGSEGV = 7
STATUS_RUNTIME_ERROR_OTHER = 12
STATUS_INTERNAL_ERROR = 13
STATUS_EXEC_FORMAT_ERROR = 14

# 3 이상이면 더 이상 폴링하지 않음
TERMINAL_STATUS_MIN = STATUS_ACCEPTED

# 런타임 에러 계열 (SIGSEGV, SIGXFSZ, SIGFPE, SIGABRT, NZEC, Other) + Exec Format Error
RUNTIME_ERROR_STATUSES = frozenset(
    list(range(STATUS_RUNTIME_ERROR_SIGSEGV, STATUS_RUNTIME_ERROR_OTHER + 1))
    + [STATUS_EXEC_FORMAT_ERROR]
)


# 언어 이름 -> Judge0 language_id
# 모든 호출부는 이 테이블만 사용해야 함
JUDGE0_LANGUAGES = {
    "c": 50,
    "cpp": 54,
    "c++": 54,
    "csharp": 51,
    "go": 60,
    "java": 62,
    "javascript": 63,
    "kotlin": 78,
    "python": 71,
    "python3": 71,
    "rust": 73,
    "typescript": 74,
    "php": 68,
    "ruby": 72,
    "bash": 46,
}


class UnsupportedLanguageError(ValueError):
    """Judge0 언어 테이블에 없는 언어"""

    def __init__(self, language: Optional[str]):
        self.language = language
        super().__init__(f"Unsupported language: {language}")


def is_terminal_status(status_id: Optional[int]) -> bool:
    """더 이상 폴링이 필요 없는 상태인지 확인"""
    return status_id is not None and status_id >= TERMINAL_STATUS_MIN


def is_language_supported(language: Optional[str]) -> bool:
    """지원 언어 여부"""
    if not language:
        return False
    return language.lower().strip() in JUDGE0_LANGUAGES


def resolve_language_id(language: Optional[str]) -> int:
    """
    언어 이름을 Judge0 language_id로 변환

    예:
    - "python" -> 71
    - "CPP" -> 54

    Args:
        language: 언어 이름

    Returns:
        Judge0 language_id

    Raises:
        UnsupportedLanguageError: 테이블에 없는 언어
    """
    if not is_language_supported(language):
        raise UnsupportedLanguageError(language)
    return JUDGE0_LANGUAGES[language.lower().strip()]


def validate_code_format(code: Optional[str]) -> tuple[bool, Optional[str]]:
    """
    코드 형식 검증

    Args:
        code: 검증할 코드

    Returns:
        (유효 여부, 오류 메시지)
    """
    if not code:
        return False, "코드가 비어있습니다"

    if len(code.strip()) == 0:
        return False, "코드가 공백만 있습니다"

    return True, None
