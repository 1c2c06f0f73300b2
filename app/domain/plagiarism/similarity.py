"""
코드 유사도 계산 (표절 검사)

[지표]
1. Jaccard: 정규화된 코드의 문자 3-gram 집합 유사도
2. Levenshtein: 정규화하지 않은 원본 코드의 편집 거리 기반 유사도

[쌍 검사]
- 같은 문제, 다른 사용자 제출만 비교 (본인 제출끼리는 비교하지 않음)
- overall = max(jaccard, levenshtein), 동점이면 "Jaccard"
- overall >= threshold 인 쌍만 남기고 내림차순 정렬

쌍 수 O(n²) × 편집 거리 O(L²) 이므로 제출 시점이 아닌 관리자 배치 작업에서만 호출해야 합니다.
"""
import logging
import re
from typing import Any, List, Optional, Sequence, Set

from pydantic import BaseModel


logger = logging.getLogger(__name__)


NGRAM_SIZE = 3

METHOD_JACCARD = "Jaccard"
METHOD_LEVENSHTEIN = "Levenshtein"

_BLOCK_COMMENT = re.compile(r"/\*.*?\*/", re.DOTALL)
_LINE_COMMENT = re.compile(r"//.*$", re.MULTILINE)
_WHITESPACE = re.compile(r"\s+")
_PUNCTUATION = re.compile(r"[{}();,]")


class SimilarityResult(BaseModel):
    """두 코드의 유사도 (0.0 ~ 1.0)"""
    jaccard: float
    levenshtein: float
    overall: float
    method: str


class SuspiciousPair(BaseModel):
    """임계값을 넘은 제출 쌍"""
    first: Any
    second: Any
    similarity: SimilarityResult


def normalize_code(code: Optional[str]) -> str:
    """
    비교용 코드 정규화

    - /* */, // 주석 제거
    - 연속 공백을 공백 1개로
    - { } ( ) ; , 제거
    - 소문자 변환, 앞뒤 공백 제거
    """
    if not code:
        return ""
    text = _BLOCK_COMMENT.sub("", code)
    text = _LINE_COMMENT.sub("", text)
    text = _WHITESPACE.sub(" ", text)
    text = _PUNCTUATION.sub("", text)
    return text.lower().strip()


def ngrams(text: str, n: int = NGRAM_SIZE) -> Set[str]:
    """연속된 문자 n-gram 집합"""
    return {text[i:i + n] for i in range(len(text) - n + 1)}


def jaccard_similarity(code1: Optional[str], code2: Optional[str]) -> float:
    """정규화된 코드의 3-gram Jaccard 유사도 (둘 다 비어 있으면 0)"""
    grams1 = ngrams(normalize_code(code1))
    grams2 = ngrams(normalize_code(code2))

    union = grams1 | grams2
    if not union:
        return 0.0
    return len(grams1 & grams2) / len(union)


def levenshtein_distance(s1: str, s2: str) -> int:
    """편집 거리 (삽입/삭제/치환 비용 1)"""
    if s1 == s2:
        return 0
    if not s1:
        return len(s2)
    if not s2:
        return len(s1)

    # 행 2개만 유지하는 O(n·m) DP
    previous = list(range(len(s1) + 1))
    for j, ch2 in enumerate(s2, start=1):
        current = [j] + [0] * len(s1)
        for i, ch1 in enumerate(s1, start=1):
            cost = 0 if ch1 == ch2 else 1
            current[i] = min(
                current[i - 1] + 1,
                previous[i] + 1,
                previous[i - 1] + cost,
            )
        previous = current
    return previous[len(s1)]


def levenshtein_similarity(code1: Optional[str], code2: Optional[str]) -> float:
    """원본 코드의 편집 거리 유사도: 1 - d / max(len) (둘 다 비어 있으면 1)"""
    code1 = code1 or ""
    code2 = code2 or ""
    max_length = max(len(code1), len(code2))
    if max_length == 0:
        return 1.0
    return 1 - levenshtein_distance(code1, code2) / max_length


def compare_codes(code1: Optional[str], code2: Optional[str]) -> SimilarityResult:
    """두 지표 계산 후 큰 값을 overall로 선택"""
    jaccard = jaccard_similarity(code1, code2)
    levenshtein = levenshtein_similarity(code1, code2)

    if jaccard >= levenshtein:
        return SimilarityResult(jaccard=jaccard, levenshtein=levenshtein, overall=jaccard, method=METHOD_JACCARD)
    return SimilarityResult(jaccard=jaccard, levenshtein=levenshtein, overall=levenshtein, method=METHOD_LEVENSHTEIN)


def to_percent(value: float) -> int:
    """0~1 값을 정수 퍼센트로 (0.5는 올림)"""
    return int(value * 100 + 0.5)


def find_suspicious_pairs(submissions: Sequence[Any], threshold: float) -> List[SuspiciousPair]:
    """
    의심 제출 쌍 찾기

    Args:
        submissions: id / user_id / question_id / code 속성을 가진 제출 목록
        threshold: 0~1 임계값

    Returns:
        overall 내림차순으로 정렬된 의심 쌍
    """
    pairs: List[SuspiciousPair] = []

    for i in range(len(submissions)):
        for j in range(i + 1, len(submissions)):
            sub1 = submissions[i]
            sub2 = submissions[j]

            if sub1.question_id != sub2.question_id:
                continue
            if sub1.user_id == sub2.user_id:
                continue

            if getattr(sub1, "code", None) is None or getattr(sub2, "code", None) is None:
                logger.warning(
                    f"[Similarity] 코드 없는 제출 건너뜀 - submissions: {sub1.id}, {sub2.id}"
                )
                continue

            similarity = compare_codes(sub1.code, sub2.code)
            if similarity.overall >= threshold:
                pairs.append(SuspiciousPair(first=sub1, second=sub2, similarity=similarity))

    pairs.sort(key=lambda p: p.similarity.overall, reverse=True)
    return pairs
