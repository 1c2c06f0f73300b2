"""
표절 검사 도메인 모듈
"""
from app.domain.plagiarism.similarity import (
    METHOD_JACCARD,
    METHOD_LEVENSHTEIN,
    SimilarityResult,
    SuspiciousPair,
    compare_codes,
    find_suspicious_pairs,
    jaccard_similarity,
    levenshtein_distance,
    levenshtein_similarity,
    normalize_code,
    to_percent,
)

__all__ = [
    "METHOD_JACCARD",
    "METHOD_LEVENSHTEIN",
    "SimilarityResult",
    "SuspiciousPair",
    "compare_codes",
    "find_suspicious_pairs",
    "jaccard_similarity",
    "levenshtein_distance",
    "levenshtein_similarity",
    "normalize_code",
    "to_percent",
]
