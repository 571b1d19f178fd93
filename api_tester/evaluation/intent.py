"""
Intent alignment: do the first tests of a batch reflect the pointer?
"""
import json
import re
from typing import Any, List, Optional, Sequence

from ..config import IntentConfig
from ..models.report import (
    ExploratoryAlignment,
    FlagCheck,
    IntentAlignment,
    KeywordMatch,
    UserRequestedAlignment,
)
from ..utils.helpers import tag_list, to_plain

STOP_WORDS = frozenset({
    "a", "an", "the", "is", "are", "was", "were", "be", "been", "being",
    "have", "has", "had", "do", "does", "did", "will", "would", "could",
    "should", "may", "might", "must", "shall", "can", "need", "to", "of",
    "in", "for", "on", "with", "at", "by", "from", "as", "into", "through",
    "during", "before", "after", "above", "below", "between", "under",
    "again", "further", "then", "once", "here", "there", "when", "where",
    "why", "how", "all", "each", "few", "more", "most", "other", "some",
    "such", "no", "nor", "not", "only", "own", "same", "so", "than", "too",
    "very", "just", "and", "but", "if", "or", "because", "until", "while",
    # meta-words describing the act of testing
    "ensure", "test", "tests", "testing", "check", "verify", "make", "sure",
    "that", "what", "this", "it", "its",
})


def extract_keywords(pointer: Optional[str]) -> List[str]:
    """
    Keywords of a pointer, in first-seen order without duplicates.

    Single-character tokens are dropped, so a bare "0" is not a keyword.
    """
    if not pointer or not isinstance(pointer, str):
        return []

    cleaned = re.sub(r"[^a-z0-9\s-]", " ", pointer.lower())
    keywords: List[str] = []
    for word in cleaned.split():
        if len(word) > 1 and word not in STOP_WORDS and word not in keywords:
            keywords.append(word)
    return keywords


def _test_text(test: Any) -> str:
    test = to_plain(test)
    request = test.get("request") if isinstance(test.get("request"), dict) else {}
    parts = [str(test.get("name") or "")]
    parts.extend(tag_list(test))
    parts.append(json.dumps(request.get("body") or {}, separators=(",", ":"), default=str))
    return " ".join(parts).lower()


def calculate_keyword_match(keywords: Sequence[str], test: Any) -> KeywordMatch:
    """Share of keywords found in the test's name, tags and body; 1.0 when there are none."""
    if not keywords:
        return KeywordMatch(score=1.0)

    text = _test_text(test)
    matched = [kw for kw in keywords if kw in text]
    unmatched = [kw for kw in keywords if kw not in text]
    return KeywordMatch(
        score=len(matched) / len(keywords),
        matched_keywords=matched,
        unmatched_keywords=unmatched,
    )


def check_user_requested_flags(tests: Sequence[Any], expected_count: int = 3) -> FlagCheck:
    """The first ``expected_count`` tests must be flagged and no later test may be."""
    details = []
    flagged = 0
    for index, test in enumerate(tests):
        test = to_plain(test)
        has_flag = test.get("user_requested") is True
        if index < expected_count:
            if has_flag:
                flagged += 1
            else:
                details.append(f'Test {index} "{test.get("name")}" missing user_requested flag')
        elif has_flag:
            details.append(f'Test {index} "{test.get("name")}" flagged user_requested past the first {expected_count}')

    return FlagCheck(
        valid=flagged == expected_count and not details,
        actual=flagged,
        expected=expected_count,
        details=details,
    )


def _average(values: List[float]) -> float:
    return sum(values) / len(values) if values else 0.0


def evaluate_intent_alignment(
    pointer: str, tests: Sequence[Any], config: Optional[IntentConfig] = None
) -> IntentAlignment:
    """
    Score how well the user-requested tests reflect the pointer.

    Args:
        pointer: Natural language test pointer
        tests: Generated batch, in generation order
        config: K and the keyword-match threshold

    Returns:
        IntentAlignment; exploratory tests are scored for information only
    """
    config = config or IntentConfig()
    k = config.user_requested_count
    keywords = extract_keywords(pointer)

    first_matches = [calculate_keyword_match(keywords, t) for t in tests[:k]]
    alignment = _average([m.score for m in first_matches])
    meets_threshold = bool(first_matches) and alignment >= config.min_keyword_match_score

    flag_check = check_user_requested_flags(tests, k)

    remaining = tests[k:]
    exploratory = ExploratoryAlignment(
        valid=True,
        score=_average([calculate_keyword_match(keywords, t).score for t in remaining]),
        tests_count=len(remaining),
    )

    return IntentAlignment(
        keywords=keywords,
        user_requested_tests=UserRequestedAlignment(
            count=k,
            alignment_score=alignment,
            meets_threshold=meets_threshold,
            details=first_matches,
        ),
        flag_check=flag_check,
        exploratory_tests=exploratory,
        overall_valid=flag_check.valid and meets_threshold,
    )


def intent_summary(evaluation: IntentAlignment) -> str:
    lines = [
        f"Keywords extracted: {', '.join(evaluation.keywords) or 'none'}",
        f"User-requested tests alignment: {evaluation.user_requested_tests.alignment_score * 100:.1f}%",
        f"User-requested flags: {evaluation.flag_check.actual}/{evaluation.flag_check.expected}",
        f"Exploratory tests: {evaluation.exploratory_tests.tests_count}",
        f"Overall valid: {'YES' if evaluation.overall_valid else 'NO'}",
    ]
    if evaluation.flag_check.details:
        lines.append(f"Issues: {'; '.join(evaluation.flag_check.details)}")
    return "\n".join(lines)
