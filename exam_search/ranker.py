"""Build display results for a question category and rank them by relevance."""
from __future__ import annotations

import logging
from collections.abc import Iterable
from dataclasses import replace

from exam_search.category_index import CategoryIndex
from exam_search.models import (
    QUESTION_TYPE_NAMES,
    QuestionRecord,
    ScoredResult,
    difficulty_name,
    question_type_name,
)
from exam_search.normalizer import clean_text
from exam_search.relevance import calculate_relevance

log = logging.getLogger("exam_search.search")

DEFAULT_THRESHOLD = 0.5
DEFAULT_LIMIT = 20


class InvalidSelection(ValueError):
    """The requested question type is not a searchable category."""

    def __init__(self, question_type: str):
        super().__init__(f"无效的题型选择: {question_type!r}")
        self.question_type = question_type


def format_info(record: QuestionRecord) -> str:
    return (
        f"难度: {difficulty_name(record.difficulty)} | "
        f"分值: {record.score.display()} | "
        f"正确答案: {record.show_answer}"
    )


def format_choices(record: QuestionRecord) -> list[str]:
    lines = []
    for choice in record.choices:
        mark = " ✓" if choice.is_correct else ""
        lines.append(f"{choice.operator}. {clean_text(choice.text)}{mark}")
    return lines


def to_result(record: QuestionRecord, type_name: str) -> ScoredResult:
    return ScoredResult(
        question_id=record.id,
        title=clean_text(record.title),
        info=format_info(record),
        choices=format_choices(record),
        relevance=0.0,
        type_name=type_name,
    )


def rank(
    candidates: Iterable[ScoredResult],
    keyword: str,
    *,
    threshold: float = DEFAULT_THRESHOLD,
    limit: int = DEFAULT_LIMIT,
) -> list[ScoredResult]:
    """Score candidates against keyword and order them, best first.

    Ties on score go to the shorter title, measured in UTF-8 bytes, so a
    CJK character weighs three ASCII ones. sorted() is stable, so anything
    still tied keeps its input order. With a keyword, only scores strictly
    above threshold survive and at most limit results are returned. Without
    one, every candidate comes back.
    """
    scored = [
        replace(c, relevance=calculate_relevance(c.title, keyword))
        for c in candidates
    ]
    scored.sort(key=lambda r: (-r.relevance, len(r.title.encode("utf-8", "surrogatepass"))))

    if keyword == "":
        return scored
    return [r for r in scored if r.relevance > threshold][:limit]


def search_questions(
    records: Iterable[QuestionRecord],
    question_type: str,
    keyword: str,
    *,
    threshold: float = DEFAULT_THRESHOLD,
    limit: int = DEFAULT_LIMIT,
) -> list[ScoredResult]:
    if not isinstance(question_type, str) or question_type not in QUESTION_TYPE_NAMES:
        raise InvalidSelection(question_type)

    index = CategoryIndex(records)
    type_name = question_type_name(question_type)
    candidates = [to_result(r, type_name) for r in index.get(question_type)]
    results = rank(candidates, keyword, threshold=threshold, limit=limit)
    log.info(
        "Search %s %r: %d candidates, %d results",
        question_type, keyword, len(candidates), len(results),
    )
    return results
