"""Group question records into per-type buckets."""
from __future__ import annotations

from collections.abc import Iterable

from exam_search.models import QuestionRecord


def build_categories(records: Iterable[QuestionRecord]) -> dict[str, list[QuestionRecord]]:
    """One pass over records; buckets and their contents keep first-seen order."""
    buckets: dict[str, list[QuestionRecord]] = {}
    for record in records:
        buckets.setdefault(record.question_type, []).append(record)
    return buckets


class CategoryIndex:
    def __init__(self, records: Iterable[QuestionRecord]):
        self._buckets = build_categories(records)

    def get(self, question_type: str) -> list[QuestionRecord]:
        return list(self._buckets.get(question_type, []))

    def labels(self) -> list[str]:
        return list(self._buckets)

    def counts(self) -> dict[str, int]:
        return {label: len(bucket) for label, bucket in self._buckets.items()}

    def __len__(self) -> int:
        return sum(len(bucket) for bucket in self._buckets.values())
