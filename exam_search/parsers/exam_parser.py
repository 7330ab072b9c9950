"""Parse exported exam-result files into QuestionRecord objects.

The export is newline-delimited JSON, one exam attempt per line:

  {"code": ..., "status": ..., "message": ...,
   "data": {"items": {"<uuid>": {question}, ...},
            "exam": {"title": ..., "category_title": ...}}}

The same question shows up in many attempts. The first occurrence of each
uuid wins; later copies are dropped, even if their content differs.

Each line parses to either a ParsedLine or a ParseError. What to do with a
bad line is up to the caller: load_exam_file skips it with a warning by
default, or raises ExamFileError when strict.
"""
from __future__ import annotations

import json
import logging
from collections.abc import Iterable, Iterator
from dataclasses import dataclass, field
from pathlib import Path

from exam_search.models import Choice, ExamInfo, QuestionRecord, ScoreValue

log = logging.getLogger("exam_search.ingest")


@dataclass(frozen=True)
class ParsedLine:
    line_number: int
    items: list[QuestionRecord]
    exam: ExamInfo | None = None


@dataclass(frozen=True)
class ParseError:
    line_number: int
    cause: str

    def __str__(self) -> str:
        return f"line {self.line_number}: {self.cause}"


@dataclass
class ExamLoad:
    records: dict[str, QuestionRecord] = field(default_factory=dict)
    exams: list[ExamInfo] = field(default_factory=list)
    errors: list[ParseError] = field(default_factory=list)
    lines: int = 0


class ExamFileError(Exception):
    def __init__(self, message: str, error: ParseError | None = None):
        super().__init__(message)
        self.error = error


class _ShapeError(ValueError):
    pass


def _expect_dict(value: object, what: str) -> dict:
    if value is None:
        return {}
    if not isinstance(value, dict):
        raise _ShapeError(f"{what} must be an object, got {type(value).__name__}")
    return value


def _expect_str(value: object, what: str) -> str:
    if value is None:
        return ""
    if not isinstance(value, str):
        raise _ShapeError(f"{what} must be a string, got {type(value).__name__}")
    return value


def _parse_choice(raw: object, where: str) -> Choice:
    c = _expect_dict(raw, where)
    return Choice(
        operator=_expect_str(c.get("operator"), f"{where}.operator"),
        text=_expect_str(c.get("title"), f"{where}.title"),
        is_correct=bool(c.get("isCorrect", False)),
    )


def parse_question(question_id: str, raw: object) -> QuestionRecord:
    q = _expect_dict(raw, f"item {question_id}")
    where = f"item {question_id}"

    raw_choices = q.get("choices") or []
    if not isinstance(raw_choices, list):
        raise _ShapeError(f"{where}.choices must be a list")
    choices = tuple(
        _parse_choice(c, f"{where}.choices[{i}]") for i, c in enumerate(raw_choices)
    )

    raw_answer = q.get("answer") or []
    if isinstance(raw_answer, str):
        raw_answer = [raw_answer]
    if not isinstance(raw_answer, list):
        raise _ShapeError(f"{where}.answer must be a list")

    return QuestionRecord(
        id=question_id,
        question_type=_expect_str(q.get("type"), f"{where}.type"),
        title=_expect_str(q.get("title"), f"{where}.title"),
        score=ScoreValue.from_json(q.get("score")),
        difficulty=_expect_str(q.get("difficulty"), f"{where}.difficulty"),
        show_answer=_expect_str(q.get("show_answer"), f"{where}.show_answer"),
        choices=choices,
        answer=tuple(str(a) for a in raw_answer),
    )


def parse_exam_line(line: str | bytes, line_number: int) -> ParsedLine | ParseError:
    if isinstance(line, bytes):
        try:
            line = line.decode("utf-8")
        except UnicodeDecodeError as e:
            return ParseError(line_number, f"invalid UTF-8: {e}")

    try:
        payload = json.loads(line)
    except RecursionError:
        return ParseError(line_number, "invalid JSON: nested too deeply")
    except ValueError as e:
        # JSONDecodeError, or an integer literal past the digit limit
        return ParseError(line_number, f"invalid JSON: {e}")

    try:
        body = _expect_dict(payload, "record")
        data = _expect_dict(body.get("data"), "data")
        items = _expect_dict(data.get("items"), "data.items")
        records = [parse_question(qid, raw) for qid, raw in items.items()]
        exam = None
        if data.get("exam") is not None:
            raw_exam = _expect_dict(data["exam"], "data.exam")
            exam = ExamInfo(
                title=_expect_str(raw_exam.get("title"), "exam.title"),
                category_title=_expect_str(raw_exam.get("category_title"), "exam.category_title"),
            )
    except _ShapeError as e:
        return ParseError(line_number, str(e))

    return ParsedLine(line_number=line_number, items=records, exam=exam)


def parse_exam_lines(lines: Iterable[str | bytes]) -> Iterator[ParsedLine | ParseError]:
    """Yield one result per non-blank line; line numbers are 1-based."""
    for i, line in enumerate(lines, 1):
        if not line.strip():
            continue
        yield parse_exam_line(line, i)


def merge_records(
    parsed: Iterable[ParsedLine | ParseError],
    strict: bool = False,
) -> ExamLoad:
    result = ExamLoad()
    for entry in parsed:
        result.lines += 1
        if isinstance(entry, ParseError):
            if strict:
                raise ExamFileError(f"Failed to parse exam data: {entry}", entry)
            log.warning("Skipping %s", entry)
            result.errors.append(entry)
            continue

        new = 0
        for record in entry.items:
            if record.id not in result.records:
                result.records[record.id] = record
                new += 1
        if entry.exam is not None:
            result.exams.append(entry.exam)
        log.info(
            "Line %d: %d questions, %d new",
            entry.line_number, len(entry.items), new,
        )
    return result


def load_exam_file(path: Path, strict: bool = False) -> ExamLoad:
    if not path.exists():
        raise ExamFileError(f"Exam data file not found: {path}")
    # binary, so one badly encoded line only costs that line
    with path.open("rb") as f:
        result = merge_records(parse_exam_lines(f), strict=strict)
    log.info(
        "Loaded %s: %d unique questions from %d lines (%d skipped)",
        path.name, len(result.records), result.lines, len(result.errors),
    )
    return result
