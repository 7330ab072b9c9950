from __future__ import annotations

import math
from dataclasses import dataclass, field
from decimal import Decimal

QUESTION_TYPE_NAMES = {
    "single_choice": "单选题",
    "choice": "多选题",
    "determine": "判断题",
}

DIFFICULTY_NAMES = {
    "simple": "简单",
    "normal": "中等",
    "difficulty": "困难",
    "quite_difficulty": "较难",
}


def question_type_name(question_type: str) -> str:
    return QUESTION_TYPE_NAMES.get(question_type, question_type)


def difficulty_name(difficulty: str) -> str:
    return DIFFICULTY_NAMES.get(difficulty, difficulty)


class ScoreValue:
    """Point value of a question; the raw data mixes strings and numbers."""

    def display(self) -> str:
        raise NotImplementedError

    @staticmethod
    def from_json(raw: object) -> ScoreValue:
        # bool is an int subclass but never a meaningful score
        if isinstance(raw, bool):
            return MissingValue()
        if isinstance(raw, str):
            return StringValue(raw)
        if isinstance(raw, (int, float)):
            try:
                value = float(raw)
            except OverflowError:
                return MissingValue()
            if not math.isfinite(value):
                return MissingValue()
            return NumberValue(value)
        return MissingValue()


@dataclass(frozen=True)
class StringValue(ScoreValue):
    value: str

    def display(self) -> str:
        return self.value


@dataclass(frozen=True)
class NumberValue(ScoreValue):
    value: float

    def display(self) -> str:
        if self.value.is_integer():
            return str(int(self.value))
        # plain decimal, never exponent notation: 1e-05 -> 0.00001
        return format(Decimal(repr(self.value)), "f")


@dataclass(frozen=True)
class MissingValue(ScoreValue):
    def display(self) -> str:
        return "0"


@dataclass(frozen=True)
class Choice:
    operator: str  # "A", "B", ...
    text: str
    is_correct: bool = False


@dataclass(frozen=True)
class QuestionRecord:
    id: str
    question_type: str  # single_choice | choice | determine | passthrough
    title: str
    score: ScoreValue = field(default_factory=MissingValue)
    difficulty: str = ""
    show_answer: str = ""
    choices: tuple[Choice, ...] = ()
    answer: tuple[str, ...] = ()


@dataclass(frozen=True)
class ExamInfo:
    title: str
    category_title: str = ""


@dataclass
class ScoredResult:
    question_id: str
    title: str
    info: str
    choices: list[str]
    relevance: float
    type_name: str

    def to_dict(self) -> dict:
        return {
            "question_id": self.question_id,
            "title": self.title,
            "info": self.info,
            "choices": list(self.choices),
            "relevance": self.relevance,
            "type_name": self.type_name,
        }
