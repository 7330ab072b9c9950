"""Shared test fixtures."""
from __future__ import annotations

import json

import pytest

from exam_search.models import Choice, NumberValue, QuestionRecord, StringValue


def exam_line(items: dict, title: str = "期末考试", category: str = "计算机") -> str:
    """One exported exam-result record, serialized as a single JSON line."""
    return json.dumps({
        "code": "0",
        "status": "success",
        "message": "",
        "data": {
            "items": items,
            "exam": {"id": 1, "uuid": "exam-1", "title": title, "category_title": category},
        },
    }, ensure_ascii=False)


def raw_item(uuid: str, qtype: str, title: str, **extra) -> dict:
    item = {
        "uuid": uuid,
        "type": qtype,
        "title": title,
        "score": "2",
        "status": 1,
        "answer": ["A"],
        "show_answer": "A",
        "difficulty": "simple",
        "choices": [
            {"operator": "A", "title": "<p>正确选项</p>", "isCorrect": True, "isChecked": True},
            {"operator": "B", "title": "<p>错误选项</p>", "isCorrect": False, "isChecked": False},
        ],
        "test_result": {"status": "right", "answer": ["A"], "score": 2},
    }
    item.update(extra)
    return item


@pytest.fixture
def sample_records():
    """A small mixed-type record set in ingestion order."""
    return [
        QuestionRecord("q1", "single_choice", "<p>操作系统原理</p>", StringValue("2"), "simple", "A",
                       (Choice("A", "进程", True), Choice("B", "线程"))),
        QuestionRecord("q2", "choice", "<p>计算机网络基础概念</p>", NumberValue(3.0), "normal", "AB"),
        QuestionRecord("q3", "single_choice", "操作系统概述", StringValue("2"), "difficulty", "B"),
        QuestionRecord("q4", "determine", "数据结构与算法", NumberValue(1.5), "quite_difficulty", "正确"),
        QuestionRecord("q5", "single_choice", "数据库系统", StringValue("2"), "simple", "C"),
    ]


@pytest.fixture
def exam_file_content():
    """Three exam attempts; q1 repeats with a different title in the second."""
    lines = [
        exam_line({
            "q1": raw_item("q1", "single_choice", "<p>操作系统原理</p>"),
            "q2": raw_item("q2", "choice", "<p>计算机网络基础概念</p>", score=3),
        }),
        "",
        exam_line({
            "q1": raw_item("q1", "single_choice", "重复的题目"),
            "q3": raw_item("q3", "determine", "数据结构与算法", choices=[], show_answer="正确"),
        }, title="补考"),
        exam_line({
            "q4": raw_item("q4", "single_choice", "操作系统概述", difficulty="normal"),
        }),
    ]
    return "\n".join(lines) + "\n"


@pytest.fixture
def exam_file(tmp_path, exam_file_content):
    path = tmp_path / "RawFile.txt"
    path.write_text(exam_file_content, encoding="utf-8")
    return path
