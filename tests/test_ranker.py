"""Tests for result building, ranking and category search."""
from __future__ import annotations

from unittest.mock import patch

import pytest

from exam_search.models import Choice, QuestionRecord, ScoredResult, StringValue
from exam_search.ranker import (
    InvalidSelection,
    format_choices,
    format_info,
    rank,
    search_questions,
    to_result,
)


def _candidates(titles: list[str]) -> list[ScoredResult]:
    return [
        ScoredResult(f"id{i}", t, "", [], 0.0, "单选题")
        for i, t in enumerate(titles)
    ]


class TestRank:
    def test_prefix_matches_kept_missing_dropped(self):
        results = rank(_candidates(["操作系统原理", "操作系统概述", "数据库系统"]), "操作系统")
        assert [r.title for r in results] == ["操作系统原理", "操作系统概述"]
        assert all(r.relevance == 0.95 for r in results)

    def test_empty_keyword_returns_all_by_length(self):
        titles = ["一二三四五", "一", "一二三", "一二", "一二三四"]
        results = rank(_candidates(titles), "")
        assert [r.title for r in results] == ["一", "一二", "一二三", "一二三四", "一二三四五"]
        assert all(r.relevance == 1.0 for r in results)

    def test_empty_keyword_not_capped(self):
        results = rank(_candidates([f"题目{i}" for i in range(30)]), "")
        assert len(results) == 30

    def test_sorted_by_score_then_length(self):
        titles = ["数据结构与算法", "结构", "结构化程序设计方法", "程序 结构"]
        results = rank(_candidates(titles), "结构")
        assert [(r.title, r.relevance) for r in results] == [
            ("结构", 1.0),
            ("结构化程序设计方法", 0.95),
            ("程序 结构", 0.9),
            ("数据结构与算法", 0.8),
        ]

    def test_length_tie_break_counts_utf8_bytes(self):
        # "x题目题" is 4 characters but 10 bytes; "xabcdef" is 7 of each
        results = rank(_candidates(["x题目题", "xabcdef"]), "")
        assert [r.title for r in results] == ["xabcdef", "x题目题"]

    def test_ties_keep_input_order(self):
        titles = ["网络甲", "网络乙", "网络丙"]
        results = rank(_candidates(titles), "网络")
        assert [r.question_id for r in results] == ["id0", "id1", "id2"]

    def test_repeatable(self):
        titles = ["b 网络", "a 网络", "网络 c", "网络 d", "网络"]
        first = [r.question_id for r in rank(_candidates(titles), "网络")]
        for _ in range(5):
            assert [r.question_id for r in rank(_candidates(titles), "网络")] == first

    def test_capped_at_twenty(self):
        results = rank(_candidates([f"题目{i}" for i in range(25)]), "题目")
        assert len(results) == 20
        assert [r.title for r in results[:10]] == [f"题目{i}" for i in range(10)]

    def test_threshold_is_strict(self):
        results = rank(_candidates(["数据结构"]), "结构", threshold=0.8)
        assert results == []

    def test_custom_limit(self):
        results = rank(_candidates(["网络1", "网络2", "网络3"]), "网络", limit=2)
        assert len(results) == 2

    def test_every_result_above_threshold(self):
        titles = ["hello big world", "hello moon", "world", "big hello world", "other"]
        for r in rank(_candidates(titles), "hello world"):
            assert r.relevance > 0.5

    def test_does_not_mutate_input(self):
        candidates = _candidates(["网络"])
        rank(candidates, "网络")
        assert candidates[0].relevance == 0.0

    def test_empty_candidates(self):
        assert rank([], "网络") == []


class TestFormatting:
    def test_info_line(self, sample_records):
        assert format_info(sample_records[0]) == "难度: 简单 | 分值: 2 | 正确答案: A"
        assert format_info(sample_records[3]) == "难度: 较难 | 分值: 1.5 | 正确答案: 正确"

    def test_info_passthrough_difficulty(self):
        record = QuestionRecord("x", "single_choice", "t", StringValue("5"), "extreme", "D")
        assert format_info(record) == "难度: extreme | 分值: 5 | 正确答案: D"

    def test_choice_lines(self):
        record = QuestionRecord("x", "choice", "t", choices=(
            Choice("A", "<p>进程&nbsp</p>", True),
            Choice("B", "线程", False),
        ))
        assert format_choices(record) == ["A. 进程 ✓", "B. 线程"]

    def test_no_choices(self, sample_records):
        assert format_choices(sample_records[1]) == []

    def test_to_result_cleans_title(self, sample_records):
        result = to_result(sample_records[0], "单选题")
        assert result.title == "操作系统原理"
        assert result.question_id == "q1"
        assert result.type_name == "单选题"


class TestSearchQuestions:
    def test_search_category(self, sample_records):
        results = search_questions(sample_records, "single_choice", "操作系统")
        assert [r.question_id for r in results] == ["q1", "q3"]
        assert results[0].choices == ["A. 进程 ✓", "B. 线程"]
        assert results[0].type_name == "单选题"

    def test_only_requested_category(self, sample_records):
        results = search_questions(sample_records, "choice", "")
        assert [r.question_id for r in results] == ["q2"]
        assert results[0].type_name == "多选题"

    def test_empty_keyword_returns_whole_category(self, sample_records):
        results = search_questions(sample_records, "single_choice", "")
        # all score 1.0, shortest title first
        assert [r.question_id for r in results] == ["q5", "q1", "q3"]

    def test_empty_category_is_not_an_error(self):
        records = [QuestionRecord("x", "single_choice", "题目")]
        assert search_questions(records, "determine", "题目") == []

    def test_invalid_type(self, sample_records):
        with patch("exam_search.ranker.rank") as mock_rank:
            with pytest.raises(InvalidSelection) as exc_info:
                search_questions(sample_records, "fill_blank", "操作系统")
        mock_rank.assert_not_called()
        assert exc_info.value.question_type == "fill_blank"

    def test_display_name_is_not_a_type(self, sample_records):
        with pytest.raises(InvalidSelection):
            search_questions(sample_records, "单选题", "")

    def test_invalid_selection_is_value_error(self, sample_records):
        with pytest.raises(ValueError):
            search_questions(sample_records, "", "")

    @pytest.mark.parametrize("question_type", [["single_choice"], {"a": 1}, 3])
    def test_non_string_type(self, sample_records, question_type):
        with pytest.raises(InvalidSelection):
            search_questions(sample_records, question_type, "")
