"""Tiered keyword relevance heuristic.

Tiers are checked in order and the first one that applies decides the score:

  empty keyword                      1.0
  exact match                        1.0
  prefix match                       0.95
  substring after a word boundary    0.9
  substring mid-word                 0.8
  token overlap                      base * 0.7 + 0.1 per exact token
  any keyword token missing          0.3

The token-overlap score is not clamped and can exceed 1.0 when several
keyword tokens match text tokens exactly.
"""
from __future__ import annotations

import unicodedata

EXACT_SCORE = 1.0
PREFIX_SCORE = 0.95
BOUNDARY_SCORE = 0.9
SUBSTRING_SCORE = 0.8
MISSING_TOKEN_SCORE = 0.3
TOKEN_WEIGHT = 0.7
EXACT_TOKEN_BONUS = 0.1


def is_word_boundary(ch: str) -> bool:
    return ch.isspace() or unicodedata.category(ch).startswith("P")


def _token_overlap(text: str, keyword: str) -> float:
    keyword_tokens = keyword.split()
    text_tokens = text.split()
    if not keyword_tokens:
        return 0.0

    exact = 0
    partial = 0
    for kw in keyword_tokens:
        for token in text_tokens:
            if token == kw:
                exact += 1
                break
            if kw in token:
                partial += 1
                break
        else:
            return MISSING_TOKEN_SCORE

    base = (partial + exact) / len(keyword_tokens)
    return base * TOKEN_WEIGHT + exact * EXACT_TOKEN_BONUS


def calculate_relevance(text: str, keyword: str) -> float:
    if keyword == "":
        return EXACT_SCORE

    text = text.lower()
    keyword = keyword.lower()

    if text == keyword:
        return EXACT_SCORE
    if text.startswith(keyword):
        return PREFIX_SCORE

    index = text.find(keyword)
    if index >= 0:
        if index > 0 and is_word_boundary(text[index - 1]):
            return BOUNDARY_SCORE
        return SUBSTRING_SCORE

    return _token_overlap(text, keyword)
