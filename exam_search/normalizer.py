"""Strip exam-platform markup from question and choice text."""
from __future__ import annotations

# The exported entities arrive without their trailing semicolons.
NOISE_TOKENS = ("<p>", "</p>", "&ldquo", "&rdquo", "&ge", "&rsquo", "&nbsp")


def clean_text(text: str) -> str:
    previous = None
    while previous != text:
        previous = text
        for token in NOISE_TOKENS:
            text = text.replace(token, "")
    return text.strip()
