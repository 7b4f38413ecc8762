"""Keyword vocabularies shared by the offline classifier and reply budgeting."""

from __future__ import annotations

import re

from finance_rag.types import Category

TRANSACTIONAL_CUES: tuple[str, ...] = ("how much", "spent", "received", "will pay")
INSIGHT_CUES: tuple[str, ...] = ("summary", "financial health", "how is")

TEMPORAL_CUE = re.compile(
    r"\b(?:months?|weeks?|days?|today|yesterday|last|past|previous|"
    r"january|february|march|april|may|june|july|august|september|october|"
    r"november|december|carnival)\b"
)


def heuristic_category(text: str) -> Category:
    """Pick a category by keyword membership; transactional cues win."""
    lower = text.lower()
    if any(cue in lower for cue in TRANSACTIONAL_CUES):
        return "transactional"
    if any(cue in lower for cue in INSIGHT_CUES):
        return "insight"
    return "educational"


def has_temporal_cue(text: str) -> bool:
    return TEMPORAL_CUE.search(text.lower()) is not None
