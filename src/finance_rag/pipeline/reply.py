"""Reply length budgeting."""

from __future__ import annotations

from finance_rag.config import ReplyBudgetConfig
from finance_rag.types import ReplyTarget
from finance_rag.understanding.heuristics import heuristic_category


def reply_target(query: str, config: ReplyBudgetConfig | None = None) -> ReplyTarget:
    """Choose the character range for a reply from the raw user text.

    This runs its own keyword pass instead of reusing the classified intent.
    TODO: derive the budget from the resolved category and drop this second pass.
    """

    budgets = config or ReplyBudgetConfig()
    kind = heuristic_category(query)
    budget = budgets.for_category(kind)
    return ReplyTarget(kind=kind, min_chars=budget.min_chars, max_chars=budget.max_chars)


def trim_to_range(text: str, min_chars: int, max_chars: int) -> str:
    """Cut `text` to at most `max_chars`; shorter text is returned unpadded."""
    clean = text.strip()
    if len(clean) > max_chars:
        return clean[:max_chars].rstrip()
    return clean
