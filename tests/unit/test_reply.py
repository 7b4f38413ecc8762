import pytest

from finance_rag.config import ReplyBudget, ReplyBudgetConfig
from finance_rag.pipeline.reply import reply_target, trim_to_range


@pytest.mark.parametrize(
    ("query", "kind", "bounds"),
    [
        ("How much did I spend last month?", "transactional", (0, 140)),
        ("Give me a summary of my finances", "insight", (250, 500)),
        ("What is CDI?", "educational", (200, 500)),
    ],
)
def test_reply_target_by_category(query: str, kind: str, bounds: tuple[int, int]) -> None:
    target = reply_target(query)

    assert target.kind == kind
    assert (target.min_chars, target.max_chars) == bounds


def test_reply_target_uses_configured_budgets() -> None:
    config = ReplyBudgetConfig(transactional=ReplyBudget(min_chars=0, max_chars=80))

    assert reply_target("How much?", config).max_chars == 80


def test_budget_rejects_inverted_bounds() -> None:
    with pytest.raises(ValueError):
        ReplyBudget(min_chars=300, max_chars=100)


def test_long_text_is_cut_and_right_stripped() -> None:
    text = "a" * 139 + " " + "b" * 10

    trimmed = trim_to_range(text, 0, 140)

    assert trimmed == "a" * 139


def test_short_text_is_not_padded() -> None:
    assert trim_to_range("  Too short.  ", 200, 500) == "Too short."


@pytest.mark.parametrize(
    ("text", "bounds"),
    [
        ("word " * 100, (0, 140)),
        ("x" * 600, (200, 500)),
        ("short", (250, 500)),
        ("", (0, 140)),
    ],
)
def test_trimming_is_idempotent(text: str, bounds: tuple[int, int]) -> None:
    once = trim_to_range(text, *bounds)

    assert len(once) <= bounds[1]
    assert trim_to_range(once, *bounds) == once
