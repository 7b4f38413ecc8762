"""Prompt assembly for grounded answer generation."""

from __future__ import annotations

from collections.abc import Sequence
from datetime import date

from langchain_core.prompts import PromptTemplate

from finance_rag.generation.llm import INSUFFICIENT_INFORMATION
from finance_rag.types import RetrievedChunk

CONTEXT_DELIMITER = "\n---\n"

_SYSTEM_INSTRUCTION = PromptTemplate.from_template(
    """
You are a concise, assertive personal-finance assistant.

CURRENT DATE: {current_date} ({weekday})

Response rules:
- At most {max_chars} characters (3-4 sentences).
- Use the supplied context to give specific, precise answers.
- Always interpret time periods relative to the current date.
- Transactional questions: lead with the number.
- Insight questions: open with "Bottom line" plus one supporting detail.
- Educational questions: give a short summary and offer more detail.
- If no relevant context is supplied, say "{insufficient}"
- Be specific and assertive, based on the data provided.
""".strip()
)


def build_system_instruction(reference_date: date, *, max_chars: int = 400) -> str:
    return _SYSTEM_INSTRUCTION.format(
        current_date=reference_date.isoformat(),
        weekday=reference_date.strftime("%A"),
        max_chars=max_chars,
        insufficient=INSUFFICIENT_INFORMATION,
    )


def render_chunk(index: int, chunk: RetrievedChunk) -> str:
    lines = [
        f"[Context {index}]",
        f"Category: {chunk.category}",
        f"Date: {chunk.date}",
    ]
    if chunk.amount is not None:
        lines.append(f"Amount: {chunk.amount:.2f}")
    lines.append(f"Source: {chunk.source}")
    lines.append(f"Content: {chunk.text}")
    return "\n".join(lines) + "\n"


def build_contextual_query(query: str, chunks: Sequence[RetrievedChunk]) -> str:
    """Frame the user query with labeled grounding blocks.

    Without chunks the bare query is returned, which lets the system
    instruction's insufficient-information rule apply.
    """

    if not chunks:
        return query

    blocks = CONTEXT_DELIMITER.join(
        render_chunk(index, chunk) for index, chunk in enumerate(chunks, start=1)
    )
    return (
        f"User question: {query}\n\n"
        f"Relevant context found:\n{blocks}\n"
        "Based on the context above, answer the user's question specifically and assertively."
    )
