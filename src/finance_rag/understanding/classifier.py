"""Intent classification with an LLM primary path and an offline fallback."""

from __future__ import annotations

import json
import logging
import re
from datetime import date
from typing import Any

from langchain_core.prompts import ChatPromptTemplate
from pydantic import BaseModel, ConfigDict, Field, ValidationError

from finance_rag.config import ClassifierConfig
from finance_rag.generation.llm import message_text
from finance_rag.types import Category, Intent
from finance_rag.understanding.heuristics import has_temporal_cue, heuristic_category

logger = logging.getLogger(__name__)

_CLASSIFIER_PROMPT = """
You extract intents for a personal-finance assistant.

Analyze the user's question and determine:
1) The question type: "transactional" (amounts, spending, income), "insight"
   (summaries, financial health) or "educational" (how something works, what
   something is).
2) Whether it refers to a period of time (last month, carnival, last week...).
3) Relevant keywords for semantic search.

CURRENT DATE: {current_date}

Reply ONLY with valid JSON, no markdown and no explanations:
{{
  "category": "transactional" | "insight" | "educational",
  "hasTemporalFilter": boolean,
  "temporalExpression": "optional string (e.g. 'last month', 'carnival', 'last 30 days')",
  "keywords": ["keyword1", "keyword2"]
}}
""".strip()

_CLASSIFIER_TEMPLATE = ChatPromptTemplate.from_messages(
    [
        ("system", _CLASSIFIER_PROMPT),
        ("human", "{query}"),
    ]
)

_LAST_N_DAYS = re.compile(r"\b(?:last|past)\s+(\d+)\s+days?\b")


class IntentPayload(BaseModel):
    """Schema the classification model must answer with."""

    model_config = ConfigDict(extra="ignore")

    category: Category
    has_temporal_filter: bool = Field(alias="hasTemporalFilter")
    temporal_expression: str | None = Field(default=None, alias="temporalExpression")
    keywords: list[str] = Field(default_factory=list)

    def to_intent(self) -> Intent:
        phrase = (self.temporal_expression or "").strip() or None
        if not self.has_temporal_filter:
            phrase = None
        return Intent(
            category=self.category,
            has_temporal_reference=self.has_temporal_filter,
            temporal_phrase=phrase,
            keywords=tuple(self.keywords),
        )


class IntentClassifier:
    """Classifies questions into an `Intent`.

    When an LLM is configured it is asked for a single JSON object; anything
    that goes wrong on that path (transport errors, prose without JSON,
    schema violations) degrades to `fallback_intent`. Callers never see a
    classification error.
    """

    def __init__(self, llm: Any | None = None, config: ClassifierConfig | None = None) -> None:
        self.llm = llm
        self.config = config or ClassifierConfig()

    @property
    def mode(self) -> str:
        return "llm" if self.llm is not None else "deterministic"

    def classify(self, query: str, reference_date: date) -> Intent:
        if self.llm is None:
            logger.debug("No classification model configured; using fallback")
            return fallback_intent(query)

        try:
            raw = self._invoke(query, reference_date)
            payload = parse_intent_payload(raw)
        except Exception as exc:
            logger.warning("Intent classification failed, using fallback: %s", exc)
            return fallback_intent(query)

        if payload is None:
            logger.warning("Intent classification returned no usable JSON, using fallback")
            return fallback_intent(query)
        return payload.to_intent()

    def _invoke(self, query: str, reference_date: date) -> str:
        messages = _CLASSIFIER_TEMPLATE.format_messages(
            current_date=f"{reference_date.isoformat()} ({reference_date.strftime('%A')})",
            query=query,
        )
        model = self.llm.bind(temperature=self.config.temperature)
        response = model.invoke(messages)
        return message_text(response)


def parse_intent_payload(raw: str) -> IntentPayload | None:
    """Parse the first JSON object in `raw` into an `IntentPayload`.

    Returns None when there is no object, the object is not valid JSON, or it
    does not satisfy the schema. Partially matching structures are rejected.
    """

    candidate = extract_json_object(raw)
    if candidate is None:
        return None
    try:
        data = json.loads(candidate)
    except json.JSONDecodeError:
        return None
    if not isinstance(data, dict):
        return None
    try:
        return IntentPayload.model_validate(data)
    except ValidationError:
        return None


def extract_json_object(text: str) -> str | None:
    """Return the first balanced `{...}` substring of `text`.

    Braces inside JSON string literals (including escaped quotes) do not
    count towards the balance.
    """

    start = text.find("{")
    while start != -1:
        depth = 0
        in_string = False
        escaped = False
        for idx in range(start, len(text)):
            char = text[idx]
            if in_string:
                if escaped:
                    escaped = False
                elif char == "\\":
                    escaped = True
                elif char == '"':
                    in_string = False
                continue
            if char == '"':
                in_string = True
            elif char == "{":
                depth += 1
            elif char == "}":
                depth -= 1
                if depth == 0:
                    return text[start : idx + 1]
        # Unbalanced from this brace; try the next opening brace.
        start = text.find("{", start + 1)
    return None


def fallback_intent(query: str) -> Intent:
    """Deterministic keyword-based classification used without an LLM."""

    lower = query.lower()
    category = heuristic_category(lower)
    has_temporal = has_temporal_cue(lower)
    phrase = _temporal_phrase(lower) if has_temporal else None
    keywords = tuple(token for token in query.split() if len(token) > 3)
    return Intent(
        category=category,
        has_temporal_reference=has_temporal,
        temporal_phrase=phrase,
        keywords=keywords,
    )


def _temporal_phrase(lower: str) -> str | None:
    if any(f"{word} month" in lower for word in ("last", "past", "previous", "prior")):
        return "last month"
    if "this month" in lower or "current month" in lower:
        return "this month"
    match = _LAST_N_DAYS.search(lower)
    if match:
        return f"last {match.group(1)} days"
    if "last week" in lower or "past week" in lower:
        return "last week"
    return None

