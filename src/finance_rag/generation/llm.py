"""Generative model adapters."""

from __future__ import annotations

import os
from typing import Any, Protocol

from langchain_core.prompts import ChatPromptTemplate

INSUFFICIENT_INFORMATION = "I don't have enough information about that."

_GENERATION_TEMPLATE = ChatPromptTemplate.from_messages(
    [
        ("system", "{system_instruction}"),
        ("human", "{user_content}"),
    ]
)


class Generator(Protocol):
    """Minimal text generation contract used by the orchestrator."""

    def generate(
        self,
        system_instruction: str,
        user_content: str,
        *,
        temperature: float,
        max_output_tokens: int,
    ) -> str:
        """Return the model's reply to `user_content`."""


class ChatModelGenerator:
    """Adapts a LangChain chat model to the `Generator` contract."""

    def __init__(self, llm: Any) -> None:
        self.llm = llm

    def generate(
        self,
        system_instruction: str,
        user_content: str,
        *,
        temperature: float,
        max_output_tokens: int,
    ) -> str:
        messages = _GENERATION_TEMPLATE.format_messages(
            system_instruction=system_instruction,
            user_content=user_content,
        )
        model = self.llm.bind(temperature=temperature, max_tokens=max_output_tokens)
        response = model.invoke(messages)
        return message_text(response).strip()


class ExtractiveGenerator:
    """Deterministic generator used when no LLM is configured.

    It answers with the text of the first grounding block, or with the
    insufficient-information sentence when the prompt carries no context.
    """

    def generate(
        self,
        system_instruction: str,
        user_content: str,
        *,
        temperature: float,
        max_output_tokens: int,
    ) -> str:
        del system_instruction, temperature, max_output_tokens
        for line in user_content.splitlines():
            if line.startswith("Content: "):
                return line[len("Content: ") :].strip()
        return INSUFFICIENT_INFORMATION


def create_chat_model(temperature: float = 0.0) -> Any | None:
    """Build an OpenAI chat model from the environment, or None without a key."""
    api_key = os.getenv("OPENAI_API_KEY")
    if not api_key:
        return None

    from langchain_openai import ChatOpenAI

    return ChatOpenAI(model=os.getenv("OPENAI_MODEL", "gpt-4o-mini"), temperature=temperature)


def message_text(response: Any) -> str:
    """Flatten a chat model response into plain text."""
    content = getattr(response, "content", response)
    if isinstance(content, list):
        parts: list[str] = []
        for item in content:
            if isinstance(item, dict) and "text" in item:
                parts.append(str(item["text"]))
            else:
                parts.append(str(item))
        return " ".join(parts).strip()
    return str(content)

