"""Deterministic LLM client for tests and offline runs."""

from __future__ import annotations

import json
from typing import Any

from src.ragkit.llm.base import LLMClient


class MockLLM(LLMClient):
    """Returns a canned response and records every prompt it receives.

    Args:
        response: Text returned by generate(). Dicts and lists are
            serialized to JSON so generate_json() round-trips them.
        model: Reported model name.
    """

    def __init__(self, response: Any = "mock response", model: str = "mock-model") -> None:
        self._model = model
        self._response = ""
        self.prompts: list[str] = []
        self.set_response(response)

    @property
    def model_name(self) -> str:
        return self._model

    @property
    def provider(self) -> str:
        return "mock"

    def set_response(self, response: Any) -> None:
        self._response = response if isinstance(response, str) else json.dumps(response)

    async def generate(self, prompt: str) -> str:
        self.prompts.append(prompt)
        return self._response
