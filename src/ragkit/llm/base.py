"""LLM client interface and structured-output decoding.

Model output is untrusted text. generate_json() runs every response
through decode_json_output(), which strips markdown code fences, skips
any preamble before the first JSON array or object, and parses the
rest. Decode failures raise LLMDecodeError with the raw output attached.
"""

from __future__ import annotations

import asyncio
import json
import re
from abc import ABC, abstractmethod
from typing import Any

from pydantic import BaseModel

from src.ragkit.exceptions import LLMDecodeError


class DecodeResult(BaseModel):
    """Outcome of decoding model output as JSON.

    Attributes:
        ok: True when the output parsed.
        value: Parsed JSON value when ok, else None.
        error: Failure description when not ok.
        raw_output: The text that was decoded.
    """

    ok: bool
    value: Any = None
    error: str | None = None
    raw_output: str = ""


def decode_json_output(raw: str) -> DecodeResult:
    """Decode raw model text as JSON, tolerating code fences and preamble."""
    cleaned = re.sub(r"^```(?:json)?\s*\n?", "", raw.strip())
    cleaned = re.sub(r"\n?```\s*$", "", cleaned.strip())

    match = re.search(r"[\[{]", cleaned)
    candidate = cleaned[match.start() :] if match else cleaned

    try:
        value = json.loads(candidate)
    except json.JSONDecodeError as exc:
        return DecodeResult(
            ok=False,
            error=f"Invalid JSON in LLM response: {exc.msg}",
            raw_output=raw,
        )
    return DecodeResult(ok=True, value=value, raw_output=raw)


class LLMClient(ABC):
    """Text generation collaborator."""

    @property
    @abstractmethod
    def model_name(self) -> str:
        ...

    @property
    @abstractmethod
    def provider(self) -> str:
        ...

    @abstractmethod
    async def generate(self, prompt: str) -> str:
        """Return the model's text completion for a single prompt."""
        ...

    async def generate_json(self, prompt: str) -> Any:
        """Generate and decode a JSON response.

        Raises:
            LLMDecodeError: If the response is not valid JSON.
        """
        raw = await self.generate(prompt)
        result = decode_json_output(raw)
        if not result.ok:
            raise LLMDecodeError(result.error or "Invalid JSON in LLM response", raw)
        return result.value

    async def generate_batch(self, prompts: list[str]) -> list[str]:
        """Generate completions for several prompts concurrently, in order."""
        return list(await asyncio.gather(*(self.generate(p) for p in prompts)))
