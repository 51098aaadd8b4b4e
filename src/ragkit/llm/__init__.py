"""LLM clients and structured-output decoding."""

from src.ragkit.llm.base import DecodeResult, LLMClient, decode_json_output
from src.ragkit.llm.litellm_client import LiteLLMClient
from src.ragkit.llm.mock import MockLLM

__all__ = [
    "DecodeResult",
    "LLMClient",
    "LiteLLMClient",
    "MockLLM",
    "decode_json_output",
]
