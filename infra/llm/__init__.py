"""
LLM subsystem for OpenAI-compatible chat completions.

Provides:
- LLMClient: Single chat-completion calls with vision support
- ModelOptions: Known vision model identifiers
- LLMParams: Validated sampling parameters
"""

from infra.llm.client import LLMClient
from infra.llm.models import LLMParams, ModelOptions

__all__ = [
    "LLMClient",
    "LLMParams",
    "ModelOptions",
]
