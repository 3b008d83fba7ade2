"""
Completion adapters: page image in, transcribed markdown and token counts out.

The executors only depend on the CompletionAdapter interface. The vision
adapter is the production implementation; tests inject their own.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Optional

from infra.llm import LLMClient, LLMParams
from pipeline.prompts import TRANSCRIBE_SYSTEM_PROMPT, PRIOR_PAGE_PROMPT


@dataclass(frozen=True)
class ModelConfig:
    model: str
    llm_params: LLMParams = field(default_factory=LLMParams)
    maintain_format: bool = False


@dataclass
class CompletionResult:
    content: str
    input_tokens: int = 0
    output_tokens: int = 0


class CompletionAdapter(ABC):
    """
    Transcribes one page image.

    Implementations must be safe to call from several threads at once and
    must raise (AdapterError for provider failures) rather than return a
    partial result.
    """

    @abstractmethod
    def complete(
        self,
        image_path: Path,
        prior_page: Optional[str],
        model_config: ModelConfig,
    ) -> CompletionResult:
        pass


class VisionCompletionAdapter(CompletionAdapter):
    """Sends the page image to a vision chat model via LLMClient."""

    def __init__(self, client: LLMClient):
        self.client = client

    def build_messages(self, prior_page: Optional[str]) -> List[Dict]:
        messages = [{"role": "system", "content": TRANSCRIBE_SYSTEM_PROMPT}]

        if prior_page:
            messages.append({
                "role": "system",
                "content": PRIOR_PAGE_PROMPT.format(prior_page=prior_page),
            })

        messages.append({"role": "user", "content": ""})
        return messages

    def complete(
        self,
        image_path: Path,
        prior_page: Optional[str],
        model_config: ModelConfig,
    ) -> CompletionResult:
        content, usage = self.client.call(
            model=model_config.model,
            messages=self.build_messages(prior_page),
            llm_params=model_config.llm_params,
            images=[image_path],
        )

        return CompletionResult(
            content=content,
            input_tokens=usage.get("prompt_tokens", 0),
            output_tokens=usage.get("completion_tokens", 0),
        )
