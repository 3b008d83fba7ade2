"""
Model identifiers and sampling parameters for chat-completion requests.
"""

from enum import Enum
from typing import Any, Dict, Optional

from pydantic import BaseModel, Field


class ModelOptions(str, Enum):
    """Vision models known to work with the transcription prompt."""
    GPT_O3_MINI = "o3-mini"
    GPT_4O = "gpt-4o"
    GPT_4O_MINI = "gpt-4o-mini"
    LLAVA = "llava"
    LLAMA3_2_VISION = "llama3.2-vision"


class LLMParams(BaseModel):
    """Optional sampling parameters, range-checked against the API's limits."""
    temperature: Optional[float] = Field(None, ge=0.0, le=2.0)
    top_p: Optional[float] = Field(None, ge=0.0, le=1.0)
    frequency_penalty: Optional[float] = Field(None, ge=-2.0, le=2.0)
    presence_penalty: Optional[float] = Field(None, ge=-2.0, le=2.0)
    max_tokens: Optional[int] = Field(None, gt=0)

    model_config = {
        "frozen": True,
        "extra": "forbid",
    }

    def to_payload(self) -> Dict[str, Any]:
        """Request-body fields for the parameters that were set."""
        return self.model_dump(exclude_none=True)
