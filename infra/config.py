import os
from pathlib import Path
from typing import Optional

from pydantic import BaseModel, Field, field_validator
from dotenv import load_dotenv

load_dotenv()

DEFAULT_BASE_URL = "https://api.openai.com/v1"
DEFAULT_VISION_MODEL = "gpt-4o-mini"


class ScribeConfig(BaseModel):
    openai_api_key: str = Field(
        default="",
        description="API key for the chat completions endpoint"
    )

    base_url: str = Field(
        default=DEFAULT_BASE_URL,
        description="OpenAI-compatible API root (no trailing /chat/completions)"
    )

    vision_model: str = Field(
        default=DEFAULT_VISION_MODEL,
        description="Vision model used when a run does not name one"
    )

    log_dir: Optional[Path] = Field(
        default=None,
        description="Directory for JSONL run logs (disabled when unset)"
    )

    request_timeout: int = Field(
        default=120,
        ge=1,
        description="Per-request timeout in seconds"
    )

    @field_validator('openai_api_key')
    @classmethod
    def strip_api_key(cls, v: str) -> str:
        return v.strip()

    @field_validator('base_url')
    @classmethod
    def strip_trailing_slash(cls, v: str) -> str:
        return (v.strip() or DEFAULT_BASE_URL).rstrip('/')

    @field_validator('vision_model')
    @classmethod
    def default_model(cls, v: str) -> str:
        return v.strip() or DEFAULT_VISION_MODEL

    @field_validator('log_dir')
    @classmethod
    def expand_log_dir(cls, v: Optional[Path]) -> Optional[Path]:
        if v is None or str(v).strip() == '':
            return None
        return Path(v).expanduser().resolve()

    model_config = {
        "frozen": True,
        "validate_assignment": True
    }


def _load_config() -> ScribeConfig:
    return ScribeConfig(
        openai_api_key=os.getenv('OPENAI_API_KEY', ''),
        base_url=os.getenv('BASE_URL', DEFAULT_BASE_URL),
        vision_model=os.getenv('VISION_MODEL', DEFAULT_VISION_MODEL),
        log_dir=os.getenv('SCRIBE_LOG_DIR') or None,
        request_timeout=int(os.getenv('SCRIBE_REQUEST_TIMEOUT', '120')),
    )


Config = _load_config()
