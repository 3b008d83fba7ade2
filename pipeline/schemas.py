from pathlib import Path
from typing import List, Literal, Optional, Union

from pydantic import BaseModel, Field, field_validator

from infra.llm.models import LLMParams
from pipeline.executors import DEFAULT_CONCURRENCY
from pipeline.page_source import ALL_PAGES


class ScribeArgs(BaseModel):
    """Validated options for one scribe() run."""
    file_path: str = Field(..., description="Local path or http(s) URL of the document")
    api_key: str = Field(..., description="Bearer token for the completions endpoint")
    concurrency: int = Field(DEFAULT_CONCURRENCY, ge=1, description="Max in-flight page requests")
    maintain_format: bool = Field(False, description="Sequential mode with prior-page context")
    model: str = Field(..., description="Vision model name")
    output_dir: Optional[Path] = Field(None, description="Write {file_name}.md here when set")
    pages_to_convert_as_images: Union[int, List[int]] = Field(
        ALL_PAGES,
        description="-1 for all pages, a page number, or a list of page numbers"
    )
    temp_dir: Optional[Path] = Field(None, description="Parent of the per-run working directory")
    cleanup: bool = Field(True, description="Remove the working directory when done")
    llm_params: LLMParams = Field(default_factory=LLMParams)
    show_progress: bool = Field(False, description="Show a progress bar and summary on stderr")
    log_dir: Optional[Path] = Field(None, description="Directory for JSONL run logs")

    @field_validator('file_path', 'api_key', 'model')
    @classmethod
    def require_non_empty(cls, v: str, info) -> str:
        v = v.strip()
        if not v:
            raise ValueError(f"{info.field_name} must not be empty")
        return v

    model_config = {
        "frozen": True,
        "extra": "forbid",
    }


class Page(BaseModel):
    content: str
    page: int
    content_length: int


class ScribeOutput(BaseModel):
    """
    Result of a run.

    status is "partial" when a parallel run lost pages to a failure; the
    missing page numbers are in failed_pages and the first failure's message
    in error. A run where nothing succeeded raises instead.
    """
    completion_time: int = Field(..., description="Milliseconds from start to aggregation")
    file_name: str
    input_tokens: int
    output_tokens: int
    pages: List[Page]
    status: Literal["success", "partial"] = "success"
    failed_pages: List[int] = Field(default_factory=list)
    error: Optional[str] = None

    @property
    def markdown(self) -> str:
        return "\n\n".join(page.content for page in self.pages)
