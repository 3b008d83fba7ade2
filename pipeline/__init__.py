"""
Page-processing pipeline.

- page_source: work units and page-number resolution
- completion: completion adapter interface + vision implementation
- executors: sequential (maintain format) and bounded-parallel execution
- aggregator: ordered pages, token totals, markdown output
- transcribe: the run orchestrator, scribe()
- extract: structured extraction on top of scribe
"""

from pipeline.page_source import ALL_PAGES, PageSelection, WorkUnit, build_work_units
from pipeline.completion import CompletionAdapter, CompletionResult, ModelConfig, VisionCompletionAdapter
from pipeline.executors import (
    ExecutionResult,
    PageResult,
    PageExecutor,
    ParallelExecutor,
    RunState,
    SequentialExecutor,
)
from pipeline.markdown import format_markdown
from pipeline.schemas import Page, ScribeArgs, ScribeOutput
from pipeline.transcribe import sanitize_file_name, scribe

__all__ = [
    "ALL_PAGES",
    "PageSelection",
    "WorkUnit",
    "build_work_units",

    "CompletionAdapter",
    "CompletionResult",
    "ModelConfig",
    "VisionCompletionAdapter",

    "ExecutionResult",
    "PageResult",
    "PageExecutor",
    "ParallelExecutor",
    "RunState",
    "SequentialExecutor",

    "format_markdown",

    "Page",
    "ScribeArgs",
    "ScribeOutput",

    "sanitize_file_name",
    "scribe",
]
