import time
from pathlib import Path
from typing import Iterable, List, Optional, Tuple

from pipeline.executors import ExecutionResult, RunState
from pipeline.page_source import PageSelection
from pipeline.schemas import Page, ScribeOutput


def build_pages(completed: Iterable[Tuple[int, str]], selection: PageSelection) -> List[Page]:
    """
    Turn (index, content) pairs into Pages.

    Page numbers come from each unit's original index, so a page missing
    from a partial run never shifts the numbering of the pages after it.
    """
    return [
        Page(
            content=content,
            page=selection.resolve_page_number(index),
            content_length=len(content),
        )
        for index, content in sorted(completed, key=lambda pair: pair[0])
    ]


def aggregate(
    execution: ExecutionResult,
    state: RunState,
    selection: PageSelection,
    file_name: str,
    start_time: float,
) -> ScribeOutput:
    pages = build_pages(execution.completed, selection)
    failed_pages = [selection.resolve_page_number(i) for i in execution.missing_indexes]

    error: Optional[str] = None
    if execution.error is not None:
        error = f"{type(execution.error).__name__}: {execution.error}"

    with state.lock:
        input_tokens = state.input_tokens
        output_tokens = state.output_tokens

    return ScribeOutput(
        completion_time=int((time.time() - start_time) * 1000),
        file_name=file_name,
        input_tokens=input_tokens,
        output_tokens=output_tokens,
        pages=pages,
        status="partial" if failed_pages else "success",
        failed_pages=failed_pages,
        error=error,
    )


def write_markdown(output: ScribeOutput, output_dir: Path) -> Path:
    """Write all page contents to {output_dir}/{file_name}.md, blank-line separated."""
    output_dir.mkdir(parents=True, exist_ok=True)
    result_path = output_dir / f"{output.file_name}.md"
    result_path.write_text(output.markdown, encoding="utf-8")
    return result_path
