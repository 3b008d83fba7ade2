"""
Page executors.

Two ways to drive the completion adapter over a run's work units:

- SequentialExecutor ("maintain format"): one page at a time in index order,
  each request carrying the previous page's formatted markdown. The first
  failure stops the run and is re-raised.
- ParallelExecutor (default): up to `concurrency` requests in flight, no
  cross-page context. The first failure stops further dispatch; pages already
  finished are kept, pages finishing afterwards are discarded.

Both write results into an index-addressed list, so output order is the
work-unit order no matter when each page finished.
"""

import threading
import time
from abc import ABC, abstractmethod
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from typing import Callable, List, Optional, Sequence

from infra.logger import ScribeLogger
from pipeline.completion import CompletionAdapter, CompletionResult, ModelConfig
from pipeline.markdown import format_markdown
from pipeline.page_source import PageSelection, WorkUnit

DEFAULT_CONCURRENCY = 10


@dataclass(frozen=True)
class PageResult:
    index: int
    content: str
    input_tokens: int = 0
    output_tokens: int = 0


@dataclass
class RunState:
    """Mutable per-run accumulators. All writes go through record()."""
    prior_page: str = ""
    input_tokens: int = 0
    output_tokens: int = 0
    lock: threading.Lock = field(default_factory=threading.Lock, repr=False, compare=False)

    def record(self, page: PageResult):
        with self.lock:
            self._record_locked(page)

    def _record_locked(self, page: PageResult):
        self.prior_page = page.content
        self.input_tokens += page.input_tokens
        self.output_tokens += page.output_tokens


@dataclass
class ExecutionResult:
    """
    Index-addressed executor output.

    contents[i] is the formatted markdown of work unit i, or None if the unit
    failed, was skipped after an abort, or finished after the abort.
    """
    contents: List[Optional[str]]
    error: Optional[BaseException] = None
    failed_index: Optional[int] = None

    @property
    def completed(self) -> List[tuple]:
        """(index, content) pairs for the units that produced output, in index order."""
        return [(i, c) for i, c in enumerate(self.contents) if c is not None]

    @property
    def missing_indexes(self) -> List[int]:
        return [i for i, c in enumerate(self.contents) if c is None]


class PageExecutor(ABC):
    def __init__(
        self,
        adapter: CompletionAdapter,
        model_config: ModelConfig,
        logger: Optional[ScribeLogger] = None,
        selection: Optional[PageSelection] = None,
        formatter: Callable[[Optional[str]], str] = format_markdown,
        on_page_complete: Optional[Callable[[], None]] = None,
    ):
        self.adapter = adapter
        self.model_config = model_config
        self.logger = logger or ScribeLogger("pagescribe", "transcribe")
        self.selection = selection or PageSelection()
        self.formatter = formatter
        self.on_page_complete = on_page_complete

    @abstractmethod
    def run(self, units: Sequence[WorkUnit], state: RunState) -> ExecutionResult:
        pass

    def _page_result(self, unit: WorkUnit, result: CompletionResult) -> PageResult:
        return PageResult(
            index=unit.index,
            content=self.formatter(result.content),
            input_tokens=result.input_tokens,
            output_tokens=result.output_tokens,
        )

    def _page_done(self):
        if self.on_page_complete is not None:
            self.on_page_complete()


class SequentialExecutor(PageExecutor):
    def run(self, units: Sequence[WorkUnit], state: RunState) -> ExecutionResult:
        contents: List[Optional[str]] = [None] * len(units)

        for unit in units:
            page = self.selection.resolve_page_number(unit.index)
            start = time.time()

            try:
                result = self.adapter.complete(unit.source_ref, state.prior_page, self.model_config)
            except Exception as e:
                self.logger.page_error(
                    f"Failed to process {unit.source_ref.name}",
                    page=page,
                    index=unit.index,
                    error=f"{type(e).__name__}: {e}",
                )
                raise

            page_result = self._page_result(unit, result)
            state.record(page_result)
            contents[unit.index] = page_result.content

            self.logger.debug(
                "Page transcribed",
                page=page,
                index=unit.index,
                tokens=result.input_tokens + result.output_tokens,
                duration_seconds=round(time.time() - start, 3),
            )
            self._page_done()

        return ExecutionResult(contents=contents)


class ParallelExecutor(PageExecutor):
    def __init__(self, *args, concurrency: int = DEFAULT_CONCURRENCY, **kwargs):
        super().__init__(*args, **kwargs)
        if concurrency < 1:
            raise ValueError(f"concurrency must be >= 1, got {concurrency}")
        self.concurrency = concurrency

    def run(self, units: Sequence[WorkUnit], state: RunState) -> ExecutionResult:
        contents: List[Optional[str]] = [None] * len(units)
        abort = threading.Event()
        failure = {}

        def process_unit(unit: WorkUnit):
            page = self.selection.resolve_page_number(unit.index)

            if abort.is_set():
                self.logger.debug("Skipped after earlier failure", page=page, index=unit.index)
                return

            start = time.time()
            try:
                # No cross-page context in parallel mode
                result = self.adapter.complete(unit.source_ref, None, self.model_config)
            except Exception as e:
                with state.lock:
                    if not abort.is_set():
                        failure["error"] = e
                        failure["index"] = unit.index
                        abort.set()
                self.logger.page_error(
                    f"Failed to process {unit.source_ref.name}",
                    page=page,
                    index=unit.index,
                    error=f"{type(e).__name__}: {e}",
                )
                return

            page_result = self._page_result(unit, result)

            with state.lock:
                if abort.is_set():
                    discarded = True
                else:
                    discarded = False
                    contents[unit.index] = page_result.content
                    state._record_locked(page_result)

            if discarded:
                self.logger.debug("Discarded result finished after failure", page=page, index=unit.index)
                return

            self.logger.debug(
                "Page transcribed",
                page=page,
                index=unit.index,
                tokens=result.input_tokens + result.output_tokens,
                duration_seconds=round(time.time() - start, 3),
            )
            self._page_done()

        with ThreadPoolExecutor(max_workers=self.concurrency) as pool:
            futures = [pool.submit(process_unit, unit) for unit in units]
            for future in futures:
                future.result()

        return ExecutionResult(
            contents=contents,
            error=failure.get("error"),
            failed_index=failure.get("index"),
        )
