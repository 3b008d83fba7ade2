"""
Document → page images → vision model → ordered markdown.

scribe() owns a run from validation to cleanup:

  Initializing → SequentialRun | ParallelRun → Aggregating → Completed | Failed

maintain_format selects the sequential executor (each page sees the previous
page's markdown); otherwise pages run in parallel up to `concurrency` at a
time. A parallel run that loses some pages to a failure still completes, with
status="partial"; one that loses every page raises the first failure.
"""

import re
import shutil
import tempfile
import time
from pathlib import Path
from typing import List, Optional, Union

from pydantic import ValidationError
from rich.console import Console

from infra.config import Config
from infra.display import format_run_summary, page_progress
from infra.errors import ConfigurationError, ConversionError
from infra.llm import LLMClient, LLMParams
from infra.logger import ScribeLogger, create_logger
from infra.pdf_utils import IMAGE_EXTENSIONS, convert_file_to_pdf, convert_pdf_to_images, download_file
from pipeline.aggregator import aggregate, write_markdown
from pipeline.completion import CompletionAdapter, ModelConfig, VisionCompletionAdapter
from pipeline.executors import DEFAULT_CONCURRENCY, ParallelExecutor, PageExecutor, RunState, SequentialExecutor
from pipeline.page_source import ALL_PAGES, PageSelection, PagesOption, build_work_units
from pipeline.schemas import ScribeArgs, ScribeOutput

MAX_FILE_NAME_LENGTH = 255
DEFAULT_FILE_NAME = "document"


def sanitize_file_name(name: str) -> str:
    """
    File-system safe base name for a document.

    "My Report (v2).pdf" -> "my_report_v2"
    "Café Ünïcode.pdf"   -> "caf_ncode"
    """
    raw = Path(name).name.split(".")[0]
    # ASCII letters and digits only; 255 characters must fit a file-name limit
    cleaned = re.sub(r"[^A-Za-z0-9_\s]", "", raw)
    cleaned = re.sub(r"\s+", "_", cleaned).lower()
    return cleaned[:MAX_FILE_NAME_LENGTH] or DEFAULT_FILE_NAME


def scribe(
    file_path: str,
    api_key: Optional[str] = None,
    concurrency: int = DEFAULT_CONCURRENCY,
    maintain_format: bool = False,
    model: Optional[str] = None,
    output_dir: Optional[Union[str, Path]] = None,
    pages_to_convert_as_images: PagesOption = ALL_PAGES,
    temp_dir: Optional[Union[str, Path]] = None,
    cleanup: bool = True,
    llm_params: Optional[Union[LLMParams, dict]] = None,
    show_progress: bool = False,
    log_dir: Optional[Union[str, Path]] = None,
    completion_adapter: Optional[CompletionAdapter] = None,
) -> ScribeOutput:
    """
    Transcribe a document to markdown, one vision-model request per page.

    Args:
        file_path: Local path or http(s) URL (PDF, PNG/JPG, or anything LibreOffice opens)
        api_key: Completions API key (default: OPENAI_API_KEY)
        concurrency: Max pages in flight in parallel mode
        maintain_format: Process pages in order, passing each page's markdown to the next
        model: Vision model (default: VISION_MODEL, else gpt-4o-mini)
        output_dir: If set, write {file_name}.md there
        pages_to_convert_as_images: -1 for all pages, a page number, or a list of page numbers
        temp_dir: Parent directory for the run's working directory
        cleanup: Remove the working directory afterwards (also on failure)
        llm_params: Sampling parameters (LLMParams or dict)
        show_progress: Progress bar and summary line on stderr
        log_dir: Directory for JSONL run logs (default: SCRIBE_LOG_DIR)
        completion_adapter: Replaces the default VisionCompletionAdapter

    Returns:
        ScribeOutput with pages in document order

    Raises:
        ConfigurationError: Invalid options, before any I/O
        ConversionError: Download or conversion failed
        AdapterError: A page failed in sequential mode, or every page failed in parallel mode
    """
    start_time = time.time()

    args = _validate_args(
        file_path=file_path,
        api_key=api_key if api_key is not None else Config.openai_api_key,
        concurrency=concurrency,
        maintain_format=maintain_format,
        model=model or Config.vision_model,
        output_dir=output_dir,
        pages_to_convert_as_images=pages_to_convert_as_images,
        temp_dir=temp_dir,
        cleanup=cleanup,
        llm_params=llm_params if llm_params is not None else LLMParams(),
        show_progress=show_progress,
        log_dir=log_dir if log_dir is not None else Config.log_dir,
    )
    selection = PageSelection(args.pages_to_convert_as_images)

    parent_dir = Path(args.temp_dir or tempfile.gettempdir())
    parent_dir.mkdir(parents=True, exist_ok=True)
    run_dir = Path(tempfile.mkdtemp(prefix="pagescribe-", dir=parent_dir))

    try:
        local_path, extension = download_file(args.file_path, run_dir)
        file_name = sanitize_file_name(local_path.name)

        with create_logger(file_name, "transcribe", log_dir=args.log_dir) as logger:
            images = _page_images(local_path, extension, run_dir, selection)
            units = build_work_units(images, selection)
            if not units:
                raise ConversionError(f"Conversion of {local_path.name} produced no page images")

            adapter = completion_adapter or VisionCompletionAdapter(LLMClient(api_key=args.api_key))
            model_config = ModelConfig(
                model=args.model,
                llm_params=args.llm_params,
                maintain_format=args.maintain_format,
            )
            state = RunState()

            logger.info(
                f"Transcribing {len(units)} pages of {local_path.name} with {args.model} "
                f"({'sequential' if args.maintain_format else f'parallel x{args.concurrency}'})"
            )

            with page_progress(file_name, total=len(units), enabled=args.show_progress) as advance:
                executor = _select_executor(args, adapter, model_config, logger, selection, advance)
                execution = executor.run(units, state)

            if execution.error is not None:
                if not execution.completed:
                    raise execution.error
                logger.warning(
                    f"Partial result: {len(execution.completed)}/{len(units)} pages after failure "
                    f"on index {execution.failed_index}"
                )

            output = aggregate(execution, state, selection, file_name, start_time)

            logger.info(
                f"Completed {len(output.pages)}/{len(units)} pages",
                tokens=output.input_tokens + output.output_tokens,
                duration_seconds=output.completion_time / 1000,
            )

        if args.output_dir is not None:
            write_markdown(output, args.output_dir)

        if args.show_progress:
            Console(stderr=True).print(format_run_summary(
                run_name=file_name,
                completed=len(output.pages),
                total=len(units),
                time_seconds=output.completion_time / 1000,
                input_tokens=output.input_tokens,
                output_tokens=output.output_tokens,
            ))

        return output

    finally:
        if args.cleanup:
            shutil.rmtree(run_dir, ignore_errors=True)


def _validate_args(**kwargs) -> ScribeArgs:
    if not kwargs.get("api_key"):
        raise ConfigurationError("Missing API key (pass api_key or set OPENAI_API_KEY)")
    if not kwargs.get("file_path"):
        raise ConfigurationError("Missing file path")

    if hasattr(kwargs["model"], "value"):
        kwargs["model"] = kwargs["model"].value

    try:
        return ScribeArgs(**kwargs)
    except ValidationError as e:
        raise ConfigurationError(f"Invalid options: {e}") from e


def _page_images(local_path: Path, extension: str, run_dir: Path, selection: PageSelection) -> List[Path]:
    if extension in IMAGE_EXTENSIONS:
        return [local_path]

    if extension == ".pdf":
        pdf_path = local_path
    else:
        pdf_path = convert_file_to_pdf(local_path, run_dir)

    return convert_pdf_to_images(pdf_path, run_dir / "pages", selection.page_numbers())


def _select_executor(
    args: ScribeArgs,
    adapter: CompletionAdapter,
    model_config: ModelConfig,
    logger: ScribeLogger,
    selection: PageSelection,
    on_page_complete,
) -> PageExecutor:
    if args.maintain_format:
        return SequentialExecutor(
            adapter,
            model_config,
            logger=logger,
            selection=selection,
            on_page_complete=on_page_complete,
        )

    return ParallelExecutor(
        adapter,
        model_config,
        logger=logger,
        selection=selection,
        on_page_complete=on_page_complete,
        concurrency=args.concurrency,
    )
