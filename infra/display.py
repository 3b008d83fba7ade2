from contextlib import contextmanager
from typing import Callable, Iterator

from rich.console import Console
from rich.progress import Progress, BarColumn, TextColumn, TaskProgressColumn, TimeRemainingColumn
from rich.text import Text


def format_token_count(count: int, width: int = 0) -> str:
    """
    Format token count with optional fixed width padding.

    Args:
        count: Token count to format
        width: Minimum width for right-aligned padding (0 = no padding)
    """
    if count >= 1_000_000:
        result = f"{count / 1_000_000:.1f}M"
    elif count >= 1_000:
        result = f"{count / 1_000:.1f}k"
    else:
        result = str(count)

    if width > 0:
        return result.rjust(width)
    return result


def format_token_string(input_tokens: int, output_tokens: int) -> str:
    return f"({format_token_count(input_tokens)})in->({format_token_count(output_tokens)})out"


def format_run_summary(
    run_name: str,
    completed: int,
    total: int,
    time_seconds: float,
    input_tokens: int,
    output_tokens: int,
    unit: str = "pages",
    description_width: int = 45
) -> Text:
    text = Text()
    if completed == total:
        text.append("✅ ", style="green")
    else:
        text.append("⚠️  ", style="yellow")

    description = f"{run_name}: {completed}/{total} {unit}"
    text.append(f"{description:<{description_width}}", style="")

    text.append(f" ({time_seconds:4.1f}s)", style="dim")

    token_str = format_token_string(input_tokens, output_tokens)
    text.append(f" {token_str:>22}", style="cyan")

    return text


@contextmanager
def page_progress(description: str, total: int, enabled: bool = True) -> Iterator[Callable[[], None]]:
    """
    Transient progress bar for page completion.

    Yields an ``advance()`` callable; it is a no-op when ``enabled`` is False.
    Safe to call from worker threads.
    """
    if not enabled:
        yield lambda: None
        return

    progress = Progress(
        TextColumn("   {task.description}"),
        BarColumn(bar_width=40),
        TaskProgressColumn(),
        TextColumn("•"),
        TimeRemainingColumn(),
        transient=True,
        console=Console(stderr=True),
    )

    with progress:
        task_id = progress.add_task(description, total=total)
        yield lambda: progress.advance(task_id)
