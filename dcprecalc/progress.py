"""Progress indication using the Rich library.

Interactive terminals get Rich progress bars; anywhere else (CI, redirected
output, log files) the same events are written through the logger instead.
"""

from __future__ import annotations

from contextlib import contextmanager
from typing import TYPE_CHECKING, Callable, Iterator, List, Optional

from rich.console import Console
from rich.progress import (
    BarColumn,
    DownloadColumn,
    Progress,
    SpinnerColumn,
    TaskID,
    TextColumn,
    TimeElapsedColumn,
    TransferSpeedColumn,
)

if TYPE_CHECKING:
    from logging import Logger

AdvanceBytesFunc = Callable[[int], None]
AdvanceStageFunc = Callable[..., None]

LOG_EVERY_PERCENT = 10

# The running stage display, if any. Only one Rich live display may be active at a time,
# so download bars are added to it as extra tasks.
_active_stage_progress: Optional[Progress] = None


def _byte_counter(downloaded: int, total: Optional[int]) -> str:
    if total:
        return f"{downloaded / 1024 / 1024:.1f}/{total / 1024 / 1024:.1f} MB"
    return f"{downloaded / 1024 / 1024:.1f} MB"


def is_interactive_terminal() -> bool:
    """Detect if running in an interactive terminal."""
    return Console().is_terminal


@contextmanager
def download_progress(
    description: str,
    total: Optional[int] = None,
    logger: Optional["Logger"] = None,
    transient: bool = True,
) -> Iterator[AdvanceBytesFunc]:
    """Byte-count progress for a download.

    Args:
        description: Label shown next to the bar.
        total: Expected size in bytes, or None when the server sent no length.
        logger: Used for percentage messages in non-interactive mode.
        transient: Clear the bar when done.

    Yields:
        advance(num_bytes) to call after each chunk.
    """
    if not is_interactive_terminal():
        downloaded = 0
        next_report = LOG_EVERY_PERCENT

        def advance_logged(num_bytes: int) -> None:
            nonlocal downloaded, next_report
            downloaded += num_bytes
            if not total or logger is None:
                return
            percent = downloaded * 100 / total
            if percent >= next_report:
                logger.verbose(f"Downloaded: {percent:.1f}% ({downloaded / 1024 / 1024:.2f} MB)")
                while next_report <= percent:
                    next_report += LOG_EVERY_PERCENT

        yield advance_logged
        return

    if _active_stage_progress is not None:
        shared = _active_stage_progress
        downloaded = 0
        shared_task: TaskID = shared.add_task(description, total=total, counter=_byte_counter(0, total))

        def advance_shared(num_bytes: int) -> None:
            nonlocal downloaded
            downloaded += num_bytes
            shared.update(shared_task, advance=num_bytes, counter=_byte_counter(downloaded, total))

        try:
            yield advance_shared
        finally:
            shared.remove_task(shared_task)
        return

    progress = Progress(
        SpinnerColumn(),
        TextColumn("[progress.description]{task.description}"),
        BarColumn(),
        DownloadColumn(),
        TransferSpeedColumn(),
        TimeElapsedColumn(),
        transient=transient,
    )
    try:
        progress.start()
        task_id: TaskID = progress.add_task(description, total=total)

        def advance_bar(num_bytes: int) -> None:
            progress.update(task_id, advance=num_bytes)

        yield advance_bar
    finally:
        progress.stop()


@contextmanager
def create_stage_progress(
    stages: List[str],
    logger: Optional["Logger"] = None,
    transient: bool = True,
) -> Iterator[AdvanceStageFunc]:
    """Progress through a fixed sequence of named stages (the pipeline tasks).

    The first stage is announced on entry. Each call to the yielded
    ``advance_stage(stage_name=None)`` moves to the next stage; a name
    overrides the default description.

    Example:
        >>> with create_stage_progress(["Phase 1", "Phase 2"]) as advance_stage:
        ...     run_phase_1()
        ...     advance_stage()
        ...     run_phase_2()
    """
    if not stages:
        def noop_advance(stage_name: Optional[str] = None) -> None:
            pass

        yield noop_advance
        return

    current_stage_idx = 0

    if not is_interactive_terminal():
        if logger is not None:
            logger.status(f"Stage 1/{len(stages)}: {stages[0]}...")

        def advance_stage_logged(stage_name: Optional[str] = None) -> None:
            nonlocal current_stage_idx
            current_stage_idx += 1
            if current_stage_idx < len(stages) and logger is not None:
                desc = stage_name or stages[current_stage_idx]
                logger.status(f"Stage {current_stage_idx + 1}/{len(stages)}: {desc}...")

        yield advance_stage_logged
        return

    progress = Progress(
        SpinnerColumn(),
        TextColumn("[progress.description]{task.description}"),
        BarColumn(),
        TextColumn("{task.fields[counter]}"),
        TimeElapsedColumn(),
        transient=transient,
    )
    global _active_stage_progress
    try:
        progress.start()
        _active_stage_progress = progress
        task_id: TaskID = progress.add_task(stages[0], total=len(stages), completed=0,
                                            counter=f"0/{len(stages)}")

        def advance_stage_bar(stage_name: Optional[str] = None) -> None:
            nonlocal current_stage_idx
            current_stage_idx += 1
            desc = stage_name or (stages[current_stage_idx] if current_stage_idx < len(stages) else "Done")
            progress.update(task_id, advance=1, description=desc,
                            counter=f"{min(current_stage_idx, len(stages))}/{len(stages)}")

        yield advance_stage_bar
    finally:
        _active_stage_progress = None
        progress.stop()


__all__ = [
    "is_interactive_terminal",
    "download_progress",
    "create_stage_progress",
]
