"""LessonSync command-line interface main module."""
import asyncio
import logging
from pathlib import Path
from typing import Optional

import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table
from typing_extensions import Annotated

from lessonsync import __version__
from lessonsync.consumers.frame_schedule import build_frame_schedule, find_gaps, total_frames
from lessonsync.core.config import AppConfig, load_config
from lessonsync.core.exceptions import LessonAbortedError, LessonSyncError
from lessonsync.core.models.enums import PipelineStatus
from lessonsync.core.models.events import PipelineEvent
from lessonsync.core.models.layout import LessonLayout
from lessonsync.core.services.artifacts import read_lesson_timeline
from lessonsync.infrastructure.factories import create_lesson_pipeline

logger = logging.getLogger(__name__)

NOISY_LOGGERS = ("edge_tts", "pydub", "httpx", "httpcore", "asyncio")
CONSOLE_HANDLER_NAME = "lessonsync-console"
FILE_HANDLER_NAME = "lessonsync-file"

# Create console instance for rich output
console = Console()

# Create Typer app
app = typer.Typer(
    name="lessonsync",
    help="LessonSync - Synthesize lesson audio and compile synchronized timelines",
    add_completion=False,
    no_args_is_help=True,
)


def configure_logging(config: AppConfig, verbose: bool = False, log_file: Optional[Path] = None) -> None:
    """Install the console and optional file handlers on the root logger.

    Args:
        config: Application configuration providing level and format
        verbose: If True, log at DEBUG regardless of the configured level
        log_file: Optional path of a log file receiving DEBUG output
    """
    root_logger = logging.getLogger()
    for handler in root_logger.handlers[:]:
        if handler.get_name() in (CONSOLE_HANDLER_NAME, FILE_HANDLER_NAME):
            root_logger.removeHandler(handler)
            handler.close()

    level = logging.DEBUG if verbose else getattr(logging, config.log_level)
    root_logger.setLevel(logging.DEBUG if log_file else level)

    console_handler = RichHandler(console=console, rich_tracebacks=True, show_path=verbose)
    console_handler.set_name(CONSOLE_HANDLER_NAME)
    console_handler.setLevel(level)
    console_handler.setFormatter(logging.Formatter("%(message)s", datefmt="[%X]"))
    root_logger.addHandler(console_handler)

    if log_file:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(str(log_file), mode='w', encoding='utf-8')
        file_handler.set_name(FILE_HANDLER_NAME)
        file_handler.setLevel(logging.DEBUG)
        file_handler.setFormatter(logging.Formatter(config.log_format, datefmt=config.log_dateformat))
        root_logger.addHandler(file_handler)
        logger.debug("Logging to file: %s", log_file)

    # Disable verbose logging from dependencies
    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)


def print_error(message: str) -> None:
    """Print an error message to the console."""
    console.print(f"[bold red]Error:[/bold red] {escape(message)}")


def print_success(message: str) -> None:
    """Print a success message to the console."""
    console.print(f"[bold green]✓[/bold green] {escape(message)}")


def print_warning(message: str) -> None:
    """Print a warning message to the console."""
    console.print(f"[bold yellow]![/bold yellow] {escape(message)}")


def print_info(message: str) -> None:
    """Print an informational message to the console."""
    console.print(f"[bold blue]i[/bold blue] {escape(message)}")


def print_event(event: PipelineEvent) -> None:
    """Print one pipeline event."""
    stage = event.stage.value
    if event.status == PipelineStatus.GENERATING:
        position = f"{event.index + 1}/{event.total}" if event.index is not None else ""
        print_info(f"[{stage}] {position} generating '{event.segment_id}'")
    elif event.status == PipelineStatus.COMPLETED:
        subject = f"'{event.segment_id}'" if event.segment_id else "lesson"
        duration = f" ({event.duration:.2f}s)" if event.duration is not None else ""
        print_success(f"[{stage}] {subject} completed{duration}")
    elif event.status == PipelineStatus.SKIPPED:
        print_warning(f"[{stage}] skipped: {event.message or 'already done'}")
    elif event.status == PipelineStatus.FAILED:
        subject = f"'{event.segment_id}'" if event.segment_id else "lesson"
        print_error(f"[{stage}] {subject} failed with {event.error_kind}: {event.message}")


def _load_config(config_file: Optional[Path], verbose: bool, log_file: Optional[Path]) -> AppConfig:
    try:
        config = load_config(config_file)
    except LessonSyncError as e:
        print_error(e.message)
        raise typer.Exit(1)
    configure_logging(config, verbose=verbose, log_file=log_file)
    return config


async def _process_lesson(
    config: AppConfig,
    layout: LessonLayout,
    synthesize: bool,
    compile: bool,
) -> None:
    pipeline = create_lesson_pipeline(config, storage_root=layout.root)
    async for event in pipeline.stream(layout, synthesize=synthesize, compile=compile):
        print_event(event)


def _run_lesson(
    lesson_dir: Path,
    config_file: Optional[Path],
    verbose: bool,
    log_file: Optional[Path],
    root: Optional[Path],
    synthesize: bool,
    compile: bool,
) -> None:
    config = _load_config(config_file, verbose, log_file)
    layout = LessonLayout.from_lesson_dir(lesson_dir, root=root)
    console.print(Panel.fit(
        f"[bold]{escape(layout.relative_dir)}[/bold]\n{escape(str(layout.lesson_dir))}",
        title="Lesson",
    ))

    try:
        asyncio.run(_process_lesson(config, layout, synthesize=synthesize, compile=compile))
    except LessonAbortedError as e:
        logger.error("Lesson %s aborted: %s", layout.relative_dir, e)
        print_error(
            f"Lesson aborted: segment '{e.segment_id}' failed with {e.error_kind}: "
            f"{getattr(e.cause, 'message', e.cause)}"
        )
        raise typer.Exit(1)
    except LessonSyncError as e:
        logger.error("Lesson %s failed: %s", layout.relative_dir, e)
        print_error(f"{type(e).__name__}: {e.message}")
        raise typer.Exit(1)


LessonDirArgument = Annotated[
    Path,
    typer.Argument(
        help="Lesson directory (videos/{video_id}/lesson_{n} or videos/{video_id})",
        exists=True,
        file_okay=False,
        dir_okay=True,
        resolve_path=True,
    ),
]
ConfigOption = Annotated[
    Optional[Path],
    typer.Option(
        "--config",
        "-c",
        help="Path to configuration file",
        exists=True,
        dir_okay=False,
        readable=True,
    ),
]
VerboseOption = Annotated[
    bool,
    typer.Option("--verbose", "-v", help="Enable verbose output"),
]
LogFileOption = Annotated[
    Optional[Path],
    typer.Option("--log-file", help="Path to log file for debug output"),
]
RootOption = Annotated[
    Optional[Path],
    typer.Option(
        "--root",
        help="Storage root (default: the directory containing the video directory)",
        file_okay=False,
    ),
]


@app.command()
def build(
    lesson_dir: LessonDirArgument,
    config_file: ConfigOption = None,
    verbose: VerboseOption = False,
    log_file: LogFileOption = None,
    root: RootOption = None,
) -> None:
    """Synthesize segment audio and compile the lesson timeline."""
    _run_lesson(lesson_dir, config_file, verbose, log_file, root, synthesize=True, compile=True)


@app.command()
def synthesize(
    lesson_dir: LessonDirArgument,
    config_file: ConfigOption = None,
    verbose: VerboseOption = False,
    log_file: LogFileOption = None,
    root: RootOption = None,
) -> None:
    """Synthesize segment audio and write the timing manifest."""
    _run_lesson(lesson_dir, config_file, verbose, log_file, root, synthesize=True, compile=False)


@app.command()
def compile(
    lesson_dir: LessonDirArgument,
    config_file: ConfigOption = None,
    verbose: VerboseOption = False,
    log_file: LogFileOption = None,
    root: RootOption = None,
) -> None:
    """Compile the lesson timeline from an existing timing manifest."""
    _run_lesson(lesson_dir, config_file, verbose, log_file, root, synthesize=False, compile=True)


@app.command()
def frames(
    timeline_file: Annotated[
        Path,
        typer.Argument(
            help="Path to final_synchronized_lesson.json",
            exists=True,
            dir_okay=False,
            readable=True,
        ),
    ],
    fps: Annotated[
        Optional[int],
        typer.Option("--fps", help="Frames per second (default: timeline.fps from config)", min=1),
    ] = None,
    config_file: ConfigOption = None,
    verbose: VerboseOption = False,
    log_file: LogFileOption = None,
) -> None:
    """Show where each timeline entry lands on the renderer's frames."""
    config = _load_config(config_file, verbose, log_file)
    fps = fps or config.timeline.fps

    try:
        timeline = read_lesson_timeline(timeline_file).to_timeline()
    except LessonSyncError as e:
        print_error(e.message)
        raise typer.Exit(1)

    schedule = build_frame_schedule(timeline, fps=fps)

    table = Table(
        title=f"Frame schedule @ {fps} fps",
        show_header=True,
        header_style="bold magenta",
        box=None,
    )
    table.add_column("#", justify="right")
    table.add_column("Role", style="cyan")
    table.add_column("Start", justify="right", style="green")
    table.add_column("Frames", justify="right")
    table.add_column("End", justify="right", style="green")
    table.add_column("Audio", style="")
    for placement in schedule:
        table.add_row(
            str(placement.index),
            placement.screen_role.value,
            str(placement.start_frame),
            str(placement.duration_frames),
            str(placement.end_frame),
            escape(placement.audio_ref),
        )
    console.print(table)
    print_info(f"{len(schedule)} scenes, {total_frames(timeline, fps)} frames ({timeline.total_duration:.3f}s)")

    gaps = find_gaps(schedule)
    if gaps:
        for gap in gaps:
            print_warning(f"Frames {gap.start_frame}-{gap.end_frame - 1} are not covered by any scene")
        raise typer.Exit(1)
    print_success("No frame gaps")


def version_callback(value: bool) -> None:
    """Print the version and exit."""
    if value:
        typer.echo(f"LessonSync v{__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: Annotated[
        bool,
        typer.Option(
            "--version",
            help="Show version and exit.",
            callback=version_callback,
            is_eager=True,
        ),
    ] = False,
) -> None:
    """LessonSync - Synthesize lesson audio and compile synchronized timelines."""


if __name__ == "__main__":
    app()
