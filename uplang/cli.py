from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING, Optional

import typer
from rich.console import Console
from rich.progress import (
    BarColumn,
    Progress,
    SpinnerColumn,
    TaskID,
    TextColumn,
    TimeElapsedColumn,
)

from .parsing.parser import UPParseError
from .runner import ValidateProgress, run_dump, run_format, run_validate
from .utils.logging import LOG_DIR_ENV

if TYPE_CHECKING:
    from .loaders.directory import SourceFile

app = typer.Typer(
    name="uplang",
    help="Parse, inspect, and check UP configuration files.",
    add_completion=True,
)

console = Console()


class RichValidateProgress(ValidateProgress):
    """Render an animated progress bar while sources are parsed."""

    def __init__(self, console: Console) -> None:
        """Initialize the progress renderer.

        Args:
            console: Console used to display progress output.
        """
        self.console = console
        self._progress: Optional[Progress] = None
        self._task_id: Optional[TaskID] = None

    def start(self, total: int) -> None:
        """Start the animated progress bar.

        Args:
            total: Total number of sources to parse.
        """
        self._progress = Progress(
            SpinnerColumn(),
            TextColumn("[progress.description]{task.description}"),
            BarColumn(),
            TextColumn("{task.completed}/{task.total} files"),
            TimeElapsedColumn(),
            console=self.console,
            transient=False,
        )
        self._progress.start()
        self._task_id = self._progress.add_task("Parsing", total=total)

    def advance(self, source: "SourceFile") -> None:
        """Advance the bar for a parsed source.

        Args:
            source: Source that has just been parsed.
        """
        if not self._progress or self._task_id is None:
            return

        self._progress.update(self._task_id, description=f"Parsing {source.relative_path}")
        self._progress.advance(self._task_id)

    def finish(self) -> None:
        """Stop rendering the progress bar."""
        if not self._progress:
            return

        self._progress.stop()
        self._progress = None
        self._task_id = None


@app.command("validate")
def validate(
    target_path: Path = typer.Argument(
        ...,
        exists=True,
        file_okay=True,
        dir_okay=True,
        help="A .up file or a directory searched recursively for .up files.",
    ),
    strict: bool = typer.Option(
        False,
        "--strict",
        help="Exit with code 1 when warnings are present.",
    ),
    log_dir: Path | None = typer.Option(
        None,
        "--log-dir",
        envvar=LOG_DIR_ENV,
        file_okay=False,
        dir_okay=True,
        help="Directory for the warning log (defaults to ./logs).",
    ),
) -> None:
    """
    Parse every UP source and report errors and warnings.

    Checks (fails with code 1 on any parse error, and on warnings when
    ``--strict`` is set):
    - unterminated blocks, lists, and multiline fences
    - lines without a key
    - duplicate block keys, stray closers, non-numeric dedent annotations

    Examples:
        uplang validate config/
        uplang validate app.up --strict
    """
    progress = RichValidateProgress(console)
    exit_code = run_validate(target_path, strict=strict, progress=progress, log_dir=log_dir)
    if exit_code:
        raise typer.Exit(code=exit_code)


@app.command("dump")
def dump(
    target_path: Path = typer.Argument(
        ...,
        exists=True,
        file_okay=True,
        dir_okay=False,
        help="UP file to parse.",
    ),
    as_json: bool = typer.Option(
        False,
        "--json",
        help="Print the document as JSON instead of an outline.",
    ),
) -> None:
    """
    Print the parsed structure of a UP file.

    Example:
        uplang dump app.up
        uplang dump app.up --json
    """
    try:
        output = run_dump(target_path, as_json=as_json)
    except (UPParseError, UnicodeDecodeError) as exc:
        print(f"❌ {target_path}: {exc}")
        raise typer.Exit(code=1)
    print(output)


@app.command("fmt")
def fmt(
    target_path: Path = typer.Argument(
        ...,
        exists=True,
        file_okay=True,
        dir_okay=False,
        help="UP file to format.",
    ),
    write: bool = typer.Option(
        False,
        "--write",
        "-w",
        help="Rewrite the file in place instead of printing the result.",
    ),
) -> None:
    """
    Re-write a UP file in canonical form.

    Comments and blank lines are not preserved.

    Example:
        uplang fmt app.up
        uplang fmt app.up --write
    """
    try:
        output = run_format(target_path, write=write)
    except ValueError as exc:
        print(f"❌ {target_path}: {exc}")
        raise typer.Exit(code=1)
    if not write:
        print(output, end="")


def main() -> None:
    """Entry point for Python -m execution."""
    app()


if __name__ == "__main__":
    main()
