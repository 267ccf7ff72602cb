"""Typer-based CLI for context-analyzer."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import List, Optional

import typer
from rich.console import Console
from rich.logging import RichHandler

from . import __version__
from .analyzer import ContextAnalyzer
from .config_manager import load_settings
from .errors import AmbiguousEntryError, NotFoundError, PathError
from .formatter import render, write_output

EXIT_OUTPUT_ERROR = 1
EXIT_PATH_ERROR = 2
EXIT_NOT_FOUND = 3
EXIT_AMBIGUOUS = 4

app = typer.Typer(
    help="Extract the call tree of a Rust function as a file-grouped context bundle.",
    no_args_is_help=True,
    rich_markup_mode="rich",
    add_completion=False,
)


def setup_logging(verbose: bool = False) -> None:
    level = logging.DEBUG if verbose else logging.WARNING
    logging.basicConfig(
        level=level,
        format="%(message)s",
        handlers=[RichHandler(console=Console(stderr=True), show_time=False, show_path=False)],
        force=True,
    )


def version_callback(value: bool):
    """Print version and exit."""
    if value:
        typer.echo(f"context-analyzer v{__version__}")
        raise typer.Exit()


def _report_not_found(exc: NotFoundError) -> None:
    if exc.suggestions:
        typer.echo(f"Function '{exc.name}' not found. Did you mean one of these?", err=True)
        for symbol in exc.suggestions:
            typer.echo(f"  {symbol}", err=True)
    else:
        typer.echo(f"Function '{exc.name}' not found in project", err=True)


def _report_ambiguous(exc: AmbiguousEntryError) -> None:
    typer.echo(f"Multiple implementations of '{exc.name}' found:", err=True)
    for i, (symbol, module) in enumerate(zip(exc.candidates, exc.module_paths), 1):
        typer.echo(f"  {i}. {symbol} (in {module or '<root>'})", err=True)
    typer.echo("Please specify a preferred module with the third argument", err=True)


@app.command()
def main(
    project_root: Path = typer.Argument(..., help="Path to the Rust project root directory."),
    function_name: str = typer.Argument(..., help="Name of the function to analyze."),
    preferred_module: Optional[str] = typer.Argument(
        None, help="Module name (or trailing module path) to disambiguate functions."
    ),
    output_file: Optional[Path] = typer.Argument(None, help="Output file path (defaults to stdout)."),
    ext: Optional[List[str]] = typer.Option(
        None, "--ext", "-e", help="Source file extension to scan (repeatable, default .rs)."
    ),
    exclude: Optional[List[str]] = typer.Option(
        None, "--exclude", "-x", help="Additional directory name to skip (repeatable)."
    ),
    config_path: Optional[Path] = typer.Option(
        None, "--config", help="TOML config file with an [analyzer] table."
    ),
    verbose: bool = typer.Option(False, "--verbose", "-V", help="Show debug logging."),
    version: Optional[bool] = typer.Option(
        None,
        "--version",
        "-v",
        help="Show version and exit.",
        callback=version_callback,
        is_eager=True,
    ),
):
    """Print every function reachable from FUNCTION_NAME, grouped by file.

    Examples:
      context-analyzer ./my-project process_queue transform_writer output.txt
      context-analyzer ./my-project main
    """
    setup_logging(verbose)

    try:
        settings = load_settings(project_root, config_path, extensions=ext, exclude_dirs=exclude)
        analyzer = ContextAnalyzer(project_root, settings)
    except PathError as exc:
        typer.echo(f"Error: {exc}", err=True)
        raise typer.Exit(code=EXIT_PATH_ERROR)

    stats = analyzer.load()
    typer.echo(f"Found {stats['files']} source files in project", err=True)
    if stats["parse_errors"]:
        typer.echo(f"Skipped {stats['parse_errors']} file(s) with unbalanced delimiters", err=True)

    try:
        result = analyzer.traverse(function_name, preferred_module)
    except NotFoundError as exc:
        _report_not_found(exc)
        raise typer.Exit(code=EXIT_NOT_FOUND)
    except AmbiguousEntryError as exc:
        _report_ambiguous(exc)
        raise typer.Exit(code=EXIT_AMBIGUOUS)

    typer.echo(f"Selected function: {result.entry}", err=True)
    typer.echo(f"Collected {len(result)} function(s)", err=True)
    output = render(result)

    if output_file is not None:
        try:
            write_output(output, output_file)
        except OSError as exc:
            typer.echo(f"Error writing output: {exc}", err=True)
            raise typer.Exit(code=EXIT_OUTPUT_ERROR)
        typer.echo(f"Output written to: {output_file}", err=True)
    else:
        typer.echo(output, nl=False)


if __name__ == "__main__":
    app()
