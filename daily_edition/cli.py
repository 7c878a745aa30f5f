"""
Command-line interface for Daily Edition.

Uses Typer to provide a CLI with options for the main configuration
settings. The process exits non-zero when any source failed.
"""

from __future__ import annotations

from pathlib import Path

import typer
from rich.console import Console

from .config import load_config
from .runner import STATUS_FAILED, render_report, run_pipeline
from .sources import SOURCES, get_source

app = typer.Typer(add_completion=False)
console = Console()
err_console = Console(stderr=True)


@app.command()
def run(
    config: Path | None = typer.Option(None, "--config", "-c", exists=True, readable=True),
    output: Path | None = typer.Option(None, "--output", "-o", help="Artifact directory."),
    work_dir: Path | None = typer.Option(
        None, "--work-dir", help="Working directory (defaults to a temporary one)."
    ),
    source: list[str] | None = typer.Option(
        None, "--source", "-s", help="Source to process; repeat for several. Default: all."
    ),
    acquire: str | None = typer.Option(
        None, "--acquire", help="Acquisition method: adb, scp or none."
    ),
    compile_: bool | None = typer.Option(
        None, "--compile/--no-compile", help="Run the e-reader compiler."
    ),
    log_level: str | None = typer.Option(None, "--log-level", help="Logging level."),
    log_format: str | None = typer.Option(
        None, "--log-format", help="Log file format: jsonl or plain."
    ),
    log_file: bool | None = typer.Option(
        None, "--log-file/--no-log-file", help="Enable or disable file logging."
    ),
):
    """Build today's edition of every configured newspaper.

    Args:
        config: Optional path to YAML config file
        output: Directory receiving the compiled editions
        work_dir: Directory for acquired databases and build files
        source: Source names to process
        acquire: Acquisition method override
        compile_: Enable/disable the external compiler
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR)
        log_format: Log file format (jsonl, plain)
        log_file: Enable/disable file logging
    """
    cfg = load_config(str(config) if config else None)

    # Override with CLI options
    if source:
        try:
            cfg.sources = [get_source(name).name for name in source]
        except KeyError as exc:
            raise typer.BadParameter(str(exc.args[0]), param_hint="--source") from exc
    if acquire:
        cfg.acquire.method = acquire
    if compile_ is not None:
        cfg.compiler.enabled = compile_
    if output is not None:
        cfg.output.output_dir = str(output)
    if log_level:
        cfg.logging.level = log_level
    if log_format:
        cfg.logging.format = log_format
    if log_file is not None:
        cfg.logging.file = log_file

    try:
        report = run_pipeline(cfg, work_dir=work_dir)
    except ValueError as exc:
        err_console.print(f"[red]Configuration error:[/] {exc}")
        raise typer.Exit(code=2) from exc

    render_report(report, console)
    for outcome in report.by_status(STATUS_FAILED):
        err_console.print(f"{outcome.source} failed during {outcome.stage}: {outcome.message}", markup=False)
    raise typer.Exit(code=report.exit_code)


@app.command("sources")
def list_sources():
    """List the built-in newspaper sources."""
    for item in SOURCES:
        console.print(f"{item.name}\t{item.app_id}", markup=False)


if __name__ == "__main__":
    app()
