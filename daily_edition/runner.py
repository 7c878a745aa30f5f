"""
Batch orchestration for the edition pipeline.

This module coordinates the entire workflow:
1. Acquire the reader databases into the work directory
2. For each source, in order: select today's edition, write the
   navigation, content and manifest documents, compile them
3. Move each compiled artifact into the output directory

Sources are processed strictly one after another. A failure in one source
is recorded and the batch moves on to the next.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
import logging
from pathlib import Path
import shutil
import tempfile
from typing import Sequence

from rich.console import Console
from rich.markup import escape
from rich.table import Table

from .acquire import Acquirer, build_acquirer
from .compiler import Compiler, Kindlegen, relocate
from .config import AppConfig
from .core.errors import AcquisitionError, EditionError, SourceUnavailable
from .input.edition import database_path, load_edition
from .logging_utils import log_event, log_source_error, setup_logging
from .output.renderer import EditionFiles, write_edition
from .sources import EditionSource, resolve_sources

STATUS_OK = "ok"
STATUS_SKIPPED = "skipped"
STATUS_FAILED = "failed"


@dataclass
class SourceOutcome:
    """Result of processing one source.

    Attributes:
        source: Source name
        status: "ok", "skipped" (no database) or "failed"
        stage: Stage reached; for failures the stage that failed
        message: Error or skip reason
        artifact: Final artifact in the output directory
        article_count: Number of articles in the selected edition
        skipped_articles: Indices of articles left out for malformed markup
    """

    source: str
    status: str
    stage: str = ""
    message: str = ""
    artifact: Path | None = None
    article_count: int = 0
    skipped_articles: list[int] = field(default_factory=list)


@dataclass
class BatchReport:
    outcomes: list[SourceOutcome] = field(default_factory=list)

    def by_status(self, status: str) -> list[SourceOutcome]:
        return [o for o in self.outcomes if o.status == status]

    @property
    def artifacts(self) -> list[Path]:
        return [o.artifact for o in self.outcomes if o.artifact is not None]

    @property
    def exit_code(self) -> int:
        """0 when no source failed; skipped sources do not count as failures."""
        return 1 if self.by_status(STATUS_FAILED) else 0


def process_source(
    source: EditionSource,
    cfg: AppConfig,
    *,
    work_dir: Path,
    output_dir: Path,
    compiler: Compiler | None,
    today: date | None = None,
    logger: logging.Logger | None = None,
) -> SourceOutcome:
    """Run the full pipeline for one source.

    Raises:
        EditionError: Any per-source failure, with ``stage`` set.
        OSError: If relocating the artifact fails.
    """
    edition = load_edition(database_path(work_dir, source), source, today)
    log_event(
        logger,
        "Edition selected",
        event="edition_selected",
        source=source.name,
        prefix=edition.prefix,
        articles=len(edition.articles),
    )

    files = write_edition(
        edition,
        work_dir / "build" / source.app_id,
        on_markup_error=cfg.markup.on_error,
        language=cfg.manifest.language,
        creator=cfg.manifest.creator,
        subject=cfg.manifest.subject,
    )

    if compiler is None:
        artifact = _export_documents(files, output_dir / edition.title)
    else:
        try:
            built = compiler.compile(files.manifest)
        except EditionError as exc:
            exc.source = source.name
            raise
        artifact = relocate(built, output_dir)

    return SourceOutcome(
        source=source.name,
        status=STATUS_OK,
        stage="compile" if compiler is not None else "render",
        artifact=artifact,
        article_count=len(edition.articles),
        skipped_articles=files.skipped,
    )


def _export_documents(files: EditionFiles, target_dir: Path) -> Path:
    target_dir.mkdir(parents=True, exist_ok=True)
    for path in (files.toc, files.content, files.manifest):
        shutil.copy2(path, target_dir / path.name)
    return target_dir / files.manifest.name


def run_batch(
    cfg: AppConfig,
    sources: Sequence[EditionSource],
    *,
    work_dir: Path,
    output_dir: Path,
    compiler: Compiler | None,
    today: date | None = None,
    logger: logging.Logger | None = None,
) -> BatchReport:
    """Process every source in order, isolating per-source failures."""
    logger = logger or logging.getLogger("daily_edition")
    report = BatchReport()
    for source in sources:
        try:
            outcome = process_source(
                source,
                cfg,
                work_dir=work_dir,
                output_dir=output_dir,
                compiler=compiler,
                today=today,
                logger=logger,
            )
        except SourceUnavailable as exc:
            outcome = SourceOutcome(
                source=source.name, status=STATUS_SKIPPED, stage=exc.stage, message=exc.message
            )
            logger.info(
                "Skipping: %s", exc.message, extra={"event": "source_skipped", "source": source.name}
            )
        except EditionError as exc:
            outcome = SourceOutcome(
                source=source.name, status=STATUS_FAILED, stage=exc.stage, message=exc.message
            )
            exc.source = source.name
            log_source_error(logger, exc)
        except OSError as exc:
            outcome = SourceOutcome(
                source=source.name, status=STATUS_FAILED, stage="output", message=str(exc)
            )
            log_source_error(logger, EditionError(str(exc), source=source.name, stage="output"))
        else:
            log_event(
                logger,
                "Source complete",
                event="source_complete",
                source=source.name,
                artifact=str(outcome.artifact),
                articles=outcome.article_count,
            )
        report.outcomes.append(outcome)
    return report


def run_pipeline(
    cfg: AppConfig,
    *,
    work_dir: Path | None = None,
    output_dir: Path | None = None,
    acquirer: Acquirer | None = None,
    compiler: Compiler | None = None,
    today: date | None = None,
) -> BatchReport:
    """Acquire the databases and run the batch.

    The work directory defaults to ``cfg.output.work_dir`` and otherwise to
    a fresh temporary directory, which is kept so the build files can be
    inspected after a failure.
    """
    sources = resolve_sources(cfg.sources)
    if work_dir is None:
        work_dir = (
            Path(cfg.output.work_dir)
            if cfg.output.work_dir
            else Path(tempfile.mkdtemp(prefix="daily-edition-"))
        )
    work_dir.mkdir(parents=True, exist_ok=True)
    output_dir = output_dir or Path(cfg.output.output_dir)
    logger = setup_logging(cfg.logging, work_dir)

    if compiler is None and cfg.compiler.enabled:
        compiler = Kindlegen(cfg.compiler.command, cfg.compiler.extension)
    acquirer = acquirer or build_acquirer(cfg.acquire)

    log_event(
        logger,
        "Pipeline start",
        event="pipeline_start",
        work_dir=str(work_dir),
        output=str(output_dir),
        sources=[s.name for s in sources],
    )
    try:
        acquirer.acquire(sources, work_dir)
    except AcquisitionError as exc:
        log_source_error(logger, exc, event="acquire_failed")

    report = run_batch(
        cfg,
        sources,
        work_dir=work_dir,
        output_dir=output_dir,
        compiler=compiler,
        today=today,
        logger=logger,
    )
    log_event(
        logger,
        "Pipeline complete",
        event="pipeline_complete",
        ok=len(report.by_status(STATUS_OK)),
        skipped=len(report.by_status(STATUS_SKIPPED)),
        failed=len(report.by_status(STATUS_FAILED)),
    )
    return report


def render_report(report: BatchReport, console: Console) -> None:
    """Print a per-source summary table."""
    table = Table(title="Editions")
    table.add_column("Source")
    table.add_column("Status")
    table.add_column("Articles", justify="right")
    table.add_column("Detail")
    styles = {STATUS_OK: "green", STATUS_SKIPPED: "yellow", STATUS_FAILED: "red"}
    for outcome in report.outcomes:
        detail = str(outcome.artifact) if outcome.artifact else f"{outcome.stage}: {outcome.message}"
        table.add_row(
            outcome.source,
            f"[{styles[outcome.status]}]{outcome.status}[/]",
            str(outcome.article_count),
            escape(detail),
        )
    console.print(table)
