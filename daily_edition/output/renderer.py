"""
Document rendering for the compiler input.

Produces the three files the e-reader compiler consumes: the navigation
document, the single article-body document and the OPF package manifest.
Page skeletons are Jinja2 templates; article fragments come from
``markup.render_article_body`` and are inserted without escaping.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
import logging
from pathlib import Path
from typing import Sequence

from jinja2 import Environment, FileSystemLoader, select_autoescape
from markupsafe import Markup

from ..core.errors import MarkupStructureError, OutputWriteError
from ..core.types import Article, Edition
from .markup import anchor_id, render_article_body

logger = logging.getLogger("daily_edition.output")

TOC_FILE = "toc.html"
CONTENT_FILE = "content.html"

MARKUP_SKIP_ARTICLE = "skip_article"
MARKUP_ABORT_SOURCE = "abort_source"


@dataclass
class RenderedDocument:
    """Article-body document plus the indices of articles left out of it."""

    html: str
    skipped: list[int] = field(default_factory=list)


@dataclass
class EditionFiles:
    toc: Path
    content: Path
    manifest: Path
    skipped: list[int] = field(default_factory=list)


def _environment() -> Environment:
    return Environment(
        loader=FileSystemLoader(str(Path(__file__).parent / "templates")),
        autoescape=select_autoescape(["html", "opf"]),
        keep_trailing_newline=True,
    )


def render_toc(
    articles: Sequence[Article],
    content_href: str = CONTENT_FILE,
    skip: Sequence[int] = (),
    title: str = "Table of Contents",
) -> str:
    """Render the navigation document.

    One entry per titled article, in input order. The index in each anchor
    is the article's position in ``articles``, so it matches the content
    document even when ``skip`` drops some entries.

    Args:
        articles: Articles of the edition
        content_href: File name of the content document
        skip: Indices of articles missing from the content document
        title: Title of the navigation document
    """
    skipped = set(skip)
    entries = [
        {"id": anchor_id(article.title, index), "title": Markup(article.title)}
        for index, article in enumerate(articles)
        if article.title and index not in skipped
    ]
    template = _environment().get_template("toc.html")
    return template.render(title=title, entries=entries, content_href=content_href)


def render_document(
    articles: Sequence[Article],
    document_title: str,
    on_markup_error: str = MARKUP_SKIP_ARTICLE,
    source: str | None = None,
) -> RenderedDocument:
    """Render every article into one HTML document.

    Args:
        articles: Articles in display order
        document_title: Value of the document's ``<title>``
        on_markup_error: ``skip_article`` leaves out an article with a
            malformed sub-heading; ``abort_source`` re-raises the error
        source: Source name attached to errors and log records

    Raises:
        MarkupStructureError: With ``abort_source`` when an article is malformed.
    """
    fragments: list[Markup] = []
    skipped: list[int] = []
    for index, article in enumerate(articles):
        try:
            fragments.append(Markup(render_article_body(article, index)))
        except MarkupStructureError as exc:
            exc.source = source
            if on_markup_error != MARKUP_SKIP_ARTICLE:
                raise
            logger.warning(
                "Skipping article %d (%r): %s",
                index,
                article.title,
                exc.message,
                extra={"event": "article_skipped", "source": source, "index": index},
            )
            skipped.append(index)

    template = _environment().get_template("content.html")
    html = template.render(title=document_title, fragments=fragments)
    return RenderedDocument(html=html, skipped=skipped)


def render_manifest(
    document_title: str,
    today: date | None = None,
    *,
    language: str = "da-dk",
    creator: str = "daily-edition",
    subject: str = "Newspaper",
    toc_href: str = TOC_FILE,
    content_href: str = CONTENT_FILE,
) -> str:
    """Render the OPF 2.0 package manifest. All values are XML-escaped."""
    template = _environment().get_template("package.opf")
    return template.render(
        title=document_title,
        language=language,
        creator=creator,
        subject=subject,
        date=(today or date.today()).isoformat(),
        toc_href=toc_href,
        content_href=content_href,
    )


def manifest_filename(document_title: str) -> str:
    return f"{document_title}.opf"


def write_edition(
    edition: Edition,
    build_dir: Path,
    *,
    on_markup_error: str = MARKUP_SKIP_ARTICLE,
    language: str = "da-dk",
    creator: str = "daily-edition",
    subject: str = "Newspaper",
) -> EditionFiles:
    """Render an edition and write its documents into ``build_dir``.

    Existing files from a previous run are overwritten.

    Raises:
        MarkupStructureError: With ``abort_source`` on malformed content.
        OutputWriteError: If a file cannot be written.
    """
    title = edition.title
    source = edition.source.name
    document = render_document(edition.articles, title, on_markup_error, source=source)
    toc = render_toc(edition.articles, skip=document.skipped)
    manifest = render_manifest(
        title, edition.issued, language=language, creator=creator, subject=subject
    )

    files = EditionFiles(
        toc=build_dir / TOC_FILE,
        content=build_dir / CONTENT_FILE,
        manifest=build_dir / manifest_filename(title),
        skipped=document.skipped,
    )
    try:
        build_dir.mkdir(parents=True, exist_ok=True)
        files.toc.write_text(toc, encoding="utf-8")
        files.content.write_text(document.html, encoding="utf-8")
        files.manifest.write_text(manifest, encoding="utf-8")
    except OSError as exc:
        raise OutputWriteError(f"Cannot write documents to {build_dir}: {exc}", source=source) from exc
    return files
