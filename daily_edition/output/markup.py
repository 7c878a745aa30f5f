"""
Article body markup.

Article content arrives as newline-delimited HTML fragments. A line opening
with ``<div class='h3'>`` is a sub-heading: it ends the current section and
starts a new one headed by the text up to the first ``</div>``. Everything
else is passed through untouched.
"""

from __future__ import annotations

from typing import Iterator

from markupsafe import escape

from ..core.errors import MarkupStructureError
from ..core.types import Article, SectionBlock

SUBHEADING_MARKER = "<div class='h3'>"
SUBHEADING_CLOSE = "</div>"


def anchor_id(title: str, index: int) -> str:
    """Anchor name shared by the navigation and content documents.

    The positional index keeps articles with identical titles apart.
    """
    return f"{title.replace(' ', '_')}_{index}"


def _lines(content: str) -> Iterator[str]:
    # Split on "\n" only and drop a trailing "\r"; other line separators
    # are ordinary content.
    for line in content.split("\n"):
        yield line[:-1] if line.endswith("\r") else line


def iter_section_blocks(content: str) -> Iterator[SectionBlock]:
    """Yield the section blocks of an article's content.

    The first block has no heading and may be empty. Each marker line starts
    another block.

    Raises:
        MarkupStructureError: If a marker line has no ``</div>``.
    """
    heading: str | None = None
    parts: list[str] = []
    for line in _lines(content):
        if not line.startswith(SUBHEADING_MARKER):
            parts.append(line)
            continue

        end = line.find(SUBHEADING_CLOSE)
        if end < 0:
            raise MarkupStructureError(
                "Sub-heading marker without closing </div>", line=line
            )
        yield SectionBlock(heading=heading, body="".join(parts))
        heading = line[len(SUBHEADING_MARKER):end]
        parts = [line[end + len(SUBHEADING_CLOSE):]]

    yield SectionBlock(heading=heading, body="".join(parts))


def render_sections(content: str) -> str:
    sections = []
    for block in iter_section_blocks(content):
        heading = f"<h3>{block.heading}</h3>" if block.heading is not None else ""
        sections.append(f"<section>{heading}{block.body}</section>")
    return "".join(sections)


def render_article_body(article: Article, index: int) -> str:
    """Render one article as a self-contained ``<article>`` fragment.

    Title, blurb, byline and content are trusted markup and emitted as-is.

    Raises:
        MarkupStructureError: If the content has a malformed sub-heading.
    """
    sections = render_sections(article.content)
    return (
        "<article>"
        "<header><div>"
        f'<a name="{escape(anchor_id(article.title, index))}"><h1>{article.title}</h1></a>'
        f"<h2>{article.blurb}</h2>"
        "</div></header>"
        f"<address>{article.byline}</address>"
        f"{sections}"
        "</article>"
    )
