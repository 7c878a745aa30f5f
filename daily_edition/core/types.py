"""
Core data types for the edition pipeline.

- Article: one row of the source's article table
- SectionBlock: a run of article content between sub-heading markers
- Edition: the articles selected for one source on one day
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date

from ..sources import EditionSource


@dataclass(frozen=True)
class Article:
    """One publication unit read from the source database.

    Attributes:
        title: Display title. An empty title marks filler that is rendered
            in the body but left out of navigation.
        byline: Author attribution, may be empty
        blurb: Short summary rendered as a subheading
        content: Raw body markup, newline-delimited
    """

    title: str
    byline: str = ""
    blurb: str = ""
    content: str = ""

    @classmethod
    def from_row(cls, row) -> "Article":
        """Build an Article from a query row, reading NULL columns as ""."""
        return cls(
            title=row["title"] or "",
            byline=row["byline"] or "",
            blurb=row["blurb"] or "",
            content=row["content"] or "",
        )


@dataclass(frozen=True)
class SectionBlock:
    heading: str | None
    body: str


@dataclass
class Edition:
    """Articles of the most recent edition of a source.

    Attributes:
        source: The source the articles were read from
        prefix: Edition prefix shared by every selected article
        issued: Date used for the document title and manifest
        articles: Articles in query order
    """

    source: EditionSource
    prefix: str
    issued: date
    articles: list[Article] = field(default_factory=list)

    @property
    def title(self) -> str:
        return document_title(self.source.name, self.issued)


def document_title(source_name: str, issued: date) -> str:
    """Human-readable edition label, e.g. ``Politiken - 2026-10-18``."""
    return f"{source_name} - {issued.isoformat()}"
