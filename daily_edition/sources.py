"""
Built-in newspaper sources.

Each source names the Android package whose reader database holds the
articles, and the two queries used to pick today's edition out of it.
"""

from __future__ import annotations

from dataclasses import dataclass


LATEST_REFID_STMT = "SELECT refid FROM articles ORDER BY article_id DESC LIMIT 1"


@dataclass(frozen=True)
class EditionSource:
    """Static definition of one supported newspaper.

    Attributes:
        name: Human-readable name, used in the document title
        app_id: Android package name; the acquired database lives under
            ``apps/<app_id>/db/data.db``
        select_stmt: Article query taking one ``LIKE`` pattern parameter and
            returning ``title``, ``byline``, ``blurb`` and ``content``
        latest_stmt: Query returning the most recent edition identifier
    """

    name: str
    app_id: str
    select_stmt: str
    latest_stmt: str = LATEST_REFID_STMT


SOURCES: tuple[EditionSource, ...] = (
    EditionSource(
        name="Politiken",
        app_id="dk.politiken.reader",
        select_stmt="SELECT title, byline, blurb, content FROM articles WHERE refid LIKE ?",
    ),
    EditionSource(
        name="Information",
        app_id="dk.information.areader",
        select_stmt=(
            "SELECT title, author AS byline, blurb, content FROM articles "
            "LEFT JOIN byline ON articles.article_id == byline.article_id "
            "WHERE refid LIKE ?"
        ),
    ),
)


def get_source(name: str) -> EditionSource:
    """Look up a built-in source by name or app id (case-insensitive)."""
    wanted = name.strip().lower()
    for source in SOURCES:
        if source.name.lower() == wanted or source.app_id.lower() == wanted:
            return source
    known = ", ".join(s.name for s in SOURCES)
    raise KeyError(f"Unknown source {name!r} (known: {known})")


def resolve_sources(names: list[str] | None) -> list[EditionSource]:
    """Resolve configured source names, keeping their order. Empty means all."""
    if not names:
        return list(SOURCES)
    return [get_source(name) for name in names]
