"""
Edition selection.

The reader apps keep every article they ever downloaded in one table. The
articles of a single edition share the leading segment of their ``refid``,
so today's edition is found by taking that segment from the newest article
and selecting everything that starts with it.
"""

from __future__ import annotations

from contextlib import closing
from datetime import date
import logging
from pathlib import Path
import sqlite3

from ..core.errors import (
    EmptyEditionError,
    MalformedIdentifierError,
    QueryError,
    SourceUnavailable,
)
from ..core.types import Article, Edition
from ..sources import EditionSource

logger = logging.getLogger("daily_edition.input")

# Length of the date/sequence segment at the start of an edition identifier.
PREFIX_LENGTH = 6


def database_path(work_dir: Path, source: EditionSource) -> Path:
    """Location of a source's acquired database inside the work directory."""
    return work_dir / "apps" / source.app_id / "db" / "data.db"


def edition_prefix(identifier: object, source: str | None = None) -> str:
    """Return the edition prefix of an identifier.

    Raises:
        MalformedIdentifierError: If the identifier is not text or is
            shorter than ``PREFIX_LENGTH`` characters.
    """
    # SQLite columns are not typed; an integer refid is not an identifier.
    if not isinstance(identifier, str) or len(identifier) < PREFIX_LENGTH:
        raise MalformedIdentifierError(
            f"Edition identifier {identifier!r} is not text of at least {PREFIX_LENGTH} characters",
            source=source,
        )
    return identifier[:PREFIX_LENGTH]


def edition_filter(identifier: object, source: str | None = None) -> str:
    """``LIKE`` pattern matching every article of the identifier's edition."""
    return edition_prefix(identifier, source) + "%"


def open_database(path: Path) -> sqlite3.Connection:
    """Open a reader database read-only with name-addressable rows."""
    conn = sqlite3.connect(f"{path.resolve().as_uri()}?mode=ro", uri=True)
    conn.row_factory = sqlite3.Row
    return conn


def select_edition(conn: sqlite3.Connection, source: EditionSource) -> list[Article]:
    """Return the articles of the source's most recent edition in query order.

    Raises:
        EmptyEditionError: If the article table is empty.
        MalformedIdentifierError: If the newest identifier is too short.
        QueryError: If a query fails.
    """
    return _select(conn, source)[1]


def _select(conn: sqlite3.Connection, source: EditionSource) -> tuple[str, list[Article]]:
    try:
        row = conn.execute(source.latest_stmt).fetchone()
    except sqlite3.Error as exc:
        raise QueryError(f"Latest identifier query failed: {exc}", source=source.name) from exc
    if row is None:
        raise EmptyEditionError("No articles in database", source=source.name)

    pattern = edition_filter(row[0], source.name)
    try:
        rows = conn.execute(source.select_stmt, (pattern,)).fetchall()
        articles = [Article.from_row(r) for r in rows]
    except sqlite3.Error as exc:
        raise QueryError(f"Article query failed: {exc}", source=source.name) from exc
    except IndexError as exc:
        # sqlite3.Row raises IndexError for a column the query did not select.
        raise QueryError(
            f"Article query is missing a column: {exc}", source=source.name
        ) from exc
    return pattern[:-1], articles


def load_edition(db_path: Path, source: EditionSource, issued: date | None = None) -> Edition:
    """Open a source's database, select today's edition and close it again.

    Raises:
        SourceUnavailable: If the database file does not exist.
    """
    if not db_path.is_file():
        raise SourceUnavailable(f"No database at {db_path}", source=source.name)

    try:
        conn = open_database(db_path)
    except sqlite3.Error as exc:
        raise QueryError(f"Cannot open {db_path}: {exc}", source=source.name) from exc

    with closing(conn):
        prefix, articles = _select(conn, source)

    logger.debug("Selected %d articles for %s (prefix %s)", len(articles), source.name, prefix)
    return Edition(
        source=source,
        prefix=prefix,
        issued=issued or date.today(),
        articles=articles,
    )
