"""Shared fixtures: small reader databases laid out like an acquired backup."""

from __future__ import annotations

from pathlib import Path
import sqlite3

import pytest

from daily_edition.input.edition import database_path
from daily_edition.sources import get_source


def make_politiken_db(path: Path, rows: list[tuple[str, str, str, str, str]]) -> Path:
    """Create a Politiken-style database; rows are (refid, title, byline, blurb, content)."""
    path.parent.mkdir(parents=True, exist_ok=True)
    conn = sqlite3.connect(path)
    conn.execute(
        "CREATE TABLE articles (article_id INTEGER PRIMARY KEY, refid TEXT, "
        "title TEXT, byline TEXT, blurb TEXT, content TEXT)"
    )
    conn.executemany(
        "INSERT INTO articles (refid, title, byline, blurb, content) VALUES (?, ?, ?, ?, ?)",
        rows,
    )
    conn.commit()
    conn.close()
    return path


def make_information_db(path: Path, rows: list[tuple[str, str, str | None, str, str]]) -> Path:
    """Create an Information-style database with authors in a separate table."""
    path.parent.mkdir(parents=True, exist_ok=True)
    conn = sqlite3.connect(path)
    conn.execute(
        "CREATE TABLE articles (article_id INTEGER PRIMARY KEY, refid TEXT, "
        "title TEXT, blurb TEXT, content TEXT)"
    )
    conn.execute("CREATE TABLE byline (article_id INTEGER, author TEXT)")
    for refid, title, author, blurb, content in rows:
        cur = conn.execute(
            "INSERT INTO articles (refid, title, blurb, content) VALUES (?, ?, ?, ?)",
            (refid, title, blurb, content),
        )
        if author is not None:
            conn.execute(
                "INSERT INTO byline (article_id, author) VALUES (?, ?)", (cur.lastrowid, author)
            )
    conn.commit()
    conn.close()
    return path


POLITIKEN_ROWS = [
    ("181017A01", "Yesterday", "Old Author", "Old blurb", "<p>old</p>"),
    ("181018A01", "Front page", "Anne Larsen", "Lead story", "<p>one</p>\n<p>two</p>"),
    ("181018A02", "", "", "", "<p>filler</p>"),
    (
        "181018B01",
        "Culture",
        "Peter Holm",
        "Reviews",
        "<p>intro</p>\n<div class='h3'>Film</div><p>film text</p>\n<p>more</p>",
    ),
]


@pytest.fixture
def politiken():
    return get_source("Politiken")


@pytest.fixture
def information():
    return get_source("Information")


@pytest.fixture
def politiken_db(tmp_path: Path, politiken) -> Path:
    return make_politiken_db(database_path(tmp_path, politiken), POLITIKEN_ROWS)


def make_numeric_refid_db(path: Path, rows: list[tuple[int, str]]) -> Path:
    """Create a database whose refid column stores integers; rows are (refid, title)."""
    path.parent.mkdir(parents=True, exist_ok=True)
    conn = sqlite3.connect(path)
    conn.execute(
        "CREATE TABLE articles (article_id INTEGER PRIMARY KEY, refid INTEGER, "
        "title TEXT, byline TEXT, blurb TEXT, content TEXT)"
    )
    conn.executemany(
        "INSERT INTO articles (refid, title, byline, blurb, content) VALUES (?, ?, '', '', '')",
        rows,
    )
    conn.commit()
    conn.close()
    return path
