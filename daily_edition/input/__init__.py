"""Edition selection from acquired reader databases."""

from .edition import (
    PREFIX_LENGTH,
    database_path,
    edition_filter,
    edition_prefix,
    load_edition,
    open_database,
    select_edition,
)

__all__ = [
    "PREFIX_LENGTH",
    "database_path",
    "edition_filter",
    "edition_prefix",
    "load_edition",
    "open_database",
    "select_edition",
]
