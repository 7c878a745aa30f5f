"""
Daily Edition - newspaper reader databases to e-reader books.

This package reads the article database of a newspaper reader app, picks
the most recent edition and assembles a navigation document, a single
content document and an OPF manifest for an e-reader compiler.

Main entry point is the CLI via `daily-edition run` command.

Example:
    $ daily-edition run --acquire none --work-dir backup/ -o out/
"""

__all__ = [
    "__version__",
    "Article",
    "EditionSource",
    "SOURCES",
    "select_edition",
    "render_toc",
    "render_document",
    "render_manifest",
]
__version__ = "0.1.0"

from .core.types import Article
from .input.edition import select_edition
from .output.renderer import render_document, render_manifest, render_toc
from .sources import SOURCES, EditionSource
