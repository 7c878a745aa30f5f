"""Rendering of the navigation, content and manifest documents."""

from .markup import anchor_id, iter_section_blocks, render_article_body
from .renderer import render_document, render_manifest, render_toc, write_edition

__all__ = [
    "anchor_id",
    "iter_section_blocks",
    "render_article_body",
    "render_document",
    "render_manifest",
    "render_toc",
    "write_edition",
]
