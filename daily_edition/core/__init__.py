"""
Core types and errors for the edition pipeline.
"""

from .errors import (
    AcquisitionError,
    CompilerError,
    EditionError,
    EmptyEditionError,
    MalformedIdentifierError,
    MarkupStructureError,
    OutputWriteError,
    QueryError,
    SourceUnavailable,
)
from .types import Article, Edition, SectionBlock, document_title

__all__ = [
    "AcquisitionError",
    "Article",
    "CompilerError",
    "Edition",
    "EditionError",
    "EmptyEditionError",
    "MalformedIdentifierError",
    "MarkupStructureError",
    "OutputWriteError",
    "QueryError",
    "SectionBlock",
    "SourceUnavailable",
    "document_title",
]
