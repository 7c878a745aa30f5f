"""
Error kinds raised by the edition pipeline.

Every error carries the name of the source being processed and the pipeline
stage that failed, so the batch runner can report a failed source without
inspecting the exception type.
"""

from __future__ import annotations


class EditionError(Exception):
    """Base class for all per-source pipeline failures."""

    stage = "pipeline"

    def __init__(self, message: str, *, source: str | None = None, stage: str | None = None):
        super().__init__(message)
        self.message = message
        self.source = source
        if stage is not None:
            self.stage = stage

    def __str__(self) -> str:
        if self.source:
            return f"{self.source} [{self.stage}]: {self.message}"
        return self.message


class SourceUnavailable(EditionError):
    """The acquired database for a source does not exist."""

    stage = "acquire"


class AcquisitionError(EditionError):
    """An acquisition tool (adb, scp) failed."""

    stage = "acquire"


class EmptyEditionError(EditionError):
    """The latest-identifier query returned no rows."""

    stage = "select"


class MalformedIdentifierError(EditionError):
    """The latest edition identifier is shorter than the prefix length."""

    stage = "select"


class QueryError(EditionError):
    """Opening the database or running a query failed."""

    stage = "select"


class MarkupStructureError(EditionError):
    """A sub-heading marker line has no closing tag on the same line."""

    stage = "render"

    def __init__(self, message: str, *, line: str = "", **kwargs):
        super().__init__(message, **kwargs)
        self.line = line


class OutputWriteError(EditionError):
    """Writing one of the generated documents failed."""

    stage = "render"


class CompilerError(EditionError):
    """The external document compiler failed or produced no artifact."""

    stage = "compile"
