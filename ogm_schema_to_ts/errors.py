"""
Error types raised by the generation pipeline.

Every failed run surfaces exactly one GenerationError subclass carrying the
identifier of the offending source. Load-time and zero-entity conditions are
fatal; reference and resource problems are recovered inside the pipeline and
only propagate when strictness is requested.
"""

from __future__ import annotations

from typing import Any


class GenerationError(Exception):
    """Base class for all generation errors.

    Attributes:
        source: Identifier of the offending input (path, URL, entity or resource name)
    """

    def __init__(self, message: str, source: str = ""):
        super().__init__(message)
        self.source = source

    def __str__(self) -> str:
        message = super().__str__()
        if self.source and self.source not in message:
            return f"{message} (source: {self.source})"
        return message


class SchemaLoadError(GenerationError):
    """Raised when the raw schema cannot be fetched, read or parsed."""

    def __init__(self, message: str, source: str, cause: BaseException | None = None):
        super().__init__(message, source)
        self.cause = cause


class NoEntitiesFoundError(GenerationError):
    """Raised when a schema parses but holds no entity of the required kind."""

    def __init__(self, source: str, kind: str):
        super().__init__(f"No schemas carrying {kind} metadata found", source)
        self.kind = kind


class ReferenceResolutionError(GenerationError):
    """Raised when a $ref cannot be satisfied.

    The type synthesizer recovers from it by degrading the field to `any`.
    """

    def __init__(self, reference: str, source: str = ""):
        super().__init__(f"Cannot resolve reference {reference!r}", source)
        self.reference = reference


class InvalidResourceMetadataError(GenerationError):
    """Raised when a resource marker is present but malformed."""

    def __init__(self, resource: str, problems: list[str]):
        details = "; ".join(problems)
        super().__init__(f"Invalid resource metadata for {resource!r}: {details}", resource)
        self.problems = problems


class OutputValidationError(GenerationError):
    """Raised when a rendered buffer fails validation before it is written."""

    def __init__(self, message: str, source: str, details: Any = None):
        super().__init__(message, source)
        self.details = details
