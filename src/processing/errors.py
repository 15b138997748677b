"""Typed errors raised by the transcript processing job."""

from __future__ import annotations


class ProcessingError(Exception):
    """Base class for every failure inside the processing job.

    ``cause`` keeps the underlying exception (also chained as ``__cause__``)
    so the outcome classifier can inspect provider status codes.
    """

    def __init__(self, message: str, cause: BaseException | None = None) -> None:
        super().__init__(message)
        self.cause = cause


class FetchError(ProcessingError):
    """The transcript location was unreachable or returned a non-2xx status."""

    def __init__(
        self,
        message: str,
        cause: BaseException | None = None,
        status_code: int | None = None,
    ) -> None:
        super().__init__(message, cause)
        self.status_code = status_code


class ParseError(ProcessingError):
    """A transcript line could not be decoded into a TranscriptEvent."""

    def __init__(
        self,
        message: str,
        cause: BaseException | None = None,
        line_number: int | None = None,
    ) -> None:
        super().__init__(message, cause)
        self.line_number = line_number


class ResolutionError(ProcessingError):
    """A participant or agent lookup failed."""


class SummarizationError(ProcessingError):
    """The generative agent rejected the call or returned unusable output."""


class CheckpointError(ProcessingError):
    """The step checkpoint store could not be read or written."""
