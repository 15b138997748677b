"""Pipeline configuration: provider/status enums and PipelineConfig dataclass."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from src.config import Settings


class SummaryProvider(str, Enum):
    """Generative-text providers available to the summarizer."""

    ANTHROPIC = "anthropic"
    OPENAI = "openai"


class MeetingStatus(str, Enum):
    """Meeting lifecycle states relevant to post-meeting processing.

    ``PROCESSING`` is set by the product before the job is triggered; the job
    only ever moves a meeting out of it, to ``COMPLETED``.
    """

    PROCESSING = "processing"
    COMPLETED = "completed"


@dataclass(frozen=True)
class PipelineConfig:
    """Immutable configuration for the processing job.

    ``commit_on_early_failure`` extends the terminal-state guarantee to the
    fetch, parse and speaker-resolution steps.  When disabled, those errors
    propagate to the caller and the meeting row is left untouched.
    """

    commit_on_early_failure: bool = True

    @classmethod
    def from_settings(cls, settings: Settings) -> PipelineConfig:
        return cls(commit_on_early_failure=settings.commit_on_early_failure)
