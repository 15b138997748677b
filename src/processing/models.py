"""Data models for the post-meeting processing job."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Annotated, Literal, Protocol

from pydantic import AliasChoices, BaseModel, ConfigDict, Field

from src.pipeline_config import MeetingStatus

UNKNOWN_SPEAKER = "Unknown"


class TranscriptEvent(BaseModel):
    """One utterance decoded from a transcript line.

    Records coming from the call provider use ``start_ts``/``stop_ts``;
    both spellings are accepted.  Unrecognised fields are kept and travel
    with the event into the summarization prompt.
    """

    model_config = ConfigDict(frozen=True, extra="allow", populate_by_name=True)

    speaker_id: str
    text: str
    start: float | None = Field(default=None, validation_alias=AliasChoices("start", "start_ts"))
    end: float | None = Field(default=None, validation_alias=AliasChoices("end", "stop_ts"))


class EnrichedTranscriptEvent(TranscriptEvent):
    """A transcript event with the speaker's resolved display name."""

    display_name: str = UNKNOWN_SPEAKER


class Identity(Protocol):
    """Anything that can name a speaker."""

    @property
    def id(self) -> str: ...

    @property
    def name(self) -> str: ...


@dataclass(frozen=True)
class Participant:
    """A human meeting participant."""

    id: str
    name: str


@dataclass(frozen=True)
class Agent:
    """An automated agent that joined the call."""

    id: str
    name: str


class ProcessMeetingEvent(BaseModel):
    """Trigger event for one processing job invocation."""

    model_config = ConfigDict(populate_by_name=True)

    transcript_url: str = Field(validation_alias=AliasChoices("transcript_url", "transcriptUrl"))
    meeting_id: str = Field(validation_alias=AliasChoices("meeting_id", "meetingId"))
    event_id: str | None = Field(default=None, validation_alias=AliasChoices("event_id", "eventId"))


# ---------------------------------------------------------------------------
# Summary outcome: tagged variant consumed by the committer
# ---------------------------------------------------------------------------


class SummarySucceeded(BaseModel):
    kind: Literal["success"] = "success"
    text: str


class SummaryRateLimited(BaseModel):
    kind: Literal["rate_limited"] = "rate_limited"


class SummaryFailed(BaseModel):
    kind: Literal["failed"] = "failed"


SummaryOutcome = Annotated[
    SummarySucceeded | SummaryRateLimited | SummaryFailed,
    Field(discriminator="kind"),
]


class MeetingUpdate(BaseModel):
    """The single row update written to the meeting record."""

    summary: str
    status: MeetingStatus = MeetingStatus.COMPLETED


@dataclass
class ProcessingResult:
    """What one invocation of the processing job produced."""

    run_id: str
    meeting_id: str
    outcome: SummarySucceeded | SummaryRateLimited | SummaryFailed
    update: MeetingUpdate
