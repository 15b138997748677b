"""Post-meeting processing job: fetch -> parse -> resolve -> summarize -> commit.

Every stage runs as a named checkpointed step.  The job itself is attempted
exactly once; failures are turned into a terminal ``completed`` meeting row
with a placeholder summary rather than retried.
"""

from __future__ import annotations

import logging
import uuid
from collections.abc import Awaitable, Callable, Sequence
from typing import Protocol, TypeVar

from pydantic import TypeAdapter

from src.pipeline_config import PipelineConfig
from src.processing.errors import (
    CheckpointError,
    FetchError,
    ParseError,
    ResolutionError,
    SummarizationError,
)
from src.processing.models import (
    EnrichedTranscriptEvent,
    MeetingUpdate,
    ProcessingResult,
    ProcessMeetingEvent,
    SummaryOutcome,
    TranscriptEvent,
)
from src.processing.outcome import MeetingWriter, classify_outcome, commit_outcome
from src.processing.speakers import IdentityStore, resolve_speakers
from src.processing.steps import StepRunner, StepStore
from src.processing.transcripts import fetch_transcript, parse_transcript

logger = logging.getLogger(__name__)

T = TypeVar("T")

_TEXT = TypeAdapter(str)
_EVENTS = TypeAdapter(list[TranscriptEvent])
_ENRICHED = TypeAdapter(list[EnrichedTranscriptEvent])
_OUTCOME: TypeAdapter[SummaryOutcome] = TypeAdapter(SummaryOutcome)
_UPDATE = TypeAdapter(MeetingUpdate)

# Commit step name per outcome kind
COMMIT_STEPS = {
    "success": "save-summary",
    "rate_limited": "save-rate-limited",
    "failed": "save-error",
}

_RUN_NAMESPACE = uuid.UUID("6f1c3a52-8a4e-4d53-9b1e-2f0d7c9e4a10")


class MeetingStore(IdentityStore, MeetingWriter, Protocol):
    """Identity reads plus the meeting row write."""


class TranscriptSummarizer(Protocol):
    async def summarize(self, events: Sequence[EnrichedTranscriptEvent]) -> str: ...


def run_id_for(event: ProcessMeetingEvent) -> str:
    """Checkpoint key for *event*: its event id, or a stable id derived from it."""
    if event.event_id:
        return event.event_id
    return str(uuid.uuid5(_RUN_NAMESPACE, f"{event.meeting_id}\n{event.transcript_url}"))


async def process_meeting(
    event: ProcessMeetingEvent,
    *,
    store: MeetingStore,
    summarizer: TranscriptSummarizer,
    steps: StepStore,
    config: PipelineConfig | None = None,
    fetch_timeout: float = 30.0,
) -> ProcessingResult:
    """Run one invocation of the processing job for *event*.

    The outcome, successful or not, is checkpointed as the ``summarize``
    step.  A replay that finds it skips every earlier step, so a completed
    meeting is never summarized or written twice.

    Args:
        event: Trigger event carrying the transcript URL and meeting id.
        store: Participant/agent lookups and the meeting row update.
        summarizer: Generative agent wrapper.
        steps: Checkpoint store; completed steps are replayed, not re-run.
        config: Job behaviour; defaults to ``PipelineConfig()``.
        fetch_timeout: Transport timeout for the transcript download.

    Returns:
        The committed outcome and row update.

    Raises:
        FetchError, ParseError, ResolutionError, CheckpointError: Only when
            ``config.commit_on_early_failure`` is False.
    """
    config = config or PipelineConfig()
    run_id = run_id_for(event)
    runner = StepRunner(steps, run_id)
    logger.info("Processing meeting %s (run %s)", event.meeting_id, run_id)

    try:
        outcome = await runner.lookup("summarize", _OUTCOME)
        if outcome is None:
            enriched = await _prepare_transcript(runner, event, store, fetch_timeout)
    except (FetchError, ParseError, ResolutionError, CheckpointError) as exc:
        if not config.commit_on_early_failure:
            raise
        logger.exception("Transcript preparation failed for meeting %s", event.meeting_id)
        failure = classify_outcome(error=exc)

        async def record_failure() -> SummaryOutcome:
            return failure

        outcome = await _run_unless_store_down(runner, "summarize", record_failure, _OUTCOME)

    if outcome is None:

        async def summarize() -> SummaryOutcome:
            try:
                text = await summarizer.summarize(enriched)
            except SummarizationError as exc:
                failed = classify_outcome(error=exc)
                if failed.kind == "rate_limited":
                    logger.warning("Summarization rate limited for meeting %s", event.meeting_id)
                else:
                    logger.exception("Summarization failed for meeting %s", event.meeting_id)
                return failed
            return classify_outcome(text=text)

        outcome = await _run_unless_store_down(runner, "summarize", summarize, _OUTCOME)

    async def save() -> MeetingUpdate:
        return commit_outcome(store, event.meeting_id, outcome)

    update = await _run_unless_store_down(runner, COMMIT_STEPS[outcome.kind], save, _UPDATE)
    return ProcessingResult(
        run_id=run_id,
        meeting_id=event.meeting_id,
        outcome=outcome,
        update=update,
    )


async def _run_unless_store_down(
    runner: StepRunner,
    name: str,
    fn: Callable[[], Awaitable[T]],
    adapter: TypeAdapter[T],
) -> T:
    """Run *name* through *runner*; without a checkpoint if the store is failing.

    *fn* runs at most once per call.
    """
    produced: list[T] = []

    async def tracked() -> T:
        produced.append(await fn())
        return produced[0]

    try:
        return await runner.run(name, tracked, adapter)
    except CheckpointError:
        logger.exception("Could not checkpoint step %s for run %s", name, runner.run_id)
        return produced[0] if produced else await fn()


async def _prepare_transcript(
    runner: StepRunner,
    event: ProcessMeetingEvent,
    store: IdentityStore,
    fetch_timeout: float,
) -> list[EnrichedTranscriptEvent]:
    async def fetch() -> str:
        return await fetch_transcript(event.transcript_url, timeout=fetch_timeout)

    raw = await runner.run("fetch-transcript", fetch, _TEXT)

    async def parse() -> list[TranscriptEvent]:
        return parse_transcript(raw)

    transcript = await runner.run("parse-transcript", parse, _EVENTS)

    async def add_speakers() -> list[EnrichedTranscriptEvent]:
        return await resolve_speakers(transcript, store)

    return await runner.run("add-speakers", add_speakers, _ENRICHED)


async def run_processing_job(event: ProcessMeetingEvent) -> ProcessingResult:
    """Run the job with Supabase-backed stores and the configured provider."""
    from src.config import settings
    from src.processing.storage import (
        SupabaseMeetingStore,
        SupabaseStepStore,
        get_supabase_client,
    )
    from src.processing.summarizer import Summarizer, SummarizerConfig

    client = get_supabase_client()
    return await process_meeting(
        event,
        store=SupabaseMeetingStore.from_settings(client),
        summarizer=Summarizer(SummarizerConfig.from_settings(settings)),
        steps=SupabaseStepStore.from_settings(client),
        config=PipelineConfig.from_settings(settings),
        fetch_timeout=settings.transcript_fetch_timeout,
    )
