"""Processing trigger: schedule the post-meeting transcript job."""

from __future__ import annotations

import logging

from fastapi import APIRouter, BackgroundTasks

from src.api.models import ProcessAccepted
from src.processing.models import ProcessMeetingEvent
from src.processing.pipeline import run_id_for, run_processing_job

logger = logging.getLogger(__name__)

router = APIRouter()


async def _run_job(event: ProcessMeetingEvent) -> None:
    try:
        await run_processing_job(event)
    except Exception:
        # Background tasks have no caller to report to.
        logger.exception("Processing job failed for meeting %s", event.meeting_id)


@router.post("/api/meetings/process", response_model=ProcessAccepted, status_code=202)
async def process(event: ProcessMeetingEvent, background_tasks: BackgroundTasks) -> ProcessAccepted:
    """Accept a ``meetings/processing`` event and run the job once in the background.

    The job is never retried automatically; replaying the same event (same
    ``event_id``, or same meeting and transcript URL) resumes from its
    checkpoints.
    """
    background_tasks.add_task(_run_job, event)
    return ProcessAccepted(run_id=run_id_for(event), meeting_id=event.meeting_id)
