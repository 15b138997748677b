"""End-to-end integration test for the processing job.

# MANUAL RUN REQUIRED: requires live API keys and a running Supabase project.
# Run manually with: pytest -m expensive tests/test_pipeline_integration.py -v
# Ensure .env has SUPABASE_URL, SUPABASE_KEY and ANTHROPIC_API_KEY set, and set
# INTEGRATION_MEETING_ID / INTEGRATION_TRANSCRIPT_URL to a meeting row and a
# reachable JSONL transcript.
#
# These tests are NOT run in CI (marked @pytest.mark.expensive).
"""

from __future__ import annotations

import asyncio
import os
import uuid

import pytest

from src.processing.models import ProcessMeetingEvent
from src.processing.outcome import FAILED_SUMMARY
from src.processing.pipeline import run_processing_job
from src.processing.storage import get_supabase_client


@pytest.mark.expensive
def test_full_processing_job() -> None:
    """Fetch -> parse -> resolve -> summarize -> commit against live services."""
    meeting_id = os.environ.get("INTEGRATION_MEETING_ID")
    transcript_url = os.environ.get("INTEGRATION_TRANSCRIPT_URL")
    if not meeting_id or not transcript_url:
        pytest.skip("INTEGRATION_MEETING_ID / INTEGRATION_TRANSCRIPT_URL not set")

    # Fresh event id so no earlier checkpoints are replayed.
    event = ProcessMeetingEvent(
        meeting_id=meeting_id,
        transcript_url=transcript_url,
        event_id=f"integration-test-{uuid.uuid4().hex[:8]}",
    )
    result = asyncio.run(run_processing_job(event))

    assert result.update.status.value == "completed"
    assert result.update.summary != FAILED_SUMMARY, "job fell back to the error placeholder"

    row = (
        get_supabase_client()
        .table("meetings")
        .select("summary, status")
        .eq("id", meeting_id)
        .execute()
        .data[0]
    )
    assert row["status"] == "completed"
    assert row["summary"] == result.update.summary
