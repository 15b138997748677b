"""Pydantic request/response schemas for the Meeting Summaries API."""

from __future__ import annotations

from pydantic import BaseModel


class ProcessAccepted(BaseModel):
    """Response body for the /api/meetings/process endpoint."""

    run_id: str
    meeting_id: str
    status: str = "accepted"
