"""Classify a job's result and commit exactly one terminal state."""

from __future__ import annotations

import logging
from typing import Protocol

from src.pipeline_config import MeetingStatus
from src.processing.models import (
    MeetingUpdate,
    SummaryFailed,
    SummaryRateLimited,
    SummarySucceeded,
)

logger = logging.getLogger(__name__)

RATE_LIMITED_SUMMARY = "Summary unavailable due to rate limiting. Please try again later."
FAILED_SUMMARY = "Summary unavailable due to an error during processing."

RATE_LIMIT_STATUS = 429
_STATUS_ATTRIBUTES = ("status", "code", "status_code", "statusCode")
_RATE_LIMIT_MARKERS = ("429", "rate limit")


class MeetingWriter(Protocol):
    def update_meeting(self, meeting_id: str, update: MeetingUpdate) -> None: ...


def _error_chain(error: BaseException) -> list[BaseException]:
    """The error plus every ``cause``/``__cause__`` behind it, without cycles."""
    chain: list[BaseException] = []
    current: BaseException | None = error
    while current is not None and all(current is not seen for seen in chain):
        chain.append(current)
        nxt = getattr(current, "cause", None)
        current = nxt if isinstance(nxt, BaseException) else current.__cause__
    return chain


def _has_rate_limit_status(error: BaseException) -> bool:
    for attr in _STATUS_ATTRIBUTES:
        value = getattr(error, attr, None)
        if isinstance(value, bool):
            continue
        if isinstance(value, (int, float)) and value == RATE_LIMIT_STATUS:
            return True
    return False


def _has_rate_limit_text(error: BaseException) -> bool:
    message = getattr(error, "message", None)
    texts = [str(error).lower()]
    if isinstance(message, str):
        texts.append(message.lower())
    return any(marker in text for text in texts for marker in _RATE_LIMIT_MARKERS)


def is_rate_limit_error(error: BaseException) -> bool:
    """True if *error*, or anything it wraps, signals provider rate limiting.

    Matches a numeric ``status``/``code``/``status_code``/``statusCode``
    of 429, or a message containing ``"429"`` or ``"rate limit"``
    (case-insensitive).
    """
    return any(
        _has_rate_limit_status(e) or _has_rate_limit_text(e) for e in _error_chain(error)
    )


def classify_outcome(
    text: str | None = None,
    error: BaseException | None = None,
) -> SummarySucceeded | SummaryRateLimited | SummaryFailed:
    """Turn a summary text or an error into a tagged outcome."""
    if error is None and text is not None:
        return SummarySucceeded(text=text)
    if error is not None and is_rate_limit_error(error):
        return SummaryRateLimited()
    return SummaryFailed()


def update_for(outcome: SummarySucceeded | SummaryRateLimited | SummaryFailed) -> MeetingUpdate:
    """The row update that corresponds to *outcome*."""
    if isinstance(outcome, SummarySucceeded):
        summary = outcome.text
    elif isinstance(outcome, SummaryRateLimited):
        summary = RATE_LIMITED_SUMMARY
    else:
        summary = FAILED_SUMMARY
    return MeetingUpdate(summary=summary, status=MeetingStatus.COMPLETED)


def commit_outcome(
    store: MeetingWriter,
    meeting_id: str,
    outcome: SummarySucceeded | SummaryRateLimited | SummaryFailed,
) -> MeetingUpdate:
    """Write the terminal ``completed`` state for *meeting_id*."""
    update = update_for(outcome)
    store.update_meeting(meeting_id, update)
    logger.info("Meeting %s marked %s (%s)", meeting_id, update.status.value, outcome.kind)
    return update
