"""Fetch raw transcripts and parse them into transcript events."""

from __future__ import annotations

import json
import logging

import httpx
from pydantic import ValidationError

from src.processing.errors import FetchError, ParseError
from src.processing.models import TranscriptEvent

logger = logging.getLogger(__name__)


async def fetch_transcript(
    url: str,
    *,
    client: httpx.AsyncClient | None = None,
    timeout: float = 30.0,
) -> str:
    """Download the transcript stored at *url*.

    Args:
        url: HTTP(S) location of the newline-delimited transcript.
        client: Optional shared client; a short-lived one is created otherwise.
        timeout: Transport timeout in seconds (ignored when *client* is given).

    Returns:
        The response body as text.

    Raises:
        FetchError: On any transport failure or non-2xx response.
    """
    try:
        if client is None:
            async with httpx.AsyncClient(timeout=timeout) as owned:
                response = await owned.get(url)
        else:
            response = await client.get(url)
        response.raise_for_status()
    except httpx.HTTPStatusError as exc:
        status = exc.response.status_code
        raise FetchError(
            f"Transcript request returned status {status}", exc, status_code=status
        ) from exc
    except httpx.HTTPError as exc:
        raise FetchError(f"Transcript location unreachable: {exc}", exc) from exc

    logger.info("Fetched transcript (%d bytes)", len(response.content))
    return response.text


def parse_transcript(content: str) -> list[TranscriptEvent]:
    """Parse newline-delimited JSON records into transcript events.

    Each non-blank line must hold one JSON object with at least
    ``speaker_id`` and ``text``.  Order is preserved and nothing is
    deduplicated.  A single bad line fails the whole parse.

    Only line feeds separate records (CRLF is tolerated): JSON strings may
    carry U+2028, U+2029 or U+0085 unescaped.

    Raises:
        ParseError: If any line is not a valid transcript record.
    """
    events: list[TranscriptEvent] = []

    for line_number, line in enumerate(content.split("\n"), start=1):
        line = line.strip()
        if not line:
            continue

        try:
            record = json.loads(line)
        except json.JSONDecodeError as exc:
            raise ParseError(
                f"Line {line_number} is not valid JSON: {exc.msg}", exc, line_number=line_number
            ) from exc

        if not isinstance(record, dict):
            raise ParseError(
                f"Line {line_number} is not a JSON object", line_number=line_number
            )

        try:
            events.append(TranscriptEvent.model_validate(record))
        except ValidationError as exc:
            raise ParseError(
                f"Line {line_number} is not a transcript record: {exc.error_count()} error(s)",
                exc,
                line_number=line_number,
            ) from exc

    return events
