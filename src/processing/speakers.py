"""Speaker resolution: attach display names to transcript events."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Sequence
from typing import Protocol

from src.processing.errors import ResolutionError
from src.processing.models import (
    UNKNOWN_SPEAKER,
    Agent,
    EnrichedTranscriptEvent,
    Identity,
    Participant,
    TranscriptEvent,
)

logger = logging.getLogger(__name__)


class IdentityStore(Protocol):
    def fetch_participants(self, ids: list[str]) -> list[Participant]: ...

    def fetch_agents(self, ids: list[str]) -> list[Agent]: ...


def speaker_ids(events: Sequence[TranscriptEvent]) -> list[str]:
    """Distinct speaker ids in first-seen order."""
    return list(dict.fromkeys(e.speaker_id for e in events))


def build_identity_index(*pools: Sequence[Identity]) -> dict[str, Identity]:
    """Merge identity pools into a single lookup keyed by id.

    The first identity seen for an id is kept.
    """
    index: dict[str, Identity] = {}
    for pool in pools:
        for identity in pool:
            index.setdefault(identity.id, identity)
    return index


def enrich_events(
    events: Sequence[TranscriptEvent],
    identities: dict[str, Identity],
) -> list[EnrichedTranscriptEvent]:
    """Map every event to an enriched copy; unmatched speakers become ``Unknown``."""
    enriched: list[EnrichedTranscriptEvent] = []
    for event in events:
        identity = identities.get(event.speaker_id)
        name = identity.name if identity is not None and identity.name else UNKNOWN_SPEAKER
        enriched.append(
            EnrichedTranscriptEvent.model_validate({**event.model_dump(), "display_name": name})
        )
    return enriched


async def resolve_speakers(
    events: Sequence[TranscriptEvent],
    store: IdentityStore,
) -> list[EnrichedTranscriptEvent]:
    """Resolve each event's speaker against participants and agents.

    Both pools are queried concurrently, filtered to the speaker ids present
    in *events*.

    Raises:
        ResolutionError: If either lookup fails.
    """
    ids = speaker_ids(events)
    if not ids:
        return []

    try:
        participants, agents = await asyncio.gather(
            asyncio.to_thread(store.fetch_participants, ids),
            asyncio.to_thread(store.fetch_agents, ids),
        )
    except Exception as exc:
        raise ResolutionError(f"Speaker lookup failed: {exc}", exc) from exc

    identities = build_identity_index(participants, agents)
    logger.info(
        "Resolved %d of %d speakers (%d participants, %d agents)",
        sum(1 for i in ids if i in identities),
        len(ids),
        len(participants),
        len(agents),
    )
    return enrich_events(events, identities)
