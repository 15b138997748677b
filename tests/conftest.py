"""Shared fixtures for the processing job tests (no external services required)."""

from __future__ import annotations

import pytest

from src.processing.models import Agent, Participant
from tests.fakes import SAMPLE_RECORDS, FakeMeetingStore, jsonl


@pytest.fixture
def sample_transcript() -> str:
    return jsonl(*SAMPLE_RECORDS)


@pytest.fixture
def store() -> FakeMeetingStore:
    return FakeMeetingStore(
        participants=[Participant(id="user_1", name="Alice")],
        agents=[Agent(id="agent_1", name="Sales Coach")],
    )
