"""Tests for step checkpointing."""

from __future__ import annotations

import asyncio

import pytest
from pydantic import TypeAdapter

from src.processing.errors import CheckpointError
from src.processing.models import TranscriptEvent
from src.processing.steps import InMemoryStepStore, StepCheckpoint, StepRunner


class TestStepRunner:
    def test_runs_and_checkpoints(self) -> None:
        store = InMemoryStepStore()
        runner = StepRunner(store, "run-1")
        calls: list[str] = []

        async def step() -> str:
            calls.append("ran")
            return "raw transcript"

        assert asyncio.run(runner.run("fetch-transcript", step, TypeAdapter(str))) == "raw transcript"
        assert calls == ["ran"]
        checkpoint = store.load("run-1", "fetch-transcript")
        assert checkpoint is not None
        assert checkpoint.output == "raw transcript"

    def test_replay_skips_execution(self) -> None:
        store = InMemoryStepStore()
        store.save("run-1", "fetch-transcript", "cached")

        async def step() -> str:
            raise AssertionError("must not run")

        result = asyncio.run(StepRunner(store, "run-1").run("fetch-transcript", step, TypeAdapter(str)))
        assert result == "cached"

    def test_models_round_trip_through_json(self) -> None:
        store = InMemoryStepStore()
        adapter = TypeAdapter(list[TranscriptEvent])
        events = [TranscriptEvent(speaker_id="a", text="Hi", start=1.0, end=2.0)]

        async def step() -> list[TranscriptEvent]:
            return events

        asyncio.run(StepRunner(store, "run-1").run("parse-transcript", step, adapter))
        checkpoint = store.load("run-1", "parse-transcript")
        assert checkpoint is not None
        assert checkpoint.output == [{"speaker_id": "a", "text": "Hi", "start": 1.0, "end": 2.0}]

        async def never() -> list[TranscriptEvent]:
            raise AssertionError("must not run")

        replayed = asyncio.run(StepRunner(store, "run-1").run("parse-transcript", never, adapter))
        assert replayed == events

    def test_failed_step_is_not_checkpointed(self) -> None:
        store = InMemoryStepStore()

        async def step() -> str:
            raise RuntimeError("boom")

        with pytest.raises(RuntimeError):
            asyncio.run(StepRunner(store, "run-1").run("fetch-transcript", step, TypeAdapter(str)))
        assert store.load("run-1", "fetch-transcript") is None

    def test_runs_are_isolated(self) -> None:
        store = InMemoryStepStore()
        store.save("run-1", "fetch-transcript", "one")

        async def step() -> str:
            return "two"

        result = asyncio.run(StepRunner(store, "run-2").run("fetch-transcript", step, TypeAdapter(str)))
        assert result == "two"
        assert store.step_names("run-1") == ["fetch-transcript"]
        assert store.step_names("run-2") == ["fetch-transcript"]


class _BrokenStore:
    def __init__(self, fail_on: str) -> None:
        self.fail_on = fail_on

    def load(self, run_id: str, step_name: str) -> StepCheckpoint | None:
        if self.fail_on == "load":
            raise RuntimeError("checkpoint table unavailable")
        return None

    def save(self, run_id: str, step_name: str, output: object) -> None:
        raise RuntimeError("checkpoint table unavailable")


class TestStoreFailures:
    def test_load_failure_raises_checkpoint_error(self) -> None:
        async def step() -> str:
            raise AssertionError("must not run")

        with pytest.raises(CheckpointError, match="load checkpoint fetch-transcript") as exc_info:
            asyncio.run(StepRunner(_BrokenStore("load"), "run-1").run("fetch-transcript", step, TypeAdapter(str)))
        assert isinstance(exc_info.value.cause, RuntimeError)

    def test_save_failure_raises_checkpoint_error(self) -> None:
        async def step() -> str:
            return "raw"

        with pytest.raises(CheckpointError, match="save checkpoint"):
            asyncio.run(StepRunner(_BrokenStore("save"), "run-1").run("fetch-transcript", step, TypeAdapter(str)))

    def test_lookup_does_not_run_anything(self) -> None:
        store = InMemoryStepStore()
        runner = StepRunner(store, "run-1")

        assert asyncio.run(runner.lookup("summarize", TypeAdapter(str))) is None
        store.save("run-1", "summarize", "done")
        assert asyncio.run(runner.lookup("summarize", TypeAdapter(str))) == "done"
