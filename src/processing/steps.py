"""Step checkpointing for the processing job.

Every stage of the job runs through :class:`StepRunner`.  A stage's output is
dumped to JSON and stored under ``(run_id, step_name)``; on replay the stored
value is validated back into its Python type and the stage is not executed
again.  This is what keeps a resumed job from calling the LLM provider twice.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from typing import Any, Protocol, TypeVar

from pydantic import TypeAdapter

from src.processing.errors import CheckpointError

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass(frozen=True)
class StepCheckpoint:
    """A stored step output (JSON-compatible)."""

    output: Any


class StepStore(Protocol):
    def load(self, run_id: str, step_name: str) -> StepCheckpoint | None: ...

    def save(self, run_id: str, step_name: str, output: Any) -> None: ...


class InMemoryStepStore:
    """Process-local checkpoint store for tests and one-off runs."""

    def __init__(self) -> None:
        self._checkpoints: dict[tuple[str, str], Any] = {}

    def load(self, run_id: str, step_name: str) -> StepCheckpoint | None:
        key = (run_id, step_name)
        if key not in self._checkpoints:
            return None
        return StepCheckpoint(output=self._checkpoints[key])

    def save(self, run_id: str, step_name: str, output: Any) -> None:
        self._checkpoints[(run_id, step_name)] = output

    def step_names(self, run_id: str) -> list[str]:
        return [name for rid, name in self._checkpoints if rid == run_id]


class StepRunner:
    """Runs named steps at most once per ``run_id``.

    Checkpoint store failures surface as :class:`CheckpointError` so the job
    can still drive the meeting to a terminal state.
    """

    def __init__(self, store: StepStore, run_id: str) -> None:
        self.store = store
        self.run_id = run_id

    async def _load(self, name: str) -> StepCheckpoint | None:
        try:
            return await asyncio.to_thread(self.store.load, self.run_id, name)
        except Exception as exc:
            raise CheckpointError(f"Could not load checkpoint {name}: {exc}", exc) from exc

    async def _save(self, name: str, output: Any) -> None:
        try:
            await asyncio.to_thread(self.store.save, self.run_id, name, output)
        except Exception as exc:
            raise CheckpointError(f"Could not save checkpoint {name}: {exc}", exc) from exc

    async def lookup(self, name: str, adapter: TypeAdapter[T]) -> T | None:
        """Return the stored result of *name* without running anything."""
        checkpoint = await self._load(name)
        if checkpoint is None:
            return None
        return adapter.validate_python(checkpoint.output)

    async def run(
        self,
        name: str,
        fn: Callable[[], Awaitable[T]],
        adapter: TypeAdapter[T],
    ) -> T:
        """Return the checkpointed result of *name*, computing it if absent.

        Args:
            name: Step name, unique within the run.
            fn: Zero-argument coroutine function producing the step output.
            adapter: Serializes the output to JSON and validates it on replay.

        Raises:
            CheckpointError: If the checkpoint store cannot be read or written.
        """
        checkpoint = await self._load(name)
        if checkpoint is not None:
            logger.info("Step %s already completed for run %s; replaying", name, self.run_id)
            return adapter.validate_python(checkpoint.output)

        logger.info("Running step %s for run %s", name, self.run_id)
        result = await fn()
        await self._save(name, adapter.dump_python(result, mode="json"))
        return result
