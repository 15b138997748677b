"""Supabase storage helpers: identity lookups, meeting updates, step checkpoints."""

from __future__ import annotations

from typing import Any

from supabase import Client, create_client

from src.config import settings
from src.processing.models import Agent, MeetingUpdate, Participant
from src.processing.steps import StepCheckpoint


def get_supabase_client() -> Client:
    """Create and return a Supabase client from settings."""
    return create_client(settings.supabase_url, settings.supabase_key)


class SupabaseMeetingStore:
    """Read/write access to the rows the processing job touches.

    Participants and agents are read-only; the meeting row is only ever
    updated, never inserted.
    """

    def __init__(
        self,
        client: Client,
        meetings_table: str = "meetings",
        participants_table: str = "users",
        agents_table: str = "agents",
    ) -> None:
        self.client = client
        self.meetings_table = meetings_table
        self.participants_table = participants_table
        self.agents_table = agents_table

    @classmethod
    def from_settings(cls, client: Client | None = None) -> SupabaseMeetingStore:
        return cls(
            client or get_supabase_client(),
            meetings_table=settings.meetings_table,
            participants_table=settings.participants_table,
            agents_table=settings.agents_table,
        )

    def _select_named(self, table: str, ids: list[str]) -> list[dict[str, Any]]:
        result = self.client.table(table).select("id, name").in_("id", ids).execute()
        return list(result.data or [])

    def fetch_participants(self, ids: list[str]) -> list[Participant]:
        """Return the human participants whose id is in *ids*."""
        return [
            Participant(id=str(row["id"]), name=row["name"])
            for row in self._select_named(self.participants_table, ids)
        ]

    def fetch_agents(self, ids: list[str]) -> list[Agent]:
        """Return the agents whose id is in *ids*."""
        return [
            Agent(id=str(row["id"]), name=row["name"])
            for row in self._select_named(self.agents_table, ids)
        ]

    def update_meeting(self, meeting_id: str, update: MeetingUpdate) -> None:
        """Set ``summary`` and ``status`` on a single meeting row."""
        (
            self.client.table(self.meetings_table)
            .update(update.model_dump(mode="json"))
            .eq("id", meeting_id)
            .execute()
        )


class SupabaseStepStore:
    """Durable step checkpoints keyed by ``(run_id, step_name)``."""

    def __init__(self, client: Client, table: str = "job_steps") -> None:
        self.client = client
        self.table = table

    @classmethod
    def from_settings(cls, client: Client | None = None) -> SupabaseStepStore:
        return cls(client or get_supabase_client(), table=settings.job_steps_table)

    def load(self, run_id: str, step_name: str) -> StepCheckpoint | None:
        result = (
            self.client.table(self.table)
            .select("output")
            .eq("run_id", run_id)
            .eq("step_name", step_name)
            .limit(1)
            .execute()
        )
        if not result.data:
            return None
        return StepCheckpoint(output=result.data[0]["output"])

    def save(self, run_id: str, step_name: str, output: Any) -> None:
        (
            self.client.table(self.table)
            .upsert(
                {"run_id": run_id, "step_name": step_name, "output": output},
                on_conflict="run_id,step_name",
            )
            .execute()
        )
