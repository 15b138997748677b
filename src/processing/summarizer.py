"""LLM-powered meeting summarization."""

from __future__ import annotations

import json
import logging
from collections.abc import Sequence
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from anthropic import AsyncAnthropic
from anthropic.types import TextBlock
from openai import AsyncOpenAI

from src.pipeline_config import SummaryProvider
from src.processing.errors import SummarizationError
from src.processing.models import EnrichedTranscriptEvent

if TYPE_CHECKING:
    from src.config import Settings

logger = logging.getLogger(__name__)

SUMMARY_PROMPT = """\
You are an expert summarizer. You write readable, concise, simple content. \
You are given a transcript of a meeting and you need to summarize it.

Use the following markdown structure for every output:

### Overview
Provide a detailed, engaging summary of the session's content. Focus on major \
features, user workflows, and any key takeaways. Write in a narrative style, \
using full sentences. Highlight unique or powerful aspects of the product, \
platform, or discussion.

### Notes
Break down key content into thematic sections with timestamp ranges. Each \
section should summarize key points, actions, or demos in bullet format.

Example:
#### Section Name
- Main point or demo shown here
- Another key insight or interaction
- Follow-up tool or explanation provided

#### Next Section
- Feature X automatically does Y
- Mention of integration with Z"""

USER_PROMPT_PREFIX = "Summarize the following transcript: "


@dataclass(frozen=True)
class SummarizerConfig:
    """Everything the summarizer needs to reach its provider."""

    provider: SummaryProvider = SummaryProvider.ANTHROPIC
    model: str = "claude-sonnet-4-20250514"
    api_key: str = ""
    max_tokens: int = 4096

    @classmethod
    def from_settings(cls, settings: Settings) -> SummarizerConfig:
        provider = SummaryProvider(settings.summary_provider)
        if provider is SummaryProvider.OPENAI:
            return cls(
                provider=provider,
                model=settings.openai_summary_model,
                api_key=settings.openai_api_key,
                max_tokens=settings.summary_max_tokens,
            )
        return cls(
            provider=provider,
            model=settings.llm_model,
            api_key=settings.anthropic_api_key,
            max_tokens=settings.summary_max_tokens,
        )


def build_user_prompt(events: Sequence[EnrichedTranscriptEvent]) -> str:
    """Serialize the enriched transcript into the single user prompt body."""
    payload = [event.model_dump(mode="json") for event in events]
    return USER_PROMPT_PREFIX + json.dumps(payload)


class Summarizer:
    """Single request/response summarization against one provider.

    SDK-level retries are disabled: a failed call is classified by the
    caller and never repeated here.
    """

    def __init__(self, config: SummarizerConfig) -> None:
        self.config = config
        self._client: Any
        if config.provider is SummaryProvider.OPENAI:
            self._client = AsyncOpenAI(api_key=config.api_key, max_retries=0)
        else:
            self._client = AsyncAnthropic(api_key=config.api_key, max_retries=0)

    async def summarize(self, events: Sequence[EnrichedTranscriptEvent]) -> str:
        """Return the agent's first text output for *events*.

        Raises:
            SummarizationError: On provider rejection, transport failure or
                output without text.  The original exception is kept in
                ``cause``.
        """
        prompt = build_user_prompt(events)
        try:
            if self.config.provider is SummaryProvider.OPENAI:
                text = await self._complete_openai(prompt)
            else:
                text = await self._complete_anthropic(prompt)
        except SummarizationError:
            raise
        except Exception as exc:
            raise SummarizationError(f"Summarization request failed: {exc}", exc) from exc

        logger.info(
            "Summarized %d transcript events with %s (%d chars)",
            len(events),
            self.config.model,
            len(text),
        )
        return text

    async def _complete_anthropic(self, prompt: str) -> str:
        response = await self._client.messages.create(
            model=self.config.model,
            max_tokens=self.config.max_tokens,
            system=SUMMARY_PROMPT,
            messages=[{"role": "user", "content": prompt}],
        )
        if not response.content:
            raise SummarizationError("Claude returned no content blocks")
        # We only request plain text, so the first block should be a TextBlock.
        block = response.content[0]
        if not isinstance(block, TextBlock):
            raise SummarizationError(f"Expected TextBlock from Claude, got {type(block).__name__}")
        return block.text

    async def _complete_openai(self, prompt: str) -> str:
        response = await self._client.chat.completions.create(
            model=self.config.model,
            max_tokens=self.config.max_tokens,
            messages=[
                {"role": "system", "content": SUMMARY_PROMPT},
                {"role": "user", "content": prompt},
            ],
        )
        if not response.choices or not response.choices[0].message.content:
            raise SummarizationError("OpenAI returned no text content")
        return str(response.choices[0].message.content)
