"""Run (or replay) the post-meeting processing job for a single meeting."""

import argparse
import asyncio
import logging
import sys
from pathlib import Path

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from src.processing.models import ProcessMeetingEvent
from src.processing.pipeline import run_processing_job


def main() -> int:
    parser = argparse.ArgumentParser()
    parser.add_argument("--meeting-id", required=True)
    parser.add_argument("--transcript-url", required=True)
    parser.add_argument(
        "--event-id",
        default=None,
        help="Checkpoint key; reuse it to resume a previous run",
    )
    args = parser.parse_args()

    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(name)s %(levelname)s %(message)s")

    event = ProcessMeetingEvent(
        meeting_id=args.meeting_id,
        transcript_url=args.transcript_url,
        event_id=args.event_id,
    )
    result = asyncio.run(run_processing_job(event))

    print(f"Run {result.run_id}: meeting {result.meeting_id} -> {result.update.status.value}")
    print(f"Outcome: {result.outcome.kind}")
    print(f"Summary: {result.update.summary[:200]}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
