from __future__ import annotations

from datetime import UTC, datetime
from typing import Protocol, runtime_checkable

from resumable_llm.models import Checkpoint


def utc_now() -> str:
    return datetime.now(UTC).isoformat(timespec="seconds")


@runtime_checkable
class CheckpointStore(Protocol):
    def save(self, checkpoint: Checkpoint) -> None:
        """Persist a checkpoint, replacing any record with the same request id."""
        ...

    def load_by_id(self, request_id: str) -> Checkpoint:
        """Return the most recently saved checkpoint for request_id.

        Raises CheckpointNotFoundError if nothing was ever saved under it.
        """
        ...
