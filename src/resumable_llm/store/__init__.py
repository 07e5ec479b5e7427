from resumable_llm.store.base import CheckpointStore, utc_now
from resumable_llm.store.sqlite_store import SqliteCheckpointStore

__all__ = [
    "CheckpointStore",
    "SqliteCheckpointStore",
    "utc_now",
]
