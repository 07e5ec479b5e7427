from __future__ import annotations

import sqlite3
from pathlib import Path

from resumable_llm.errors import CheckpointNotFoundError, StoreIOError
from resumable_llm.models import Checkpoint
from resumable_llm.store.base import utc_now


class SqliteCheckpointStore:
    def __init__(self, db_path: str):
        self._db_path = Path(db_path)
        try:
            self._db_path.parent.mkdir(parents=True, exist_ok=True)
            self._conn = sqlite3.connect(self._db_path, check_same_thread=False)
            self._conn.row_factory = sqlite3.Row
            self._initialize_schema()
        except (OSError, sqlite3.Error) as ex:
            raise StoreIOError(f"Failed to open checkpoint store {self._db_path}: {ex}") from ex

    @property
    def db_path(self) -> Path:
        return self._db_path

    def close(self) -> None:
        self._conn.close()

    def save(self, checkpoint: Checkpoint) -> None:
        now = utc_now()
        try:
            self._conn.execute(
                """
                INSERT INTO checkpoints (request_id, initial_prompt, tokens_so_far, created_at, updated_at)
                VALUES (?, ?, ?, ?, ?)
                ON CONFLICT(request_id) DO UPDATE SET
                    initial_prompt = excluded.initial_prompt,
                    tokens_so_far = excluded.tokens_so_far,
                    updated_at = excluded.updated_at
                """,
                (checkpoint.request_id, checkpoint.initial_prompt, checkpoint.tokens_so_far, now, now),
            )
            self._conn.commit()
        except sqlite3.Error as ex:
            self._rollback_quietly()
            raise StoreIOError(
                f"Failed to save checkpoint {checkpoint.request_id}: {ex}",
                request_id=checkpoint.request_id,
            ) from ex

    def load_by_id(self, request_id: str) -> Checkpoint:
        try:
            row = self._conn.execute(
                """
                SELECT request_id, initial_prompt, tokens_so_far, created_at, updated_at
                FROM checkpoints
                WHERE request_id = ?
                LIMIT 1
                """,
                (request_id,),
            ).fetchone()
        except sqlite3.Error as ex:
            raise StoreIOError(
                f"Failed to load checkpoint {request_id}: {ex}",
                request_id=request_id,
            ) from ex
        if row is None:
            raise CheckpointNotFoundError(request_id)
        return self._to_checkpoint(row)

    def list_checkpoints(self, *, limit: int = 20) -> list[Checkpoint]:
        if limit < 1:
            raise ValueError(f"limit must be at least 1, got {limit}")
        try:
            rows = self._conn.execute(
                """
                SELECT request_id, initial_prompt, tokens_so_far, created_at, updated_at
                FROM checkpoints
                ORDER BY updated_at DESC, created_at DESC, rowid DESC
                LIMIT ?
                """,
                (limit,),
            ).fetchall()
        except sqlite3.Error as ex:
            raise StoreIOError(f"Failed to list checkpoints: {ex}") from ex
        return [self._to_checkpoint(row) for row in rows]

    def _rollback_quietly(self) -> None:
        try:
            self._conn.rollback()
        except sqlite3.Error:
            pass

    @staticmethod
    def _to_checkpoint(row: sqlite3.Row) -> Checkpoint:
        return Checkpoint(
            request_id=str(row["request_id"]),
            initial_prompt=str(row["initial_prompt"]),
            tokens_so_far=str(row["tokens_so_far"]),
            created_at=str(row["created_at"]),
            updated_at=str(row["updated_at"]),
        )

    def _initialize_schema(self) -> None:
        self._conn.executescript(
            """
            CREATE TABLE IF NOT EXISTS checkpoints (
                request_id TEXT PRIMARY KEY,
                initial_prompt TEXT NOT NULL,
                tokens_so_far TEXT NOT NULL,
                created_at TEXT NOT NULL,
                updated_at TEXT NOT NULL
            );

            CREATE INDEX IF NOT EXISTS idx_checkpoints_updated
                ON checkpoints(updated_at);
            """
        )
        self._conn.commit()
