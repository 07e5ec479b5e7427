import sqlite3
from unittest.mock import patch

from resumable_llm.errors import CheckpointNotFoundError, StoreIOError
from resumable_llm.models import Checkpoint
from resumable_llm.store import CheckpointStore, SqliteCheckpointStore
from tests.support import CheckpointStoreTestCase


class SqliteCheckpointStoreTests(CheckpointStoreTestCase):
    def test_conforms_to_checkpoint_store_protocol(self) -> None:
        self.assertIsInstance(self._store, CheckpointStore)

    def test_save_then_load_round_trips(self) -> None:
        self._store.save(Checkpoint("a" * 32, "Explain photosynthesis.", "Photosynthesis is"))

        loaded = self._store.load_by_id("a" * 32)

        self.assertEqual("a" * 32, loaded.request_id)
        self.assertEqual("Explain photosynthesis.", loaded.initial_prompt)
        self.assertEqual("Photosynthesis is", loaded.tokens_so_far)
        self.assertIsNotNone(loaded.created_at)
        self.assertIsNotNone(loaded.updated_at)

    def test_save_replaces_existing_record(self) -> None:
        self._store.save(Checkpoint("b" * 32, "prompt", "first"))
        created_at = self._store.load_by_id("b" * 32).created_at

        self._store.save(Checkpoint("b" * 32, "prompt", "first second"))

        loaded = self._store.load_by_id("b" * 32)
        self.assertEqual("first second", loaded.tokens_so_far)
        self.assertEqual(created_at, loaded.created_at)
        count = self._store._conn.execute("SELECT COUNT(*) FROM checkpoints").fetchone()[0]
        self.assertEqual(1, count)

    def test_load_unknown_id_raises_not_found(self) -> None:
        with self.assertRaises(CheckpointNotFoundError) as ctx:
            self._store.load_by_id("0" * 32)
        self.assertEqual("0" * 32, ctx.exception.request_id)

    def test_checkpoint_survives_reopen(self) -> None:
        self._store.save(Checkpoint("c" * 32, "prompt", "persisted text"))
        self._store.close()

        self._store = SqliteCheckpointStore(self._db_path)

        self.assertEqual("persisted text", self._store.load_by_id("c" * 32).tokens_so_far)

    def test_arbitrary_unicode_round_trips(self) -> None:
        prompt = "Erkläre 光合作用 \U0001F331\n\ttabs & 'quotes' \"double\""
        text = "Ünïcödé — 続き… ​ zero width"
        self._store.save(Checkpoint("d" * 32, prompt, text))

        loaded = self._store.load_by_id("d" * 32)

        self.assertEqual(prompt, loaded.initial_prompt)
        self.assertEqual(text, loaded.tokens_so_far)

    def test_list_checkpoints_respects_limit(self) -> None:
        for i in range(3):
            self._store.save(Checkpoint(f"{i:032x}", f"prompt {i}", "text"))

        self.assertEqual(2, len(self._store.list_checkpoints(limit=2)))
        self.assertEqual(3, len(self._store.list_checkpoints()))

    def test_list_orders_same_second_saves_newest_first(self) -> None:
        ids = [f"{i:032x}" for i in range(4)]
        with patch("resumable_llm.store.sqlite_store.utc_now", return_value="2026-10-19T12:00:00+00:00"):
            for rid in ids:
                self._store.save(Checkpoint(rid, "prompt", "text"))

        listed = [cp.request_id for cp in self._store.list_checkpoints()]

        self.assertEqual(list(reversed(ids)), listed)

    def test_list_rejects_limit_below_one(self) -> None:
        with self.assertRaises(ValueError):
            self._store.list_checkpoints(limit=0)

    def test_save_failure_raises_store_io_error(self) -> None:
        self._store._conn.execute("DROP TABLE checkpoints")

        with self.assertRaises(StoreIOError) as ctx:
            self._store.save(Checkpoint("e" * 32, "prompt", "text"))
        self.assertEqual("e" * 32, ctx.exception.request_id)
        self.assertIsInstance(ctx.exception.__cause__, sqlite3.Error)

    def test_load_failure_raises_store_io_error(self) -> None:
        self._store._conn.execute("DROP TABLE checkpoints")

        with self.assertRaises(StoreIOError):
            self._store.load_by_id("e" * 32)

    def test_open_failure_raises_store_io_error(self) -> None:
        blocker = self._tmp_dir / "not-a-dir"
        blocker.write_text("x", encoding="utf-8")

        with self.assertRaises(StoreIOError):
            SqliteCheckpointStore(str(blocker / "checkpoints.db"))
