import json
import shutil
import unittest
from pathlib import Path
from uuid import uuid4

import httpx

from resumable_llm.chat_client import ChatCompletionClient
from resumable_llm.errors import CheckpointNotFoundError
from resumable_llm.models import Checkpoint
from resumable_llm.store import SqliteCheckpointStore

PROJECT_ROOT = Path(__file__).resolve().parents[1]
TEST_ENDPOINT = "https://llm.test/v1/chat/completions"


def completion_body(content: object) -> dict:
    return {"choices": [{"message": {"role": "assistant", "content": content}}]}


class ScriptedRemote:
    """Mock chat endpoint that replies with scripted responses in order."""

    def __init__(self, *replies: httpx.Response | str):
        self._replies = list(replies)
        self.requests: list[httpx.Request] = []

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if not self._replies:
            raise AssertionError("unexpected request to scripted remote")
        reply = self._replies.pop(0)
        if isinstance(reply, str):
            return httpx.Response(200, json=completion_body(reply))
        return reply

    def request_json(self, index: int) -> dict:
        return json.loads(self.requests[index].content)

    def client(self, **kwargs) -> ChatCompletionClient:
        return ChatCompletionClient(
            endpoint=TEST_ENDPOINT,
            transport=httpx.MockTransport(self.handler),
            **kwargs,
        )


class RecordingStore:
    """In-memory store that records every call made against it."""

    def __init__(self) -> None:
        self.records: dict[str, Checkpoint] = {}
        self.calls: list[str] = []

    def save(self, checkpoint: Checkpoint) -> None:
        self.calls.append("save")
        self.records[checkpoint.request_id] = checkpoint

    def load_by_id(self, request_id: str) -> Checkpoint:
        self.calls.append("load_by_id")
        if request_id not in self.records:
            raise CheckpointNotFoundError(request_id)
        return self.records[request_id]


class CheckpointStoreTestCase(unittest.TestCase):
    def setUp(self) -> None:
        self._tmp_dir = PROJECT_ROOT / ".test-artifacts" / f"{self.__class__.__name__.lower()}-{uuid4().hex}"
        self._tmp_dir.mkdir(parents=True, exist_ok=True)
        self._db_path = str(self._tmp_dir / "checkpoints.db")
        self._store = SqliteCheckpointStore(self._db_path)

    def tearDown(self) -> None:
        self._store.close()
        shutil.rmtree(self._tmp_dir, ignore_errors=True)
