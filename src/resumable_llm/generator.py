from __future__ import annotations

import os
import secrets
from collections.abc import Awaitable, Callable

from loguru import logger

from resumable_llm.chat_client import ChatCompletionClient
from resumable_llm.errors import AuthMissingError, StoreIOError
from resumable_llm.models import ChatMessage, Checkpoint, GenerationResult
from resumable_llm.store.base import CheckpointStore
from resumable_llm.tokenizer import tokenize

API_KEY_ENV_VAR = "HUGGINGFACE_API_KEY"

CONTINUATION_INSTRUCTION = (
    "Continue from where you left off. Do not repeat any text. Start with the very next token/word."
)


def new_request_id() -> str:
    """Mint a 128-bit random request id rendered as 32 lowercase hex characters."""
    return secrets.token_bytes(16).hex()


def build_continuation_messages(checkpoint: Checkpoint) -> list[ChatMessage]:
    return [
        ChatMessage("user", checkpoint.initial_prompt),
        ChatMessage("assistant", checkpoint.tokens_so_far),
        ChatMessage("user", CONTINUATION_INSTRUCTION),
    ]


def _api_key_from_env() -> str:
    return os.environ.get(API_KEY_ENV_VAR, "")


class ResumableGenerator:
    """Builds long completions out of short bounded calls to a stateless chat endpoint.

    The endpoint keeps no session, so every resume replays the original prompt
    and the text generated so far as an assistant turn, followed by a fixed
    instruction to continue. The checkpoint store is written exactly once per
    operation, after the remote call has succeeded.
    """

    def __init__(
        self,
        store: CheckpointStore,
        client: ChatCompletionClient | None = None,
        *,
        api_key_provider: Callable[[], str] = _api_key_from_env,
    ):
        self._store = store
        self._client = client or ChatCompletionClient()
        self._api_key_provider = api_key_provider

    async def call(self, prompt: str, *, timeout: float | None = None) -> GenerationResult:
        api_key = self._require_api_key()
        request_id = new_request_id()

        with logger.contextualize(request_id=request_id):
            response_text = await self._client.complete(
                api_key,
                [ChatMessage("user", prompt)],
                timeout=timeout,
            )

        self._save(Checkpoint(request_id=request_id, initial_prompt=prompt, tokens_so_far=response_text))
        return GenerationResult(request_id=request_id, response=response_text, tokens=tokenize(response_text))

    async def resume(self, request_id: str, *, timeout: float | None = None) -> GenerationResult:
        api_key = self._require_api_key()
        checkpoint = self._store.load_by_id(request_id)

        with logger.contextualize(request_id=request_id):
            new_text = await self._client.complete(
                api_key,
                build_continuation_messages(checkpoint),
                timeout=timeout,
            )

        # Joiner is unconditional, even when new_text already starts with whitespace or punctuation.
        full_response = checkpoint.tokens_so_far + " " + new_text
        self._save(
            Checkpoint(
                request_id=request_id,
                initial_prompt=checkpoint.initial_prompt,
                tokens_so_far=full_response,
            )
        )
        return GenerationResult(request_id=request_id, response=full_response, tokens=tokenize(full_response))

    async def extend_until(
        self,
        result: GenerationResult,
        target_tokens: int,
        *,
        max_rounds: int | None = None,
        timeout: float | None = None,
        on_round: Callable[[int, GenerationResult, GenerationResult], None] | None = None,
        resume: Callable[..., Awaitable[GenerationResult]] | None = None,
    ) -> GenerationResult:
        """Resume repeatedly until the local token count reaches target_tokens.

        Stops early after max_rounds resumes, or when a round adds no local
        tokens. on_round receives (round_number, previous, current).
        resume overrides self.resume, e.g. with a retrying wrapper.
        """
        resume_fn = resume or self.resume
        current = result
        rounds = 0
        while len(current.tokens) < target_tokens:
            if max_rounds is not None and rounds >= max_rounds:
                break
            rounds += 1
            nxt = await resume_fn(current.request_id, timeout=timeout)
            if on_round is not None:
                on_round(rounds, current, nxt)
            stalled = len(nxt.tokens) <= len(current.tokens)
            current = nxt
            if stalled:
                break
        return current

    def _require_api_key(self) -> str:
        api_key = self._api_key_provider()
        if not api_key:
            raise AuthMissingError(API_KEY_ENV_VAR)
        return api_key

    def _save(self, checkpoint: Checkpoint) -> None:
        try:
            self._store.save(checkpoint)
        except StoreIOError as ex:
            if ex.request_id is None:
                ex.request_id = checkpoint.request_id
            raise
