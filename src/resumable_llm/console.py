from __future__ import annotations

from loguru import logger

from resumable_llm.app_config import AppConfig
from resumable_llm.commands.router import CommandRouter
from resumable_llm.errors import ResumableLLMError, StoreIOError
from resumable_llm.generator import ResumableGenerator
from resumable_llm.models import GenerationResult
from resumable_llm.retry import retrying_resume
from resumable_llm.store import SqliteCheckpointStore

_PREVIEW_CHARS = 60


def _preview(text: str) -> str:
    flat = " ".join(text.split())
    if len(flat) <= _PREVIEW_CHARS:
        return flat
    return flat[: _PREVIEW_CHARS - 3] + "..."


class GenerationConsole:
    """Line-oriented front end over ResumableGenerator."""

    def __init__(
        self,
        generator: ResumableGenerator,
        store: SqliteCheckpointStore,
        config: AppConfig,
        *,
        line_prefix: str = "gen> ",
    ):
        self._generator = generator
        self._store = store
        self._config = config
        self._line_prefix = line_prefix
        self._resume = retrying_resume(generator, config.resume_retry_attempts)
        self._router = CommandRouter(
            on_help=self._print_help,
            on_resume=self._handle_resume_command,
            on_checkpoint=self._handle_checkpoint_command,
            on_unknown=self._handle_unknown_command,
        )

    async def handle(self, user_input: str) -> None:
        try:
            if await self._router.try_handle(user_input):
                return
            await self.generate(user_input.strip())
        except StoreIOError as ex:
            if ex.request_id:
                print(f"{self._line_prefix}Error: {ex} (request id: {ex.request_id})")
            else:
                print(f"{self._line_prefix}Error: {ex}")
        except ResumableLLMError as ex:
            logger.debug(f"{type(ex).__name__}: {ex}")
            print(f"{self._line_prefix}Error: {ex}")

    async def generate(self, prompt: str) -> GenerationResult:
        result = await self._generator.call(prompt, timeout=self._config.request_timeout_seconds)
        print(f"{self._line_prefix}Request ID: {result.request_id}")
        print(f"{self._line_prefix}Response: {result.response}")
        print(f"{self._line_prefix}Tokens: {len(result.tokens)}")
        return await self._extend(result, self._config.target_tokens)

    async def _extend(self, result: GenerationResult, target_tokens: int) -> GenerationResult:
        final = await self._generator.extend_until(
            result,
            target_tokens,
            max_rounds=self._config.max_resume_rounds,
            timeout=self._config.request_timeout_seconds,
            on_round=self._print_round,
            resume=self._resume,
        )
        print(f"{self._line_prefix}Final ({len(final.tokens)} tokens, target {target_tokens}): {final.response}")
        return final

    def _print_round(self, round_number: int, previous: GenerationResult, current: GenerationResult) -> None:
        added = len(current.tokens) - len(previous.tokens)
        print(f"{self._line_prefix}[{round_number}] +{added} tokens, total {len(current.tokens)}")

    async def _print_help(self) -> None:
        print(f"{self._line_prefix}Commands:")
        print(f"{self._line_prefix}  <prompt>                   start a new generation")
        print(f"{self._line_prefix}  /resume <id> [target]      run one resume, then continue to target")
        print(f"{self._line_prefix}  /checkpoint show <id>      show a stored checkpoint")
        print(f"{self._line_prefix}  /checkpoint list [limit]   list recent checkpoints")
        print(f"{self._line_prefix}  exit | quit                leave")

    async def _handle_resume_command(self, command: str) -> None:
        parts = command.split()
        if len(parts) < 2 or len(parts) > 3:
            print(f"{self._line_prefix}Usage: /resume <id> [target]")
            return
        request_id = parts[1]
        target_tokens = self._config.target_tokens
        if len(parts) == 3:
            try:
                target_tokens = int(parts[2])
            except ValueError:
                print(f"{self._line_prefix}Target must be an integer: {parts[2]}")
                return

        current = await self._resume(request_id, timeout=self._config.request_timeout_seconds)
        print(f"{self._line_prefix}Resumed {request_id}: {len(current.tokens)} tokens")
        await self._extend(current, target_tokens)

    async def _handle_checkpoint_command(self, command: str) -> None:
        parts = command.split()
        sub = parts[1] if len(parts) > 1 else ""
        if sub == "show" and len(parts) == 3:
            checkpoint = self._store.load_by_id(parts[2])
            print(f"{self._line_prefix}Request ID: {checkpoint.request_id}")
            print(f"{self._line_prefix}Updated: {checkpoint.updated_at}")
            print(f"{self._line_prefix}Initial Prompt: {checkpoint.initial_prompt}")
            print(f"{self._line_prefix}Tokens So Far: {checkpoint.tokens_so_far}")
            return
        if sub == "list" and len(parts) <= 3:
            limit = 20
            if len(parts) == 3:
                try:
                    limit = int(parts[2])
                except ValueError:
                    limit = 0
                if limit < 1:
                    print(f"{self._line_prefix}Limit must be a positive integer: {parts[2]}")
                    return
            checkpoints = self._store.list_checkpoints(limit=limit)
            if not checkpoints:
                print(f"{self._line_prefix}No checkpoints.")
                return
            for cp in checkpoints:
                print(
                    f"{self._line_prefix}- {cp.request_id} (updated={cp.updated_at}, "
                    f'prompt="{_preview(cp.initial_prompt)}")'
                )
            return
        print(f"{self._line_prefix}Usage: /checkpoint show <id> | /checkpoint list [limit]")

    def _handle_unknown_command(self, command: str) -> None:
        print(f"{self._line_prefix}Unknown command: {command} (try /help)")
