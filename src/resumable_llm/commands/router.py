from __future__ import annotations

from collections.abc import Awaitable, Callable


class CommandRouter:
    def __init__(
        self,
        *,
        on_help: Callable[[], Awaitable[None]],
        on_resume: Callable[[str], Awaitable[None]],
        on_checkpoint: Callable[[str], Awaitable[None]],
        on_unknown: Callable[[str], None],
    ) -> None:
        self._on_help = on_help
        self._on_resume = on_resume
        self._on_checkpoint = on_checkpoint
        self._on_unknown = on_unknown

    async def try_handle(self, user_message: str) -> bool:
        trimmed = user_message.strip()
        if not trimmed.startswith("/"):
            return False

        if trimmed == "/help":
            await self._on_help()
            return True
        if trimmed.startswith("/resume"):
            await self._on_resume(trimmed)
            return True
        if trimmed.startswith("/checkpoint"):
            await self._on_checkpoint(trimmed)
            return True

        self._on_unknown(trimmed)
        return True
