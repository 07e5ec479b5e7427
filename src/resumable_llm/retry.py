from __future__ import annotations

from collections.abc import Awaitable, Callable

from loguru import logger
from tenacity import retry, retry_if_exception_type, stop_after_attempt, wait_exponential

from resumable_llm.errors import TransportError
from resumable_llm.generator import ResumableGenerator
from resumable_llm.models import GenerationResult


def _on_retry(retry_state) -> None:
    attempt = retry_state.attempt_number
    wait = retry_state.next_action.sleep if retry_state.next_action else 0
    exc = retry_state.outcome.exception() if retry_state.outcome else None
    reason = type(exc).__name__ if exc else "Unknown"
    logger.warning(f"{reason}. Retrying resume in {wait:.0f}s (attempt {attempt})...")


def default_retry_kwargs(exception_types: tuple[type[Exception], ...], attempts: int) -> dict:
    return {
        "retry": retry_if_exception_type(exception_types),
        "wait": wait_exponential(multiplier=1, min=1, max=30),
        "stop": stop_after_attempt(attempts),
        "before_sleep": _on_retry,
        "reraise": True,
    }


def retrying_resume(
    generator: ResumableGenerator,
    attempts: int,
) -> Callable[..., Awaitable[GenerationResult]]:
    """Wrap generator.resume so transport failures are retried.

    Resume is safe to repeat until its checkpoint write, and the store is only
    written after a successful response, so a failed attempt leaves nothing
    behind. Remote and protocol errors are not retried.
    """

    @retry(**default_retry_kwargs((TransportError,), attempts))
    async def _resume(request_id: str, *, timeout: float | None = None) -> GenerationResult:
        return await generator.resume(request_id, timeout=timeout)

    return _resume
