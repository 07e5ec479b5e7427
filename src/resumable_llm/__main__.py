import asyncio
import sys

from dotenv import load_dotenv
from loguru import logger

from resumable_llm.app_config import load_json_config, parse_app_config, resolve_runtime_env
from resumable_llm.chat_client import ChatCompletionClient
from resumable_llm.console import GenerationConsole
from resumable_llm.errors import StoreIOError
from resumable_llm.generator import ResumableGenerator
from resumable_llm.logging_config import setup_logging
from resumable_llm.store import SqliteCheckpointStore


async def main() -> None:
    load_dotenv()

    config = parse_app_config(load_json_config())

    log_descriptions = setup_logging(config)

    runtime_env = resolve_runtime_env()
    if not runtime_env.api_key:
        # Not fatal here: each call re-reads the variable and fails on its own.
        logger.warning(f"{runtime_env.api_key_env_var} is not set; generation calls will fail.")

    db_path = config.resolved_db_path()
    try:
        store = SqliteCheckpointStore(str(db_path))
    except StoreIOError as ex:
        logger.error(str(ex))
        sys.exit(1)

    client = ChatCompletionClient(
        endpoint=config.endpoint,
        model=config.model,
        max_tokens=config.max_tokens,
        timeout_seconds=config.request_timeout_seconds,
    )
    console = GenerationConsole(ResumableGenerator(store, client), store, config)

    print("resumable-llm (type 'exit' to quit, '/help' for commands)")
    print(f"Model: {config.model} (max_tokens per call: {config.max_tokens})")
    print(f"Checkpoints: {db_path}")
    print(f"Target: {config.target_tokens} tokens (max {config.max_resume_rounds} resume rounds)")
    if log_descriptions:
        print(f"Logging: {', '.join(log_descriptions)}")
    print()

    try:
        while True:
            try:
                user_input = input("you> ")
            except (EOFError, KeyboardInterrupt):
                break

            trimmed = user_input.strip()

            if trimmed in ("exit", "quit"):
                break

            if not trimmed:
                continue

            await console.handle(trimmed)
            print()
    finally:
        store.close()


def run() -> None:
    asyncio.run(main())


if __name__ == "__main__":
    run()
