from __future__ import annotations

import sys
from pathlib import Path
from typing import Any

from loguru import logger

from resumable_llm.app_config import AppConfig

LOG_FILE_NAME = "resumable_llm.log"
NO_REQUEST_ID = "-"

_CONSOLE_FORMAT = (
    "<level>{level:<8}</level> | <magenta>{extra[request_id]}</magenta> | <level>{message}</level>"
)
_FILE_FORMAT = (
    "{time:YYYY-MM-DD HH:mm:ss.SSS} | {level:<8} | {extra[request_id]} | "
    "{name}:{function}:{line} - {message}"
)

_DEFAULT_CONSUMERS: list[dict[str, Any]] = [
    {"type": "console"},
    {"type": "file"},
]


def default_log_path(config: AppConfig, base_dir: Path | None = None) -> Path:
    """Log file kept next to the checkpoint database."""
    return config.resolved_db_path(base_dir).parent / LOG_FILE_NAME


def _add_console(level: str) -> str:
    logger.add(sys.stderr, level=level, format=_CONSOLE_FORMAT)
    return f"console (stderr, {level})"


def _add_file(entry: dict[str, Any], level: str, default_path: Path) -> str:
    path = Path(entry["path"]) if entry.get("path") else default_path
    path.parent.mkdir(parents=True, exist_ok=True)
    logger.add(
        str(path),
        level=level,
        format=_FILE_FORMAT,
        rotation=entry.get("rotation", "5 MB"),
        retention=entry.get("retention", 3),
        encoding="utf-8",
    )
    return f"file ({path}, {level})"


def setup_logging(config: AppConfig, *, base_dir: Path | None = None) -> list[str]:
    """Install the sinks named by LogConsumers (console and file by default).

    Every record carries a request_id extra; the generator fills it in while a
    call or resume is in flight and it reads "-" otherwise. Returns one
    description per installed sink.
    """
    logger.remove()
    logger.configure(extra={"request_id": NO_REQUEST_ID})

    consumers = config.log_consumers if config.log_consumers is not None else _DEFAULT_CONSUMERS
    default_path = default_log_path(config, base_dir)

    descriptions: list[str] = []
    unknown: list[str] = []
    for entry in consumers:
        sink_type = entry.get("type", "")
        level = entry.get("level", config.log_level)
        if sink_type == "console":
            descriptions.append(_add_console(level))
        elif sink_type == "file":
            descriptions.append(_add_file(entry, level, default_path))
        else:
            unknown.append(sink_type)

    for sink_type in unknown:
        logger.warning(f"Unknown log consumer type: {sink_type!r}")

    return descriptions
