from __future__ import annotations

import json
import os
from dataclasses import dataclass
from pathlib import Path

from resumable_llm.chat_client import (
    DEFAULT_ENDPOINT,
    DEFAULT_MAX_TOKENS,
    DEFAULT_MODEL,
    DEFAULT_TIMEOUT_SECONDS,
)
from resumable_llm.generator import API_KEY_ENV_VAR


@dataclass
class RuntimeEnv:
    api_key: str
    api_key_env_var: str


@dataclass
class AppConfig:
    endpoint: str
    model: str
    max_tokens: int
    request_timeout_seconds: float
    checkpoint_db_path: str
    target_tokens: int
    max_resume_rounds: int
    resume_retry_attempts: int
    log_level: str
    log_consumers: list | None

    def resolved_db_path(self, base_dir: Path | None = None) -> Path:
        db_path = Path(self.checkpoint_db_path)
        if not db_path.is_absolute():
            db_path = (base_dir or Path.cwd()) / db_path
        return db_path


def load_json_config(config_path: Path | None = None) -> dict:
    config_path = config_path or Path.cwd() / "config.json"
    if config_path.exists():
        with open(config_path, encoding="utf-8") as f:
            return json.load(f)
    return {}


def parse_app_config(config: dict) -> AppConfig:
    return AppConfig(
        endpoint=str(config.get("Endpoint", DEFAULT_ENDPOINT)).strip(),
        model=str(config.get("Model", DEFAULT_MODEL)).strip(),
        max_tokens=max(1, int(config.get("MaxTokens", DEFAULT_MAX_TOKENS))),
        request_timeout_seconds=float(config.get("RequestTimeoutSeconds", DEFAULT_TIMEOUT_SECONDS)),
        checkpoint_db_path=str(config.get("CheckpointDbPath", ".resumable_llm/checkpoints.db")),
        target_tokens=int(config.get("TargetTokens", 50)),
        max_resume_rounds=int(config.get("MaxResumeRounds", 100)),
        resume_retry_attempts=max(1, int(config.get("ResumeRetryAttempts", 3))),
        log_level=config.get("LogLevel", "INFO"),
        log_consumers=config.get("LogConsumers"),
    )


def resolve_runtime_env() -> RuntimeEnv:
    return RuntimeEnv(
        api_key=os.environ.get(API_KEY_ENV_VAR, ""),
        api_key_env_var=API_KEY_ENV_VAR,
    )
