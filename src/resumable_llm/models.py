from __future__ import annotations

from dataclasses import dataclass, field

CHAT_ROLES = ("user", "assistant")


@dataclass(frozen=True)
class ChatMessage:
    role: str
    content: str

    def __post_init__(self) -> None:
        if self.role not in CHAT_ROLES:
            raise ValueError(f"Unsupported chat role: {self.role!r}")

    def to_dict(self) -> dict[str, str]:
        return {"role": self.role, "content": self.content}


@dataclass(frozen=True)
class Checkpoint:
    request_id: str
    initial_prompt: str
    tokens_so_far: str
    created_at: str | None = None
    updated_at: str | None = None


@dataclass(frozen=True)
class GenerationResult:
    request_id: str
    response: str
    tokens: list[str] = field(default_factory=list)
