from __future__ import annotations


class ResumableLLMError(Exception):
    """Base class for every error raised by the generation driver."""


class AuthMissingError(ResumableLLMError):
    def __init__(self, env_var: str):
        super().__init__(f"{env_var} environment variable not set")
        self.env_var = env_var


class TransportError(ResumableLLMError):
    """The request could not be sent or the response could not be received."""


class RemoteError(ResumableLLMError):
    def __init__(self, status_code: int, body: str):
        super().__init__(f"API error (status {status_code}): {body}")
        self.status_code = status_code
        self.body = body


class ProtocolError(ResumableLLMError):
    """The response body was not a well-formed chat completion."""


class CheckpointNotFoundError(ResumableLLMError):
    def __init__(self, request_id: str):
        super().__init__(f"Checkpoint does not exist: {request_id}")
        self.request_id = request_id


class StoreIOError(ResumableLLMError):
    def __init__(self, message: str, *, request_id: str | None = None):
        super().__init__(message)
        self.request_id = request_id
