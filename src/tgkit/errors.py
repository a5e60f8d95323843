"""Exception hierarchy shared by the parser, the resolvers and the queue."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

__all__ = [
    "ApiError",
    "BotError",
    "NetworkError",
    "RequestError",
    "ResolutionError",
    "UsageError",
    "ValidationError",
]


class BotError(Exception):
    pass


class ValidationError(BotError, ValueError):
    """A wire payload does not have the expected shape."""

    def __init__(self, message: str, *, path: str | None = None) -> None:
        super().__init__(f"{path}: {message}" if path else message)
        self.path = path
        self.reason = message


class ResolutionError(BotError, TypeError):
    """An identifier handed to a resolver has the wrong shape."""


class UsageError(BotError):
    pass


class RequestError(BotError):
    """Failure of an outbound call, raised by transports."""

    def __init__(
        self,
        message: str,
        *,
        method: str | None = None,
        parameters: Mapping[str, Any] | None = None,
    ) -> None:
        super().__init__(message)
        self.method = method
        self.parameters = dict(parameters) if parameters is not None else None


class NetworkError(RequestError):
    pass


class ApiError(RequestError):
    def __init__(
        self,
        description: str,
        *,
        error_code: int | None = None,
        retry_after: float | None = None,
        method: str | None = None,
        parameters: Mapping[str, Any] | None = None,
    ) -> None:
        super().__init__(description, method=method, parameters=parameters)
        self.description = description
        self.error_code = error_code
        self.retry_after = retry_after
