from __future__ import annotations

from collections.abc import Mapping
from typing import Any, Protocol, runtime_checkable

__all__ = ["Transport"]


@runtime_checkable
class Transport(Protocol):
    """Performs one Bot API call.

    Implementations own HTTP, encoding, retries and timeouts. They return
    the decoded ``result`` and raise (ideally a ``RequestError``) on failure.
    Parameter values are str, int, float, bool, builtins produced from
    markup structs, or opaque file objects; None values are never passed.
    """

    async def call(self, method: str, parameters: Mapping[str, Any]) -> Any: ...
