from __future__ import annotations

from collections.abc import Callable, Iterator
from typing import Any

from .model import Chat, Message, resolve_chat

__all__ = ["ContextStore"]


def _chat_key(target: Message | Chat | int) -> int:
    if isinstance(target, Message):
        return target.chat.id
    return resolve_chat(target)


class ContextStore:
    """Per-conversation state that survives between updates.

    Entries are created on first access with ``initial(chat_id)``.
    """

    def __init__(self, initial: Callable[[int], Any] | None = None) -> None:
        self._initial = initial if initial is not None else (lambda _chat_id: {})
        self._contexts: dict[int, Any] = {}

    def get(self, target: Message | Chat | int) -> Any:
        key = _chat_key(target)
        try:
            return self._contexts[key]
        except KeyError:
            context = self._contexts[key] = self._initial(key)
            return context

    def discard(self, target: Message | Chat | int) -> None:
        self._contexts.pop(_chat_key(target), None)

    def __contains__(self, target: object) -> bool:
        if not isinstance(target, (Message, Chat, int)) or isinstance(target, bool):
            return False
        return _chat_key(target) in self._contexts

    def __len__(self) -> int:
        return len(self._contexts)

    def __iter__(self) -> Iterator[int]:
        return iter(self._contexts)
