"""Handler chains.

A handler receives the event and a ``next`` continuation. Awaiting
``next()`` runs the rest of the chain; returning without it stops
dispatch for this update. Commands and callback queries pass through
their own chain first and fall through to the general chain.
"""

from __future__ import annotations

import fnmatch
import re
from collections.abc import Awaitable, Callable
from functools import partial
from typing import Any, Generic, TypeVar

from .logging import get_logger
from .model import CallbackQuery, Message, Update
from .reply import ReplyQueue
from .text import match_command

logger = get_logger(__name__)

__all__ = [
    "Answer",
    "CallbackHandler",
    "Dispatcher",
    "HandlerChain",
    "MessageHandler",
    "Next",
    "UpdateHandler",
]

E = TypeVar("E")

Next = Callable[[], Awaitable[None]]
Handler = Callable[[E, Next], Awaitable[None]]
UpdateHandler = Callable[[Update, Next], Awaitable[None]]
MessageHandler = Callable[[Message, ReplyQueue, Next], Awaitable[None]]
Answer = Callable[..., Awaitable[Any]]
CallbackHandler = Callable[[CallbackQuery, Answer, Next], Awaitable[None]]
MessageFilter = Callable[[Message], bool]

_NEW_MESSAGE_KINDS = frozenset({"message", "channel_post"})
_EDITED_MESSAGE_KINDS = frozenset({"edited_message", "edited_channel_post"})


async def _stop() -> None:
    return None


class HandlerChain(Generic[E]):
    def __init__(self) -> None:
        self.handlers: list[Handler[E]] = []

    def __len__(self) -> int:
        return len(self.handlers)

    def append(self, handler: Handler[E]) -> Handler[E]:
        self.handlers.append(handler)
        return handler

    async def run(self, event: E, terminal: Next = _stop) -> None:
        """Run handlers in order; ``terminal`` runs if every handler continues."""
        handlers = tuple(self.handlers)

        async def call(index: int) -> None:
            if index < len(handlers):
                await handlers[index](event, _once(partial(call, index + 1), index))
            else:
                await terminal()

        await call(0)


def _once(proceed: Next, index: int) -> Next:
    called = False

    async def next_() -> None:
        nonlocal called
        if called:
            logger.warning("dispatch.next.repeated", handler_index=index)
            return
        called = True
        await proceed()

    return next_


def _match_filename(filename: str | None, patterns: tuple[str | re.Pattern[str], ...]) -> bool:
    if not patterns:
        return True
    if filename is None:
        return False
    for pattern in patterns:
        if isinstance(pattern, re.Pattern):
            if pattern.search(filename):
                return True
        elif fnmatch.fnmatchcase(filename.lower(), pattern.lower()):
            return True
    return False


class Dispatcher:
    """Registration surface and routing for inbound updates.

    ``reply_for`` builds the reply queue handed to message handlers and
    ``answer_for`` the acknowledgement callable handed to callback handlers.
    """

    def __init__(
        self,
        *,
        reply_for: Callable[[Message], ReplyQueue],
        answer_for: Callable[[CallbackQuery], Answer],
        username: str | None = None,
    ) -> None:
        self._reply_for = reply_for
        self._answer_for = answer_for
        self.username = username
        self.general: HandlerChain[Update] = HandlerChain()
        self.commands: HandlerChain[Update] = HandlerChain()
        self.callbacks: HandlerChain[Update] = HandlerChain()

    # Routing

    async def dispatch(self, update: Update) -> None:
        logger.debug("dispatch.update", update_id=update.id, kind=update.kind)

        async def general() -> None:
            await self.general.run(update)

        if update.kind in _NEW_MESSAGE_KINDS and self._is_own_command(update.message):
            await self.commands.run(update, general)
        elif update.kind == "callback_query" and update.callback_query is not None:
            await self.callbacks.run(update, general)
        else:
            await general()

    def _is_own_command(self, msg: Message | None) -> bool:
        if msg is None or msg.command is None:
            return False
        return msg.command.is_addressed_to(self.username)

    # Registration

    def use(self, handler: UpdateHandler) -> UpdateHandler:
        """Register a raw update handler on the general chain."""
        return self.general.append(handler)

    def _on_message(
        self, accepts: MessageFilter, *, kinds: frozenset[str] = _NEW_MESSAGE_KINDS
    ) -> Callable[[MessageHandler], MessageHandler]:
        def decorator(handler: MessageHandler) -> MessageHandler:
            async def filtered(update: Update, next_: Next) -> None:
                msg = update.message
                if update.kind not in kinds or msg is None or not accepts(msg):
                    await next_()
                    return
                await handler(msg, self._reply_for(msg), next_)

            self.general.append(filtered)
            return handler

        return decorator

    def all(self) -> Callable[[MessageHandler], MessageHandler]:
        return self._on_message(lambda msg: True)

    def message(self, *, also_updates: bool = False) -> Callable[[MessageHandler], MessageHandler]:
        return self._on_message(lambda msg: also_updates or msg.type != "update")

    def text(self, *, also_commands: bool = False) -> Callable[[MessageHandler], MessageHandler]:
        return self._on_message(
            lambda msg: msg.type == "text" and (also_commands or msg.command is None)
        )

    def mention(
        self, *handles: str, also_commands: bool = False
    ) -> Callable[[MessageHandler], MessageHandler]:
        """Text mentioning any of ``handles``; without handles, the bot itself."""

        def accepts(msg: Message) -> bool:
            if msg.type != "text" or (msg.command is not None and not also_commands):
                return False
            mentions = msg.content.mentions
            wanted = handles or ((self.username,) if self.username else ())
            if not wanted:
                return bool(mentions)
            return any(handle in mentions for handle in wanted)

        return self._on_message(accepts)

    def document(self, *patterns: str | re.Pattern[str]) -> Callable[[MessageHandler], MessageHandler]:
        """Documents whose filename matches a glob or regex pattern (any, if none given)."""
        return self._on_message(
            lambda msg: msg.type == "document"
            and _match_filename(msg.content.filename, patterns)
        )

    def _of_type(self, msg_type: str) -> Callable[[MessageHandler], MessageHandler]:
        return self._on_message(lambda msg: msg.type == msg_type)

    def audio(self) -> Callable[[MessageHandler], MessageHandler]:
        return self._of_type("audio")

    def photo(self) -> Callable[[MessageHandler], MessageHandler]:
        return self._of_type("photo")

    def sticker(self) -> Callable[[MessageHandler], MessageHandler]:
        return self._of_type("sticker")

    def video(self) -> Callable[[MessageHandler], MessageHandler]:
        return self._of_type("video")

    def video_note(self) -> Callable[[MessageHandler], MessageHandler]:
        return self._of_type("video_note")

    def voice(self) -> Callable[[MessageHandler], MessageHandler]:
        return self._of_type("voice")

    def contact(self) -> Callable[[MessageHandler], MessageHandler]:
        return self._of_type("contact")

    def location(self) -> Callable[[MessageHandler], MessageHandler]:
        return self._of_type("location")

    def venue(self) -> Callable[[MessageHandler], MessageHandler]:
        return self._of_type("venue")

    def game(self) -> Callable[[MessageHandler], MessageHandler]:
        return self._of_type("game")

    def update(
        self, subject: str | None = None, action: str | None = None
    ) -> Callable[[MessageHandler], MessageHandler]:
        return self._on_message(
            lambda msg: msg.type == "update"
            and (subject is None or msg.content.subject == subject)
            and (action is None or msg.content.action == action)
        )

    def edited(self) -> Callable[[MessageHandler], MessageHandler]:
        return self._on_message(lambda msg: True, kinds=_EDITED_MESSAGE_KINDS)

    def command(self, *names: str | re.Pattern[str]) -> Callable[[MessageHandler], MessageHandler]:
        """Commands named ``names`` (case-insensitive strings or patterns); any if empty."""

        def decorator(handler: MessageHandler) -> MessageHandler:
            async def filtered(update: Update, next_: Next) -> None:
                msg = update.message
                command = msg.command if msg is not None else None
                if command is None or (names and not match_command(command.name, names)):
                    await next_()
                    return
                await handler(msg, self._reply_for(msg), next_)

            self.commands.append(filtered)
            return handler

        return decorator

    def callback(self) -> Callable[[CallbackHandler], CallbackHandler]:
        """Callback query handlers get ``(query, answer, next)``.

        ``answer`` should be awaited at most once per query; a second
        acknowledgement is rejected by the remote side, not here.
        """

        def decorator(handler: CallbackHandler) -> CallbackHandler:
            async def filtered(update: Update, next_: Next) -> None:
                query = update.callback_query
                if query is None:
                    await next_()
                    return
                await handler(query, self._answer_for(query), next_)

            self.callbacks.append(filtered)
            return handler

        return decorator
