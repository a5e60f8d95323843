from __future__ import annotations

import copy
import re
from datetime import datetime
from typing import Any

from .config import BotOptions
from .context import ContextStore
from .dispatch import Answer, Dispatcher
from .errors import UsageError, ValidationError
from .events import ErrorChannel
from .model import (
    CallbackQuery,
    Chat,
    ChatMember,
    File,
    Message,
    ProfilePhotos,
    Update,
    User,
    resolve_chat,
    resolve_file,
    resolve_message,
)
from .parsing import (
    parse_chat,
    parse_chat_member,
    parse_file,
    parse_profile_photos,
    parse_update,
)
from .queue import ActionQueue
from .reply import ReplyQueue
from .text import format_command
from .transport import Transport

__all__ = ["Bot"]

_LINK_PAYLOAD_RE = re.compile(r"^[A-Za-z0-9_-]{1,64}$")
PROFILE_PHOTOS_LIMIT = 100


class Bot(Dispatcher):
    """Parses inbound updates, runs handlers, and serializes replies per chat.

    Use as an async context manager; replies can only be queued while it
    is open::

        async with Bot(transport, BotOptions(username="my_bot")) as bot:
            @bot.command("start")
            async def start(msg, reply, next):
                reply.text("hi")

            await bot.process_update(raw)
    """

    def __init__(
        self,
        transport: Transport,
        options: BotOptions | None = None,
        *,
        errors: ErrorChannel | None = None,
    ) -> None:
        self.options = options if options is not None else BotOptions()
        self.transport = transport
        self.errors = errors if errors is not None else ErrorChannel()
        self.queue = ActionQueue(
            transport, errors=self.errors, immediate=self.options.immediate
        )
        self.contexts = ContextStore()
        super().__init__(
            reply_for=self._reply_for_message,
            answer_for=self._answer_for_query,
            username=self.options.username,
        )

    async def __aenter__(self) -> Bot:
        await self.queue.__aenter__()
        return self

    async def __aexit__(self, exc_type, exc, tb) -> bool | None:
        return await self.queue.__aexit__(exc_type, exc, tb)

    # Outbound

    def reply(self, chat: Chat | int, *, private: bool = False) -> ReplyQueue:
        """Reply queue for ``chat``; ``private`` gives it a queue of its own."""
        chat_id = resolve_chat(chat)
        key: object = object() if private else chat_id
        return ReplyQueue(self.queue, key, chat_id)

    def _reply_for_message(self, msg: Message) -> ReplyQueue:
        return self.reply(msg.chat)

    async def call(self, method: str, **parameters: Any) -> Any:
        """Call ``method`` right away, outside of any queue."""
        params = {key: value for key, value in parameters.items() if value is not None}
        return await self.transport.call(method, params)

    async def _call_ok(self, method: str, **parameters: Any) -> bool:
        result = await self.call(method, **parameters)
        if result is not True:
            raise ValidationError(f"expected true, found {result!r}", path=method)
        return True

    def _answer_for_query(self, query: CallbackQuery) -> Answer:
        async def answer(
            text: str | None = None,
            *,
            alert: bool = False,
            url: str | None = None,
            cache_time: int | None = None,
        ) -> Any:
            return await self.call(
                "answerCallbackQuery",
                callback_query_id=query.id,
                text=text,
                show_alert=alert,
                url=url,
                cache_time=cache_time,
            )

        return answer

    # Inbound

    def parse(self, payload: Any, *, queued: bool = False) -> Update:
        return parse_update(payload, strict=self.options.strict, queued=queued)

    async def process_update(self, payload: Any, *, queued: bool = False) -> Update:
        update = payload if isinstance(payload, Update) else self.parse(payload, queued=queued)
        await self.dispatch(update)
        return update

    def context(self, initial: Any = None) -> ContextStore:
        """Replace the context store; ``initial`` is a factory or a template dict."""
        if initial is None or callable(initial):
            factory = initial
        else:
            template = dict(initial)

            def factory(_chat_id: int) -> dict[str, Any]:
                return copy.deepcopy(template)

        self.contexts = ContextStore(factory)
        return self.contexts

    # Helpers

    def _require_username(self) -> str:
        if not self.username:
            raise UsageError("bot username is not configured")
        return self.username

    def link(self, payload: str | None = None, *, group: bool = False, game: str | None = None) -> str:
        base = f"https://t.me/{self._require_username()}"
        if game is not None:
            return f"{base}?game={game}"
        if payload is None:
            return base
        if not _LINK_PAYLOAD_RE.match(payload):
            raise UsageError("link payload contains invalid characters")
        return f"{base}?start{'group' if group else ''}={payload}"

    def format_command(
        self, command: str, *args: str, username: str | bool | None = None
    ) -> str:
        """``username=True`` addresses the command to this bot."""
        if username is True:
            username = self._require_username()
        return format_command(command, args, username=username or None)

    async def kick_member(
        self, chat: Chat | int, user: Chat | int, until: datetime | int | None = None
    ) -> bool:
        if isinstance(until, datetime):
            until = int(until.timestamp())
        return await self._call_ok(
            "banChatMember",
            chat_id=resolve_chat(chat),
            user_id=resolve_chat(user),
            until_date=until,
        )

    async def unban_member(self, chat: Chat | int, user: Chat | int) -> bool:
        return await self._call_ok(
            "unbanChatMember", chat_id=resolve_chat(chat), user_id=resolve_chat(user)
        )

    async def leave_chat(self, chat: Chat | int) -> bool:
        return await self._call_ok("leaveChat", chat_id=resolve_chat(chat))

    async def pin_message(
        self, chat: Chat | int, message: Message | int, *, silent: bool = False
    ) -> bool:
        return await self._call_ok(
            "pinChatMessage",
            chat_id=resolve_chat(chat),
            message_id=resolve_message(message),
            disable_notification=silent or None,
        )

    async def unpin_message(self, chat: Chat | int, message: Message | int | None = None) -> bool:
        """Unpin ``message``, or the most recent pin when it is omitted."""
        return await self._call_ok(
            "unpinChatMessage",
            chat_id=resolve_chat(chat),
            message_id=resolve_message(message) if message is not None else None,
        )

    async def set_chat_title(self, chat: Chat | int, title: str) -> bool:
        return await self._call_ok("setChatTitle", chat_id=resolve_chat(chat), title=title)

    async def set_chat_description(self, chat: Chat | int, description: str | None = None) -> bool:
        return await self._call_ok(
            "setChatDescription",
            chat_id=resolve_chat(chat),
            description=description if description is not None else "",
        )

    async def delete_chat_photo(self, chat: Chat | int) -> bool:
        return await self._call_ok("deleteChatPhoto", chat_id=resolve_chat(chat))

    async def export_invite_link(self, chat: Chat | int) -> str:
        result = await self.call("exportChatInviteLink", chat_id=resolve_chat(chat))
        if not isinstance(result, str):
            raise ValidationError(f"expected string, found {result!r}", path="exportChatInviteLink")
        return result

    # Queries

    async def get_chat(self, chat: Chat | int) -> Chat:
        result = await self.call("getChat", chat_id=resolve_chat(chat))
        return parse_chat(result, strict=self.options.strict, path="getChat")

    async def get_chat_member(self, chat: Chat | int, user: User | int) -> ChatMember:
        result = await self.call(
            "getChatMember", chat_id=resolve_chat(chat), user_id=resolve_chat(user)
        )
        return parse_chat_member(result, strict=self.options.strict, path="getChatMember")

    async def get_chat_administrators(self, chat: Chat | int) -> list[ChatMember]:
        result = await self.call("getChatAdministrators", chat_id=resolve_chat(chat))
        if not isinstance(result, list):
            raise ValidationError("expected array", path="getChatAdministrators")
        return [
            parse_chat_member(
                item, strict=self.options.strict, path=f"getChatAdministrators[{idx}]"
            )
            for idx, item in enumerate(result)
        ]

    async def get_chat_members_count(self, chat: Chat | int) -> int:
        result = await self.call("getChatMemberCount", chat_id=resolve_chat(chat))
        if isinstance(result, bool) or not isinstance(result, int):
            raise ValidationError("expected integer", path="getChatMemberCount")
        return result

    async def get_profile_photos(
        self, user: User | int, offset: int | None = None, limit: int | None = None
    ) -> ProfilePhotos:
        if limit is not None and not 1 <= limit <= PROFILE_PHOTOS_LIMIT:
            raise UsageError(f"limit must be between 1 and {PROFILE_PHOTOS_LIMIT}")
        result = await self.call(
            "getUserProfilePhotos", user_id=resolve_chat(user), offset=offset, limit=limit
        )
        return parse_profile_photos(
            result, strict=self.options.strict, path="getUserProfilePhotos"
        )

    async def file_get(self, file: Any) -> File:
        """Resolve ``file`` to a File with a download path, asking the API only when needed."""
        if isinstance(file, File) and file.size is not None and file.path is not None:
            return file
        result = await self.call("getFile", file_id=resolve_file(file))
        return parse_file(result, strict=self.options.strict, path="getFile")
