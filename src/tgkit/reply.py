from __future__ import annotations

import html as html_lib
from collections.abc import Hashable, Iterable, Sequence
from typing import Any, Literal, TypeAlias

import msgspec

from .errors import UsageError
from .markup import (
    ForceReply,
    InlineKeyboardButton,
    InlineKeyboardMarkup,
    KeyboardKey,
    ReplyKeyboardMarkup,
    ReplyKeyboardRemove,
    format_inline_keyboard,
    format_keyboard,
    to_parameter,
)
from .model import (
    Audio,
    Chat,
    Contact,
    Document,
    File,
    Image,
    Location,
    Message,
    PhotoContent,
    Sticker,
    Text,
    Venue,
    Video,
    VideoNote,
    Voice,
    resolve_chat,
    resolve_file,
    resolve_message,
)
from .queue import Action, ActionQueue, CompletionHook
from .text import format_command

__all__ = ["ChatAction", "ParseMode", "ReplyQueue"]

ParseMode: TypeAlias = Literal["Markdown", "MarkdownV2", "HTML"] | None
ChatAction: TypeAlias = Literal[
    "typing",
    "find_location",
    "upload_photo",
    "record_video",
    "upload_video",
    "record_voice",
    "upload_voice",
    "record_video_note",
    "upload_video_note",
    "upload_document",
    "choose_sticker",
]


def _input_file(file: Any) -> Any:
    """File ids pass as strings; anything else that is not a model value is an upload."""
    if isinstance(file, (File, Image, Sticker, Audio, Document, Video, VideoNote, Voice)):
        return resolve_file(file)
    return file


def _chat_of(target: Message | int) -> int | None:
    """A Message is edited in its own chat, whatever this queue's destination."""
    return target.chat.id if isinstance(target, Message) else None


class ReplyQueue:
    """Fluent builder of outbound actions for one destination.

    Sends are queued on ``key`` in call order. Modifiers (``reply``,
    ``silent``, keyboards, ...) apply to the next send only.
    """

    def __init__(self, queue: ActionQueue, key: Hashable, destination: Chat | int) -> None:
        self.queue = queue
        self.key = key
        self.destination = resolve_chat(destination)
        self._parameters: dict[str, Any] = {}
        self._markup: msgspec.Struct | None = None
        self._selective: bool | None = None
        self._last: Action | None = None

    @property
    def last_action(self) -> Action | None:
        return self._last

    def _take_pending(self) -> dict[str, Any]:
        parameters, self._parameters = self._parameters, {}
        markup, self._markup = self._markup, None
        selective, self._selective = self._selective, None
        if selective is not None:
            if not hasattr(markup, "selective"):
                raise UsageError("selective needs a keyboard or force_reply markup")
            markup.selective = selective
        if markup is not None:
            parameters["reply_markup"] = to_parameter(markup)
        return parameters

    def _enqueue(self, method: str, parameters: dict[str, Any]) -> ReplyQueue:
        action = Action(
            method,
            {key: value for key, value in parameters.items() if value is not None},
        )
        self._last = self.queue.enqueue(self.key, action)
        return self

    def _send(self, method: str, *, chat_id: int | None = None, **parameters: Any) -> ReplyQueue:
        merged = self._take_pending()
        merged["chat_id"] = self.destination if chat_id is None else chat_id
        merged.update(parameters)
        return self._enqueue(method, merged)

    def _edit(self, method: str, target: Message | int | str, **parameters: Any) -> ReplyQueue:
        if isinstance(target, str):
            merged = self._take_pending()
            merged.pop("reply_to_message_id", None)
            merged["inline_message_id"] = target
            merged.update(parameters)
            return self._enqueue(method, merged)
        return self._send(
            method, chat_id=_chat_of(target), message_id=resolve_message(target), **parameters
        )

    # Sending

    def text(self, text: str, mode: ParseMode = None) -> ReplyQueue:
        return self._send("sendMessage", text=text, parse_mode=mode)

    def markdown(self, text: str) -> ReplyQueue:
        return self.text(text, "Markdown")

    def html(self, text: str, *args: str) -> ReplyQueue:
        """Send HTML; ``%s`` placeholders in ``text`` receive escaped ``args``."""
        if args:
            text = text % tuple(html_lib.escape(str(arg)) for arg in args)
        return self.text(text, "HTML")

    def command(self, name: str, *args: str, username: str | None = None) -> ReplyQueue:
        return self.text(format_command(name, args, username=username))

    def photo(self, file: Any, caption: str | None = None, caption_mode: ParseMode = None) -> ReplyQueue:
        return self._send(
            "sendPhoto", photo=_input_file(file), caption=caption, parse_mode=caption_mode
        )

    def audio(
        self,
        file: Any,
        duration: int | None = None,
        performer: str | None = None,
        title: str | None = None,
        caption: str | None = None,
    ) -> ReplyQueue:
        return self._send(
            "sendAudio",
            audio=_input_file(file),
            duration=duration,
            performer=performer,
            title=title,
            caption=caption,
        )

    def document(self, file: Any, caption: str | None = None) -> ReplyQueue:
        return self._send("sendDocument", document=_input_file(file), caption=caption)

    def sticker(self, file: Any) -> ReplyQueue:
        return self._send("sendSticker", sticker=_input_file(file))

    def video(
        self,
        file: Any,
        duration: int | None = None,
        width: int | None = None,
        height: int | None = None,
        caption: str | None = None,
    ) -> ReplyQueue:
        return self._send(
            "sendVideo",
            video=_input_file(file),
            duration=duration,
            width=width,
            height=height,
            caption=caption,
        )

    def video_note(
        self, file: Any, duration: int | None = None, length: int | None = None
    ) -> ReplyQueue:
        return self._send(
            "sendVideoNote", video_note=_input_file(file), duration=duration, length=length
        )

    def voice(self, file: Any, duration: int | None = None, caption: str | None = None) -> ReplyQueue:
        return self._send("sendVoice", voice=_input_file(file), duration=duration, caption=caption)

    def location(self, latitude: float, longitude: float) -> ReplyQueue:
        return self._send("sendLocation", latitude=latitude, longitude=longitude)

    def venue(
        self,
        latitude: float,
        longitude: float,
        title: str,
        address: str,
        foursquare_id: str | None = None,
    ) -> ReplyQueue:
        return self._send(
            "sendVenue",
            latitude=latitude,
            longitude=longitude,
            title=title,
            address=address,
            foursquare_id=foursquare_id,
        )

    def contact(self, phone: str, first_name: str, last_name: str | None = None) -> ReplyQueue:
        return self._send(
            "sendContact", phone_number=phone, first_name=first_name, last_name=last_name
        )

    def game(self, short_name: str) -> ReplyQueue:
        return self._send("sendGame", game_short_name=short_name)

    def action(self, action: ChatAction = "typing") -> ReplyQueue:
        return self._send("sendChatAction", action=action)

    def forward(self, message: Message | int, chat: Chat | int | None = None) -> ReplyQueue:
        """Forward ``message`` here; a Message is forwarded from its own chat."""
        if isinstance(message, Message):
            from_chat = resolve_chat(chat) if chat is not None else message.chat.id
        elif chat is None:
            raise UsageError("forwarding a message id requires its chat")
        else:
            from_chat = resolve_chat(chat)
        return self._send(
            "forwardMessage",
            message_id=resolve_message(message),
            from_chat_id=from_chat,
        )

    def message(self, msg: Message) -> ReplyQueue:
        """Send a copy of ``msg``'s content."""
        content = msg.content
        match content:
            case Text():
                return self.text(content.text)
            case Audio():
                return self.audio(
                    content.file, content.duration, content.performer, content.title, content.caption
                )
            case Document():
                return self.document(content.file, content.caption)
            case PhotoContent():
                return self.photo(content.image.file, content.caption)
            case Sticker():
                return self.sticker(content.file)
            case Video():
                return self.video(
                    content.file, content.duration, content.width, content.height, content.caption
                )
            case VideoNote():
                return self.video_note(content.file, content.duration, content.length)
            case Voice():
                return self.voice(content.file, content.duration, content.caption)
            case Contact():
                return self.contact(content.phone, content.first_name, content.last_name)
            case Location():
                return self.location(content.latitude, content.longitude)
            case Venue():
                return self.venue(
                    content.location.latitude,
                    content.location.longitude,
                    content.title,
                    content.address,
                    content.foursquare_id,
                )
        if msg.type == "update":
            raise UsageError("updates cannot be resent")
        if msg.type == "game":
            raise UsageError("games cannot be resent")
        raise UsageError("unknown message")

    # Editing

    def edit_text(self, target: Message | int | str, text: str, mode: ParseMode = None) -> ReplyQueue:
        return self._edit("editMessageText", target, text=text, parse_mode=mode)

    def edit_markdown(self, target: Message | int | str, text: str) -> ReplyQueue:
        return self.edit_text(target, text, "Markdown")

    def edit_html(self, target: Message | int | str, text: str, *args: str) -> ReplyQueue:
        if args:
            text = text % tuple(html_lib.escape(str(arg)) for arg in args)
        return self.edit_text(target, text, "HTML")

    def edit_caption(self, target: Message | int | str, caption: str) -> ReplyQueue:
        return self._edit("editMessageCaption", target, caption=caption)

    def edit_reply_markup(self, target: Message | int | str) -> ReplyQueue:
        return self._edit("editMessageReplyMarkup", target)

    def delete_message(self, target: Message | int) -> ReplyQueue:
        return self._send(
            "deleteMessage", chat_id=_chat_of(target), message_id=resolve_message(target)
        )

    # Modifiers

    def reply(self, msg: Message | int | None = None) -> ReplyQueue:
        if msg is None:
            self._parameters.pop("reply_to_message_id", None)
        else:
            self._parameters["reply_to_message_id"] = resolve_message(msg)
        return self

    def silent(self, silent: bool = True) -> ReplyQueue:
        self._parameters["disable_notification"] = silent
        return self

    def disable_preview(self, disable: bool = True) -> ReplyQueue:
        self._parameters["disable_web_page_preview"] = disable
        return self

    def selective(self, selective: bool = True) -> ReplyQueue:
        self._selective = selective
        return self

    def force_reply(self, force: bool = True) -> ReplyQueue:
        self._markup = ForceReply(force_reply=True) if force else None
        return self

    def keyboard(
        self,
        rows: Iterable[KeyboardKey | Sequence[KeyboardKey]] | None,
        resize: bool = False,
        one_time: bool = False,
    ) -> ReplyQueue:
        """Attach a reply keyboard; ``None`` hides the current one."""
        if rows is None:
            self._markup = ReplyKeyboardRemove(remove_keyboard=True)
            return self
        self._markup = ReplyKeyboardMarkup(
            keyboard=format_keyboard(rows),
            resize_keyboard=resize,
            one_time_keyboard=one_time,
        )
        return self

    def inline_keyboard(
        self, rows: Iterable[Sequence[InlineKeyboardButton | dict[str, Any]]]
    ) -> ReplyQueue:
        self._markup = InlineKeyboardMarkup(inline_keyboard=format_inline_keyboard(rows))
        return self

    # Routing and completion

    def to(self, chat: Chat | int) -> ReplyQueue:
        """Same queue, different destination."""
        return ReplyQueue(self.queue, self.key, chat)

    def then(self, hook: CompletionHook) -> ReplyQueue:
        """Run ``hook(error, result, proceed)`` when the last send completes.

        The queue for this key waits until ``proceed()`` is called. When the
        last send already completed, the hook is queued and gets
        ``(None, None, proceed)``.
        """
        self._last = self.queue.attach(self.key, self._last, hook)
        return self
