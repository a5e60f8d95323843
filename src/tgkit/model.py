"""tgkit domain model types (chats, messages, content variants, updates)."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Literal, TypeAlias

from .errors import ResolutionError

ChatType: TypeAlias = Literal["user", "group", "supergroup", "channel"]

MessageType: TypeAlias = Literal[
    "text",
    "audio",
    "document",
    "photo",
    "sticker",
    "video",
    "video_note",
    "voice",
    "contact",
    "location",
    "venue",
    "game",
    "update",
]

UpdateKind: TypeAlias = Literal[
    "message",
    "edited_message",
    "channel_post",
    "edited_channel_post",
    "callback_query",
]

UpdateSubject: TypeAlias = Literal["member", "title", "photo", "chat", "message"]
UpdateAction: TypeAlias = Literal[
    "new", "leave", "delete", "create", "migrateTo", "migrateFrom", "pin"
]


@dataclass(frozen=True, slots=True)
class Chat:
    id: int
    type: str
    name: str | None = None
    title: str | None = None
    first_name: str | None = None
    last_name: str | None = None
    username: str | None = None
    language: str | None = None
    is_bot: bool | None = None
    all_members_are_administrators: bool | None = None
    description: str | None = None
    invite_link: str | None = None

    def verify(self) -> bool:
        if self.type == "user":
            return self.title is None and self.first_name is not None
        if self.type in ("group", "supergroup"):
            return self.first_name is None and self.last_name is None
        if self.type == "channel":
            return (
                self.first_name is None
                and self.last_name is None
                and self.username is not None
            )
        return True


User: TypeAlias = Chat


@dataclass(frozen=True, slots=True)
class File:
    id: str
    unique_id: str | None = None
    size: int | None = None
    mime: str | None = None
    path: str | None = None


@dataclass(frozen=True, slots=True)
class Image:
    file: File
    width: int
    height: int

    @property
    def area(self) -> int:
        return self.width * self.height


@dataclass(frozen=True, slots=True)
class Photo:
    sizes: tuple[Image, ...]
    image: Image


@dataclass(frozen=True, slots=True)
class MessageEntity:
    type: str
    offset: int
    length: int
    url: str | None = None
    user: User | None = None


@dataclass(frozen=True, slots=True)
class Command:
    name: str
    username: str | None
    raw_args: str

    def args(self, n: int | None = None) -> str | list[str]:
        """Argument text, or at most ``n`` tokens with the last one absorbing the rest."""
        if n is None:
            return self.raw_args.strip()
        if n < 1:
            raise ValueError("n must be positive")
        text = self.raw_args.strip()
        if not text:
            return []
        return text.split(maxsplit=n - 1)

    def is_addressed_to(self, username: str | None) -> bool:
        if self.username is None:
            return True
        if username is None:
            return False
        return self.username.lower() == username.lower()


@dataclass(frozen=True, slots=True)
class Mentions:
    handles: tuple[str, ...] = ()

    def count(self, handle: str) -> int:
        wanted = handle.lstrip("@#").lower()
        return sum(1 for item in self.handles if item.lower() == wanted)

    def __contains__(self, handle: object) -> bool:
        return isinstance(handle, str) and self.count(handle) > 0

    def __iter__(self):
        return iter(self.handles)

    def __len__(self) -> int:
        return len(self.handles)

    def __bool__(self) -> bool:
        return bool(self.handles)


# Content variants


@dataclass(frozen=True, slots=True)
class Text:
    text: str
    entities: tuple[MessageEntity, ...] = ()
    command: Command | None = None
    mentions: Mentions = field(default_factory=Mentions)
    hashtags: Mentions = field(default_factory=Mentions)


@dataclass(frozen=True, slots=True)
class Audio:
    file: File
    duration: int
    performer: str | None = None
    title: str | None = None
    caption: str | None = None


@dataclass(frozen=True, slots=True)
class Document:
    file: File
    filename: str | None = None
    thumbnail: Image | None = None
    caption: str | None = None


@dataclass(frozen=True, slots=True)
class PhotoContent:
    photo: Photo
    caption: str | None = None

    @property
    def image(self) -> Image:
        return self.photo.image


@dataclass(frozen=True, slots=True)
class Sticker:
    file: File
    width: int
    height: int
    emoji: str | None = None
    set_name: str | None = None
    thumbnail: Image | None = None
    is_animated: bool | None = None
    is_video: bool | None = None


@dataclass(frozen=True, slots=True)
class Video:
    file: File
    width: int
    height: int
    duration: int
    thumbnail: Image | None = None
    caption: str | None = None


@dataclass(frozen=True, slots=True)
class VideoNote:
    file: File
    length: int
    duration: int
    thumbnail: Image | None = None


@dataclass(frozen=True, slots=True)
class Voice:
    file: File
    duration: int
    caption: str | None = None


@dataclass(frozen=True, slots=True)
class Contact:
    phone: str
    first_name: str
    last_name: str | None = None
    user_id: int | None = None


@dataclass(frozen=True, slots=True)
class Location:
    latitude: float
    longitude: float


@dataclass(frozen=True, slots=True)
class Venue:
    location: Location
    title: str
    address: str
    foursquare_id: str | None = None


@dataclass(frozen=True, slots=True)
class Animation:
    file: File
    filename: str | None = None
    thumbnail: Image | None = None


@dataclass(frozen=True, slots=True)
class Game:
    title: str
    description: str
    photo: Photo
    text: str | None = None
    animation: Animation | None = None


@dataclass(frozen=True, slots=True)
class ChatUpdate:
    subject: UpdateSubject
    action: UpdateAction
    members: tuple[User, ...] = ()
    title: str | None = None
    photo: Photo | None = None
    to_id: int | None = None
    from_id: int | None = None
    message: Message | None = None

    @property
    def member(self) -> User | None:
        return self.members[0] if self.members else None


Content: TypeAlias = (
    Text
    | Audio
    | Document
    | PhotoContent
    | Sticker
    | Video
    | VideoNote
    | Voice
    | Contact
    | Location
    | Venue
    | Game
    | ChatUpdate
)


@dataclass(frozen=True, slots=True)
class Forward:
    date: datetime
    sender: User | None = None
    chat: Chat | None = None
    message_id: int | None = None
    signature: str | None = None


@dataclass(frozen=True, slots=True)
class Message:
    id: int
    date: datetime
    chat: Chat
    sender: User | None = None
    type: MessageType | None = None
    content: Content | None = None
    forward: Forward | None = None
    reply: Message | None = None
    edit_date: datetime | None = None
    edited: bool = False
    media_group_id: str | None = None
    author_signature: str | None = None
    unparsed: dict[str, Any] | None = None

    @property
    def text(self) -> str | None:
        return self.content.text if isinstance(self.content, Text) else None

    @property
    def command(self) -> Command | None:
        return self.content.command if isinstance(self.content, Text) else None

    @property
    def caption(self) -> str | None:
        return getattr(self.content, "caption", None)

    @property
    def user(self) -> User | None:
        return self.chat if self.chat.type == "user" else None

    @property
    def group(self) -> Chat | None:
        return self.chat if self.chat.type in ("group", "supergroup") else None


@dataclass(frozen=True, slots=True)
class CallbackQuery:
    id: str
    sender: User
    message: Message | None = None
    inline_message_id: str | None = None
    chat_instance: str | None = None
    data: str | None = None
    game_short_name: str | None = None
    queued: bool = False


@dataclass(frozen=True, slots=True)
class Update:
    id: int
    kind: UpdateKind | None
    message: Message | None = None
    callback_query: CallbackQuery | None = None
    queued: bool = False
    unparsed: dict[str, Any] | None = None

    @property
    def edited(self) -> bool:
        return self.kind in ("edited_message", "edited_channel_post")


ChatMemberStatus: TypeAlias = Literal[
    "creator", "administrator", "member", "restricted", "left", "kicked"
]


@dataclass(frozen=True, slots=True)
class ChatMember:
    """``privileges`` holds the ``can_*`` / ``is_*`` flags the API reported."""

    user: User
    status: str
    until: datetime | None = None
    can_be_edited: bool | None = None
    custom_title: str | None = None
    privileges: dict[str, bool] = field(default_factory=dict)


@dataclass(frozen=True, slots=True)
class ProfilePhotos:
    photos: tuple[Photo, ...]
    total: int

    def __iter__(self):
        return iter(self.photos)

    def __len__(self) -> int:
        return len(self.photos)


# Resolvers


def _is_int(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def resolve_chat(chat: Chat | int) -> int:
    if isinstance(chat, Chat):
        return chat.id
    if not _is_int(chat):
        raise ResolutionError(f"Invalid chat ID: {chat!r}")
    return chat


def resolve_message(message: Message | int) -> int:
    if isinstance(message, Message):
        return message.id
    if not _is_int(message):
        raise ResolutionError(f"Invalid message ID: {message!r}")
    return message


def resolve_file(file: File | Image | str | Any) -> str:
    if isinstance(file, Image):
        return file.file.id
    if isinstance(file, File):
        return file.id
    inner = getattr(file, "file", None)
    if isinstance(inner, File):
        return inner.id
    if not isinstance(file, str) or not file:
        raise ResolutionError(f"Invalid file ID: {file!r}")
    return file
