"""Turn raw Bot API payloads into model values.

Every ``parse_*`` function works on a private copy of its payload and pops
the fields it understands. In strict mode whatever is left over is an
error; in lenient mode leftovers are ignored (messages and updates keep
them in ``unparsed``).

Message content is classified by running the recognizers in
``MESSAGE_RECOGNIZERS`` order. Lenient parsing stops at the first match;
strict parsing runs all of them and rejects payloads matching more than one
variant, or none.
"""

from __future__ import annotations

from collections.abc import Callable, Mapping
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, TypeVar

import msgspec

from .errors import ValidationError
from .logging import get_logger
from .model import (
    Animation,
    Audio,
    CallbackQuery,
    Chat,
    ChatMember,
    ChatUpdate,
    Contact,
    Content,
    Document,
    File,
    Forward,
    Game,
    Image,
    Location,
    Message,
    MessageEntity,
    MessageType,
    Photo,
    PhotoContent,
    ProfilePhotos,
    Sticker,
    Text,
    Update,
    UpdateKind,
    User,
    Venue,
    Video,
    VideoNote,
    Voice,
)
from .text import parse_command, parse_hashtags, parse_mentions

logger = get_logger(__name__)
T = TypeVar("T")

__all__ = [
    "CAPTION_MAX_LENGTH",
    "CHAT_TYPES",
    "MESSAGE_RECOGNIZERS",
    "UPDATE_KINDS",
    "decode_payload",
    "parse_callback_query",
    "parse_chat",
    "parse_chat_member",
    "parse_file",
    "parse_image",
    "parse_message",
    "parse_photo",
    "parse_profile_photos",
    "parse_update",
    "parse_user",
]

CAPTION_MAX_LENGTH = 200

CHAT_TYPES: dict[str, str] = {
    "private": "user",
    "group": "group",
    "supergroup": "supergroup",
    "channel": "channel",
}

UPDATE_KINDS: tuple[UpdateKind, ...] = (
    "message",
    "edited_message",
    "channel_post",
    "edited_channel_post",
    "callback_query",
)

_MISSING = object()


# Shape checks


def _is_int(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def _int(value: Any, path: str) -> int:
    if not _is_int(value):
        raise ValidationError("expected integer", path=path)
    return value


def _num(value: Any, path: str) -> float:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ValidationError("expected number", path=path)
    return value


def _str(value: Any, path: str) -> str:
    if not isinstance(value, str):
        raise ValidationError("expected string", path=path)
    return value


def _bool(value: Any, path: str) -> bool:
    if not isinstance(value, bool):
        raise ValidationError("expected boolean", path=path)
    return value


def _true(value: Any, path: str) -> bool:
    if value is not True:
        raise ValidationError("expected true", path=path)
    return True


def _obj(value: Any, path: str) -> dict[str, Any]:
    if not isinstance(value, Mapping):
        raise ValidationError("expected object", path=path)
    return dict(value)


def _arr(value: Any, path: str) -> list[Any]:
    if not isinstance(value, list):
        raise ValidationError("expected array", path=path)
    return value


def _take(data: dict[str, Any], key: str, check: Callable[[Any, str], T], path: str) -> T:
    value = data.pop(key, _MISSING)
    if value is _MISSING:
        raise ValidationError("missing field", path=f"{path}.{key}")
    return check(value, f"{path}.{key}")


def _take_opt(
    data: dict[str, Any], key: str, check: Callable[[Any, str], T], path: str
) -> T | None:
    value = data.pop(key, _MISSING)
    if value is _MISSING:
        return None
    return check(value, f"{path}.{key}")


def _finish(data: dict[str, Any], path: str, strict: bool) -> None:
    if strict and data:
        fields = ", ".join(sorted(data))
        raise ValidationError(f"unknown fields: {fields}", path=path)


def _date(value: int) -> datetime:
    return datetime.fromtimestamp(value, tz=timezone.utc)


def decode_payload(payload: Any) -> Any:
    if isinstance(payload, (str, bytes, bytearray, memoryview)):
        try:
            return msgspec.json.decode(payload)
        except msgspec.DecodeError as exc:
            raise ValidationError(f"malformed JSON: {exc}") from exc
    return payload


# Chats


def parse_chat(payload: Any, *, strict: bool = False, path: str = "chat") -> Chat:
    data = _obj(payload, path)
    chat_id = _take(data, "id", _int, path)
    raw_type = _take(data, "type", _str, path)
    chat_type = CHAT_TYPES.get(raw_type)
    if chat_type is None:
        if strict:
            raise ValidationError(f"unknown chat type {raw_type!r}", path=f"{path}.type")
        chat_type = raw_type
    title = _take_opt(data, "title", _str, path)
    first_name = _take_opt(data, "first_name", _str, path)
    last_name = _take_opt(data, "last_name", _str, path)
    username = _take_opt(data, "username", _str, path)
    language = _take_opt(data, "language_code", _str, path)
    is_bot = _take_opt(data, "is_bot", _bool, path)
    all_admins = _take_opt(data, "all_members_are_administrators", _bool, path)
    description = _take_opt(data, "description", _str, path)
    invite_link = _take_opt(data, "invite_link", _str, path)

    name = title
    if not name and first_name is not None:
        name = f"{first_name} {last_name}" if last_name else first_name

    chat = Chat(
        id=chat_id,
        type=chat_type,
        name=name,
        title=title,
        first_name=first_name,
        last_name=last_name,
        username=username,
        language=language,
        is_bot=is_bot,
        all_members_are_administrators=all_admins,
        description=description,
        invite_link=invite_link,
    )
    if strict and not chat.verify():
        raise ValidationError(f"unexpected fields in {chat_type} chat", path=path)
    _finish(data, path, strict)
    return chat


def parse_user(payload: Any, *, strict: bool = False, path: str = "user") -> User:
    data = _obj(payload, path)
    data["type"] = "private"
    return parse_chat(data, strict=strict, path=path)


# Files and images


def _take_file(data: dict[str, Any], path: str) -> File:
    """Consume the file reference fields embedded in a media object."""
    return File(
        id=_take(data, "file_id", _str, path),
        unique_id=_take_opt(data, "file_unique_id", _str, path),
        size=_take_opt(data, "file_size", _int, path),
        mime=_take_opt(data, "mime_type", _str, path),
        path=_take_opt(data, "file_path", _str, path),
    )


def parse_file(payload: Any, *, strict: bool = False, path: str = "file") -> File:
    """Parse a standalone ``File`` object, as returned by ``getFile``."""
    data = _obj(payload, path)
    file = _take_file(data, path)
    _finish(data, path, strict)
    return file


def parse_image(payload: Any, *, strict: bool = False, path: str = "image") -> Image:
    data = _obj(payload, path)
    image = Image(
        file=_take_file(data, path),
        width=_take(data, "width", _int, path),
        height=_take(data, "height", _int, path),
    )
    _finish(data, path, strict)
    return image


def parse_photo(payload: Any, *, strict: bool = False, path: str = "photo") -> Photo:
    items = _arr(payload, path)
    if not items:
        raise ValidationError("photo contains no sizes", path=path)
    sizes = tuple(
        parse_image(item, strict=strict, path=f"{path}[{idx}]")
        for idx, item in enumerate(items)
    )
    best = max(sizes, key=lambda size: size.area)
    if strict and sum(1 for size in sizes if size.area == best.area) > 1:
        raise ValidationError("two sizes share the largest area", path=path)
    return Photo(sizes=sizes, image=best)


def _take_thumbnail(data: dict[str, Any], path: str, strict: bool) -> Image | None:
    for key in ("thumbnail", "thumb"):
        if key in data:
            return parse_image(data.pop(key), strict=strict, path=f"{path}.{key}")
    return None


def _parse_entities(payload: Any, path: str, strict: bool) -> tuple[MessageEntity, ...]:
    entities = []
    for idx, item in enumerate(_arr(payload, path)):
        item_path = f"{path}[{idx}]"
        data = _obj(item, item_path)
        user = data.pop("user", None)
        entities.append(
            MessageEntity(
                type=_take(data, "type", _str, item_path),
                offset=_take(data, "offset", _int, item_path),
                length=_take(data, "length", _int, item_path),
                url=_take_opt(data, "url", _str, item_path),
                user=parse_user(user, strict=strict, path=f"{item_path}.user")
                if user is not None
                else None,
            )
        )
        _finish(data, item_path, strict)
    return tuple(entities)


# Message content recognizers


@dataclass(frozen=True, slots=True)
class _Context:
    strict: bool
    path: str
    chat: Chat


Recognizer = Callable[[dict[str, Any], _Context], Content | None]


def _take_caption(data: dict[str, Any], ctx: _Context) -> str | None:
    caption = _take_opt(data, "caption", _str, ctx.path)
    if caption is not None and ctx.strict and len(caption) > CAPTION_MAX_LENGTH:
        raise ValidationError("caption too long", path=f"{ctx.path}.caption")
    if "caption_entities" in data:
        _parse_entities(
            data.pop("caption_entities"), f"{ctx.path}.caption_entities", ctx.strict
        )
    return caption


def _recognize_text(data: dict[str, Any], ctx: _Context) -> Text | None:
    if "text" not in data:
        return None
    text = _take(data, "text", _str, ctx.path)
    entities: tuple[MessageEntity, ...] = ()
    if "entities" in data:
        entities = _parse_entities(data.pop("entities"), f"{ctx.path}.entities", ctx.strict)
    return Text(
        text=text,
        entities=entities,
        command=parse_command(text),
        mentions=parse_mentions(text),
        hashtags=parse_hashtags(text),
    )


def _recognize_audio(data: dict[str, Any], ctx: _Context) -> Audio | None:
    if "audio" not in data:
        return None
    path = f"{ctx.path}.audio"
    audio = _obj(data.pop("audio"), path)
    file = _take_file(audio, path)
    duration = _take(audio, "duration", _int, path)
    performer = _take_opt(audio, "performer", _str, path)
    title = _take_opt(audio, "title", _str, path)
    _finish(audio, path, ctx.strict)
    return Audio(
        file=file,
        duration=duration,
        performer=performer,
        title=title,
        caption=_take_caption(data, ctx),
    )


def _recognize_document(data: dict[str, Any], ctx: _Context) -> Document | None:
    if "document" not in data:
        return None
    path = f"{ctx.path}.document"
    document = _obj(data.pop("document"), path)
    file = _take_file(document, path)
    filename = _take_opt(document, "file_name", _str, path)
    thumbnail = _take_thumbnail(document, path, ctx.strict)
    _finish(document, path, ctx.strict)
    return Document(
        file=file,
        filename=filename,
        thumbnail=thumbnail,
        caption=_take_caption(data, ctx),
    )


def _recognize_photo(data: dict[str, Any], ctx: _Context) -> PhotoContent | None:
    if "photo" not in data:
        return None
    photo = parse_photo(data.pop("photo"), strict=ctx.strict, path=f"{ctx.path}.photo")
    return PhotoContent(photo=photo, caption=_take_caption(data, ctx))


def _recognize_sticker(data: dict[str, Any], ctx: _Context) -> Sticker | None:
    if "sticker" not in data:
        return None
    path = f"{ctx.path}.sticker"
    sticker = _obj(data.pop("sticker"), path)
    result = Sticker(
        file=_take_file(sticker, path),
        width=_take(sticker, "width", _int, path),
        height=_take(sticker, "height", _int, path),
        emoji=_take_opt(sticker, "emoji", _str, path),
        set_name=_take_opt(sticker, "set_name", _str, path),
        thumbnail=_take_thumbnail(sticker, path, ctx.strict),
        is_animated=_take_opt(sticker, "is_animated", _bool, path),
        is_video=_take_opt(sticker, "is_video", _bool, path),
    )
    _finish(sticker, path, ctx.strict)
    return result


def _recognize_video(data: dict[str, Any], ctx: _Context) -> Video | None:
    if "video" not in data:
        return None
    path = f"{ctx.path}.video"
    video = _obj(data.pop("video"), path)
    file = _take_file(video, path)
    width = _take(video, "width", _int, path)
    height = _take(video, "height", _int, path)
    duration = _take(video, "duration", _int, path)
    thumbnail = _take_thumbnail(video, path, ctx.strict)
    _finish(video, path, ctx.strict)
    return Video(
        file=file,
        width=width,
        height=height,
        duration=duration,
        thumbnail=thumbnail,
        caption=_take_caption(data, ctx),
    )


def _recognize_video_note(data: dict[str, Any], ctx: _Context) -> VideoNote | None:
    if "video_note" not in data:
        return None
    path = f"{ctx.path}.video_note"
    note = _obj(data.pop("video_note"), path)
    result = VideoNote(
        file=_take_file(note, path),
        length=_take(note, "length", _int, path),
        duration=_take(note, "duration", _int, path),
        thumbnail=_take_thumbnail(note, path, ctx.strict),
    )
    _finish(note, path, ctx.strict)
    return result


def _recognize_voice(data: dict[str, Any], ctx: _Context) -> Voice | None:
    if "voice" not in data:
        return None
    path = f"{ctx.path}.voice"
    voice = _obj(data.pop("voice"), path)
    file = _take_file(voice, path)
    duration = _take(voice, "duration", _int, path)
    _finish(voice, path, ctx.strict)
    return Voice(file=file, duration=duration, caption=_take_caption(data, ctx))


def _recognize_contact(data: dict[str, Any], ctx: _Context) -> Contact | None:
    if "contact" not in data:
        return None
    path = f"{ctx.path}.contact"
    contact = _obj(data.pop("contact"), path)
    result = Contact(
        phone=_take(contact, "phone_number", _str, path),
        first_name=_take(contact, "first_name", _str, path),
        last_name=_take_opt(contact, "last_name", _str, path),
        user_id=_take_opt(contact, "user_id", _int, path),
    )
    _finish(contact, path, ctx.strict)
    return result


def _parse_location(payload: Any, path: str, strict: bool) -> Location:
    location = _obj(payload, path)
    result = Location(
        latitude=_take(location, "latitude", _num, path),
        longitude=_take(location, "longitude", _num, path),
    )
    _finish(location, path, strict)
    return result


def _recognize_location(data: dict[str, Any], ctx: _Context) -> Location | None:
    # Venue payloads repeat their coordinates under `location`.
    if "location" not in data or "venue" in data:
        return None
    return _parse_location(data.pop("location"), f"{ctx.path}.location", ctx.strict)


def _recognize_venue(data: dict[str, Any], ctx: _Context) -> Venue | None:
    if "venue" not in data:
        return None
    path = f"{ctx.path}.venue"
    venue = _obj(data.pop("venue"), path)
    data.pop("location", None)
    result = Venue(
        location=_parse_location(
            _take(venue, "location", _obj, path), f"{path}.location", ctx.strict
        ),
        title=_take(venue, "title", _str, path),
        address=_take(venue, "address", _str, path),
        foursquare_id=_take_opt(venue, "foursquare_id", _str, path),
    )
    _finish(venue, path, ctx.strict)
    return result


def _recognize_game(data: dict[str, Any], ctx: _Context) -> Game | None:
    if "game" not in data:
        return None
    path = f"{ctx.path}.game"
    game = _obj(data.pop("game"), path)
    title = _take(game, "title", _str, path)
    description = _take(game, "description", _str, path)
    photo = parse_photo(_take(game, "photo", _arr, path), strict=ctx.strict, path=f"{path}.photo")
    text = _take_opt(game, "text", _str, path)
    if "text_entities" in game:
        _parse_entities(game.pop("text_entities"), f"{path}.text_entities", ctx.strict)
    animation = None
    if "animation" in game:
        anim_path = f"{path}.animation"
        raw = _obj(game.pop("animation"), anim_path)
        animation = Animation(
            file=_take_file(raw, anim_path),
            filename=_take_opt(raw, "file_name", _str, anim_path),
            thumbnail=_take_thumbnail(raw, anim_path, ctx.strict),
        )
        _finish(raw, anim_path, ctx.strict)
    _finish(game, path, ctx.strict)
    return Game(
        title=title,
        description=description,
        photo=photo,
        text=text,
        animation=animation,
    )


def _expect_chat_type(ctx: _Context, expected: str, key: str) -> None:
    if ctx.chat.type != expected:
        raise ValidationError(f"expected {expected} chat", path=f"{ctx.path}.{key}")


def _recognize_update(data: dict[str, Any], ctx: _Context) -> ChatUpdate | None:
    path = ctx.path
    strict = ctx.strict

    if "new_chat_members" in data:
        items = _take(data, "new_chat_members", _arr, path)
        # Older single-member fields are sent alongside the list.
        data.pop("new_chat_member", None)
        data.pop("new_chat_participant", None)
        members = tuple(
            parse_user(item, strict=strict, path=f"{path}.new_chat_members[{idx}]")
            for idx, item in enumerate(items)
        )
        return ChatUpdate(subject="member", action="new", members=members)

    for key in ("new_chat_member", "new_chat_participant"):
        if key in data:
            member = parse_user(data.pop(key), strict=strict, path=f"{path}.{key}")
            data.pop("new_chat_participant", None)
            return ChatUpdate(subject="member", action="new", members=(member,))

    for key in ("left_chat_member", "left_chat_participant"):
        if key in data:
            member = parse_user(data.pop(key), strict=strict, path=f"{path}.{key}")
            data.pop("left_chat_participant", None)
            return ChatUpdate(subject="member", action="leave", members=(member,))

    if "new_chat_title" in data:
        title = _take(data, "new_chat_title", _str, path)
        return ChatUpdate(subject="title", action="new", title=title)

    if "new_chat_photo" in data:
        photo = parse_photo(
            data.pop("new_chat_photo"), strict=strict, path=f"{path}.new_chat_photo"
        )
        return ChatUpdate(subject="photo", action="new", photo=photo)

    if "delete_chat_photo" in data:
        _take(data, "delete_chat_photo", _true, path)
        return ChatUpdate(subject="photo", action="delete")

    for key, chat_type in (
        ("group_chat_created", "group"),
        ("supergroup_chat_created", "supergroup"),
        ("channel_chat_created", "channel"),
    ):
        if key in data:
            _take(data, key, _true, path)
            _expect_chat_type(ctx, chat_type, key)
            return ChatUpdate(subject="chat", action="create")

    if "migrate_to_chat_id" in data:
        to_id = _take(data, "migrate_to_chat_id", _int, path)
        return ChatUpdate(subject="chat", action="migrateTo", to_id=to_id)

    if "migrate_from_chat_id" in data:
        from_id = _take(data, "migrate_from_chat_id", _int, path)
        return ChatUpdate(subject="chat", action="migrateFrom", from_id=from_id)

    if "pinned_message" in data:
        pinned = parse_message(
            data.pop("pinned_message"), strict=strict, path=f"{path}.pinned_message"
        )
        return ChatUpdate(subject="message", action="pin", message=pinned)

    return None


MESSAGE_RECOGNIZERS: tuple[tuple[MessageType, Recognizer], ...] = (
    ("text", _recognize_text),
    ("audio", _recognize_audio),
    ("document", _recognize_document),
    ("photo", _recognize_photo),
    ("sticker", _recognize_sticker),
    ("video", _recognize_video),
    ("video_note", _recognize_video_note),
    ("voice", _recognize_voice),
    ("contact", _recognize_contact),
    ("location", _recognize_location),
    ("venue", _recognize_venue),
    ("game", _recognize_game),
    ("update", _recognize_update),
)


# Messages


def _parse_forward(data: dict[str, Any], path: str, strict: bool) -> Forward | None:
    if "forward_date" not in data:
        return None
    date = _date(_take(data, "forward_date", _int, path))
    sender = None
    if "forward_from" in data:
        sender = parse_user(data.pop("forward_from"), strict=strict, path=f"{path}.forward_from")
    chat = None
    if "forward_from_chat" in data:
        chat = parse_chat(
            data.pop("forward_from_chat"), strict=strict, path=f"{path}.forward_from_chat"
        )
    return Forward(
        date=date,
        sender=sender,
        chat=chat,
        message_id=_take_opt(data, "forward_from_message_id", _int, path),
        signature=_take_opt(data, "forward_signature", _str, path),
    )


def _sent_in_private(chat: Chat, sender: User | None) -> bool:
    # Bots answer in the user's chat, so their own messages carry another sender.
    if sender is None:
        return False
    return sender.id == chat.id or sender.is_bot is True


def parse_message(
    payload: Any,
    *,
    strict: bool = False,
    edited: bool = False,
    path: str = "message",
) -> Message:
    data = _obj(payload, path)
    message_id = _take(data, "message_id", _int, path)
    date = _date(_take(data, "date", _int, path))
    chat = parse_chat(_take(data, "chat", _obj, path), strict=strict, path=f"{path}.chat")
    sender = None
    if "from" in data:
        sender = parse_user(data.pop("from"), strict=strict, path=f"{path}.from")
    if strict and chat.type == "user" and not _sent_in_private(chat, sender):
        raise ValidationError("private chat message not sent by the chat user", path=path)

    forward = _parse_forward(data, path, strict)
    reply = None
    if "reply_to_message" in data:
        reply = parse_message(
            data.pop("reply_to_message"), strict=strict, path=f"{path}.reply_to_message"
        )
    edit_date_raw = _take_opt(data, "edit_date", _int, path)
    media_group_id = _take_opt(data, "media_group_id", _str, path)
    author_signature = _take_opt(data, "author_signature", _str, path)

    ctx = _Context(strict=strict, path=path, chat=chat)
    msg_type: MessageType | None = None
    content: Content | None = None
    for candidate, recognize in MESSAGE_RECOGNIZERS:
        result = recognize(data, ctx)
        if result is None:
            continue
        if msg_type is not None:
            raise ValidationError(
                f"duplicate types found in message ({msg_type}, {candidate})", path=path
            )
        msg_type, content = candidate, result
        if not strict:
            break
    if msg_type is None:
        if strict:
            raise ValidationError("unknown message type", path=path)
        logger.debug("parsing.message.untyped", message_id=message_id, fields=sorted(data))

    _finish(data, path, strict)
    return Message(
        id=message_id,
        date=date,
        chat=chat,
        sender=sender,
        type=msg_type,
        content=content,
        forward=forward,
        reply=reply,
        edit_date=_date(edit_date_raw) if edit_date_raw is not None else None,
        edited=edited,
        media_group_id=media_group_id,
        author_signature=author_signature,
        unparsed=data or None,
    )


# Callback queries and updates


def parse_callback_query(
    payload: Any,
    *,
    strict: bool = False,
    queued: bool = False,
    path: str = "callback_query",
) -> CallbackQuery:
    data = _obj(payload, path)
    query_id = _take(data, "id", _str, path)
    sender = parse_user(_take(data, "from", _obj, path), strict=strict, path=f"{path}.from")
    message = None
    if "message" in data:
        message = parse_message(data.pop("message"), strict=strict, path=f"{path}.message")
    inline_message_id = _take_opt(data, "inline_message_id", _str, path)
    if strict and (message is None) == (inline_message_id is None):
        raise ValidationError(
            "expected exactly one of message and inline_message_id", path=path
        )
    query = CallbackQuery(
        id=query_id,
        sender=sender,
        message=message,
        inline_message_id=inline_message_id,
        chat_instance=_take_opt(data, "chat_instance", _str, path),
        data=_take_opt(data, "data", _str, path),
        game_short_name=_take_opt(data, "game_short_name", _str, path),
        queued=queued,
    )
    _finish(data, path, strict)
    return query


def parse_update(payload: Any, *, strict: bool = False, queued: bool = False) -> Update:
    path = "update"
    data = _obj(decode_payload(payload), path)
    update_id = _take(data, "update_id", _int, path)
    kind = next((candidate for candidate in UPDATE_KINDS if candidate in data), None)
    if kind is None:
        if strict:
            raise ValidationError("unknown update kind", path=path)
        return Update(id=update_id, kind=None, queued=queued, unparsed=data or None)

    message = None
    callback_query = None
    if kind == "callback_query":
        callback_query = parse_callback_query(
            data.pop(kind), strict=strict, queued=queued, path=f"{path}.{kind}"
        )
    else:
        message = parse_message(
            data.pop(kind),
            strict=strict,
            edited=kind.startswith("edited_"),
            path=f"{path}.{kind}",
        )
    _finish(data, path, strict)
    return Update(
        id=update_id,
        kind=kind,
        message=message,
        callback_query=callback_query,
        queued=queued,
        unparsed=data or None,
    )


# Chat members and profile photos


def parse_chat_member(
    payload: Any, *, strict: bool = False, path: str = "chat_member"
) -> ChatMember:
    data = _obj(payload, path)
    user = parse_user(_take(data, "user", _obj, path), strict=strict, path=f"{path}.user")
    status = _take(data, "status", _str, path)
    until = _take_opt(data, "until_date", _int, path)
    can_be_edited = _take_opt(data, "can_be_edited", _bool, path)
    custom_title = _take_opt(data, "custom_title", _str, path)
    privileges = {
        key: _take(data, key, _bool, path)
        for key in sorted(data)
        if key.startswith(("can_", "is_"))
    }
    _finish(data, path, strict)
    return ChatMember(
        user=user,
        status=status,
        # 0 means the restriction never expires
        until=_date(until) if until else None,
        can_be_edited=can_be_edited,
        custom_title=custom_title,
        privileges=privileges,
    )


def parse_profile_photos(
    payload: Any, *, strict: bool = False, path: str = "profile_photos"
) -> ProfilePhotos:
    data = _obj(payload, path)
    total = _take(data, "total_count", _int, path)
    items = _take(data, "photos", _arr, path)
    photos = tuple(
        parse_photo(item, strict=strict, path=f"{path}.photos[{idx}]")
        for idx, item in enumerate(items)
    )
    _finish(data, path, strict)
    return ProfilePhotos(photos=photos, total=total)
