from __future__ import annotations

__version__ = "0.4.0"

from .bot import Bot
from .config import BotOptions, ConfigError, load_options
from .errors import (
    ApiError,
    BotError,
    NetworkError,
    RequestError,
    ResolutionError,
    UsageError,
    ValidationError,
)
from .events import ErrorChannel
from .model import (
    CallbackQuery,
    Chat,
    ChatMember,
    Command,
    File,
    Image,
    Message,
    Photo,
    ProfilePhotos,
    Update,
    User,
    resolve_chat,
    resolve_file,
    resolve_message,
)
from .parsing import parse_update
from .queue import Action, ActionQueue
from .reply import ReplyQueue
from .transport import Transport

__all__ = [
    "Action",
    "ActionQueue",
    "ApiError",
    "Bot",
    "BotError",
    "BotOptions",
    "CallbackQuery",
    "Chat",
    "ChatMember",
    "Command",
    "ConfigError",
    "ErrorChannel",
    "File",
    "Image",
    "Message",
    "NetworkError",
    "Photo",
    "ProfilePhotos",
    "ReplyQueue",
    "RequestError",
    "ResolutionError",
    "Transport",
    "Update",
    "UsageError",
    "User",
    "ValidationError",
    "load_options",
    "parse_update",
    "resolve_chat",
    "resolve_file",
    "resolve_message",
]
