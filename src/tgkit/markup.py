from __future__ import annotations

from collections.abc import Iterable, Sequence
from typing import Any

import msgspec

__all__ = [
    "ForceReply",
    "InlineKeyboardButton",
    "InlineKeyboardMarkup",
    "KeyboardButton",
    "ReplyKeyboardMarkup",
    "ReplyKeyboardRemove",
    "format_inline_keyboard",
    "format_keyboard",
    "to_parameter",
]


class KeyboardButton(msgspec.Struct, omit_defaults=True):
    text: str
    request_contact: bool = False
    request_location: bool = False


class ReplyKeyboardMarkup(msgspec.Struct, omit_defaults=True):
    keyboard: list[list[KeyboardButton]]
    resize_keyboard: bool = False
    one_time_keyboard: bool = False
    selective: bool = False


class ReplyKeyboardRemove(msgspec.Struct, omit_defaults=True):
    remove_keyboard: bool
    selective: bool = False


class ForceReply(msgspec.Struct, omit_defaults=True):
    force_reply: bool
    selective: bool = False


class InlineKeyboardButton(msgspec.Struct, omit_defaults=True):
    text: str
    url: str | None = None
    callback_data: str | None = None
    switch_inline_query: str | None = None
    switch_inline_query_current_chat: str | None = None
    pay: bool = False


class InlineKeyboardMarkup(msgspec.Struct, omit_defaults=True):
    inline_keyboard: list[list[InlineKeyboardButton]]


KeyboardKey = str | KeyboardButton | dict[str, Any]


def _keyboard_button(key: KeyboardKey) -> KeyboardButton:
    if isinstance(key, KeyboardButton):
        return key
    if isinstance(key, str):
        return KeyboardButton(text=key)
    request = key.get("request")
    return KeyboardButton(
        text=key["text"],
        request_contact=request == "contact",
        request_location=request == "location",
    )


def format_keyboard(
    rows: Iterable[KeyboardKey | Sequence[KeyboardKey]],
) -> list[list[KeyboardButton]]:
    """Normalise keyboard rows; a bare key is a row with a single button."""
    result: list[list[KeyboardButton]] = []
    for row in rows:
        if isinstance(row, (str, dict, KeyboardButton)):
            result.append([_keyboard_button(row)])
        else:
            result.append([_keyboard_button(key) for key in row])
    return result


def format_inline_keyboard(
    rows: Iterable[Sequence[InlineKeyboardButton | dict[str, Any]]],
) -> list[list[InlineKeyboardButton]]:
    return [
        [
            button
            if isinstance(button, InlineKeyboardButton)
            else msgspec.convert(button, type=InlineKeyboardButton)
            for button in row
        ]
        for row in rows
    ]


def to_parameter(markup: msgspec.Struct) -> dict[str, Any]:
    return msgspec.to_builtins(markup)
