from __future__ import annotations

import re
from collections.abc import Iterable

from .model import Command, Mentions

__all__ = [
    "format_command",
    "match_command",
    "parse_command",
    "parse_hashtags",
    "parse_mentions",
]

_COMMAND_RE = re.compile(
    r"/(?P<name>[A-Za-z0-9_]+)(?:@(?P<username>[A-Za-z0-9_]+))?(?=\s|$)(?P<args>.*)\Z",
    re.DOTALL,
)
# The sigil must follow start-of-text or a non-word char, and the handle must
# be followed by a non-word char or end-of-text.
_MENTION_RE = re.compile(r"(?<!\w)@(?P<handle>[A-Za-z0-9_]+)(?!\w)")
_HASHTAG_RE = re.compile(r"(?<!\w)#(?P<handle>[A-Za-z0-9_]+)(?!\w)")


def parse_command(text: str) -> Command | None:
    match = _COMMAND_RE.match(text)
    if match is None:
        return None
    return Command(
        name=match.group("name"),
        username=match.group("username"),
        raw_args=match.group("args"),
    )


def parse_mentions(text: str) -> Mentions:
    return Mentions(tuple(m.group("handle") for m in _MENTION_RE.finditer(text)))


def parse_hashtags(text: str) -> Mentions:
    return Mentions(tuple(m.group("handle") for m in _HASHTAG_RE.finditer(text)))


def match_command(name: str, names: Iterable[str | re.Pattern[str]]) -> bool:
    """Strings match case-insensitively, patterns with ``search``."""
    for candidate in names:
        if isinstance(candidate, re.Pattern):
            if candidate.search(name):
                return True
        elif candidate.lstrip("/").lower() == name.lower():
            return True
    return False


def format_command(
    command: str, args: Iterable[str] | str = (), *, username: str | None = None
) -> str:
    if isinstance(args, str):
        args = [args] if args else []
    text = f"/{command}"
    if username:
        text += f"@{username.lstrip('@')}"
    rest = " ".join(arg for arg in args if arg)
    if rest:
        text += f" {rest}"
    return text
