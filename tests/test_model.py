import pytest

from tgkit.errors import ResolutionError
from tgkit.model import Chat, File, Image, Mentions, resolve_chat, resolve_file, resolve_message
from tgkit.parsing import parse_message
from tests.factories import message, text_message


def test_resolve_chat() -> None:
    assert resolve_chat(Chat(id=5, type="group", title="g")) == 5
    assert resolve_chat(-100) == -100
    for bad in ("5", True, None, 1.5):
        with pytest.raises(ResolutionError):
            resolve_chat(bad)


def test_resolve_message() -> None:
    msg = parse_message(text_message("hi", 12))

    assert resolve_message(msg) == 12
    assert resolve_message(3) == 3
    with pytest.raises(ResolutionError):
        resolve_message("3")


def test_resolve_file() -> None:
    file = File(id="abc")
    audio = parse_message(message(audio={"file_id": "a1", "duration": 1})).content

    assert resolve_file(file) == "abc"
    assert resolve_file(Image(file=file, width=1, height=1)) == "abc"
    assert resolve_file(audio) == "a1"
    assert resolve_file("raw-id") == "raw-id"
    with pytest.raises(ResolutionError):
        resolve_file("")
    with pytest.raises(ResolutionError):
        resolve_file(42)


def test_chat_verify() -> None:
    assert Chat(id=1, type="user", first_name="A").verify()
    assert not Chat(id=1, type="user", first_name="A", title="T").verify()
    assert not Chat(id=1, type="group", title="G", first_name="A").verify()
    assert Chat(id=1, type="channel", title="C", username="c").verify()
    assert not Chat(id=1, type="channel", title="C").verify()


def test_mentions_view() -> None:
    mentions = Mentions(("alice", "Alice", "bob"))

    assert mentions.count("ALICE") == 2
    assert "@bob" in mentions
    assert 3 not in mentions
    assert len(mentions) == 3
    assert not Mentions()
