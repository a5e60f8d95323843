from collections.abc import Callable

import pytest

from tgkit import Bot, BotOptions
from tests.fakes import RecordingTransport


@pytest.fixture
def transport() -> RecordingTransport:
    return RecordingTransport()


@pytest.fixture
def make_bot(transport: RecordingTransport) -> Callable[..., Bot]:
    def _factory(**options) -> Bot:
        options.setdefault("username", "mybot")
        return Bot(transport, BotOptions(**options))

    return _factory
