from tgkit.events import ErrorChannel


def test_listeners_receive_each_error_once() -> None:
    channel = ErrorChannel()
    first: list[Exception] = []
    second: list[Exception] = []
    channel.subscribe(first.append)
    channel.subscribe(second.append)
    error = RuntimeError("boom")

    channel.emit(error, method="sendMessage")

    assert first == [error]
    assert second == [error]


def test_unsubscribe() -> None:
    channel = ErrorChannel()
    seen: list[Exception] = []
    unsubscribe = channel.subscribe(seen.append)

    unsubscribe()
    unsubscribe()
    channel.emit(RuntimeError("ignored"))

    assert seen == []
    assert not channel.has_listeners


def test_failing_listener_does_not_stop_others() -> None:
    channel = ErrorChannel()
    seen: list[Exception] = []

    def broken(error: Exception) -> None:
        raise ValueError("listener bug")

    channel.subscribe(broken)
    channel.subscribe(seen.append)
    channel.emit(RuntimeError("boom"))

    assert len(seen) == 1


def test_emit_without_listeners_does_not_raise() -> None:
    ErrorChannel().emit(RuntimeError("nobody listens"), method="sendPhoto")
