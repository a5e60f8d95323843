import anyio
import pytest

from tgkit.errors import ApiError, UsageError
from tgkit.events import ErrorChannel
from tgkit.queue import Action, ActionQueue
from tests.fakes import RecordingTransport, settle


@pytest.mark.anyio
async def test_same_key_starts_in_enqueue_order(transport: RecordingTransport) -> None:
    gate = transport.hold("sendPhoto")
    async with ActionQueue(transport) as queue:
        queue.enqueue(1, Action("sendPhoto", {"chat_id": 1, "photo": "p"}))
        queue.enqueue(1, Action("sendMessage", {"chat_id": 1, "text": "after"}))
        await settle()

        assert transport.started == ["sendPhoto"]
        assert queue.pending(1) == 2

        gate.set()
        with anyio.fail_after(1):
            await queue.wait_idle()

    assert transport.methods == ["sendPhoto", "sendMessage"]


@pytest.mark.anyio
async def test_keys_run_independently(transport: RecordingTransport) -> None:
    gate = transport.hold("sendPhoto")
    async with ActionQueue(transport) as queue:
        queue.enqueue(1, Action("sendPhoto"))
        queue.enqueue(2, Action("sendMessage"))
        await settle()

        assert transport.methods == ["sendMessage"]
        assert queue.active_keys == (1,)

        gate.set()


@pytest.mark.anyio
async def test_failure_without_hook_is_reported_once(transport: RecordingTransport) -> None:
    errors = ErrorChannel()
    seen: list[Exception] = []
    errors.subscribe(seen.append)
    transport.fail("sendPhoto")

    async with ActionQueue(transport, errors=errors) as queue:
        queue.enqueue(1, Action("sendPhoto"))
        queue.enqueue(1, Action("sendMessage"))
        with anyio.fail_after(1):
            await queue.wait_idle()

    assert len(seen) == 1
    assert isinstance(seen[0], ApiError)
    assert transport.methods == ["sendPhoto", "sendMessage"]


@pytest.mark.anyio
async def test_hook_holds_queue_until_proceed(transport: RecordingTransport) -> None:
    calls: list[tuple[Exception | None, object]] = []
    proceeds = []

    def hook(error, result, proceed) -> None:
        calls.append((error, result))
        proceeds.append(proceed)

    async with ActionQueue(transport) as queue:
        queue.enqueue(1, Action("sendMessage", {"text": "first"}, then=hook))
        queue.enqueue(1, Action("sendPhoto"))
        await settle()

        assert transport.methods == ["sendMessage"]
        assert calls[0][0] is None
        assert calls[0][1]["message_id"] == 101
        assert queue.pending(1) == 2

        proceeds[0]()
        with anyio.fail_after(1):
            await queue.wait_idle()

    assert transport.methods == ["sendMessage", "sendPhoto"]


@pytest.mark.anyio
async def test_hook_receives_failure_instead_of_channel(transport: RecordingTransport) -> None:
    errors = ErrorChannel()
    reported: list[Exception] = []
    errors.subscribe(reported.append)
    transport.fail("sendMessage", "chat not found")
    received: list[Exception | None] = []

    async def hook(error, result, proceed) -> None:
        received.append(error)
        proceed()

    async with ActionQueue(transport, errors=errors) as queue:
        queue.enqueue(1, Action("sendMessage", then=hook))

    assert reported == []
    assert len(received) == 1
    assert str(received[0]) == "chat not found"


@pytest.mark.anyio
async def test_raising_hook_is_reported_and_queue_advances(
    transport: RecordingTransport,
) -> None:
    errors = ErrorChannel()
    reported: list[Exception] = []
    errors.subscribe(reported.append)

    def hook(error, result, proceed) -> None:
        raise RuntimeError("boom")

    async with ActionQueue(transport, errors=errors) as queue:
        queue.enqueue(1, Action("sendMessage", then=hook))
        queue.enqueue(1, Action("sendPhoto"))

    assert [str(error) for error in reported] == ["boom"]
    assert transport.methods == ["sendMessage", "sendPhoto"]


@pytest.mark.anyio
async def test_attach_after_completion_queues_hook_only_action(
    transport: RecordingTransport,
) -> None:
    received = []

    def hook(error, result, proceed) -> None:
        received.append((error, result))
        proceed()

    async with ActionQueue(transport) as queue:
        action = queue.enqueue(1, Action("sendMessage"))
        with anyio.fail_after(1):
            await queue.wait_idle()
        assert action.done

        hook_action = queue.attach(1, action, hook)
        assert hook_action is not action
        assert hook_action.method is None

    assert received == [(None, None)]
    assert transport.methods == ["sendMessage"]


@pytest.mark.anyio
async def test_attach_to_pending_action(transport: RecordingTransport) -> None:
    gate = transport.hold("sendMessage")
    results = []

    def hook(error, result, proceed) -> None:
        results.append(result)
        proceed()

    async with ActionQueue(transport) as queue:
        action = queue.enqueue(1, Action("sendMessage"))
        assert queue.attach(1, action, hook) is action
        gate.set()

    assert len(results) == 1
    assert results[0]["message_id"] == 101


@pytest.mark.anyio
async def test_drained_key_is_dropped(transport: RecordingTransport) -> None:
    async with ActionQueue(transport) as queue:
        queue.enqueue("a", Action("sendMessage"))
        queue.enqueue(object(), Action("sendMessage"))
        with anyio.fail_after(1):
            await queue.wait_idle()

        assert queue.active_keys == ()
        assert queue.pending("a") == 0


@pytest.mark.anyio
async def test_immediate_mode_does_not_serialize(transport: RecordingTransport) -> None:
    gate = transport.hold("sendPhoto")
    async with ActionQueue(transport, immediate=True) as queue:
        queue.enqueue(1, Action("sendPhoto"))
        queue.enqueue(1, Action("sendMessage"))
        await settle()

        assert transport.started == ["sendPhoto", "sendMessage"]
        assert transport.methods == ["sendMessage"]
        gate.set()


def test_enqueue_requires_running_queue(transport: RecordingTransport) -> None:
    queue = ActionQueue(transport)

    with pytest.raises(UsageError):
        queue.enqueue(1, Action("sendMessage"))


@pytest.mark.anyio
async def test_exit_without_enter_is_usage_error(transport: RecordingTransport) -> None:
    queue = ActionQueue(transport)

    with pytest.raises(UsageError, match="not running"):
        await queue.__aexit__(None, None, None)
