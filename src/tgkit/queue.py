"""Per-destination action queues.

Every destination key owns a FIFO of pending actions and at most one action
in flight. Keys are created on first enqueue and dropped once drained, so
dormant destinations cost nothing. Different keys run concurrently.
"""

from __future__ import annotations

import inspect
from collections import deque
from collections.abc import Awaitable, Callable, Hashable
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

import anyio

from .errors import UsageError
from .events import ErrorChannel
from .logging import get_logger
from .transport import Transport

if TYPE_CHECKING:
    from anyio.abc import TaskGroup
else:
    TaskGroup = object

logger = get_logger(__name__)

__all__ = ["Action", "ActionQueue", "CompletionHook", "Proceed"]

Proceed = Callable[[], None]
CompletionHook = Callable[[Exception | None, Any, Proceed], Awaitable[None] | None]


@dataclass(slots=True, eq=False)
class Action:
    """One outbound call. ``method=None`` makes a hook-only action."""

    method: str | None
    parameters: dict[str, Any] = field(default_factory=dict)
    then: CompletionHook | None = None
    done: bool = field(default=False, init=False)


@dataclass(slots=True)
class _QueueState:
    pending: deque[Action] = field(default_factory=deque)
    current: Action | None = None

    @property
    def tail(self) -> Action | None:
        return self.pending[-1] if self.pending else self.current

    def __len__(self) -> int:
        return len(self.pending) + (self.current is not None)


class ActionQueue:
    def __init__(
        self,
        transport: Transport,
        *,
        errors: ErrorChannel | None = None,
        immediate: bool = False,
    ) -> None:
        self._transport = transport
        self._errors = errors if errors is not None else ErrorChannel()
        self.immediate = immediate
        self._states: dict[Hashable, _QueueState] = {}
        self._tg: TaskGroup | None = None
        self._workers = 0
        self._idle: anyio.Event | None = None

    @property
    def errors(self) -> ErrorChannel:
        return self._errors

    @property
    def running(self) -> bool:
        return self._tg is not None

    @property
    def active_keys(self) -> tuple[Hashable, ...]:
        return tuple(self._states)

    def pending(self, key: Hashable) -> int:
        """Number of actions queued or in flight for ``key``."""
        state = self._states.get(key)
        return len(state) if state is not None else 0

    def tail(self, key: Hashable) -> Action | None:
        state = self._states.get(key)
        return state.tail if state is not None else None

    async def __aenter__(self) -> ActionQueue:
        if self._tg is not None:
            raise UsageError("action queue is already running")
        tg = anyio.create_task_group()
        await tg.__aenter__()
        self._tg = tg
        return self

    async def __aexit__(self, exc_type, exc, tb) -> bool | None:
        if self._tg is None:
            raise UsageError("action queue is not running")
        try:
            return await self._tg.__aexit__(exc_type, exc, tb)
        finally:
            self._tg = None

    def enqueue(self, key: Hashable, action: Action) -> Action:
        if self._tg is None:
            raise UsageError("action queue is not running")
        if self.immediate:
            self._workers += 1
            self._tg.start_soon(self._run_detached, action)
            return action
        state = self._states.get(key)
        if state is not None:
            state.pending.append(action)
            return action
        state = _QueueState(pending=deque([action]))
        self._states[key] = state
        self._workers += 1
        self._tg.start_soon(self._drain, key, state)
        return action

    def attach(self, key: Hashable, action: Action | None, hook: CompletionHook) -> Action:
        """Attach ``hook`` to ``action`` if it has not completed yet.

        Otherwise a hook-only action is queued on ``key``; its hook receives
        ``(None, None, proceed)``.
        """
        if action is not None and not action.done and action.then is None:
            action.then = hook
            return action
        return self.enqueue(key, Action(method=None, then=hook))

    async def wait_idle(self) -> None:
        while self._workers:
            if self._idle is None or self._idle.is_set():
                self._idle = anyio.Event()
            await self._idle.wait()

    def _worker_done(self) -> None:
        self._workers -= 1
        if not self._workers and self._idle is not None:
            self._idle.set()

    async def _drain(self, key: Hashable, state: _QueueState) -> None:
        try:
            while state.pending:
                action = state.pending.popleft()
                state.current = action
                await self._run(action, wait=True)
                state.current = None
        finally:
            if self._states.get(key) is state:
                del self._states[key]
            self._worker_done()

    async def _run_detached(self, action: Action) -> None:
        try:
            await self._run(action, wait=False)
        finally:
            self._worker_done()

    async def _run(self, action: Action, *, wait: bool) -> None:
        error: Exception | None = None
        result: Any = None
        if action.method is not None:
            try:
                result = await self._transport.call(action.method, action.parameters)
            except Exception as exc:  # noqa: BLE001
                error = exc
                logger.debug(
                    "queue.action.failed",
                    method=action.method,
                    error=str(exc),
                    error_type=type(exc).__name__,
                )
        action.done = True
        hook = action.then
        if hook is None:
            if error is not None:
                self._errors.emit(error, method=action.method)
            return

        proceed = anyio.Event()
        try:
            outcome = hook(error, result, proceed.set)
            if inspect.isawaitable(outcome):
                await outcome
        except Exception as exc:  # noqa: BLE001
            logger.warning("queue.hook.failed", method=action.method, error=str(exc))
            self._errors.emit(exc, method=action.method)
            return
        if wait:
            await proceed.wait()
