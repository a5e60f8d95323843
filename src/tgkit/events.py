from __future__ import annotations

from collections.abc import Callable
from typing import Any

from .logging import get_logger

logger = get_logger(__name__)

ErrorListener = Callable[[Exception], Any]


class ErrorChannel:
    """Sink for failures nobody else claimed (unhooked actions, transport faults).

    Listeners are called synchronously, once per error, in subscription
    order. Without listeners the error is only logged; ``emit`` never raises.
    """

    def __init__(self) -> None:
        self._listeners: list[ErrorListener] = []

    def subscribe(self, listener: ErrorListener) -> Callable[[], None]:
        self._listeners.append(listener)

        def unsubscribe() -> None:
            try:
                self._listeners.remove(listener)
            except ValueError:
                pass

        return unsubscribe

    @property
    def has_listeners(self) -> bool:
        return bool(self._listeners)

    def emit(self, error: Exception, **context: Any) -> None:
        if not self._listeners:
            logger.error(
                "errors.unhandled",
                error=str(error),
                error_type=type(error).__name__,
                **context,
            )
            return
        for listener in list(self._listeners):
            try:
                listener(error)
            except Exception as exc:  # noqa: BLE001
                logger.exception(
                    "errors.listener_failed",
                    error=str(exc),
                    error_type=type(exc).__name__,
                )
