from collections import defaultdict
import logging
from typing import Any, Callable, DefaultDict, List


Handler = Callable[[Any], None]


class EventBus:
    """Synchronous topic bus.

    Handlers run in (priority, registration) order. A topic ending in ``*``
    subscribes to every topic sharing that prefix. Handler failures are logged
    and isolated so the remaining handlers still run.
    """

    def __init__(self) -> None:
        self._subscribers: DefaultDict[str, List[tuple[int, int, Handler]]] = defaultdict(list)
        self._next_order = 0
        self._last_publish_errors: List[Exception] = []
        self._logger = logging.getLogger(__name__)

    def subscribe(self, topic: str, handler: Handler, *, priority: int = 100) -> None:
        if not topic or not callable(handler):
            return
        self._subscribers[str(topic)].append((int(priority), self._next_order, handler))
        self._next_order += 1
        self._subscribers[str(topic)].sort(key=lambda row: (row[0], row[1]))

    def unsubscribe(self, topic: str, handler: Handler) -> None:
        rows = self._subscribers.get(str(topic))
        if not rows:
            return
        self._subscribers[str(topic)] = [row for row in rows if row[2] is not handler]

    def _handlers_for(self, topic: str) -> List[tuple[int, int, Handler]]:
        matched = list(self._subscribers.get(topic, ()))
        for key, rows in self._subscribers.items():
            if key.endswith("*") and key != topic and topic.startswith(key[:-1]):
                matched.extend(rows)
        matched.sort(key=lambda row: (row[0], row[1]))
        return matched

    def publish(self, topic: str, payload: Any = None) -> None:
        self._last_publish_errors = []
        for priority, _, handler in self._handlers_for(str(topic)):
            try:
                handler(payload)
            except Exception as exc:
                self._last_publish_errors.append(exc)
                handler_name = getattr(handler, "__qualname__", getattr(handler, "__name__", repr(handler)))
                self._logger.exception(
                    "Event handler failed and was isolated",
                    extra={
                        "topic": topic,
                        "handler": handler_name,
                        "priority": priority,
                    },
                )

    on = subscribe
    emit = publish

    def clear(self) -> None:
        self._subscribers.clear()

    def last_publish_errors(self) -> List[Exception]:
        """Handler failures from the most recent ``publish`` call only.

        Each ``publish`` clears the list, so a caller that publishes several
        topics in a row must read it after each one.
        """
        return list(self._last_publish_errors)
