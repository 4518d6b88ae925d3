"""Notifications emitted around every dispatched invocation, e.g., for logging or metrics."""
import dataclasses
import logging
import threading
from typing import Any, Callable, Dict, List, Type

from sidecar.results import ResultHandle

LOG = logging.getLogger(__name__)


@dataclasses.dataclass(frozen=True)
class BeforeFunctionExecuted:
    function: Any
    payload: Any


@dataclasses.dataclass(frozen=True)
class AfterFunctionExecuted:
    function: Any
    payload: Any
    result: ResultHandle


Listener = Callable[[Any], None]


class EventDispatcher:
    """Calls the listeners registered for an event type, in registration order. Errors raised by listeners
    propagate to the dispatching call."""

    listeners: Dict[Type, List[Listener]]

    def __init__(self):
        self.listeners = {}
        self._lock = threading.RLock()

    def listen(self, event_type: Type, listener: Listener) -> Callable[[], None]:
        """Register a listener, and return a callable that removes it again."""
        with self._lock:
            self.listeners.setdefault(event_type, []).append(listener)

        def _remove():
            with self._lock:
                if listener in self.listeners.get(event_type, []):
                    self.listeners[event_type].remove(listener)

        return _remove

    def has_listeners(self, event_type: Type) -> bool:
        return bool(self.listeners.get(event_type))

    def dispatch(self, event: Any):
        with self._lock:
            listeners = list(self.listeners.get(type(event), []))
        for listener in listeners:
            listener(event)

    def clear(self):
        with self._lock:
            self.listeners.clear()
