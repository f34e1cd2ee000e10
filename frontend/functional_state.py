"""
Observable value cells.

A ``FunctionalState`` holds one value and notifies subscribers when it
changes. The session layer keeps its authorization flag, profile and token in
cells so that whatever renders the dashboard can re-render on change without
polling.

Usage:
    state = FunctionalState(0)
    unsubscribe = state.subscribe(lambda value: print("now", value))
    state.set_state(1)  # prints "now 1"
    unsubscribe()
"""

from collections.abc import Callable
from typing import Any

Subscriber = Callable[[Any], None]
Listener = Callable[[dict], None]

CHANGED = "changed"

_SCALAR_TYPES = (str, int, float, bool, bytes, type(None))


def _same(a: Any, b: Any) -> bool:
    """Identity for objects, value equality for immutable scalars of one type."""
    if a is b:
        return True
    return type(a) is type(b) and isinstance(a, _SCALAR_TYPES) and a == b


class FunctionalState:
    """
    A single mutable value plus its subscribers.

    Subscribers are called synchronously, in registration order, with the new
    value. After them the optional ``change_callback`` runs, then a
    ``changed`` event ({"value", "state"}) goes to listeners registered with
    ``on``. Subscribing or unsubscribing from inside a callback is safe: each
    notification iterates a snapshot.
    """

    def __init__(self, value: Any = None, change_callback: Subscriber | None = None):
        self.value = value
        self.change_callback = change_callback
        self.callbacks: list[Subscriber] = []
        self._listeners: dict[str, list[Listener]] = {}

    def destroy(self) -> None:
        """Drop every subscriber and listener."""
        self.callbacks = []
        self._listeners = {}

    def subscribe(self, callback: Subscriber) -> Callable[[], None]:
        """Register a subscriber. Returns a function that removes it again."""
        self.callbacks = [*self.callbacks, callback]

        def unsubscribe() -> None:
            self.callbacks = [cb for cb in self.callbacks if cb is not callback]

        return unsubscribe

    def on(self, event: str, listener: Listener) -> None:
        self._listeners[event] = [*self._listeners.get(event, []), listener]

    def off(self, event: str, listener: Listener) -> None:
        self._listeners[event] = [x for x in self._listeners.get(event, []) if x != listener]

    def emit(self, event: str, payload: dict) -> None:
        for listener in self._listeners.get(event, []):
            listener(payload)

    def set_state(self, value: Any, force: bool = False) -> None:
        """
        Update the value and notify.

        Setting the value the cell already holds is a no-op unless ``force``
        is given.
        """
        if _same(value, self.value) and not force:
            return

        self.value = value

        for callback in self.callbacks:
            callback(value)

        if self.change_callback:
            self.change_callback(value)

        self.emit(CHANGED, {"value": value, "state": self})

    def set_value(self, value: Any) -> None:
        self.set_state(value)

    def get_value(self) -> Any:
        return self.value


class StateBinding:
    """
    A read-only shadow of a cell for one consumer.

    Keeps ``value`` in step with the cell through its ``changed`` event until
    closed. Extra callbacks registered with ``watch`` run after each update,
    which is how a view learns it should re-render.
    """

    def __init__(self, state: FunctionalState | None):
        self._state = state
        self._watchers: list[Subscriber] = []
        self.value = state.get_value() if state else None
        if state:
            state.on(CHANGED, self._on_changed)

    def _on_changed(self, event: dict) -> None:
        self.value = event["value"]
        for watcher in list(self._watchers):
            watcher(self.value)

    def watch(self, callback: Subscriber) -> None:
        self._watchers.append(callback)

    def close(self) -> None:
        if self._state:
            self._state.off(CHANGED, self._on_changed)
        self._watchers = []

    def __enter__(self) -> "StateBinding":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
        return False


def use_functional_state(state: FunctionalState | None) -> StateBinding:
    """Bind to a cell that may not exist yet; a missing cell shadows None."""
    return StateBinding(state)
