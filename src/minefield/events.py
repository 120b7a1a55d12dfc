"""Typed broadcast channels for engine events."""
from typing import Callable, Generic, List, TypeVar

T = TypeVar("T", bound=Callable[..., None])


class Signal(Generic[T]):
    """
    One event kind with any number of subscribers.

    Subscribers run synchronously, in connection order, inside the emit
    call. Exceptions raised by a subscriber propagate to the emitter.
    """

    def __init__(self, name: str) -> None:
        self.name = name
        self._callbacks: List[T] = []

    def connect(self, callback: T) -> T:
        """Subscribe a callback. Returns it so it can be used as a decorator."""
        self._callbacks.append(callback)
        return callback

    def disconnect(self, callback: T) -> None:
        """Unsubscribe a callback; unknown callbacks are ignored."""
        if callback in self._callbacks:
            self._callbacks.remove(callback)

    def emit(self, *args) -> None:
        # Copy so a subscriber may disconnect itself
        for callback in list(self._callbacks):
            callback(*args)

    def __len__(self) -> int:
        return len(self._callbacks)
