"""Signal dispatch for objects that publish state changes.

Signals must be declared with ``add_signal`` before they can be connected to
or emitted. Each callback receives the emitting object followed by the
arguments passed to ``emit_signal``.

Subscriptions that should end together are grouped in a ConnectionScope
(see ``SignalObject.connection_scope``), which disconnects all of them when
it is closed.
"""

import threading
from contextlib import contextmanager
from typing import Any, Callable, Iterator


SignalCallback = Callable[..., Any]


class SignalError(LookupError):
    """Raised when using a signal that was never added."""


class SignalConnection:
    """Handle for one connected callback."""

    def __init__(self, owner: "SignalObject", name: str, callback: SignalCallback):
        self.owner = owner
        self.name = name
        self.callback = callback

    @property
    def connected(self) -> bool:
        return self.owner.is_connected(self.name, self.callback)

    def disconnect(self) -> None:
        self.owner.disconnect_signal(self.name, self.callback)

    def __repr__(self) -> str:
        state = "connected" if self.connected else "disconnected"
        return f"<SignalConnection {self.name!r} {state}>"


class ConnectionScope:
    """A group of connections that are disconnected together."""

    def __init__(self) -> None:
        self._connections: list[SignalConnection] = []
        self.closed = False

    def connect(self, owner: "SignalObject", name: str, callback: SignalCallback) -> SignalConnection:
        if self.closed:
            raise RuntimeError("Cannot connect through a closed scope")
        connection = owner.connect_signal(name, callback)
        self._connections.append(connection)
        return connection

    def close(self) -> None:
        for connection in reversed(self._connections):
            connection.disconnect()
        self._connections.clear()
        self.closed = True

    def __enter__(self) -> "ConnectionScope":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()


class SignalObject:
    """Base class for objects that emit named signals."""

    def __init__(self) -> None:
        self._signals: dict[str, list[SignalCallback]] = {}
        self._signal_lock = threading.RLock()

    def _find_signal(self, name: str, action: str) -> list[SignalCallback]:
        try:
            return self._signals[name]
        except KeyError:
            raise SignalError(f"Trying to {action} non-existent signal '{name}'") from None

    def add_signal(self, name: str) -> None:
        """Declare a signal. Adding an existing signal is a no-op."""
        if not isinstance(name, str):
            raise TypeError(f"name must be a string, got: {type(name).__name__}")
        with self._signal_lock:
            self._signals.setdefault(name, [])

    def connect_signal(self, name: str, callback: SignalCallback) -> SignalConnection:
        """
        Connect a callback to a signal.

        Connecting the same callback twice keeps a single subscription.

        Returns:
            Handle that can disconnect the callback again

        Raises:
            SignalError: If the signal was never added
        """
        if not callable(callback):
            raise TypeError(f"callback must be callable, got: {type(callback).__name__}")
        with self._signal_lock:
            callbacks = self._find_signal(name, "connect to")
            if callback not in callbacks:
                callbacks.append(callback)
        return SignalConnection(self, name, callback)

    def disconnect_signal(self, name: str, callback: SignalCallback) -> None:
        with self._signal_lock:
            callbacks = self._find_signal(name, "disconnect from")
            if callback in callbacks:
                callbacks.remove(callback)

    def is_connected(self, name: str, callback: SignalCallback) -> bool:
        with self._signal_lock:
            return callback in self._find_signal(name, "inspect")

    def emit_signal(self, name: str, *args: Any) -> None:
        """Call every connected callback in connection order."""
        with self._signal_lock:
            callbacks = list(self._find_signal(name, "emit"))
        for callback in callbacks:
            callback(self, *args)

    @contextmanager
    def connection_scope(self) -> Iterator[ConnectionScope]:
        """
        Scope whose connections are dropped on exit.

        Example:
            >>> with coordinator.connection_scope() as scope:
            ...     scope.connect(coordinator, "entry::found", on_entry)
        """
        scope = ConnectionScope()
        try:
            yield scope
        finally:
            scope.close()
