from __future__ import annotations
from typing import Any, Callable, Optional, Protocol, Tuple


class WindowHandle(Protocol):
    closed: bool

    def close(self) -> None:
        ...


class WindowOpener(Protocol):
    """
    Opens top-level windows (browser tabs, Qt windows, fakes).

    open() returns None when the window was refused, e.g. by a popup blocker.
    """

    def open(self, url: str, name: str, features: str) -> Optional[WindowHandle]:
        ...

    def screen_size(self) -> Tuple[int, int]:
        ...


class CurrentWindow(Protocol):
    """The window the code runs in: its location query string and close()."""

    def query_string(self) -> str:
        ...

    def close(self) -> None:
        ...


class KeyValueStore(Protocol):
    """String key/value channel shared between windows (localStorage/sessionStorage)."""

    def get_item(self, key: str) -> Optional[str]:
        ...

    def set_item(self, key: str, value: str) -> None:
        ...

    def remove_item(self, key: str) -> None:
        ...


class OpenerStateReader(Protocol):
    """
    Read-only view of the opener window's in-memory state.
    Returns None when there is no opener; may raise when it is not accessible.
    """

    def read(self, field: str) -> Any:
        ...


class Notifier(Protocol):
    """Blocking, user-visible notification."""

    def alert(self, title: str, message: str) -> None:
        ...


class Scheduler(Protocol):
    """Fire-and-forget deferred calls. Not cancellable."""

    def call_later(self, delay_s: float, fn: Callable[[], None]) -> None:
        ...
