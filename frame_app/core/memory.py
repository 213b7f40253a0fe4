from __future__ import annotations

from typing import Any, Callable, Dict, List, Optional, Tuple


class MemoryStore:
    def __init__(self, initial: Optional[Dict[str, str]] = None) -> None:
        self.data: Dict[str, str] = dict(initial or {})

    def get_item(self, key: str) -> Optional[str]:
        return self.data.get(key)

    def set_item(self, key: str, value: str) -> None:
        self.data[key] = str(value)

    def remove_item(self, key: str) -> None:
        self.data.pop(key, None)


class FakeWindow:
    def __init__(self, query: str = "", url: str = "", name: str = "", features: str = "") -> None:
        self.query = query
        self.url = url
        self.name = name
        self.features = features
        self.closed = False

    def query_string(self) -> str:
        return self.query

    def close(self) -> None:
        self.closed = True


class FakeWindowOpener:
    """Records open() calls; `blocked=True` simulates a popup blocker."""

    def __init__(self, screen: Tuple[int, int] = (1920, 1080), blocked: bool = False) -> None:
        self.screen = screen
        self.blocked = blocked
        self.opened: List[FakeWindow] = []

    def open(self, url: str, name: str, features: str) -> Optional[FakeWindow]:
        if self.blocked:
            return None
        query = url.split("?", 1)[1] if "?" in url else ""
        w = FakeWindow(query=query, url=url, name=name, features=features)
        self.opened.append(w)
        return w

    def screen_size(self) -> Tuple[int, int]:
        return self.screen


class ManualScheduler:
    """Queues deferred calls until run_pending()."""

    def __init__(self) -> None:
        self.pending: List[Tuple[float, Callable[[], None]]] = []

    def call_later(self, delay_s: float, fn: Callable[[], None]) -> None:
        self.pending.append((delay_s, fn))

    def run_pending(self) -> int:
        calls, self.pending = self.pending, []
        for _, fn in calls:
            fn()
        return len(calls)


class RecordingNotifier:
    def __init__(self) -> None:
        self.alerts: List[Tuple[str, str]] = []

    def alert(self, title: str, message: str) -> None:
        self.alerts.append((title, message))


class StaticOpenerState:
    def __init__(self, fields: Optional[Dict[str, Any]] = None, error: Optional[Exception] = None) -> None:
        self.fields = dict(fields or {})
        self.error = error

    def read(self, field: str) -> Any:
        if self.error is not None:
            raise self.error
        return self.fields.get(field)


class FailingStore(MemoryStore):
    """MemoryStore whose reads and/or writes raise."""

    def __init__(self, fail_reads: bool = False, fail_writes: bool = True) -> None:
        super().__init__()
        self.fail_reads = fail_reads
        self.fail_writes = fail_writes

    def get_item(self, key: str) -> Optional[str]:
        if self.fail_reads:
            raise OSError("storage read refused")
        return super().get_item(key)

    def set_item(self, key: str, value: str) -> None:
        if self.fail_writes:
            raise OSError("storage quota exceeded")
        super().set_item(key, value)
