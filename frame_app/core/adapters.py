from __future__ import annotations

import json
import os
import threading
import webbrowser
from pathlib import Path
from typing import Any, Callable, Dict, Optional, Tuple

from loguru import logger

from frame_app.core.paths import storage_dir

DEFAULT_STORE_FILE = "shared_storage.json"


class JsonFileStore:
    """
    Durable key/value store backed by one JSON object on disk.

    Every read goes back to the file so a writer in another process is seen
    on the next get_item(). Writes replace the file atomically.
    """

    def __init__(self, path: str | Path | None = None) -> None:
        self.path = Path(path) if path is not None else storage_dir() / DEFAULT_STORE_FILE
        self._lock = threading.Lock()

    def _load(self) -> Dict[str, str]:
        if not self.path.exists():
            return {}
        text = self.path.read_text(encoding="utf-8")
        if not text.strip():
            return {}
        data = json.loads(text)
        if not isinstance(data, dict):
            raise ValueError(f"Storage file does not hold a JSON object: {self.path}")
        return {str(k): str(v) for k, v in data.items()}

    def _save(self, data: Dict[str, str]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        tmp = self.path.with_suffix(self.path.suffix + ".tmp")
        tmp.write_text(json.dumps(data, indent=2, ensure_ascii=False), encoding="utf-8")
        os.replace(tmp, self.path)

    def get_item(self, key: str) -> Optional[str]:
        with self._lock:
            return self._load().get(key)

    def set_item(self, key: str, value: str) -> None:
        with self._lock:
            data = self._load()
            data[key] = str(value)
            self._save(data)

    def remove_item(self, key: str) -> None:
        with self._lock:
            data = self._load()
            if key in data:
                del data[key]
                self._save(data)


class BrowserWindowHandle:
    """
    Handle for a page opened in the system browser.
    The browser does not report closure back, so `closed` only reflects close().
    """

    def __init__(self, url: str) -> None:
        self.url = url
        self.closed = False

    def close(self) -> None:
        logger.info(f"Browser windows cannot be closed from here; marking closed: {self.url}")
        self.closed = True


class BrowserWindowOpener:
    def __init__(self, screen: Tuple[int, int] = (1920, 1080)) -> None:
        self._screen = screen

    def open(self, url: str, name: str, features: str) -> Optional[BrowserWindowHandle]:
        logger.debug(f"Opening {name} ({features}): {url}")
        if not webbrowser.open(url, new=1):
            return None
        return BrowserWindowHandle(url)

    def screen_size(self) -> Tuple[int, int]:
        return self._screen


class QueryStringWindow:
    """CurrentWindow over a fixed location query string (CLI / embedding)."""

    def __init__(self, query: str = "", on_close: Optional[Callable[[], None]] = None) -> None:
        self._query = query
        self._on_close = on_close
        self.closed = False

    def query_string(self) -> str:
        return self._query

    def close(self) -> None:
        self.closed = True
        if self._on_close is not None:
            self._on_close()


class TimerScheduler:
    def call_later(self, delay_s: float, fn: Callable[[], None]) -> None:
        t = threading.Timer(delay_s, fn)
        t.daemon = True
        t.start()


class NullOpenerState:
    """No opener window (selector opened directly)."""

    def read(self, field: str) -> Any:
        return None
