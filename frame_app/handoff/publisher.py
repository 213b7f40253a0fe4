from __future__ import annotations

import time
from enum import Enum
from typing import Any, Callable, Dict, List, Mapping, Optional
from urllib.parse import parse_qs

from loguru import logger

from frame_app.core.outcome import ErrorKind, Failure, Outcome
from frame_app.core.ports import CurrentWindow, KeyValueStore, Notifier, OpenerStateReader

from .constants import (
    OPENER_TARGET_FIELD,
    OVERRIDE_TARGET_FIELD,
    Q_TARGET,
    REQUIRED_PROPERTIES,
    SCHEMA_VERSION,
    SESSION_TARGET_KEY,
    SHARED_RESULT_KEY,
)
from .models import PropertyResult
from .resolution import TargetSource, is_valid_target, resolve_target

ALERT_TITLE = "Send to frame analyzer"


class PublishState(str, Enum):
    IDLE = "Idle"
    VALIDATING = "Validating"
    RESOLVING_TARGET = "ResolvingTarget"
    SERIALIZING = "Serializing"
    PERSISTED = "Persisted"
    CLOSED = "Closed"
    FAILED = "Failed"


def _now_ms() -> int:
    return int(time.time() * 1000)


def _is_blank(v: Any) -> bool:
    return v is None or v == ""


def missing_required(properties: Mapping[str, Any]) -> List[str]:
    return [k for k in REQUIRED_PROPERTIES if _is_blank(properties.get(k))]


class ResultPublisher:
    """
    Selector window side: sends computed section properties to the frame analyzer.

    publish() validates the payload, resolves the target member, writes one
    PropertyResult to the shared slot (last write wins) and closes the window.
    Each call is one-shot:

      Validating -> ResolvingTarget -> Serializing -> Persisted -> Closed
                                    (any step) -> Failed

    Target member priority:
      1) `targetMemberIndex` inside the payload
      2) `targetMember` in this window's URL
      3) session fallback key
      4) opener window's `selectedMemberIndex`

    Nothing escapes: every failure is logged, alerted and returned as a
    failed Outcome (falsy).
    """

    def __init__(
        self,
        window: CurrentWindow,
        shared_store: KeyValueStore,
        session_store: KeyValueStore,
        opener_state: OpenerStateReader,
        notifier: Notifier,
        clock: Callable[[], int] = _now_ms,
    ) -> None:
        self.window = window
        self.shared_store = shared_store
        self.session_store = session_store
        self.opener_state = opener_state
        self.notifier = notifier
        self.clock = clock
        self.state = PublishState.IDLE

    def _url_target(self) -> Optional[str]:
        qs = parse_qs(self.window.query_string().lstrip("?"), keep_blank_values=True)
        vals = qs.get(Q_TARGET)
        return vals[0] if vals else None

    def target_sources(self, properties: Mapping[str, Any]) -> List[TargetSource]:
        return [
            TargetSource("payload override", lambda: properties.get(OVERRIDE_TARGET_FIELD)),
            TargetSource("URL", self._url_target),
            TargetSource("session storage", lambda: self.session_store.get_item(SESSION_TARGET_KEY)),
            TargetSource("opener window", lambda: self.opener_state.read(OPENER_TARGET_FIELD)),
        ]

    def publish(self, properties: Any) -> Outcome[PropertyResult]:
        try:
            return self._publish(properties)
        except Exception as e:
            return self._fail(Failure(ErrorKind.UNEXPECTED, str(e), stage=self.state.value), properties, exc=e)

    def _publish(self, properties: Any) -> Outcome[PropertyResult]:
        self.state = PublishState.VALIDATING
        if not isinstance(properties, Mapping):
            return self._fail(
                Failure(ErrorKind.INVALID_PAYLOAD, "Invalid properties object.", stage=self.state.value), properties
            )
        missing = missing_required(properties)
        if missing:
            return self._fail(
                Failure(
                    ErrorKind.MISSING_REQUIRED_FIELDS,
                    f"Required properties are missing: {', '.join(missing)}",
                    missing=tuple(missing),
                    stage=self.state.value,
                ),
                properties,
            )

        self.state = PublishState.RESOLVING_TARGET
        target, source = resolve_target(self.target_sources(properties))
        if target is None:
            return self._fail(
                Failure(ErrorKind.UNRESOLVED_TARGET, "No target member to send to.", stage=self.state.value),
                properties,
            )

        self.state = PublishState.SERIALIZING
        sanitized: Dict[str, Any] = {k: v for k, v in properties.items() if k != OVERRIDE_TARGET_FIELD}
        if not is_valid_target(target):
            return self._fail(
                Failure(
                    ErrorKind.INVALID_TARGET_TYPE,
                    f"Member index is not a number: {target!r}",
                    stage=self.state.value,
                ),
                properties,
            )
        result = PropertyResult(
            target_member_index=target,
            properties=sanitized,
            timestamp=self.clock(),
            version=SCHEMA_VERSION,
        )
        serialized = result.to_json()

        try:
            self.shared_store.set_item(SHARED_RESULT_KEY, serialized)
        except Exception as e:
            return self._fail(
                Failure(ErrorKind.STORAGE_FAILURE, f"Could not write shared storage: {e}", stage=self.state.value),
                properties,
                exc=e,
            )
        self.state = PublishState.PERSISTED
        logger.info(
            f"Section properties sent: target={result.target_member_index} (from {source}), "
            f"properties={len(sanitized)}, timestamp={result.timestamp}"
        )

        self.window.close()
        self.state = PublishState.CLOSED
        return Outcome.success(result)

    def _fail(self, failure: Failure, properties: Any, exc: Optional[BaseException] = None) -> Outcome[PropertyResult]:
        self.state = PublishState.FAILED
        log = logger.bind(kind=failure.kind.value, stage=failure.stage, payload=properties)
        log.opt(exception=exc).error(
            f"Sending section properties failed: {failure.message} "
            f"(kind={failure.kind.value}, stage={failure.stage}, payload={properties!r})"
        )
        try:
            self.notifier.alert(ALERT_TITLE, f"Could not send the data: {failure.message}")
        except Exception as e:
            logger.warning(f"Could not show failure notification: {e}")
        return Outcome.failure(failure)
