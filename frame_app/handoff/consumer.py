from __future__ import annotations

import json
from typing import Any, Dict, List, MutableMapping, Optional, Sequence

from loguru import logger

from frame_app.core.outcome import ErrorKind, Failure, Outcome
from frame_app.core.ports import KeyValueStore
from frame_app.core.schema_utils import validate_model

from .constants import OPENER_TARGET_FIELD, SCHEMA_VERSION, SESSION_TARGET_KEY, SHARED_RESULT_KEY
from .models import PropertyResult
from .resolution import Target


class MemberSelection:
    """
    Frame analyzer's record of the member being edited.

    Doubles as the OpenerStateReader the selector window sees, and mirrors the
    index into the session fallback key so a selector that lost its URL
    parameters can still find its target.
    """

    def __init__(self, session_store: KeyValueStore) -> None:
        self.session_store = session_store
        self.selected_member_index: Optional[Target] = None

    def select(self, index: Target) -> None:
        self.selected_member_index = index
        self.session_store.set_item(SESSION_TARGET_KEY, str(index))

    def clear(self) -> None:
        self.selected_member_index = None
        self.session_store.remove_item(SESSION_TARGET_KEY)

    def read(self, field: str) -> Any:
        if field == OPENER_TARGET_FIELD:
            return self.selected_member_index
        return None


def _major(version: str) -> str:
    return str(version).split(".", 1)[0]


class ResultConsumer:
    """
    Reads the shared slot written by the selector window.

    The slot holds at most one record; a newer publish overwrites an
    unconsumed one. poll() only reports a record once per timestamp.
    """

    def __init__(self, shared_store: KeyValueStore) -> None:
        self.shared_store = shared_store
        self.last_timestamp: Optional[int] = None

    def peek(self) -> Optional[PropertyResult]:
        try:
            raw = self.shared_store.get_item(SHARED_RESULT_KEY)
        except Exception as e:
            logger.warning(f"Could not read shared storage: {e}")
            return None
        if not raw:
            return None
        try:
            data = json.loads(raw)
        except json.JSONDecodeError as e:
            logger.warning(f"Ignoring malformed section properties in shared storage: {e}")
            return None
        result, err = validate_model(PropertyResult, data)
        if result is None:
            logger.warning(f"Ignoring invalid section properties record: {err}")
            return None
        if _major(result.version) != _major(SCHEMA_VERSION):
            logger.warning(f"Ignoring section properties with unsupported version {result.version!r}")
            return None
        return result

    def poll(self) -> Optional[PropertyResult]:
        result = self.peek()
        if result is None:
            return None
        if self.last_timestamp is not None and result.timestamp <= self.last_timestamp:
            return None
        self.last_timestamp = result.timestamp
        return result

    def consume(self) -> Optional[PropertyResult]:
        result = self.peek()
        if result is not None:
            self.shared_store.remove_item(SHARED_RESULT_KEY)
            self.last_timestamp = result.timestamp
            logger.info(f"Consumed section properties for member {result.target_member_index}")
        return result


def apply_result(result: PropertyResult, members: Sequence[MutableMapping[str, Any]]) -> Outcome[List[int]]:
    """Merge the received properties into member rows. Returns the updated row indices."""
    if result.is_bulk:
        indices = list(range(len(members)))
    else:
        idx = int(result.target_member_index)
        if idx < 0 or idx >= len(members):
            return Outcome.failure(
                Failure(ErrorKind.INVALID_ARGUMENT, f"Member index {idx} is out of range (0..{len(members) - 1}).")
            )
        indices = [idx]

    props: Dict[str, Any] = dict(result.properties)
    for i in indices:
        members[i].update(props)
    logger.info(f"Applied {len(props)} section properties to {len(indices)} member(s)")
    return Outcome.success(indices)
