from __future__ import annotations

import math
import re
from dataclasses import dataclass
from typing import Any, Callable, Iterable, Optional, Tuple, Union

from loguru import logger

from .constants import BULK_TARGET

Target = Union[int, str]

_LEADING_INT = re.compile(r"[+-]?[0-9]+")


def coerce_target(value: Any) -> Optional[Union[Target, float]]:
    """
    Normalize a raw member-index value to an int, the bulk token, or None (absent).

      - numbers: truncated toward zero; NaN/inf are absent; bools are absent
      - strings: trimmed, "bulk" in any case, else the leading ASCII integer ("12abc" -> 12);
        a digit run too long to convert comes back as +/-inf, which is not a valid target
      - anything else: absent
    """
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        return math.trunc(value) if math.isfinite(value) else None
    if isinstance(value, str):
        s = value.strip()
        if not s:
            return None
        if s.lower() == BULK_TARGET:
            return BULK_TARGET
        m = _LEADING_INT.match(s)
        if not m:
            return None
        digits = m.group(0)
        try:
            return int(digits)
        except ValueError:
            # too many digits for int(); an out-of-range number, never a member index
            return -math.inf if digits.startswith("-") else math.inf
    return None


def is_valid_target(value: Any) -> bool:
    if isinstance(value, bool):
        return False
    if isinstance(value, int):
        return True
    return value == BULK_TARGET


@dataclass(frozen=True)
class TargetSource:
    name: str
    read: Callable[[], Any]


def resolve_target(sources: Iterable[TargetSource]) -> Tuple[Optional[Union[Target, float]], Optional[str]]:
    """
    First source yielding a usable value wins. A source that raises is
    treated as absent and the chain continues.
    """
    for src in sources:
        try:
            raw = src.read()
        except Exception as e:
            logger.warning(f"Could not read target member index from {src.name}: {e}")
            continue
        value = coerce_target(raw)
        if value is not None:
            logger.debug(f"Target member index {value!r} resolved from {src.name}")
            return value, src.name
    return None, None
