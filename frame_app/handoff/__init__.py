from __future__ import annotations

from .constants import BULK_TARGET, SCHEMA_VERSION, SHARED_RESULT_KEY, SESSION_TARGET_KEY
from .consumer import MemberSelection, ResultConsumer, apply_result
from .launcher import SelectorLauncher
from .models import MemberContext, PropertyResult, WindowFeatures
from .publisher import PublishState, ResultPublisher

__all__ = [
    "BULK_TARGET",
    "SCHEMA_VERSION",
    "SHARED_RESULT_KEY",
    "SESSION_TARGET_KEY",
    "MemberContext",
    "MemberSelection",
    "PropertyResult",
    "PublishState",
    "ResultConsumer",
    "ResultPublisher",
    "SelectorLauncher",
    "WindowFeatures",
    "apply_result",
]
