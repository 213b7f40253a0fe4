from __future__ import annotations

from typing import Tuple

# Storage keys / window contract
SHARED_RESULT_KEY = "steelSelectionForFrameAnalyzer"
SESSION_TARGET_KEY = "steelSelectorTargetMemberIndex"
OPENER_TARGET_FIELD = "selectedMemberIndex"
OVERRIDE_TARGET_FIELD = "targetMemberIndex"

BULK_TARGET = "bulk"
SCHEMA_VERSION = "1.0"

# Section properties the frame analysis cannot run without: I (m^4), A (m^2)
REQUIRED_PROPERTIES: Tuple[str, ...] = ("I", "A")

# Steel defaults (N/mm^2)
DEFAULT_MATERIAL = "steel"
DEFAULT_E_VALUE = "205000"
DEFAULT_STRENGTH_VALUE = "235"

# Query parameter names
Q_TARGET = "targetMember"
Q_MATERIAL = "material"
Q_E_VALUE = "eValue"
Q_STRENGTH = "strengthValue"
