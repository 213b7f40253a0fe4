from __future__ import annotations

from dataclasses import dataclass
from typing import Annotated, Any, Dict, Literal, Mapping, Optional, Union
from urllib.parse import parse_qs, urlencode

from pydantic import BaseModel, ConfigDict, Field, StrictInt

from .constants import (
    BULK_TARGET,
    DEFAULT_E_VALUE,
    DEFAULT_MATERIAL,
    DEFAULT_STRENGTH_VALUE,
    Q_E_VALUE,
    Q_MATERIAL,
    Q_STRENGTH,
    Q_TARGET,
    SCHEMA_VERSION,
)
from .resolution import coerce_target, is_valid_target

BulkToken = Literal["bulk"]
TargetIndex = Union[StrictInt, BulkToken]


def _fmt_number(v: Any) -> str:
    if isinstance(v, float) and v.is_integer():
        return str(int(v))
    return str(v)


def _param(props: Mapping[str, Any], key: str, default: str) -> str:
    v = props.get(key)
    # empty string, 0 and None all mean "not set" for the selector form
    if v is None or v == "" or v == 0:
        return default
    return _fmt_number(v)


class MemberContext(BaseModel):
    """
    Member context handed to the selector window through its URL.

    URL contract (all string-encoded):
      targetMember, material, eValue, strengthValue
    """
    target_member: Union[Annotated[StrictInt, Field(ge=0)], BulkToken]
    material: str = Field(default=DEFAULT_MATERIAL)
    e_value: str = Field(default=DEFAULT_E_VALUE, description="Young's modulus E (N/mm^2).")
    strength_value: str = Field(default=DEFAULT_STRENGTH_VALUE, description="Design strength F (N/mm^2).")

    @classmethod
    def from_properties(cls, target: Union[int, str], current: Optional[Mapping[str, Any]] = None) -> "MemberContext":
        """Build from the frame analyzer's member row keys: material, E, strengthValue."""
        props = current or {}
        return cls(
            target_member=target,
            material=_param(props, "material", DEFAULT_MATERIAL),
            e_value=_param(props, "E", DEFAULT_E_VALUE),
            strength_value=_param(props, "strengthValue", DEFAULT_STRENGTH_VALUE),
        )

    def to_query(self) -> str:
        return urlencode(
            [
                (Q_TARGET, str(self.target_member)),
                (Q_MATERIAL, self.material),
                (Q_E_VALUE, self.e_value),
                (Q_STRENGTH, self.strength_value),
            ]
        )

    @classmethod
    def from_query(cls, query: str) -> Optional["MemberContext"]:
        """Parse the selector URL. Returns None when targetMember is missing or unusable."""
        qs = parse_qs(query.lstrip("?"), keep_blank_values=True)

        def first(name: str) -> Optional[str]:
            vals = qs.get(name)
            return vals[0] if vals else None

        target = coerce_target(first(Q_TARGET))
        if target is None or not is_valid_target(target) or (isinstance(target, int) and target < 0):
            return None
        return cls(
            target_member=target,
            material=first(Q_MATERIAL) or DEFAULT_MATERIAL,
            e_value=first(Q_E_VALUE) or DEFAULT_E_VALUE,
            strength_value=first(Q_STRENGTH) or DEFAULT_STRENGTH_VALUE,
        )


class PropertyResult(BaseModel):
    """
    Record written once to the shared slot by the selector window.

    `timestamp` (ms since epoch) lets the frame analyzer tell a fresh write
    from one it has already applied; `version` tags the record layout.
    """
    model_config = ConfigDict(populate_by_name=True, frozen=True)

    target_member_index: TargetIndex = Field(alias="targetMemberIndex")
    properties: Dict[str, Any]
    timestamp: StrictInt
    version: str = SCHEMA_VERSION

    @property
    def is_bulk(self) -> bool:
        return self.target_member_index == BULK_TARGET

    def to_json(self) -> str:
        return self.model_dump_json(by_alias=True)


@dataclass(frozen=True)
class WindowFeatures:
    width: int
    height: int
    left: float
    top: float
    scrollbars: bool = True
    resizable: bool = True

    @classmethod
    def centered(cls, screen_width: int, screen_height: int, width: int, height: int) -> "WindowFeatures":
        return cls(
            width=width,
            height=height,
            left=max(0, screen_width / 2 - width / 2),
            top=max(0, screen_height / 2 - height / 2),
        )

    def to_feature_string(self) -> str:
        parts = [
            ("width", self.width),
            ("height", self.height),
            ("left", _fmt_number(self.left)),
            ("top", _fmt_number(self.top)),
            ("scrollbars", "yes" if self.scrollbars else "no"),
            ("resizable", "yes" if self.resizable else "no"),
        ]
        return ",".join(f"{k}={v}" for k, v in parts)
