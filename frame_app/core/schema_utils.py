from __future__ import annotations
from typing import Any, Optional, Tuple, Type, TypeVar

from pydantic import BaseModel, ValidationError

M = TypeVar("M", bound=BaseModel)

def validate_model(model: Type[M], raw: Any) -> Tuple[Optional[M], Optional[str]]:
    """
    Returns (instance, error_message). Exactly one of them is None.
    """
    try:
        return model.model_validate(raw), None
    except ValidationError as e:
        return None, str(e)
