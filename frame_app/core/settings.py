from __future__ import annotations

import json
import os
from typing import Any, Dict, Optional

from loguru import logger
from pydantic import BaseModel, Field, ValidationError

from frame_app.core.paths import settings_path

SETTINGS_SECTION = "frame_app"

_ENV_OVERRIDES = {
    "FRAME_APP_SELECTOR_URL": "selector_url",
    "FRAME_APP_GENERATE_ENDPOINT": "generate_endpoint",
    "FRAME_APP_STORAGE_PATH": "storage_path",
}


class AppSettings(BaseModel):
    selector_url: str = Field(default="steel_selector.html", description="Page opened in the selector window.")
    window_name: str = Field(default="SteelSelector", description="Target name of the selector window.")
    window_width: int = Field(default=1200, gt=0)
    window_height: int = Field(default=800, gt=0)
    screen_width: int = Field(default=1920, gt=0, description="Assumed screen width when the opener cannot report one.")
    screen_height: int = Field(default=1080, gt=0)
    liveness_check_delay_s: float = Field(default=1.0, ge=0.0)
    storage_path: Optional[str] = Field(default=None, description="JSON file backing the shared slot.")
    generate_endpoint: str = Field(default="http://localhost:3000/api/generate-model")
    request_timeout_s: float = Field(default=60.0, gt=0.0)


def load_settings() -> Dict[str, Any]:
    p = settings_path()
    if not p.exists():
        return {}
    try:
        return json.loads(p.read_text(encoding="utf-8"))
    except Exception:
        return {}


def save_settings(data: Dict[str, Any]) -> None:
    p = settings_path()
    p.parent.mkdir(parents=True, exist_ok=True)
    p.write_text(json.dumps(data, indent=2), encoding="utf-8")


def load_app_settings(raw: Optional[Dict[str, Any]] = None) -> AppSettings:
    """
    Settings file section merged with environment overrides.
    Invalid values fall back to defaults (logged, never raised).
    """
    data = raw if raw is not None else load_settings()
    section = data.get(SETTINGS_SECTION, {}) if isinstance(data, dict) else {}
    merged: Dict[str, Any] = dict(section) if isinstance(section, dict) else {}
    for env_name, field in _ENV_OVERRIDES.items():
        v = os.environ.get(env_name)
        if v:
            merged[field] = v
    try:
        return AppSettings.model_validate(merged)
    except ValidationError as e:
        logger.warning(f"Invalid settings ignored, using defaults: {e}")
        return AppSettings()
