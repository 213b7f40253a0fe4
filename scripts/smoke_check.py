from __future__ import annotations

import importlib
from pathlib import Path


def _check_path(label: str, path: Path) -> bool:
    ok = path.exists()
    status = "OK" if ok else "MISSING"
    print(f"[{status}] {label}: {path}")
    return ok


def _check_import(label: str, module_name: str, attr: str | None = None) -> bool:
    try:
        mod = importlib.import_module(module_name)
        if attr:
            getattr(mod, attr)
        print(f"[OK] import {label}")
        return True
    except Exception as e:
        print(f"[WARN] import {label} failed: {e}")
        return False


def main() -> int:
    root = Path(__file__).resolve().parents[1]
    ok = True

    ok &= _check_path("Handoff package", root / "frame_app" / "handoff" / "publisher.py")
    ok &= _check_path("CLI entry", root / "frame_app" / "cli.py")

    ok &= _check_import("pydantic", "pydantic", "BaseModel")
    ok &= _check_import("loguru", "loguru", "logger")
    ok &= _check_import("openpyxl", "openpyxl", "Workbook")
    ok &= _check_import("frame_app.handoff", "frame_app.handoff", "ResultPublisher")
    # Qt is optional at runtime (QtNotifier only)
    _check_import("PySide6.QtWidgets", "PySide6.QtWidgets", "QMessageBox")

    return 0 if ok else 2


if __name__ == "__main__":
    raise SystemExit(main())
