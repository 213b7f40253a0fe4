from __future__ import annotations

import json
import sys
from pathlib import Path
from typing import List

import pytest
from loguru import logger

from .cli import main
from .core.adapters import JsonFileStore
from .handoff.constants import SESSION_TARGET_KEY, SHARED_RESULT_KEY


@pytest.fixture(autouse=True)
def _user_dir(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    monkeypatch.setenv("LOCALAPPDATA", str(tmp_path))
    for name in ("FRAME_APP_SELECTOR_URL", "FRAME_APP_GENERATE_ENDPOINT", "FRAME_APP_STORAGE_PATH"):
        monkeypatch.delenv(name, raising=False)
    return tmp_path


def _run(argv: List[str]) -> int:
    try:
        return main(argv)
    finally:
        # configure_logging() points a sink at the captured stderr
        logger.remove()
        logger.add(sys.stderr, level="WARNING")


def _storage(tmp_path: Path, name: str) -> JsonFileStore:
    return JsonFileStore(tmp_path / "FrameAnalyzer" / "storage" / name)


def test_publish_then_read(tmp_path: Path, capsys: pytest.CaptureFixture) -> None:
    code = _run(["publish", "--query", "targetMember=2", "--prop", "I=1e-4", "--prop", "A=5e-3", "--prop", "name=H-300"])
    assert code == 0
    record = json.loads(_storage(tmp_path, "shared_storage.json").get_item(SHARED_RESULT_KEY))
    assert record["targetMemberIndex"] == 2
    assert record["properties"] == {"I": 1e-4, "A": 5e-3, "name": "H-300"}
    capsys.readouterr()

    assert _run(["read", "--consume"]) == 0
    assert json.loads(capsys.readouterr().out)["version"] == "1.0"
    assert _run(["read"]) == 1


def test_publish_failures(tmp_path: Path) -> None:
    assert _run(["publish", "--query", "targetMember=2", "--prop", "I=1"]) == 1
    assert _run(["publish", "--prop", "I=1", "--prop", "A=2"]) == 1
    assert _run(["publish", "--prop", "I"]) == 2
    assert _storage(tmp_path, "shared_storage.json").get_item(SHARED_RESULT_KEY) is None


def test_publish_bulk_target(tmp_path: Path) -> None:
    assert _run(["publish", "--target", "BULK", "--prop", "I=1", "--prop", "A=2"]) == 0
    record = json.loads(_storage(tmp_path, "shared_storage.json").get_item(SHARED_RESULT_KEY))
    assert record["targetMemberIndex"] == "bulk"


def test_open_selector_records_selection(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    opened = []
    monkeypatch.setattr("webbrowser.open", lambda url, new=0: opened.append(url) or True)
    assert _run(["open-selector", "3", "--material", "steel", "--strength", "325"]) == 0
    assert opened == ["steel_selector.html?targetMember=3&material=steel&eValue=205000&strengthValue=325"]
    assert _storage(tmp_path, "session_storage.json").get_item(SESSION_TARGET_KEY) == "3"

    # session fallback lets a selector without URL parameters find its member
    assert _run(["publish", "--prop", "I=1", "--prop", "A=2"]) == 0
    record = json.loads(_storage(tmp_path, "shared_storage.json").get_item(SHARED_RESULT_KEY))
    assert record["targetMemberIndex"] == 3


def test_open_selector_rejects_bad_index(monkeypatch: pytest.MonkeyPatch) -> None:
    opened = []
    monkeypatch.setattr("webbrowser.open", lambda url, new=0: opened.append(url) or True)
    assert _run(["open-selector", "-1"]) == 1
    assert _run(["open-selector", "abc"]) == 1
    assert opened == []


def test_export(tmp_path: Path) -> None:
    assert _run(["export", str(tmp_path / "none.xlsx")]) == 1
    assert _run(["publish", "--query", "targetMember=0", "--prop", "I=1", "--prop", "A=2"]) == 0
    assert _run(["export", str(tmp_path / "out.xlsx")]) == 0
    assert (tmp_path / "out.xlsx").exists()
    assert _run(["export", str(tmp_path / "handoff")]) == 0
    assert (tmp_path / "handoff" / "handoff.json").exists()


def test_export_defaults_to_exports_folder(tmp_path: Path, capsys: pytest.CaptureFixture) -> None:
    assert _run(["publish", "--query", "targetMember=1", "--prop", "I=1", "--prop", "A=2"]) == 0
    record = json.loads(capsys.readouterr().out)
    assert _run(["export"]) == 0
    out = tmp_path / "FrameAnalyzer" / "exports" / f"section_properties_{record['timestamp']}.xlsx"
    assert out.exists()
    assert capsys.readouterr().out.strip() == str(out)


def test_corrupt_shared_store_is_a_failure_not_a_crash(tmp_path: Path) -> None:
    path = tmp_path / "FrameAnalyzer" / "storage" / "shared_storage.json"
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text("{oops", encoding="utf-8")
    assert _run(["read"]) == 1
    assert _run(["read", "--consume"]) == 1
    assert _run(["export", str(tmp_path / "out.xlsx")]) == 1
    assert not (tmp_path / "out.xlsx").exists()


def test_corrupt_session_store_fails_open_selector(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr("webbrowser.open", lambda url, new=0: True)
    path = tmp_path / "FrameAnalyzer" / "storage" / "session_storage.json"
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text("[1, 2]", encoding="utf-8")
    assert _run(["open-selector", "2"]) == 1


def test_generate_current_model_file_errors(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    called = []
    monkeypatch.setattr("frame_app.generate.client.urlopen", lambda *a, **k: called.append(a))
    missing = tmp_path / "missing.json"
    assert _run(["generate", "add load", "--mode", "edit", "--current-model", str(missing)]) == 1

    broken = tmp_path / "model.json"
    broken.write_text("{not json", encoding="utf-8")
    assert _run(["generate", "add load", "--mode", "edit", "--current-model", str(broken)]) == 1
    assert called == []


def test_failures_reach_the_qt_notifier(monkeypatch: pytest.MonkeyPatch) -> None:
    from .core.qt_notifier import QtNotifier

    alerts = []
    monkeypatch.setattr(QtNotifier, "alert", lambda self, title, message: alerts.append(title))
    monkeypatch.setattr("webbrowser.open", lambda url, new=0: False)
    assert _run(["publish", "--prop", "I=1"]) == 1
    assert _run(["open-selector", "1"]) == 1
    assert alerts == ["Send to frame analyzer", "Member selector"]
