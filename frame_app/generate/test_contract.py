from __future__ import annotations

import io
import json
from urllib.error import HTTPError, URLError

import pytest
from pydantic import ValidationError

from frame_app.core.outcome import ErrorKind

from . import client as client_mod
from .client import GenerateModelClient
from .contract import CandidatesEnvelope, GenerateModelRequest

ENDPOINT = "http://localhost:3000/api/generate-model"

MODEL_TEXT = json.dumps(
    {
        "nodes": [{"x": 0, "y": 0, "s": "p"}, {"x": 8, "y": 0, "s": "r"}],
        "members": [{"i": 1, "j": 2, "E": 205000, "I": 0.00011, "A": 0.005245, "Z": 0.000638}],
        "ml": [{"m": 1, "w": 10}],
    }
)


class _Resp:
    def __init__(self, body: bytes) -> None:
        self._body = body

    def read(self) -> bytes:
        return self._body

    def __enter__(self) -> "_Resp":
        return self

    def __exit__(self, *exc) -> None:
        return None


def _envelope(text: str) -> bytes:
    return json.dumps({"candidates": [{"content": {"parts": [{"text": text}]}}]}).encode("utf-8")


def test_request_body() -> None:
    req = GenerateModelRequest(prompt="8m simply supported beam, 10 kN/m")
    assert req.to_body() == {"prompt": "8m simply supported beam, 10 kN/m"}

    edit = GenerateModelRequest.model_validate(
        {"prompt": "add a 5 kN node load at node 2", "mode": "edit", "currentModel": {"nodes": []}}
    )
    assert edit.to_body() == {"prompt": "add a 5 kN node load at node 2", "mode": "edit", "currentModel": {"nodes": []}}


def test_request_validation() -> None:
    with pytest.raises(ValidationError):
        GenerateModelRequest(prompt="   ")
    with pytest.raises(ValidationError):
        GenerateModelRequest(prompt="edit it", mode="edit")


def test_envelope_first_text() -> None:
    env = CandidatesEnvelope.model_validate(
        {"candidates": [{"content": {"parts": [{"text": ""}]}}, {"content": {"parts": [{"text": "ok"}]}}]}
    )
    assert env.first_text() == "ok"
    assert CandidatesEnvelope().first_text() is None


def test_generate_success(monkeypatch: pytest.MonkeyPatch) -> None:
    sent = {}

    def fake_urlopen(req, timeout=None):
        sent["url"] = req.full_url
        sent["body"] = json.loads(req.data.decode("utf-8"))
        sent["timeout"] = timeout
        return _Resp(_envelope(MODEL_TEXT))

    monkeypatch.setattr(client_mod, "urlopen", fake_urlopen)
    out = GenerateModelClient(ENDPOINT, timeout_s=5).generate(GenerateModelRequest(prompt="portal frame"))
    assert out.ok
    assert json.loads(out.value)["members"][0]["E"] == 205000
    assert sent == {"url": ENDPOINT, "body": {"prompt": "portal frame"}, "timeout": 5}


def test_generate_http_error_uses_error_envelope(monkeypatch: pytest.MonkeyPatch) -> None:
    def fake_urlopen(req, timeout=None):
        raise HTTPError(ENDPOINT, 500, "Internal Server Error", {}, io.BytesIO(b'{"error": "model is loading"}'))

    monkeypatch.setattr(client_mod, "urlopen", fake_urlopen)
    out = GenerateModelClient(ENDPOINT).generate(GenerateModelRequest(prompt="x"))
    assert not out
    assert out.error.kind == ErrorKind.REMOTE_FAILURE
    assert out.error.message == "HTTP 500: model is loading"


def test_generate_network_error(monkeypatch: pytest.MonkeyPatch) -> None:
    def fake_urlopen(req, timeout=None):
        raise URLError("connection refused")

    monkeypatch.setattr(client_mod, "urlopen", fake_urlopen)
    out = GenerateModelClient(ENDPOINT).generate(GenerateModelRequest(prompt="x"))
    assert not out
    assert "Could not reach" in out.error.message


def test_generate_unexpected_shapes(monkeypatch: pytest.MonkeyPatch) -> None:
    for body in (b"not json", b'{"candidates": "nope"}', b'{"candidates": []}'):
        monkeypatch.setattr(client_mod, "urlopen", lambda req, timeout=None, b=body: _Resp(b))
        out = GenerateModelClient(ENDPOINT).generate(GenerateModelRequest(prompt="x"))
        assert not out
        assert out.error.kind == ErrorKind.REMOTE_FAILURE
