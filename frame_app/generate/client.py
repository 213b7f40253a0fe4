from __future__ import annotations

import json
from typing import Any, Optional
from urllib.error import HTTPError, URLError
from urllib.request import Request, urlopen

from loguru import logger

from frame_app.core.outcome import ErrorKind, Failure, Outcome
from frame_app.core.schema_utils import validate_model

from .contract import CandidatesEnvelope, ErrorEnvelope, GenerateModelRequest


def _decode(raw: bytes) -> Any:
    return json.loads(raw.decode("utf-8") if raw else "{}")


class GenerateModelClient:
    """
    Calls the model-generation proxy and returns the generated text.

    The proxy owns the vendor call and the prompt template; this side only
    speaks the request/candidates contract.
    """

    def __init__(self, endpoint: str, timeout_s: float = 60.0) -> None:
        self.endpoint = endpoint
        self.timeout_s = timeout_s

    def generate(self, request: GenerateModelRequest) -> Outcome[str]:
        body = json.dumps(request.to_body()).encode("utf-8")
        req = Request(
            self.endpoint,
            data=body,
            method="POST",
            headers={"Content-Type": "application/json"},
        )
        try:
            with urlopen(req, timeout=self.timeout_s) as resp:
                raw = resp.read()
        except HTTPError as e:
            return self._fail(self._http_error_message(e))
        except (URLError, OSError) as e:
            return self._fail(f"Could not reach {self.endpoint}: {e}")

        try:
            data = _decode(raw)
        except ValueError as e:
            return self._fail(f"Proxy returned invalid JSON: {e}")

        envelope, err = validate_model(CandidatesEnvelope, data)
        if envelope is None:
            return self._fail(f"Unexpected response shape: {err}")
        text = envelope.first_text()
        if not text:
            return self._fail("Proxy response contained no generated text.")
        return Outcome.success(text)

    @staticmethod
    def _http_error_message(e: HTTPError) -> str:
        detail: Optional[str] = None
        try:
            env, _ = validate_model(ErrorEnvelope, _decode(e.read()))
            detail = env.error if env is not None else None
        except (ValueError, OSError):
            detail = None
        return f"HTTP {e.code}: {detail or e.reason}"

    def _fail(self, message: str) -> Outcome[str]:
        logger.error(f"Model generation request failed: {message}")
        return Outcome.failure(Failure(ErrorKind.REMOTE_FAILURE, message))
