from __future__ import annotations

from .client import GenerateModelClient
from .contract import CandidatesEnvelope, ErrorEnvelope, GenerateModelRequest

__all__ = ["CandidatesEnvelope", "ErrorEnvelope", "GenerateModelClient", "GenerateModelRequest"]
