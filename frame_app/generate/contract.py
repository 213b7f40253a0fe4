from __future__ import annotations

from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

GenerateMode = Literal["generate", "edit"]


class GenerateModelRequest(BaseModel):
    """
    Body of POST /api/generate-model.

    `prompt` is the engineer's natural-language instruction; in edit mode the
    current frame model (nodes, members, nl, ml) is sent along as `currentModel`.
    """
    model_config = ConfigDict(populate_by_name=True)

    prompt: str
    mode: Optional[GenerateMode] = None
    current_model: Optional[Dict[str, Any]] = Field(default=None, alias="currentModel")

    @field_validator("prompt")
    @classmethod
    def _prompt_not_blank(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("prompt must not be empty")
        return v

    @model_validator(mode="after")
    def _edit_needs_model(self) -> "GenerateModelRequest":
        if self.mode == "edit" and self.current_model is None:
            raise ValueError("edit mode requires currentModel")
        return self

    def to_body(self) -> Dict[str, Any]:
        return self.model_dump(by_alias=True, exclude_none=True)


class Part(BaseModel):
    text: Optional[str] = None


class Content(BaseModel):
    parts: List[Part] = Field(default_factory=list)


class Candidate(BaseModel):
    content: Content = Field(default_factory=Content)


class CandidatesEnvelope(BaseModel):
    """Normalized proxy response: candidates[].content.parts[].text."""
    candidates: List[Candidate] = Field(default_factory=list)

    def first_text(self) -> Optional[str]:
        for c in self.candidates:
            for p in c.content.parts:
                if p.text:
                    return p.text
        return None


class ErrorEnvelope(BaseModel):
    error: str
