"""
Pydantic request model for generation and refinement streams.

Purpose
-------
``GenerationRequest`` is the immutable input of a :class:`GenerationSession`.
It validates the mode-dependent required fields before any network call is
made, and renders the JSON body the producer expects.

Failure semantics
-----------------
Construction raises ``pydantic.ValidationError`` when constraints are not met.
Callers (CLI, refinement cycle) validate before a session exists, so a bad
request never produces a ``FAILED`` session.
"""

from __future__ import annotations

from typing import Any, Dict, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator

from ..config.defaults import MAX_INSTRUCTIONS_LENGTH

GenerationMode = Literal["generate", "refine"]
DocumentType = Literal["agent", "skill", "file"]


def _blank(value: Optional[str]) -> bool:
    return value is None or not value.strip()


class GenerationRequest(BaseModel):
    """Immutable description of one generate or refine call.

    Rules:
        - ``mode="refine"`` requires non-blank ``base_content`` and
          ``instructions``.
        - ``mode="generate"`` requires non-blank ``subject_name`` and
          ``subject_description`` and is not offered for plain files.
        - ``instructions`` is limited to 5000 characters.
    """

    model_config = ConfigDict(frozen=True)

    mode: GenerationMode
    subject_name: Optional[str] = None
    subject_description: Optional[str] = None
    base_content: Optional[str] = None
    instructions: Optional[str] = Field(default=None, max_length=MAX_INSTRUCTIONS_LENGTH)
    document_type: DocumentType = "agent"
    file_name: Optional[str] = None

    @model_validator(mode="after")
    def _check_mode_fields(self) -> "GenerationRequest":
        if self.mode == "refine":
            if _blank(self.base_content):
                raise ValueError("refine requests need non-empty base_content")
            if _blank(self.instructions):
                raise ValueError("refine requests need non-empty instructions")
        else:
            if self.document_type == "file":
                raise ValueError("plain files can only be refined, not generated")
            if _blank(self.subject_name) or _blank(self.subject_description):
                raise ValueError("generate requests need subject_name and subject_description")
        return self

    @classmethod
    def generate(cls, name: str, description: str, *, document_type: DocumentType = "agent") -> "GenerationRequest":
        return cls(mode="generate", subject_name=name, subject_description=description, document_type=document_type)

    @classmethod
    def refine(
        cls,
        base_content: str,
        instructions: str,
        *,
        document_type: DocumentType = "agent",
        file_name: Optional[str] = None,
    ) -> "GenerationRequest":
        return cls(
            mode="refine",
            subject_name=file_name,
            subject_description=instructions,
            base_content=base_content,
            instructions=instructions,
            document_type=document_type,
            file_name=file_name,
        )

    def to_wire(self) -> Dict[str, Any]:
        """Return the JSON body sent to the producer (``None`` fields omitted)."""
        body = {
            "name": self.subject_name,
            "description": self.subject_description,
            "mode": self.mode,
            "existingContent": self.base_content,
            "instructions": self.instructions,
            "fileType": self.document_type,
            "fileName": self.file_name,
        }
        return {k: v for k, v in body.items() if v is not None}

    @classmethod
    def from_wire(cls, body: Dict[str, Any], *, document_type: Optional[str] = None) -> "GenerationRequest":
        """Build a request from a producer JSON body (inverse of :meth:`to_wire`).

        ``document_type`` overrides ``fileType`` when the endpoint implies it.
        """
        return cls(
            mode=body.get("mode") or "generate",
            subject_name=body.get("name"),
            subject_description=body.get("description"),
            base_content=body.get("existingContent"),
            instructions=body.get("instructions"),
            document_type=document_type or body.get("fileType") or "agent",
            file_name=body.get("fileName"),
        )


__all__ = ["GenerationRequest", "GenerationMode", "DocumentType"]
