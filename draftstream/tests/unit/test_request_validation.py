from __future__ import annotations

import pytest
from pydantic import ValidationError

from draftstream.generation import GenerationRequest


def test_generate_requires_name_and_description():
    with pytest.raises(ValidationError):
        GenerationRequest.generate("  ", "desc")
    with pytest.raises(ValidationError):
        GenerationRequest.generate("name", "")


def test_plain_files_cannot_be_generated():
    with pytest.raises(ValidationError):
        GenerationRequest.generate("notes", "desc", document_type="file")


def test_refine_requires_base_and_instructions():
    with pytest.raises(ValidationError):
        GenerationRequest.refine("", "shorter")
    with pytest.raises(ValidationError):
        GenerationRequest.refine("text", "\n\t")


def test_instructions_length_limit():
    GenerationRequest.refine("text", "x" * 5000)
    with pytest.raises(ValidationError):
        GenerationRequest.refine("text", "x" * 5001)


def test_requests_are_immutable():
    req = GenerationRequest.generate("a", "b")
    with pytest.raises(ValidationError):
        req.subject_name = "c"  # type: ignore[misc]


def test_wire_body_omits_missing_fields():
    body = GenerationRequest.refine("base", "shorter", document_type="skill").to_wire()
    assert body == {  # nosec B101
        "description": "shorter",
        "mode": "refine",
        "existingContent": "base",
        "instructions": "shorter",
        "fileType": "skill",
    }


def test_from_wire_defaults_and_override():
    req = GenerationRequest.from_wire({"name": "reviewer", "description": "Reviews PRs"})
    assert req.mode == "generate" and req.document_type == "agent"  # nosec B101

    req = GenerationRequest.from_wire(
        {"mode": "refine", "existingContent": "x", "instructions": "y", "fileType": "agent", "fileName": "a.md"},
        document_type="file",
    )
    assert req.document_type == "file" and req.file_name == "a.md"  # nosec B101
    with pytest.raises(ValidationError):
        GenerationRequest.from_wire({"mode": "compose", "name": "a", "description": "b"})
