"""Guardrail schema tests."""

from __future__ import annotations

import pytest
from pydantic import ValidationError

from cvagent.exceptions import AgentFailureError
from cvagent.schemas import (
    AgentFailure,
    CVFileInfo,
    CVGenerationInput,
    DocumentType,
    ErrorCodes,
    GuardrailContext,
    GuardrailResult,
)


class TestGuardrailResult:
    @pytest.mark.unit
    def test_defaults_allow_execution(self) -> None:
        result = GuardrailResult()

        assert result.tripwire_triggered is False
        assert result.allow_execution is True
        assert result.details == {}
        assert result.recommendations == []
        assert not result.blocks
        assert not result.is_warning

    @pytest.mark.unit
    def test_tripped_denies(self) -> None:
        result = GuardrailResult.tripped(
            "EmptyContent", "CV content is empty", recommendations=["Upload a CV"]
        )

        assert result.blocks
        assert result.allow_execution is False
        assert result.recommendations == ["Upload a CV"]

    @pytest.mark.unit
    def test_warning_allows_but_is_flagged(self) -> None:
        result = GuardrailResult.warning("NonStandardDomain", "unknown board")

        assert not result.blocks
        assert result.is_warning

    @pytest.mark.unit
    def test_passed_keeps_details(self) -> None:
        assert GuardrailResult.passed(section_headers=4).details == {"section_headers": 4}


class TestGuardrailContext:
    @pytest.mark.unit
    def test_context_is_immutable(self) -> None:
        context = GuardrailContext(input="cv")

        with pytest.raises(ValidationError):
            context.output = "changed"  # type: ignore[misc]

    @pytest.mark.unit
    def test_defaults(self) -> None:
        context = GuardrailContext()

        assert context.input == ""
        assert context.output == ""
        assert context.document_type == DocumentType.CV
        assert context.metadata == {}
        assert context.timestamp.tzinfo is not None

    @pytest.mark.unit
    def test_negative_file_size_is_rejected(self) -> None:
        with pytest.raises(ValidationError):
            CVFileInfo(filename="cv.pdf", content_type="application/pdf", size_bytes=-1)


class TestCVGenerationInput:
    @pytest.mark.unit
    def test_defaults_to_cv_and_cover_letter(self) -> None:
        payload = CVGenerationInput(cv_text="cv", job_description="job")

        assert payload.document_types == [DocumentType.CV, DocumentType.COVER_LETTER]

    @pytest.mark.unit
    def test_requires_a_document_type(self) -> None:
        with pytest.raises(ValidationError):
            CVGenerationInput(cv_text="cv", job_description="job", document_types=[])


class TestAgentFailureError:
    @pytest.mark.unit
    def test_wraps_failure(self) -> None:
        failure = AgentFailure(
            agent_id="llm_service",
            error_code=ErrorCodes.LLM_SERVER,
            message="LLM server error: 503",
            recoverable=True,
        )

        error = AgentFailureError.from_failure(failure)

        assert isinstance(error, RuntimeError)
        assert error.failure.error_code == ErrorCodes.LLM_SERVER
        assert str(error) == "llm_service::ERR_LLM_SERVER - LLM server error: 503"
