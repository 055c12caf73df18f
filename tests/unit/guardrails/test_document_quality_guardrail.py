"""Document Quality Guardrail tests."""

from __future__ import annotations

import pytest

from cvagent.config import AppSettings
from cvagent.guardrails import DocumentQualityGuardrail
from cvagent.guardrails.document_quality import keyword_density, section_headers
from cvagent.schemas import DocumentType, GuardrailContext, ViolationTypes


class TestDocumentQualityGuardrail:
    """Tests for structure, tone and ATS checks on generated documents."""

    @pytest.fixture
    def guardrail(self, settings: AppSettings) -> DocumentQualityGuardrail:
        return DocumentQualityGuardrail(settings=settings)

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_well_formed_cv_passes(
        self, guardrail: DocumentQualityGuardrail, sample_generated_cv: str
    ) -> None:
        result = await guardrail.validate(
            GuardrailContext(output=sample_generated_cv, document_type=DocumentType.CV)
        )

        assert result.tripwire_triggered is False
        assert result.violation_type is None
        assert result.details["section_headers"] >= 3

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_well_formed_cover_letter_passes(
        self, guardrail: DocumentQualityGuardrail, sample_cover_letter: str
    ) -> None:
        result = await guardrail.validate(
            GuardrailContext(
                output=sample_cover_letter, document_type=DocumentType.COVER_LETTER
            )
        )

        assert result.tripwire_triggered is False
        assert result.violation_type is None

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_empty_output_is_rejected(self, guardrail: DocumentQualityGuardrail) -> None:
        result = await guardrail.validate(GuardrailContext(output=""))

        assert result.violation_type == ViolationTypes.EMPTY_OUTPUT

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_missing_cv_sections_are_reported(
        self, guardrail: DocumentQualityGuardrail
    ) -> None:
        content = "Summary\n" + "Backend engineer building reliable data platforms. " * 6

        result = await guardrail.validate_document_quality(content, DocumentType.CV)

        assert result.violation_type == ViolationTypes.QUALITY_ISSUES
        assert result.details["issues"] == [
            "Missing required section: Contact",
            "Missing required section: Experience",
            "Missing required section: Education",
            "Missing required section: Skills",
        ]

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_cover_letter_needs_salutation_and_closing(
        self, guardrail: DocumentQualityGuardrail
    ) -> None:
        content = "I am applying for the role. " * 10

        result = await guardrail.validate_document_quality(
            content, DocumentType.COVER_LETTER
        )

        assert "Missing required section: Salutation" in result.details["issues"]
        assert "Missing required section: Closing" in result.details["issues"]

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_length_bounds_follow_settings(
        self, guardrail: DocumentQualityGuardrail, sample_generated_cv: str
    ) -> None:
        too_long = sample_generated_cv + "\n" + ("Delivered reporting tools. " * 500)

        short_result = await guardrail.validate_document_quality(
            "Contact\nExperience\nEducation\nSkills", DocumentType.CV
        )
        long_result = await guardrail.validate_document_quality(too_long, DocumentType.CV)

        assert "Document is too short" in short_result.details["issues"]
        assert "Document is too long" in long_result.details["issues"]

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_unprofessional_tone_and_spacing_are_reported(
        self, guardrail: DocumentQualityGuardrail, sample_generated_cv: str
    ) -> None:
        content = sample_generated_cv + "\nI am basically a rockstar coder!!!\nPython      SQL\n"

        result = await guardrail.validate_document_quality(content, DocumentType.CV)

        issues = result.details["issues"]
        assert "Excessive whitespace detected" in issues
        assert sum(issue.startswith("Unprofessional language") for issue in issues) == 3
        assert result.recommendations

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_ats_problems_are_only_a_warning(
        self, guardrail: DocumentQualityGuardrail
    ) -> None:
        content = (
            "Contact details on request.\n"
            + "Experience, education and skills gained across many roles. " * 5
        )

        result = await guardrail.validate(
            GuardrailContext(output=content, document_type=DocumentType.CV)
        )

        assert result.allow_execution is True
        assert result.is_warning
        assert result.violation_type == ViolationTypes.ATS_COMPATIBILITY_ISSUES
        assert "No valid email address found" in result.details["issues"]
        assert "Insufficient section headers for ATS parsing" in result.details["issues"]

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_portfolio_requires_summary(self, guardrail: DocumentQualityGuardrail) -> None:
        content = (
            "Contact: jane.doe@example.com\nExperience at Acme Analytics.\n"
            "Education at Leeds.\n" + "Built reporting tools for analysts. " * 6
        )

        result = await guardrail.validate_document_quality(content, DocumentType.PORTFOLIO)

        assert result.details["issues"] == ["Missing required section: Summary"]


@pytest.mark.unit
def test_keyword_density_counts_professional_keywords() -> None:
    assert keyword_density("Experience and skills") == pytest.approx(2 / 3)
    assert keyword_density("") == 0.0


@pytest.mark.unit
def test_section_headers_detect_short_title_lines() -> None:
    text = "# Experience\nSkills\nBuilt things, shipped them.\nlowercase line\nEducation"

    assert section_headers(text) == ["Experience", "Skills", "Education"]
