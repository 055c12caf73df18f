"""CV Content Guardrail tests."""

from __future__ import annotations

import logging

import pytest

from cvagent.config import AppSettings
from cvagent.guardrails import CVContentGuardrail, GuardrailService
from cvagent.schemas import CVFileInfo, GuardrailContext, ViolationTypes


PDF = "application/pdf"
DOCX = "application/vnd.openxmlformats-officedocument.wordprocessingml.document"


class TestCVContentGuardrail:
    """Tests for CV upload and CV text validation."""

    @pytest.fixture
    def guardrail(self, settings: AppSettings) -> CVContentGuardrail:
        return CVContentGuardrail(settings=settings)

    @pytest.mark.unit
    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "content_type",
        [PDF, DOCX, "application/msword", "Application/PDF; charset=binary"],
    )
    async def test_supported_file_passes(
        self, guardrail: CVContentGuardrail, content_type: str
    ) -> None:
        cv_file = CVFileInfo(
            filename="jane_doe_cv.pdf", content_type=content_type, size_bytes=120_000
        )

        result = await guardrail.validate_cv_file(cv_file)

        assert result.tripwire_triggered is False

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_oversized_file_is_rejected(self, guardrail: CVContentGuardrail) -> None:
        cv_file = CVFileInfo(filename="cv.pdf", content_type=PDF, size_bytes=11 * 1024 * 1024)

        result = await guardrail.validate_cv_file(cv_file)

        assert result.violation_type == ViolationTypes.FILE_TOO_LARGE
        assert result.message == "CV file size must be less than 10MB"
        assert result.details["max_size"] == 10 * 1024 * 1024

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_unsupported_type_is_rejected(self, guardrail: CVContentGuardrail) -> None:
        cv_file = CVFileInfo(filename="cv.png", content_type="image/png", size_bytes=2_000)

        result = await guardrail.validate_cv_file(cv_file)

        assert result.violation_type == ViolationTypes.INVALID_FILE_TYPE
        assert result.allow_execution is False

    @pytest.mark.unit
    @pytest.mark.asyncio
    @pytest.mark.parametrize("filename", ["cv.pdf.exe", "resume.bat", "resume-script.pdf"])
    async def test_executable_looking_name_is_rejected(
        self, guardrail: CVContentGuardrail, filename: str
    ) -> None:
        cv_file = CVFileInfo(filename=filename, content_type=PDF, size_bytes=2_000)

        result = await guardrail.validate_cv_file(cv_file)

        assert result.violation_type == ViolationTypes.SUSPICIOUS_FILE_NAME

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_rejected_upload_reaches_the_service_verdict(
        self,
        guardrail: CVContentGuardrail,
        settings: AppSettings,
        sample_cv: str,
        caplog: pytest.LogCaptureFixture,
    ) -> None:
        service = GuardrailService(settings=settings)
        await service.register_input_guardrail(guardrail)
        context = GuardrailContext(
            input=sample_cv,
            cv_file=CVFileInfo(filename="cv.exe", content_type=PDF, size_bytes=2_000),
        )

        with caplog.at_level(logging.WARNING, logger="cvagent.guardrails.cv_content"):
            result = await service.execute_input_guardrails(context)

        assert result.violation_type == ViolationTypes.SUSPICIOUS_FILE_NAME
        assert result.recommendations == [
            "Please use a standard CV file name",
            "Avoid executable file extensions",
        ]
        record = next(r for r in caplog.records if r.message == "Suspicious CV file name")
        assert record.file_name == "cv.exe"

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_sample_cv_passes(self, guardrail: CVContentGuardrail, sample_cv: str) -> None:
        result = await guardrail.validate_cv_content(sample_cv)

        assert result.tripwire_triggered is False
        assert result.violation_type is None

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_empty_cv_is_rejected(self, guardrail: CVContentGuardrail) -> None:
        result = await guardrail.validate_cv_content("  ")

        assert result.violation_type == ViolationTypes.EMPTY_CONTENT

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_short_cv_is_rejected(self, guardrail: CVContentGuardrail) -> None:
        result = await guardrail.validate_cv_content("Jane Doe, engineer. Skills: Python.")

        assert result.violation_type == ViolationTypes.CONTENT_TOO_SHORT
        assert result.details["min_length"] == 100

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_credentials_in_cv_are_rejected(
        self, guardrail: CVContentGuardrail, sample_cv: str
    ) -> None:
        result = await guardrail.validate_cv_content(
            sample_cv + "\nPortal login: jdoe, password: hunter2\n"
        )

        assert result.violation_type == ViolationTypes.SUSPICIOUS_CONTENT
        assert result.details["violation_count"] == 1

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_text_without_cv_structure_is_a_warning(
        self, guardrail: CVContentGuardrail
    ) -> None:
        text = "Lorem ipsum dolor sit amet, consectetur adipiscing elit. " * 3

        result = await guardrail.validate_cv_content(text)

        assert result.allow_execution is True
        assert result.violation_type == ViolationTypes.LOW_QUALITY_CONTENT

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_validate_checks_file_before_text(
        self, guardrail: CVContentGuardrail, sample_cv: str
    ) -> None:
        context = GuardrailContext(
            input=sample_cv,
            cv_file=CVFileInfo(filename="cv.txt", content_type="text/plain", size_bytes=900),
        )

        result = await guardrail.validate(context)

        assert result.violation_type == ViolationTypes.INVALID_FILE_TYPE

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_validate_without_file_checks_input(
        self, guardrail: CVContentGuardrail
    ) -> None:
        result = await guardrail.validate(GuardrailContext(input=""))

        assert result.violation_type == ViolationTypes.EMPTY_CONTENT

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_thresholds_follow_settings(self, sample_cv: str) -> None:
        strict = CVContentGuardrail(
            settings=AppSettings(
                _env_file=None, cv_min_content_length=5_000, cv_max_file_bytes=1_000
            )
        )

        text_result = await strict.validate_cv_content(sample_cv)
        file_result = await strict.validate_cv_file(
            CVFileInfo(filename="cv.pdf", content_type=PDF, size_bytes=2_000)
        )

        assert text_result.violation_type == ViolationTypes.CONTENT_TOO_SHORT
        assert file_result.violation_type == ViolationTypes.FILE_TOO_LARGE
