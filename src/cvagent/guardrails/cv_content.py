"""CV content guardrail: validates uploaded CV files and their extracted text."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from cvagent.config import get_settings
from cvagent.guardrails.base import (
    InputGuardrail,
    compile_patterns,
    count_matching,
    matching_patterns,
)
from cvagent.schemas import CVFileInfo, GuardrailContext, GuardrailResult, ViolationTypes


if TYPE_CHECKING:
    from cvagent.config import AppSettings


logger = logging.getLogger(__name__)

ALLOWED_CONTENT_TYPES: frozenset[str] = frozenset(
    {
        "application/pdf",
        "application/vnd.openxmlformats-officedocument.wordprocessingml.document",
        "application/msword",
    }
)

_SUSPICIOUS_FILENAME_PATTERNS = compile_patterns(
    (
        r"\.(exe|bat|cmd|scr|pif|com|js|vbs|sh)(\.|$)",
        r"\b(script|executable|program)\b",
    )
)
_SUSPICIOUS_CONTENT_PATTERNS = compile_patterns(
    (
        r"\b(password|login|username|secret|confidential)\b",
        r"\b(credit card|bank account|social security|ssn)\b",
        r"\b(bitcoin|cryptocurrency|wallet)\b",
        r"\b(phishing|scam|fraud|illegal)\b",
    )
)
_CV_INDICATORS = compile_patterns(
    (
        r"\b(experience|work|employment|job)\b",
        r"\b(education|degree|university|college)\b",
        r"\b(skills|abilities|competencies)\b",
        r"\b(contact|email|phone|address)\b",
    )
)


class CVContentGuardrail(InputGuardrail):
    """Rejects unsupported CV uploads and CV text that is empty or unsafe."""

    name = "CVContentGuardrail"
    priority = 2

    def __init__(self, *, settings: AppSettings | None = None) -> None:
        settings = settings or get_settings()
        self._max_file_bytes = settings.cv_max_file_bytes
        self._min_content_length = settings.cv_min_content_length

    async def validate(self, context: GuardrailContext) -> GuardrailResult:
        if context.cv_file is not None:
            file_result = await self.validate_cv_file(context.cv_file)
            if file_result.blocks:
                return file_result

        return await self.validate_cv_content(context.input)

    async def validate_cv_file(self, cv_file: CVFileInfo) -> GuardrailResult:
        """Check size, declared content type and file name of an upload."""

        if cv_file.size_bytes > self._max_file_bytes:
            logger.warning(
                "CV file too large",
                extra={"file_name": cv_file.filename, "size_bytes": cv_file.size_bytes},
            )
            return GuardrailResult.tripped(
                ViolationTypes.FILE_TOO_LARGE,
                f"CV file size must be less than {self._max_file_bytes // (1024 * 1024)}MB",
                details={"file_size": cv_file.size_bytes, "max_size": self._max_file_bytes},
                recommendations=[
                    "Please compress the CV file",
                    "Remove unnecessary images or formatting",
                ],
            )

        content_type = cv_file.content_type.split(";", 1)[0].strip().lower()
        if content_type not in ALLOWED_CONTENT_TYPES:
            return GuardrailResult.tripped(
                ViolationTypes.INVALID_FILE_TYPE,
                "Only PDF and Word documents are supported",
                details={
                    "content_type": cv_file.content_type,
                    "allowed_types": sorted(ALLOWED_CONTENT_TYPES),
                },
                recommendations=["Please convert your CV to PDF or Word format"],
            )

        suspicious = matching_patterns(cv_file.filename, _SUSPICIOUS_FILENAME_PATTERNS)
        if suspicious:
            logger.warning("Suspicious CV file name", extra={"file_name": cv_file.filename})
            return GuardrailResult.tripped(
                ViolationTypes.SUSPICIOUS_FILE_NAME,
                "Suspicious file name detected",
                details={"file_name": cv_file.filename, "suspicious_pattern": suspicious[0]},
                recommendations=[
                    "Please use a standard CV file name",
                    "Avoid executable file extensions",
                ],
            )

        return GuardrailResult.passed()

    async def validate_cv_content(self, cv_content: str) -> GuardrailResult:
        """Check extracted CV text for length, sensitive data and CV structure."""

        if not cv_content.strip():
            return GuardrailResult.tripped(
                ViolationTypes.EMPTY_CONTENT,
                "CV content is empty",
                recommendations=[
                    "Please provide a valid CV document",
                    "Ensure the CV contains readable text",
                ],
            )

        if len(cv_content) < self._min_content_length:
            return GuardrailResult.tripped(
                ViolationTypes.CONTENT_TOO_SHORT,
                "CV content appears to be too short",
                details={
                    "content_length": len(cv_content),
                    "min_length": self._min_content_length,
                },
                recommendations=[
                    "Please provide a more detailed CV",
                    "Add more information about your experience",
                ],
            )

        violations = [
            f"Suspicious content pattern: {pattern}"
            for pattern in matching_patterns(cv_content, _SUSPICIOUS_CONTENT_PATTERNS)
        ]
        if violations:
            logger.warning(
                "Suspicious CV content detected",
                extra={"violation_count": len(violations)},
            )
            return GuardrailResult.tripped(
                ViolationTypes.SUSPICIOUS_CONTENT,
                f"Suspicious content detected: {'; '.join(violations)}",
                details={"violations": violations, "violation_count": len(violations)},
                recommendations=[
                    "Please remove sensitive information from your CV",
                    "Avoid including personal financial details",
                ],
            )

        indicator_count = count_matching(cv_content, _CV_INDICATORS)
        if indicator_count < 2:
            return GuardrailResult.warning(
                ViolationTypes.LOW_QUALITY_CONTENT,
                "CV content may be incomplete or not properly formatted",
                details={
                    "indicator_count": indicator_count,
                    "content_length": len(cv_content),
                },
                recommendations=[
                    "Ensure your CV includes work experience, education, and skills",
                    "Add contact information",
                ],
            )

        return GuardrailResult.passed()


__all__ = ["ALLOWED_CONTENT_TYPES", "CVContentGuardrail"]
