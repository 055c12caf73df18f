"""Document quality guardrail: structure, length, tone and ATS readiness."""

from __future__ import annotations

import logging
import re
from typing import TYPE_CHECKING

from cvagent.config import get_settings
from cvagent.guardrails.base import OutputGuardrail, compile_patterns, matching_patterns
from cvagent.schemas import DocumentType, GuardrailContext, GuardrailResult, ViolationTypes


if TYPE_CHECKING:
    from re import Pattern

    from cvagent.config import AppSettings


logger = logging.getLogger(__name__)

_CONTACT = re.compile(r"\bcontact\b|[A-Za-z0-9._%+-]+@[A-Za-z0-9.-]+\.[A-Za-z]{2,}", re.I)
_EXPERIENCE = re.compile(r"\b(experience|employment|work history)\b", re.I)
_EDUCATION = re.compile(r"\beducation\b", re.I)

REQUIRED_SECTIONS: dict[DocumentType, dict[str, Pattern[str]]] = {
    DocumentType.CV: {
        "Contact": _CONTACT,
        "Experience": _EXPERIENCE,
        "Education": _EDUCATION,
        "Skills": re.compile(r"\bskills\b", re.I),
    },
    DocumentType.COVER_LETTER: {
        "Salutation": re.compile(r"^\s*(dear\b|to whom it may concern)", re.I | re.M),
        "Closing": re.compile(
            r"\b(sincerely|kind regards|best regards|regards|yours faithfully|yours truly)\b",
            re.I,
        ),
    },
    DocumentType.PORTFOLIO: {
        "Contact": _CONTACT,
        "Summary": re.compile(r"\b(summary|profile|about)\b", re.I),
        "Experience": _EXPERIENCE,
        "Education": _EDUCATION,
    },
}

_UNPROFESSIONAL_PATTERNS = compile_patterns(
    (
        r"\b(awesome|super cool|rockstar|ninja|guru)\b",
        r"\b(um|uh|you know|basically|lol)\b",
        r"!{2,}",
    )
)
_EXCESSIVE_WHITESPACE = re.compile(r"[ \t]{5,}")
_EMAIL = re.compile(r"\b[A-Za-z0-9._%+-]+@[A-Za-z0-9.-]+\.[A-Za-z]{2,}\b")
_PHONE = re.compile(r"\+?\d[\d ().-]{7,}\d")
_ATS_KEYWORDS: frozenset[str] = frozenset(
    {
        "experience",
        "skills",
        "education",
        "certification",
        "project",
        "projects",
        "management",
        "development",
        "analysis",
        "leadership",
        "communication",
        "teamwork",
        "solution",
        "achievement",
        "responsibility",
        "collaboration",
        "innovation",
    }
)
_WORD = re.compile(r"[A-Za-z][A-Za-z+#.-]*")
_MIN_KEYWORD_DENSITY = 0.02
_MIN_SECTION_HEADERS = 3


class DocumentQualityGuardrail(OutputGuardrail):
    """Blocks documents that are malformed and warns on ATS problems."""

    name = "DocumentQualityGuardrail"
    priority = 3

    def __init__(self, *, settings: AppSettings | None = None) -> None:
        settings = settings or get_settings()
        self._min_length = settings.document_min_length
        self._max_length = settings.document_max_length

    async def validate(self, context: GuardrailContext) -> GuardrailResult:
        if not context.output.strip():
            return GuardrailResult.tripped(
                ViolationTypes.EMPTY_OUTPUT, "No output content to validate"
            )

        quality = await self.validate_document_quality(
            context.output, context.document_type
        )
        if quality.blocks:
            return quality

        # Cover letters are prose; section-based ATS parsing does not apply.
        if context.document_type != DocumentType.COVER_LETTER:
            return await self.validate_ats_compatibility(context.output)
        return quality

    async def validate_document_quality(
        self, content: str, document_type: DocumentType
    ) -> GuardrailResult:
        """Check length, required sections, spacing and tone."""

        issues: list[str] = []

        if len(content) < self._min_length:
            issues.append("Document is too short")
        elif len(content) > self._max_length:
            issues.append("Document is too long")

        for section, pattern in REQUIRED_SECTIONS.get(document_type, {}).items():
            if not pattern.search(content):
                issues.append(f"Missing required section: {section}")

        if _EXCESSIVE_WHITESPACE.search(content):
            issues.append("Excessive whitespace detected")

        issues.extend(
            f"Unprofessional language detected: {pattern}"
            for pattern in matching_patterns(content, _UNPROFESSIONAL_PATTERNS)
        )

        if issues:
            logger.warning(
                "Document quality issues detected",
                extra={"document_type": document_type.value, "issue_count": len(issues)},
            )
            return GuardrailResult.tripped(
                ViolationTypes.QUALITY_ISSUES,
                f"Document quality issues detected: {'; '.join(issues)}",
                details={
                    "issues": issues,
                    "issue_count": len(issues),
                    "content_length": len(content),
                    "document_type": document_type.value,
                },
                recommendations=[
                    "Ensure all required sections are present",
                    "Check formatting and structure",
                    "Use professional language throughout",
                ],
            )

        return GuardrailResult.passed()

    async def validate_ats_compatibility(self, content: str) -> GuardrailResult:
        """Report, without blocking, features that hurt ATS parsing."""

        issues: list[str] = []

        density = keyword_density(content)
        if density < _MIN_KEYWORD_DENSITY:
            issues.append("Low keyword density - may not pass ATS screening")

        headers = section_headers(content)
        if len(headers) < _MIN_SECTION_HEADERS:
            issues.append("Insufficient section headers for ATS parsing")

        if not _EMAIL.search(content):
            issues.append("No valid email address found")
        if not _PHONE.search(content):
            issues.append("No valid phone number found")

        if issues:
            return GuardrailResult.warning(
                ViolationTypes.ATS_COMPATIBILITY_ISSUES,
                f"ATS compatibility issues detected: {'; '.join(issues)}",
                details={
                    "issues": issues,
                    "issue_count": len(issues),
                    "keyword_density": round(density, 4),
                    "section_headers": len(headers),
                },
                recommendations=[
                    "Use simple, clean formatting",
                    "Include relevant keywords from job description",
                    "Ensure proper section headers",
                    "Format contact information clearly",
                ],
            )

        return GuardrailResult.passed(
            keyword_density=round(density, 4), section_headers=len(headers)
        )


def keyword_density(content: str) -> float:
    """Share of words that are common professional keywords."""

    words = [word.lower().rstrip(".") for word in _WORD.findall(content)]
    if not words:
        return 0.0
    return sum(1 for word in words if word in _ATS_KEYWORDS) / len(words)


def section_headers(content: str) -> list[str]:
    """Short capitalised lines without sentence punctuation, or markdown headings."""

    headers: list[str] = []
    for line in content.splitlines():
        stripped = line.strip().lstrip("#").strip()
        if (
            stripped
            and len(stripped) < 50
            and stripped[0].isupper()
            and "." not in stripped
            and "," not in stripped
        ):
            headers.append(stripped)
    return headers


__all__ = [
    "DocumentQualityGuardrail",
    "REQUIRED_SECTIONS",
    "keyword_density",
    "section_headers",
]
