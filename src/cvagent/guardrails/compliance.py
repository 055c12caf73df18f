"""Compliance guardrail: keeps generated documents free of protected attributes.

Application documents must be judged on qualifications only. This guardrail
blocks discriminatory preference language and personal characteristics that
equal-opportunity rules keep out of a CV or cover letter.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from cvagent.guardrails.base import OutputGuardrail, compile_patterns, matching_patterns
from cvagent.schemas import GuardrailContext, GuardrailResult, ViolationTypes


if TYPE_CHECKING:
    from re import Pattern


logger = logging.getLogger(__name__)

_DISCRIMINATORY_PATTERNS = {
    "age": compile_patterns(
        (
            r"\b(young|youthful|elderly|too old|digital native)\s+(candidates?|applicants?|team|people)\b",
            r"\b(millennials?|gen z|baby boomers?)\s+only\b",
        )
    ),
    "gender": compile_patterns(
        (
            r"\b(male|female|men|women)\s+(only|preferred|candidates? preferred)\b",
            r"\b(salesman|chairman|manpower)\b",
        )
    ),
    "ethnicity": compile_patterns(
        (r"\b(white|black|asian|hispanic|caucasian)\s+(only|preferred|candidates?)\b",)
    ),
    "disability": compile_patterns(
        (r"\b(retarded|handicapped|crippled|wheelchair[- ]bound)\b",)
    ),
    "slur": compile_patterns((r"\b(fag|dyke|tranny)\b",)),
    "national_origin": compile_patterns(
        (r"\b(native (english )?speakers? only|no (foreigners|immigrants))\b",)
    ),
}

_PROTECTED_ATTRIBUTE_PATTERNS = {
    "age": compile_patterns(
        (
            r"\b\d{1,2}\s*(years?\s*old|years?\s*of\s*age)\b",
            r"\b(date\s*of\s*birth|born\s+(on|in)\s+\d{4}|birth\s*year|d\.o\.b\.?)",
        )
    ),
    "gender": compile_patterns((r"\b(gender|sex)\s*:",)),
    "marital_status": compile_patterns(
        (
            r"\bmarital\s*status\b",
            r"\b(married|divorced|widowed)\b",
        )
    ),
    "family_status": compile_patterns(
        (
            r"\b(number\s*of\s*children|mother of|father of|pregnant)\b",
            r"\b(maternity|paternity)\s+leave\b",
        )
    ),
    "health": compile_patterns(
        (r"\b(medical\s*condition|disability\s*status|health\s*status|medication)\b",)
    ),
    "religion": compile_patterns(
        (r"\breligion\s*:", r"\b(church|mosque|synagogue|temple)\s+member\b")
    ),
    "political_affiliation": compile_patterns(
        (r"\b(republican|democrat)\s+party\b", r"\bpolitical\s*affiliation\b")
    ),
    "national_origin": compile_patterns(
        (
            r"\b(country\s*of\s*origin|place\s*of\s*birth|native\s*country)\b",
            r"\b(nationality|citizenship)\s*:",
        )
    ),
    "personal_identifier": compile_patterns(
        (
            r"\b(social\s*security|ssn|tax\s*id|driver'?s?\s*licen[cs]e\s*(no|number))\b",
            r"\b(credit\s*score|credit\s*history)\b",
            r"\b(criminal\s*record|arrest(ed)?|conviction|felony|misdemeanou?r)\b",
        )
    ),
}


class ComplianceGuardrail(OutputGuardrail):
    """Blocks discriminatory language and protected attributes in output."""

    name = "ComplianceGuardrail"
    priority = 1

    async def validate(self, context: GuardrailContext) -> GuardrailResult:
        if not context.output.strip():
            return GuardrailResult.tripped(
                ViolationTypes.EMPTY_OUTPUT, "No output content to validate"
            )

        discrimination = await self.validate_discrimination_compliance(context.output)
        if discrimination.blocks:
            return discrimination

        return await self.validate_protected_attributes(context.output)

    async def validate_discrimination_compliance(self, content: str) -> GuardrailResult:
        """Trip on preference language tied to protected characteristics."""

        violations = _scan(content, _DISCRIMINATORY_PATTERNS)
        if violations:
            logger.warning(
                "Discrimination compliance violations detected",
                extra={"categories": sorted(violations)},
            )
            return GuardrailResult.tripped(
                ViolationTypes.DISCRIMINATION_VIOLATION,
                "Discrimination compliance violations detected: "
                + ", ".join(sorted(violations)),
                details={
                    "violations": violations,
                    "violation_count": sum(len(v) for v in violations.values()),
                },
                recommendations=[
                    "Remove any references to protected characteristics",
                    "Use gender-neutral language",
                    "Focus on skills and qualifications only",
                ],
            )
        return GuardrailResult.passed()

    async def validate_protected_attributes(self, content: str) -> GuardrailResult:
        """Trip on personal attributes that do not belong in an application."""

        violations = _scan(content, _PROTECTED_ATTRIBUTE_PATTERNS)
        if violations:
            logger.warning(
                "Protected attribute violations detected",
                extra={"categories": sorted(violations)},
            )
            return GuardrailResult.tripped(
                ViolationTypes.PROTECTED_ATTRIBUTES_VIOLATION,
                "Protected attributes detected: " + ", ".join(sorted(violations)),
                details={
                    "violations": violations,
                    "violation_count": sum(len(v) for v in violations.values()),
                },
                recommendations=[
                    "Remove all references to protected characteristics",
                    "Avoid personal information in professional documents",
                    "Ensure compliance with equal opportunity laws",
                ],
            )
        return GuardrailResult.passed()


def _scan(
    content: str, catalog: dict[str, tuple[Pattern[str], ...]]
) -> dict[str, list[str]]:
    found: dict[str, list[str]] = {}
    for category, patterns in catalog.items():
        hits = matching_patterns(content, patterns)
        if hits:
            found[category] = hits
    return found


__all__ = ["ComplianceGuardrail"]
