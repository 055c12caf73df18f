"""Privacy guardrail - PII exposure and data-retention checks.

Runs on both sides of generation. Contact details (email, phone) are
expected in a CV and never trip; high-risk identifiers such as national ID
numbers, payment cards and API secrets do, both in what the candidate uploads
and in what the model produces.
"""

from __future__ import annotations

import logging
import re
from typing import TYPE_CHECKING

from cvagent.config import get_settings
from cvagent.guardrails.base import InputGuardrail, OutputGuardrail
from cvagent.schemas import (
    GuardrailContext,
    GuardrailResult,
    GuardrailStage,
    RetentionPolicy,
    ViolationTypes,
)


if TYPE_CHECKING:
    from re import Pattern

    from cvagent.config import AppSettings


logger = logging.getLogger(__name__)

_PII_PLACEHOLDER = "[REDACTED:PII]"

_HIGH_RISK_PATTERNS: dict[str, Pattern[str]] = {
    "ssn": re.compile(r"\b\d{3}-\d{2}-\d{4}\b"),
    "payment_card": re.compile(r"\b(?:\d{4}[ -]?){3}\d{4}\b"),
    "passport_number": re.compile(
        r"\bpassport\s*(?:no\.?|number|#)?\s*:?\s*[A-Z0-9]{6,9}\b", re.IGNORECASE
    ),
    "api_secret": re.compile(r"\b(?:sk|pk|rk)-[a-z0-9_-]{8,}\b", re.IGNORECASE),
}
_CONTACT_PATTERNS: dict[str, Pattern[str]] = {
    "email": re.compile(r"[A-Za-z0-9._%+-]+@[A-Za-z0-9.-]+\.[A-Za-z]{2,}"),
    "phone": re.compile(r"\+?\d[\d ().-]{7,}\d"),
}


class PrivacyGuardrail(InputGuardrail, OutputGuardrail):
    """Blocks high-risk PII and retention policies that outlive the session."""

    name = "PrivacyGuardrail"
    priority = 0

    def __init__(self, *, settings: AppSettings | None = None) -> None:
        settings = settings or get_settings()
        self._max_retention_hours = settings.session_retention_hours

    async def validate(self, context: GuardrailContext) -> GuardrailResult:
        # Without a stage from the service, output contexts carry the generated document.
        stage: GuardrailStage = context.stage or (
            "output" if context.output else "input"
        )
        content = context.output if stage == "output" else context.input

        pii_result = await self.validate_pii_handling(content, stage=stage)
        if pii_result.blocks:
            return pii_result

        if context.retention is not None:
            retention_result = await self.validate_data_retention(context.retention)
            if retention_result.blocks:
                return retention_result

        return pii_result

    async def validate_pii_handling(
        self, content: str, *, stage: GuardrailStage = "input"
    ) -> GuardrailResult:
        """Trip on high-risk identifiers; report contact details as details only."""

        sanitized, found = _redact(content, _HIGH_RISK_PATTERNS)
        contact_kinds = sorted(
            kind for kind, pattern in _CONTACT_PATTERNS.items() if pattern.search(content)
        )

        if found:
            kinds = sorted(found)
            logger.warning(
                "High-risk PII detected",
                extra={"stage": stage, "pii_kinds": kinds},
            )
            return GuardrailResult.tripped(
                ViolationTypes.PII_EXPOSURE,
                f"Sensitive personal data detected in {stage}: {', '.join(kinds)}",
                details={
                    "pii_kinds": kinds,
                    "match_count": sum(found.values()),
                    "sanitized_content": sanitized,
                    "stage": stage,
                },
                recommendations=[
                    "Remove national ID, passport and payment card numbers",
                    "Never include credentials or API keys in application documents",
                ],
            )

        return GuardrailResult.passed(contact_fields=contact_kinds)

    async def validate_data_retention(self, policy: RetentionPolicy) -> GuardrailResult:
        """Check consent and that data is not kept beyond the session lifetime."""

        problems: list[str] = []
        if not policy.consent_given:
            problems.append("Candidate consent for data processing is missing")
        if policy.retention_hours > self._max_retention_hours:
            problems.append(
                f"Retention of {policy.retention_hours}h exceeds the "
                f"{self._max_retention_hours}h session limit"
            )

        if problems:
            return GuardrailResult.tripped(
                ViolationTypes.DATA_RETENTION_VIOLATION,
                "; ".join(problems),
                details={
                    "retention_hours": policy.retention_hours,
                    "max_retention_hours": self._max_retention_hours,
                    "consent_given": policy.consent_given,
                },
                recommendations=[
                    "Obtain explicit consent before processing candidate data",
                    f"Expire session data within {self._max_retention_hours} hours",
                ],
            )
        return GuardrailResult.passed()


def _redact(
    text: str, patterns: dict[str, Pattern[str]]
) -> tuple[str, dict[str, int]]:
    """Replace every match with a placeholder and count matches per kind."""

    counts: dict[str, int] = {}
    sanitized = text
    for kind, pattern in patterns.items():
        sanitized, hits = pattern.subn(_PII_PLACEHOLDER, sanitized)
        if hits:
            counts[kind] = hits
    return sanitized, counts


__all__ = ["PrivacyGuardrail"]
