"""Job posting guardrail: validates job URLs and posting text."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING
from urllib.parse import urlparse

from cvagent.config import get_settings
from cvagent.guardrails.base import (
    InputGuardrail,
    compile_patterns,
    count_matching,
    matching_patterns,
)
from cvagent.schemas import GuardrailContext, GuardrailResult, ViolationTypes


if TYPE_CHECKING:
    from cvagent.config import AppSettings


logger = logging.getLogger(__name__)

_SUSPICIOUS_URL_PATTERNS = compile_patterns(
    (
        r"\b(phishing|scam|fraud|fake)\b",
        r"\b(bit\.ly|tinyurl\.com|short\.link|t\.co|goo\.gl)\b",
        r"\.(tk|ml|ga|cf)(?=[:/]|$)",
    )
)
_SUSPICIOUS_CONTENT_PATTERNS = compile_patterns(
    (
        r"\b(earn money fast|get rich|no experience required)\b",
        r"\b(pyramid|mlm|multi-level marketing|network marketing)\b",
        r"\b(commission only|no salary|unpaid)\b",
        r"\b(wire transfer|processing fee|pay (a|an) (fee|deposit))\b",
    )
)
_LEGITIMATE_INDICATORS = compile_patterns(
    (
        r"\b(requirements|qualifications|responsibilities)\b",
        r"\b(experience|education|degree|certification)\b",
        r"\b(salary|compensation|pay|benefits)\b",
        r"\b(company|organization|team|department)\b",
    )
)


class JobPostingGuardrail(InputGuardrail):
    """Rejects malformed or scam-looking job URLs and postings."""

    name = "JobPostingGuardrail"
    priority = 2

    def __init__(self, *, settings: AppSettings | None = None) -> None:
        settings = settings or get_settings()
        self._trusted_domains = tuple(d.lower() for d in settings.trusted_job_domains)

    async def validate(self, context: GuardrailContext) -> GuardrailResult:
        findings: list[GuardrailResult] = []

        if context.job_url:
            url_result = await self.validate_job_url(context.job_url)
            if url_result.blocks:
                return url_result
            findings.append(url_result)

        if context.job_content is not None:
            content_result = await self.validate_job_content(context.job_content)
            if content_result.blocks:
                return content_result
            findings.append(content_result)

        # Surface the first non-blocking finding so the service can report it.
        for finding in findings:
            if finding.is_warning:
                return finding
        return GuardrailResult.passed()

    async def validate_job_url(self, job_url: str) -> GuardrailResult:
        """Check that ``job_url`` is a well-formed, non-suspicious http(s) URL."""

        parsed = urlparse(job_url.strip())
        if parsed.scheme not in ("http", "https") or not parsed.hostname:
            logger.warning("Invalid job URL format", extra={"job_url": job_url})
            return GuardrailResult.tripped(
                ViolationTypes.INVALID_URL_FORMAT,
                "Invalid job URL format",
                details={"url": job_url},
                recommendations=[
                    "Please provide a valid job posting URL",
                    "Ensure the URL is properly formatted",
                ],
            )

        suspicious = matching_patterns(job_url, _SUSPICIOUS_URL_PATTERNS)
        if suspicious:
            logger.warning("Suspicious job URL detected", extra={"job_url": job_url})
            return GuardrailResult.tripped(
                ViolationTypes.SUSPICIOUS_URL,
                "Suspicious job URL detected",
                details={"suspicious_pattern": suspicious[0], "url": job_url},
                recommendations=[
                    "Please verify the job posting URL",
                    "Use a direct link to the company's career page",
                    "Avoid shortened or suspicious URLs",
                ],
            )

        host = parsed.hostname.lower()
        if not any(
            host == domain or host.endswith(f".{domain}")
            for domain in self._trusted_domains
        ):
            return GuardrailResult.warning(
                ViolationTypes.NON_STANDARD_DOMAIN,
                "Non-standard job board domain detected",
                details={"domain": host, "is_legitimate": False},
                recommendations=[
                    "Consider using a well-known job board",
                    "Verify the company's official career page",
                ],
            )

        return GuardrailResult.passed()

    async def validate_job_content(self, job_content: str) -> GuardrailResult:
        """Check posting text for emptiness, scam wording and missing detail."""

        if not job_content.strip():
            return GuardrailResult.tripped(
                ViolationTypes.EMPTY_CONTENT,
                "Job content is empty",
                recommendations=[
                    "Please provide job posting content",
                    "Ensure the job posting is accessible",
                ],
            )

        violations = [
            f"Suspicious content pattern: {pattern}"
            for pattern in matching_patterns(job_content, _SUSPICIOUS_CONTENT_PATTERNS)
        ]
        if violations:
            logger.warning(
                "Suspicious job content detected",
                extra={"violation_count": len(violations)},
            )
            return GuardrailResult.tripped(
                ViolationTypes.SUSPICIOUS_CONTENT,
                f"Suspicious job content detected: {'; '.join(violations)}",
                details={"violations": violations, "violation_count": len(violations)},
                recommendations=[
                    "Please verify this is a legitimate job posting",
                    "Check the company's official website",
                    "Be cautious of suspicious job postings",
                ],
            )

        indicator_count = count_matching(job_content, _LEGITIMATE_INDICATORS)
        if indicator_count < 2:
            return GuardrailResult.warning(
                ViolationTypes.LOW_QUALITY_CONTENT,
                "Job content may be incomplete or suspicious",
                details={
                    "indicator_count": indicator_count,
                    "content_length": len(job_content),
                },
                recommendations=[
                    "Verify this is a complete job posting",
                    "Check for missing job details",
                ],
            )

        return GuardrailResult.passed()


__all__ = ["JobPostingGuardrail"]
