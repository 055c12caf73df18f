"""Truthfulness guardrail: stops generated documents from inventing experience.

Skills mentioned in the generated document must be traceable to the
candidate's original CV. When enabled, the LLM is additionally asked to list
claims that the original CV does not support.
"""

from __future__ import annotations

import logging
import re
from typing import TYPE_CHECKING

from cvagent.config import get_settings
from cvagent.exceptions import AgentFailureError
from cvagent.guardrails.base import OutputGuardrail, compile_patterns, matching_patterns
from cvagent.schemas import AgentFailure, GuardrailContext, GuardrailResult, ViolationTypes


if TYPE_CHECKING:
    from cvagent.config import AppSettings
    from cvagent.services.llm import LLMService


logger = logging.getLogger(__name__)

_KNOWN_SKILLS: tuple[str, ...] = (
    "C#",
    "C++",
    "JavaScript",
    "TypeScript",
    "Python",
    "Java",
    "Rust",
    "SQL",
    "React",
    "Angular",
    "Vue",
    "Node.js",
    "ASP.NET",
    "Django",
    "FastAPI",
    "Entity Framework",
    "Azure",
    "AWS",
    "GCP",
    "Docker",
    "Kubernetes",
    "Terraform",
    "Git",
    "Agile",
    "Scrum",
)
_KNOWN_SKILL_PATTERN = re.compile(
    r"(?<![\w+#.])(?:"
    + "|".join(re.escape(skill) for skill in _KNOWN_SKILLS)
    + r")(?![\w+#])",
    re.IGNORECASE,
)
_CLAIM_PHRASE_PATTERN = re.compile(
    r"\b(?:proficient in|experienced with|skilled in|expert in|knowledge of)\s+([^.;:\n]+)",
    re.IGNORECASE,
)
_DISCIPLINE_PATTERN = re.compile(
    r"\b([A-Za-z][\w+#.]+)\s+(?:programming|development)\b", re.IGNORECASE
)
_LIST_SPLIT = re.compile(r",|/|\band\b|\bor\b", re.IGNORECASE)
# Generic words that precede "development" without naming a skill
_NON_SKILL_WORDS: frozenset[str] = frozenset(
    {
        "in",
        "of",
        "for",
        "the",
        "and",
        "to",
        "on",
        "with",
        "business",
        "career",
        "end",
        "product",
        "professional",
        "software",
        "stack",
        "team",
    }
)
_FABRICATION_MARKERS = compile_patterns(
    (
        r"\b(never mentioned|not in (the )?original|fabricated|made up)\b",
        r"\b(completely new|entirely fabricated|invented)\b",
        r"\[(insert|placeholder|add)[^\]]*\]",
    )
)

_LLM_SYSTEM_PROMPT = """You audit tailored CVs and cover letters for truthfulness.
Compare the GENERATED document with the ORIGINAL CV. List every concrete claim in
the generated document (skill, employer, title, degree, certification, metric)
that the original CV does not support. Rephrasing and reordering are allowed.
Reply with JSON only: {"unsupported_claims": ["..."]}"""


class TruthfulnessGuardrail(OutputGuardrail):
    """Flags skills and claims that do not appear in the original CV."""

    name = "TruthfulnessGuardrail"
    priority = 1

    def __init__(
        self,
        *,
        llm_service: LLMService | None = None,
        settings: AppSettings | None = None,
    ) -> None:
        settings = settings or get_settings()
        self._llm_service = llm_service if settings.truthfulness_llm_check else None

    async def validate(self, context: GuardrailContext) -> GuardrailResult:
        if context.original_content:
            return await self.validate_truthfulness(
                context.original_content, context.output
            )
        return self._check_fabrication_markers(context.output)

    async def validate_truthfulness(
        self, original_content: str, generated_content: str
    ) -> GuardrailResult:
        """Compare generated content against the candidate's original CV."""

        fabricated = await self.detect_fabricated_skills(
            original_content, generated_content
        )
        if fabricated:
            logger.warning(
                "Fabricated skills detected",
                extra={"fabricated_skills": fabricated},
            )
            return GuardrailResult.tripped(
                ViolationTypes.FABRICATED_SKILLS,
                f"Fabricated skills detected: {', '.join(fabricated)}",
                details={
                    "fabricated_skills": fabricated,
                    "fabricated_count": len(fabricated),
                },
                recommendations=[
                    "Remove fabricated content from generated document",
                    "Ensure all information exists in original CV",
                ],
            )

        if self._llm_service is not None:
            claims = await self._unsupported_claims(original_content, generated_content)
            if claims:
                return GuardrailResult.tripped(
                    ViolationTypes.FABRICATED_CONTENT,
                    f"Fabricated content detected: {'; '.join(claims)}",
                    details={"fabricated_content": claims, "fabricated_count": len(claims)},
                    recommendations=[
                        "Review generated content for accuracy",
                        "Ensure all information exists in original CV",
                    ],
                )

        return GuardrailResult.passed()

    async def detect_fabricated_skills(
        self, original_cv: str, generated_cv: str
    ) -> list[str]:
        """Return skills named in ``generated_cv`` with no trace in ``original_cv``."""

        original_skills = {skill.lower() for skill in extract_skills(original_cv)}
        original_lower = original_cv.lower()

        fabricated: list[str] = []
        for skill in extract_skills(generated_cv):
            key = skill.lower()
            if key in original_skills or _mentions(original_lower, key):
                continue
            fabricated.append(skill)
        return fabricated

    def _check_fabrication_markers(self, content: str) -> GuardrailResult:
        violations = [
            f"Potential fabrication pattern detected: {pattern}"
            for pattern in matching_patterns(content, _FABRICATION_MARKERS)
        ]
        if violations:
            return GuardrailResult.tripped(
                ViolationTypes.FABRICATION_PATTERN,
                f"Potential fabrication detected: {'; '.join(violations)}",
                details={"violations": violations, "violation_count": len(violations)},
            )
        return GuardrailResult.passed()

    async def _unsupported_claims(
        self, original_content: str, generated_content: str
    ) -> list[str]:
        assert self._llm_service is not None
        reply = await self._llm_service.generate_json(
            prompt=(
                f"ORIGINAL CV:\n{original_content}\n\n"
                f"GENERATED DOCUMENT:\n{generated_content}"
            ),
            system=_LLM_SYSTEM_PROMPT,
            temperature=0.0,
        )
        if isinstance(reply, AgentFailure):
            raise AgentFailureError.from_failure(reply)

        claims = reply.get("unsupported_claims") or []
        if not isinstance(claims, list):
            raise ValueError("unsupported_claims must be a list")
        return [str(claim).strip() for claim in claims if str(claim).strip()]


def extract_skills(content: str) -> list[str]:
    """Extract skill names from free text, preserving first-seen order."""

    candidates: list[str] = [match.group(0) for match in _KNOWN_SKILL_PATTERN.finditer(content)]

    for match in _CLAIM_PHRASE_PATTERN.finditer(content):
        for item in _LIST_SPLIT.split(match.group(1)):
            item = item.strip(" -*\t")
            if item and len(item.split()) <= 3:
                candidates.append(item)

    candidates.extend(
        match.group(1)
        for match in _DISCIPLINE_PATTERN.finditer(content)
        if match.group(1).lower() not in _NON_SKILL_WORDS
    )

    seen: set[str] = set()
    skills: list[str] = []
    for candidate in candidates:
        key = candidate.lower()
        if len(key) > 1 and key not in seen:
            seen.add(key)
            skills.append(candidate)
    return skills


def _mentions(haystack_lower: str, needle_lower: str) -> bool:
    pattern = r"(?<![\w+#.])" + re.escape(needle_lower) + r"(?![\w+#])"
    return re.search(pattern, haystack_lower) is not None


__all__ = ["TruthfulnessGuardrail", "extract_skills"]
