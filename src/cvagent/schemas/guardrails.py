"""Guardrail pipeline schemas.

``GuardrailContext`` is the frozen, per-call input every guardrail receives;
``GuardrailResult`` is what each guardrail (and the aggregating service)
returns. Violations are reported as data on the result, never as exceptions.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any
from uuid import UUID, uuid4

from pydantic import BaseModel, ConfigDict, Field

from cvagent.schemas.base import DocumentType, GuardrailStage, utcnow


class CVFileInfo(BaseModel):
    """Metadata of an uploaded CV file; the binary stays with the caller."""

    model_config = ConfigDict(frozen=True)

    filename: str
    content_type: str
    size_bytes: int = Field(ge=0)


class RetentionPolicy(BaseModel):
    """How long candidate data is kept and whether the candidate agreed to it."""

    model_config = ConfigDict(frozen=True)

    retention_hours: int = Field(ge=0)
    consent_given: bool = False


class GuardrailContext(BaseModel):
    """Immutable bundle handed to every guardrail for one validation call.

    The typed family fields (``job_url``, ``cv_file``, ``original_content``,
    ``document_type``, ``retention``) carry what the built-in guardrails need;
    ``metadata`` is left for custom guardrails.

    ``GuardrailService`` hands each guardrail its own deep copy with ``stage``
    filled in, so one guardrail cannot change what another one sees.
    """

    model_config = ConfigDict(frozen=True)

    input: str = ""
    output: str = ""
    agent_name: str = ""
    session_id: UUID = Field(default_factory=uuid4)
    timestamp: datetime = Field(default_factory=utcnow)
    metadata: dict[str, Any] = Field(default_factory=dict)
    stage: GuardrailStage | None = None

    # Job posting family
    job_url: str | None = None
    job_content: str | None = None

    # CV file family
    cv_file: CVFileInfo | None = None

    # Truthfulness family
    original_content: str | None = None

    # Document quality family
    document_type: DocumentType = DocumentType.CV

    # Privacy family
    retention: RetentionPolicy | None = None


class GuardrailResult(BaseModel):
    """Outcome of one guardrail invocation or of an aggregated pipeline run."""

    tripwire_triggered: bool = False
    violation_type: str | None = None
    message: str | None = None
    details: dict[str, Any] = Field(default_factory=dict)
    allow_execution: bool = True
    recommendations: list[str] = Field(default_factory=list)
    guardrail_name: str | None = None

    @property
    def blocks(self) -> bool:
        """True when this result denies execution."""

        return self.tripwire_triggered or not self.allow_execution

    @property
    def is_warning(self) -> bool:
        """True for non-blocking findings that still carry a violation tag."""

        return not self.blocks and self.violation_type is not None

    @classmethod
    def passed(cls, **details: Any) -> GuardrailResult:
        """Return a clean, allow-execution result."""

        return cls(details=dict(details))

    @classmethod
    def tripped(
        cls,
        violation_type: str,
        message: str,
        *,
        details: dict[str, Any] | None = None,
        recommendations: list[str] | None = None,
    ) -> GuardrailResult:
        """Return a blocking result for a detected violation."""

        return cls(
            tripwire_triggered=True,
            violation_type=violation_type,
            message=message,
            details=details or {},
            allow_execution=False,
            recommendations=recommendations or [],
        )

    @classmethod
    def warning(
        cls,
        violation_type: str,
        message: str,
        *,
        details: dict[str, Any] | None = None,
        recommendations: list[str] | None = None,
    ) -> GuardrailResult:
        """Return a non-blocking result that records a finding."""

        return cls(
            tripwire_triggered=False,
            violation_type=violation_type,
            message=message,
            details=details or {},
            allow_execution=True,
            recommendations=recommendations or [],
        )
