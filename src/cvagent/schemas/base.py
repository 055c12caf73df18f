"""Base schemas and shared models."""

from datetime import datetime, timezone
from enum import Enum
from typing import Any, Literal

from pydantic import BaseModel, Field


def utcnow() -> datetime:
    """Timezone-aware UTC timestamp used as a model default."""

    return datetime.now(timezone.utc)


class AgentFailure(BaseModel):
    """Standardized error object for agent and service failures."""

    agent_id: str
    error_code: str
    message: str
    recoverable: bool = False
    details: dict[str, Any] | None = None
    timestamp: datetime = Field(default_factory=utcnow)


class ErrorCodes:
    """Standard error codes for agent failures."""

    # Guardrails
    GUARDRAIL_REGISTRATION = "ERR_GUARDRAIL_REGISTRATION"

    # LLM
    LLM_AUTH = "ERR_LLM_AUTH"
    LLM_RATE_LIMIT = "ERR_LLM_RATE_LIMIT"
    LLM_SERVER = "ERR_LLM_SERVER"
    LLM_CLIENT = "ERR_LLM_CLIENT"
    LLM_INVALID_RESPONSE = "ERR_LLM_INVALID_RESPONSE"

    # Generation
    GENERATION_EMPTY = "ERR_GENERATION_EMPTY"

    # General
    TIMEOUT = "ERR_TIMEOUT"
    UNEXPECTED = "ERR_UNEXPECTED"


class ViolationTypes:
    """Violation tags reported in ``GuardrailResult.violation_type``."""

    # Pipeline
    GUARDRAIL_ERROR = "GuardrailError"
    SYSTEM_ERROR = "SystemError"

    # Shared
    EMPTY_CONTENT = "EmptyContent"
    EMPTY_OUTPUT = "EmptyOutput"
    SUSPICIOUS_CONTENT = "SuspiciousContent"
    LOW_QUALITY_CONTENT = "LowQualityContent"

    # Job posting
    INVALID_URL_FORMAT = "InvalidUrlFormat"
    SUSPICIOUS_URL = "SuspiciousUrl"
    NON_STANDARD_DOMAIN = "NonStandardDomain"

    # CV content
    FILE_TOO_LARGE = "FileTooLarge"
    INVALID_FILE_TYPE = "InvalidFileType"
    SUSPICIOUS_FILE_NAME = "SuspiciousFileName"
    CONTENT_TOO_SHORT = "ContentTooShort"

    # Truthfulness
    FABRICATED_SKILLS = "FabricatedSkills"
    FABRICATED_CONTENT = "FabricatedContent"
    FABRICATION_PATTERN = "FabricationPattern"

    # Document quality
    QUALITY_ISSUES = "QualityIssues"
    ATS_COMPATIBILITY_ISSUES = "ATSCompatibilityIssues"

    # Privacy
    PII_EXPOSURE = "PIIExposure"
    DATA_RETENTION_VIOLATION = "DataRetentionViolation"

    # Compliance
    DISCRIMINATION_VIOLATION = "DiscriminationViolation"
    PROTECTED_ATTRIBUTES_VIOLATION = "ProtectedAttributesViolation"


class DocumentType(str, Enum):
    """Kinds of documents the agent can generate."""

    CV = "cv"
    COVER_LETTER = "cover_letter"
    PORTFOLIO = "portfolio"


class DocumentStatus(str, Enum):
    PROCESSING = "processing"
    COMPLETED = "completed"
    FAILED = "failed"
    EXPIRED = "expired"


class SessionStatus(str, Enum):
    CREATED = "created"
    PROCESSING = "processing"
    COMPLETED = "completed"
    FAILED = "failed"
    EXPIRED = "expired"


# Type aliases for common literals
GuardrailStage = Literal["input", "output"]
