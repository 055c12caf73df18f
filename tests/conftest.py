"""Pytest configuration and shared fixtures.

This module provides fixtures for:
- Test configuration (isolated from the environment's .env)
- Sample CV, job posting and generated documents that pass every guardrail
- Mock LLM service
"""

from collections.abc import Iterator

import pytest

from cvagent.config import AppSettings, get_settings
from tests.mocks.mock_llm import MockLLMService


SAMPLE_CV = """Jane Doe
Contact
jane.doe@example.com | +44 20 7946 0958

Summary
Backend engineer with six years of experience building data platforms.

Experience
Senior Software Engineer, Acme Analytics (2019 - 2024)
- Built Python and FastAPI services on AWS with Docker and Kubernetes
- Delivered reporting tools used by 40 analysts

Education
BSc Computer Science, University of Leeds

Skills
Python, FastAPI, SQL, Docker, Kubernetes, AWS, Git, Agile
"""

SAMPLE_GENERATED_CV = """Jane Doe
Contact
jane.doe@example.com | +44 20 7946 0958

Summary
Backend engineer with six years of experience building Python data platforms on AWS.

Experience
Senior Software Engineer, Acme Analytics (2019 - 2024)
- Designed FastAPI services deployed with Docker and Kubernetes
- Delivered reporting tools for 40 analysts across the business

Education
BSc Computer Science, University of Leeds

Skills
Python, FastAPI, SQL, Docker, Kubernetes, AWS, Git
"""

SAMPLE_COVER_LETTER = """Dear Hiring Manager,

I am applying for the Backend Engineer role at Globex. Over six years at Acme
Analytics I built Python and FastAPI services on AWS, packaged with Docker and
run on Kubernetes.

I enjoy turning messy data into reliable reporting tools, and I would welcome
the chance to bring that experience to your platform team.

Sincerely,
Jane Doe
"""

SAMPLE_JOB_DESCRIPTION = """Globex is hiring a Backend Engineer to join the data
platform team. Responsibilities include building Python services and data
pipelines. Requirements: three or more years of experience with Python and SQL.
Competitive salary and benefits."""

SAMPLE_JOB_URL = "https://www.linkedin.com/jobs/view/3851234567"


# =============================================================================
# Configuration
# =============================================================================


@pytest.fixture
def settings() -> AppSettings:
    """Settings with explicit values so local .env files cannot leak in."""

    return AppSettings(
        _env_file=None,
        llm_provider="openai",
        llm_model="gpt-4o",
        openai_api_key="test-key",
        guardrail_fail_fast=False,
        guardrail_parallel_same_priority=True,
        truthfulness_llm_check=False,
    )


@pytest.fixture
def clear_settings_cache() -> Iterator[None]:
    """Reset the cached settings before and after a test."""

    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


# =============================================================================
# Sample documents
# =============================================================================


@pytest.fixture
def sample_cv() -> str:
    return SAMPLE_CV


@pytest.fixture
def sample_generated_cv() -> str:
    return SAMPLE_GENERATED_CV


@pytest.fixture
def sample_cover_letter() -> str:
    return SAMPLE_COVER_LETTER


@pytest.fixture
def sample_job_description() -> str:
    return SAMPLE_JOB_DESCRIPTION


@pytest.fixture
def sample_job_url() -> str:
    return SAMPLE_JOB_URL


# =============================================================================
# LLM
# =============================================================================


@pytest.fixture
def mock_llm() -> MockLLMService:
    """Mock LLM replying with the sample CV and cover letter."""

    return MockLLMService(
        responses={
            "tailored cv": SAMPLE_GENERATED_CV,
            "tailored cover letter": SAMPLE_COVER_LETTER,
        }
    )
