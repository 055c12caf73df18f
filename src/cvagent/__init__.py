"""CV Agent - guardrailed CV and cover letter generation.

This package wraps LLM-driven document generation in a prioritized chain of
input and output guardrails that decide whether a tailored CV or cover letter
is released to the candidate.
"""

__version__ = "0.1.0"
