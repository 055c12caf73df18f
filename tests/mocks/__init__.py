"""Test doubles for the CV agent.

This module provides mock implementations for:
- LLM responses (mock_llm)
- Guardrails with fixed behaviour (guardrails)

These mocks enable isolated testing without external service dependencies.
"""
