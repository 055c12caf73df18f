"""Agent implementations for the CV agent."""

from cvagent.agents.cv_generation import CVGenerationAgent


__all__ = ["CVGenerationAgent"]
