"""External service clients."""

from cvagent.services.llm import LLMService

__all__ = ["LLMService"]
