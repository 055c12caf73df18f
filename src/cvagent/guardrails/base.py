"""Guardrail contracts.

A guardrail is a named, prioritized async check. Input guardrails run before
the generation step, output guardrails after it; a class may be both.
Lower ``priority`` values run first.
"""

from __future__ import annotations

import re
from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, ClassVar

from cvagent.schemas import GuardrailContext, GuardrailResult


if TYPE_CHECKING:
    from collections.abc import Iterable, Sequence
    from re import Pattern


class BaseGuardrail(ABC):
    """Common contract: a stable name, a priority and ``validate``."""

    name: ClassVar[str] = "Guardrail"
    priority: ClassVar[int] = 100

    @abstractmethod
    async def validate(self, context: GuardrailContext) -> GuardrailResult:
        """Inspect ``context`` and report any violation as a result."""

    def __repr__(self) -> str:
        return f"{type(self).__name__}(name={self.name!r}, priority={self.priority})"


class InputGuardrail(BaseGuardrail):
    """Runs before agent execution to validate inputs."""


class OutputGuardrail(BaseGuardrail):
    """Runs after agent execution to validate outputs."""


def compile_patterns(patterns: Iterable[str]) -> tuple[Pattern[str], ...]:
    """Compile case-insensitive regexes once at import time."""

    return tuple(re.compile(pattern, re.IGNORECASE) for pattern in patterns)


def matching_patterns(content: str, patterns: Sequence[Pattern[str]]) -> list[str]:
    """Return the source of every pattern found in ``content``."""

    return [pattern.pattern for pattern in patterns if pattern.search(content)]


def count_matching(content: str, patterns: Sequence[Pattern[str]]) -> int:
    return sum(1 for pattern in patterns if pattern.search(content))


__all__ = [
    "BaseGuardrail",
    "InputGuardrail",
    "OutputGuardrail",
    "compile_patterns",
    "count_matching",
    "matching_patterns",
]
