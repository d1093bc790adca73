"""Shared LLM data structures."""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Any, Dict, Mapping


class Capability(str, Enum):
    TEXT_GENERATION = "text_generation"
    TRANSLATION = "translation"
    CODE_GENERATION = "code_generation"
    CODE_ANALYSIS = "code_analysis"
    AGENT = "agent"
    SUMMARIZATION = "summarization"
    REASONING = "reasoning"
    MATH_SOLVING = "math_solving"

    @property
    def label(self) -> str:
        return self.value.replace("_", " ").capitalize()


BASE_CAPABILITIES = frozenset(
    {
        Capability.TEXT_GENERATION,
        Capability.TRANSLATION,
        Capability.CODE_GENERATION,
        Capability.CODE_ANALYSIS,
        Capability.AGENT,
        Capability.SUMMARIZATION,
    }
)


def _as_int(value: Any) -> int:
    try:
        return int(value or 0)
    except (TypeError, ValueError):
        return 0


@dataclass(frozen=True)
class UsageStats:
    prompt_tokens: int = 0
    completion_tokens: int = 0
    total_tokens: int = 0
    raw: Dict[str, Any] = field(default_factory=dict, compare=False)

    @classmethod
    def from_mapping(cls, usage: Mapping[str, Any] | None) -> "UsageStats":
        """Normalizes vendor usage; missing keys become zero."""
        usage = dict(usage) if isinstance(usage, Mapping) else {}
        prompt = usage.get("prompt_tokens", usage.get("input_tokens"))
        completion = usage.get("completion_tokens", usage.get("output_tokens"))
        total = usage.get("total_tokens")
        if total is None:
            total = _as_int(prompt) + _as_int(completion)
        return cls(
            prompt_tokens=_as_int(prompt),
            completion_tokens=_as_int(completion),
            total_tokens=_as_int(total),
            raw=usage,
        )

    def to_dict(self) -> Dict[str, Any]:
        data = dict(self.raw)
        data.update(
            prompt_tokens=self.prompt_tokens,
            completion_tokens=self.completion_tokens,
            total_tokens=self.total_tokens,
        )
        return data


@dataclass(frozen=True)
class GenerationResult:
    success: bool
    text: str = ""
    usage: UsageStats = field(default_factory=UsageStats)
    error: str | None = None
    extras: Dict[str, Any] = field(default_factory=dict)

    @classmethod
    def ok(cls, text: str, usage: UsageStats | Mapping[str, Any] | None = None) -> "GenerationResult":
        if not isinstance(usage, UsageStats):
            usage = UsageStats.from_mapping(usage)
        return cls(success=True, text=text or "", usage=usage)

    @classmethod
    def failure(cls, error: str) -> "GenerationResult":
        return cls(success=False, error=error)

    def with_fields(self, **fields: Any) -> "GenerationResult":
        extras = dict(self.extras)
        extras.update(fields)
        return replace(self, extras=extras)

    def to_dict(self) -> Dict[str, Any]:
        if not self.success:
            return {"success": False, "error": self.error, **self.extras}
        return {
            "success": True,
            "text": self.text,
            "usage": self.usage.to_dict(),
            **self.extras,
        }

    def get(self, key: str, default: Any = None) -> Any:
        return self.to_dict().get(key, default)

    def __getitem__(self, key: str) -> Any:
        return self.to_dict()[key]

    def __contains__(self, key: object) -> bool:
        return key in self.to_dict()


class ProviderConfigError(RuntimeError):
    """Provider configuration is missing a required value."""


class InvalidProviderError(ValueError):
    """Provider name or implementation cannot be used."""
