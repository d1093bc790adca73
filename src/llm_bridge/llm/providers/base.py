"""LLM provider contract and the derived operations shared by every provider."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, Dict, FrozenSet, List, Mapping

from ...parsing import extract_conclusion, extract_steps
from ...prompts import (
    build_agent_prompt,
    build_code_prompt,
    build_explain_prompt,
    build_math_prompt,
    build_reasoning_prompt,
    build_summary_prompt,
    build_translation_prompt,
)
from ...utils import dotted_get, merge_params
from ..types import BASE_CAPABILITIES, Capability, GenerationResult, ProviderConfigError

DEFAULT_TIMEOUT_SECONDS = 30


class BaseProvider(ABC):
    """Base class for all providers.

    Subclasses implement ``generate_text``, ``_default_params`` and
    ``validate_config``. Everything else is built on ``generate_text``.
    """

    name = "provider"
    capabilities: FrozenSet[Capability] = BASE_CAPABILITIES

    def __init__(self, config: Mapping[str, Any], model_aliases: Mapping[str, str] | None = None) -> None:
        self.config: Dict[str, Any] = dict(config or {})
        self.model_aliases: Dict[str, str] = dict(model_aliases or {})
        self.default_params: Dict[str, Any] = self._default_params()
        self.capabilities = frozenset(Capability(c) for c in type(self).capabilities)

    @abstractmethod
    def generate_text(self, prompt: str, params: Mapping[str, Any] | None = None) -> GenerationResult:
        ...

    @abstractmethod
    def _default_params(self) -> Dict[str, Any]:
        ...

    @abstractmethod
    def validate_config(self) -> None:
        """Raises ProviderConfigError when a required setting is missing."""

    def get_config(self, key: str, default: Any = None) -> Any:
        value = dotted_get(self.config, key, default)
        return default if value is None else value

    def merge_params(self, params: Mapping[str, Any] | None) -> Dict[str, Any]:
        return merge_params(self.default_params, params)

    def resolve_model(self, model: str) -> str:
        return str(self.model_aliases.get(model, model))

    def validate_timeout(self) -> float:
        """Raises ProviderConfigError unless the timeout is a positive number of seconds."""
        timeout = self.get_config("timeout_seconds", self.get_config("timeout", DEFAULT_TIMEOUT_SECONDS))
        try:
            seconds = float(timeout)
        except (TypeError, ValueError):
            raise ProviderConfigError(f"Invalid timeout for {self.name}: {timeout!r}") from None
        if seconds <= 0:
            raise ProviderConfigError(f"Timeout for {self.name} must be positive, got {timeout!r}")
        return seconds

    @property
    def request_timeout(self) -> float:
        return self.validate_timeout()

    def supports_capability(self, capability: Capability | str) -> bool:
        try:
            return Capability(capability) in self.capabilities
        except ValueError:
            return False

    def supported_capabilities(self) -> List[str]:
        return [c.value for c in Capability if c in self.capabilities]

    def _unsupported(self, capability: Capability) -> GenerationResult | None:
        if self.supports_capability(capability):
            return None
        return GenerationResult.failure(f"{capability.label} capability not supported by this provider")

    def _generate_with_temperature(
        self, prompt: str, params: Mapping[str, Any] | None, temperature: float
    ) -> GenerationResult:
        return self.generate_text(prompt, merge_params(params or {}, {"temperature": temperature}))

    def translate_text(
        self,
        text: str,
        target_language: str,
        source_language: str | None = None,
        params: Mapping[str, Any] | None = None,
    ) -> GenerationResult:
        unsupported = self._unsupported(Capability.TRANSLATION)
        if unsupported:
            return unsupported
        prompt = build_translation_prompt(text, target_language, source_language)
        result = self._generate_with_temperature(prompt, params, 0.3)
        if not result.success:
            return result
        return result.with_fields(source_language=source_language, target_language=target_language)

    def generate_code(
        self, description: str, language: str = "generic", params: Mapping[str, Any] | None = None
    ) -> GenerationResult:
        unsupported = self._unsupported(Capability.CODE_GENERATION)
        if unsupported:
            return unsupported
        result = self._generate_with_temperature(build_code_prompt(description, language), params, 0.2)
        if not result.success:
            return result
        return result.with_fields(code=result.text, language=language)

    def act_as_agent(
        self,
        role: str,
        task: str,
        context: Mapping[str, Any] | None = None,
        params: Mapping[str, Any] | None = None,
    ) -> GenerationResult:
        unsupported = self._unsupported(Capability.AGENT)
        if unsupported:
            return unsupported
        result = self._generate_with_temperature(build_agent_prompt(role, task, context), params, 0.7)
        if not result.success:
            return result
        return result.with_fields(response=result.text, role=role)

    def explain_code(
        self, code: str, language: str = "auto", params: Mapping[str, Any] | None = None
    ) -> GenerationResult:
        unsupported = self._unsupported(Capability.CODE_ANALYSIS)
        if unsupported:
            return unsupported
        result = self._generate_with_temperature(build_explain_prompt(code, language), params, 0.4)
        if not result.success:
            return result
        return result.with_fields(explanation=result.text, language=language)

    def summarize_text(
        self, text: str, max_length: int = 200, params: Mapping[str, Any] | None = None
    ) -> GenerationResult:
        unsupported = self._unsupported(Capability.SUMMARIZATION)
        if unsupported:
            return unsupported
        result = self._generate_with_temperature(build_summary_prompt(text, max_length), params, 0.3)
        if not result.success:
            return result
        return result.with_fields(
            summary=result.text,
            original_length=len(text),
            summary_length=len(result.text),
        )

    def solve_math(self, problem: str, params: Mapping[str, Any] | None = None) -> GenerationResult:
        unsupported = self._unsupported(Capability.MATH_SOLVING)
        if unsupported:
            return unsupported
        result = self._generate_with_temperature(build_math_prompt(problem), params, 0.1)
        if not result.success:
            return result
        fields: Dict[str, Any] = {"solution": result.text}
        steps = extract_steps(result.text)
        if steps:
            fields["steps"] = steps
        return result.with_fields(**fields)

    def perform_reasoning(
        self,
        question: str,
        context: Mapping[str, Any] | None = None,
        params: Mapping[str, Any] | None = None,
    ) -> GenerationResult:
        unsupported = self._unsupported(Capability.REASONING)
        if unsupported:
            return unsupported
        result = self._generate_with_temperature(build_reasoning_prompt(question, context), params, 0.3)
        if not result.success:
            return result
        fields: Dict[str, Any] = {"reasoning": result.text}
        conclusion = extract_conclusion(result.text)
        if conclusion:
            fields["conclusion"] = conclusion
        return result.with_fields(**fields)
