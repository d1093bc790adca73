"""Provider resolution, caching and default-provider selection."""

from __future__ import annotations

import importlib
import inspect
import logging
import threading
from typing import Any, Dict, List, Mapping, Type

from .llm.providers.base import BaseProvider
from .llm.providers.claude_provider import ClaudeProvider
from .llm.providers.deepseek_provider import DeepSeekProvider
from .llm.providers.llama_provider import LlamaProvider
from .llm.providers.openai_provider import OpenAIProvider
from .llm.types import Capability, GenerationResult, InvalidProviderError

logger = logging.getLogger(__name__)

BUILTIN_PROVIDERS: Dict[str, Type[BaseProvider]] = {
    "openai": OpenAIProvider,
    "claude": ClaudeProvider,
    "llama": LlamaProvider,
    "deepseek": DeepSeekProvider,
}


def _load_provider_class(implementation: Type[BaseProvider] | str) -> Type[BaseProvider]:
    """Resolves a class or a 'package.module:ClassName' path to a provider class."""
    if isinstance(implementation, str):
        module_name, sep, attr = implementation.partition(":")
        if not sep:
            module_name, _, attr = implementation.rpartition(".")
        if not module_name or not attr:
            raise InvalidProviderError(f"Provider class '{implementation}' does not exist")
        try:
            module = importlib.import_module(module_name)
            provider_cls = getattr(module, attr)
        except (ImportError, AttributeError) as exc:
            raise InvalidProviderError(f"Provider class '{implementation}' does not exist") from exc
    else:
        provider_cls = implementation

    if not inspect.isclass(provider_cls) or not issubclass(provider_cls, BaseProvider):
        raise InvalidProviderError(f"Provider class '{implementation}' must extend BaseProvider")
    if inspect.isabstract(provider_cls):
        raise InvalidProviderError(f"Provider class '{implementation}' does not implement the provider contract")
    return provider_cls


class LLMManager:
    def __init__(self, config: Mapping[str, Any]) -> None:
        self.config: Dict[str, Any] = dict(config or {})
        self._default_provider = str(self.config.get("default") or "openai")
        self._providers: Dict[str, BaseProvider] = {}
        self._custom_providers: Dict[str, Type[BaseProvider]] = {}
        self._lock = threading.RLock()

    # -- provider resolution -------------------------------------------------

    def get_provider(self, name: str | None = None) -> BaseProvider:
        provider_name = name or self._default_provider
        with self._lock:
            provider = self._providers.get(provider_name)
            if provider is None:
                provider = self._create_provider(provider_name)
                self._providers[provider_name] = provider
            return provider

    def set_provider(self, name: str, provider: BaseProvider) -> None:
        """Installs a prebuilt provider instance under ``name``."""
        if not isinstance(provider, BaseProvider):
            raise InvalidProviderError(f"Provider for '{name}' must extend BaseProvider")
        with self._lock:
            self._providers[name] = provider

    def _provider_config(self, name: str) -> Dict[str, Any]:
        provider_cfg = dict(self.config.get("providers", {}).get(name) or {})
        request_timeout = self.config.get("request", {}).get("timeout")
        if request_timeout is not None:
            provider_cfg.setdefault("timeout", request_timeout)
        return provider_cfg

    def _create_provider(self, name: str) -> BaseProvider:
        if not self.is_valid_provider(name):
            raise InvalidProviderError(f"Provider '{name}' is not configured")

        provider_cls = self._custom_providers.get(name) or BUILTIN_PROVIDERS.get(name)
        if provider_cls is None:
            raise InvalidProviderError(f"Unsupported provider: {name}")

        logger.debug("Creating provider %s (%s)", name, provider_cls.__name__)
        return provider_cls(self._provider_config(name), self.config.get("model_aliases") or {})

    def register_provider(self, name: str, implementation: Type[BaseProvider] | str) -> "LLMManager":
        provider_cls = _load_provider_class(implementation)
        with self._lock:
            self._custom_providers[name] = provider_cls
            cached = self._providers.get(name)
            if cached is not None and not isinstance(cached, provider_cls):
                del self._providers[name]
        logger.info("Registered custom provider %s (%s)", name, provider_cls.__name__)
        return self

    def get_custom_providers(self) -> Dict[str, Type[BaseProvider]]:
        return dict(self._custom_providers)

    def get_available_providers(self) -> List[str]:
        return list(self.config.get("providers", {}).keys())

    def is_valid_provider(self, name: str) -> bool:
        return name in self.config.get("providers", {})

    def set_default_provider(self, name: str) -> "LLMManager":
        if not self.is_valid_provider(name):
            raise InvalidProviderError(f"Invalid provider: {name}")
        self._default_provider = name
        logger.info("Default provider set to %s", name)
        return self

    def get_default_provider(self) -> str:
        return self._default_provider

    def get_config(self) -> Dict[str, Any]:
        return self.config

    def get_provider_capabilities(self, provider: str | None = None) -> List[str]:
        return self.get_provider(provider).supported_capabilities()

    def supports_capability(self, capability: Capability | str, provider: str | None = None) -> bool:
        return self.get_provider(provider).supports_capability(capability)

    # -- generation ----------------------------------------------------------

    def generate_text(
        self, prompt: str, params: Mapping[str, Any] | None = None, provider: str | None = None
    ) -> GenerationResult:
        return self.get_provider(provider).generate_text(prompt, params or {})

    def openai(self, prompt: str, params: Mapping[str, Any] | None = None) -> GenerationResult:
        return self.generate_text(prompt, params, "openai")

    def claude(self, prompt: str, params: Mapping[str, Any] | None = None) -> GenerationResult:
        return self.generate_text(prompt, params, "claude")

    def llama(self, prompt: str, params: Mapping[str, Any] | None = None) -> GenerationResult:
        return self.generate_text(prompt, params, "llama")

    def deepseek(self, prompt: str, params: Mapping[str, Any] | None = None) -> GenerationResult:
        return self.generate_text(prompt, params, "deepseek")

    def translate_text(
        self,
        text: str,
        target_language: str,
        source_language: str | None = None,
        params: Mapping[str, Any] | None = None,
        *,
        provider: str | None = None,
    ) -> GenerationResult:
        return self.get_provider(provider).translate_text(text, target_language, source_language, params)

    def generate_code(
        self,
        description: str,
        language: str = "generic",
        params: Mapping[str, Any] | None = None,
        *,
        provider: str | None = None,
    ) -> GenerationResult:
        return self.get_provider(provider).generate_code(description, language, params)

    def explain_code(
        self,
        code: str,
        language: str = "auto",
        params: Mapping[str, Any] | None = None,
        *,
        provider: str | None = None,
    ) -> GenerationResult:
        return self.get_provider(provider).explain_code(code, language, params)

    def summarize_text(
        self,
        text: str,
        max_length: int = 200,
        params: Mapping[str, Any] | None = None,
        *,
        provider: str | None = None,
    ) -> GenerationResult:
        return self.get_provider(provider).summarize_text(text, max_length, params)

    def solve_math(
        self, problem: str, params: Mapping[str, Any] | None = None, *, provider: str | None = None
    ) -> GenerationResult:
        return self.get_provider(provider).solve_math(problem, params)

    def perform_reasoning(
        self,
        question: str,
        context: Mapping[str, Any] | None = None,
        params: Mapping[str, Any] | None = None,
        *,
        provider: str | None = None,
    ) -> GenerationResult:
        return self.get_provider(provider).perform_reasoning(question, context, params)

    def act_as_agent(
        self,
        role: str,
        task: str,
        context: Mapping[str, Any] | None = None,
        params: Mapping[str, Any] | None = None,
        *,
        provider: str | None = None,
    ) -> GenerationResult:
        return self.get_provider(provider).act_as_agent(role, task, context, params)
