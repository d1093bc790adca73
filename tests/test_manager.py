import threading
import time

import pytest

from llm_bridge.llm.providers.base import BaseProvider
from llm_bridge.llm.providers.claude_provider import ClaudeProvider
from llm_bridge.llm.providers.deepseek_provider import DeepSeekProvider
from llm_bridge.llm.providers.llama_provider import LlamaProvider
from llm_bridge.llm.providers.openai_provider import OpenAIProvider
from llm_bridge.llm.types import GenerationResult, InvalidProviderError
from llm_bridge.manager import LLMManager


class EchoProvider(BaseProvider):
    name = "echo"

    def __init__(self, config, model_aliases=None):
        super().__init__(config, model_aliases)
        self.prompts = []

    def _default_params(self):
        return {"model": self.get_config("default_model", "echo-1"), "temperature": 0.7, "max_tokens": 10}

    def validate_config(self):
        pass

    def generate_text(self, prompt, params=None):
        merged = self.merge_params(params)
        self.prompts.append((prompt, merged))
        return GenerationResult.ok(f"{self.resolve_model(merged['model'])}:{prompt}")


class SlowProvider(EchoProvider):
    created = 0

    def __init__(self, config, model_aliases=None):
        time.sleep(0.02)
        type(self).created += 1
        super().__init__(config, model_aliases)


def _config():
    return {
        "default": "openai",
        "providers": {
            "openai": {"api_key": "sk-test"},
            "claude": {"api_key": "c", "base_url": "https://api.anthropic.com"},
            "llama": {"api_key": "l", "base_url": "http://localhost:11434"},
            "deepseek": {"api_key": "d"},
            "custom-ai": {"api_key": "x", "default_model": "custom-model-v1"},
        },
        "model_aliases": {"gpt4": "gpt-4", "fast": "custom-model-mini"},
        "request": {"timeout": 12},
    }


def test_builtin_providers_are_created_by_name():
    manager = LLMManager(_config())

    assert isinstance(manager.get_provider("openai"), OpenAIProvider)
    assert isinstance(manager.get_provider("claude"), ClaudeProvider)
    assert isinstance(manager.get_provider("llama"), LlamaProvider)
    assert isinstance(manager.get_provider("deepseek"), DeepSeekProvider)


def test_provider_instances_are_cached_per_name():
    manager = LLMManager(_config())

    first = manager.get_provider("claude")

    assert manager.get_provider("claude") is first
    assert manager.get_provider("llama") is not first


def test_unconfigured_provider_raises_invalid_argument():
    manager = LLMManager(_config())

    with pytest.raises(InvalidProviderError, match="Provider 'mistral' is not configured"):
        manager.get_provider("mistral")
    with pytest.raises(ValueError):
        manager.generate_text("Hi", provider="mistral")


def test_configured_name_without_implementation_raises():
    manager = LLMManager(_config())

    with pytest.raises(InvalidProviderError, match="Unsupported provider: custom-ai"):
        manager.get_provider("custom-ai")


def test_registered_provider_is_returned_for_its_name():
    manager = LLMManager(_config())

    manager.register_provider("custom-ai", EchoProvider)
    provider = manager.get_provider("custom-ai")

    assert isinstance(provider, EchoProvider)
    assert manager.get_custom_providers() == {"custom-ai": EchoProvider}
    assert manager.generate_text("Hi", provider="custom-ai").text == "custom-model-v1:Hi"


def test_registered_provider_overrides_builtin_even_after_instantiation():
    manager = LLMManager(_config())
    builtin = manager.get_provider("openai")

    manager.register_provider("openai", EchoProvider)

    replacement = manager.get_provider("openai")
    assert isinstance(builtin, OpenAIProvider)
    assert isinstance(replacement, EchoProvider)
    assert manager.get_provider("openai") is replacement


def test_register_provider_accepts_import_paths():
    manager = LLMManager(_config())

    manager.register_provider("custom-ai", "llm_bridge.llm.providers.llama_provider:LlamaProvider")
    manager.register_provider("claude", "llm_bridge.llm.providers.deepseek_provider.DeepSeekProvider")

    assert isinstance(manager.get_provider("custom-ai"), LlamaProvider)
    assert isinstance(manager.get_provider("claude"), DeepSeekProvider)


@pytest.mark.parametrize(
    "implementation,message",
    [
        ("nope.missing:Provider", "does not exist"),
        ("llm_bridge.manager:NoSuchClass", "does not exist"),
        ("NoModule", "does not exist"),
        (dict, "must extend BaseProvider"),
        (BaseProvider, "does not implement the provider contract"),
    ],
)
def test_invalid_registrations_fail_fast(implementation, message):
    manager = LLMManager(_config())

    with pytest.raises(InvalidProviderError, match=message):
        manager.register_provider("custom-ai", implementation)
    assert manager.get_custom_providers() == {}


def test_default_provider_comes_from_config_and_can_change():
    manager = LLMManager(_config())
    manager.set_provider("openai", EchoProvider({"default_model": "a"}))
    manager.set_provider("claude", EchoProvider({"default_model": "b"}))

    assert manager.get_default_provider() == "openai"
    assert manager.generate_text("Hi").text == "a:Hi"

    manager.set_default_provider("claude")

    assert manager.get_default_provider() == "claude"
    assert manager.generate_text("Hi").text == "b:Hi"
    assert manager.generate_text("Hi", provider="openai").text == "a:Hi"


def test_default_provider_falls_back_to_openai():
    assert LLMManager({"providers": {}}).get_default_provider() == "openai"


def test_set_default_provider_rejects_unknown_names():
    manager = LLMManager(_config())
    manager.set_default_provider("deepseek")

    with pytest.raises(InvalidProviderError, match="Invalid provider: nonexistent"):
        manager.set_default_provider("nonexistent")

    assert manager.get_default_provider() == "deepseek"


def test_set_provider_requires_a_provider_instance():
    manager = LLMManager(_config())

    with pytest.raises(InvalidProviderError):
        manager.set_provider("openai", object())


def test_available_and_valid_providers_follow_config():
    manager = LLMManager(_config())

    assert manager.get_available_providers() == ["openai", "claude", "llama", "deepseek", "custom-ai"]
    assert manager.is_valid_provider("deepseek") is True
    assert manager.is_valid_provider("invalid-provider") is False


def test_model_aliases_and_request_timeout_reach_providers():
    config = _config()
    config["providers"]["llama"]["timeout_seconds"] = 5
    manager = LLMManager(config)

    openai_provider = manager.get_provider("openai")

    assert openai_provider.resolve_model("gpt4") == "gpt-4"
    assert openai_provider.resolve_model("gpt-4o-mini") == "gpt-4o-mini"
    assert openai_provider.request_timeout == 12
    assert manager.get_provider("llama").request_timeout == 5


def test_provider_shortcuts_route_by_name():
    manager = LLMManager(_config())
    for name in ("openai", "claude", "llama", "deepseek"):
        manager.set_provider(name, EchoProvider({"default_model": name}))

    assert manager.openai("x").text == "openai:x"
    assert manager.claude("x").text == "claude:x"
    assert manager.llama("x").text == "llama:x"
    assert manager.deepseek("x").text == "deepseek:x"


def test_derived_operations_route_to_requested_provider():
    manager = LLMManager(_config())
    echo = EchoProvider({"default_model": "m"})
    manager.set_provider("claude", echo)

    result = manager.summarize_text("some text", 50, provider="claude")
    code = manager.generate_code("hello world", "python", provider="claude")

    assert result.success is True
    assert result["original_length"] == len("some text")
    assert code["language"] == "python"
    assert echo.prompts[0][1]["temperature"] == 0.3
    assert manager.solve_math("1+1", provider="claude").error == (
        "Math solving capability not supported by this provider"
    )


def test_capability_queries_through_manager():
    manager = LLMManager(_config())

    assert manager.supports_capability("math_solving", provider="deepseek") is True
    assert manager.supports_capability("math_solving") is False
    assert "reasoning" in manager.get_provider_capabilities("deepseek")


def test_concurrent_first_lookups_build_one_instance():
    SlowProvider.created = 0
    manager = LLMManager(_config())
    manager.register_provider("custom-ai", SlowProvider)
    seen = []

    def lookup():
        seen.append(manager.get_provider("custom-ai"))

    threads = [threading.Thread(target=lookup) for _ in range(8)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    assert SlowProvider.created == 1
    assert len({id(p) for p in seen}) == 1
