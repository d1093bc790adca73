import pytest

from llm_bridge.llm.providers.deepseek_provider import DeepSeekProvider
from llm_bridge.llm.types import ProviderConfigError

CONFIG = {"api_key": "ds-key", "base_url": "https://api.deepseek.com", "default_model": "deepseek-chat"}


class FakeResponse:
    def __init__(self, status_code=200, payload=None, text=""):
        self.status_code = status_code
        self._payload = payload
        self.text = text

    @property
    def ok(self):
        return self.status_code < 400

    def json(self):
        if self._payload is None:
            raise ValueError("no json")
        return self._payload


def _reply(content, usage=None):
    payload = {"choices": [{"message": {"content": content}}]}
    if usage is not None:
        payload["usage"] = usage
    return FakeResponse(payload=payload)


def _capture_post(monkeypatch, response):
    calls = []

    def fake_post(url, headers=None, json=None, timeout=None):
        calls.append({"url": url, "headers": headers, "json": json, "timeout": timeout})
        return response

    monkeypatch.setattr("llm_bridge.llm.providers.deepseek_provider.requests.post", fake_post)
    return calls


def test_optional_sampling_params_are_omitted_by_default(monkeypatch):
    calls = _capture_post(monkeypatch, _reply("hi"))

    DeepSeekProvider(CONFIG).generate_text("Hi")

    assert calls[0]["url"] == "https://api.deepseek.com/chat/completions"
    assert calls[0]["headers"]["Authorization"] == "Bearer ds-key"
    assert calls[0]["json"] == {
        "model": "deepseek-chat",
        "messages": [{"role": "user", "content": "Hi"}],
        "max_tokens": 1000,
        "temperature": 0.7,
        "stream": False,
    }


def test_optional_sampling_params_are_forwarded_when_present(monkeypatch):
    calls = _capture_post(monkeypatch, _reply("hi"))

    DeepSeekProvider(CONFIG).generate_text("Hi", {"top_p": 0.9, "presence_penalty": 0.5})

    body = calls[0]["json"]
    assert body["top_p"] == 0.9
    assert body["presence_penalty"] == 0.5
    assert "frequency_penalty" not in body


def test_usage_passthrough_and_zero_fill(monkeypatch):
    _capture_post(monkeypatch, _reply("hi", {"prompt_tokens": 8, "completion_tokens": 2, "total_tokens": 10}))
    assert DeepSeekProvider(CONFIG).generate_text("Hi").usage.total_tokens == 10

    _capture_post(monkeypatch, _reply("hi"))
    usage = DeepSeekProvider(CONFIG).generate_text("Hi").usage
    assert (usage.prompt_tokens, usage.completion_tokens, usage.total_tokens) == (0, 0, 0)


def test_capabilities_include_math_and_reasoning():
    provider = DeepSeekProvider(CONFIG)

    assert provider.supports_capability("math_solving")
    assert provider.supports_capability("reasoning")
    assert "summarization" in provider.supported_capabilities()


def test_solve_math_end_to_end(monkeypatch):
    calls = _capture_post(
        monkeypatch,
        _reply("1. Subtract 3 from both sides: 2x = 4\n2. Divide by 2: x = 2\nSo x = 2."),
    )

    result = DeepSeekProvider(CONFIG).solve_math("Solve 2x + 3 = 7", {"temperature": 0.9})

    assert calls[0]["json"]["temperature"] == 0.1
    assert "Solve 2x + 3 = 7" in calls[0]["json"]["messages"][0]["content"]
    assert result["steps"] == ["1. Subtract 3 from both sides: 2x = 4", "2. Divide by 2: x = 2"]


def test_perform_reasoning_end_to_end(monkeypatch):
    _capture_post(monkeypatch, _reply("Option A is cheaper.\n\nConclusion: choose option A."))

    result = DeepSeekProvider(CONFIG).perform_reasoning("Which option?", {"a": 1, "b": 2})

    assert result["conclusion"] == "choose option A."


def test_invalid_response_shape_is_a_failure(monkeypatch):
    _capture_post(monkeypatch, FakeResponse(payload={"choices": []}, text='{"choices": []}'))

    result = DeepSeekProvider(CONFIG).generate_text("Hi")

    assert result.success is False
    assert result.error.startswith("DeepSeek API error: invalid response format")


def test_http_error_is_a_failure(monkeypatch):
    _capture_post(monkeypatch, FakeResponse(status_code=401, text="invalid api key"))

    result = DeepSeekProvider(CONFIG).generate_text("Hi")

    assert result.error == "DeepSeek API request failed: invalid api key"


def test_default_base_url_is_used_when_missing(monkeypatch):
    calls = _capture_post(monkeypatch, _reply("hi"))

    DeepSeekProvider({"api_key": "ds-key"}).generate_text("Hi")

    assert calls[0]["url"] == "https://api.deepseek.com/chat/completions"


@pytest.mark.parametrize(
    "config,message",
    [
        ({"base_url": "https://api.deepseek.com"}, "DeepSeek API key is required"),
        ({"api_key": "k", "base_url": "not a url"}, "DeepSeek base URL is required and must be valid"),
    ],
)
def test_invalid_settings_raise(config, message):
    with pytest.raises(ProviderConfigError, match=message):
        DeepSeekProvider(config).generate_text("Hi")


def test_non_object_usage_is_a_failure(monkeypatch):
    _capture_post(monkeypatch, _reply("hi", usage=[1, 2]))

    result = DeepSeekProvider(CONFIG).generate_text("Hi")

    assert result.success is False
    assert result.error.startswith("DeepSeek API error: invalid response format")


def test_zero_timeout_raises():
    with pytest.raises(ProviderConfigError, match="must be positive"):
        DeepSeekProvider({**CONFIG, "timeout_seconds": 0}).generate_text("Hi")
