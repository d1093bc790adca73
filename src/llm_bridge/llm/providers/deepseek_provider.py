"""DeepSeek chat-completions provider."""

from __future__ import annotations

import logging
from typing import Any, Dict, Mapping
from urllib.parse import urlparse

import requests

from ..types import BASE_CAPABILITIES, Capability, GenerationResult, ProviderConfigError
from .base import BaseProvider

logger = logging.getLogger(__name__)

DEFAULT_BASE_URL = "https://api.deepseek.com"

# Sampling parameters sent only when the caller (or config) sets them.
OPTIONAL_PARAMS = ("top_p", "frequency_penalty", "presence_penalty", "stop")


def _is_valid_url(value: Any) -> bool:
    if not isinstance(value, str):
        return False
    parsed = urlparse(value)
    return parsed.scheme in {"http", "https"} and bool(parsed.netloc)


class DeepSeekProvider(BaseProvider):
    name = "deepseek"
    capabilities = BASE_CAPABILITIES | {Capability.REASONING, Capability.MATH_SOLVING}

    def _default_params(self) -> Dict[str, Any]:
        return {
            "model": self.get_config("default_model", "deepseek-chat"),
            "max_tokens": self.get_config("default_max_tokens", 1000),
            "temperature": self.get_config("default_temperature", 0.7),
        }

    def validate_config(self) -> None:
        if not self.get_config("api_key"):
            raise ProviderConfigError("DeepSeek API key is required")
        if not _is_valid_url(self.get_config("base_url", DEFAULT_BASE_URL)):
            raise ProviderConfigError("DeepSeek base URL is required and must be valid")
        self.validate_timeout()

    def generate_text(self, prompt: str, params: Mapping[str, Any] | None = None) -> GenerationResult:
        self.validate_config()
        merged = self.merge_params(params)
        model = self.resolve_model(str(merged.get("model") or self.get_config("default_model", "deepseek-chat")))

        payload: Dict[str, Any] = {
            "model": model,
            "messages": [{"role": "user", "content": prompt}],
            "max_tokens": merged.get("max_tokens", 1000),
            "temperature": merged.get("temperature", 0.7),
            "stream": False,
        }
        for key in OPTIONAL_PARAMS:
            if merged.get(key) is not None:
                payload[key] = merged[key]

        url = f"{str(self.get_config('base_url', DEFAULT_BASE_URL)).rstrip('/')}/chat/completions"
        headers = {
            "Authorization": f"Bearer {self.get_config('api_key')}",
            "Content-Type": "application/json",
        }

        try:
            res = requests.post(url, headers=headers, json=payload, timeout=self.request_timeout)
        except requests.RequestException as exc:
            logger.warning("DeepSeek request to %s failed: %s", url, exc)
            return GenerationResult.failure(f"DeepSeek request failed: {exc}")

        if not res.ok:
            logger.warning("DeepSeek API returned HTTP %s for model %s", res.status_code, model)
            return GenerationResult.failure(f"DeepSeek API request failed: {res.text}")

        try:
            data = res.json()
        except ValueError:
            return GenerationResult.failure(f"DeepSeek API error: invalid response format: {res.text}")

        try:
            text = data["choices"][0]["message"]["content"]
        except (KeyError, IndexError, TypeError):
            text = None
        if not isinstance(text, str):
            return GenerationResult.failure(f"DeepSeek API error: invalid response format: {res.text}")

        try:
            usage = data.get("usage") or {}
            if not isinstance(usage, Mapping):
                raise ValueError(f"usage is not an object: {usage!r}")
            result = GenerationResult.ok(text, usage)
        except Exception as exc:
            logger.warning("DeepSeek returned an unexpected response for model %s: %s", model, exc)
            return GenerationResult.failure(f"DeepSeek API error: invalid response format: {res.text}")
        return result
