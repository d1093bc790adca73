"""Anthropic Claude Messages API provider."""

from __future__ import annotations

import logging
from typing import Any, Dict, Mapping

import requests

from ..types import GenerationResult, ProviderConfigError, UsageStats
from .base import BaseProvider

logger = logging.getLogger(__name__)

DEFAULT_API_VERSION = "2023-06-01"


class ClaudeProvider(BaseProvider):
    name = "claude"

    def _default_params(self) -> Dict[str, Any]:
        return {
            "model": self.get_config("default_model", "claude-3-sonnet-20240229"),
            "temperature": self.get_config("default_temperature", 0.7),
            "max_tokens": self.get_config("default_max_tokens", 1000),
        }

    def validate_config(self) -> None:
        if not self.get_config("api_key"):
            raise ProviderConfigError("Claude API key is required")
        if not self.get_config("base_url"):
            raise ProviderConfigError("Claude base URL is required")
        self.validate_timeout()

    @property
    def api_version(self) -> str:
        return str(self.get_config("api_version", self.get_config("version", DEFAULT_API_VERSION)))

    def generate_text(self, prompt: str, params: Mapping[str, Any] | None = None) -> GenerationResult:
        self.validate_config()
        merged = self.merge_params(params)
        model = self.resolve_model(str(merged["model"]))

        url = f"{str(self.get_config('base_url')).rstrip('/')}/v1/messages"
        headers = {
            "x-api-key": self.get_config("api_key"),
            "anthropic-version": self.api_version,
            "content-type": "application/json",
        }
        payload: Dict[str, Any] = {
            "model": model,
            "max_tokens": merged["max_tokens"],
            "temperature": merged["temperature"],
            "messages": [{"role": "user", "content": prompt}],
        }
        if merged.get("stop") is not None:
            stop = merged["stop"]
            payload["stop_sequences"] = [stop] if isinstance(stop, str) else list(stop)

        try:
            res = requests.post(url, headers=headers, json=payload, timeout=self.request_timeout)
        except requests.RequestException as exc:
            logger.warning("Claude request to %s failed: %s", url, exc)
            return GenerationResult.failure(f"Claude API request failed: {exc}")

        if not res.ok:
            logger.warning("Claude API returned HTTP %s for model %s", res.status_code, model)
            return GenerationResult.failure(f"Claude API error: {res.text}")

        try:
            data = res.json()
        except ValueError:
            return GenerationResult.failure(f"Claude API error: invalid JSON response: {res.text}")
        if not isinstance(data, dict):
            return GenerationResult.failure(f"Claude API error: unexpected response: {res.text}")

        try:
            content = data["content"]
            if not isinstance(content, list):
                raise ValueError(f"content is not a list: {content!r}")
            text = "".join(
                str(item.get("text", ""))
                for item in content
                if isinstance(item, dict) and item.get("type", "text") == "text"
            )
            usage = data.get("usage") or {}
            if not isinstance(usage, Mapping):
                raise ValueError(f"usage is not an object: {usage!r}")
            # total is always summed here, never taken from the response
            result = GenerationResult.ok(
                text,
                UsageStats.from_mapping({k: usage[k] for k in ("input_tokens", "output_tokens") if k in usage}),
            )
        except Exception as exc:
            logger.warning("Claude returned an unexpected response for model %s: %s", model, exc)
            return GenerationResult.failure(f"Claude API error: invalid response format: {exc}")
        return result
