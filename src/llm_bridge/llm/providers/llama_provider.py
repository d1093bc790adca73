"""Llama provider for OpenAI-compatible chat-completions endpoints."""

from __future__ import annotations

import logging
from typing import Any, Dict, Mapping

import requests

from ..types import GenerationResult, ProviderConfigError
from .base import BaseProvider

logger = logging.getLogger(__name__)


def format_prompt_for_model(prompt: str, model: str) -> str:
    if "chat" in model:
        return prompt
    if "instruct" in model:
        return f"[INST] {prompt} [/INST]"
    return prompt


class LlamaProvider(BaseProvider):
    name = "llama"

    def _default_params(self) -> Dict[str, Any]:
        return {
            "model": self.get_config("default_model", "meta-llama/Llama-2-70b-chat-hf"),
            "temperature": self.get_config("default_temperature", 0.7),
            "max_tokens": self.get_config("default_max_tokens", 1000),
        }

    def validate_config(self) -> None:
        if not self.get_config("api_key"):
            raise ProviderConfigError("Llama API key is required")
        if not self.get_config("base_url"):
            raise ProviderConfigError("Llama base URL is required")
        self.validate_timeout()

    def generate_text(self, prompt: str, params: Mapping[str, Any] | None = None) -> GenerationResult:
        self.validate_config()
        merged = self.merge_params(params)
        model = self.resolve_model(str(merged["model"]))

        url = f"{str(self.get_config('base_url')).rstrip('/')}/chat/completions"
        headers = {
            "Authorization": f"Bearer {self.get_config('api_key')}",
            "Content-Type": "application/json",
        }
        payload: Dict[str, Any] = {
            "model": model,
            "messages": [{"role": "user", "content": format_prompt_for_model(prompt, model)}],
            "temperature": merged["temperature"],
            "max_tokens": merged["max_tokens"],
            "stream": False,
        }
        if merged.get("stop") is not None:
            payload["stop"] = merged["stop"]

        try:
            res = requests.post(url, headers=headers, json=payload, timeout=self.request_timeout)
        except requests.RequestException as exc:
            logger.warning("Llama request to %s failed: %s", url, exc)
            return GenerationResult.failure(f"Llama API request failed: {exc}")

        if not res.ok:
            logger.warning("Llama API returned HTTP %s for model %s", res.status_code, model)
            return GenerationResult.failure(f"Llama API error: {res.text}")

        try:
            data = res.json()
        except ValueError:
            return GenerationResult.failure(f"Llama API error: invalid JSON response: {res.text}")
        if not isinstance(data, dict):
            return GenerationResult.failure(f"Llama API error: unexpected response: {res.text}")

        try:
            text = ""
            choices = data.get("choices") or []
            if choices:
                text = (choices[0].get("message") or {}).get("content") or ""
            if not isinstance(text, str):
                raise ValueError(f"content is not a string: {text!r}")
            usage = data.get("usage") or {}
            if not isinstance(usage, Mapping):
                raise ValueError(f"usage is not an object: {usage!r}")
            result = GenerationResult.ok(text, usage)
        except Exception as exc:
            logger.warning("Llama returned an unexpected response for model %s: %s", model, exc)
            return GenerationResult.failure(f"Llama API error: invalid response format: {exc}")
        return result
