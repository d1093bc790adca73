"""OpenAI provider (chat and legacy completions APIs)."""

from __future__ import annotations

import logging
import re
from typing import Any, Dict, Mapping

from openai import OpenAI

from ..types import GenerationResult, ProviderConfigError
from .base import BaseProvider

logger = logging.getLogger(__name__)

CHAT_MODEL_PATTERNS = (
    re.compile(r"^gpt-\d+"),
    re.compile(r"^chatgpt-"),
    re.compile(r"^o1-"),
)

LEGACY_MODEL_PATTERNS = (
    re.compile(r"^text-davinci"),
    re.compile(r"^text-curie"),
    re.compile(r"^text-babbage"),
    re.compile(r"^text-ada"),
    re.compile(r"^davinci"),
    re.compile(r"^curie"),
    re.compile(r"^babbage"),
    re.compile(r"^ada"),
)


def is_chat_model(model: str) -> bool:
    if any(p.search(model) for p in CHAT_MODEL_PATTERNS):
        return True
    if any(p.search(model) for p in LEGACY_MODEL_PATTERNS):
        return False
    # Unknown models are assumed to be chat models.
    return True


def _usage_to_dict(usage: Any) -> Dict[str, Any]:
    if usage is None:
        return {}
    if isinstance(usage, Mapping):
        return dict(usage)
    if hasattr(usage, "model_dump"):
        return usage.model_dump(exclude_none=True)
    return {
        key: getattr(usage, key)
        for key in ("prompt_tokens", "completion_tokens", "total_tokens")
        if getattr(usage, key, None) is not None
    }


class OpenAIProvider(BaseProvider):
    name = "openai"

    def __init__(
        self,
        config: Mapping[str, Any],
        model_aliases: Mapping[str, str] | None = None,
        client: Any = None,
    ) -> None:
        super().__init__(config, model_aliases)
        self._client = client

    def _default_params(self) -> Dict[str, Any]:
        return {
            "model": self.get_config("default_model", "gpt-3.5-turbo"),
            "temperature": self.get_config("default_temperature", 0.7),
            "max_tokens": self.get_config("default_max_tokens", 1000),
        }

    def validate_config(self) -> None:
        api_key = self.get_config("api_key")
        if not isinstance(api_key, str) or not api_key.strip():
            raise ProviderConfigError("OpenAI API key is required")
        self.validate_timeout()

    def get_client(self) -> Any:
        if self._client is None:
            self.validate_config()
            kwargs: Dict[str, Any] = {
                "api_key": self.get_config("api_key"),
                "timeout": self.request_timeout,
            }
            organization = self.get_config("organization")
            if organization:
                kwargs["organization"] = organization
            base_url = self.get_config("base_url")
            if base_url:
                kwargs["base_url"] = base_url
            self._client = OpenAI(**kwargs)
        return self._client

    def generate_text(self, prompt: str, params: Mapping[str, Any] | None = None) -> GenerationResult:
        self.validate_config()
        merged = self.merge_params(params)
        model = self.resolve_model(str(merged["model"]))

        request: Dict[str, Any] = {
            "model": model,
            "temperature": merged["temperature"],
            "max_tokens": merged["max_tokens"],
        }
        if merged.get("stop") is not None:
            request["stop"] = merged["stop"]

        try:
            client = self.get_client()
            if is_chat_model(model):
                response = client.chat.completions.create(
                    messages=[{"role": "user", "content": prompt}],
                    **request,
                )
                text = response.choices[0].message.content
            else:
                response = client.completions.create(prompt=prompt, **request)
                text = response.choices[0].text
            result = GenerationResult.ok(text or "", _usage_to_dict(getattr(response, "usage", None)))
        except ProviderConfigError:
            raise
        except Exception as exc:
            logger.warning("OpenAI request failed for model %s: %s", model, exc)
            return GenerationResult.failure(f"OpenAI API error: {exc}")
        return result
