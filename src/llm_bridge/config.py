"""Configuration loading and defaults."""

from __future__ import annotations

import os
from copy import deepcopy
from pathlib import Path
from typing import Any, Callable, Dict, Mapping

import yaml

from .utils import dotted_get

DEFAULT_SETTINGS: Dict[str, Any] = {
    "default": "openai",
    "providers": {
        "openai": {
            "api_key": None,
            "base_url": "https://api.openai.com/v1",
            "default_model": "gpt-3.5-turbo",
            "default_max_tokens": 1000,
            "default_temperature": 0.7,
        },
        "claude": {
            "api_key": None,
            "base_url": "https://api.anthropic.com",
            "api_version": "2023-06-01",
            "default_model": "claude-3-sonnet-20240229",
            "default_max_tokens": 1000,
            "default_temperature": 0.7,
        },
        "llama": {
            "api_key": None,
            "base_url": "http://localhost:11434",
            "default_model": "llama2",
            "default_max_tokens": 1000,
            "default_temperature": 0.7,
        },
        "deepseek": {
            "api_key": None,
            "base_url": "https://api.deepseek.com",
            "default_model": "deepseek-chat",
            "default_max_tokens": 1000,
            "default_temperature": 0.7,
        },
    },
    "model_aliases": {
        "gpt3": "gpt-3.5-turbo",
        "gpt4": "gpt-4",
        "gpt4-turbo": "gpt-4-turbo-preview",
        "claude": "claude-3-sonnet-20240229",
        "claude-haiku": "claude-3-haiku-20240307",
        "claude-opus": "claude-3-opus-20240229",
        "llama": "llama2",
        "llama-70b": "meta-llama/Llama-2-70b-chat-hf",
        "llama-13b": "meta-llama/Llama-2-13b-chat-hf",
        "deepseek": "deepseek-chat",
        "deepseek-coder": "deepseek-coder",
        "deepseek-math": "deepseek-math-7b-instruct",
    },
    "request": {
        "timeout": 30,
    },
}

# (settings key, env suffix, coercion)
_PROVIDER_ENV_FIELDS: tuple[tuple[str, str, Callable[[str], Any]], ...] = (
    ("api_key", "API_KEY", str),
    ("base_url", "BASE_URL", str),
    ("default_model", "DEFAULT_MODEL", str),
    ("default_max_tokens", "DEFAULT_MAX_TOKENS", int),
    ("default_temperature", "DEFAULT_TEMPERATURE", float),
    ("timeout_seconds", "TIMEOUT", float),
)


def _deep_merge(base: Dict[str, Any], override: Mapping[str, Any]) -> Dict[str, Any]:
    merged = deepcopy(base)
    for key, value in override.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = _deep_merge(merged[key], value)
        else:
            merged[key] = value
    return merged


def apply_env_overrides(settings: Dict[str, Any], environ: Mapping[str, str] | None = None) -> Dict[str, Any]:
    """Overlays OPENAI_API_KEY-style variables onto each configured provider."""
    env = os.environ if environ is None else environ
    merged = deepcopy(settings)

    default_provider = env.get("LLM_BRIDGE_DEFAULT_PROVIDER")
    if default_provider:
        merged["default"] = default_provider.strip()

    for name, provider_cfg in merged.get("providers", {}).items():
        if not isinstance(provider_cfg, dict):
            continue
        prefix = name.upper().replace("-", "_")
        for key, suffix, coerce in _PROVIDER_ENV_FIELDS:
            raw = env.get(f"{prefix}_{suffix}")
            if raw is None or raw.strip() == "":
                continue
            try:
                provider_cfg[key] = coerce(raw.strip())
            except ValueError as exc:
                raise ValueError(f"Invalid value for {prefix}_{suffix}: {raw!r}") from exc

    claude_version = env.get("CLAUDE_API_VERSION")
    if claude_version and isinstance(merged.get("providers", {}).get("claude"), dict):
        merged["providers"]["claude"]["api_version"] = claude_version.strip()
    return merged


def load_settings(
    settings_path: str = "config/llm_bridge.yaml",
    environ: Mapping[str, str] | None = None,
) -> Dict[str, Any]:
    """Loads the YAML settings file, merges it onto defaults, then applies env overrides."""
    merged = deepcopy(DEFAULT_SETTINGS)
    config_path = Path(settings_path)
    if config_path.exists():
        with config_path.open("r", encoding="utf-8") as f:
            user_cfg = yaml.safe_load(f) or {}
        if not isinstance(user_cfg, dict):
            raise ValueError(f"Settings file must contain a mapping: {settings_path}")
        merged = _deep_merge(merged, user_cfg)
    return apply_env_overrides(merged, environ)


def get_setting(config: Mapping[str, Any], key: str, default: Any = None) -> Any:
    """Reads a dotted key path such as 'providers.openai.api_key'."""
    return dotted_get(config, key, default)
