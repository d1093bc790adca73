"""Prompt builders for the derived operations."""

from __future__ import annotations

from typing import Any, Mapping

from .utils import context_block


def build_translation_prompt(text: str, target_language: str, source_language: str | None = None) -> str:
    source = f"from {source_language}" if source_language else "(auto-detect source language)"
    return f"Translate the following text {source} to {target_language}:\n\n{text}\n\nTranslation:"


def build_code_prompt(description: str, language: str) -> str:
    return (
        f"Generate {language} code for the following requirement:\n\n{description}\n\n"
        "Provide clean, well-commented code:"
    )


def build_agent_prompt(role: str, task: str, context: Mapping[str, Any] | None = None) -> str:
    return f"You are a {role}. {context_block(context)}\n\nTask: {task}\n\nResponse:"


def build_explain_prompt(code: str, language: str = "auto") -> str:
    written_in = "" if language == "auto" else f" (written in {language})"
    return f"Explain the following code{written_in} in detail:\n\n```\n{code}\n```\n\nExplanation:"


def build_summary_prompt(text: str, max_length: int) -> str:
    return f"Summarize the following text in approximately {max_length} words or less:\n\n{text}\n\nSummary:"


def build_math_prompt(problem: str) -> str:
    return (
        f"Solve the following mathematical problem step by step:\n\n{problem}\n\n"
        "Provide a detailed solution with clear steps:"
    )


def build_reasoning_prompt(question: str, context: Mapping[str, Any] | None = None) -> str:
    return (
        "Think through this question step by step and provide detailed reasoning:"
        f"{context_block(context)}\n\nQuestion: {question}\n\nReasoning:"
    )
