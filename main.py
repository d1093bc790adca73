"""Entrypoint: run one LLM operation from the command line."""

from __future__ import annotations

import argparse
import json
import logging
from pathlib import Path
import sys

from dotenv import load_dotenv

sys.path.insert(0, str(Path(__file__).resolve().parent / "src"))

from llm_bridge.config import load_settings
from llm_bridge.llm.types import GenerationResult, ProviderConfigError
from llm_bridge.manager import LLMManager

TEXT_FIELDS = {
    "generate": "text",
    "translate": "text",
    "code": "code",
    "explain": "explanation",
    "summarize": "summary",
    "math": "solution",
    "reason": "reasoning",
    "agent": "response",
}


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Unified CLI for OpenAI, Claude, Llama and DeepSeek")
    parser.add_argument("--settings", default="config/llm_bridge.yaml", help="Path to settings YAML")
    parser.add_argument("--provider", default=None, help="Provider name (defaults to configured default)")
    parser.add_argument("--model", default=None, help="Model name or alias")
    parser.add_argument("--json", action="store_true", help="Print the full result as JSON")
    parser.add_argument("--log-level", default="WARNING", help="Logging level")

    subparsers = parser.add_subparsers(dest="command", required=True)

    p = subparsers.add_parser("generate", help="Generate text from a prompt")
    p.add_argument("prompt")
    p.add_argument("--temperature", type=float, default=None)
    p.add_argument("--max-tokens", type=int, default=None)

    p = subparsers.add_parser("translate", help="Translate text")
    p.add_argument("text")
    p.add_argument("--to", dest="target", required=True)
    p.add_argument("--from", dest="source", default=None)

    p = subparsers.add_parser("code", help="Generate code from a description")
    p.add_argument("description")
    p.add_argument("--language", default="generic")

    p = subparsers.add_parser("explain", help="Explain a code file")
    p.add_argument("path")
    p.add_argument("--language", default="auto")

    p = subparsers.add_parser("summarize", help="Summarize a text file")
    p.add_argument("path")
    p.add_argument("--max-length", type=int, default=200)

    p = subparsers.add_parser("math", help="Solve a math problem")
    p.add_argument("problem")

    p = subparsers.add_parser("reason", help="Reason through a question")
    p.add_argument("question")
    p.add_argument("--context", default=None, help="JSON object with extra context")

    p = subparsers.add_parser("agent", help="Act as an agent with a role")
    p.add_argument("role")
    p.add_argument("task")
    p.add_argument("--context", default=None, help="JSON object with extra context")

    subparsers.add_parser("providers", help="List configured providers and capabilities")
    return parser


def _context(raw: str | None) -> dict:
    if not raw:
        return {}
    try:
        parsed = json.loads(raw)
    except json.JSONDecodeError:
        raise SystemExit("--context must be a JSON object") from None
    if not isinstance(parsed, dict):
        raise SystemExit("--context must be a JSON object")
    return parsed


def run_command(manager: LLMManager, args: argparse.Namespace) -> GenerationResult:
    params = {}
    if args.model:
        params["model"] = args.model
    provider = args.provider
    command = args.command

    if command == "generate":
        if args.temperature is not None:
            params["temperature"] = args.temperature
        if args.max_tokens is not None:
            params["max_tokens"] = args.max_tokens
        return manager.generate_text(args.prompt, params, provider)
    if command == "translate":
        return manager.translate_text(args.text, args.target, args.source, params, provider=provider)
    if command == "code":
        return manager.generate_code(args.description, args.language, params, provider=provider)
    if command == "explain":
        code = Path(args.path).read_text(encoding="utf-8")
        return manager.explain_code(code, args.language, params, provider=provider)
    if command == "summarize":
        text = Path(args.path).read_text(encoding="utf-8")
        return manager.summarize_text(text, args.max_length, params, provider=provider)
    if command == "math":
        return manager.solve_math(args.problem, params, provider=provider)
    if command == "reason":
        return manager.perform_reasoning(args.question, _context(args.context), params, provider=provider)
    if command == "agent":
        return manager.act_as_agent(args.role, args.task, _context(args.context), params, provider=provider)
    raise SystemExit(f"Unknown command: {command}")


def main(argv: list[str] | None = None) -> int:
    load_dotenv()
    parser = _build_parser()
    args = parser.parse_args(argv)
    logging.basicConfig(
        level=getattr(logging, str(args.log_level).upper(), logging.WARNING),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    config = load_settings(args.settings)
    manager = LLMManager(config)

    if args.command == "providers":
        default = manager.get_default_provider()
        for name in manager.get_available_providers():
            marker = "*" if name == default else "-"
            try:
                caps = ", ".join(manager.get_provider_capabilities(name))
            except ValueError as exc:
                caps = f"unavailable ({exc})"
            print(f"{marker} {name}: {caps}")
        return 0

    try:
        result = run_command(manager, args)
    except ProviderConfigError as exc:
        print(f"Configuration error: {exc}", file=sys.stderr)
        return 2
    if args.json:
        print(json.dumps(result.to_dict(), ensure_ascii=False, indent=2))
    elif result.success:
        print(result.get(TEXT_FIELDS[args.command], result.text))
    else:
        print(f"Error: {result.error}", file=sys.stderr)
    return 0 if result.success else 1


if __name__ == "__main__":
    sys.exit(main())
