"""Best-effort extraction of structure from free-form model answers.

These are heuristics. An empty list or ``None`` simply means the model did
not use a recognizable layout.
"""

from __future__ import annotations

import re
from typing import List

_STEP_RE = re.compile(r"^(step\s+\d+|\d+\.|\d+\))", re.IGNORECASE)

_CONCLUSION_PATTERNS = (
    re.compile(r"Conclusion:(.+?)(?=\n\n|$)", re.IGNORECASE | re.DOTALL),
    re.compile(r"Therefore,(.+?)(?=\n\n|$)", re.IGNORECASE | re.DOTALL),
    re.compile(r"In conclusion,(.+?)(?=\n\n|$)", re.IGNORECASE | re.DOTALL),
)


def extract_steps(solution: str) -> List[str]:
    steps: List[str] = []
    for line in solution.splitlines():
        stripped = line.strip()
        if _STEP_RE.match(stripped):
            steps.append(stripped)
    return steps


def extract_conclusion(reasoning: str) -> str | None:
    for pattern in _CONCLUSION_PATTERNS:
        match = pattern.search(reasoning)
        if match:
            conclusion = match.group(1).strip()
            if conclusion:
                return conclusion
    return None
