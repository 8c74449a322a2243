"""Text heuristics used by the loops: quality scores, plan steps, replan triggers."""

import re

DEFAULT_SCORE = 5
MIN_SCORE = 1
MAX_SCORE = 10

# Tried in order; the first match wins.
SCORE_PATTERNS = (
    re.compile(r"(?:score|quality|rating)(?:\s+of\s+|[:\s]+)(\d+)(?:/10)?", re.IGNORECASE),
    re.compile(r"(\d+)\s*/\s*10"),
    re.compile(r"(\d+)\s*out\s*of\s*10", re.IGNORECASE),
)

PLAN_STEP_PATTERN = re.compile(r"^\d+\.\s+(.+)$")

FAILURE_INDICATORS = ("error", "failed", "unable", "cannot", "impossible")


def extract_score(text: str) -> int:
    """Quality score (1-10) reported in a critique, or 5 if none is found."""
    for pattern in SCORE_PATTERNS:
        match = pattern.search(text)
        if match:
            return min(MAX_SCORE, max(MIN_SCORE, int(match.group(1))))
    return DEFAULT_SCORE


def parse_plan_steps(plan: str) -> list[str]:
    """
    Pull "N. description" lines out of free text, in order. Anything
    else (headers, prose between steps, bullets) is ignored.
    """
    steps = []
    for line in plan.splitlines():
        match = PLAN_STEP_PATTERN.match(line.strip())
        if match:
            steps.append(match.group(1).strip())
    return steps


def should_replan(result: str) -> bool:
    """
    Lexical failure check on a step result. This is a keyword match,
    not a judgement of whether the step actually failed: a result
    that merely mentions "cannot" or "error" triggers it too.
    """
    lowered = result.lower()
    return any(word in lowered for word in FAILURE_INDICATORS)
