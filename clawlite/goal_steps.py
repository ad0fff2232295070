"""Execution modes, goal step parsing and goal text formatting."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Iterable

from clawlite.goals import Goal, GoalStatus

EMPTY_CODEX_REPLY = "Codex proxy returned empty response."
MAX_LISTED_GOALS = 5

_STEP_PREFIXES = (
    ("running:", GoalStatus.RUNNING),
    ("blocked:", GoalStatus.BLOCKED),
    ("wait_input:", GoalStatus.WAITING_INPUT),
    ("done:", GoalStatus.DONE),
)


class ExecutionMode(str, Enum):
    """How plain chat messages are handled for a chat."""

    LEGACY = "legacy"
    CODEX = "codex"

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True)
class GoalStep:
    """The outcome of one background step on a goal."""

    status: GoalStatus
    message: str = ""


def parse_execution_mode(raw: str) -> ExecutionMode | None:
    """Return the mode named by ``raw``, ignoring case and spaces, or None."""
    try:
        return ExecutionMode(raw.strip().lower())
    except ValueError:
        return None


def parse_codex_goal_step(reply: str) -> GoalStep:
    """Read the status prefix of a Codex reply; replies without one count as done."""
    text = reply.strip()
    if not text:
        return GoalStep(GoalStatus.DONE, EMPTY_CODEX_REPLY)
    for prefix, status in _STEP_PREFIXES:
        if text[: len(prefix)].lower() == prefix:
            return GoalStep(status, text[len(prefix):].strip())
    return GoalStep(GoalStatus.DONE, text)


def format_goal_proxy_message(goal: Goal, message: str) -> str:
    """Prefix a message with the goal marker, falling back to the goal's objective."""
    text = message.strip() or goal.objective.strip()
    goal_id = goal.id.strip()
    if not goal_id:
        return text
    return f"[goal:{goal_id}] {text}"


def format_goal(goal: Goal) -> str:
    """Describe a goal on several lines for a chat reply."""
    lines = [
        f"Goal: {goal.objective}",
        f"ID: {goal.id}",
        f"Status: {goal.status.value}",
    ]
    if goal.latest_summary.strip():
        lines.append("Latest: " + goal.latest_summary)
    if goal.last_error.strip():
        lines.append("Last error: " + goal.last_error)
    return "\n".join(lines)


def format_goal_list(goals: Iterable[Goal]) -> str:
    """List up to five goals, in the order given, for a chat reply."""
    lines = ["Recent goals:"]
    for count, goal in enumerate(goals):
        if count >= MAX_LISTED_GOALS:
            break
        lines.append(f"- [{goal.status.value}] {goal.objective} ({goal.id})")
    if len(lines) == 1:
        return "No goals found for this chat."
    return "\n".join(lines)


def summarize_session_text(text: str, max_len: int) -> str:
    """Trim text and cut it to ``max_len`` characters, marking a cut with '...'."""
    trimmed = text.strip()
    if len(trimmed) <= max_len:
        return trimmed
    return trimmed[:max_len].strip() + "..."