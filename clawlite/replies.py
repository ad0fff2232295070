"""Prompt assembly, reply checks and retrying calls to the agent."""

from __future__ import annotations

import time
from dataclasses import dataclass
from typing import Callable, Iterable

_AUTONOMY_HINTS = ("自主", "自己解决", "解决问题", "independent", "solve")
_AUTONOMY_REFUSALS = (
    "i cannot", "limitations", "without tools", "cannot access",
    "我不能", "无法", "限制",
)
_REFUSALS = (
    "i cannot", "limitations", "cannot access", "without additional access",
    "我不能", "无法",
)
_DEFLECTIONS = ("you may consider", "you can", "你可以", "请自行")
_FAILURE_HINTS = (
    "fail", "failed", "error", "unable", "could not", "cannot",
    "not completed", "retry", "rollback", "reverted",
    "失败", "无法", "未完成", "重试",
)

RETRY_BACKOFF_SECONDS = 0.25

AgentGenerate = Callable[[str, str], str]


@dataclass(frozen=True)
class MemoryMessage:
    """One remembered turn of a conversation."""

    role: str
    content: str


def _contains_any(text: str, needles: Iterable[str]) -> bool:
    return any(needle in text for needle in needles)


def is_non_actionable_reply(user_text: str, reply: str) -> bool:
    """Tell whether a reply dodges the request instead of acting on it."""
    user = user_text.strip().lower()
    text = reply.strip().lower()
    if not text:
        return True
    if _contains_any(user, _AUTONOMY_HINTS) and _contains_any(text, _AUTONOMY_REFUSALS):
        return True
    return _contains_any(text, _REFUSALS) and _contains_any(text, _DEFLECTIONS)


def should_block_success_after_mutation_failure(reply: str) -> bool:
    """True when a reply fails to acknowledge an unresolved mutating failure."""
    text = reply.strip().lower()
    if not text:
        return True
    return not _contains_any(text, _FAILURE_HINTS)


def unresolved_mutation_message(tool: str, error: str) -> str:
    """Explain that a mutating tool action failed and has not been resolved."""
    tool_name = tool.strip() or "mutating tool"
    return (
        f"The mutating action {tool_name} failed and is still unresolved ({error.strip()}). "
        "Retry the same action and confirm success before claiming completion."
    )


def build_prompt(summary: str, messages: Iterable[MemoryMessage], user_text: str) -> str:
    """Combine the conversation summary, recent turns and the new message."""
    parts: list[str] = []
    if summary.strip():
        parts.append("Conversation summary:\n" + summary)
    lines = ["Recent conversation:"]
    for message in messages:
        speaker = "Assistant" if message.role.strip().lower() == "assistant" else "User"
        lines.append(f"{speaker}: {message.content}")
    if len(lines) > 1:
        parts.append("\n".join(lines))
    parts.append("Current user message:\n" + user_text)
    return "\n\n".join(parts)


def call_agent_with_retry(
    generate: AgentGenerate,
    prompt: str,
    model: str,
    attempts: int = 1,
    sleep: Callable[[float], None] = time.sleep,
) -> str:
    """Call the agent up to ``attempts`` times, waiting longer after each failure.

    The last failure is raised when every attempt fails.
    """
    attempts = max(attempts, 1)
    last_error: Exception | None = None
    for attempt in range(attempts):
        try:
            return generate(prompt, model)
        except Exception as exc:  # retried; the last one is re-raised below
            last_error = exc
        if attempt < attempts - 1:
            sleep((attempt + 1) * RETRY_BACKOFF_SECONDS)
    assert last_error is not None
    raise last_error