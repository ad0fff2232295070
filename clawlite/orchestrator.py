"""Step budget and repeated-failure tracking for the agent tool loop."""

from __future__ import annotations

from dataclasses import dataclass, replace

REPEATED_TOOL_ERROR_THRESHOLD = 2


@dataclass(frozen=True)
class ToolCall:
    """A tool invocation requested by the agent."""

    name: str = ""
    query: str = ""
    url: str = ""
    text: str = ""
    skill: str = ""
    script: str = ""
    input: str = ""
    all: bool = False
    max_bytes: int = 0


@dataclass
class OrchestratorState:
    """Counters for one run of the agent loop."""

    max_steps: int
    step: int = 0
    parse_failures: int = 0
    consecutive_tool_errors: int = 0
    last_tool_fingerprint: str = ""


def tool_call_fingerprint(call: ToolCall) -> str:
    """Identify a tool call so repeated identical failures can be spotted."""
    parts = [
        call.name.strip().lower(),
        call.query.strip(),
        call.url.strip(),
        call.text.strip(),
        call.skill.strip(),
        call.script.strip(),
        call.input.strip(),
        f"all={'true' if call.all else 'false'}",
        f"max={call.max_bytes}",
    ]
    return "|".join(parts)


class Orchestrator:
    """Tracks how many steps the agent loop may still take."""

    def __init__(self, max_steps: int) -> None:
        self._state = OrchestratorState(max_steps=max_steps if max_steps > 0 else 1)

    def begin_step(self) -> bool:
        """Start another step, or return False once the budget is spent."""
        if self._state.step >= self._state.max_steps:
            return False
        self._state.step += 1
        return True

    def state(self) -> OrchestratorState:
        """Return a copy of the current counters."""
        return replace(self._state)

    def record_parse_failure(self) -> int:
        self._state.parse_failures += 1
        return self._state.parse_failures

    def record_tool_result(self, call: ToolCall, error: BaseException | None) -> bool:
        """Record a tool outcome; True when the same call has now failed repeatedly."""
        if error is None:
            self._state.consecutive_tool_errors = 0
            self._state.last_tool_fingerprint = ""
            return False
        fingerprint = tool_call_fingerprint(call)
        if self._state.last_tool_fingerprint == fingerprint:
            self._state.consecutive_tool_errors += 1
            return self._state.consecutive_tool_errors >= REPEATED_TOOL_ERROR_THRESHOLD
        self._state.last_tool_fingerprint = fingerprint
        self._state.consecutive_tool_errors = 1
        return False