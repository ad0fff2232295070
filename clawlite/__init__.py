"""Chat assistant runtime parts: goals, sessions, health counters, tool-loop orchestration, stock lookup and reply helpers."""

__version__ = "0.1.0"

__all__ = [
    "goals",
    "session_store",
    "health",
    "orchestrator",
    "goal_steps",
    "stock",
    "replies",
]