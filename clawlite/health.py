"""Process health counters and a WSGI endpoint that reports them."""

from __future__ import annotations

import json
import threading
import time
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Callable, Iterable


def _rfc3339(nanos: int) -> str:
    moment = datetime.fromtimestamp(nanos // 1_000_000_000, tz=timezone.utc)
    return moment.strftime("%Y-%m-%dT%H:%M:%SZ")


@dataclass(frozen=True)
class HealthSnapshot:
    """A point-in-time view of the health counters."""

    status: str
    started_at: str
    last_poll_at: str
    restart_count: int
    goal_queue_depth: int
    active_goals: int
    last_error: str

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {"status": self.status, "started_at": self.started_at}
        if self.last_poll_at:
            data["last_poll_at"] = self.last_poll_at
        data["restart_count"] = self.restart_count
        data["goal_queue_depth"] = self.goal_queue_depth
        data["active_goals"] = self.active_goals
        if self.last_error:
            data["last_error"] = self.last_error
        return data


class HealthState:
    """Thread-safe health counters for the running service."""

    def __init__(self) -> None:
        now = time.time_ns()
        self._lock = threading.Lock()
        self._started_at = now
        self._last_poll = now
        self._restart_count = 0
        self._goal_queue_depth = 0
        self._active_goals = 0
        self._last_error = ""

    def record_poll_success(self) -> None:
        with self._lock:
            self._last_poll = time.time_ns()
            self._last_error = ""

    def record_poll_error(self, err: BaseException | None) -> None:
        if err is None:
            return
        with self._lock:
            self._last_error = str(err)

    def record_restart(self, err: BaseException | None) -> None:
        with self._lock:
            self._restart_count += 1
            if err is not None:
                self._last_error = str(err)

    def record_goal_enqueued(self) -> None:
        with self._lock:
            self._goal_queue_depth += 1

    def record_goal_started(self) -> None:
        with self._lock:
            self._active_goals += 1
            self._goal_queue_depth -= 1

    def record_goal_finished(self) -> None:
        with self._lock:
            self._active_goals -= 1

    def snapshot(self) -> HealthSnapshot:
        with self._lock:
            return HealthSnapshot(
                status="ok",
                started_at=_rfc3339(self._started_at),
                last_poll_at=_rfc3339(self._last_poll),
                restart_count=self._restart_count,
                goal_queue_depth=self._goal_queue_depth,
                active_goals=self._active_goals,
                last_error=self._last_error,
            )


def health_app(state: HealthState | None = None) -> Callable[..., Iterable[bytes]]:
    """Return a WSGI application that answers every request with the snapshot."""
    if state is None:
        state = HealthState()

    def app(environ: dict[str, Any], start_response: Callable[..., Any]) -> Iterable[bytes]:
        body = (json.dumps(state.snapshot().to_dict()) + "\n").encode("utf-8")
        start_response("200 OK", [
            ("Content-Type", "application/json"),
            ("Content-Length", str(len(body))),
        ])
        return [body]

    return app