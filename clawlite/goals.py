"""Goals tracked per chat and their JSON-file persistence."""

from __future__ import annotations

import json
import os
import re
import threading
import time
from dataclasses import dataclass, replace
from datetime import datetime, timedelta, timezone
from enum import Enum
from pathlib import Path
from typing import Any

_TIME_RE = re.compile(
    r"^(\d{4})-(\d{2})-(\d{2})T(\d{2}):(\d{2}):(\d{2})(?:\.(\d+))?(Z|[+-]\d{2}:\d{2})$"
)


def _format_time(moment: datetime) -> str:
    """Format a datetime as an RFC 3339 string with trimmed fractional seconds."""
    if moment.tzinfo is not None and moment.utcoffset() != timedelta(0):
        moment = moment.astimezone(timezone.utc)
    text = (
        f"{moment.year:04d}-{moment.month:02d}-{moment.day:02d}"
        f"T{moment.hour:02d}:{moment.minute:02d}:{moment.second:02d}"
    )
    if moment.microsecond:
        text += "." + f"{moment.microsecond:06d}".rstrip("0")
    return text + "Z"


def _parse_time(text: str) -> datetime:
    """Parse an RFC 3339 timestamp, keeping at most microsecond precision."""
    match = _TIME_RE.match(text.strip())
    if match is None:
        raise ValueError(f"invalid timestamp: {text!r}")
    year, month, day, hour, minute, second = (int(match.group(i)) for i in range(1, 7))
    fraction = match.group(7) or ""
    micro = int((fraction + "000000")[:6])
    zone = match.group(8)
    if zone == "Z":
        tz = timezone.utc
    else:
        sign = 1 if zone[0] == "+" else -1
        tz = timezone(sign * timedelta(hours=int(zone[1:3]), minutes=int(zone[4:6])))
    moment = datetime(year, month, day, hour, minute, second, micro, tzinfo=tz)
    if tz is not timezone.utc:
        moment = moment.astimezone(timezone.utc)
    return moment


def _write_private(path: Path, data: str) -> None:
    fd = os.open(path, os.O_WRONLY | os.O_CREAT | os.O_TRUNC, 0o600)
    with os.fdopen(fd, "w", encoding="utf-8") as handle:
        handle.write(data)


class GoalStatus(str, Enum):
    """Lifecycle state of a goal."""

    QUEUED = "queued"
    RUNNING = "running"
    BLOCKED = "blocked"
    DONE = "done"
    WAITING_INPUT = "waiting_input"

    def __str__(self) -> str:
        return self.value


@dataclass
class Goal:
    """A user objective tracked for one chat."""

    id: str
    chat_id: int
    objective: str
    status: GoalStatus
    created_at: datetime
    updated_at: datetime
    latest_summary: str = ""
    last_error: str = ""

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "id": self.id,
            "chat_id": self.chat_id,
            "objective": self.objective,
            "status": self.status.value,
        }
        if self.latest_summary:
            data["latest_summary"] = self.latest_summary
        if self.last_error:
            data["last_error"] = self.last_error
        data["created_at"] = _format_time(self.created_at)
        data["updated_at"] = _format_time(self.updated_at)
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Goal:
        return cls(
            id=str(data.get("id", "")),
            chat_id=int(data.get("chat_id", 0)),
            objective=str(data.get("objective", "")),
            status=GoalStatus(data["status"]),
            created_at=_parse_time(data["created_at"]),
            updated_at=_parse_time(data["updated_at"]),
            latest_summary=str(data.get("latest_summary", "")),
            last_error=str(data.get("last_error", "")),
        )


@dataclass
class GoalResult:
    """Outcome of one piece of work on a goal."""

    running: bool = False
    waiting_input: bool = False
    done: bool = False
    summary: str = ""
    error: BaseException | None = None


class GoalStoreError(Exception):
    """Reading or writing goals failed."""


class GoalNotFoundError(GoalStoreError, LookupError):
    """The requested goal does not exist."""


def new_goal(chat_id: int, objective: str) -> Goal:
    """Create a queued goal for a chat."""
    nanos = time.time_ns()
    now = datetime.fromtimestamp(nanos / 1e9, tz=timezone.utc)
    return Goal(
        id=f"{chat_id}-{nanos}",
        chat_id=chat_id,
        objective=objective.strip(),
        status=GoalStatus.QUEUED,
        created_at=now,
        updated_at=now,
    )


def apply_goal_result(goal: Goal, result: GoalResult) -> Goal:
    """Return a copy of the goal advanced by the given result."""
    goal = replace(goal, updated_at=datetime.now(timezone.utc))
    summary = result.summary.strip()
    if summary:
        goal.latest_summary = summary
    if result.running:
        goal.status = GoalStatus.RUNNING
    if result.waiting_input:
        goal.status = GoalStatus.WAITING_INPUT
        goal.last_error = ""
        return goal
    if result.error is not None:
        goal.status = GoalStatus.BLOCKED
        goal.last_error = str(result.error).strip()
        return goal
    if result.done:
        goal.status = GoalStatus.DONE
        goal.last_error = ""
    return goal


class GoalStore:
    """Stores each chat's goals in one JSON file, newest update first."""

    def __init__(self, data_dir: str | os.PathLike[str] = "data") -> None:
        if not str(data_dir).strip():
            data_dir = "data"
        self._base_dir = Path(data_dir) / "goals"
        self._lock = threading.Lock()

    def save(self, goal: Goal) -> None:
        with self._lock:
            goals = self._read(goal.chat_id)
            for index, existing in enumerate(goals):
                if existing.id == goal.id:
                    goals[index] = goal
                    break
            else:
                goals.append(goal)
            goals.sort(key=lambda item: item.updated_at, reverse=True)
            self._write(goal.chat_id, goals)

    def load(self, chat_id: int, goal_id: str) -> Goal:
        with self._lock:
            goals = self._read(chat_id)
        for goal in goals:
            if goal.id == goal_id:
                return goal
        raise GoalNotFoundError(f"goal not found: {goal_id}")

    def list(self, chat_id: int) -> list[Goal]:
        with self._lock:
            return self._read(chat_id)

    def _path(self, chat_id: int) -> Path:
        return self._base_dir / f"{chat_id}.json"

    def _read(self, chat_id: int) -> list[Goal]:
        try:
            raw = self._path(chat_id).read_text(encoding="utf-8")
        except FileNotFoundError:
            return []
        except OSError as exc:
            raise GoalStoreError(f"read goals: {exc}") from exc
        try:
            items = json.loads(raw)
            if items is None:
                return []
            if not isinstance(items, list):
                raise ValueError("goals file does not hold a list")
            return [Goal.from_dict(item) for item in items]
        except (ValueError, KeyError, TypeError, AttributeError) as exc:
            raise GoalStoreError(f"parse goals: {exc}") from exc

    def _write(self, chat_id: int, goals: list[Goal]) -> None:
        try:
            self._base_dir.mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            raise GoalStoreError(f"create goals directory: {exc}") from exc
        data = json.dumps([goal.to_dict() for goal in goals], indent=2, ensure_ascii=False)
        try:
            _write_private(self._path(chat_id), data + "\n")
        except OSError as exc:
            raise GoalStoreError(f"write goals: {exc}") from exc