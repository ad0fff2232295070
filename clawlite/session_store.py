"""Per-chat session state persisted as JSON files."""

from __future__ import annotations

import json
import os
import threading
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import Any, Callable

from clawlite.goals import _format_time, _parse_time, _write_private

_ZERO_TIME = "0001-01-01T00:00:00Z"


@dataclass
class SessionState:
    """What the service remembers about one chat between restarts."""

    execution_mode: str = ""
    active_goal_id: str = ""
    last_codex_result_summary: str = ""
    last_activity: datetime | None = None
    pending_confirmation: bool = False

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {}
        if self.execution_mode:
            data["execution_mode"] = self.execution_mode
        if self.active_goal_id:
            data["active_goal_id"] = self.active_goal_id
        if self.last_codex_result_summary:
            data["last_codex_result_summary"] = self.last_codex_result_summary
        data["last_activity"] = (
            _format_time(self.last_activity) if self.last_activity is not None else _ZERO_TIME
        )
        if self.pending_confirmation:
            data["pending_confirmation"] = True
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> SessionState:
        raw_time = data.get("last_activity")
        last_activity = None
        if raw_time:
            parsed = _parse_time(raw_time)
            if parsed.year > 1:
                last_activity = parsed
        return cls(
            execution_mode=str(data.get("execution_mode", "")),
            active_goal_id=str(data.get("active_goal_id", "")),
            last_codex_result_summary=str(data.get("last_codex_result_summary", "")),
            last_activity=last_activity,
            pending_confirmation=bool(data.get("pending_confirmation", False)),
        )


class SessionStoreError(Exception):
    """Reading or writing session state failed."""


class SessionStore:
    """Keeps one JSON file of session state per chat."""

    def __init__(self, data_dir: str | os.PathLike[str] = "data") -> None:
        if not str(data_dir).strip():
            data_dir = "data"
        self._base_dir = Path(data_dir) / "sessions"
        self._lock = threading.Lock()

    def load(self, chat_id: int) -> SessionState:
        with self._lock:
            return self._read(chat_id)

    def save(self, chat_id: int, state: SessionState) -> None:
        with self._lock:
            self._write(chat_id, state)

    def update(self, chat_id: int, apply: Callable[[SessionState], None]) -> SessionState:
        """Load, let ``apply`` modify the state in place, save, and return it."""
        with self._lock:
            state = self._read(chat_id)
            apply(state)
            self._write(chat_id, state)
            return state

    def _path(self, chat_id: int) -> Path:
        return self._base_dir / f"{chat_id}.json"

    def _read(self, chat_id: int) -> SessionState:
        try:
            raw = self._path(chat_id).read_text(encoding="utf-8")
        except FileNotFoundError:
            return SessionState()
        except OSError as exc:
            raise SessionStoreError(f"read session state: {exc}") from exc
        try:
            data = json.loads(raw)
            if data is None:
                return SessionState()
            if not isinstance(data, dict):
                raise ValueError("session file does not hold an object")
            return SessionState.from_dict(data)
        except (ValueError, TypeError) as exc:
            raise SessionStoreError(f"parse session state: {exc}") from exc

    def _write(self, chat_id: int, state: SessionState) -> None:
        try:
            self._base_dir.mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            raise SessionStoreError(f"create session directory: {exc}") from exc
        data = json.dumps(state.to_dict(), indent=2, ensure_ascii=False)
        try:
            _write_private(self._path(chat_id), data + "\n")
        except OSError as exc:
            raise SessionStoreError(f"write session state: {exc}") from exc