import json
from dataclasses import replace
from datetime import datetime, timedelta, timezone

import pytest

from clawlite.goals import (
    Goal,
    GoalNotFoundError,
    GoalResult,
    GoalStatus,
    GoalStore,
    GoalStoreError,
    apply_goal_result,
    new_goal,
)


def test_status_transitions_queued_running_blocked_done():
    goal = new_goal(42, "deploy the service")
    assert goal.status == GoalStatus.QUEUED

    goal = apply_goal_result(goal, GoalResult(running=True, summary="starting deployment"))
    assert goal.status == GoalStatus.RUNNING

    goal = apply_goal_result(goal, GoalResult(error=RuntimeError("waiting for production credentials")))
    assert goal.status == GoalStatus.BLOCKED
    assert "credentials" in goal.last_error

    goal = apply_goal_result(goal, GoalResult(done=True, summary="deployment completed"))
    assert goal.status == GoalStatus.DONE
    assert goal.last_error == ""
    assert goal.latest_summary == "deployment completed"


def test_new_goal_trims_objective_and_prefixes_id():
    goal = new_goal(7, "  check disk  ")
    assert goal.objective == "check disk"
    assert goal.chat_id == 7
    assert goal.id.startswith("7-")
    assert goal.created_at == goal.updated_at


def test_waiting_input_clears_error():
    goal = apply_goal_result(new_goal(1, "x"), GoalResult(error=ValueError("bad")))
    goal = apply_goal_result(goal, GoalResult(waiting_input=True, summary="  need confirm "))
    assert goal.status == GoalStatus.WAITING_INPUT
    assert goal.last_error == ""
    assert goal.latest_summary == "need confirm"


def test_blank_summary_keeps_previous():
    goal = apply_goal_result(new_goal(1, "x"), GoalResult(summary="first"))
    goal = apply_goal_result(goal, GoalResult(summary="   "))
    assert goal.latest_summary == "first"
    assert goal.status == GoalStatus.QUEUED


def test_apply_does_not_mutate_original():
    original = new_goal(1, "x")
    apply_goal_result(original, GoalResult(done=True))
    assert original.status == GoalStatus.QUEUED


def test_to_dict_omits_empty_fields_and_round_trips():
    moment = datetime(2026, 3, 8, 12, 0, 0, tzinfo=timezone.utc)
    goal = Goal("g1", 5, "obj", GoalStatus.DONE, moment, moment)
    data = goal.to_dict()
    assert "latest_summary" not in data
    assert "last_error" not in data
    assert data["created_at"] == "2026-03-08T12:00:00Z"
    assert data["status"] == "done"
    assert Goal.from_dict(data) == goal


def test_store_save_and_load(tmp_path):
    store = GoalStore(tmp_path)
    goal = new_goal(55, "check the deployment health")
    store.save(goal)
    loaded = GoalStore(tmp_path).load(55, goal.id)
    assert loaded.chat_id == 55
    assert loaded.objective == "check the deployment health"
    assert loaded.status == GoalStatus.QUEUED
    assert (tmp_path / "goals" / "55.json").read_text().endswith("\n")


def test_store_replaces_existing_and_orders_newest_first(tmp_path):
    store = GoalStore(tmp_path)
    base = datetime(2026, 1, 1, tzinfo=timezone.utc)
    older = Goal("a", 3, "one", GoalStatus.QUEUED, base, base)
    newer = Goal("b", 3, "two", GoalStatus.QUEUED, base, base + timedelta(minutes=1))
    store.save(older)
    store.save(newer)
    assert [g.id for g in store.list(3)] == ["b", "a"]

    store.save(replace(older, status=GoalStatus.DONE, updated_at=base + timedelta(minutes=2)))
    goals = store.list(3)
    assert [g.id for g in goals] == ["a", "b"]
    assert goals[0].status == GoalStatus.DONE


def test_store_list_missing_chat_is_empty(tmp_path):
    assert GoalStore(tmp_path).list(999) == []


def test_store_load_missing_goal_raises(tmp_path):
    store = GoalStore(tmp_path)
    store.save(new_goal(1, "x"))
    with pytest.raises(GoalNotFoundError, match="goal not found: nope"):
        store.load(1, "nope")


def test_store_corrupt_file_raises(tmp_path):
    (tmp_path / "goals").mkdir()
    (tmp_path / "goals" / "4.json").write_text("{not json")
    with pytest.raises(GoalStoreError, match="parse goals"):
        GoalStore(tmp_path).list(4)


def test_store_reads_nanosecond_timestamps(tmp_path):
    (tmp_path / "goals").mkdir()
    payload = [{
        "id": "9-1",
        "chat_id": 9,
        "objective": "o",
        "status": "running",
        "created_at": "2026-03-08T12:00:00.123456789Z",
        "updated_at": "2026-03-08T14:00:00+02:00",
    }]
    (tmp_path / "goals" / "9.json").write_text(json.dumps(payload))
    goal = GoalStore(tmp_path).load(9, "9-1")
    assert goal.created_at == datetime(2026, 3, 8, 12, 0, 0, 123456, tzinfo=timezone.utc)
    assert goal.updated_at == datetime(2026, 3, 8, 12, 0, 0, tzinfo=timezone.utc)
    assert goal.status == GoalStatus.RUNNING