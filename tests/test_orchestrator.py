from clawlite.orchestrator import Orchestrator, ToolCall, tool_call_fingerprint


def test_begin_step_respects_max_steps():
    o = Orchestrator(2)
    assert o.begin_step() is True
    assert o.begin_step() is True
    assert o.begin_step() is False
    assert o.state().step == 2


def test_non_positive_max_steps_allows_one_step():
    o = Orchestrator(0)
    assert o.state().max_steps == 1
    assert o.begin_step() is True
    assert o.begin_step() is False


def test_tracks_repeated_tool_error():
    o = Orchestrator(4)
    call = ToolCall(name="stock_price", query="???")
    assert o.record_tool_result(call, ValueError("invalid stock ticker")) is False
    assert o.record_tool_result(call, ValueError("invalid stock ticker")) is True


def test_clears_error_streak_on_success():
    o = Orchestrator(4)
    call = ToolCall(name="web_search", query="NVDA")
    o.record_tool_result(call, RuntimeError("temporary failure"))
    assert o.record_tool_result(call, None) is False
    state = o.state()
    assert state.consecutive_tool_errors == 0
    assert state.last_tool_fingerprint == ""


def test_different_call_restarts_streak():
    o = Orchestrator(4)
    o.record_tool_result(ToolCall(name="a"), RuntimeError("x"))
    assert o.record_tool_result(ToolCall(name="b"), RuntimeError("x")) is False
    assert o.state().consecutive_tool_errors == 1


def test_record_parse_failure_counts():
    o = Orchestrator(3)
    assert o.record_parse_failure() == 1
    assert o.record_parse_failure() == 2
    assert o.state().parse_failures == 2


def test_state_is_a_copy():
    o = Orchestrator(3)
    snapshot = o.state()
    snapshot.step = 99
    assert o.state().step == 0