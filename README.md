# clawlite

Building blocks for a chat assistant that turns incoming messages into tracked
goals and keeps per-chat state on disk. The package uses only the standard
library and needs Python 3.10 or later.

## Modules

- `clawlite.goals`: the `Goal` dataclass and `GoalStatus` (`queued`, `running`,
  `blocked`, `done`, `waiting_input`). `new_goal(chat_id, objective)` creates a
  queued goal. `apply_goal_result(goal, result)` returns a copy of the goal
  updated from a `GoalResult`. A result may be running, waiting for input,
  carrying an error (which blocks the goal) or done, and it may carry a summary.
  `GoalStore(data_dir)` keeps each chat's goals in
  `<data_dir>/goals/<chat_id>.json`, sorted so the most recently updated goal
  comes first. `load` raises `GoalNotFoundError` for an unknown id. Read, parse
  and write failures raise `GoalStoreError`.
- `clawlite.session_store`: `SessionState` holds a chat's execution mode, its
  active goal id, the last Codex result summary, the time of its last activity
  and whether a confirmation is pending. `SessionStore(data_dir)` loads and saves
  it in `<data_dir>/sessions/<chat_id>.json`. Its `update(chat_id, apply)` loads
  the state, lets `apply` change it in place, then saves and returns it. Failures
  raise `SessionStoreError`.
- `clawlite.health`: `HealthState` is a set of thread-safe counters. It records
  poll successes and errors, restarts, and queued, started and finished goals.
  `snapshot()` returns a `HealthSnapshot`, and `to_dict()` gives its JSON form.
  `health_app(state)` is a WSGI application that answers every request with that
  JSON.
- `clawlite.orchestrator`: `ToolCall` describes a tool request. `Orchestrator`
  limits a loop to `max_steps` steps through `begin_step()` and counts parse
  failures. Its `record_tool_result(call, error)` returns `True` once the same
  call, identified by `tool_call_fingerprint`, has failed twice in a row.
- `clawlite.goal_steps`: `ExecutionMode` (`legacy`, `codex`) and
  `parse_execution_mode`. `parse_codex_goal_step` turns a reply that starts with
  `running:`, `blocked:`, `wait_input:` or `done:` into a `GoalStep`. A reply with
  none of these prefixes counts as done. The module also has
  `format_goal_proxy_message`, which adds a `[goal:<id>]` prefix, plus
  `format_goal`, `format_goal_list` (at most five goals) and
  `summarize_session_text`.
- `clawlite.stock`: `extract_ticker_from_stock_query` finds a ticker in a
  question about a stock price, for example `"what is NVDA stock price now"`
  gives `"NVDA"`. `lookup_stock_quote(execute, ticker)` calls
  `execute(ToolCall(name="stock_price", ...))` and falls back to `web_search`. It
  raises `QuoteLookupError` when neither tool gives a quote.
  `price_command_reply(execute, text)` answers a `/price <ticker>` message.
- `clawlite.replies`: `is_non_actionable_reply` and
  `should_block_success_after_mutation_failure` check agent replies, and
  `unresolved_mutation_message` words a failed mutating action. `build_prompt`
  assembles a prompt from a summary, a list of `MemoryMessage` turns and the new
  message. `call_agent_with_retry(generate, prompt, model, attempts, sleep)`
  calls `generate(prompt, model)` up to `attempts` times, waiting 0.25 s, 0.5 s
  and so on between tries, and re-raises the last error.

## Example

```python
from clawlite.goals import GoalResult, GoalStatus, GoalStore, apply_goal_result, new_goal

store = GoalStore("data")
goal = new_goal(42, "deploy the service")
store.save(goal)

goal = apply_goal_result(goal, GoalResult(running=True, summary="starting deployment"))
goal = apply_goal_result(goal, GoalResult(done=True, summary="deployment completed"))
store.save(goal)

assert store.load(42, goal.id).status is GoalStatus.DONE
```

Serving the health snapshot with the standard library:

```python
from wsgiref.simple_server import make_server

from clawlite.health import HealthState, health_app

state = HealthState()
make_server("127.0.0.1", 8080, health_app(state)).serve_forever()
```

## What it does not do

This is a library of parts. It has no command to run and does not connect to
any chat service. It has no polling loop, no background goal runner, no client
for a language-model agent or a Codex proxy, and no routing of chat commands
such as `/agent` or `/confirm`. The functions that need a tool or an agent take
a callable, and the caller supplies it.

## Running the tests

```
pip install -e ".[test]"
pytest
```