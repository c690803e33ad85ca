# agent-parallel

Building blocks for running tasks across several agents at once:

- **Task orchestration** (`agent_parallel.orchestrator`): `DagOrchestrator` keeps the task
  table. Tasks can depend on other tasks (`depends_on`) and can require MCP tools
  (`required_mcp`). Agents register with `register_agent`, and tasks are claimed either
  explicitly with `claim_task` or automatically on each `tick`. From there they move through
  accepted → executing → submitted → reviewing → completed.
- **MCP configuration** (`agent_parallel.mcp_manager`): `McpManager` stores tool
  configurations as JSON files in a `.mcps` directory. `execute` runs the configured command,
  with a timeout, and returns an `McpExecutionResult`.
- **Notifications** (`agent_parallel.notify_queue`): `TaskNotifyQueue` queues task messages
  and hands one out to every subscriber on each `tick`.
- **Models and helpers**: `task_model`, `task_record`, `mcp_model`, `workspace_model`,
  `workspace_path`, `jsonutil` and `envutil`.
- **Handlers** (`mcp_api`, `task_api`): these functions return an HTTP status and a
  JSON-ready body. Plug them into any web framework.

## Installation

```
pip install .
```

## Example

```python
import uuid
from datetime import datetime, timezone

from agent_parallel.orchestrator import DagOrchestrator
from agent_parallel.task_record import CreateTaskInput

orch = DagOrchestrator()
agent_id = uuid.uuid4()
orch.register_agent(agent_id, "worker", "demo", [])

view = orch.create_task(CreateTaskInput.from_dict({"name": "write report"}))
orch.tick(datetime.now(timezone.utc))
print(orch.get_task(uuid.UUID(view.id)).status_label)
```

Each call to `tick(now)` does two things. It claims one published task whose dependencies
are finished. It then moves active tasks forward once enough time has passed.

Workspace directories live under `WORKSPACE_ROOT`, which defaults to `.workspace`. When a
task finishes, a line for it is appended to that workspace's `memory.log`.

## Tests

```
pip install .[test]
pytest
```