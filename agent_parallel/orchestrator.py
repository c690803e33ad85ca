"""DAG task orchestrator: assignment of tasks to agents and their lifecycle."""

import copy
import logging
import uuid
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Callable, Dict, Iterable, List, Optional, Tuple

from agent_parallel.notify_queue import TaskNotifyQueue
from agent_parallel.task_model import TaskItem, TaskStatus
from agent_parallel.task_record import (
    CreateTaskInput,
    TaskRecord,
    TaskView,
    is_active_status,
)
from agent_parallel.workspace_path import workspace_dir

logger = logging.getLogger(__name__)

ACCEPTED_TO_EXECUTING_SECS = 2
EXECUTING_TO_SUBMITTED_SECS = 3
SUBMITTED_TO_REVIEWING_SECS = 2
REVIEWING_TO_COMPLETED_SECS = 2
UNKNOWN_AGENT_NAME = "未知"
TICK_INTERVAL_SECS = 1.0


class AgentStatus(str, Enum):
    """Whether an agent is busy with a task."""

    IDLE = "idle"
    WORKING = "working"


class ClaimTaskError(Exception):
    """An agent could not claim a task; ``reason`` says why."""

    TASK_NOT_FOUND = "task_not_found"
    TASK_NOT_PUBLISHED = "task_not_published"
    AGENT_NOT_REGISTERED = "agent_not_registered"
    TASK_BLOCKED_BY_DEPENDENCIES = "task_blocked_by_dependencies"
    AGENT_MCP_NOT_SATISFIED = "agent_mcp_not_satisfied"

    _MESSAGES = {
        "task_not_found": "任务不存在",
        "task_not_published": "任务未处于待接取状态",
        "agent_not_registered": "Agent 未注册",
        "task_blocked_by_dependencies": "任务依赖尚未完成",
        "agent_mcp_not_satisfied": "Agent 缺少任务所需 MCP 能力",
    }

    def __init__(self, reason: str):
        self.reason = reason
        super().__init__(self._MESSAGES[reason])


PersistFn = Callable[[TaskRecord], None]
AgentStatusFn = Callable[[uuid.UUID, AgentStatus], None]
ProgressFn = Callable[[str], None]
AgentExecutor = Callable[[uuid.UUID, str, str, List[str]], Any]


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class DagOrchestrator:
    """Holds tasks and agents, hands published tasks out and advances them.

    Collaborators are optional callables: ``persist`` stores task snapshots,
    ``agent_status_sink`` is told when agents become busy or idle,
    ``agent_executor`` runs a task's MCP tools on an agent and returns an
    object with ``success`` and ``output``, ``progress_sink`` receives
    progress messages for the user, and ``notify_queue`` receives
    completion and failure notices.
    """

    def __init__(
        self,
        *,
        persist: Optional[PersistFn] = None,
        agent_status_sink: Optional[AgentStatusFn] = None,
        agent_executor: Optional[AgentExecutor] = None,
        progress_sink: Optional[ProgressFn] = None,
        notify_queue: Optional[TaskNotifyQueue] = None,
        clock: Callable[[], datetime] = _utcnow,
    ):
        self._persist = persist
        self._agent_status_sink = agent_status_sink
        self._agent_executor = agent_executor
        self._progress_sink = progress_sink
        self._notify_queue = notify_queue
        self._clock = clock
        self._tasks: Dict[uuid.UUID, TaskRecord] = {}
        self._agents: Dict[uuid.UUID, str] = {}
        self._agent_mcps: Dict[uuid.UUID, List[str]] = {}
        self._agent_workspaces: Dict[uuid.UUID, str] = {}
        self._task_key_index: Dict[str, uuid.UUID] = {}
        self._task_assignments: Dict[uuid.UUID, uuid.UUID] = {}

    # ---- side effects -------------------------------------------------

    def _send_progress(self, text: str) -> None:
        if self._progress_sink is not None:
            try:
                self._progress_sink(text)
            except Exception:
                logger.exception("发送任务进度失败")

    def _enqueue_notify(self, text: str) -> None:
        if self._notify_queue is not None:
            self._notify_queue.enqueue(text, self._clock())

    def _sync_agent_status(self, agent_id: uuid.UUID, status: AgentStatus) -> None:
        if self._agent_status_sink is not None:
            self._agent_status_sink(agent_id, status)

    def _persist_snapshot(self, task: TaskRecord) -> None:
        if self._persist is None:
            return
        try:
            self._persist(copy.deepcopy(task))
        except Exception:
            logger.exception("任务持久化失败, task_id=%s", task.id)

    def _write_task_memory_log(self, workspace_name: str, task: TaskRecord) -> None:
        ws_dir = workspace_dir(workspace_name)
        try:
            ws_dir.mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            logger.error("创建工作区目录失败, workspace=%s: %s", workspace_name, exc)
            return
        stamp = task.updated_at.astimezone(timezone.utc).strftime("%Y-%m-%dT%H:%M:%SZ")
        agent_name = task.assigned_agent_name or UNKNOWN_AGENT_NAME
        entry = (
            f"[{stamp}] 任务完成 | 任务: {task.name} | 智能体: {agent_name}\n"
            f"  任务ID: {task.id}\n"
            f"  描述: {task.description}\n"
            "---\n"
        )
        try:
            with open(ws_dir / "memory.log", "a", encoding="utf-8") as log_file:
                log_file.write(entry)
        except OSError as exc:
            logger.error("写入 memory.log 失败, task_id=%s: %s", task.id, exc)
        else:
            logger.info("任务记忆已写入 memory.log, task_id=%s", task.id)

    # ---- queries ------------------------------------------------------

    def _is_agent_available(self, agent_id: uuid.UUID) -> bool:
        return not any(
            assigned == agent_id
            and task_id in self._tasks
            and is_active_status(self._tasks[task_id].status)
            for task_id, assigned in self._task_assignments.items()
        )

    def _dependencies_satisfied(self, task: TaskRecord) -> bool:
        def done(dep_key: str) -> bool:
            dep_id = self._task_key_index.get(dep_key)
            dep = self._tasks.get(dep_id) if dep_id is not None else None
            return dep is not None and dep.status is TaskStatus.COMPLETED_SUCCESS

        return all(done(key) for key in task.depends_on)

    def _has_required_mcp(self, agent_id: uuid.UUID, task: TaskRecord) -> bool:
        if not task.required_mcp:
            return True
        owned = self._agent_mcps.get(agent_id)
        if owned is None:
            return False
        return all(required in owned for required in task.required_mcp)

    def _effective_mcp(self, task: TaskRecord) -> List[str]:
        if task.required_mcp:
            return list(task.required_mcp)
        if task.assigned_agent_id is None:
            return []
        return list(self._agent_mcps.get(task.assigned_agent_id, []))

    # ---- task intake --------------------------------------------------

    def _insert_task(self, task: TaskItem) -> TaskView:
        task_id = uuid.uuid4()
        record = TaskRecord.from_task_item(task_id, task, self._clock())
        self._task_key_index[record.task_key] = task_id
        self._tasks[task_id] = record
        self._persist_snapshot(record)
        logger.debug("任务已提交，等待接取, task_id=%s", task_id)
        return record.to_view()

    def submit_task(self, task: TaskItem) -> TaskView:
        """Add a task proposed by the classifier."""
        return self._insert_task(task)

    def create_task(self, task_input: CreateTaskInput) -> TaskView:
        """Add a task created through the API; it starts as published."""
        return self._insert_task(
            TaskItem(
                task_key=task_input.task_key,
                name=task_input.name,
                description=task_input.description,
                priority=task_input.priority,
                status=TaskStatus.PUBLISHED,
                due_date=task_input.due_date,
                depends_on=task_input.depends_on,
                required_mcp=task_input.required_mcp,
            )
        )

    def list_tasks(self) -> List[TaskView]:
        """All tasks, newest first."""
        views = [record.to_view() for record in self._tasks.values()]
        views.sort(key=lambda view: view.created_at, reverse=True)
        return views

    def get_task(self, task_id: uuid.UUID) -> Optional[TaskView]:
        record = self._tasks.get(task_id)
        return record.to_view() if record is not None else None

    def restore(self, records: Iterable[TaskRecord]) -> None:
        """Replace all tasks with ``records``, e.g. ones loaded from storage."""
        self._tasks.clear()
        self._task_assignments.clear()
        self._task_key_index.clear()
        for record in records:
            self._task_key_index[record.task_key] = record.id
            if record.assigned_agent_id is not None and is_active_status(record.status):
                self._task_assignments[record.id] = record.assigned_agent_id
            self._tasks[record.id] = record
        logger.info("任务已恢复到编排器, count=%d", len(self._tasks))

    # ---- agents and claiming ------------------------------------------

    def register_agent(
        self,
        agent_id: uuid.UUID,
        name: str,
        workspace_name: str,
        mcp_list: Iterable[str] = (),
    ) -> None:
        """Register an agent; only registered agents can claim tasks."""
        logger.info("Agent 已注册, agent_id=%s name=%s", agent_id, name)
        self._agents[agent_id] = name
        self._agent_workspaces[agent_id] = workspace_name
        self._agent_mcps[agent_id] = list(mcp_list)
        for task in self._tasks.values():
            if task.assigned_agent_id == agent_id and is_active_status(task.status):
                self._sync_agent_status(agent_id, AgentStatus.WORKING)

    def _assign(self, task_id: uuid.UUID, agent_id: uuid.UUID) -> None:
        agent_name = self._agents.get(agent_id, "?")
        task = self._tasks[task_id]
        task.status = TaskStatus.ACCEPTED
        task.assigned_agent_id = agent_id
        task.assigned_agent_name = agent_name
        task.updated_at = self._clock()
        self._task_assignments[task_id] = agent_id
        self._sync_agent_status(agent_id, AgentStatus.WORKING)
        self._persist_snapshot(task)
        logger.info("任务已接取, task_id=%s agent=%s", task_id, agent_name)

    def claim_task(self, task_id: uuid.UUID, agent_id: uuid.UUID) -> None:
        """Let a registered agent claim a published task, or raise ClaimTaskError."""
        if agent_id not in self._agents:
            raise ClaimTaskError(ClaimTaskError.AGENT_NOT_REGISTERED)
        task = self._tasks.get(task_id)
        if task is None:
            raise ClaimTaskError(ClaimTaskError.TASK_NOT_FOUND)
        if task.status is not TaskStatus.PUBLISHED:
            raise ClaimTaskError(ClaimTaskError.TASK_NOT_PUBLISHED)
        if not self._dependencies_satisfied(task):
            raise ClaimTaskError(ClaimTaskError.TASK_BLOCKED_BY_DEPENDENCIES)
        if not self._has_required_mcp(agent_id, task):
            raise ClaimTaskError(ClaimTaskError.AGENT_MCP_NOT_SATISFIED)
        self._assign(task_id, agent_id)

    def try_claim_one_published(self) -> Optional[Tuple[uuid.UUID, uuid.UUID]]:
        """Assign the first claimable published task to the first fitting agent.

        Returns ``(task_id, agent_id)`` if an assignment was made.
        """
        task_id = next(
            (
                tid
                for tid, task in self._tasks.items()
                if task.status is TaskStatus.PUBLISHED
                and tid not in self._task_assignments
                and self._dependencies_satisfied(task)
            ),
            None,
        )
        if task_id is None:
            return None
        task = self._tasks[task_id]
        agent_id = next(
            (
                aid
                for aid in self._agents
                if self._is_agent_available(aid) and self._has_required_mcp(aid, task)
            ),
            None,
        )
        if agent_id is None:
            return None
        self._assign(task_id, agent_id)
        return task_id, agent_id

    # ---- lifecycle ----------------------------------------------------

    def progress_active_tasks(self, now: Optional[datetime] = None) -> None:
        """Advance active tasks whose current stage has lasted long enough."""
        if now is None:
            now = self._clock()
        snapshots: List[TaskRecord] = []
        finished: List[uuid.UUID] = []
        idle_agents: List[uuid.UUID] = []
        jobs: List[Tuple[uuid.UUID, uuid.UUID, str, List[str]]] = []
        progress_texts: List[str] = []
        notify_texts: List[str] = []
        memory_entries: List[Tuple[str, TaskRecord]] = []

        for task_id, task in self._tasks.items():
            elapsed = (now - task.updated_at).total_seconds()
            agent_name = task.assigned_agent_name or UNKNOWN_AGENT_NAME
            if task.status is TaskStatus.ACCEPTED:
                if elapsed < ACCEPTED_TO_EXECUTING_SECS:
                    continue
                task.status = TaskStatus.EXECUTING
                task.updated_at = now
                progress_texts.append(
                    f"任务进度：{task.name} 已开始执行（执行智能体：{agent_name}）"
                )
                effective = self._effective_mcp(task)
                if effective and not task.mcp_execution_started:
                    task.mcp_execution_started = True
                    if task.assigned_agent_id is not None:
                        jobs.append(
                            (task_id, task.assigned_agent_id, task.description, effective)
                        )
                snapshots.append(copy.deepcopy(task))
                logger.info("任务进入执行中, task_id=%s", task_id)
            elif task.status is TaskStatus.EXECUTING:
                has_real_job = bool(self._effective_mcp(task))
                if not has_real_job and elapsed >= EXECUTING_TO_SUBMITTED_SECS:
                    task.status = TaskStatus.SUBMITTED
                    task.updated_at = now
                    snapshots.append(copy.deepcopy(task))
                    logger.info("任务已提交结果, task_id=%s", task_id)
            elif task.status is TaskStatus.SUBMITTED:
                if elapsed >= SUBMITTED_TO_REVIEWING_SECS:
                    task.status = TaskStatus.REVIEWING
                    task.updated_at = now
                    progress_texts.append(f"任务进度：{task.name} 已提交结果，进入审核中")
                    snapshots.append(copy.deepcopy(task))
                    logger.info("任务进入审核中, task_id=%s", task_id)
            elif task.status is TaskStatus.REVIEWING:
                if elapsed >= REVIEWING_TO_COMPLETED_SECS:
                    task.status = TaskStatus.COMPLETED_SUCCESS
                    task.updated_at = now
                    progress_texts.append(f"任务进度：{task.name} 已完成")
                    notify_texts.append(f"任务完成：{task.name}（执行智能体：{agent_name}）")
                    snapshots.append(copy.deepcopy(task))
                    finished.append(task_id)
                    if task.assigned_agent_id is not None:
                        idle_agents.append(task.assigned_agent_id)
                        workspace = self._agent_workspaces.get(task.assigned_agent_id)
                        if workspace is not None:
                            memory_entries.append((workspace, copy.deepcopy(task)))
                    logger.info("任务已完成, task_id=%s", task_id)

        for task_id in finished:
            self._task_assignments.pop(task_id, None)
        for snapshot in snapshots:
            self._persist_snapshot(snapshot)
        for text in progress_texts:
            self._send_progress(text)
        for text in notify_texts:
            self._enqueue_notify(text)
        for agent_id in idle_agents:
            self._sync_agent_status(agent_id, AgentStatus.IDLE)
        for workspace, record in memory_entries:
            self._write_task_memory_log(workspace, record)
        if self._agent_executor is not None:
            for job in jobs:
                self._run_job(*job)

    def _run_job(
        self, task_id: uuid.UUID, agent_id: uuid.UUID, input_text: str, mcp_names: List[str]
    ) -> None:
        try:
            result = self._agent_executor(agent_id, str(task_id), input_text, mcp_names)
            success, output = bool(result.success), str(result.output)
        except Exception as exc:
            success, output = False, f"agent execution failed: {exc}"
        self.apply_mcp_execution_result(task_id, success, output)

    def apply_mcp_execution_result(
        self, task_id: uuid.UUID, success: bool, output: str
    ) -> None:
        """Record the outcome of a task's MCP run; ignored unless it is executing."""
        task = self._tasks.get(task_id)
        if task is None or task.status is not TaskStatus.EXECUTING:
            return
        task.updated_at = self._clock()
        if success:
            task.status = TaskStatus.SUBMITTED
            logger.info("MCP 执行完成，任务进入已提交, task_id=%s", task_id)
        else:
            task.status = TaskStatus.COMPLETED_FAILURE
            logger.info("MCP 执行失败，任务标记为失败, task_id=%s", task_id)

        memory_entry: Optional[Tuple[str, TaskRecord]] = None
        agent_id = task.assigned_agent_id
        if agent_id is not None:
            workspace = self._agent_workspaces.get(agent_id)
            if workspace is not None:
                logged = copy.deepcopy(task)
                logged.description = f"{logged.description}\n\n[MCP 执行日志]\n{output}"
                memory_entry = (workspace, logged)

        if not success:
            if agent_id is not None:
                self._task_assignments.pop(task_id, None)
                self._sync_agent_status(agent_id, AgentStatus.IDLE)
            self._send_progress(f"任务进度：{task.name} 执行失败，原因：{output}")
            self._enqueue_notify(f"任务失败：{task.name}，原因：{output}")

        self._persist_snapshot(task)
        if memory_entry is not None:
            self._write_task_memory_log(*memory_entry)

    def tick(self, now: Optional[datetime] = None) -> None:
        """One scheduling round: claim one task, then advance active ones."""
        self.try_claim_one_published()
        self.progress_active_tasks(now)