"""
Taskmaster Connector - project and task tracking.

Seed projects are fixed; created tasks live in memory until disconnect.
"""

import itertools
from typing import Any

from pydantic import Field

from ..contracts import CredentialField
from ..errors import ConnectorUnavailableError
from ..models import ServiceKind
from ..tools import Tool
from .base import ApiKeyConnector

__all__ = ["TaskmasterConnector", "TOOLS"]

PROJECTS = (
    {
        "id": "proj_1",
        "name": "DevHub Development",
        "description": "Build the ultimate developer dashboard",
        "status": "active",
    },
    {
        "id": "proj_2",
        "name": "Documentation",
        "description": "Complete project documentation",
        "status": "active",
    },
)

TASK_STATUSES = ("todo", "in-progress", "review", "done")


class TaskmasterConnector(ApiKeyConnector):
    kind = ServiceKind.TASKMASTER
    display_name = "Taskmaster"
    min_key_length = 5
    credential_fields = (CredentialField("api_key", "TASKMASTER_API_KEY", "Taskmaster API key"),)

    def __init__(self) -> None:
        super().__init__()
        self.tasks: dict[str, dict[str, Any]] = {}
        self._ids = itertools.count(1)

    async def _close(self) -> None:
        self.tasks.clear()
        self._ids = itertools.count(1)

    def _project(self, project_id: str) -> dict[str, Any]:
        self._require_connected()
        for project in PROJECTS:
            if project["id"] == project_id:
                return project
        raise ConnectorUnavailableError(self.kind.value, f"Project not found: {project_id}")

    def _task(self, task_id: str) -> dict[str, Any]:
        self._require_connected()
        if task_id not in self.tasks:
            raise ConnectorUnavailableError(self.kind.value, f"Task not found: {task_id}")
        return self.tasks[task_id]

    async def list_projects(self) -> list[dict]:
        self._require_connected()
        return [
            {**p, "tasks": sum(1 for t in self.tasks.values() if t["project_id"] == p["id"])}
            for p in PROJECTS
        ]

    async def list_tasks(self, project_id: str, status: str | None = None) -> list[dict]:
        self._project(project_id)
        return [
            t for t in self.tasks.values()
            if t["project_id"] == project_id and (status is None or t["status"] == status)
        ]

    async def create_task(
        self,
        project_id: str,
        title: str,
        description: str = "",
        priority: str = "medium",
        tags: list[str] | None = None,
    ) -> dict[str, Any]:
        self._project(project_id)
        task = {
            "id": f"task_{next(self._ids)}",
            "project_id": project_id,
            "title": title,
            "description": description,
            "status": "todo",
            "priority": priority,
            "tags": list(tags or []),
        }
        self.tasks[task["id"]] = task
        return task

    async def update_task(self, task_id: str, **changes: Any) -> dict[str, Any]:
        task = self._task(task_id)
        if "status" in changes and changes["status"] not in TASK_STATUSES:
            raise ConnectorUnavailableError(self.kind.value, f"Invalid status: {changes['status']}")
        task.update({k: v for k, v in changes.items() if v is not None and k in task and k != "id"})
        return task

    async def complete_task(self, task_id: str) -> dict[str, Any]:
        return await self.update_task(task_id, status="done")

    async def get_project_stats(self, project_id: str) -> dict[str, Any]:
        tasks = await self.list_tasks(project_id)
        done = sum(1 for t in tasks if t["status"] == "done")
        return {
            "total_tasks": len(tasks),
            "completed_tasks": done,
            "in_progress_tasks": sum(1 for t in tasks if t["status"] == "in-progress"),
            "completion_percentage": round(done * 100 / len(tasks), 1) if tasks else 0.0,
        }


class ListProjects(Tool):
    """List projects."""

    async def execute(self, connector: TaskmasterConnector) -> Any:
        return await connector.list_projects()


class ListTasks(Tool):
    """List tasks of a project."""

    project_id: str = Field(..., description="Project id")
    status: str | None = Field(None, description="Filter by status")

    async def execute(self, connector: TaskmasterConnector) -> Any:
        return await connector.list_tasks(self.project_id, self.status)


class CreateTask(Tool):
    """Create a task in a project."""

    project_id: str = Field(..., description="Project id")
    title: str = Field(..., min_length=1, description="Task title")
    description: str = Field("", description="Task description")
    priority: str = Field("medium", description="low, medium, high or critical")
    tags: list[str] = Field(default_factory=list, description="Tags")

    async def execute(self, connector: TaskmasterConnector) -> Any:
        return await connector.create_task(
            self.project_id, self.title, self.description, self.priority, self.tags
        )


class CompleteTask(Tool):
    """Mark a task as done."""

    task_id: str = Field(..., description="Task id")

    async def execute(self, connector: TaskmasterConnector) -> Any:
        return await connector.complete_task(self.task_id)


class GetProjectStats(Tool):
    """Task counts and completion percentage for a project."""

    project_id: str = Field(..., description="Project id")

    async def execute(self, connector: TaskmasterConnector) -> Any:
        return await connector.get_project_stats(self.project_id)


TOOLS = (ListProjects, ListTasks, CreateTask, CompleteTask, GetProjectStats)
