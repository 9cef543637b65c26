"""
Task Store

Tasks may reference a goal through `goal_id`.

DESIGN DECISION: The reference is soft by default. With
`enforce_references=False` a task may point at a goal that does not (or
no longer) exists. With `enforce_references=True` and a `goal_exists`
callable, adding or re-pointing a task at an unknown goal raises
DanglingReferenceError.
"""

from datetime import date
from typing import Any, Callable, Optional
from uuid import UUID

from pydantic import BaseModel, Field

from lifeplanner.models.audit import AuditEventBuilder
from lifeplanner.models.goal import Priority, Task, TaskCategory
from lifeplanner.stores.base import DanglingReferenceError, PersistentStore, find_index


class TaskState(BaseModel):
    tasks: list[Task] = Field(default_factory=list)


class TaskStore(PersistentStore[TaskState]):
    """Tasks, newest first."""

    state_model = TaskState

    def __init__(
        self,
        *args: Any,
        goal_exists: Optional[Callable[[UUID], bool]] = None,
        enforce_references: bool = False,
        **kwargs: Any,
    ):
        super().__init__(*args, **kwargs)
        self._goal_exists = goal_exists
        self._enforce_references = enforce_references

    def _check_goal(self, goal_id: Optional[UUID]) -> None:
        if goal_id is None or not self._enforce_references or self._goal_exists is None:
            return
        if not self._goal_exists(goal_id):
            raise DanglingReferenceError("goal_id", goal_id)

    @property
    def tasks(self) -> list[Task]:
        return list(self._state.tasks)

    def get_task_by_id(self, task_id: UUID) -> Optional[Task]:
        index = find_index(self._state.tasks, task_id)
        return None if index is None else self._state.tasks[index]

    def get_tasks_by_category(self, category: TaskCategory) -> list[Task]:
        return [t for t in self._state.tasks if t.category == category]

    def get_tasks_by_goal(self, goal_id: UUID) -> list[Task]:
        return [t for t in self._state.tasks if t.goal_id == goal_id]

    def get_completed_tasks(self) -> list[Task]:
        return [t for t in self._state.tasks if t.completed]

    def get_pending_tasks(self) -> list[Task]:
        return [t for t in self._state.tasks if not t.completed]

    async def add_task(
        self,
        title: str,
        category: TaskCategory = TaskCategory.PERSONAL,
        priority: Priority = Priority.MEDIUM,
        description: Optional[str] = None,
        due_date: Optional[date] = None,
        goal_id: Optional[UUID] = None,
    ) -> Task:
        self._check_goal(goal_id)
        task = Task(
            title=title,
            description=description,
            due_date=due_date,
            priority=priority,
            category=category,
            goal_id=goal_id,
        )
        self._state.tasks.insert(0, task)
        await self._commit(AuditEventBuilder.entity_created(
            "task", task.id, {"title": task.title}
        ))
        return task

    async def update_task(self, task_id: UUID, **changes: Any) -> Optional[Task]:
        if "goal_id" in changes:
            self._check_goal(changes["goal_id"])
        return await self._update_in(self._state.tasks, "task", task_id, changes)

    async def delete_task(self, task_id: UUID) -> Optional[Task]:
        return await self._delete_from(self._state.tasks, "task", task_id)

    async def toggle_task_completion(self, task_id: UUID) -> Optional[Task]:
        task = self.get_task_by_id(task_id)
        if task is None:
            self._not_found("task", task_id)
            return None
        return await self._update_in(
            self._state.tasks, "task", task_id, {"completed": not task.completed}
        )

    async def unlink_goal(self, goal_id: UUID) -> list[Task]:
        """Clear `goal_id` on every task pointing at `goal_id`."""
        unlinked = []
        for index, task in enumerate(self._state.tasks):
            if task.goal_id == goal_id:
                task = task.model_copy(update={"goal_id": None})
                self._state.tasks[index] = task
                unlinked.append(task)
        if unlinked:
            await self._commit(AuditEventBuilder.entity_updated(
                "task", None, {"unlinked_goal": str(goal_id), "count": len(unlinked)}
            ))
        return unlinked
