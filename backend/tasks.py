import logging
from datetime import datetime, timedelta
from typing import List, Optional

from backend.errors import NotFound
from backend.export import render_tasks_workbook
from backend.models import Task, to_naive_utc, utcnow
from backend.stores import TaskStore
from schemas import TaskPriority, TaskStatus

logger = logging.getLogger(__name__)


def _not_found(task_id: int) -> NotFound:
    return NotFound(f"Task not found with id: {task_id}")


class TaskService:
    def __init__(self, store: TaskStore):
        self.store = store

    def list(self) -> List[Task]:
        return self.store.list()

    def get(self, task_id: int) -> Task:
        task = self.store.get(task_id)
        if task is None:
            raise _not_found(task_id)
        return task

    def search(
        self,
        text: Optional[str] = None,
        status: Optional[TaskStatus] = None,
        priority: Optional[TaskPriority] = None,
    ) -> List[Task]:
        return self.store.search(text or None, status, priority)

    def create(
        self,
        title: str,
        description: Optional[str] = None,
        status: Optional[TaskStatus] = None,
        priority: Optional[TaskPriority] = None,
        due_date: Optional[datetime] = None,
    ) -> Task:
        now = utcnow()
        task = Task(
            owner_id=self.store.owner_id,
            title=title,
            description=description,
            status=status if status is not None else TaskStatus.TODO,
            priority=priority if priority is not None else TaskPriority.MEDIUM,
            due_date=to_naive_utc(due_date),
            created_at=now,
            updated_at=now,
        )
        self.store.save(task)
        logger.info("Created task id=%s owner=%s", task.id, task.owner_id)
        return task

    def update(
        self,
        task_id: int,
        title: str,
        description: Optional[str] = None,
        status: Optional[TaskStatus] = None,
        priority: Optional[TaskPriority] = None,
        due_date: Optional[datetime] = None,
    ) -> Task:
        task = self.get(task_id)

        task.title = title
        task.description = description
        if status is not None:
            task.status = status
        if priority is not None:
            task.priority = priority
        task.due_date = to_naive_utc(due_date)

        now = utcnow()
        if now <= task.updated_at:
            now = task.updated_at + timedelta(microseconds=1)
        task.updated_at = now

        self.store.save(task)
        logger.info("Updated task id=%s", task.id)
        return task

    def delete(self, task_id: int) -> None:
        if not self.store.exists(task_id):
            raise _not_found(task_id)
        self.store.delete(task_id)
        logger.info("Deleted task id=%s", task_id)

    def export_to_document(
        self,
        text: Optional[str] = None,
        status: Optional[TaskStatus] = None,
        priority: Optional[TaskPriority] = None,
    ) -> bytes:
        tasks = self.search(text, status, priority)
        data = render_tasks_workbook(tasks)
        logger.info("Exported %d task(s), %d bytes", len(tasks), len(data))
        return data
