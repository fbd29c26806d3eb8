"""
Persistence for users and tasks

Stores wrap a request-scoped SQLAlchemy session. Reads run inside the
session's implicit transaction; save() and delete() commit it, so a
read-then-write sequence on one store is a single transaction.

Ids outside the storable integer range cannot name a row and are treated
as absent.
"""
from typing import List, Optional

from sqlalchemy import and_, or_, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from backend.models import Task, User, is_storable_id
from schemas import TaskPriority, TaskStatus


class UserStore:
    def __init__(self, session: Session):
        self.session = session

    def exists(self, email: str) -> bool:
        stmt = select(User.id).where(User.email == email).limit(1)
        return self.session.scalar(stmt) is not None

    def save(self, user: User) -> User:
        """Persist a new user; a unique-email violation is rolled back and re-raised."""
        self.session.add(user)
        try:
            self.session.commit()
        except IntegrityError:
            self.session.rollback()
            raise
        return user

    def find_by_email(self, email: str) -> Optional[User]:
        return self.session.scalar(select(User).where(User.email == email))

    def get(self, user_id: int) -> Optional[User]:
        if not is_storable_id(user_id):
            return None
        return self.session.get(User, user_id)


class TaskStore:
    """Tasks belonging to a single owner."""

    def __init__(self, session: Session, owner_id: int):
        self.session = session
        self.owner_id = owner_id

    def _owned(self):
        return select(Task).where(Task.owner_id == self.owner_id)

    @staticmethod
    def _newest_first(stmt):
        return stmt.order_by(Task.created_at.desc(), Task.id.desc())

    def list(self) -> List[Task]:
        return list(self.session.scalars(self._newest_first(self._owned())))

    def get(self, task_id: int) -> Optional[Task]:
        if not is_storable_id(task_id):
            return None
        return self.session.scalar(self._owned().where(Task.id == task_id))

    def exists(self, task_id: int) -> bool:
        if not is_storable_id(task_id):
            return False
        stmt = select(Task.id).where(and_(Task.id == task_id, Task.owner_id == self.owner_id)).limit(1)
        return self.session.scalar(stmt) is not None

    def search(
        self,
        text: Optional[str] = None,
        status: Optional[TaskStatus] = None,
        priority: Optional[TaskPriority] = None,
    ) -> List[Task]:
        stmt = self._owned()
        if text:
            stmt = stmt.where(
                or_(
                    Task.title.icontains(text, autoescape=True),
                    Task.description.icontains(text, autoescape=True),
                )
            )
        if status is not None:
            stmt = stmt.where(Task.status == status)
        if priority is not None:
            stmt = stmt.where(Task.priority == priority)
        return list(self.session.scalars(self._newest_first(stmt)))

    def save(self, task: Task) -> Task:
        self.session.add(task)
        self.session.commit()
        return task

    def delete(self, task_id: int) -> None:
        task = self.get(task_id)
        if task is not None:
            self.session.delete(task)
        self.session.commit()
