"""CRUD handlers for todos.

Each handler runs one read/modify/write against the session it is given and
commits before returning. Validation happens before a handler is called, so
handlers only raise for a missing record (update, toggle) or a storage error.
"""

import logging
from datetime import datetime, timedelta, timezone

from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import Session, select

from todo_api.models import (
    CreateTodoInput,
    DeleteTodoResult,
    Todo,
    TodoIdInput,
    UpdateTodoInput,
    utcnow,
)

logger = logging.getLogger(__name__)


class TodoNotFoundError(LookupError):
    """Raised when update or toggle targets an id with no matching row."""

    def __init__(self, todo_id: int) -> None:
        super().__init__(f"Todo with id {todo_id} not found")
        self.todo_id = todo_id


def _as_utc(value: datetime) -> datetime:
    # SQLite hands back naive datetimes for values stored as UTC.
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def _touch(todo: Todo) -> None:
    """Refresh updated_at so it strictly increases, even within one clock tick."""
    now = utcnow()
    previous = _as_utc(todo.updated_at)
    if now <= previous:
        now = previous + timedelta(microseconds=1)
    todo.updated_at = now


def _get_or_raise(session: Session, todo_id: int) -> Todo:
    todo = session.get(Todo, todo_id)
    if todo is None:
        raise TodoNotFoundError(todo_id)
    return todo


def _commit(session: Session, todo: Todo) -> Todo:
    session.add(todo)
    session.commit()
    session.refresh(todo)
    return todo


def create_todo(session: Session, body: CreateTodoInput) -> Todo:
    """Insert a new, incomplete todo with created_at equal to updated_at."""
    now = utcnow()
    todo = Todo(
        title=body.title,
        description=body.description,
        completed=False,
        created_at=now,
        updated_at=now,
    )
    try:
        return _commit(session, todo)
    except SQLAlchemyError:
        logger.exception("Todo creation failed")
        session.rollback()
        raise


def get_todos(session: Session) -> list[Todo]:
    """Return every todo in insertion order."""
    try:
        return list(session.exec(select(Todo).order_by(Todo.id)).all())
    except SQLAlchemyError:
        logger.exception("Fetching todos failed")
        raise


def update_todo(session: Session, body: UpdateTodoInput) -> Todo:
    """Apply the supplied fields to a todo. Omitted fields are left unchanged."""
    try:
        todo = _get_or_raise(session, body.id)
        for key, value in body.changes().items():
            setattr(todo, key, value)
        _touch(todo)
        return _commit(session, todo)
    except SQLAlchemyError:
        logger.exception("Todo update failed for id %s", body.id)
        session.rollback()
        raise


def toggle_todo(session: Session, body: TodoIdInput) -> Todo:
    """Flip the completed flag of a todo."""
    try:
        todo = _get_or_raise(session, body.id)
        todo.completed = not todo.completed
        _touch(todo)
        return _commit(session, todo)
    except SQLAlchemyError:
        logger.exception("Todo toggle failed for id %s", body.id)
        session.rollback()
        raise


def delete_todo(session: Session, body: TodoIdInput) -> DeleteTodoResult:
    """Delete a todo by id. A missing id is reported as success=False."""
    try:
        todo = session.get(Todo, body.id)
        if todo is None:
            return DeleteTodoResult(success=False)
        session.delete(todo)
        session.commit()
    except SQLAlchemyError:
        logger.exception("Todo deletion failed for id %s", body.id)
        session.rollback()
        raise
    return DeleteTodoResult(success=True)
