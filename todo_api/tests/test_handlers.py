"""Tests for the todo CRUD handlers against an in-memory database."""

from unittest.mock import patch

import pytest
from pydantic import ValidationError
from sqlalchemy.exc import OperationalError
from sqlmodel import Session, select

from todo_api.handlers import (
    TodoNotFoundError,
    create_todo,
    delete_todo,
    get_todos,
    toggle_todo,
    update_todo,
)
from todo_api.models import CreateTodoInput, Todo, TodoIdInput, UpdateTodoInput


def _create(session: Session, title: str = "Original Todo", description=None) -> Todo:
    return create_todo(session, CreateTodoInput(title=title, description=description))


class TestCreateTodo:
    def test_creates_incomplete_todo(self, session: Session):
        todo = _create(session, "Buy milk")
        assert todo.id is not None
        assert todo.title == "Buy milk"
        assert todo.description is None
        assert todo.completed is False

    def test_timestamps_equal_at_creation(self, session: Session):
        todo = _create(session)
        assert todo.created_at == todo.updated_at

    def test_persists_row(self, session: Session):
        todo = _create(session, "Stored", "with description")
        rows = session.exec(select(Todo).where(Todo.id == todo.id)).all()
        assert len(rows) == 1
        assert rows[0].description == "with description"

    def test_empty_description_becomes_null(self, session: Session):
        todo = _create(session, "No details", "")
        assert todo.description is None

    def test_ids_are_unique(self, session: Session):
        first = _create(session, "one")
        second = _create(session, "two")
        assert first.id != second.id


class TestCreateTodoValidation:
    def test_title_required(self):
        with pytest.raises(ValidationError):
            CreateTodoInput()

    def test_empty_title_rejected(self):
        with pytest.raises(ValidationError):
            CreateTodoInput(title="")

    def test_blank_title_rejected(self):
        with pytest.raises(ValidationError):
            CreateTodoInput(title="   ")


class TestGetTodos:
    def test_empty(self, session: Session):
        assert get_todos(session) == []

    def test_insertion_order(self, session: Session):
        for title in ("first", "second", "third"):
            _create(session, title)
        assert [t.title for t in get_todos(session)] == ["first", "second", "third"]


class TestUpdateTodo:
    def test_updates_all_fields(self, session: Session):
        todo = _create(session, "Original Todo", "Original description")
        result = update_todo(session, UpdateTodoInput(
            id=todo.id,
            title="Updated Todo",
            description="Updated description",
            completed=True,
        ))
        assert result.id == todo.id
        assert result.title == "Updated Todo"
        assert result.description == "Updated description"
        assert result.completed is True

    def test_only_provided_fields_change(self, session: Session):
        todo = _create(session, "Original Todo", "Original description")
        created_at = todo.created_at
        result = update_todo(session, UpdateTodoInput(id=todo.id, title="Only Title Updated"))
        assert result.title == "Only Title Updated"
        assert result.description == "Original description"
        assert result.completed is False
        assert result.created_at == created_at

    def test_completed_unchanged_when_omitted(self, session: Session):
        todo = _create(session)
        toggle_todo(session, TodoIdInput(id=todo.id))
        result = update_todo(session, UpdateTodoInput(id=todo.id, description="2%"))
        assert result.completed is True

    def test_null_description_clears(self, session: Session):
        todo = _create(session, "Original Todo", "Original description")
        result = update_todo(session, UpdateTodoInput(id=todo.id, description=None))
        assert result.description is None
        assert result.title == "Original Todo"

    def test_omitted_description_kept(self, session: Session):
        todo = _create(session, "Original Todo", "Original description")
        result = update_todo(session, UpdateTodoInput(id=todo.id, completed=True))
        assert result.description == "Original description"

    def test_updated_at_strictly_increases(self, session: Session):
        todo = _create(session)
        before = todo.updated_at
        result = update_todo(session, UpdateTodoInput(id=todo.id, title="Changed"))
        assert result.updated_at > before
        assert result.created_at < result.updated_at

    def test_missing_id_raises_not_found(self, session: Session):
        with pytest.raises(TodoNotFoundError, match="Todo with id 999 not found"):
            update_todo(session, UpdateTodoInput(id=999, title="Non-existent Todo"))

    def test_storage_error_is_reraised(self, session: Session):
        todo = _create(session)
        error = OperationalError("UPDATE todo", {}, Exception("database is locked"))
        with patch.object(session, "commit", side_effect=error):
            with pytest.raises(OperationalError):
                update_todo(session, UpdateTodoInput(id=todo.id, title="Changed"))

    def test_lookup_error_is_logged_and_reraised(self, session: Session, caplog):
        error = OperationalError("SELECT todo", {}, Exception("no such table: todo"))
        with patch.object(session, "get", side_effect=error):
            with pytest.raises(OperationalError):
                update_todo(session, UpdateTodoInput(id=1, title="Changed"))
        assert "Todo update failed for id 1" in caplog.text


class TestLookupStorageErrors:
    def test_toggle_lookup_error_is_logged(self, session: Session, caplog):
        error = OperationalError("SELECT todo", {}, Exception("no such table: todo"))
        with patch.object(session, "get", side_effect=error):
            with pytest.raises(OperationalError):
                toggle_todo(session, TodoIdInput(id=7))
        assert "Todo toggle failed for id 7" in caplog.text

    def test_delete_lookup_error_is_logged(self, session: Session, caplog):
        error = OperationalError("SELECT todo", {}, Exception("no such table: todo"))
        with patch.object(session, "get", side_effect=error):
            with pytest.raises(OperationalError):
                delete_todo(session, TodoIdInput(id=7))
        assert "Todo deletion failed for id 7" in caplog.text


class TestUpdateTodoInput:
    def test_changes_excludes_omitted_fields(self):
        assert UpdateTodoInput(id=1, title="x").changes() == {"title": "x"}

    def test_changes_keeps_explicit_null_description(self):
        assert UpdateTodoInput(id=1, description=None).changes() == {"description": None}

    def test_null_title_rejected(self):
        with pytest.raises(ValidationError):
            UpdateTodoInput(id=1, title=None)

    def test_null_completed_rejected(self):
        with pytest.raises(ValidationError):
            UpdateTodoInput(id=1, completed=None)

    def test_empty_title_rejected(self):
        with pytest.raises(ValidationError):
            UpdateTodoInput(id=1, title="")


class TestToggleTodo:
    def test_false_to_true(self, session: Session):
        todo = _create(session, "Test Todo", "A todo for testing")
        result = toggle_todo(session, TodoIdInput(id=todo.id))
        assert result.completed is True
        assert result.title == "Test Todo"
        assert result.description == "A todo for testing"

    def test_twice_restores_original(self, session: Session):
        todo = _create(session)
        first = toggle_todo(session, TodoIdInput(id=todo.id)).updated_at
        result = toggle_todo(session, TodoIdInput(id=todo.id))
        assert result.completed is False
        assert result.updated_at > first

    def test_advances_updated_at(self, session: Session):
        todo = _create(session)
        before = todo.updated_at
        result = toggle_todo(session, TodoIdInput(id=todo.id))
        assert result.updated_at > before

    def test_missing_id_raises_not_found(self, session: Session):
        with pytest.raises(TodoNotFoundError, match="Todo with id 999 not found") as exc_info:
            toggle_todo(session, TodoIdInput(id=999))
        assert exc_info.value.todo_id == 999


class TestDeleteTodo:
    def test_deletes_existing(self, session: Session):
        todo = _create(session)
        result = delete_todo(session, TodoIdInput(id=todo.id))
        assert result.success is True
        assert session.get(Todo, todo.id) is None

    def test_missing_id_returns_false(self, session: Session):
        assert delete_todo(session, TodoIdInput(id=999)).success is False

    def test_other_todos_untouched(self, session: Session):
        first = _create(session, "Todo 1", "First todo")
        second = _create(session, "Todo 2", "Second todo")
        toggle_todo(session, TodoIdInput(id=second.id))

        assert delete_todo(session, TodoIdInput(id=first.id)).success is True

        remaining = get_todos(session)
        assert len(remaining) == 1
        assert remaining[0].id == second.id
        assert remaining[0].title == "Todo 2"
        assert remaining[0].description == "Second todo"
        assert remaining[0].completed is True
