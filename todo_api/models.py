"""Todo model and the input/output shapes of the remote procedures."""

from datetime import datetime, timezone
from typing import Any, Optional

from pydantic import BaseModel, field_validator
from sqlmodel import Field, SQLModel


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class TodoBase(SQLModel):
    """Fields shared by the table and the create input."""
    title: str = Field(min_length=1)
    description: Optional[str] = Field(default=None)


class Todo(TodoBase, table=True):
    """Todo database table."""
    id: Optional[int] = Field(default=None, primary_key=True)
    completed: bool = Field(default=False)
    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime = Field(default_factory=utcnow)


def _reject_blank_title(value: Optional[str]) -> Optional[str]:
    if value is not None and not value.strip():
        raise ValueError("Title is required")
    return value


def _blank_description_to_none(value: Optional[str]) -> Optional[str]:
    return value or None


class CreateTodoInput(TodoBase):
    """Input for createTodo. Title is required, description may be omitted or null."""

    @field_validator("title")
    @classmethod
    def validate_title(cls, v: str) -> str:
        return _reject_blank_title(v)

    @field_validator("description")
    @classmethod
    def validate_description(cls, v: Optional[str]) -> Optional[str]:
        return _blank_description_to_none(v)


class UpdateTodoInput(SQLModel):
    """Input for updateTodo.

    Every field except ``id`` may be omitted. Omitting ``description`` leaves
    it unchanged while sending ``null`` clears it, so presence is tracked
    through :meth:`changes` rather than by comparing against ``None``.
    """
    id: int
    title: Optional[str] = Field(default=None, min_length=1)
    description: Optional[str] = None
    completed: Optional[bool] = None

    @field_validator("title")
    @classmethod
    def validate_title(cls, v: Optional[str]) -> str:
        if v is None:
            raise ValueError("Title cannot be null")
        return _reject_blank_title(v)

    @field_validator("completed")
    @classmethod
    def validate_completed(cls, v: Optional[bool]) -> bool:
        if v is None:
            raise ValueError("Completed cannot be null")
        return v

    @field_validator("description")
    @classmethod
    def validate_description(cls, v: Optional[str]) -> Optional[str]:
        return _blank_description_to_none(v)

    def changes(self) -> dict[str, Any]:
        """Return only the fields the caller supplied, keyed by column name."""
        return self.model_dump(exclude_unset=True, exclude={"id"})


class TodoIdInput(BaseModel):
    """Input for toggleTodo and deleteTodo."""
    id: int


class DeleteTodoResult(BaseModel):
    success: bool
