"""Remote procedure endpoints for todos.

One route per procedure. getTodos is a query (GET); the rest are mutations
(POST) that take their input as a JSON body.
"""

from fastapi import APIRouter, Depends, HTTPException
from sqlmodel import Session

from todo_api import handlers
from todo_api.database import get_session
from todo_api.handlers import TodoNotFoundError
from todo_api.models import (
    CreateTodoInput,
    DeleteTodoResult,
    Todo,
    TodoIdInput,
    UpdateTodoInput,
)

router = APIRouter(prefix="/api/rpc", tags=["rpc"])


@router.get("/getTodos")
def get_todos(session: Session = Depends(get_session)) -> list[Todo]:
    """List all todos."""
    return handlers.get_todos(session)


@router.post("/createTodo")
def create_todo(body: CreateTodoInput, session: Session = Depends(get_session)) -> Todo:
    """Create a new todo."""
    return handlers.create_todo(session, body)


@router.post("/updateTodo")
def update_todo(body: UpdateTodoInput, session: Session = Depends(get_session)) -> Todo:
    """Update an existing todo. Only provided fields are changed."""
    try:
        return handlers.update_todo(session, body)
    except TodoNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e)) from e


@router.post("/toggleTodo")
def toggle_todo(body: TodoIdInput, session: Session = Depends(get_session)) -> Todo:
    """Flip the completed flag of a todo."""
    try:
        return handlers.toggle_todo(session, body)
    except TodoNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e)) from e


@router.post("/deleteTodo")
def delete_todo(
    body: TodoIdInput, session: Session = Depends(get_session)
) -> DeleteTodoResult:
    """Delete a todo by id."""
    return handlers.delete_todo(session, body)
