"""FastAPI front end for the todo list.

Serves the page and the JSON actions its script calls. Every action goes
through :class:`TodoViewState`, which talks to the todo API over httpx.
"""

import logging
import os
from contextlib import asynccontextmanager
from typing import Optional

import httpx
from fastapi import Depends, FastAPI, Request, Response
from pydantic import BaseModel, Field

from todo_web.client import TodoRpcClient
from todo_web.render import render_page
from todo_web.state import TodoViewState

logger = logging.getLogger(__name__)
logging.basicConfig(level=os.getenv("LOG_LEVEL", "INFO").upper())

TODO_API_URL = os.getenv("TODO_API_URL", "http://localhost:8000")
TODO_API_TIMEOUT = float(os.getenv("TODO_API_TIMEOUT", "10"))


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Own the view state and one httpx client to the todo API for the life of the app."""
    logger.info("Using todo API at %s", TODO_API_URL)
    app.state.view_state = TodoViewState()
    with httpx.Client(base_url=TODO_API_URL, timeout=TODO_API_TIMEOUT) as http:
        app.state.http = http
        yield


app = FastAPI(title="Todo List", lifespan=lifespan)


def get_rpc_client(request: Request) -> TodoRpcClient:
    return TodoRpcClient(request.app.state.http)


def get_view_state(request: Request) -> TodoViewState:
    return request.app.state.view_state


class CreateTodoRequest(BaseModel):
    title: str = Field(..., description="Title of the new todo")
    description: Optional[str] = Field(None, description="Optional description")


class SaveTodoRequest(BaseModel):
    title: str = Field(..., description="Edited title")
    description: str = Field("", description="Edited description, empty to clear")


def _result(state: TodoViewState, ok: bool) -> dict:
    return {"success": ok, "error": None if ok else state.snapshot()["error"]}


@app.get("/health")
def health_check():
    """Health check endpoint."""
    return {"status": "healthy", "api": TODO_API_URL}


@app.get("/")
def index(
    state: TodoViewState = Depends(get_view_state),
    client: TodoRpcClient = Depends(get_rpc_client),
):
    """Render the todo page, fetching the list on the first visit."""
    if not state.loaded:
        state.load(client)
    return Response(content=render_page(state.snapshot()), media_type="text/html")


@app.get("/api/view")
def view(state: TodoViewState = Depends(get_view_state)) -> dict:
    """Return the current view state as JSON."""
    return state.snapshot()


@app.post("/api/todos")
def create(
    body: CreateTodoRequest,
    state: TodoViewState = Depends(get_view_state),
    client: TodoRpcClient = Depends(get_rpc_client),
):
    return _result(state, state.create(client, body.title, body.description))


@app.post("/api/todos/cancel")
def cancel_edit(state: TodoViewState = Depends(get_view_state)):
    state.cancel_edit()
    return {"success": True, "error": None}


@app.post("/api/todos/{todo_id}/edit")
def start_edit(todo_id: int, state: TodoViewState = Depends(get_view_state)):
    return _result(state, state.start_edit(todo_id))


@app.post("/api/todos/{todo_id}/save")
def save_edit(
    todo_id: int,
    body: SaveTodoRequest,
    state: TodoViewState = Depends(get_view_state),
    client: TodoRpcClient = Depends(get_rpc_client),
):
    """Commit the edit form of the row being edited."""
    if state.editing_id != todo_id:
        return {"success": False, "error": f"Todo {todo_id} is not being edited"}
    state.update_draft(body.title, body.description)
    return _result(state, state.save_edit(client))


@app.post("/api/todos/{todo_id}/toggle")
def toggle(
    todo_id: int,
    state: TodoViewState = Depends(get_view_state),
    client: TodoRpcClient = Depends(get_rpc_client),
):
    return _result(state, state.toggle(client, todo_id))


@app.delete("/api/todos/{todo_id}")
def delete(
    todo_id: int,
    state: TodoViewState = Depends(get_view_state),
    client: TodoRpcClient = Depends(get_rpc_client),
):
    return _result(state, state.delete(client, todo_id))
