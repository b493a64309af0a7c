"""View state for the todo page.

Holds the task list, the id of the row being edited and its draft. State only
changes through the action methods below, and only from a server response:
a failed call is logged, remembered as ``error`` and leaves everything else
as it was. An action refused locally records its own reason as ``error``.
Remote calls run outside the lock; the response is applied under it.
"""

import copy
import logging
import threading
from typing import Optional

import httpx

from todo_web.client import RpcError, TodoRecord, TodoRpcClient

logger = logging.getLogger(__name__)

_CALL_ERRORS = (RpcError, httpx.HTTPError)


def _empty_draft() -> dict:
    return {"title": "", "description": ""}


class TodoViewState:
    """State container for the todo page.

    Every action takes the :class:`TodoRpcClient` to call with, so the view
    owns its state while the transport is passed in by the caller.
    """

    def __init__(self) -> None:
        self._todos: list[TodoRecord] = []
        self._loaded = False
        self._editing_id: Optional[int] = None
        self._draft: dict = _empty_draft()
        self._error: Optional[str] = None
        self._lock = threading.Lock()

    # -- reads ---------------------------------------------------------------

    @property
    def loaded(self) -> bool:
        return self._loaded

    @property
    def editing_id(self) -> Optional[int]:
        return self._editing_id

    def snapshot(self) -> dict:
        """Return a deep copy of the current state as plain data."""
        with self._lock:
            return {
                "todos": [todo.model_dump() for todo in self._todos],
                "editing_id": self._editing_id,
                "draft": copy.deepcopy(self._draft),
                "error": self._error,
            }

    # -- list ----------------------------------------------------------------

    def load(self, client: TodoRpcClient) -> bool:
        """Fetch the full list from the server, replacing the local copy."""
        try:
            todos = client.get_todos()
        except _CALL_ERRORS as exc:
            return self._fail("load todos", exc)
        with self._lock:
            self._todos = todos
            self._loaded = True
            self._error = None
        return True

    def create(
        self, client: TodoRpcClient, title: str, description: Optional[str] = None
    ) -> bool:
        """Create a todo and append the server's record. A blank title is refused."""
        if not title.strip():
            return self._refuse("Title is required")
        try:
            todo = client.create_todo(title, description or None)
        except _CALL_ERRORS as exc:
            return self._fail("create todo", exc)
        with self._lock:
            self._todos = [*self._todos, todo]
            self._error = None
        return True

    # -- row actions ---------------------------------------------------------

    def toggle(self, client: TodoRpcClient, todo_id: int) -> bool:
        if todo_id == self._editing_id:
            return self._refuse(f"Todo {todo_id} is being edited")
        try:
            todo = client.toggle_todo(todo_id)
        except _CALL_ERRORS as exc:
            return self._fail("toggle todo", exc)
        self._replace(todo)
        return True

    def delete(self, client: TodoRpcClient, todo_id: int) -> bool:
        """Delete a todo, then drop it locally.

        The row is removed whether or not the server still had it, since a
        ``success=False`` answer means it is already gone.
        """
        if todo_id == self._editing_id:
            return self._refuse(f"Todo {todo_id} is being edited")
        try:
            client.delete_todo(todo_id)
        except _CALL_ERRORS as exc:
            return self._fail("delete todo", exc)
        with self._lock:
            self._todos = [t for t in self._todos if t.id != todo_id]
            self._error = None
        return True

    # -- editing -------------------------------------------------------------

    def start_edit(self, todo_id: int) -> bool:
        """Enter editing for one incomplete row, replacing any edit in progress."""
        with self._lock:
            todo = next((t for t in self._todos if t.id == todo_id), None)
            if todo is not None and not todo.completed:
                self._editing_id = todo_id
                self._draft = {"title": todo.title, "description": todo.description or ""}
                self._error = None
                return True
        return self._refuse(f"Todo {todo_id} cannot be edited")

    def update_draft(self, title: str, description: str) -> None:
        with self._lock:
            if self._editing_id is not None:
                self._draft = {"title": title, "description": description}

    def cancel_edit(self) -> None:
        with self._lock:
            self._editing_id = None
            self._draft = _empty_draft()

    def save_edit(self, client: TodoRpcClient) -> bool:
        """Send the draft as an update and leave editing on success.

        A blank draft title or no edit in progress is refused without a call.
        On failure the row stays in editing with its draft intact.
        """
        with self._lock:
            todo_id = self._editing_id
            draft = dict(self._draft)
        if todo_id is None:
            return self._refuse("No todo is being edited")
        if not draft["title"].strip():
            return self._refuse("Title is required")
        try:
            todo = client.update_todo(
                todo_id,
                title=draft["title"],
                description=draft["description"] or None,
            )
        except _CALL_ERRORS as exc:
            return self._fail("update todo", exc)
        self._replace(todo)
        with self._lock:
            self._editing_id = None
            self._draft = _empty_draft()
        return True

    # -- private helpers -----------------------------------------------------

    def _replace(self, todo: TodoRecord) -> None:
        with self._lock:
            self._todos = [todo if t.id == todo.id else t for t in self._todos]
            self._error = None

    def _refuse(self, reason: str) -> bool:
        """Reject an action without calling the server."""
        logger.info("Refused todo action: %s", reason)
        with self._lock:
            self._error = reason
        return False

    def _fail(self, action: str, exc: Exception) -> bool:
        logger.error("Failed to %s: %s", action, exc)
        with self._lock:
            self._error = f"Failed to {action}"
        return False
