"""Typed httpx client for the todo remote procedures."""

import logging
from datetime import datetime
from typing import Any, Callable, Optional

import httpx
from pydantic import BaseModel, ValidationError

logger = logging.getLogger(__name__)


class TodoRecord(BaseModel):
    id: int
    title: str
    description: Optional[str] = None
    completed: bool
    created_at: datetime
    updated_at: datetime


class RpcError(Exception):
    """A procedure call answered with a non-2xx status."""

    def __init__(self, procedure: str, status_code: int, detail: Any) -> None:
        super().__init__(f"{procedure} failed ({status_code}): {detail}")
        self.procedure = procedure
        self.status_code = status_code
        self.detail = detail


class _Unset:
    """Marker for an update field the caller did not supply."""

    def __repr__(self) -> str:
        return "UNSET"


UNSET: Any = _Unset()


class TodoRpcClient:
    """Calls the five todo procedures over an ``httpx.Client``.

    Parameters
    ----------
    http : httpx.Client
        Client whose ``base_url`` points at the todo API. Any httpx client
        works, including FastAPI's ``TestClient``.
    """

    def __init__(self, http: httpx.Client) -> None:
        self._http = http

    # -- queries --------------------------------------------------------------

    def get_todos(self) -> list[TodoRecord]:
        return self._call(
            "GET", "getTodos", parse=lambda data: [TodoRecord.model_validate(item) for item in data]
        )

    # -- mutations ------------------------------------------------------------

    def create_todo(self, title: str, description: Optional[str] = None) -> TodoRecord:
        body = {"title": title, "description": description}
        return self._call("POST", "createTodo", body, parse=TodoRecord.model_validate)

    def update_todo(
        self,
        todo_id: int,
        *,
        title: str = UNSET,
        description: Optional[str] = UNSET,
        completed: bool = UNSET,
    ) -> TodoRecord:
        """Update a todo. Only arguments that are passed are sent.

        ``description=None`` is sent as an explicit null and clears the
        description; leaving it out keeps the stored value.
        """
        fields = {"title": title, "description": description, "completed": completed}
        body = {"id": todo_id}
        body.update({k: v for k, v in fields.items() if v is not UNSET})
        return self._call("POST", "updateTodo", body, parse=TodoRecord.model_validate)

    def toggle_todo(self, todo_id: int) -> TodoRecord:
        return self._call("POST", "toggleTodo", {"id": todo_id}, parse=TodoRecord.model_validate)

    def delete_todo(self, todo_id: int) -> bool:
        """Delete a todo. Returns False when no todo had that id."""
        return self._call(
            "POST", "deleteTodo", {"id": todo_id}, parse=lambda data: bool(data["success"])
        )

    # -- private helpers ------------------------------------------------------

    def _call(
        self,
        method: str,
        procedure: str,
        body: Optional[dict] = None,
        parse: Callable[[Any], Any] = lambda data: data,
    ) -> Any:
        """Call one procedure and return its parsed result.

        A non-2xx status, or a 2xx body that is not JSON or does not fit
        *parse*, raises :class:`RpcError`.
        """
        url = f"/api/rpc/{procedure}"
        if method == "GET":
            response = self._http.get(url)
        else:
            response = self._http.post(url, json=body)

        if response.is_error:
            try:
                detail = response.json().get("detail")
            except (ValueError, AttributeError):
                detail = response.text
            logger.debug("%s returned %s: %s", procedure, response.status_code, detail)
            raise RpcError(procedure, response.status_code, detail)

        try:
            return parse(response.json())
        except (ValidationError, ValueError, KeyError, TypeError) as exc:
            logger.debug("%s returned a malformed body: %s", procedure, exc)
            raise RpcError(
                procedure, response.status_code, f"Malformed response: {exc}"
            ) from exc
