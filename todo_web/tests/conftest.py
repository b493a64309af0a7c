import pytest
from fastapi.testclient import TestClient
from sqlmodel import Session, SQLModel, create_engine
from sqlmodel.pool import StaticPool

from todo_api.database import get_session
from todo_api.main import app as api_app
from todo_web.client import TodoRpcClient
from todo_web.main import app as web_app
from todo_web.main import get_rpc_client, get_view_state
from todo_web.state import TodoViewState


@pytest.fixture(name="api_client")
def api_client_fixture():
    """Run the real todo API on a fresh in-memory database."""
    engine = create_engine(
        "sqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    SQLModel.metadata.create_all(engine)
    with Session(engine) as session:
        def get_session_override():
            yield session

        api_app.dependency_overrides[get_session] = get_session_override
        yield TestClient(api_app)
        api_app.dependency_overrides.clear()


@pytest.fixture(name="rpc")
def rpc_fixture(api_client: TestClient) -> TodoRpcClient:
    return TodoRpcClient(api_client)


@pytest.fixture(name="state")
def state_fixture() -> TodoViewState:
    return TodoViewState()


@pytest.fixture(name="web")
def web_fixture(rpc: TodoRpcClient, state: TodoViewState):
    """Front end wired to the in-memory API and a fresh view state."""
    web_app.dependency_overrides[get_rpc_client] = lambda: rpc
    web_app.dependency_overrides[get_view_state] = lambda: state
    yield TestClient(web_app)
    web_app.dependency_overrides.clear()
