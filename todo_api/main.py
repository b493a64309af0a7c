"""FastAPI application for the todo list backend.

Only the front end calls the procedures, so CORS admits its origin plus any
extra origins listed in ``CORS_ORIGINS``.
"""

import logging
import os
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from todo_api.database import create_db_and_tables, engine
from todo_api.routes.rpc import router as rpc_router

logging.basicConfig(level=os.getenv("LOG_LEVEL", "INFO").upper())

TODO_WEB_ORIGIN = os.getenv("TODO_WEB_ORIGIN", "http://localhost:8080")


def allowed_origins() -> list[str]:
    """Return the front end origin followed by any extra configured origins."""
    extra = os.getenv("CORS_ORIGINS", "").split(",")
    origins = [TODO_WEB_ORIGIN]
    origins.extend(o.strip() for o in extra if o.strip() and o.strip() != TODO_WEB_ORIGIN)
    return origins


@asynccontextmanager
async def lifespan(app: FastAPI):
    create_db_and_tables()
    yield


app = FastAPI(title="Todo List API", lifespan=lifespan)

# Queries are GETs and mutations are JSON POSTs; nothing else is served.
app.add_middleware(
    CORSMiddleware,
    allow_origins=allowed_origins(),
    allow_methods=["GET", "POST"],
    allow_headers=["Content-Type"],
)

app.include_router(rpc_router)

PROCEDURES = sorted(route.path.rsplit("/", 1)[-1] for route in rpc_router.routes)


@app.get("/api/health")
def health_check():
    """Report liveness, the exposed procedures and the database backend."""
    return {
        "status": "healthy",
        "service": "todo-api",
        "procedures": PROCEDURES,
        "database": engine.dialect.name,
    }
