"""Task Tracker API: FastAPI entry point.

Registers middleware, routers, error handlers and lifecycle hooks. Each
vertical adds its own router under /api/{vertical}/.
"""

import logging
import os
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from api.middleware import CallerMiddleware
from core.database import close_db
from core.errors import InvalidInput, TaskTrackerError
from core.logging_setup import setup_logging

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Settings
# ---------------------------------------------------------------------------

CORS_ORIGINS = os.getenv(
    "CORS_ORIGINS", "http://localhost:3000,http://localhost:5173"
).split(",")
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
LOG_FILE = os.getenv("LOG_FILE")
VERSION = "0.1.0"


# ---------------------------------------------------------------------------
# Lifespan
# ---------------------------------------------------------------------------

@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application startup/shutdown hooks."""
    setup_logging(level=LOG_LEVEL, log_file=LOG_FILE)
    logger.info("Task Tracker API started")
    yield
    logger.info("Task Tracker API shutting down")
    await close_db()


# ---------------------------------------------------------------------------
# App
# ---------------------------------------------------------------------------

app = FastAPI(
    title="Task Tracker",
    description="Task lifecycle and per-user workload analytics",
    version=VERSION,
    lifespan=lifespan,
)

# CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Caller identity
app.add_middleware(CallerMiddleware)


# ---------------------------------------------------------------------------
# Error handling
# ---------------------------------------------------------------------------

@app.exception_handler(TaskTrackerError)
async def task_tracker_error_handler(request: Request, exc: TaskTrackerError):
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


@app.exception_handler(RequestValidationError)
async def request_validation_error_handler(request: Request, exc: RequestValidationError):
    """Malformed payloads, paths and queries are tagged like any other bad input."""
    error = InvalidInput(_describe_validation_error(exc.errors()))
    return JSONResponse(status_code=error.status_code, content=error.to_dict())


def _describe_validation_error(errors) -> str:
    if not errors:
        return "Invalid request"
    first = errors[0]
    field = ".".join(
        str(part) for part in first.get("loc", ()) if part not in ("body", "query", "path")
    )
    message = first.get("msg", "invalid value")
    return f"Invalid {field}: {message}" if field else f"Invalid request: {message}"


# ---------------------------------------------------------------------------
# Routers: verticals register here
# ---------------------------------------------------------------------------

from verticals.tasks.router import router as tasks_router  # noqa: E402

app.include_router(tasks_router, prefix="/api/tasks", tags=["Tasks"])


# ---------------------------------------------------------------------------
# Health & root
# ---------------------------------------------------------------------------

@app.get("/health")
async def health():
    return {"status": "healthy", "version": VERSION}


@app.get("/")
async def root():
    return {
        "name": "Task Tracker",
        "version": VERSION,
        "docs": "/docs",
        "verticals": ["tasks"],
    }
