"""
FastAPI app entry point aggregating per-domain routers under quizbank/routes.
Run with `uvicorn quizbank.api:app`.
"""
from __future__ import annotations

from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from . import __version__
from .db import close_database, initialize_database
from .errors import InsufficientQuestionsError, ThemeNameConflictError, ValidationError


@asynccontextmanager
async def lifespan(app: FastAPI):
    initialize_database()
    yield
    close_database()


app = FastAPI(title="quizbank-api", version=__version__, lifespan=lifespan)


def _error_handler(status_code: int):
    async def handler(request: Request, exc: Exception) -> JSONResponse:
        return JSONResponse(status_code=status_code, content={"detail": str(exc)})
    return handler


# Domain errors -> HTTP status
app.add_exception_handler(ValidationError, _error_handler(400))
app.add_exception_handler(ThemeNameConflictError, _error_handler(409))
app.add_exception_handler(InsufficientQuestionsError, _error_handler(409))


# Include routers (split by domain)
from .routes import base as base_routes
from .routes import themes as themes_routes
from .routes import questions as questions_routes
from .routes import quiz as quiz_routes
from .routes import settings as settings_routes
from .routes import logs as logs_routes

app.include_router(base_routes.router)
app.include_router(themes_routes.router)
app.include_router(questions_routes.router)
app.include_router(quiz_routes.router)
app.include_router(settings_routes.router)
app.include_router(logs_routes.router)
