"""
Todo AI Assistant: HTTP transport.

Thin FastAPI layer over TodoAIService. Request bodies are validated by the
pydantic request models; every failure is answered as ``{"error": message}``
with the status code its error type carries.
"""

from __future__ import annotations

import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from src.config import settings
from src.core.errors import AnalysisFailedError, TodoAIError
from src.core.todo_service import TodoAIService
from src.data.models import ParseTodoRequest, SummarizeTodosRequest

logger = logging.getLogger(__name__)

openapi_tags = [
    {"name": "health", "description": "Service health and status endpoints."},
    {"name": "ai", "description": "Natural-language todo parsing and todo-set summaries."},
]


def _service(request: Request) -> TodoAIService:
    return request.app.state.todo_service


def create_app(service: TodoAIService | None = None) -> FastAPI:
    """Build the application. ``service`` defaults to one built from settings."""
    app = FastAPI(
        title="Todo AI Assistant",
        description="AI parsing and summarization for a personal todo application.",
        version="0.1.0",
        openapi_tags=openapi_tags,
    )
    app.state.todo_service = service or TodoAIService.from_settings(settings)

    allow_all = settings.CORS_ALLOW_ORIGINS == ["*"] or not settings.CORS_ALLOW_ORIGINS
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"] if allow_all else settings.CORS_ALLOW_ORIGINS,
        allow_credentials=not allow_all,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.exception_handler(TodoAIError)
    async def todo_ai_error_handler(request: Request, exc: TodoAIError) -> JSONResponse:
        return JSONResponse(status_code=exc.status_code, content={"error": exc.user_message})

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(
        request: Request, exc: RequestValidationError
    ) -> JSONResponse:
        logger.info("Rejected request body on %s: %s", request.url.path, exc.errors())
        return JSONResponse(status_code=400, content={"error": "The request is not valid."})

    @app.exception_handler(Exception)
    async def unexpected_error_handler(request: Request, exc: Exception) -> JSONResponse:
        logger.error(
            "Unhandled error on %s: %s", request.url.path, exc, exc_info=settings.is_development,
        )
        return JSONResponse(
            status_code=500, content={"error": AnalysisFailedError.default_message},
        )

    @app.get("/", summary="Health Check", tags=["health"])
    def health_check():
        return {"message": "Healthy", "provider": settings.LLM_PROVIDER}

    @app.post("/api/ai/parse-todo", summary="Parse a todo from free text", tags=["ai"])
    async def parse_todo(body: ParseTodoRequest, request: Request):
        result = await _service(request).parse_todo(body.text, body.current_local_datetime)
        return result.model_dump()

    @app.post("/api/ai/summarize-todos", summary="Summarize a todo set", tags=["ai"])
    async def summarize_todos(body: SummarizeTodosRequest, request: Request):
        summary = await _service(request).summarize_todos(
            body.todos, body.period, body.current_local_datetime,
        )
        return summary.model_dump(by_alias=True)

    return app


app = create_app()
