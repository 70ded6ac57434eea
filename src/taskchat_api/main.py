from __future__ import annotations

import logging
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from .errors import ServiceError
from .routers import chats as chats_router
from .routers import tasks as tasks_router
from .settings import Settings, get_settings
from .stores import ChatStore, TaskStore, build_stores

logger = logging.getLogger(__name__)

openapi_tags = [
    {"name": "health", "description": "Service health and status endpoints."},
    {"name": "tasks", "description": "CRUD operations for tasks held in the document store."},
    {"name": "chats", "description": "Append and read chat messages held in the realtime store."},
]


def configure_logging(level: str) -> None:
    logging.basicConfig(
        level=level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


async def service_error_handler(request: Request, exc: ServiceError) -> JSONResponse:
    """
    Return ``{"message": ...}`` with the status code carried by the error.
    Store errors additionally carry ``{"error": {"type", "detail"}}``.
    """
    return JSONResponse(status_code=exc.status_code, content=exc.to_content())


async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """
    Return a consistent JSON structure for request validation errors.

    Response format:
        {
            "error": "ValidationError",
            "message": "Request validation failed",
            "detail": [... pydantic/fastapi error details ...]
        }
    """
    return JSONResponse(
        status_code=400,
        content={
            "error": "ValidationError",
            "message": "Request validation failed",
            "detail": jsonable_encoder(exc.errors()),
        },
    )


# PUBLIC_INTERFACE
def create_app(
    settings: Optional[Settings] = None,
    task_store: Optional[TaskStore] = None,
    chat_store: Optional[ChatStore] = None,
) -> FastAPI:
    """
    Build the FastAPI application.

    Stores not passed in are built once from settings and kept on
    ``app.state`` for the lifetime of the process.
    """
    settings = settings or get_settings()
    if task_store is None or chat_store is None:
        built_tasks, built_chats = build_stores(settings)
        task_store = task_store or built_tasks
        chat_store = chat_store or built_chats

    app = FastAPI(
        title="Task & Chat Backend",
        description="Task CRUD over a document store and chat messages over a realtime store.",
        version="0.1.0",
        openapi_tags=openapi_tags,
    )
    app.state.settings = settings
    app.state.task_store = task_store
    app.state.chat_store = chat_store

    allow_all = (settings.cors_allow_origins == ["*"]) or (len(settings.cors_allow_origins) == 0)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"] if allow_all else settings.cors_allow_origins,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.add_exception_handler(ServiceError, service_error_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)

    @app.get("/", summary="Health Check", tags=["health"])
    def health_check():
        """
        Health check endpoint.

        Returns:
            A JSON object indicating service health.
        """
        return {"message": "Healthy", "backend": settings.store_backend}

    app.include_router(tasks_router.router)
    app.include_router(chats_router.router)
    return app


# PUBLIC_INTERFACE
def run() -> None:
    """Serve the application with uvicorn on the configured host and port."""
    import uvicorn

    settings = get_settings()
    configure_logging(settings.log_level)
    app = create_app(settings)
    logger.info("Server running on port %s", settings.port)
    uvicorn.run(app, host=settings.host, port=settings.port, log_level=settings.log_level.lower())


if __name__ == "__main__":
    run()
