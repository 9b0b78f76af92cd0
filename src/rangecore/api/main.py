import logging
from pathlib import Path
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from rangecore.config import settings
from rangecore.exceptions import NotFoundError, ValidationError
from rangecore.api.middleware import limit_body_size, request_context

# Routers
from rangecore.api.routers import drills, permissions, system, templates

# Configure logging
logging.basicConfig(level=getattr(logging, settings.logging.level.upper(), logging.INFO))
logger = logging.getLogger("rangecore.api")


def _error(request: Request, status_code: int, payload: dict) -> JSONResponse:
    rid = getattr(request.state, "request_id", None)
    if rid:
        payload["request_id"] = rid
    return JSONResponse(status_code=status_code, content=payload)


def create_app(db_path: Optional[Path] = None) -> FastAPI:
    """
    Build the HTTP adapter over the rules core.
    `db_path` points the template store at another SQLite file (tests use tmp_path).
    """
    if db_path:
        settings.storage.db_path = db_path
        import rangecore.api.deps as deps
        deps._db_instance = None  # reset global instance

    app = FastAPI(title="rangecore API", version=settings.app.version)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.middleware("http")(limit_body_size)
    app.middleware("http")(request_context)

    app.include_router(system.router)
    app.include_router(permissions.router)
    app.include_router(drills.router)
    app.include_router(templates.router)

    @app.exception_handler(NotFoundError)
    async def not_found_handler(request: Request, exc: NotFoundError):
        return _error(request, 404, {"error": "not_found", "detail": str(exc)})

    @app.exception_handler(ValidationError)
    async def validation_handler(request: Request, exc: ValidationError):
        return _error(
            request,
            422,
            {"error": "invalid_params", "detail": str(exc), "param": exc.param, "errors": exc.errors},
        )

    @app.exception_handler(Exception)
    async def unhandled_exception_handler(request: Request, exc: Exception):
        if isinstance(exc, StarletteHTTPException):
            return JSONResponse(status_code=exc.status_code, content={"detail": exc.detail})

        rid = getattr(request.state, "request_id", None)
        logger.exception("Unhandled error", extra={"path": str(request.url), "request_id": rid})
        return _error(request, 500, {"error": "internal_error", "detail": "Unexpected server error"})

    return app

# Module-level app for uvicorn entrypoint
app = create_app()
