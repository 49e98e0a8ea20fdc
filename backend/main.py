"""
FastAPI application factory.

Responsibilities
----------------
* Instantiate the FastAPI app and its store context (``Database``), opened
  on startup and closed on shutdown.
* Register CORS, case-insensitive routing and request-logging middleware.
* Render domain errors and malformed request bodies (400) as
  ``{"message": ...}``, and anything unexpected as a generic 500.
* Mount the feature routers (auth, admin, permission, category).
* Expose a /health endpoint for container liveness checks.
"""

import time
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, Response
from starlette.middleware.base import BaseHTTPMiddleware

from auth.router import router as auth_router
from admin.router import router as admin_router
from category.router import router as category_router
from permission.router import router as permission_router
from core.config import settings
from core.errors import AppError, Internal
from core.logger import logger
from database import Database


# ---------------------------------------------------------------------------
# Middleware
# ---------------------------------------------------------------------------


class _CaseInsensitivePathMiddleware:
    """Lower-case the request path so /Auth/Login and /auth/login match."""

    def __init__(self, app):
        self.app = app

    async def __call__(self, scope, receive, send):
        if scope["type"] == "http":
            scope = dict(scope, path=scope["path"].lower())
        await self.app(scope, receive, send)


# Logs every inbound request: method, path, client IP, status, latency.
# Bodies (passwords, tokens) are never echoed – only URL and metadata.


class _RequestLogMiddleware(BaseHTTPMiddleware):
    """Log method, path, client IP, response status and latency (ms)."""

    async def dispatch(self, request: Request, call_next) -> Response:
        start = time.perf_counter()
        response: Response = await call_next(request)
        elapsed_ms = (time.perf_counter() - start) * 1000

        client_ip = request.client.host if request.client else "unknown"

        logger.info(
            "%s %s | client=%s status=%d latency=%.1fms",
            request.method,
            request.url.path,
            client_ip,
            response.status_code,
            elapsed_ms,
        )
        return response


# ---------------------------------------------------------------------------
# Error rendering
# ---------------------------------------------------------------------------


async def _app_error_handler(request: Request, exc: AppError) -> JSONResponse:
    return JSONResponse(status_code=exc.status_code, content={"message": exc.message})


async def _validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    # "password: Field required; email: Field required"
    problems = []
    for err in exc.errors():
        field = ".".join(str(part) for part in err["loc"][1:]) or "body"
        problems.append(f"{field}: {err['msg']}")
    return JSONResponse(status_code=400, content={"message": "; ".join(problems)})


async def _unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    err = Internal()
    return JSONResponse(
        status_code=err.status_code,
        content={"message": err.message, "error": type(exc).__name__},
    )


# ---------------------------------------------------------------------------
# Factory
# ---------------------------------------------------------------------------


def create_app(database: Optional[Database] = None, create_schema: bool = False) -> FastAPI:
    """
    Build the application around *database* (defaults to one for
    ``settings.database_url``).  ``create_schema`` creates missing tables on
    startup; production schemas are managed by Alembic instead.
    """
    app = FastAPI(title="Category Access Service", version="1.0.0")
    app.state.db = database or Database(settings.database_url)

    # In development we allow localhost:8000.  Tighten before deploying.
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_methods=["GET", "POST", "PUT", "DELETE"],
        allow_headers=["Authorization", "Content-Type"],
    )
    app.add_middleware(_RequestLogMiddleware)
    # Added last so it runs first, before routing and logging see the path
    app.add_middleware(_CaseInsensitivePathMiddleware)

    app.add_exception_handler(AppError, _app_error_handler)
    app.add_exception_handler(RequestValidationError, _validation_error_handler)
    app.add_exception_handler(Exception, _unhandled_error_handler)

    # permission_router before category_router: its static segments
    # (/category/user-permissions) must win over /category/{category_id}.
    app.include_router(auth_router)
    app.include_router(admin_router)
    app.include_router(permission_router)
    app.include_router(category_router)

    @app.on_event("startup")
    async def _on_startup():
        app.state.db.open(create_schema=create_schema)
        logger.info("Category Access service starting up")

    @app.on_event("shutdown")
    async def _on_shutdown():
        app.state.db.close()
        logger.info("Category Access service shutting down")

    @app.get("/health")
    def health():
        return {"status": "ok"}

    return app


app = create_app()
