import logging
import os
from contextlib import asynccontextmanager
from typing import Any, Dict, List, Optional

from fastapi import Depends, FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from . import schemas
from .config import Settings, load_settings
from .database import Database, get_db
from .errors import ApiError, ServiceUnavailableError, StorageError
from .routers import context as context_routes
from .routers import products as products_routes
from .routers import users as users_routes

settings = load_settings()

logging.basicConfig(
    level=settings.log_level,
    format="%(asctime)s | %(levelname)s | %(name)s | %(message)s",
)
logger = logging.getLogger(__name__)


def _failure(status_code: int, message: str) -> JSONResponse:
    body = schemas.Envelope(success=False, error=message)
    return JSONResponse(body.model_dump(), status_code=status_code)


# Replaces pydantic's wording for every error on these fields.
FIELD_MESSAGES = {
    "price": "price must be a non-negative number",
}


def _join_names(names: List[str]) -> str:
    if len(names) == 1:
        return names[0]
    if len(names) == 2:
        return f"{names[0]} and {names[1]}"
    return f"{', '.join(names[:-1])}, and {names[-1]}"


def _summarize_validation_errors(errors: List[Dict[str, Any]]) -> str:
    """Collapse FastAPI's validation errors into one client-facing sentence."""
    missing = [
        str(error["loc"][-1])
        for error in errors
        if error["type"] == "missing" and len(error["loc"]) > 1
    ]
    if missing:
        verb = "is" if len(missing) == 1 else "are"
        return f"{_join_names(missing)} {verb} required"

    results = schemas.format_errors(
        [{**error, "loc": error["loc"][1:] or error["loc"]} for error in errors]
    )
    messages = []
    for result in results:
        message = FIELD_MESSAGES.get(result.loc, f"{result.loc}: {result.msg}")
        if message not in messages:
            messages.append(message)
    return "; ".join(messages)


def create_app(
    database: Optional[Database] = None, app_settings: Optional[Settings] = None
) -> FastAPI:
    """Build the application.

    The database is acquired when the app starts serving and released when
    it stops. Passing ``database`` skips building one from configuration,
    which is how tests plug in SQLite.
    """
    app_settings = app_settings or settings

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        db = database or Database.from_config(app_settings.database)
        if app_settings.create_tables:
            logger.info("Creating missing tables")
            db.create_tables()
        app.state.database = db
        try:
            yield
        finally:
            db.shutdown()

    app = FastAPI(title=app_settings.app_name, lifespan=lifespan)

    @app.exception_handler(ApiError)
    async def api_error_handler(request: Request, exc: ApiError):
        if exc.status_code < 500:
            logger.warning(
                "%s %s -> %d: %s", request.method, request.url.path, exc.status_code, exc.message
            )
        return _failure(exc.status_code, exc.message)

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(request: Request, exc: RequestValidationError):
        message = _summarize_validation_errors(exc.errors())
        logger.warning("%s %s -> 400: %s", request.method, request.url.path, message)
        return _failure(400, message)

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException):
        return _failure(exc.status_code, str(exc.detail))

    @app.exception_handler(Exception)
    async def unhandled_exception_handler(request: Request, exc: Exception):
        logger.exception("Unhandled application error", exc_info=exc)
        return _failure(500, "Internal server error")

    @app.get("/health", response_model=schemas.Envelope)
    def health(db: Database = Depends(get_db)):
        try:
            db.ping()
        except StorageError as exc:
            logger.exception("Health check failed")
            raise ServiceUnavailableError("Database unavailable") from exc
        return schemas.Envelope(data={"status": "ok"})

    app.include_router(context_routes.router)
    app.include_router(products_routes.router)
    app.include_router(users_routes.router)
    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "catalog_api.main:app",
        host=os.getenv("HOST", "0.0.0.0"),
        port=int(os.getenv("PORT", "8000")),
    )
