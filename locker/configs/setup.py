from contextlib import asynccontextmanager
from typing import Any, Dict, List, Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from pymongo.errors import DuplicateKeyError, PyMongoError
from scalar_fastapi import get_scalar_api_reference
from starlette import status
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.responses import JSONResponse

from locker.api import (
    categorize_router,
    documents_router,
    folders_router,
    shared_router,
    shares_router,
    trash_router,
)
from locker.api.deps import close_categorization_service
from locker.configs.settings import settings
from locker.core.exceptions import AppError
from locker.databases import mongodb
from locker.middlewares import init_sentry
from locker.models import DOCUMENT_MODELS
from locker.schemas.response import ApiError, ErrorDetail
from locker.services.storage_service import admin_storage
from locker.utils import get_logger, ok, setup_logging

logger = get_logger(__name__)

API_ROUTERS = [
    (documents_router, "documents"),
    (trash_router, "trash"),
    (shares_router, "shares"),
    (folders_router, "folders"),
    (categorize_router, "categorize"),
]


def _configure_logging() -> None:
    prod = settings.APP_ENV == "prod"
    setup_logging(
        level="DEBUG" if settings.APP_DEBUG else "INFO",
        app_name=settings.APP_NAME,
        enable_json=prod,
        log_file="logs/app.log" if prod else None,
    )


def _configure_sentry() -> None:
    if not settings.SENTRY_DSN or settings.APP_ENV != "prod":
        logger.info("Sentry monitoring disabled")
        return
    init_sentry(
        dsn=settings.SENTRY_DSN,
        environment=settings.APP_ENV,
        release=settings.RELEASE,
        traces_sample_rate=settings.SENTRY_TRACES_SAMPLE_RATE,
        profiles_sample_rate=settings.SENTRY_PROFILES_SAMPLE_RATE,
        send_default_pii=settings.SENTRY_SEND_DEFAULT_PII,
    )
    logger.info("Sentry monitoring initialized")


async def _prepare_bucket() -> None:
    """The API still starts while MinIO is down; document routes answer 502 until it is back."""
    try:
        await admin_storage().ensure_bucket()
        logger.info(f"Bucket '{settings.MINIO_BUCKET}' is ready")
    except AppError as e:
        logger.error(f"Object storage unavailable at startup: {e.message}")


@asynccontextmanager
async def lifespan(app: FastAPI):
    _configure_logging()
    logger.info(f"Starting {settings.APP_NAME} ({settings.APP_ENV})")
    _configure_sentry()
    await mongodb.connect(document_models=DOCUMENT_MODELS)
    await _prepare_bucket()
    try:
        yield
    finally:
        logger.info(f"Shutting down {settings.APP_NAME}")
        await close_categorization_service()
        await mongodb.disconnect()


def _error_response(
    message: str,
    status_code: int,
    code: Optional[str] = None,
    errors: Optional[List[Dict[str, Any]]] = None,
) -> JSONResponse:
    body = ApiError(
        message=message,
        code=code,
        errors=[ErrorDetail(**e) for e in errors] if errors else None,
    ).model_dump(mode="json", exclude_none=True)
    return JSONResponse(content=body, status_code=status_code)


async def _handle_app_error(request: Request, exc: AppError) -> JSONResponse:
    if exc.status_code >= 500:
        logger.error(f"{request.method} {request.url.path} failed: {exc.message}")
    errors = list(exc.errors or [])
    if exc.field:
        errors.append({"code": exc.code, "message": exc.message, "field": exc.field})
    return _error_response(exc.message, exc.status_code, exc.code, errors)


async def _handle_http_exception(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    return _error_response(str(exc.detail), exc.status_code)


async def _handle_validation_error(request: Request, exc: RequestValidationError) -> JSONResponse:
    errors = [
        {
            "code": error.get("type", "validation_error"),
            "message": error.get("msg", ""),
            "field": ".".join(str(part) for part in error.get("loc", []) if part != "body") or None,
        }
        for error in exc.errors()
    ]
    return _error_response("Validation error", status.HTTP_422_UNPROCESSABLE_ENTITY, "validation_error", errors)


async def _handle_database_error(request: Request, exc: PyMongoError) -> JSONResponse:
    # A racing insert that lost to a unique index
    if isinstance(exc, DuplicateKeyError):
        return _error_response("Resource already exists", status.HTTP_409_CONFLICT, "conflict")
    logger.error(f"Metadata store error on {request.method} {request.url.path}: {exc}")
    return _error_response("Document metadata is temporarily unavailable", status.HTTP_502_BAD_GATEWAY, "storage_unavailable")


def install_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(AppError, _handle_app_error)
    app.add_exception_handler(StarletteHTTPException, _handle_http_exception)
    app.add_exception_handler(RequestValidationError, _handle_validation_error)
    app.add_exception_handler(PyMongoError, _handle_database_error)


def include_routers(app: FastAPI) -> None:
    for router, name in API_ROUTERS:
        app.include_router(router, prefix=f"/api/v1/{name}")
    # Share links are handed to people without an account
    app.include_router(shared_router, prefix="/shared")

    @app.get("/health", include_in_schema=False)
    async def health():
        database = "up" if await mongodb.ping() else "down"
        return ok(data={"status": "ok", "database": database}, message=f"{settings.APP_NAME} is running")

    if settings.APP_ENV == "dev":
        @app.get("/scalar", include_in_schema=False)
        async def scalar_html():
            return get_scalar_api_reference(openapi_url=app.openapi_url, title=settings.APP_NAME)


def create_app() -> FastAPI:
    app = FastAPI(
        title=settings.APP_NAME,
        description="Personal document locker: storage, trash, share links and smart folders",
        version="1.0.0",
        debug=settings.APP_DEBUG,
        lifespan=lifespan,
        docs_url="/docs" if settings.APP_DEBUG else None,
        redoc_url=None,
    )
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS,
        allow_credentials=settings.CORS_CREDENTIALS,
        allow_methods=settings.CORS_METHODS,
        allow_headers=settings.CORS_HEADERS,
        expose_headers=settings.CORS_EXPOSE_HEADERS,
    )
    install_exception_handlers(app)
    include_routers(app)
    return app
