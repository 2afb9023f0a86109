"""
FastAPI Server для Saratov Quest
Запускает API endpoints для фронтенда
"""

from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from loguru import logger
from slowapi import Limiter, _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded
from slowapi.middleware import SlowAPIMiddleware
from slowapi.util import get_remote_address
from sqlalchemy.exc import SQLAlchemyError
from starlette.exceptions import HTTPException as StarletteHTTPException

from config.config import (
    API_HOST,
    API_PORT,
    API_RATE_LIMIT,
    CREATE_TABLES_ON_STARTUP,
    ENVIRONMENT,
    SEED_ON_STARTUP,
    WEBAPP_URL,
    is_development,
    validate_config,
)
from config.logging import setup_logging
from config.sentry import init_sentry
from src.api.router import router as api_router
from src.core.exceptions import AppError
from src.database.engine import dispose_engine, get_session_maker, init_db
from src.database.seed import seed_database

# Setup logging at module level (must run before app creation)
# This ensures logging works when uvicorn imports the module
setup_logging()
init_sentry()

API_VERSION = "1.0.0"


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Lifespan context manager для startup/shutdown events
    """
    # Startup
    logger.info("Starting Saratov Quest API Server...")

    # Production schema is managed by Alembic: alembic upgrade head
    if CREATE_TABLES_ON_STARTUP:
        await init_db()

    if SEED_ON_STARTUP:
        async with get_session_maker()() as session:
            await seed_database(session)

    yield

    # Shutdown
    logger.info("Shutting down Saratov Quest API Server...")
    await dispose_engine()
    logger.info("Database connections closed")


# Rate limiter: per IP, applied to every endpoint by SlowAPIMiddleware
limiter = Limiter(
    key_func=get_remote_address,
    default_limits=[API_RATE_LIMIT],
    storage_uri="memory://",
)

app = FastAPI(
    title="Saratov Quest API",
    description="Туристическая геймификация Саратова: места, квесты, достижения и ассистент Волга",
    version=API_VERSION,
    lifespan=lifespan,
)

app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)
app.add_middleware(SlowAPIMiddleware)


# CORS: exact origins only
allowed_origins = [
    "http://localhost:3000",
    "http://127.0.0.1:3000",
]

if WEBAPP_URL and WEBAPP_URL not in allowed_origins:
    allowed_origins.append(WEBAPP_URL)

app.add_middleware(
    CORSMiddleware,
    allow_origins=allowed_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.middleware("http")
async def add_security_headers(request: Request, call_next):
    """
    Добавляет security headers ко всем ответам

    - X-Content-Type-Options: no MIME sniffing
    - X-Frame-Options: no framing from other origins (clickjacking)
    - Referrer-Policy: origin only for cross-origin requests
    - Strict-Transport-Security: production over HTTPS only
    """
    response = await call_next(request)

    response.headers["X-Content-Type-Options"] = "nosniff"
    response.headers["X-Frame-Options"] = "SAMEORIGIN"
    response.headers["Referrer-Policy"] = "strict-origin-when-cross-origin"

    if ENVIRONMENT == "production" and request.url.scheme == "https":
        response.headers["Strict-Transport-Security"] = "max-age=31536000; includeSubDomains"

    return response


# Подключаем API router с префиксом /api
app.include_router(api_router, prefix="/api")


@app.get("/")
async def root():
    return {
        "service": "Saratov Quest API",
        "version": API_VERSION,
        "status": "running",
        "docs": "/docs",
    }


@app.get("/health")
async def health():
    return {"status": "healthy"}


@app.get("/api")
async def api_info():
    """Service banner with the mounted sub-routers"""
    return {
        "message": "Saratov Quest API",
        "version": API_VERSION,
        "endpoints": {
            "auth": "/api/auth",
            "places": "/api/places",
            "quests": "/api/quests",
            "users": "/api/users",
            "ai": "/api/ai",
        },
    }


# ===========================
# ERROR HANDLERS
# ===========================


@app.exception_handler(AppError)
async def app_error_handler(request: Request, exc: AppError):
    """
    Domain errors carry their own status code and client message
    """
    if exc.status_code >= 500:
        logger.error(f"{request.method} {request.url.path} -> {exc.status_code}: {exc.message}")
    else:
        logger.info(f"{request.method} {request.url.path} -> {exc.status_code}: {exc.message}")

    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


def _field_name(loc) -> str:
    # ("body", "username") -> "username"
    parts = [str(p) for p in loc if p not in ("body", "query", "path", "header")]
    return ".".join(parts) or str(loc[-1])


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError):
    errors = [
        {"field": _field_name(err.get("loc", ())), "message": err.get("msg", "Invalid value")}
        for err in exc.errors()
    ]
    logger.debug(f"Validation failed on {request.url.path}: {errors}")
    return JSONResponse(
        status_code=400,
        content={"message": "Validation failed", "errors": errors},
    )


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    """
    Handle HTTPException properly - return correct status code and message
    """
    if exc.status_code == 404 and exc.detail == "Not Found":
        return JSONResponse(status_code=404, content={"message": "Route not found"})

    if exc.status_code >= 500:
        logger.error(f"HTTP {exc.status_code}: {exc.detail}")
    else:
        logger.warning(f"HTTP {exc.status_code}: {exc.detail}")

    content = exc.detail if isinstance(exc.detail, dict) else {"message": exc.detail}
    return JSONResponse(status_code=exc.status_code, content=content, headers=exc.headers)


@app.exception_handler(SQLAlchemyError)
async def database_error_handler(request: Request, exc: SQLAlchemyError):
    logger.exception(f"Database error on {request.method} {request.url.path}: {exc}")
    return JSONResponse(status_code=500, content=_internal_error_content(exc))


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    """
    Global exception handler for unexpected errors
    """
    logger.exception(f"Unhandled exception: {exc}")
    return JSONResponse(status_code=500, content=_internal_error_content(exc))


def _internal_error_content(exc: Exception) -> dict:
    content = {"message": "Internal server error"}
    if is_development():
        content["error"] = str(exc)
    return content


if __name__ == "__main__":
    import sys

    import uvicorn

    try:
        validate_config()
    except ValueError as e:
        logger.error(str(e))
        sys.exit(1)

    logger.info("Configuration validated successfully")

    uvicorn.run(
        "api_server:app",
        host=API_HOST,
        port=API_PORT,
        reload=is_development(),
        log_level="info",
    )
