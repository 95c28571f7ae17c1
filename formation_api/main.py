"""Main FastAPI application."""

from contextlib import asynccontextmanager

import sentry_sdk
import structlog
from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sentry_sdk.integrations.fastapi import FastApiIntegration
from sentry_sdk.integrations.logging import LoggingIntegration
from starlette.exceptions import HTTPException as StarletteHTTPException

from formation_api.api.v1 import api_router
from formation_api.config import settings
from formation_api.core.auth import AuthenticationGate
from formation_api.core.exceptions import AuthError
from formation_api.core.logging import setup_logging
from formation_api.db.mongo import close_mongo, init_mongo
from formation_api.routers import formations, users
from formation_api.schemas.common import ApiResponse

# Setup logging
setup_logging()
logger = structlog.get_logger(__name__)

# Initialize Sentry for error tracking (only if DSN is properly configured)
if settings.SENTRY_DSN and settings.SENTRY_DSN.startswith("https://"):
    sentry_sdk.init(
        dsn=settings.SENTRY_DSN,
        environment=settings.SENTRY_ENVIRONMENT,
        traces_sample_rate=settings.SENTRY_TRACES_SAMPLE_RATE,
        integrations=[
            FastApiIntegration(),
            LoggingIntegration(
                level=None,  # Capture all logs
                event_level="ERROR",  # Only send ERROR and above as events
            ),
        ],
        release=settings.APP_VERSION,
        attach_stacktrace=True,
        send_default_pii=False,
    )
else:
    logger.info("sentry_disabled")


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan events."""
    # Startup
    app.state.db = await init_mongo()
    logger.info("startup_complete", environment=settings.ENVIRONMENT)
    yield
    # Shutdown
    await close_mongo()


app = FastAPI(
    title=settings.APP_NAME,
    version=settings.APP_VERSION,
    description="Formation search platform: accounts, presence and program catalog",
    lifespan=lifespan,
    docs_url="/docs",
    redoc_url="/redoc",
    openapi_url="/openapi.json",
    swagger_ui_parameters={
        "persistAuthorization": True,
    },
)

# Authentication gate for /api/protected/* (added first so CORS wraps it)
app.add_middleware(AuthenticationGate)

# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# Include API router
app.include_router(api_router, prefix="/api/v1")

# Users and formations routers carry their own /api prefix
app.include_router(users.router)
app.include_router(formations.router)


@app.get("/", tags=["Health"])
async def root():
    """Root endpoint."""
    return {
        "message": settings.APP_NAME,
        "version": settings.APP_VERSION,
        "status": "operational",
    }


@app.get("/health", tags=["Health"])
async def health_check(request: Request):
    """Health check endpoint with database status."""
    database = "connected"
    try:
        await request.app.state.db.command("ping")
    except Exception as e:
        logger.warning("health_db_ping_failed", error=str(e))
        database = "unavailable"
    return {
        "status": "healthy" if database == "connected" else "degraded",
        "environment": settings.ENVIRONMENT,
        "database": database,
    }


def _envelope(status_code: int, message: str, errors=None, headers=None) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content=ApiResponse.failure(message, errors).model_dump(mode="json"),
        headers=headers,
    )


@app.exception_handler(AuthError)
async def auth_error_handler(request: Request, exc: AuthError):
    """Domain errors from the services, mapped through their ErrorKind."""
    logger.info(
        "request_failed",
        path=request.url.path,
        kind=exc.kind.value,
        status_code=exc.status_code,
    )
    return _envelope(exc.status_code, exc.message)


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError):
    errors = []
    for error in exc.errors():
        location = ".".join(str(part) for part in error.get("loc", ()) if part != "body")
        errors.append(f"{location}: {error.get('msg')}" if location else error.get("msg"))
    return _envelope(status.HTTP_400_BAD_REQUEST, "Validation failed", errors)


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    return _envelope(exc.status_code, str(exc.detail), headers=getattr(exc, "headers", None))


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    """Global exception handler."""
    logger.error("unhandled_exception", path=request.url.path, exc_info=exc)
    return _envelope(
        status.HTTP_500_INTERNAL_SERVER_ERROR,
        str(exc) if settings.DEBUG else "An error occurred",
    )


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "formation_api.main:app",
        host=settings.HOST,
        port=settings.PORT,
        reload=settings.RELOAD and not settings.is_production,
    )
