"""
RecipeShare API - Main API Server
Recipe sharing platform: accounts, recipes, social interactions and shopping lists
"""

from contextlib import asynccontextmanager
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.trustedhost import TrustedHostMiddleware
from starlette.exceptions import HTTPException as StarletteHTTPException
import logging
import structlog
import time
from typing import AsyncGenerator

from core.config import settings
from core.database import init_db, close_db
from core.exceptions import general_exception_handler, http_exception_handler, validation_exception_handler
from api.routes import api_router
from middleware.rate_limiting import RateLimitMiddleware
from middleware.security import SecurityMiddleware
from middleware.logging import LoggingMiddleware
from utils.responses import with_timestamp

# Configure structured logging
structlog.configure(
    processors=[
        structlog.contextvars.merge_contextvars,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.add_log_level,
        structlog.processors.JSONRenderer()
    ],
    wrapper_class=structlog.make_filtering_bound_logger(
        logging.getLevelName(settings.LOG_LEVEL.upper())
    ),
    logger_factory=structlog.WriteLoggerFactory(),
    cache_logger_on_first_use=True,
)

logger = structlog.get_logger()


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan events"""
    logger.info("Starting RecipeShare API", environment=settings.ENVIRONMENT)

    try:
        init_db()
        logger.info("Database connection established")
    except Exception as e:
        logger.error("Failed to initialize database", error=str(e))

    yield

    logger.info("Shutting down RecipeShare API")
    close_db()
    logger.info("Shutdown complete")


# Create FastAPI application
app = FastAPI(
    title=settings.APP_NAME,
    description="Recipe sharing platform with social features and shopping lists",
    version=settings.VERSION,
    docs_url=None if settings.is_production else f"{settings.API_PREFIX}/docs",
    redoc_url=None if settings.is_production else f"{settings.API_PREFIX}/redoc",
    openapi_url=None if settings.is_production else f"{settings.API_PREFIX}/openapi.json",
    lifespan=lifespan
)

app.add_middleware(TrustedHostMiddleware, allowed_hosts=settings.ALLOWED_HOSTS)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials="*" not in settings.CORS_ORIGINS,
    allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS", "PATCH"],
    allow_headers=["*"],
    expose_headers=["X-Process-Time", "X-Request-ID", "Retry-After"]
)

# Custom Middleware
app.add_middleware(SecurityMiddleware)
if settings.RATE_LIMIT_ENABLED:
    app.add_middleware(RateLimitMiddleware)
app.add_middleware(LoggingMiddleware)


@app.middleware("http")
async def add_process_time_header(request: Request, call_next):
    """Add response time header"""
    start_time = time.time()
    response = await call_next(request)
    process_time = time.time() - start_time
    response.headers["X-Process-Time"] = str(process_time)
    return response


app.add_exception_handler(StarletteHTTPException, http_exception_handler)
app.add_exception_handler(RequestValidationError, validation_exception_handler)
app.add_exception_handler(Exception, general_exception_handler)


@app.get("/")
async def root():
    """Service overview"""
    prefix = settings.API_PREFIX
    return with_timestamp({
        "message": f"Welcome to {settings.APP_NAME}",
        "service": settings.APP_NAME,
        "version": settings.VERSION,
        "environment": settings.ENVIRONMENT,
        "endpoints": {
            "health": f"{prefix}/health",
            "auth": f"{prefix}/auth",
            "users": f"{prefix}/users",
            "recipes": f"{prefix}/recipes",
            "categories": f"{prefix}/categories",
            "feed": f"{prefix}/feed",
            "trending": f"{prefix}/trending",
            "activity": f"{prefix}/activity",
            "suggestions": f"{prefix}/suggestions",
            "shoppingList": f"{prefix}/shopping-list",
            "search": f"{prefix}/search",
            "statistics": f"{prefix}/statistics",
            "collections": f"{prefix}/collections",
            "admin": f"{prefix}/admin",
        },
        "documentation": None if settings.is_production else f"{prefix}/docs",
    })


# Include API routes
app.include_router(api_router, prefix=settings.API_PREFIX)


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "main:app",
        host=settings.HOST,
        port=settings.PORT,
        reload=settings.is_development,
        log_level=settings.LOG_LEVEL.lower()
    )
