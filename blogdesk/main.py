"""FastAPI application entry point."""

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

import structlog
from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware

from blogdesk.api.common.auth_router import router as auth_router
from blogdesk.api.v1.article_router import router as article_router
from blogdesk.api.v1.assist_router import router as assist_router
from blogdesk.api.v1.chat_router import router as chat_router
from blogdesk.api.v1.project_router import router as project_router
from blogdesk.api.v1.search_router import router as search_router
from blogdesk.api.v1.setting_router import router as setting_router
from blogdesk.core.config import settings
from blogdesk.core.database import create_tables, engine
from blogdesk.core.exceptions import (
    AppException,
    app_exception_handler,
    validation_exception_handler,
)
from blogdesk.core.middleware import SessionMiddleware
from blogdesk.core.redis import close_redis, init_redis
from blogdesk.dependencies import configure_services
from blogdesk.schemas.response_schema import ApiResponse, success_response

logger = structlog.get_logger()


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan handler for startup and shutdown events."""
    logger.info(
        "Starting application",
        app_name=settings.app.name,
        environment=settings.app.env,
        remote_store=engine is not None,
        openrouter=settings.llm.has_openrouter,
        anthropic=settings.llm.has_anthropic,
    )
    await init_redis()
    if engine is not None and settings.app.is_development:
        await create_tables(engine)
    configure_services(app)
    yield
    await close_redis()
    if engine is not None:
        await engine.dispose()
    logger.info("Shutting down application")


app = FastAPI(
    title=settings.app.name,
    description="Personal blog and admin console with streaming AI chat",
    version="0.1.0",
    lifespan=lifespan,
    debug=settings.app.debug,
)

# Exception handlers
app.add_exception_handler(AppException, app_exception_handler)  # type: ignore[arg-type]
app.add_exception_handler(RequestValidationError, validation_exception_handler)  # type: ignore[arg-type]

# Middleware (registration order: inner→outer, execution order: outer→inner)
app.add_middleware(SessionMiddleware)
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.app.allowed_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.get("/health", response_model=ApiResponse[dict])
async def health_check() -> dict:
    """Health check endpoint."""
    return success_response({"status": "healthy"})


@app.get("/", response_model=ApiResponse[dict])
async def root() -> dict:
    """Root endpoint."""
    return success_response(
        {
            "app": settings.app.name,
            "site_name": settings.branding.site_name,
            "version": "0.1.0",
            "docs": "/docs",
        }
    )


# Register routers
app.include_router(auth_router)
app.include_router(article_router)
app.include_router(project_router)
app.include_router(setting_router)
app.include_router(assist_router)
app.include_router(search_router)
app.include_router(chat_router)
