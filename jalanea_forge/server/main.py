"""
Main Application Entry Point.

This module initializes the FastAPI application, configures middleware
(CORS, request timing), registers the exception handlers and includes all
API routers. It serves as the root of the web server.
"""

from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from jalanea_forge.core.database.session import init_db
from jalanea_forge.core.logging_config import get_logger, setup_logging
from jalanea_forge.core.monitoring import initialize_logfire

from .api.v1 import admin, billing, emails, gemini, generation, health, lab, profiles, projects, usage
from .core import constant
from .core.config import settings
from .exception_handlers import setup_exception_handlers
from .middleware import LogfireMiddleware
from .services.clients import close_clients

# Initialize logging
setup_logging()
logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Manage application lifespan events.

    On startup the database connection is checked; on shutdown pending
    autosave drafts are written and outbound HTTP clients are closed.
    """
    # Startup
    try:
        logger.info("Starting up Jalanea Forge Server...")
        await init_db()
        logger.info("Database connection verified")
    except Exception as e:
        logger.error(f"Database initialization failed: {e}", exc_info=True)

    yield

    # Shutdown
    logger.info("Shutting down Jalanea Forge Server...")
    await close_clients()


app = FastAPI(
    title=constant.PROJECT_NAME,
    description="""
    Jalanea Forge Server API

    Backend of the Jalanea Forge AI product designer. It takes a product idea
    through Idea, Research, PRD and Realization with AI-generated artifacts,
    meters generations per subscription tier, bills through Stripe and hosts
    the Jalanea Lab dashboard.
    """,
    version=constant.VERSION,
    openapi_url=f"{constant.API_V1_STR}/openapi.json",
    docs_url=f"{constant.API_V1_STR}/docs",
    redoc_url=f"{constant.API_V1_STR}/redoc",
    lifespan=lifespan,
)

initialize_logfire(app)
setup_exception_handlers(app)

cors = settings.cors
app.add_middleware(
    CORSMiddleware,
    allow_origins=cors.origins,
    allow_credentials=cors.allow_credentials,
    allow_methods=cors.allow_methods,
    allow_headers=cors.allow_headers,
)
app.add_middleware(LogfireMiddleware)


app.include_router(health.router, tags=["health"])
app.include_router(profiles.router, prefix=f"{constant.API_V1_STR}/profiles", tags=["profiles"])
app.include_router(projects.router, prefix=f"{constant.API_V1_STR}/projects", tags=["projects"])
app.include_router(generation.router, prefix=constant.API_V1_STR, tags=["generation"])
app.include_router(usage.router, prefix=f"{constant.API_V1_STR}/usage", tags=["usage"])
app.include_router(admin.router, prefix=f"{constant.API_V1_STR}/admin", tags=["admin"])
app.include_router(billing.router, prefix=f"{constant.API_V1_STR}/billing", tags=["billing"])
app.include_router(emails.router, prefix=f"{constant.API_V1_STR}/emails", tags=["emails"])
app.include_router(gemini.router, prefix=f"{constant.API_V1_STR}/gemini", tags=["gemini"])
app.include_router(lab.router, prefix=f"{constant.API_V1_STR}/lab", tags=["lab"])
