from contextlib import asynccontextmanager
import logging
import traceback

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from fastapi.middleware.cors import CORSMiddleware

from kitflow.config import settings
from kitflow.api.v1.router import api_router
from kitflow.core.exceptions import KitflowError
from kitflow.database import init_db, get_db_session, async_session_factory


logger = logging.getLogger(__name__)


async def seed_default_programs():
    """Create the default programs on an empty database."""
    from kitflow.services.program_service import ProgramService

    async with get_db_session() as session:
        await ProgramService(session).seed_default_programs()


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Startup:
    - Configure logging
    - Create missing tables
    - Seed default programs
    """
    logging.basicConfig(
        level=settings.LOG_LEVEL,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    logger.info(f"Starting {settings.APP_NAME} v{settings.APP_VERSION}")

    await init_db()
    if settings.SEED_DEFAULT_PROGRAMS:
        await seed_default_programs()

    yield

    logger.info("Shutting down...")


# OpenAPI Tags with detailed descriptions
OPENAPI_TAGS = [
    {"name": "Authentication", "description": "Emailed sign-in codes exchanged for JWT access tokens"},
    {"name": "Users", "description": "User list and role management (admin)"},
    {"name": "Kits", "description": "Kit definitions, packing data and stock"},
    {"name": "Assignments", "description": "Kit stock reserved for clients, packing and dispatch"},
    {"name": "Programs", "description": "Product lines kits belong to"},
    {"name": "Clients", "description": "Kit recipients"},
    {"name": "Vendors", "description": "Material supplier contacts"},
    {"name": "Service Providers", "description": "Service provider contacts"},
    {"name": "Inventory", "description": "Raw materials, pre-processed parts and finished goods"},
    {"name": "Laser Files", "description": "Laser-cutting files attached to kits"},
    {"name": "Storage", "description": "Signed upload and download URLs"},
    {"name": "Reports", "description": "Inventory summary and client allocation"},
    {"name": "AI Assistant", "description": "Questions about the inventory in plain language"},
]

# Create FastAPI application
app = FastAPI(
    title=settings.APP_NAME,
    version=settings.APP_VERSION,
    description="Kit inventory and fulfillment API",
    lifespan=lifespan,
    docs_url="/docs",
    redoc_url="/redoc",
    openapi_tags=OPENAPI_TAGS,
)

# Add CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins_list,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include API router
app.include_router(api_router)


@app.exception_handler(KitflowError)
async def kitflow_exception_handler(request: Request, exc: KitflowError):
    """Render domain errors with their own status code."""
    return JSONResponse(
        status_code=exc.status_code,
        content={
            "error": exc.message,
            "type": type(exc).__name__,
            "path": str(request.url.path),
            "method": request.method,
        },
    )


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    """Unexpected errors. The traceback is only returned in debug mode."""
    logger.exception(f"Unhandled error on {request.method} {request.url.path}")

    error_detail = {
        "error": str(exc) if settings.DEBUG else "Internal server error",
        "type": type(exc).__name__,
        "path": str(request.url.path),
        "method": request.method,
    }
    if settings.DEBUG:
        error_detail["traceback"] = traceback.format_exc()

    return JSONResponse(status_code=500, content=error_detail)


# Health check endpoint
@app.get("/health", tags=["Health"])
async def health_check():
    """Health check endpoint with database validation."""
    from sqlalchemy import text
    from datetime import datetime, timezone

    health_status = {
        "status": "healthy",
        "app": settings.APP_NAME,
        "version": settings.APP_VERSION,
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "checks": {
            "database": "unknown"
        }
    }

    try:
        async with async_session_factory() as session:
            result = await session.execute(text("SELECT 1"))
            result.scalar()
            health_status["checks"]["database"] = "connected"
    except Exception as e:
        health_status["status"] = "unhealthy"
        health_status["checks"]["database"] = f"error: {str(e)}"

    # Return 503 if unhealthy
    if health_status["status"] == "unhealthy":
        return JSONResponse(status_code=503, content=health_status)

    return health_status


@app.get("/", tags=["Root"])
async def root():
    """Root endpoint."""
    return {
        "message": f"Welcome to {settings.APP_NAME}",
        "version": settings.APP_VERSION,
        "docs": "/docs",
    }
