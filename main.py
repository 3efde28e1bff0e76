"""
Marketplace Converter: Main Application

FastAPI application entry point.
"""

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from contextlib import asynccontextmanager
import structlog
from datetime import datetime

from config import settings
from config.categories import CATEGORY_MAP_VERSION

# Configure structured logging
structlog.configure(
    processors=[
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.JSONRenderer() if settings.is_production
            else structlog.dev.ConsoleRenderer()
    ],
    wrapper_class=structlog.stdlib.BoundLogger,
    context_class=dict,
    logger_factory=structlog.stdlib.LoggerFactory(),
    cache_logger_on_first_use=True,
)

logger = structlog.get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan handler.

    Startup: Report which default templates are installed
    Shutdown: Nothing to clean up; every conversion is request-scoped
    """
    logger.info(
        "application_starting",
        environment=settings.environment,
        debug=settings.debug,
        templates_dir=str(settings.templates_dir),
        category_map_version=CATEGORY_MAP_VERSION,
    )

    if not settings.templates_dir.is_dir():
        logger.warning("templates_dir_missing", templates_dir=str(settings.templates_dir))

    yield

    logger.info("application_shutting_down")


# Create FastAPI app
app = FastAPI(
    title="Marketplace Converter",
    description="Convert product files between Ecokart, eBay, Google Merchant Center and Facebook catalog formats",
    version="0.1.0",
    lifespan=lifespan,
    docs_url="/docs" if settings.debug else None,
    redoc_url="/redoc" if settings.debug else None,
)


# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
    expose_headers=["Content-Disposition"],
)


# ===================
# ROUTES
# ===================

@app.get("/health")
async def health_check():
    """
    Health check endpoint.

    Returns:
        Liveness status and whether the templates directory is present
    """
    return {
        "status": "healthy",
        "timestamp": datetime.utcnow().isoformat(),
        "environment": settings.environment,
        "templates_dir_present": settings.templates_dir.is_dir(),
    }


@app.get("/")
async def root():
    """
    Root endpoint.

    Returns:
        API information and available endpoints
    """
    return {
        "name": "Marketplace Converter API",
        "version": "0.1.0",
        "docs": "/docs" if settings.debug else "Disabled in production",
        "health": "/health",
        "endpoints": {
            "convert": "/api/products/convert",
            "formats": "/api/products/formats",
            "templates": "/api/products/templates/{target}",
        }
    }


# ===================
# ERROR HANDLERS
# ===================

@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    """
    Global exception handler.

    Catches unhandled exceptions and returns the standard error format.
    """
    logger.error(
        "unhandled_exception",
        path=request.url.path,
        method=request.method,
        error=str(exc),
        error_type=type(exc).__name__
    )

    return JSONResponse(
        status_code=500,
        content={
            "error": "An unexpected error occurred.",
            "code": "INTERNAL_ERROR",
            "details": {"error": str(exc)} if settings.debug else {},
            "timestamp": datetime.utcnow().isoformat()
        }
    )


# ===================
# INCLUDE ROUTERS
# ===================
from routes.convert import router as convert_router

app.include_router(convert_router)  # Prefix already in router


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "main:app",
        host=settings.api_host,
        port=settings.api_port,
        reload=settings.debug
    )
