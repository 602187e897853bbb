"""
Main FastAPI application.
"""
import asyncio
import logging
import os

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.encoders import jsonable_encoder
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles
from starlette.exceptions import HTTPException as StarletteHTTPException

from medlearn.api.v1 import api_router
from medlearn.core.config import settings
from medlearn.core.stats_cache import run_periodic_sweep, stats_cache
from medlearn.db.base import engine
from medlearn.models import Base

# Configure logging BEFORE creating the app
logging.basicConfig(
    level=logging.INFO,
    format='%(levelname)s:\t%(name)s\t%(message)s',
    handlers=[
        logging.StreamHandler()  # Output to console
    ]
)
logging.getLogger("uvicorn").setLevel(logging.INFO)
logger = logging.getLogger(__name__)

# Create database tables
Base.metadata.create_all(bind=engine)

# Create FastAPI app
app = FastAPI(
    title=settings.PROJECT_NAME,
    description="Medical education API: clinical cases, quizzes, flashcards and an AI tutor",
    version="0.1.0",
    openapi_url=f"{settings.API_V1_PREFIX}/openapi.json",
    docs_url="/docs",
    redoc_url="/redoc",
)

# Configure CORS - Always apply middleware
cors_origins = settings.BACKEND_CORS_ORIGINS if settings.BACKEND_CORS_ORIGINS else ["*"]
if cors_origins == "*":
    cors_origins = ["*"]
logger.info(f"CORS enabled for origins: {cors_origins}")

app.add_middleware(
    CORSMiddleware,
    allow_origins=[str(origin).rstrip("/") for origin in cors_origins],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Uploaded images are served straight from disk
os.makedirs(settings.UPLOAD_DIR, exist_ok=True)
app.mount("/uploads", StaticFiles(directory=settings.UPLOAD_DIR), name="uploads")


# Global exception handlers
@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    """
    Render HTTP errors as ``{"error": detail}``.

    Args:
        request: Request object
        exc: HTTP exception

    Returns:
        JSON response keeping the exception's status and headers
    """
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": exc.detail},
        headers=getattr(exc, "headers", None),
    )


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """
    Handle validation errors.

    Args:
        request: Request object
        exc: Validation exception

    Returns:
        JSON response with error details
    """
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"error": "Validation failed", "details": jsonable_encoder(exc.errors())},
    )


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    """
    Handle all unhandled exceptions.

    Args:
        request: Request object
        exc: Exception

    Returns:
        JSON response with error message
    """
    logger.exception(f"Unhandled error on {request.method} {request.url.path}")
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"error": "Internal server error", "message": str(exc)},
    )


# Startup and shutdown events
@app.on_event("startup")
async def startup_event():
    """
    Run on application startup.
    """
    app.state.stats_sweeper = asyncio.create_task(
        run_periodic_sweep(stats_cache, settings.STATS_CACHE_SWEEP_SECONDS)
    )
    logger.info(f"Starting {settings.PROJECT_NAME}")
    logger.info("Documentation available at: http://localhost:8000/docs")


@app.on_event("shutdown")
async def shutdown_event():
    """
    Run on application shutdown.
    """
    sweeper = getattr(app.state, "stats_sweeper", None)
    if sweeper is not None:
        sweeper.cancel()
        try:
            await sweeper
        except asyncio.CancelledError:
            pass
    logger.info(f"Shutting down {settings.PROJECT_NAME}")


# Health check endpoint
@app.get("/", tags=["Health"])
async def root():
    """
    Root endpoint - Health check.

    Returns:
        Status message
    """
    return {
        "message": "MedLearn API",
        "status": "healthy",
        "version": "0.1.0",
        "docs": "/docs",
    }


@app.get("/health", tags=["Health"])
async def health_check():
    """
    Health check endpoint.

    Returns:
        Health status
    """
    return {"status": "healthy"}


# Include API routers
app.include_router(api_router, prefix=settings.API_V1_PREFIX)
