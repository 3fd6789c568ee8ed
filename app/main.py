"""
Application Tracker - Main Application

FastAPI backend with:
- PostgreSQL (async SQLAlchemy) for applications, resumes, cover letters
- Multi-filter application listing (AND across filters)
- JWT authentication

Run: uvicorn app.main:app --reload
"""

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from app.api.routes import api_router
from app.core.config import get_settings
from app.core.errors import ApplicationTrackerError
from app.core.logging_config import get_logger, setup_logging
from app.db.database import dispose_engine

settings = get_settings()
setup_logging(settings.log_level)
logger = get_logger(__name__)

# Create FastAPI app
app = FastAPI(
    title="Application Tracker",
    description="""
    Track job applications together with the resumes and cover letters used.

    ## Features
    - **Authentication**: JWT-based auth
    - **Applications**: CRUD, status counts
    - **Filtering**: status, company, position, source, date and deadline, combined with AND
    - **Documents**: resume and cover letter listings
    """,
    version="1.0.0",
    docs_url="/docs",
    redoc_url="/redoc"
)

# CORS middleware (allow all for development)
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include API routes
app.include_router(api_router, prefix="/api")


@app.exception_handler(ApplicationTrackerError)
async def tracker_error_handler(request: Request, exc: ApplicationTrackerError):
    """Map service errors (NotFoundError, LookupFailure, ...) to JSON responses."""
    if exc.status_code >= 500:
        logger.error(f"{request.method} {request.url.path} failed: {exc.message}")
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.message})


@app.on_event("shutdown")
async def shutdown_event():
    """Release pooled database connections."""
    await dispose_engine()
    logger.info("Database engine disposed")


@app.get("/", tags=["Health"])
async def root():
    return {"status": "healthy", "app": "Application Tracker", "docs": "/docs"}


@app.get("/health", tags=["Health"])
async def health_check():
    """Detailed health check."""
    from app.db.database import test_database_connection

    return {
        "status": "healthy",
        "database": "connected" if await test_database_connection() else "disconnected"
    }
