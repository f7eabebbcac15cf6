from contextlib import asynccontextmanager
from fastapi import FastAPI, HTTPException, status
from fastapi.middleware.cors import CORSMiddleware
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
import os
import logging

from .. import __version__
from ..core.errors import register_exception_handlers
from ..database.connection import DatabaseManager, engine
from .routes import auth, users, projects, time_tracking, reports

# Configure logging
logging.basicConfig(
    level=os.getenv("LOG_LEVEL", "INFO").upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Initialize the database on startup."""
    logger.info("Starting up Time Tracker API...")
    try:
        DatabaseManager.init_db()
        logger.info("Database initialized successfully")
    except Exception as e:
        logger.error("Database initialization failed: %s", e)
        raise
    yield
    logger.info("Shutting down Time Tracker API...")


# Initialize FastAPI app with metadata
app = FastAPI(
    title="Time Tracker API",
    description="Time tracking API with project membership, live timers, manual entries and admin reporting.",
    version=__version__,
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=lifespan,
    openapi_tags=[
        {
            "name": "Authentication",
            "description": "Registration, login and session management"
        },
        {
            "name": "Users",
            "description": "User listing for administrators"
        },
        {
            "name": "Projects",
            "description": "Project listing and creation with member assignment"
        },
        {
            "name": "Time Entries",
            "description": "Live timer, manual entries and time entry listing"
        },
        {
            "name": "Reports",
            "description": "Aggregated totals per user and per project"
        }
    ]
)

# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=os.getenv("ALLOWED_ORIGINS", "*").split(","),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

register_exception_handlers(app)


# Health check endpoints
@app.get("/", tags=["Health"])
def service_status():
    """Report that the API process is up."""
    return {
        "message": "Time Tracker API is running",
        "version": __version__,
        "status": "operational"
    }


@app.get("/health", tags=["Health"])
def database_health():
    """
    Report API health including database reachability.

    Answers 503 when ``SELECT 1`` fails.
    """
    try:
        with engine.connect() as connection:
            connection.execute(text("SELECT 1"))
    except SQLAlchemyError as e:
        logger.error("Database health check failed: %s", e)
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Database unavailable"
        )

    return {
        "status": "healthy",
        "version": __version__,
        "database": "connected"
    }


# Include routers
app.include_router(auth.router, prefix="/api")
app.include_router(users.router, prefix="/api")
app.include_router(projects.router, prefix="/api")
app.include_router(time_tracking.router, prefix="/api")
app.include_router(reports.router, prefix="/api")


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "timetracker.api.main:app",
        host=os.getenv("HOST", "0.0.0.0"),
        port=int(os.getenv("PORT", "8000")),
        reload=True,
        log_level="info"
    )
