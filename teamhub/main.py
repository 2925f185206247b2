"""TeamHub API - Main Application"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from teamhub import __version__
from teamhub.config import settings
from teamhub.responses import register_exception_handlers, success
from teamhub.routes import (
    auth,
    projects,
    activities,
    students,
    attendance,
    blogs,
    meetings,
    papers,
    event_reports,
)
from teamhub.services.database import db

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan events"""
    # Startup
    logger.info(f"Starting {settings.app_name} ({settings.environment})...")
    db.initialize()
    yield
    # Shutdown
    logger.info(f"Shutting down {settings.app_name}...")
    db.close()


app = FastAPI(
    title=settings.app_name,
    description="Project and team management API",
    version=__version__,
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=lifespan
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

register_exception_handlers(app, debug=settings.environment == "development")

# Include routers
app.include_router(auth.router, prefix="/api/auth", tags=["Authentication"])
app.include_router(projects.router, prefix="/api/projects", tags=["Projects"])
app.include_router(activities.router, prefix="/api/activities", tags=["Activities"])
app.include_router(students.router, prefix="/api/students", tags=["Members"])
app.include_router(attendance.router, prefix="/api/attendance", tags=["Attendance"])
app.include_router(blogs.router, prefix="/api/blogs", tags=["Blogs"])
app.include_router(meetings.router, prefix="/api/meetings", tags=["Meetings"])
app.include_router(papers.router, prefix="/api/papers", tags=["Papers"])
app.include_router(event_reports.router, prefix="/api/event-reports", tags=["Event Reports"])


# Health check endpoints
@app.get("/health", tags=["Health"])
async def health_check():
    """Health check endpoint"""
    return success(data={
        "status": "healthy",
        "service": "teamhub-api",
        "version": __version__,
        "database": "connected" if db.db is not None else "disconnected",
    })


@app.get("/", tags=["Root"])
async def root():
    """Root endpoint"""
    return success(f"{settings.app_name} is running", {
        "name": settings.app_name,
        "version": __version__,
        "docs": "/docs",
    })
