"""
Main FastAPI application.
This is the entry point for the backend server.
"""
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from contextlib import asynccontextmanager
from vizboard.core.config import settings
from vizboard.core.logger import configure_logging, logger
from vizboard.db.database import init_db
from vizboard.api.endpoints import ai, dashboards, data_sources, shared, widgets


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Lifespan context manager for startup and shutdown events.
    """
    configure_logging()
    logger.info(f"Environment: {settings.ENVIRONMENT}")
    await init_db()

    yield

    logger.info("Shutting down")


# Create FastAPI application
app = FastAPI(
    title=settings.APP_NAME,
    version=settings.VERSION,
    description="Dashboard builder: data sources, widgets and AI insights",
    lifespan=lifespan
)

# Configure CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.BACKEND_CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include routers
app.include_router(data_sources.router)
app.include_router(dashboards.router)
app.include_router(widgets.router)
app.include_router(shared.router)
app.include_router(ai.router)


@app.get("/")
async def root():
    """Root endpoint - health check"""
    return {
        "message": settings.APP_NAME,
        "version": settings.VERSION,
        "status": "running"
    }


@app.get("/health")
async def health_check():
    """Health check endpoint"""
    return {"status": "healthy"}
