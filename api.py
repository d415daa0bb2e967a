"""
MoodMentor FastAPI Application

Main entry point for the MoodMentor API.
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

# Common library imports
from common.database import MongoDB

# App-specific imports
from moodmentor.config import settings
from moodmentor.routers import all_routers

# Import service initialization
from moodmentor.dependencies import init_all_services, ensure_indexes

logging.basicConfig(
    level=getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger(__name__)


# =============================================================================
# Database Instance
# =============================================================================
# One client (one connection pool) for the whole process
mongo = MongoDB()


# =============================================================================
# Application Lifespan
# =============================================================================
@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan context manager.

    Handles startup and shutdown tasks like database connections
    and service initialization.
    """
    logger.info("Starting MoodMentor API...")

    settings.validate_required()

    await mongo.connect(
        uri=settings.MONGODB_URI,
        database_name=settings.MONGODB_DATABASE,
        server_selection_timeout_ms=settings.MONGODB_SERVER_SELECTION_TIMEOUT_MS,
    )

    init_all_services(db=mongo.db, settings=settings)
    await ensure_indexes()
    logger.info("All services initialized successfully")

    yield

    logger.info("Shutting down MoodMentor API...")
    await mongo.disconnect()


# =============================================================================
# FastAPI Application
# =============================================================================
app = FastAPI(
    title="MoodMentor API",
    description="Mood tracking, stress assessments and mentor sessions",
    version="1.0.0",
    lifespan=lifespan,
    docs_url="/docs" if settings.is_development() else None,
    redoc_url="/redoc" if settings.is_development() else None,
)

# =============================================================================
# CORS Middleware
# =============================================================================
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.get_cors_origins(),
    allow_credentials=settings.CORS_ALLOW_CREDENTIALS,
    allow_methods=["*"],
    allow_headers=["*"],
)

# =============================================================================
# Include Routers (all under the API prefix)
# =============================================================================
for router in all_routers:
    app.include_router(router, prefix=settings.API_PREFIX)


# =============================================================================
# Run with Uvicorn
# =============================================================================
if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "api:app",
        host=settings.HOST,
        port=settings.PORT,
        reload=settings.is_development(),
    )
