"""
FastAPI application entry point for the Concierge Ingestion API.

Configures logging and CORS, registers the API routers, and manages the
asyncpg pool lifecycle.
"""

import logging
from contextlib import asynccontextmanager
from typing import AsyncGenerator

import asyncpg
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from concierge_ingest import __version__
from concierge_ingest.api import api_router
from concierge_ingest.core.database import init_db, close_db

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """
    Open the database pool on startup and close it on shutdown.

    A database that is down at startup does not stop the app; the pool is
    created lazily on the first store call instead.
    """
    logger.info("Concierge Ingestion API starting")
    try:
        await init_db()
        logger.info("Database connection pool initialized")
    except (asyncpg.PostgresError, OSError) as e:
        logger.error(f"Failed to initialize database: {e}")

    yield

    logger.info("Concierge Ingestion API shutting down")
    await close_db()
    logger.info("Database connection pool closed")


app = FastAPI(
    title="Concierge Ingestion API",
    version=__version__,
    description=(
        "Batch ingestion of concierge department spreadsheets: weekly agent "
        "metrics, daily member interactions and after-hours call logs."
    ),
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=[
        "http://localhost:3000",  # Next.js dev server
        "http://127.0.0.1:3000",
    ],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(api_router)


@app.get("/health")
async def health_check():
    """Health check endpoint for monitoring and load balancer probes."""
    return {"status": "healthy"}


@app.get("/")
async def root():
    return {
        "name": "Concierge Ingestion API",
        "version": __version__,
        "docs": "/docs",
        "openapi": "/openapi.json",
    }


# Run with uvicorn when executed directly
if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "concierge_ingest.main:app",
        host="0.0.0.0",
        port=8000,
        reload=True,
    )
