"""PropertyHub FastAPI application entry point."""

import logging
from contextlib import asynccontextmanager

from dotenv import load_dotenv
from fastapi import FastAPI

from propertyhub.api.routes import invoices, properties
from propertyhub.config import settings
from propertyhub.database import init_db
from propertyhub.logging import setup_server_logging

# Load environment variables
load_dotenv()

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Manage application lifecycle (startup and shutdown)."""
    setup_server_logging(settings.log_file)
    init_db()
    logger.info("Database tables initialized")
    yield
    logger.info("Application shutting down")


app = FastAPI(
    title=settings.api_title,
    description="Invoice issuing and split settlement for property managers",
    version=settings.api_version,
    lifespan=lifespan,
)


# Include routers
app.include_router(invoices.router)
app.include_router(properties.router)


@app.get("/health")
async def health_check():
    """Health check endpoint."""
    return {"status": "ok"}


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host="0.0.0.0", port=8000)
