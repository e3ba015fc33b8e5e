#!/usr/bin/env python3
"""
RoastMarket API - FastAPI Application

JSON API over the marketplace core: posting requests, applying, selecting
roasters and submitting feedback.

Usage:
    python -m web.backend.app

Then open:
    - http://localhost:8080/docs - API Documentation (Swagger UI)
    - http://localhost:8080/redoc - Alternative API Documentation

The acting user is read from the X-User-Id header, set by the gateway
after authentication.
"""

import logging

from fastapi import FastAPI, HTTPException

from core.errors import MarketplaceError
from .config import get_config
from .exceptions import (
    marketplace_exception_handler,
    http_exception_handler,
    general_exception_handler
)
from .routers import (
    roast_requests_router,
    applications_router,
    feedback_router,
    roasters_router
)

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)

# Load configuration
config = get_config()

# Create FastAPI app
app = FastAPI(
    title="RoastMarket API",
    description="API for roast requests, roaster selection and feedback",
    version="1.0.0",
    docs_url="/docs",
    redoc_url="/redoc"
)

# Register exception handlers
app.add_exception_handler(MarketplaceError, marketplace_exception_handler)
app.add_exception_handler(HTTPException, http_exception_handler)
app.add_exception_handler(Exception, general_exception_handler)

# Include routers
app.include_router(roast_requests_router)
app.include_router(applications_router)
app.include_router(feedback_router)
app.include_router(roasters_router)


@app.get("/health")
def health_check():
    """Health check endpoint."""
    return {"status": "healthy", "service": "roastmarket-api"}


def main():
    """Run the web server."""
    import uvicorn

    logger.info(f"Starting RoastMarket API on {config.web.host}:{config.web.port}")
    logger.info(f"API Docs: http://{config.web.host}:{config.web.port}/docs")

    uvicorn.run(
        "web.backend.app:app",
        host=config.web.host,
        port=config.web.port,
        reload=False,
        log_level="info"
    )


if __name__ == "__main__":
    main()
