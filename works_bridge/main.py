"""
FastAPI application entry point for the webhook receiver.
"""

from fastapi import FastAPI

from works_bridge import __version__
from works_bridge.api import webhooks
from works_bridge.utils.logging import setup_logging, get_logger

# Configure structured logging
setup_logging(webhooks.settings.log_level)

logger = get_logger(__name__)

app = FastAPI(
    title="Works Bridge",
    description="Syncs repository activity with Works work tracking",
    version=__version__
)


@app.get("/health")
async def health_check():
    """Health check endpoint for container orchestration."""
    return {"status": "healthy", "version": __version__}


@app.get("/")
async def root():
    """Root endpoint."""
    return {
        "message": "Works Bridge API",
        "version": __version__,
        "docs": "/docs"
    }


app.include_router(webhooks.router)


@app.on_event("startup")
async def startup_event():
    logger.info(f"Starting Works Bridge webhook receiver for {webhooks.settings.server_url}")


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8000)
