"""
FastAPI application entry point.
"""

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from linkguard import __version__
from linkguard.api import monitor
from linkguard.config import settings
from linkguard.services.system import build_system
from linkguard.utils.logging import setup_logging, get_logger

# Configure structured logging
setup_logging(settings.log_level.upper())

logger = get_logger(__name__)

app = FastAPI(
    title="Linkguard Monitor",
    description="Error monitoring, crash detection and auto-recovery for the bookmarking client",
    version=__version__
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.get("/health")
async def health_check():
    """Health check endpoint for container orchestration."""
    return {"status": "healthy", "version": __version__}


@app.get("/")
async def root():
    """Root endpoint."""
    return {
        "message": "Linkguard Monitor API",
        "version": __version__,
        "docs": "/docs"
    }


app.include_router(monitor.router)


@app.on_event("startup")
async def startup_event():
    """Build the resilience system and start monitoring."""
    logger.info("Starting Linkguard Monitor API")

    system = build_system(settings)
    await system.connect_storage()
    system.setup_global_error_handlers()
    system.setup_auto_recovery()
    app.state.system = system

    logger.info("Resilience system started")


@app.on_event("shutdown")
async def shutdown_event():
    """Stop monitoring and release connections."""
    logger.info("Shutting down Linkguard Monitor API")

    system = getattr(app.state, "system", None)
    if system is not None:
        await system.shutdown()
        app.state.system = None


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8000)
