"""Main FastAPI application for the WP Dependency Installer."""

import logging
import os
from contextlib import asynccontextmanager
from typing import Optional

from dotenv import load_dotenv

# Load environment variables from .env
load_dotenv(".env")

# Configure logging BEFORE importing any modules that use logger
log_level = os.getenv("LOG_LEVEL", "INFO")
logging.basicConfig(
    level=getattr(logging, log_level.upper()),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger(__name__)

# Import after logging is configured
from fastapi import FastAPI

from wpdi import __version__
from wpdi.constants import InstallerSettings
from wpdi.host import JsonDismissalTracker, JsonTransientCache
from wpdi.routers import dependencies_router


def create_app(settings: Optional[InstallerSettings] = None) -> FastAPI:
    """Create the application with long-lived stores attached to its state."""
    settings = settings or InstallerSettings.from_env()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        logger.info("Starting WP Dependency Installer")
        logger.info(f"  - Plugins dir: {settings.plugins_dir}")
        logger.info(f"  - Data dir: {settings.data_dir}")
        logger.info(f"  - Manifest paths: {[str(p) for p in settings.manifest_paths]}")
        yield
        logger.info("Shutting down WP Dependency Installer")

    app = FastAPI(
        title="WP Dependency Installer",
        description="Installs and activates plugin dependencies declared in wp-dependencies.json",
        version=__version__,
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.cache = JsonTransientCache(settings.transients_file)
    app.state.dismissals = JsonDismissalTracker(settings.dismissals_file)

    app.include_router(dependencies_router)

    @app.get("/")
    async def root():
        return {"message": "WP Dependency Installer API", "docs": "/docs"}

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn
    port = int(os.getenv("PORT", "9090"))
    uvicorn.run("app:app", host="0.0.0.0", port=port, reload=True)
