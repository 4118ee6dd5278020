"""Main FastAPI application for the Contract Storage API."""

import logging
from pathlib import Path
from contextlib import asynccontextmanager
from typing import Dict, Any, Optional

import yaml
from fastapi import FastAPI, Request

from . import __version__
from .config import Settings, get_settings
from .db.connection import DatabaseManager
from .errors import register_exception_handlers
from .errors.api_errors import ServiceUnavailableError
from .middleware.request_logging import RequestLoggingMiddleware
from .routes import contract_data_router
from .stellar.ledger import LatestLedgerService

logger = logging.getLogger(__name__)

OPENAPI_FILE = Path(__file__).parent / "openapi" / "contract-storage.yaml"


def configure_logging(settings: Settings) -> None:
    """Configure root logging from settings."""
    logging.basicConfig(level=settings.log_level, format=settings.log_format)
    logging.getLogger().setLevel(getattr(logging, settings.log_level))


def load_openapi_spec(openapi_file: Path = OPENAPI_FILE) -> Dict[str, Any]:
    """Load the custom OpenAPI specification from YAML file."""
    try:
        with open(openapi_file, 'r') as f:
            return yaml.safe_load(f) or {}
    except FileNotFoundError:
        logger.warning(f"OpenAPI spec file not found at {openapi_file}, using auto-generated spec")
        return {}
    except yaml.YAMLError as e:
        logger.warning(f"Failed to parse OpenAPI spec: {e}, using auto-generated spec")
        return {}


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan events."""
    settings: Settings = app.state.settings
    logger.info(f"Starting {settings.app_name}")

    db_manager: DatabaseManager = app.state.db_manager
    try:
        await db_manager.initialize()
        await db_manager.ping()
        logger.info("Database connectivity verified")
    except Exception as e:
        logger.error(f"Failed to initialize database: {e}")
        raise

    yield

    logger.info(f"Shutting down {settings.app_name}")
    try:
        await app.state.ledger_service.aclose()
        await db_manager.close()
        logger.info("Database connections closed")
    except Exception as e:
        logger.error(f"Error during shutdown: {e}")


def create_app(
    settings: Optional[Settings] = None,
    db_manager: Optional[DatabaseManager] = None,
    ledger_service: Optional[LatestLedgerService] = None
) -> FastAPI:
    """Create and configure the FastAPI application.

    Collaborators default to instances built from settings; tests pass their own.
    """
    settings = settings or get_settings()
    configure_logging(settings)

    custom_openapi = load_openapi_spec()
    info = custom_openapi.get("info", {})

    app = FastAPI(
        title=info.get("title", settings.app_name),
        description=info.get("description", "Paginated read API over contract storage snapshots"),
        version=info.get("version", __version__),
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
        lifespan=lifespan
    )

    if custom_openapi:
        def get_custom_openapi():
            return custom_openapi

        app.openapi = get_custom_openapi

    app.state.settings = settings
    app.state.db_manager = db_manager or DatabaseManager(settings)
    app.state.ledger_service = ledger_service or LatestLedgerService.from_settings(settings)

    app.add_middleware(
        RequestLoggingMiddleware,
        skip_paths=["/health", "/live", "/docs", "/redoc", "/openapi.json"]
    )

    register_exception_handlers(app)

    app.include_router(contract_data_router, prefix=settings.api_prefix)

    # Health check endpoint
    @app.get("/health", tags=["Health"])
    async def health_check(request: Request) -> Dict[str, Any]:
        """Health check endpoint with database connectivity test."""
        try:
            await request.app.state.db_manager.ping()
        except Exception as e:
            logger.error(f"Health check failed: {e}")
            raise ServiceUnavailableError("Database connection failed")

        return {
            "status": "healthy",
            "service": settings.app_name,
            "version": __version__,
            "database": "connected"
        }

    # Live check endpoint (Kubernetes style)
    @app.get("/live", tags=["Health"])
    async def liveness_check() -> Dict[str, str]:
        """Liveness check endpoint."""
        return {
            "status": "alive",
            "service": settings.app_name
        }

    # Root endpoint
    @app.get("/", tags=["Root"])
    async def root() -> Dict[str, str]:
        """Root endpoint with API information."""
        return {
            "service": settings.app_name,
            "version": __version__,
            "docs": "/docs",
            "health": "/health"
        }

    return app


if __name__ == "__main__":
    import uvicorn
    settings = get_settings()

    uvicorn.run(
        "contract_storage.main:create_app",
        factory=True,
        host=settings.host,
        port=settings.port,
        reload=settings.debug,
        log_level=settings.log_level.lower()
    )
