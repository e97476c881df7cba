"""Main FastAPI application for DocuExpiry."""

import logging
from contextlib import asynccontextmanager
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from fastapi.middleware.cors import CORSMiddleware

from . import __version__
from .config.settings import get_settings
from .infrastructure.database.client import DatabaseClient
from .core.dashboard_manager import DashboardManager
from .core.exceptions import UnauthorizedError
from .core.document_manager import DocumentManager
from .core.taxonomy_resolver import TaxonomyResolver
from .core.upload_manager import UploadManager
from .api.routes import dashboard, documents, taxonomy, uploads
from .models.requests import HealthResponse

VERSION = __version__

# Configure logging
logging.basicConfig(
    level=get_settings().log_level.upper(),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger(__name__)

# Global instances
db_client: DatabaseClient = None


def configure_managers(client: DatabaseClient):
    """Build the managers around ``client`` and hand them to the route modules."""
    settings = get_settings()
    window_days = settings.expiring_window_days

    resolver = TaxonomyResolver(client)
    documents.set_document_manager(DocumentManager(client, resolver, window_days))
    taxonomy.set_resolver(resolver)
    dashboard.set_dashboard_manager(DashboardManager(client, window_days))
    uploads.set_upload_manager(UploadManager(
        client,
        secret=settings.upload_token_secret,
        ttl_seconds=settings.upload_token_ttl_seconds,
        max_size_bytes=settings.upload_max_size_bytes
    ))


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan events."""
    global db_client

    settings = get_settings()
    logger.info(f"Starting {settings.service_name} v{VERSION}")

    logger.info("Initializing database...")
    db_client = DatabaseClient(settings.database_url)
    await db_client.initialize()

    configure_managers(db_client)
    logger.info(f"{settings.service_name} is ready")

    yield

    # Cleanup
    logger.info("Shutting down...")
    await db_client.close()
    logger.info("Shutdown complete")


app = FastAPI(
    title="DocuExpiry",
    description="Track documents and see which ones are expiring soon",
    version=VERSION,
    lifespan=lifespan
)

# Add CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=get_settings().cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(UnauthorizedError)
async def unauthorized_handler(request: Request, exc: UnauthorizedError):
    """Answer every identity failure with the same 401 body."""
    logger.debug(f"Rejected {request.method} {request.url.path}: {exc}")
    return JSONResponse(status_code=401, content={"detail": "Unauthorized"})


# Include routers
app.include_router(documents.router)
app.include_router(taxonomy.router)
app.include_router(dashboard.router)
app.include_router(uploads.router)


@app.get("/health", response_model=HealthResponse)
async def health_check():
    """Health check endpoint."""
    settings = get_settings()

    db_connected = db_client is not None

    return HealthResponse(
        status="healthy" if db_connected else "degraded",
        service=settings.service_name,
        version=VERSION,
        database_connected=db_connected
    )


@app.get("/")
async def root():
    """Root endpoint."""
    return {
        "service": "docuexpiry",
        "version": VERSION,
        "status": "running"
    }


if __name__ == "__main__":
    import uvicorn
    settings = get_settings()
    uvicorn.run(
        "docuexpiry.main:app",
        host=settings.host,
        port=settings.port,
        reload=True
    )
