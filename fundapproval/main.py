"""
Stub FundApproval backend for local development.

Serves the REST endpoints the request form consumes, backed by an in-memory
store seeded from a MockDataset:
- Workflow and project catalogs
- Form schemas per workflow
- Fund request create / read / resubmit / attachments
- Approval trail, form snapshot and approvals list

Run with any ASGI server, e.g. `uvicorn fundapproval.main:app --port 5292`.
"""
import logging
from contextlib import asynccontextmanager
from typing import Optional
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from fundapproval.config import settings
from fundapproval.mocks import MockDataset
from fundapproval.store import InMemoryStore
# Import API routers
from fundapproval.api import approvals, formschemas, fundrequests, projects, workflows

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)


def create_app(dataset: Optional[MockDataset] = None) -> FastAPI:
    """Build a stub backend whose store is seeded from `dataset`."""

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        # Startup
        logger.info("🚀 Starting FundApproval stub backend...")
        logger.info(f"📋 Workflows: {len(app.state.store.dataset.workflows)}, projects: {len(app.state.store.dataset.projects)}")
        logger.info(f"🔧 Debug mode: {settings.debug}")

        yield

        # Shutdown
        logger.info("👋 Shutting down FundApproval stub backend...")

    app = FastAPI(
        title="FundApproval Stub API",
        description="In-memory stand-in for the FundApproval REST backend",
        version="1.0.0",
        debug=settings.debug,
        lifespan=lifespan,
    )
    app.state.store = InMemoryStore(dataset)

    # Configure CORS for local frontends
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["http://localhost:3000", "http://localhost:5173"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.get("/health")
    async def health_check():
        """Simple health check endpoint."""
        return {
            "status": "healthy",
            "service": "FundApproval Stub API",
            "version": "1.0.0",
        }

    # Register API routers
    app.include_router(workflows.router, prefix="/api/workflows", tags=["workflows"])
    app.include_router(projects.router, prefix="/api/projects", tags=["projects"])
    app.include_router(formschemas.router, prefix="/api/formschemas", tags=["formschemas"])
    app.include_router(fundrequests.router, prefix="/api/fundrequests", tags=["fundrequests"])
    app.include_router(approvals.router, prefix="/api/approvals", tags=["approvals"])
    return app


app = create_app()
