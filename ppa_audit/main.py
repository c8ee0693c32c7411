import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from ppa_audit.core.config import settings
from ppa_audit.core.logging import setup_logging
from ppa_audit.core.middleware import RequestLoggingMiddleware

# Routers
from ppa_audit.routers.health import router as health_router
from ppa_audit.routers.contracts import router as contracts_router
from ppa_audit.routers.sessions import router as sessions_router
from ppa_audit.routers.compliance import router as compliance_router
from ppa_audit.routers.billing import router as billing_router

# Catalog bootstrap
from ppa_audit.services.catalog.loader import load_catalog_from_file
from ppa_audit.services.catalog.registry import CatalogRegistry

logger = logging.getLogger("ppa_audit.boot")


def create_app() -> FastAPI:
    setup_logging()
    app = FastAPI(title="PPA Discount Compliance Audit")

    # -------------------------------------------------
    # Middleware
    # -------------------------------------------------
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins(),
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_middleware(RequestLoggingMiddleware)

    # -------------------------------------------------
    # Startup
    # -------------------------------------------------
    @app.on_event("startup")
    def startup():
        catalog = load_catalog_from_file(settings.CATALOG_PATH)
        CatalogRegistry.load(catalog)

        logger.info(
            "[BOOT] Catalog loaded: %s (%s)",
            catalog.meta.catalog_id,
            catalog.meta.version,
        )

    # -------------------------------------------------
    # Routers
    # -------------------------------------------------
    app.include_router(health_router, prefix="/api/v1/health", tags=["health"])
    app.include_router(contracts_router, prefix="/api/v1/contracts", tags=["contracts"])
    app.include_router(sessions_router, prefix="/api/v1/sessions", tags=["sessions"])
    app.include_router(compliance_router, prefix="/api/v1/compliance", tags=["compliance"])
    app.include_router(billing_router, prefix="/api/v1/billing", tags=["billing"])

    return app


app = create_app()
