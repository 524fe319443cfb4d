"""Route registration — mounts all routers under ``/api/v1``."""

from fastapi import FastAPI

from triage_server.routes.access import router as access_router
from triage_server.routes.preview import router as preview_router
from triage_server.routes.reference import router as reference_router
from triage_server.routes.safety import router as safety_router
from triage_server.routes.templates import router as templates_router
from triage_server.routes.triage import router as triage_router

API_PREFIX = "/api/v1"


def register_routes(app: FastAPI) -> None:
    """Include all sub-routers under the versioned API prefix."""
    app.include_router(templates_router, prefix=API_PREFIX)
    app.include_router(reference_router, prefix=API_PREFIX)
    app.include_router(triage_router, prefix=API_PREFIX)
    app.include_router(access_router, prefix=API_PREFIX)
    app.include_router(preview_router, prefix=API_PREFIX)
    app.include_router(safety_router, prefix=API_PREFIX)
