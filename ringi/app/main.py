"""FastAPI approval ("ringi") service.

Applicants submit purchase and expense requests, designated approvers
approve or reject them, and applicants may withdraw pending ones.

Important:
- The caller's identity comes from a header set by the authenticating proxy
- Every response is wrapped as {success, data} or {success, error, code}
- Notifications are best effort and never fail a request
"""

from __future__ import annotations

from fastapi import FastAPI

from ringi.api.errors import register_exception_handlers
from ringi.api.routes import register_routes
from ringi.config import settings
from ringi.observability.tracing import configure_logging

tags_metadata = [
    {
        "name": "Approvals",
        "description": "Submit, edit, decide and withdraw approval requests",
    },
    {
        "name": "Health",
        "description": "Liveness probe",
    },
]


def create_app() -> FastAPI:
    configure_logging(settings.log_level)
    app = FastAPI(
        title="Ringi Approval Workflow",
        version="1.0.0",
        description="Internal approval workflow for purchase and expense requests",
        openapi_tags=tags_metadata,
    )
    register_exception_handlers(app)
    register_routes(app)
    return app


app = create_app()
