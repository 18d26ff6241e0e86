from fastapi import FastAPI

from .approvals import router as approvals_router
from .health import router as health_router


def register_routes(app: FastAPI):
    app.include_router(approvals_router, prefix="/v1")
    app.include_router(health_router)
