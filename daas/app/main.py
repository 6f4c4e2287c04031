"""FastAPI service for document access approvals.

- Users file READ / EDIT access requests against documents
- Approvers and admins approve or reject pending requests
- Every decision is handed to the configured notifier

Caller identity arrives already resolved (``user_id`` / ``approver_id``
query parameters); authentication belongs to the gateway in front.
"""

from __future__ import annotations

from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse

from daas.api.routes import register_routes
from daas.config import settings
from daas.core.errors import (
    AccessRequestError,
    ConflictError,
    ForbiddenError,
    InvalidArgumentError,
    NotFoundError,
)
from daas.db.connection import SessionLocal, init_db
from daas.db.seed import seed_database
from daas.observability.logging import configure_logging

tags_metadata = [
    {
        "name": "Access Requests",
        "description": "File access requests and record approval decisions"
    },
    {
        "name": "Users",
        "description": "Requesters and approvers known to the service"
    },
    {
        "name": "Documents",
        "description": "Protected documents that access can be requested for"
    }
]

_STATUS_BY_ERROR = {
    NotFoundError: status.HTTP_404_NOT_FOUND,
    InvalidArgumentError: status.HTTP_400_BAD_REQUEST,
    ConflictError: status.HTTP_409_CONFLICT,
    ForbiddenError: status.HTTP_403_FORBIDDEN,
}


@asynccontextmanager
async def lifespan(app: FastAPI):
    configure_logging(settings.log_level)
    init_db()
    if settings.seed_on_startup:
        with SessionLocal() as db:
            seed_database(db)
    yield


async def access_request_error_handler(request: Request, exc: AccessRequestError) -> JSONResponse:
    status_code = _STATUS_BY_ERROR.get(type(exc), status.HTTP_400_BAD_REQUEST)
    return JSONResponse(status_code=status_code, content={"message": str(exc)})


def create_app(*, use_lifespan: bool = True) -> FastAPI:
    app = FastAPI(
        title='DAAS - Document Access Approval Service',
        version='1.0.0',
        description='Access request and approval workflow with decision notifications',
        openapi_tags=tags_metadata,
        lifespan=lifespan if use_lifespan else None,
    )
    app.add_exception_handler(AccessRequestError, access_request_error_handler)

    # Register all API routes
    register_routes(app)
    return app


app = create_app()
