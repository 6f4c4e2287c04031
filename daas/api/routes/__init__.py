from fastapi import FastAPI

from .access_requests import router as access_requests_router
from .documents import router as documents_router
from .users import router as users_router

def register_routes(app: FastAPI):
    app.include_router(access_requests_router, prefix="/v1")
    app.include_router(users_router, prefix="/v1")
    app.include_router(documents_router, prefix="/v1")
