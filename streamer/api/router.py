from fastapi import APIRouter

from streamer.api.routes import status

api_router = APIRouter(prefix="/api/v1")
api_router.include_router(status.router, tags=["status"])
