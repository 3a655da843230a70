from fastapi import APIRouter

from app.api.v1 import repositories, search

api_router = APIRouter(prefix="/api/v1")

api_router.include_router(repositories.router)
api_router.include_router(search.router)
