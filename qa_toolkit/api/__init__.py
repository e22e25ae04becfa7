from fastapi import APIRouter

from .generation import router as generation_router
from .pages import router as pages_router

api_router = APIRouter()
api_router.include_router(generation_router)
api_router.include_router(pages_router)
