# examplan/api/v1/api.py
from fastapi import APIRouter

from .routes import router as v1_routes_router

# No prefix here; main.py mounts this router under /api/v1
api_router = APIRouter()

api_router.include_router(v1_routes_router)
