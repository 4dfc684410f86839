# aquafarm/api/api_v1/api.py
from fastapi import APIRouter

from aquafarm.api.api_v1.routers import (
    cages,
    events,
    metrics,
)

api_router = APIRouter()

api_router.include_router(cages.router)
api_router.include_router(events.router)
api_router.include_router(metrics.router)
