"""API v1 router - includes all v1 endpoints."""

from fastapi import APIRouter

from examhub.api.v1.endpoints import health
from examhub.results import api as results_api
from examhub.results import public_api

api_router = APIRouter()

api_router.include_router(health.router, prefix="", tags=["Health"])
api_router.include_router(results_api.router)
api_router.include_router(public_api.router)
