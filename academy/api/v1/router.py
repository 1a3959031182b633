"""API V1 Router"""

from fastapi import APIRouter

from academy.api.v1.endpoints import fees, progression

api_router = APIRouter()

api_router.include_router(fees.router, prefix="/fees", tags=["Fees"])
api_router.include_router(progression.router, prefix="/progression", tags=["Progression"])
