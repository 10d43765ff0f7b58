"""
API v1 Router - Main Entry Point
Aggregates all v1 API endpoints for the complaint tracker
"""
from fastapi import APIRouter

from campus_complaints.api.v1 import auth, complaints, users

router = APIRouter(
    responses={
        401: {"description": "Unauthorized"},
        403: {"description": "Forbidden"},
        404: {"description": "Not Found"},
        409: {"description": "Conflict"},
        422: {"description": "Validation Error"},
        500: {"description": "Internal Server Error"},
        503: {"description": "Storage Unavailable"},
    }
)

router.include_router(auth.router)
router.include_router(users.router)
router.include_router(complaints.router)

__all__ = ["router"]
