"""
Health Routes - Health check endpoints
"""
from fastapi import APIRouter

router = APIRouter(tags=["health"])


@router.get("/health")
@router.get("/v1/health")
async def health_check():
    """Health check endpoint"""
    return {"status": "ok", "message": "Server is alive"}
